"""
Converter Exceptions - Error taxonomy for DBF/CSV conversion
"""


class DbfCsvError(Exception):
    """Base class for conversion errors"""
    pass


class ConfigurationError(DbfCsvError):
    """Invalid conversion settings, detected before any file is opened"""
    pass


class FormatError(DbfCsvError):
    """Structurally invalid input file (fatal for that file only)"""
    pass


class MalformedHeaderError(FormatError):
    """File header is truncated or declares an impossible header length"""
    pass


class FieldTableError(FormatError):
    """Field descriptor table is truncated or has no terminator"""
    pass


class TruncatedRecordError(FormatError):
    """Input ended in the middle of a data record"""
    pass


class UnsupportedFieldTypeError(DbfCsvError):
    """Field type cannot be written by this converter"""
    pass
