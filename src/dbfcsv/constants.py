"""
dbfcsv - Format Constants
Byte layout of xBase/DBF files and converter limits.
"""

APP_NAME = "dbfcsv"
APP_VERSION = "1.6.0"

# File Header (32 bytes, little-endian)
HEADER_SIZE = 32
HEADER_FORMAT = '<BBBBIHH20s'  # version, yy, mm, dd, records, header len, record len, reserved
HEADER_RESERVED_SIZE = 20
HEADER_RECORD_COUNT_OFFSET = 4
HEADER_YEAR_BASE = 1900
DBASE_III_VERSION = 0x03

# Field Descriptor (32 bytes each)
FIELD_DESCRIPTOR_SIZE = 32
FIELD_DESCRIPTOR_FORMAT = '<11sc4sBB14s'  # name, type, reserved, length, decimal, reserved
FIELD_NAME_SLOT = 11
FIELD_NAME_MAX_BYTES = 10
MAX_FIELD_DESCRIPTORS = 4096  # Safety cap for corrupted files without a terminator

# Markers
FIELD_TERMINATOR = 0x0D
EOF_MARKER = 0x1A
RECORD_ACTIVE = 0x20  # ' '
RECORD_DELETED = 0x2A  # '*'

# Limits
MAX_FIELD_LENGTH = 254
MIN_FIELD_LENGTH = 1
MAX_HEADER_LENGTH = 0xFFFF
MAX_RECORD_LENGTH = 0xFFFF

# I/O
IO_BUFFER_SIZE = 4 * 1024 * 1024

# Text rendering
MEMO_SENTINEL = "[MEMO/OLE]"
TIMESTAMP_FORMAT = '%Y-%m-%d %H:%M:%S'
CURRENCY_SCALE = 4
