"""
Header Module - The 32-byte DBF file header
Reads and writes version, last-update date, record count and layout lengths.
"""

import datetime
import struct
from dataclasses import dataclass
from typing import BinaryIO, List, Optional

from ..constants import (HEADER_SIZE, HEADER_FORMAT, HEADER_RESERVED_SIZE, HEADER_YEAR_BASE,
                         HEADER_RECORD_COUNT_OFFSET, DBASE_III_VERSION, FIELD_DESCRIPTOR_SIZE,
                         MAX_HEADER_LENGTH, MAX_RECORD_LENGTH)
from ..exceptions import FormatError, MalformedHeaderError
from ..types.field_type import FieldInfo


@dataclass
class FileHeader:
    """Decoded DBF file header"""
    version: int = DBASE_III_VERSION
    year: int = 0  # Offset from 1900
    month: int = 0
    day: int = 0
    record_count: int = 0
    header_length: int = HEADER_SIZE + 1
    record_length: int = 1
    reserved: bytes = bytes(HEADER_RESERVED_SIZE)

    @property
    def last_modified(self) -> Optional[datetime.date]:
        """Last update date, None when the stored bytes are not a valid date"""
        try:
            return datetime.date(HEADER_YEAR_BASE + self.year, self.month, self.day)
        except ValueError:
            return None

    @property
    def data_offset(self) -> int:
        """Byte offset of the first record"""
        return self.header_length

    def pack(self) -> bytes:
        return struct.pack(HEADER_FORMAT, self.version, self.year, self.month, self.day,
                           self.record_count, self.header_length, self.record_length,
                           self.reserved)

    @classmethod
    def unpack(cls, data: bytes) -> 'FileHeader':
        if len(data) < HEADER_SIZE:
            raise MalformedHeaderError(f"Header truncated: {len(data)} of {HEADER_SIZE} bytes")
        fields = struct.unpack(HEADER_FORMAT, data[:HEADER_SIZE])
        return cls(*fields)


def read_header(stream: BinaryIO) -> FileHeader:
    """
    Read the file header from the current position

    Args:
        stream: Binary input positioned at the start of the file

    Returns:
        Decoded FileHeader

    Raises:
        MalformedHeaderError: If fewer than 32 bytes are available or the
            declared header length cannot hold a descriptor table
    """
    header = FileHeader.unpack(stream.read(HEADER_SIZE))
    if header.header_length < HEADER_SIZE:
        raise MalformedHeaderError(f"Invalid header length {header.header_length}")
    return header


def build_header(fields: List[FieldInfo], record_count: int,
                 today: Optional[datetime.date] = None) -> FileHeader:
    """Header for a freshly written dBase III file"""
    today = today or datetime.date.today()
    header_length = HEADER_SIZE + FIELD_DESCRIPTOR_SIZE * len(fields) + 1
    record_length = 1 + sum(f.length for f in fields)

    if header_length > MAX_HEADER_LENGTH:
        raise FormatError(f"Too many fields ({len(fields)}) for a DBF header")
    if record_length > MAX_RECORD_LENGTH:
        raise FormatError(f"Record length {record_length} exceeds {MAX_RECORD_LENGTH} bytes")
    if not 0 <= record_count <= 0xFFFFFFFF:
        raise FormatError(f"Record count {record_count} does not fit the header")

    return FileHeader(
        version=DBASE_III_VERSION,
        year=today.year - HEADER_YEAR_BASE,
        month=today.month,
        day=today.day,
        record_count=record_count,
        header_length=header_length,
        record_length=record_length,
    )


def write_header(stream: BinaryIO, fields: List[FieldInfo], record_count: int,
                 today: Optional[datetime.date] = None) -> FileHeader:
    """Write the 32-byte header and return what was written"""
    header = build_header(fields, record_count, today)
    stream.write(header.pack())
    return header


def patch_record_count(stream: BinaryIO, record_count: int) -> None:
    """Rewrite the record count of an already written header in place"""
    position = stream.tell()
    stream.seek(HEADER_RECORD_COUNT_OFFSET)
    stream.write(struct.pack('<I', record_count))
    stream.seek(position)
