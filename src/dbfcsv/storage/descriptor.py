"""
Field Descriptor Module - The field table between the header and the first record
Each column is described by a 32-byte record; the table ends with a 0x0D byte.
"""

import logging
import struct
from dataclasses import dataclass
from typing import BinaryIO, List

from ..config import FieldCountStrategy
from ..constants import (HEADER_SIZE, FIELD_DESCRIPTOR_SIZE, FIELD_DESCRIPTOR_FORMAT,
                         FIELD_NAME_SLOT, FIELD_NAME_MAX_BYTES, FIELD_TERMINATOR,
                         MAX_FIELD_DESCRIPTORS)
from ..exceptions import FieldTableError
from ..types.field_type import FieldInfo, FieldType
from ..types.transcoder import Transcoder

logger = logging.getLogger(__name__)


@dataclass
class FieldDescriptor:
    """On-disk form of a column definition"""
    name: bytes  # Raw name slot, NUL padded
    tag: bytes
    length: int
    decimal: int

    def pack(self) -> bytes:
        return struct.pack(FIELD_DESCRIPTOR_FORMAT, self.name, self.tag, bytes(4),
                           self.length, self.decimal, bytes(14))

    @classmethod
    def unpack(cls, data: bytes) -> 'FieldDescriptor':
        name, tag, _, length, decimal, _ = struct.unpack(FIELD_DESCRIPTOR_FORMAT, data)
        return cls(name=name, tag=tag, length=length, decimal=decimal)

    def to_info(self, transcoder: Transcoder) -> FieldInfo:
        # Trim NUL padding before decoding so it never reaches the codec
        name = transcoder.decode(self.name.rstrip(b'\x00'))
        return FieldInfo(name=name, tag=self.tag.decode('latin-1'),
                         length=self.length, decimal=self.decimal)

    @classmethod
    def from_info(cls, field: FieldInfo, transcoder: Transcoder) -> 'FieldDescriptor':
        return cls(name=encode_field_name(field.name, transcoder),
                   tag=field.tag.encode('latin-1'),
                   length=field.length,
                   decimal=field.decimal)


def encode_field_name(name: str, transcoder: Transcoder) -> bytes:
    """
    Encode a field name into its 11-byte slot

    At most 10 encoded bytes are kept. Truncation happens on character
    boundaries so a multibyte character is never split.
    """
    encoded = b''
    for char in name:
        piece = transcoder.encode(char)
        if len(encoded) + len(piece) > FIELD_NAME_MAX_BYTES:
            break
        encoded += piece
    return encoded.ljust(FIELD_NAME_SLOT, b'\x00')


def _read_descriptor(stream: BinaryIO, index: int, first: bytes = b'') -> FieldDescriptor:
    data = first + stream.read(FIELD_DESCRIPTOR_SIZE - len(first))
    if len(data) < FIELD_DESCRIPTOR_SIZE:
        raise FieldTableError(f"Field descriptor {index} truncated ({len(data)} bytes)")
    return FieldDescriptor.unpack(data)


def scan_field_descriptors(stream: BinaryIO, transcoder: Transcoder) -> List[FieldInfo]:
    """
    Read descriptors until the 0x0D terminator

    Bytes between the terminator and the declared header length (the VFP
    backlink area) are never looked at.

    Raises:
        FieldTableError: On a truncated table or when no terminator is found
            within MAX_FIELD_DESCRIPTORS entries
    """
    fields = []
    for index in range(MAX_FIELD_DESCRIPTORS):
        marker = stream.read(1)
        if not marker:
            raise FieldTableError("Field table ended without a terminator")
        if marker[0] == FIELD_TERMINATOR:
            return fields
        fields.append(_read_descriptor(stream, index, marker).to_info(transcoder))

    raise FieldTableError(f"No field terminator within {MAX_FIELD_DESCRIPTORS} descriptors")


def read_counted_field_descriptors(stream: BinaryIO, header_length: int,
                                   transcoder: Transcoder) -> List[FieldInfo]:
    """Read (header_length - 33) / 32 descriptors, trusting the header"""
    count = max(0, (header_length - HEADER_SIZE - 1) // FIELD_DESCRIPTOR_SIZE)
    return [_read_descriptor(stream, index).to_info(transcoder) for index in range(count)]


def read_field_descriptors(stream: BinaryIO, header_length: int, transcoder: Transcoder,
                           strategy: FieldCountStrategy = FieldCountStrategy.TERMINATOR_SCAN) -> List[FieldInfo]:
    """
    Read the field table that follows the 32-byte header

    Args:
        stream: Binary input positioned just after the header
        header_length: Declared header length from the file header
        transcoder: Decoder for field names
        strategy: Terminator scan or computed count

    Returns:
        Field definitions in record order
    """
    if strategy is FieldCountStrategy.COMPUTED:
        fields = read_counted_field_descriptors(stream, header_length, transcoder)
    else:
        fields = scan_field_descriptors(stream, transcoder)

    for field in fields:
        if field.field_type is FieldType.OTHER:
            logger.info("Field '%s' has unrecognised type %r, reading it as character data",
                        field.name, field.tag)
    return fields


def write_field_descriptors(stream: BinaryIO, fields: List[FieldInfo], transcoder: Transcoder) -> None:
    """Write one descriptor per field followed by the table terminator"""
    for field in fields:
        stream.write(FieldDescriptor.from_info(field, transcoder).pack())
    stream.write(bytes([FIELD_TERMINATOR]))
