"""
Field Types - Column type tags and decoded field metadata
"""

from dataclasses import dataclass
from enum import Enum


class FieldType(Enum):
    """xBase field type tags, including Visual FoxPro extensions"""
    CHARACTER = 'C'
    NUMERIC = 'N'
    FLOAT = 'F'
    LOGICAL = 'L'
    DATE = 'D'
    INTEGER = 'I'
    CURRENCY = 'Y'
    DOUBLE = 'B'
    DATETIME = 'T'
    MEMO = 'M'
    GENERAL = 'G'
    OTHER = '?'  # Any tag not listed above; decoded as character data

    @classmethod
    def from_tag(cls, tag: str) -> 'FieldType':
        """Map a single-character tag to its type, OTHER when unknown"""
        if tag == cls.OTHER.value:
            return cls.OTHER
        try:
            return cls(tag)
        except ValueError:
            return cls.OTHER


@dataclass(frozen=True)
class FieldInfo:
    """Decoded column definition"""
    name: str
    tag: str = FieldType.CHARACTER.value
    length: int = 1
    decimal: int = 0

    def __post_init__(self):
        """Validate field definition"""
        if len(self.tag) != 1:
            raise ValueError(f"Field type tag must be one character, got {self.tag!r}")
        if not 0 <= self.length <= 0xFF:  # one byte on disk
            raise ValueError(f"Field length {self.length} out of range for field '{self.name}'")

    @property
    def field_type(self) -> FieldType:
        return FieldType.from_tag(self.tag)

    @classmethod
    def character(cls, name: str, length: int) -> 'FieldInfo':
        """Character column, the only type produced from CSV input"""
        return cls(name=name, tag=FieldType.CHARACTER.value, length=length, decimal=0)
