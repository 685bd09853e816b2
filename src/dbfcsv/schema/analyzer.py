"""
CSV Schema Analyzer - First pass of CSV to DBF conversion
Infers one character field per column, sized to the widest encoded value.
"""

from dataclasses import dataclass, field
from typing import List

from ..constants import MAX_FIELD_LENGTH, MIN_FIELD_LENGTH
from ..exceptions import FormatError
from ..types.field_type import FieldInfo
from .source import CsvSource


@dataclass
class SchemaAnalysis:
    """Result of the schema pass"""
    fields: List[FieldInfo] = field(default_factory=list)
    record_count: int = 0
    malformed_rows: int = 0


def analyze_csv(source: CsvSource) -> SchemaAnalysis:
    """
    Scan a CSV source and infer its DBF field table

    Column names come from the header row (trimmed, uppercased). Widths
    are byte lengths in the target encoding, at least 1 and at most 254.

    Args:
        source: CSV input

    Returns:
        SchemaAnalysis with fields and the number of rows to be written

    Raises:
        FormatError: If the file has no header row
    """
    rows = source.scan(warn=True)
    header = next(rows, None)
    if not header:
        raise FormatError(f"No fields found in {source.path.name}")

    names = [name.strip().upper() for name in header]
    widths = [MIN_FIELD_LENGTH] * len(names)
    encode = source.transcoder.encode
    count = 0

    for row in rows:
        for column, value in enumerate(row):
            size = len(encode(value))
            if size > widths[column]:
                widths[column] = size
        count += 1

    fields = [FieldInfo.character(name, min(width, MAX_FIELD_LENGTH))
              for name, width in zip(names, widths)]
    return SchemaAnalysis(fields=fields, record_count=count, malformed_rows=source.malformed)
