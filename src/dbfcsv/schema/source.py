"""
CSV Source - Re-openable delimited text input
Every scan re-opens the file and applies the same parsing and row filtering,
so the schema pass and the write pass see identical rows.
"""

import csv
import logging
import sys
from pathlib import Path
from typing import Iterator, List, Optional, TextIO, Union

from ..config import ConversionConfig
from ..constants import IO_BUFFER_SIZE
from ..exceptions import FormatError
from ..types.transcoder import Transcoder

logger = logging.getLogger(__name__)


def _lift_field_size_limit() -> int:
    """
    Remove the csv module's per-cell size cap

    Oversized cells are truncated to the column width when written, so the
    parser must never reject them. sys.maxsize overflows a C long on some
    platforms; step down until the value is accepted.
    """
    limit = sys.maxsize
    while True:
        try:
            csv.field_size_limit(limit)
            return limit
        except OverflowError:
            limit //= 2


_lift_field_size_limit()


class CsvSource:
    """CSV file read with a fixed dialect and encoding"""

    def __init__(self, path: Union[str, Path], config: ConversionConfig,
                 transcoder: Optional[Transcoder] = None):
        self.path = Path(path)
        self.config = config
        self.transcoder = transcoder or config.transcoder()
        self.malformed = 0

    def open(self) -> TextIO:
        """Open the underlying file for one pass"""
        return open(self.path, 'r', encoding=self.transcoder.stream_codec, errors='replace',
                    newline='', buffering=IO_BUFFER_SIZE)

    def _reader(self, handle: TextIO):
        return csv.reader(handle, delimiter=self.config.delimiter, quotechar=self.config.quote,
                          doublequote=True, skipinitialspace=False, strict=True)

    def _skip(self, line_num: int, reason: str, warn: bool) -> None:
        self.malformed += 1
        if warn:
            logger.warning("%s: skipping malformed line %d: %s", self.path.name, line_num, reason)

    def scan(self, warn: bool = True) -> Iterator[List[str]]:
        """
        Yield the header row, then every well-formed body row

        Blank lines are ignored. A body row is malformed when the parser
        rejects it or its cell count differs from the header's; such rows
        are counted in `malformed` and never yielded.

        Args:
            warn: Log each malformed row

        Raises:
            FormatError: If the header row itself cannot be parsed
        """
        self.malformed = 0
        with self.open() as handle:
            reader = self._reader(handle)
            width = None
            while True:
                try:
                    row = next(reader)
                except StopIteration:
                    return
                except csv.Error as e:
                    if width is None:
                        raise FormatError(f"Cannot read CSV header of {self.path.name}: {e}")
                    self._skip(reader.line_num, str(e), warn)
                    continue

                if not row:
                    continue
                if width is None:
                    width = len(row)
                elif len(row) != width:
                    self._skip(reader.line_num, f"expected {width} fields, got {len(row)}", warn)
                    continue
                yield row

    def body(self, warn: bool = False) -> Iterator[List[str]]:
        """Rows after the header"""
        rows = self.scan(warn=warn)
        next(rows, None)
        yield from rows
