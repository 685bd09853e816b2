"""
Record Stream Module - Sequential fixed-length record access
RecordReader turns DBF records into text rows; RecordWriter does the reverse.
"""

from typing import BinaryIO, Callable, Iterable, Iterator, List, Optional, Sequence

from ..config import DeletionPolicy
from ..constants import RECORD_ACTIVE, RECORD_DELETED, EOF_MARKER
from ..exceptions import TruncatedRecordError
from ..types.field_type import FieldInfo
from ..types.transcoder import Transcoder
from ..types.value import codec_for
from .header import FileHeader

ProgressCallback = Callable[[int, int], None]


class ProgressReporter:
    """Invokes a callback every `interval` processed records"""

    def __init__(self, callback: Optional[ProgressCallback], interval: int, total: int):
        self.callback = callback if interval > 0 else None
        self.interval = interval
        self.total = total
        self.processed = 0

    def step(self) -> None:
        self.processed += 1
        if self.callback and self.processed % self.interval == 0:
            self.callback(self.processed, self.total)

    def finish(self) -> None:
        if self.callback and self.processed % self.interval != 0:
            self.callback(self.processed, self.total)


class RecordReader:
    """Iterates decoded rows of a DBF data region"""

    def __init__(self, stream: BinaryIO, header: FileHeader, fields: List[FieldInfo],
                 transcoder: Transcoder, deletion_policy: DeletionPolicy,
                 progress: Optional[ProgressCallback] = None, progress_interval: int = 0):
        """
        Initialize record reader

        Args:
            stream: Seekable binary input
            header: Decoded file header (record count, lengths)
            fields: Field definitions in record order
            transcoder: Decoder for character data
            deletion_policy: Whether '*'-flagged records are exported
            progress: Optional callback receiving (processed, total)
            progress_interval: Records between progress callbacks (0 disables)
        """
        self.stream = stream
        self.header = header
        self.fields = fields
        self.transcoder = transcoder
        self.deletion_policy = deletion_policy
        self.reporter = ProgressReporter(progress, progress_interval, header.record_count)
        self.rows_emitted = 0
        self.deleted_skipped = 0

        # (column, start, end, codec, field); fields past the record end are left out
        self._slots = []
        offset = 1
        for column, field in enumerate(fields):
            end = offset + field.length
            if end <= header.record_length:
                self._slots.append((column, offset, end, codec_for(field), field))
            offset = end

    @property
    def records_read(self) -> int:
        return self.reporter.processed

    def _read_record(self, index: int) -> Optional[bytes]:
        data = self.stream.read(self.header.record_length)
        if not data:
            return None
        if len(data) < self.header.record_length:
            if data == bytes([EOF_MARKER]):
                return None
            raise TruncatedRecordError(
                f"Record {index} truncated: {len(data)} of {self.header.record_length} bytes")
        return data

    def decode_record(self, record: bytes) -> List[str]:
        """Decode one raw record into cells, in field order"""
        row = [''] * len(self.fields)
        for column, start, end, codec, field in self._slots:
            row[column] = codec.decode(record[start:end], field, self.transcoder)
        return row

    def __iter__(self) -> Iterator[List[str]]:
        self.stream.seek(self.header.data_offset)

        for index in range(self.header.record_count):
            record = self._read_record(index)
            if record is None:
                break

            if record[0] == RECORD_DELETED and self.deletion_policy is DeletionPolicy.SKIP:
                self.deleted_skipped += 1
                self.reporter.step()
                continue

            yield self.decode_record(record)
            self.rows_emitted += 1
            self.reporter.step()

        self.reporter.finish()


class RecordWriter:
    """Writes fixed-length records for a list of fields"""

    def __init__(self, stream: BinaryIO, fields: List[FieldInfo], transcoder: Transcoder,
                 progress: Optional[ProgressCallback] = None, progress_interval: int = 0,
                 total: int = 0):
        self.stream = stream
        self.fields = fields
        self.transcoder = transcoder
        self.codecs = [codec_for(field) for field in fields]
        self.record_length = 1 + sum(field.length for field in fields)
        self.reporter = ProgressReporter(progress, progress_interval, total)

    @property
    def records_written(self) -> int:
        return self.reporter.processed

    def encode_record(self, row: Sequence[str]) -> bytes:
        """Build one space-filled record; missing cells stay blank"""
        record = bytearray(b' ' * self.record_length)
        record[0] = RECORD_ACTIVE
        offset = 1
        for field, codec, value in zip(self.fields, self.codecs, row):
            record[offset:offset + field.length] = codec.encode(value, field, self.transcoder)
            offset += field.length
        return bytes(record)

    def write(self, row: Sequence[str]) -> None:
        self.stream.write(self.encode_record(row))
        self.reporter.step()

    def write_all(self, rows: Iterable[Sequence[str]]) -> int:
        for row in rows:
            self.write(row)
        return self.records_written

    def close(self) -> None:
        """Append the end-of-file marker"""
        self.stream.write(bytes([EOF_MARKER]))
        self.reporter.finish()
