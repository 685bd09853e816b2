"""
Conversion Engine - Main interface for DBF <-> CSV conversion
Coordinates header, field table and record streams for one file at a time.
"""

import csv
import logging
import time
from dataclasses import dataclass, field, asdict
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

from ..config import ConversionConfig
from ..constants import IO_BUFFER_SIZE
from ..schema.analyzer import analyze_csv
from ..schema.source import CsvSource
from ..storage.descriptor import read_field_descriptors, write_field_descriptors
from ..storage.header import FileHeader, read_header, write_header, patch_record_count
from ..storage.records import RecordReader, RecordWriter, ProgressCallback
from ..types.field_type import FieldInfo

logger = logging.getLogger(__name__)

PathLike = Union[str, Path]


@dataclass
class ConversionStats:
    """Counts reported back to the caller after a conversion"""
    field_count: int = 0
    record_count: int = 0  # Rows written to the destination
    declared_records: int = 0  # Count stated in (or written to) the DBF header
    deleted_skipped: int = 0
    malformed_rows: int = 0
    decode_fallbacks: int = 0
    elapsed: float = 0.0

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass
class DbfStructure:
    """Header and field table of a DBF file"""
    header: FileHeader
    fields: List[FieldInfo] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        modified = self.header.last_modified
        return {
            'version': self.header.version,
            'last_modified': modified.isoformat() if modified else None,
            'record_count': self.header.record_count,
            'header_length': self.header.header_length,
            'record_length': self.header.record_length,
            'fields': [
                {'name': f.name, 'type': f.tag, 'length': f.length, 'decimal': f.decimal}
                for f in self.fields
            ],
        }


def _open_binary(path: PathLike, mode: str):
    return open(path, mode, buffering=IO_BUFFER_SIZE)


def read_structure(stream, config: ConversionConfig, transcoder=None) -> DbfStructure:
    """Read header and field descriptors from an open DBF stream"""
    transcoder = transcoder or config.transcoder()
    header = read_header(stream)
    fields = read_field_descriptors(stream, header.header_length, transcoder,
                                    config.field_count_strategy)
    return DbfStructure(header=header, fields=fields)


def inspect_dbf(dbf_path: PathLike, config: ConversionConfig) -> DbfStructure:
    """
    Read the structure of a DBF file without touching its records

    Raises:
        FormatError: If the header or field table is invalid
    """
    with _open_binary(dbf_path, 'rb') as stream:
        return read_structure(stream, config)


def convert_dbf_to_csv(dbf_path: PathLike, csv_path: PathLike, config: ConversionConfig,
                       progress: Optional[ProgressCallback] = None) -> ConversionStats:
    """
    Export every record of a DBF file as a CSV row

    Args:
        dbf_path: Source DBF file
        csv_path: Destination CSV file (overwritten)
        config: Conversion settings; deletion_policy must be set
        progress: Optional callback receiving (processed, total)

    Returns:
        ConversionStats for the file

    Raises:
        ConfigurationError: If no deletion policy was chosen
        FormatError: If the DBF structure or a record is truncated/invalid
    """
    policy = config.require_deletion_policy()
    started = time.perf_counter()
    transcoder = config.transcoder()

    with _open_binary(dbf_path, 'rb') as stream:
        structure = read_structure(stream, config, transcoder)
        header, fields = structure.header, structure.fields
        logger.info("%s: version 0x%02X, %d records, %d fields",
                    Path(dbf_path).name, header.version, header.record_count, len(fields))

        reader = RecordReader(stream, header, fields, transcoder, policy,
                              progress=progress, progress_interval=config.progress_interval)

        with open(csv_path, 'w', encoding=transcoder.codec, errors='replace', newline='',
                  buffering=IO_BUFFER_SIZE) as out:
            writer = csv.writer(out, delimiter=config.delimiter, quotechar=config.quote,
                                lineterminator=config.line_terminator, quoting=csv.QUOTE_MINIMAL)
            writer.writerow([f.name for f in fields])
            writer.writerows(reader)

    return ConversionStats(
        field_count=len(fields),
        record_count=reader.rows_emitted,
        declared_records=header.record_count,
        deleted_skipped=reader.deleted_skipped,
        decode_fallbacks=transcoder.fallbacks,
        elapsed=time.perf_counter() - started,
    )


def convert_csv_to_dbf(csv_path: PathLike, dbf_path: PathLike, config: ConversionConfig,
                       progress: Optional[ProgressCallback] = None) -> ConversionStats:
    """
    Build a DBF file from a CSV file in two passes

    Pass one infers a character field per column and counts rows; pass two
    re-opens the CSV and writes one record per row.

    Args:
        csv_path: Source CSV file with a header row
        dbf_path: Destination DBF file (overwritten)
        config: Conversion settings
        progress: Optional callback receiving (processed, total)

    Returns:
        ConversionStats for the file

    Raises:
        FormatError: If the CSV has no columns or the table does not fit a DBF
    """
    started = time.perf_counter()
    transcoder = config.transcoder()
    source = CsvSource(csv_path, config, transcoder)

    analysis = analyze_csv(source)
    fields = analysis.fields
    logger.info("%s: %d fields, %d records, %d malformed rows skipped",
                source.path.name, len(fields), analysis.record_count, analysis.malformed_rows)

    with _open_binary(dbf_path, 'wb') as stream:
        write_header(stream, fields, analysis.record_count)
        write_field_descriptors(stream, fields, transcoder)

        writer = RecordWriter(stream, fields, transcoder, progress=progress,
                              progress_interval=config.progress_interval,
                              total=analysis.record_count)
        written = writer.write_all(source.body(warn=False))
        writer.close()

        if written != analysis.record_count:
            logger.warning("%s changed between passes: %d rows analysed, %d written; fixing header",
                           source.path.name, analysis.record_count, written)
            patch_record_count(stream, written)

    return ConversionStats(
        field_count=len(fields),
        record_count=written,
        declared_records=written,
        malformed_rows=analysis.malformed_rows,
        elapsed=time.perf_counter() - started,
    )
