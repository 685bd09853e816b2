"""
Command Line Interface Module - dbf2csv / csv2dbf / info

Usage:
    dbfcsv dbf2csv --deleted skip [-e GBK] [-c 5000] data.dbf
    dbfcsv csv2dbf [-f '|'] [-e GBK] data.csv
    dbfcsv info data.dbf
"""

import argparse
import logging
import os
import sys
from pathlib import Path
from typing import Callable, List, Optional

from .config import ConversionConfig, DeletionPolicy, FieldCountStrategy
from .constants import APP_NAME, APP_VERSION
from .convert.engine import ConversionStats, convert_csv_to_dbf, convert_dbf_to_csv, inspect_dbf
from .exceptions import ConfigurationError, DbfCsvError
from .types.transcoder import supported_encodings


def derive_output_path(source: Path, suffix: str, output_dir: Optional[str] = None) -> Path:
    """Same name with a new extension, optionally in another directory"""
    target = source.with_suffix(suffix)
    if output_dir:
        target = Path(output_dir) / target.name
    return target


def _progress_printer(verb: str) -> Callable[[int, int], None]:
    def report(processed: int, total: int) -> None:
        print(f"  >> {verb} {processed} / {total} ...", end='\r', flush=True)
    return report


def _add_common_options(parser: argparse.ArgumentParser) -> None:
    parser.add_argument('-e', '--encoding', default='UTF-8',
                        help=f"Text encoding ({', '.join(supported_encodings())})")
    parser.add_argument('-c', '--progress', type=int, default=0, metavar='N',
                        help="Show progress every N rows (default 0, disabled)")
    parser.add_argument('-o', '--output-dir', metavar='DIR',
                        help="Write results here instead of next to the input")
    parser.add_argument('-v', '--verbose', action='store_true', help="Enable debug logging")
    parser.add_argument('files', nargs='+', metavar='FILE')


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog=APP_NAME,
        description="Convert between xBase/DBF tables and CSV files",
    )
    sub = parser.add_subparsers(dest="command")

    # ── dbf2csv ──
    export_p = sub.add_parser("dbf2csv", help="Export DBF files to CSV")
    export_p.add_argument('-f', '--delimiter', default=',', help="Output field delimiter (single char)")
    export_p.add_argument('-q', '--quote', default='"', help="Quote character")
    export_p.add_argument('-l', '--line-ending', default='\\n', help="Output line ending (\\n or \\r\\n)")
    export_p.add_argument('--deleted', required=True, choices=[p.value for p in DeletionPolicy],
                          help="Export or skip records flagged as deleted")
    export_p.add_argument('--field-count', default=FieldCountStrategy.TERMINATOR_SCAN.value,
                          choices=[s.value for s in FieldCountStrategy],
                          help="Find the field table end by scanning for 0x0D or from the header length")
    _add_common_options(export_p)

    # ── csv2dbf ──
    import_p = sub.add_parser("csv2dbf", help="Build DBF files from CSV")
    import_p.add_argument('-f', '--delimiter', default=',', help="Field delimiter (single char)")
    import_p.add_argument('-q', '--quote', default='"', help="Quote character")
    _add_common_options(import_p)

    # ── info ──
    info_p = sub.add_parser("info", help="Show DBF header and fields")
    info_p.add_argument('-e', '--encoding', default='UTF-8', help="Field name encoding")
    info_p.add_argument('--field-count', default=FieldCountStrategy.TERMINATOR_SCAN.value,
                        choices=[s.value for s in FieldCountStrategy])
    info_p.add_argument('files', nargs='+', metavar='FILE')

    # ── version ──
    sub.add_parser("version", help="Print version and exit")

    return parser


def _build_config(args: argparse.Namespace) -> ConversionConfig:
    return ConversionConfig.from_options(
        encoding=args.encoding,
        delimiter=getattr(args, 'delimiter', ','),
        quote=getattr(args, 'quote', '"'),
        line_ending=getattr(args, 'line_ending', '\\n'),
        deletion_policy=getattr(args, 'deleted', None),
        field_count=getattr(args, 'field_count', None),
        progress_interval=getattr(args, 'progress', 0),
    )


def _describe(path: Path, config: ConversionConfig) -> None:
    structure = inspect_dbf(path, config)
    header = structure.header
    print(f"\nFile: {path}")
    print(f"Version: 0x{header.version:02X}  Last update: {header.last_modified or '-'}")
    print(f"Records: {header.record_count:,}  Header length: {header.header_length}  "
          f"Record length: {header.record_length}")
    print("-" * 40)
    print(f"{'Field':<12} | {'Type':<4} | {'Len':>3} | {'Dec':>3}")
    print("-" * 40)
    for field in structure.fields:
        print(f"{field.name:<12} | {field.tag:<4} | {field.length:>3} | {field.decimal:>3}")
    print()


def _convert_files(args: argparse.Namespace, config: ConversionConfig) -> int:
    if args.command == 'dbf2csv':
        convert, suffix, verb = convert_dbf_to_csv, '.csv', 'Exported'
    else:
        convert, suffix, verb = convert_csv_to_dbf, '.dbf', 'Written'

    progress = _progress_printer(verb) if config.progress_interval > 0 else None
    failures = 0
    if args.output_dir:
        Path(args.output_dir).mkdir(parents=True, exist_ok=True)

    for name in args.files:
        source = Path(name)
        if not source.is_file():
            print(f"Error: File not found [{name}]", file=sys.stderr)
            failures += 1
            continue

        target = derive_output_path(source, suffix, args.output_dir)
        if target.resolve() == source.resolve():
            print(f"Error: Output would overwrite input [{name}]", file=sys.stderr)
            failures += 1
            continue

        print(f"Processing: {name}")
        try:
            stats: ConversionStats = convert(source, target, config, progress=progress)
        except (DbfCsvError, OSError) as e:
            print(f"Failed [{name}]: {e}", file=sys.stderr)
            if target.exists():
                os.remove(target)
            failures += 1
            continue

        if progress:
            print()
        print(f"  >> Fields: {stats.field_count}, Records: {stats.record_count}")
        if stats.deleted_skipped:
            print(f"  >> Deleted records skipped: {stats.deleted_skipped}")
        if stats.malformed_rows:
            print(f"  >> Malformed rows skipped: {stats.malformed_rows}")
        print(f"Done: {name} -> {target} (Time: {stats.elapsed:.3f}s)")

    return 1 if failures else 0


def main(argv: Optional[List[str]] = None) -> int:
    parser = _build_parser()
    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        return 1

    if args.command == "version":
        print(f"{APP_NAME} {APP_VERSION}")
        return 0

    logging.basicConfig(
        level=logging.DEBUG if getattr(args, 'verbose', False) else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    try:
        config = _build_config(args)
    except ConfigurationError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    if args.command == "info":
        failures = 0
        for name in args.files:
            try:
                _describe(Path(name), config)
            except (DbfCsvError, OSError) as e:
                print(f"Failed [{name}]: {e}", file=sys.stderr)
                failures += 1
        return 1 if failures else 0

    return _convert_files(args, config)


if __name__ == "__main__":
    sys.exit(main())
