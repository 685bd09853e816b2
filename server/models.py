"""
Conversion Service - Runs uploaded files through the dbfcsv engine
Each request gets its own temporary directory; nothing is shared between requests.
"""

import tempfile
from pathlib import Path
from typing import Any, Dict, Tuple

from werkzeug.datastructures import FileStorage
from werkzeug.utils import secure_filename

from dbfcsv.config import ConversionConfig
from dbfcsv.convert.engine import ConversionStats, convert_csv_to_dbf, convert_dbf_to_csv, inspect_dbf
from dbfcsv.types.transcoder import supported_encodings


class ConversionService:
    def __init__(self, temp_root=None):
        self.temp_root = temp_root

    def _stage(self, upload: FileStorage, workdir: str, suffix: str) -> Path:
        """Save an upload into the request's working directory under a fixed extension"""
        stem = Path(secure_filename(upload.filename or '')).stem or 'upload'
        path = Path(workdir) / f"{stem}{suffix}"
        upload.save(str(path))
        return path

    def encodings(self) -> Dict[str, Any]:
        return {'encodings': supported_encodings()}

    def dbf_to_csv(self, upload: FileStorage, options: Dict[str, str]) -> Tuple[bytes, str, ConversionStats]:
        config = ConversionConfig.from_options(
            encoding=options.get('encoding', 'UTF-8'),
            delimiter=options.get('delimiter', ','),
            quote=options.get('quote', '"'),
            line_ending=options.get('line_ending', '\\n'),
            deletion_policy=options.get('deleted'),
            field_count=options.get('field_count'),
        )
        config.require_deletion_policy()

        with tempfile.TemporaryDirectory(dir=self.temp_root) as workdir:
            source = self._stage(upload, workdir, '.dbf')
            target = source.with_suffix('.csv')
            stats = convert_dbf_to_csv(source, target, config)
            return target.read_bytes(), target.name, stats

    def csv_to_dbf(self, upload: FileStorage, options: Dict[str, str]) -> Tuple[bytes, str, ConversionStats]:
        config = ConversionConfig.from_options(
            encoding=options.get('encoding', 'UTF-8'),
            delimiter=options.get('delimiter', ','),
            quote=options.get('quote', '"'),
        )

        with tempfile.TemporaryDirectory(dir=self.temp_root) as workdir:
            source = self._stage(upload, workdir, '.csv')
            target = source.with_suffix('.dbf')
            stats = convert_csv_to_dbf(source, target, config)
            return target.read_bytes(), target.name, stats

    def inspect(self, upload: FileStorage, options: Dict[str, str]) -> Dict[str, Any]:
        config = ConversionConfig.from_options(
            encoding=options.get('encoding', 'UTF-8'),
            field_count=options.get('field_count'),
        )

        with tempfile.TemporaryDirectory(dir=self.temp_root) as workdir:
            source = self._stage(upload, workdir, '.dbf')
            return inspect_dbf(source, config).to_dict()


conversion_service = ConversionService()
