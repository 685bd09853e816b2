"""
Conversion Configuration - Immutable per-run settings
Resolved once from user options and passed explicitly to every component.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional, Union

from .exceptions import ConfigurationError
from .types.transcoder import Transcoder, resolve_encoding


class DeletionPolicy(Enum):
    """What to do with records flagged '*' when exporting to CSV"""
    EXPORT = 'export'
    SKIP = 'skip'


class FieldCountStrategy(Enum):
    """How the field descriptor table is delimited"""
    TERMINATOR_SCAN = 'scan'  # Read until 0x0D, ignores VFP backlink bytes
    COMPUTED = 'computed'  # Trust (header_length - 33) / 32


LINE_TERMINATORS = ('\n', '\r\n')

_ESCAPES = {
    'n': '\n',
    'r': '\r',
    't': '\t',
    '\\': '\\',
    '"': '"',
    "'": "'",
}


def parse_escaped_char(value: str) -> str:
    """
    Interpret a delimiter/quote option such as '\\t' or '|'

    Returns:
        The single character, or '' when nothing usable was given
    """
    if not value:
        return ''
    if len(value) >= 2 and value[0] == '\\' and value[1] in _ESCAPES:
        return _ESCAPES[value[1]]
    return value[0]


def parse_line_terminator(value: str) -> str:
    """Accept '\\n', '\\r\\n' (escaped or literal), 'lf' or 'crlf'"""
    text = (value or '').strip().lower()
    if text in ('crlf', '\\r\\n', '\r\n'):
        return '\r\n'
    if text in ('lf', '\\n', '\n', ''):
        return '\n'
    raise ConfigurationError(f"Unsupported line ending '{value}' (use \\n or \\r\\n)")


def _parse_enum(enum_cls, value, label: str):
    if value is None or isinstance(value, enum_cls):
        return value
    try:
        return enum_cls(str(value).strip().lower())
    except ValueError:
        choices = ', '.join(member.value for member in enum_cls)
        raise ConfigurationError(f"Invalid {label} '{value}' (choose from: {choices})")


@dataclass(frozen=True)
class ConversionConfig:
    """Settings shared by both conversion directions"""
    encoding: str = 'UTF-8'
    delimiter: str = ','
    quote: str = '"'
    line_terminator: str = '\n'
    deletion_policy: Optional[DeletionPolicy] = None
    field_count_strategy: FieldCountStrategy = FieldCountStrategy.TERMINATOR_SCAN
    progress_interval: int = 0

    def __post_init__(self):
        """Validate settings before any file is touched"""
        resolve_encoding(self.encoding)

        if len(self.delimiter) != 1 or self.delimiter in '\r\n':
            raise ConfigurationError(f"Invalid delimiter {self.delimiter!r} (need a single character)")
        if len(self.quote) != 1 or self.quote in '\r\n':
            raise ConfigurationError(f"Invalid quote character {self.quote!r}")
        if self.quote == self.delimiter:
            raise ConfigurationError("Quote character must differ from the delimiter")
        if self.line_terminator not in LINE_TERMINATORS:
            raise ConfigurationError(f"Invalid line terminator {self.line_terminator!r}")
        if self.deletion_policy is not None and not isinstance(self.deletion_policy, DeletionPolicy):
            raise ConfigurationError(f"Invalid deletion policy {self.deletion_policy!r}")
        if not isinstance(self.field_count_strategy, FieldCountStrategy):
            raise ConfigurationError(f"Invalid field count strategy {self.field_count_strategy!r}")
        if self.progress_interval < 0:
            raise ConfigurationError("Progress interval must be >= 0")

    @classmethod
    def from_options(cls, encoding: str = 'UTF-8', delimiter: str = ',', quote: str = '"',
                     line_ending: str = '\\n',
                     deletion_policy: Union[str, DeletionPolicy, None] = None,
                     field_count: Union[str, FieldCountStrategy, None] = None,
                     progress_interval: int = 0) -> 'ConversionConfig':
        """Build a config from raw command-line or form values"""
        strategy = _parse_enum(FieldCountStrategy, field_count, 'field count strategy')
        return cls(
            encoding=encoding,
            delimiter=parse_escaped_char(delimiter),
            quote=parse_escaped_char(quote),
            line_terminator=parse_line_terminator(line_ending),
            deletion_policy=_parse_enum(DeletionPolicy, deletion_policy, 'deletion policy'),
            field_count_strategy=strategy or FieldCountStrategy.TERMINATOR_SCAN,
            progress_interval=int(progress_interval),
        )

    def require_deletion_policy(self) -> DeletionPolicy:
        """Deleted records have no default treatment; callers must choose"""
        if self.deletion_policy is None:
            raise ConfigurationError("A deletion policy (export or skip) is required to export DBF records")
        return self.deletion_policy

    def transcoder(self) -> Transcoder:
        """Fresh transcoder for one file"""
        return Transcoder(self.encoding)
