"""
Transcoder - Text encoding for DBF payloads and CSV files
Maps user-facing encoding names to Python codecs and converts between bytes and text.
"""

import logging
from typing import Dict, List

from ..exceptions import ConfigurationError

logger = logging.getLogger(__name__)

# Alias -> Python codec name
ENCODING_ALIASES: Dict[str, str] = {
    'utf-8': 'utf-8',
    'utf8': 'utf-8',
    'gbk': 'gb18030',
    'gb2312': 'gb18030',
    'gb18030': 'gb18030',
    'cp936': 'gb18030',
    'big5': 'big5',
    'cp950': 'big5',
    'shift_jis': 'cp932',
    'sjis': 'cp932',
    'cp932': 'cp932',
    'euc-kr': 'cp949',
    'cp949': 'cp949',
}

# Codec used when bytes cannot be decoded: one character per byte
FALLBACK_CODEC = 'latin-1'


def resolve_encoding(name: str) -> str:
    """
    Resolve an encoding alias to a Python codec name

    Args:
        name: Encoding name as given by the user (case-insensitive)

    Returns:
        Python codec name

    Raises:
        ConfigurationError: If the encoding is not supported
    """
    key = (name or '').strip().lower()
    codec = ENCODING_ALIASES.get(key)
    if codec is None:
        raise ConfigurationError(f"Unsupported encoding '{name}'")
    return codec


def supported_encodings() -> List[str]:
    """List recognised encoding aliases"""
    return sorted(ENCODING_ALIASES)


class Transcoder:
    """Decodes field bytes to text and encodes text to the target charset"""

    def __init__(self, name: str):
        self.name = name
        self.codec = resolve_encoding(name)
        self.fallbacks = 0

    @property
    def stream_codec(self) -> str:
        """Codec for reading text files (tolerates a UTF-8 byte order mark)"""
        return 'utf-8-sig' if self.codec == 'utf-8' else self.codec

    def decode(self, data: bytes) -> str:
        """
        Decode bytes, falling back to the raw bytes read verbatim

        The fallback never raises, so a bad field cannot abort a record stream.
        """
        try:
            return data.decode(self.codec)
        except UnicodeDecodeError as e:
            self.fallbacks += 1
            logger.debug("Undecodable %s bytes %r, using raw bytes: %s", self.codec, bytes(data), e)
            return data.decode(FALLBACK_CODEC)

    def encode(self, text: str) -> bytes:
        """Encode text, replacing characters the target charset cannot represent"""
        return text.encode(self.codec, errors='replace')

    def __repr__(self) -> str:
        return f"Transcoder(name={self.name!r}, codec={self.codec!r})"
