"""
Field Value Codec - Per-type conversion between record bytes and CSV text
Each FieldType has exactly one codec; the registry is checked for completeness at import.
"""

import logging
import math
import struct
from decimal import Decimal
from typing import Dict

from ..constants import MEMO_SENTINEL, TIMESTAMP_FORMAT, CURRENCY_SCALE
from ..exceptions import UnsupportedFieldTypeError
from .field_type import FieldType, FieldInfo
from .julian import julian_day_to_timestamp
from .transcoder import Transcoder, FALLBACK_CODEC

logger = logging.getLogger(__name__)

SPACE = b' '


def _ascii(raw: bytes) -> str:
    """Bytes read verbatim, one character per byte"""
    return raw.decode(FALLBACK_CODEC)


class FieldCodec:
    """Base codec: fixed-width text payload"""

    def decode(self, raw: bytes, field: FieldInfo, transcoder: Transcoder) -> str:
        raise NotImplementedError

    def encode(self, text: str, field: FieldInfo, transcoder: Transcoder) -> bytes:
        """
        Encode text into exactly field.length bytes

        Shorter values are space padded; longer values are cut at the
        declared length without error.
        """
        data = transcoder.encode(text)
        return data[:field.length].ljust(field.length, SPACE)


class CharacterCodec(FieldCodec):
    """C and unrecognised tags"""

    def decode(self, raw: bytes, field: FieldInfo, transcoder: Transcoder) -> str:
        # Decode before trimming: a multibyte trail byte may equal 0x20
        text = transcoder.decode(raw)
        return text.rstrip('\x00').strip()


class NumericCodec(FieldCodec):
    """N and F: ASCII digits"""

    def decode(self, raw: bytes, field: FieldInfo, transcoder: Transcoder) -> str:
        return _ascii(raw).strip()


class LogicalCodec(FieldCodec):

    TRUE_BYTES = ('Y', 'T')
    FALSE_BYTES = ('N', 'F')

    def decode(self, raw: bytes, field: FieldInfo, transcoder: Transcoder) -> str:
        flag = _ascii(raw).upper()
        if flag in self.TRUE_BYTES:
            return 'TRUE'
        if flag in self.FALSE_BYTES:
            return 'FALSE'
        return ''

    def encode(self, text: str, field: FieldInfo, transcoder: Transcoder) -> bytes:
        value = text.strip().upper()
        if value in ('TRUE', 'T', 'Y', 'YES', '1'):
            flag = 'T'
        elif value in ('FALSE', 'F', 'N', 'NO', '0'):
            flag = 'F'
        else:
            flag = '?'
        return super().encode(flag, field, transcoder)


class DateCodec(FieldCodec):
    """D: ASCII YYYYMMDD"""

    def decode(self, raw: bytes, field: FieldInfo, transcoder: Transcoder) -> str:
        text = _ascii(raw)
        if len(text) == 8 and text.strip():
            return f"{text[0:4]}-{text[4:6]}-{text[6:8]}"
        return text.strip()

    def encode(self, text: str, field: FieldInfo, transcoder: Transcoder) -> bytes:
        return super().encode(text.strip().replace('-', ''), field, transcoder)


class MemoCodec(FieldCodec):
    """M and G: payload lives in a side-car file that is never opened"""

    def decode(self, raw: bytes, field: FieldInfo, transcoder: Transcoder) -> str:
        return MEMO_SENTINEL


class BinaryCodec(FieldCodec):
    """FoxPro binary number types; read-only"""

    width = 0

    def decode(self, raw: bytes, field: FieldInfo, transcoder: Transcoder) -> str:
        if len(raw) != self.width:
            return ''
        return self.decode_payload(raw)

    def decode_payload(self, raw: bytes) -> str:
        raise NotImplementedError

    def encode(self, text: str, field: FieldInfo, transcoder: Transcoder) -> bytes:
        raise UnsupportedFieldTypeError(
            f"Cannot write field '{field.name}' of type {field.tag}: binary FoxPro types are read-only")


class IntegerCodec(BinaryCodec):
    width = 4

    def decode_payload(self, raw: bytes) -> str:
        return str(struct.unpack('<i', raw)[0])


class CurrencyCodec(BinaryCodec):
    """Y: signed 64-bit integer scaled by 10000"""

    width = 8

    def decode_payload(self, raw: bytes) -> str:
        units = struct.unpack('<q', raw)[0]
        return f"{Decimal(units).scaleb(-CURRENCY_SCALE):.{CURRENCY_SCALE}f}"


class DoubleCodec(BinaryCodec):
    """
    B: IEEE 754 double

    Shortest round-trip digits. Plain notation for magnitudes in [1e-4, 1e21),
    exponent notation outside that range; NaN and +Inf/-Inf spelled out.
    """

    width = 8
    PLAIN_LIMIT = 1e21

    def decode_payload(self, raw: bytes) -> str:
        value = struct.unpack('<d', raw)[0]
        if math.isnan(value):
            return 'NaN'
        if math.isinf(value):
            return '+Inf' if value > 0 else '-Inf'

        text = repr(value)
        if 'e' in text:
            # repr switches to exponent form at 1e16
            if 1 <= abs(value) < self.PLAIN_LIMIT:
                return format(Decimal(text), 'f')
            return text
        if text.endswith('.0'):
            return text[:-2]
        return text


class DateTimeCodec(BinaryCodec):
    """T: Julian day (u32) followed by milliseconds since midnight (u32)"""

    width = 8

    def decode_payload(self, raw: bytes) -> str:
        day, millis = struct.unpack('<II', raw)
        try:
            stamp = julian_day_to_timestamp(day, millis)
        except (ValueError, OverflowError) as e:
            logger.debug("Unrepresentable datetime (day=%d, ms=%d): %s", day, millis, e)
            return ''
        if stamp is None:
            return ''
        return stamp.strftime(TIMESTAMP_FORMAT)


_character = CharacterCodec()
_numeric = NumericCodec()
_memo = MemoCodec()

CODECS: Dict[FieldType, FieldCodec] = {
    FieldType.CHARACTER: _character,
    FieldType.OTHER: _character,
    FieldType.NUMERIC: _numeric,
    FieldType.FLOAT: _numeric,
    FieldType.LOGICAL: LogicalCodec(),
    FieldType.DATE: DateCodec(),
    FieldType.INTEGER: IntegerCodec(),
    FieldType.CURRENCY: CurrencyCodec(),
    FieldType.DOUBLE: DoubleCodec(),
    FieldType.DATETIME: DateTimeCodec(),
    FieldType.MEMO: _memo,
    FieldType.GENERAL: _memo,
}

_missing = set(FieldType) - set(CODECS)
if _missing:
    raise RuntimeError(f"No codec registered for {sorted(t.name for t in _missing)}")


def codec_for(field: FieldInfo) -> FieldCodec:
    """Codec used for every value of a column"""
    return CODECS[field.field_type]


def decode_value(raw: bytes, field: FieldInfo, transcoder: Transcoder) -> str:
    """Convert one field's raw record bytes to CSV text"""
    return codec_for(field).decode(raw, field, transcoder)


def encode_value(text: str, field: FieldInfo, transcoder: Transcoder) -> bytes:
    """Convert CSV text to exactly field.length record bytes"""
    return codec_for(field).encode(text, field, transcoder)
