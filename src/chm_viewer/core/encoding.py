"""Decode archive bytes as text."""

from chm_viewer.config import FALLBACK_ENCODING, PRIMARY_ENCODING
from chm_viewer.errors import InvalidData


def decode_text(data: bytes) -> str:
    """Decode bytes as UTF-8, falling back to Windows-1252.

    Both attempts are strict; bytes that neither encoding accepts raise
    InvalidData.
    """
    for encoding in (PRIMARY_ENCODING, FALLBACK_ENCODING):
        try:
            return data.decode(encoding)
        except UnicodeDecodeError:
            continue
    msg = f"Cannot decode {len(data)} bytes as {PRIMARY_ENCODING} or {FALLBACK_ENCODING}"
    raise InvalidData(msg)
