"""Character decoding for broker execution exports."""

import codecs
from typing import Union

DEFAULT_ENCODING = "cp932"


def decode_export(data: Union[bytes, bytearray, str], encoding: str = DEFAULT_ENCODING) -> str:
    """
    Decode raw export bytes into text.

    The broker writes exports in cp932 (the Windows superset of Shift_JIS).
    Files re-saved by spreadsheet tools often come back as UTF-8 with a BOM,
    which takes precedence over ``encoding``. Malformed byte sequences are
    replaced with U+FFFD; decoding never fails.

    Args:
        data: Raw export contents; text passes through unchanged
        encoding: Codec for input without a UTF-8 BOM

    Returns:
        Decoded text
    """
    if isinstance(data, str):
        return data

    raw = bytes(data)
    if raw.startswith(codecs.BOM_UTF8):
        return raw[len(codecs.BOM_UTF8):].decode("utf-8", errors="replace")

    return raw.decode(encoding, errors="replace")
