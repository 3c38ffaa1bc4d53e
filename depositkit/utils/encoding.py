"""Decoding helpers for values the deposit contract stores as raw bytes."""

from __future__ import annotations

import re
from datetime import datetime, timezone
from typing import Union

from web3 import AsyncWeb3

_BYTE_GROUP = re.compile(r"..")
_HEX_PREFIX = "0x"


def little_endian_hex_to_int(value: str) -> int:
    """Interpret a little-endian hex string as an integer.

    ``"0x0100"`` decodes to ``1``. A trailing odd nibble is ignored and an
    empty payload raises :class:`ValueError`.
    """

    digits = value or ""
    if digits.startswith(_HEX_PREFIX):
        digits = digits[len(_HEX_PREFIX):]
    big_endian = "".join(reversed(_BYTE_GROUP.findall(digits)))
    return int(big_endian, 16)


def to_hex_string(value: Union[bytes, bytearray, str]) -> str:
    if isinstance(value, (bytes, bytearray)):
        return AsyncWeb3.to_hex(bytes(value))
    return value


def timestamp_to_datetime(seconds: int) -> datetime:
    return datetime.fromtimestamp(seconds, tz=timezone.utc)


__all__ = ["little_endian_hex_to_int", "timestamp_to_datetime", "to_hex_string"]
