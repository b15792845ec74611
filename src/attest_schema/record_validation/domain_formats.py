"""Checks for domain-specific value encodings."""

from __future__ import annotations

import base64
import binascii
import math
import re
from datetime import datetime
from decimal import Decimal, InvalidOperation

# StrKey: base32(version byte + 32-byte key + CRC16-XModem little-endian).
_STRKEY_PATTERN = re.compile(r"[A-Z2-7]{56}")
_STRKEY_DECODED_LENGTH = 35
_STRKEY_VERSION_BYTES = {
    "G": 6 << 3,  # account public key
    "C": 2 << 3,  # contract
}
_SYMBOL_PATTERN = re.compile(r"[A-Za-z0-9_]{1,32}")
_HEX_PATTERN = re.compile(r"(?:0x)?(?:[0-9a-fA-F]{2})*")
_DIGITS_PATTERN = re.compile(r"\d+")


def is_valid_address(value: object) -> bool:
    """Return True for a checksummed account or contract StrKey."""
    if not isinstance(value, str) or not _STRKEY_PATTERN.fullmatch(value):
        return False
    version = _STRKEY_VERSION_BYTES.get(value[0])
    if version is None:
        return False
    try:
        decoded = base64.b32decode(value)
    except binascii.Error:
        return False
    if len(decoded) != _STRKEY_DECODED_LENGTH or decoded[0] != version:
        return False
    body, checksum = decoded[:-2], decoded[-2:]
    return binascii.crc_hqx(body, 0).to_bytes(2, "little") == checksum


def parse_amount(value: object) -> Decimal | None:
    """Return the amount as a Decimal, or None when it is not a non-negative number."""
    if isinstance(value, bool):
        return None
    if isinstance(value, float) and not math.isfinite(value):
        return None
    if isinstance(value, int | float | Decimal):
        amount = Decimal(value)
    elif isinstance(value, str):
        try:
            amount = Decimal(value.strip())
        except InvalidOperation:
            return None
    else:
        return None
    if not amount.is_finite() or amount < 0:
        return None
    return amount


def is_valid_timestamp(value: object) -> bool:
    """Return True for a non-negative epoch integer or a parseable date string."""
    if isinstance(value, bool):
        return False
    if isinstance(value, int):
        return value >= 0
    if isinstance(value, datetime):
        return True
    if isinstance(value, str):
        stripped = value.strip()
        return bool(_DIGITS_PATTERN.fullmatch(stripped)) or is_valid_datetime(stripped)
    return False


def is_valid_datetime(value: object) -> bool:
    """Return True for datetimes and ISO-8601 strings."""
    if isinstance(value, datetime):
        return True
    if not isinstance(value, str) or not value.strip():
        return False
    try:
        datetime.fromisoformat(value.strip())
    except ValueError:
        return False
    return True


def is_valid_symbol(value: object) -> bool:
    """Return True for contract symbols (up to 32 alphanumeric or underscore characters)."""
    return isinstance(value, str) and bool(_SYMBOL_PATTERN.fullmatch(value))


def is_valid_bytes(value: object) -> bool:
    """Return True for raw bytes or an even-length hex string."""
    if isinstance(value, bytes | bytearray):
        return True
    return isinstance(value, str) and bool(_HEX_PATTERN.fullmatch(value))
