"""Byte-order normalisation for 32-bit wire fields.

The EV3 expects every multi-byte field in little-endian order. Floats are
carried as the raw bit pattern of an IEEE-754 single precision value, so the
host must use that representation; this is checked once at import time.
"""

from __future__ import annotations

import struct
import sys

from ..exceptions import UnsupportedByteOrderError, UnsupportedPlatformError

U32_MASK = 0xFFFFFFFF
# Host orders the wire packers can run on. CPython only reports these two;
# htole32 also handles the PDP-11 word order as a pure conversion.
SUPPORTED_BYTE_ORDERS = ("little", "big")

if sys.byteorder not in SUPPORTED_BYTE_ORDERS:
    raise UnsupportedPlatformError(f"Unsupported host byte order: {sys.byteorder}")
if struct.calcsize("=f") != 4 or struct.pack("<f", 1.0) != b"\x00\x00\x80\x3f":
    raise UnsupportedPlatformError("Host floats are not IEEE-754 single precision")


def htole32(value: int, byteorder: str = sys.byteorder) -> int:
    """Convert a 32-bit value from host order to little-endian order.

    Args:
        value: 32-bit pattern as read in host order (wider values are masked).
        byteorder: Host byte order: ``"little"``, ``"big"`` or ``"pdp"``.

    Returns:
        The value whose in-memory host representation is little-endian.

    Raises:
        UnsupportedByteOrderError: For any other byte order.
    """
    value &= U32_MASK
    if byteorder == "little":
        return value
    if byteorder == "big":
        return int.from_bytes(value.to_bytes(4, "big"), "little")
    if byteorder == "pdp":
        return ((value & 0xFFFF0000) >> 16) | ((value & 0x0000FFFF) << 16)
    raise UnsupportedByteOrderError(byteorder)


def pack_u32(value: int) -> bytes:
    """Return the 4 wire bytes of an unsigned 32-bit integer."""
    return htole32(value).to_bytes(4, sys.byteorder)


def float_bits(value: float) -> int:
    """Return the host-order bit pattern of a single precision float."""
    return int.from_bytes(struct.pack("=f", value), sys.byteorder)


def pack_f32(value: float) -> bytes:
    """Return the 4 wire bytes of a single precision float."""
    return pack_u32(float_bits(value))
