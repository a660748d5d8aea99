"""XOR checksum used as the trailer of every non-system message."""

from __future__ import annotations

CHECKSUM_SEED = 0xFF


def checksum(data: bytes | bytearray | memoryview, length: int | None = None) -> int:
    """Calculate the checksum over the first ``length`` bytes of ``data``.

    The accumulator starts at 0xFF and every byte is XOR'd into it in order.
    The checksum byte itself is never part of the input.

    Args:
        data: Message bytes (header, selector, payload and padding).
        length: Number of leading bytes to fold; all of ``data`` if None.

    Returns:
        The single-byte checksum as an int (0-255).
    """
    if length is None:
        length = len(data)
    acc = CHECKSUM_SEED
    for byte in data[:length]:
        acc ^= byte
    return acc
