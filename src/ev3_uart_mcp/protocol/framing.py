"""Message framing for the EV3 UART sensor protocol.

Message layout::

    +--------+----------+------------------+-----------+----------+
    | Header | Selector |     Payload      |  Padding  | Checksum |
    | 1 byte | INFO only|  variable length | to 2**n B |  1 byte  |
    +--------+----------+------------------+-----------+----------+

- Header: base kind | (log2ceil(payload length) << 3) | sub-type or mode
- Selector: tells NAME / SPAN / SYMBOL / FORMAT apart within INFO messages
- Padding: zero bytes so payload + padding is a power of two long
- Checksum: 0xFF XOR'd with every preceding byte of the message

System messages are a single header byte with no checksum.

Every ``frame_*`` function writes one message into a caller-owned buffer at
``offset`` and returns the number of bytes written, or ``-1`` when a length
argument is out of bounds. Nothing is written in the ``-1`` case. Callers
place messages back to back by adding each return value to the offset, or
let :class:`MessageBuffer` do that bookkeeping.
"""

from __future__ import annotations

from typing import Callable

from ..exceptions import BufferTooSmallError
from ..utils.checksum import checksum
from ..utils.endian import pack_f32, pack_u32
from .magics import (
    BUFFER_MIN,
    DECIMALS_MASK,
    DTYPE_MASK,
    ELEMS_MASK,
    MODE_MASK,
    PAYLOAD_EV3_TO_SENSOR_MAX,
    PAYLOAD_MIN,
    PAYLOAD_SENSOR_TO_EV3_MAX,
    SYMBOL_MAX,
    WIDTH_MASK,
    Base,
    Cmd,
    Info,
    InfoDtype,
    InfoSpan,
    Sys,
)

SPEED_SIZE = 4
SPAN_SIZE = 8  # two floats
FORMAT_SIZE = 4

Buffer = bytearray | memoryview


def log2ceil(value: int) -> int:
    """Return the smallest ``k`` with ``2**k >= value``.

    Raises:
        ValueError: If ``value`` is less than 1.
    """
    if value < 1:
        raise ValueError(f"log2ceil is undefined for {value}")
    return (value - 1).bit_length()


def length_code(length: int) -> int:
    """Return the header bits encoding a payload of ``length`` bytes."""
    return log2ceil(length) << 3


def _claim(dest: Buffer, offset: int, size: int) -> memoryview:
    """Return a writable view of ``dest[offset:offset + size]``.

    Raises:
        BufferTooSmallError: If the region does not fit in ``dest``.
    """
    available = len(dest) - offset
    if offset < 0 or available < size:
        raise BufferTooSmallError(size, max(available, 0))
    return memoryview(dest)[offset : offset + size]


def _seal(view: memoryview) -> int:
    """Write the checksum into the last byte of ``view``."""
    view[-1] = checksum(view, len(view) - 1)
    return len(view)


def payload_bytes(value) -> bytes:
    """Return the wire bytes of a payload, name or symbol argument.

    ``None`` counts as an empty payload and ``str`` is ASCII encoded.

    Raises:
        TypeError: If ``value`` is not text or a bytes-like buffer.
    """
    if value is None:
        return b""
    if isinstance(value, str):
        return value.encode("ascii", errors="replace")
    if isinstance(value, (bytes, bytearray, memoryview)):
        return bytes(value)
    raise TypeError(
        f"Payload must be str, bytes, bytearray or memoryview, "
        f"not {type(value).__name__}"
    )


def insert_padding(dest: Buffer, length: int, offset: int = 0) -> int:
    """Write zero padding after a payload of ``length`` bytes.

    Args:
        dest: Buffer holding the payload.
        length: Payload length in bytes (1 or more).
        offset: Index of the first byte after the payload.

    Returns:
        The number of padding bytes written.
    """
    padding = (1 << log2ceil(length)) - length
    view = _claim(dest, offset, padding)
    view[:] = bytes(padding)
    return padding


def frame_sys_message(dest: Buffer, sys_type: Sys, offset: int = 0) -> int:
    """Frame a SYNC, NACK, ACK or ESC system message (1 byte)."""
    view = _claim(dest, offset, 1)
    view[0] = Base.SYSTEM | sys_type
    return 1


def frame_cmd_type_message(dest: Buffer, type_id: int, offset: int = 0) -> int:
    """Frame a TYPE command announcing the sensor type id (0-255)."""
    view = _claim(dest, offset, 3)
    view[0] = Base.COMMAND | Cmd.TYPE | length_code(1)
    view[1] = type_id & 0xFF
    return _seal(view)


def frame_cmd_modes_message(
    dest: Buffer, modes: int, modes_visible: int, offset: int = 0
) -> int:
    """Frame a MODES command.

    Both arguments are upper bounds: ``modes`` of 5 announces modes 0-5.

    Args:
        dest: Destination buffer.
        modes: Highest mode index of the sensor (0-7).
        modes_visible: Highest mode index visible to the user (0-7).
        offset: Position of the message in ``dest``.
    """
    view = _claim(dest, offset, 4)
    view[0] = Base.COMMAND | Cmd.MODES | length_code(2)
    view[1] = modes & MODE_MASK
    view[2] = modes_visible & MODE_MASK
    return _seal(view)


def frame_cmd_speed_message(dest: Buffer, speed: int, offset: int = 0) -> int:
    """Frame a SPEED command carrying a baud rate as a little-endian u32."""
    view = _claim(dest, offset, 2 + SPEED_SIZE)
    view[0] = Base.COMMAND | Cmd.SPEED | length_code(SPEED_SIZE)
    view[1 : 1 + SPEED_SIZE] = pack_u32(speed)
    return _seal(view)


def frame_cmd_select_message(dest: Buffer, mode: int, offset: int = 0) -> int:
    """Frame a SELECT command asking the sensor to switch to ``mode``."""
    view = _claim(dest, offset, 3)
    view[0] = Base.COMMAND | Cmd.SELECT | length_code(1)
    view[1] = mode & MODE_MASK
    return _seal(view)


def frame_cmd_write_message(dest: Buffer, data: bytes, offset: int = 0) -> int:
    """Frame a WRITE command carrying 1-24 bytes of data for the sensor.

    Returns:
        Bytes written, or -1 if ``data`` is empty or longer than 24 bytes.
    """
    payload = payload_bytes(data)
    length = len(payload)
    if not PAYLOAD_MIN <= length <= PAYLOAD_EV3_TO_SENSOR_MAX:
        return -1
    view = _claim(dest, offset, 2 + (1 << log2ceil(length)))
    view[0] = Base.COMMAND | Cmd.WRITE | length_code(length)
    view[1 : 1 + length] = payload
    insert_padding(view, length, 1 + length)
    return _seal(view)


def frame_info_message_name(
    dest: Buffer, mode: int, name: str | bytes | None, offset: int = 0
) -> int:
    """Frame an INFO NAME message naming one sensor mode.

    Args:
        dest: Destination buffer.
        mode: Mode index (0-7).
        name: Mode name, 1-32 ASCII characters.
        offset: Position of the message in ``dest``.

    Returns:
        Bytes written, or -1 if the name is missing, empty or too long.
    """
    payload = payload_bytes(name)
    length = len(payload)
    if not PAYLOAD_MIN <= length <= PAYLOAD_SENSOR_TO_EV3_MAX:
        return -1
    view = _claim(dest, offset, 3 + (1 << log2ceil(length)))
    view[0] = Base.INFO | length_code(length) | (mode & MODE_MASK)
    view[1] = int(Info.NAME)
    view[2 : 2 + length] = payload
    insert_padding(view, length, 2 + length)
    return _seal(view)


def frame_info_message_span(
    dest: Buffer,
    mode: int,
    span_type: InfoSpan,
    lower: float,
    upper: float,
    offset: int = 0,
) -> int:
    """Frame an INFO span message (RAW, PCT or SI) for one mode.

    The bounds are sent as little-endian IEEE-754 single precision floats.
    """
    view = _claim(dest, offset, 3 + SPAN_SIZE)
    view[0] = Base.INFO | length_code(SPAN_SIZE) | (mode & MODE_MASK)
    view[1] = span_type & 0xFF
    view[2:6] = pack_f32(lower)
    view[6:10] = pack_f32(upper)
    return _seal(view)


def frame_info_message_symbol(
    dest: Buffer, mode: int, symbol: str | bytes | None, offset: int = 0
) -> int:
    """Frame an INFO SYMBOL message with the unit symbol of one mode.

    The symbol is always zero-filled to 8 bytes, so a valid call writes
    11 bytes whatever the symbol length.

    Returns:
        Bytes written, or -1 if the symbol is missing, empty or longer
        than 8 bytes.
    """
    payload = payload_bytes(symbol)
    length = len(payload)
    if not PAYLOAD_MIN <= length <= SYMBOL_MAX:
        return -1
    view = _claim(dest, offset, 3 + SYMBOL_MAX)
    view[0] = Base.INFO | length_code(SYMBOL_MAX) | (mode & MODE_MASK)
    view[1] = int(Info.SYMBOL)
    view[2 : 2 + length] = payload
    view[2 + length : 2 + SYMBOL_MAX] = bytes(SYMBOL_MAX - length)
    return _seal(view)


def frame_info_message_format(
    dest: Buffer,
    mode: int,
    elems: int,
    data_type: InfoDtype,
    width: int,
    decimals: int,
    offset: int = 0,
) -> int:
    """Frame an INFO FORMAT message describing the data of one mode.

    Each field is masked to its bit width. Element counts are not checked
    against the per-type ceilings in :data:`~.magics.MAX_ELEMENTS`.

    Args:
        dest: Destination buffer.
        mode: Mode index (0-7).
        elems: Data elements per DATA message (6 bits).
        data_type: Element type (2 bits).
        width: Display width in characters, decimal point included (4 bits).
        decimals: Digits after the decimal point (4 bits).
        offset: Position of the message in ``dest``.
    """
    view = _claim(dest, offset, 3 + FORMAT_SIZE)
    view[0] = Base.INFO | length_code(FORMAT_SIZE) | (mode & MODE_MASK)
    view[1] = int(Info.FORMAT)
    view[2] = elems & ELEMS_MASK
    view[3] = data_type & DTYPE_MASK
    view[4] = width & WIDTH_MASK
    view[5] = decimals & DECIMALS_MASK
    return _seal(view)


def frame_data_message(dest: Buffer, mode: int, data: bytes, offset: int = 0) -> int:
    """Frame a DATA message carrying 1-32 bytes of readings for ``mode``.

    Returns:
        Bytes written, or -1 if ``data`` is empty or longer than 32 bytes.
    """
    payload = payload_bytes(data)
    length = len(payload)
    if not PAYLOAD_MIN <= length <= PAYLOAD_SENSOR_TO_EV3_MAX:
        return -1
    view = _claim(dest, offset, 2 + (1 << log2ceil(length)))
    view[0] = Base.DATA | length_code(length) | (mode & MODE_MASK)
    view[1 : 1 + length] = payload
    insert_padding(view, length, 1 + length)
    return _seal(view)


class MessageBuffer:
    """Places consecutive messages back to back in one buffer.

    Usage::

        buf = MessageBuffer(size=64)
        buf.append(frame_cmd_type_message, 0x1D)
        buf.append(frame_sys_message, Sys.ACK)
        stream = buf.getvalue()
    """

    def __init__(self, buffer: Buffer | None = None, size: int = BUFFER_MIN) -> None:
        self.buffer = buffer if buffer is not None else bytearray(size)
        self.offset = 0

    def append(self, encoder: Callable[..., int], *args) -> int:
        """Frame one message at the current offset.

        Returns:
            The encoder's return value. The offset only advances when it
            is positive.
        """
        written = encoder(self.buffer, *args, offset=self.offset)
        if written > 0:
            self.offset += written
        return written

    def getvalue(self) -> bytes:
        """Return the bytes written so far."""
        return bytes(self.buffer[: self.offset])

    def reset(self) -> None:
        self.offset = 0

    def __len__(self) -> int:
        return self.offset
