"""Magic values and size bounds of the EV3 UART sensor protocol.

Header byte layout::

    +-----------+---------------+--------------------+
    | bits 7-6  |   bits 5-3    |      bits 2-0      |
    | category  | length class  | sub-type or mode   |
    +-----------+---------------+--------------------+

Each enumeration below groups the values of one field for one message
category, so values taken from different groups never overlap.
"""

from __future__ import annotations

from enum import Enum, IntEnum

# Size bounds, in bytes
PAYLOAD_MIN = 0x01
PAYLOAD_SENSOR_TO_EV3_MAX = 0x20  # device -> host
PAYLOAD_EV3_TO_SENSOR_MAX = 0x18  # host -> device
SYMBOL_MAX = 0x08
BUFFER_MIN = 0x23  # largest message: INFO NAME with a 32-byte name

MODE_MASK = 0x07
ELEMS_MASK = 0x3F
DTYPE_MASK = 0x03
WIDTH_MASK = 0x0F
DECIMALS_MASK = 0x0F


class Base(IntEnum):
    """Top two bits of the header byte: the message category."""

    SYSTEM = 0x00
    COMMAND = 0x40
    INFO = 0x80
    DATA = 0xC0


class Sys(IntEnum):
    """System message sub-types (header byte only, no checksum)."""

    SYNC = 0x00
    NACK = 0x02
    ACK = 0x04
    ESC = 0x06


class Cmd(IntEnum):
    """Command message sub-types."""

    TYPE = 0x00
    MODES = 0x01
    SPEED = 0x02
    SELECT = 0x03
    WRITE = 0x04


class Info(IntEnum):
    """Selector byte that follows the header of an information message.

    Span messages use their :class:`InfoSpan` value as the selector.
    """

    NAME = 0x00
    SYMBOL = 0x04
    FORMAT = 0x80


class InfoSpan(IntEnum):
    """Span type selector bytes for INFO span messages."""

    RAW = 0x01
    PCT = 0x02
    SI = 0x03


class InfoDtype(IntEnum):
    """Data element types announced in INFO format messages."""

    S8 = 0x00
    S16 = 0x01
    S32 = 0x02
    F32 = 0x03


# Documented element ceilings per data type (not enforced by the encoders)
MAX_ELEMENTS: dict[InfoDtype, int] = {
    InfoDtype.S8: 32,
    InfoDtype.S16: 16,
    InfoDtype.S32: 8,
    InfoDtype.F32: 8,
}


class MessageKind(Enum):
    """Every message shape the framing layer can produce."""

    SYNC = "sync"
    NACK = "nack"
    ACK = "ack"
    ESC = "esc"
    TYPE = "type"
    MODES = "modes"
    SPEED = "speed"
    SELECT = "select"
    WRITE = "write"
    NAME = "name"
    SPAN = "span"
    SYMBOL = "symbol"
    FORMAT = "format"
    DATA = "data"

    @property
    def category(self) -> Base:
        """The header category the message belongs to."""
        return _CATEGORIES[self]


_CATEGORIES = {
    MessageKind.SYNC: Base.SYSTEM,
    MessageKind.NACK: Base.SYSTEM,
    MessageKind.ACK: Base.SYSTEM,
    MessageKind.ESC: Base.SYSTEM,
    MessageKind.TYPE: Base.COMMAND,
    MessageKind.MODES: Base.COMMAND,
    MessageKind.SPEED: Base.COMMAND,
    MessageKind.SELECT: Base.COMMAND,
    MessageKind.WRITE: Base.COMMAND,
    MessageKind.NAME: Base.INFO,
    MessageKind.SPAN: Base.INFO,
    MessageKind.SYMBOL: Base.INFO,
    MessageKind.FORMAT: Base.INFO,
    MessageKind.DATA: Base.DATA,
}
