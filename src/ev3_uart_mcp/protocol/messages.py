"""High-level message builders.

Each builder frames one message into a fresh buffer and returns it as
``bytes``. Where the framing layer reports a length violation with ``-1``,
the builders raise :class:`~ev3_uart_mcp.exceptions.LengthViolationError`.
"""

from __future__ import annotations

from typing import Any, Callable

from ..exceptions import LengthViolationError
from .framing import (
    frame_cmd_modes_message,
    frame_cmd_select_message,
    frame_cmd_speed_message,
    frame_cmd_type_message,
    frame_cmd_write_message,
    frame_data_message,
    frame_info_message_format,
    frame_info_message_name,
    frame_info_message_span,
    frame_info_message_symbol,
    frame_sys_message,
    payload_bytes,
)
from .magics import (
    BUFFER_MIN,
    PAYLOAD_EV3_TO_SENSOR_MAX,
    PAYLOAD_MIN,
    PAYLOAD_SENSOR_TO_EV3_MAX,
    SYMBOL_MAX,
    InfoDtype,
    InfoSpan,
    MessageKind,
    Sys,
)


def _frame(encoder: Callable[..., int], *args) -> bytes:
    buf = bytearray(BUFFER_MIN)
    written = encoder(buf, *args)
    if written < 0:
        return b""
    return bytes(buf[:written])


def _length(value) -> int:
    return len(payload_bytes(value))


def build_sys(sys_type: Sys) -> bytes:
    """Build a one-byte SYNC, NACK, ACK or ESC message."""
    return _frame(frame_sys_message, Sys(sys_type))


def build_ack() -> bytes:
    """Build the ACK that ends a sensor's handshake."""
    return build_sys(Sys.ACK)


def build_type(type_id: int) -> bytes:
    """Build a TYPE command.

    Args:
        type_id: Sensor type id, masked to 0-255.
    """
    return _frame(frame_cmd_type_message, type_id)


def build_modes(modes: int, modes_visible: int) -> bytes:
    """Build a MODES command from the highest mode and highest visible mode."""
    return _frame(frame_cmd_modes_message, modes, modes_visible)


def build_speed(speed: int) -> bytes:
    """Build a SPEED command for a baud rate such as 57600."""
    return _frame(frame_cmd_speed_message, speed)


def build_select(mode: int) -> bytes:
    """Build a SELECT command for ``mode`` (masked to 0-7)."""
    return _frame(frame_cmd_select_message, mode)


def build_write(data: bytes) -> bytes:
    """Build a WRITE command carrying data from the EV3 to the sensor.

    Raises:
        LengthViolationError: If ``data`` is not 1-24 bytes long.
    """
    message = _frame(frame_cmd_write_message, data)
    if not message:
        raise LengthViolationError(
            "Write payload", _length(data), PAYLOAD_MIN, PAYLOAD_EV3_TO_SENSOR_MAX
        )
    return message


def build_name(mode: int, name: str | bytes | None) -> bytes:
    """Build an INFO NAME message.

    Raises:
        LengthViolationError: If ``name`` is missing or not 1-32 bytes long.
    """
    message = _frame(frame_info_message_name, mode, name)
    if not message:
        raise LengthViolationError(
            "Mode name", _length(name), PAYLOAD_MIN, PAYLOAD_SENSOR_TO_EV3_MAX
        )
    return message


def build_span(mode: int, span_type: InfoSpan, lower: float, upper: float) -> bytes:
    """Build an INFO span message for a RAW, PCT or SI range."""
    return _frame(frame_info_message_span, mode, InfoSpan(span_type), lower, upper)


def build_symbol(mode: int, symbol: str | bytes | None) -> bytes:
    """Build an INFO SYMBOL message.

    Raises:
        LengthViolationError: If ``symbol`` is missing or not 1-8 bytes long.
    """
    message = _frame(frame_info_message_symbol, mode, symbol)
    if not message:
        raise LengthViolationError("Symbol", _length(symbol), PAYLOAD_MIN, SYMBOL_MAX)
    return message


def build_format(
    mode: int,
    elems: int,
    data_type: InfoDtype,
    width: int,
    decimals: int = 0,
) -> bytes:
    """Build an INFO FORMAT message.

    Args:
        mode: Mode index (0-7).
        elems: Data elements per DATA message.
        data_type: Element data type.
        width: Display width in characters.
        decimals: Digits after the decimal point.
    """
    return _frame(
        frame_info_message_format, mode, elems, InfoDtype(data_type), width, decimals
    )


def build_data(mode: int, data: bytes) -> bytes:
    """Build a DATA message carrying sensor readings for ``mode``.

    Raises:
        LengthViolationError: If ``data`` is not 1-32 bytes long.
    """
    message = _frame(frame_data_message, mode, data)
    if not message:
        raise LengthViolationError(
            "Data payload", _length(data), PAYLOAD_MIN, PAYLOAD_SENSOR_TO_EV3_MAX
        )
    return message


# Builders keyed by message kind, taking keyword parameters
MESSAGE_BUILDERS: dict[MessageKind, Callable[..., bytes]] = {
    MessageKind.SYNC: lambda: build_sys(Sys.SYNC),
    MessageKind.NACK: lambda: build_sys(Sys.NACK),
    MessageKind.ACK: build_ack,
    MessageKind.ESC: lambda: build_sys(Sys.ESC),
    MessageKind.TYPE: build_type,
    MessageKind.MODES: build_modes,
    MessageKind.SPEED: build_speed,
    MessageKind.SELECT: build_select,
    MessageKind.WRITE: build_write,
    MessageKind.NAME: build_name,
    MessageKind.SPAN: build_span,
    MessageKind.SYMBOL: build_symbol,
    MessageKind.FORMAT: build_format,
    MessageKind.DATA: build_data,
}


def build_message(kind: MessageKind | str, **params: Any) -> bytes:
    """Build any message by kind.

    Args:
        kind: A :class:`MessageKind` or its value (e.g. ``"span"``).
        **params: Keyword arguments of the matching ``build_*`` function.

    Raises:
        ValueError: If ``kind`` is unknown.
        TypeError: If ``params`` do not match the builder's signature.
    """
    try:
        kind = MessageKind(kind)
    except ValueError:
        raise ValueError(
            f"Unknown message kind '{kind}'. Valid: {[k.value for k in MessageKind]}"
        ) from None
    return MESSAGE_BUILDERS[kind](**params)


def describe_message(message: bytes) -> dict[str, Any]:
    """Summarise a framed message for display."""
    return {
        "hex": message.hex(" "),
        "size": len(message),
        "header": f"0x{message[0]:02X}" if message else None,
    }
