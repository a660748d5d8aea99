"""Tests for the bytes-returning message builders."""

import pytest

from ev3_uart_mcp.exceptions import LengthViolationError
from ev3_uart_mcp.protocol.magics import Base, InfoDtype, InfoSpan, MessageKind, Sys
from ev3_uart_mcp.protocol.messages import (
    MESSAGE_BUILDERS,
    build_ack,
    build_data,
    build_format,
    build_message,
    build_modes,
    build_name,
    build_select,
    build_span,
    build_speed,
    build_symbol,
    build_sys,
    build_type,
    build_write,
    describe_message,
)


def test_build_sys():
    assert build_sys(Sys.SYNC) == b"\x00"
    assert build_sys(Sys.NACK) == b"\x02"
    assert build_ack() == b"\x04"


def test_build_type():
    """TYPE for the colour sensor (29)."""
    assert build_type(0x1D) == bytes([0x40, 0x1D, 0xA2])


def test_build_modes():
    assert build_modes(5, 2) == bytes([0x49, 0x05, 0x02, 0xB1])


def test_build_speed():
    assert build_speed(57600) == bytes([0x52, 0x00, 0xE1, 0x00, 0x00, 0x4C])


def test_build_select():
    message = build_select(10)
    assert message[:2] == bytes([0x43, 0x02])
    assert len(message) == 3


def test_build_write_pads_payload():
    message = build_write(b"\x01\x02\x03")
    assert len(message) == 6
    assert message[:5] == bytes([0x54, 0x01, 0x02, 0x03, 0x00])


def test_build_write_rejects_empty():
    with pytest.raises(LengthViolationError) as exc_info:
        build_write(b"")
    assert exc_info.value.length == 0
    assert exc_info.value.maximum == 24


def test_build_write_rejects_oversize():
    """Host-to-device payloads stop at 24 bytes."""
    with pytest.raises(ValueError):
        build_write(bytes(25))


def test_build_name():
    message = build_name(0, "COL-REFLECT")
    assert len(message) == 19
    assert message[0] == 0xA0
    assert message[2:13] == b"COL-REFLECT"


def test_build_name_rejects_missing():
    with pytest.raises(LengthViolationError):
        build_name(0, None)
    with pytest.raises(LengthViolationError):
        build_name(0, "")


def test_build_span():
    message = build_span(4, InfoSpan.SI, 0, 1020.188)
    assert len(message) == 11
    assert message[:2] == bytes([0x9C, 0x03])


def test_build_symbol():
    assert build_symbol(2, "col") == bytes(
        [0x9A, 0x04, 0x63, 0x6F, 0x6C, 0, 0, 0, 0, 0, 0x01]
    )


def test_build_symbol_rejects_long_symbol():
    with pytest.raises(LengthViolationError) as exc_info:
        build_symbol(0, "toolongsym")
    assert exc_info.value.length == 10
    assert "Symbol" in str(exc_info.value)


def test_build_format():
    message = build_format(1, 1, InfoDtype.S8, 3)
    assert len(message) == 7
    assert message[:6] == bytes([0x91, 0x80, 0x01, 0x00, 0x03, 0x00])


def test_build_data():
    assert build_data(0, b"\x32") == bytes([0xC0, 0x32, 0x0D])


def test_build_data_rejects_oversize():
    with pytest.raises(LengthViolationError):
        build_data(0, bytes(33))


def test_every_kind_has_a_builder():
    assert set(MESSAGE_BUILDERS) == set(MessageKind)


def test_build_message_by_kind():
    assert build_message("ack") == b"\x04"
    assert build_message(MessageKind.SPEED, speed=57600) == build_speed(57600)
    assert build_message("symbol", mode=2, symbol="col") == build_symbol(2, "col")


def test_build_message_unknown_kind():
    with pytest.raises(ValueError):
        build_message("bogus")


def test_build_message_missing_params():
    with pytest.raises(TypeError):
        build_message("type")


def test_message_kind_categories():
    assert MessageKind.ESC.category is Base.SYSTEM
    assert MessageKind.WRITE.category is Base.COMMAND
    assert MessageKind.FORMAT.category is Base.INFO
    assert MessageKind.DATA.category is Base.DATA


def test_describe_message():
    info = describe_message(build_type(0x1D))
    assert info == {"hex": "40 1d a2", "size": 3, "header": "0x40"}


def test_builders_reject_non_buffer_payloads():
    with pytest.raises(TypeError):
        build_data(0, 5)
    with pytest.raises(TypeError):
        build_name(0, 3)
