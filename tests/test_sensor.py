"""Tests for sensor definitions and the reference catalog."""

import pytest

from ev3_uart_mcp.exceptions import LengthViolationError
from ev3_uart_mcp.models.catalog import COLOR_SENSOR, SENSOR_CATALOG
from ev3_uart_mcp.models.sensor import ModeFormat, SensorDefinition, SensorMode, Span
from ev3_uart_mcp.protocol.magics import InfoDtype, InfoSpan


def _two_mode_sensor(**kwargs) -> SensorDefinition:
    return SensorDefinition(
        name="Test Sensor",
        type_id=0x7F,
        modes=[
            SensorMode(index=0, name="A", raw=Span(0, 10)),
            SensorMode(index=3, name="B", symbol="mm"),
        ],
        **kwargs,
    )


def test_color_sensor_bitstream_size():
    """The colour sensor handshake is 311 bytes."""
    assert len(COLOR_SENSOR.to_bitstream()) == 311


def test_color_sensor_message_count():
    assert len(list(COLOR_SENSOR.handshake_messages())) == 31


def test_handshake_order():
    """TYPE, MODES and SPEED first, ACK last, modes highest first."""
    messages = list(COLOR_SENSOR.handshake_messages())
    assert messages[0] == bytes([0x40, 0x1D, 0xA2])
    assert messages[1] == bytes([0x49, 0x05, 0x02, 0xB1])
    assert messages[2] == bytes([0x52, 0x00, 0xE1, 0x00, 0x00, 0x4C])
    assert messages[3][2:9] == b"COL-CAL"
    assert messages[3][0] & 0x07 == 5
    assert messages[-1] == b"\x04"


def test_mode_messages_order():
    mode = COLOR_SENSOR.get_mode(2)
    messages = list(mode.to_messages())
    assert [m[1] for m in messages] == [0x00, 0x01, 0x03, 0x04, 0x80]


def test_spans_follow_raw_pct_si_order():
    mode = SensorMode(index=0, name="X", si=Span(0, 1), raw=Span(0, 2), pct=Span(0, 3))
    assert [span_type for span_type, _ in mode.spans()] == [
        InfoSpan.RAW, InfoSpan.PCT, InfoSpan.SI,
    ]


def test_modes_visible_defaults_to_highest_mode():
    sensor = _two_mode_sensor()
    assert sensor.highest_mode == 3
    assert sensor.modes_visible == 3


def test_modes_message_for_sparse_modes():
    sensor = _two_mode_sensor(modes_visible=0)
    assert list(sensor.handshake_messages())[1][1:3] == bytes([3, 0])


def test_definition_requires_modes():
    with pytest.raises(ValueError):
        SensorDefinition(name="Empty", type_id=1, modes=[])


def test_definition_rejects_bad_mode_index():
    with pytest.raises(ValueError):
        SensorDefinition(name="Bad", type_id=1, modes=[SensorMode(index=8, name="X")])


def test_definition_rejects_duplicate_modes():
    with pytest.raises(ValueError):
        SensorDefinition(
            name="Dup",
            type_id=1,
            modes=[SensorMode(index=1, name="X"), SensorMode(index=1, name="Y")],
        )


def test_bad_mode_name_surfaces_at_framing():
    sensor = SensorDefinition(name="Long", type_id=1, modes=[SensorMode(0, "N" * 33)])
    with pytest.raises(LengthViolationError):
        sensor.to_bitstream()


def test_data_message():
    assert COLOR_SENSOR.data_message(0, b"\x32") == bytes([0xC0, 0x32, 0x0D])


def test_data_message_unknown_mode():
    with pytest.raises(KeyError):
        COLOR_SENSOR.data_message(7, b"\x00")


def test_dict_roundtrip():
    restored = SensorDefinition.from_dict(COLOR_SENSOR.to_dict())
    assert restored == COLOR_SENSOR
    assert restored.to_bitstream() == COLOR_SENSOR.to_bitstream()


def test_mode_format_dict():
    fmt = ModeFormat(4, InfoDtype.S16, 5, 0)
    assert fmt.to_dict()["data_type"] == "S16"
    assert ModeFormat.from_dict(fmt.to_dict()) == fmt


def test_catalog_keys():
    assert SENSOR_CATALOG["color"] is COLOR_SENSOR
