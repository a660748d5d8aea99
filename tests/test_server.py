"""Tests for the MCP server tools."""

from __future__ import annotations

import sys
import tempfile
from pathlib import Path
from unittest.mock import MagicMock, patch

from ev3_uart_mcp.models.catalog import COLOR_SENSOR


def _get_server_module():
    """Import server module with FastMCP mocked to avoid init issues."""
    mock_fastmcp_cls = MagicMock()
    mock_fastmcp_instance = MagicMock()
    # Make the @mcp.tool() decorator a no-op that returns the function unchanged
    mock_fastmcp_instance.tool.return_value = lambda fn: fn
    mock_fastmcp_instance.resource.return_value = lambda fn: fn
    mock_fastmcp_instance.prompt.return_value = lambda fn: fn
    mock_fastmcp_cls.return_value = mock_fastmcp_instance

    with patch.dict(sys.modules, {}):
        with patch("mcp.server.fastmcp.FastMCP", mock_fastmcp_cls):
            # Remove cached server module so it re-imports with our mock
            sys.modules.pop("ev3_uart_mcp.server", None)
            import ev3_uart_mcp.server as server_mod

    return server_mod


def test_encode_symbol_message():
    server = _get_server_module()
    result = server.encode_message("symbol", {"mode": 2, "symbol": "col"})
    assert result["hex"] == "9a 04 63 6f 6c 00 00 00 00 00 01"
    assert result["size"] == 11
    assert result["kind"] == "symbol"


def test_encode_span_by_name():
    server = _get_server_module()
    result = server.encode_message(
        "span", {"mode": 0, "span_type": "raw", "lower": 0, "upper": 100}
    )
    assert result["size"] == 11
    assert result["header"] == "0x98"


def test_encode_rejects_empty_write():
    server = _get_server_module()
    result = server.encode_message("write", {"data": ""})
    assert "error" in result


def test_encode_rejects_numeric_data():
    """A JSON number for data is an error, not a run of NUL bytes."""
    server = _get_server_module()
    result = server.encode_message("data", {"mode": 0, "data": 3})
    assert "error" in result
    assert "hex" not in result


def test_encode_unknown_kind():
    server = _get_server_module()
    assert "error" in server.encode_message("bogus")


def test_build_handshake():
    server = _get_server_module()
    result = server.build_handshake("color")
    assert result["size"] == 311
    assert result["message_count"] == 31
    assert result["messages"][-1] == "04"


def test_build_handshake_unknown_sensor():
    server = _get_server_module()
    assert "error" in server.build_handshake("gyro-x")


def test_build_data_message_for_sensor():
    server = _get_server_module()
    assert server.build_data_message(0, "32", sensor="color")["hex"] == "c0 32 0d"
    assert "error" in server.build_data_message(7, "32", sensor="color")


def test_send_handshake_switches_speed():
    server = _get_server_module()
    mock_conn = MagicMock()
    mock_conn.send_messages.return_value = 311
    mock_conn.port_info.baudrate = 57600

    with patch.object(server, "_get_connection", return_value=mock_conn):
        result = server.send_handshake("color", inter_message_delay=0)

    sent = mock_conn.send_messages.call_args.args[0]
    assert b"".join(sent) == COLOR_SENSOR.to_bitstream()
    mock_conn.set_baudrate.assert_called_once_with(57600)
    assert result == {"sent": True, "bytes": 311, "baudrate": 57600}


def test_send_data_rejects_before_sending():
    server = _get_server_module()
    mock_conn = MagicMock()

    with patch.object(server, "_get_connection", return_value=mock_conn):
        result = server.send_data(0, "")

    assert "error" in result
    mock_conn.write.assert_not_called()


def test_definition_import_registers_sensor():
    server = _get_server_module()
    with tempfile.TemporaryDirectory() as tmp:
        path = Path(tmp) / "color.json"
        assert server.export_sensor_definition("color", str(path))["name"] == COLOR_SENSOR.name

        result = server.import_sensor_definition(str(path))
        assert result["imported"] is True

    keys = [s["key"] for s in server.list_sensors()["sensors"]]
    assert COLOR_SENSOR.name in keys
    assert server.build_handshake(COLOR_SENSOR.name)["size"] == 311


def test_import_missing_file():
    server = _get_server_module()
    assert "error" in server.import_sensor_definition("/nonexistent/sensor.json")


def test_export_bitstream_tool():
    server = _get_server_module()
    with tempfile.TemporaryDirectory() as tmp:
        result = server.export_sensor_bitstream("color", str(Path(tmp) / "color.bin"))
    assert result["size"] == 311
