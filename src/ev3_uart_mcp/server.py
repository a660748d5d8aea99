"""MCP server entry point for the EV3 UART message generator.

Exposes the message builders, the sensor catalog and a serial transport via
the Model Context Protocol using the official Python MCP SDK with stdio
transport.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any

from mcp.server.fastmcp import FastMCP

from .exceptions import EV3UartError
from .models.catalog import SENSOR_CATALOG
from .models.file_formats import export_bitstream, export_definition, import_definition
from .models.sensor import SensorDefinition
from .protocol.magics import (
    BUFFER_MIN,
    PAYLOAD_EV3_TO_SENSOR_MAX,
    PAYLOAD_MIN,
    PAYLOAD_SENSOR_TO_EV3_MAX,
    SYMBOL_MAX,
    Base,
    Cmd,
    Info,
    InfoDtype,
    InfoSpan,
    MessageKind,
    Sys,
)
from .protocol.messages import build_data, build_message, describe_message
from .transport.serial_connection import HANDSHAKE_BAUDRATE, SerialConnection

logger = logging.getLogger(__name__)

mcp = FastMCP(
    "ev3-uart",
    instructions="Frames EV3 UART sensor protocol messages and sends them over serial.",
)

# Global connection state
_connection: SerialConnection | None = None
# Definitions imported or registered during this session, by name
_definitions: dict[str, SensorDefinition] = {}


def _get_connection() -> SerialConnection:
    """Get the active serial connection, raising if not connected."""
    if _connection is None or not _connection.connected:
        raise RuntimeError(
            "Not connected to a serial port. Use the 'connect' tool first."
        )
    return _connection


def _get_definition(sensor: str) -> SensorDefinition | None:
    return _definitions.get(sensor) or SENSOR_CATALOG.get(sensor)


def _enum_param(enum_cls, value):
    """Accept an enum member name (any case) or its integer value."""
    if isinstance(value, str):
        return enum_cls[value.upper()]
    return enum_cls(value)


def _hex_bytes(data: str) -> bytes:
    return bytes.fromhex(data.replace(" ", ""))


# ─── ENCODING TOOLS ───────────────────────────────────────────────────

@mcp.tool()
def encode_message(kind: str, params: dict[str, Any] | None = None) -> dict[str, Any]:
    """Frame a single protocol message.

    Args:
        kind: Message kind: sync, nack, ack, esc, type, modes, speed, select,
            write, name, span, symbol, format or data.
        params: Keyword parameters for the message, e.g.
            {"mode": 2, "symbol": "col"} for a symbol message. ``data`` is
            given as a hex string; ``span_type`` and ``data_type`` by name.
    """
    params = dict(params or {})
    try:
        if "data" in params:
            if not isinstance(params["data"], str):
                return {"error": "'data' must be a hex string"}
            params["data"] = _hex_bytes(params["data"])
        if "span_type" in params:
            params["span_type"] = _enum_param(InfoSpan, params["span_type"])
        if "data_type" in params:
            params["data_type"] = _enum_param(InfoDtype, params["data_type"])
        message = build_message(kind, **params)
    except (EV3UartError, ValueError, KeyError, TypeError) as e:
        return {"error": str(e)}

    result = describe_message(message)
    result["kind"] = kind
    return result


@mcp.tool()
def build_handshake(sensor: str = "color") -> dict[str, Any]:
    """Frame the full initialisation handshake of a known sensor.

    Args:
        sensor: Catalog key (e.g. "color") or the name of an imported definition.
    """
    definition = _get_definition(sensor)
    if definition is None:
        return {"error": f"Unknown sensor '{sensor}'"}

    messages = list(definition.handshake_messages())
    bitstream = b"".join(messages)
    return {
        "sensor": definition.name,
        "message_count": len(messages),
        "size": len(bitstream),
        "messages": [m.hex(" ") for m in messages],
    }


@mcp.tool()
def build_data_message(mode: int, data: str, sensor: str | None = None) -> dict[str, Any]:
    """Frame a DATA message carrying sensor readings.

    Args:
        mode: Mode index (0-7).
        data: Reading bytes as a hex string, 1-32 bytes.
        sensor: Optional sensor; if given, the mode must exist on it.
    """
    try:
        payload = _hex_bytes(data)
        if sensor is not None:
            definition = _get_definition(sensor)
            if definition is None:
                return {"error": f"Unknown sensor '{sensor}'"}
            message = definition.data_message(mode, payload)
        else:
            message = build_data(mode, payload)
    except (EV3UartError, ValueError, KeyError) as e:
        return {"error": str(e)}
    return describe_message(message)


# ─── SENSOR DEFINITION TOOLS ──────────────────────────────────────────

@mcp.tool()
def list_sensors() -> dict[str, Any]:
    """List catalog sensors and definitions imported in this session."""
    sensors = [
        {"key": key, "name": d.name, "type_id": d.type_id, "modes": len(d.modes)}
        for key, d in {**SENSOR_CATALOG, **_definitions}.items()
    ]
    return {"sensors": sensors}


@mcp.tool()
def get_sensor(sensor: str) -> dict[str, Any]:
    """Return the full definition of a sensor."""
    definition = _get_definition(sensor)
    if definition is None:
        return {"error": f"Unknown sensor '{sensor}'"}
    return definition.to_dict()


@mcp.tool()
def export_sensor_definition(sensor: str, output_path: str) -> dict[str, Any]:
    """Export a sensor definition to a JSON file.

    Args:
        sensor: Catalog key or imported definition name.
        output_path: Output .json file path.
    """
    definition = _get_definition(sensor)
    if definition is None:
        return {"error": f"Unknown sensor '{sensor}'"}
    path = export_definition(definition, output_path)
    return {"path": str(path), "name": definition.name}


@mcp.tool()
def import_sensor_definition(input_path: str) -> dict[str, Any]:
    """Load a sensor definition from a JSON file for use in this session.

    Args:
        input_path: Path to the .json definition.
    """
    if not Path(input_path).exists():
        return {"error": f"File not found: {input_path}"}
    try:
        definition = import_definition(input_path)
    except ValueError as e:
        return {"error": str(e)}

    _definitions[definition.name] = definition
    logger.info("Imported sensor definition %s", definition.name)
    return {"imported": True, "name": definition.name, "modes": len(definition.modes)}


@mcp.tool()
def export_sensor_bitstream(sensor: str, output_path: str) -> dict[str, Any]:
    """Write a sensor's handshake bitstream to a binary file.

    Args:
        sensor: Catalog key or imported definition name.
        output_path: Output .bin file path.
    """
    definition = _get_definition(sensor)
    if definition is None:
        return {"error": f"Unknown sensor '{sensor}'"}
    path = export_bitstream(definition, output_path)
    return {"path": str(path), "size": path.stat().st_size}


# ─── CONNECTION TOOLS ─────────────────────────────────────────────────

@mcp.tool()
def connect(port: str, baudrate: int = HANDSHAKE_BAUDRATE) -> dict[str, Any]:
    """Open the serial port wired to the EV3 input port.

    Args:
        port: Serial device, e.g. /dev/ttyUSB0 or COM3.
        baudrate: Initial baud rate (EV3 sensors start at 2400).
    """
    global _connection
    if _connection is not None and _connection.connected:
        return {
            "connected": True,
            "message": "Already connected",
            "port": _connection.port_info.port,
        }

    _connection = SerialConnection(port, baudrate)
    info = _connection.open()
    return {"connected": True, "port": info.port, "baudrate": info.baudrate}


@mcp.tool()
def disconnect() -> dict[str, bool]:
    """Close the serial port."""
    global _connection
    if _connection is None:
        return {"disconnected": True}
    _connection.close()
    _connection = None
    return {"disconnected": True}


@mcp.tool()
def send_handshake(
    sensor: str = "color",
    inter_message_delay: float = 0.01,
    switch_speed: bool = True,
) -> dict[str, Any]:
    """Send a sensor's handshake over the serial port.

    Args:
        sensor: Catalog key or imported definition name.
        inter_message_delay: Delay in seconds between messages.
        switch_speed: Switch the port to the sensor's speed after the ACK.
    """
    definition = _get_definition(sensor)
    if definition is None:
        return {"error": f"Unknown sensor '{sensor}'"}

    conn = _get_connection()
    messages = list(definition.handshake_messages())
    written = conn.send_messages(messages, inter_message_delay)
    if switch_speed:
        conn.set_baudrate(definition.speed)
    logger.info("Sent %s handshake (%d bytes)", definition.name, written)
    return {"sent": True, "bytes": written, "baudrate": conn.port_info.baudrate}


@mcp.tool()
def send_data(mode: int, data: str) -> dict[str, Any]:
    """Send a DATA message with readings for a mode.

    Args:
        mode: Mode index (0-7).
        data: Reading bytes as a hex string, 1-32 bytes.
    """
    try:
        message = build_data(mode, _hex_bytes(data))
    except (EV3UartError, ValueError) as e:
        return {"error": str(e)}

    conn = _get_connection()
    written = conn.write(message)
    return {"sent": True, "bytes": written}


# ─── MCP RESOURCES ───────────────────────────────────────────────────

@mcp.resource("ev3uart://protocol/constants")
def resource_constants() -> str:
    """Header bases, sub-types, selectors and size bounds."""
    return json.dumps({
        "base": {m.name: m.value for m in Base},
        "system": {m.name: m.value for m in Sys},
        "command": {m.name: m.value for m in Cmd},
        "info": {m.name: m.value for m in Info},
        "span": {m.name: m.value for m in InfoSpan},
        "data_type": {m.name: m.value for m in InfoDtype},
        "bounds": {
            "payload_min": PAYLOAD_MIN,
            "payload_sensor_to_ev3_max": PAYLOAD_SENSOR_TO_EV3_MAX,
            "payload_ev3_to_sensor_max": PAYLOAD_EV3_TO_SENSOR_MAX,
            "symbol_max": SYMBOL_MAX,
            "buffer_min": BUFFER_MIN,
        },
    })


@mcp.resource("ev3uart://protocol/kinds")
def resource_message_kinds() -> str:
    """Every message kind with its category."""
    kinds = [{"kind": k.value, "category": k.category.name.lower()} for k in MessageKind]
    return json.dumps({"kinds": kinds})


@mcp.resource("ev3uart://catalog/sensors")
def resource_sensor_catalog() -> str:
    """Reference sensor definitions."""
    return json.dumps({key: d.to_dict() for key, d in SENSOR_CATALOG.items()})


@mcp.resource("ev3uart://connection/status")
def resource_connection_status() -> str:
    """Serial connection state."""
    if _connection is None or not _connection.connected:
        return json.dumps({"connected": False})
    info = _connection.port_info
    return json.dumps({"connected": True, "port": info.port, "baudrate": info.baudrate})


# ─── ENTRY POINT ─────────────────────────────────────────────────────

def main():
    """Run the MCP server with stdio transport."""
    logging.basicConfig(level=logging.INFO)
    mcp.run(transport="stdio")


if __name__ == "__main__":
    main()
