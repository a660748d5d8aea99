"""Tests for sensor definition and bitstream files."""

import json
import tempfile
from pathlib import Path

import pytest

from ev3_uart_mcp.models.catalog import COLOR_SENSOR
from ev3_uart_mcp.models.file_formats import (
    DEFINITION_FORMAT,
    export_bitstream,
    export_definition,
    import_definition,
)


def test_definition_roundtrip():
    """Export and re-import a sensor definition."""
    with tempfile.NamedTemporaryFile(suffix=".json", delete=False) as f:
        path = export_definition(COLOR_SENSOR, f.name)

    restored = import_definition(path)
    assert restored.name == COLOR_SENSOR.name
    assert restored.to_bitstream() == COLOR_SENSOR.to_bitstream()
    Path(path).unlink()


def test_definition_file_header():
    with tempfile.NamedTemporaryFile(suffix=".json", delete=False) as f:
        path = export_definition(COLOR_SENSOR, f.name)

    document = json.loads(Path(path).read_text())
    assert document["format"] == DEFINITION_FORMAT
    assert document["version"] == 1
    assert document["sensor"]["type_id"] == 0x1D
    Path(path).unlink()


def test_import_rejects_foreign_json():
    with tempfile.NamedTemporaryFile("w", suffix=".json", delete=False) as f:
        json.dump({"hello": "world"}, f)

    with pytest.raises(ValueError):
        import_definition(f.name)
    Path(f.name).unlink()


def test_import_rejects_malformed_sensor():
    with tempfile.NamedTemporaryFile("w", suffix=".json", delete=False) as f:
        json.dump({"format": DEFINITION_FORMAT, "version": 1, "sensor": {"modes": []}}, f)

    with pytest.raises(ValueError):
        import_definition(f.name)
    Path(f.name).unlink()


def test_export_bitstream():
    with tempfile.NamedTemporaryFile(suffix=".bin", delete=False) as f:
        path = export_bitstream(COLOR_SENSOR, f.name)

    data = Path(path).read_bytes()
    assert len(data) == 311
    assert data == COLOR_SENSOR.to_bitstream()
    Path(path).unlink()
