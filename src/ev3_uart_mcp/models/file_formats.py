"""File format handlers for sensor definitions and handshake bitstreams.

.json — Sensor definition (type id, speed, modes with names, spans, formats)
.bin  — Raw handshake bitstream, exactly as sent on the wire
"""

from __future__ import annotations

import json
from pathlib import Path

from .sensor import SensorDefinition

DEFINITION_FORMAT = "ev3-uart-sensor"
DEFINITION_VERSION = 1


def export_definition(definition: SensorDefinition, path: str | Path) -> Path:
    """Export a sensor definition to a JSON file.

    Args:
        definition: The sensor definition to export.
        path: Output file path.

    Returns:
        The path written to.
    """
    path = Path(path)
    document = {
        "format": DEFINITION_FORMAT,
        "version": DEFINITION_VERSION,
        "sensor": definition.to_dict(),
    }
    path.write_text(json.dumps(document, indent=2) + "\n", encoding="utf-8")
    return path


def import_definition(path: str | Path) -> SensorDefinition:
    """Import a sensor definition from a JSON file.

    Args:
        path: Path to the .json file.

    Returns:
        The parsed SensorDefinition.

    Raises:
        ValueError: If the file is not a sensor definition, or describes
            an invalid sensor.
    """
    path = Path(path)
    document = json.loads(path.read_text(encoding="utf-8"))
    if not isinstance(document, dict) or document.get("format") != DEFINITION_FORMAT:
        raise ValueError(f"{path} is not an {DEFINITION_FORMAT} definition")
    version = document.get("version")
    if version != DEFINITION_VERSION:
        raise ValueError(
            f"Unsupported definition version {version!r} "
            f"(expected {DEFINITION_VERSION})"
        )
    try:
        return SensorDefinition.from_dict(document["sensor"])
    except (KeyError, TypeError) as e:
        raise ValueError(f"Malformed sensor definition in {path}: {e}") from e


def export_bitstream(definition: SensorDefinition, path: str | Path) -> Path:
    """Write a sensor's full handshake bitstream to a binary file.

    Returns:
        The path written to.
    """
    path = Path(path)
    path.write_bytes(definition.to_bitstream())
    return path
