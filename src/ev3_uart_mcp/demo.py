"""Frame the initialisation bitstream of an EV3 colour sensor.

Places every handshake message back to back in one buffer, the way sensor
firmware would, and prints the total number of bytes.
"""

from __future__ import annotations

import argparse
import logging

from .exceptions import LengthViolationError
from .models.catalog import SENSOR_CATALOG
from .models.sensor import SensorDefinition
from .protocol.framing import (
    MessageBuffer,
    frame_cmd_modes_message,
    frame_cmd_speed_message,
    frame_cmd_type_message,
    frame_info_message_format,
    frame_info_message_name,
    frame_info_message_span,
    frame_info_message_symbol,
    frame_sys_message,
    payload_bytes,
)
from .protocol.magics import PAYLOAD_MIN, PAYLOAD_SENSOR_TO_EV3_MAX, SYMBOL_MAX, Sys

logger = logging.getLogger(__name__)

DEMO_BUFFER_SIZE = 1024


# Encoders in the handshake that can reject their payload
_PAYLOAD_BOUNDS = {
    frame_info_message_name: ("Mode name", PAYLOAD_SENSOR_TO_EV3_MAX),
    frame_info_message_symbol: ("Symbol", SYMBOL_MAX),
}


def _append_checked(buf: MessageBuffer, encoder, mode: int, payload) -> int:
    written = buf.append(encoder, mode, payload)
    if written < 0:
        field, maximum = _PAYLOAD_BOUNDS[encoder]
        raise LengthViolationError(
            field, len(payload_bytes(payload)), PAYLOAD_MIN, maximum
        )
    return written


def write_handshake(buf: MessageBuffer, definition: SensorDefinition) -> int:
    """Frame a sensor's handshake into ``buf`` and return the bytes added.

    Raises:
        LengthViolationError: If a mode name or symbol is out of bounds.
    """
    start = len(buf)
    buf.append(frame_cmd_type_message, definition.type_id)
    buf.append(frame_cmd_modes_message, definition.highest_mode, definition.modes_visible)
    buf.append(frame_cmd_speed_message, definition.speed)

    for mode in sorted(definition.modes, key=lambda m: m.index, reverse=True):
        _append_checked(buf, frame_info_message_name, mode.index, mode.name)
        for span_type, span in mode.spans():
            buf.append(frame_info_message_span, mode.index, span_type, span.lower, span.upper)
        if mode.symbol:
            _append_checked(buf, frame_info_message_symbol, mode.index, mode.symbol)
        fmt = mode.format
        buf.append(
            frame_info_message_format,
            mode.index, fmt.elements, fmt.data_type, fmt.width, fmt.decimals,
        )

    buf.append(frame_sys_message, Sys.ACK)
    return len(buf) - start


def main(argv: list[str] | None = None) -> int:
    """Print the size of a catalog sensor's handshake bitstream."""
    parser = argparse.ArgumentParser(description=__doc__.splitlines()[0])
    parser.add_argument(
        "sensor", nargs="?", default="color", choices=sorted(SENSOR_CATALOG),
    )
    parser.add_argument(
        "--hex", action="store_true", help="also print the bitstream as hex",
    )
    args = parser.parse_args(argv)

    logging.basicConfig(level=logging.INFO)
    definition = SENSOR_CATALOG[args.sensor]
    buf = MessageBuffer(size=DEMO_BUFFER_SIZE)
    total = write_handshake(buf, definition)
    logger.info("Framed %s handshake", definition.name)

    print(total)
    if args.hex:
        print(buf.getvalue().hex(" "))
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
