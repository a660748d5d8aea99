"""Serial link to an EV3 input port.

EV3 UART sensors start talking at 2400 baud. After the sensor's ACK and the
brick's reply, both sides switch to the speed announced in the SPEED
message. This connection only transmits: framed messages go out as-is.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass

import serial

logger = logging.getLogger(__name__)

HANDSHAKE_BAUDRATE = 2400
WRITE_TIMEOUT_S = 1.0


@dataclass
class PortInfo:
    """Settings of the open serial port."""

    port: str = ""
    baudrate: int = HANDSHAKE_BAUDRATE


class SerialConnection:
    """Manages the serial connection used to emit sensor messages.

    Usage::

        conn = SerialConnection("/dev/ttyUSB0")
        conn.open()
        conn.write(COLOR_SENSOR.to_bitstream())
        conn.set_baudrate(57600)
        conn.close()
    """

    def __init__(self, port: str, baudrate: int = HANDSHAKE_BAUDRATE) -> None:
        self._port_info = PortInfo(port=port, baudrate=baudrate)
        self._serial: serial.Serial | None = None

    @property
    def connected(self) -> bool:
        return self._serial is not None and self._serial.is_open

    @property
    def port_info(self) -> PortInfo:
        return self._port_info

    def open(self) -> PortInfo:
        """Open the serial port (8N1).

        Raises:
            ConnectionError: If the port cannot be opened.
        """
        try:
            self._serial = serial.Serial(
                port=self._port_info.port,
                baudrate=self._port_info.baudrate,
                bytesize=serial.EIGHTBITS,
                parity=serial.PARITY_NONE,
                stopbits=serial.STOPBITS_ONE,
                write_timeout=WRITE_TIMEOUT_S,
            )
        except serial.SerialException as e:
            raise ConnectionError(
                f"Could not open {self._port_info.port} "
                f"at {self._port_info.baudrate} baud: {e}"
            ) from e

        logger.info(
            "Opened %s at %d baud", self._port_info.port, self._port_info.baudrate
        )
        return self._port_info

    def close(self) -> None:
        """Close the serial port."""
        if self._serial is None:
            return

        try:
            self._serial.close()
        except serial.SerialException as e:
            logger.warning("Error closing port: %s", e)
        finally:
            self._serial = None
            logger.info("Disconnected")

    def set_baudrate(self, baudrate: int) -> None:
        """Switch to a new baud rate, typically the one sent in SPEED."""
        self._port_info.baudrate = baudrate
        if self._serial is not None:
            self._serial.baudrate = baudrate
        logger.info("Baud rate set to %d", baudrate)

    def write(self, data: bytes) -> int:
        """Write framed message bytes to the port.

        Returns:
            Number of bytes written.

        Raises:
            ConnectionError: If not connected.
        """
        if not self.connected:
            raise ConnectionError("Not connected to a serial port")

        written = self._serial.write(data)
        self._serial.flush()
        logger.debug("Wrote %d bytes: %s", written, data.hex(" "))
        return written

    def send_messages(
        self,
        messages: list[bytes],
        inter_message_delay: float = 0.0,
    ) -> int:
        """Write several framed messages one after another.

        Args:
            messages: Framed messages, in send order.
            inter_message_delay: Delay in seconds between messages.

        Returns:
            Total number of bytes written.
        """
        total = 0
        for i, message in enumerate(messages):
            total += self.write(message)
            if inter_message_delay and i < len(messages) - 1:
                time.sleep(inter_message_delay)
        return total
