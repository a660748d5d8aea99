"""Transport layer: serial output of framed messages."""

from .serial_connection import SerialConnection
