"""
Custom exceptions for the EV3 UART message generator.
"""


class EV3UartError(Exception):
    """Base exception for EV3 UART errors."""
    pass


class LengthViolationError(EV3UartError, ValueError):
    """A payload, name or symbol length falls outside its bound."""

    def __init__(self, field: str, length: int, minimum: int, maximum: int):
        self.field = field
        self.length = length
        self.minimum = minimum
        self.maximum = maximum
        super().__init__(
            f"{field} length must be {minimum}-{maximum} bytes, got {length}"
        )


class BufferTooSmallError(EV3UartError, IndexError):
    """Destination buffer cannot hold the framed message."""

    def __init__(self, needed: int, available: int):
        self.needed = needed
        self.available = available
        super().__init__(
            f"Message needs {needed} bytes, destination has {available}"
        )


class UnsupportedByteOrderError(EV3UartError):
    """Host byte order cannot be normalised to the wire order."""

    def __init__(self, byteorder: str):
        self.byteorder = byteorder
        super().__init__(f"Unsupported byte order: {byteorder!r}")


class UnsupportedPlatformError(EV3UartError):
    """Host does not meet the float or byte-order preconditions."""
    pass
