"""Sensor definition model: the data a UART sensor announces during its handshake.

Handshake order::

    TYPE -> MODES -> SPEED -> for each mode, highest index first:
        NAME -> SPAN (RAW, PCT, SI) -> SYMBOL -> FORMAT
    -> ACK

Spans and symbols are optional per mode. The protocol itself does not enforce
this order; it is the sequence real LEGO sensors send.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, ClassVar, Iterator

from ..protocol.magics import MODE_MASK, InfoDtype, InfoSpan
from ..protocol.messages import (
    build_ack,
    build_data,
    build_format,
    build_modes,
    build_name,
    build_span,
    build_speed,
    build_symbol,
    build_type,
)

DEFAULT_SPEED = 57600


@dataclass
class Span:
    """Lower and upper bound of a mode's readings in one unit system."""

    lower: float = 0.0
    upper: float = 0.0

    def to_dict(self) -> dict:
        return {"lower": self.lower, "upper": self.upper}

    @classmethod
    def from_dict(cls, data: dict) -> Span:
        return cls(lower=float(data["lower"]), upper=float(data["upper"]))


@dataclass
class ModeFormat:
    """Layout of DATA messages and display format for one mode."""

    elements: int = 1
    data_type: InfoDtype = InfoDtype.S8
    width: int = 3
    decimals: int = 0

    def to_dict(self) -> dict:
        return {
            "elements": self.elements,
            "data_type": self.data_type.name,
            "width": self.width,
            "decimals": self.decimals,
        }

    @classmethod
    def from_dict(cls, data: dict) -> ModeFormat:
        return cls(
            elements=int(data.get("elements", 1)),
            data_type=InfoDtype[data.get("data_type", "S8")],
            width=int(data.get("width", 3)),
            decimals=int(data.get("decimals", 0)),
        )


@dataclass
class SensorMode:
    """One operating mode of a sensor."""

    SPAN_ORDER: ClassVar[tuple[InfoSpan, ...]] = (InfoSpan.RAW, InfoSpan.PCT, InfoSpan.SI)

    index: int
    name: str
    format: ModeFormat = field(default_factory=ModeFormat)
    raw: Span | None = None
    pct: Span | None = None
    si: Span | None = None
    symbol: str | None = None

    def spans(self) -> list[tuple[InfoSpan, Span]]:
        """Return the spans that are set, in handshake order."""
        spans = []
        for span_type in self.SPAN_ORDER:
            span = getattr(self, span_type.name.lower())
            if span is not None:
                spans.append((span_type, span))
        return spans

    def to_messages(self) -> Iterator[bytes]:
        """Yield the INFO messages that describe this mode."""
        yield build_name(self.index, self.name)
        for span_type, span in self.spans():
            yield build_span(self.index, span_type, span.lower, span.upper)
        if self.symbol:
            yield build_symbol(self.index, self.symbol)
        fmt = self.format
        yield build_format(
            self.index, fmt.elements, fmt.data_type, fmt.width, fmt.decimals
        )

    def to_dict(self) -> dict:
        d: dict[str, Any] = {
            "index": self.index,
            "name": self.name,
            "format": self.format.to_dict(),
        }
        for span_type, span in self.spans():
            d[span_type.name.lower()] = span.to_dict()
        if self.symbol:
            d["symbol"] = self.symbol
        return d

    @classmethod
    def from_dict(cls, data: dict) -> SensorMode:
        spans = {
            key: Span.from_dict(data[key])
            for key in ("raw", "pct", "si")
            if data.get(key) is not None
        }
        return cls(
            index=int(data["index"]),
            name=data["name"],
            format=ModeFormat.from_dict(data.get("format", {})),
            symbol=data.get("symbol") or None,
            **spans,
        )


@dataclass
class SensorDefinition:
    """Everything a sensor announces to the EV3 during its handshake."""

    name: str
    type_id: int
    modes: list[SensorMode] = field(default_factory=list)
    modes_visible: int | None = None
    speed: int = DEFAULT_SPEED

    def __post_init__(self) -> None:
        if not self.modes:
            raise ValueError("A sensor needs at least one mode")
        seen: set[int] = set()
        for mode in self.modes:
            if not 0 <= mode.index <= MODE_MASK:
                raise ValueError(f"Mode index must be 0-7, got {mode.index}")
            if mode.index in seen:
                raise ValueError(f"Duplicate mode index {mode.index}")
            seen.add(mode.index)
        if self.modes_visible is None:
            self.modes_visible = self.highest_mode

    @property
    def highest_mode(self) -> int:
        return max(mode.index for mode in self.modes)

    def get_mode(self, index: int) -> SensorMode:
        for mode in self.modes:
            if mode.index == index:
                return mode
        raise KeyError(f"{self.name} has no mode {index}")

    def handshake_messages(self) -> Iterator[bytes]:
        """Yield every message of the initialisation handshake, in order."""
        yield build_type(self.type_id)
        yield build_modes(self.highest_mode, self.modes_visible)
        yield build_speed(self.speed)
        for mode in sorted(self.modes, key=lambda m: m.index, reverse=True):
            yield from mode.to_messages()
        yield build_ack()

    def to_bitstream(self) -> bytes:
        """Return the full handshake as one contiguous byte string."""
        return b"".join(self.handshake_messages())

    def data_message(self, mode: int, data: bytes) -> bytes:
        """Frame a DATA message for one of this sensor's modes.

        Raises:
            KeyError: If the sensor has no such mode.
            LengthViolationError: If ``data`` is not 1-32 bytes long.
        """
        return build_data(self.get_mode(mode).index, data)

    def to_dict(self) -> dict:
        return {
            "name": self.name,
            "type_id": self.type_id,
            "speed": self.speed,
            "modes_visible": self.modes_visible,
            "modes": [mode.to_dict() for mode in self.modes],
        }

    @classmethod
    def from_dict(cls, data: dict) -> SensorDefinition:
        return cls(
            name=data.get("name", ""),
            type_id=int(data["type_id"]),
            speed=int(data.get("speed", DEFAULT_SPEED)),
            modes_visible=data.get("modes_visible"),
            modes=[SensorMode.from_dict(m) for m in data.get("modes", [])],
        )
