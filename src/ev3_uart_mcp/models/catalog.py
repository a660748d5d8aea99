"""Reference sensor definitions matching bitstreams captured from LEGO sensors."""

from __future__ import annotations

from ..protocol.magics import InfoDtype
from .sensor import ModeFormat, SensorDefinition, SensorMode, Span

# EV3 Color Sensor (45506), type 29. Modes 0-2 are visible to the user.
COLOR_SENSOR = SensorDefinition(
    name="EV3 Color Sensor",
    type_id=0x1D,
    speed=57600,
    modes_visible=2,
    modes=[
        SensorMode(
            index=5,
            name="COL-CAL",
            raw=Span(0, 65535),
            si=Span(0, 65535),
            format=ModeFormat(4, InfoDtype.S16, 5, 0),
        ),
        SensorMode(
            index=4,
            name="RGB-RAW",
            raw=Span(0, 1020.188),
            si=Span(0, 1020.188),
            format=ModeFormat(3, InfoDtype.S16, 4, 0),
        ),
        SensorMode(
            index=3,
            name="REF-RAW",
            raw=Span(0, 1020.188),
            si=Span(0, 1020.188),
            format=ModeFormat(2, InfoDtype.S16, 4, 0),
        ),
        SensorMode(
            index=2,
            name="COL-COLOR",
            raw=Span(0, 8),
            si=Span(0, 8),
            symbol="col",
            format=ModeFormat(1, InfoDtype.S8, 2, 0),
        ),
        SensorMode(
            index=1,
            name="COL-AMBIENT",
            raw=Span(0, 100),
            si=Span(0, 100),
            symbol="pct",
            format=ModeFormat(1, InfoDtype.S8, 3, 0),
        ),
        SensorMode(
            index=0,
            name="COL-REFLECT",
            raw=Span(0, 100),
            si=Span(0, 100),
            symbol="pct",
            format=ModeFormat(1, InfoDtype.S8, 3, 0),
        ),
    ],
)

SENSOR_CATALOG: dict[str, SensorDefinition] = {
    "color": COLOR_SENSOR,
}
