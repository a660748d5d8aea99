"""Data models for sensor definitions and the reference sensor catalog."""

from .sensor import ModeFormat, SensorDefinition, SensorMode, Span
from .catalog import COLOR_SENSOR, SENSOR_CATALOG
