"""
Data models for decoded readings and output state.

This module contains Pydantic models representing:

- Sensor readings decoded from inbound frames (per variant)
- The colour value object used by tri-color LEDs
- Output Memory holding the last commanded value of every output channel
"""

from birdwire.models.outputs import (
    OFF,
    Color,
    FinchOutputMemory,
    HummingbirdOutputMemory,
)
from birdwire.models.readings import (
    FinchSensorReading,
    HummingbirdSensorReading,
    PortSensorReading,
    SensorReading,
)

__all__ = [
    # Readings
    "SensorReading",
    "FinchSensorReading",
    "HummingbirdSensorReading",
    "PortSensorReading",
    # Outputs
    "Color",
    "OFF",
    "FinchOutputMemory",
    "HummingbirdOutputMemory",
]
