"""Reading and Report records built from one acquisition pass."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Iterator, Tuple

TEMPERATURE = "temperature"
PRESSURE = "pressure"


@dataclass(frozen=True, slots=True)
class Reading:
    """One measurement with its unit and display category.

    Field order is the key order of the emitted document.
    """

    unit: str
    value: float
    kind: str
    accessory_type: str


@dataclass(frozen=True, slots=True)
class Report:
    readings: Tuple[Reading, ...]

    def __init__(self, readings: Iterable[Reading]) -> None:
        object.__setattr__(self, "readings", tuple(readings))

    def __iter__(self) -> Iterator[Reading]:
        return iter(self.readings)

    def __len__(self) -> int:
        return len(self.readings)


def temperature_reading(value: float) -> Reading:
    return Reading(unit="celsius", value=value, kind=TEMPERATURE, accessory_type="Temperature")


def pressure_reading(value: float) -> Reading:
    return Reading(unit="hpa", value=value, kind=PRESSURE, accessory_type="Pressure")


def build_report(temperature: float, pressure: float) -> Report:
    """Temperature first, then pressure; values are kept exactly as given."""
    return Report((temperature_reading(temperature), pressure_reading(pressure)))
