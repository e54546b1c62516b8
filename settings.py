from __future__ import annotations

from dataclasses import dataclass


_BUS_ID = 1
_BMP180_ADDRESS = 0x77
_OVERSAMPLING = 1
_LOG_LEVEL = "WARNING"


@dataclass(frozen=True)
class Settings:
    bus_id: int
    address: int
    oversampling: int
    log_level: str

    def __post_init__(self) -> None:
        if self.oversampling not in (0, 1, 2, 3):
            raise ValueError(f"oversampling must be 0..3, got {self.oversampling!r}")


def get_settings() -> Settings:
    return Settings(
        bus_id=_BUS_ID,
        address=_BMP180_ADDRESS,
        oversampling=_OVERSAMPLING,
        log_level=_LOG_LEVEL,
    )
