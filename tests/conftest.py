from __future__ import annotations

import struct
from typing import List, Optional, Tuple

import pytest

import read_bmp

# Calibration and raw samples from the BMP180 datasheet worked example.
DATASHEET_CAL = {
    "AC1": 408, "AC2": -72, "AC3": -14383, "AC4": 32741, "AC5": 32757, "AC6": 23153,
    "B1": 6190, "B2": 4, "MB": -32768, "MC": -8711, "MD": 2868,
}
DATASHEET_CAL_BYTES = struct.pack(">hhhHHHhhhhh", *DATASHEET_CAL.values())
DATASHEET_UT = 27898
DATASHEET_UP = 23843


class FakeBmp180Bus:
    """In-memory stand-in for an smbus2.SMBus with a BMP180 attached."""

    def __init__(
        self,
        chip_id: int = 0x55,
        cal_bytes: bytes = DATASHEET_CAL_BYTES,
        raw_temperature: int = DATASHEET_UT,
        pressure_bytes: Tuple[int, int, int] = (0x5D, 0x23, 0x00),
        fail_on_register: Optional[int] = None,
    ) -> None:
        self.chip_id = chip_id
        self.cal_bytes = cal_bytes
        self.raw_temperature = raw_temperature
        self.pressure_bytes = pressure_bytes
        self.fail_on_register = fail_on_register
        self.writes: List[Tuple[int, int, int]] = []
        self.addresses: List[int] = []
        self.closed = False
        self._data: List[int] = []

    def __enter__(self) -> "FakeBmp180Bus":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    def _check(self, addr: int, reg: int) -> None:
        self.addresses.append(addr)
        if reg == self.fail_on_register:
            raise OSError(121, "Remote I/O error")

    def read_byte_data(self, addr: int, reg: int) -> int:
        self._check(addr, reg)
        if reg == read_bmp.REG_CHIP_ID:
            return self.chip_id
        raise AssertionError(f"unexpected byte read at 0x{reg:02X}")

    def read_i2c_block_data(self, addr: int, reg: int, length: int) -> List[int]:
        self._check(addr, reg)
        if reg == read_bmp.REG_CAL:
            return list(self.cal_bytes[:length])
        if reg == read_bmp.REG_DATA:
            return self._data[:length]
        raise AssertionError(f"unexpected block read at 0x{reg:02X}")

    def write_byte_data(self, addr: int, reg: int, value: int) -> None:
        self._check(addr, reg)
        self.writes.append((addr, reg, value))
        if value == read_bmp.CMD_TEMP:
            self._data = [self.raw_temperature >> 8, self.raw_temperature & 0xFF]
        elif value & 0x3F == read_bmp.CMD_PRESSURE:
            self._data = list(self.pressure_bytes)

    def close(self) -> None:
        self.closed = True


@pytest.fixture(autouse=True)
def no_conversion_wait(monkeypatch) -> List[float]:
    waits: List[float] = []
    monkeypatch.setattr(read_bmp.time, "sleep", waits.append)
    return waits


@pytest.fixture()
def fake_bus() -> FakeBmp180Bus:
    return FakeBmp180Bus()
