"""BMP180 access over smbus2: register helpers, compensation and the one-shot snapshot."""

from __future__ import annotations

import logging
import time
from contextlib import contextmanager
from typing import Callable, ContextManager, Iterator, Optional, Protocol, Tuple

from smbus2 import SMBus

from errors import DeviceUnavailable
from settings import Settings, get_settings

logger = logging.getLogger(__name__)

REG_CHIP_ID = 0xD0
REG_CAL = 0xAA
REG_CTRL = 0xF4
REG_DATA = 0xF6
CMD_TEMP = 0x2E
CMD_PRESSURE = 0x34
BMP180_CHIP_ID = 0x55

TEMP_WAIT = 0.0045
PRESSURE_WAIT = (0.0045, 0.0075, 0.0135, 0.0255)

CAL_NAMES = ("AC1", "AC2", "AC3", "AC4", "AC5", "AC6", "B1", "B2", "MB", "MC", "MD")
UNSIGNED_CAL = ("AC4", "AC5", "AC6")


def u16(hi, lo): return (hi << 8) | lo


def s16(hi, lo): v = (hi << 8) | lo; return v - 65536 if v & 0x8000 else v


def read_chip_id(bus, addr):
    return bus.read_byte_data(addr, REG_CHIP_ID)


def read_cal(bus, addr):
    d = bus.read_i2c_block_data(addr, REG_CAL, 22)
    words = [u16(d[i], d[i + 1]) for i in range(0, 22, 2)]
    # all-zero or all-one words mean the bus returned garbage
    if any(w in (0x0000, 0xFFFF) for w in words):
        raise DeviceUnavailable("BMP180 calibration block is invalid")
    cal = {}
    for i, name in enumerate(CAL_NAMES):
        hi, lo = d[2 * i], d[2 * i + 1]
        cal[name] = u16(hi, lo) if name in UNSIGNED_CAL else s16(hi, lo)
    return cal


def read_raw_temp(bus, addr):
    bus.write_byte_data(addr, REG_CTRL, CMD_TEMP)
    time.sleep(TEMP_WAIT)
    d = bus.read_i2c_block_data(addr, REG_DATA, 2)
    return u16(d[0], d[1])


def read_raw_pressure(bus, addr, oss):
    bus.write_byte_data(addr, REG_CTRL, CMD_PRESSURE | (oss << 6))
    time.sleep(PRESSURE_WAIT[oss])
    d = bus.read_i2c_block_data(addr, REG_DATA, 3)
    return ((d[0] << 16) | (d[1] << 8) | d[2]) >> (8 - oss)


def _b5(cal, raw_t):
    x1 = ((raw_t - cal['AC6']) * cal['AC5']) >> 15
    if x1 + cal['MD'] == 0:
        raise DeviceUnavailable("BMP180 raw temperature %d yields a zero divisor" % raw_t)
    x2 = (cal['MC'] << 11) // (x1 + cal['MD'])
    return x1 + x2


def compensate_temp(cal, raw_t):
    return ((_b5(cal, raw_t) + 8) >> 4) / 10.0


def compensate(cal, raw_t, raw_p, oss):
    """Return (degrees Celsius, pascal) using the datasheet integer algorithm."""
    b5 = _b5(cal, raw_t)
    temp = ((b5 + 8) >> 4) / 10.0
    b6 = b5 - 4000
    x1 = (cal['B2'] * ((b6 * b6) >> 12)) >> 11
    x2 = (cal['AC2'] * b6) >> 11
    x3 = x1 + x2
    b3 = (((cal['AC1'] * 4 + x3) << oss) + 2) // 4
    x1 = (cal['AC3'] * b6) >> 13
    x2 = (cal['B1'] * ((b6 * b6) >> 12)) >> 16
    x3 = ((x1 + x2) + 2) >> 2
    b4 = (cal['AC4'] * (x3 + 32768)) >> 15
    if b4 == 0:
        raise DeviceUnavailable("BMP180 calibration yields a zero divisor")
    b7 = (raw_p - b3) * (50000 >> oss)
    if b7 < 0x80000000:
        p = (b7 * 2) // b4
    else:
        p = (b7 // b4) * 2
    x1 = (p >> 8) * (p >> 8)
    x1 = (x1 * 3038) >> 16
    x2 = (-7357 * p) >> 16
    pressure = p + ((x1 + x2 + 3791) >> 4)
    return temp, pressure


class Barometer(Protocol):
    def read_temperature(self) -> float: ...

    def read_pressure(self) -> float: ...


class Bmp180:
    """A BMP180 at ``addr`` on an already opened bus."""

    def __init__(self, bus, addr: int, oversampling: int = 1) -> None:
        self.bus = bus
        self.addr = addr
        self.oversampling = oversampling
        cid = read_chip_id(bus, addr)
        logger.debug("Probed sensor", extra={"address": addr, "chip_id": cid})
        if cid != BMP180_CHIP_ID:
            raise DeviceUnavailable("No BMP180 at 0x%02X (chip id 0x%02X)" % (addr, cid))
        self.cal = read_cal(bus, addr)

    def read_temperature(self) -> float:
        raw_t = read_raw_temp(self.bus, self.addr)
        logger.debug("Raw temperature read", extra={"raw_temperature": raw_t})
        return compensate_temp(self.cal, raw_t)

    def read_pressure(self) -> float:
        # pressure compensation depends on a fresh temperature sample
        raw_t = read_raw_temp(self.bus, self.addr)
        raw_p = read_raw_pressure(self.bus, self.addr, self.oversampling)
        logger.debug("Raw pressure read", extra={"raw_temperature": raw_t, "raw_pressure": raw_p})
        _, pascal = compensate(self.cal, raw_t, raw_p, self.oversampling)
        return pascal / 100.0


@contextmanager
def open_bmp180(bus_id: int, addr: int, oversampling: int = 1,
                bus_factory: Callable[[int], SMBus] = SMBus) -> Iterator[Bmp180]:
    logger.debug("Opening I2C bus", extra={"bus_id": bus_id, "address": addr})
    with bus_factory(bus_id) as bus:
        yield Bmp180(bus, addr, oversampling)


Opener = Callable[[int, int, int], ContextManager[Barometer]]


def read_snapshot(opener: Opener = open_bmp180,
                  settings: Optional[Settings] = None) -> Tuple[float, float]:
    """Read one temperature (C) and one pressure (hPa), releasing the bus before returning."""
    settings = settings or get_settings()
    try:
        with opener(settings.bus_id, settings.address, settings.oversampling) as sensor:
            temp = sensor.read_temperature()
            press = sensor.read_pressure()
    except OSError as e:
        raise DeviceUnavailable(
            "BMP180 on bus %d at 0x%02X did not respond: %s" % (settings.bus_id, settings.address, e)
        ) from e
    return temp, press
