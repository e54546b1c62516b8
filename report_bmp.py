#!/usr/bin/env python3
"""Read one BMP180 snapshot and print it as a JSON report on stdout."""

from __future__ import annotations

import logging
import sys

from emitter import emit
from errors import ReportError
from logging_config import configure_logging
from read_bmp import read_snapshot
from readings import build_report

logger = logging.getLogger(__name__)


def main() -> int:
    configure_logging()
    try:
        temperature, pressure = read_snapshot()
        emit(build_report(temperature, pressure))
    except ReportError as exc:
        logger.error("%s", exc, extra={"exit_code": exc.exit_code})
        return exc.exit_code
    return 0


if __name__ == "__main__":
    sys.exit(main())
