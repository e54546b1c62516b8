"""JSON encoding of a Report and the single write to stdout."""

from __future__ import annotations

import json
import logging
import math
import sys
from typing import Any, Dict, List, Optional, TextIO

from errors import SerializationFailure, WriteFailure
from readings import Reading, Report

logger = logging.getLogger(__name__)

_FIELDS = ("unit", "value", "kind", "accessory_type")


def _encode_value(value: float) -> Optional[float]:
    # NaN and infinities have no JSON literal; they are written as null
    if not math.isfinite(value):
        return None
    return value


def _reading_to_dict(reading: Reading) -> Dict[str, Any]:
    return {
        "unit": reading.unit,
        "value": _encode_value(reading.value),
        "kind": reading.kind,
        "accessory_type": reading.accessory_type,
    }


def serialize(report: Report) -> str:
    """Compact JSON array, floats in shortest round-trip form, no trailing newline."""
    try:
        payload = [_reading_to_dict(reading) for reading in report]
        return json.dumps(payload, separators=(",", ":"), allow_nan=False)
    except (TypeError, ValueError) as exc:
        raise SerializationFailure(f"Report could not be encoded: {exc}") from exc


def parse_report(text: str) -> Report:
    """Read a document produced by :func:`serialize`; null values come back as NaN.

    Not used when emitting. It is the reading side for programs that collect
    this tool's stdout, such as a metrics collector that runs it on a timer.
    """
    payload = json.loads(text)
    if not isinstance(payload, list):
        raise ValueError("Report document must be a JSON array")

    readings: List[Reading] = []
    for index, item in enumerate(payload):
        if not isinstance(item, dict):
            raise ValueError(f"Reading {index} is not an object")
        missing = [field for field in _FIELDS if field not in item]
        if missing:
            raise ValueError(f"Reading {index} is missing {', '.join(missing)}")
        value = item["value"]
        readings.append(
            Reading(
                unit=item["unit"],
                value=math.nan if value is None else float(value),
                kind=item["kind"],
                accessory_type=item["accessory_type"],
            )
        )
    return Report(readings)


def emit(report: Report, stream: Optional[TextIO] = None) -> None:
    document = serialize(report)
    out = stream if stream is not None else sys.stdout
    try:
        out.write(document)
        out.flush()
    except (OSError, ValueError) as exc:
        raise WriteFailure(f"Report could not be written: {exc}") from exc
    logger.debug("Report written (%d readings)", len(report))
