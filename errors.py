"""Failures that abort a report run, each mapped to a process exit code."""

from __future__ import annotations


class ReportError(Exception):
    exit_code = 1


class DeviceUnavailable(ReportError):
    """The bus could not be opened or the sensor did not answer."""

    exit_code = 1


class SerializationFailure(ReportError):
    exit_code = 2


class WriteFailure(ReportError):
    exit_code = 3
