# Copyright 2025 Ben Mensi
# SPDX-License-Identifier: Apache-2.0

"""
blip-utils - local stand-ins for the objects a bot host injects into scripts.

Scripts that run outside the host can import ready-made instances:

    from blip_utils import context, request, time, TimeSpan

Each ``ScriptSession`` (see blip_utils.runtime) builds its own isolated
set instead.
"""

from blip_utils.context import Context, VariableEntry, VariableName, VariableRepository
from blip_utils.dates import DEFAULT_TIME_ZONE, Time, ZonedDate
from blip_utils.errors import (
    BlipError,
    ConfigError,
    ExpirationError,
    InvalidDateError,
    InvalidMethodError,
    InvalidTimeZoneError,
    NamingError,
    ScriptLoadError,
)
from blip_utils.formatter import TimeFormatter
from blip_utils.http_request import HttpRequest, HttpResponse
from blip_utils.timespan import TimeSpan

__version__ = "2.0.0"

request = HttpRequest()
context = Context()
time = Time()

__all__ = [
    "__version__",
    "request",
    "context",
    "time",
    "TimeSpan",
    "Context",
    "VariableEntry",
    "VariableName",
    "VariableRepository",
    "Time",
    "TimeFormatter",
    "ZonedDate",
    "DEFAULT_TIME_ZONE",
    "HttpRequest",
    "HttpResponse",
    "BlipError",
    "ConfigError",
    "ExpirationError",
    "InvalidDateError",
    "InvalidMethodError",
    "InvalidTimeZoneError",
    "NamingError",
    "ScriptLoadError",
]
