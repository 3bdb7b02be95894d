# Copyright 2025 Ben Mensi
# SPDX-License-Identifier: Apache-2.0

"""Error taxonomy for blip-utils.

Every error a script can observe derives from BlipError. The ``kind``
attribute is the name the host shows when it captures an exception.
"""


class BlipError(Exception):
    """Base class for errors raised by the emulated host objects."""

    kind = "BlipError"


class NamingError(BlipError):
    """Raised when a variable name is missing, empty, or not a string."""

    kind = "NamingError"


class ExpirationError(BlipError):
    """Raised when a negative expiration is given to a variable."""

    kind = "ExpirationError"

    def __init__(self, message: str = "Expiration time cannot be negative. Use zero for no expiration."):
        super().__init__(message)


class InvalidDateError(BlipError):
    """Raised when a date cannot be parsed into a valid calendar date."""

    kind = "InvalidDateError"


class InvalidTimeZoneError(BlipError):
    """Raised when a timezone identifier is not in the tz database."""

    kind = "InvalidTimeZoneError"


class InvalidMethodError(BlipError):
    """Raised when an HTTP request uses a non-standard method."""

    kind = "InvalidMethodError"


class ConfigError(BlipError):
    """Raised when the host configuration cannot be loaded."""

    kind = "ConfigError"


class ScriptLoadError(BlipError):
    """Raised when a script file cannot be imported or has no run()."""

    kind = "ScriptLoadError"
