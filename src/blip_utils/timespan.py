# Copyright 2025 Ben Mensi
# SPDX-License-Identifier: Apache-2.0

"""TimeSpan - convert durations to the milliseconds the host expects."""

from typing import Union

Number = Union[int, float]

MILLISECONDS_PER_MINUTE = 60 * 1000


class TimeSpan:
    """Static duration conversions. Inputs are not validated."""

    @staticmethod
    def from_minutes(minutes: Number) -> Number:
        return minutes * MILLISECONDS_PER_MINUTE

    @staticmethod
    def from_milliseconds(milliseconds: Number) -> Number:
        return milliseconds
