"""RIS Live timestamp conversion utilities."""

import math
from datetime import datetime, timezone
from decimal import ROUND_CEILING, Decimal
from typing import NamedTuple

MICROSECONDS_PER_SECOND = 1_000_000


class Timestamp(NamedTuple):
    """Whole seconds and microseconds since the Unix epoch (UTC)."""

    seconds: int
    microseconds: int

    def to_datetime(self) -> datetime:
        """
        Convert to an aware UTC datetime.

        Returns:
            Datetime in UTC
        """
        return datetime.fromtimestamp(self.seconds, tz=timezone.utc).replace(
            microsecond=self.microseconds
        )


def convert_timestamp(value: float) -> Timestamp:
    """
    Convert a RIS Live timestamp (float seconds) to seconds and microseconds.

    The sub-second fraction is rounded up to the next whole microsecond, so a
    converted timestamp is never earlier than the one sent by the collector.
    The fraction is read from the shortest decimal form of the float, which is
    the text the collector put on the wire.

    Args:
        value: Seconds since the Unix epoch

    Returns:
        Converted timestamp

    Raises:
        ValueError: If value is negative, NaN or infinite
    """
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ValueError(f"Timestamp must be a number, got {type(value).__name__}")

    if not math.isfinite(value):
        raise ValueError(f"Timestamp must be finite, got {value}")

    if value < 0:
        raise ValueError(f"Timestamp must be non-negative, got {value}")

    exact = Decimal(repr(float(value)))
    seconds = int(exact)
    fraction = exact - seconds

    microseconds = int(
        (fraction * MICROSECONDS_PER_SECOND).to_integral_value(rounding=ROUND_CEILING)
    )

    # Carry a fraction that rounded up to a full second
    if microseconds >= MICROSECONDS_PER_SECOND:
        seconds += 1
        microseconds -= MICROSECONDS_PER_SECOND

    return Timestamp(seconds=seconds, microseconds=microseconds)


def timestamp_to_datetime(value: float) -> datetime:
    """
    Convert a RIS Live timestamp directly to an aware UTC datetime.

    Args:
        value: Seconds since the Unix epoch

    Returns:
        Datetime in UTC
    """
    return convert_timestamp(value).to_datetime()
