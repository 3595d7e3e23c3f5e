"""Date and time type variants.

A value is accepted only when it parses under the variant's format and
formatting the parsed value again gives back the exact input. `strptime`
alone accepts inputs such as `2023-1-1`, which the round trip rejects.
"""

from datetime import datetime
from typing import Any, ClassVar

from .base import BaseType

RFC3339 = "%Y-%m-%dT%H:%M:%S%z"
RFC2616 = "%a, %d %b %Y %H:%M:%S GMT"


def round_trips(value: Any, fmt: str) -> bool:
    """Return True if `value` parses under `fmt` and re-formats to itself."""
    if not isinstance(value, str):
        return False
    try:
        parsed = datetime.strptime(value, fmt)
    except ValueError:
        return False
    return parsed.strftime(fmt) == value


def rfc3339_round_trips(value: Any) -> bool:
    if not isinstance(value, str):
        return False
    # Z is the RFC 3339 spelling of a zero offset
    if value.endswith("Z"):
        value = value[:-1] + "+00:00"
    try:
        parsed = datetime.strptime(value, RFC3339)
    except ValueError:
        return False
    return parsed.isoformat(timespec="seconds") == value


class TemporalType(BaseType):
    format_pattern: ClassVar[str] = ""

    format: str | None = None

    def validate_value(self, value: Any) -> None:
        if not self._conforms(value):
            self._fail(f"Value is not conform format: {self._format_label()}.")
        self._check_enum(value)

    def _conforms(self, value: Any) -> bool:
        return round_trips(value, self.format_pattern)

    def _format_label(self) -> str:
        return self.format_pattern


class DateOnlyType(TemporalType):
    kind: ClassVar[str] = "date-only"
    format_pattern: ClassVar[str] = "%Y-%m-%d"


class TimeOnlyType(TemporalType):
    kind: ClassVar[str] = "time-only"
    format_pattern: ClassVar[str] = "%H:%M:%S"


class DateTimeOnlyType(TemporalType):
    kind: ClassVar[str] = "datetime-only"
    format_pattern: ClassVar[str] = RFC3339

    def _conforms(self, value: Any) -> bool:
        return rfc3339_round_trips(value)


class DateTimeType(TemporalType):
    """A timestamp in `rfc3339` (default) or `rfc2616` format."""

    kind: ClassVar[str] = "datetime"
    format_pattern: ClassVar[str] = RFC3339

    def _conforms(self, value: Any) -> bool:
        if (self.format or "rfc3339").lower() == "rfc2616":
            return round_trips(value, RFC2616)
        return rfc3339_round_trips(value)

    def _format_label(self) -> str:
        return RFC2616 if (self.format or "").lower() == "rfc2616" else RFC3339
