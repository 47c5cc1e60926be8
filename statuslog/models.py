"""Data models for check-result logs and normalized uptime reports."""

from dataclasses import dataclass, field
from datetime import date
from enum import Enum

# Number of calendar days shown on the status page.
MAX_DAYS = 30

# Marker rendered when no result was accepted at all.
NO_UPTIME = "--%"


@dataclass(frozen=True)
class CheckResult:
    """Outcome of a single logged check.

    Attributes:
        day_key: Calendar day (UTC) the check was performed on.
        is_success: Whether the result token was exactly "success".
    """

    day_key: date
    is_success: bool


@dataclass(frozen=True)
class TargetConfig:
    """A monitored target as declared in the targets file."""

    key: str
    url: str


@dataclass
class DayBuckets:
    """Per-day results collected by one pass over a log.

    Attributes:
        buckets: Results per day key, in processing order (newest line first).
        overflow_day: Day whose first line hit the day window limit, or None.
            That day is counted as seen but holds no results.
        uptime: Overall uptime string, e.g. "99.50%" or "--%".
    """

    buckets: dict[date, list[bool]] = field(default_factory=dict)
    overflow_day: date | None = None
    uptime: str = NO_UPTIME


@dataclass
class NormalizedReport:
    """Per-day averages keyed by relative day (0 = today).

    Indices that were never written read as None ("no data"). Only
    indices 0..max_days-1 are addressable; others may be present in
    ``days`` when a log is far from the current date but are never shown.
    """

    days: dict[int, float | None] = field(default_factory=dict)
    uptime: str = NO_UPTIME
    max_days: int = MAX_DAYS

    def average_for(self, relative_day: int) -> float | None:
        """Return the average for a relative day, or None when there is no data."""
        if not 0 <= relative_day < self.max_days:
            raise IndexError(f"Relative day {relative_day} outside 0..{self.max_days - 1}")
        return self.days.get(relative_day)

    def slots(self) -> list[float | None]:
        """Return all addressable averages, index 0 being today."""
        return [self.days.get(i) for i in range(self.max_days)]


@dataclass(frozen=True)
class TargetReport:
    """Normalized report for one configured target."""

    target: TargetConfig
    report: NormalizedReport


class DayStatus(str, Enum):
    """Classification of a single day on the status strip."""

    NO_DATA = "no data"
    FULL_OUTAGE = "full-outage"
    FULL_SUCCESS = "full-success"
    PARTIAL_OUTAGE = "partial-outage"

    @property
    def css_class(self) -> str:
        mapping = {
            DayStatus.NO_DATA: "nodata",
            DayStatus.FULL_SUCCESS: "success",
            DayStatus.FULL_OUTAGE: "failure",
            DayStatus.PARTIAL_OUTAGE: "partial",
        }
        return mapping[self]

    @property
    def label(self) -> str:
        mapping = {
            DayStatus.NO_DATA: "No Data Available",
            DayStatus.FULL_SUCCESS: "Operational",
            DayStatus.FULL_OUTAGE: "Major Outage",
            DayStatus.PARTIAL_OUTAGE: "Partial Outage",
        }
        return mapping[self]

    @property
    def description(self) -> str:
        mapping = {
            DayStatus.NO_DATA: "No health checks were run on this day.",
            DayStatus.FULL_SUCCESS: "No incidents were detected on this day.",
            DayStatus.FULL_OUTAGE: "A major outage was detected on this day; the site was completely down.",
            DayStatus.PARTIAL_OUTAGE: "A partial outage was detected on this day; the site was partly down.",
        }
        return mapping[self]
