"""Aggregation of check-result logs into per-day uptime summaries.

A log is a newline-separated list of "<timestamp>,<result>" lines appended
in chronological order. Lines are processed from the last one to the
first, so the day window always keeps the most recent days.
"""

import logging
from datetime import UTC, date, datetime, time, timedelta
from decimal import ROUND_HALF_UP, Decimal

from .models import MAX_DAYS, NO_UPTIME, DayBuckets, NormalizedReport
from .parser import parse_log_line

logger = logging.getLogger(__name__)

ONE_DAY = timedelta(days=1)


def format_uptime(successes: int, total: int) -> str:
    """Format a success ratio as a percentage with two decimals.

    Rounds half up on the exact value, e.g. 2 of 3 gives "66.67%".
    Returns "--%" when total is zero.
    """
    if not total:
        return NO_UPTIME
    percent = Decimal(successes / total * 100).quantize(Decimal("0.01"), rounding=ROUND_HALF_UP)
    return f"{percent}%"


def split_rows_by_date(text: str, max_days: int = MAX_DAYS) -> DayBuckets:
    """Group log results by calendar day, newest line first.

    Processing stops at the first line belonging to day ``max_days + 1``.
    That day is recorded as ``overflow_day`` but the line itself is not
    counted, neither in a bucket nor in the overall uptime.

    Args:
        text: Raw log text.
        max_days: Maximum number of distinct days to collect.

    Returns:
        DayBuckets with at most ``max_days`` populated days.
    """
    result = DayBuckets()
    seen: dict[date, list[bool]] = {}
    successes = 0
    total = 0

    for row in reversed(text.split("\n")):
        if not row.strip():
            continue

        check = parse_log_line(row)
        if check is None:
            continue

        bucket = seen.setdefault(check.day_key, [])
        if len(seen) > max_days:
            result.overflow_day = check.day_key
            logger.debug("Day window of %d days reached at %s, ignoring older lines", max_days, check.day_key)
            break

        bucket.append(check.is_success)
        successes += check.is_success
        total += 1

    result.buckets = {day: values for day, values in seen.items() if day != result.overflow_day}
    result.uptime = format_uptime(successes, total)
    return result


def get_day_average(values: list[bool] | None) -> float | None:
    """Return the fraction of successful checks, or None if there are none."""
    if not values:
        return None
    return sum(values) / len(values)


def get_relative_days(now: datetime, day_key: date) -> int:
    """Return how many whole days lie between ``now`` and the start of ``day_key``.

    The distance is absolute, so days after ``now`` also map to
    non-negative indices. The value is not clamped to the day window.
    """
    if now.tzinfo is None:
        now = now.replace(tzinfo=UTC)
    day_start = datetime.combine(day_key, time.min, tzinfo=UTC)
    return abs(now - day_start) // ONE_DAY


def normalize_data(text: str, now: datetime | None = None, max_days: int = MAX_DAYS) -> NormalizedReport:
    """Turn a raw log into per-relative-day averages and an overall uptime.

    Args:
        text: Raw log text; empty text gives an all "no data" report.
        now: Reference instant for relative days. Sampled once when omitted.
        max_days: Size of the day window.

    Returns:
        NormalizedReport. Indices without a bucket are left unset.
    """
    if now is None:
        now = datetime.now(UTC)

    collected = split_rows_by_date(text, max_days)
    report = NormalizedReport(uptime=collected.uptime, max_days=max_days)

    days = dict(collected.buckets)
    if collected.overflow_day is not None:
        days[collected.overflow_day] = []

    for day_key, values in days.items():
        relative_day = get_relative_days(now, day_key)
        if relative_day >= max_days:
            logger.debug("Day %s is %d days from now, outside the %d-day window", day_key, relative_day, max_days)
        report.days[relative_day] = get_day_average(values)

    return report
