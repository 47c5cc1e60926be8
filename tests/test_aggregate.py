"""Tests for log aggregation and normalization."""

from datetime import UTC, date, datetime, timedelta

import pytest

from statuslog.aggregate import (
    format_uptime,
    get_day_average,
    get_relative_days,
    normalize_data,
    split_rows_by_date,
)
from statuslog.models import MAX_DAYS


def make_log(start: date, days: int, result: str = "success") -> str:
    """Build a chronological log with one line per day."""
    lines = [f"{(start + timedelta(days=i)).isoformat()} 12:00:00,{result}" for i in range(days)]
    return "\n".join(lines) + "\n"


class TestFormatUptime:
    """Tests for format_uptime function."""

    def test_no_results(self) -> None:
        """Zero results gives the placeholder."""
        assert format_uptime(0, 0) == "--%"

    def test_all_success(self) -> None:
        """All successes gives 100.00%."""
        assert format_uptime(5, 5) == "100.00%"

    def test_all_failure(self) -> None:
        """All failures gives 0.00%, not the placeholder."""
        assert format_uptime(0, 4) == "0.00%"

    def test_two_decimals(self) -> None:
        """Values are rounded to two decimals."""
        assert format_uptime(2, 3) == "66.67%"
        assert format_uptime(1, 3) == "33.33%"
        assert format_uptime(1, 8) == "12.50%"


class TestSplitRowsByDate:
    """Tests for split_rows_by_date function."""

    def test_empty_text(self) -> None:
        """Empty input has no buckets and no uptime."""
        result = split_rows_by_date("")

        assert result.buckets == {}
        assert result.overflow_day is None
        assert result.uptime == "--%"

    def test_blank_lines_only(self) -> None:
        """Whitespace-only lines are skipped."""
        result = split_rows_by_date("\n   \n\t\n")

        assert result.buckets == {}
        assert result.uptime == "--%"

    def test_groups_by_day_in_processing_order(self) -> None:
        """Lines are walked from last to first."""
        text = "2024-01-01 00:00:00,success\n2024-01-01 12:00:00,failure\n"

        result = split_rows_by_date(text)

        assert result.buckets == {date(2024, 1, 1): [False, True]}
        assert result.uptime == "50.00%"

    def test_newest_day_first(self) -> None:
        """Bucket insertion order starts with the newest day."""
        text = make_log(date(2024, 1, 1), 3)

        result = split_rows_by_date(text)

        assert list(result.buckets) == [date(2024, 1, 3), date(2024, 1, 2), date(2024, 1, 1)]

    def test_malformed_lines_are_dropped(self) -> None:
        """Malformed lines do not count towards uptime."""
        result = split_rows_by_date("not-a-date,success\n2024-01-01,success\n")

        assert result.buckets == {date(2024, 1, 1): [True]}
        assert result.uptime == "100.00%"

    def test_lines_missing_parts_are_dropped(self) -> None:
        """Lines without a timestamp or result are ignored."""
        text = ",success\n2024-01-01,\nno comma here\n2024-01-01,failure\n"

        result = split_rows_by_date(text)

        assert result.buckets == {date(2024, 1, 1): [False]}
        assert result.uptime == "0.00%"

    def test_crlf_lines(self) -> None:
        """Windows line endings do not break result tokens."""
        result = split_rows_by_date("2024-01-01 00:00:00,success\r\n2024-01-02 00:00:00,success\r\n")

        assert result.uptime == "100.00%"
        assert len(result.buckets) == 2

    def test_exactly_max_days(self) -> None:
        """A log spanning exactly max_days days keeps every line."""
        result = split_rows_by_date(make_log(date(2024, 1, 1), MAX_DAYS))

        assert len(result.buckets) == MAX_DAYS
        assert result.overflow_day is None
        assert result.uptime == "100.00%"

    def test_day_window_cut_off(self) -> None:
        """The first line of day max_days + 1 stops processing uncounted."""
        text = make_log(date(2023, 12, 30), 2, result="failure") + make_log(date(2024, 1, 1), MAX_DAYS)

        result = split_rows_by_date(text)

        assert len(result.buckets) == MAX_DAYS
        assert all(values for values in result.buckets.values())
        assert result.overflow_day == date(2023, 12, 31)
        assert date(2023, 12, 31) not in result.buckets
        assert date(2023, 12, 30) not in result.buckets
        assert result.uptime == "100.00%"

    def test_custom_window(self) -> None:
        """The window size is configurable."""
        result = split_rows_by_date(make_log(date(2024, 1, 1), 5), max_days=2)

        assert list(result.buckets) == [date(2024, 1, 5), date(2024, 1, 4)]
        assert result.overflow_day == date(2024, 1, 3)

    def test_uptime_counts_all_results(self) -> None:
        """Overall uptime is computed over results, not days."""
        text = (
            "2024-01-01 00:00:00,success\n"
            "2024-01-02 00:00:00,success\n"
            "2024-01-02 06:00:00,success\n"
            "2024-01-02 12:00:00,failure\n"
        )

        assert split_rows_by_date(text).uptime == "75.00%"


class TestGetDayAverage:
    """Tests for get_day_average function."""

    def test_none(self) -> None:
        """Absent lists have no data."""
        assert get_day_average(None) is None

    def test_empty(self) -> None:
        """Empty lists have no data, never 0."""
        assert get_day_average([]) is None

    def test_all_failures_is_zero(self) -> None:
        """A measured all-failure day averages to 0.0."""
        assert get_day_average([False, False]) == 0.0

    def test_mean(self) -> None:
        """The average is the fraction of successes."""
        assert get_day_average([True, False, True, True]) == 0.75

    def test_order_independent(self) -> None:
        """Permuting results does not change the average."""
        values = [True, False, False, True, True]
        assert get_day_average(values) == get_day_average(list(reversed(values)))
        assert get_day_average(values) == get_day_average(sorted(values))


class TestGetRelativeDays:
    """Tests for get_relative_days function."""

    def test_today(self) -> None:
        """The current day is 0."""
        now = datetime(2024, 1, 10, 15, 0, tzinfo=UTC)
        assert get_relative_days(now, date(2024, 1, 10)) == 0

    def test_yesterday(self) -> None:
        """The previous day is 1."""
        now = datetime(2024, 1, 10, 0, 30, tzinfo=UTC)
        assert get_relative_days(now, date(2024, 1, 9)) == 1

    def test_tomorrow_is_absolute(self) -> None:
        """Days after now are measured by absolute distance."""
        now = datetime(2024, 1, 10, 0, 30, tzinfo=UTC)
        assert get_relative_days(now, date(2024, 1, 11)) == 0
        assert get_relative_days(now, date(2024, 1, 13)) == 2

    def test_not_clamped(self) -> None:
        """Old days give indices beyond the window."""
        now = datetime(2024, 3, 1, 12, 0, tzinfo=UTC)
        assert get_relative_days(now, date(2024, 1, 1)) == 60

    def test_naive_now_is_utc(self) -> None:
        """A naive reference instant is treated as UTC."""
        assert get_relative_days(datetime(2024, 1, 10, 12, 0), date(2024, 1, 8)) == 2


class TestNormalizeData:
    """Tests for normalize_data function."""

    def test_round_trip_scenario(self) -> None:
        """Two results on the current day average to one half."""
        text = "2024-01-01 00:00:00,success\n2024-01-01 12:00:00,failure\n"

        report = normalize_data(text, now=datetime(2024, 1, 1, 18, 0, tzinfo=UTC))

        assert report.days == {0: 0.5}
        assert report.uptime == "50.00%"
        assert report.average_for(0) == 0.5

    def test_empty_input(self) -> None:
        """Empty input gives no data for every slot."""
        report = normalize_data("", now=datetime(2024, 1, 1, tzinfo=UTC))

        assert report.days == {}
        assert report.uptime == "--%"
        assert report.slots() == [None] * MAX_DAYS

    def test_missing_days_are_no_data(self) -> None:
        """Days without results read as None, not 0."""
        text = "2024-01-08 10:00:00,failure\n2024-01-10 10:00:00,success\n"

        report = normalize_data(text, now=datetime(2024, 1, 10, 20, 0, tzinfo=UTC))

        assert report.average_for(0) == 1.0
        assert report.average_for(1) is None
        assert report.average_for(2) == 0.0

    def test_average_for_rejects_out_of_window(self) -> None:
        """Only indices inside the window are addressable."""
        report = normalize_data("", now=datetime(2024, 1, 1, tzinfo=UTC))

        with pytest.raises(IndexError):
            report.average_for(MAX_DAYS)
        with pytest.raises(IndexError):
            report.average_for(-1)

    def test_overflow_day_maps_to_no_data(self) -> None:
        """The cut-off day gets an explicit no-data entry."""
        text = make_log(date(2024, 1, 1), MAX_DAYS + 1)

        report = normalize_data(text, now=datetime(2024, 1, 31, 12, 0, tzinfo=UTC))

        assert report.slots() == [1.0] * MAX_DAYS
        assert report.days[MAX_DAYS] is None
        assert report.uptime == "100.00%"

    def test_stale_log_falls_outside_window(self) -> None:
        """Logs far from now produce indices that are never shown."""
        text = make_log(date(2023, 1, 1), 3)

        report = normalize_data(text, now=datetime(2024, 1, 1, tzinfo=UTC))

        assert report.slots() == [None] * MAX_DAYS
        assert report.uptime == "100.00%"
        assert all(index >= MAX_DAYS for index in report.days)

    def test_now_defaults_to_current_time(self) -> None:
        """Without an explicit now, today's results land on index 0."""
        today = datetime.now(UTC).strftime("%Y-%m-%d")

        report = normalize_data(f"{today} 00:00:00,success\n")

        assert report.average_for(0) == 1.0

    def test_custom_window(self) -> None:
        """Reports carry their window size."""
        report = normalize_data("", now=datetime(2024, 1, 1, tzinfo=UTC), max_days=7)

        assert report.max_days == 7
        assert len(report.slots()) == 7
