"""Parsing of single check-result log lines."""

import logging
from datetime import UTC, datetime

from .models import CheckResult

logger = logging.getLogger(__name__)

# Accepted timestamp layouts after "-" has been normalized to "/".
# All timestamps are read as GMT regardless of the host timezone.
TIMESTAMP_FORMATS = (
    "%Y/%m/%d %H:%M:%S.%f",
    "%Y/%m/%d %H:%M:%S",
    "%Y/%m/%d %H:%M",
    "%Y/%m/%d",
)

SUCCESS_TOKEN = "success"


def parse_timestamp(text: str) -> datetime | None:
    """Parse a log timestamp as a GMT instant.

    Dashes are treated as slashes, so "2024-01-02 03:04:05" and
    "2024/01/02 03:04:05" are equivalent.

    Args:
        text: Raw timestamp text from a log line.

    Returns:
        Timezone-aware datetime in UTC, or None if the text is not a valid date.
    """
    normalized = text.strip().replace("-", "/")
    for fmt in TIMESTAMP_FORMATS:
        try:
            return datetime.strptime(normalized, fmt).replace(tzinfo=UTC)
        except ValueError:
            continue
    return None


def parse_log_line(line: str) -> CheckResult | None:
    """Parse one "<timestamp>,<result>" line.

    Returns:
        CheckResult keyed by the UTC calendar day, or None if the line is
        missing either part or its timestamp does not parse.
    """
    # Everything after the first comma is the result token, so
    # "ts,success,x" is a failure.
    timestamp_text, sep, result_text = line.partition(",")
    if not sep or not timestamp_text or not result_text:
        logger.debug("Skipping malformed log line: %r", line)
        return None

    checked_at = parse_timestamp(timestamp_text)
    if checked_at is None:
        logger.debug("Skipping log line with invalid timestamp: %r", line)
        return None

    return CheckResult(
        day_key=checked_at.date(),
        is_success=result_text.strip() == SUCCESS_TOKEN,
    )
