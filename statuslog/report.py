"""Report generation for all configured targets."""

import logging
from datetime import UTC, datetime

from .aggregate import normalize_data
from .config import parse_targets
from .fetcher import FetchError, LogSource
from .models import MAX_DAYS, TargetConfig, TargetReport
from .render import DEFAULT_TITLE, StatusPageRenderer

logger = logging.getLogger(__name__)


def generate_report(source: LogSource, target: TargetConfig, now: datetime, max_days: int = MAX_DAYS) -> TargetReport:
    """Fetch and normalize the log of a single target."""
    text = source.fetch_log(target.key)
    report = normalize_data(text, now=now, max_days=max_days)
    logger.debug("Report for %s: uptime %s, %d day(s)", target.key, report.uptime, len(report.days))
    return TargetReport(target=target, report=report)


def generate_all_reports(
    source: LogSource,
    now: datetime | None = None,
    max_days: int = MAX_DAYS,
) -> list[TargetReport]:
    """Generate reports for every target, one at a time, in declared order.

    Raises:
        FetchError: If the targets file cannot be loaded.
    """
    if now is None:
        now = datetime.now(UTC)

    targets = parse_targets(source.fetch_targets())
    logger.info("Generating reports for %d target(s)", len(targets))
    return [generate_report(source, target, now, max_days) for target in targets]


def build_page(
    source: LogSource,
    now: datetime | None = None,
    max_days: int = MAX_DAYS,
    title: str | None = None,
) -> str:
    """Build the status page HTML.

    A targets file that cannot be loaded yields a page with a single
    failure notice; missing logs only leave their targets empty.
    """
    if now is None:
        now = datetime.now(UTC)

    renderer = StatusPageRenderer(title=title or DEFAULT_TITLE, now=now)
    try:
        reports = generate_all_reports(source, now=now, max_days=max_days)
    except FetchError as e:
        logger.error("Error generating reports: %s", e)
        return renderer.render_failure()

    return renderer.render_page(reports)
