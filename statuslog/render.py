"""Rendering of normalized reports into the HTML status page."""

import html
import logging
from datetime import UTC, datetime, timedelta

from ._template import (
    CSS_STYLES,
    FAILURE_NOTICE_TEMPLATE,
    JS_TOOLTIP,
    PAGE_TEMPLATE,
    STATUS_CONTAINER_TEMPLATE,
    STATUS_SQUARE_TEMPLATE,
    STATUS_STREAM_TEMPLATE,
)
from .models import DayStatus, NormalizedReport, TargetReport

logger = logging.getLogger(__name__)

# Averages below this are shown as a full outage.
OUTAGE_THRESHOLD = 0.3

DEFAULT_TITLE = "Uptime History"
FAILURE_MESSAGE = "Unable to load status data, please refresh and try again later."


def classify_day(average: float | None) -> DayStatus:
    """Classify a day from its average success ratio alone."""
    if average is None:
        return DayStatus.NO_DATA
    if average == 1:
        return DayStatus.FULL_SUCCESS
    if average < OUTAGE_THRESHOLD:
        return DayStatus.FULL_OUTAGE
    return DayStatus.PARTIAL_OUTAGE


def format_day(day: datetime) -> str:
    """Format a date like "Mon Jan 01 2024"."""
    return day.strftime("%a %b %d %Y")


def slot_date(now: datetime, relative_day: int) -> datetime:
    """Return the date shown for a relative day, counting back from ``now``."""
    return now - timedelta(days=relative_day)


def tooltip_text(key: str, day: datetime, status: DayStatus) -> str:
    """Return the hover text for one square."""
    return f"{key} | {format_day(day)} : {status.label}"


def report_to_dict(target_report: TargetReport, now: datetime) -> dict:
    """Convert a target report into a JSON-serializable dictionary."""
    report = target_report.report
    slots = report.slots()
    return {
        "key": target_report.target.key,
        "url": target_report.target.url,
        "uptime": report.uptime,
        "status": classify_day(slots[0]).value,
        "days": [
            {
                "day": i,
                "date": slot_date(now, i).date().isoformat(),
                "average": average,
                "status": classify_day(average).value,
            }
            for i, average in enumerate(slots)
        ],
    }


class StatusPageRenderer:
    """Builds the status page HTML.

    Each rendered element gets a unique id from a counter owned by this
    renderer, so separate renderers never share state.
    """

    def __init__(self, title: str = DEFAULT_TITLE, now: datetime | None = None) -> None:
        self.title = title
        self.now = now if now is not None else datetime.now(UTC)
        self._clone_id = 0

    def _next_id(self) -> str:
        element_id = f"template_clone_{self._clone_id}"
        self._clone_id += 1
        return element_id

    def render_square(self, key: str, relative_day: int, average: float | None) -> str:
        status = classify_day(average)
        day = slot_date(self.now, relative_day)
        return STATUS_SQUARE_TEMPLATE.substitute(
            id=self._next_id(),
            color=status.css_class,
            date=html.escape(format_day(day)),
            label=html.escape(status.label),
            description=html.escape(status.description),
            tooltip=html.escape(tooltip_text(key, day, status)),
        )

    def render_stream(self, key: str, report: NormalizedReport) -> str:
        """Render the day squares, oldest on the left and today on the right."""
        stream_id = self._next_id()
        squares = [
            self.render_square(key, relative_day, report.days.get(relative_day))
            for relative_day in range(report.max_days - 1, -1, -1)
        ]
        return STATUS_STREAM_TEMPLATE.substitute(id=stream_id, squares="\n".join(squares))

    def render_target(self, target_report: TargetReport) -> str:
        """Render one target block: title, current status, uptime and day strip."""
        target = target_report.target
        report = target_report.report
        stream = self.render_stream(target.key, report)
        current = classify_day(report.days.get(0))
        return STATUS_CONTAINER_TEMPLATE.substitute(
            id=self._next_id(),
            url=html.escape(target.url),
            title=html.escape(target.key),
            color=current.css_class,
            status=html.escape(current.label),
            uptime=html.escape(report.uptime),
            max_days=report.max_days,
            stream=stream,
        )

    def _render_page(self, body: str) -> str:
        return PAGE_TEMPLATE.substitute(
            title=html.escape(self.title),
            css=CSS_STYLES,
            reports=body,
            generated_at=self.now.strftime("%Y-%m-%d %H:%M:%S UTC"),
            js=JS_TOOLTIP,
        )

    def render_page(self, reports: list[TargetReport]) -> str:
        """Render the full page for all targets, in the given order."""
        logger.debug("Rendering status page with %d target(s)", len(reports))
        return self._render_page("\n".join(self.render_target(r) for r in reports))

    def render_failure(self, message: str = FAILURE_MESSAGE) -> str:
        """Render the page with a single failure notice instead of reports."""
        return self._render_page(FAILURE_NOTICE_TEMPLATE.substitute(message=html.escape(message)))
