"""HTTP server for the status page and its JSON reports."""

import errno
import json
import logging
import threading
import time
from collections import defaultdict, deque
from datetime import UTC, datetime
from http.server import BaseHTTPRequestHandler, HTTPServer
from typing import Any, Deque, Dict, List, Optional
from urllib.parse import unquote, urlparse

from .config import ApiConfig
from .fetcher import FetchError, LogSource
from .models import MAX_DAYS
from .render import report_to_dict
from .report import build_page, generate_all_reports

logger = logging.getLogger(__name__)

# Rate limiting configuration.
# Every request re-reads all logs, so clients are limited per IP.
RATE_LIMIT_MAX_REQUESTS = 60
RATE_LIMIT_WINDOW_SECONDS = 60

# Browser cache lifetime for the rendered page (seconds).
PAGE_CACHE_SECONDS = 60


class RateLimiter:
    """Per-IP request budget over a sliding time window. Thread-safe."""

    def __init__(
        self,
        max_requests: int = RATE_LIMIT_MAX_REQUESTS,
        window_seconds: int = RATE_LIMIT_WINDOW_SECONDS,
    ) -> None:
        self.max_requests = max_requests
        self.window_seconds = window_seconds
        self._hits: Dict[str, Deque[float]] = defaultdict(deque)
        self._lock = threading.Lock()

    def is_allowed(self, client_ip: str) -> bool:
        """Record a request from client_ip and return False once over budget."""
        now = time.monotonic()
        with self._lock:
            hits = self._hits[client_ip]
            while hits and hits[0] <= now - self.window_seconds:
                hits.popleft()
            if len(hits) >= self.max_requests:
                return False
            hits.append(now)
            return True


class ApiError(Exception):
    """Raised when an API operation fails."""
    pass


class StatusHandler(BaseHTTPRequestHandler):
    """HTTP request handler for the status page and report endpoints."""

    # Class-level references set by factory
    source: Optional[LogSource] = None
    max_days: int = MAX_DAYS
    rate_limiter: Optional[RateLimiter] = None

    def log_message(self, format: str, *args: Any) -> None:
        """Override to use Python logging instead of stderr."""
        logger.debug("API %s - %s", self.address_string(), format % args)

    def _check_rate_limit(self) -> bool:
        """Check if the request should be rate limited.

        Sends 429 response automatically if rate limited.
        """
        if self.rate_limiter is None:
            return True

        client_ip = self.client_address[0]
        if not self.rate_limiter.is_allowed(client_ip):
            logger.warning("Rate limit exceeded for %s", client_ip)
            self._send_error_json(429, "Rate limit exceeded. Try again later.")
            return False
        return True

    def _send_json(self, code: int, data: Any) -> None:
        """Send a JSON response with the given status code."""
        body = json.dumps(data, indent=2).encode("utf-8")
        self.send_response(code)
        self.send_header("Content-Type", "application/json")
        self.send_header("Content-Length", str(len(body)))
        self.send_header("Connection", "close")
        self.end_headers()
        self.wfile.write(body)

    def _send_error_json(self, code: int, message: str) -> None:
        """Send a JSON error response."""
        self._send_json(code, {"error": message})

    def _send_html(self, code: int, page: str) -> None:
        """Send an HTML response with the given status code."""
        body = page.encode("utf-8")
        self.send_response(code)
        self.send_header("Content-Type", "text/html; charset=utf-8")
        self.send_header("Content-Length", str(len(body)))
        self.send_header("Cache-Control", f"max-age={PAGE_CACHE_SECONDS}")
        self.send_header("Connection", "close")
        self.end_headers()
        self.wfile.write(body)

    def do_GET(self) -> None:
        """Handle GET requests."""
        if not self._check_rate_limit():
            return

        path = urlparse(self.path).path
        try:
            if path in ("/", "/index.html"):
                self._handle_page()
            elif path == "/health":
                self._handle_health()
            elif path == "/reports":
                self._handle_reports_all()
            elif path.startswith("/reports/"):
                key = unquote(path[9:])  # Extract key after /reports/
                if key:
                    self._handle_report_by_key(key)
                else:
                    self._send_error_json(400, "Target key is required")
            else:
                self._send_error_json(404, "Not found")
        except Exception as e:
            logger.exception("Error handling request: %s", e)
            self._send_error_json(500, "Internal server error")

    def _handle_page(self) -> None:
        """Handle GET / endpoint - serve the rendered status page."""
        if self.source is None:
            self._send_error_json(503, "Log source not available")
            return
        self._send_html(200, build_page(self.source, max_days=self.max_days))

    def _handle_health(self) -> None:
        """Handle GET /health endpoint."""
        self._send_json(200, {"status": "ok"})

    def _load_reports(self) -> Optional[List[Dict[str, Any]]]:
        """Generate all reports as dictionaries, or send an error and return None."""
        if self.source is None:
            self._send_error_json(503, "Log source not available")
            return None

        now = datetime.now(UTC)
        try:
            reports = generate_all_reports(self.source, now=now, max_days=self.max_days)
        except FetchError as e:
            logger.error("Failed to load targets: %s", e)
            self._send_error_json(502, "Unable to load targets")
            return None
        return [report_to_dict(r, now) for r in reports]

    def _handle_reports_all(self) -> None:
        """Handle GET /reports endpoint."""
        reports = self._load_reports()
        if reports is None:
            return
        self._send_json(200, {"reports": reports, "count": len(reports)})

    def _handle_report_by_key(self, key: str) -> None:
        """Handle GET /reports/<key> endpoint."""
        reports = self._load_reports()
        if reports is None:
            return

        for report in reports:
            if report["key"] == key:
                self._send_json(200, report)
                return
        self._send_error_json(404, f"Target '{key}' not found")


def _create_handler_class(
    source: LogSource,
    max_days: int = MAX_DAYS,
    rate_limiter: Optional[RateLimiter] = None,
) -> type:
    """Create a handler class with the log source and settings bound."""

    class BoundStatusHandler(StatusHandler):
        pass

    BoundStatusHandler.source = source
    BoundStatusHandler.max_days = max_days
    BoundStatusHandler.rate_limiter = rate_limiter
    return BoundStatusHandler


# Human-readable reasons for the bind errors users actually hit.
_BIND_ERRORS = {
    errno.EADDRINUSE: "Port {port} is already in use by another process",
    errno.EACCES: "Permission denied for port {port}; ports below 1024 need root privileges",
}


class ApiServer:
    """Serves the status page from a background thread."""

    def __init__(
        self,
        config: ApiConfig,
        source: LogSource,
        max_days: int = MAX_DAYS,
    ) -> None:
        self.config = config
        self.source = source
        self.max_days = max_days
        self._server: Optional[HTTPServer] = None
        self._thread: Optional[threading.Thread] = None

    def start(self) -> None:
        """Bind the port and start serving.

        Raises:
            ApiError: If the port cannot be bound.
        """
        if self.is_running:
            logger.warning("API server is already running")
            return

        handler_class = _create_handler_class(self.source, self.max_days, RateLimiter())
        try:
            self._server = HTTPServer(("", self.config.port), handler_class)
        except OSError as e:
            reason = _BIND_ERRORS.get(e.errno, "Failed to bind port {port}: {error}")
            raise ApiError(reason.format(port=self.config.port, error=e))

        self._thread = threading.Thread(
            target=self._server.serve_forever,
            kwargs={"poll_interval": 0.5},
            name="statuslog-http",
            daemon=True,
        )
        self._thread.start()
        logger.info("Serving status page on port %d", self.config.port)

    def stop(self) -> None:
        """Stop serving and release the port. Safe to call when not running."""
        if self._server is None:
            return

        logger.info("Stopping API server...")
        self._server.shutdown()
        self._server.server_close()
        if self._thread is not None:
            self._thread.join(timeout=5.0)
        self._server = None
        self._thread = None

    @property
    def is_running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()
