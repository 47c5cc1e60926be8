"""Sources for the targets file and per-target check-result logs.

A source serves two kinds of resources:

- the targets file (``urls.cfg``), whose absence is fatal for a page;
- one log per target (``logs/<key>_report.log``), whose absence is
  treated as an empty log.
"""

import logging
from pathlib import Path
from urllib.parse import quote

import requests

from .config import Config

logger = logging.getLogger(__name__)


class FetchError(Exception):
    """Raised when the targets file cannot be loaded."""

    pass


def log_filename(key: str) -> str:
    """Return the log file name for a target key."""
    return f"{key}_report.log"


class FileLogSource:
    """Reads the targets file and logs from a local site directory."""

    def __init__(self, root: str, targets_file: str = "urls.cfg", logs_dir: str = "logs") -> None:
        self.root = Path(root)
        self.targets_file = targets_file
        self.logs_dir = logs_dir

    def fetch_targets(self) -> str:
        """Return the targets file text.

        Raises:
            FetchError: If the file cannot be read.
        """
        path = self.root / self.targets_file
        try:
            return path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as e:
            raise FetchError(f"Failed to read targets file {path}: {e}")

    def fetch_log(self, key: str) -> str:
        """Return the log text for a target, or "" if it cannot be read."""
        path = self.root / self.logs_dir / log_filename(key)
        try:
            return path.read_text(encoding="utf-8", errors="replace")
        except FileNotFoundError:
            logger.warning("Log for %s not found at %s", key, path)
        except OSError as e:
            logger.warning("Failed to read log for %s: %s", key, e)
        return ""

    def close(self) -> None:
        pass


class HttpLogSource:
    """Fetches the targets file and logs relative to an http(s) base URL."""

    def __init__(
        self,
        base_url: str,
        targets_file: str = "urls.cfg",
        logs_dir: str = "logs",
        timeout: int = 10,
        user_agent: str = "StatusLog/0.1",
        session: requests.Session | None = None,
    ) -> None:
        self.base_url = base_url.rstrip("/") + "/"
        self.targets_file = targets_file
        self.logs_dir = logs_dir.strip("/")
        self.timeout = timeout
        self._session = session or requests.Session()
        self._session.headers["User-Agent"] = user_agent

    def _url(self, *parts: str) -> str:
        return self.base_url + "/".join(quote(part) for part in parts if part)

    def fetch_targets(self) -> str:
        """Return the targets file text.

        Raises:
            FetchError: If the request fails or returns a non-OK status.
        """
        url = self._url(self.targets_file)
        try:
            response = self._session.get(url, timeout=self.timeout)
            response.raise_for_status()
        except requests.RequestException as e:
            raise FetchError(f"Failed to load targets file from {url}: {e}")
        return response.text

    def fetch_log(self, key: str) -> str:
        """Return the log text for a target, or "" if the request is not OK."""
        url = self._url(self.logs_dir, log_filename(key))
        try:
            response = self._session.get(url, timeout=self.timeout)
        except requests.RequestException as e:
            logger.warning("Failed to fetch log for %s from %s: %s", key, url, e)
            return ""

        if not response.ok:
            logger.warning("Log for %s returned HTTP %d", key, response.status_code)
            return ""
        return response.text

    def close(self) -> None:
        self._session.close()


LogSource = FileLogSource | HttpLogSource


def create_source(config: Config) -> LogSource:
    """Build the source matching the configured location."""
    if config.is_remote:
        return HttpLogSource(
            config.source,
            targets_file=config.targets_file,
            logs_dir=config.logs_dir,
            timeout=config.fetch.timeout,
            user_agent=config.fetch.user_agent,
        )
    return FileLogSource(config.source, targets_file=config.targets_file, logs_dir=config.logs_dir)
