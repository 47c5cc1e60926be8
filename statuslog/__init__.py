"""StatusLog - Uptime history status pages from check-result logs."""

import argparse
import json
import logging
import signal
import sys
from threading import Event
from typing import Optional

__version__ = "0.1.0"

# Global shutdown event for signal handlers
_shutdown_event: Optional[Event] = None

logger = logging.getLogger(__name__)


def _setup_logging(verbose: bool = False, stream=None) -> None:
    """Configure logging for the application."""
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
        stream=stream or sys.stdout,
    )


def _handle_shutdown(signum: int, frame: object) -> None:
    """Signal handler for graceful shutdown."""
    sig_name = signal.Signals(signum).name
    logger.info("Received %s, initiating shutdown...", sig_name)
    if _shutdown_event is not None:
        _shutdown_event.set()


def _load_config_or_exit(args: argparse.Namespace):
    """Load configuration, logging the error and exiting with status 1 on failure."""
    from .config import ConfigError, load_config

    try:
        config = load_config(args.config, source=args.source)
        logger.info("Using source %s", config.source)
        return config
    except ConfigError as e:
        logger.error("Configuration error: %s", e)
        sys.exit(1)


def _cmd_serve(args: argparse.Namespace) -> None:
    """Execute the serve command - serve the status page over HTTP."""
    global _shutdown_event

    _setup_logging(args.verbose)

    logger.info("StatusLog %s starting...", __version__)

    from .api import ApiError, ApiServer
    from .config import ApiConfig
    from .fetcher import create_source

    config = _load_config_or_exit(args)
    api_config = config.api if args.port is None else ApiConfig(enabled=True, port=args.port)

    if not api_config.enabled:
        logger.error("API server is disabled in configuration")
        sys.exit(1)

    _shutdown_event = Event()
    signal.signal(signal.SIGTERM, _handle_shutdown)
    signal.signal(signal.SIGINT, _handle_shutdown)

    source = create_source(config)
    api_server = ApiServer(api_config, source, max_days=config.report.max_days)

    try:
        api_server.start()
    except ApiError as e:
        logger.error("Failed to start API server: %s", e)
        source.close()
        sys.exit(1)

    try:
        logger.info("Serving status page, waiting for shutdown signal...")
        _shutdown_event.wait()
    except KeyboardInterrupt:
        logger.info("Keyboard interrupt received")
    finally:
        api_server.stop()
        source.close()
        logger.info("Shutdown complete")


def _cmd_build(args: argparse.Namespace) -> None:
    """Execute the build command - write the status page to a file."""
    from pathlib import Path

    from .fetcher import create_source
    from .report import build_page

    _setup_logging(args.verbose)

    config = _load_config_or_exit(args)
    output = Path(args.output or config.output)

    source = create_source(config)
    try:
        page = build_page(source, max_days=config.report.max_days, title=args.title)
    finally:
        source.close()

    try:
        output.write_text(page, encoding="utf-8")
    except OSError as e:
        logger.error("Failed to write %s: %s", output, e)
        sys.exit(1)

    logger.info("Status page written to %s", output)


def _cmd_report(args: argparse.Namespace) -> None:
    """Execute the report command - print normalized reports as JSON."""
    from datetime import UTC, datetime

    from .fetcher import FetchError, create_source
    from .render import report_to_dict
    from .report import generate_all_reports

    _setup_logging(args.verbose, stream=sys.stderr)

    config = _load_config_or_exit(args)
    now = datetime.now(UTC)

    source = create_source(config)
    try:
        reports = generate_all_reports(source, now=now, max_days=config.report.max_days)
    except FetchError as e:
        logger.error("Error generating reports: %s", e)
        sys.exit(1)
    finally:
        source.close()

    if args.key:
        reports = [r for r in reports if r.target.key == args.key]
        if not reports:
            logger.error("Target '%s' not found", args.key)
            sys.exit(1)

    print(json.dumps([report_to_dict(r, now) for r in reports], indent=2))


def _add_common_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "-c", "--config",
        default="config.yaml",
        help="Path to configuration file (default: config.yaml)",
    )
    parser.add_argument(
        "-s", "--source",
        help="Site directory or http(s) base URL (overrides config)",
    )
    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Enable verbose (debug) logging",
    )


def main(argv: Optional[list[str]] = None) -> None:
    """Main entry point for the statuslog package."""
    parser = argparse.ArgumentParser(
        description="StatusLog - Uptime history status pages from check-result logs"
    )
    parser.add_argument(
        "--version",
        action="version",
        version=f"statuslog {__version__}",
    )

    subparsers = parser.add_subparsers(dest="command")

    # Serve subcommand (default behavior)
    serve_parser = subparsers.add_parser(
        "serve",
        help="Serve the status page over HTTP (default)",
    )
    _add_common_arguments(serve_parser)
    serve_parser.add_argument(
        "-p", "--port",
        type=int,
        help="Port to listen on (overrides config)",
    )
    serve_parser.set_defaults(func=_cmd_serve)

    # Build subcommand
    build_parser = subparsers.add_parser(
        "build",
        help="Write the status page to a static HTML file",
    )
    _add_common_arguments(build_parser)
    build_parser.add_argument(
        "-o", "--output",
        help="Output HTML file (overrides config)",
    )
    build_parser.add_argument(
        "--title",
        help="Page title",
    )
    build_parser.set_defaults(func=_cmd_build)

    # Report subcommand
    report_parser = subparsers.add_parser(
        "report",
        help="Print normalized reports as JSON",
    )
    _add_common_arguments(report_parser)
    report_parser.add_argument(
        "key",
        nargs="?",
        help="Only print the report for this target",
    )
    report_parser.set_defaults(func=_cmd_report)

    args = parser.parse_args(argv)

    # Default to 'serve' if no command specified
    if args.command is None:
        args.config = "config.yaml"
        args.source = None
        args.verbose = False
        args.port = None
        args.func = _cmd_serve

    args.func(args)
