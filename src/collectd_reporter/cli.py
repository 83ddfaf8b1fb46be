"""CLI interface for collectd_reporter."""

from __future__ import annotations

import argparse
import logging
import signal
import sys
import time

from . import __version__
from .config import AppConfig, load_config
from .errors import ConfigurationError
from .reporter import CollectdReporter, create_reporter

EXIT_CONFIG_ERROR = 2


def _load(args: argparse.Namespace) -> tuple[AppConfig, CollectdReporter]:
    """Load the config and build a reporter, exiting on configuration errors."""
    try:
        cfg = load_config(args.config)
        reporter = create_reporter(cfg.reporter_config())
    except ConfigurationError as exc:
        print(f"Invalid configuration: {exc}", file=sys.stderr)
        sys.exit(EXIT_CONFIG_ERROR)
    return cfg, reporter


def _cmd_run(args: argparse.Namespace) -> None:
    """Report system metrics to collectd until interrupted."""
    cfg, reporter = _load(args)

    from .collector.manager import ReportManager

    manager = ReportManager(cfg.collector, reporter)

    stop = False

    def _handle_signal(_sig: int, _frame: object) -> None:
        nonlocal stop
        stop = True

    signal.signal(signal.SIGINT, _handle_signal)
    signal.signal(signal.SIGTERM, _handle_signal)

    manager.start()
    print(
        f"collectd reporter running (target={cfg.collectd.host}:{cfg.collectd.port}, "
        f"interval={cfg.collector.interval_seconds}s)"
    )
    print("Press Ctrl+C to stop.\n")
    try:
        while not stop:
            time.sleep(0.5)
    finally:
        manager.stop()
    print("\nReporting stopped.")


def _cmd_report_once(args: argparse.Namespace) -> None:
    """Collect and report a single batch."""
    cfg, reporter = _load(args)

    from .collector.manager import ReportManager

    manager = ReportManager(cfg.collector, reporter)
    batch = manager.report_once()
    reporter.cleanup()
    print(f"Reported {len(batch.metrics)} metrics as host {reporter.host_name}")


def _cmd_check_config(args: argparse.Namespace) -> None:
    """Validate the configuration and print the effective target."""
    cfg, reporter = _load(args)
    rc = cfg.reporter_config()
    print("Configuration OK")
    print(f"  Collectd target: {rc.collectd_host or '(not set)'}:{rc.collectd_port}")
    print(f"  Source host:     {reporter.host_name}")
    print(f"  Security level:  {rc.security_level.name}")
    print(f"  Interval:        {cfg.collector.interval_seconds}s")


def _cmd_version(_args: argparse.Namespace) -> None:
    print(f"collectd_reporter {__version__}")


def main(argv: list[str] | None = None) -> None:
    """Entry point for the collectd-reporter CLI."""
    parser = argparse.ArgumentParser(
        prog="collectd-reporter",
        description="Report process and system metrics to a collectd server",
    )
    parser.add_argument("--config", "-c", default=None, help="Path to collectd_reporter.yaml")
    parser.add_argument("--verbose", "-v", action="store_true", help="Enable debug logging")
    sub = parser.add_subparsers(dest="command")

    run_p = sub.add_parser("run", help="Report metrics on an interval until stopped")
    run_p.set_defaults(func=_cmd_run)

    once_p = sub.add_parser("report-once", help="Collect and report a single batch")
    once_p.set_defaults(func=_cmd_report_once)

    check_p = sub.add_parser("check-config", help="Validate the configuration")
    check_p.set_defaults(func=_cmd_check_config)

    ver_p = sub.add_parser("version", help="Print version")
    ver_p.set_defaults(func=_cmd_version)

    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )

    if not hasattr(args, "func"):
        parser.print_help()
        sys.exit(1)

    args.func(args)


if __name__ == "__main__":
    main()
