#!/usr/bin/env python3
"""
Script runner

Usage:
  python scripts/run_scripts.py <file-or-dir>... [--base-url <url>] [--timeout-sec <sec>]
                                [--header "Name: value"]... [--log-level <level>]
                                [--log-format json|text]

Examples:
  python scripts/run_scripts.py testdata/
  python scripts/run_scripts.py smoke.testdrive --base-url http://localhost:8080
  python scripts/run_scripts.py testdata/ --header "Authorization: Bearer xxx" --log-format json

Exit code: 0 when every script passes, 1 when one fails, 2 on usage errors.
"""
from __future__ import annotations

import argparse
import sys
from pathlib import Path
from typing import List, Optional

from application.engine import Engine, EngineConfig
from application.executor.command_registry import common_parsers
from application.ports.logger import LoggerPort
from application.script_runner import ScriptReport, ScriptRunner
from infrastructure.config.env_settings import LOG_FORMATS, EnvEngineSettings
from infrastructure.http.header_injector import HeaderInjector, parse_header_args
from infrastructure.logging.console_logger import ConsoleLogger
from infrastructure.logging.log_setup import setup_console_logging
from infrastructure.logging.loguru_logger import LoguruLogger
from infrastructure.script.file_finder import ScriptFileFinder

EXIT_OK = 0
EXIT_FAILED = 1
EXIT_USAGE = 2


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Run .testdrive scripts")
    parser.add_argument("paths", nargs="+", type=Path, help="script files or directories")
    parser.add_argument("--base-url", type=str, help="base URL for relative request URLs")
    parser.add_argument("--timeout-sec", type=float, help="deadline for each script")
    parser.add_argument("--header", action="append", default=[], help='extra request header "Name: value"')
    parser.add_argument("--log-level", type=str.upper, choices=["DEBUG", "INFO", "ERROR"])
    parser.add_argument("--log-format", type=str, choices=list(LOG_FORMATS))
    return parser


def _build_logger(log_format: str, level: str) -> LoggerPort:
    if log_format == "json":
        return ConsoleLogger(min_level=level)
    setup_console_logging(level=level)
    return LoguruLogger()


def _print_report(report: ScriptReport) -> None:
    if report.ok:
        print(f"PASS {report.name}")
    else:
        print(f"FAIL {report.location}: {report.error}")


def main(argv: Optional[List[str]] = None) -> None:
    args = _build_parser().parse_args(argv)

    try:
        settings = EnvEngineSettings.load()
        headers = parse_header_args(args.header)
        files = ScriptFileFinder().find(args.paths)
    except (ValueError, FileNotFoundError) as exc:
        print(f"ERROR: {exc}")
        sys.exit(EXIT_USAGE)

    if not files:
        print("ERROR: no scripts found")
        sys.exit(EXIT_USAGE)

    logger = _build_logger(
        log_format=args.log_format or settings.log_format,
        level=args.log_level or settings.log_level,
    )
    engine = Engine(
        EngineConfig(
            parsers=common_parsers(),
            logger=logger,
            base_url=args.base_url or settings.base_url,
            request_interceptor=HeaderInjector(headers) if headers else None,
        )
    )
    timeout = args.timeout_sec if args.timeout_sec is not None else settings.timeout_sec
    try:
        reports = ScriptRunner(engine, timeout_sec=timeout).run_all(files, on_report=_print_report)
    finally:
        engine.close()

    failed = [r for r in reports if not r.ok]
    print(f"\n{len(reports) - len(failed)} passed, {len(failed)} failed")
    sys.exit(EXIT_FAILED if failed else EXIT_OK)


if __name__ == "__main__":
    main()
