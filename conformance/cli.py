"""Command line entry point: ``python -m conformance``."""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
from pathlib import Path
from typing import Iterable, Optional

import uvicorn
from playwright.async_api import Error as PlaywrightError

from .compare import assert_media_info_equal, assert_orientation_equal
from .errors import ConformanceError, MediaInfoMismatch
from .fixtures import load_fixture
from .matrix import Scenario, build_matrix
from .runner import run_matrix
from .server import create_app
from .settings import HarnessConfig

logger = logging.getLogger("conformance.cli")


def _config(args: argparse.Namespace) -> HarnessConfig:
    return HarnessConfig.from_env(
        page_url=getattr(args, "page_url", None),
        samples_root=getattr(args, "samples", None),
        fixtures_root=getattr(args, "fixtures", None),
        strict_fixtures=True if getattr(args, "strict", False) else None,
        headless=False if getattr(args, "headed", False) else None,
    )


def _select(args: argparse.Namespace, config: HarnessConfig):
    cases = build_matrix(config)
    if args.scenario:
        wanted = {Scenario(s) for s in args.scenario}
        cases = [c for c in cases if c.scenario in wanted]
    if args.k:
        cases = [c for c in cases if args.k in c.sample.name]
    return cases


def cmd_scan(args: argparse.Namespace) -> int:
    for case in _select(args, _config(args)):
        print(f"{case.case_id}\t{case.fixture or '-'}")
    return 0


def cmd_compare(args: argparse.Namespace) -> int:
    actual = load_fixture(args.actual)
    expected = load_fixture(args.expected)
    check = assert_orientation_equal if args.orientation else assert_media_info_equal
    try:
        check(actual, expected)
    except MediaInfoMismatch as exc:
        for line in exc.differences:
            print(f"  {line}")
        return 1
    print("equal")
    return 0


def cmd_run(args: argparse.Namespace) -> int:
    config = _config(args)
    cases = _select(args, config)
    if not cases:
        print("no cases selected")
        return 0
    try:
        results = asyncio.run(
            run_matrix(cases, config, concurrency=args.concurrency, timeout=args.timeout)
        )
    except PlaywrightError as exc:
        if "Executable doesn't exist" in str(exc):
            print("Playwright Chromium is missing. Run `playwright install chromium`.")
            return 2
        raise

    failed = [r for r in results if not r.passed]
    for result in results:
        status = "PASS" if result.passed else "FAIL"
        print(f"{status} {result.case.description} ({result.elapsed_s:.2f}s)")
        if result.error:
            print(f"     {result.error}")
    print(f"{len(results) - len(failed)} passed, {len(failed)} failed")
    if args.json:
        summary = [
            {"case": r.case.case_id, "passed": r.passed, "error": r.error, "elapsed_s": r.elapsed_s}
            for r in results
        ]
        args.json.write_text(json.dumps(summary, indent=2, ensure_ascii=False), encoding="utf-8")
    return 1 if failed else 0


def cmd_serve(args: argparse.Namespace) -> int:
    config = HarnessConfig.from_env(server_host=args.host, server_port=args.port, demuxer_dist=args.demuxer)
    logger.info("Harness page at http://%s:%s/", config.server_host, config.server_port)
    uvicorn.run(create_app(config), host=config.server_host, port=config.server_port, log_level="info")
    return 0


def _add_matrix_args(p: argparse.ArgumentParser) -> None:
    p.add_argument("--samples", type=Path, help="Sample corpus root (default: ./samples)")
    p.add_argument("--fixtures", type=Path, help="Fixture root (default: ./fixtures/mediainfo)")
    p.add_argument("--strict", action="store_true", help="Fail before running if a sample has no fixture")
    p.add_argument(
        "--scenario",
        action="append",
        choices=[s.value for s in Scenario],
        help="Only this scenario (repeatable)",
    )
    p.add_argument("-k", metavar="TEXT", help="Only samples whose name contains TEXT")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="conformance", description="Demuxer conformance harness")
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    sub = parser.add_subparsers(dest="command", required=True)

    scan = sub.add_parser("scan", help="List the test matrix")
    _add_matrix_args(scan)
    scan.set_defaults(func=cmd_scan)

    compare = sub.add_parser("compare", help="Compare two media info JSON files")
    compare.add_argument("actual", type=Path)
    compare.add_argument("expected", type=Path)
    compare.add_argument("--orientation", action="store_true", help="Compare only id/rotation/flip per stream")
    compare.set_defaults(func=cmd_compare)

    run = sub.add_parser("run", help="Run the matrix against Chromium")
    _add_matrix_args(run)
    run.add_argument("--page-url", help="Harness page URL (default: http://localhost:5173)")
    run.add_argument("--concurrency", type=int, default=4)
    run.add_argument("--timeout", type=float, default=60.0, help="Per-case timeout in seconds")
    run.add_argument("--headed", action="store_true", help="Show the browser")
    run.add_argument("--json", type=Path, help="Write a machine-readable summary here")
    run.set_defaults(func=cmd_run)

    serve = sub.add_parser("serve", help="Serve the harness page")
    serve.add_argument("--host")
    serve.add_argument("--port", type=int)
    serve.add_argument("--demuxer", type=Path, help="Directory holding the demuxer bundle")
    serve.set_defaults(func=cmd_serve)
    return parser


def main(argv: Optional[Iterable[str]] = None) -> int:
    args = build_parser().parse_args(list(argv) if argv is not None else None)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(message)s",
    )
    try:
        return args.func(args)
    except ConformanceError as exc:
        print(f"error: {exc}")
        return 2
