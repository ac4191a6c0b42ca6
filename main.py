#!/usr/bin/env python3
"""
httpver — HTTP protocol version checker
main.py — CLI entry point

Usage:
  python3 main.py cloudflare.com
  python3 main.py -p 8443 example.com
  python3 main.py --json cloudflare.com example.org
  python3 main.py --targets cloudflare.com,example.com --json
  python3 main.py --targets-file targets.txt
  python3 main.py --web 8080 --host 0.0.0.0
"""

from __future__ import annotations

import argparse
import asyncio
import sys
import time
from datetime import timedelta
from typing import List, Optional, Sequence

import yaml

from core.probe_engine import ProtocolProbeEngine
from core.scheduler import BatchScheduler
from reporting.formatters import (
    LEGEND, format_elapsed, results_to_json, summary_line,
)
from utils.constants import CACHE_TTL_HOURS, MAX_RECENT_KEYS
from utils.logger import get_logger, quiet_dependency_loggers, set_level
from utils.validators import validate_port

log = get_logger("httpver")

VERSION = "httpver 1.0"

USAGE_EXAMPLES = """\
Usage: httpver [-p N] [--json] [--targets a.com,b.com] [--targets-file file] <domain-or-url> ...
       httpver --web PORT [--host H]
Example: httpver cloudflare.com
Example: httpver -p 8443 example.com
Example: httpver --json cloudflare.com example.org
Example: httpver --targets cloudflare.com,example.com --json
Example: httpver --targets-file targets.txt --json"""


class TargetsFileError(OSError):
    """Raised when --targets-file cannot be read."""


def _load_config(path: str) -> dict:
    try:
        with open(path) as f:
            return yaml.safe_load(f) or {}
    except FileNotFoundError:
        return {}


# ─── Target gathering ─────────────────────────────────────────────────────────

def gather_targets(
    targets_flag: str = "",
    targets_file: str = "",
    positional: Sequence[str] = (),
) -> List[str]:
    """
    Collect targets from the file (one per line, blanks and '#' comments
    skipped), then the comma-separated flag, then positionals. Exact
    duplicates are dropped, first occurrence wins.
    """
    targets: List[str] = []

    if targets_file:
        try:
            with open(targets_file, encoding="utf-8") as f:
                lines = f.read().splitlines()
        except OSError as exc:
            raise TargetsFileError(f"failed to read targets file: {exc}") from exc
        for line in lines:
            line = line.strip()
            if not line or line.startswith("#"):
                continue
            targets.append(line)

    if targets_flag:
        for part in targets_flag.split(","):
            part = part.strip()
            if part:
                targets.append(part)

    targets.extend(positional)

    seen = set()
    deduped: List[str] = []
    for t in targets:
        if t in seen:
            continue
        seen.add(t)
        deduped.append(t)
    return deduped


# ─── Runners ──────────────────────────────────────────────────────────────────

async def _print_streaming(
    scheduler: BatchScheduler, targets: Sequence[str], override_port: Optional[int]
) -> None:
    async for res in scheduler.stream(targets, override_port):
        print(summary_line(res), flush=True)


def run_text(
    targets: Sequence[str],
    override_port: Optional[int] = None,
    scheduler: Optional[BatchScheduler] = None,
) -> None:
    scheduler = scheduler or BatchScheduler()
    if len(targets) == 1:
        for res in asyncio.run(scheduler.run(targets, override_port)):
            print(summary_line(res))
    else:
        asyncio.run(_print_streaming(scheduler, targets, override_port))


def run_json(
    targets: Sequence[str],
    override_port: Optional[int] = None,
    scheduler: Optional[BatchScheduler] = None,
) -> int:
    scheduler = scheduler or BatchScheduler()
    results = asyncio.run(scheduler.run(targets, override_port))
    try:
        payload = results_to_json(results)
    except (TypeError, ValueError) as exc:
        log.error(f"failed to encode JSON: {exc}")
        return 1
    print(payload)
    return 0


def run_web(port: int, host: str, cfg: dict) -> None:
    from cache.result_cache import ResultCache
    from cache.scan_service import CachedScanner
    from dashboard.app import run_dashboard

    cache_cfg = cfg.get("cache", {}) or {}
    cache = ResultCache(
        ttl=timedelta(hours=float(cache_cfg.get("ttl_hours", CACHE_TTL_HOURS))),
        max_recent=int(cache_cfg.get("max_recent", MAX_RECENT_KEYS)),
    )
    dash_cfg = {
        **(cfg.get("dashboard", {}) or {}),
        "host": host,
        "port": port,
    }
    run_dashboard(dash_cfg, CachedScanner(cache=cache))


# ─── CLI ─────────────────────────────────────────────────────────────────────

def build_cli() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(
        prog="httpver",
        description="Check which HTTP versions (1.0, 1.1, 2, 3) a server supports and grade it",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Targets:      example.com  |  https://example.com:8443/path  |  http://198.51.100.7
Legend:       %s

Examples:
  %%(prog)s cloudflare.com
  %%(prog)s --json cloudflare.com example.org
  %%(prog)s --targets-file targets.txt
  %%(prog)s --web 8080
""" % LEGEND,
    )
    g = ap.add_argument_group
    s = g("Scan")
    s.add_argument("target_args",    nargs="*", metavar="TARGET", help="Domain or URL to check")
    s.add_argument("-p", "--port",   type=int, default=0, metavar="N",
                   help="Override port for every target (0 = use URL/default)")
    s.add_argument("--json",         action="store_true", help="Print results as JSON")
    s.add_argument("--targets",      default="", metavar="LIST", help="Comma-separated targets")
    s.add_argument("--targets-file", default="", metavar="FILE",
                   help="File with one target per line ('#' comments allowed)")

    w = g("Web")
    w.add_argument("--web",          type=int, metavar="PORT", help="Serve the web UI on PORT")
    w.add_argument("--host",         default=None, help="Web UI bind address (default 0.0.0.0)")

    ap.add_argument("--config",      default="config.yaml", metavar="FILE")
    ap.add_argument("--quiet",       action="store_true", help="Suppress the scanning banner and timing")
    ap.add_argument("--version",     action="version", version=VERSION)
    return ap


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = build_cli().parse_args(argv)
    cfg = _load_config(args.config)

    level = (cfg.get("logging", {}) or {}).get("level")
    if level:
        set_level(level)
    quiet_dependency_loggers()

    if args.web is not None:
        ok, msg = validate_port(args.web)
        if not ok:
            log.error(msg)
            return 1
        host = args.host or (cfg.get("dashboard", {}) or {}).get("host", "0.0.0.0")
        run_web(args.web, host, cfg)
        return 0

    try:
        targets = gather_targets(args.targets, args.targets_file, args.target_args)
    except TargetsFileError as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 1

    if not targets:
        print(USAGE_EXAMPLES)
        return 1

    override_port: Optional[int] = None
    if args.port:
        ok, msg = validate_port(args.port)
        if not ok:
            print(f"error: {msg}", file=sys.stderr)
            return 1
        override_port = args.port

    if not args.quiet:
        print(f"Scanning {len(targets)} host(s)... ({LEGEND})\n", file=sys.stderr)

    scheduler = BatchScheduler(ProtocolProbeEngine())
    start = time.monotonic()
    try:
        if args.json:
            rc = run_json(targets, override_port, scheduler)
            if rc:
                return rc
            summary_stream = sys.stderr
        else:
            run_text(targets, override_port, scheduler)
            summary_stream = sys.stdout
    except KeyboardInterrupt:
        print("\n[!] Interrupted by user", file=sys.stderr)
        return 130

    if not args.quiet:
        elapsed = format_elapsed(time.monotonic() - start)
        print(file=summary_stream)
        print(f"Scanned {len(targets)} host(s) in {elapsed}", file=summary_stream)
    return 0


if __name__ == "__main__":
    sys.exit(main())
