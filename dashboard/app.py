"""
dashboard/app.py
Flask web front end for protocol checks.

  - GET /, /scan   ?t=a.com,b.com[&hide=1][&format=json]
  - GET /about, /problem   explanatory pages
  - GET /health    container health check
  - debug=False enforced programmatically (cannot be overridden by env)
  - Stacktraces never exposed to client

Layering: dashboard -> cache, reporting, core result types, utils
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Optional

from flask import Flask, Response, jsonify, render_template, request
from werkzeug.exceptions import HTTPException

from cache.result_cache import RecentSnapshot
from cache.scan_service import CachedScanner
from core.probe_engine import CheckResult
from dashboard.helpers import (
    TEMPLATE_HELPERS, filter_by_grade, input_validation_error,
    parse_targets_param, unresolved_host_error, wants_json,
)
from reporting.formatters import age_since, results_to_json, status_emoji, status_title
from utils.constants import MAX_WEB_TARGETS, RECENT_LIMIT, SHOWCASE_LIMIT
from utils.logger import get_logger

log = get_logger("httpver")


@dataclass
class PageData:
    page:             str = "scanner"
    targets_raw:      str = ""
    hide_from_recent: bool = False
    error:            str = ""
    results:          List[CheckResult] = field(default_factory=list)
    used_cache:       bool = False
    cache_age:        str = ""
    recent:           List[RecentSnapshot] = field(default_factory=list)
    best:             List[RecentSnapshot] = field(default_factory=list)
    worst:            List[RecentSnapshot] = field(default_factory=list)

    @property
    def has_results(self) -> bool:
        return bool(self.results)


# -- Factory ------------------------------------------------------------------

def create_app(cfg: Optional[dict] = None, scanner: Optional[CachedScanner] = None) -> Flask:
    """
    Application factory.

    cfg keys:
      max_targets    int -- targets per request (default 5)
      recent_limit   int -- hosts in the "recently scanned" list (default 12)
    """
    cfg = cfg or {}
    scanner = scanner or CachedScanner()
    max_targets = int(cfg.get("max_targets", MAX_WEB_TARGETS))
    recent_limit = int(cfg.get("recent_limit", RECENT_LIMIT))

    app = Flask(__name__, template_folder="templates")
    app.config["DEBUG"]                = False   # HARD -- no env override
    app.config["TESTING"]              = False
    app.config["PROPAGATE_EXCEPTIONS"] = False
    app.config["TRAP_HTTP_EXCEPTIONS"] = False
    app.extensions["httpver.scanner"] = scanner

    app.jinja_env.globals.update(
        TEMPLATE_HELPERS,
        status_emoji=status_emoji,
        status_title=status_title,
        age_since=age_since,
        max_targets=max_targets,
    )

    # Error handlers (no stacktrace leakage)
    @app.errorhandler(404)
    def _e404(e):
        return jsonify({"error": "not found"}), 404

    @app.errorhandler(500)
    def _e500(e):
        app.logger.exception("Internal server error")
        return jsonify({"error": "internal server error"}), 500

    @app.errorhandler(Exception)
    def _unhandled(e):
        # 405, 400 etc. keep their status; only real crashes become 500
        if isinstance(e, HTTPException):
            return jsonify({"error": e.description}), e.code
        app.logger.exception("Unhandled exception")
        return jsonify({"error": "internal server error"}), 500

    def render(data: PageData) -> str:
        if data.page == "scanner":
            data.recent = scanner.cache.recent_snapshots(recent_limit)
            data.best = filter_by_grade(data.recent, "A", SHOWCASE_LIMIT)
            data.worst = filter_by_grade(data.recent, "F", SHOWCASE_LIMIT)
        return render_template("index.html", data=data)

    # Routes
    @app.route("/")
    @app.route("/scan")
    def scan():
        raw = request.args.get("t", "")
        targets = parse_targets_param(raw)
        as_json = wants_json(request.args, request.headers)

        if not targets:
            if as_json:
                return jsonify({"error": "no targets given"}), 400
            return render(PageData(targets_raw=raw))

        if len(targets) > max_targets:
            msg = f"Please provide between 1 and {max_targets} targets."
            if as_json:
                return jsonify({"error": msg}), 400
            return render(PageData(targets_raw=raw, error=msg))

        hide = request.args.get("hide") in ("on", "1")
        outcome = scanner.scan(targets, hide_from_recent=hide)

        if as_json:
            return Response(
                results_to_json(outcome.results) + "\n",
                mimetype="application/json",
            )

        # Single target that never got scanned, or whose name doesn't resolve:
        # a clear alert instead of four failed protocol rows
        msg = input_validation_error(outcome.results) or unresolved_host_error(outcome.results)
        if msg:
            return render(PageData(targets_raw=raw, error=msg))

        return render(PageData(
            targets_raw=raw,
            hide_from_recent=hide,
            results=outcome.results,
            used_cache=outcome.used_cache,
            cache_age=age_since(outcome.scanned_at) if outcome.used_cache else "",
        ))

    @app.route("/problem")
    def problem():
        return render(PageData(page="problem"))

    @app.route("/about")
    def about():
        return render(PageData(page="about"))

    @app.route("/health")
    def health():
        return jsonify({"status": "ok"})

    return app


# -- Server runner ------------------------------------------------------------

def run_dashboard(cfg: dict, scanner: Optional[CachedScanner] = None) -> None:
    app = create_app(cfg, scanner)
    host = cfg.get("host", "0.0.0.0")
    port = cfg.get("port", 8080)
    log.info(f"httpver web UI listening on http://{host}:{port}")
    app.run(host=host, port=port, debug=False, use_reloader=False, threaded=True)
