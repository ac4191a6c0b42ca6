"""
tests/test_dashboard.py
Flask test-client tests for dashboard/app.py and unit tests for
dashboard/helpers.py. The scanner is faked; nothing touches the network.
Run: pytest tests/test_dashboard.py -v
"""

import sys, os
from datetime import datetime, timezone
sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

import pytest

from cache.result_cache import ResultCache
from cache.scan_service import ScanOutcome
from core.probe_engine import CheckResult
from core.probes import VersionResult
from dashboard.app import create_app
from dashboard.helpers import (
    cap_first, filter_by_grade, grade_class, http11_warning,
    input_validation_error, legacy_not_supported_ok, parse_targets_param,
    unresolved_host_error, version_downgrade_note, wants_json,
)


def result(target, h10=False, h11=True, h2=True, h3=False, grade="B", score=90, **kw):
    return CheckResult(
        target=target, url=f"https://{target}:443", port="443",
        results=(
            VersionResult("HTTP/1.0", h10, "supported" if h10 else "not supported (good) - TCP connection refused", error=not h10),
            VersionResult("HTTP/1.1", h11, "supported"),
            VersionResult("HTTP/2.0", h2, "supported"),
            VersionResult("HTTP/3.0", h3, "supported" if h3 else "not supported"),
        ),
        score=score, grade=grade, **kw,
    )


def invalid(target):
    return CheckResult(
        target=target,
        results=(VersionResult("error", error=True, detail="invalid URL: invalid domain name in URL"),),
    )


class FakeScanner:
    def __init__(self, make=result):
        self.cache = ResultCache()
        self.make = make
        self.calls = []

    def scan(self, targets, hide_from_recent=False):
        self.calls.append((list(targets), hide_from_recent))
        results = [self.make(t) for t in targets]
        if not hide_from_recent:
            self.cache.set(",".join(targets).lower(), results)
        return ScanOutcome(results=results, used_cache=False)


@pytest.fixture
def scanner():
    return FakeScanner()


@pytest.fixture
def client(scanner):
    return create_app({}, scanner=scanner).test_client()


# ─── Routes ───────────────────────────────────────────────────────────────────

class TestRoutes:

    def test_health(self, client):
        r = client.get("/health")
        assert r.status_code == 200
        assert r.get_json() == {"status": "ok"}

    def test_index_form(self, client, scanner):
        r = client.get("/")
        assert r.status_code == 200
        assert b"<form" in r.data
        assert scanner.calls == []

    def test_about_and_problem(self, client):
        assert client.get("/about").status_code == 200
        assert client.get("/problem").status_code == 200

    def test_unknown_route_json_404(self, client):
        r = client.get("/nope")
        assert r.status_code == 404
        assert r.get_json() == {"error": "not found"}

    def test_wrong_method_keeps_405(self, client):
        r = client.post("/health")
        assert r.status_code == 405
        assert "error" in r.get_json()

    def test_scan_json_single_object(self, client):
        r = client.get("/scan?t=example.com&format=json")
        assert r.status_code == 200
        assert r.mimetype == "application/json"
        data = r.get_json()
        assert data["target"] == "example.com"
        assert data["grade"] == "B"

    def test_scan_json_array_via_accept(self, client, scanner):
        r = client.get("/scan?t=a.com,b.com,A.COM", headers={"Accept": "application/json"})
        data = r.get_json()
        assert [d["target"] for d in data] == ["a.com", "b.com"]
        assert scanner.calls[0][0] == ["a.com", "b.com"]

    def test_too_many_targets_json(self, client, scanner):
        r = client.get("/scan?t=a.com,b.com,c.com,d.com,e.com,f.com&format=json")
        assert r.status_code == 400
        assert r.get_json()["error"] == "Please provide between 1 and 5 targets."
        assert scanner.calls == []

    def test_too_many_targets_html(self, client):
        r = client.get("/scan?t=a.com,b.com,c.com,d.com,e.com,f.com")
        assert r.status_code == 200
        assert b"Please provide between 1 and 5 targets." in r.data

    def test_no_targets_json_400(self, client):
        assert client.get("/scan?format=json").status_code == 400

    def test_hide_flag(self, client, scanner):
        client.get("/scan?t=a.com&hide=on")
        client.get("/scan?t=b.com&hide=1")
        client.get("/scan?t=c.com&hide=yes")
        assert [hide for _, hide in scanner.calls] == [True, True, False]

    def test_html_results(self, client):
        r = client.get("/?t=example.com")
        assert r.status_code == 200
        body = r.get_data(as_text=True)
        assert "example.com" in body
        assert "HTTP/2.0" in body
        assert "Recently scanned" in body

    def test_invalid_single_target_message(self):
        client = create_app({}, scanner=FakeScanner(invalid)).test_client()
        body = client.get("/?t=bad..host").get_data(as_text=True)
        assert "is invalid and cannot be scanned" in body

    def test_unresolved_single_target_message(self):
        scanner = FakeScanner(lambda t: result(t, False, False, False, grade="F", score=40, unresolved=True))
        client = create_app({}, scanner=scanner).test_client()
        body = client.get("/?t=nx.example").get_data(as_text=True)
        assert "no DNS records found" in body

    def test_max_targets_configurable(self, scanner):
        client = create_app({"max_targets": 2}, scanner=scanner).test_client()
        r = client.get("/scan?t=a.com,b.com,c.com&format=json")
        assert r.status_code == 400
        assert "between 1 and 2" in r.get_json()["error"]

    def test_scanner_crash_hides_stacktrace(self):
        class Boom(FakeScanner):
            def scan(self, targets, hide_from_recent=False):
                raise RuntimeError("secret internals")

        client = create_app({}, scanner=Boom()).test_client()
        r = client.get("/scan?t=a.com")
        assert r.status_code == 500
        assert b"secret internals" not in r.data


# ─── Helpers ──────────────────────────────────────────────────────────────────

class TestHelpers:

    def test_parse_targets_param(self):
        assert parse_targets_param(" a.com , ,B.com,A.COM ") == ["a.com", "B.com"]
        assert parse_targets_param("") == []
        assert parse_targets_param(None) == []

    def test_wants_json(self):
        assert wants_json({"format": "json"}, {})
        assert wants_json({}, {"Accept": "application/json, text/plain"})
        assert not wants_json({}, {"Accept": "text/html"})

    def test_input_validation_error(self):
        msg = input_validation_error([invalid("x..y")])
        assert msg == ('The hostname "x..y" is invalid and cannot be scanned '
                       '(invalid URL: invalid domain name in URL).')
        assert input_validation_error([invalid("a"), invalid("b")]) is None
        assert input_validation_error([result("ok.com")]) is None

    def test_unresolved_host_error(self):
        assert unresolved_host_error([result("nx.example", unresolved=True)]) == (
            'The hostname "nx.example" cannot be scanned (no DNS records found).'
        )
        assert unresolved_host_error([result("ok.com")]) is None

    def test_grade_class(self):
        assert grade_class("A") == "fantastic"
        assert grade_class("B") == "borderline"
        assert grade_class("C") == "borderline"
        assert grade_class("F") == "fail"
        assert grade_class(None) == "fail"

    def test_filter_by_grade(self):
        cache = ResultCache()
        cache.set("k", [result("a.com", grade="A"), result("b.com"), result("c.com", grade="A")])
        snaps = cache.recent_snapshots(10)
        assert [s.target for s in filter_by_grade(snaps, "A", 6)] == ["a.com", "c.com"]
        assert [s.target for s in filter_by_grade(snaps, "A", 1)] == ["a.com"]
        assert filter_by_grade(snaps, "A", 0) == []

    def test_legacy_not_supported_ok(self):
        rows = result("x.com").results
        assert legacy_not_supported_ok(rows[0])
        assert not legacy_not_supported_ok(rows[1])
        assert legacy_not_supported_ok(VersionResult("HTTP/1.1", detail="not supported"))
        assert not legacy_not_supported_ok(VersionResult("HTTP/2.0", detail="not supported"))

    def test_http11_warning(self):
        only_11 = result("x.com", h2=False).results
        assert "highest supported version" in http11_warning(only_11, only_11[1])
        with_h10 = result("x.com", h10=True).results
        assert "downgraded to HTTP/1.0" in http11_warning(with_h10, with_h10[1])
        modern = result("x.com").results
        assert http11_warning(modern, modern[1]) == ""

    def test_version_downgrade_note(self):
        rows = result("x.com", h3=True).results
        assert "possible" in version_downgrade_note(rows, rows[3])
        assert "HTTP/1.1 is possible" in version_downgrade_note(rows, rows[2])
        h3_only = result("x.com", h11=False, h2=False, h3=True).results
        assert version_downgrade_note(h3_only, h3_only[3]) == "Downgrade below HTTP/3 is not possible (good)."
        assert version_downgrade_note(rows, rows[0]) == ""

    def test_cap_first(self):
        assert cap_first("not supported") == "Not supported"
        assert cap_first("") == ""
