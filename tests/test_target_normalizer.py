"""
tests/test_target_normalizer.py
Unit tests for core/target_normalizer.py and utils/validators.py.
Run: pytest tests/test_target_normalizer.py -v
"""

import sys, os
sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

import pytest

from core.target_normalizer import (
    TargetNormalizer, TargetValidationError, join_host_port, normalize_target,
)
from utils.validators import is_valid_hostname, sanitize_evidence, validate_port


# ─── Normalization ────────────────────────────────────────────────────────────

class TestNormalize:

    def setup_method(self):
        self.n = TargetNormalizer()

    def test_bare_domain_gets_https_and_443(self):
        t = self.n.normalize("cloudflare.com")
        assert t.scheme == "https"
        assert t.host == "cloudflare.com"
        assert t.port == 443
        assert t.url == "https://cloudflare.com:443"

    def test_http_scheme_defaults_to_80(self):
        t = self.n.normalize("http://neverssl.com")
        assert t.port == 80
        assert t.url == "http://neverssl.com:80"

    def test_embedded_port_kept(self):
        t = self.n.normalize("example.org:8443")
        assert t.port == 8443
        assert t.url == "https://example.org:8443"

    def test_override_beats_embedded_port(self):
        t = self.n.normalize("https://example.org:8443/x", override_port=9443)
        assert t.port == 9443
        assert t.url == "https://example.org:9443/x"

    def test_path_and_query_preserved(self):
        t = self.n.normalize("https://example.com/a/b?c=1")
        assert t.url == "https://example.com:443/a/b?c=1"

    def test_ipv4_literal(self):
        t = self.n.normalize("https://1.1.1.1/path")
        assert t.host == "1.1.1.1"
        assert t.url == "https://1.1.1.1:443/path"

    def test_ipv6_literal_bracketed(self):
        t = self.n.normalize("[2606:4700::1111]")
        assert t.host == "2606:4700::1111"
        assert t.url == "https://[2606:4700::1111]:443"

    def test_trailing_dot_fqdn_allowed(self):
        assert self.n.normalize("example.com.").host == "example.com."

    def test_plain_http_port(self):
        t = self.n.normalize("example.com")
        assert t.plain_http_port() == 80
        assert t.plain_http_port(8080) == 8080


class TestRejections:

    def setup_method(self):
        self.n = TargetNormalizer()

    @pytest.mark.parametrize("raw", [
        "",
        "https://",
        'bad host!!">AAAA',
        "-bad-.com",
        "a..b",
        "exa_mple.com",
        "a" * 64 + ".com",
    ])
    def test_invalid_hosts(self, raw):
        with pytest.raises(TargetValidationError):
            self.n.normalize(raw)

    def test_localhost_refused(self):
        with pytest.raises(TargetValidationError, match="localhost"):
            self.n.normalize("localhost")
        with pytest.raises(TargetValidationError, match="localhost"):
            self.n.normalize("http://LOCALHOST:8080")

    def test_bad_embedded_port(self):
        with pytest.raises(TargetValidationError):
            self.n.normalize("x.com:99999")

    def test_bad_override_port(self):
        with pytest.raises(TargetValidationError, match="out of valid range"):
            self.n.normalize("x.com", override_port=70000)

    def test_invalid_domain_message(self):
        with pytest.raises(TargetValidationError, match="invalid domain name in URL"):
            self.n.normalize("-bad-.com")

    def test_error_is_value_error(self):
        with pytest.raises(ValueError):
            self.n.normalize("a..b")


class TestHelpers:

    def test_join_host_port(self):
        assert join_host_port("example.com", 443) == "example.com:443"
        assert join_host_port("::1", 80) == "[::1]:80"

    def test_module_level_convenience(self):
        assert normalize_target("example.com", 8080).port == 8080


# ─── Validators ───────────────────────────────────────────────────────────────

class TestValidators:

    def test_hostname_ok(self):
        assert is_valid_hostname("sub-domain.example.co.uk")

    def test_hostname_too_long(self):
        assert not is_valid_hostname(("a" * 60 + ".") * 5)

    def test_validate_port(self):
        assert validate_port(443) == (True, "")
        assert not validate_port(0)[0]
        assert not validate_port(65536)[0]
        assert not validate_port(True)[0]

    def test_sanitize_evidence(self):
        assert sanitize_evidence("a\x00b\n\n  c") == "ab c"
        assert sanitize_evidence("x" * 600).endswith("...")
        assert len(sanitize_evidence("x" * 600)) == 503
        assert sanitize_evidence(None) == ""
