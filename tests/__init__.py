"""httpver Test Suite

Test modules:
    test_target_normalizer — Unit tests for core/target_normalizer.py and
                             utils/validators.py (accepted / rejected input)
    test_grading           — Grade table for core/grading.py
    test_probes            — The four version probes with faked sockets,
                             httpx.MockTransport and a patched HTTP/3 client
    test_probe_engine      — ProtocolProbeEngine and BatchScheduler with
                             fake probes / engines
    test_result_cache      — ResultCache TTL, recent list and CachedScanner
    test_dashboard         — Flask routes (test client) and template helpers
    test_cli               — main.py target gathering, output modes, formatters
    test_layering          — Static import analysis enforcing architectural
                             layering rules (core / cache / reporting / dashboard)

Run all tests:
    pytest tests/ -v

Run standalone (no pytest):
    python3 tests/run_all.py
    python3 tests/run_all.py -v       # verbose
"""
