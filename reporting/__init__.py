"""httpver Reporting — Public API

Renders check results as one-line text summaries or JSON.

Usage:
    from reporting import summary_line, results_to_json
    print(summary_line(result))
    print(results_to_json(results))
"""
from reporting.formatters import (
    LEGEND, age_since, format_age, format_elapsed, results_to_json,
    status_emoji, status_title, summary_line,
)

__all__ = [
    "LEGEND",
    "age_since",
    "format_age",
    "format_elapsed",
    "results_to_json",
    "status_emoji",
    "status_title",
    "summary_line",
]
