"""httpver Dashboard — Public API

Flask-based web front end: scan form, JSON API, recent scans.

Usage:
    from dashboard.app import create_app, run_dashboard
"""
from dashboard.app import create_app, run_dashboard

__all__ = [
    "create_app",
    "run_dashboard",
]
