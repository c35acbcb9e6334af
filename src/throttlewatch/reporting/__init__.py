"""
Display, alert and summary rendering.
"""

from .console import AlertNotifier, ConsoleReporter, format_sample_line
from .summary import render_session_summary

__all__ = ["AlertNotifier", "ConsoleReporter", "format_sample_line", "render_session_summary"]
