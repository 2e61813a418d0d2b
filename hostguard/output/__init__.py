"""
HostGuard - Output Formatters

This package provides the text report and JSON export of evaluation sessions.
"""

from .json_formatter import JSONFormatter, DateTimeEncoder
from .text_report import ReportSection, Tally, TextReport, aggregate, render, tally

__all__ = [
    "JSONFormatter",
    "DateTimeEncoder",
    "ReportSection",
    "Tally",
    "TextReport",
    "aggregate",
    "render",
    "tally",
]
