"""
Rendering of verification reports
"""

from stunt.output.report_formatter import ReportFormatter

__all__ = ["ReportFormatter"]
