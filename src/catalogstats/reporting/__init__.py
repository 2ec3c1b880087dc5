"""
Report emitter for scorecards, distributions, rankings and time series.
"""

from catalogstats.reporting.emitter import ReportEmitter, ReportKind

__all__ = ["ReportEmitter", "ReportKind"]
