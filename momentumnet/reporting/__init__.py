"""Reporting utilities for momentumnet."""

from .metrics import CsvSink, JsonlSink, MetricsCapture
from .summary import write_summary

__all__ = ["CsvSink", "JsonlSink", "MetricsCapture", "write_summary"]
