"""Diagnostic orchestration and reporting."""

from .runner import DiagnosticRunner, DiagnosticReport, CheckStatus
from .reports import ReportGenerator

__all__ = ["DiagnosticRunner", "DiagnosticReport", "CheckStatus", "ReportGenerator"]
