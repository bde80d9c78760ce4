"""Application DTOs."""

from budgetbuddy.application.dtos.export_result import ExportResult
from budgetbuddy.application.dtos.session_summary import SessionSummary
from budgetbuddy.application.dtos.step_result import ErrorInfo, StepResult

__all__ = ["ErrorInfo", "ExportResult", "SessionSummary", "StepResult"]
