"""
Domain services for the time tracking service.
This module exports the workflow, catalog, user, report and chat intent services.
"""

from .time_entry_service import TimeEntryService
from .approval_service import ApprovalService
from .catalog_service import CatalogService
from .user_service import UserService
from .report_service import ReportService, GroupBy, GroupTotals, WeekKey, WeeklySummary, ExportRow
from .intent_classifier import Intent, IntentKind, classify_intent, extract_ui_commands

__all__ = [
    "TimeEntryService",
    "ApprovalService",
    "CatalogService",
    "UserService",
    "ReportService",
    "GroupBy",
    "GroupTotals",
    "WeekKey",
    "WeeklySummary",
    "ExportRow",
    "Intent",
    "IntentKind",
    "classify_intent",
    "extract_ui_commands",
]
