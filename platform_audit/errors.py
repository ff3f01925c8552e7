"""Exceptions raised by the audit engine."""

from __future__ import annotations


class AuditError(Exception):
    """Base class for audit engine errors."""


class PageNotFoundError(AuditError, LookupError):
    def __init__(self, path: str):
        super().__init__(f"Page not found: {path}")
        self.path = path


class RunNotFoundError(AuditError, LookupError):
    def __init__(self, run_id: str):
        super().__init__(f"Audit run not found: {run_id}")
        self.run_id = run_id


class RunStateError(AuditError):
    """Raised on a write to a run that already reached a terminal status."""


class AuditCancelledError(AuditError):
    def __init__(self, message: str = "Audit cancelled"):
        super().__init__(message)
