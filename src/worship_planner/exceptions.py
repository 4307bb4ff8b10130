"""Custom exception hierarchy for worship_planner."""

from __future__ import annotations


class PlannerError(Exception):
    """Base exception for all worship_planner errors."""


class ConfigError(PlannerError):
    """Missing Planning Center credentials or unreadable local data."""


class UpstreamError(PlannerError):
    """Planning Center answered with a non-2xx status."""

    def __init__(self, message: str, status_code: int = 0, path: str = ""):
        super().__init__(message)
        self.status_code = status_code
        self.path = path


class NetworkError(PlannerError):
    """Transient network errors (timeout, connection refused, DNS failure)."""


class ParseError(PlannerError):
    """Response body was not the JSON:API document we expected."""
