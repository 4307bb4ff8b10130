"""Bulletin text generation: copyright credits and worship schedules."""

from __future__ import annotations

from worship_planner.text.copyright import (
    format_author_line,
    format_copyright_line,
    format_copyright_text,
    plan_copyright_text,
)
from worship_planner.text.debounce import DebouncedCommit
from worship_planner.text.schedule import (
    ScheduleSession,
    Selection,
    SelectionKind,
    schedule_header,
)

__all__ = [
    "format_author_line",
    "format_copyright_line",
    "format_copyright_text",
    "plan_copyright_text",
    "DebouncedCommit",
    "ScheduleSession",
    "Selection",
    "SelectionKind",
    "schedule_header",
]
