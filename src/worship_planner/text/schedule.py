"""Worship schedule text with per-song hymnal overrides.

Every song in a plan carries a ``Selection``:

* DEFAULT: print the selected hymn version's numbers, e.g. ``Holy, Holy, Holy (R-1/G-2)``.
* LEAVE_BLANK: print the bare title.
* CUSTOM: print ``Title (custom text)``; with empty text, the bare title.

Selections live in a ``ScheduleSession`` for one editing session and are
never shared between sessions.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from datetime import date
from enum import Enum
from typing import Optional

from worship_planner.hymnal.matcher import HymnEntry
from worship_planner.pco.models import PlanItem
from worship_planner.text.debounce import DEFAULT_DELAY, DebouncedCommit

logger = logging.getLogger(__name__)

SERVICE_HEADERS = {
    "Sunday Morning": "AM",
    "Sunday Evening": "PM",
}


class SelectionKind(Enum):
    DEFAULT = "default"
    LEAVE_BLANK = "leave_blank"
    CUSTOM = "custom"


@dataclass(frozen=True)
class Selection:
    kind: SelectionKind = SelectionKind.DEFAULT
    custom_text: str = ""               # only meaningful for CUSTOM

    @classmethod
    def default(cls) -> Selection:
        return cls(SelectionKind.DEFAULT)

    @classmethod
    def leave_blank(cls) -> Selection:
        return cls(SelectionKind.LEAVE_BLANK)

    @classmethod
    def custom(cls, text: str = "") -> Selection:
        return cls(SelectionKind.CUSTOM, text)


def schedule_header(service_type_name: str, service_date: Optional[date]) -> str:
    """``Sunday AM 3/9/25`` for Sunday services, else an empty string."""
    period = SERVICE_HEADERS.get(service_type_name)
    if period is None or service_date is None:
        return ""
    return f"Sunday {period} {service_date.month}/{service_date.day}/{service_date:%y}"


def render_line(title: str, hymn: Optional[HymnEntry], selection: Selection) -> str:
    """Render one schedule line for a song."""
    if selection.kind is SelectionKind.CUSTOM:
        if selection.custom_text:
            return f"{title} ({selection.custom_text})"
        return title

    if hymn is None:
        return title

    # Leave-blank is only offered for unmatched songs; on a matched hymn it
    # renders like the default.
    version = hymn.selected_version
    if version is None:
        return title
    refs = version.references()
    return f"{title} ({refs})" if refs else title


class ScheduleSession:
    """Selection state and schedule text for one plan."""

    def __init__(
        self,
        items: list[PlanItem],
        hymns: list[HymnEntry],
        service_type_name: str = "",
        service_date: Optional[date] = None,
    ):
        self.items = sorted((i for i in items if i.is_song), key=lambda i: i.sequence)
        self.service_type_name = service_type_name
        self.service_date = service_date
        self.hymns: dict[str, HymnEntry] = {
            entry.song_title: entry.with_first_selected() for entry in hymns
        }
        self.selections: dict[str, Selection] = {
            item.id: Selection.default() for item in self.items
        }

    def _item(self, item_id: str) -> PlanItem:
        for item in self.items:
            if item.id == item_id:
                return item
        raise KeyError(f"No song item {item_id!r} in this schedule")

    def hymn_for(self, item_id: str) -> Optional[HymnEntry]:
        return self.hymns.get(self._item(item_id).title)

    def selection(self, item_id: str) -> Selection:
        self._item(item_id)
        return self.selections[item_id]

    # -- Transitions --------------------------------------------------------

    def use_default(self, item_id: str) -> None:
        self._item(item_id)
        self.selections[item_id] = Selection.default()

    def leave_blank(self, item_id: str) -> None:
        self._item(item_id)
        self.selections[item_id] = Selection.leave_blank()

    def use_custom(self, item_id: str) -> None:
        """Switch to custom text, keeping any text already entered."""
        current = self.selection(item_id)
        text = current.custom_text if current.kind is SelectionKind.CUSTOM else ""
        self.selections[item_id] = Selection.custom(text)

    def set_custom_text(self, item_id: str, text: str) -> None:
        current = self.selection(item_id)
        if current.kind is not SelectionKind.CUSTOM:
            logger.debug("Custom text for %s ignored; selection is %s",
                         item_id, current.kind.value)
            return
        self.selections[item_id] = Selection.custom(text)

    def select_version(self, item_id: str, index: int) -> None:
        """Pick one of several hymn tunes and return the song to DEFAULT."""
        title = self._item(item_id).title
        hymn = self.hymns.get(title)
        if hymn is None:
            raise ValueError(f"{title!r} is not in the hymnal")
        if not 0 <= index < len(hymn.versions):
            raise IndexError(f"{title!r} has no version {index}")
        self.hymns[title] = HymnEntry(
            song_title=hymn.song_title,
            versions=[
                replace(version, selected=i == index)
                for i, version in enumerate(hymn.versions)
            ],
        )
        self.selections[item_id] = Selection.default()

    def custom_text_editor(self, item_id: str, delay: float = DEFAULT_DELAY) -> DebouncedCommit:
        """Debounced writer for an item's custom text."""
        self._item(item_id)
        return DebouncedCommit(
            lambda text: self.set_custom_text(item_id, text),
            delay=delay,
            label=f"custom text of item {item_id}",
        )

    # -- Output -------------------------------------------------------------

    def lines(self) -> list[str]:
        return [
            render_line(item.title, self.hymns.get(item.title), self.selections[item.id])
            for item in self.items
        ]

    def render(self) -> str:
        """Full schedule text, with the Sunday header when one applies."""
        body = "\n".join(self.lines())
        header = schedule_header(self.service_type_name, self.service_date)
        if header:
            return f"{header}\n\n{body}"
        return body
