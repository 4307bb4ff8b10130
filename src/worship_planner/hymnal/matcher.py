"""Hymnal cross-reference: song title -> tune and hymnal numbers.

The index is built once from the raw hymnal rows. Titles are matched
case-insensitively and exactly, ignoring surrounding whitespace; several
rows sharing a title become several versions (tunes) of one entry.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Optional, Union

from worship_planner.exceptions import ConfigError

logger = logging.getLogger(__name__)

NOT_IN_HYMNAL = "-1"


@dataclass
class HymnVersion:
    id: str
    tune_name: str
    rejoice_number: str                 # Rejoice Hymns; "-1" when absent
    great_hymns_number: str             # Great Hymns of the Faith; "-1" when absent
    selected: bool = False

    def references(self) -> str:
        """Hymnal references like ``R-12/G-204``; absent numbers are left out."""
        refs = []
        if self.rejoice_number != NOT_IN_HYMNAL:
            refs.append(f"R-{self.rejoice_number}")
        if self.great_hymns_number != NOT_IN_HYMNAL:
            refs.append(f"G-{self.great_hymns_number}")
        return "/".join(refs)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "tune_name": self.tune_name,
            "rejoice_hymns_number": self.rejoice_number,
            "great_hymns_number": self.great_hymns_number,
            "selected": self.selected,
        }


@dataclass
class HymnEntry:
    song_title: str
    versions: list[HymnVersion] = field(default_factory=list)

    @property
    def selected_version(self) -> Optional[HymnVersion]:
        for version in self.versions:
            if version.selected:
                return version
        return None

    def with_first_selected(self) -> HymnEntry:
        """Copy of this entry with only the first version selected."""
        return HymnEntry(
            song_title=self.song_title,
            versions=[
                replace(version, selected=index == 0)
                for index, version in enumerate(self.versions)
            ],
        )

    def to_dict(self) -> dict:
        return {
            "song_title": self.song_title,
            "versions": [v.to_dict() for v in self.versions],
        }


def _number(value) -> str:
    if value is None or value == "":
        return NOT_IN_HYMNAL
    if isinstance(value, float) and value.is_integer():
        value = int(value)
    return str(value)


class HymnMatcher:
    """Case-insensitive title index over the hymnal table."""

    def __init__(self, rows: list[dict]):
        self._by_title: dict[str, list[dict]] = {}
        for row in rows:
            title = (row.get("song_title") or "").strip()
            if not title:
                logger.debug("Skipping hymnal row without a title: %r", row)
                continue
            self._by_title.setdefault(title.lower(), []).append(row)
        logger.debug(
            "Hymnal index: %d titles from %d rows", len(self._by_title), len(rows),
        )

    @classmethod
    def from_file(cls, path: Union[str, Path]) -> HymnMatcher:
        """Load the hymnal from a JSON list of rows.

        Each row has ``song_title``, ``tune_name``, ``rejoice_hymns`` and
        ``great_hymns_of_the_faith``.
        """
        path = Path(path)
        try:
            rows = json.loads(path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as exc:
            raise ConfigError(f"Could not read hymnal file {path}: {exc}") from exc
        if not isinstance(rows, list):
            raise ConfigError(f"Hymnal file {path} must contain a JSON list")
        logger.info("Loaded %d hymnal rows from %s", len(rows), path)
        return cls(rows)

    def __len__(self) -> int:
        return len(self._by_title)

    def lookup(self, title: str) -> Optional[HymnEntry]:
        """Return every version for *title*, or None when it is not in the hymnal.

        A lone version comes back pre-selected; with several, none is.
        """
        rows = self._by_title.get((title or "").strip().lower())
        if not rows:
            return None
        versions = [
            HymnVersion(
                id=f"{row['song_title']}-{index}",
                tune_name=row.get("tune_name") or "",
                rejoice_number=_number(row.get("rejoice_hymns")),
                great_hymns_number=_number(row.get("great_hymns_of_the_faith")),
                selected=len(rows) == 1,
            )
            for index, row in enumerate(rows)
        ]
        return HymnEntry(song_title=title, versions=versions)

    def match_titles(self, titles: list[str]) -> list[HymnEntry]:
        """Look up a batch of titles; titles with no match are omitted."""
        entries = []
        for title in titles:
            entry = self.lookup(title)
            if entry is not None:
                entries.append(entry)
        return entries
