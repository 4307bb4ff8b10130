"""Hymnal lookup package."""

from worship_planner.hymnal.matcher import HymnEntry, HymnMatcher, HymnVersion

__all__ = ["HymnEntry", "HymnMatcher", "HymnVersion"]
