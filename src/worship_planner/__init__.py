"""Worship planner: Planning Center aggregation and bulletin text generation."""

from __future__ import annotations

__version__ = "0.1.0"
