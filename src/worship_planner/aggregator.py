"""Fan-out plan aggregation across service types.

Plans for every active service type are fetched concurrently, flattened,
sorted newest first by ``sort_date`` and grouped by calendar day. A service
type whose fetch fails contributes an empty list; the others still count.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from datetime import date
from typing import Optional

from worship_planner.exceptions import PlannerError
from worship_planner.pco.client import PlanningCenterClient
from worship_planner.pco.models import Plan, ServiceType

logger = logging.getLogger(__name__)

DEFAULT_PAGE_SIZE = 500


@dataclass
class PlanFetch:
    """Outcome of fetching one service type's plans."""
    service_type: ServiceType
    plans: list[Plan] = field(default_factory=list)
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.error is None


@dataclass
class AggregatedPlans:
    plans_by_date: dict[str, list[Plan]]
    total_count: int
    failures: list[PlanFetch] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "plansByDate": {
                day: [plan.to_dict() for plan in plans]
                for day, plans in self.plans_by_date.items()
            },
            "totalCount": self.total_count,
        }


def plan_day(sort_date: str) -> str:
    """Return the ``YYYY-MM-DD`` grouping key for a plan's sort date.

    The key is always the first 10 characters, the calendar date as
    Planning Center wrote it. No timezone conversion is applied.
    """
    day = (sort_date or "")[:10]
    try:
        date.fromisoformat(day)
    except ValueError:
        logger.debug("sort_date %r has no calendar date prefix", sort_date)
    return day


def sort_plans_descending(plans: list[Plan]) -> list[Plan]:
    """Newest first. ISO-8601 strings order correctly as plain strings."""
    return sorted(plans, key=lambda plan: plan.sort_date or "", reverse=True)


def group_plans_by_date(plans: list[Plan]) -> dict[str, list[Plan]]:
    """Group already-sorted plans by calendar day, keeping their order."""
    grouped: dict[str, list[Plan]] = {}
    for plan in plans:
        grouped.setdefault(plan_day(plan.sort_date), []).append(plan)
    return grouped


class PlanAggregator:
    """Collects plans from several service types into one dated listing."""

    def __init__(self, client: PlanningCenterClient, page_size: int = DEFAULT_PAGE_SIZE):
        self.client = client
        self.page_size = page_size

    async def fetch_service_type(self, service_type: ServiceType) -> PlanFetch:
        """Fetch one service type's plans, capturing any failure in the result."""
        try:
            plans, _ = await self.client.get_plans(
                service_type, per_page=self.page_size, descending=True,
            )
        except PlannerError as exc:
            logger.error(
                "Failed to fetch plans for service type %s (%s): %s",
                service_type.id, service_type.name, exc,
            )
            return PlanFetch(service_type=service_type, error=str(exc))
        return PlanFetch(service_type=service_type, plans=plans)

    async def fetch_all(self, service_types: list[ServiceType]) -> AggregatedPlans:
        """Fetch, merge, sort and group plans for every non-archived service type."""
        active = [st for st in service_types if not st.archived]
        if not active:
            return AggregatedPlans(plans_by_date={}, total_count=0)

        results = await asyncio.gather(
            *(self.fetch_service_type(st) for st in active)
        )
        return self.merge(results)

    @staticmethod
    def merge(results: list[PlanFetch]) -> AggregatedPlans:
        all_plans = [plan for result in results for plan in result.plans]
        failures = [result for result in results if not result.ok]
        if failures:
            logger.warning(
                "%d of %d service types failed; continuing with partial plans",
                len(failures), len(results),
            )
        ordered = sort_plans_descending(all_plans)
        return AggregatedPlans(
            plans_by_date=group_plans_by_date(ordered),
            total_count=len(ordered),
            failures=failures,
        )
