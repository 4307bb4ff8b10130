"""Planning Center Services client package."""

from worship_planner.pco.client import PlanningCenterClient
from worship_planner.pco.models import (
    Plan,
    PlanItem,
    ServiceType,
    ServiceTypeRef,
    Song,
    active_service_types,
    song_for_item,
)

__all__ = [
    "PlanningCenterClient",
    "Plan",
    "PlanItem",
    "ServiceType",
    "ServiceTypeRef",
    "Song",
    "active_service_types",
    "song_for_item",
]
