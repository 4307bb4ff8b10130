"""JSON endpoints consumed by the planner UI.

Every upstream read goes through a short-lived ``PlanningCenterClient``.
Missing credentials surface as a 500 via the ``ConfigError`` handler in
``app.py``; upstream failures degrade to an empty result plus an error.
"""

from __future__ import annotations

import logging
from typing import Optional

from fastapi import APIRouter, Query, Request
from fastapi.responses import JSONResponse

from worship_planner.aggregator import PlanAggregator, sort_plans_descending
from worship_planner.config import Settings
from worship_planner.exceptions import PlannerError
from worship_planner.hymnal.matcher import HymnMatcher
from worship_planner.pco.client import PlanningCenterClient
from worship_planner.pco.models import active_service_types
from worship_planner.text.copyright import plan_copyright_text

logger = logging.getLogger(__name__)

router = APIRouter()


def _settings(request: Request) -> Settings:
    return request.app.state.settings


def _client(request: Request) -> PlanningCenterClient:
    """Open a client for this request; raises ConfigError without credentials."""
    settings = _settings(request)
    app_id, token = settings.require_credentials()
    return PlanningCenterClient(
        app_id,
        token,
        base_url=settings.base_url,
        timeout=settings.request_timeout,
        transport=request.app.state.transport,
    )


def _upstream_failure(message: str, empty: dict) -> JSONResponse:
    return JSONResponse(status_code=502, content={"error": message, **empty})


@router.get("/service-types")
async def list_service_types(request: Request):
    """Active service types ordered by their Planning Center sequence."""
    async with _client(request) as client:
        try:
            service_types, total = await client.get_service_types()
        except PlannerError as exc:
            logger.error("Error fetching service types: %s", exc)
            return _upstream_failure(
                "Failed to fetch service types", {"serviceTypes": [], "totalCount": 0},
            )
    active = active_service_types(service_types)
    return {"serviceTypes": [st.to_dict() for st in active], "totalCount": total}


@router.get("/all-plans")
async def all_plans(request: Request):
    """Plans from every active service type, grouped by day, newest first."""
    settings = _settings(request)
    async with _client(request) as client:
        try:
            service_types, _ = await client.get_service_types()
        except PlannerError as exc:
            logger.error("Error fetching service types for all plans: %s", exc)
            return _upstream_failure(
                "Failed to fetch plans", {"plansByDate": {}, "totalCount": 0},
            )
        aggregator = PlanAggregator(client, page_size=settings.all_plans_page_size)
        result = await aggregator.fetch_all(active_service_types(service_types))
    return result.to_dict()


@router.get("/plans")
async def list_plans(
    request: Request,
    service_type_id: Optional[str] = Query(None, alias="serviceTypeId"),
):
    """Plans for one service type, newest first."""
    if not service_type_id:
        return JSONResponse(
            status_code=400, content={"error": "Service type ID is required"},
        )
    settings = _settings(request)
    async with _client(request) as client:
        try:
            plans, total = await client.get_plans(
                service_type_id, per_page=settings.plans_page_size,
            )
        except PlannerError as exc:
            logger.error("Error fetching plans for service type %s: %s",
                         service_type_id, exc)
            return _upstream_failure(
                "Failed to fetch plans", {"plans": [], "totalCount": 0},
            )
    return {
        "plans": [plan.to_dict() for plan in sort_plans_descending(plans)],
        "totalCount": total,
    }


async def _fetch_items(
    client: PlanningCenterClient, service_type_id: str, plan_id: str,
):
    async with client:
        return await client.get_plan_items(service_type_id, plan_id)


def _missing_ids() -> JSONResponse:
    return JSONResponse(
        status_code=400,
        content={"error": "Service type ID and plan ID are required"},
    )


@router.get("/plan-items")
async def plan_items(
    request: Request,
    service_type_id: Optional[str] = Query(None, alias="serviceTypeId"),
    plan_id: Optional[str] = Query(None, alias="planId"),
):
    """A plan's items in sequence order plus the songs they reference."""
    if not service_type_id or not plan_id:
        return _missing_ids()
    client = _client(request)
    try:
        items, songs, total = await _fetch_items(client, service_type_id, plan_id)
    except PlannerError as exc:
        logger.error("Error fetching items for plan %s (service type %s): %s",
                     plan_id, service_type_id, exc)
        return _upstream_failure(
            "Failed to fetch plan items",
            {"items": [], "included": [], "totalCount": 0},
        )
    return {
        "items": [item.to_dict() for item in items],
        "included": [song.to_dict() for song in songs],
        "totalCount": total,
    }


@router.get("/plan-copyright")
async def plan_copyright(
    request: Request,
    service_type_id: Optional[str] = Query(None, alias="serviceTypeId"),
    plan_id: Optional[str] = Query(None, alias="planId"),
):
    """Copyright attribution text for every song in a plan."""
    if not service_type_id or not plan_id:
        return _missing_ids()
    client = _client(request)
    try:
        items, songs, _ = await _fetch_items(client, service_type_id, plan_id)
    except PlannerError as exc:
        logger.error("Error fetching copyright items for plan %s: %s", plan_id, exc)
        return _upstream_failure("Failed to fetch plan items", {"text": ""})
    text = plan_copyright_text(
        items, songs, license_number=_settings(request).ccli_license_number,
    )
    return {"text": text}


@router.post("/hymns")
async def match_hymns(request: Request):
    """Hymnal versions for a batch of song titles; unmatched titles are omitted."""
    try:
        body = await request.json()
    except ValueError:
        logger.warning("POST /hymns with a non-JSON body")
        return JSONResponse(status_code=400, content={"error": "Invalid JSON body"})

    titles = body.get("titles") if isinstance(body, dict) else None
    if not isinstance(titles, list):
        return {"hymns": []}

    hymnal: HymnMatcher = request.app.state.hymnal
    entries = hymnal.match_titles([t for t in titles if isinstance(t, str)])
    return {"hymns": [entry.to_dict() for entry in entries]}
