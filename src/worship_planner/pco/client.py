"""
Planning Center Services client: Basic-Auth, read-only JSON:API access.

All interaction with api.planningcenteronline.com goes through this module.
"""

from __future__ import annotations

import logging
from typing import Any, Optional

import httpx

from worship_planner.config import DEFAULT_BASE_URL
from worship_planner.exceptions import (
    NetworkError,
    ParseError,
    UpstreamError,
)
from worship_planner.pco.models import Plan, PlanItem, ServiceType, Song

logger = logging.getLogger(__name__)


class PlanningCenterClient:
    """Async HTTP client for the Planning Center Services API."""

    def __init__(
        self,
        app_id: str,
        token: str,
        base_url: str = DEFAULT_BASE_URL,
        timeout: float = 30.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.client = httpx.AsyncClient(
            base_url=base_url,
            auth=httpx.BasicAuth(app_id, token),
            timeout=timeout,
            transport=transport,
            headers={
                "Accept": "application/json",
                "Content-Type": "application/json",
            },
        )

    # -- HTTP helpers -------------------------------------------------------

    async def _get(self, path: str, params: Optional[dict] = None) -> dict[str, Any]:
        """GET a JSON:API document. Failures are raised, never retried."""
        try:
            logger.debug("GET %s %s", path, params or "")
            resp = await self.client.get(path, params=params)
            logger.debug("Response: %d (%d bytes)", resp.status_code, len(resp.content))
            resp.raise_for_status()
        except httpx.HTTPStatusError as exc:
            status = exc.response.status_code
            raise UpstreamError(
                f"Planning Center returned HTTP {status} for {path}",
                status_code=status,
                path=path,
            ) from exc
        except httpx.TimeoutException as exc:
            raise NetworkError(f"Request to Planning Center timed out: {path}") from exc
        except httpx.RequestError as exc:
            raise NetworkError(
                f"Network error connecting to Planning Center: {exc}"
            ) from exc

        try:
            document = resp.json()
        except ValueError as exc:
            raise ParseError(f"Non-JSON response from Planning Center for {path}") from exc
        if not isinstance(document, dict) or not isinstance(document.get("data"), list):
            raise ParseError(f"Response for {path} has no 'data' list")
        return document

    @staticmethod
    def _total_count(document: dict, fallback: int) -> int:
        meta = document.get("meta") or {}
        return meta.get("total_count", fallback)

    # -- Resources ----------------------------------------------------------

    async def get_service_types(self) -> tuple[list[ServiceType], int]:
        """Fetch every service type, archived ones included."""
        document = await self._get("/service_types")
        service_types = [ServiceType.from_api(r) for r in document["data"]]
        return service_types, self._total_count(document, len(service_types))

    async def get_plans(
        self,
        service_type: ServiceType | str,
        per_page: int = 400,
        descending: bool = False,
    ) -> tuple[list[Plan], int]:
        """Fetch one page of plans for a service type.

        When a ``ServiceType`` is given (rather than a bare id) each plan is
        tagged with it.
        """
        if isinstance(service_type, ServiceType):
            owner: Optional[ServiceType] = service_type
            service_type_id = service_type.id
        else:
            owner = None
            service_type_id = service_type
        if not service_type_id:
            raise ValueError("service_type_id must not be empty.")

        document = await self._get(
            f"/service_types/{service_type_id}/plans",
            params={
                "order": "-sort_date" if descending else "sort_date",
                "per_page": per_page,
            },
        )
        plans = [Plan.from_api(r, service_type=owner) for r in document["data"]]
        logger.debug("Service type %s: %d plans", service_type_id, len(plans))
        return plans, self._total_count(document, len(plans))

    async def get_plan_items(
        self, service_type_id: str, plan_id: str,
    ) -> tuple[list[PlanItem], list[Song], int]:
        """Fetch a plan's items with their songs included.

        Items come back ordered by ``sequence``; songs keep response order.
        """
        if not service_type_id or not plan_id:
            raise ValueError("service_type_id and plan_id are required.")

        document = await self._get(
            f"/service_types/{service_type_id}/plans/{plan_id}/items",
            params={"include": "song"},
        )
        items = sorted(
            (PlanItem.from_api(r) for r in document["data"]),
            key=lambda item: item.sequence,
        )
        songs = [
            Song.from_api(r)
            for r in document.get("included") or []
            if isinstance(r, dict) and r.get("type", "Song") == "Song"
        ]
        return items, songs, self._total_count(document, len(items))

    # -- Cleanup ------------------------------------------------------------

    async def close(self):
        await self.client.aclose()

    async def __aenter__(self):
        return self

    async def __aexit__(self, *args):
        await self.close()
