"""Data models for Planning Center Services resources.

Each model is built from a JSON:API resource object (``{"id", "attributes",
"links"}``) and serializes back to the camelCase shape the UI consumes.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from worship_planner.exceptions import ParseError


def _attributes(resource: dict) -> dict:
    if not isinstance(resource, dict) or "id" not in resource:
        raise ParseError(f"Not a JSON:API resource: {resource!r:.200}")
    attrs = resource.get("attributes") or {}
    if not isinstance(attrs, dict):
        raise ParseError(f"Resource {resource['id']!r} has non-object attributes")
    return attrs


def _self_link(resource: dict) -> str:
    links = resource.get("links") or {}
    if not isinstance(links, dict):
        return ""
    return links.get("self") or ""


@dataclass
class ServiceType:
    id: str
    name: str
    frequency: str = ""
    sequence: int = 0
    archived: bool = False
    created_at: str = ""
    updated_at: str = ""

    @classmethod
    def from_api(cls, resource: dict) -> ServiceType:
        attrs = _attributes(resource)
        return cls(
            id=str(resource["id"]),
            name=attrs.get("name") or "",
            frequency=attrs.get("frequency") or "",
            sequence=attrs.get("sequence") or 0,
            archived=attrs.get("archived_at") is not None,
            created_at=attrs.get("created_at") or "",
            updated_at=attrs.get("updated_at") or "",
        )

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "frequency": self.frequency,
            "sequence": self.sequence,
            "archived": self.archived,
            "createdAt": self.created_at,
            "updatedAt": self.updated_at,
        }


@dataclass
class ServiceTypeRef:
    """The owning service type a plan is tagged with."""
    id: str
    name: str


@dataclass
class Plan:
    id: str
    dates: str
    short_dates: str
    items_count: int
    title: Optional[str]
    sort_date: str                      # ISO-8601, canonical ordering key
    created_at: str = ""
    updated_at: str = ""
    planning_center_url: str = ""
    service_type: Optional[ServiceTypeRef] = None

    @classmethod
    def from_api(
        cls, resource: dict, service_type: Optional[ServiceType] = None,
    ) -> Plan:
        attrs = _attributes(resource)
        return cls(
            id=str(resource["id"]),
            dates=attrs.get("dates") or "",
            short_dates=attrs.get("short_dates") or "",
            items_count=attrs.get("items_count") or 0,
            title=attrs.get("title"),
            sort_date=attrs.get("sort_date") or "",
            created_at=attrs.get("created_at") or "",
            updated_at=attrs.get("updated_at") or "",
            planning_center_url=(
                attrs.get("planning_center_url") or _self_link(resource)
            ),
            service_type=(
                ServiceTypeRef(id=service_type.id, name=service_type.name)
                if service_type else None
            ),
        )

    def to_dict(self) -> dict:
        data = {
            "id": self.id,
            "dates": self.dates,
            "shortDates": self.short_dates,
            "planningCenterUrl": self.planning_center_url,
            "itemsCount": self.items_count,
            "title": self.title,
            "sortDate": self.sort_date,
            "createdAt": self.created_at,
            "updatedAt": self.updated_at,
        }
        if self.service_type is not None:
            data["serviceType"] = {
                "id": self.service_type.id,
                "name": self.service_type.name,
            }
        return data


@dataclass
class PlanItem:
    id: str
    title: str
    item_type: str                      # "song", "item", "header", "media"
    sequence: int
    service_position: str = ""
    key_name: Optional[str] = None
    length: int = 0
    description: Optional[str] = None
    created_at: str = ""
    updated_at: str = ""

    @property
    def is_song(self) -> bool:
        return self.item_type == "song"

    @classmethod
    def from_api(cls, resource: dict) -> PlanItem:
        attrs = _attributes(resource)
        return cls(
            id=str(resource["id"]),
            title=attrs.get("title") or "",
            item_type=attrs.get("item_type") or "",
            sequence=attrs.get("sequence") or 0,
            service_position=attrs.get("service_position") or "",
            key_name=attrs.get("key_name"),
            length=attrs.get("length") or 0,
            description=attrs.get("description"),
            created_at=attrs.get("created_at") or "",
            updated_at=attrs.get("updated_at") or "",
        )

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "title": self.title,
            "itemType": self.item_type,
            "sequence": self.sequence,
            "servicePosition": self.service_position,
            "keyName": self.key_name,
            "length": self.length,
            "description": self.description,
            "createdAt": self.created_at,
            "updatedAt": self.updated_at,
        }


@dataclass
class Song:
    id: str
    title: str
    author: str = ""                    # free text, "A and B" or "A, B, C"
    ccli_number: Optional[int] = None
    copyright: str = ""
    admin: Optional[str] = None
    notes: str = ""
    themes: str = ""
    created_at: str = ""
    updated_at: str = ""
    planning_center_url: str = ""

    @classmethod
    def from_api(cls, resource: dict) -> Song:
        attrs = _attributes(resource)
        return cls(
            id=str(resource["id"]),
            title=attrs.get("title") or "",
            author=attrs.get("author") or "",
            ccli_number=attrs.get("ccli_number"),
            copyright=attrs.get("copyright") or "",
            admin=attrs.get("admin"),
            notes=attrs.get("notes") or "",
            themes=attrs.get("themes") or "",
            created_at=attrs.get("created_at") or "",
            updated_at=attrs.get("updated_at") or "",
            planning_center_url=_self_link(resource),
        )

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "title": self.title,
            "author": self.author,
            "admin": self.admin,
            "ccliNumber": self.ccli_number,
            "copyright": self.copyright,
            "notes": self.notes,
            "themes": self.themes,
            "createdAt": self.created_at,
            "updatedAt": self.updated_at,
            "planningCenterUrl": self.planning_center_url,
        }


def active_service_types(service_types: list[ServiceType]) -> list[ServiceType]:
    """Drop archived service types and order the rest by ``sequence``."""
    return sorted(
        (st for st in service_types if not st.archived),
        key=lambda st: st.sequence,
    )


def song_for_item(item: PlanItem, songs: list[Song]) -> Optional[Song]:
    """Find the included song for a plan item.

    Planning Center gives no stable item-to-song link in this response, so
    the join is on exact title. When several included songs share a title
    the first one in response order wins.
    """
    if not item.is_song:
        return None
    for song in songs:
        if song.title == item.title:
            return song
    return None
