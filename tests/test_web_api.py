"""Tests for the internal JSON API (worship_planner.web).

Planning Center is replaced by an httpx MockTransport, so no credentials
or network access are needed.
"""

from __future__ import annotations

import httpx
import pytest
from fastapi.testclient import TestClient

from worship_planner.config import Settings
from worship_planner.hymnal.matcher import HymnMatcher
from worship_planner.web.app import create_app

from pco_fixtures import (
    document,
    item_resource,
    plan_resource,
    routing_transport,
    service_type_resource,
    song_resource,
)

HYMN_ROWS = [
    {"song_title": "Amazing Grace", "tune_name": "NEW BRITAIN",
     "rejoice_hymns": 290, "great_hymns_of_the_faith": 202},
    {"song_title": "How Great Thou Art", "tune_name": "O STORE GUD",
     "rejoice_hymns": 6, "great_hymns_of_the_faith": 17},
    {"song_title": "How Great Thou Art", "tune_name": "HOW GREAT THOU ART",
     "rejoice_hymns": -1, "great_hymns_of_the_faith": 204},
]

SERVICE_TYPES = document([
    service_type_resource("1", "Sunday Morning", sequence=1),
    service_type_resource("2", "Sunday Evening", sequence=2),
    service_type_resource("3", "Retired", sequence=0, archived=True),
])


def _client(routes=None, settings=None, calls=None):
    settings = settings or Settings(app_id="app-id", token="secret")
    app = create_app(
        settings=settings,
        hymnal=HymnMatcher(HYMN_ROWS),
        transport=routing_transport(routes or {}, calls),
    )
    return TestClient(app)


class TestMissingCredentials:

    @pytest.mark.parametrize("path", [
        "/service-types",
        "/all-plans",
        "/plans?serviceTypeId=1",
        "/plan-items?serviceTypeId=1&planId=2",
        "/plan-copyright?serviceTypeId=1&planId=2",
    ])
    def test_config_error(self, path):
        client = _client(settings=Settings())
        resp = client.get(path)
        assert resp.status_code == 500
        assert resp.json() == {"error": "Planning Center credentials not configured"}

    def test_hymns_needs_no_credentials(self):
        client = _client(settings=Settings())
        resp = client.post("/hymns", json={"titles": ["Amazing Grace"]})
        assert resp.status_code == 200


class TestServiceTypes:

    def test_active_only_in_sequence(self):
        resp = _client({"/service_types": SERVICE_TYPES}).get("/service-types")
        assert resp.status_code == 200
        body = resp.json()
        assert [st["name"] for st in body["serviceTypes"]] == ["Sunday Morning", "Sunday Evening"]
        assert body["totalCount"] == 3

    def test_upstream_failure(self):
        routes = {"/service_types": httpx.Response(503)}
        resp = _client(routes).get("/service-types")
        assert resp.status_code == 502
        assert resp.json()["serviceTypes"] == []


class TestAllPlans:

    def test_grouped_by_day(self):
        routes = {
            "/service_types": SERVICE_TYPES,
            "/service_types/1/plans": document([
                plan_resource("11", "2025-03-09T10:30:00Z"),
                plan_resource("10", "2025-03-02T10:30:00Z"),
            ]),
            "/service_types/2/plans": document([plan_resource("21", "2025-03-09T18:00:00Z")]),
        }
        body = _client(routes).get("/all-plans").json()

        assert body["totalCount"] == 3
        assert list(body["plansByDate"]) == ["2025-03-09", "2025-03-02"]
        day = body["plansByDate"]["2025-03-09"]
        assert [p["id"] for p in day] == ["21", "11"]
        assert day[0]["serviceType"] == {"id": "2", "name": "Sunday Evening"}

    def test_one_failing_service_type(self):
        routes = {
            "/service_types": SERVICE_TYPES,
            "/service_types/1/plans": httpx.Response(500),
            "/service_types/2/plans": document([plan_resource("21", "2025-03-09T18:00:00Z")]),
        }
        resp = _client(routes).get("/all-plans")
        assert resp.status_code == 200
        assert resp.json()["totalCount"] == 1

    def test_archived_not_fetched(self):
        calls = []
        routes = {
            "/service_types": SERVICE_TYPES,
            "/service_types/1/plans": document([]),
            "/service_types/2/plans": document([]),
        }
        _client(routes, calls=calls).get("/all-plans")
        paths = {c.url.path for c in calls}
        assert "/services/v2/service_types/3/plans" not in paths

    def test_page_size_from_settings(self):
        calls = []
        routes = {
            "/service_types": document([service_type_resource("1", "Sunday Morning")]),
            "/service_types/1/plans": document([]),
        }
        settings = Settings(app_id="a", token="b", all_plans_page_size=123)
        _client(routes, settings=settings, calls=calls).get("/all-plans")
        assert calls[-1].url.params["per_page"] == "123"

    def test_service_types_failure(self):
        resp = _client({}).get("/all-plans")
        assert resp.status_code == 502
        assert resp.json() == {
            "error": "Failed to fetch plans", "plansByDate": {}, "totalCount": 0,
        }


class TestPlans:

    def test_newest_first(self):
        routes = {"/service_types/1/plans": document([
            plan_resource("10", "2025-03-02T10:30:00Z"),
            plan_resource("11", "2025-03-09T10:30:00Z"),
        ], total=52)}
        body = _client(routes).get("/plans", params={"serviceTypeId": "1"}).json()
        assert [p["id"] for p in body["plans"]] == ["11", "10"]
        assert body["totalCount"] == 52

    def test_requires_service_type(self):
        assert _client().get("/plans").status_code == 400


class TestPlanItems:

    ROUTES = {"/service_types/1/plans/9/items": document(
        [
            item_resource("c", "How Great Thou Art", 4),
            item_resource("a", "Welcome", 1, item_type="item"),
            item_resource("b", "Amazing Grace", 2),
        ],
        included=[
            song_resource("s1", "Amazing Grace", "John Newton", "Public Domain"),
            song_resource("s2", "How Great Thou Art", "Carl Boberg, Stuart Hine, Swedish Folk Melody",
                          "1949 Stuart Hine Trust", admin="Hope Publishing"),
        ],
    )}

    def test_items_and_songs(self):
        body = _client(self.ROUTES).get(
            "/plan-items", params={"serviceTypeId": "1", "planId": "9"},
        ).json()
        assert [i["id"] for i in body["items"]] == ["a", "b", "c"]
        assert body["items"][0]["itemType"] == "item"
        assert [s["title"] for s in body["included"]] == ["Amazing Grace", "How Great Thou Art"]
        assert body["totalCount"] == 3

    @pytest.mark.parametrize("params", [{}, {"serviceTypeId": "1"}, {"planId": "9"}])
    def test_requires_both_ids(self, params):
        resp = _client(self.ROUTES).get("/plan-items", params=params)
        assert resp.status_code == 400
        assert resp.json()["error"] == "Service type ID and plan ID are required"

    def test_upstream_failure(self):
        resp = _client({}).get("/plan-items", params={"serviceTypeId": "1", "planId": "9"})
        assert resp.status_code == 502
        assert resp.json() == {
            "error": "Failed to fetch plan items", "items": [], "included": [], "totalCount": 0,
        }

    def test_plan_copyright(self):
        body = _client(self.ROUTES).get(
            "/plan-copyright", params={"serviceTypeId": "1", "planId": "9"},
        ).json()
        assert body["text"] == (
            '"Amazing Grace" Words and Music by John Newton.\n'
            "Public Domain.\n"
            "Used by permission. CCLI Streaming License 1564484.\n"
            "\n"
            '"How Great Thou Art" Words by Carl Boberg and Stuart Hine. Music by Swedish Folk Melody.\n'
            "© 1949 Stuart Hine Trust. Admin. by Hope Publishing.\n"
            "Used by permission. CCLI Streaming License 1564484."
        )


class TestHymns:

    def test_matches_and_omits(self):
        resp = _client().post("/hymns", json={"titles": ["amazing grace", "Oceans", "How Great Thou Art"]})
        hymns = resp.json()["hymns"]
        assert [h["song_title"] for h in hymns] == ["amazing grace", "How Great Thou Art"]
        assert hymns[0]["versions"][0]["selected"] is True
        assert [v["selected"] for v in hymns[1]["versions"]] == [False, False]

    def test_titles_not_a_list(self):
        resp = _client().post("/hymns", json={"titles": "Amazing Grace"})
        assert resp.json() == {"hymns": []}

    def test_invalid_json(self):
        resp = _client().post("/hymns", content=b"not json",
                              headers={"Content-Type": "application/json"})
        assert resp.status_code == 400


class TestHymnalLoading:

    def test_loads_from_settings_path(self, tmp_path):
        import json

        path = tmp_path / "hymns.json"
        path.write_text(json.dumps(HYMN_ROWS), encoding="utf-8")
        app = create_app(settings=Settings(hymnal_path=path))
        assert app.state.hymnal.lookup("Amazing Grace") is not None

    def test_no_path_means_empty_hymnal(self):
        app = create_app(settings=Settings())
        assert len(app.state.hymnal) == 0
