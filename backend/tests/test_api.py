"""End-to-end tests through the HTTP surface."""
from __future__ import annotations

import uuid

import pytest

from helpers import bearer, register


def create(client, headers, title="stuck on CI", reason="runner offline", **extra) -> dict:
    resp = client.post("/blocks", json={"title": title, "reason": reason, **extra}, headers=headers)
    assert resp.status_code == 200, resp.text
    return resp.json()


@pytest.fixture
def other_headers(client) -> dict:
    return bearer(register(client, email="grace@example.com")["access_token"])


def test_health(client) -> None:
    assert client.get("/health").json() == {"ok": True}


def test_protected_routes_need_a_token(client) -> None:
    for path in ("/blocks", "/tags", "/analytics/dashboard", "/ai/status"):
        assert client.get(path).status_code == 401


# =============================================================================
# Blocks
# =============================================================================


class TestBlockRoutes:
    def test_create_get_and_list(self, client, auth_headers) -> None:
        created = create(client, auth_headers)
        assert created["status"] == "ongoing"
        assert created["resolved_at"] is None
        assert created["tags"] == []

        fetched = client.get(f"/blocks/{created['id']}", headers=auth_headers).json()
        assert fetched["id"] == created["id"]
        assert fetched["duration"] >= 0

        page = client.get("/blocks", params={"status": "ongoing", "page": 1, "limit": 5}, headers=auth_headers).json()
        assert page["total"] == 1
        assert page["total_pages"] == 1
        assert page["limit"] == 5
        assert [b["id"] for b in page["data"]] == [created["id"]]

    def test_list_filters_by_tag_and_search(self, client, auth_headers) -> None:
        tag = client.post("/tags", json={"name": "infra"}, headers=auth_headers).json()
        tagged = create(client, auth_headers, title="VPN down", tag_ids=[tag["id"]])
        create(client, auth_headers, title="waiting on review")

        by_tag = client.get("/blocks", params={"tag_ids": [tag["id"]]}, headers=auth_headers).json()
        assert [b["id"] for b in by_tag["data"]] == [tagged["id"]]

        by_text = client.get("/blocks", params={"search": "vpn"}, headers=auth_headers).json()
        assert [b["title"] for b in by_text["data"]] == ["VPN down"]

    def test_ongoing_endpoint(self, client, auth_headers) -> None:
        keep = create(client, auth_headers, title="open")
        done = create(client, auth_headers, title="closed")
        client.patch(f"/blocks/{done['id']}/resolve", headers=auth_headers)
        ongoing = client.get("/blocks/ongoing", headers=auth_headers).json()
        assert [b["id"] for b in ongoing] == [keep["id"]]

    def test_resolve_twice_is_forbidden(self, client, auth_headers) -> None:
        block = create(client, auth_headers)
        first = client.patch(f"/blocks/{block['id']}/resolve", headers=auth_headers)
        assert first.status_code == 200
        assert first.json()["status"] == "resolved"
        second = client.patch(f"/blocks/{block['id']}/resolve", headers=auth_headers)
        assert second.status_code == 403

    def test_resolve_with_explicit_time_before_start(self, client, auth_headers) -> None:
        block = create(client, auth_headers)
        resp = client.patch(
            f"/blocks/{block['id']}/resolve",
            json={"resolved_at": "2000-01-01T00:00:00Z"},
            headers=auth_headers,
        )
        assert resp.status_code == 400

    def test_update_and_delete(self, client, auth_headers) -> None:
        block = create(client, auth_headers)
        updated = client.put(f"/blocks/{block['id']}", json={"title": "renamed"}, headers=auth_headers)
        assert updated.json()["title"] == "renamed"

        assert client.delete(f"/blocks/{block['id']}", headers=auth_headers).json() == {"ok": True}
        assert client.get(f"/blocks/{block['id']}", headers=auth_headers).status_code == 404

    def test_foreign_block_looks_missing(self, client, auth_headers, other_headers) -> None:
        theirs = create(client, other_headers, title="private")
        foreign = client.get(f"/blocks/{theirs['id']}", headers=auth_headers)
        missing = client.get(f"/blocks/{uuid.uuid4()}", headers=auth_headers)
        assert foreign.status_code == missing.status_code == 404
        assert foreign.json() == missing.json()
        assert client.delete(f"/blocks/{theirs['id']}", headers=auth_headers).status_code == 404
        assert client.get(f"/blocks/{theirs['id']}", headers=other_headers).status_code == 200

    def test_foreign_tag_ids_are_dropped(self, client, auth_headers, other_headers) -> None:
        tag = client.post("/tags", json={"name": "theirs"}, headers=other_headers).json()
        block = create(client, auth_headers, tag_ids=[tag["id"], str(uuid.uuid4())])
        assert block["tags"] == []


class TestValidationErrors:
    def test_malformed_id(self, client, auth_headers) -> None:
        resp = client.get("/blocks/not-a-uuid", headers=auth_headers)
        assert resp.status_code == 400
        body = resp.json()
        assert body["message"] == "Validation failed"
        assert body["path"] == "/blocks/not-a-uuid"
        assert body["method"] == "GET"
        assert [e["field"] for e in body["errors"]] == ["block_id"]

    def test_empty_title(self, client, auth_headers) -> None:
        resp = client.post("/blocks", json={"title": "", "reason": "r"}, headers=auth_headers)
        assert resp.status_code == 400
        assert resp.json()["errors"][0]["field"] == "title"

    def test_page_size_out_of_range(self, client, auth_headers) -> None:
        resp = client.get("/blocks", params={"limit": 101}, headers=auth_headers)
        assert resp.status_code == 400

    def test_bad_tag_color(self, client, auth_headers) -> None:
        resp = client.post("/tags", json={"name": "x", "color": "red"}, headers=auth_headers)
        assert resp.status_code == 400


# =============================================================================
# Tags and analytics
# =============================================================================


class TestTagRoutes:
    def test_crud_and_stats(self, client, auth_headers) -> None:
        tag = client.post("/tags", json={"name": "infra"}, headers=auth_headers).json()
        assert client.post("/tags", json={"name": "infra"}, headers=auth_headers).status_code == 409

        create(client, auth_headers, tag_ids=[tag["id"]])
        stats = client.get("/tags/stats", headers=auth_headers).json()
        assert [(s["tag_name"], s["total_blocks"]) for s in stats] == [("infra", 1)]

        renamed = client.put(f"/tags/{tag['id']}", json={"name": "ops"}, headers=auth_headers).json()
        assert renamed["name"] == "ops"
        assert client.delete(f"/tags/{tag['id']}", headers=auth_headers).json() == {"ok": True}
        assert client.get("/tags", headers=auth_headers).json() == []


class TestAnalyticsRoutes:
    def test_dashboard(self, client, auth_headers) -> None:
        create(client, auth_headers)
        stats = client.get("/analytics/dashboard", headers=auth_headers).json()
        assert stats["total_blocks"] == stats["ongoing_blocks"] == 1
        assert stats["longest_block"]["title"] == "stuck on CI"

    def test_rollups_respond(self, client, auth_headers) -> None:
        create(client, auth_headers)
        monthly = client.get("/analytics/monthly", headers=auth_headers).json()
        assert sum(m["total_blocks"] for m in monthly) == 1
        daily = client.get("/analytics/daily", headers=auth_headers).json()
        assert sum(d["total_blocks"] for d in daily) == 1
        assert client.get("/analytics/calendar", params={"year": 2001}, headers=auth_headers).json() == []

    def test_month_out_of_range(self, client, auth_headers) -> None:
        assert client.get("/analytics/daily", params={"month": 13}, headers=auth_headers).status_code == 400

    def test_export_is_an_attachment(self, client, auth_headers) -> None:
        create(client, auth_headers)
        resp = client.get("/analytics/export", headers=auth_headers)
        assert resp.status_code == 200
        assert resp.headers["content-disposition"] == 'attachment; filename="blocklog-export.json"'
        body = resp.json()
        assert body["total_blocks"] == 1
        assert body["blocks"][0]["duration"] == 0
