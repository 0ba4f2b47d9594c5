# backend/tests/test_api_routes.py
from __future__ import annotations

import asyncio
from decimal import Decimal

from househunt.clients import BackendError, Result
from househunt.services import images as images_svc


def _create_home(client, headers, **overrides) -> dict:
    body = {"address": "9 Birch Rd", "listing_url": "https://example.com/9-birch", "asking_price": "199000"}
    body.update(overrides)
    r = client.post("/api/homes", json=body, headers=headers)
    assert r.status_code == 201, r.text
    return r.json()


def test_health_is_public_and_reports_demo_mode(client):
    r = client.get("/api/health")
    assert r.status_code == 200
    assert r.json()["demo_mode"] is True
    assert r.headers["X-Request-ID"]


def test_routes_require_bearer_token(client):
    assert client.get("/api/homes").status_code == 401
    assert client.get("/api/homes", headers={"Authorization": "Bearer garbage"}).status_code == 401
    assert client.get("/api/homes", headers={"Authorization": "Basic abc"}).status_code == 401


def test_login_session_logout(client):
    r = client.post("/api/auth/login", json={"email": "a@b.c", "password": "pw"})
    assert r.status_code == 200
    body = r.json()
    assert body["demo"] is True and body["email"] == "a@b.c"

    headers = {"Authorization": f"Bearer {body['access_token']}"}
    assert client.get("/api/auth/session", headers=headers).json()["user_id"] == body["user_id"]
    assert client.post("/api/auth/logout", headers=headers).status_code == 204


def test_blank_login_is_rejected(client):
    assert client.post("/api/auth/login", json={"email": "", "password": "pw"}).status_code == 422


def test_home_crud(client, auth_headers):
    home = _create_home(client, auth_headers)
    assert home["current_status"] == "New"
    assert Decimal(home["asking_price"]) == Decimal("199000")

    r = client.patch(f"/api/homes/{home['id']}", json={"agent_name": "Sam"}, headers=auth_headers)
    assert r.json()["agent_name"] == "Sam"

    listed = client.get("/api/homes", headers=auth_headers).json()
    assert [h["id"] for h in listed] == [home["id"]]

    assert client.delete(f"/api/homes/{home['id']}", headers=auth_headers).status_code == 204
    assert client.get(f"/api/homes/{home['id']}", headers=auth_headers).status_code == 404


def test_missing_required_field_is_422(client, auth_headers):
    r = client.post("/api/homes", json={"address": "x"}, headers=auth_headers)
    assert r.status_code == 422


def test_checklist_lazily_created_and_summarized(client, auth_headers):
    home = _create_home(client, auth_headers)

    c = client.get(f"/api/homes/{home['id']}/checklist", headers=auth_headers).json()
    assert c["three_bed"] is False and c["notes"] == ""

    patch = {f: True for f in ("three_bed", "two_bath", "under_200k", "no_basement", "brick", "updated", "ranch")}
    client.patch(f"/api/homes/{home['id']}/checklist", json=patch, headers=auth_headers)

    s = client.get(f"/api/homes/{home['id']}/checklist/summary", headers=auth_headers).json()
    assert s["meets_criteria"] is False
    assert s["completion"] == {"met": 7, "total": 8, "ratio": 0.875}

    cards = client.get("/api/homes/overview", headers=auth_headers).json()
    assert cards[0]["completion"]["met"] == 7
    assert cards[0]["primary_image_url"] is None


def test_checklist_patch_rejects_unknown_fields(client, auth_headers):
    home = _create_home(client, auth_headers)
    r = client.patch(f"/api/homes/{home['id']}/checklist", json={"has_moat": True}, headers=auth_headers)
    assert r.status_code == 422


def test_status_notes_and_images(client, auth_headers):
    home = _create_home(client, auth_headers)
    hid = home["id"]

    r = client.post(f"/api/homes/{hid}/status", json={"status": "Offer Made", "offer_amount": 185000}, headers=auth_headers)
    assert r.status_code == 201
    assert Decimal(r.json()["offer_amount"]) == Decimal("185000")
    assert client.get(f"/api/homes/{hid}", headers=auth_headers).json()["current_status"] == "Offer Made"

    r = client.post(f"/api/homes/{hid}/notes", json={"note": "Counter expected"}, headers=auth_headers)
    assert r.json()["status"] == "Offer Made"

    r = client.post(
        f"/api/homes/{hid}/images",
        params={"filename": "front.jpg"},
        content=b"\xff\xd8\xff" + b"0" * 16,
        headers={**auth_headers, "Content-Type": "image/jpeg"},
    )
    assert r.status_code == 201, r.text
    img = r.json()
    assert img["is_primary"] is True
    assert img["image_url"].endswith(".jpg")

    cards = client.get("/api/homes/overview", headers=auth_headers).json()
    assert cards[0]["primary_image_url"] == img["image_url"]

    assert client.delete(f"/api/images/{img['id']}", headers=auth_headers).status_code == 204
    assert client.get(f"/api/homes/{hid}/images", headers=auth_headers).json() == []


def test_unsupported_image_type_is_415(client, auth_headers):
    home = _create_home(client, auth_headers)
    r = client.post(
        f"/api/homes/{home['id']}/images",
        content=b"hello",
        headers={**auth_headers, "Content-Type": "text/plain"},
    )
    assert r.status_code == 415


def test_image_upload_runs_off_the_event_loop(client, auth_headers, monkeypatch):
    home = _create_home(client, auth_headers)
    seen = {}
    real_upload = images_svc.upload_image

    def recording_upload(*args, **kwargs):
        try:
            asyncio.get_running_loop()
            seen["on_loop"] = True
        except RuntimeError:
            seen["on_loop"] = False
        return real_upload(*args, **kwargs)

    monkeypatch.setattr(images_svc, "upload_image", recording_upload)
    r = client.post(
        f"/api/homes/{home['id']}/images",
        content=b"\x89PNG" + b"0" * 8,
        headers={**auth_headers, "Content-Type": "image/png"},
    )
    assert r.status_code == 201, r.text
    assert seen == {"on_loop": False}


def test_evaluation_put_get_and_eligibility(client, auth_headers):
    home = _create_home(client, auth_headers)
    hid = home["id"]

    ev = {
        "basic_systems": {"hvac_type": "Central", "co_detectors_installed": True, "fire_extinguisher_present": True},
        "structure": {"attic_insulation_present": True, "crawl_space_accessible": True},
        "bedrooms": [],
    }
    r = client.put(f"/api/homes/{hid}/evaluation", json=ev, headers=auth_headers)
    assert r.status_code == 200, r.text
    assert r.json()["basic_systems"]["hvac_type"] == ["Central"]

    out = client.get(f"/api/homes/{hid}/evaluation/eligibility", headers=auth_headers).json()
    assert out["eligible"] is True
    assert out["total"] == 11


def test_evaluation_for_unknown_home_is_404(client, auth_headers):
    assert client.get("/api/homes/nope/evaluation", headers=auth_headers).status_code == 404


def test_backend_failure_maps_to_json_error(client, backend, auth_headers, monkeypatch):
    monkeypatch.setattr(
        backend, "run_query", lambda spec, s: Result(error=BackendError("upstream down", code="NETWORK_ERROR"))
    )
    r = client.get("/api/homes", headers=auth_headers)
    assert r.status_code == 502
    assert r.json() == {"error": {"message": "upstream down", "code": "NETWORK_ERROR"}}
