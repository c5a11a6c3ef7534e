import jwt
from sqlalchemy.exc import OperationalError

from helpdesk.core.config import settings as config
from helpdesk.core.settings import settings
from helpdesk.models.user import Profile


def _create(client, headers, **body):
    payload = {"title": "Printer jam", "description": "Tray 2 keeps jamming", **body}
    res = client.post("/tickets", json=payload, headers=headers)
    assert res.status_code == 201, res.text
    return res.json()


def test_health(client):
    assert client.get("/health").json() == {"ok": True}


def test_missing_or_bad_token(client):
    assert client.get("/tickets").status_code == 401
    forged = jwt.encode({"sub": "x", "aud": config.jwt_audience}, "not-the-secret", algorithm="HS256")
    res = client.get("/tickets", headers={"Authorization": f"Bearer {forged}"})
    assert res.status_code == 401
    assert res.json() == {"detail": "Invalid token"}


def test_first_login_creates_profile(client, auth, db_session):
    res = client.get("/me", headers=auth("new-user", role="teknisi"))
    assert res.status_code == 200
    body = res.json()
    assert (body["id"], body["role"]) == ("new-user", "technician")
    assert db_session.get(Profile, "new-user") is not None


def test_update_me(client, auth, reporter):
    res = client.patch("/me", json={"department": "Finance"}, headers=auth(reporter.id))
    assert res.json()["department"] == "Finance"


def test_ticket_lifecycle_over_http(client, auth, reporter, technician, admin):
    t = _create(client, auth(reporter.id))
    assert (t["status"], t["priority"], t["assignee_id"], t["version"]) == ("open", "medium", None, 1)
    assert t["reporter"]["full_name"] == "Rina Reporter"

    res = client.patch(f"/tickets/{t['id']}/assign", json={"assignee_id": technician.id}, headers=auth(admin.id))
    assert res.status_code == 200
    assert res.json()["status"] == "in_progress"

    res = client.patch(
        f"/tickets/{t['id']}/status",
        json={"status": "resolved", "expected_version": 2},
        headers=auth(technician.id),
    )
    assert res.status_code == 200
    assert res.json()["resolved_at"] is not None

    events = client.get(f"/tickets/{t['id']}/events", headers=auth(reporter.id)).json()
    assert events[0]["type"] == "status_changed"


def test_error_mapping(client, auth, reporter, other_reporter, technician, admin):
    t = _create(client, auth(reporter.id))
    tid = t["id"]

    assert client.post("/tickets", json={"title": " ", "description": "d"}, headers=auth(reporter.id)).status_code == 422
    assert client.patch(f"/tickets/{tid}/status", json={"status": "done"}, headers=auth(admin.id)).status_code == 422
    assert client.patch(f"/tickets/{tid}/status", json={"status": "resolved"}, headers=auth(reporter.id)).status_code == 403
    assert client.get(f"/tickets/{tid}", headers=auth(other_reporter.id)).status_code == 403
    assert client.get("/tickets/9999", headers=auth(admin.id)).status_code == 404
    res = client.patch(f"/tickets/{tid}/assign", json={"assignee_id": reporter.id}, headers=auth(admin.id))
    assert res.status_code == 422

    res = client.patch(f"/tickets/{tid}/priority", json={"priority": "high", "expected_version": 7}, headers=auth(admin.id))
    assert res.status_code == 409


def test_store_outage_maps_to_503(client, auth, reporter, db_session, monkeypatch):
    def flush(*args, **kwargs):
        raise OperationalError("INSERT INTO tickets", {}, Exception("connection refused"))
    monkeypatch.setattr(db_session, "flush", flush)

    res = client.post("/tickets", json={"title": "t", "description": "d"}, headers=auth(reporter.id))
    assert res.status_code == 503
    assert res.json() == {"detail": "The ticket store is unavailable. Please try again."}


def test_listing_is_scoped(client, auth, reporter, other_reporter, admin):
    mine = _create(client, auth(reporter.id))
    _create(client, auth(other_reporter.id), title="Monitor flicker")

    page = client.get("/tickets", headers=auth(reporter.id)).json()
    assert [t["id"] for t in page["items"]] == [mine["id"]]
    assert page["total"] == 1

    page = client.get("/tickets", params={"limit": 1}, headers=auth(admin.id)).json()
    assert (len(page["items"]), page["total"], page["limit"]) == (1, 2, 1)

    assert client.get("/tickets", params={"limit": 0}, headers=auth(admin.id)).status_code == 422


def test_comments_over_http(client, auth, reporter, technician, admin):
    t = _create(client, auth(reporter.id))
    client.patch(f"/tickets/{t['id']}/assign", json={"assignee_id": technician.id}, headers=auth(admin.id))

    url = f"/tickets/{t['id']}/comments"
    assert client.post(url, json={"content": "On my way"}, headers=auth(technician.id)).status_code == 201
    assert client.post(url, json={"content": "needs a part", "is_internal": True}, headers=auth(technician.id)).status_code == 201
    res = client.post(url, json={"content": "secret", "is_internal": True}, headers=auth(reporter.id))
    assert res.json()["is_internal"] is False
    assert client.post(url, json={"content": "  "}, headers=auth(reporter.id)).status_code == 422

    seen = [c["content"] for c in client.get(url, headers=auth(reporter.id)).json()]
    assert seen == ["On my way", "secret"]
    assert len(client.get(url, headers=auth(admin.id)).json()) == 3


def test_evidence_upload(client, auth, blobs, reporter, technician, admin):
    t = _create(client, auth(reporter.id))
    client.patch(f"/tickets/{t['id']}/assign", json={"assignee_id": technician.id}, headers=auth(admin.id))
    url = f"/tickets/{t['id']}/evidence"

    res = client.post(url, files={"file": ("photo.jpg", b"jpeg-bytes", "image/jpeg")}, headers=auth(technician.id))
    assert res.status_code == 200, res.text
    stored_url = res.json()["url"]
    assert stored_url.startswith("memory://tickets/")
    assert client.get(f"/tickets/{t['id']}", headers=auth(reporter.id)).json()["attachment_url"] == stored_url

    res = client.post(url, files={"file": ("run.exe", b"MZ", "application/octet-stream")}, headers=auth(technician.id))
    assert res.status_code == 400

    res = client.post(url, files={"file": ("photo.jpg", b"x", "image/jpeg")}, headers=auth(reporter.id))
    assert res.status_code == 403

    blobs.fail_upload = True
    res = client.post(url, files={"file": ("photo.jpg", b"x", "image/jpeg")}, headers=auth(admin.id))
    assert res.status_code == 502
    assert res.json() == {"detail": "Attachment upload failed. Please try again."}


def test_evidence_access_is_checked_before_the_file(client, auth, blobs, reporter, other_reporter, monkeypatch):
    monkeypatch.setattr(settings, "MAX_EVIDENCE_BYTES", 8)
    t = _create(client, auth(reporter.id))
    url = f"/tickets/{t['id']}/evidence"

    res = client.post(url, files={"file": ("run.exe", b"MZ", "application/octet-stream")}, headers=auth(other_reporter.id))
    assert res.status_code == 403
    res = client.post(url, files={"file": ("big.log", b"0123456789", "text/plain")}, headers=auth(reporter.id))
    assert res.status_code == 403
    res = client.post("/tickets/9999/evidence", files={"file": ("run.exe", b"MZ", "application/octet-stream")}, headers=auth(reporter.id))
    assert res.status_code == 404
    assert blobs.objects == {}


def test_evidence_size_limit(client, auth, reporter, admin, monkeypatch):
    monkeypatch.setattr(settings, "MAX_EVIDENCE_BYTES", 8)
    t = _create(client, auth(reporter.id))
    res = client.post(
        f"/tickets/{t['id']}/evidence",
        files={"file": ("big.log", b"0123456789", "text/plain")},
        headers=auth(admin.id),
    )
    assert res.status_code == 413


def test_admin_endpoints(client, auth, reporter, technician, admin):
    techs = client.get("/users", params={"role": "technician"}, headers=auth(admin.id)).json()
    assert [u["id"] for u in techs] == [technician.id]
    assert client.get("/users", headers=auth(reporter.id)).status_code == 403

    res = client.patch(f"/users/{reporter.id}/role", json={"role": "teknisi"}, headers=auth(admin.id))
    assert res.json()["role"] == "technician"

    res = client.post("/categories", json={"name": "Printers"}, headers=auth(admin.id))
    assert res.status_code == 201
    assert res.json()["color"] == "#6366f1"
    assert client.post("/categories", json={"name": "Printers"}, headers=auth(admin.id)).status_code == 422
    assert [c["name"] for c in client.get("/categories", headers=auth(reporter.id)).json()] == ["Printers"]

    t = _create(client, auth(admin.id))
    assert client.delete(f"/tickets/{t['id']}", headers=auth(reporter.id)).status_code == 403
    assert client.delete(f"/tickets/{t['id']}", headers=auth(admin.id)).status_code == 204
    assert client.get(f"/tickets/{t['id']}", headers=auth(admin.id)).status_code == 404


def test_admin_provisions_profiles(client, auth, token_for, reporter, admin):
    body = {"id": "u-7", "email": "budi@example.com", "full_name": "Budi", "role": "teknisi", "department": "IT"}
    assert client.post("/users", json=body, headers=auth(reporter.id)).status_code == 403

    res = client.post("/users", json=body, headers=auth(admin.id))
    assert res.status_code == 201, res.text
    assert (res.json()["role"], res.json()["department"]) == ("technician", "IT")
    assert client.post("/users", json=body, headers=auth(admin.id)).status_code == 422

    token = token_for("u-7", role="reporter", email="budi@example.com")
    me = client.get("/me", headers={"Authorization": f"Bearer {token}"}).json()
    assert me["role"] == "technician"
