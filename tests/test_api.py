# tests/test_api.py
import logging

from fastapi.testclient import TestClient

from backend.config import settings
from backend.main import create_app

from conftest import FakeLLM, signup

CALL = {"call_date": "2024-05-01", "call_time": "10:30"}


def _upload(client, deal_id, name="call.txt", body=b"We agreed on a pilot.", content_type="text/plain", **form):
    data = {**CALL, **form}
    return client.post(
        f"/api/deals/{deal_id}/transcripts",
        files={"file": (name, body, content_type)},
        data=data,
    )


def _new_deal(client, name="Acme Expansion"):
    resp = client.post("/api/deals", json={"name": name})
    assert resp.status_code == 201, resp.text
    return resp.json()


# ---------- health / auth ----------

def test_health(client):
    r = client.get("/api/health")
    assert r.status_code == 200
    assert r.json()["ok"] is True


def test_debug_setting_controls_log_level(monkeypatch):
    root = logging.getLogger()
    before = root.level
    try:
        monkeypatch.setattr(settings, "DEBUG", True)
        create_app(database_url="sqlite://", llm=FakeLLM())
        assert root.level == logging.DEBUG

        monkeypatch.setattr(settings, "DEBUG", False)
        create_app(database_url="sqlite://", llm=FakeLLM())
        assert root.level == logging.INFO
    finally:
        root.setLevel(before)


def test_requires_session(client):
    assert client.get("/api/deals").status_code == 401
    assert client.get("/api/me").status_code == 401


def test_signup_login_me_logout(client):
    user = signup(client)
    assert user["email"] == "rep@example.com"
    assert user["name"] == "Sam Seller"

    me = client.get("/api/me")
    assert me.status_code == 200
    assert me.json()["id"] == user["id"]

    assert client.post("/api/auth/logout").status_code == 200
    client.cookies.clear()
    assert client.get("/api/me").status_code == 401

    bad = client.post("/api/login", json={"email": "rep@example.com", "password": "wrong-one"})
    assert bad.status_code == 401

    ok = client.post("/api/login", json={"email": "REP@example.com", "password": "s3cret-pass"})
    assert ok.status_code == 200
    assert client.get("/api/me").status_code == 200


def test_duplicate_signup(client):
    signup(client)
    r = client.post("/api/auth/signup", json={
        "first_name": "Sam", "email": "rep@example.com", "password": "another-pass",
    })
    assert r.status_code == 409


# ---------- deals ----------

def test_deal_crud_and_counts(client):
    signup(client)
    first = _new_deal(client, "  First  ")
    assert first["name"] == "First"
    second = _new_deal(client, "Second")
    assert _upload(client, first["id"]).status_code == 201
    assert _upload(client, first["id"], name="b.vtt", content_type="text/vtt").status_code == 201

    listed = client.get("/api/deals").json()
    counts = {d["name"]: d["transcript_count"] for d in listed}
    assert counts == {"First": 2, "Second": 0}

    r = client.patch(f"/api/deals/{second['id']}", json={"name": "Renamed"})
    assert r.status_code == 200
    assert r.json()["name"] == "Renamed"
    assert client.patch(f"/api/deals/{second['id']}", json={"name": "   "}).status_code == 400
    assert client.patch(f"/api/deals/{second['id']}", json={"name": "x" * 256}).status_code == 400

    assert client.delete(f"/api/deals/{second['id']}").status_code == 204
    assert client.get(f"/api/deals/{second['id']}").status_code == 404


def test_deals_are_private(app):
    alice, bob = TestClient(app), TestClient(app)
    signup(alice, "alice@example.com")
    signup(bob, "bob@example.com")
    deal = _new_deal(alice)

    assert bob.get(f"/api/deals/{deal['id']}").status_code == 404
    assert bob.get(f"/api/deals/{deal['id']}/transcripts").status_code == 404
    assert bob.delete(f"/api/deals/{deal['id']}").status_code == 404
    assert bob.get("/api/deals").json() == []
    assert alice.get(f"/api/deals/{deal['id']}").status_code == 200


# ---------- transcripts ----------

def test_upload_validation(client):
    signup(client)
    deal = _new_deal(client)

    assert _upload(client, deal["id"], name="deck.pdf", content_type="application/pdf").status_code == 400
    assert _upload(client, deal["id"], body=b"  \n ").status_code == 400
    assert _upload(client, deal["id"], call_time="10am").status_code == 422

    r = _upload(client, deal["id"], body="\ufeffHello\x00 there".encode("utf-8"))
    assert r.status_code == 201
    t = r.json()
    assert t["content"] == "Hello there"
    assert t["call_date"] == "2024-05-01"
    assert t["call_time"] == "10:30"

    got = client.get(f"/api/deals/{deal['id']}/transcripts/{t['id']}")
    assert got.status_code == 200
    assert got.json()["file_name"] == "call.txt"


def test_transcripts_listed_newest_first(client):
    signup(client)
    deal = _new_deal(client)
    a = _upload(client, deal["id"], name="a.txt").json()
    b = _upload(client, deal["id"], name="b.txt").json()

    ids = [t["id"] for t in client.get(f"/api/deals/{deal['id']}/transcripts").json()]
    assert ids == [b["id"], a["id"]]


def test_deleting_transcript_keeps_its_action_items(client):
    signup(client)
    deal = _new_deal(client)
    t = _upload(client, deal["id"]).json()
    item = client.post(f"/api/deals/{deal['id']}/action-items",
                       json={"description": "Send recap", "transcript_id": t["id"]}).json()
    assert item["transcript_id"] == t["id"]

    assert client.delete(f"/api/deals/{deal['id']}/transcripts/{t['id']}").status_code == 204

    items = client.get(f"/api/deals/{deal['id']}/action-items").json()
    assert [(i["description"], i["transcript_id"]) for i in items] == [("Send recap", None)]


# ---------- contacts ----------

def test_contact_link_update_and_remove(client):
    signup(client)
    deal = _new_deal(client)
    other = _new_deal(client, "Other")
    body = {"first_name": "Ada", "last_name": "Lovelace", "email": "Ada@Example.com", "role_in_deal": "Champion"}

    first = client.post(f"/api/deals/{deal['id']}/contacts", json=body)
    assert first.status_code == 200
    link = first.json()
    assert link["role_in_deal"] == "Champion"

    # same email again: same contact, role updated
    again = client.post(f"/api/deals/{deal['id']}/contacts", json={**body, "role_in_deal": "Economic buyer"})
    assert again.json()["contact_id"] == link["contact_id"]

    # same contact, different role on another deal
    client.post(f"/api/deals/{other['id']}/contacts", json={**body, "role_in_deal": "Blocker"})

    listed = client.get(f"/api/deals/{deal['id']}/contacts").json()
    assert len(listed) == 1
    assert listed[0]["email"] == "ada@example.com"
    assert listed[0]["role_in_deal"] == "Economic buyer"
    assert client.get(f"/api/deals/{other['id']}/contacts").json()[0]["role_in_deal"] == "Blocker"

    assert client.delete(f"/api/deals/{deal['id']}/contacts/{link['contact_id']}").status_code == 204
    assert client.delete(f"/api/deals/{deal['id']}/contacts/{link['contact_id']}").status_code == 404
    assert client.get(f"/api/deals/{deal['id']}/contacts").json() == []


# ---------- action items ----------

def test_action_item_crud(client):
    signup(client)
    deal = _new_deal(client)

    created = client.post(f"/api/deals/{deal['id']}/action-items", json={"description": "  Book demo "})
    assert created.status_code == 201
    item = created.json()
    assert item["description"] == "Book demo"
    assert item["is_completed"] is False
    assert item["is_ai_suggested"] is False

    assert client.post(f"/api/deals/{deal['id']}/action-items",
                       json={"description": "x", "transcript_id": 999}).status_code == 400

    r = client.patch(f"/api/action-items/{item['id']}", json={"is_completed": True})
    assert r.status_code == 200
    assert r.json()["is_completed"] is True
    assert client.patch(f"/api/action-items/{item['id']}", json={}).status_code == 400

    assert client.delete(f"/api/action-items/{item['id']}").status_code == 204
    assert client.delete(f"/api/action-items/{item['id']}").status_code == 404


def test_action_items_of_other_users_are_hidden(app):
    alice, bob = TestClient(app), TestClient(app)
    signup(alice, "alice@example.com")
    signup(bob, "bob@example.com")
    deal = _new_deal(alice)
    item = alice.post(f"/api/deals/{deal['id']}/action-items", json={"description": "Book demo"}).json()

    assert bob.patch(f"/api/action-items/{item['id']}", json={"is_completed": True}).status_code == 404
    assert bob.delete(f"/api/action-items/{item['id']}").status_code == 404
    assert bob.get(f"/api/deals/{deal['id']}/action-items").status_code == 404


def test_transcript_action_items_missing_or_unowned_is_404(app):
    alice, bob = TestClient(app), TestClient(app)
    signup(alice, "alice@example.com")
    signup(bob, "bob@example.com")
    deal = _new_deal(alice)
    t = _upload(alice, deal["id"]).json()
    alice.post(f"/api/deals/{deal['id']}/action-items", json={"description": "Send recap", "transcript_id": t["id"]})

    assert bob.get(f"/api/transcripts/{t['id']}/action-items").status_code == 404
    assert alice.get("/api/transcripts/9999/action-items").status_code == 404

    mine = alice.get(f"/api/transcripts/{t['id']}/action-items")
    assert mine.status_code == 200
    assert [i["description"] for i in mine.json()] == ["Send recap"]


# ---------- AI endpoints ----------

def test_scan_endpoint(client, fake_llm):
    signup(client)
    deal = _new_deal(client)
    t = _upload(client, deal["id"]).json()
    fake_llm.reply = '["Send pilot agreement"]'

    r = client.post(f"/api/deals/{deal['id']}/transcripts/{t['id']}/scan-action-items")
    assert r.status_code == 200
    out = r.json()
    assert out["success"] is True
    assert out["count"] == 1

    by_transcript = client.get(f"/api/transcripts/{t['id']}/action-items").json()
    assert [i["description"] for i in by_transcript] == ["Send pilot agreement"]
    assert by_transcript[0]["is_ai_suggested"] is True


def test_follow_up_email_endpoint(client, fake_llm):
    signup(client)
    deal = _new_deal(client)
    t = _upload(client, deal["id"]).json()
    fake_llm.reply = "Great speaking today. Next step is the pilot."

    out = client.post(f"/api/transcripts/{t['id']}/follow-up-email").json()
    assert out == {"success": True, "email_text": "Great speaking today. Next step is the pilot.", "error": None}


def test_ask_endpoint(client, fake_llm):
    signup(client)
    deal = _new_deal(client)
    _upload(client, deal["id"], body=b"Budget is approved.")
    fake_llm.reply = "Yes, the budget is approved."

    out = client.post(f"/api/deals/{deal['id']}/ask", json={"question": "Is budget approved?"}).json()
    assert out["success"] is True
    assert out["answer"] == "Yes, the budget is approved."

    empty = client.post(f"/api/deals/{deal['id']}/ask", json={"question": "  "}).json()
    assert empty["success"] is False

    missing = client.post("/api/deals/9999/ask", json={"question": "Anything?"}).json()
    assert missing["success"] is False
