"""API tests: settings, scenes, and a full play-through over HTTP.

Sessions run with a sleeper that never waits, and every driving request passes
wait=true so the response reflects the settled session.
"""

import asyncio

import pytest
from fastapi.testclient import TestClient

from backend import sessions, storage
from backend.app import create_app


async def _no_wait(seconds):
    await asyncio.sleep(0)


@pytest.fixture
def client():
    sessions.set_sleeper(_no_wait)
    with TestClient(create_app(storage.data_dir())) as c:
        yield c
    sessions.set_sleeper(asyncio.sleep)


def _texts(interpreter):
    return [e["text"] for e in interpreter["events"]]


def _tags(interpreter):
    return [c["tag"] for c in interpreter["choices"]]


# ── Settings and scenes ──────────────────────────────────


def test_health(client):
    assert client.get("/api/health").json() == {"status": "ok"}


def test_settings_round_trip(client):
    assert client.get("/api/settings").json()["pacing"] == "medium"

    resp = client.patch("/api/settings", json={"pacing": "fast", "language": "ka"})
    assert resp.status_code == 200
    assert resp.json()["pacing"] == "fast"
    assert client.get("/api/settings").json()["language"] == "ka"


def test_settings_rejects_unknown_pacing(client):
    resp = client.patch("/api/settings", json={"pacing": "glacial"})
    assert resp.status_code == 400
    assert "glacial" in resp.json()["detail"]


def test_list_and_get_scenes(client):
    names = client.get("/api/scenes").json()
    assert "text_scene_01" in names
    assert "encounter_01" in names

    scene = client.get("/api/scenes/encounter_01").json()
    assert scene["scene_type"] == "in_person_interaction"
    assert client.get("/api/scenes/nope").status_code == 404


# ── Sessions ─────────────────────────────────────────────


def test_full_play_through(client):
    resp = client.post("/api/sessions?wait=true")
    assert resp.status_code == 200
    session = resp.json()
    sid = session["id"]
    assert session["phase"] == "text_scene"
    assert session["text_scene"]["state"] == "awaiting_choice"
    assert _texts(session["text_scene"]) == ["hey", "are you free tonight?"]
    assert _tags(session["text_scene"]) == ["c1_warm", "c1_guarded", "c1_cold"]

    session = client.post(f"/api/sessions/{sid}/choices?wait=true", json={"option_id": "c1_warm"}).json()
    text = session["text_scene"]
    assert session["total_score"] == 4
    assert text["state"] == "transition_ready"
    assert text["transition_ready"]
    assert "Andreas shared a location" in _texts(text)
    assert _texts(text)[-1] == "café roma. 8pm"

    # Medium pacing shows the transition screen first
    session = client.post(f"/api/sessions/{sid}/transition").json()
    assert session["phase"] == "transition_to_encounter"
    assert client.post(f"/api/sessions/{sid}/transition").status_code == 409

    session = client.post(f"/api/sessions/{sid}/encounter?wait=true").json()
    encounter = session["encounter"]
    assert session["phase"] == "encounter"
    assert _texts(encounter)[0] == "CAFÉ ROMA — 20:04"
    assert _tags(encounter) == ["c1_listen", "c1_rush", "c1_phone"]

    session = client.post(f"/api/sessions/{sid}/choices?wait=true", json={"option_id": "c1_listen"}).json()
    assert _tags(session["encounter"]) == ["c2_support", "c2_hurt", "c2_shrug"]

    session = client.post(f"/api/sessions/{sid}/choices?wait=true", json={"option_id": "c2_support"}).json()
    assert session["total_score"] == 15
    assert session["phase"] == "epilogue"
    epilogue = session["epilogue"]
    assert epilogue["tier"] == "good"
    assert epilogue["restart_ready"]
    assert _texts(epilogue) == ["Andreas — online", "thank you for tonight", "see you tomorrow?"]
    assert all(e["tier"] == "good" for e in epilogue["events"][1:])

    session = client.post(f"/api/sessions/{sid}/restart?wait=true").json()
    assert session["phase"] == "text_scene"
    assert session["total_score"] == 0
    assert session["epilogue"]["events"] == []
    assert session["text_scene"]["state"] == "awaiting_choice"

    assert client.delete(f"/api/sessions/{sid}").json() == {"ok": True}
    assert client.get(f"/api/sessions/{sid}").status_code == 404


def test_fast_pacing_skips_transition_screen(client):
    client.patch("/api/settings", json={"pacing": "fast"})
    session = client.post("/api/sessions?wait=true").json()
    sid = session["id"]
    assert session["preferences"]["pacing"] == "fast"

    client.post(f"/api/sessions/{sid}/choices?wait=true", json={"option_id": "c1_cold"})
    session = client.post(f"/api/sessions/{sid}/transition?wait=true").json()
    assert session["phase"] == "encounter"
    assert session["encounter"]["state"] == "awaiting_choice"


def test_restart_picks_up_new_language(client):
    sid = client.post("/api/sessions?wait=true").json()["id"]
    client.patch("/api/settings", json={"language": "it"})

    session = client.post(f"/api/sessions/{sid}/restart?wait=true").json()
    assert session["preferences"]["language"] == "it"
    assert _texts(session["text_scene"])[0] == "ehi"


def test_poll_session(client):
    sid = client.post("/api/sessions").json()["id"]
    session = client.get(f"/api/sessions/{sid}?wait=true").json()
    assert session["id"] == sid
    assert session["text_scene"]["state"] == "awaiting_choice"
    assert not session["text_scene"]["typing"]


def test_option_not_on_offer(client):
    sid = client.post("/api/sessions?wait=true").json()["id"]
    resp = client.post(f"/api/sessions/{sid}/choices", json={"option_id": "c2_support"})
    assert resp.status_code == 409


def test_encounter_without_transition(client):
    sid = client.post("/api/sessions?wait=true").json()["id"]
    assert client.post(f"/api/sessions/{sid}/encounter").status_code == 409


def test_unknown_session(client):
    assert client.get("/api/sessions/nope").status_code == 404
    assert client.post("/api/sessions/nope/choices", json={"option_id": "x"}).status_code == 404
    assert client.post("/api/sessions/nope/transition").status_code == 404
    assert client.post("/api/sessions/nope/restart").status_code == 404
    assert client.delete("/api/sessions/nope").status_code == 404


def test_missing_configured_scene_falls_back(client):
    client.patch("/api/settings", json={"text_scene": "does_not_exist"})
    session = client.post("/api/sessions?wait=true").json()
    assert session["text_scene"]["state"] == "terminal"
    assert session["text_scene"]["transition_ready"]
