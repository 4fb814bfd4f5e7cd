import pytest

pytest.importorskip("httpx", reason="httpx requis pour les tests client FastAPI")

from statguess.config.settings import settings
from statguess.services.draft_store import get_draft, list_draft_ids

from conftest import TROUT_ID


def _open(client) -> dict:
    response = client.post("/api/drafts", json={"player_id": TROUT_ID})
    assert response.status_code == 201, response.text
    return response.json()


def _info_field(view: dict, key: str) -> dict:
    return next(f for f in view["view"]["info"]["fields"] if f["key"] == key)


def test_open_draft_applies_defaults(client):
    draft = _open(client)

    assert draft["loaded"] is True
    assert draft["playerId"] == TROUT_ID
    assert draft["statsConfig"]["info"]["selected"] == []
    assert "team" in draft["statsConfig"]["info"]["deselected"]
    assert "homeRuns" in draft["statsConfig"]["hitting"]["selected"]
    assert draft["view"]["mode"] == "author"
    assert draft["view"]["player"]["fullName"] == "Mike Trout"
    assert draft["gameOptions"]["maxGuesses"] == 3


def test_open_draft_errors(client):
    assert client.post("/api/drafts", json={}).status_code == 400
    assert client.post("/api/drafts", json={"player_id": 1}).status_code == 502


def test_toggle_team_reveals_and_highlights(client):
    draft_id = _open(client)["draftId"]

    toggled = client.post(f"/api/drafts/{draft_id}/toggle", json={"namespace": "info", "key": "team"})
    assert toggled.status_code == 200
    body = toggled.json()
    assert body["revealed"] == ["team", "teamDetails"]
    assert set(body["statsConfig"]["info"]["selected"]) == {"team", "teamDetails"}
    assert _info_field(body, "team")["highlight"] is True
    assert _info_field(body, "team")["state"] == "selected"

    # le surlignage est toujours actif à la relecture immédiate
    assert _info_field(client.get(f"/api/drafts/{draft_id}").json(), "team")["highlight"] is True

    again = client.post(f"/api/drafts/{draft_id}/toggle", json={"namespace": "info", "key": "team"}).json()
    assert again["revealed"] == []
    assert again["statsConfig"]["info"]["selected"] == []


def test_toggle_all_section(client):
    draft_id = _open(client)["draftId"]

    cleared = client.post(f"/api/drafts/{draft_id}/toggle-all", json={"namespace": "hitting", "selected": []}).json()
    assert cleared["statsConfig"]["hitting"]["selected"] == []
    assert "homeRuns" in cleared["statsConfig"]["hitting"]["deselected"]

    picked = client.post(
        f"/api/drafts/{draft_id}/toggle-all",
        json={"namespace": "hitting", "selected": ["team", "homeRuns"]},
    ).json()
    assert set(picked["revealed"]) == {"team", "teamDetails", "homeRuns"}
    assert "teamDetails" not in picked["statsConfig"]["hitting"]["deselected"]


def test_bad_namespace_and_unknown_draft(client):
    draft_id = _open(client)["draftId"]
    bad = client.post(f"/api/drafts/{draft_id}/toggle", json={"namespace": "fielding", "key": "team"})
    assert bad.status_code == 422
    assert client.get("/api/drafts/missing").status_code == 404
    assert client.post("/api/drafts/missing/toggle", json={"namespace": "info", "key": "age"}).status_code == 404


def test_update_options(client):
    draft_id = _open(client)["draftId"]
    response = client.post(
        f"/api/drafts/{draft_id}/options",
        json={"maxGuesses": 5, "hint": {"enabled": True, "text": "Wears 27"}},
    )
    assert response.status_code == 200
    assert response.json()["gameOptions"] == {"maxGuesses": 5, "hint": {"enabled": True, "text": "Wears 27"}}


def test_publish_persists_game_and_closes_draft(client, game_store):
    draft_id = _open(client)["draftId"]
    client.post(f"/api/drafts/{draft_id}/toggle", json={"namespace": "info", "key": "position"})

    published = client.post(f"/api/drafts/{draft_id}/publish", json={})
    assert published.status_code == 201
    body = published.json()
    assert body["game"]["title"] == "Game for Mike Trout"
    assert body["link"].endswith(f"/game/{body['game']['id']}")

    config = game_store.get_config(body["game"]["id"])
    assert config.player_id == TROUT_ID
    assert config.stats_config.info.selected == ["position"]

    assert client.get(f"/api/drafts/{draft_id}").status_code == 404


def test_discard_draft(client):
    draft_id = _open(client)["draftId"]
    assert client.delete(f"/api/drafts/{draft_id}").status_code == 200
    assert client.delete(f"/api/drafts/{draft_id}").status_code == 404


def test_idle_draft_is_purged_on_next_create(client):
    stale_id = _open(client)["draftId"]
    get_draft(stale_id).last_seen -= settings.DRAFT_TTL_SECONDS + 1

    fresh_id = _open(client)["draftId"]

    assert stale_id not in list_draft_ids()
    assert fresh_id in list_draft_ids()
    assert client.get(f"/api/drafts/{stale_id}").status_code == 404


def test_idle_draft_is_purged_on_read(client):
    draft_id = _open(client)["draftId"]
    get_draft(draft_id).last_seen -= settings.DRAFT_TTL_SECONDS + 1

    assert client.get(f"/api/drafts/{draft_id}").status_code == 404
    assert draft_id not in list_draft_ids()


def test_reading_a_draft_keeps_it_alive(client):
    draft_id = _open(client)["draftId"]
    draft = get_draft(draft_id)
    draft.last_seen -= settings.DRAFT_TTL_SECONDS - 60

    assert client.get(f"/api/drafts/{draft_id}").status_code == 200
    assert not draft.expired(draft.last_seen + 1, settings.DRAFT_TTL_SECONDS)
