import json
from datetime import datetime

import pytest
from fastapi.testclient import TestClient

from dartmacro.api.app import create_app
from dartmacro.client.core.config import ClientSettings
from dartmacro.client.session import MacroSession


@pytest.fixture
def session(tmp_path):
    settings = ClientSettings(data_dir=tmp_path)
    return MacroSession(lambda text: None, settings=settings)


@pytest.fixture
def client(session):
    app = create_app(session=session, settings=session.settings, configure_logging=False)
    with TestClient(app) as test_client:
        yield test_client


class TestAliases:
    def test_crud(self, client, tmp_path):
        created = client.post(
            "/api/aliases", json={"pattern": "aa", "body": "attack $1", "group": "COMBAT"}
        )
        assert created.status_code == 201
        alias = created.json()
        assert alias["scope"] == "global"
        assert alias["match_mode"] == "prefix"
        assert alias["group"] == "Combat"

        saved = json.loads((tmp_path / "aliases.json").read_text())
        assert alias["id"] in saved["global"]

        updated = client.put(f"/api/aliases/global/{alias['id']}", json={"body": "kill $1"})
        assert updated.status_code == 200
        assert updated.json()["body"] == "kill $1"
        assert datetime.fromisoformat(updated.json()["updated_at"]) > datetime.fromisoformat(
            alias["updated_at"]
        )

        listed = client.get("/api/aliases").json()
        assert [a["id"] for a in listed] == [alias["id"]]

        assert client.delete(f"/api/aliases/global/{alias['id']}").status_code == 204
        assert client.get("/api/aliases").json() == []

    def test_bad_regex_rejected(self, client):
        response = client.post("/api/aliases", json={"pattern": "(a+)+", "match_mode": "regex"})
        assert response.status_code == 400
        assert "Unsafe regex" in response.json()["detail"]

    def test_bad_match_mode_rejected(self, client):
        response = client.post("/api/aliases", json={"pattern": "x", "match_mode": "substring"})
        assert response.status_code == 400

    def test_missing_record_404(self, client):
        assert client.patch("/api/aliases/global/nope/toggle").status_code == 404
        assert client.delete("/api/aliases/global/nope").status_code == 404

    def test_character_scope_without_character(self, client):
        response = client.post("/api/aliases", json={"scope": "character", "pattern": "x"})
        assert response.status_code == 400

    def test_toggle_and_duplicate(self, client):
        alias = client.post("/api/aliases", json={"pattern": "kk", "body": "kick"}).json()
        toggled = client.patch(f"/api/aliases/global/{alias['id']}/toggle").json()
        assert toggled["enabled"] is False

        copy = client.post(f"/api/aliases/global/{alias['id']}/duplicate")
        assert copy.status_code == 201
        assert copy.json()["pattern"] == "kk_copy"
        assert copy.json()["id"] != alias["id"]

    def test_scope_change_creates_new_record(self, client):
        client.put("/api/session/character", json={"character": "Gandalf"})
        alias = client.post("/api/aliases", json={"pattern": "kk", "body": "kick"}).json()
        moved = client.put(f"/api/aliases/global/{alias['id']}", json={"scope": "character"})
        assert moved.status_code == 200
        assert moved.json()["scope"] == "character"
        assert moved.json()["id"] != alias["id"]
        assert [(a["scope"], a["pattern"]) for a in client.get("/api/aliases").json()] == [
            ("character", "kk")
        ]


class TestTriggers:
    def test_create_with_effects(self, client):
        response = client.post(
            "/api/triggers",
            json={
                "pattern": r"(\w+) tells you",
                "match_mode": "regex",
                "body": "reply hi $1",
                "cooldown_ms": -50,
                "highlight": "",
                "gag": True,
            },
        )
        assert response.status_code == 201
        trigger = response.json()
        assert trigger["cooldown_ms"] == 0
        assert trigger["highlight"] is None
        assert trigger["gag"] is True


class TestTimers:
    def test_name_required(self, client):
        response = client.post("/api/timers", json={"name": " ", "interval_seconds": 10})
        assert response.status_code == 400

    def test_create_and_list(self, client):
        created = client.post(
            "/api/timers", json={"name": "hb", "body": "say hi", "interval_seconds": -3}
        ).json()
        assert created["interval_seconds"] == 0
        assert created["next_fire_seconds"] is None
        assert client.get("/api/timers").json()[0]["name"] == "hb"


class TestVariables:
    def test_unique_name_per_scope(self, client):
        assert client.post("/api/variables", json={"name": "hp", "value": "10"}).status_code == 201
        duplicate = client.post("/api/variables", json={"name": "HP", "value": "1"})
        assert duplicate.status_code == 400

    def test_invalid_name(self, client):
        assert client.post("/api/variables", json={"name": "me"}).status_code == 400

    def test_duplicate_gets_copy_suffix(self, client):
        variable = client.post("/api/variables", json={"name": "hp", "value": "10"}).json()
        copy = client.post(f"/api/variables/global/{variable['id']}/duplicate").json()
        assert copy["name"] == "hp_copy"
        assert copy["value"] == "10"


class TestSession:
    def test_preview_does_not_mutate_variables(self, client, session):
        client.post("/api/variables", json={"name": "hp", "value": "10"})
        response = client.post(
            "/api/preview", json={"body": "/var hp 1;say $hp;/delay 500", "sample_input": ""}
        )
        assert response.status_code == 200
        assert response.json()["steps"] == [
            {"type": "send", "text": "say 1", "ms": None},
            {"type": "delay", "text": None, "ms": 500},
        ]
        assert session.variables.lookup("hp") == "10"

    def test_preview_with_pattern(self, client):
        response = client.post(
            "/api/preview",
            json={"body": "kill $1", "sample_input": "k orc", "pattern": "k", "match_mode": "prefix"},
        )
        assert response.json()["steps"] == [{"type": "send", "text": "kill orc", "ms": None}]

    def test_preview_rejects_bad_pattern(self, client):
        response = client.post(
            "/api/preview", json={"body": "x", "pattern": "(x", "match_mode": "regex"}
        )
        assert response.status_code == 400

    def test_speedwalk_setting(self, client, tmp_path):
        assert client.get("/api/settings/speedwalk").json() == {"enabled": True}
        assert client.put("/api/settings/speedwalk", json={"enabled": False}).json() == {
            "enabled": False
        }
        assert client.get("/api/settings/speedwalk").json() == {"enabled": False}
        assert json.loads((tmp_path / "settings.json").read_text())["enableSpeedwalk"] is False

    def test_health_and_character(self, client):
        health = client.get("/api/health").json()
        assert health["status"] == "healthy"
        assert health["character"] is None
        assert health["connected"] is False

        switched = client.put("/api/session/character", json={"character": "Frodo"}).json()
        assert switched["character"] == "Frodo"
        cleared = client.put("/api/session/character", json={"character": "  "}).json()
        assert cleared["character"] is None
