"""
Tests for the HTTP surface used by the web order editor.
"""

import pytest
from fastapi.testclient import TestClient

from orders_overlay.commands.registry import CommandRegistry
from orders_overlay.main import create_app
from orders_overlay.overlay.service import OverlayService
from orders_overlay.telemetry import OverlayTelemetry


@pytest.fixture
def service():
    return OverlayService(CommandRegistry(telemetry=OverlayTelemetry()))


@pytest.fixture
def client(service):
    return TestClient(create_app(service))


class TestOverlayRoute:
    """POST /overlay"""

    def test_specific_command(self, client):
        response = client.post("/overlay", json={"text": "MOVE Fleet1 TO (3,4)", "cursor": 5})
        assert response.status_code == 200

        data = response.json()
        assert data["context"]["type"] == "specific-command"
        assert data["context"]["command_name"] == "MOVE"
        assert data["content"]["kind"] == "specific-command"
        assert data["content"]["sections"][0]["title"] == "Syntax"

    def test_partial(self, client):
        data = client.post("/overlay", json={"text": "de", "cursor": 2}).json()
        assert data["context"]["type"] == "partial-commands"
        assert data["context"]["matches"] == ["DENY", "DEPLOY", "DESIGN", "DESTRUCT"]
        assert data["content"]["title"] == 'Commands matching "de" (4)'

    def test_defaults(self, client):
        data = client.post("/overlay", json={}).json()
        assert data["context"]["type"] == "all-commands"
        assert data["content"]["title"] == "Available Commands (14)"

    def test_cursor_out_of_range(self, client):
        data = client.post("/overlay", json={"text": "FIRE", "cursor": -3}).json()
        assert data["context"]["cursor_position"] == 0

    def test_filter(self, client):
        response = client.post("/overlay/filter", json={"text": "", "cursor": 0, "search": "empire"})
        content = response.json()["content"]
        assert content["title"].endswith("(filtered)")
        texts = [i["text"] for s in content["sections"] for i in s["items"]]
        assert texts
        assert all("empire" in t.lower() for t in texts)


class TestCommandRoutes:
    """GET /commands and /commands/{name}"""

    def test_list_grouped(self, client):
        data = client.get("/commands").json()
        assert data["count"] == 14
        assert list(data["categories"]) == [
            "combat", "movement", "construction", "design", "resource", "administration"
        ]
        assert data["categories"]["combat"][0]["name"] == "FIRE"

    def test_get_command(self, client):
        data = client.get("/commands/build").json()
        assert data["name"] == "BUILD"
        assert data["category"] == "construction"
        assert len(data["parameters"]) == 4

    def test_unknown_command_suggests(self, client):
        response = client.get("/commands/BIULD")
        assert response.status_code == 404
        detail = response.json()["detail"]
        assert detail["error"] == "Unknown command: BIULD"
        assert "BUILD" in detail["suggestions"]


class TestServiceRoutes:
    """GET /status, GET /logs, POST /recover"""

    def test_status(self, client):
        data = client.get("/status").json()
        assert data["healthy"] is True
        assert data["registry"]["command_count"] == 14

    def test_logs(self, client):
        data = client.get("/logs", params={"level": "info"}).json()
        assert data["logs"]
        assert all(entry["level"] == "info" for entry in data["logs"])

    def test_recover(self, client, service):
        version = service.registry.version
        data = client.post("/recover").json()
        assert data["healthy"] is True
        assert data["registry"]["version"] == version + 1
