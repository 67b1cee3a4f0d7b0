import pytest
from fastapi.testclient import TestClient

from calfeed.core.config import Settings
from calfeed.main import create_app

FEED = "BEGIN:VCALENDAR\r\nVERSION:2.0\r\nEND:VCALENDAR\r\n"


@pytest.fixture
def settings(tmp_path) -> Settings:
    return Settings(
        _env_file=None,
        ics_local_path=tmp_path / "calendar.ics",
        disable_scheduler=True,
    )


@pytest.fixture
def app(settings):
    return create_app(settings)


@pytest.fixture
def client(app) -> TestClient:
    return TestClient(app)


def test_root_is_liveness_text(client):
    response = client.get("/")
    assert response.status_code == 200
    assert response.text == "Server is running"


def test_calendar_404_before_first_refresh(client):
    response = client.get("/calendar.ics")
    assert response.status_code == 404


def test_calendar_serves_artifact_unmodified(app, client):
    app.state.store.write(FEED)

    response = client.get("/calendar.ics")

    assert response.status_code == 200
    assert response.headers["content-type"].startswith("text/calendar")
    assert "no-cache" in response.headers["cache-control"]
    assert response.headers["content-disposition"] == 'attachment; filename="calendar.ics"'
    assert response.content == FEED.encode("utf-8")


def test_calendar_500_on_read_failure(app, client, monkeypatch):
    def unreadable():
        raise PermissionError("denied")

    monkeypatch.setattr(app.state.store, "open", unreadable)

    response = client.get("/calendar.ics")
    assert response.status_code == 500


def test_subscribe_page_lists_feed_url(client):
    response = client.get("/subscribe")
    assert response.status_code == 200
    assert "http://testserver/calendar.ics" in response.text
    assert "webcal://testserver/calendar.ics" in response.text


def test_subscribe_page_uses_public_base_url(tmp_path):
    settings = Settings(
        _env_file=None,
        ics_local_path=tmp_path / "calendar.ics",
        disable_scheduler=True,
        public_base_url="https://kalender.example.org/",
    )
    response = TestClient(create_app(settings)).get("/subscribe")
    assert "webcal://kalender.example.org/calendar.ics" in response.text


def test_cors_allows_any_origin(client):
    response = client.options(
        "/calendar.ics",
        headers={"Origin": "https://example.com", "Access-Control-Request-Method": "GET"},
    )
    assert response.status_code == 200
    assert response.headers["access-control-allow-origin"] == "*"


def test_cors_can_be_disabled(tmp_path):
    settings = Settings(
        _env_file=None,
        ics_local_path=tmp_path / "calendar.ics",
        disable_scheduler=True,
        enable_cors=False,
    )
    response = TestClient(create_app(settings)).get("/", headers={"Origin": "https://example.com"})
    assert "access-control-allow-origin" not in response.headers


def test_health_reports_refresh_status(app, client):
    body = client.get("/health").json()
    assert body["status"] == "ok"
    assert body["calendar_available"] is False
    assert body["refresh"]["last_success_at"] is None

    app.state.store.write(FEED)
    assert client.get("/health").json()["calendar_available"] is True
