"""Tests for the Shortlinks HTTP API."""

from unittest.mock import MagicMock

import pytest
from fastapi.testclient import TestClient

from shortlinks.core.registry import ShortcodeRegistry
from shortlinks.main import create_app

CHROME_UA = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/100.0.4896.127 Safari/537.36"
)


class TestHealthEndpoint:
    """Tests for health check endpoint."""

    def test_health_check(self, client):
        """Test health check returns healthy status."""
        response = client.get("/health")
        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "healthy"
        assert data["timestamp"].endswith("Z")
        assert data["uptime"] >= 0


class TestCreateShortURL:
    """Tests for POST /shorturls endpoint."""

    def test_create_short_url_success(self, client):
        """Test creating a short URL successfully."""
        response = client.post("/shorturls", json={"url": "https://example.com"})
        assert response.status_code == 201
        data = response.json()
        assert set(data) == {"shortLink", "expiry"}
        assert data["shortLink"].startswith("http://testserver/shorturls/")
        assert len(data["shortLink"].rsplit("/", 1)[1]) == 6

    def test_create_with_custom_code_and_validity(self, client):
        response = client.post(
            "/shorturls",
            json={"url": "https://example.com/a", "validity": 1, "shortcode": "abc123"},
        )
        assert response.status_code == 201
        assert response.json() == {
            "shortLink": "http://testserver/shorturls/abc123",
            "expiry": "2024-01-01T12:01:00.000Z",
        }

    def test_create_default_validity(self, client):
        response = client.post("/shorturls", json={"url": "https://example.com"})
        assert response.json()["expiry"] == "2024-01-01T12:30:00.000Z"

    def test_create_duplicate_custom_code(self, client):
        """Test creating with duplicate custom code."""
        body = {"url": "https://example.com", "shortcode": "duplicate"}
        assert client.post("/shorturls", json=body).status_code == 201

        response = client.post(
            "/shorturls", json={"url": "https://example2.com", "shortcode": "duplicate"}
        )
        assert response.status_code == 409
        assert response.json() == {
            "detail": "Shortcode already exists",
            "error_code": "SHORTCODE_CONFLICT",
        }

    @pytest.mark.parametrize(
        "body",
        [
            {},
            {"url": "not-a-valid-url"},
            {"url": "ftp://example.com/file"},
            {"url": "https://example.com", "validity": 0},
            {"url": "https://example.com", "validity": 1.5},
            {"url": "https://example.com", "shortcode": ""},
            {"url": "https://example.com", "shortcode": "a" * 21},
            {"url": "https://example.com", "shortcode": "invalid@code"},
        ],
    )
    def test_create_validation_errors(self, client, body):
        response = client.post("/shorturls", json=body)
        assert response.status_code == 400
        assert response.json()["error_code"] == "VALIDATION_ERROR"

    def test_create_validity_above_maximum(self, client):
        response = client.post(
            "/shorturls", json={"url": "https://example.com", "validity": 525601}
        )
        assert response.status_code == 400
        assert response.json()["error_code"] == "INVALID_VALIDITY"

    def test_generation_exhausted_maps_to_409(self, clock, sink, test_settings):
        registry = ShortcodeRegistry(
            sink=sink, clock=clock, generator=MagicMock(return_value="same01")
        )
        app = create_app(settings=test_settings, registry=registry)
        with TestClient(app) as client:
            assert client.post("/shorturls", json={"url": "https://a.com"}).status_code == 201
            response = client.post("/shorturls", json={"url": "https://b.com"})
        assert response.status_code == 409
        assert response.json()["error_code"] == "GENERATION_EXHAUSTED"


class TestRedirectEndpoint:
    """Tests for GET /shorturls/{shortcode} endpoint."""

    def test_redirect_success(self, client):
        """Test successful redirect."""
        client.post("/shorturls", json={"url": "https://example.com/a", "shortcode": "go"})

        response = client.get("/shorturls/go", follow_redirects=False)
        assert response.status_code == 302
        assert response.headers["location"] == "https://example.com/a"

    def test_redirect_not_found(self, client):
        """Test redirect for non-existent short code."""
        response = client.get("/shorturls/nonexistent", follow_redirects=False)
        assert response.status_code == 404
        assert response.json()["error_code"] == "SHORTCODE_NOT_FOUND"

    def test_redirect_invalid_code(self, client):
        """Test redirect with invalid short code format."""
        response = client.get("/shorturls/bad-code", follow_redirects=False)
        assert response.status_code == 400
        assert response.json()["error_code"] == "INVALID_SHORTCODE"

    def test_redirect_code_with_trailing_newline(self, client):
        """An encoded newline after a valid code is still rejected."""
        response = client.get("/shorturls/abc%0A", follow_redirects=False)
        assert response.status_code == 400
        assert response.json()["error_code"] == "INVALID_SHORTCODE"

        response = client.get("/shorturls/abc%0A/stats")
        assert response.status_code == 400

    def test_redirect_records_source(self, client):
        client.post("/shorturls", json={"url": "https://example.com", "shortcode": "src"})
        client.get("/shorturls/src", headers={"User-Agent": CHROME_UA}, follow_redirects=False)
        client.get("/shorturls/src", headers={"User-Agent": "curl/7.79"}, follow_redirects=False)

        clicks = client.get("/shorturls/src/stats").json()["clickData"]
        assert [c["source"] for c in clicks] == ["chrome", "curl"]
        assert all(c["location"] == "Unknown" for c in clicks)

    def test_redirect_uses_forwarded_ip(self, client, registry):
        client.post("/shorturls", json={"url": "https://example.com", "shortcode": "fwd"})
        client.get(
            "/shorturls/fwd",
            headers={"X-Forwarded-For": "203.0.113.9, 10.0.0.1"},
            follow_redirects=False,
        )
        record = registry._urls["fwd"]
        assert record.clicks[0].ip == "203.0.113.9"


class TestExpiryScenario:
    """End-to-end behavior across the validity window."""

    def test_link_expires_but_stats_remain(self, client, clock):
        created = client.post(
            "/shorturls",
            json={"url": "https://example.com/a", "validity": 1, "shortcode": "abc123"},
        )
        assert created.json()["shortLink"].endswith("/shorturls/abc123")

        response = client.get("/shorturls/abc123", follow_redirects=False)
        assert response.status_code == 302
        assert response.headers["location"] == "https://example.com/a"

        clock.advance(seconds=61)
        response = client.get("/shorturls/abc123", follow_redirects=False)
        assert response.status_code == 410
        assert response.json()["error_code"] == "SHORTCODE_EXPIRED"

        stats = client.get("/shorturls/abc123/stats")
        assert stats.status_code == 200
        assert stats.json()["totalClicks"] == 1

    def test_resolves_at_expiry_instant(self, client, clock):
        client.post(
            "/shorturls",
            json={"url": "https://example.com", "validity": 1, "shortcode": "edge"},
        )
        clock.advance(minutes=1)
        assert client.get("/shorturls/edge", follow_redirects=False).status_code == 302


class TestStatsEndpoint:
    """Tests for GET /shorturls/{shortcode}/stats endpoint."""

    def test_stats_success(self, client):
        client.post("/shorturls", json={"url": "https://example.com", "shortcode": "info"})
        client.get("/shorturls/info", follow_redirects=False)

        response = client.get("/shorturls/info/stats")
        assert response.status_code == 200
        data = response.json()
        assert data["shortcode"] == "info"
        assert data["originalUrl"] == "https://example.com"
        assert data["createdAt"] == "2024-01-01T12:00:00.000Z"
        assert data["expiresAt"] == "2024-01-01T12:30:00.000Z"
        assert data["totalClicks"] == len(data["clickData"]) == 1
        assert set(data["clickData"][0]) == {"timestamp", "source", "location"}

    def test_stats_not_found(self, client):
        response = client.get("/shorturls/nonexistent/stats")
        assert response.status_code == 404

    def test_stats_repeatable(self, client):
        client.post("/shorturls", json={"url": "https://example.com", "shortcode": "rep"})
        client.get("/shorturls/rep", follow_redirects=False)
        assert client.get("/shorturls/rep/stats").json() == client.get(
            "/shorturls/rep/stats"
        ).json()


class TestListURLsEndpoint:
    """Tests for GET /api/urls endpoint."""

    def test_list_empty(self, client):
        response = client.get("/api/urls")
        assert response.status_code == 200
        assert response.json() == []

    def test_list_urls_with_data(self, client, clock):
        """Test listing URLs with existing data."""
        client.post("/shorturls", json={"url": "https://e1.com", "shortcode": "list1", "validity": 1})
        client.post("/shorturls", json={"url": "https://e2.com", "shortcode": "list2"})
        client.post("/shorturls", json={"url": "https://e3.com", "shortcode": "list3"})
        client.get("/shorturls/list2", follow_redirects=False)
        clock.advance(minutes=5)

        data = client.get("/api/urls").json()
        assert [u["shortcode"] for u in data] == ["list1", "list2", "list3"]
        assert [u["isExpired"] for u in data] == [True, False, False]
        assert [u["totalClicks"] for u in data] == [0, 1, 0]
        assert data[1]["originalUrl"] == "https://e2.com"


class TestErrorHandling:
    """Tests for generic error responses."""

    def test_unknown_route(self, client):
        response = client.get("/does/not/exist")
        assert response.status_code == 404
        assert response.json() == {"detail": "Not found", "error_code": "NOT_FOUND"}

    def test_internal_error_is_generic(self, test_settings, registry):
        registry.list_all = MagicMock(side_effect=RuntimeError("secret state"))
        app = create_app(settings=test_settings, registry=registry)
        with TestClient(app, raise_server_exceptions=False) as client:
            response = client.get("/api/urls")
        assert response.status_code == 500
        assert response.json() == {
            "detail": "Internal server error",
            "error_code": "INTERNAL_ERROR",
        }
        assert "secret" not in response.text
