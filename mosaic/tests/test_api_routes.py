"""Tests for API routes."""

import logging

import pytest
from fastapi.testclient import TestClient

from mosaic.api.dependencies import get_guard, get_image_store
from mosaic.api.middleware.logging import level_for
from mosaic.auth.brute_force import MAX_ATTEMPTS
from mosaic.db.base import get_db
from mosaic.geometry import Rect

ADMIN = {"X-Admin-Secret": "let-me-delete"}
PNG_BYTES = b"\x89PNG\r\n\x1a\n" + b"\x00" * 32


@pytest.fixture
def client(guard, image_store, session_factory):
    """Create test client wired to the test guard and image store."""
    from mosaic.api.main import create_app

    app = create_app()

    def override_get_db():
        db = session_factory()
        try:
            yield db
        finally:
            db.close()

    app.dependency_overrides[get_guard] = lambda: guard
    app.dependency_overrides[get_image_store] = lambda: image_store
    app.dependency_overrides[get_db] = override_get_db

    yield TestClient(app)

    app.dependency_overrides.clear()


def _upload(client, x, y, w, h, caption=None, name="tile.png", content=PNG_BYTES, content_type="image/png"):
    data = {"x": str(x), "y": str(y), "w": str(w), "h": str(h)}
    if caption is not None:
        data["caption"] = caption
    return client.post(
        "/api/v1/placements",
        data=data,
        files={"file": (name, content, content_type)},
    )


# ============================================================================
# Health Routes
# ============================================================================

class TestHealthRoutes:
    """Test health check endpoints."""

    def test_root_health(self, client):
        response = client.get("/health")
        assert response.status_code == 200
        assert response.json()["status"] == "healthy"

    def test_api_health(self, client):
        response = client.get("/api/v1/health")
        assert response.status_code == 200
        assert response.json()["version"]

    def test_request_id_is_echoed(self, client):
        response = client.get("/api/v1/placements", headers={"X-Request-ID": "retry-7"})
        assert response.headers["X-Request-ID"] == "retry-7"

    def test_ready(self, client):
        _upload(client, 0, 0, 10, 10)
        response = client.get("/api/v1/ready")
        assert response.status_code == 200
        assert response.json() == {
            "ready": True,
            "checks": {"database": True, "images": True},
            "placements": 1,
        }


# ============================================================================
# Placement Routes
# ============================================================================

class TestPlacementRoutes:
    """Test tile commit, listing and deletion."""

    def test_list_empty(self, client):
        response = client.get("/api/v1/placements")
        assert response.status_code == 200
        assert response.json() == []

    def test_create(self, client):
        response = _upload(client, 0, 0, 100, 100, caption="first")

        assert response.status_code == 201
        data = response.json()
        assert data["id"]
        assert data["caption"] == "first"
        assert (data["x"], data["y"], data["w"], data["h"]) == (0, 0, 100, 100)
        assert data["url"].startswith("/api/v1/images/")

        listed = client.get("/api/v1/placements").json()
        assert [p["id"] for p in listed] == [data["id"]]

    def test_created_image_is_served(self, client):
        url = _upload(client, 0, 0, 100, 100).json()["url"]
        response = client.get(url)
        assert response.status_code == 200
        assert response.content == PNG_BYTES

    def test_get_one(self, client):
        created = _upload(client, 0, 0, 100, 100).json()
        response = client.get(f"/api/v1/placements/{created['id']}")
        assert response.status_code == 200
        assert response.json()["id"] == created["id"]

    def test_get_missing(self, client):
        assert client.get("/api/v1/placements/nope").status_code == 404

    def test_overlap_returns_conflict(self, client, image_store):
        """The second uploader of an overlapping tile gets 409 and nothing is stored."""
        first = _upload(client, 0, 0, 100, 100).json()

        response = _upload(client, 50, 50, 100, 100)

        assert response.status_code == 409
        body = response.json()
        assert body["error"] == "Overlaps an existing tile"
        assert body["conflicts"] == [first["id"]]
        assert len(client.get("/api/v1/placements").json()) == 1
        assert len(image_store.list_images()) == 1

    def test_adjacent_tile_accepted(self, client):
        _upload(client, 0, 0, 100, 100)
        assert _upload(client, 100, 0, 50, 50).status_code == 201

    @pytest.mark.parametrize(
        "geometry",
        [(0, 0, 0, 100), (0, 0, 100, -5), ("nan", 0, 10, 10), ("left", 0, 10, 10)],
    )
    def test_invalid_geometry(self, client, image_store, geometry):
        response = _upload(client, *geometry)
        assert response.status_code == 400
        assert image_store.list_images() == []

    def test_missing_geometry(self, client):
        response = client.post(
            "/api/v1/placements",
            data={"x": "0", "y": "0"},
            files={"file": ("a.png", PNG_BYTES, "image/png")},
        )
        assert response.status_code == 400

    def test_missing_file(self, client):
        response = client.post(
            "/api/v1/placements",
            data={"x": "0", "y": "0", "w": "10", "h": "10"},
        )
        assert response.status_code == 400

    def test_not_an_image(self, client):
        response = _upload(client, 0, 0, 10, 10, name="notes.txt", content=b"hi", content_type="text/plain")
        assert response.status_code == 400

    def test_delete(self, client, image_store):
        created = _upload(client, 0, 0, 100, 100).json()

        response = client.delete(f"/api/v1/placements/{created['id']}", headers=ADMIN)

        assert response.status_code == 200
        assert response.json()["id"] == created["id"]
        assert client.get("/api/v1/placements").json() == []
        assert image_store.list_images() == []

    def test_delete_with_bearer(self, client):
        created = _upload(client, 0, 0, 100, 100).json()
        response = client.delete(
            f"/api/v1/placements/{created['id']}",
            headers={"Authorization": "Bearer let-me-delete"},
        )
        assert response.status_code == 200

    def test_delete_without_credential(self, client):
        created = _upload(client, 0, 0, 100, 100).json()
        response = client.delete(f"/api/v1/placements/{created['id']}")
        assert response.status_code == 401
        assert len(client.get("/api/v1/placements").json()) == 1

    def test_delete_wrong_credential(self, client):
        created = _upload(client, 0, 0, 100, 100).json()
        response = client.delete(
            f"/api/v1/placements/{created['id']}",
            headers={"X-Admin-Secret": "guess"},
        )
        assert response.status_code == 403
        assert len(client.get("/api/v1/placements").json()) == 1

    def test_delete_missing(self, client):
        response = client.delete("/api/v1/placements/nope", headers=ADMIN)
        assert response.status_code == 404

    def test_repeated_bad_credentials_lock_out(self, client):
        """After too many wrong secrets even the right one is refused for a while."""
        created = _upload(client, 0, 0, 100, 100).json()
        url = f"/api/v1/placements/{created['id']}"

        codes = [
            client.delete(url, headers={"X-Admin-Secret": "guess"}).status_code
            for _ in range(MAX_ATTEMPTS)
        ]

        assert codes == [403] * (MAX_ATTEMPTS - 1) + [429]
        assert client.delete(url, headers=ADMIN).status_code == 429

    def test_clear(self, client, image_store):
        _upload(client, 0, 0, 100, 100)
        _upload(client, 100, 0, 100, 100)

        response = client.delete("/api/v1/placements", headers=ADMIN)

        assert response.status_code == 200
        assert response.json() == {"deleted": 2}
        assert client.get("/api/v1/placements").json() == []
        assert image_store.list_images() == []

    def test_clear_requires_admin(self, client):
        _upload(client, 0, 0, 100, 100)
        response = client.delete("/api/v1/placements", headers={"X-Admin-Secret": "guess"})
        assert response.status_code == 403


# ============================================================================
# Image Routes
# ============================================================================

class TestImageRoutes:
    """Test image listing and serving."""

    def test_list(self, client):
        _upload(client, 0, 0, 10, 10, name="one.png")
        images = client.get("/api/v1/images").json()
        assert len(images) == 1
        assert images[0]["name"].endswith("-one.png")
        assert images[0]["url"] == f"/api/v1/images/{images[0]['name']}"

    def test_missing_image(self, client):
        assert client.get("/api/v1/images/missing.png").status_code == 404


# ============================================================================
# Snapping Routes
# ============================================================================

class TestSnappingRoutes:
    """Test server-side snapping against the committed wall."""

    def test_snap_position(self, client, guard):
        guard.commit(Rect(x=0, y=0, w=100, h=100), "a.png")

        response = client.post("/api/v1/snap/position", json={"x": 105, "y": 10, "w": 50, "h": 50})

        assert response.status_code == 200
        data = response.json()
        assert (data["x"], data["y"]) == (100, 0)
        assert data["snapped"] is True

    def test_snap_position_rejects_overlap(self, client, guard):
        guard.commit(Rect(x=0, y=0, w=100, h=100), "a.png")
        data = client.post("/api/v1/snap/position", json={"x": 20, "y": 20, "w": 50, "h": 50}).json()
        assert (data["x"], data["y"]) == (20, 20)
        assert data["rejected_overlap"] is True

    def test_snap_size(self, client, guard):
        guard.commit(Rect(x=300, y=0, w=100, h=100), "a.png")

        data = client.post("/api/v1/snap/size", json={"x": 100, "y": 500, "w": 190, "h": 95}).json()

        assert (data["w"], data["h"]) == (200, 100)
        assert data["edge"] == "right"

    def test_admission(self, client, guard):
        guard.commit(Rect(x=0, y=0, w=100, h=100), "a.png")

        adjacent = client.post("/api/v1/snap/admission", json={"x": 100, "y": 0, "w": 50, "h": 50}).json()
        detached = client.post("/api/v1/snap/admission", json={"x": 300, "y": 0, "w": 50, "h": 50}).json()

        assert adjacent["can_submit"] is True
        assert adjacent["settled_count"] == 1
        assert detached["can_submit"] is False
        assert detached["adjacent"] is False

    def test_invalid_rect(self, client):
        response = client.post("/api/v1/snap/position", json={"x": 0, "y": 0, "w": 0, "h": 10})
        assert response.status_code == 400


# ============================================================================
# Request Logging
# ============================================================================

class TestLogLevels:
    """Test how finished requests are classified in the log."""

    @pytest.mark.parametrize(
        "method, status, level",
        [
            ("GET", 200, logging.INFO),
            ("POST", 201, logging.INFO),
            ("POST", 409, logging.INFO),
            ("DELETE", 429, logging.INFO),
            ("DELETE", 200, logging.WARNING),
            ("POST", 400, logging.WARNING),
            ("GET", 500, logging.ERROR),
        ],
    )
    def test_level_for(self, method, status, level):
        assert level_for(method, status) == level
