"""Integration tests for the badge endpoints."""

from datetime import datetime, timedelta

from qrbadge.config import config
from qrbadge.utils.validators import utcnow

SCAN = {"qrCode": "ABCDE", "deviceBrand": "Acme", "deviceModel": "X1"}


def parse_time(value):
    return datetime.fromisoformat(value.replace("Z", "+00:00"))


class TestValidateEndpoint:
    def test_first_and_repeat_scan(self, client, admin_headers):
        first = client.post("/api/badges/validate", json=SCAN, headers={"User-Agent": "scanner/1"})
        assert first.status_code == 200
        body = first.json()
        assert body["success"] is True
        badge = body["badge"]
        assert badge["is_active"] is True
        assert badge["expiration_time"].startswith(config.BADGE_EXPIRATION_CEILING.isoformat())

        accesses = client.get(f"/api/accesses/badge/{badge['id']}", headers=admin_headers).json()
        assert accesses["count"] == 1
        assert accesses["accesses"][0]["user_agent"] == "scanner/1"

        second = client.post("/api/badges/validate", json=SCAN)
        assert second.status_code == 200
        renewed = second.json()["badge"]
        assert renewed["id"] == badge["id"]
        assert parse_time(renewed["validation_time"]) >= parse_time(badge["validation_time"])

        accesses = client.get(f"/api/accesses/badge/{badge['id']}", headers=admin_headers).json()
        assert accesses["count"] == 2

    def test_timestamps_are_marked_utc(self, client):
        badge = client.post("/api/badges/validate", json=SCAN).json()["badge"]
        for field in ("validation_time", "expiration_time", "created_at", "updated_at"):
            assert badge[field].endswith("Z"), field

    def test_empty_device_fields(self, client):
        resp = client.post("/api/badges/validate", json={"qrCode": "ABCDE", "deviceBrand": "", "deviceModel": ""})
        assert resp.status_code == 200
        assert resp.json()["badge"]["device_brand"] is None

    def test_oversized_device_model(self, client):
        resp = client.post("/api/badges/validate", json={**SCAN, "deviceModel": "M" * 101})
        assert resp.status_code == 400
        assert resp.json() == {"error": "Modèle d'appareil invalide"}

    def test_forwarded_for_preferred(self, client, admin_headers):
        client.post("/api/badges/validate", json=SCAN, headers={"X-Forwarded-For": "203.0.113.9, 10.0.0.1"})
        accesses = client.get("/api/accesses", headers=admin_headers).json()["accesses"]
        assert accesses[0]["ip_address"] == "203.0.113.9"

    def test_invalid_qr(self, client):
        resp = client.post("/api/badges/validate", json={**SCAN, "qrCode": "abc"})
        assert resp.status_code == 400
        assert resp.json() == {"error": "QR code invalide"}

    def test_missing_qr(self, client):
        resp = client.post("/api/badges/validate", json={"deviceBrand": "Acme", "deviceModel": "X1"})
        assert resp.status_code == 400

    def test_malformed_body(self, client):
        resp = client.post("/api/badges/validate", json={"qrCode": ["ABCDE"]})
        assert resp.status_code == 400
        assert "error" in resp.json()

    def test_no_token_needed(self, client):
        assert client.post("/api/badges/validate", json=SCAN).status_code == 200


class TestCheckEndpoint:
    def test_unknown(self, client):
        resp = client.get("/api/badges/check/UNKNOWN")
        assert resp.status_code == 404
        assert resp.json() == {"error": "Badge non trouvé"}

    def test_invalid_format(self, client):
        assert client.get("/api/badges/check/abc").status_code == 400

    def test_active(self, client, future_ceiling):
        client.post("/api/badges/validate", json=SCAN)
        resp = client.get("/api/badges/check/ABCDE")
        assert resp.status_code == 200
        assert resp.json()["badge"]["qr_code"] == "ABCDE"

    def test_expired(self, client, monkeypatch):
        monkeypatch.setattr(config, "BADGE_EXPIRATION_CEILING", utcnow() - timedelta(hours=1))
        client.post("/api/badges/validate", json=SCAN)
        resp = client.get("/api/badges/check/ABCDE")
        assert resp.status_code == 403
        assert resp.json() == {"error": "Badge expiré"}

    def test_inactive_after_close_event(self, client, admin_headers, future_ceiling):
        client.post("/api/badges/validate", json=SCAN)
        client.post("/api/badges/close-event", headers=admin_headers)
        resp = client.get("/api/badges/check/ABCDE")
        assert resp.status_code == 403
        assert resp.json() == {"error": "Badge inactif"}


class TestAdminBadges:
    def test_requires_token(self, client):
        for method, url in [
            ("get", "/api/badges"),
            ("get", "/api/badges/1"),
            ("post", "/api/badges"),
            ("put", "/api/badges/1"),
            ("delete", "/api/badges/1"),
            ("post", "/api/badges/close-event"),
        ]:
            resp = client.request(method.upper(), url, json={})
            assert resp.status_code == 401, url
            assert resp.json() == {"error": "Authentification requise"}

    def test_create_and_get(self, client, admin_headers):
        resp = client.post("/api/badges", json={"qrCode": "QR-00001", "name": "Alice"}, headers=admin_headers)
        assert resp.status_code == 201
        badge = resp.json()["badge"]
        assert badge["name"] == "Alice"

        fetched = client.get(f"/api/badges/{badge['id']}", headers=admin_headers)
        assert fetched.status_code == 200
        assert fetched.json()["badge"]["qr_code"] == "QR-00001"

    def test_create_with_unreadable_expiration(self, client, admin_headers):
        resp = client.post(
            "/api/badges", json={"qrCode": "QR-00001", "expirationTime": "not-a-date"}, headers=admin_headers
        )
        assert resp.status_code == 201
        expiration = parse_time(resp.json()["badge"]["expiration_time"])
        assert expiration.replace(tzinfo=None) == config.BADGE_EXPIRATION_CEILING

    def test_create_duplicate(self, client, admin_headers):
        client.post("/api/badges", json={"qrCode": "QR-00001"}, headers=admin_headers)
        resp = client.post("/api/badges", json={"qrCode": "QR-00001"}, headers=admin_headers)
        assert resp.status_code == 400
        assert resp.json() == {"error": "Ce QR code existe déjà"}

    def test_list(self, client, admin_headers):
        client.post("/api/badges", json={"qrCode": "QR-00001"}, headers=admin_headers)
        client.post("/api/badges", json={"qrCode": "QR-00002"}, headers=admin_headers)
        body = client.get("/api/badges", headers=admin_headers).json()
        assert body["count"] == 2
        assert [b["qr_code"] for b in body["badges"]] == ["QR-00002", "QR-00001"]

    def test_update(self, client, admin_headers):
        badge = client.post("/api/badges", json={"qrCode": "QR-00001", "name": "Alice"}, headers=admin_headers).json()["badge"]
        resp = client.put(f"/api/badges/{badge['id']}", json={"isActive": False}, headers=admin_headers)
        assert resp.status_code == 200
        assert resp.json()["badge"]["is_active"] is False
        assert resp.json()["badge"]["name"] == "Alice"

    def test_update_with_unreadable_expiration(self, client, admin_headers, future_ceiling):
        badge = client.post("/api/badges", json={"qrCode": "QR-00001"}, headers=admin_headers).json()["badge"]
        resp = client.put(
            f"/api/badges/{badge['id']}", json={"expirationTime": "not-a-date", "name": "Bob"}, headers=admin_headers
        )
        assert resp.status_code == 200
        assert resp.json()["badge"]["expiration_time"] == badge["expiration_time"]
        assert resp.json()["badge"]["name"] == "Bob"

    def test_update_unknown(self, client, admin_headers):
        resp = client.put("/api/badges/99", json={"name": "x"}, headers=admin_headers)
        assert resp.status_code == 404

    def test_delete(self, client, admin_headers):
        badge = client.post("/api/badges/validate", json=SCAN).json()["badge"]
        resp = client.delete(f"/api/badges/{badge['id']}", headers=admin_headers)
        assert resp.status_code == 200
        assert resp.json()["success"] is True
        assert client.get(f"/api/badges/{badge['id']}", headers=admin_headers).status_code == 404
        assert client.get("/api/accesses", headers=admin_headers).json()["count"] == 0

    def test_close_event(self, client, admin_headers):
        for qr in ("QR-00001", "QR-00002"):
            client.post("/api/badges", json={"qrCode": qr}, headers=admin_headers)
        resp = client.post("/api/badges/close-event", headers=admin_headers)
        assert resp.status_code == 200
        badges = client.get("/api/badges", headers=admin_headers).json()["badges"]
        assert all(b["is_active"] is False for b in badges)
