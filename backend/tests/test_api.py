"""
HTTP API tests.

Authentication and role checks run on every protected route; engine errors
map to JSON bodies with the error code and an HTTP status.
"""

import pytest

from conftest import EMP1, EMP2, MANAGER, WATCH, auth_headers, balance, get_auth_token


class TestUnauthenticatedAccess:
    """All endpoints except login and health must require authentication."""

    @pytest.mark.parametrize("method,url", [
        ("get", "/api/auth/verify"),
        ("post", "/api/auth/logout"),
        ("get", "/api/inventory/my"),
        ("get", "/api/inventory/all"),
        ("post", "/api/inventory/send"),
        ("post", "/api/inventory/transfer"),
        ("put", "/api/inventory/1/1"),
        ("delete", "/api/inventory/1/1"),
        ("post", "/api/requests"),
        ("get", "/api/requests/my"),
        ("get", "/api/requests/pending"),
        ("put", "/api/requests/1/approve"),
        ("put", "/api/requests/1/reject"),
        ("get", "/api/transactions/my"),
        ("get", "/api/users"),
        ("get", "/api/gifts"),
        ("get", "/api/stores"),
    ])
    def test_requires_auth(self, client, method, url):
        response = getattr(client, method)(url)
        assert response.status_code == 401

    def test_rejects_invalid_token(self, client):
        response = client.get("/api/inventory/my", headers=auth_headers("not-a-real-token"))
        assert response.status_code == 401

    def test_health_is_public(self, client):
        response = client.get("/api/health")
        assert response.status_code == 200
        assert response.json["status"] == "healthy"
        assert response.json["details"]["pending_requests"] == 2


class TestLogin:
    def test_login_returns_token_and_user(self, client):
        response = client.post("/api/auth/login", json={"username": "emp001", "password": "Password123!"})
        assert response.status_code == 200
        assert response.json["user"]["username"] == "emp001"
        assert "password_hash" not in response.json["user"]

        token = response.json["token"]
        verify = client.get("/api/auth/verify", headers=auth_headers(token))
        assert verify.json["user"]["id"] == EMP1

    def test_wrong_password(self, client):
        response = client.post("/api/auth/login", json={"username": "emp001", "password": "nope"})
        assert response.status_code == 401

    def test_missing_fields(self, client):
        response = client.post("/api/auth/login", json={"username": "emp001"})
        assert response.status_code == 400
        assert response.json["error"] == "validation_error"

    def test_logout_revokes_token(self, client):
        token = get_auth_token(client, "emp001")
        assert client.post("/api/auth/logout", headers=auth_headers(token)).status_code == 200
        assert client.get("/api/auth/verify", headers=auth_headers(token)).status_code == 401

    def test_deactivated_holder_token_stops_working(self, client, manager_headers):
        token = get_auth_token(client, "emp002")
        response = client.patch(f"/api/users/{EMP2}/status", json={"is_active": False}, headers=manager_headers)
        assert response.status_code == 200
        assert client.get("/api/inventory/my", headers=auth_headers(token)).status_code == 401
        assert get_auth_token(client, "emp002") is None


class TestEmployeeRestrictions:
    @pytest.mark.parametrize("method,url", [
        ("get", "/api/inventory/all"),
        ("post", "/api/inventory/transfer"),
        ("put", "/api/inventory/1/1"),
        ("delete", "/api/inventory/1/1"),
        ("get", "/api/requests/pending"),
        ("put", "/api/requests/1/approve"),
        ("put", "/api/requests/1/reject"),
        ("get", "/api/users"),
        ("post", "/api/gifts"),
        ("delete", "/api/gifts/1"),
    ])
    def test_manager_only_routes(self, client, employee_headers, method, url):
        response = getattr(client, method)(url, headers=employee_headers, json={})
        assert response.status_code == 403

    def test_employee_cannot_read_other_requests(self, client, employee_headers):
        response = client.get("/api/requests/2", headers=employee_headers)
        assert response.status_code == 404


class TestInventoryEndpoints:
    def test_my_inventory(self, client, employee_headers):
        response = client.get("/api/inventory/my", headers=employee_headers)
        assert response.status_code == 200
        assert {row["gift"]["code"] for row in response.json} == {"G001", "G002", "G003"}

    def test_send_gift(self, client, employee_headers):
        response = client.post("/api/inventory/send", json={"gift_id": WATCH, "quantity": 2}, headers=employee_headers)
        assert response.status_code == 200
        assert response.json["inventory"]["quantity"] == 3

        history = client.get("/api/transactions/my?limit=1", headers=employee_headers)
        assert history.json[0]["kind"] == "send"
        assert history.json[0]["quantity"] == -2

    def test_send_more_than_on_hand(self, client, employee_headers):
        response = client.post("/api/inventory/send", json={"gift_id": WATCH, "quantity": 50}, headers=employee_headers)
        assert response.status_code == 400
        assert response.json["error"] == "insufficient_balance"
        assert balance(EMP1, WATCH) == 5

    @pytest.mark.parametrize("quantity", [0, -1, 1.5])
    def test_send_invalid_quantity(self, client, employee_headers, quantity):
        response = client.post("/api/inventory/send", json={"gift_id": WATCH, "quantity": quantity}, headers=employee_headers)
        assert response.status_code == 400

    def test_unknown_field_rejected(self, client, employee_headers):
        response = client.post(
            "/api/inventory/send",
            json={"gift_id": WATCH, "quantity": 1, "holder_id": EMP2},
            headers=employee_headers,
        )
        assert response.status_code == 400
        assert balance(EMP2, WATCH) == 3

    def test_manager_adjust_and_remove(self, client, manager_headers):
        response = client.put(f"/api/inventory/{EMP1}/{WATCH}", json={"quantity": 9}, headers=manager_headers)
        assert response.json["inventory"]["quantity"] == 9

        response = client.delete(f"/api/inventory/{EMP1}/{WATCH}", headers=manager_headers)
        assert response.json["removed"]["quantity"] == 9
        assert balance(EMP1, WATCH) == 0

    def test_manager_transfer_to_self_target(self, client, manager_headers):
        response = client.post(
            "/api/inventory/transfer",
            json={"from_holder_id": EMP1, "to_holder_id": EMP1, "gift_id": WATCH, "quantity": 1},
            headers=manager_headers,
        )
        assert response.status_code == 400
        assert response.json["error"] == "unknown_target"


class TestRequestFlow:
    def test_submit_and_approve_transfer(self, client, employee_headers, manager_headers):
        response = client.post(
            "/api/requests",
            json={"gift_id": WATCH, "request_type": "transfer", "requested_quantity": 3, "target_holder_id": MANAGER},
            headers=employee_headers,
        )
        assert response.status_code == 201
        request_id = response.json["request"]["id"]

        pending = client.get("/api/requests/pending", headers=manager_headers)
        assert request_id in [row["id"] for row in pending.json]

        response = client.put(f"/api/requests/{request_id}/approve", headers=manager_headers)
        assert response.status_code == 200
        assert response.json["request"]["status"] == "approved"
        assert balance(EMP1, WATCH) == 2
        assert balance(MANAGER, WATCH) == 3

        again = client.put(f"/api/requests/{request_id}/approve", headers=manager_headers)
        assert again.status_code == 409
        assert again.json["error"] == "already_decided"

    def test_approval_failure_leaves_request_pending(self, client, employee_headers, manager_headers):
        response = client.post(
            "/api/requests",
            json={"gift_id": WATCH, "request_type": "transfer", "requested_quantity": 5, "target_holder_id": EMP2},
            headers=employee_headers,
        )
        request_id = response.json["request"]["id"]
        client.post("/api/inventory/send", json={"gift_id": WATCH, "quantity": 1}, headers=employee_headers)

        response = client.put(f"/api/requests/{request_id}/approve", headers=manager_headers)
        assert response.status_code == 400
        assert response.json["error"] == "insufficient_balance"

        detail = client.get(f"/api/requests/{request_id}", headers=employee_headers)
        assert detail.json["status"] == "pending"

    def test_reject(self, client, manager_headers):
        response = client.put("/api/requests/1/reject", json={"reason": "Budget"}, headers=manager_headers)
        assert response.json["request"]["status"] == "rejected"
        assert response.json["request"]["rejection_reason"] == "Budget"

    def test_unknown_request_is_404(self, client, manager_headers):
        response = client.put("/api/requests/999/approve", headers=manager_headers)
        assert response.status_code == 404


class TestAdministration:
    def test_delete_gift_reports_counts(self, client, manager_headers):
        response = client.delete(f"/api/gifts/{WATCH}", headers=manager_headers)
        assert response.status_code == 200
        assert response.json["removed"]["inventory_records"] == 2
        assert response.json["removed"]["requests"] == 1

    def test_gift_status_toggle_hides_gift(self, client, manager_headers, employee_headers):
        response = client.patch(f"/api/gifts/{WATCH}/status", json={"is_active": False}, headers=manager_headers)
        assert response.status_code == 200
        assert response.json["gift"]["is_active"] is False

        codes = {gift["code"] for gift in client.get("/api/gifts", headers=employee_headers).json}
        assert "G001" not in codes

        response = client.patch(f"/api/gifts/{WATCH}/status", json={"is_active": True}, headers=manager_headers)
        assert response.json["gift"]["is_active"] is True

    def test_employee_cannot_toggle_gift_status(self, client, employee_headers):
        response = client.patch(f"/api/gifts/{WATCH}/status", json={"is_active": False}, headers=employee_headers)
        assert response.status_code == 403

    def test_create_gift_conflict(self, client, manager_headers):
        response = client.post("/api/gifts", json={"code": "G001", "name": "Dup"}, headers=manager_headers)
        assert response.status_code == 409

    def test_create_user_with_weak_password(self, client, manager_headers):
        response = client.post(
            "/api/users",
            json={"username": "emp003", "password": "short", "full_name": "Weak", "employee_code": "E003"},
            headers=manager_headers,
        )
        assert response.status_code == 400
        assert response.json["error"] == "weak_password"

    def test_manager_cannot_delete_self(self, client, manager_headers):
        response = client.delete(f"/api/users/{MANAGER}", headers=manager_headers)
        assert response.status_code == 400

    def test_deleted_holder_is_logged_out(self, client, manager_headers):
        token = get_auth_token(client, "emp001")
        response = client.delete(f"/api/users/{EMP1}", headers=manager_headers)
        assert response.json["removed"]["inventory_records"] == 3
        assert client.get("/api/inventory/my", headers=auth_headers(token)).status_code == 401
