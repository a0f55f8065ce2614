"""
End-to-end tests through the HTTP API
"""

from datetime import datetime, timezone

import pytest

from tests.conftest import TEST_PASSWORD, bearer, billing_payload, register


def create_vehicle(client, headers, number="KA 01 AB 1234", vehicle_type="Car"):
    return client.post("/api/vehicles", json={"vehicleNumber": number, "vehicleType": vehicle_type}, headers=headers)


class TestEnvelope:
    """Uniform responses and generic routes"""

    def test_health(self, client):
        response = client.get("/api/health")
        assert response.status_code == 200
        body = response.json()
        assert body["status"] is True
        assert body["message"] == "Server is healthy"
        assert body["data"]["database"] == "online"
        assert "uptime" in body["data"]

    def test_health_without_prefix(self, client):
        response = client.get("/health")
        assert response.status_code == 200
        assert response.json()["data"]["database"] == "online"

    def test_unknown_route(self, client):
        response = client.get("/api/does-not-exist")
        assert response.status_code == 404
        assert response.json() == {"status": False, "message": "Route not found", "data": None}

    def test_validation_errors_are_400(self, client, auth_headers):
        response = create_vehicle(client, auth_headers, number="   ")
        assert response.status_code == 400
        assert response.json()["status"] is False
        assert response.json()["message"] == "Vehicle number cannot be empty"

    def test_missing_token(self, client):
        response = client.get("/api/vehicles")
        assert response.status_code == 401
        assert response.json()["message"] == "Access denied. Please login to continue."

    def test_garbage_token(self, client):
        response = client.get("/api/vehicles", headers=bearer("not.a.token"))
        assert response.status_code == 401


class TestAuthApi:
    """Registration, login and password reset"""

    def test_register(self, client):
        response = client.post(
            "/api/auth/register",
            json={"email": "a@b.com", "password": "abcdef", "businessName": "Acme"},
        )
        assert response.status_code == 201
        data = response.json()["data"]
        assert data["token"]
        assert data["user"]["email"] == "a@b.com"
        assert data["user"]["role"] == "user"
        assert "password" not in data["user"]
        assert "passwordHash" not in data["user"]

    def test_admin_signup_is_disabled(self, client):
        response = client.post(
            "/api/auth/register",
            json={"email": "boss@fleetdesk.io", "password": "abcdef", "businessName": "Acme", "role": "admin"},
        )
        assert response.json()["data"]["user"]["role"] == "user"

    def test_short_password(self, client):
        response = client.post(
            "/api/auth/register",
            json={"email": "a@b.com", "password": "abc", "businessName": "Acme"},
        )
        assert response.status_code == 400
        assert response.json()["message"] == "Password must be at least 6 characters long"

    def test_duplicate_email(self, client):
        register(client, email="a@b.com")
        response = client.post(
            "/api/auth/register",
            json={"email": "A@B.com", "password": "abcdef", "businessName": "Acme"},
        )
        assert response.status_code == 409

    def test_login_and_profile(self, client):
        register(client, email="owner@fleetdesk.io")
        response = client.post("/api/auth/login", json={"email": "OWNER@fleetdesk.io", "password": TEST_PASSWORD})
        assert response.status_code == 200
        token = response.json()["data"]["token"]

        profile = client.get("/api/auth/me", headers=bearer(token))
        assert profile.status_code == 200
        assert profile.json()["data"]["user"]["email"] == "owner@fleetdesk.io"

        logout = client.post("/api/auth/logout", headers=bearer(token))
        assert logout.json() == {"status": True, "message": "Logout successful", "data": None}

    @pytest.mark.parametrize("email, password", [
        ("owner@fleetdesk.io", "wrong-password"),
        ("nobody@fleetdesk.io", TEST_PASSWORD),
    ])
    def test_invalid_credentials_look_the_same(self, client, email, password):
        register(client, email="owner@fleetdesk.io")
        response = client.post("/api/auth/login", json={"email": email, "password": password})
        assert response.status_code == 401
        assert response.json()["message"] == "Invalid credentials"

    def test_password_reset_flow(self, client, outbox):
        register(client, email="owner@fleetdesk.io")

        response = client.post("/api/auth/forgot-password", json={"email": "owner@fleetdesk.io"})
        assert response.status_code == 200
        token = response.json()["data"]["resetToken"]
        assert outbox.sent == [("reset", "owner@fleetdesk.io", token)]

        response = client.post("/api/auth/reset-password", json={"token": token, "newPassword": "brand-new"})
        assert response.status_code == 200

        old = client.post("/api/auth/login", json={"email": "owner@fleetdesk.io", "password": TEST_PASSWORD})
        new = client.post("/api/auth/login", json={"email": "owner@fleetdesk.io", "password": "brand-new"})
        assert old.status_code == 401
        assert new.status_code == 200

    def test_forgot_password_unknown_email(self, client):
        response = client.post("/api/auth/forgot-password", json={"email": "nobody@fleetdesk.io"})
        assert response.status_code == 404
        assert response.json()["message"] == "No user found with this email address"

    def test_reset_with_invalid_token(self, client):
        response = client.post("/api/auth/reset-password", json={"token": "garbage", "newPassword": "brand-new"})
        assert response.status_code == 400
        assert response.json()["message"] == "Invalid reset token"

    def test_reset_token_cannot_authenticate(self, client):
        register(client, email="owner@fleetdesk.io")
        token = client.post("/api/auth/forgot-password", json={"email": "owner@fleetdesk.io"}).json()["data"]["resetToken"]
        assert client.get("/api/auth/me", headers=bearer(token)).status_code == 401


class TestVehiclesApi:
    """Vehicle endpoints"""

    def test_conflicts_are_per_user(self, client, auth_headers, other_auth_headers):
        assert create_vehicle(client, auth_headers).status_code == 201
        duplicate = create_vehicle(client, auth_headers, number="ka 01 ab 1234")
        assert duplicate.status_code == 409
        assert duplicate.json()["message"] == "Vehicle number already exists"
        assert create_vehicle(client, other_auth_headers).status_code == 201

    def test_crud(self, client, auth_headers, other_auth_headers):
        vehicle = create_vehicle(client, auth_headers, number="  ka 01  ab   1234 ").json()["data"]
        assert vehicle["vehicleNumber"] == "KA 01 AB 1234"

        assert client.get(f"/api/vehicles/{vehicle['id']}", headers=auth_headers).status_code == 200
        assert client.get(f"/api/vehicles/{vehicle['id']}", headers=other_auth_headers).status_code == 404

        updated = client.put(f"/api/vehicles/{vehicle['id']}", json={"vehicleType": "Van"}, headers=auth_headers)
        assert updated.json()["data"]["vehicleType"] == "Van"

        assert client.delete(f"/api/vehicles/{vehicle['id']}", headers=auth_headers).status_code == 200
        assert client.get(f"/api/vehicles/{vehicle['id']}", headers=auth_headers).status_code == 404

    def test_list_stats_and_types(self, client, auth_headers):
        for n in range(3):
            create_vehicle(client, auth_headers, number=f"KA 01 AB 100{n}")

        listing = client.get("/api/vehicles", params={"limit": 2}, headers=auth_headers).json()["data"]
        assert len(listing["items"]) == 2
        assert listing["pagination"] == {
            "currentPage": 1, "totalPages": 2, "totalCount": 3, "hasNext": True, "hasPrev": False,
        }

        stats = client.get("/api/vehicles/stats", headers=auth_headers).json()["data"]
        assert stats["totalVehicles"] == 3
        assert stats["vehiclesByType"] == {"Car": 3}

        types = client.get("/api/vehicles/types", headers=auth_headers).json()["data"]
        assert "Tempo Traveller" in types

    def test_unknown_type_is_rejected(self, client, auth_headers):
        assert create_vehicle(client, auth_headers, vehicle_type="Spaceship").status_code == 400


class TestBillingsApi:
    """Invoice endpoints"""

    @pytest.fixture
    def vehicle_id(self, client, auth_headers):
        return create_vehicle(client, auth_headers).json()["data"]["id"]

    def test_calculate_single_line(self, client, auth_headers):
        response = client.post("/api/billings/calculate", json={"quantity": 3, "rate": 100}, headers=auth_headers)
        assert response.status_code == 200
        data = response.json()["data"]
        assert data["totalAmount"] == 300
        assert data["subtotal"] == 300
        assert data["taxAmount"] == 54
        assert data["total"] == 354

    def test_calculate_items(self, client, auth_headers):
        items = billing_payload([])["billingItems"]
        data = client.post("/api/billings/calculate", json={"billingItems": items}, headers=auth_headers).json()["data"]
        assert data["totalInvoiceValue"] == 801
        assert [i["totalAmount"] for i in data["billingItems"]] == [300, 501]

    def test_calculate_requires_rate(self, client, auth_headers):
        response = client.post("/api/billings/calculate", json={"quantity": 3}, headers=auth_headers)
        assert response.status_code == 400
        assert response.json()["message"] == "Valid rate is required"

    def test_calculate_rejects_out_of_range_amounts(self, client, auth_headers):
        response = client.post("/api/billings/calculate", json={"quantity": 1e27, "rate": 1}, headers=auth_headers)
        assert response.status_code == 400
        assert response.json()["status"] is False

        response = client.post("/api/billings/calculate", json={"quantity": 1, "rate": 1e27}, headers=auth_headers)
        assert response.status_code == 400

    def test_calculate_rejects_nan(self, client, auth_headers):
        response = client.post(
            "/api/billings/calculate",
            content='{"quantity": NaN, "rate": 100}',
            headers={**auth_headers, "Content-Type": "application/json"},
        )
        assert response.status_code == 400
        assert response.json()["status"] is False

    def test_create_and_read(self, client, auth_headers, vehicle_id):
        response = client.post("/api/billings", json=billing_payload([vehicle_id]), headers=auth_headers)
        assert response.status_code == 201
        billing = response.json()["data"]
        assert billing["totalInvoiceValue"] == 801
        assert billing["vehicles"] == [{"id": vehicle_id, "vehicleNumber": "KA 01 AB 1234"}]

        fetched = client.get(f"/api/billings/{billing['id']}", headers=auth_headers).json()["data"]
        assert fetched["vehicles"][0]["vehicleNumber"] == "KA 01 AB 1234"

    def test_client_total_is_ignored(self, client, auth_headers, vehicle_id):
        payload = billing_payload([vehicle_id], totalInvoiceValue=1)
        billing = client.post("/api/billings", json=payload, headers=auth_headers).json()["data"]
        assert billing["totalInvoiceValue"] == 801

    def test_foreign_vehicle(self, client, auth_headers, other_auth_headers):
        theirs = create_vehicle(client, other_auth_headers, number="MH 12 XY 0001").json()["data"]["id"]
        response = client.post("/api/billings", json=billing_payload([theirs]), headers=auth_headers)
        assert response.status_code == 404
        assert response.json()["message"] == "One or more vehicles not found or don't belong to user"

    def test_invalid_item(self, client, auth_headers, vehicle_id):
        payload = billing_payload([vehicle_id])
        payload["billingItems"][0]["rate"] = 0
        assert client.post("/api/billings", json=payload, headers=auth_headers).status_code == 400

    def test_delete_incomplete_billing(self, client, auth_headers, vehicle_id):
        payload = billing_payload([vehicle_id], isCompleted=False)
        billing_id = client.post("/api/billings", json=payload, headers=auth_headers).json()["data"]["id"]

        response = client.delete(f"/api/billings/{billing_id}", headers=auth_headers)
        assert response.status_code == 404
        assert response.json()["message"] == "Billing not found or not completed"
        assert client.get(f"/api/billings/{billing_id}", headers=auth_headers).status_code == 200

    def test_update_and_list(self, client, auth_headers, vehicle_id):
        billing_id = client.post("/api/billings", json=billing_payload([vehicle_id]), headers=auth_headers).json()["data"]["id"]

        response = client.put(
            f"/api/billings/{billing_id}",
            json={"recipientName": "Initech", "billingItems": [
                {"description": "Cab hire", "hsnSac": "996601", "unit": "Km", "quantity": 10, "rate": 12.5},
            ]},
            headers=auth_headers,
        )
        assert response.status_code == 200
        assert response.json()["data"]["totalInvoiceValue"] == 125

        listing = client.get(
            "/api/billings",
            params={"searchQuery": "initech", "dateFrom": "2025-01-01", "dateTo": "2025-01-15"},
            headers=auth_headers,
        ).json()["data"]
        assert [b["id"] for b in listing["items"]] == [billing_id]

    def test_stats(self, client, auth_headers, vehicle_id):
        client.post("/api/billings", json=billing_payload([vehicle_id]), headers=auth_headers)
        stats = client.get("/api/billings/stats", headers=auth_headers).json()["data"]
        assert stats["totalBills"] == 1
        assert stats["totalRevenue"] == 801
        assert len(stats["recentBills"]) == 1

    def test_stats_leave_out_drafts(self, client, auth_headers, vehicle_id):
        client.post("/api/billings", json=billing_payload([vehicle_id], isCompleted=False), headers=auth_headers)
        stats = client.get("/api/billings/stats", headers=auth_headers).json()["data"]
        assert stats["totalBills"] == 0
        assert stats["recentBills"] == []


class TestDriversAndSettingsApi:
    """Driver and company settings endpoints"""

    def test_driver_crud(self, client, auth_headers):
        created = client.post(
            "/api/drivers",
            json={"driverName": "Ravi", "driverPhoneNumber": "9800000001"},
            headers=auth_headers,
        )
        assert created.status_code == 201
        driver_id = created.json()["data"]["id"]

        listing = client.get("/api/drivers", params={"search": "rav"}, headers=auth_headers).json()["data"]
        assert listing["pagination"]["totalCount"] == 1

        updated = client.put(f"/api/drivers/{driver_id}", json={"driverName": "Ravi K"}, headers=auth_headers)
        assert updated.json()["data"]["driverName"] == "Ravi K"

        assert client.delete(f"/api/drivers/{driver_id}", headers=auth_headers).status_code == 200

    def test_settings_lifecycle(self, client, auth_headers):
        payload = {
            "companyName": "Acme Travels",
            "gstNumber": "29abcde1234f1z5",
            "panNumber": "abcde1234f",
            "proprietorName": "A. Kumar",
            "bankDetails": {
                "bankName": "State Bank",
                "ifscCode": "sbin0001234",
                "accountNumber": "1234567890",
                "branchName": "MG Road",
            },
            "contactNumber": "9800000000",
            "companyAddress": "12 Ring Road",
        }
        assert client.get("/api/settings", headers=auth_headers).status_code == 404

        created = client.post("/api/settings", json=payload, headers=auth_headers)
        assert created.status_code == 201
        assert created.json()["data"]["gstNumber"] == "29ABCDE1234F1Z5"
        assert client.post("/api/settings", json=payload, headers=auth_headers).status_code == 409

        updated = client.put("/api/settings", json={"bankDetails": {"branchName": "Indiranagar"}}, headers=auth_headers)
        assert updated.json()["data"]["bankDetails"]["bankName"] == "State Bank"
        assert updated.json()["data"]["bankDetails"]["branchName"] == "Indiranagar"

        assert client.delete("/api/settings", headers=auth_headers).status_code == 200


class TestBookingsApi:
    """Public booking endpoints"""

    def booking(self, **overrides):
        payload = {
            "name": "Rider",
            "phoneNumber": "9800000000",
            "email": "rider@fleetdesk.io",
            "date": datetime.now(timezone.utc).strftime("%Y-%m-%d"),
            "time": "09:30",
            "pickup": "Airport",
            "drop": "City",
            "vehicle": "Car",
        }
        payload.update(overrides)
        return payload

    def test_create_sends_mails(self, client, outbox):
        response = client.post("/api/bookings", json=self.booking())
        assert response.status_code == 201
        booking = response.json()["data"]
        assert booking["status"] == "Pending"
        assert ("confirmation", "rider@fleetdesk.io") in outbox.sent
        assert ("notification", booking["id"]) in outbox.sent

    def test_blank_email_skips_confirmation(self, client, outbox):
        response = client.post("/api/bookings", json=self.booking(email=""))
        assert response.status_code == 201
        assert [kind for kind, *_ in outbox.sent] == ["notification"]

    def test_listing(self, client):
        client.post("/api/bookings", json=self.booking())
        assert len(client.get("/api/bookings").json()["data"]) == 1

        week = client.get("/api/bookings/range").json()["data"]
        assert week["pagination"]["totalCount"] == 1

        month = datetime.now(timezone.utc).strftime("%m-%Y")
        assert len(client.get(f"/api/bookings/month/{month}").json()["data"]) == 1

    def test_invalid_month(self, client):
        response = client.get("/api/bookings/month/2025-10")
        assert response.status_code == 400
        assert "MM-YYYY" in response.json()["message"]

    def test_status_update(self, client):
        booking_id = client.post("/api/bookings", json=self.booking()).json()["data"]["id"]

        response = client.patch(f"/api/bookings/{booking_id}/status", json={"status": "inProgress"})
        assert response.json()["data"]["status"] == "inProgress"

        invalid = client.patch(f"/api/bookings/{booking_id}/status", json={"status": "Cancelled"})
        assert invalid.status_code == 400
        assert invalid.json()["message"] == "Invalid status value. Must be one of: Pending, Completed, inProgress"
