"""HTTP tests for admin tracking, listings, stock, notifications, support and ops endpoints."""

import pytest

from tests.factories.booking_builders import auth_headers, booking_payload, future_day


@pytest.fixture
def booked(client, client_user, listing):
    response = client.post(
        "/api/booking/request",
        json=booking_payload(listing, future_day(30)),
        headers=auth_headers(client_user),
    )
    assert response.status_code == 201, response.text
    return response.json()["data"]


class TestAdminTracking:
    def test_requires_admin(self, client, client_user, booked):
        response = client.get("/api/admin/tracking/stats", headers=auth_headers(client_user))
        assert response.status_code == 403
        assert response.json()["code"] == "ROLE_NOT_ALLOWED"

    def test_stats_and_list(self, client, admin_user, booked):
        headers = auth_headers(admin_user)
        stats = client.get("/api/admin/tracking/stats", headers=headers).json()["data"]
        assert stats["total"] == 1
        assert stats["pending"] == 1

        listing = client.get("/api/admin/tracking", params={"status": "pending"}, headers=headers).json()
        assert listing["total"] == 1
        assert listing["items"][0]["id"] == booked["id"]

    def test_force_status(self, client, admin_user, booked):
        headers = auth_headers(admin_user)
        response = client.patch(
            f"/api/admin/tracking/{booked['tracking_id']}/status",
            json={"status": "claim", "admin_notes": "Escalated by support"},
            headers=headers,
        )
        assert response.status_code == 200
        body = response.json()
        assert body["message"] == "Booking status updated from pending to claim"
        assert body["data"]["previous_status"] == "pending"
        assert body["data"]["booking"]["status"] == "claim"

        history = client.get(
            f"/api/admin/tracking/{booked['tracking_id']}/history", headers=headers
        ).json()["data"]
        assert history["current_status"] == "claim"
        assert history["status_history"][-1]["notes"] == "Escalated by support"

    def test_force_invalid_status(self, client, admin_user, booked):
        response = client.patch(
            f"/api/admin/tracking/{booked['tracking_id']}/status",
            json={"status": "archived"},
            headers=auth_headers(admin_user),
        )
        assert response.status_code == 400
        assert response.json()["code"] == "INVALID_STATUS"


class TestNotifications:
    def test_inbox_flow(self, client, vendor_user, booked):
        headers = auth_headers(vendor_user)

        inbox = client.get("/api/notifications", headers=headers).json()["data"]
        assert inbox["total"] == 1
        assert inbox["unread_count"] == 1
        notification = inbox["items"][0]
        assert notification["booking_id"] == booked["id"]
        assert booked["tracking_id"] in notification["message"]["nl"]

        response = client.patch(f"/api/notifications/{notification['id']}/read", headers=headers)
        assert response.status_code == 200
        assert response.json()["data"]["is_read"] is True

        count = client.get("/api/notifications/unread-count", headers=headers).json()["data"]
        assert count == {"unread_count": 0}

        response = client.patch("/api/notifications/read-all", headers=headers)
        assert response.json()["data"] == {"updated": 0}

    def test_other_users_notification_is_404(self, client, client_user, vendor_user, booked):
        inbox = client.get("/api/notifications", headers=auth_headers(vendor_user)).json()["data"]
        notification_id = inbox["items"][0]["id"]
        response = client.patch(
            f"/api/notifications/{notification_id}/read", headers=auth_headers(client_user)
        )
        assert response.status_code == 404
        assert response.json()["code"] == "NOTIFICATION_NOT_FOUND"


class TestListingsAndStock:
    def test_create_and_browse(self, client, vendor_user):
        headers = auth_headers(vendor_user)
        response = client.post(
            "/api/listings",
            json={
                "title": {"en": "Photo booth", "nl": "Fotohokje"},
                "pricing": {"type": "per event", "amount": 250},
                "quantity": 2,
            },
            headers=headers,
        )
        assert response.status_code == 201
        created = response.json()["data"]
        assert created["pricing"]["type"] == "per_event"

        public = client.get("/api/listings").json()
        assert [item["id"] for item in public["items"]] == [created["id"]]

        mine = client.get("/api/listings/mine", headers=headers).json()
        assert mine["total"] == 1

        response = client.patch(
            f"/api/listings/{created['id']}", json={"quantity": 3}, headers=headers
        )
        assert response.json()["data"]["quantity"] == 3

    def test_unsupported_pricing_type(self, client, vendor_user):
        response = client.post(
            "/api/listings",
            json={"title": "Mystery", "pricing": {"type": "barter", "amount": 1}},
            headers=auth_headers(vendor_user),
        )
        assert response.status_code == 400
        assert response.json()["code"] == "UNSUPPORTED_PRICING_TYPE"

    def test_stock_movements(self, client, vendor_user, listing):
        headers = auth_headers(vendor_user)
        response = client.post(
            f"/api/stock/{listing.id}/movements",
            json={"type": "checkout", "quantity": 2},
            headers=headers,
        )
        assert response.status_code == 201
        assert response.json()["data"]["resulting_quantity"] == 3

        response = client.post(
            f"/api/stock/{listing.id}/movements",
            json={"type": "checkout", "quantity": 10},
            headers=headers,
        )
        assert response.status_code == 400
        assert response.json()["message"] == "Not enough stock."

        logs = client.get(
            f"/api/stock/{listing.id}/logs", params={"type": "checkout"}, headers=headers
        ).json()["data"]
        assert len(logs) == 1

        summary = client.get(f"/api/stock/{listing.id}/summary", headers=headers).json()["data"]
        assert summary["current_quantity"] == 3


class TestSupport:
    def test_ticket_toggle(self, client, client_user, admin_user):
        response = client.post(
            "/api/support/tickets",
            json={"issue_related_to": "Payment Issues", "details": "I was charged twice for one booking"},
            headers=auth_headers(client_user),
        )
        assert response.status_code == 201
        ticket_id = response.json()["data"]["ticket_id"]

        admin = auth_headers(admin_user)
        response = client.patch(f"/api/support/tickets/{ticket_id}/toggle", headers=admin)
        assert response.json()["message"] == "Ticket closed"
        response = client.patch(f"/api/support/tickets/{ticket_id}/toggle", headers=admin)
        assert response.json()["message"] == "Ticket open"

        own = client.get("/api/support/tickets", headers=auth_headers(client_user)).json()["data"]
        assert [t["ticket_id"] for t in own] == [ticket_id]

    def test_short_details_rejected(self, client, client_user):
        response = client.post(
            "/api/support/tickets",
            json={"issue_related_to": "Other", "details": "help"},
            headers=auth_headers(client_user),
        )
        assert response.status_code == 400
        assert response.json()["code"] == "DETAILS_TOO_SHORT"


def test_health(client):
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json() == {
        "status": "healthy",
        "service": "evenlyo-api",
        "version": "1.0.0",
        "environment": "test",
    }


def test_metrics(client):
    client.get("/health")
    response = client.get("/metrics")
    assert response.status_code == 200
    assert "http_requests_total" in response.text
