"""HTTP tests for /api/booking."""

from datetime import timedelta

import pytest

from tests.factories.booking_builders import auth_headers, booking_payload, future_day

BASE = "/api/booking"


@pytest.fixture
def client_headers(client_user):
    return auth_headers(client_user)


@pytest.fixture
def vendor_headers(vendor_user):
    return auth_headers(vendor_user)


def _request(client, headers, listing, start=None, end=None, **kwargs):
    start = start or future_day(30)
    return client.post(f"{BASE}/request", json=booking_payload(listing, start, end, **kwargs), headers=headers)


def _create(client, headers, listing, **kwargs):
    response = _request(client, headers, listing, **kwargs)
    assert response.status_code == 201, response.text
    return response.json()["data"]


class TestAuthAndErrors:
    def test_missing_token(self, client, listing):
        response = _request(client, {}, listing)
        assert response.status_code == 401
        body = response.json()
        assert body["success"] is False
        assert body["message"] == "Not authenticated"

    def test_invalid_token(self, client, listing):
        response = _request(client, {"Authorization": "Bearer not-a-jwt"}, listing)
        assert response.status_code == 401
        assert response.json()["code"] == "INVALID_TOKEN"

    def test_validation_error_envelope(self, client, client_headers, listing):
        payload = booking_payload(listing, future_day(30))
        del payload["details"]["event_location"]
        response = client.post(f"{BASE}/request", json=payload, headers=client_headers)

        assert response.status_code == 400
        body = response.json()
        assert body["success"] is False
        assert body["code"] == "VALIDATION_ERROR"
        assert body["details"][0]["loc"][-1] == "event_location"

    def test_date_only_strings_required(self, client, client_headers, listing):
        payload = booking_payload(listing, future_day(30))
        payload["details"]["start_date"] += "T10:00:00"
        response = client.post(f"{BASE}/request", json=payload, headers=client_headers)
        assert response.status_code == 400

    def test_zero_length_window_rejected(
        self, client, client_headers, other_client_user, make_listing
    ):
        listing = make_listing(pricing={"type": "hourly", "amount": 50})
        day = future_day(30)
        _create(client, client_headers, listing, start=day)  # 10:00-14:00

        response = _request(
            client, auth_headers(other_client_user), listing, start=day, start_time="10:00", end_time="10:00"
        )
        assert response.status_code == 400
        assert response.json()["code"] == "VALIDATION_ERROR"

    def test_vendor_cannot_request(self, client, vendor_headers, listing):
        response = _request(client, vendor_headers, listing)
        assert response.status_code == 403
        assert response.json()["code"] == "ROLE_NOT_ALLOWED"

    def test_unknown_booking(self, client, client_headers):
        response = client.get(f"{BASE}/01HZZZZZZZZZZZZZZZZZZZZZZZ", headers=client_headers)
        assert response.status_code == 404
        assert response.json()["code"] == "BOOKING_NOT_FOUND"


class TestLifecycle:
    def test_happy_path(self, client, client_headers, vendor_headers, listing):
        booking = _create(client, client_headers, listing)
        assert booking["status"] == "pending"
        assert booking["vendor_actions"] == ["accept", "reject"]
        booking_id = booking["id"]

        pending = client.get(f"{BASE}/pending", headers=vendor_headers).json()
        assert pending["total"] == 1
        assert pending["items"][0]["tracking_id"] == booking["tracking_id"]

        response = client.post(f"{BASE}/{booking_id}/accept", headers=vendor_headers)
        assert response.status_code == 200
        assert response.json()["message"] == "Booking accepted successfully"
        assert response.json()["data"]["vendor_actions"] == []

        data = client.post(f"{BASE}/{booking_id}/pay", headers=client_headers).json()["data"]
        assert data["status"] == "paid"
        assert data["payment_status"] == "paid"
        assert data["vendor_actions"] == ["mark_on_the_way"]

        steps = [
            ("mark-on-the-way", vendor_headers, "on_the_way"),
            ("mark-received", client_headers, "received"),
            ("mark-finished", client_headers, "finished"),
        ]
        for path, headers, expected in steps:
            response = client.post(f"{BASE}/{booking_id}/{path}", headers=headers)
            assert response.status_code == 200, response.text
            assert response.json()["data"]["status"] == expected

        review = client.post(
            f"{BASE}/{booking_id}/review", json={"rating": 5, "comment": "Perfect"}, headers=client_headers
        )
        assert review.status_code == 201
        assert review.json()["data"]["rating"] == 5

        again = client.post(f"{BASE}/{booking_id}/review", json={"rating": 4}, headers=client_headers)
        assert again.status_code == 409
        assert again.json()["code"] == "ALREADY_REVIEWED"

        detail = client.get(f"{BASE}/{booking_id}", headers=client_headers).json()["data"]
        assert [e["status"] for e in detail["status_history"]][-1] == "finished"
        assert detail["feedback"]["rating"] == 5

    def test_reject_with_reason(self, client, client_headers, vendor_headers, listing):
        booking = _create(client, client_headers, listing)
        response = client.post(
            f"{BASE}/{booking['id']}/reject",
            json={"rejection_reason": "Fully booked that weekend"},
            headers=vendor_headers,
        )
        assert response.status_code == 200
        assert response.json()["data"]["rejection_reason"] == "Fully booked that weekend"

    def test_cancel_with_multilingual_reason(self, client, client_headers, listing):
        booking = _create(client, client_headers, listing)
        response = client.post(
            f"{BASE}/{booking['id']}/cancel",
            json={"reason": {"en": "Event moved", "nl": "Evenement verplaatst"}},
            headers=client_headers,
        )
        assert response.status_code == 200
        details = response.json()["data"]["cancellation_details"]
        assert details["reason"] == {"en": "Event moved", "nl": "Evenement verplaatst"}

    def test_wrong_status_is_404(self, client, client_headers, listing):
        booking = _create(client, client_headers, listing)
        response = client.post(f"{BASE}/{booking['id']}/pay", headers=client_headers)
        assert response.status_code == 404
        assert response.json()["message"] == "Booking not found or not in accepted status"

    def test_client_cannot_accept(self, client, client_headers, listing):
        booking = _create(client, client_headers, listing)
        response = client.post(f"{BASE}/{booking['id']}/accept", headers=client_headers)
        assert response.status_code == 403

    def test_claim(self, client, client_headers, vendor_headers, listing):
        booking = _create(client, client_headers, listing)
        client.post(f"{BASE}/{booking['id']}/accept", headers=vendor_headers)
        client.post(f"{BASE}/{booking['id']}/pay", headers=client_headers)

        response = client.post(
            f"{BASE}/{booking['id']}/claim",
            json={"reason": "Speaker arrived broken", "claim_type": "damage"},
            headers=client_headers,
        )
        assert response.status_code == 200
        data = response.json()["data"]
        assert data["status"] == "claim"
        assert data["vendor_actions"] == ["mark_completed"]

    def test_pickup_claim_requires_reason(self, client, vendor_headers, listing):
        response = client.post(
            f"{BASE}/anything/mark-picked-up", json={"condition": "claim"}, headers=vendor_headers
        )
        assert response.status_code == 400


class TestConflictsAndQueries:
    def test_overlap_conflict(self, client, client_headers, other_client_user, listing):
        start = future_day(30)
        _create(client, client_headers, listing, start=start, end=start + timedelta(days=2))

        response = _request(
            client,
            auth_headers(other_client_user),
            listing,
            start=start + timedelta(days=2),
            end=start + timedelta(days=4),
        )
        assert response.status_code == 409
        body = response.json()
        assert body["code"] == "BOOKING_CONFLICT"
        assert len(body["details"]["conflicting_bookings"]) == 1

    def test_outside_time_slots_uses_generic_message(self, client, client_headers, make_listing):
        listing = make_listing(
            availability={
                "is_available": True,
                "available_time_slots": [{"start_time": "09:00", "end_time": "12:00"}],
            }
        )
        response = _request(client, client_headers, listing, start_time="11:00", end_time="15:00")
        assert response.status_code == 409
        body = response.json()
        assert body["code"] == "OUTSIDE_TIME_SLOTS"
        assert body["message"].startswith("Selected dates/times are not available.")

    def test_check_availability(self, client, client_headers, listing):
        day = future_day(30)
        _create(client, client_headers, listing, start=day)  # 10:00-14:00

        def check(start_time, end_time):
            return client.post(
                f"{BASE}/check-availability",
                json={
                    "listing_id": listing.id,
                    "start_date": day.isoformat(),
                    "end_date": day.isoformat(),
                    "start_time": start_time,
                    "end_time": end_time,
                },
                headers=client_headers,
            ).json()["data"]

        assert check("14:00", "18:00")["is_available"] is True
        busy = check("12:00", "16:00")
        assert busy["is_available"] is False
        assert busy["reason"] == "BOOKING_CONFLICT"

    def test_price_quote(self, client, client_headers, listing):
        start = future_day(30)
        response = client.post(
            f"{BASE}/price-quote",
            json={
                "listing_id": listing.id,
                "start_date": start.isoformat(),
                "end_date": (start + timedelta(days=2)).isoformat(),
            },
            headers=client_headers,
        )
        assert response.status_code == 200
        data = response.json()["data"]
        assert data["booking_price"] == 300.0
        assert data["platform_fee"] == 6.0
        assert data["total_price"] == 306.0

    def test_history_filter(self, client, client_headers, listing):
        _create(client, client_headers, listing)

        response = client.get(f"{BASE}/history", params={"status": "pending"}, headers=client_headers)
        assert response.json()["total"] == 1
        response = client.get(f"{BASE}/history", params={"status": "paid"}, headers=client_headers)
        assert response.json()["total"] == 0

        response = client.get(f"{BASE}/history", params={"status": "bogus"}, headers=client_headers)
        assert response.status_code == 400
        assert response.json()["code"] == "INVALID_STATUS"
