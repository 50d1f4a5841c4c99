"""Tests for the HTTP API."""

import pytest
from fastapi.testclient import TestClient

from hotel_booking.main import app, get_sessions, get_stores
from hotel_booking.sessions import SessionRegistry
from hotel_booking.stores import Stores


@pytest.fixture
def stores(directory, ledger):
    return Stores(directory=directory, ledger=ledger)


@pytest.fixture
def client(stores):
    sessions = SessionRegistry()
    app.dependency_overrides[get_stores] = lambda: stores
    app.dependency_overrides[get_sessions] = lambda: sessions
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


@pytest.fixture
def session_id(client):
    response = client.post("/api/sessions")
    assert response.status_code == 201
    return response.json()["session_id"]


def book_ocean_double(client, session_id):
    """Drive the wizard for the ocean double up to the payment step."""
    client.post(f"/api/sessions/{session_id}/rooms/room-ocean")
    client.put(f"/api/sessions/{session_id}/wizard/dates",
               json={"check_in": "2024-06-01", "check_out": "2024-06-04", "guests": 2})
    client.post(f"/api/sessions/{session_id}/wizard/next")
    client.put(f"/api/sessions/{session_id}/wizard/guest",
               json={"guest_name": "Ada Obi", "guest_email": "ada@example.com",
                     "guest_phone": "+2348012345678"})
    return client.post(f"/api/sessions/{session_id}/wizard/next")


class TestRoomsApi:
    """Tests for room endpoints."""

    def test_health(self, client):
        body = client.get("/health").json()
        assert body["status"] == "healthy"
        assert body["store_backend"] == "memory"

    def test_list_rooms_cheapest_first(self, client):
        prices = [room["price"] for room in client.get("/api/rooms").json()]
        assert prices == [18000, 30000, 80000, 120000]

    def test_get_missing_room_is_404(self, client):
        assert client.get("/api/rooms/missing").status_code == 404

    def test_available_rooms(self, client):
        response = client.get("/api/rooms/available",
                              params={"check_in": "2024-06-01", "check_out": "2024-06-03", "guests": 2})
        assert [room["id"] for room in response.json()] == ["room-ocean", "room-suite"]

    def test_available_rooms_rejects_empty_stay(self, client):
        response = client.get("/api/rooms/available",
                              params={"check_in": "2024-06-03", "check_out": "2024-06-03"})
        assert response.status_code == 400

    def test_party_larger_than_any_room_finds_nothing(self, client):
        response = client.get("/api/rooms/available",
                              params={"check_in": "2024-06-01", "check_out": "2024-06-03", "guests": 12})
        assert response.status_code == 200
        assert response.json() == []


class TestBookingFlowApi:
    """Tests for the session-driven booking wizard."""

    def test_new_session_starts_on_room_list(self, client, session_id):
        body = client.get(f"/api/sessions/{session_id}").json()
        assert body["view"] == "customer"
        assert body["customer_view"] == "rooms"
        assert body["wizard"] is None

    def test_unknown_session_is_404(self, client):
        assert client.get("/api/sessions/nope").status_code == 404

    def test_complete_booking(self, client, session_id):
        body = book_ocean_double(client, session_id).json()
        assert body["wizard"]["step"] == "payment"
        assert body["wizard"]["total_price"] == 90000

        body = client.post(f"/api/sessions/{session_id}/wizard/next").json()
        booking = body["wizard"]["booking"]
        assert body["wizard"]["step"] == "confirmation"
        assert booking["status"] == "confirmed"
        assert booking["total_price"] == 90000

        bookings = client.get("/api/bookings", params={"email": "ada@example.com"}).json()
        assert [b["id"] for b in bookings] == [booking["id"]]

    def test_blocked_step_reports_errors(self, client, session_id):
        client.post(f"/api/sessions/{session_id}/rooms/room-ocean")
        client.put(f"/api/sessions/{session_id}/wizard/dates",
                   json={"check_in": "2024-06-01", "check_out": "2024-06-01"})
        body = client.post(f"/api/sessions/{session_id}/wizard/next").json()
        assert body["wizard"]["step"] == "dates"
        assert body["wizard"]["nights"] == 0
        assert body["wizard"]["errors"]

    def test_changing_dates_keeps_guest_count(self, client, session_id):
        client.post(f"/api/sessions/{session_id}/rooms/room-ocean")
        client.put(f"/api/sessions/{session_id}/wizard/dates",
                   json={"check_in": "2024-06-01", "check_out": "2024-06-04", "guests": 2})
        body = client.put(f"/api/sessions/{session_id}/wizard/dates",
                          json={"check_in": "2024-06-02", "check_out": "2024-06-05"}).json()
        assert body["wizard"]["draft"]["guests"] == 2
        assert body["wizard"]["draft"]["check_in"] == "2024-06-02"

    def test_confirmed_wizard_cannot_advance(self, client, session_id):
        book_ocean_double(client, session_id)
        client.post(f"/api/sessions/{session_id}/wizard/next")
        assert client.post(f"/api/sessions/{session_id}/wizard/next").status_code == 409
        assert len(client.get("/api/bookings").json()) == 1

    def test_wizard_requires_selected_room(self, client, session_id):
        assert client.post(f"/api/sessions/{session_id}/wizard/next").status_code == 409

    def test_back_and_start_over_discard_wizard(self, client, session_id):
        client.post(f"/api/sessions/{session_id}/rooms/room-ocean")
        body = client.post(f"/api/sessions/{session_id}/back").json()
        assert body["wizard"] is None
        assert body["customer_view"] == "rooms"

        book_ocean_double(client, session_id)
        client.post(f"/api/sessions/{session_id}/wizard/next")
        body = client.post(f"/api/sessions/{session_id}/start-over").json()
        assert body["wizard"] is None

    def test_unavailable_room_cannot_be_booked(self, client, session_id):
        assert client.post(f"/api/sessions/{session_id}/rooms/room-closed").status_code == 400

    def test_switch_views(self, client, session_id):
        body = client.post(f"/api/sessions/{session_id}/view", json={"view": "admin"}).json()
        assert body["view"] == "admin"
        response = client.post(f"/api/sessions/{session_id}/view", json={"view": "kitchen"})
        assert response.status_code == 400


class TestBookingsApi:
    """Tests for booking endpoints."""

    def test_cancel_booking(self, client, session_id):
        book_ocean_double(client, session_id)
        booking = client.post(f"/api/sessions/{session_id}/wizard/next").json()["wizard"]["booking"]

        response = client.patch(f"/api/bookings/{booking['id']}", json={"status": "cancelled"})
        assert response.json()["status"] == "cancelled"
        assert client.get("/api/rooms/room-ocean/bookings").json() == []

    def test_update_missing_booking_is_404(self, client):
        response = client.patch("/api/bookings/BK-MISSING", json={"status": "cancelled"})
        assert response.status_code == 404
        assert client.get("/api/bookings").json() == []

    def test_invalid_status_is_rejected(self, client):
        response = client.patch("/api/bookings/BK-MISSING", json={"status": "lost"})
        assert response.status_code == 422


class TestAdminApi:
    """Tests for admin endpoints."""

    def test_create_update_delete_room(self, client):
        response = client.post("/api/admin/rooms", json={
            "name": "Poolside Deluxe", "category": "deluxe", "amenities": "Pool, WiFi",
            "price": 70000, "max_guests": 3,
        })
        assert response.status_code == 201
        room = response.json()
        assert room["amenities"] == ["Pool", "WiFi"]

        response = client.patch(f"/api/admin/rooms/{room['id']}", json={"price": 75000})
        assert response.json()["price"] == 75000
        assert response.json()["name"] == "Poolside Deluxe"

        response = client.put(f"/api/admin/rooms/{room['id']}", json={
            "name": "Poolside Suite", "category": "suite", "price": 90000, "max_guests": 4,
        })
        assert response.json()["amenities"] == []

        assert client.delete(f"/api/admin/rooms/{room['id']}").status_code == 204
        assert client.delete(f"/api/admin/rooms/{room['id']}").status_code == 404

    def test_bookings_table_survives_room_deletion(self, client, session_id):
        book_ocean_double(client, session_id)
        client.post(f"/api/sessions/{session_id}/wizard/next")
        client.delete("/api/admin/rooms/room-ocean")

        [row] = client.get("/api/admin/bookings").json()
        assert row["room_name"] == "Ocean Double"
        assert row["total_display"] == "₦90,000"

        summary = client.get("/api/admin/summary").json()
        assert summary["total_rooms"] == 3
        assert summary["confirmed_revenue"] == 90000
