"""
HTTP surface: routing, identity headers and the response envelope.
"""

from datetime import timedelta

import pytest
from fastapi.testclient import TestClient

from hostel_occupancy.api import deps
from hostel_occupancy.main import app
from hostel_occupancy.models.base.enums import UserRole
from hostel_occupancy.utils.datetime_utils import utc_now


@pytest.fixture
def client(db):
    """Test client sharing the test session; startup hooks are not run."""

    def override_get_db():
        yield db

    app.dependency_overrides[deps.get_db] = override_get_db
    yield TestClient(app)
    app.dependency_overrides.clear()


def headers_for(user):
    return {"X-User-Id": user.id, "X-User-Role": UserRole(user.role).value}


ROOM_BODY = {
    "room_number": "201",
    "room_type": "single",
    "capacity": 1,
    "base_rent": "4000",
    "beds": [{"bed_number": "a"}],
}


def test_health(client):
    response = client.get("/api/v1/health")

    assert response.status_code == 200
    assert response.json()["status"] == "healthy"


class TestEnvelope:
    def test_created_room(self, client, hostel, owner):
        response = client.post(f"/api/v1/hostels/{hostel.id}/rooms", json=ROOM_BODY, headers=headers_for(owner))

        body = response.json()
        assert response.status_code == 201
        assert body["success"] is True
        assert body["data"]["room_number"] == "201"
        assert body["data"]["beds"][0]["bed_number"] == "A"
        assert body["data"]["version"] == 1
        assert "X-Request-ID" in response.headers

    def test_conflict_maps_to_409(self, client, hostel, owner):
        client.post(f"/api/v1/hostels/{hostel.id}/rooms", json=ROOM_BODY, headers=headers_for(owner))

        response = client.post(f"/api/v1/hostels/{hostel.id}/rooms", json=ROOM_BODY, headers=headers_for(owner))

        body = response.json()
        assert response.status_code == 409
        assert body["success"] is False
        assert body["error"]["code"] == "CONFLICT"

    def test_missing_booking_is_404(self, client, student_user):
        response = client.get("/api/v1/bookings/missing", headers=headers_for(student_user))

        assert response.status_code == 404
        assert response.json()["error"]["code"] == "NOT_FOUND"

    def test_invalid_body_is_422(self, client, hostel, owner):
        response = client.post(
            f"/api/v1/hostels/{hostel.id}/rooms",
            json={"room_number": "202", "capacity": 0},
            headers=headers_for(owner),
        )

        assert response.status_code == 422
        assert response.json()["error"]["code"] == "VALIDATION_ERROR"

    def test_missing_identity_is_403(self, client, hostel):
        response = client.post(f"/api/v1/hostels/{hostel.id}/rooms", json=ROOM_BODY)

        assert response.status_code == 403
        assert response.json()["error"]["code"] == "UNAUTHORIZED"

    def test_unknown_role_is_403(self, client, hostel, owner):
        response = client.post(
            f"/api/v1/hostels/{hostel.id}/rooms",
            json=ROOM_BODY,
            headers={"X-User-Id": owner.id, "X-User-Role": "landlord"},
        )

        assert response.status_code == 403


def test_booking_to_check_in_flow(client, hostel, room, owner, student_user):
    """Book as a guest, confirm and check in as the owner."""
    check_in = (utc_now() + timedelta(days=3)).replace(microsecond=0)
    created = client.post(
        "/api/v1/bookings",
        json={
            "hostel_id": hostel.id,
            "room_id": room.id,
            "bed_number": "b",
            "check_in_date": check_in.isoformat(),
            "duration_months": 3,
            "emergency_contact": {"name": "Rita Parent", "relationship": "mother", "phone": "9000000004"},
        },
        headers=headers_for(student_user),
    )
    assert created.status_code == 201
    booking = created.json()["data"]
    assert booking["status"] == "pending"
    assert booking["bed_number"] == "B"

    confirmed = client.post(f"/api/v1/bookings/{booking['id']}/confirm", headers=headers_for(owner))
    assert confirmed.json()["data"]["status"] == "confirmed"

    checked_in = client.post(f"/api/v1/bookings/{booking['id']}/check-in", headers=headers_for(owner))
    stay = checked_in.json()["data"]
    assert checked_in.status_code == 200
    assert stay["booking"]["status"] == "checkedIn"
    assert stay["student"]["student_code"].startswith("STU-")
    assert stay["bed"]["status"] == "occupied"

    again = client.post(f"/api/v1/bookings/{booking['id']}/check-in", headers=headers_for(owner))
    assert again.status_code == 409
    assert again.json()["error"]["code"] == "INVALID_TRANSITION"

    hostels = client.get(f"/api/v1/users/{student_user.id}/hostels", headers=headers_for(student_user))
    assert [entry["hostel_name"] for entry in hostels.json()["data"]] == ["Green Leaf Hostel"]


def test_maintenance_ticket_flow(client, hostel, room, owner):
    """A bed ticket takes the bed offline until it is completed."""
    created = client.post(
        "/api/v1/maintenance",
        json={
            "hostel_id": hostel.id,
            "room_id": room.id,
            "bed_number": "b",
            "category": "plumbing",
            "description": "Leaking tap",
            "priority": "high",
        },
        headers=headers_for(owner),
    )
    assert created.status_code == 201
    request = created.json()["data"]
    assert request["status"] == "pending"
    assert request["bed_offline"] is True

    bed = client.get(f"/api/v1/rooms/{room.id}/beds/B", headers=headers_for(owner))
    assert bed.json()["data"]["status"] == "maintenance"

    listed = client.get(f"/api/v1/hostels/{hostel.id}/maintenance?priority=high", headers=headers_for(owner))
    assert [item["id"] for item in listed.json()["data"]] == [request["id"]]

    completed = client.patch(
        f"/api/v1/maintenance/{request['id']}",
        json={"status": "completed", "actual_cost": "350"},
        headers=headers_for(owner),
    )
    assert completed.json()["data"]["status"] == "completed"

    history = client.get(f"/api/v1/rooms/{room.id}/beds/B/history", headers=headers_for(owner))
    assert history.json()["data"]["bed"]["status"] == "available"
    assert [item["id"] for item in history.json()["data"]["maintenance"]] == [request["id"]]

    stats = client.get(f"/api/v1/hostels/{hostel.id}/maintenance/stats", headers=headers_for(owner))
    assert stats.json()["data"]["by_status"] == {"completed": 1}
