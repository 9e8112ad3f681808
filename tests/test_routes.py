"""Tests for API routes."""

from datetime import timedelta
from uuid import uuid4

from fastapi.testclient import TestClient
from sqlmodel import Session

from app.models import SafetyNotification


def schedule_body(clock, minutes_ahead=60, duration_minutes=30) -> dict:
    scheduled_time = clock.now + timedelta(minutes=minutes_ahead)
    return {
        "counterpart_id": "user_42",
        "counterpart_name": "Jordan Keys",
        "location": "Rehearsal Room B",
        "scheduled_time": scheduled_time.isoformat(),
        "check_in_deadline": (scheduled_time + timedelta(minutes=duration_minutes)).isoformat(),
        "contacts": [
            {"name": "Alice", "phone": "+15550001", "email": "alice@example.com"},
            {"name": "Bob", "phone": "+15550002", "receive_session_alerts": False},
        ],
    }


class TestHealthEndpoint:
    """Tests for the health check endpoint."""

    def test_health_check(self, client: TestClient):
        """Test the health endpoint returns OK."""
        response = client.get("/health")
        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "healthy"


class TestCheckInRoutes:
    """Tests for check-in lifecycle routes."""

    def test_schedule(self, client: TestClient, clock):
        response = client.post("/checkins", json=schedule_body(clock))

        assert response.status_code == 201
        data = response.json()
        assert data["status"] == "scheduled"
        assert data["counterpart_name"] == "Jordan Keys"
        assert [c["name"] for c in data["emergency_contacts"]] == ["Alice", "Bob"]

    def test_schedule_in_past(self, client: TestClient, clock):
        response = client.post("/checkins", json=schedule_body(clock, minutes_ahead=-10))

        assert response.status_code == 422
        assert "future" in response.json()["detail"]

    def test_schedule_deadline_before_session(self, client: TestClient, clock):
        response = client.post("/checkins", json=schedule_body(clock, duration_minutes=-5))

        assert response.status_code == 422

    def test_full_lifecycle(self, client: TestClient, clock):
        check_in_id = client.post("/checkins", json=schedule_body(clock)).json()["id"]

        response = client.post(f"/checkins/{check_in_id}/start")
        assert response.status_code == 200
        assert response.json()["status"] == "active"
        assert response.json()["activated_at"] is not None

        listing = client.get("/checkins").json()
        assert listing["has_active_check_in"] is True
        assert [c["id"] for c in listing["active"]] == [check_in_id]

        response = client.post(f"/checkins/{check_in_id}/complete")
        assert response.status_code == 200
        assert response.json()["status"] == "completed"

        listing = client.get("/checkins").json()
        assert listing["has_active_check_in"] is False
        assert [c["id"] for c in listing["historical"]] == [check_in_id]

    def test_get_check_in(self, client: TestClient, clock):
        check_in_id = client.post("/checkins", json=schedule_body(clock)).json()["id"]

        response = client.get(f"/checkins/{check_in_id}")

        assert response.status_code == 200
        assert response.json()["location"] == "Rehearsal Room B"

    def test_get_check_in_not_found(self, client: TestClient):
        response = client.get(f"/checkins/{uuid4()}")
        assert response.status_code == 404

    def test_start_not_found(self, client: TestClient):
        response = client.post(f"/checkins/{uuid4()}/start")
        assert response.status_code == 404

    def test_complete_scheduled_check_in(self, client: TestClient, clock):
        check_in_id = client.post("/checkins", json=schedule_body(clock)).json()["id"]

        response = client.post(f"/checkins/{check_in_id}/complete")

        assert response.status_code == 404

    def test_cancel_twice(self, client: TestClient, clock):
        check_in_id = client.post("/checkins", json=schedule_body(clock)).json()["id"]

        assert client.post(f"/checkins/{check_in_id}/cancel").status_code == 200
        assert client.post(f"/checkins/{check_in_id}/cancel").status_code == 404

    def test_emergency(self, client: TestClient, clock, notifier):
        check_in_id = client.post("/checkins", json=schedule_body(clock)).json()["id"]
        client.post(f"/checkins/{check_in_id}/start")

        response = client.post(f"/checkins/{check_in_id}/emergency")

        assert response.status_code == 200
        assert response.json()["status"] == "emergency"
        listing = client.get("/checkins").json()
        assert [c["status"] for c in listing["active"]] == ["emergency"]
        notifier.send_emergency_alert.assert_awaited_once()

    def test_emergency_on_scheduled(self, client: TestClient, clock):
        check_in_id = client.post("/checkins", json=schedule_body(clock)).json()["id"]

        response = client.post(f"/checkins/{check_in_id}/emergency")

        assert response.status_code == 404


class TestNotificationRoutes:
    """Tests for the outbox listing route."""

    def test_list_notifications_filtered(self, client: TestClient, session: Session, clock):
        check_in_id = uuid4()
        for target in (check_in_id, uuid4()):
            session.add(
                SafetyNotification(
                    check_in_id=target,
                    kind="reminder",
                    message="Reminder: jam session",
                    deliver_at=clock.now,
                )
            )
        session.commit()

        response = client.get("/notifications", params={"check_in_id": str(check_in_id)})

        assert response.status_code == 200
        data = response.json()
        assert len(data) == 1
        assert data[0]["kind"] == "reminder"
        assert data[0]["check_in_id"] == str(check_in_id)

    def test_list_all_notifications(self, client: TestClient):
        response = client.get("/notifications")
        assert response.status_code == 200
        assert response.json() == []


class TestShareRoutes:
    """Tests for session sharing routes."""

    def share_body(self, clock, location="Rehearsal Room B") -> dict:
        return {
            "counterpart_id": "user_42",
            "counterpart_name": "Jordan Keys",
            "session_time": (clock.now + timedelta(hours=2)).isoformat(),
            "location": location,
            "notes": "Bring a capo",
            "contacts": [
                {"name": "Alice", "phone": "+15550001"},
                {"name": "Bob", "phone": "+15550002", "receive_session_alerts": False},
            ],
        }

    def test_share(self, client: TestClient, clock):
        """Test sharing records the session and notifies opted-in contacts."""
        response = client.post("/shares", json=self.share_body(clock))

        assert response.status_code == 201
        data = response.json()
        assert data["status"] == "active"
        assert len(data["shared_with"]) == 1

        notifications = client.get("/notifications").json()
        assert [n["contact_name"] for n in notifications] == ["Alice"]
        assert notifications[0]["kind"] == "safety_session_alert"
        assert notifications[0]["shared_session_id"] == data["id"]

        listed = client.get("/shares").json()
        assert [s["id"] for s in listed] == [data["id"]]

    def test_share_without_location(self, client: TestClient, clock):
        """Test an empty location is rejected."""
        response = client.post("/shares", json=self.share_body(clock, location=""))

        assert response.status_code == 422
        assert "Location" in response.json()["detail"]
