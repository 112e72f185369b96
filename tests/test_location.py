from datetime import datetime, timedelta

from core.config import settings
from models.motoboy import MotoboyProfile
from services.location import is_location_stale

POSITION = {"current_lat": -23.5614, "current_lng": -46.6559}


def report(client, account, **payload):
    return client.patch("/api/motoboys/me", json=payload, headers=account["headers"])


class TestReportLocation:
    def test_report_marks_motoboy_available(self, client, motoboy):
        response = report(client, motoboy, **POSITION)
        assert response.status_code == 200
        body = response.json()["data"]
        assert body["applied"] is True
        assert body["motoboy"]["current_lat"] == POSITION["current_lat"]
        assert body["motoboy"]["current_lng"] == POSITION["current_lng"]
        assert body["motoboy"]["is_available"] is True
        assert body["motoboy"]["location_updated_at"] is not None

    def test_older_reading_is_ignored(self, client, motoboy):
        now = datetime.utcnow()
        report(client, motoboy, **POSITION, reported_at=now.isoformat())

        stale = {"current_lat": -22.9, "current_lng": -43.2, "reported_at": (now - timedelta(minutes=5)).isoformat()}
        response = report(client, motoboy, **stale)
        assert response.status_code == 200
        body = response.json()["data"]
        assert body["applied"] is False
        assert body["motoboy"]["current_lat"] == POSITION["current_lat"]

    def test_coordinates_must_be_in_range(self, client, motoboy):
        response = report(client, motoboy, current_lat=91, current_lng=0)
        assert response.status_code == 400

        response = report(client, motoboy, current_lat=0, current_lng=-181)
        assert response.status_code == 400

    def test_coordinates_travel_together(self, client, motoboy):
        response = report(client, motoboy, current_lat=-23.5)
        assert response.status_code == 400
        assert response.json()["error"]["code"] == "VALIDATION_ERROR"

    def test_empty_payload(self, client, motoboy):
        response = report(client, motoboy)
        assert response.status_code == 400

    def test_only_motoboys_report(self, client, establishment):
        response = report(client, establishment, **POSITION)
        assert response.status_code == 403


class TestAvailability:
    def test_cannot_become_available_without_location(self, client, motoboy):
        response = report(client, motoboy, is_available=True)
        assert response.status_code == 400

    def test_going_offline_keeps_position(self, client, motoboy):
        report(client, motoboy, **POSITION)

        response = report(client, motoboy, is_available=False)
        assert response.status_code == 200
        body = response.json()["data"]["motoboy"]
        assert body["is_available"] is False
        assert body["current_lat"] == POSITION["current_lat"]

    def test_position_with_explicit_unavailability(self, client, motoboy):
        response = report(client, motoboy, **POSITION, is_available=False)
        body = response.json()["data"]["motoboy"]
        assert body["is_available"] is False
        assert body["current_lng"] == POSITION["current_lng"]

    def test_clear_location(self, client, motoboy):
        report(client, motoboy, **POSITION)

        response = client.delete("/api/motoboys/me/location", headers=motoboy["headers"])
        assert response.status_code == 200
        body = response.json()["data"]
        assert body["current_lat"] is None
        assert body["current_lng"] is None
        assert body["is_available"] is False


class TestLiveMap:
    def test_only_available_motoboys_with_position(self, client, make_motoboy, establishment):
        online = make_motoboy("online@motorotas.com", full_name="Ana Online")
        offline = make_motoboy("offline@motorotas.com", full_name="Bruno Offline")
        make_motoboy("never@motorotas.com", full_name="Caio Nunca")
        report(client, online, **POSITION)
        report(client, offline, **POSITION)
        report(client, offline, is_available=False)

        response = client.get("/api/motoboys/locations", headers=establishment["headers"])
        assert response.status_code == 200
        locations = response.json()["data"]
        assert [m["full_name"] for m in locations] == ["Ana Online"]
        assert locations[0]["location_is_stale"] is False

    def test_motoboys_cannot_see_the_map(self, client, motoboy):
        response = client.get("/api/motoboys/locations", headers=motoboy["headers"])
        assert response.status_code == 403


class TestStaleness:
    def test_missing_position_is_stale(self):
        assert is_location_stale(MotoboyProfile()) is True

    def test_recent_position_is_fresh(self):
        motoboy = MotoboyProfile(current_lat=1.0, current_lng=2.0, location_updated_at=datetime.utcnow())
        assert is_location_stale(motoboy) is False

    def test_old_position_is_stale(self):
        old = datetime.utcnow() - timedelta(seconds=settings.LOCATION_STALE_SECONDS + 1)
        motoboy = MotoboyProfile(current_lat=1.0, current_lng=2.0, location_updated_at=old)
        assert is_location_stale(motoboy) is True
