from __future__ import annotations

from dataclasses import replace
from datetime import datetime, timezone

from fastapi.testclient import TestClient

from app import create_app
from opsconsole.utils.config import get_settings


NOW = datetime(2026, 3, 2, 9, 0, tzinfo=timezone.utc)


def _build_test_client(**setting_overrides) -> TestClient:
    get_settings.cache_clear()
    settings = replace(get_settings(), **setting_overrides)
    app = create_app(settings=settings, clock=lambda: NOW)
    return TestClient(app)


def _reservation_payload(start: str, end: str) -> dict:
    return {
        "user_id": "u1",
        "user_name": "Ana Souza",
        "purpose": "Planning",
        "start_time": start,
        "end_time": end,
        "attendees": 6,
    }


def _create_room(client: TestClient) -> tuple[str, str]:
    facility = client.post(
        "/facilities",
        json={
            "name": "Head Office",
            "address": "1000 Paulista Ave",
            "type": "office",
            "size": 1500,
            "floors": 3,
        },
    )
    assert facility.status_code == 201
    facility_id = facility.json()["id"]

    room = client.post(
        f"/facilities/{facility_id}/rooms",
        json={"name": "Meeting Room 1", "type": "meeting", "capacity": 10, "floor": 1},
    )
    assert room.status_code == 201
    return facility_id, room.json()["id"]


def test_reservation_flow_over_http() -> None:
    with _build_test_client() as client:
        facility_id, room_id = _create_room(client)
        base = f"/facilities/{facility_id}/rooms/{room_id}/reservations"

        first = client.post(base, json=_reservation_payload("2026-03-02T10:00:00Z", "2026-03-02T11:00:00Z"))
        assert first.status_code == 201
        assert first.json()["status"] == "scheduled"

        conflict = client.post(base, json=_reservation_payload("2026-03-02T10:30:00Z", "2026-03-02T11:30:00Z"))
        assert conflict.status_code == 409
        assert conflict.json()["detail"] == {
            "error": "Time slot is already reserved",
            "code": "time_conflict",
        }

        abutting = client.post(base, json=_reservation_payload("2026-03-02T11:00:00Z", "2026-03-02T12:00:00Z"))
        assert abutting.status_code == 201

        room = client.get(f"/facilities/{facility_id}/rooms/{room_id}").json()
        assert room["status"] == "reserved"
        assert len(room["reservations"]) == 2

        for reservation_id in (first.json()["id"], abutting.json()["id"]):
            cancelled = client.put(f"{base}/{reservation_id}/status", json={"status": "cancelled"})
            assert cancelled.status_code == 200

        room = client.get(f"/facilities/{facility_id}/rooms/{room_id}").json()
        assert room["status"] == "available"
        available = client.get(f"/facilities/{facility_id}/available_rooms", params={"type": "meeting"})
        assert [item["id"] for item in available.json()] == [room_id]

        deleted = client.delete(f"{base}/{first.json()['id']}")
        assert deleted.status_code == 200
        assert client.delete(f"{base}/{first.json()['id']}").status_code == 404


def test_reservation_errors_over_http() -> None:
    with _build_test_client() as client:
        facility_id, room_id = _create_room(client)
        base = f"/facilities/{facility_id}/rooms/{room_id}/reservations"

        inverted = client.post(base, json=_reservation_payload("2026-03-02T11:00:00Z", "2026-03-02T10:00:00Z"))
        assert inverted.status_code == 400

        missing = client.post(
            f"/facilities/{facility_id}/rooms/missing/reservations",
            json=_reservation_payload("2026-03-02T10:00:00Z", "2026-03-02T11:00:00Z"),
        )
        assert missing.status_code == 404

        client.patch(f"/facilities/{facility_id}/rooms/{room_id}", json={"status": "maintenance"})
        unavailable = client.post(base, json=_reservation_payload("2026-03-02T10:00:00Z", "2026-03-02T11:00:00Z"))
        assert unavailable.status_code == 409
        assert unavailable.json()["detail"]["code"] == "room_unavailable"


def test_route_flow_over_http() -> None:
    with _build_test_client() as client:
        driver = client.post(
            "/drivers",
            json={
                "name": "Joao Silva",
                "email": "joao.silva@example.com",
                "phone": "(11) 98765-4321",
                "license_number": "12345678901",
                "license_type": "D",
                "license_expiration": "2029-01-01",
            },
        ).json()
        vehicle = client.post(
            "/vehicles",
            json={
                "plate": "ABC-1234",
                "brand": "Volkswagen",
                "model": "Delivery 9.170",
                "year": 2022,
                "type": "truck",
                "fuel_type": "diesel",
                "fuel_efficiency": 8.5,
            },
        ).json()

        created = client.post(
            "/routes",
            json={
                "name": "South zone deliveries",
                "start_date": "2026-03-02",
                "end_date": "2026-03-02",
                "driver_id": driver["id"],
                "vehicle_id": vehicle["id"],
                "destinations": [
                    {"address": "Augusta St 1000", "scheduled_arrival": "2026-03-02T10:00:00Z", "order": 1},
                    {"address": "Paulista Ave 500", "scheduled_arrival": "2026-03-02T13:00:00Z", "order": 2},
                ],
            },
        )
        assert created.status_code == 201
        route = created.json()
        assert route["driver_name"] == "Joao Silva"

        busy = client.get("/drivers", params={"status": "on_route"}).json()
        assert [item["id"] for item in busy] == [driver["id"]]
        assert client.get(f"/vehicles/{vehicle['id']}").json()["status"] == "in_use"
        assert len(client.get("/routes/active").json()) == 1

        first_stop, last_stop = (item["id"] for item in route["destinations"])
        stop = client.post(f"/routes/{route['id']}/destinations/{first_stop}/complete")
        assert stop.status_code == 200
        assert stop.json()["actual_arrival"] is not None
        progress = client.get(f"/routes/{route['id']}/progress").json()
        assert progress == {"route_id": route["id"], "status": "in_progress", "progress_percentage": 50.0}

        client.post(f"/routes/{route['id']}/destinations/{last_stop}/complete")

        assert client.get(f"/routes/{route['id']}").json()["status"] == "completed"
        assert client.get(f"/drivers/{driver['id']}").json()["status"] == "available"
        assert client.get(f"/vehicles/{vehicle['id']}").json()["status"] == "available"
        assert client.get("/routes/active").json() == []


def test_route_with_unknown_vehicle_is_not_found() -> None:
    with _build_test_client() as client:
        response = client.post(
            "/routes",
            json={
                "name": "Ghost route",
                "start_date": "2026-03-02",
                "end_date": "2026-03-02",
                "driver_id": "missing",
                "vehicle_id": "missing",
            },
        )

        assert response.status_code == 404
        assert response.json()["detail"]["code"] == "not_found"
        assert client.get("/routes").json() == []


def test_utility_stats_endpoint() -> None:
    with _build_test_client() as client:
        facility_id, _ = _create_room(client)
        for month, reading, cost in ((9, 5200, 3120), (8, 5000, 3000)):
            response = client.post(
                f"/facilities/{facility_id}/utilities",
                json={
                    "type": "electricity",
                    "year": 2025,
                    "month": month,
                    "reading": reading,
                    "unit": "kWh",
                    "cost": cost,
                },
            )
            assert response.status_code == 201

        stats = client.get(
            f"/facilities/{facility_id}/utilities/stats",
            params={"type": "electricity", "year": 2025},
        ).json()

        assert stats["months"] == [8, 9]
        assert stats["total_cost"] == 6120.0


def test_patch_with_null_fields_keeps_stored_values() -> None:
    with _build_test_client() as client:
        facility_id, room_id = _create_room(client)
        room_url = f"/facilities/{facility_id}/rooms/{room_id}"

        for payload in ({"status": None}, {"name": None}):
            response = client.patch(room_url, json=payload)
            assert response.status_code == 200
            assert response.json()["status"] == "available"
            assert response.json()["name"] == "Meeting Room 1"

        renamed = client.patch(room_url, json={"name": "Board Room", "floor": None})
        assert renamed.status_code == 200
        assert renamed.json()["name"] == "Board Room"
        assert renamed.json()["floor"] == 1

        facility = client.patch(f"/facilities/{facility_id}", json={"status": None, "name": None})
        assert facility.status_code == 200
        assert facility.json()["status"] == "active"


def test_patch_with_invalid_window_is_bad_request() -> None:
    with _build_test_client() as client:
        facility_id, room_id = _create_room(client)
        base = f"/facilities/{facility_id}/rooms/{room_id}/reservations"
        booked = client.post(base, json=_reservation_payload("2026-03-02T10:00:00Z", "2026-03-02T11:00:00Z"))

        response = client.patch(
            f"{base}/{booked.json()['id']}",
            json={"end_time": "2026-03-02T09:00:00Z", "notes": None},
        )

        assert response.status_code == 400
        assert client.get(f"{base}").json()[0]["end_time"].startswith("2026-03-02T11:00:00")
