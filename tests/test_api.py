"""
HTTP API tests for configuration, generation and schedule management.
"""

from datetime import date, timedelta

import pytest
from httpx import AsyncClient

from schedule_engine.core.integrations.events import ROOM_SCHEDULE_UPDATED

YEAR = date.today().year + 1

SHIFTS = [
    {"name": "morning", "label": "Morning", "start_time": "08:00", "end_time": "12:00"},
    {"name": "afternoon", "label": "Afternoon", "start_time": "13:00", "end_time": "17:00"},
    {"name": "evening", "label": "Evening", "start_time": "18:00", "end_time": "21:00"},
]


def _first_sunday(month: int, year: int) -> date:
    day = date(year, month, 1)
    return day + timedelta(days=(6 - day.weekday()) % 7)


async def _generate(client: AsyncClient, **payload) -> dict:
    body = {"room_id": "room-a", "month": 6, "year": YEAR, **payload}
    response = await client.post("/api/v1/schedules/generate/month", json=body)
    assert response.status_code == 200, response.text
    return response.json()


async def test_schedule_config_lifecycle(test_client: AsyncClient):
    response = await test_client.get("/api/v1/schedule-config")
    assert response.status_code == 404
    assert response.json()["error"]["type"] == "NotFoundError"

    response = await test_client.put("/api/v1/schedule-config", json={"shifts": SHIFTS[:1]})
    assert response.status_code == 422

    response = await test_client.put("/api/v1/schedule-config", json={"unit_duration": 20, "shifts": SHIFTS})
    assert response.status_code == 200
    data = response.json()
    assert data["unit_duration"] == 20
    assert [shift["name"] for shift in data["shifts"]] == ["morning", "afternoon", "evening"]

    response = await test_client.put(
        "/api/v1/schedule-config",
        json={"shifts": [{**SHIFTS[2], "end_time": "20:00", "is_active": False}]},
    )
    assert response.status_code == 200
    evening = response.json()["shifts"][2]
    assert evening["end_time"] == "20:00"
    assert evening["is_active"] is False
    assert response.json()["unit_duration"] == 20


async def test_shift_window_validation(test_client: AsyncClient):
    bad = [{**SHIFTS[0], "start_time": "12:00", "end_time": "08:00"}, *SHIFTS[1:]]
    response = await test_client.put("/api/v1/schedule-config", json={"shifts": bad})
    assert response.status_code == 422

    response = await test_client.put("/api/v1/schedule-config", json={"shifts": [{**SHIFTS[0], "name": "night"}]})
    assert response.status_code == 422


async def test_holiday_rules(test_client: AsyncClient):
    response = await test_client.post(
        "/api/v1/holidays", json={"name": "Sunday", "is_recurring": True, "day_of_week": 1}
    )
    assert response.status_code == 201
    assert response.json()["start_date"] is None

    response = await test_client.post(
        "/api/v1/holidays", json={"name": "Sunday again", "is_recurring": True, "day_of_week": 1}
    )
    assert response.status_code == 409

    response = await test_client.post(
        "/api/v1/holidays",
        json={"name": "Backwards", "start_date": f"{YEAR}-06-10", "end_date": f"{YEAR}-06-01"},
    )
    assert response.status_code == 422

    response = await test_client.post(
        "/api/v1/holidays",
        json={"name": "Festival", "start_date": f"{YEAR}-06-10", "end_date": f"{YEAR}-06-11"},
    )
    assert response.status_code == 201

    response = await test_client.get("/api/v1/holidays", params={"is_recurring": "true"})
    assert [rule["name"] for rule in response.json()["items"]] == ["Sunday"]


async def test_used_holiday_cannot_be_deleted(test_client: AsyncClient, schedule_config):
    response = await test_client.post(
        "/api/v1/holidays",
        json={"name": "Festival", "start_date": f"{YEAR}-06-10", "end_date": f"{YEAR}-06-11"},
    )
    festival_id = response.json()["id"]
    response = await test_client.post(
        "/api/v1/holidays",
        json={"name": "Later", "start_date": f"{YEAR}-09-01", "end_date": f"{YEAR}-09-02"},
    )
    later_id = response.json()["id"]

    generated = await _generate(test_client, shift_names=["morning"])
    assert generated["slots_created"] == 28

    response = await test_client.delete(f"/api/v1/holidays/{festival_id}")
    assert response.status_code == 422
    assert response.json()["error"]["details"]["reason"] == "holiday_in_use"

    response = await test_client.delete(f"/api/v1/holidays/{later_id}")
    assert response.status_code == 204
    response = await test_client.delete(f"/api/v1/holidays/{later_id}")
    assert response.status_code == 404


async def test_generate_and_read_schedule(test_client: AsyncClient, schedule_config, publisher):
    generated = await _generate(test_client)
    assert generated["created"] is True
    assert generated["slots_created"] == 30 * 3
    schedule_id = generated["schedule_id"]
    assert publisher.events(ROOM_SCHEDULE_UPDATED)[0]["roomId"] == "room-a"

    again = await _generate(test_client)
    assert again["created"] is False
    assert again["reason"] == "already_generated"

    response = await test_client.get(f"/api/v1/schedules/{schedule_id}")
    assert response.status_code == 200
    schedule = response.json()
    assert schedule["start_date"] == f"{YEAR}-06-01"
    assert schedule["shift_config"]["morning"]["slot_duration"] == 240
    assert schedule["shift_config"]["morning"]["is_generated"] is True

    response = await test_client.get("/api/v1/schedules", params={"room_id": "room-a", "year": YEAR})
    assert response.json()["total"] == 1

    response = await test_client.get(
        f"/api/v1/schedules/{schedule_id}/slots", params={"date": f"{YEAR}-06-02"}
    )
    slots = response.json()["items"]
    assert [slot["shift_name"] for slot in slots] == ["morning", "afternoon", "evening"]
    assert slots[0]["status"] == "available"

    response = await test_client.get("/api/v1/schedules/rooms/room-a/quarter-status", params={"quarter": 2, "year": YEAR})
    assert response.status_code == 200
    assert response.json()["months"][2]["scopes_generated"] == 1


async def test_generation_errors(test_client: AsyncClient, schedule_config):
    response = await test_client.post(
        "/api/v1/schedules/generate/month", json={"room_id": "room-a", "month": 1, "year": 2020}
    )
    assert response.status_code == 422
    assert response.json()["error"]["details"]["reason"] == "month_in_past"

    response = await test_client.post(
        "/api/v1/schedules/generate/month", json={"room_id": "room-x", "month": 6, "year": YEAR}
    )
    assert response.status_code == 404

    response = await test_client.post(
        "/api/v1/schedules/generate/month", json={"room_id": "room-a", "month": 13, "year": YEAR}
    )
    assert response.status_code == 422


async def test_generation_without_config(test_client: AsyncClient):
    response = await test_client.post(
        "/api/v1/schedules/generate/month", json={"room_id": "room-a", "month": 6, "year": YEAR}
    )
    assert response.status_code == 500
    assert response.json()["error"]["type"] == "ConfigurationError"


async def test_generate_quarter_and_add_missing_shifts(test_client: AsyncClient, schedule_config):
    response = await test_client.post(
        "/api/v1/schedules/generate/quarter",
        json={"room_id": "room-b", "quarter": 3, "year": YEAR, "shift_names": ["evening"], "slot_duration": 60},
    )
    assert response.status_code == 200
    report = response.json()
    assert report["succeeded"] == 6
    assert report["slots_created"] == 2 * (31 + 31 + 30) * 3

    response = await test_client.post(
        "/api/v1/schedules/add-missing-shifts",
        json={"room_id": "room-b", "sub_room_id": "sub-1", "month": 7, "year": YEAR, "shift_names": ["morning"]},
    )
    assert response.status_code == 200
    assert response.json()["slots_created"] == 31 * 4


async def test_override_and_toggle(test_client: AsyncClient, schedule_config, sunday_holiday):
    generated = await _generate(test_client)
    schedule_id = generated["schedule_id"]
    sunday = _first_sunday(6, YEAR)

    response = await test_client.post(
        f"/api/v1/schedules/{schedule_id}/overrides",
        json={"date": sunday.isoformat(), "shift_names": ["morning"], "note": "Vaccination day"},
    )
    assert response.status_code == 200
    assert response.json()["slots_created"] == 1

    response = await test_client.post(
        "/api/v1/schedules/overrides/batch",
        json={"schedule_ids": [schedule_id], "date": sunday.isoformat(), "shift_names": ["morning"]},
    )
    assert response.json()["items"][0]["reason"] == "already_overridden"

    response = await test_client.post(
        f"/api/v1/schedules/{schedule_id}/overrides",
        json={"date": (sunday + timedelta(days=1)).isoformat(), "shift_names": ["morning"]},
    )
    assert response.status_code == 422
    assert response.json()["error"]["details"]["reason"] == "not_a_holiday"

    response = await test_client.patch(f"/api/v1/schedules/{schedule_id}/toggle", json={})
    assert response.status_code == 422

    response = await test_client.patch(
        f"/api/v1/schedules/{schedule_id}/toggle",
        json={"shift_toggles": [{"shift_name": "evening", "is_active": False}]},
    )
    assert response.status_code == 422
    assert response.json()["error"]["details"]["reason"] == "date_range_required"

    response = await test_client.patch(f"/api/v1/schedules/{schedule_id}/toggle", json={"is_active": False})
    assert response.status_code == 200
    assert response.json()["is_active"] is False
    assert response.json()["slots_updated"] == generated["slots_created"] + 1


async def test_staff_assignment(test_client: AsyncClient, schedule_config):
    room = await _generate(test_client, shift_names=["morning"])
    sub_room = await _generate(test_client, room_id="room-b", sub_room_id="sub-1", shift_names=["morning"])
    day = f"{YEAR}-06-03"

    response = await test_client.get(f"/api/v1/schedules/{room['schedule_id']}/slots", params={"date": day})
    room_slot = response.json()["items"][0]["id"]
    response = await test_client.get(f"/api/v1/schedules/{sub_room['schedule_id']}/slots", params={"date": day})
    sub_room_slot = response.json()["items"][0]["id"]

    response = await test_client.patch("/api/v1/slots/staff", json={"slot_ids": [room_slot]})
    assert response.status_code == 422

    response = await test_client.patch("/api/v1/slots/staff", json={"slot_ids": [room_slot], "dentist_id": "d-1"})
    assert response.status_code == 200
    assert response.json()["updated"] == 1

    response = await test_client.post("/api/v1/slots/conflicts", json={"staff_id": "d-1", "slot_ids": [sub_room_slot]})
    assert response.json()["has_conflicts"] is True

    response = await test_client.patch("/api/v1/slots/staff", json={"slot_ids": [sub_room_slot], "dentist_id": "d-1"})
    assert response.status_code == 409
    assert response.json()["error"]["type"] == "ConflictError"


async def test_delete_schedule(test_client: AsyncClient, schedule_config):
    generated = await _generate(test_client, shift_names=["morning"])
    schedule_id = generated["schedule_id"]

    response = await test_client.delete(f"/api/v1/schedules/{schedule_id}")
    assert response.status_code == 204

    response = await test_client.get(f"/api/v1/schedules/{schedule_id}")
    assert response.status_code == 404
    response = await test_client.get(f"/api/v1/schedules/{schedule_id}/slots")
    assert response.status_code == 404

    # Generation starts over for the freed key
    regenerated = await _generate(test_client, shift_names=["morning"])
    assert regenerated["created"] is True


async def test_auto_schedule_endpoints(test_client: AsyncClient, schedule_config):
    response = await test_client.get("/api/v1/auto-schedule/config")
    assert response.status_code == 200
    assert response.json()["enabled"] is True

    response = await test_client.put("/api/v1/auto-schedule/config", json={"enabled": False, "modified_by": "ops"})
    assert response.json()["enabled"] is False

    response = await test_client.post("/api/v1/auto-schedule/run", json={})
    assert response.status_code == 200
    assert response.json()["ran"] is False
    assert response.json()["reason"] == "disabled"

    response = await test_client.get("/api/v1/auto-schedule/preview")
    assert response.status_code == 200
    assert response.json()["enabled"] is False
    assert len(response.json()["rooms"]) == 2


async def test_room_events_never_fail(test_client: AsyncClient, schedule_config):
    response = await test_client.post("/api/v1/room-events/room-created", json={"roomId": "room-x"})
    assert response.status_code == 200
    assert response.json()["handled"] is False

    response = await test_client.post(
        "/api/v1/room-events/sub-room-added", json={"roomId": "room-b", "subRoomIds": ["sub-1"]}
    )
    assert response.status_code == 200
    assert response.json()["reason"] == "no_open_schedules"
