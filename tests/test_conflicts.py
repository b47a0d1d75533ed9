"""
Staff conflict detection and assignment tests.
"""

from datetime import date, datetime
from types import SimpleNamespace
from uuid import uuid4

import pytest

from schedule_engine.core.exceptions import ConflictError, NotFoundError, ValidationError
from schedule_engine.db.repositories.slot_repository import SlotRepository
from schedule_engine.models.schedule import SlotStatus
from schedule_engine.services.conflict_service import ConflictService, detect_conflicts
from schedule_engine.services.schedule_generation_service import ScheduleGenerationService
from tests.factories import civil


def _slot(schedule_id, start_hour, start_minute, end_hour, end_minute, dentist_id=None, nurse_id=None):
    return SimpleNamespace(
        id=uuid4(),
        schedule_id=schedule_id,
        room_id="room",
        sub_room_id=None,
        date=date(2025, 4, 1),
        start_time=datetime(2025, 4, 1, start_hour, start_minute),
        end_time=datetime(2025, 4, 1, end_hour, end_minute),
        shift_name="morning",
        dentist_id=dentist_id,
        nurse_id=nurse_id,
    )


def test_conflicts_are_symmetric():
    first_schedule, second_schedule = uuid4(), uuid4()
    long_slot = _slot(first_schedule, 1, 0, 5, 0)
    short_slot = _slot(second_schedule, 2, 0, 2, 15)

    long_slot.dentist_id = "d-1"
    forward = detect_conflicts("d-1", [short_slot], [long_slot])

    long_slot.dentist_id, short_slot.dentist_id = None, "d-1"
    backward = detect_conflicts("d-1", [long_slot], [short_slot])

    assert [conflict.slot_id for conflict in forward] == [long_slot.id]
    assert [conflict.slot_id for conflict in backward] == [short_slot.id]


def test_adjacent_slots_do_not_conflict():
    assigned = _slot(uuid4(), 1, 0, 1, 15, nurse_id="n-1")
    candidate = _slot(uuid4(), 1, 15, 1, 30)
    assert detect_conflicts("n-1", [candidate], [assigned]) == []


def test_same_schedule_and_other_staff_are_ignored():
    schedule_id = uuid4()
    assigned = _slot(schedule_id, 1, 0, 2, 0, dentist_id="d-1")
    candidate = _slot(schedule_id, 1, 0, 2, 0)
    assert detect_conflicts("d-1", [candidate], [assigned]) == []
    assert detect_conflicts("d-2", [_slot(uuid4(), 1, 0, 2, 0)], [assigned]) == []


def test_nurse_role_and_deduplication():
    assigned = _slot(uuid4(), 1, 0, 5, 0, nurse_id="n-1")
    candidates = [_slot(uuid4(), 1, 0, 1, 15), _slot(uuid4(), 1, 15, 1, 30)]
    conflicts = detect_conflicts("n-1", candidates, [assigned])
    assert len(conflicts) == 1
    assert conflicts[0].role == "nurse"


@pytest.fixture
async def slots(test_db_session, room_directory, schedule_config):
    """First April 1 morning slot of room-a (08:00-12:00) and of room-b/sub-1 (08:00-08:15)."""
    generation = ScheduleGenerationService(test_db_session, room_directory)
    now = civil(2025, 3, 15)
    room = await generation.generate_for_room_month("room-a", None, 4, 2025, ["morning"], now=now)
    sub_room = await generation.generate_for_room_month("room-b", "sub-1", 4, 2025, ["morning"], now=now)

    slot_repo = SlotRepository(test_db_session)
    room_slots = await slot_repo.list_by_schedule(room.schedule_id, day=date(2025, 4, 1))
    sub_room_slots = await slot_repo.list_by_schedule(sub_room.schedule_id, day=date(2025, 4, 1))
    return room_slots[0], sub_room_slots[0], sub_room_slots[1]


@pytest.fixture
def service(test_db_session):
    return ConflictService(test_db_session)


async def test_assignment_blocks_overlapping_slots(service, slots):
    room_slot, sub_room_slot, _ = slots

    assigned = await service.assign_staff([room_slot.id], dentist_id="d-1")
    assert assigned.updated == 1

    check = await service.find_conflicts("d-1", [sub_room_slot.id])
    assert check.has_conflicts is True
    assert check.conflicts[0].slot_id == room_slot.id
    assert check.conflicts[0].role == "dentist"

    with pytest.raises(ConflictError) as exc_info:
        await service.assign_staff([sub_room_slot.id], dentist_id="d-1")
    assert exc_info.value.details["conflicts"][0]["slot_id"] == str(room_slot.id)

    # Other staff are free to take the overlapping slot
    other = await service.assign_staff([sub_room_slot.id], dentist_id="d-2", nurse_id="n-1")
    assert other.updated == 1


async def test_conflict_check_is_symmetric_across_rooms(service, slots):
    room_slot, sub_room_slot, _ = slots
    await service.assign_staff([sub_room_slot.id], nurse_id="n-1")

    check = await service.find_conflicts("n-1", [room_slot.id])
    assert [conflict.slot_id for conflict in check.conflicts] == [sub_room_slot.id]
    assert check.conflicts[0].role == "nurse"


async def test_no_conflicts_within_free_slots(service, slots):
    _, first, second = slots
    check = await service.find_conflicts("d-1", [first.id, second.id])
    assert check.has_conflicts is False


async def test_assignment_rejects_mixed_scopes(service, slots):
    room_slot, sub_room_slot, _ = slots
    with pytest.raises(ValidationError) as exc_info:
        await service.assign_staff([room_slot.id, sub_room_slot.id], dentist_id="d-1")
    assert exc_info.value.details["reason"] == "mixed_scopes"


async def test_assignment_rejects_booked_slots(service, test_db_session, slots):
    _, sub_room_slot, _ = slots
    sub_room_slot.status = SlotStatus.BOOKED
    await test_db_session.commit()

    with pytest.raises(ValidationError) as exc_info:
        await service.assign_staff([sub_room_slot.id], dentist_id="d-1")
    assert exc_info.value.details["reason"] == "slot_booked"


async def test_unknown_slot(service, slots):
    with pytest.raises(NotFoundError):
        await service.find_conflicts("d-1", [uuid4()])
