"""
Staff conflict detection and staff assignment.
"""

from typing import Dict, Iterable, List, Optional, Sequence
from uuid import UUID
from sqlalchemy.ext.asyncio import AsyncSession

from schedule_engine.core.exceptions import ConflictError, NotFoundError, ValidationError
from schedule_engine.core.logging import get_logger
from schedule_engine.db.repositories.slot_repository import SlotRepository
from schedule_engine.models.schedule import Slot, SlotStatus
from schedule_engine.schemas.slot import (
    AssignStaffResponse,
    ConflictCheckResponse,
    ConflictingAssignment,
)
from schedule_engine.services.base_service import BaseService
from schedule_engine.utils.slot_windows import overlaps

logger = get_logger(__name__)


def detect_conflicts(
    staff_id: str,
    candidates: Iterable[Slot],
    assigned: Iterable[Slot],
) -> List[ConflictingAssignment]:
    """
    Slots in `assigned` that hold `staff_id` in either role and overlap a
    candidate in time, excluding slots of the candidate's own schedule.
    De-duplicated by slot id.
    """
    assigned = [
        slot for slot in assigned
        if slot.dentist_id == staff_id or slot.nurse_id == staff_id
    ]
    seen = set()
    conflicts = []
    for candidate in candidates:
        for slot in assigned:
            if slot.id == candidate.id or slot.id in seen:
                continue
            if slot.schedule_id == candidate.schedule_id:
                continue
            if not overlaps(candidate.start_time, candidate.end_time, slot.start_time, slot.end_time):
                continue
            seen.add(slot.id)
            conflicts.append(ConflictingAssignment(
                candidate_slot_id=candidate.id,
                slot_id=slot.id,
                schedule_id=slot.schedule_id,
                room_id=slot.room_id,
                sub_room_id=slot.sub_room_id,
                date=slot.date,
                start_time=slot.start_time,
                end_time=slot.end_time,
                shift_name=slot.shift_name,
                role="dentist" if slot.dentist_id == staff_id else "nurse",
            ))
    return conflicts


class ConflictService(BaseService):
    """Service for staff conflicts and assignment."""

    def __init__(self, session: AsyncSession):
        self.session = session
        self.slot_repo = SlotRepository(session)

    async def _load_slots(self, slot_ids: Sequence[UUID]) -> List[Slot]:
        unique_ids = list(dict.fromkeys(slot_ids))
        slots = await self.slot_repo.list_by_ids(unique_ids)
        found = {slot.id for slot in slots}
        missing = [str(slot_id) for slot_id in unique_ids if slot_id not in found]
        if missing:
            raise NotFoundError("Slot(s) not found", details={"slot_ids": missing})
        return slots

    async def _conflicts_for(self, staff_id: str, candidates: List[Slot]) -> List[ConflictingAssignment]:
        window_start = min(slot.start_time for slot in candidates)
        window_end = max(slot.end_time for slot in candidates)
        assigned = await self.slot_repo.find_by_staff_in_window(staff_id, window_start, window_end)
        return detect_conflicts(staff_id, candidates, assigned)

    async def find_conflicts(self, staff_id: str, slot_ids: Sequence[UUID]) -> ConflictCheckResponse:
        """Existing assignments of `staff_id` that overlap the candidate slots."""
        candidates = await self._load_slots(slot_ids)
        conflicts = await self._conflicts_for(staff_id, candidates)
        return ConflictCheckResponse(staff_id=staff_id, has_conflicts=bool(conflicts), conflicts=conflicts)

    async def assign_staff(
        self,
        slot_ids: Sequence[UUID],
        dentist_id: Optional[str] = None,
        nurse_id: Optional[str] = None,
    ) -> AssignStaffResponse:
        """
        Assign staff to slots of one room scope in a single update.

        Raises:
            NotFoundError: a slot does not exist
            ValidationError: a slot is booked, or slots span several rooms/sub-rooms
            ConflictError: a staff member is already assigned to an overlapping slot
        """
        slots = await self._load_slots(slot_ids)

        booked = [
            str(slot.id) for slot in slots
            if slot.status == SlotStatus.BOOKED or slot.appointment_id is not None
        ]
        if booked:
            raise ValidationError("Booked slots cannot be reassigned", details={"slot_ids": booked, "reason": "slot_booked"})

        scopes = {(slot.room_id, slot.sub_room_id) for slot in slots}
        if len(scopes) > 1:
            raise ValidationError(
                "Slots must belong to the same room or sub-room",
                details={"reason": "mixed_scopes"},
            )

        conflicts: List[ConflictingAssignment] = []
        values: Dict[str, str] = {}
        for role, staff_id in (("dentist_id", dentist_id), ("nurse_id", nurse_id)):
            if not staff_id:
                continue
            values[role] = staff_id
            conflicts.extend(await self._conflicts_for(staff_id, slots))

        if conflicts:
            raise ConflictError(
                "Staff already assigned to overlapping slots",
                details={"conflicts": [conflict.model_dump(mode="json") for conflict in conflicts]},
            )

        updated = await self.slot_repo.update_many([slot.id for slot in slots], **values)
        await self.session.commit()

        logger.info(
            "Staff assigned",
            extra={"slots": updated, "dentist_id": dentist_id, "nurse_id": nurse_id},
        )
        return AssignStaffResponse(
            updated=updated,
            slot_ids=[slot.id for slot in slots],
            dentist_id=dentist_id,
            nurse_id=nurse_id,
        )
