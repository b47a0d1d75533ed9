"""
Schedule config service: global shift windows, unit duration and holiday rules.
"""

from typing import Optional
from uuid import UUID
from sqlalchemy.ext.asyncio import AsyncSession

from schedule_engine.core.exceptions import DuplicateKeyError, NotFoundError, ValidationError
from schedule_engine.core.logging import get_logger
from schedule_engine.db.repositories.holiday_rule_repository import HolidayRuleRepository
from schedule_engine.db.repositories.schedule_config_repository import ScheduleConfigRepository
from schedule_engine.models.schedule_config import SCHEDULE_CONFIG_SINGLETON, SHIFT_NAMES, ShiftDefinition
from schedule_engine.schemas.schedule_config import (
    HolidayRuleCreate,
    HolidayRuleListResponse,
    HolidayRuleResponse,
    ScheduleConfigResponse,
    ScheduleConfigUpdate,
)
from schedule_engine.services.base_service import BaseService

logger = get_logger(__name__)


class ScheduleConfigService(BaseService):
    """Service for the global schedule config and holiday rules."""

    def __init__(self, session: AsyncSession):
        self.session = session
        self.config_repo = ScheduleConfigRepository(session)
        self.holiday_repo = HolidayRuleRepository(session)

    async def get_config(self) -> ScheduleConfigResponse:
        config = await self.config_repo.get_singleton()
        if config is None:
            raise NotFoundError("Schedule config has not been set up")
        return ScheduleConfigResponse.model_validate(config)

    async def update_config(self, config_data: ScheduleConfigUpdate) -> ScheduleConfigResponse:
        """
        Create or update the global config. The first write must define all
        three shifts. Existing schedules keep their own snapshots.
        """
        config = await self.config_repo.get_singleton()

        if config is None:
            names = {shift.name for shift in config_data.shifts or []}
            if names != set(SHIFT_NAMES):
                raise ValidationError(
                    "The first schedule config must define the morning, afternoon and evening shifts",
                    details={"shifts": sorted(names)},
                )
            config = await self.config_repo.create(
                singleton_key=SCHEDULE_CONFIG_SINGLETON,
                unit_duration=config_data.unit_duration or 15,
                max_booking_days=config_data.max_booking_days or 30,
            )
            config = await self.config_repo.get_singleton(reload=True)
        else:
            if config_data.unit_duration is not None:
                config.unit_duration = config_data.unit_duration
            if config_data.max_booking_days is not None:
                config.max_booking_days = config_data.max_booking_days

        existing = {shift.name: shift for shift in config.shifts}
        for shift_data in config_data.shifts or []:
            shift = existing.get(shift_data.name)
            if shift is None:
                config.shifts.append(ShiftDefinition(
                    name=shift_data.name,
                    label=shift_data.label,
                    start_time=shift_data.start_time,
                    end_time=shift_data.end_time,
                    is_active=shift_data.is_active,
                    position=SHIFT_NAMES.index(shift_data.name),
                ))
            else:
                shift.label = shift_data.label
                shift.start_time = shift_data.start_time
                shift.end_time = shift_data.end_time
                shift.is_active = shift_data.is_active

        await self.session.commit()
        config = await self.config_repo.get_singleton(reload=True)

        logger.info(
            "Schedule config updated",
            extra={"unit_duration": config.unit_duration, "shifts": [shift.name for shift in config.shifts]},
        )
        return ScheduleConfigResponse.model_validate(config)

    async def list_holidays(self, is_recurring: Optional[bool] = None) -> HolidayRuleListResponse:
        rules = await self.holiday_repo.list_all(is_recurring=is_recurring)
        return HolidayRuleListResponse(
            items=[HolidayRuleResponse.model_validate(rule) for rule in rules],
            total=len(rules),
        )

    async def create_holiday(self, holiday_data: HolidayRuleCreate) -> HolidayRuleResponse:
        """Create a holiday rule. Only affects schedules generated afterwards."""
        if holiday_data.is_recurring:
            for rule in await self.holiday_repo.list_all(is_recurring=True):
                if rule.day_of_week == holiday_data.day_of_week:
                    raise DuplicateKeyError(
                        f"A recurring holiday already exists for day {holiday_data.day_of_week}",
                        details={"holiday_id": str(rule.id)},
                    )

        rule = await self.holiday_repo.create(**holiday_data.model_dump())
        await self.session.commit()
        await self.session.refresh(rule)
        return HolidayRuleResponse.model_validate(rule)

    async def delete_holiday(self, holiday_id: UUID) -> bool:
        """
        Delete a holiday rule.

        Raises:
            ValidationError: rule was already captured in a schedule snapshot
        """
        rule = await self.holiday_repo.get(holiday_id)
        if rule is None:
            return False
        if rule.has_been_used:
            raise ValidationError(
                "Holiday has been used by a generated schedule and cannot be deleted",
                details={"holiday_id": str(holiday_id), "reason": "holiday_in_use"},
            )
        deleted = await self.holiday_repo.delete(holiday_id)
        await self.session.commit()
        return deleted
