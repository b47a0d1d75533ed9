"""
Auto-generation service.

AutoGenerationPolicy decides whether end-of-month generation fires and for
which quarters; AutoScheduleService runs it across every active room and keeps
the run statistics on the config singleton.
"""

from datetime import datetime, timezone
from typing import List, Optional, Tuple
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from schedule_engine.core.exceptions import AppException, ConfigurationError, DependencyUnavailableError
from schedule_engine.core.integrations.events import EventPublisher
from schedule_engine.core.integrations.room_directory import RoomDirectory
from schedule_engine.core.logging import get_logger
from schedule_engine.db.repositories.auto_schedule_config_repository import AutoScheduleConfigRepository
from schedule_engine.models.auto_schedule_config import AUTO_SCHEDULE_CONFIG_ID
from schedule_engine.schemas.auto_schedule import (
    AutoGenerationReport,
    AutoPreviewResponse,
    AutoScheduleConfigResponse,
    AutoScheduleConfigUpdate,
    RoomPreview,
    RoomRunOutcome,
)
from schedule_engine.schemas.room import RoomInfo
from schedule_engine.schemas.schedule import QuarterSchema
from schedule_engine.services.base_service import BaseService
from schedule_engine.services.schedule_generation_service import ScheduleGenerationService
from schedule_engine.utils.civil_time import civil_now, to_civil
from schedule_engine.utils.quarters import (
    QuarterRef,
    is_last_day_of_month,
    is_last_day_of_quarter,
    next_schedulable_quarter,
    quarter_of,
)

logger = get_logger(__name__)


class AutoGenerationPolicy:
    """Decides when auto-generation fires and which quarters it targets."""

    def should_run(self, now: datetime, enabled: bool) -> bool:
        if not enabled:
            return False
        return is_last_day_of_month(now)

    def target_quarters(self, now: datetime) -> Tuple[Optional[QuarterRef], QuarterRef]:
        """
        (current, next) quarters to generate. On a quarter's last day the
        current quarter is skipped and `next` is the quarter after the
        upcoming one.
        """
        if is_last_day_of_quarter(now):
            return None, next_schedulable_quarter(now).following()
        current = quarter_of(now)
        return current, current.following()


def _quarter_schema(quarter: Optional[QuarterRef]) -> Optional[QuarterSchema]:
    if quarter is None:
        return None
    return QuarterSchema(**quarter.as_dict())


def _utc_naive(moment: datetime) -> datetime:
    if moment.tzinfo is None:
        return moment
    return moment.astimezone(timezone.utc).replace(tzinfo=None)


class AutoScheduleService(BaseService):
    """Service for the auto-generation config and runs."""

    def __init__(
        self,
        session: AsyncSession,
        room_directory: RoomDirectory,
        event_publisher: Optional[EventPublisher] = None,
        policy: Optional[AutoGenerationPolicy] = None,
    ):
        self.session = session
        self.room_directory = room_directory
        self.config_repo = AutoScheduleConfigRepository(session)
        self.generation_service = ScheduleGenerationService(session, room_directory, event_publisher)
        self.policy = policy or AutoGenerationPolicy()

    async def get_config(self) -> AutoScheduleConfigResponse:
        config = await self.config_repo.get_or_create()
        await self.session.commit()
        return AutoScheduleConfigResponse.model_validate(config)

    async def update_config(self, config_data: AutoScheduleConfigUpdate) -> AutoScheduleConfigResponse:
        """Enable or disable auto-generation."""
        config = await self.config_repo.get_or_create()
        config.enabled = config_data.enabled
        config.last_modified_by = config_data.modified_by
        await self.session.commit()
        await self.session.refresh(config)

        logger.info(
            f"Auto-generation {'enabled' if config.enabled else 'disabled'}",
            extra={"modified_by": config_data.modified_by},
        )
        return AutoScheduleConfigResponse.model_validate(config)

    async def run(self, now: Optional[datetime] = None, force: bool = False) -> AutoGenerationReport:
        """
        Run auto-generation for every active room.

        Per-room failures are recorded and the run continues. A missing global
        config or an unreadable room directory aborts the run after recording
        it as failed.
        """
        now = to_civil(now) if now is not None else civil_now()
        config = await self.config_repo.get_or_create()
        await self.session.commit()

        if not force and not self.policy.should_run(now, config.enabled):
            reason = "disabled" if not config.enabled else "not_last_day_of_month"
            logger.info(f"Auto-generation skipped: {reason}", extra={"now": now.isoformat()})
            return AutoGenerationReport(ran=False, reason=reason, run_at=now)

        current, upcoming = self.policy.target_quarters(now)
        report = AutoGenerationReport(
            ran=True,
            run_at=now,
            current_quarter=_quarter_schema(current),
            next_quarter=_quarter_schema(upcoming),
        )
        logger.info(
            "Auto-generation started",
            extra={"now": now.isoformat(), "current_quarter": str(current), "next_quarter": str(upcoming)},
        )

        try:
            await self.generation_service.load_global_config()
            rooms = await self.room_directory.list_active_rooms()
        except (ConfigurationError, DependencyUnavailableError) as exc:
            logger.error(f"Auto-generation aborted: {exc.message}")
            report.reason = f"aborted: {exc.message}"
            await self._record_run(now, succeeded=False)
            return report

        report.rooms_total = len(rooms)
        for room in rooms:
            outcome = await self._run_room(room, current, upcoming, now)
            report.rooms.append(outcome)
            if outcome.status == "succeeded":
                report.succeeded += 1
            elif outcome.status == "skipped":
                report.skipped += 1
            else:
                report.failed += 1

        await self._record_run(now, succeeded=report.failed == 0)
        logger.info(
            "Auto-generation finished",
            extra={
                "rooms": report.rooms_total,
                "succeeded": report.succeeded,
                "skipped": report.skipped,
                "failed": report.failed,
            },
        )
        return report

    async def _run_room(
        self,
        room: RoomInfo,
        current: Optional[QuarterRef],
        upcoming: QuarterRef,
        now: datetime,
    ) -> RoomRunOutcome:
        outcome = RoomRunOutcome(room_id=room.id, status="skipped")
        try:
            targets: List[QuarterRef] = []
            if current is not None:
                status = await self.generation_service.quarter_status_for(room, current.quarter, current.year, now)
                if not status.is_complete:
                    targets.append(current)
            targets.append(upcoming)

            for target in targets:
                outcome.reports.append(
                    await self.generation_service.generate_for_room_quarter(
                        room.id, target.quarter, target.year, now=now
                    )
                )
        except (AppException, SQLAlchemyError) as exc:
            await self.session.rollback()
            outcome.status = "failed"
            outcome.reason = self.reason_of(exc)
            logger.warning(
                f"Auto-generation failed for room {room.id}",
                extra={"room_id": room.id, "error": str(exc)},
            )
            return outcome

        failed = sum(report.failed for report in outcome.reports)
        succeeded = sum(report.succeeded for report in outcome.reports)
        if failed:
            outcome.status = "failed"
            outcome.reason = f"{failed} schedule(s) failed"
        elif succeeded:
            outcome.status = "succeeded"
        else:
            outcome.reason = "nothing_to_generate"
        return outcome

    async def _record_run(self, now: datetime, succeeded: bool) -> None:
        config = await self.config_repo.get_or_create()
        run_at = _utc_naive(now)
        config.last_auto_run = run_at
        config.total_auto_runs = (config.total_auto_runs or 0) + 1
        if succeeded:
            config.last_successful_run = run_at
        else:
            config.last_failed_run = run_at
        await self.session.commit()

    async def preview(self, now: Optional[datetime] = None) -> AutoPreviewResponse:
        """What `run` would target right now, without writing anything."""
        now = to_civil(now) if now is not None else civil_now()
        config = await self.config_repo.get(AUTO_SCHEDULE_CONFIG_ID)
        enabled = True if config is None else bool(config.enabled)

        current, upcoming = self.policy.target_quarters(now)
        rooms = await self.room_directory.list_active_rooms()

        previews = []
        for room in rooms:
            quarters = []
            for target in (current, upcoming):
                if target is None:
                    continue
                quarters.append(
                    await self.generation_service.quarter_status_for(room, target.quarter, target.year, now)
                )
            previews.append(RoomPreview(room_id=room.id, name=room.name, quarters=quarters))

        return AutoPreviewResponse(
            enabled=enabled,
            should_run=self.policy.should_run(now, enabled),
            now=now,
            current_quarter=_quarter_schema(current),
            next_quarter=_quarter_schema(upcoming),
            rooms=previews,
        )

