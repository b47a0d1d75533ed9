"""
Auto-generation configuration singleton with run statistics.
"""

from sqlalchemy import Column, String, Integer, Boolean, DateTime, func

from schedule_engine.db.base import Base

AUTO_SCHEDULE_CONFIG_ID = "global_auto_schedule_config"


class AutoScheduleConfig(Base):
    """Global on/off switch for end-of-month generation."""

    __tablename__ = "auto_schedule_configs"

    id = Column(String(64), primary_key=True, default=AUTO_SCHEDULE_CONFIG_ID)
    enabled = Column(Boolean, nullable=False, default=True)
    last_modified_by = Column(String(255), nullable=True)

    # Run statistics
    last_auto_run = Column(DateTime, nullable=True)
    total_auto_runs = Column(Integer, nullable=False, default=0)
    last_successful_run = Column(DateTime, nullable=True)
    last_failed_run = Column(DateTime, nullable=True)

    created_at = Column(DateTime, nullable=False, server_default=func.now())
    updated_at = Column(DateTime, nullable=False, server_default=func.now(), onupdate=func.now())
