"""
Shared slowapi limiter.
"""

from slowapi import Limiter
from slowapi.util import get_remote_address

from schedule_engine.core.config import settings

limiter = Limiter(key_func=get_remote_address, enabled=settings.RATE_LIMIT_ENABLED)

# Applied to endpoints that fan out into bulk slot generation
GENERATION_RATE_LIMIT = f"{settings.RATE_LIMIT_PER_MINUTE}/minute"
