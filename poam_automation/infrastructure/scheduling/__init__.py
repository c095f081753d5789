"""Delayed-action scheduling backends (Redis); the SQL backend lives with the repositories."""

from poam_automation.infrastructure.scheduling.redis_resumption_queue import (
    RedisResumptionQueue,
)

__all__ = ["RedisResumptionQueue"]
