"""Run the delayed-action worker: resume or cancel suspended workflow runs.

Usage:
    python -m scripts.run_workflow_scheduler [--once]
With --once, processes the resumptions due now and exits; otherwise polls
every SCHEDULER_POLL_INTERVAL_SECONDS until interrupted.
Requires DATABASE_URL (and Redis settings when SCHEDULER_BACKEND=redis).
"""

import asyncio
import signal
import sys

import httpx
import redis.asyncio as redis

from poam_automation.core.config import get_settings
import poam_automation.infrastructure.persistence.database as database
from poam_automation.infrastructure.composition import build_workflow_engine
from poam_automation.shared.telemetry.logging import setup_logging


async def main() -> None:
    """Build the engine and run the resumption worker."""
    settings = get_settings()
    setup_logging()
    once = "--once" in sys.argv[1:]

    redis_client = None
    if settings.scheduler_backend == "redis":
        redis_client = redis.Redis(
            host=settings.redis_host,
            port=settings.redis_port,
            db=settings.redis_db,
            password=(
                settings.redis_password.get_secret_value() if settings.redis_password else None
            ),
            decode_responses=True,
            socket_connect_timeout=5,
            socket_keepalive=True,
        )

    try:
        async with httpx.AsyncClient(timeout=settings.outbound_timeout_seconds) as http_client:
            engine = build_workflow_engine(
                settings,
                database.get_session_factory(),
                http_client,
                redis_client,
            )
            if once:
                result = await engine.resume_worker.run_due()
                print(
                    f"Claimed {result.claimed}: resumed {result.resumed}, "
                    f"cancelled {result.cancelled}, errors {len(result.error_execution_ids)}"
                )
                if result.error_execution_ids:
                    sys.exit(1)
                return

            stop_event = asyncio.Event()
            loop = asyncio.get_running_loop()
            for sig in (signal.SIGINT, signal.SIGTERM):
                loop.add_signal_handler(sig, stop_event.set)
            await engine.resume_worker.run_forever(
                settings.scheduler_poll_interval_seconds, stop_event
            )
    finally:
        if redis_client is not None:
            await redis_client.aclose()
        await database.dispose_engine()


if __name__ == "__main__":
    asyncio.run(main())
