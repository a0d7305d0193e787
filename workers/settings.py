"""
ARQ Worker Settings

Configuration for the async Redis queue worker that runs queued
project evaluations.
"""

import logging

from arq.connections import RedisSettings

from config.settings import settings
from config.logging_config import setup_logging

logger = logging.getLogger("intellibid.workers")


def get_redis_settings() -> RedisSettings:
    """Redis connection settings parsed from REDIS_URL (redis://[:password@]host[:port][/db])."""
    return RedisSettings.from_dsn(settings.redis_url)


class WorkerSettings:
    """
    ARQ Worker configuration.

    Usage:
        arq workers.settings.WorkerSettings
    """

    redis_settings = get_redis_settings()

    functions = [
        "workers.evaluation.run_evaluation_job",
    ]

    # Evaluations hold six concurrent LLM calls each
    max_jobs = 2
    job_timeout = 1800
    keep_result = 3600

    # A failed evaluation is recorded in the job hash, not retried
    max_tries = 1

    health_check_interval = 30

    @staticmethod
    async def on_startup(ctx):
        setup_logging(settings.log_level)
        logger.info("ARQ worker starting...")

    @staticmethod
    async def on_shutdown(ctx):
        from database.connection import close_db
        await close_db()
        logger.info("ARQ worker shutting down...")
