"""
Workers Package

Background evaluation jobs with ARQ (async Redis queue).
"""

from workers.settings import WorkerSettings, get_redis_settings
from workers.evaluation import run_evaluation_job
from workers.queue import (
    get_redis_pool,
    close_redis_pool,
    enqueue_evaluation_job,
    get_job_status,
    get_job_by_project,
    cancel_job,
    JobNotCancellableError
)

__all__ = [
    # Settings
    "WorkerSettings",
    "get_redis_settings",
    # Jobs
    "run_evaluation_job",
    # Queue operations
    "get_redis_pool",
    "close_redis_pool",
    "enqueue_evaluation_job",
    "get_job_status",
    "get_job_by_project",
    "cancel_job",
    "JobNotCancellableError"
]
