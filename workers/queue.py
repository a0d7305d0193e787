"""
Job Queue Service

Helper functions to enqueue evaluation jobs and check their status.
"""

import uuid
from datetime import datetime, timezone
from typing import Optional, Dict, Any

from arq import create_pool
from arq.connections import ArqRedis

from workers.settings import get_redis_settings


JOB_TTL_SECONDS = 86400


class JobNotCancellableError(ValueError):
    """Raised when a job has already left the queue."""

    def __init__(self, job_id: str, status: str):
        self.job_id = job_id
        self.status = status
        super().__init__(f"Job {job_id} is {status}; only queued jobs can be cancelled")


# Module-level connection pool
_redis_pool: Optional[ArqRedis] = None


def job_key(job_id: str) -> str:
    return f"job:{job_id}"


async def get_redis_pool() -> ArqRedis:
    """Get or create Redis connection pool."""
    global _redis_pool
    if _redis_pool is None:
        _redis_pool = await create_pool(get_redis_settings())
    return _redis_pool


async def close_redis_pool():
    """Close the Redis connection pool."""
    global _redis_pool
    if _redis_pool:
        await _redis_pool.close()
        _redis_pool = None


async def enqueue_evaluation_job(project_id: str, redis: Optional[ArqRedis] = None) -> str:
    """
    Enqueue a multi-agent evaluation of every proposal in a project.

    Args:
        project_id: Project to evaluate
        redis: Connection to use (defaults to the shared pool)

    Returns:
        Job ID for tracking
    """
    job_id = str(uuid.uuid4())
    redis = redis or await get_redis_pool()
    now = datetime.now(timezone.utc).isoformat()

    await redis.hset(
        job_key(job_id),
        mapping={
            "job_id": job_id,
            "project_id": project_id,
            "status": "queued",
            "vendor_name": "",
            "completed_agents": "0",
            "total_agents": "0",
            "progress_percent": "0",
            "error": "",
            "created_at": now,
            "updated_at": now
        }
    )
    await redis.expire(job_key(job_id), JOB_TTL_SECONDS)

    await redis.enqueue_job(
        "run_evaluation_job",
        job_id,
        project_id,
        _job_id=job_id
    )

    # Latest job per project for quick lookup
    await redis.set(f"project_job:{project_id}", job_id, ex=JOB_TTL_SECONDS)

    return job_id


def _decode(value):
    return value.decode() if isinstance(value, bytes) else value


async def get_job_status(job_id: str, redis: Optional[ArqRedis] = None) -> Optional[Dict[str, Any]]:
    """
    Get job status from Redis.

    Returns:
        Job status dict or None if not found
    """
    redis = redis or await get_redis_pool()

    status = await redis.hgetall(job_key(job_id))
    if not status:
        return None

    result = {_decode(key): _decode(value) for key, value in status.items()}

    for field in ("completed_agents", "total_agents", "progress_percent"):
        if field in result:
            result[field] = int(result[field] or 0)

    return result


async def get_job_by_project(project_id: str, redis: Optional[ArqRedis] = None) -> Optional[Dict[str, Any]]:
    """Latest job status for a project, or None."""
    redis = redis or await get_redis_pool()

    job_id = await redis.get(f"project_job:{project_id}")
    if not job_id:
        return None

    return await get_job_status(_decode(job_id), redis)


async def cancel_job(job_id: str, redis: Optional[ArqRedis] = None) -> bool:
    """
    Cancel a queued job; the worker skips it when it is picked up.

    Returns:
        True if the job was cancelled, False if it does not exist

    Raises:
        JobNotCancellableError: The job is running or already finished
    """
    redis = redis or await get_redis_pool()

    current = _decode(await redis.hget(job_key(job_id), "status"))
    if current is None:
        return False
    if current != "queued":
        raise JobNotCancellableError(job_id, current)

    await redis.hset(
        job_key(job_id),
        mapping={
            "status": "cancelled",
            "updated_at": datetime.now(timezone.utc).isoformat()
        }
    )
    return True
