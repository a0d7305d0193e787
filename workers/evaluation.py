"""
Evaluation Worker

Background job running the multi-agent evaluation of a project. Agent
progress is mirrored into the job's Redis hash for polling clients.
"""

import asyncio
import logging
import uuid
from datetime import datetime, timezone
from typing import Optional

from arq import ArqRedis

from database.connection import get_db_context
from schemas.evaluation import AgentRole, AgentStatus, ProgressUpdate
from services.evaluation_service import evaluate_project
from services.progress import get_progress_service
from workers.queue import JOB_TTL_SECONDS, job_key

logger = logging.getLogger("intellibid.workers.evaluation")

FINISHED_AGENT_STATES = {AgentStatus.COMPLETED, AgentStatus.FAILED}


async def run_evaluation_job(ctx: dict, job_id: str, project_id: str):
    """
    Background job to evaluate every proposal of a project.

    Args:
        ctx: ARQ context with Redis connection
        job_id: Unique job identifier
        project_id: Project to evaluate
    """
    redis: ArqRedis = ctx["redis"]

    async def update_status(status: str, error: Optional[str] = None, **fields):
        mapping = {
            "status": status,
            "error": error or "",
            "updated_at": datetime.now(timezone.utc).isoformat(),
        }
        mapping.update({key: str(value) for key, value in fields.items()})
        await redis.hset(job_key(job_id), mapping=mapping)
        await redis.expire(job_key(job_id), JOB_TTL_SECONDS)

    current = await redis.hget(job_key(job_id), "status")
    if current in ("cancelled", b"cancelled"):
        logger.info(f"Evaluation job {job_id} was cancelled before it started")
        return {"status": "cancelled", "job_id": job_id}

    progress = get_progress_service()
    pending_writes: set[asyncio.Task] = set()

    def mirror_progress(update: ProgressUpdate):
        snapshot = progress.get_progress(project_id)
        total = update.total_vendors * len(AgentRole)
        finished = min(total, sum(1 for u in snapshot if u.agent_status in FINISHED_AGENT_STATES))

        task = asyncio.create_task(update_status(
            "running",
            vendor_name=update.vendor_name,
            completed_agents=finished,
            total_agents=total,
            progress_percent=int(finished / total * 100) if total else 0,
        ))
        pending_writes.add(task)
        task.add_done_callback(pending_writes.discard)

    unsubscribe = progress.subscribe(project_id, mirror_progress)

    try:
        logger.info(f"Starting evaluation job {job_id} for project {project_id}")
        await update_status("running")

        async with get_db_context() as db:
            evaluations = await evaluate_project(uuid.UUID(project_id), db)

        if pending_writes:
            await asyncio.gather(*pending_writes, return_exceptions=True)

        await update_status("completed", progress_percent=100)
        logger.info(f"Evaluation job {job_id} completed: {len(evaluations)} evaluations")

        return {
            "status": "completed",
            "job_id": job_id,
            "project_id": project_id,
            "evaluations": len(evaluations),
        }

    except Exception as e:
        logger.error(f"Evaluation job {job_id} failed: {e}")
        await update_status("failed", error=str(e))
        return {"status": "failed", "error": str(e)}

    finally:
        unsubscribe()
