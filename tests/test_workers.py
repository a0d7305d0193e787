"""
Tests for the evaluation job queue and the ARQ evaluation job, against an
in-memory stand-in for the Redis commands they use.
"""

import pytest

import crew.evaluation_crew as evaluation_crew
from workers.evaluation import run_evaluation_job
from workers.queue import (
    JobNotCancellableError,
    cancel_job,
    enqueue_evaluation_job,
    get_job_by_project,
    get_job_status,
    job_key,
)


class InMemoryRedis:
    """The handful of ArqRedis commands the queue helpers call."""

    def __init__(self):
        self.hashes = {}
        self.values = {}
        self.jobs = []

    async def hset(self, key, mapping):
        self.hashes.setdefault(key, {}).update(mapping)

    async def hget(self, key, field):
        return self.hashes.get(key, {}).get(field)

    async def hgetall(self, key):
        return dict(self.hashes.get(key, {}))

    async def expire(self, key, seconds):
        return True

    async def exists(self, key):
        return int(key in self.hashes or key in self.values)

    async def set(self, key, value, ex=None):
        self.values[key] = value

    async def get(self, key):
        return self.values.get(key)

    async def enqueue_job(self, function, *args, _job_id=None):
        self.jobs.append((function, args, _job_id))


@pytest.fixture
def redis():
    return InMemoryRedis()


class TestQueue:
    """Enqueueing, polling and cancelling jobs."""

    async def test_enqueue_and_poll(self, redis):
        job_id = await enqueue_evaluation_job("project-1", redis=redis)

        assert redis.jobs == [("run_evaluation_job", (job_id, "project-1"), job_id)]
        status = await get_job_status(job_id, redis=redis)
        assert status["status"] == "queued"
        assert status["progress_percent"] == 0
        assert (await get_job_by_project("project-1", redis=redis))["job_id"] == job_id

    async def test_unknown_job(self, redis):
        assert await get_job_status("missing", redis=redis) is None
        assert await get_job_by_project("missing", redis=redis) is None
        assert await cancel_job("missing", redis=redis) is False

    async def test_cancel(self, redis):
        job_id = await enqueue_evaluation_job("project-1", redis=redis)

        assert await cancel_job(job_id, redis=redis) is True
        assert (await get_job_status(job_id, redis=redis))["status"] == "cancelled"

    @pytest.mark.parametrize("state", ["running", "completed", "failed", "cancelled"])
    async def test_only_queued_jobs_can_be_cancelled(self, redis, state):
        job_id = await enqueue_evaluation_job("project-1", redis=redis)
        await redis.hset(job_key(job_id), mapping={"status": state})

        with pytest.raises(JobNotCancellableError, match=state):
            await cancel_job(job_id, redis=redis)

        assert (await get_job_status(job_id, redis=redis))["status"] == state


class TestEvaluationJob:
    """The background evaluation job."""

    async def test_cancelled_job_is_skipped(self, redis):
        job_id = await enqueue_evaluation_job("project-1", redis=redis)
        await cancel_job(job_id, redis=redis)

        result = await run_evaluation_job({"redis": redis}, job_id, "project-1")

        assert result["status"] == "cancelled"

    async def test_completed_job_mirrors_progress(
        self, redis, db, project, requirement, proposals, make_runner, monkeypatch, progress_service
    ):
        monkeypatch.setattr(evaluation_crew, "crewai_runner", make_runner())
        job_id = await enqueue_evaluation_job(str(project.id), redis=redis)

        result = await run_evaluation_job({"redis": redis}, job_id, str(project.id))

        assert result["status"] == "completed"
        assert result["evaluations"] == 2
        status = await get_job_status(job_id, redis=redis)
        assert status["status"] == "completed"
        assert status["progress_percent"] == 100
        assert status["completed_agents"] == 12
        assert status["total_agents"] == 12
        assert progress_service.listener_count(str(project.id)) == 0

    async def test_failed_job_records_error(self, redis, db, project):
        job_id = await enqueue_evaluation_job(str(project.id), redis=redis)

        result = await run_evaluation_job({"redis": redis}, job_id, str(project.id))

        assert result["status"] == "failed"
        status = redis.hashes[job_key(job_id)]
        assert status["status"] == "failed"
        assert "requirement" in status["error"]
