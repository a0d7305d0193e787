"""
Agent Metrics Service

Persists one row per role agent execution and answers the analytics
queries behind the agent metrics dashboard. Only rows inside the
retention window are considered.
"""

import json
import logging
import uuid
from collections import OrderedDict
from datetime import datetime, timedelta, timezone
from typing import Optional

from sqlalchemy import select, delete
from sqlalchemy.ext.asyncio import AsyncSession

from config.settings import settings
from database.models import AgentMetric, Project
from schemas.evaluation import AgentResult

logger = logging.getLogger("intellibid.services.agent_metrics")

# Share of tokens assumed to be prompt (input) tokens
INPUT_TOKEN_SHARE = 0.7


def estimate_cost(total_tokens: int) -> float:
    """
    Estimate USD cost of an execution from its total token count.

    Assumes 70% input and 30% output tokens at the configured per-million prices.
    """
    input_tokens = total_tokens * INPUT_TOKEN_SHARE
    output_tokens = total_tokens * (1 - INPUT_TOKEN_SHARE)

    input_cost = (input_tokens / 1_000_000) * settings.token_cost_input_per_million
    output_cost = (output_tokens / 1_000_000) * settings.token_cost_output_per_million

    return round(input_cost + output_cost, 6)


def failed_run_evaluation_id(project_id: str, vendor_name: str) -> str:
    """Evaluation id recorded for a vendor run that never produced an evaluation."""
    return f"{project_id}-{vendor_name}"


def _cutoff() -> datetime:
    return datetime.now(timezone.utc) - timedelta(days=settings.metrics_retention_days)


def _rate(success: int, total: int) -> float:
    return round(success / total * 100, 2) if total else 0


def _round_half_up(value: float) -> int:
    return int(value + 0.5)


async def track_execution(
    db: AsyncSession,
    evaluation_id: str,
    project_id: uuid.UUID,
    vendor_name: str,
    result: AgentResult
) -> AgentMetric:
    """
    Record one agent execution and emit a structured log line.

    The row is added to the session; the caller commits.
    """
    cost = estimate_cost(result.token_usage)
    metric = AgentMetric(
        evaluation_id=evaluation_id,
        project_id=project_id,
        vendor_name=vendor_name,
        agent_role=result.role.value,
        execution_time_ms=result.execution_time_ms,
        token_usage=result.token_usage,
        estimated_cost_usd=cost,
        success=result.succeeded,
        error_type=result.error_type,
        error_message=result.error_message,
    )
    db.add(metric)

    logger.log(
        logging.INFO if result.succeeded else logging.ERROR,
        json.dumps({
            "type": "agent_execution",
            "agentRole": result.role.value,
            "vendorName": vendor_name,
            "executionTimeMs": result.execution_time_ms,
            "tokenUsage": result.token_usage,
            "estimatedCostUsd": cost,
            "success": result.succeeded,
            "errorType": result.error_type,
        })
    )
    return metric


async def record_agent_results(
    db: AsyncSession,
    evaluation_id: str,
    project_id: uuid.UUID,
    vendor_name: str,
    results: list[AgentResult]
) -> int:
    """
    Persist metrics for every agent result of one vendor run.

    Failures are logged and swallowed so metrics never break an evaluation.

    Returns:
        Number of metrics saved
    """
    try:
        for result in results:
            await track_execution(db, evaluation_id, project_id, vendor_name, result)
        await db.commit()
        return len(results)
    except Exception as e:
        await db.rollback()
        logger.error(f"Failed to save agent metrics for {vendor_name}: {e}")
        return 0


async def _recent_metrics(db: AsyncSession, *conditions) -> list[AgentMetric]:
    result = await db.execute(
        select(AgentMetric)
        .where(AgentMetric.timestamp >= _cutoff(), *conditions)
        .order_by(AgentMetric.timestamp.desc())
    )
    return list(result.scalars().all())


def _stats_for(role: str, metrics: list[AgentMetric]) -> dict:
    total = len(metrics)
    success_count = sum(1 for m in metrics if m.success)
    total_tokens = sum(m.token_usage for m in metrics)
    total_cost = sum(m.estimated_cost_usd for m in metrics)

    return {
        "agent_role": role,
        "total_executions": total,
        "success_count": success_count,
        "failure_count": total - success_count,
        "success_rate": _rate(success_count, total),
        "avg_execution_time_ms": _round_half_up(sum(m.execution_time_ms for m in metrics) / total),
        "total_tokens_used": total_tokens,
        "total_cost_usd": round(total_cost, 6),
        "avg_tokens_per_execution": _round_half_up(total_tokens / total),
        "avg_cost_per_execution": round(total_cost / total, 6),
        "last_executed": metrics[0].timestamp,
    }


async def get_agent_stats(agent_role: str, db: AsyncSession) -> Optional[dict]:
    """Performance statistics for one role, or None when it has not run recently."""
    metrics = await _recent_metrics(db, AgentMetric.agent_role == agent_role)
    if not metrics:
        return None
    return _stats_for(agent_role, metrics)


async def get_all_agent_stats(db: AsyncSession) -> list[dict]:
    """Performance statistics for every role that ran recently."""
    metrics = await _recent_metrics(db)

    by_role: dict[str, list[AgentMetric]] = OrderedDict()
    for m in metrics:
        by_role.setdefault(m.agent_role, []).append(m)

    return [_stats_for(role, rows) for role, rows in by_role.items()]


async def get_evaluation_metrics(evaluation_id: str, db: AsyncSession) -> Optional[dict]:
    """Totals and per-role breakdown for one evaluation, or None when unknown."""
    result = await db.execute(
        select(AgentMetric).where(AgentMetric.evaluation_id == evaluation_id)
    )
    metrics = list(result.scalars().all())
    if not metrics:
        return None

    succeeded = sum(1 for m in metrics if m.success)
    return {
        "evaluation_id": evaluation_id,
        "total_execution_time_ms": sum(m.execution_time_ms for m in metrics),
        "total_tokens_used": sum(m.token_usage for m in metrics),
        "total_cost_usd": round(sum(m.estimated_cost_usd for m in metrics), 6),
        "agents_succeeded": succeeded,
        "agents_failed": len(metrics) - succeeded,
        "agent_breakdown": {
            m.agent_role: {
                "success": m.success,
                "time_ms": m.execution_time_ms,
                "tokens": m.token_usage,
                "cost_usd": m.estimated_cost_usd,
            }
            for m in metrics
        },
    }


async def get_recent_failures(db: AsyncSession, limit: int = 10) -> list[AgentMetric]:
    """Most recent failed executions, for debugging."""
    result = await db.execute(
        select(AgentMetric)
        .where(AgentMetric.success.is_(False))
        .order_by(AgentMetric.timestamp.desc())
        .limit(limit)
    )
    return list(result.scalars().all())


async def get_time_series_data(db: AsyncSession, limit: int = 50) -> list[dict]:
    """
    One point per evaluation, newest first.

    The agents of an evaluation run concurrently, so its execution time is
    the slowest agent rather than the sum.
    """
    metrics = await _recent_metrics(db)

    groups: dict[str, list[AgentMetric]] = OrderedDict()
    for m in metrics:
        groups.setdefault(m.evaluation_id, []).append(m)

    series = []
    for evaluation_id, rows in groups.items():
        success_count = sum(1 for m in rows if m.success)
        series.append({
            "evaluation_id": evaluation_id,
            "timestamp": rows[0].timestamp,
            "total_cost": round(sum(m.estimated_cost_usd for m in rows), 6),
            "total_tokens": sum(m.token_usage for m in rows),
            "execution_time": max(m.execution_time_ms for m in rows),
            "success_rate": _rate(success_count, len(rows)),
        })

    return series[:limit]


async def clear_old_metrics(db: AsyncSession, days_to_keep: int = 7) -> int:
    """Delete metrics older than the given number of days; returns the count."""
    cutoff = datetime.now(timezone.utc) - timedelta(days=days_to_keep)
    result = await db.execute(
        delete(AgentMetric).where(AgentMetric.timestamp < cutoff)
    )
    await db.commit()
    logger.info(f"Cleared {result.rowcount} agent metrics older than {days_to_keep} days")
    return result.rowcount or 0


async def get_summary_stats(db: AsyncSession) -> dict:
    """Dashboard headline numbers."""
    metrics = await _recent_metrics(db)
    total = len(metrics)
    success_count = sum(1 for m in metrics if m.success)

    return {
        "total_evaluations": len({m.evaluation_id for m in metrics}),
        "total_agent_executions": total,
        "total_tokens_used": sum(m.token_usage for m in metrics),
        "total_cost_usd": round(sum(m.estimated_cost_usd for m in metrics), 6),
        "overall_success_rate": _rate(success_count, total),
        "avg_execution_time_ms": (
            _round_half_up(sum(m.execution_time_ms for m in metrics) / total) if total else 0
        ),
    }


async def get_project_metrics(db: AsyncSession) -> list[dict]:
    """Metrics grouped per project, busiest project first."""
    result = await db.execute(
        select(AgentMetric, Project.name)
        .outerjoin(Project, Project.id == AgentMetric.project_id)
        .where(AgentMetric.timestamp >= _cutoff())
    )

    groups: dict[uuid.UUID, dict] = {}
    for metric, project_name in result.all():
        group = groups.setdefault(metric.project_id, {
            "project_name": project_name or "Unknown Project",
            "rows": [],
        })
        group["rows"].append(metric)

    projects = []
    for project_id, group in groups.items():
        rows = group["rows"]
        success_count = sum(1 for m in rows if m.success)
        projects.append({
            "project_id": str(project_id),
            "project_name": group["project_name"],
            "total_evaluations": len({m.evaluation_id for m in rows}),
            "total_agent_executions": len(rows),
            "total_tokens_used": sum(m.token_usage for m in rows),
            "total_cost_usd": round(sum(m.estimated_cost_usd for m in rows), 6),
            "success_rate": _rate(success_count, len(rows)),
            "avg_execution_time_ms": _round_half_up(
                sum(m.execution_time_ms for m in rows) / len(rows)
            ),
        })

    projects.sort(key=lambda p: p["total_agent_executions"], reverse=True)
    return projects
