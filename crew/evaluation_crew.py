"""
IntelliBid - Multi-Agent Evaluation Crew

Runs the six stakeholder agents against one vendor proposal and folds
their answers into a single evaluation.

The agents are independent, so they run concurrently. A failing or slow
agent never fails the vendor: its result is replaced by a static fallback
and the failure is kept for diagnostics and metrics.
"""

import asyncio
import logging
import math
import time
from dataclasses import dataclass, field
from typing import Awaitable, Callable, Optional

from agents.base import AgentRun, run_agent_task, validate_json_output
from agents.role_task import build_standard_block
from agents.roles import ROLE_AGENTS, get_fallback_insights
from config.settings import settings
from schemas.evaluation import (
    AgentDiagnostic,
    AgentResult,
    AgentRole,
    AgentStatus,
    EvaluationStatus,
    MultiAgentEvaluation,
    ProgressUpdate,
    SectionCompliance,
)
from services.progress import ProgressService, get_progress_service

logger = logging.getLogger("intellibid.crew")


AGGREGATED_SCORE_KEYS = {
    "overall": "overall",
    "functionalFit": "functional_fit",
    "technicalFit": "technical_fit",
    "deliveryRisk": "delivery_risk",
    "compliance": "compliance",
}
DETAILED_SCORE_KEYS = ["integration", "support", "scalability", "documentation"]

REQUIRED_KEYS = ["insights", "scores", "rationale"]

# Status consensus: strictly more than this many agents must agree
RISK_FLAG_QUORUM = 2
RECOMMEND_QUORUM = 3


@dataclass
class EvaluationContext:
    """Everything a role agent needs to evaluate one vendor."""
    project_id: str
    vendor_name: str
    requirements: str
    proposal: str
    vendor_index: int = 0
    total_vendors: int = 1
    cost_structure: Optional[str] = None
    standard_name: Optional[str] = None
    # [{"id": "...", "name": "..."}]
    tagged_sections: list[dict] = field(default_factory=list)


AgentRunner = Callable[[AgentRole, EvaluationContext], Awaitable[AgentRun]]


async def crewai_runner(role: AgentRole, context: EvaluationContext) -> AgentRun:
    """Default runner: execute the role's CrewAI agent."""
    role_agent = ROLE_AGENTS[role]
    agent = role_agent.create_agent()
    standard_block = build_standard_block(
        context.standard_name,
        [section["name"] for section in context.tagged_sections]
    )
    task = role_agent.create_task(
        agent,
        context.requirements,
        context.proposal,
        context.vendor_name,
        standard_block
    )
    return await run_agent_task(agent, task)


def round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def normalize_scores(raw_scores: dict) -> dict[str, int]:
    """Keep numeric scores only, as integers clamped to 0-100."""
    scores = {}
    for key, value in (raw_scores or {}).items():
        if isinstance(value, bool):
            continue
        try:
            number = float(value)
        except (TypeError, ValueError):
            continue
        scores[key] = max(0, min(100, round_half_up(number)))
    return scores


def derive_status(scores: dict[str, int]) -> EvaluationStatus:
    """
    Status for an agent that did not state one.

    Only the scores the agent actually reported are considered.
    """
    overall = scores.get("overall")
    delivery_risk = scores.get("deliveryRisk")
    compliance = scores.get("compliance")

    if (
        (overall is not None and overall < 45)
        or (delivery_risk is not None and delivery_risk > 75)
        or (compliance is not None and compliance < 35)
    ):
        return EvaluationStatus.RISK_FLAGGED

    if overall is not None and overall >= 65 and (delivery_risk is None or delivery_risk <= 50):
        return EvaluationStatus.RECOMMENDED

    return EvaluationStatus.UNDER_REVIEW


def fallback_result(role: AgentRole, execution_time_ms: int, error_message: str) -> AgentResult:
    """Static result substituted for a failed agent."""
    error_type = "timeout" if "timeout" in error_message.lower() else "execution_error"
    return AgentResult(
        role=role,
        insights=get_fallback_insights(role),
        scores={"overall": 0},
        rationale=f"Evaluation incomplete for {role.value} perspective",
        status=EvaluationStatus.UNDER_REVIEW,
        execution_time_ms=execution_time_ms,
        token_usage=0,
        succeeded=False,
        error_type=error_type,
        error_message=error_message,
    )


def parse_agent_output(role: AgentRole, run: AgentRun, execution_time_ms: int) -> AgentResult:
    """Turn a raw agent answer into a result; raises ValueError on bad output."""
    data = validate_json_output(run.raw, REQUIRED_KEYS)

    insights = data["insights"]
    if not isinstance(insights, list):
        raise ValueError("insights must be a list")
    if not isinstance(data["scores"], dict):
        raise ValueError("scores must be an object")

    # Partial score sets are kept; aggregation averages per key
    scores = normalize_scores(data["scores"])

    try:
        status = EvaluationStatus(data.get("status"))
    except ValueError:
        status = derive_status(scores)

    return AgentResult(
        role=role,
        insights=[str(insight) for insight in insights],
        scores=scores,
        rationale=str(data["rationale"]),
        status=status,
        execution_time_ms=execution_time_ms,
        token_usage=run.total_tokens,
        succeeded=True,
    )


def _average(results: list[AgentResult], key: str) -> int:
    values = [r.scores[key] for r in results if r.succeeded and key in r.scores]
    if not values:
        return 0
    return round_half_up(sum(values) / len(values))


def aggregate_results(
    results: list[AgentResult],
    cost_structure: Optional[str] = None,
    tagged_sections: Optional[list[dict]] = None,
    standard_name: Optional[str] = None
) -> MultiAgentEvaluation:
    """
    Fold the six agent results into one evaluation.

    Scores are averaged over the agents that succeeded and reported the
    key. The status needs a qualified majority; a split panel stays under
    review.
    """
    aggregated = {field_name: _average(results, key) for key, field_name in AGGREGATED_SCORE_KEYS.items()}
    detailed = {key: _average(results, key) for key in DETAILED_SCORE_KEYS}

    risk_flags = sum(1 for r in results if r.status == EvaluationStatus.RISK_FLAGGED)
    recommendations = sum(1 for r in results if r.status == EvaluationStatus.RECOMMENDED)
    if risk_flags > RISK_FLAG_QUORUM:
        status = EvaluationStatus.RISK_FLAGGED
    elif recommendations > RECOMMEND_QUORUM:
        status = EvaluationStatus.RECOMMENDED
    else:
        status = EvaluationStatus.UNDER_REVIEW

    succeeded = [r for r in results if r.succeeded]
    failed_count = len(results) - len(succeeded)
    rationale = " ".join(f"{r.role.label}: {r.rationale}" for r in succeeded)
    if not rationale:
        rationale = "Multi-agent evaluation completed"
    if failed_count:
        rationale += (
            f" (Note: {failed_count} of {len(results)} agent evaluations incomplete"
            " - review role-specific insights for details)"
        )

    section_compliance = [
        SectionCompliance(
            section_id=str(section.get("id", "")),
            section_name=section.get("name", ""),
            score=aggregated["compliance"],
            findings=(
                f"Multi-agent evaluation ({aggregated['compliance']}/100). "
                f"All {len(results)} specialized agents evaluated vendor compliance against "
                f"\"{standard_name or 'organization standard'}\". "
                "See role-specific insights for detailed findings."
            ),
        )
        for section in (tagged_sections or [])
    ]

    return MultiAgentEvaluation(
        **aggregated,
        cost=cost_structure or "Not specified",
        status=status,
        rationale=rationale,
        role_insights={r.role.value: r.insights for r in results},
        detailed_scores=detailed,
        section_compliance=section_compliance,
        agent_diagnostics=[
            AgentDiagnostic(
                role=r.role,
                succeeded=r.succeeded,
                execution_time_ms=r.execution_time_ms,
                token_usage=r.token_usage,
                error_type=r.error_type,
                error_message=r.error_message,
            )
            for r in results
        ],
    )


class EvaluationCrew:
    """
    Orchestrates the six role agents for vendor proposals.

    Args:
        runner: Executes one role agent; defaults to the CrewAI runner
        progress: Progress registry receiving per-agent status updates
        timeout: Per-agent timeout in seconds
    """

    def __init__(
        self,
        runner: Optional[AgentRunner] = None,
        progress: Optional[ProgressService] = None,
        timeout: Optional[float] = None
    ):
        self.runner = runner or crewai_runner
        self.progress = progress or get_progress_service()
        self.timeout = timeout if timeout is not None else settings.agent_timeout_seconds
        self.roles = list(AgentRole)

    def _emit(self, context: EvaluationContext, role: AgentRole, status: AgentStatus):
        self.progress.emit(ProgressUpdate(
            project_id=context.project_id,
            vendor_name=context.vendor_name,
            vendor_index=context.vendor_index,
            total_vendors=context.total_vendors,
            agent_role=role,
            agent_status=status,
        ))

    async def evaluate_with_role(self, role: AgentRole, context: EvaluationContext) -> AgentResult:
        """Run one role agent; never raises."""
        self._emit(context, role, AgentStatus.IN_PROGRESS)
        start = time.perf_counter()

        try:
            run = await asyncio.wait_for(self.runner(role, context), timeout=self.timeout)
            elapsed_ms = int((time.perf_counter() - start) * 1000)
            result = parse_agent_output(role, run, elapsed_ms)
        except asyncio.TimeoutError:
            elapsed_ms = int((time.perf_counter() - start) * 1000)
            result = fallback_result(role, elapsed_ms, f"Agent timeout after {self.timeout}s")
        except Exception as e:
            elapsed_ms = int((time.perf_counter() - start) * 1000)
            result = fallback_result(role, elapsed_ms, str(e) or type(e).__name__)

        if result.succeeded:
            logger.info(
                f"[{context.vendor_name}] {role.label} completed in {result.execution_time_ms}ms "
                f"(overall {result.scores.get('overall')}, {result.token_usage} tokens)"
            )
            self._emit(context, role, AgentStatus.COMPLETED)
        else:
            logger.error(
                f"[{context.vendor_name}] {role.label} failed ({result.error_type}): {result.error_message}"
            )
            self._emit(context, role, AgentStatus.FAILED)

        return result

    async def run_agents(self, context: EvaluationContext) -> list[AgentResult]:
        """Run all role agents concurrently, in role order."""
        for role in self.roles:
            self._emit(context, role, AgentStatus.PENDING)

        outcomes = await asyncio.gather(
            *(self.evaluate_with_role(role, context) for role in self.roles),
            return_exceptions=True
        )

        results = []
        for role, outcome in zip(self.roles, outcomes):
            if isinstance(outcome, BaseException):
                # Only reachable if progress emission itself blew up
                logger.error(f"[{context.vendor_name}] {role.label} crashed: {outcome}")
                outcome = fallback_result(role, 0, str(outcome) or type(outcome).__name__)
            results.append(outcome)
        return results

    async def evaluate_proposal(
        self,
        context: EvaluationContext
    ) -> tuple[MultiAgentEvaluation, list[AgentResult]]:
        """
        Evaluate one vendor proposal with all six agents.

        Returns:
            The aggregated evaluation and the individual agent results
        """
        logger.info(
            f"Evaluating vendor {context.vendor_index + 1}/{context.total_vendors}: "
            f"{context.vendor_name}"
        )
        results = await self.run_agents(context)

        evaluation = aggregate_results(
            results,
            cost_structure=context.cost_structure,
            tagged_sections=context.tagged_sections,
            standard_name=context.standard_name,
        )

        failed = sum(1 for r in results if not r.succeeded)
        logger.info(
            f"[{context.vendor_name}] overall {evaluation.overall}, status {evaluation.status.value}, "
            f"{len(results) - failed}/{len(results)} agents succeeded"
        )
        return evaluation, results
