"""
Tests for the multi-agent evaluation crew: output parsing, status
derivation, aggregation and per-agent fault isolation.
"""

import asyncio
import json

import pytest

from agents.base import AgentRun
from crew.evaluation_crew import (
    EvaluationContext,
    EvaluationCrew,
    aggregate_results,
    derive_status,
    fallback_result,
    normalize_scores,
    parse_agent_output,
)
from schemas.evaluation import AgentResult, AgentRole, AgentStatus, EvaluationStatus
from services.progress import ProgressService


def result(role, overall, status=EvaluationStatus.UNDER_REVIEW, succeeded=True, **scores):
    return AgentResult(
        role=role,
        insights=["insight"],
        scores={"overall": overall, **scores},
        rationale=f"{role.value} rationale",
        status=status,
        succeeded=succeeded,
    )


def context(**kwargs):
    defaults = dict(
        project_id="project-1",
        vendor_name="SkyOps",
        requirements="[]",
        proposal="{}",
    )
    defaults.update(kwargs)
    return EvaluationContext(**defaults)


# ============================================================================
# Output parsing
# ============================================================================

class TestParseAgentOutput:
    """Turning raw agent answers into results."""

    def test_parses_fenced_json(self):
        raw = "```json\n" + json.dumps({
            "insights": ["Strong fatigue modelling"],
            "scores": {"overall": 82.4, "functionalFit": "77"},
            "rationale": "Good fit",
            "status": "recommended",
        }) + "\n```"

        parsed = parse_agent_output(AgentRole.PRODUCT, AgentRun(raw, 900), 1500)

        assert parsed.succeeded is True
        assert parsed.scores == {"overall": 82, "functionalFit": 77}
        assert parsed.status == EvaluationStatus.RECOMMENDED
        assert parsed.token_usage == 900
        assert parsed.execution_time_ms == 1500

    def test_unknown_status_is_derived_from_scores(self):
        raw = json.dumps({
            "insights": ["x"],
            "scores": {"overall": 40},
            "rationale": "weak",
            "status": "maybe",
        })
        parsed = parse_agent_output(AgentRole.SECURITY, AgentRun(raw), 10)
        assert parsed.status == EvaluationStatus.RISK_FLAGGED

    def test_partial_scores_are_accepted(self):
        raw = json.dumps({
            "insights": ["a", "b", "c", "d"],
            "scores": {"compliance": 40},
            "rationale": "ok",
            "status": "under-review",
        })

        parsed = parse_agent_output(AgentRole.SECURITY, AgentRun(raw), 10)

        assert parsed.succeeded is True
        assert parsed.scores == {"compliance": 40}
        assert parsed.status == EvaluationStatus.UNDER_REVIEW

    def test_empty_insights_are_accepted(self):
        raw = json.dumps({"insights": [], "scores": {"overall": 60}, "rationale": "r"})

        parsed = parse_agent_output(AgentRole.SECURITY, AgentRun(raw), 10)

        assert parsed.succeeded is True
        assert parsed.insights == []

    def test_insights_must_be_a_list(self):
        raw = json.dumps({"insights": "one long string", "scores": {"overall": 60}, "rationale": "r"})
        with pytest.raises(ValueError, match="insights"):
            parse_agent_output(AgentRole.SECURITY, AgentRun(raw), 10)

    def test_invalid_json_is_rejected(self):
        with pytest.raises(ValueError):
            parse_agent_output(AgentRole.SECURITY, AgentRun("not json at all"), 10)

    def test_normalize_scores_clamps_and_drops_non_numeric(self):
        scores = normalize_scores({"overall": 120, "compliance": -5, "support": "n/a", "flag": True, "x": 49.5})
        assert scores == {"overall": 100, "compliance": 0, "x": 50}


# ============================================================================
# Status derivation
# ============================================================================

class TestDeriveStatus:
    """Status for agents that did not state one."""

    @pytest.mark.parametrize("scores,expected", [
        ({"overall": 44}, EvaluationStatus.RISK_FLAGGED),
        ({"overall": 90, "deliveryRisk": 76}, EvaluationStatus.RISK_FLAGGED),
        ({"overall": 90, "compliance": 34}, EvaluationStatus.RISK_FLAGGED),
        ({"overall": 65}, EvaluationStatus.RECOMMENDED),
        ({"overall": 70, "deliveryRisk": 50}, EvaluationStatus.RECOMMENDED),
        ({"overall": 70, "deliveryRisk": 51}, EvaluationStatus.UNDER_REVIEW),
        ({"overall": 64}, EvaluationStatus.UNDER_REVIEW),
    ])
    def test_thresholds(self, scores, expected):
        assert derive_status(scores) == expected

    def test_missing_keys_are_ignored(self):
        assert derive_status({"overall": 80}) == EvaluationStatus.RECOMMENDED


# ============================================================================
# Aggregation
# ============================================================================

class TestAggregateResults:
    """Folding six agent results into one evaluation."""

    def test_averages_only_successful_reporting_agents(self):
        results = [
            result(AgentRole.DELIVERY, 81, deliveryRisk=40),
            result(AgentRole.PRODUCT, 80, functionalFit=70),
            fallback_result(AgentRole.SECURITY, 5, "boom"),
        ]
        evaluation = aggregate_results(results)

        # (81 + 80) / 2 = 80.5 rounds half up
        assert evaluation.overall == 81
        assert evaluation.functional_fit == 70
        assert evaluation.delivery_risk == 40
        assert evaluation.compliance == 0
        assert evaluation.cost == "Not specified"

    def test_risk_flag_needs_more_than_two_agents(self):
        flagged = EvaluationStatus.RISK_FLAGGED
        recommended = EvaluationStatus.RECOMMENDED
        roles = list(AgentRole)

        three_flags = [result(r, 50, flagged) for r in roles[:3]] + [result(r, 50, recommended) for r in roles[3:]]
        assert aggregate_results(three_flags).status == flagged

        two_flags = [result(r, 50, flagged) for r in roles[:2]] + [result(r, 50, recommended) for r in roles[2:]]
        assert aggregate_results(two_flags).status == recommended

    def test_split_panel_stays_under_review(self):
        roles = list(AgentRole)
        results = [result(r, 70, EvaluationStatus.RECOMMENDED) for r in roles[:3]]
        results += [result(r, 70, EvaluationStatus.UNDER_REVIEW) for r in roles[3:]]
        assert aggregate_results(results).status == EvaluationStatus.UNDER_REVIEW

    def test_rationale_notes_incomplete_agents(self):
        results = [result(r, 70) for r in list(AgentRole)[:5]]
        results.append(fallback_result(AgentRole.SECURITY, 5, "boom"))

        evaluation = aggregate_results(results)

        assert evaluation.rationale.startswith("Delivery Manager: delivery rationale")
        assert "(Note: 1 of 6 agent evaluations incomplete" in evaluation.rationale
        assert evaluation.role_insights["security"] == fallback_result(AgentRole.SECURITY, 0, "x").insights

    def test_section_compliance_uses_aggregated_compliance(self):
        results = [result(AgentRole.SECURITY, 70, compliance=64)]
        evaluation = aggregate_results(
            results,
            tagged_sections=[{"id": "s1", "name": "Data Residency"}],
            standard_name="Group IT Security Standard",
        )

        [section] = evaluation.section_compliance
        assert section.section_id == "s1"
        assert section.score == 64
        assert "Group IT Security Standard" in section.findings
        assert section.model_dump(by_alias=True)["sectionName"] == "Data Residency"

    def test_fallback_error_types(self):
        assert fallback_result(AgentRole.PRODUCT, 0, "Agent timeout after 30s").error_type == "timeout"
        assert fallback_result(AgentRole.PRODUCT, 0, "rate limited").error_type == "execution_error"


# ============================================================================
# Crew execution
# ============================================================================

class TestEvaluationCrew:
    """Running the six agents for one vendor."""

    async def test_all_agents_succeed(self, make_runner):
        crew = EvaluationCrew(runner=make_runner(), progress=ProgressService(), timeout=5)

        evaluation, results = await crew.evaluate_proposal(context(cost_structure="USD 4.2M"))

        assert [r.role for r in results] == list(AgentRole)
        assert all(r.succeeded for r in results)
        assert evaluation.overall == 80
        assert evaluation.status == EvaluationStatus.RECOMMENDED
        assert evaluation.cost == "USD 4.2M"
        assert len(evaluation.agent_diagnostics) == 6

    async def test_agent_reporting_partial_scores_still_counts(self, make_runner):
        security_answer = json.dumps({
            "insights": ["a", "b", "c", "d"],
            "scores": {"compliance": 40},
            "rationale": "ok",
            "status": "under-review",
        })
        crew = EvaluationCrew(
            runner=make_runner(answers={AgentRole.SECURITY: security_answer}),
            progress=ProgressService(),
            timeout=5,
        )

        evaluation, results = await crew.evaluate_proposal(context())

        assert all(r.succeeded for r in results)
        assert evaluation.compliance == 60
        assert evaluation.overall == 80
        assert "incomplete" not in evaluation.rationale

    async def test_failing_agent_is_isolated(self, make_runner):
        crew = EvaluationCrew(
            runner=make_runner(failing={AgentRole.PROCUREMENT}),
            progress=ProgressService(),
            timeout=5,
        )

        evaluation, results = await crew.evaluate_proposal(context())

        failed = [r for r in results if not r.succeeded]
        assert [r.role for r in failed] == [AgentRole.PROCUREMENT]
        assert failed[0].error_type == "execution_error"
        assert "procurement agent unavailable" in failed[0].error_message
        assert evaluation.overall == 80

    async def test_slow_agent_times_out(self, make_runner):
        fast = make_runner()

        async def runner(role, ctx):
            if role == AgentRole.SECURITY:
                await asyncio.sleep(1)
            return await fast(role, ctx)

        crew = EvaluationCrew(runner=runner, progress=ProgressService(), timeout=0.05)
        _, results = await crew.evaluate_proposal(context())

        security = results[-1]
        assert security.succeeded is False
        assert security.error_type == "timeout"
        assert security.scores == {"overall": 0}

    async def test_invalid_output_becomes_fallback(self, make_runner):
        runner = make_runner(answers={AgentRole.ARCHITECTURE: "I think the vendor is fine"})
        crew = EvaluationCrew(runner=runner, progress=ProgressService(), timeout=5)

        _, results = await crew.evaluate_proposal(context())

        architecture = results[2]
        assert architecture.succeeded is False
        assert architecture.error_type == "execution_error"

    async def test_progress_sequence_per_agent(self, make_runner):
        service = ProgressService()
        received = []
        service.subscribe("project-1", received.append)

        crew = EvaluationCrew(runner=make_runner(failing={AgentRole.SECURITY}), progress=service, timeout=5)
        await crew.evaluate_proposal(context(vendor_index=1, total_vendors=2))

        for role in AgentRole:
            statuses = [u.agent_status for u in received if u.agent_role == role]
            expected_end = AgentStatus.FAILED if role == AgentRole.SECURITY else AgentStatus.COMPLETED
            assert statuses == [AgentStatus.PENDING, AgentStatus.IN_PROGRESS, expected_end]

        snapshot = service.get_progress("project-1")
        assert len(snapshot) == 6
        assert {u.vendor_index for u in snapshot} == {1}
        assert all(u.total_vendors == 2 for u in snapshot)
