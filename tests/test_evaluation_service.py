"""
Tests for project-level evaluation orchestration.
"""

import json

import pytest
from sqlalchemy import func, select

from crew.evaluation_crew import EvaluationCrew
from database.models import (
    AgentMetric,
    EvaluationCriteria,
    Project,
    Proposal,
    Standard,
)
from schemas.evaluation import AgentRole
from services import agent_metrics
from services.evaluation_service import (
    EvaluationError,
    evaluate_project,
    get_project_evaluations,
    proposal_context,
    requirements_context,
)
from services.vendor_stages import get_project_vendor_stages


async def count(db, model):
    return (await db.execute(select(func.count()).select_from(model))).scalar_one()


class TestContext:
    """Documents rendered for the agents."""

    async def test_raw_text_dropped_when_analysis_exists(self, requirement):
        [document] = json.loads(requirements_context([requirement]))
        assert document["documentType"] == "RFT"
        assert "documentText" not in document
        assert document["scope"].startswith("Replace the crew rostering")

    async def test_raw_text_kept_without_analysis(self, db, project):
        proposal = Proposal(
            project_id=project.id,
            vendor_name="JetLogic",
            file_name="jetlogic.txt",
            extracted_data={"documentText": "raw proposal", "analysisError": "LLM down"},
        )
        assert json.loads(proposal_context(proposal))["documentText"] == "raw proposal"


class TestEvaluateProject:
    """End-to-end evaluation with fake agents."""

    async def test_persists_everything(self, db, project, requirement, proposals, make_runner, progress_service):
        crew = EvaluationCrew(runner=make_runner(), progress=progress_service, timeout=5)

        evaluations = await evaluate_project(project.id, db, crew=crew)

        assert len(evaluations) == 2
        assert {e.status for e in evaluations} == {"recommended"}
        skyops = next(e for e in evaluations if e.proposal_id == proposals[0].id)
        assert skyops.cost == "USD 4.2M over 5 years"
        assert skyops.overall_score == 80
        assert set(skyops.role_insights) == {r.value for r in AgentRole}

        assert await count(db, AgentMetric) == 12
        # 3 + 4 + 5 + 5 + 2 + 2 score keys per vendor
        assert await count(db, EvaluationCriteria) == 42

        stages = await get_project_vendor_stages(project.id, db)
        assert [s.current_stage for s in stages] == [7, 7]

        refreshed = await db.get(Project, project.id)
        assert refreshed.status == "completed"
        assert len(progress_service.get_progress(str(project.id))) == 12

    async def test_rerun_replaces_previous_results(self, db, project, requirement, proposals, make_runner):
        crew = EvaluationCrew(runner=make_runner(), timeout=5)
        await evaluate_project(project.id, db, crew=crew)
        await evaluate_project(project.id, db, crew=crew)

        assert len(await get_project_evaluations(project.id, db)) == 2
        assert await count(db, EvaluationCriteria) == 42
        # Metrics are history and accumulate
        assert await count(db, AgentMetric) == 24

    async def test_failed_agents_recorded_without_failing_vendor(
        self, db, project, requirement, proposals, make_runner
    ):
        crew = EvaluationCrew(runner=make_runner(failing={AgentRole.SECURITY}), timeout=5)

        evaluations = await evaluate_project(project.id, db, crew=crew)

        assert len(evaluations) == 2
        diagnostics = evaluations[0].agent_diagnostics
        security = next(d for d in diagnostics if d["role"] == "security")
        assert security["succeeded"] is False
        failures = (await db.execute(
            select(AgentMetric).where(AgentMetric.success.is_(False))
        )).scalars().all()
        assert len(failures) == 2

    async def test_crew_crash_skips_vendor(self, db, project, requirement, proposals, make_runner):
        class CrashingCrew(EvaluationCrew):
            async def evaluate_proposal(self, context):
                if context.vendor_name == "AeroSoft":
                    raise RuntimeError("provider outage")
                return await super().evaluate_proposal(context)

        evaluations = await evaluate_project(project.id, db, crew=CrashingCrew(runner=make_runner(), timeout=5))

        assert len(evaluations) == 1
        failed_runs = (await db.execute(
            select(AgentMetric).where(AgentMetric.evaluation_id == f"{project.id}-AeroSoft")
        )).scalars().all()
        assert len(failed_runs) == 6
        assert not any(m.success for m in failed_runs)

    async def test_metrics_failure_does_not_break_evaluation(
        self, db, project, requirement, proposals, make_runner, monkeypatch
    ):
        async def broken_track_execution(*args, **kwargs):
            raise RuntimeError("metrics table locked")

        monkeypatch.setattr(agent_metrics, "track_execution", broken_track_execution)

        evaluations = await evaluate_project(project.id, db, crew=EvaluationCrew(runner=make_runner(), timeout=5))

        assert len(evaluations) == 2
        assert {e.overall_score for e in evaluations} == {80}
        assert await count(db, AgentMetric) == 0
        assert await count(db, EvaluationCriteria) == 42
        refreshed = await db.get(Project, project.id)
        assert refreshed.status == "completed"

    async def test_tagged_standard_sections(self, db, project, requirement, proposals, make_runner):
        standard = Standard(
            name="Group IT Security Standard",
            sections=[{"id": "s1", "name": "Data Residency"}, {"id": "s2", "name": "Identity"}],
        )
        db.add(standard)
        await db.commit()
        requirement.standard_id = standard.id
        requirement.tagged_sections = ["s2"]
        await db.commit()

        evaluations = await evaluate_project(
            project.id, db, crew=EvaluationCrew(runner=make_runner(), timeout=5)
        )

        [section] = evaluations[0].section_compliance
        assert section["sectionId"] == "s2"
        assert section["sectionName"] == "Identity"

    async def test_requires_documents(self, db, project):
        with pytest.raises(EvaluationError, match="requirement"):
            await evaluate_project(project.id, db)

    async def test_requires_proposals(self, db, project, requirement):
        with pytest.raises(EvaluationError, match="proposal"):
            await evaluate_project(project.id, db)
