"""
Tests for evaluation criteria seeding and re-scoring.
"""

import uuid

import pytest

from crew.evaluation_crew import fallback_result
from database.models import Evaluation
from schemas.evaluation import AgentResult, AgentRole
from services.criteria import (
    CriteriaError,
    SCORE_OPTIONS,
    build_criteria,
    criteria_summary,
    fit_label,
    list_criteria,
    score_label,
    to_scale,
    update_criterion_score,
)


@pytest.fixture
async def evaluation(db, project, proposals):
    evaluation = Evaluation(project_id=project.id, proposal_id=proposals[0].id, overall_score=80)
    db.add(evaluation)
    await db.commit()
    return evaluation


class TestScale:
    """The fixed 100 / 50 / 25 / 0 compliance scale."""

    def test_labels(self):
        assert score_label(100) == "Fully met through standard functionality"
        assert score_label(0) == "Not applicable"
        with pytest.raises(CriteriaError):
            score_label(75)

    @pytest.mark.parametrize("score,expected", [(90, 100), (75, 100), (74, 50), (40, 50), (39, 25)])
    def test_to_scale(self, score, expected):
        assert to_scale(score) == expected

    def test_delivery_risk_is_inverted(self):
        assert to_scale(20, higher_is_worse=True) == 100
        assert to_scale(80, higher_is_worse=True) == 25

    @pytest.mark.parametrize("average,expected", [(75, "Strong"), (74.9, "Moderate"), (50, "Moderate"), (49, "Weak")])
    def test_fit_label(self, average, expected):
        assert fit_label(average) == expected


class TestBuildCriteria:
    """Seeding criteria from agent scores."""

    def test_rows_for_successful_agents_only(self):
        evaluation_id = uuid.uuid4()
        results = [
            AgentResult(role=AgentRole.DELIVERY, insights=["x"],
                        scores={"overall": 82, "deliveryRisk": 30, "unknownKey": 10}),
            fallback_result(AgentRole.SECURITY, 0, "boom"),
        ]

        rows = build_criteria(evaluation_id, results)

        assert [(r.role, r.section, r.score) for r in rows] == [
            ("delivery", "Overall Assessment", 100),
            ("delivery", "Delivery", 50),
        ]
        assert all(r.score_label == SCORE_OPTIONS[r.score] for r in rows)


class TestCriteriaPersistence:
    """Listing, re-scoring and summarising criteria."""

    async def test_update_and_summary(self, db, evaluation):
        results = [
            AgentResult(role=AgentRole.PRODUCT, insights=["x"], scores={"overall": 90, "functionalFit": 45}),
            AgentResult(role=AgentRole.SECURITY, insights=["x"], scores={"overall": 20}),
        ]
        db.add_all(build_criteria(evaluation.id, results))
        await db.commit()

        product = await list_criteria(evaluation.id, db, role="product")
        assert len(product) == 2

        functional = next(c for c in product if c.section == "Functional Fit")
        updated = await update_criterion_score(functional.id, 100, db)
        assert updated.score_label == SCORE_OPTIONS[100]

        summary = await criteria_summary(evaluation.id, db)
        assert summary["roles"]["product"] == {"criteria_count": 2, "average_score": 100.0, "fit": "Strong"}
        assert summary["roles"]["security"]["fit"] == "Weak"

    async def test_invalid_score_is_rejected(self, db, evaluation):
        with pytest.raises(CriteriaError):
            await update_criterion_score(uuid.uuid4(), 60, db)

    async def test_unknown_criterion(self, db):
        assert await update_criterion_score(uuid.uuid4(), 50, db) is None
