"""
Evaluation Criteria Service

Per-role criteria behind an evaluation. Rows are seeded from each agent's
scores and can then be re-scored by reviewers using the fixed compliance
scale.
"""

import uuid
from typing import Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from database.models import EvaluationCriteria
from schemas.evaluation import AgentResult


SCORE_OPTIONS = {
    100: "Fully met through standard functionality",
    50: "Partially met through standard or custom extensions",
    25: "Not Compliant - Can be developed",
    0: "Not applicable",
}

# Score key -> (section, question) used when seeding criteria
CRITERIA_QUESTIONS = {
    "overall": ("Overall Assessment", "Does the proposal meet this stakeholder's requirements overall?"),
    "deliveryRisk": ("Delivery", "Can the vendor deliver within the required timeline with acceptable risk?"),
    "integration": ("Integration", "Does the solution integrate with the existing airline systems?"),
    "functionalFit": ("Functional Fit", "Are the functional requirements met through standard functionality?"),
    "scalability": ("Scalability", "Does the solution scale with fleet, network and passenger growth?"),
    "documentation": ("Documentation", "Is the product and technical documentation complete?"),
    "technicalFit": ("Technical Fit", "Does the technical design fit the airline's target architecture?"),
    "compliance": ("Compliance", "Does the solution comply with regulatory and organisational standards?"),
    "support": ("Support", "Does the support model and SLA meet airline operational needs?"),
}


class CriteriaError(ValueError):
    """Invalid criteria operation."""
    pass


def score_label(score: int) -> str:
    """Label for a scale score; raises CriteriaError for scores off the scale."""
    if score not in SCORE_OPTIONS:
        allowed = ", ".join(str(s) for s in SCORE_OPTIONS)
        raise CriteriaError(f"Score must be one of {allowed}, got {score}")
    return SCORE_OPTIONS[score]


def fit_label(average_score: float) -> str:
    if average_score >= 75:
        return "Strong"
    if average_score >= 50:
        return "Moderate"
    return "Weak"


def to_scale(score: int, higher_is_worse: bool = False) -> int:
    """Snap a 0-100 agent score onto the compliance scale."""
    if higher_is_worse:
        score = 100 - score
    if score >= 75:
        return 100
    if score >= 40:
        return 50
    return 25


def build_criteria(evaluation_id: uuid.UUID, results: list[AgentResult]) -> list[EvaluationCriteria]:
    """Criteria rows for every score reported by a successful agent."""
    rows = []
    for result in results:
        if not result.succeeded:
            continue
        for key, value in result.scores.items():
            if key not in CRITERIA_QUESTIONS:
                continue
            section, question = CRITERIA_QUESTIONS[key]
            scaled = to_scale(value, higher_is_worse=(key == "deliveryRisk"))
            rows.append(EvaluationCriteria(
                evaluation_id=evaluation_id,
                role=result.role.value,
                section=section,
                question=question,
                score=scaled,
                score_label=SCORE_OPTIONS[scaled],
            ))
    return rows


async def list_criteria(
    evaluation_id: uuid.UUID,
    db: AsyncSession,
    role: Optional[str] = None
) -> list[EvaluationCriteria]:
    query = select(EvaluationCriteria).where(EvaluationCriteria.evaluation_id == evaluation_id)
    if role:
        query = query.where(EvaluationCriteria.role == role)
    result = await db.execute(query.order_by(EvaluationCriteria.role, EvaluationCriteria.section))
    return list(result.scalars().all())


async def update_criterion_score(
    criterion_id: uuid.UUID,
    score: int,
    db: AsyncSession
) -> Optional[EvaluationCriteria]:
    """Re-score a criterion; the label always follows the score."""
    label = score_label(score)

    criterion = await db.get(EvaluationCriteria, criterion_id)
    if criterion is None:
        return None

    criterion.score = score
    criterion.score_label = label
    await db.commit()
    await db.refresh(criterion)
    return criterion


async def criteria_summary(evaluation_id: uuid.UUID, db: AsyncSession) -> dict:
    """Average score and fit label per role."""
    criteria = await list_criteria(evaluation_id, db)

    by_role: dict[str, list[int]] = {}
    for criterion in criteria:
        by_role.setdefault(criterion.role, []).append(criterion.score)

    roles = {}
    for role, scores in by_role.items():
        average = round(sum(scores) / len(scores), 1)
        roles[role] = {
            "criteria_count": len(scores),
            "average_score": average,
            "fit": fit_label(average),
        }

    return {"evaluation_id": str(evaluation_id), "roles": roles}
