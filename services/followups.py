"""
Follow-up Questions Service

Generates clarifying questions for a vendor from its proposal and tracks
their answers.
"""

import logging
import uuid
from typing import Awaitable, Callable, Optional

from pydantic import ValidationError as PydanticValidationError
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from agents.followup_agent import generate_followup_questions
from database.models import FollowupQuestion, Proposal, Requirement
from schemas.features import FollowupQuestionItem, QuestionCategory, QuestionPriority
from services.evaluation_service import proposal_context, requirements_context

logger = logging.getLogger("intellibid.services.followups")

QuestionGenerator = Callable[[str, str, str], Awaitable[dict]]


class FollowupError(ValueError):
    """Follow-up questions cannot be generated."""
    pass


def parse_questions(data: dict) -> list[FollowupQuestionItem]:
    """Validated questions from an agent answer; malformed entries are skipped."""
    items = []
    for raw in data.get("questions") or []:
        try:
            items.append(FollowupQuestionItem.model_validate(raw))
        except PydanticValidationError as e:
            logger.warning(f"Skipping malformed follow-up question: {e.error_count()} errors")
    return items


async def generate_for_proposal(
    proposal_id: uuid.UUID,
    db: AsyncSession,
    generator: Optional[QuestionGenerator] = None
) -> list[FollowupQuestion]:
    """Generate and store follow-up questions for one proposal."""
    proposal = await db.get(Proposal, proposal_id)
    if proposal is None:
        raise FollowupError(f"Proposal {proposal_id} not found")

    requirements = list((await db.execute(
        select(Requirement).where(Requirement.project_id == proposal.project_id)
    )).scalars().all())

    generate = generator or generate_followup_questions
    data = await generate(
        requirements_context(requirements),
        proposal_context(proposal),
        proposal.vendor_name
    )

    items = parse_questions(data)
    if not items:
        raise FollowupError("The follow-up agent returned no usable questions")

    questions = [
        FollowupQuestion(
            project_id=proposal.project_id,
            proposal_id=proposal.id,
            category=item.category.value,
            priority=item.priority.value,
            question=item.question,
            context=item.context,
            related_section=item.related_section,
            ai_rationale=item.ai_rationale,
        )
        for item in items
    ]
    db.add_all(questions)
    await db.commit()
    for question in questions:
        await db.refresh(question)

    logger.info(f"Generated {len(questions)} follow-up questions for {proposal.vendor_name}")
    return questions


async def list_questions(
    db: AsyncSession,
    project_id: Optional[uuid.UUID] = None,
    proposal_id: Optional[uuid.UUID] = None
) -> list[FollowupQuestion]:
    query = select(FollowupQuestion)
    if project_id is not None:
        query = query.where(FollowupQuestion.project_id == project_id)
    if proposal_id is not None:
        query = query.where(FollowupQuestion.proposal_id == proposal_id)
    result = await db.execute(query.order_by(FollowupQuestion.created_at))
    return list(result.scalars().all())


async def answer_question(
    question_id: uuid.UUID,
    answer: str,
    db: AsyncSession
) -> Optional[FollowupQuestion]:
    question = await db.get(FollowupQuestion, question_id)
    if question is None:
        return None

    question.answer = answer
    question.is_answered = bool(answer.strip())
    await db.commit()
    await db.refresh(question)
    return question


async def questions_summary(project_id: uuid.UUID, db: AsyncSession) -> dict:
    """Counts by category, by priority and by answered state."""
    questions = await list_questions(db, project_id=project_id)

    by_category = {c.value: 0 for c in QuestionCategory}
    by_priority = {p.value: 0 for p in QuestionPriority}
    answered = 0
    for question in questions:
        by_category[question.category] = by_category.get(question.category, 0) + 1
        by_priority[question.priority] = by_priority.get(question.priority, 0) + 1
        if question.is_answered:
            answered += 1

    return {
        "total": len(questions),
        "answered": answered,
        "unanswered": len(questions) - answered,
        "byCategory": by_category,
        "byPriority": by_priority,
    }
