"""
Tests for follow-up questions, vendor comparisons, executive briefings,
document ingestion and portfolio seeding. Agent calls are injected.
"""

import csv
import io
import json

import pytest

from database.models import Evaluation
from schemas.features import BriefingContent, StakeholderRole
from services import briefings, comparisons, document_service, followups
from services.seed import DEFAULT_PORTFOLIOS, seed_portfolios


@pytest.fixture
async def evaluations(db, project, proposals):
    rows = [
        Evaluation(project_id=project.id, proposal_id=proposals[0].id, overall_score=82,
                   status="recommended", ai_rationale="Strong fit"),
        Evaluation(project_id=project.id, proposal_id=proposals[1].id, overall_score=61,
                   status="under-review", ai_rationale="Integration gaps"),
    ]
    db.add_all(rows)
    await db.commit()
    return rows


# ============================================================================
# Follow-up questions
# ============================================================================

class TestFollowupQuestions:
    """Generated clarifying questions per vendor."""

    async def test_generate_skips_malformed_questions(self, db, requirement, proposals):
        calls = []

        async def generator(requirements_text, proposal_text, vendor_name):
            calls.append(vendor_name)
            return {"questions": [
                {"category": "technical", "priority": "high",
                 "question": "How is the SSIM import validated?", "relatedSection": "Integration"},
                {"category": "weather", "priority": "high", "question": "?"},
                {"category": "cost", "priority": "medium", "question": "Is the licence per crew member?"},
            ]}

        questions = await followups.generate_for_proposal(proposals[0].id, db, generator=generator)

        assert calls == ["SkyOps"]
        assert len(questions) == 2
        assert questions[0].related_section == "Integration"
        assert questions[0].is_answered is False

    async def test_no_usable_questions(self, db, proposals):
        async def generator(*args):
            return {"questions": []}

        with pytest.raises(followups.FollowupError):
            await followups.generate_for_proposal(proposals[0].id, db, generator=generator)

    async def test_answer_and_summary(self, db, project, proposals):
        async def generator(*args):
            return {"questions": [
                {"category": "delivery", "priority": "critical", "question": "Who leads cutover?"},
                {"category": "delivery", "priority": "low", "question": "Is training onsite?"},
            ]}

        questions = await followups.generate_for_proposal(proposals[1].id, db, generator=generator)
        await followups.answer_question(questions[0].id, "Our Dubai delivery lead", db)

        summary = await followups.questions_summary(project.id, db)

        assert summary["total"] == 2
        assert summary["answered"] == 1
        assert summary["byCategory"]["delivery"] == 2
        assert summary["byCategory"]["cost"] == 0
        assert summary["byPriority"]["critical"] == 1
        assert len(await followups.list_questions(db, proposal_id=proposals[0].id)) == 0


# ============================================================================
# Comparisons
# ============================================================================

COMPARISON = {
    "comparisonTitle": "Crew rostering shortlist",
    "executiveSummary": "SkyOps leads on fit, AeroSoft on price.",
    "vendors": [
        {
            "vendorName": "skyops",
            "overallScore": 82,
            "strengths": ["Optimiser"],
            "dimensions": {
                "technicalCapability": {"score": 88},
                "deliveryRisk": {"score": 30},
                "costCompetitiveness": {"score": 60},
                "compliance": {"score": 80},
                "innovation": {"score": 75},
                "teamExperience": {"score": 70},
            },
        },
        {"vendorName": "AeroSoft", "overallScore": 61},
    ],
    "recommendations": {"topChoice": "SkyOps", "rationale": "Best fit"},
    "keyDifferentiators": ["Disruption handling"],
}


class TestComparisons:
    """Comparison snapshots and their exports."""

    async def test_generate_matches_proposals_by_vendor_name(self, db, project, requirement, proposals, evaluations):
        received = {}

        async def generator(requirements_text, vendors_text, vendor_count, focus):
            received.update(vendors=json.loads(vendors_text), count=vendor_count, focus=focus)
            return COMPARISON

        snapshot = await comparisons.generate_comparison(project.id, db, focus="delivery risk", generator=generator)

        assert received["count"] == 2
        assert received["focus"] == "delivery risk"
        assert received["vendors"][0]["evaluation"]["overall"] == 82
        assert snapshot.title == "Crew rostering shortlist"
        assert snapshot.comparison_data["vendors"][0]["proposalId"] == str(proposals[0].id)
        assert snapshot.highlights["topChoice"] == "SkyOps"
        assert snapshot.meta == {"focus": "delivery risk", "vendorCount": 2}

    async def test_needs_two_vendors(self, db, project, proposals):
        async def generator(*args):
            raise AssertionError("should not be called")

        with pytest.raises(comparisons.ComparisonError):
            await comparisons.generate_comparison(
                project.id, db, proposal_ids=[proposals[0].id], generator=generator
            )

    async def test_csv_export(self, db, project, proposals):
        async def generator(*args):
            return COMPARISON

        snapshot = await comparisons.generate_comparison(project.id, db, generator=generator)
        content, media_type = comparisons.export_comparison(snapshot, "CSV")

        rows = list(csv.reader(io.StringIO(content)))
        assert media_type == "text/csv"
        assert rows[0] == comparisons.CSV_HEADER
        assert rows[1] == ["skyops", "82", "88", "30", "60", "80", "75", "70"]
        assert rows[2] == ["AeroSoft", "61", "0", "0", "0", "0", "0", "0"]

        exported, media_type = comparisons.export_comparison(snapshot, "json")
        assert media_type == "application/json"
        assert json.loads(exported)["title"] == "Crew rostering shortlist"

        with pytest.raises(comparisons.ComparisonError):
            comparisons.export_comparison(snapshot, "xlsx")

    async def test_delete(self, db, project, proposals):
        async def generator(*args):
            return COMPARISON

        snapshot = await comparisons.generate_comparison(project.id, db, generator=generator)

        assert await comparisons.delete_comparison(snapshot.id, db) is True
        assert await comparisons.delete_comparison(snapshot.id, db) is False
        assert await comparisons.list_comparisons(project.id, db) == []


# ============================================================================
# Executive briefings
# ============================================================================

BRIEFING = {
    "topRecommendation": "Proceed with SkyOps to POC",
    "keyFindings": ["SkyOps scores highest", "AeroSoft needs custom adapters"],
    "riskSummary": {"risks": ["Cutover during summer peak"], "mitigations": ["Parallel run"]},
    "nextSteps": ["Agree POC scope", "Negotiate SOW"],
}


class TestBriefings:
    """Stakeholder briefings rendered as markdown."""

    def test_markdown_layout(self):
        markdown = briefings.format_briefing_as_markdown(BriefingContent.model_validate(BRIEFING))

        assert markdown == (
            "# Proceed with SkyOps to POC\n"
            "\n"
            "## Key Findings\n"
            "\n"
            "1. SkyOps scores highest\n"
            "2. AeroSoft needs custom adapters\n"
            "\n"
            "## Risk Summary\n"
            "\n"
            "### Risks\n"
            "\n"
            "- Cutover during summer peak\n"
            "\n"
            "### Mitigations\n"
            "\n"
            "- Parallel run\n"
            "\n"
            "## Next Steps\n"
            "\n"
            "1. Agree POC scope\n"
            "2. Negotiate SOW\n"
        )

    async def test_generate(self, db, project, evaluations):
        received = {}

        async def generator(role, project_name, evaluations_text, proposals_text):
            received.update(role=role, project=project_name, evaluations=json.loads(evaluations_text))
            return BRIEFING

        briefing = await briefings.generate_briefing(project.id, StakeholderRole.CFO, db, generator=generator)

        assert received["role"] == "CFO"
        assert received["project"] == "Crew Rostering Replacement"
        assert received["evaluations"][0]["vendorName"] == "SkyOps"
        assert briefing.title == "Executive Briefing for CFO"
        assert briefing.content.startswith("# Proceed with SkyOps to POC")
        assert briefing.recommendations["nextSteps"] == BRIEFING["nextSteps"]

        assert len(await briefings.list_briefings(project.id, db, stakeholder_role=StakeholderRole.CFO)) == 1
        assert await briefings.list_briefings(project.id, db, stakeholder_role=StakeholderRole.CEO) == []

    async def test_requires_evaluations(self, db, project, proposals):
        async def generator(*args):
            return BRIEFING

        with pytest.raises(briefings.BriefingError):
            await briefings.generate_briefing(project.id, StakeholderRole.CTO, db, generator=generator)

    async def test_invalid_agent_output(self, db, project, evaluations):
        async def generator(*args):
            return {"topRecommendation": "Proceed"}

        with pytest.raises(ValueError):
            await briefings.generate_briefing(project.id, StakeholderRole.CEO, db, generator=generator)


# ============================================================================
# Document ingestion
# ============================================================================

class TestDocumentIngestion:
    """Upload storage, text extraction and analysis."""

    async def test_requirement_analysis_is_stored(self, db, project):
        async def analyzer(text):
            return {"scope": text.splitlines()[0]}

        requirement = await document_service.ingest_requirement(
            project.id, "rft.txt", b"Crew rostering RFT\nDetails", db, analyzer=analyzer
        )

        assert requirement.extracted_data == {"scope": "Crew rostering RFT"}
        assert (document_service.settings.uploads_dir / str(project.id) / "rft.txt").exists()

    async def test_failed_analysis_keeps_raw_text(self, db, project):
        async def analyzer(text, file_name):
            raise RuntimeError("LLM down")

        proposal = await document_service.ingest_proposal(
            project.id, "acme_air-systems.txt", b"Our proposal", db, analyzer=analyzer
        )

        assert proposal.vendor_name == "acme air systems"
        assert proposal.extracted_data["documentText"] == "Our proposal"
        assert proposal.extracted_data["analysisError"] == "LLM down"

    async def test_placeholder_vendor_name_uses_file_name(self, db, project):
        async def analyzer(text, file_name):
            return {"vendorName": "Unknown", "technicalApproach": "SaaS"}

        proposal = await document_service.ingest_proposal(
            project.id, "skyops.md", b"# SkyOps", db, analyzer=analyzer
        )

        assert proposal.vendor_name == "skyops"

    async def test_empty_document_is_rejected(self, db, project):
        with pytest.raises(document_service.DocumentError):
            await document_service.ingest_requirement(project.id, "empty.txt", b"   ", db)


# ============================================================================
# Seeding
# ============================================================================

class TestSeedPortfolios:
    """Default airline portfolios."""

    async def test_idempotent(self, db, portfolio):
        created = await seed_portfolios(db)

        assert len(created) == len(DEFAULT_PORTFOLIOS) - 1
        assert await seed_portfolios(db) == []
