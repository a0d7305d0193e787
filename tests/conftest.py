"""
Shared fixtures for IntelliBid tests.

Every test that touches the database gets its own SQLite file; LLM agents
are replaced by fake runners returning canned JSON.
"""

import json
import sys
from pathlib import Path

import httpx
import pytest

BASE_DIR = Path(__file__).resolve().parent.parent
sys.path.insert(0, str(BASE_DIR))

from agents.base import AgentRun
from config.settings import settings
from database import connection
from database.models import Portfolio, Project, Proposal, Requirement
from schemas.evaluation import ROLE_SCORE_KEYS, AgentRole
from services import progress


# ============================================================================
# Database
# ============================================================================

@pytest.fixture
async def database(tmp_path, monkeypatch):
    """Fresh SQLite database with all tables created."""
    monkeypatch.setattr(settings, "database_url", f"sqlite+aiosqlite:///{tmp_path / 'test.db'}")
    monkeypatch.setattr(settings, "data_dir", tmp_path / "data")

    await connection.close_db()
    await connection.init_db()
    yield
    await connection.close_db()


@pytest.fixture
async def db(database):
    """Session bound to the test database."""
    async with connection.get_session_factory()() as session:
        yield session


@pytest.fixture
async def client(database, monkeypatch):
    """HTTP client against the app; lifespan is skipped, tables already exist."""
    from api.main import app
    from api.middleware.rate_limit import limiter

    monkeypatch.setattr(limiter, "enabled", False)
    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as http:
        yield http


@pytest.fixture(autouse=True)
def progress_service(monkeypatch):
    """Isolated progress registry per test."""
    service = progress.ProgressService()
    monkeypatch.setattr(progress, "progress_service", service)
    return service


# ============================================================================
# Sample data
# ============================================================================

@pytest.fixture
async def portfolio(db):
    portfolio = Portfolio(name="Operations, Safety & Security", description="Operational excellence")
    db.add(portfolio)
    await db.commit()
    return portfolio


@pytest.fixture
async def project(db, portfolio):
    project = Project(
        portfolio_id=portfolio.id,
        name="Crew Rostering Replacement",
        initiative_name="Crew Ops 2027",
    )
    db.add(project)
    await db.commit()
    return project


@pytest.fixture
async def requirement(db, project):
    requirement = Requirement(
        project_id=project.id,
        document_type="RFT",
        file_name="crew-rostering-rft.pdf",
        extracted_data={
            "scope": "Replace the crew rostering and pairing platform",
            "technicalRequirements": ["Real-time disruption handling", "IATA SSIM import"],
            "functionalRequirements": ["Fatigue risk management", "Bid-line rostering"],
            "timeline": "18 months",
            "budget": "USD 4-6M",
            "evaluationCriteria": ["Functional fit", "Delivery risk", "Total cost"],
            "documentText": "Full RFT text",
        },
    )
    db.add(requirement)
    await db.commit()
    return requirement


@pytest.fixture
async def proposals(db, project):
    proposals = [
        Proposal(
            project_id=project.id,
            vendor_name="SkyOps",
            file_name="skyops-proposal.pdf",
            extracted_data={
                "vendorName": "SkyOps",
                "technicalApproach": "Cloud-native optimiser with event streaming",
                "costStructure": "USD 4.2M over 5 years",
            },
        ),
        Proposal(
            project_id=project.id,
            vendor_name="AeroSoft",
            file_name="aerosoft-proposal.pdf",
            extracted_data={
                "vendorName": "AeroSoft",
                "technicalApproach": "On-premise suite with custom adapters",
            },
        ),
    ]
    for proposal in proposals:
        db.add(proposal)
        # Distinct created_at ordering
        await db.commit()
    return proposals


# ============================================================================
# Fake agents
# ============================================================================

def agent_answer(role: AgentRole, score: int = 80, status: str = "recommended", **overrides) -> str:
    """Canned JSON answer of a role agent."""
    scores = {key: score for key in ROLE_SCORE_KEYS[role]}
    if "deliveryRisk" in scores:
        scores["deliveryRisk"] = 30
    scores.update(overrides)
    return json.dumps({
        "insights": [f"{role.label} insight {i}" for i in range(1, 5)],
        "scores": scores,
        "rationale": f"{role.label} is satisfied",
        "status": status,
    })


@pytest.fixture
def make_runner():
    """
    Build a fake agent runner.

    Args (of the returned factory):
        answers: role -> raw answer overriding the default
        failing: roles whose runner raises
        tokens: token usage reported per agent
    """
    def factory(answers=None, failing=(), tokens=1200):
        answers = answers or {}

        async def runner(role, context):
            if role in failing:
                raise RuntimeError(f"{role.value} agent unavailable")
            return AgentRun(raw=answers.get(role, agent_answer(role)), total_tokens=tokens)

        return runner

    return factory
