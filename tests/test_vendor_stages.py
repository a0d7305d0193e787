"""
Tests for vendor shortlisting stages.
"""

import uuid

import pytest

from database.models import Proposal
from services.vendor_stages import (
    SHORTLISTING_STAGES,
    StageError,
    build_stage_statuses,
    get_project_vendor_stages,
    synchronize_vendor_stages,
    update_vendor_stage,
)


class TestStageStatuses:
    """Per-stage status derived from the current stage."""

    def test_ten_ordered_stages(self):
        assert [s["stage"] for s in SHORTLISTING_STAGES] == list(range(1, 11))
        assert SHORTLISTING_STAGES[6]["name"] == "RFT Evaluation Completed"

    def test_statuses(self):
        statuses = build_stage_statuses(3)

        assert statuses["1"]["status"] == "completed"
        assert statuses["2"]["date"] is not None
        assert statuses["3"] == {"status": "in_progress", "date": None}
        assert statuses["10"] == {"status": "pending", "date": None}
        assert len(statuses) == 10


class TestSynchronizeVendorStages:
    """Advancing every vendor of a project."""

    async def test_creates_records_at_evaluated_stage(self, db, project, proposals):
        summary = await synchronize_vendor_stages(project.id, db)

        assert summary["created"] == 2
        stages = await get_project_vendor_stages(project.id, db)
        assert {s.vendor_name for s in stages} == {"SkyOps", "AeroSoft"}
        assert all(s.current_stage == 7 for s in stages)
        assert stages[0].stage_statuses["7"]["status"] == "in_progress"

    async def test_never_moves_backwards(self, db, project, proposals):
        await synchronize_vendor_stages(project.id, db, evaluated_stage=7)
        summary = await synchronize_vendor_stages(project.id, db, evaluated_stage=5)

        assert summary == {"created": 0, "updated": 0, "vendors": []}
        stages = await get_project_vendor_stages(project.id, db)
        assert all(s.current_stage == 7 for s in stages)

    async def test_moves_forward(self, db, project, proposals):
        await synchronize_vendor_stages(project.id, db, evaluated_stage=5)
        summary = await synchronize_vendor_stages(project.id, db, evaluated_stage=8)

        assert summary["updated"] == 2
        stages = await get_project_vendor_stages(project.id, db)
        assert all(s.current_stage == 8 for s in stages)

    async def test_duplicate_vendor_names_share_one_record(self, db, project, proposals):
        db.add(Proposal(project_id=project.id, vendor_name="SkyOps", file_name="skyops-addendum.pdf"))
        await db.commit()

        summary = await synchronize_vendor_stages(project.id, db)

        assert summary["created"] == 2

    async def test_variance_spreads_vendors(self, db, project):
        for name in ("A", "B", "C", "D"):
            db.add(Proposal(project_id=project.id, vendor_name=name, file_name=f"{name}.pdf"))
            await db.commit()

        await synchronize_vendor_stages(project.id, db, allow_variance=True)

        stages = {s.vendor_name: s.current_stage for s in await get_project_vendor_stages(project.id, db)}
        assert stages == {"A": 6, "B": 7, "C": 7, "D": 8}

    async def test_no_proposals(self, db, project):
        summary = await synchronize_vendor_stages(project.id, db)
        assert summary["created"] == 0

    async def test_invalid_stage(self, db, project):
        with pytest.raises(StageError):
            await synchronize_vendor_stages(project.id, db, evaluated_stage=11)


class TestUpdateVendorStage:
    """Explicit stage changes."""

    async def test_can_move_backwards(self, db, project, proposals):
        await synchronize_vendor_stages(project.id, db)
        record = (await get_project_vendor_stages(project.id, db))[0]

        updated = await update_vendor_stage(record.id, 3, db)

        assert updated.current_stage == 3
        assert updated.stage_statuses["7"]["status"] == "pending"

    async def test_unknown_record(self, db):
        assert await update_vendor_stage(uuid.uuid4(), 3, db) is None

    async def test_out_of_range(self, db):
        with pytest.raises(StageError):
            await update_vendor_stage(uuid.uuid4(), 0, db)
