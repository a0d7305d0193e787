"""
Tests for agent helpers that do not call an LLM.
"""

import pytest

from agents.base import validate_json_output
from agents.proposal_analysis_agent import vendor_name_from_filename
from agents.role_task import build_standard_block
from agents.roles import ROLE_AGENTS, get_fallback_insights
from schemas.evaluation import AgentRole
from services.document_processor import UnsupportedDocumentError, extract_text_from_bytes


class TestValidateJsonOutput:
    """Parsing agent answers."""

    def test_plain_json(self):
        assert validate_json_output('{"a": 1}', ["a"]) == {"a": 1}

    def test_unlabelled_code_fence(self):
        assert validate_json_output('Here:\n```\n{"a": 1}\n```', ["a"]) == {"a": 1}

    def test_missing_keys(self):
        with pytest.raises(ValueError, match="Missing required keys"):
            validate_json_output('{"a": 1}', ["a", "b"])

    def test_array_is_rejected(self):
        with pytest.raises(ValueError, match="expected an object"):
            validate_json_output("[1, 2]", [])


class TestRoleRegistry:
    """Six role agents with static fallbacks."""

    def test_every_role_registered(self):
        assert set(ROLE_AGENTS) == set(AgentRole)

    def test_fallback_insights(self):
        for role in AgentRole:
            assert get_fallback_insights(role)

    def test_standard_block(self):
        assert build_standard_block(None, ["Identity"]) == ""
        assert build_standard_block("Group IT", []) == ""

        block = build_standard_block("Group IT", ["Identity", "Data Residency"])
        assert "Standard: Group IT" in block
        assert "- Data Residency" in block


class TestDocumentHelpers:
    """File name and text helpers."""

    def test_vendor_name_from_filename(self):
        assert vendor_name_from_filename("acme_air-systems.pdf") == "acme air systems"

    def test_text_extraction(self):
        assert extract_text_from_bytes(b"  Scope of work \n", "rft.md") == "Scope of work"

    def test_latin1_fallback(self):
        assert extract_text_from_bytes("Zürich".encode("latin-1"), "rft.txt") == "Zürich"

    def test_unsupported_extension(self):
        with pytest.raises(UnsupportedDocumentError):
            extract_text_from_bytes(b"data", "rft.xlsx")
