"""
Tests for characteristic scoring and vendor questionnaire scoring.
"""

import pytest

from services.scoring import (
    CHARACTERISTIC_WEIGHTS,
    calculate_characteristic_matrix,
    calculate_hybrid_score,
    calculate_vendor_questionnaire_scores,
    characteristic_scores,
    detect_questionnaire_type,
    extract_nfr_section_scores,
    map_excel_scores_to_evaluation,
    map_nfr_to_characteristics,
    rank_vendors,
    round_half_up,
    score_questionnaire,
)


EVALUATION = {
    "functional_fit": 80,
    "technical_fit": 70,
    "delivery_risk": 30,
    "compliance": 90,
}


# ============================================================================
# Characteristic matrix
# ============================================================================

class TestCharacteristicMatrix:
    """Seven weighted software quality characteristics."""

    def test_weights_sum_to_one(self):
        assert sum(CHARACTERISTIC_WEIGHTS.values()) == pytest.approx(1.0)

    def test_fallbacks_from_aggregated_scores(self):
        scores = characteristic_scores(EVALUATION)

        assert scores["compatibility"] == 80
        assert scores["maintainability"] == pytest.approx(71)  # 70*0.8 + 75*0.2
        assert scores["performanceEfficiency"] == 70
        assert scores["portability"] == pytest.approx(70)  # 70*0.6 + 70*0.4
        assert scores["reliability"] == 70
        assert scores["security"] == 90
        assert scores["usability"] == pytest.approx(77.5)

    def test_grand_total_is_weighted_sum(self):
        matrix = calculate_characteristic_matrix(EVALUATION)

        assert len(matrix["characteristics"]) == 7
        assert matrix["grand_total"] == pytest.approx(75.37)
        reliability = next(c for c in matrix["characteristics"] if c["characteristic"] == "reliability")
        assert reliability["weight"] == 0.20
        assert reliability["weighted_score"] == pytest.approx(14.0)

    def test_detailed_scores_take_precedence_over_fallbacks(self):
        evaluation = {**EVALUATION, "detailed_scores": {"security": 55, "integration": 90}}
        scores = characteristic_scores(evaluation)

        assert scores["security"] == 55
        assert scores["portability"] == pytest.approx(82)  # 90*0.6 + 70*0.4

    def test_questionnaire_values_take_precedence_over_everything(self):
        evaluation = {**EVALUATION, "detailed_scores": {"security": 55}}
        scores = characteristic_scores(evaluation, {"security": 42.5, "usability": None})

        assert scores["security"] == 42.5
        assert scores["usability"] == pytest.approx(77.5)

    def test_rank_vendors(self):
        ranked = rank_vendors([
            {"vendor_name": "AeroSoft", "grand_total": 61.2},
            {"vendor_name": "SkyOps", "grand_total": 78.9},
            {"vendor_name": "JetLogic", "grand_total": 70.0},
        ])

        assert [v["vendor_name"] for v in ranked] == ["SkyOps", "JetLogic", "AeroSoft"]
        assert [v["rank"] for v in ranked] == [1, 2, 3]

    def test_round_half_up(self):
        assert round_half_up(2.5) == 3
        assert round_half_up(77.25, 1) == 77.3


# ============================================================================
# Questionnaires
# ============================================================================

class TestQuestionnaires:
    """Full / partial / none compliance questionnaires."""

    @pytest.mark.parametrize("file_name,expected", [
        ("SkyOps_Product_Questionnaire.xlsx", "product"),
        ("NFR responses v2.xlsx", "nfr"),
        ("non-functional.xlsx", "nfr"),
        ("Cybersecurity Checklist.xlsx", "cybersecurity"),
        ("security-controls.xlsx", "cybersecurity"),
        ("Agile delivery.xlsx", "agile"),
        ("pricing.xlsx", None),
    ])
    def test_detect_type(self, file_name, expected):
        assert detect_questionnaire_type(file_name) == expected

    def test_score_questionnaire(self):
        result = score_questionnaire([
            {"section": "Performance", "compliance": "Full"},
            {"section": "Performance", "compliance": "partial"},
            {"section": "Security", "compliance": "None"},
            {"section": "Security", "compliance": ""},
            {"section": "Security", "compliance": "Not Applicable"},
        ])

        assert result["total_questions"] == 5
        assert result["answered_questions"] == 4
        assert result["not_applicable_questions"] == 1
        assert result["overall_score"] == 37.5
        assert result["breakdown"] == {"full": 1, "partial": 1, "none": 2, "not_applicable": 1}
        assert result["section_scores"] == {"performance": 75.0, "security": 0.0}

    def test_all_not_applicable_scores_zero(self):
        result = score_questionnaire([{"compliance": "N/A"}])
        assert result["overall_score"] == 0
        assert result["section_scores"] == {"uncategorized": 0}

    def test_extract_nfr_sections_by_substring(self):
        sections = extract_nfr_section_scores({
            "3. performance & capacity": 80,
            "security controls": 60,
        })

        assert sections["performance"] == 80
        assert sections["security"] == 60
        assert sections["usability"] == 0

    def test_map_nfr_blends_cybersecurity(self):
        nfr = {key: 50 for key in (
            "performance", "reliability", "scalability", "security",
            "compliance", "compatibility", "maintainability", "usability",
        )}
        nfr["performance"] = 90

        with_cyber = map_nfr_to_characteristics(nfr, cybersecurity_score=100)
        without_cyber = map_nfr_to_characteristics(nfr)

        assert with_cyber["security"] == 80  # 50*0.4 + 100*0.6
        assert without_cyber["security"] == 50
        assert with_cyber["performanceEfficiency"] == 78  # 90*0.7 + 50*0.3

    def test_vendor_questionnaires(self):
        scores = calculate_vendor_questionnaire_scores([
            {"file_name": "product.xlsx", "questions": [{"compliance": "full"}]},
            {"file_name": "nfr.xlsx", "questions": [
                {"section": "Reliability", "compliance": "partial"},
                {"section": "Performance", "compliance": "full"},
            ]},
            {"file_name": "pricing.xlsx", "questions": [{"compliance": "none"}]},
        ])

        assert scores["product"]["overall_score"] == 100
        assert scores["nfr"]["overall_score"] == 75
        assert scores["cybersecurity"] is None
        assert scores["average_score"] == 87.5
        assert scores["nfr_section_scores"]["reliability"] == 50
        assert scores["characteristic_scores"]["reliability"] == 50

    def test_excel_scores_as_evaluation_dimensions(self):
        mapped = map_excel_scores_to_evaluation({
            "product": {"overall_score": 100},
            "nfr": {"overall_score": 50},
            "cybersecurity": None,
            "agile": {"overall_score": 80},
        })

        assert mapped == {
            "technical_fit": 75.0,
            "integration": 65.0,
            "compliance": 0,
            "delivery_risk": 20,
        }


# ============================================================================
# Hybrid score
# ============================================================================

class TestHybridScore:
    """AI score blended with the questionnaire score."""

    def test_without_questionnaire(self):
        hybrid = calculate_hybrid_score(72, None)
        assert hybrid["combined_score"] == 72
        assert hybrid["weight"] == {"ai": 1.0, "excel": 0.0}

    def test_default_weights(self):
        hybrid = calculate_hybrid_score(80, 60)
        assert hybrid["combined_score"] == 68.0
        assert hybrid["weight"] == {"ai": 0.4, "excel": 0.6}
