"""
Scoring Service

Software quality characteristic scoring (ISO/IEC 25010 style) and vendor
questionnaire scoring.

Characteristic values come from questionnaire answers when a vendor has
them, then from detailed agent scores, then from fixed fallbacks over the
aggregated evaluation scores. The grand total is a fixed weighted sum.
"""

import math
from typing import Optional


CHARACTERISTIC_WEIGHTS = {
    "compatibility": 0.15,
    "maintainability": 0.12,
    "performanceEfficiency": 0.18,
    "portability": 0.10,
    "reliability": 0.20,
    "security": 0.15,
    "usability": 0.10,
}

CHARACTERISTIC_LABELS = {
    "compatibility": "Compatibility",
    "maintainability": "Maintainability",
    "performanceEfficiency": "Performance Efficiency",
    "portability": "Portability",
    "reliability": "Reliability",
    "security": "Security",
    "usability": "Usability",
}

# Detailed score key that can stand in directly for a characteristic
DETAILED_KEYS = {
    "compatibility": "compatibility",
    "maintainability": "maintainability",
    "performanceEfficiency": "performance",
    "portability": "portability",
    "reliability": "reliability",
    "security": "security",
    "usability": "usability",
}

NFR_SECTIONS = [
    "performance", "reliability", "scalability", "security",
    "compliance", "compatibility", "maintainability", "usability",
]

QUESTIONNAIRE_TYPES = ["product", "nfr", "cybersecurity", "agile"]

ANSWER_POINTS = {"full": 100, "partial": 50, "none": 0, "": 0}
NOT_APPLICABLE_ANSWERS = {"not applicable", "n/a"}

DEFAULT_AI_WEIGHT = 0.4
DEFAULT_EXCEL_WEIGHT = 0.6


def round_half_up(value: float, digits: int = 0) -> float:
    """Round like a spreadsheet does (0.5 always rounds up)."""
    factor = 10 ** digits
    return math.floor(value * factor + 0.5) / factor


# ============================================================================
# Characteristic matrix
# ============================================================================

def _fallback_characteristic(name: str, evaluation: dict, detailed: dict) -> float:
    functional_fit = evaluation.get("functional_fit", 0)
    technical_fit = evaluation.get("technical_fit", 0)
    documentation = detailed.get("documentation")
    documentation = 75 if documentation is None else documentation
    integration = detailed.get("integration")
    integration = 70 if integration is None else integration

    if name == "compatibility":
        return functional_fit
    if name == "maintainability":
        return technical_fit * 0.8 + documentation * 0.2
    if name == "performanceEfficiency":
        return technical_fit
    if name == "portability":
        return integration * 0.6 + technical_fit * 0.4
    if name == "reliability":
        return 100 - evaluation.get("delivery_risk", 0)
    if name == "security":
        return evaluation.get("compliance", 0)
    if name == "usability":
        return documentation * 0.5 + functional_fit * 0.5
    raise ValueError(f"Unknown characteristic: {name}")


def characteristic_scores(
    evaluation: dict,
    excel_characteristics: Optional[dict] = None
) -> dict[str, float]:
    """
    Resolve the seven characteristic values for one vendor.

    Args:
        evaluation: Aggregated scores (functional_fit, technical_fit,
            delivery_risk, compliance) plus optional detailed_scores
        excel_characteristics: Questionnaire-derived characteristic values
    """
    detailed = evaluation.get("detailed_scores") or {}
    excel_characteristics = excel_characteristics or {}

    scores = {}
    for name in CHARACTERISTIC_WEIGHTS:
        if excel_characteristics.get(name) is not None:
            scores[name] = excel_characteristics[name]
        elif detailed.get(DETAILED_KEYS[name]) is not None:
            scores[name] = detailed[DETAILED_KEYS[name]]
        else:
            scores[name] = _fallback_characteristic(name, evaluation, detailed)
    return scores


def calculate_characteristic_matrix(
    evaluation: dict,
    excel_characteristics: Optional[dict] = None
) -> dict:
    """
    Weighted characteristic breakdown and grand total for one vendor.

    Returns:
        {"characteristics": [...], "grand_total": float}
    """
    scores = characteristic_scores(evaluation, excel_characteristics)

    rows = []
    grand_total = 0.0
    for name, weight in CHARACTERISTIC_WEIGHTS.items():
        weighted = scores[name] * weight
        grand_total += weighted
        rows.append({
            "characteristic": name,
            "label": CHARACTERISTIC_LABELS[name],
            "raw_score": round_half_up(scores[name], 2),
            "weight": weight,
            "weighted_score": round_half_up(weighted, 2),
        })

    return {
        "characteristics": rows,
        "grand_total": round_half_up(grand_total, 2),
    }


def rank_vendors(vendor_matrices: list[dict]) -> list[dict]:
    """Sort vendor matrices by grand total (highest first) and number them."""
    ranked = sorted(vendor_matrices, key=lambda v: v["grand_total"], reverse=True)
    for rank, vendor in enumerate(ranked, 1):
        vendor["rank"] = rank
    return ranked


# ============================================================================
# Questionnaires
# ============================================================================

def detect_questionnaire_type(file_name: str) -> Optional[str]:
    """Questionnaire type from its file name, or None when unrecognised."""
    name = file_name.lower()
    if "product" in name:
        return "product"
    if "nfr" in name or "non-functional" in name:
        return "nfr"
    if "cybersecurity" in name or "security" in name:
        return "cybersecurity"
    if "agile" in name:
        return "agile"
    return None


def _answer_points(answer: Optional[str]) -> Optional[int]:
    """Points for one compliance answer; None for not applicable or unknown."""
    value = (answer or "").strip().lower()
    if value in NOT_APPLICABLE_ANSWERS:
        return None
    return ANSWER_POINTS.get(value)


def score_questionnaire(questions: list[dict]) -> dict:
    """
    Score a compliance questionnaire.

    Each question is a dict with "compliance" (full / partial / none /
    not applicable) and an optional "section".
    """
    breakdown = {"full": 0, "partial": 0, "none": 0, "not_applicable": 0}
    sections: dict[str, list[int]] = {}

    for question in questions:
        answer = (question.get("compliance") or "").strip().lower()
        if answer in NOT_APPLICABLE_ANSWERS:
            breakdown["not_applicable"] += 1
        elif answer in ("none", ""):
            breakdown["none"] += 1
        elif answer in breakdown:
            breakdown[answer] += 1

        section = (question.get("section") or "").strip().lower() or "uncategorized"
        points = sections.setdefault(section, [])
        value = _answer_points(answer)
        if value is not None:
            points.append(value)

    answered = breakdown["full"] + breakdown["partial"] + breakdown["none"]
    overall = 0.0
    if answered:
        overall = (breakdown["full"] * 100 + breakdown["partial"] * 50) / answered

    section_scores = {
        section: round_half_up(sum(points) / len(points), 1) if points else 0
        for section, points in sections.items()
    }

    return {
        "total_questions": len(questions),
        "answered_questions": answered,
        "not_applicable_questions": breakdown["not_applicable"],
        "overall_score": round_half_up(overall, 1),
        "breakdown": breakdown,
        "section_scores": section_scores,
    }


def extract_nfr_section_scores(section_scores: dict[str, float]) -> dict[str, float]:
    """Pick the NFR categories out of free-form section names by substring match."""
    result = {}
    for key in NFR_SECTIONS:
        match = next((name for name in section_scores if key in name.lower()), None)
        result[key] = section_scores[match] if match is not None else 0
    return result


def map_nfr_to_characteristics(
    nfr_sections: dict[str, float],
    cybersecurity_score: Optional[float] = None
) -> dict[str, float]:
    """Translate NFR section scores into characteristic values."""
    if cybersecurity_score is not None and cybersecurity_score > 0:
        security = round_half_up(nfr_sections["security"] * 0.4 + cybersecurity_score * 0.6, 1)
    else:
        security = nfr_sections["security"]

    return {
        "compatibility": nfr_sections["compatibility"],
        "maintainability": nfr_sections["maintainability"],
        "performanceEfficiency": round_half_up(
            nfr_sections["performance"] * 0.7 + nfr_sections["scalability"] * 0.3, 1
        ),
        "portability": round_half_up(
            nfr_sections["compatibility"] * 0.6 + nfr_sections["scalability"] * 0.4, 1
        ),
        "reliability": nfr_sections["reliability"],
        "security": security,
        "usability": nfr_sections["usability"],
    }


def calculate_vendor_questionnaire_scores(questionnaires: list[dict]) -> dict:
    """
    Score every questionnaire a vendor returned.

    Args:
        questionnaires: [{"file_name": "...", "questions": [...]}]; files whose
            type cannot be detected from the name are skipped

    Returns:
        Per-type scores, their average and, when an NFR questionnaire is
        present, NFR section and characteristic scores
    """
    scores: dict = {qtype: None for qtype in QUESTIONNAIRE_TYPES}

    for questionnaire in questionnaires:
        qtype = detect_questionnaire_type(questionnaire.get("file_name", ""))
        if qtype is None:
            continue
        result = score_questionnaire(questionnaire.get("questions", []))
        result["questionnaire_type"] = qtype
        scores[qtype] = result

    overall = [scores[t]["overall_score"] for t in QUESTIONNAIRE_TYPES if scores[t]]
    scores["average_score"] = round_half_up(sum(overall) / len(overall), 1) if overall else 0

    if scores["nfr"]:
        nfr_sections = extract_nfr_section_scores(scores["nfr"]["section_scores"])
        cyber = scores["cybersecurity"]["overall_score"] if scores["cybersecurity"] else None
        scores["nfr_section_scores"] = nfr_sections
        scores["characteristic_scores"] = map_nfr_to_characteristics(nfr_sections, cyber)

    return scores


def map_excel_scores_to_evaluation(excel_scores: dict) -> dict[str, float]:
    """Questionnaire results expressed as evaluation dimensions."""
    def overall(qtype: str) -> float:
        result = excel_scores.get(qtype)
        return result["overall_score"] if result else 0

    product = overall("product")
    nfr = overall("nfr")
    cyber = overall("cybersecurity")
    agile = overall("agile")

    return {
        "technical_fit": round_half_up(product * 0.5 + nfr * 0.5, 1),
        "integration": round_half_up(nfr * 0.7 + product * 0.3, 1),
        "compliance": cyber,
        "delivery_risk": 100 - agile,
    }


def calculate_hybrid_score(
    ai_score: float,
    excel_score: Optional[float],
    ai_weight: float = DEFAULT_AI_WEIGHT,
    excel_weight: float = DEFAULT_EXCEL_WEIGHT
) -> dict:
    """Blend the AI evaluation score with the questionnaire score."""
    if excel_score is None:
        return {
            "ai_score": ai_score,
            "excel_score": 0,
            "combined_score": ai_score,
            "weight": {"ai": 1.0, "excel": 0.0},
        }

    return {
        "ai_score": ai_score,
        "excel_score": excel_score,
        "combined_score": round_half_up(ai_score * ai_weight + excel_score * excel_weight, 1),
        "weight": {"ai": ai_weight, "excel": excel_weight},
    }
