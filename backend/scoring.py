"""Score aggregation, letter grades and recommendation ranking."""

import math
from typing import Mapping

from models import COMPONENT_NAMES, ComponentScore, RankedIssue

COMPONENT_WEIGHTS = {
    "meta": 0.20,
    "content": 0.20,
    "technical": 0.15,
    "mobile": 0.15,
    "performance": 0.10,
    "security": 0.10,
    "accessibility": 0.10,
}

SEVERITY_RANK = {"critical": 0, "high": 1, "medium": 2, "low": 3, "info": 4}

GRADE_THRESHOLDS = (
    (90, "A+"),
    (80, "A"),
    (70, "B"),
    (60, "C"),
    (50, "D"),
)


def round_half_up(value: float) -> int:
    # Tolerate float noise such as 84.49999999999999 for an exact .5
    return int(math.floor(value + 0.5 + 1e-9))


def weighted_score(scores: Mapping[str, float]) -> int:
    """Weighted sum of the seven component scores, rounded to an integer."""
    total = sum(COMPONENT_WEIGHTS[name] * float(scores.get(name, 0)) for name in COMPONENT_NAMES)
    return max(0, min(100, round_half_up(total)))


def aggregate_scores(components: Mapping[str, ComponentScore]) -> int:
    return weighted_score({name: components[name]["score"] for name in COMPONENT_NAMES})


def grade(score: float) -> str:
    """Letter grade for a score on the 0-100 scale."""
    for threshold, letter in GRADE_THRESHOLDS:
        if score >= threshold:
            return letter
    return "F"


def collate_recommendations(components: Mapping[str, ComponentScore]) -> list[RankedIssue]:
    """
    Flatten every analyzer's issues, tag them with their component and order
    them by severity. Ties keep analyzer-then-issue order; nothing is deduplicated.
    """
    ranked: list[RankedIssue] = []
    for name in COMPONENT_NAMES:
        component = components.get(name)
        if component is None:
            continue
        for issue in component["issues"]:
            ranked.append({"severity": issue["severity"], "message": issue["message"], "component": name})
    return sorted(ranked, key=lambda item: SEVERITY_RANK.get(item["severity"], len(SEVERITY_RANK)))
