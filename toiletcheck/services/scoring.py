from __future__ import annotations

import math
from typing import Any


# Legacy forms stored free-text answers; these count as passing.
GOOD_VALUES = frozenset({"good", "excellent", "baik", "bersih", "ada"})

EXCELLENT_THRESHOLD = 85
GOOD_THRESHOLD = 70
FAIR_THRESHOLD = 50


def round_half_up(value: float) -> int:
    # Clients display scores rounded half-up, not banker's rounding.
    return int(math.floor(value + 0.5))


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _weighted_ratings_score(ratings: list[Any]) -> int:
    total_weight = 0.0
    weighted_sum = 0.0
    for rating in ratings:
        entry = rating if isinstance(rating, dict) else {}
        score = entry.get("score") if _is_number(entry.get("score")) else 0
        weight = entry.get("weight") if _is_number(entry.get("weight")) and entry.get("weight") else 1
        total_weight += weight
        weighted_sum += score * weight
    if not total_weight:
        return 0
    return round_half_up(weighted_sum / total_weight)


def _legacy_score(responses: dict[str, Any]) -> int:
    values = [value for value in responses.values() if isinstance(value, (str, bool))]
    if not values:
        return 0
    good = sum(1 for value in values if value is True or value in GOOD_VALUES)
    return round_half_up(good / len(values) * 100)


def calculate_score(responses: Any) -> float:
    """Score an inspection's responses on a 0-100 scale.

    Three formats are understood, checked in order: an explicit numeric
    ``score``; a ``ratings`` list of ``{score, weight}`` entries (weighted
    mean, missing weights count as 1); and the legacy flat answer map, scored
    as the share of passing string or boolean answers.
    """
    if not isinstance(responses, dict):
        return 0
    score = responses.get("score")
    if _is_number(score):
        return score
    ratings = responses.get("ratings")
    if isinstance(ratings, list) and ratings:
        return _weighted_ratings_score(ratings)
    return _legacy_score(responses)


def average_score(scores: list[float]) -> int:
    if not scores:
        return 0
    return round_half_up(sum(scores) / len(scores))


def status_bucket(score: float) -> str:
    if score >= EXCELLENT_THRESHOLD:
        return "excellent"
    if score >= GOOD_THRESHOLD:
        return "good"
    if score >= FAIR_THRESHOLD:
        return "fair"
    return "poor"
