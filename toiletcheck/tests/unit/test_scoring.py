from __future__ import annotations

from toiletcheck.services.scoring import average_score, calculate_score, round_half_up, status_bucket


def test_round_half_up_differs_from_bankers_rounding() -> None:
    assert round_half_up(2.5) == 3
    assert round_half_up(0.5) == 1
    assert round_half_up(2.49) == 2


def test_explicit_score_wins() -> None:
    assert calculate_score({"score": 72, "ratings": [{"score": 10}]}) == 72


def test_weighted_ratings() -> None:
    responses = {"ratings": [{"score": 100, "weight": 3}, {"score": 50, "weight": 1}]}
    assert calculate_score(responses) == 88


def test_ratings_default_weight_and_missing_score() -> None:
    assert calculate_score({"ratings": [{"score": 90}, {"weight": 0}]}) == 45


def test_legacy_answers_count_passing_values() -> None:
    responses = {"toilet": "bersih", "soap": "ada", "floor": "kotor", "light": True, "count": 3}
    assert calculate_score(responses) == 75


def test_empty_and_invalid_responses_score_zero() -> None:
    assert calculate_score({}) == 0
    assert calculate_score(None) == 0
    assert calculate_score({"ratings": []}) == 0


def test_average_and_buckets() -> None:
    assert average_score([]) == 0
    assert average_score([85, 70]) == 78
    assert status_bucket(85) == "excellent"
    assert status_bucket(84.9) == "good"
    assert status_bucket(70) == "good"
    assert status_bucket(50) == "fair"
    assert status_bucket(49) == "poor"
