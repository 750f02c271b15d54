import random

import pytest

from holdem.cards import full_deck, parse_cards
from holdem.evaluator import (
    CATEGORY_BASE,
    EMPTY_SCORE,
    FLUSH,
    FULL_HOUSE,
    HIGH_CARD,
    STRAIGHT,
    STRAIGHT_FLUSH,
    evaluate_hand,
)
from holdem.strength import hand_advice, postflop_strength, preflop_strength
from holdem.models import Advice


def test_evaluate_hand_identifies_all_hand_categories():
    cases = [
        (8, "Straight Flush", ["Ah", "Kh", "Qh", "Jh", "Th"]),
        (7, "Four of a Kind", ["As", "Ah", "Ad", "Ac", "Kd"]),
        (6, "Full House", ["Qc", "Qd", "Qs", "9h", "9s"]),
        (5, "Flush", ["Ah", "Jh", "9h", "6h", "2h"]),
        (4, "Straight", ["9h", "8d", "7c", "6s", "5h"]),
        (3, "Three of a Kind", ["8h", "8d", "8s", "Qd", "Js"]),
        (2, "Two Pair", ["7h", "7d", "4s", "4c", "As"]),
        (1, "Pair", ["6h", "6s", "Qh", "8d", "4c"]),
        (0, "High Card", ["As", "Kd", "Jh", "9c", "4d"]),
    ]

    for expected_category, expected_name, labels in cases:
        cards = parse_cards(labels)
        result = evaluate_hand(cards[:2], cards[2:])
        assert result.category == expected_category, f"labels={labels}"
        assert result.name == expected_name


def test_score_is_category_times_base_plus_highest_card():
    result = evaluate_hand(parse_cards(["6h", "6s"]), parse_cards(["Qh", "8d", "4c"]))
    assert result.score == 1 * CATEGORY_BASE + 12


def test_wheel_counts_as_straight():
    result = evaluate_hand(parse_cards(["Ah", "2d"]), parse_cards(["3c", "4s", "5h", "9d", "Kd"]))
    assert result.category == STRAIGHT


def test_flush_and_straight_in_different_cards_is_not_straight_flush():
    # Hearts flush plus a 5-9 straight that uses a spade.
    hole = parse_cards(["9s", "8h"])
    board = parse_cards(["7h", "6h", "5h", "2h", "Kd"])
    assert evaluate_hand(hole, board).category == FLUSH


def test_straight_flush_inside_seven_cards():
    hole = parse_cards(["9h", "8h"])
    board = parse_cards(["7h", "6h", "5h", "Ad", "As"])
    assert evaluate_hand(hole, board).category == STRAIGHT_FLUSH


def test_two_sets_of_trips_is_full_house():
    hole = parse_cards(["8h", "8d"])
    board = parse_cards(["8s", "3c", "3d", "3h", "Kd"])
    assert evaluate_hand(hole, board).category == FULL_HOUSE


def test_kickers_beyond_highest_card_are_ignored():
    board = parse_cards(["Ad", "9h", "6c", "3s", "2d"])
    king_kicker = evaluate_hand(parse_cards(["As", "Kc"]), board)
    queen_kicker = evaluate_hand(parse_cards(["Ah", "Qc"]), board)
    assert king_kicker.score == queen_kicker.score


def test_empty_hand_is_zero_sentinel():
    assert evaluate_hand([]) == EMPTY_SCORE
    assert EMPTY_SCORE.score == 0


def test_partial_boards_are_scored():
    assert evaluate_hand(parse_cards(["Kd", "Kh"])).category == 1
    assert evaluate_hand(parse_cards(["Kd", "2h"])).score == HIGH_CARD * CATEGORY_BASE + 13


def test_scores_stay_inside_category_band_for_random_hands():
    rng = random.Random(2024)
    deck = full_deck()
    for _ in range(500):
        cards = rng.sample(deck, 7)
        result = evaluate_hand(cards[:2], cards[2:])
        assert result.category * CATEGORY_BASE <= result.score < (result.category + 1) * CATEGORY_BASE


@pytest.mark.parametrize(
    "labels,expected",
    [
        (["As", "Ad"], 0.95),
        (["Ah", "Kc"], 0.85),
        (["7s", "7d"], 0.7),
        (["Qs", "4s"], 0.6),
        (["3s", "3d"], 0.5),
        (["7s", "9s"], 0.35),
        (["Kd", "4c"], 0.3),
        (["9d", "2c"], 0.1),
    ],
)
def test_preflop_strength_tiers(labels, expected):
    assert preflop_strength(parse_cards(labels)) == pytest.approx(expected)


def test_postflop_strength_is_monotonic_in_score():
    scores = [category * CATEGORY_BASE + high for category in range(9) for high in range(2, 15)]
    strengths = [postflop_strength(score) for score in scores]
    assert strengths == sorted(strengths)
    assert all(0 <= value <= 1 for value in strengths)


def test_hand_advice_buckets():
    assert hand_advice([], []) == Advice.WAITING
    assert hand_advice(parse_cards(["As", "Ad"]), []) == Advice.PREMIUM
    assert hand_advice(parse_cards(["9d", "2c"]), []) == Advice.TRASH
    board = parse_cards(["9h", "4s", "Kd"])
    assert hand_advice(parse_cards(["9d", "2c"]), board) == Advice.ONE_PAIR
    assert hand_advice(parse_cards(["9d", "4c"]), board) == Advice.MADE_HAND
    assert hand_advice(parse_cards(["Qd", "2c"]), board) == Advice.NOTHING
