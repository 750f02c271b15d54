from __future__ import annotations

from typing import Sequence

from .cards import Card
from .evaluator import CATEGORY_BASE, STRAIGHT, TWO_PAIR, PAIR, evaluate_hand
from .models import Advice, Stage

# (floor, width) of the strength band for each category below a straight.
_POSTFLOP_BANDS = ((0.0, 0.25), (0.25, 0.2), (0.45, 0.2), (0.65, 0.15))
MADE_HAND_STRENGTH = 0.85


def preflop_strength(hole: Sequence[Card]) -> float:
    """Rough 0-1 rating of two hole cards from pair, suitedness, gap and high card."""
    if len(hole) < 2:
        return 0.0
    v1, v2 = hole[0].value, hole[1].value
    pair = v1 == v2
    suited = hole[0].suit == hole[1].suit
    high, low = max(v1, v2), min(v1, v2)

    if pair and v1 >= 10:
        return 0.95
    if high == 14 and low >= 10:
        return 0.85
    if pair and v1 >= 6:
        return 0.7
    if suited and high >= 12:
        return 0.6
    if pair:
        return 0.5
    if suited and high - low <= 2:
        return 0.35
    if high >= 13:
        return 0.3
    return 0.1


def postflop_strength(score: int) -> float:
    """Monotonic map from an evaluator score into [0, 1]."""
    category, high = divmod(score, CATEGORY_BASE)
    if category >= STRAIGHT:
        return MADE_HAND_STRENGTH
    floor, width = _POSTFLOP_BANDS[category]
    return floor + (high / 15) * width


def estimate_strength(hole: Sequence[Card], community: Sequence[Card], stage: Stage) -> float:
    if stage == Stage.PREFLOP or not community:
        return preflop_strength(hole)
    return postflop_strength(evaluate_hand(hole, community).score)


def hand_advice(hole: Sequence[Card], community: Sequence[Card]) -> Advice:
    if len(hole) < 2:
        return Advice.WAITING
    if not community:
        rating = preflop_strength(hole)
        if rating > 0.8:
            return Advice.PREMIUM
        if rating > 0.6:
            return Advice.GOOD
        if rating > 0.4:
            return Advice.MARGINAL
        return Advice.TRASH

    category = evaluate_hand(hole, community).category
    if category >= STRAIGHT:
        return Advice.MADE_HAND_STRONG
    if category >= TWO_PAIR:
        return Advice.MADE_HAND
    if category == PAIR:
        return Advice.ONE_PAIR
    return Advice.NOTHING
