from __future__ import annotations

from collections import Counter
from dataclasses import dataclass
from typing import Iterable, List, Optional, Sequence

from .cards import Card

CATEGORY_BASE = 10_000

HIGH_CARD = 0
PAIR = 1
TWO_PAIR = 2
THREE_OF_A_KIND = 3
STRAIGHT = 4
FLUSH = 5
FULL_HOUSE = 6
FOUR_OF_A_KIND = 7
STRAIGHT_FLUSH = 8

CATEGORY_NAMES = (
    "High Card",
    "Pair",
    "Two Pair",
    "Three of a Kind",
    "Straight",
    "Flush",
    "Full House",
    "Four of a Kind",
    "Straight Flush",
)


@dataclass(frozen=True)
class HandScore:
    score: int
    name: str

    @property
    def category(self) -> int:
        return self.score // CATEGORY_BASE


EMPTY_SCORE = HandScore(0, "Empty")


def evaluate_hand(hole: Sequence[Card], community: Sequence[Card] = ()) -> HandScore:
    """Score hole cards plus whatever part of the board is visible. Higher is better.

    The category is exact for any 1-7 cards. Within a category the tiebreak is
    only the single highest card held, so hands that differ on kickers can tie.
    """
    cards = list(hole) + list(community)
    if not cards:
        return EMPTY_SCORE
    category = categorize(cards)
    high = max(card.value for card in cards)
    return HandScore(category * CATEGORY_BASE + high, CATEGORY_NAMES[category])


def categorize(cards: Sequence[Card]) -> int:
    counts = sorted(Counter(card.value for card in cards).values(), reverse=True)
    flush_cards = _flush_cards(cards)

    if flush_cards and _straight_high(flush_cards):
        return STRAIGHT_FLUSH
    if counts[0] >= 4:
        return FOUR_OF_A_KIND
    if counts[0] == 3 and len(counts) > 1 and counts[1] >= 2:
        return FULL_HOUSE
    if flush_cards:
        return FLUSH
    if _straight_high(cards):
        return STRAIGHT
    if counts[0] == 3:
        return THREE_OF_A_KIND
    if counts[0] == 2 and len(counts) > 1 and counts[1] == 2:
        return TWO_PAIR
    if counts[0] == 2:
        return PAIR
    return HIGH_CARD


def _flush_cards(cards: Sequence[Card]) -> Optional[List[Card]]:
    by_suit = Counter(card.suit for card in cards)
    for suit, count in by_suit.items():
        if count >= 5:
            return [card for card in cards if card.suit == suit]
    return None


def _straight_high(cards: Iterable[Card]) -> Optional[int]:
    ranks = {card.value for card in cards}
    if 14 in ranks:  # Ace low
        ranks.add(1)
    ordered = sorted(ranks, reverse=True)
    for idx in range(len(ordered) - 4):
        window = ordered[idx : idx + 5]
        if window[0] - window[-1] == 4:
            return window[0]
    return None
