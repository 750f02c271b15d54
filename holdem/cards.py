from __future__ import annotations

import random
from dataclasses import dataclass
from typing import Iterable, List, Optional, Sequence

from .errors import EmptyDeckError

RANKS = ("2", "3", "4", "5", "6", "7", "8", "9", "10", "J", "Q", "K", "A")
SUITS = ("♥", "♦", "♣", "♠")
RANK_VALUE = {rank: value for value, rank in enumerate(RANKS, start=2)}

_ASCII_SUITS = {"h": "♥", "d": "♦", "c": "♣", "s": "♠"}


@dataclass(frozen=True)
class Card:
    rank: str
    suit: str

    def __post_init__(self) -> None:
        if self.rank not in RANK_VALUE:
            raise ValueError(f"Invalid rank: {self.rank}")
        if self.suit not in SUITS:
            raise ValueError(f"Invalid suit: {self.suit}")

    @property
    def value(self) -> int:
        return RANK_VALUE[self.rank]

    @property
    def label(self) -> str:
        return f"{self.rank}{self.suit}"

    def __str__(self) -> str:
        return self.label


def full_deck() -> List[Card]:
    return [Card(rank, suit) for suit in SUITS for rank in RANKS]


class Deck:
    """Cards owned by a single hand. The top of the deck is the end of the list."""

    def __init__(self, cards: Iterable[Card]) -> None:
        self._cards: List[Card] = list(cards)

    @classmethod
    def create(cls, seed: Optional[int] = None) -> "Deck":
        # random.shuffle is Fisher-Yates: every permutation is equally likely.
        cards = full_deck()
        random.Random(seed).shuffle(cards)
        return cls(cards)

    @classmethod
    def stacked(cls, top_cards: Sequence[Card]) -> "Deck":
        """Deck whose first draws are ``top_cards`` in order, followed by the rest of the pack."""
        if len(set(top_cards)) != len(top_cards):
            raise ValueError("Duplicate cards in stacked deck")
        chosen = set(top_cards)
        rest = [card for card in full_deck() if card not in chosen]
        return cls(rest[::-1] + list(top_cards)[::-1])

    def draw(self) -> Card:
        if not self._cards:
            raise EmptyDeckError("Cannot draw from an empty deck")
        return self._cards.pop()

    def burn(self) -> Card:
        return self.draw()

    def __len__(self) -> int:
        return len(self._cards)

    @property
    def cards(self) -> List[Card]:
        return list(self._cards)


def parse_card(label: str) -> Card:
    text = label.strip()
    if len(text) < 2:
        raise ValueError(f"Invalid card label: {label}")
    rank, suit = text[:-1].upper(), text[-1]
    if rank == "T":
        rank = "10"
    suit = _ASCII_SUITS.get(suit.lower(), suit)
    return Card(rank, suit)


def parse_cards(labels: Sequence[str]) -> List[Card]:
    return [parse_card(label) for label in labels]


def cards_to_labels(cards: Iterable[Card]) -> List[str]:
    return [card.label for card in cards]
