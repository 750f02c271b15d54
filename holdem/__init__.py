"""No-Limit Texas Hold'em rules core: deck, evaluator, betting engine and tournament controller."""

from .cards import Card, Deck, RANKS, SUITS, parse_card, parse_cards
from .errors import ConfigError, EmptyDeckError, IllegalAction, InvariantViolation, PokerError, TournamentOver
from .evaluator import HandScore, evaluate_hand
from .game import GameEngine, HandState
from .models import (
    ActionLabel,
    ActionType,
    Advice,
    Decision,
    DecisionContext,
    DecisionReason,
    LabelKind,
    Payout,
    PlayerSeat,
    SeatStatus,
    Stage,
    TableConfig,
    TableSnapshot,
)
from .tournament import DecisionPolicy, Tournament

__all__ = [
    "Card",
    "Deck",
    "RANKS",
    "SUITS",
    "parse_card",
    "parse_cards",
    "ConfigError",
    "EmptyDeckError",
    "IllegalAction",
    "InvariantViolation",
    "PokerError",
    "TournamentOver",
    "HandScore",
    "evaluate_hand",
    "GameEngine",
    "HandState",
    "ActionLabel",
    "ActionType",
    "Advice",
    "Decision",
    "DecisionContext",
    "DecisionReason",
    "LabelKind",
    "Payout",
    "PlayerSeat",
    "SeatStatus",
    "Stage",
    "TableConfig",
    "TableSnapshot",
    "DecisionPolicy",
    "Tournament",
]
