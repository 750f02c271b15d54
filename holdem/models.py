from __future__ import annotations

from dataclasses import asdict, dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple

from .cards import Card
from .errors import ConfigError

MAX_SEATS = 6
DEFAULT_BOT_NAMES = ["Tom Dwan", "Phil Ivey", "Daniel N.", "Fedor Holz", "Brunson", "Hellmuth"]


class Stage(str, Enum):
    IDLE = "IDLE"
    PREFLOP = "PREFLOP"
    FLOP = "FLOP"
    TURN = "TURN"
    RIVER = "RIVER"
    SHOWDOWN = "SHOWDOWN"


BETTING_STAGES = (Stage.PREFLOP, Stage.FLOP, Stage.TURN, Stage.RIVER)


class SeatStatus(str, Enum):
    ACTIVE = "ACTIVE"
    FOLDED = "FOLDED"
    ALL_IN = "ALL_IN"
    BUSTED = "BUSTED"
    SHOWDOWN = "SHOWDOWN"


class ActionType(str, Enum):
    FOLD = "FOLD"
    CHECK = "CHECK"
    CALL = "CALL"
    RAISE = "RAISE"


class LabelKind(str, Enum):
    FOLD = "FOLD"
    CHECK = "CHECK"
    CALL = "CALL"
    RAISE = "RAISE"
    ALL_IN = "ALL_IN"


@dataclass(frozen=True)
class ActionLabel:
    """Last thing a seat did this street, e.g. ``RAISE(120)``."""

    kind: LabelKind
    amount: Optional[int] = None

    def to_dict(self) -> Dict[str, Any]:
        return {"kind": self.kind.value, "amount": self.amount}


class DecisionReason(str, Enum):
    WEAK_FOLD = "WEAK_FOLD"
    VALUE_RAISE = "VALUE_RAISE"
    BLUFF = "BLUFF"
    SHOVE = "SHOVE"
    CALL = "CALL"
    PROBE = "PROBE"
    CHECK = "CHECK"
    FALLBACK = "FALLBACK"


class Advice(str, Enum):
    WAITING = "WAITING"
    PREMIUM = "PREMIUM"
    GOOD = "GOOD"
    MARGINAL = "MARGINAL"
    TRASH = "TRASH"
    MADE_HAND_STRONG = "MADE_HAND_STRONG"
    MADE_HAND = "MADE_HAND"
    ONE_PAIR = "ONE_PAIR"
    NOTHING = "NOTHING"


@dataclass
class TableConfig:
    seats: int = MAX_SEATS
    starting_stack: int = 1_000
    sb: int = 10
    bb: int = 20
    human_seat: Optional[int] = 0
    bot_names: List[str] = field(default_factory=lambda: list(DEFAULT_BOT_NAMES))
    bot_delay_scale: float = 1.0

    def validate(self) -> None:
        if not 2 <= self.seats <= MAX_SEATS:
            raise ConfigError(f"seats must be between 2 and {MAX_SEATS}")
        if self.starting_stack <= 0:
            raise ConfigError("starting_stack must be positive")
        if self.sb <= 0 or self.bb <= 0:
            raise ConfigError("blinds must be positive")
        if self.sb > self.bb:
            raise ConfigError("small blind cannot exceed big blind")
        if self.human_seat is not None and not 0 <= self.human_seat < self.seats:
            raise ConfigError("human_seat must be a seat index")
        if self.bot_delay_scale < 0:
            raise ConfigError("bot_delay_scale cannot be negative")


@dataclass
class PlayerSeat:
    seat: int
    player_id: str
    name: str
    chips: int
    is_human: bool = False
    hole_cards: List[Card] = field(default_factory=list)
    status: SeatStatus = SeatStatus.ACTIVE
    current_bet: int = 0
    is_dealer: bool = False
    last_action: Optional[ActionLabel] = None

    @property
    def busted(self) -> bool:
        return self.status == SeatStatus.BUSTED

    @property
    def in_hand(self) -> bool:
        """Still contesting the pot (neither folded nor busted)."""
        return self.status not in (SeatStatus.FOLDED, SeatStatus.BUSTED)

    def reset_for_hand(self) -> None:
        self.hole_cards.clear()
        self.current_bet = 0
        self.last_action = None
        self.is_dealer = False
        if self.chips <= 0:
            self.chips = 0
            self.status = SeatStatus.BUSTED
        elif self.status != SeatStatus.BUSTED:
            self.status = SeatStatus.ACTIVE

    def reset_for_round(self) -> None:
        self.current_bet = 0
        self.last_action = None


@dataclass
class ActionWindow:
    legal: List[ActionType]
    call_amount: Optional[int]
    min_raise_to: Optional[int]
    max_raise_to: Optional[int]


@dataclass(frozen=True)
class Payout:
    seat: int
    amount: int
    hand_name: str


@dataclass(frozen=True)
class Decision:
    action: ActionType
    amount: Optional[int] = None
    delay_ms: int = 0
    reason: DecisionReason = DecisionReason.CHECK


@dataclass(frozen=True)
class DecisionContext:
    """Everything a policy may look at: one seat's private view plus the public table."""

    hole_cards: Tuple[Card, ...]
    community: Tuple[Card, ...]
    pot: int
    current_bet: int
    min_raise: int
    stage: Stage
    live_seats: int
    chips: int
    seat_bet: int
    big_blind: int

    @property
    def to_call(self) -> int:
        return max(self.current_bet - self.seat_bet, 0)


@dataclass(frozen=True)
class SeatView:
    seat: int
    player_id: str
    name: str
    chips: int
    status: SeatStatus
    current_bet: int
    is_dealer: bool
    is_human: bool
    last_action: Optional[ActionLabel]
    hole_cards: Optional[Tuple[str, ...]]
    hand_name: Optional[str] = None


@dataclass(frozen=True)
class TableSnapshot:
    """Read-only projection of the table for one viewer."""

    hand_id: Optional[str]
    stage: Stage
    pot: int
    current_bet: int
    min_raise: int
    community: Tuple[str, ...]
    seats: Tuple[SeatView, ...]
    current_player: int
    dealer_index: int
    winners: Tuple[Payout, ...] = ()
    viewer: Optional[int] = None
    window: Optional[ActionWindow] = None
    advice: Optional[Advice] = None
    tournament_over: bool = False
    champion: Optional[int] = None
    draw_reset: bool = False
    events: Tuple[Dict[str, object], ...] = ()

    def to_dict(self) -> Dict[str, Any]:
        payload = asdict(self)
        payload["stage"] = self.stage.value
        payload["advice"] = self.advice.value if self.advice else None
        payload["seats"] = [
            {
                **asdict(view),
                "status": view.status.value,
                "last_action": view.last_action.to_dict() if view.last_action else None,
                "hole_cards": list(view.hole_cards) if view.hole_cards is not None else None,
            }
            for view in self.seats
        ]
        if self.window is not None:
            payload["window"] = {
                "legal": [action.value for action in self.window.legal],
                "call_amount": self.window.call_amount,
                "min_raise_to": self.window.min_raise_to,
                "max_raise_to": self.window.max_raise_to,
            }
        payload["community"] = list(self.community)
        payload["winners"] = [asdict(payout) for payout in self.winners]
        payload["events"] = list(self.events)
        return payload
