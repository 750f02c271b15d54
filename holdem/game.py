from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Callable, Dict, List, Optional, Set

from .cards import Card, Deck, cards_to_labels
from .errors import IllegalAction, InvariantViolation
from .evaluator import evaluate_hand
from .models import (
    BETTING_STAGES,
    ActionLabel,
    ActionType,
    ActionWindow,
    DecisionContext,
    LabelKind,
    Payout,
    PlayerSeat,
    SeatStatus,
    Stage,
    TableConfig,
)

LOGGER = logging.getLogger("holdem.game")

UNCONTESTED = "Uncontested"

# GameEngine keeps all table state in memory and is the only writer of it.
# No timers or I/O live here: poker rules, chip accounting and betting order.

_NEXT_STAGE = {Stage.PREFLOP: Stage.FLOP, Stage.FLOP: Stage.TURN, Stage.TURN: Stage.RIVER}


@dataclass
class HandState:
    # All mutable info about the current hand (deck, pot, who still owes action, etc.).
    hand_id: str
    deck: Deck
    dealer_index: int
    small_blind_seat: int
    big_blind_seat: int
    stage: Stage = Stage.PREFLOP
    pot: int = 0
    current_bet: int = 0
    min_raise: int = 0
    community: List[Card] = field(default_factory=list)
    current_player: int = -1
    pending: Set[int] = field(default_factory=set)
    winners: List[Payout] = field(default_factory=list)
    hand_names: Dict[int, str] = field(default_factory=dict)
    events: List[Dict[str, object]] = field(default_factory=list)


class GameEngine:
    """No-Limit Texas Hold'em rules for a single table."""

    def __init__(self, config: TableConfig) -> None:
        config.validate()
        self.config = config
        self.seats: List[PlayerSeat] = self._build_seats()
        self.dealer_index: Optional[int] = None
        self.hand_counter = 0
        self.hand: Optional[HandState] = None
        self.dropped_chips = 0
        self.chip_supply = sum(seat.chips for seat in self.seats)

    # Seat management -------------------------------------------------

    def _build_seats(self) -> List[PlayerSeat]:
        bot_names = iter(self.config.bot_names)
        seats = []
        for idx in range(self.config.seats):
            if idx == self.config.human_seat:
                seats.append(
                    PlayerSeat(seat=idx, player_id="p1", name="You", chips=self.config.starting_stack, is_human=True)
                )
            else:
                name = next(bot_names, f"Bot {idx}")
                seats.append(PlayerSeat(seat=idx, player_id=f"b{idx}", name=name, chips=self.config.starting_stack))
        return seats

    def set_stacks(self, stacks: List[int]) -> None:
        """Overwrite every seat's chips between hands and re-baseline the chip supply."""
        if self.hand is not None and self.hand.stage in BETTING_STAGES:
            raise RuntimeError("Cannot change stacks during a hand")
        if len(stacks) != len(self.seats):
            raise ValueError("One stack per seat required")
        for seat, chips in zip(self.seats, stacks):
            seat.chips = chips
        self.dropped_chips = 0
        self.chip_supply = sum(stacks)

    def survivors(self) -> List[PlayerSeat]:
        return [seat for seat in self.seats if seat.chips > 0]

    def can_start_hand(self) -> bool:
        return len(self.survivors()) >= 2

    def _next_seat(self, start: int, predicate: Callable[[PlayerSeat], bool]) -> Optional[int]:
        # Circular search strictly after ``start``, at most one lap.
        count = len(self.seats)
        for step in range(1, count + 1):
            idx = (start + step) % count
            if predicate(self.seats[idx]):
                return idx
        return None

    def _require_next(self, start: int, predicate: Callable[[PlayerSeat], bool]) -> int:
        idx = self._next_seat(start, predicate)
        if idx is None:
            raise InvariantViolation(f"No eligible seat after {start}")
        return idx

    def actors(self) -> List[int]:
        return [seat.seat for seat in self.seats if seat.status == SeatStatus.ACTIVE]

    def contenders(self) -> List[int]:
        return [seat.seat for seat in self.seats if seat.in_hand]

    # Hand lifecycle --------------------------------------------------

    @property
    def stage(self) -> Stage:
        return self.hand.stage if self.hand else Stage.IDLE

    def start_hand(self, deck: Optional[Deck] = None, seed: Optional[int] = None) -> HandState:
        if self.hand is not None and self.hand.stage in BETTING_STAGES:
            raise IllegalAction("HAND_IN_PROGRESS", "A hand is already in progress")
        if not self.can_start_hand():
            raise IllegalAction("NOT_ENOUGH_PLAYERS", "Not enough players to start a hand")

        for seat in self.seats:
            seat.reset_for_hand()
        live = [seat for seat in self.seats if not seat.busted]

        not_busted = lambda seat: not seat.busted  # noqa: E731
        if self.dealer_index is None:
            self.dealer_index = live[0].seat
        else:
            self.dealer_index = self._require_next(self.dealer_index, not_busted)
        dealer = self.dealer_index
        self.seats[dealer].is_dealer = True

        if len(live) == 2:
            # Heads-up: the button posts the small blind and opens pre-flop.
            sb_seat = dealer
            bb_seat = self._require_next(dealer, not_busted)
            first_seat = dealer
        else:
            sb_seat = self._require_next(dealer, not_busted)
            bb_seat = self._require_next(sb_seat, not_busted)
            first_seat = self._require_next(bb_seat, not_busted)

        hand_id = f"H-{self.hand_counter:05d}"
        self.hand_counter += 1
        ctx = HandState(
            hand_id=hand_id,
            deck=deck if deck is not None else Deck.create(seed),
            dealer_index=dealer,
            small_blind_seat=sb_seat,
            big_blind_seat=bb_seat,
        )
        self.hand = ctx

        self._deal_hole_cards(ctx)
        sb_paid = self._post_blind(ctx, sb_seat, self.config.sb)
        bb_paid = self._post_blind(ctx, bb_seat, self.config.bb)
        ctx.current_bet = self.config.bb
        ctx.min_raise = self.config.bb
        ctx.events.append(
            {
                "ev": "POST_BLINDS",
                "button": dealer,
                "sb_seat": sb_seat,
                "bb_seat": bb_seat,
                "sb": sb_paid,
                "bb": bb_paid,
            }
        )
        LOGGER.info(
            "Hand %s started: button=%s sb=%s(%s) bb=%s(%s)",
            hand_id,
            dealer,
            sb_seat,
            sb_paid,
            bb_seat,
            bb_paid,
        )

        actors = self.actors()
        ctx.pending = {
            idx for idx in actors if len(actors) >= 2 or self.seats[idx].current_bet < ctx.current_bet
        }
        if ctx.pending:
            ctx.current_player = self._require_next(first_seat - 1, lambda seat: seat.seat in ctx.pending)
        else:
            # Blinds put everyone but at most one matched seat all-in: deal it out.
            ctx.events.extend(self._advance_street(ctx))

        self.check_invariants()
        return ctx

    def _deal_hole_cards(self, ctx: HandState) -> None:
        assert self.dealer_index is not None
        order = []
        idx = self.dealer_index
        for _ in range(len(self.seats)):
            idx = (idx + 1) % len(self.seats)
            if self.seats[idx].status == SeatStatus.ACTIVE:
                order.append(idx)
        for _ in range(2):
            for seat_idx in order:
                self.seats[seat_idx].hole_cards.append(ctx.deck.draw())

    def _post_blind(self, ctx: HandState, seat_idx: int, amount: int) -> int:
        # Blinds are forced calls capped at the stack; a short stack goes all-in.
        seat = self.seats[seat_idx]
        paid = self._commit_chips(seat, amount, ctx)
        if seat.chips == 0:
            seat.status = SeatStatus.ALL_IN
            seat.last_action = ActionLabel(LabelKind.ALL_IN, seat.current_bet)
        return paid

    def _commit_chips(self, seat: PlayerSeat, amount: int, ctx: HandState) -> int:
        amount = min(amount, seat.chips)
        seat.chips -= amount
        seat.current_bet += amount
        ctx.pot += amount
        return amount

    def finish_hand(self) -> None:
        """Drop the finished hand and settle seat states (eliminations) for the idle table."""
        if self.hand is not None and self.hand.stage in BETTING_STAGES:
            raise RuntimeError("Hand still in progress")
        self.hand = None
        for seat in self.seats:
            seat.reset_for_hand()
        self.check_invariants()

    # Action handling -------------------------------------------------

    def next_actor(self) -> Optional[int]:
        if not self.hand or self.hand.current_player < 0:
            return None
        return self.hand.current_player

    def legal_actions(self, seat_idx: int) -> ActionWindow:
        ctx = self._require_betting()
        seat = self._require_active(seat_idx)

        legal: List[ActionType] = [ActionType.FOLD]
        owed = ctx.current_bet - seat.current_bet
        if owed <= 0:
            legal.append(ActionType.CHECK)
        else:
            legal.append(ActionType.CALL)

        min_raise_to = None
        max_raise_to = None
        max_total = seat.chips + seat.current_bet
        if max_total > ctx.current_bet:
            legal.append(ActionType.RAISE)
            max_raise_to = max_total
            min_raise_to = min(ctx.current_bet + ctx.min_raise, max_total)

        call_amount = min(owed, seat.chips) if owed > 0 else None
        return ActionWindow(legal, call_amount, min_raise_to, max_raise_to)

    def apply_action(self, seat_idx: int, action: ActionType, amount: Optional[int] = None) -> List[Dict[str, object]]:
        ctx = self._require_betting()
        seat = self._require_active(seat_idx)
        if seat_idx != ctx.current_player:
            raise IllegalAction("OUT_OF_TURN", "Not your turn")
        try:
            action = ActionType(action)
        except ValueError:
            raise IllegalAction("UNKNOWN_ACTION", f"Unsupported action {action}") from None

        events: List[Dict[str, object]] = []
        owed = ctx.current_bet - seat.current_bet

        # Every branch validates before it touches state.
        if action == ActionType.FOLD:
            seat.status = SeatStatus.FOLDED
            seat.last_action = ActionLabel(LabelKind.FOLD)
            ctx.pending.discard(seat_idx)
            events.append({"ev": "FOLD", "seat": seat_idx})
        elif action == ActionType.CHECK:
            if owed > 0:
                raise IllegalAction("CANNOT_CHECK", "Cannot check when facing a bet")
            seat.last_action = ActionLabel(LabelKind.CHECK)
            ctx.pending.discard(seat_idx)
            events.append({"ev": "CHECK", "seat": seat_idx})
        elif action == ActionType.CALL:
            if owed <= 0:
                raise IllegalAction("NOTHING_TO_CALL", "Nothing to call")
            paid = self._commit_chips(seat, owed, ctx)
            all_in = seat.chips == 0
            if all_in:
                seat.status = SeatStatus.ALL_IN
                seat.last_action = ActionLabel(LabelKind.ALL_IN, seat.current_bet)
            else:
                seat.last_action = ActionLabel(LabelKind.CALL, paid)
            ctx.pending.discard(seat_idx)
            events.append({"ev": "CALL", "seat": seat_idx, "amount": paid, "all_in": all_in})
        else:
            events.append(self._apply_raise(ctx, seat, amount))

        LOGGER.debug("Hand %s seat=%s %s -> %s", ctx.hand_id, seat_idx, action.value, events[-1])
        events.extend(self._advance_after_action(ctx, seat_idx))
        ctx.events.extend(events)
        self.check_invariants()
        return events

    def _apply_raise(self, ctx: HandState, seat: PlayerSeat, amount: Optional[int]) -> Dict[str, object]:
        max_total = seat.chips + seat.current_bet
        if amount is None:
            target = ctx.current_bet + ctx.min_raise
        else:
            try:
                target = int(amount)
            except (TypeError, ValueError):
                raise IllegalAction("BAD_AMOUNT", f"Invalid raise amount {amount!r}") from None
        # Amount is the seat's new street total, clamped to what it can cover.
        target = min(target, max_total)
        all_in = target == max_total
        if target < ctx.current_bet + ctx.min_raise and not all_in:
            raise IllegalAction("RAISE_TOO_SMALL", f"Raise must be to at least {ctx.current_bet + ctx.min_raise}")

        paid = self._commit_chips(seat, target - seat.current_bet, ctx)
        previous_bet = ctx.current_bet
        increment = target - previous_bet
        if increment >= ctx.min_raise:
            ctx.min_raise = increment
        if target > previous_bet:
            # An under-sized all-in still makes everyone else act again; min_raise stays put.
            ctx.current_bet = target
            ctx.pending = {idx for idx in self.actors() if idx != seat.seat}
        ctx.pending.discard(seat.seat)

        if all_in:
            seat.status = SeatStatus.ALL_IN
            seat.last_action = ActionLabel(LabelKind.ALL_IN, target)
        else:
            seat.last_action = ActionLabel(LabelKind.RAISE, target)
        return {"ev": "RAISE", "seat": seat.seat, "to": target, "amount": paid, "all_in": all_in}

    def _advance_after_action(self, ctx: HandState, actor: int) -> List[Dict[str, object]]:
        contenders = self.contenders()
        if len(contenders) == 1:
            return self._award_uncontested(ctx, self.seats[contenders[0]])
        if not ctx.pending:
            return self._advance_street(ctx)
        ctx.current_player = self._require_next(actor, lambda seat: seat.seat in ctx.pending)
        return []

    def _advance_street(self, ctx: HandState) -> List[Dict[str, object]]:
        events: List[Dict[str, object]] = []
        while True:
            for seat in self.seats:
                seat.reset_for_round()
            ctx.current_bet = 0
            ctx.min_raise = self.config.bb
            ctx.pending.clear()
            ctx.current_player = -1

            if ctx.stage == Stage.RIVER:
                events.extend(self._resolve_showdown(ctx))
                return events

            next_stage = _NEXT_STAGE[ctx.stage]
            ctx.deck.burn()
            cards = [ctx.deck.draw() for _ in range(3 if next_stage == Stage.FLOP else 1)]
            ctx.community.extend(cards)
            ctx.stage = next_stage
            events.append(
                {"ev": next_stage.value, "cards": cards_to_labels(cards), "board": cards_to_labels(ctx.community)}
            )
            LOGGER.info("Hand %s %s: %s", ctx.hand_id, next_stage.value, " ".join(cards_to_labels(ctx.community)))

            actors = self.actors()
            if len(actors) >= 2:
                ctx.pending = set(actors)
                ctx.current_player = self._require_next(ctx.dealer_index, lambda seat: seat.seat in ctx.pending)
                return events
            # Nobody left to bet against: keep revealing until showdown.

    def _award_uncontested(self, ctx: HandState, winner: PlayerSeat) -> List[Dict[str, object]]:
        amount = ctx.pot
        winner.chips += amount
        ctx.pot = 0
        ctx.winners = [Payout(winner.seat, amount, UNCONTESTED)]
        ctx.stage = Stage.SHOWDOWN
        self._clear_betting(ctx)
        LOGGER.info("Hand %s: seat %s wins %s uncontested", ctx.hand_id, winner.seat, amount)
        events: List[Dict[str, object]] = [
            {"ev": "POT_AWARD", "seat": winner.seat, "amount": amount, "hand": UNCONTESTED}
        ]
        events.extend(self._elimination_events())
        return events

    def _resolve_showdown(self, ctx: HandState) -> List[Dict[str, object]]:
        events: List[Dict[str, object]] = []
        ctx.stage = Stage.SHOWDOWN
        board = cards_to_labels(ctx.community)

        scores = {}
        for seat_idx in self.contenders():
            seat = self.seats[seat_idx]
            result = evaluate_hand(seat.hole_cards, ctx.community)
            scores[seat_idx] = result
            ctx.hand_names[seat_idx] = result.name
            events.append(
                {
                    "ev": "SHOWDOWN",
                    "seat": seat_idx,
                    "hand": cards_to_labels(seat.hole_cards),
                    "board": board,
                    "rank": result.name,
                }
            )

        best = max(result.score for result in scores.values())
        winners = [seat_idx for seat_idx in sorted(scores) if scores[seat_idx].score == best]
        # One pot, split evenly; the odd chips are not awarded to anyone.
        share, remainder = divmod(ctx.pot, len(winners))
        for seat_idx in winners:
            self.seats[seat_idx].chips += share
            ctx.winners.append(Payout(seat_idx, share, scores[seat_idx].name))
            events.append({"ev": "POT_AWARD", "seat": seat_idx, "amount": share, "hand": scores[seat_idx].name})
        if remainder:
            self.dropped_chips += remainder
            events.append({"ev": "ODD_CHIPS_DROPPED", "amount": remainder})
        ctx.pot = 0

        for seat_idx in scores:
            self.seats[seat_idx].status = SeatStatus.SHOWDOWN
        self._clear_betting(ctx)
        LOGGER.info(
            "Hand %s showdown: winners=%s (%s) share=%s",
            ctx.hand_id,
            winners,
            scores[winners[0]].name,
            share,
        )
        events.extend(self._elimination_events())
        return events

    def _clear_betting(self, ctx: HandState) -> None:
        ctx.pending.clear()
        ctx.current_player = -1
        ctx.current_bet = 0
        ctx.min_raise = self.config.bb
        for seat in self.seats:
            seat.current_bet = 0

    def _elimination_events(self) -> List[Dict[str, object]]:
        events = []
        for seat in self.seats:
            if seat.chips == 0 and not seat.busted:
                LOGGER.info("Seat %s (%s) is out of chips", seat.seat, seat.name)
                events.append({"ev": "ELIMINATED", "seat": seat.seat})
        return events

    # Policy input ----------------------------------------------------

    def decision_context(self, seat_idx: int) -> DecisionContext:
        ctx = self._require_betting()
        seat = self._require_active(seat_idx)
        return DecisionContext(
            hole_cards=tuple(seat.hole_cards),
            community=tuple(ctx.community),
            pot=ctx.pot,
            current_bet=ctx.current_bet,
            min_raise=ctx.min_raise,
            stage=ctx.stage,
            live_seats=len(self.contenders()),
            chips=seat.chips,
            seat_bet=seat.current_bet,
            big_blind=self.config.bb,
        )

    # Guards and invariants -------------------------------------------

    def _require_betting(self) -> HandState:
        if not self.hand or self.hand.stage not in BETTING_STAGES or self.hand.current_player < 0:
            raise IllegalAction("HAND_NOT_ACTIVE", "Hand not in progress")
        return self.hand

    def _require_active(self, seat_idx: int) -> PlayerSeat:
        if not isinstance(seat_idx, int) or not 0 <= seat_idx < len(self.seats):
            raise IllegalAction("SEAT_NOT_ACTIVE", f"No seat {seat_idx!r}")
        seat = self.seats[seat_idx]
        if seat.status != SeatStatus.ACTIVE:
            raise IllegalAction("SEAT_NOT_ACTIVE", f"Seat {seat_idx} is {seat.status.value}")
        return seat

    def total_chips(self) -> int:
        pot = self.hand.pot if self.hand else 0
        return pot + sum(seat.chips for seat in self.seats) + self.dropped_chips

    def check_invariants(self) -> None:
        total = self.total_chips()
        if total != self.chip_supply:
            raise InvariantViolation(f"Chip total {total} does not match supply {self.chip_supply}")
        for seat in self.seats:
            if seat.chips < 0 or seat.current_bet < 0:
                raise InvariantViolation(f"Seat {seat.seat} has negative chips or bet")
            if seat.busted and (seat.chips or seat.hole_cards or seat.current_bet):
                raise InvariantViolation(f"Busted seat {seat.seat} still holds chips, cards or a bet")
        if self.hand is not None:
            dealers = [seat.seat for seat in self.seats if seat.is_dealer]
            if len(dealers) != 1:
                raise InvariantViolation(f"Expected one dealer button, found {dealers}")
            if self.hand.pot < 0 or self.hand.current_bet < 0:
                raise InvariantViolation("Negative pot or bet")
