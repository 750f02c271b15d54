from __future__ import annotations

import logging
from dataclasses import replace
from typing import Dict, Iterable, Optional, Protocol

from .cards import Deck, cards_to_labels
from .errors import IllegalAction, TournamentOver
from .game import UNCONTESTED, GameEngine
from .models import (
    BETTING_STAGES,
    ActionType,
    Advice,
    Decision,
    DecisionContext,
    DecisionReason,
    SeatStatus,
    SeatView,
    Stage,
    TableConfig,
    TableSnapshot,
)
from .strength import hand_advice

LOGGER = logging.getLogger("holdem.tournament")


class DecisionPolicy(Protocol):
    def decide(self, ctx: DecisionContext) -> Decision:
        ...


class Tournament:
    """Elimination tournament over repeated hands; the surface a presentation layer drives.

    Every call returns a fresh ``TableSnapshot``. The caller is expected to
    serialize calls (see ``host.session.TableSession``); nothing here is
    thread-safe.
    """

    def __init__(self, config: Optional[TableConfig], policy: DecisionPolicy) -> None:
        self.config = config or TableConfig()
        self.policy = policy
        self.engine = GameEngine(self.config)
        self.champion: Optional[int] = None
        self.resets = 0
        self._draw_reset = False

    @property
    def is_over(self) -> bool:
        return self.champion is not None

    @property
    def stage(self) -> Stage:
        return self.engine.stage

    # External operations ---------------------------------------------

    def start_tournament(self, seat_count: int, starting_chips: int) -> TableSnapshot:
        human_seat = self.config.human_seat
        if human_seat is not None and human_seat >= seat_count:
            human_seat = 0
        config = replace(self.config, seats=seat_count, starting_stack=starting_chips, human_seat=human_seat)
        # GameEngine validates; nothing is replaced if the new config is rejected.
        engine = GameEngine(config)
        self.config = config
        self.engine = engine
        self.champion = None
        self._draw_reset = False
        LOGGER.info("Tournament started: %s seats, %s chips each", seat_count, starting_chips)
        return self.snapshot()

    def start_hand(self, seed: Optional[int] = None, deck: Optional[Deck] = None) -> TableSnapshot:
        if self.is_over:
            LOGGER.info("Tournament already finished; champion is seat %s", self.champion)
            return self.snapshot()
        if self.engine.stage in BETTING_STAGES:
            raise IllegalAction("HAND_IN_PROGRESS", "A hand is already in progress")

        self._draw_reset = False
        survivors = self.engine.survivors()
        if len(survivors) == 1:
            self.engine.finish_hand()
            self.champion = survivors[0].seat
            LOGGER.info("Tournament over: seat %s (%s) is champion", self.champion, survivors[0].name)
            return self.snapshot()
        if not survivors:
            # Everyone went broke on the same hand: start over.
            LOGGER.warning("No seats left with chips; resetting tournament")
            self.engine = GameEngine(self.config)
            self.resets += 1
            self._draw_reset = True
            return self.snapshot()

        ctx = self.engine.start_hand(deck=deck, seed=seed)
        return self.snapshot(events=ctx.events)

    def apply_action(self, seat_idx: int, action: ActionType, amount: Optional[int] = None) -> TableSnapshot:
        if self.is_over:
            return self.snapshot()
        try:
            events = self.engine.apply_action(seat_idx, action, amount)
        except IllegalAction as exc:
            LOGGER.warning("Rejected action seat=%s action=%s amount=%s: %s", seat_idx, action, amount, exc.msg)
            raise
        return self.snapshot(events=events)

    def get_decision(self, seat_idx: int) -> Decision:
        if self.is_over:
            raise TournamentOver("Tournament is over")
        if self.engine.next_actor() != seat_idx:
            raise IllegalAction("OUT_OF_TURN", f"Seat {seat_idx} is not the seat to act")
        if self.engine.seats[seat_idx].is_human:
            raise IllegalAction("NOT_A_BOT", "Decisions are only produced for bot seats")
        return self.policy.decide(self.engine.decision_context(seat_idx))

    def fallback_decision(self, seat_idx: int) -> Decision:
        window = self.engine.legal_actions(seat_idx)
        # Check > call > fold.
        if ActionType.CHECK in window.legal:
            return Decision(ActionType.CHECK, reason=DecisionReason.FALLBACK)
        if ActionType.CALL in window.legal:
            return Decision(ActionType.CALL, reason=DecisionReason.FALLBACK)
        return Decision(ActionType.FOLD, reason=DecisionReason.FALLBACK)

    def advice(self, seat_idx: int) -> Advice:
        seat = self.engine.seats[seat_idx]
        community = self.engine.hand.community if self.engine.hand else []
        return hand_advice(seat.hole_cards, community)

    # Snapshots -------------------------------------------------------

    def snapshot(self, viewer: Optional[int] = None, events: Iterable[Dict[str, object]] = ()) -> TableSnapshot:
        """Project table state for ``viewer`` (defaults to the human seat).

        Other seats' hole cards are hidden unless they reached showdown or won
        the pot uncontested.
        """
        if viewer is None:
            viewer = self.config.human_seat
        engine = self.engine
        ctx = engine.hand
        uncontested = {payout.seat for payout in ctx.winners if payout.hand_name == UNCONTESTED} if ctx else set()

        views = []
        for seat in engine.seats:
            revealed = seat.seat == viewer or seat.status == SeatStatus.SHOWDOWN or seat.seat in uncontested
            views.append(
                SeatView(
                    seat=seat.seat,
                    player_id=seat.player_id,
                    name=seat.name,
                    chips=seat.chips,
                    status=seat.status,
                    current_bet=seat.current_bet,
                    is_dealer=seat.is_dealer,
                    is_human=seat.is_human,
                    last_action=seat.last_action,
                    hole_cards=tuple(cards_to_labels(seat.hole_cards)) if revealed else None,
                    hand_name=ctx.hand_names.get(seat.seat) if ctx else None,
                )
            )

        window = None
        advice = None
        if viewer is not None and 0 <= viewer < len(engine.seats):
            if engine.next_actor() == viewer:
                window = engine.legal_actions(viewer)
            if engine.seats[viewer].is_human and ctx is not None:
                advice = self.advice(viewer)

        return TableSnapshot(
            hand_id=ctx.hand_id if ctx else None,
            stage=engine.stage,
            pot=ctx.pot if ctx else 0,
            current_bet=ctx.current_bet if ctx else 0,
            min_raise=ctx.min_raise if ctx else self.config.bb,
            community=tuple(cards_to_labels(ctx.community)) if ctx else (),
            seats=tuple(views),
            current_player=ctx.current_player if ctx else -1,
            dealer_index=engine.dealer_index if engine.dealer_index is not None else -1,
            winners=tuple(ctx.winners) if ctx else (),
            viewer=viewer,
            window=window,
            advice=advice,
            tournament_over=self.is_over,
            champion=self.champion,
            draw_reset=self._draw_reset,
            events=tuple(events),
        )
