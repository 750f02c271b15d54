from __future__ import annotations

import random
from typing import Optional

from holdem.models import ActionType, Decision, DecisionContext, DecisionReason, Stage
from holdem.strength import estimate_strength

_RNG = random.Random()


class HeuristicPolicy:
    """Default bot: hand strength with a little noise, weighed against pot odds.

    Pre-flop strength comes from a hole-card heuristic, post-flop from the
    evaluator category. A small independent chance to bluff keeps it from
    being fully predictable.
    """

    noise = 0.075
    bluff_probability = 0.12
    probe_probability = 0.2
    raise_threshold = 0.75
    heavy_threshold = 0.9
    shove_stack_fraction = 0.7
    short_stack_bbs = 10

    def __init__(self, rng: Optional[random.Random] = None) -> None:
        self.rng = rng or _RNG

    def decide(self, ctx: DecisionContext) -> Decision:
        to_call = ctx.to_call
        strength = estimate_strength(ctx.hole_cards, ctx.community, ctx.stage)
        adjusted = strength + self.rng.uniform(-self.noise, self.noise)

        bluffing = self.rng.random() < self.bluff_probability
        short_stacked = ctx.chips < ctx.current_bet * 5 or ctx.chips < ctx.big_blind * self.short_stack_bbs

        if to_call > 0:
            # Short stacks loosen up to try and double through.
            if short_stacked and adjusted > 0.4:
                adjusted += 0.3
            pot_odds = to_call / (ctx.pot + to_call)
            if adjusted < pot_odds and not bluffing:
                return Decision(ActionType.FOLD, delay_ms=self._delay(800, 1600), reason=DecisionReason.WEAK_FOLD)

        if adjusted > self.raise_threshold or (bluffing and to_call == 0):
            return self._raise(ctx, adjusted, bluffing, short_stacked)

        if to_call > 0:
            return Decision(ActionType.CALL, delay_ms=self._delay(1000, 1800), reason=DecisionReason.CALL)

        if ctx.stage != Stage.PREFLOP and self.rng.random() < self.probe_probability:
            probe_to = ctx.current_bet + ctx.min_raise
            if ctx.chips > ctx.min_raise * 2:
                return Decision(ActionType.RAISE, amount=probe_to, delay_ms=1200, reason=DecisionReason.PROBE)

        return Decision(ActionType.CHECK, delay_ms=self._delay(600, 1100), reason=DecisionReason.CHECK)

    def _raise(self, ctx: DecisionContext, adjusted: float, bluffing: bool, short_stacked: bool) -> Decision:
        all_in_to = ctx.chips + ctx.seat_bet
        if all_in_to <= ctx.current_bet:
            # Can't put in more than the current bet: calling is the whole stack.
            return Decision(ActionType.CALL, delay_ms=self._delay(2000, 3500), reason=DecisionReason.SHOVE)
        min_legal = ctx.current_bet + ctx.min_raise
        fraction = 0.5
        if adjusted > self.heavy_threshold:
            fraction = 0.8
        if bluffing:
            fraction = 0.6
        desired = max(ctx.current_bet + ctx.pot * fraction, min_legal)

        if desired > ctx.chips * self.shove_stack_fraction or short_stacked:
            return Decision(
                ActionType.RAISE,
                amount=all_in_to,
                delay_ms=self._delay(2000, 3500),
                reason=DecisionReason.SHOVE,
            )
        return Decision(
            ActionType.RAISE,
            amount=int(desired),
            delay_ms=self._delay(1500, 2500),
            reason=DecisionReason.BLUFF if bluffing else DecisionReason.VALUE_RAISE,
        )

    def _delay(self, low: int, high: int) -> int:
        return int(self.rng.uniform(low, high))


class PassivePolicy:
    """Never bets: check when free, call when facing a bet, fold only if told to."""

    def __init__(self, fold_to_bets: bool = False) -> None:
        self.fold_to_bets = fold_to_bets

    def decide(self, ctx: DecisionContext) -> Decision:
        if ctx.to_call == 0:
            return Decision(ActionType.CHECK, reason=DecisionReason.CHECK)
        if self.fold_to_bets:
            return Decision(ActionType.FOLD, reason=DecisionReason.WEAK_FOLD)
        return Decision(ActionType.CALL, reason=DecisionReason.CALL)
