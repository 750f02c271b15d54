import itertools
import random

from bots.policy import HeuristicPolicy, PassivePolicy
from holdem.cards import parse_cards
from holdem.models import ActionType, DecisionContext, DecisionReason, Stage

from .helpers import create_engine


class ScriptedRng:
    """Noise-free stand-in: uniform() returns the midpoint, random() replays a script."""

    def __init__(self, *values: float) -> None:
        self._values = itertools.cycle(values or (0.99,))

    def uniform(self, low: float, high: float) -> float:
        return (low + high) / 2

    def random(self) -> float:
        return next(self._values)


def make_context(hole, community=(), *, pot=30, current_bet=20, seat_bet=0, chips=1000, min_raise=20, stage=None):
    community = parse_cards(community)
    if stage is None:
        stage = Stage.PREFLOP if not community else Stage.FLOP
    return DecisionContext(
        hole_cards=tuple(parse_cards(hole)),
        community=tuple(community),
        pot=pot,
        current_bet=current_bet,
        min_raise=min_raise,
        stage=stage,
        live_seats=4,
        chips=chips,
        seat_bet=seat_bet,
        big_blind=20,
    )


def test_weak_hand_folds_to_a_big_bet():
    policy = HeuristicPolicy(ScriptedRng())
    decision = policy.decide(make_context(["9d", "2c"], pot=130, current_bet=100))
    assert decision.action == ActionType.FOLD
    assert decision.reason == DecisionReason.WEAK_FOLD
    assert decision.delay_ms == 1200


def test_premium_hand_raises_for_value():
    policy = HeuristicPolicy(ScriptedRng())
    decision = policy.decide(make_context(["As", "Ad"]))
    assert decision.action == ActionType.RAISE
    assert decision.reason == DecisionReason.VALUE_RAISE
    # 0.8 of the pot on top of the current bet, floored at a legal minimum raise.
    assert decision.amount == 44
    assert decision.delay_ms == 2000


def test_short_stack_shoves_strong_hand():
    policy = HeuristicPolicy(ScriptedRng())
    decision = policy.decide(make_context(["As", "Ad"], chips=150))
    assert decision.action == ActionType.RAISE
    assert decision.reason == DecisionReason.SHOVE
    assert decision.amount == 150


def test_stack_smaller_than_bet_calls_instead_of_raising():
    policy = HeuristicPolicy(ScriptedRng())
    decision = policy.decide(make_context(["As", "Ad"], pot=600, current_bet=400, chips=150))
    assert decision.action == ActionType.CALL
    assert decision.reason == DecisionReason.SHOVE


def test_medium_hand_calls():
    policy = HeuristicPolicy(ScriptedRng())
    decision = policy.decide(make_context(["7s", "7d"]))
    assert decision.action == ActionType.CALL
    assert decision.reason == DecisionReason.CALL


def test_bluff_bets_when_checked_to():
    policy = HeuristicPolicy(ScriptedRng(0.05))
    ctx = make_context(["9d", "2c"], ["Kh", "7s", "4c"], pot=100, current_bet=0)
    decision = policy.decide(ctx)
    assert decision.action == ActionType.RAISE
    assert decision.reason == DecisionReason.BLUFF
    assert decision.amount == 60


def test_probe_bet_after_the_flop():
    policy = HeuristicPolicy(ScriptedRng(0.99, 0.1))
    ctx = make_context(["9d", "2c"], ["Kh", "7s", "4c"], pot=100, current_bet=0)
    decision = policy.decide(ctx)
    assert decision.action == ActionType.RAISE
    assert decision.reason == DecisionReason.PROBE
    assert decision.amount == 20


def test_checks_when_nothing_else_applies():
    policy = HeuristicPolicy(ScriptedRng())
    ctx = make_context(["9d", "2c"], ["Kh", "7s", "4c"], pot=100, current_bet=0)
    decision = policy.decide(ctx)
    assert decision.action == ActionType.CHECK
    assert 600 <= decision.delay_ms <= 1100


def test_heuristic_decisions_are_always_legal():
    for seed in range(40):
        policy = HeuristicPolicy(random.Random(seed))
        engine = create_engine(seats=6, starting_stack=random.Random(seed).choice([100, 400, 1000]))
        for _ in range(10):
            if not engine.can_start_hand():
                break
            engine.start_hand(seed=seed)
            while engine.next_actor() is not None:
                actor = engine.next_actor()
                window = engine.legal_actions(actor)
                decision = policy.decide(engine.decision_context(actor))
                assert decision.action in window.legal
                if decision.action == ActionType.RAISE:
                    assert window.min_raise_to <= decision.amount <= window.max_raise_to
                assert decision.delay_ms >= 0
                engine.apply_action(actor, decision.action, decision.amount)
            engine.finish_hand()


def test_passive_policy_checks_and_calls():
    policy = PassivePolicy()
    assert policy.decide(make_context(["9d", "2c"])).action == ActionType.CALL
    assert policy.decide(make_context(["9d", "2c"], current_bet=20, seat_bet=20)).action == ActionType.CHECK
    assert PassivePolicy(fold_to_bets=True).decide(make_context(["9d", "2c"])).action == ActionType.FOLD
