import random

from bots.policy import HeuristicPolicy
from holdem.models import SeatStatus, Stage

from .helpers import check_down, create_engine, create_tournament, play_bot_hand


def test_engine_handles_thousand_hands_of_check_down():
    engine = create_engine(seats=6)
    dealers = []
    for hand_no in range(1_000):
        ctx = engine.start_hand(seed=hand_no)
        dealers.append(ctx.dealer_index)
        check_down(engine)
        assert engine.stage == Stage.SHOWDOWN
        assert engine.total_chips() == engine.chip_supply
        if not engine.can_start_hand():
            break
    # The button walks the table in order while everyone still has chips.
    assert dealers[:12] == [0, 1, 2, 3, 4, 5] * 2


def test_many_tournaments_conserve_chips():
    for seed in range(10):
        rng = random.Random(seed)
        seats = rng.randint(2, 6)
        tournament = create_tournament(
            seats=seats, starting_stack=rng.choice([100, 300]), policy=HeuristicPolicy(rng)
        )
        supply = tournament.engine.chip_supply
        for hand_no in range(3_000):
            tournament.start_hand(seed=seed * 10_000 + hand_no)
            if tournament.is_over:
                break
            play_bot_hand(tournament)
            engine = tournament.engine
            assert engine.total_chips() == supply
            for seat in engine.seats:
                if seat.status == SeatStatus.BUSTED:
                    assert seat.chips == 0 and not seat.hole_cards
        assert tournament.is_over
