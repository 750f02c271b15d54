from __future__ import annotations

from typing import Dict, Iterable, List, Optional, Sequence, Tuple

from bots.policy import PassivePolicy
from holdem.cards import Deck, full_deck, parse_card, parse_cards
from holdem.game import GameEngine
from holdem.models import ActionType, TableConfig
from holdem.tournament import Tournament


def make_config(
    *,
    seats: int = 4,
    starting_stack: int = 1_000,
    sb: int = 10,
    bb: int = 20,
    human_seat: Optional[int] = None,
) -> TableConfig:
    return TableConfig(
        seats=seats,
        starting_stack=starting_stack,
        sb=sb,
        bb=bb,
        human_seat=human_seat,
        bot_delay_scale=0,
    )


def create_engine(**kwargs) -> GameEngine:
    """Engine with every seat filled and bots-only by default."""
    return GameEngine(make_config(**kwargs))


def create_tournament(*, policy=None, **kwargs) -> Tournament:
    return Tournament(make_config(**kwargs), policy or PassivePolicy())


def rigged_deck(
    hole_cards: Dict[int, Sequence[str]],
    board: Sequence[str] = (),
    *,
    button: int = 0,
    seats: Optional[int] = None,
) -> Deck:
    """Stack a deck so each seat receives ``hole_cards[seat]`` and the board runs out as ``board``.

    Cards are dealt one at a time starting left of the button, twice round,
    then burn + flop, burn + turn, burn + river.
    """
    seats = seats if seats is not None else max(hole_cards) + 1
    order = [(button + step) % seats for step in range(1, seats + 1)]
    order = [seat for seat in order if seat in hole_cards]

    top = [parse_card(hole_cards[seat][0]) for seat in order]
    top += [parse_card(hole_cards[seat][1]) for seat in order]

    board_cards = parse_cards(board)
    used = set(top) | set(board_cards)
    burns = iter(card for card in full_deck() if card not in used)
    if board_cards:
        top.append(next(burns))
        top.extend(board_cards[:3])
    for card in board_cards[3:]:
        top.append(next(burns))
        top.append(card)
    return Deck.stacked(top)


def perform_actions(engine: GameEngine, actions: Iterable[Tuple[int, ActionType, Optional[int]]]) -> None:
    """Apply a scripted sequence of (seat, action, amount)."""
    for seat_idx, action, amount in actions:
        engine.apply_action(seat_idx, action, amount)


def check_down(engine: GameEngine) -> None:
    """Finish the current hand with check/call only."""
    while engine.next_actor() is not None:
        actor = engine.next_actor()
        window = engine.legal_actions(actor)
        if ActionType.CHECK in window.legal:
            engine.apply_action(actor, ActionType.CHECK)
        else:
            engine.apply_action(actor, ActionType.CALL)


def play_bot_hand(tournament: Tournament) -> None:
    """Let the tournament's policy act for every seat until the hand is over."""
    engine = tournament.engine
    while engine.next_actor() is not None:
        seat_idx = engine.next_actor()
        decision = tournament.get_decision(seat_idx)
        tournament.apply_action(seat_idx, decision.action, decision.amount)


def chips(engine: GameEngine) -> List[int]:
    return [seat.chips for seat in engine.seats]
