#!/usr/bin/env python3
"""Run bots-only tournaments in-process and report who wins.

Every seat is driven by the default heuristic policy through the same
serialized session the WebSocket host uses, with thinking time disabled.

Example:
    python scripts/tourney_sim.py --players 6 --tournaments 20
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import random
from collections import Counter

from bots.policy import HeuristicPolicy
from holdem.models import TableConfig
from holdem.tournament import Tournament
from host.session import TableSession

LOGGER = logging.getLogger("tourney_sim")


async def run_one(args: argparse.Namespace, index: int) -> tuple[int | None, int]:
    config = TableConfig(
        seats=args.players,
        starting_stack=args.starting_stack,
        sb=args.sb,
        bb=args.bb,
        human_seat=None,
        bot_delay_scale=0,
    )
    tournament = Tournament(config, HeuristicPolicy(random.Random(args.seed + index)))
    session = TableSession(tournament)
    champion = await session.play_tournament(max_hands=args.max_hands)
    return champion, tournament.engine.hand_counter


async def run_simulation(args: argparse.Namespace) -> None:
    wins: Counter = Counter()
    total_hands = 0
    for index in range(args.tournaments):
        champion, hands = await run_one(args, index)
        total_hands += hands
        wins[champion] += 1
        LOGGER.info("Tournament %s: champion=%s after %s hands", index, champion, hands)

    LOGGER.info("Average hands per tournament: %.1f", total_hands / max(args.tournaments, 1))
    for seat, count in sorted(wins.items(), key=lambda item: (item[0] is None, item[0])):
        LOGGER.info("Seat %s won %s", "none (hand cap)" if seat is None else seat, count)


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Simulate bots-only hold'em tournaments")
    parser.add_argument("--players", type=int, default=6)
    parser.add_argument("--tournaments", type=int, default=10)
    parser.add_argument("--starting-stack", type=int, default=1_000)
    parser.add_argument("--sb", type=int, default=10)
    parser.add_argument("--bb", type=int, default=20)
    parser.add_argument("--max-hands", type=int, default=5_000, help="stop a tournament after this many hands")
    parser.add_argument("--seed", type=int, default=42)
    parser.add_argument("--log-level", default="INFO")
    return parser.parse_args()


def main() -> None:
    args = parse_args()
    logging.basicConfig(level=getattr(logging, args.log_level.upper(), logging.INFO))
    try:
        asyncio.run(run_simulation(args))
    except KeyboardInterrupt:
        LOGGER.info("Simulation interrupted; shutting down")


if __name__ == "__main__":
    main()
