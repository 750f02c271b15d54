import argparse
import asyncio
import logging

from holdem.models import TableConfig

from .server import run_server


def main() -> None:
    parser = argparse.ArgumentParser(description="Texas Hold'em tournament host (one human vs bots per connection)")
    parser.add_argument("--host", default="127.0.0.1")
    parser.add_argument("--port", type=int, default=8765)
    parser.add_argument("--seats", type=int, default=6)
    parser.add_argument("--starting-stack", type=int, default=1_000)
    parser.add_argument("--sb", type=int, default=10)
    parser.add_argument("--bb", type=int, default=20)
    parser.add_argument(
        "--bot-delay-scale",
        type=float,
        default=1.0,
        help="Multiplier for bot thinking time (0 makes bots act immediately)",
    )
    parser.add_argument("--log-level", default="INFO")
    args = parser.parse_args()

    logging.basicConfig(level=getattr(logging, args.log_level.upper(), logging.INFO))

    config = TableConfig(
        seats=args.seats,
        starting_stack=args.starting_stack,
        sb=args.sb,
        bb=args.bb,
        bot_delay_scale=args.bot_delay_scale,
    )
    asyncio.run(run_server(args.host, args.port, config))


if __name__ == "__main__":
    main()
