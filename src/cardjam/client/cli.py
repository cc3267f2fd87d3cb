from __future__ import annotations

import argparse
import logging
import random
import sys
import time
from pathlib import Path

from cardjam.engine.ai import AISpec
from cardjam.engine.match import new_match
from cardjam.engine.serialize import match_summary
from cardjam.engine.state import Event
from cardjam.paths import get_paths
from cardjam.services.content import ContentError, ContentService
from cardjam.services.messages import describe
from cardjam.services.pacing import MatchDriver
from cardjam.services.telemetry import TelemetryService

logger = logging.getLogger(__name__)

DIFFICULTIES = ("easy", "normal", "hard")


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="cardjam", description="Play a computer-vs-computer CardJam match.")
    parser.add_argument("--seed", type=int, default=None)
    parser.add_argument("--difficulty", choices=DIFFICULTIES, default="normal", help="player 2 AI tier")
    parser.add_argument("--p1-difficulty", choices=DIFFICULTIES, default=None, help="player 1 AI tier")
    parser.add_argument("--first-player", type=int, choices=(1, 2), default=None)
    parser.add_argument("--rules", type=Path, default=None, help="JSON rule set")
    parser.add_argument("--telemetry", type=Path, default=None, help="append events to this JSONL file")
    parser.add_argument("--delay", type=float, default=0.0, help="seconds between computer actions")
    parser.add_argument("--max-turns", type=int, default=200)
    parser.add_argument("-q", "--quiet", action="store_true", help="only print the result")
    parser.add_argument("-v", "--verbose", action="store_true")
    return parser


def main(argv: list[str] | None = None) -> int:
    args = _build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    paths = get_paths()
    content = ContentService(paths.data_dir, paths.schema_dir)
    try:
        catalog = content.load_catalog()
        config = content.load_rules(args.rules)
    except ContentError as e:
        print(str(e), file=sys.stderr)
        return 2

    listeners = []
    if not args.quiet:

        def _print_event(event: Event) -> None:
            print(describe(event))

        listeners.append(_print_event)
    if args.telemetry is not None:
        listeners.append(TelemetryService(args.telemetry))

    seed = args.seed if args.seed is not None else random.randrange(2**31)
    logger.debug("Starting match with seed %d", seed)
    state = new_match(catalog, seed, config=config, first_player=args.first_player, listeners=listeners)

    driver = MatchDriver(
        state,
        computer_players=(1, 2),
        ai_specs={
            1: AISpec(difficulty=args.p1_difficulty or args.difficulty),
            2: AISpec(difficulty=args.difficulty),
        },
        action_delay=args.delay,
        auto_end_delay=args.delay,
        opening_delay=args.delay,
        max_turns=args.max_turns,
    )
    driver.start()
    driver.run(sleep=time.sleep)

    summary = match_summary(state)
    print(f"seed={seed} turns={summary['turns']} winner={summary['winner']}")
    players = summary["players"]
    assert isinstance(players, dict)
    for player, stats in players.items():
        fields = " ".join(f"{k}={v}" for k, v in stats.items())
        print(f"player {player}: {fields}")
    if driver.stalled:
        print(f"No winner after {args.max_turns} turns.")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
