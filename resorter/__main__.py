"""
CLI entry point for the resorter.

Parses arguments, validates config, and wires components.
"""

import argparse
import random
import sys
from argparse import Namespace
from collections.abc import Sequence
from pathlib import Path

from prettytable import PrettyTable

from .bucketizer import DEFAULT_BUCKET_COUNT
from .convergence import DEFAULT_DEVIATION_THRESHOLD
from .exceptions import ResorterError
from .group_selectors.uncertainty_selector import DEFAULT_RANDOM_PAIR_PROBABILITY, UncertaintySelector
from .judges.terminal_judge import TerminalJudge
from .logging_config import FILE_ONLY, setup_logging, get_logger
from .models import RatedItem, ResortStatus
from .orchestrator import Orchestrator, ResortConfig
from .rankers.trueskill_ranker import TrueSkillRanker
from .storage.csv_storage import CSVStorage


def parse_args(argv: Sequence[str] | None = None) -> Namespace:
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        prog="resorter",
        description="Resorter - rank items by answering pairwise comparisons"
    )
    _ = parser.add_argument(
        "-f", "--file",
        default="items.csv",
        help="CSV file to read, resort and rewrite (default: items.csv)"
    )
    _ = parser.add_argument(
        "--debug",
        action="store_true",
        help="Enable debug logging"
    )
    _ = parser.add_argument(
        "--log-level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        default="WARNING",
        help="Set console logging level (default: WARNING)"
    )
    _ = parser.add_argument(
        "--log-file",
        default="resorter.log",
        help="Log file path, empty to disable (default: resorter.log)"
    )

    subparsers = parser.add_subparsers(dest="command", required=True)

    add_parser = subparsers.add_parser("add", help="Add a new item to the file")
    _ = add_parser.add_argument("name", help="The name of the new item")

    resort_parser = subparsers.add_parser("resort", help="Run resorting on the existing file")
    _ = resort_parser.add_argument(
        "-d", "--decay",
        action="store_true",
        help="Decay each rating by one step first; asks again about already sorted items"
    )
    _ = resort_parser.add_argument(
        "--threshold",
        type=float,
        default=DEFAULT_DEVIATION_THRESHOLD,
        help=f"Stop once every deviation is at or below this (default: {DEFAULT_DEVIATION_THRESHOLD})"
    )
    _ = resort_parser.add_argument(
        "--buckets",
        type=int,
        default=DEFAULT_BUCKET_COUNT,
        help=f"Number of rating buckets (default: {DEFAULT_BUCKET_COUNT})"
    )
    _ = resort_parser.add_argument(
        "--exact-buckets",
        action="store_true",
        help="Use exact quantile bucket boundaries"
    )
    _ = resort_parser.add_argument(
        "--random-pair-probability",
        type=float,
        default=DEFAULT_RANDOM_PAIR_PROBABILITY,
        help=f"Chance of comparing a random pair instead of the least certain one (default: {DEFAULT_RANDOM_PAIR_PROBABILITY})"
    )
    _ = resort_parser.add_argument(
        "--allow-draws",
        action="store_true",
        help="Rate 'equal' answers as draws instead of a win for candidate 2"
    )
    _ = resort_parser.add_argument(
        "--seed",
        type=int,
        help="Random seed for reproducible pair selection"
    )
    _ = resort_parser.add_argument(
        "--progress-every",
        type=int,
        default=10,
        help="Print progress every N comparisons (default: 10)"
    )

    subparsers.add_parser("show", help="Print the current ranking")

    return parser.parse_args(argv)


def build_config(args: Namespace) -> ResortConfig:
    """Build the resort configuration from CLI arguments."""
    return ResortConfig(
        deviation_threshold=args.threshold,
        random_pair_probability=args.random_pair_probability,
        bucket_count=args.buckets,
        exact_buckets=args.exact_buckets,
        allow_draws=args.allow_draws,
        decay=args.decay,
        progress_every=args.progress_every,
    )


def wire_components(args: Namespace) -> Orchestrator:
    """Wire dependency injection components."""
    logger = get_logger("wire_components")

    config = build_config(args)
    rng = random.Random(args.seed)

    logger.info(f"Creating storage for {args.file}")
    storage = CSVStorage(Path(args.file))

    logger.info("Creating TrueSkill ranker")
    ranker = TrueSkillRanker(allow_draws=config.allow_draws)

    logger.info("Creating uncertainty selector")
    selector = UncertaintySelector(rng, random_pair_probability=config.random_pair_probability)

    logger.info("Creating terminal judge")
    judge = TerminalJudge()

    return Orchestrator(
        storage=storage,
        judge=judge,
        ranker=ranker,
        selector=selector,
        config=config,
        rng=rng,
    )


def render_table(items: Sequence[RatedItem]) -> PrettyTable:
    """Build a ranking table, highest rating first."""
    table = PrettyTable()
    table.field_names = ["Rank", "Name", "Rating", "Deviation", "Bucket"]
    table.align["Rank"] = "r"
    table.align["Name"] = "l"
    table.align["Rating"] = "r"
    table.align["Deviation"] = "r"
    table.align["Bucket"] = "r"

    ranked = sorted(items, key=lambda item: item.rating, reverse=True)
    for i, item in enumerate(ranked, 1):
        table.add_row([i, item.name, f"{item.rating:.1f}", f"{item.deviation:.1f}", item.bucket])
    return table


def run_add(args: Namespace) -> None:
    """Append one new unrated item."""
    storage = CSVStorage(Path(args.file))
    item = storage.append_item(args.name)
    print(f"Added new record: \"{item.name}\"")


def run_resort(args: Namespace) -> None:
    """Resort the file until every rating is stable."""
    orchestrator = wire_components(args)
    result = orchestrator.run()

    if result.status is ResortStatus.INSUFFICIENT_DATA:
        print("Cannot sort less than 2 items")
        return

    print(f"Ratings are stabilized! ({result.comparisons} comparisons this run)")
    print(render_table(result.items))


def run_show(args: Namespace) -> None:
    """Print the stored ranking."""
    items = CSVStorage(Path(args.file)).load_items()
    print(render_table(items))


COMMANDS = {
    "add": run_add,
    "resort": run_resort,
    "show": run_show,
}


def main(argv: Sequence[str] | None = None) -> None:
    """Main CLI entry point."""
    args = parse_args(argv)
    setup_logging(level=args.log_level, debug=args.debug, log_file=args.log_file or None)
    logger = get_logger("main")
    logger.info(f"Running command {args.command!r} on {args.file}")

    try:
        COMMANDS[args.command](args)
    except ResorterError as e:
        # Printed below; file sinks only
        logger.bind(**{FILE_ONLY: True}).error(f"{type(e).__name__}: {e}")
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)
    except KeyboardInterrupt:
        logger.bind(**{FILE_ONLY: True}).warning("Resort interrupted by user")
        print("\nResort interrupted by user")
        sys.exit(1)


if __name__ == "__main__":
    main()
