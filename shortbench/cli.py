#!/usr/bin/env python3
"""
Command line entry point for the load harness.

Commands:
    seed   Create COUNT URLs against the service and write the short-code corpus.
    plan   Print the ramp stages and thresholds a Locust run would use.

Settings come from the environment (see ``shortbench.config.Settings``); flags
override them for a single invocation.
"""

import argparse
import asyncio
import logging
import sys

from pydantic import ValidationError

from shortbench.config import build_workload_config, get_settings
from shortbench.corpus import load_corpus
from shortbench.enums import BenchType, SeedStrategy
from shortbench.ramp import RampSchedule
from shortbench.scenarios import ScenarioTable
from shortbench.seeding import Seeder

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="url-bench", description="URL shortener load harness")
    subcommands = parser.add_subparsers(dest="command", required=True)

    seed = subcommands.add_parser("seed", help="Seed the service and write the short-code corpus")
    seed.add_argument("--base-url", help="Service origin (BASE_URL)")
    seed.add_argument("--count", type=int, help="Number of URLs to create (COUNT)")
    seed.add_argument("--batch-size", type=int, help="URLs per chunk (BATCH_SIZE)")
    seed.add_argument("--output", help="Corpus file to write (OUTPUT)")
    seed.add_argument(
        "--strategy",
        choices=[strategy.value for strategy in SeedStrategy],
        help="Use the batch endpoint or concurrent single creates (SEED_STRATEGY)",
    )
    seed.add_argument("--timeout", type=float, dest="timeout_seconds", help="Per-request timeout in seconds")

    plan = subcommands.add_parser("plan", help="Show the stages and thresholds for a run")
    plan.add_argument(
        "--type",
        dest="bench_type",
        choices=[bench_type.value for bench_type in BenchType],
        default=BenchType.MIXED.value,
        help="Run profile",
    )
    plan.add_argument("--check-corpus", action="store_true", help="Also validate CODES_FILE")
    return parser


async def seed_command(args: argparse.Namespace) -> int:
    settings = get_settings()
    async with Seeder.from_settings(
        settings,
        base_url=args.base_url,
        count=args.count,
        batch_size=args.batch_size,
        output=args.output,
        strategy=args.strategy,
        timeout_seconds=args.timeout_seconds,
    ) as seeder:
        report = await seeder.run()

    print(f"\nSeeding complete: {report.summary()}")
    if not report.complete:
        print(f"  Missing: {report.requested - report.saved} codes")
    if report.failed_chunks:
        print(f"  Failed chunks: {report.failed_chunks}/{report.chunks}")
    if report.failed_urls:
        print(f"  Failed URLs: {report.failed_urls}")
    return 0 if report.saved else 1


def plan_command(args: argparse.Namespace) -> int:
    settings = get_settings()
    bench_type = BenchType(args.bench_type)
    config = build_workload_config(settings, bench_type)

    print(f"Run profile: {bench_type} against {config.base_url}")
    table = ScenarioTable.for_ratio(config.create_ratio)
    print("  Scenario mix: " + ", ".join(f"{tag} {table.probability(tag):.0%}" for tag in table.tags))
    print("Stages:")
    for line in RampSchedule(config.stages).describe():
        print(f"  {line}")
    print(f"Thresholds ({config.thresholds.name}):")
    for rule in config.thresholds.rules:
        print(f"  {rule}")

    if args.check_corpus and bench_type.needs_corpus:
        corpus = load_corpus(settings.CODES_FILE)
        print(f"Corpus: {len(corpus)} codes in {corpus.source}")
    return 0


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    try:
        settings = get_settings()
    except ValidationError as exc:
        logging.basicConfig(level=logging.INFO, format="%(asctime)s - %(levelname)s - %(message)s")
        logger.error("Invalid configuration: %s", exc)
        return 1
    logging.basicConfig(level=settings.LOG_LEVEL, format="%(asctime)s - %(levelname)s - %(message)s")

    try:
        if args.command == "seed":
            return asyncio.run(seed_command(args))
        return plan_command(args)
    except (ValueError, OSError) as exc:
        logger.error("%s", exc)
        return 1


if __name__ == "__main__":
    sys.exit(main())
