"""Command line entry point for a harvesting run."""

from __future__ import annotations

import argparse
import asyncio
import logging
from collections.abc import Sequence
from dataclasses import replace
from typing import Final

import boto3

from startgg_client import connect

from .config import HarvesterConfig
from .detector import UpsetDetector
from .harvest import UpsetHarvester
from .pronouns import PronounPolicy
from .reconcile import EntityReconciler, ReconciliationContext
from .storage import CsvUpsetSink, DynamoUpsetStorage, UpsetSink

log: Final = logging.getLogger("upset-finder")


def parse_args(argv: Sequence[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Find seed upsets won by she/her players on start.gg"
    )
    parser.add_argument(
        "--after-date",
        type=int,
        default=None,
        help="Only list tournaments starting at or after this unix timestamp",
    )
    parser.add_argument(
        "--output-dir",
        type=str,
        default=None,
        help="Directory for the CSV output (defaults to UPSET_OUTPUT_DIR or ./csv)",
    )
    parser.add_argument(
        "--window-pages",
        type=int,
        default=None,
        help="Listing pages per pass before the watermark is re-based",
    )
    parser.add_argument(
        "--pronoun-policy",
        choices=[policy.value for policy in PronounPolicy],
        default=None,
        help="'inclusive' also counts they/them without he/him",
    )
    parser.add_argument(
        "--abort-on-error",
        action="store_true",
        help="Stop the run on the first failed event instead of skipping it",
    )
    return parser.parse_args(argv)


def apply_args(config: HarvesterConfig, args: argparse.Namespace) -> HarvesterConfig:
    overrides: dict[str, object] = {}
    if args.after_date is not None:
        overrides["after_date"] = args.after_date
    if args.output_dir:
        overrides["output_dir"] = args.output_dir
    if args.window_pages is not None:
        overrides["window_pages"] = args.window_pages
    if args.pronoun_policy:
        overrides["pronoun_policy"] = PronounPolicy(args.pronoun_policy)
    if args.abort_on_error:
        overrides["abort_on_error"] = True
    return replace(config, **overrides)


def build_sinks(config: HarvesterConfig) -> list[UpsetSink]:
    sinks: list[UpsetSink] = [CsvUpsetSink.in_directory(config.output_dir)]
    if config.table_name:
        dynamodb = boto3.resource("dynamodb", region_name=config.aws_region)
        sinks.append(DynamoUpsetStorage(dynamodb.Table(config.table_name)))
    return sinks


async def run(config: HarvesterConfig) -> int:
    sinks = build_sinks(config)
    try:
        async with connect(
            config.api_key,
            requests_per_minute=config.requests_per_minute,
            graphql_url=config.graphql_url,
            rest_url=config.rest_url,
            videogame_ids=config.videogame_ids,
            max_attempts=config.max_attempts,
            max_delay=config.max_retry_delay,
        ) as client:
            harvester = UpsetHarvester(
                client,
                reconciler=EntityReconciler(client, ReconciliationContext()),
                detector=UpsetDetector(config.pronoun_policy),
                sinks=sinks,
                window_pages=config.window_pages,
                after_date=config.after_date,
                abort_on_error=config.abort_on_error,
            )
            return await harvester.run()
    finally:
        for sink in sinks:
            sink.close()


def main(argv: Sequence[str] | None = None) -> None:
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s | %(levelname)s | %(name)s | %(message)s",
    )
    args = parse_args(argv)
    config = apply_args(HarvesterConfig.load(), args)
    log.info(
        "Harvesting upsets (%d requests/minute, policy %s)",
        config.requests_per_minute,
        config.pronoun_policy.value,
    )
    asyncio.run(run(config))


__all__ = ["apply_args", "build_sinks", "main", "parse_args", "run"]
