"""Command-line front end: search one recipe site or list the supported sites."""

from __future__ import annotations

import argparse
import asyncio
import sys
from pathlib import Path

from loguru import logger

from recipe_finder.config.loader import load_config
from recipe_finder.search.models import RankedResult, SearchOutcome
from recipe_finder.search.orchestrator import SearchOrchestrator
from recipe_finder.sites.registry import default_registry


def format_result(result: RankedResult) -> str:
    line = f"{result.title}\n    {result.url}"
    if result.match != "none":
        return f"[{result.match} {result.matched_tokens}/{result.total_tokens}] {line}"
    return line


def render_outcome(outcome: SearchOutcome) -> list[str]:
    lines: list[str] = []
    if outcome.query is not None and outcome.kind != "failure":
        lines.append(outcome.query.status_message)

    if outcome.kind == "success":
        lines.extend(format_result(r) for r in outcome.results)
    elif outcome.kind == "fallback" and outcome.fallback is not None:
        lines.append(outcome.message)
        lines.append(f"{outcome.fallback.title}\n    {outcome.fallback.url}")
    else:
        lines.append(outcome.message)
    return lines


def _configure_logging(verbose: bool) -> None:
    logger.remove()
    logger.add(sys.stderr, level="DEBUG" if verbose else "WARNING")


def _cmd_sites(args: argparse.Namespace) -> int:
    for site in default_registry():
        print(f"{site.site_id:<18} {site.name}")
    return 0


def _cmd_search(args: argparse.Namespace) -> int:
    config = load_config(Path(args.config) if args.config else None)
    orchestrator = SearchOrchestrator(config)
    outcome = asyncio.run(orchestrator.search(args.query, args.site))
    for line in render_outcome(outcome):
        print(line)
    return 0 if outcome.ok else 1


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(prog="recipe-finder", description=__doc__)
    sub = parser.add_subparsers(dest="command", required=True)

    search = sub.add_parser("search", help="search one recipe site")
    search.add_argument("query")
    search.add_argument("--site", default=None, help="site id (see `recipe-finder sites`)")
    search.add_argument("--config", default=None, help="path to config.json")
    search.add_argument("--verbose", "-v", action="store_true", help="debug logging on stderr")
    search.set_defaults(func=_cmd_search)

    sites = sub.add_parser("sites", help="list supported sites")
    sites.set_defaults(func=_cmd_sites, verbose=False)

    args = parser.parse_args(argv)
    _configure_logging(args.verbose)
    return args.func(args)


if __name__ == "__main__":
    sys.exit(main())
