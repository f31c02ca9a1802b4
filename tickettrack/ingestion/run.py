"""CLI entrypoint for scheduled home-game ingestion runs."""

from __future__ import annotations

import argparse
import logging
import os

from tickettrack.ingestion.sync import sync_home_games
from tickettrack.ingestion.teams import TEAMS


def _parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Save the remaining home games of one or more teams.",
    )
    parser.add_argument(
        "--team",
        type=str,
        required=True,
        help="Comma-separated list of team keys (e.g., celtics).",
    )
    return parser.parse_args()


def _parse_teams(raw: str) -> list[str]:
    teams = [team.strip().lower() for team in raw.split(",") if team.strip()]
    invalid = [team for team in teams if team not in TEAMS]
    if invalid:
        supported = ", ".join(sorted(TEAMS))
        raise SystemExit(f"Unsupported teams: {', '.join(invalid)}. Supported: {supported}")
    if not teams:
        raise SystemExit("No teams provided. Use --team celtics")
    return teams


def main() -> None:
    logging.basicConfig(
        level=os.getenv("TICKETTRACK_LOG_LEVEL", "INFO").upper(),
        format="%(asctime)s %(levelname)s %(name)s %(message)s",
    )

    args = _parse_args()
    teams = _parse_teams(args.team)

    for team in teams:
        logging.info("Starting ingestion team=%s", team)
        result = sync_home_games(team)
        logging.info(
            "Done: team=%s fetched=%s inserted=%s skipped=%s errors=%s",
            team,
            result.total_fetched,
            result.inserted,
            result.skipped,
            result.errors,
        )


if __name__ == "__main__":
    main()
