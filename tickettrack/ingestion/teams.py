"""Teams whose home schedules can be ingested."""

from __future__ import annotations

import os
from dataclasses import dataclass

SCHEDULE_BASE_URL = os.getenv("SCHEDULE_BASE_URL", "https://cdn.celtics.com").rstrip("/")


@dataclass(frozen=True)
class SportsTeam:
    key: str
    name: str
    schedule_path: str
    venue: str
    city: str
    state: str

    @property
    def schedule_url(self) -> str:
        return f"{SCHEDULE_BASE_URL}{self.schedule_path}"


TEAMS: dict[str, SportsTeam] = {
    "celtics": SportsTeam(
        key="celtics",
        name="Boston Celtics",
        schedule_path="/api/schedule/2024_celtics_schedule.json",
        venue="TD Garden",
        city="Boston",
        state="MA",
    ),
}


def get_team(team_key: str) -> SportsTeam:
    team = TEAMS.get(team_key.strip().lower())
    if team is None:
        supported = ", ".join(sorted(TEAMS))
        raise ValueError(f"Unsupported team: {team_key}. Supported: {supported}")
    return team
