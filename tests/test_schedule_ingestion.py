from __future__ import annotations

import unittest
from datetime import datetime, timezone
from unittest.mock import patch
from urllib.error import URLError

from support import make_session_factory

from tickettrack.ingestion.schedule_client import fetch_schedule
from tickettrack.ingestion.schedule_parser import parse_home_games
from tickettrack.ingestion.sync import ScheduleFetchError, ingest_home_games
from tickettrack.ingestion.teams import TEAMS, get_team
from tickettrack.store import SqlAlchemyTicketStore

NOW = datetime(2026, 11, 1, 12, 0, tzinfo=timezone.utc)


def _schedule_game(gdte: str, etm: str, home: bool = True, city: str = "Detroit", name: str = "Pistons") -> dict:
    venue = ("TD Garden", "Boston", "MA") if home else ("Little Caesars Arena", "Detroit", "MI")
    return {
        "gid": f"{gdte}-{name}",
        "gdte": gdte,
        "etm": etm,
        "an": venue[0],
        "ac": venue[1],
        "as": venue[2],
        "v": {"tc": city, "tn": name},
    }


def _payload(*games: dict) -> dict:
    return {"data": {"gscd": {"g": list(games)}}}


class ParseHomeGamesTests(unittest.TestCase):
    def test_keeps_future_home_games_only(self) -> None:
        payload = _payload(
            _schedule_game("2026-10-20", "2026-10-20T19:30:00", name="Past"),
            _schedule_game("2026-11-12", "2026-11-12T19:30:00"),
            _schedule_game("2026-11-14", "2026-11-14T19:00:00", home=False, name="Away"),
        )

        games = parse_home_games(payload, TEAMS["celtics"], now=NOW)

        self.assertEqual(1, len(games))
        game = games[0]
        self.assertEqual("Boston Celtics", game.home_team)
        self.assertEqual("Detroit Pistons", game.away_team)
        self.assertEqual(("TD Garden", "Boston", "MA"), (game.venue, game.city, game.state))
        self.assertEqual(datetime(2026, 11, 13, 0, 30, tzinfo=timezone.utc), game.start_time)

    def test_game_later_today_is_still_future(self) -> None:
        payload = _payload(_schedule_game("2026-11-01", "2026-11-01T18:00:00"))

        games = parse_home_games(payload, TEAMS["celtics"], now=NOW)

        self.assertEqual(1, len(games))

    def test_malformed_entries_are_skipped(self) -> None:
        broken = _schedule_game("2026-11-12", "not-a-time")
        no_visitor = _schedule_game("2026-11-13", "2026-11-13T19:30:00")
        no_visitor["v"] = None

        games = parse_home_games(_payload(broken, no_visitor, "junk"), TEAMS["celtics"], now=NOW)

        self.assertEqual([], games)

    def test_unexpected_payload_shape(self) -> None:
        self.assertEqual([], parse_home_games({"data": []}, TEAMS["celtics"], now=NOW))


class TeamsTests(unittest.TestCase):
    def test_get_team_is_case_insensitive(self) -> None:
        self.assertEqual("Boston Celtics", get_team(" Celtics ").name)

    def test_unknown_team_raises(self) -> None:
        with self.assertRaises(ValueError):
            get_team("knicks")


class FetchScheduleTests(unittest.TestCase):
    def test_unknown_team_returns_error_dict(self) -> None:
        payload = fetch_schedule("knicks")

        self.assertFalse(payload["ok"])
        self.assertIn("Unsupported team", payload["error"])

    def test_network_failure_retries_then_returns_error_dict(self) -> None:
        with patch(
            "tickettrack.ingestion.schedule_client.urlopen",
            side_effect=URLError("offline"),
        ) as urlopen, patch("tickettrack.ingestion.schedule_client.time.sleep") as sleep:
            payload = fetch_schedule("celtics")

        self.assertEqual(3, urlopen.call_count)
        self.assertEqual(2, sleep.call_count)
        self.assertEqual("Failed to fetch team schedule", payload["error"])
        self.assertEqual("celtics", payload["team"])


class IngestHomeGamesTests(unittest.TestCase):
    def setUp(self) -> None:
        self.db = make_session_factory()()
        self.store = SqlAlchemyTicketStore(self.db)

    def tearDown(self) -> None:
        self.db.close()

    def test_inserts_new_games_and_skips_known_ones(self) -> None:
        payload = _payload(
            _schedule_game("2026-11-12", "2026-11-12T19:30:00"),
            _schedule_game("2026-11-20", "2026-11-20T19:00:00", city="Chicago", name="Bulls"),
        )

        with patch("tickettrack.ingestion.sync.fetch_schedule", return_value=payload):
            first, new_games = ingest_home_games(self.store, "celtics", now=NOW)
            second, repeat_games = ingest_home_games(self.store, "celtics", now=NOW)

        self.assertEqual((2, 2, 0, 0), (first.total_fetched, first.inserted, first.skipped, first.errors))
        self.assertEqual(["Detroit Pistons", "Chicago Bulls"], [game.away_team for game in new_games])
        self.assertEqual((2, 0, 2), (second.total_fetched, second.inserted, second.skipped))
        self.assertEqual([], repeat_games)
        self.assertEqual(2, len(self.store.list_games()))

    def test_fetch_error_raises(self) -> None:
        error = {"ok": False, "error": "Failed to fetch team schedule", "details": "offline"}

        with patch("tickettrack.ingestion.sync.fetch_schedule", return_value=error):
            with self.assertRaises(ScheduleFetchError):
                ingest_home_games(self.store, "celtics", now=NOW)


if __name__ == "__main__":
    unittest.main()
