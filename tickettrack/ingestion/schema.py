"""Internal data contract for schedule ingestion."""

from datetime import datetime

from pydantic import BaseModel


class GameIngestDTO(BaseModel):
    """
    A future home game read from a team schedule, before it is stored.
    """

    home_team: str
    away_team: str
    start_time: datetime
    venue: str
    city: str
    state: str
