"""Seat location score for balcony (300 level) sections."""

from __future__ import annotations

MAX_ROW = 15

# Sideline and corner balcony sections score high, sections behind the baskets score 0.
SECTION_POINTS: dict[int, int] = {
    301: 40,
    302: 40,
    303: 30,
    304: 20,
    305: 10,
    306: 0,
    307: 0,
    308: 0,
    309: 0,
    310: 0,
    311: 0,
    312: 10,
    313: 20,
    314: 30,
    315: 40,
    316: 40,
    317: 40,
    318: 30,
    319: 20,
    320: 10,
    321: 0,
    322: 0,
    323: 0,
    324: 0,
    325: 0,
    326: 0,
    327: 10,
    328: 20,
    329: 30,
    330: 40,
}


def score_seat(section: int, row: int) -> int:
    """Section points plus a bonus for rows closer to the front (rows 1-15).

    Raises KeyError for sections outside SECTION_POINTS.
    """

    return SECTION_POINTS[section] + (MAX_ROW - row)
