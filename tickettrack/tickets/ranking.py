"""Cheapest and best-value orderings over a quantity group's tickets."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Generic, Iterable, Protocol, TypeVar

from tickettrack.tickets.scoring import score_seat

BALCONY_SECTIONS = range(301, 331)


class SeatedTicket(Protocol):
    section: int
    row: int
    price: int


T = TypeVar("T", bound=SeatedTicket)


class TicketOrder(str, Enum):
    CHEAPEST = "cheapest"
    BEST_VALUE = "bestValue"


@dataclass(frozen=True)
class RankedTickets(Generic[T]):
    cheapest: list[T] = field(default_factory=list)
    best_value: list[T] = field(default_factory=list)


def balcony_tickets(tickets: Iterable[T]) -> list[T]:
    return [ticket for ticket in tickets if ticket.section in BALCONY_SECTIONS]


def order_tickets(tickets: Iterable[T], order: TicketOrder | str) -> list[T]:
    order = TicketOrder(order)
    eligible = balcony_tickets(tickets)
    if order is TicketOrder.CHEAPEST:
        return sorted(eligible, key=lambda ticket: ticket.price)
    if order is TicketOrder.BEST_VALUE:
        # Ascending score: lowest-scoring seats come first.
        # TODO: confirm with product whether best value should be highest score first.
        return sorted(eligible, key=lambda ticket: score_seat(ticket.section, ticket.row))
    raise ValueError(f"Unsupported ticket order: {order}")


def rank_tickets(tickets: Iterable[T]) -> RankedTickets[T]:
    ticket_list = list(tickets)
    return RankedTickets(
        cheapest=order_tickets(ticket_list, TicketOrder.CHEAPEST),
        best_value=order_tickets(ticket_list, TicketOrder.BEST_VALUE),
    )
