from __future__ import annotations

from enum import Enum
from typing import Sequence

from .models import EnrichedTicket


class StatusFilter(str, Enum):
    """Selectors offered by the ticket list."""

    ALL = "all"
    PENDING = "pending"
    PAID = "paid"
    COMPLETE = "complete"
    CANCEL = "cancel"


def _normalize_selector(selector: StatusFilter | str | None) -> str:
    if isinstance(selector, StatusFilter):
        return selector.value
    return (selector or "").strip().lower()


def filter_tickets(
    tickets: Sequence[EnrichedTicket],
    selector: StatusFilter | str | None,
) -> Sequence[EnrichedTicket]:
    """Return the tickets whose status matches ``selector``.

    ``all`` returns ``tickets`` itself; an unknown selector returns an empty list.
    """

    wanted = _normalize_selector(selector)
    if wanted == StatusFilter.ALL.value:
        return tickets
    if wanted not in {item.value for item in StatusFilter}:
        return []
    return [ticket for ticket in tickets if ticket.raw_status.strip().lower() == wanted]


def count_by_status(tickets: Sequence[EnrichedTicket]) -> dict[StatusFilter, int]:
    counts = {item: 0 for item in StatusFilter}
    counts[StatusFilter.ALL] = len(tickets)
    for ticket in tickets:
        status = ticket.status
        if status is not None:
            counts[StatusFilter(status.value)] += 1
    return counts
