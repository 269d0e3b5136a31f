from unittest.mock import AsyncMock

import pytest

from resale_admin.tickets.drafts import TransitionRequestBuilder
from resale_admin.tickets.models import ConsoleSnapshot, EnrichedTicket
from resale_admin.tickets.service import (
    InvalidTicketTransitionError,
    TicketLoadError,
    TicketServiceError,
    TransitionFailedError,
)
from resale_admin.tickets.state import IncompleteTransitionError, TicketStatus


def _service(**kwargs):
    service = AsyncMock()
    service.transition = AsyncMock(**kwargs)
    return service


def test_open_binds_ticket_and_resets_fields():
    builder = TransitionRequestBuilder()
    ticket = EnrichedTicket(record={"id": 1, "status": "pending"})

    draft = builder.open(ticket, "paid")

    assert builder.is_open
    assert draft.ticket_id == 1
    assert draft.current == TicketStatus.PENDING
    assert draft.target == TicketStatus.PAID
    assert draft.values == {"customer_payment": "", "payment_date": ""}


def test_open_rejects_transition_without_edge():
    builder = TransitionRequestBuilder()

    with pytest.raises(InvalidTicketTransitionError):
        builder.open({"id": 1, "status": "pending"}, TicketStatus.COMPLETE)
    assert not builder.is_open


def test_reopening_never_leaks_stale_values():
    builder = TransitionRequestBuilder()
    builder.open({"id": 1, "status": "pending"}, TicketStatus.PAID)
    builder.edit("customer_payment", "1500")

    draft = builder.open({"id": 2, "status": "pending"}, TicketStatus.PAID)

    assert draft.ticket_id == 2
    assert draft.values == {"customer_payment": "", "payment_date": ""}


def test_edit_rejects_fields_the_transition_does_not_collect():
    builder = TransitionRequestBuilder()
    builder.open({"id": 1, "status": "pending"}, TicketStatus.PAID)

    with pytest.raises(KeyError):
        builder.edit("seat", "14")


def test_cancel_discards_draft():
    builder = TransitionRequestBuilder()
    builder.open({"id": 1, "status": "paid"}, TicketStatus.COMPLETE)

    builder.cancel()

    assert builder.draft is None
    with pytest.raises(TicketServiceError):
        builder.edit("zone", "A")


def test_missing_fields_tracks_edits():
    builder = TransitionRequestBuilder()
    builder.open({"id": 1, "status": "paid"}, TicketStatus.COMPLETE)
    builder.edit("zone", "A")
    builder.edit("row", "3")

    assert builder.missing_fields() == ["selling_price", "seat"]


@pytest.mark.asyncio
async def test_submit_incomplete_draft_makes_no_call():
    builder = TransitionRequestBuilder()
    service = _service()
    builder.open({"id": 1, "status": "pending"}, TicketStatus.PAID)
    builder.edit("payment_date", "2024-05-03")

    with pytest.raises(IncompleteTransitionError) as exc:
        await builder.submit(service)

    assert exc.value.missing == ("customer_payment",)
    service.transition.assert_not_awaited()
    assert builder.is_open


@pytest.mark.asyncio
async def test_submit_hands_off_and_clears_draft():
    snapshot = ConsoleSnapshot(tickets=[])
    builder = TransitionRequestBuilder()
    service = _service(return_value=snapshot)
    ticket = {"id": 1, "status": "pending"}
    builder.open(ticket, TicketStatus.PAID)
    builder.edit("customer_payment", "1500")
    builder.edit("payment_date", "2024-05-03")

    result = await builder.submit(service)

    assert result is snapshot
    service.transition.assert_awaited_once_with(
        ticket,
        TicketStatus.PAID,
        {"customer_payment": "1500", "payment_date": "2024-05-03"},
    )
    assert not builder.is_open


@pytest.mark.asyncio
async def test_failed_write_keeps_draft_for_retry():
    builder = TransitionRequestBuilder()
    service = _service(side_effect=TransitionFailedError("Seat already sold"))
    builder.open({"id": 1, "status": "paid"}, TicketStatus.PENDING)

    with pytest.raises(TransitionFailedError):
        await builder.submit(service)

    assert builder.is_open


@pytest.mark.asyncio
async def test_reload_failure_after_write_still_clears_draft():
    builder = TransitionRequestBuilder()
    service = _service(side_effect=TicketLoadError("Failed to fetch (503)"))
    builder.open({"id": 1, "status": "paid"}, TicketStatus.CANCEL)

    with pytest.raises(TicketLoadError):
        await builder.submit(service)

    assert not builder.is_open
