from __future__ import annotations

import asyncio
import logging
from datetime import datetime, timezone
from typing import Any, Mapping, Sequence, Union

from resale_admin.store.client import EntityStoreClient, EntityStoreError

from .aggregation import aggregate
from .filters import StatusFilter, filter_tickets
from .models import ConsoleSnapshot, EnrichedTicket
from .state import IncompleteTransitionError, RefundStatus, TicketStateMachine, TicketStatus

logger = logging.getLogger(__name__)

TicketRef = Union[EnrichedTicket, Mapping[str, Any]]


class TicketServiceError(RuntimeError):
    """Base error for console service issues."""


class InvalidTicketTransitionError(TicketServiceError):
    """Raised when a lifecycle or refund move is not allowed from the current state."""


class TicketLoadError(TicketServiceError):
    """Raised when a load cycle could not fetch all three collections."""


class TransitionFailedError(TicketServiceError):
    """Raised when the entity store rejected or never received a write."""

    def __init__(self, message: str, *, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


def _record_of(ticket: TicketRef) -> Mapping[str, Any]:
    if isinstance(ticket, EnrichedTicket):
        return ticket.record
    return ticket


def _coerce_status(value: TicketStatus | str) -> TicketStatus:
    status = TicketStatus.parse(value)
    if status is None:
        raise InvalidTicketTransitionError(f"Unknown ticket status: {value!r}")
    return status


class TicketConsoleService:
    """Load cycle and guarded ticket transitions on top of the entity store."""

    def __init__(
        self,
        client: EntityStoreClient,
        *,
        state_machine: TicketStateMachine | None = None,
    ) -> None:
        self._client = client
        self._state_machine = state_machine or TicketStateMachine()
        self._snapshot: ConsoleSnapshot | None = None

    @property
    def state_machine(self) -> TicketStateMachine:
        return self._state_machine

    @property
    def snapshot(self) -> ConsoleSnapshot | None:
        return self._snapshot

    async def load(self) -> ConsoleSnapshot:
        """Fetch all three collections concurrently, then aggregate.

        A failed fetch leaves the previous snapshot in place.
        """

        try:
            tickets, orders, customers = await asyncio.gather(
                self._client.list_tickets(),
                self._client.list_orders(),
                self._client.list_customers(),
            )
        except EntityStoreError as exc:
            logger.error("Load cycle failed: %s", exc)
            raise TicketLoadError(str(exc) or "Unable to load data") from exc

        snapshot = ConsoleSnapshot(
            tickets=aggregate(tickets, orders, customers),
            orders=orders,
            customers=customers,
            loaded_at=datetime.now(timezone.utc),
        )
        self._snapshot = snapshot
        logger.info(
            "Loaded %d tickets, %d orders, %d customers",
            len(tickets),
            len(orders),
            len(customers),
        )
        return snapshot

    def tickets(self, selector: StatusFilter | str = StatusFilter.ALL) -> Sequence[EnrichedTicket]:
        if self._snapshot is None:
            return []
        return filter_tickets(self._snapshot.tickets, selector)

    def prepare_transition(
        self,
        ticket: TicketRef,
        target: TicketStatus | str,
        values: Mapping[str, Any] | None = None,
    ) -> dict[str, Any]:
        """Validate a transition and return its write payload without touching the store."""

        record = _record_of(ticket)
        target_status = _coerce_status(target)
        current = TicketStatus.parse(record.get("status"))
        try:
            return self._state_machine.build_payload(current, target_status, values)
        except IncompleteTransitionError:
            raise
        except ValueError as exc:
            raise InvalidTicketTransitionError(str(exc)) from exc

    async def transition(
        self,
        ticket: TicketRef,
        target: TicketStatus | str,
        values: Mapping[str, Any] | None = None,
    ) -> ConsoleSnapshot:
        record = _record_of(ticket)
        payload = self.prepare_transition(record, target, values)
        ticket_id = record.get("id")
        await self._write(ticket_id, payload)
        logger.info(
            "Ticket %s moved %s -> %s",
            ticket_id,
            record.get("status"),
            payload["status"],
        )
        return await self.load()

    async def mark_paid(
        self,
        ticket: TicketRef,
        *,
        customer_payment: str,
        payment_date: str,
    ) -> ConsoleSnapshot:
        values = {"customer_payment": customer_payment, "payment_date": payment_date}
        return await self.transition(ticket, TicketStatus.PAID, values)

    async def complete(
        self,
        ticket: TicketRef,
        *,
        selling_price: str,
        zone: str,
        row: str,
        seat: str,
    ) -> ConsoleSnapshot:
        values = {"selling_price": selling_price, "zone": zone, "row": row, "seat": seat}
        return await self.transition(ticket, TicketStatus.COMPLETE, values)

    async def cancel(self, ticket: TicketRef) -> ConsoleSnapshot:
        return await self.transition(ticket, TicketStatus.CANCEL)

    async def revert_to_pending(self, ticket: TicketRef) -> ConsoleSnapshot:
        return await self.transition(ticket, TicketStatus.PENDING)

    async def update_refund_status(
        self,
        ticket: TicketRef,
        new_status: RefundStatus | str,
    ) -> ConsoleSnapshot:
        record = _record_of(ticket)
        target = RefundStatus.parse(new_status)
        if target is None:
            raise InvalidTicketTransitionError(f"Unknown refund status: {new_status!r}")

        status = TicketStatus.parse(record.get("status"))
        current = RefundStatus.parse(record.get("refund_status"))
        try:
            self._state_machine.assert_refund_update(status, current, target)
        except ValueError as exc:
            raise InvalidTicketTransitionError(str(exc)) from exc

        await self._write(record.get("id"), {"refund_status": target.value})
        logger.info("Ticket %s refund %s -> %s", record.get("id"), record.get("refund_status"), target.value)
        return await self.load()

    async def mark_refunded(self, ticket: TicketRef) -> ConsoleSnapshot:
        return await self.update_refund_status(ticket, RefundStatus.REFUNDED)

    async def override_refund_status(
        self,
        ticket: TicketRef,
        new_status: RefundStatus | str,
    ) -> ConsoleSnapshot:
        """Administrative write of any refund value, bypassing the refund guard."""

        record = _record_of(ticket)
        target = RefundStatus.parse(new_status)
        if target is None:
            raise InvalidTicketTransitionError(f"Unknown refund status: {new_status!r}")
        if TicketStatus.parse(record.get("status")) != TicketStatus.CANCEL:
            raise InvalidTicketTransitionError("Refund status can only change while the ticket is cancelled")

        logger.warning(
            "Refund override on ticket %s: %s -> %s",
            record.get("id"),
            record.get("refund_status"),
            target.value,
        )
        await self._write(record.get("id"), {"refund_status": target.value})
        return await self.load()

    async def _write(self, ticket_id: Any, payload: Mapping[str, Any]) -> Any:
        if ticket_id is None:
            raise TicketServiceError("Ticket has no identifier")
        try:
            return await self._client.patch_ticket(ticket_id, payload)
        except EntityStoreError as exc:
            logger.error("Updating ticket %s failed: %s", ticket_id, exc)
            raise TransitionFailedError(str(exc), status_code=exc.status_code) from exc
