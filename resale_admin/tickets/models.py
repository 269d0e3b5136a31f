from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Mapping, Sequence

from .identifiers import normalize_identifier
from .state import RefundStatus, TicketStatus


@dataclass(frozen=True, slots=True)
class EnrichedTicket:
    """Read-time projection of a ticket with its order and customer resolved.

    ``record`` is the ticket exactly as the entity store returned it; the two
    ``resolved_*`` fields are recomputed on every aggregation pass.
    """

    record: Mapping[str, Any]
    resolved_order_id: int | None = None
    resolved_customer_email: str | None = None

    @property
    def id(self) -> Any:
        return self.record.get("id")

    @property
    def raw_status(self) -> str:
        value = self.record.get("status")
        return value if isinstance(value, str) else ""

    @property
    def status(self) -> TicketStatus | None:
        return TicketStatus.parse(self.record.get("status"))

    @property
    def refund_status(self) -> RefundStatus | None:
        return RefundStatus.parse(self.record.get("refund_status"))

    @property
    def effective_refund_status(self) -> RefundStatus | None:
        """Refund value for display; stale values outside ``cancel`` are hidden."""

        if self.status != TicketStatus.CANCEL:
            return None
        return self.refund_status

    def get(self, name: str, default: Any = None) -> Any:
        return self.record.get(name, default)

    def as_dict(self) -> dict[str, Any]:
        data = dict(self.record)
        data["resolved_order_id"] = self.resolved_order_id
        data["resolved_customer_email"] = self.resolved_customer_email
        return data


@dataclass(slots=True)
class Order:
    id: int
    customer_id: int

    @classmethod
    def from_record(cls, record: Any) -> "Order | None":
        if not isinstance(record, Mapping):
            return None
        order_id = normalize_identifier(record.get("id"))
        customer_id = normalize_identifier(record.get("customer"))
        if order_id is None or customer_id is None:
            return None
        return cls(id=order_id, customer_id=customer_id)


@dataclass(slots=True)
class Customer:
    id: int
    email: str | None

    @classmethod
    def from_record(cls, record: Any) -> "Customer | None":
        if not isinstance(record, Mapping):
            return None
        customer_id = normalize_identifier(record.get("id"))
        if customer_id is None:
            return None
        email = record.get("email")
        return cls(id=customer_id, email=email if isinstance(email, str) and email else None)


@dataclass(slots=True)
class ConsoleSnapshot:
    """Result of one complete load cycle."""

    tickets: Sequence[EnrichedTicket]
    orders: Sequence[Any] = field(default_factory=list)
    customers: Sequence[Any] = field(default_factory=list)
    loaded_at: datetime | None = None
