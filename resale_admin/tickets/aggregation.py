"""Join tickets to orders and customers from client-held snapshots.

All functions here are pure: they never raise on dirty data. An unresolvable
identifier or a dangling reference degrades to ``None`` on the enriched ticket
instead of failing the pass.
"""

from __future__ import annotations

from typing import Any, Iterable, Mapping

from .identifiers import normalize_identifier
from .models import Customer, EnrichedTicket, Order


def build_order_index(orders: Iterable[Any]) -> dict[int, int]:
    """Map order id to customer id; later duplicates overwrite earlier ones."""

    index: dict[int, int] = {}
    for record in orders or ():
        order = Order.from_record(record)
        if order is not None:
            index[order.id] = order.customer_id
    return index


def build_customer_index(customers: Iterable[Any]) -> dict[int, str | None]:
    """Map customer id to email (``None`` when the customer has no email)."""

    index: dict[int, str | None] = {}
    for record in customers or ():
        customer = Customer.from_record(record)
        if customer is not None:
            index[customer.id] = customer.email
    return index


def enrich_ticket(
    record: Any,
    order_index: Mapping[int, int],
    customer_index: Mapping[int, str | None],
) -> EnrichedTicket:
    fields: Mapping[str, Any] = record if isinstance(record, Mapping) else {}
    order_id = normalize_identifier(fields.get("order"))
    customer_id = order_index.get(order_id) if order_id is not None else None
    email = customer_index.get(customer_id) if customer_id is not None else None
    return EnrichedTicket(record=fields, resolved_order_id=order_id, resolved_customer_email=email)


def enrich(
    tickets: Iterable[Any],
    order_index: Mapping[int, int],
    customer_index: Mapping[int, str | None],
) -> list[EnrichedTicket]:
    """Project every ticket into an :class:`EnrichedTicket`, keeping count and order."""

    return [enrich_ticket(record, order_index, customer_index) for record in tickets or ()]


def aggregate(
    tickets: Iterable[Any],
    orders: Iterable[Any],
    customers: Iterable[Any],
) -> list[EnrichedTicket]:
    return enrich(tickets, build_order_index(orders), build_customer_index(customers))
