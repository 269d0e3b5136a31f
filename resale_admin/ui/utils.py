from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping, Sequence

from resale_admin.tickets.filters import StatusFilter
from resale_admin.tickets.models import EnrichedTicket

EMPTY_CELL = "—"

STATUS_LABELS: Mapping[str, str] = {
    "pending": "Pending",
    "paid": "Paid",
    "complete": "Completed",
    "cancel": "Cancelled",
}

REFUND_LABELS: Mapping[str, str] = {
    "none": "None",
    "in_process": "In Process",
    "refunded": "Refunded",
}

FILTER_LABELS: Mapping[StatusFilter, str] = {
    StatusFilter.ALL: "All",
    StatusFilter.PENDING: "Pending",
    StatusFilter.PAID: "Paid",
    StatusFilter.COMPLETE: "Completed",
    StatusFilter.CANCEL: "Cancelled",
}


@dataclass(frozen=True, slots=True)
class Column:
    label: str
    field: str


_BASE_COLUMNS: tuple[Column, ...] = (
    Column("Order ID", "resolved_order_id"),
    Column("Email", "resolved_customer_email"),
    Column("Passport Name", "passport_name"),
    Column("Facebook Name", "facebook_name"),
    Column("Member Code", "member_code"),
)
_STATUS = Column("Status", "status")

COLUMN_SETS: Mapping[StatusFilter, tuple[Column, ...]] = {
    StatusFilter.ALL: (*_BASE_COLUMNS, _STATUS),
    StatusFilter.PENDING: (*_BASE_COLUMNS, _STATUS),
    StatusFilter.PAID: (
        *_BASE_COLUMNS,
        _STATUS,
        Column("Customer Payment", "customer_payment"),
        Column("Payment Date", "payment_date"),
    ),
    StatusFilter.COMPLETE: (
        *_BASE_COLUMNS,
        _STATUS,
        Column("Selling Price", "selling_price"),
        Column("Zone", "zone"),
        Column("Row", "row"),
        Column("Seat", "seat"),
    ),
    StatusFilter.CANCEL: (
        *_BASE_COLUMNS,
        Column("Customer Payment", "customer_payment"),
        _STATUS,
    ),
}

# Views where cancelled tickets show their refund progress next to the status.
_REFUND_AWARE = frozenset({StatusFilter.ALL, StatusFilter.CANCEL})


def parse_selector(selector: StatusFilter | str | None) -> StatusFilter | None:
    if isinstance(selector, StatusFilter):
        return selector
    try:
        return StatusFilter((selector or "").strip().lower())
    except ValueError:
        return None


def format_refund(value: Any) -> str:
    """``"in_process"`` becomes ``"In Process"``."""

    if not isinstance(value, str) or not value:
        return ""
    return REFUND_LABELS.get(value.lower()) or value.replace("_", " ", 1).title()


def status_label(ticket: EnrichedTicket, *, with_refund: bool = False) -> str:
    raw = ticket.raw_status
    label = STATUS_LABELS.get(raw.lower()) or raw or EMPTY_CELL
    refund = ticket.get("refund_status")
    has_refund = isinstance(refund, str) and refund.strip().lower() not in ("", "none")
    if with_refund and raw.lower() == "cancel" and has_refund:
        label = f"{label} ({format_refund(refund)})"
    return label


def format_cell(value: Any) -> str:
    if value is None:
        return EMPTY_CELL
    return str(value)


def build_rows(
    tickets: Sequence[EnrichedTicket],
    selector: StatusFilter | str | None,
) -> list[dict[str, str]]:
    """Render enriched tickets into table rows for the given filter."""

    parsed = parse_selector(selector) or StatusFilter.ALL
    columns = COLUMN_SETS[parsed]
    rows: list[dict[str, str]] = []
    for ticket in tickets:
        row: dict[str, str] = {}
        for column in columns:
            if column.field == "status":
                row[column.label] = status_label(ticket, with_refund=parsed in _REFUND_AWARE)
            elif column.field == "resolved_order_id":
                row[column.label] = format_cell(ticket.resolved_order_id)
            elif column.field == "resolved_customer_email":
                row[column.label] = format_cell(ticket.resolved_customer_email)
            else:
                row[column.label] = format_cell(ticket.get(column.field))
        rows.append(row)
    return rows
