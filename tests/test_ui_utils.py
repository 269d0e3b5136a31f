from resale_admin.tickets.aggregation import aggregate
from resale_admin.tickets.filters import StatusFilter
from resale_admin.tickets.models import EnrichedTicket
from resale_admin.ui.utils import (
    COLUMN_SETS,
    EMPTY_CELL,
    build_rows,
    format_refund,
    parse_selector,
    status_label,
)


def test_each_selector_has_a_column_set():
    assert set(COLUMN_SETS) == set(StatusFilter)
    labels = [column.label for column in COLUMN_SETS[StatusFilter.COMPLETE]]
    assert labels[-4:] == ["Selling Price", "Zone", "Row", "Seat"]


def test_parse_selector():
    assert parse_selector("PAID") == StatusFilter.PAID
    assert parse_selector("archived") is None


def test_status_label_shows_refund_only_when_requested():
    ticket = EnrichedTicket(record={"id": 3, "status": "cancel", "refund_status": "in_process"})

    assert status_label(ticket) == "Cancelled"
    assert status_label(ticket, with_refund=True) == "Cancelled (In Process)"
    assert status_label(EnrichedTicket(record={"status": "odd"})) == "odd"
    assert status_label(EnrichedTicket(record={})) == EMPTY_CELL


def test_no_refund_suffix_regardless_of_case():
    for value in ("none", "NONE", " None ", ""):
        ticket = EnrichedTicket(record={"status": "cancel", "refund_status": value})
        assert status_label(ticket, with_refund=True) == "Cancelled"


def test_stale_refund_is_hidden_outside_cancel():
    ticket = EnrichedTicket(record={"status": "paid", "refund_status": "refunded"})

    assert status_label(ticket, with_refund=True) == "Paid"
    assert ticket.effective_refund_status is None


def test_format_refund():
    assert format_refund("in_process") == "In Process"
    assert format_refund("partial_refund") == "Partial Refund"
    assert format_refund(None) == ""


def test_build_rows_uses_column_set_of_selector(tickets, orders, customers):
    enriched = aggregate(tickets, orders, customers)

    paid_rows = build_rows(enriched[1:2], "paid")
    assert paid_rows == [
        {
            "Order ID": "11",
            "Email": "b@x.com",
            "Passport Name": EMPTY_CELL,
            "Facebook Name": EMPTY_CELL,
            "Member Code": EMPTY_CELL,
            "Status": "Paid",
            "Customer Payment": "1500",
            "Payment Date": "2024-05-03",
        }
    ]

    all_rows = build_rows(enriched, StatusFilter.ALL)
    assert len(all_rows) == 4
    assert all_rows[2]["Status"] == "Cancelled (In Process)"
    assert all_rows[2]["Email"] == EMPTY_CELL
