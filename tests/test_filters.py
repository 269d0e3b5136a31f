from resale_admin.tickets.aggregation import aggregate
from resale_admin.tickets.filters import StatusFilter, count_by_status, filter_tickets


def test_filter_all_returns_input_unchanged(tickets, orders, customers):
    enriched = aggregate(tickets, orders, customers)

    assert filter_tickets(enriched, "all") is enriched
    assert filter_tickets(enriched, StatusFilter.ALL) is enriched


def test_filter_is_case_insensitive(tickets, orders, customers):
    enriched = aggregate(tickets, orders, customers)

    assert filter_tickets(enriched, "PAID") == filter_tickets(enriched, "paid")
    assert [ticket.id for ticket in filter_tickets(enriched, "paid")] == [2]


def test_filter_unknown_selector_yields_empty(tickets, orders, customers):
    enriched = aggregate(tickets, orders, customers)

    assert filter_tickets(enriched, "archived") == []
    assert filter_tickets(enriched, None) == []


def test_filter_preserves_source_order():
    enriched = aggregate(
        [
            {"id": 3, "status": "pending"},
            {"id": 1, "status": "paid"},
            {"id": 2, "status": "PENDING"},
        ],
        [],
        [],
    )

    assert [ticket.id for ticket in filter_tickets(enriched, StatusFilter.PENDING)] == [3, 2]


def test_count_by_status(tickets, orders, customers):
    counts = count_by_status(aggregate(tickets, orders, customers))

    assert counts[StatusFilter.ALL] == 4
    assert counts[StatusFilter.PENDING] == 1
    assert counts[StatusFilter.PAID] == 1
    assert counts[StatusFilter.COMPLETE] == 1
    assert counts[StatusFilter.CANCEL] == 1
