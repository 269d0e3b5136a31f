from __future__ import annotations

import asyncio
from typing import Awaitable, Callable

import streamlit as st

from resale_admin.core.config import get_settings
from resale_admin.core.logging import configure_logging, init_tracer
from resale_admin.store.client import EntityStoreClient
from resale_admin.store.credentials import Credentials, resolve_credentials
from resale_admin.tickets.drafts import TransitionRequestBuilder
from resale_admin.tickets.filters import StatusFilter, count_by_status, filter_tickets
from resale_admin.tickets.models import ConsoleSnapshot, EnrichedTicket
from resale_admin.tickets.service import TicketConsoleService, TicketServiceError
from resale_admin.tickets.state import IncompleteTransitionError, RefundStatus, TicketStatus
from resale_admin.ui.utils import (
    FILTER_LABELS,
    REFUND_LABELS,
    build_rows,
    format_cell,
    status_label,
)

_FIELD_LABELS = {
    "customer_payment": "Customer Payment",
    "payment_date": "Payment Date",
    "selling_price": "Selling Price",
    "zone": "Zone",
    "row": "Row",
    "seat": "Seat",
}

STATUS_TITLES = {
    TicketStatus.PAID: "Mark as Paid",
    TicketStatus.COMPLETE: "Mark as Completed",
    TicketStatus.CANCEL: "Cancel",
    TicketStatus.PENDING: "Back to Pending",
}


def _get_base_url() -> str:
    base_url = st.session_state.get("base_url")
    if not base_url:
        base_url = get_settings().api_base_url
        st.session_state["base_url"] = base_url
    return str(base_url)


def _get_credentials() -> Credentials:
    manual = resolve_credentials({"access_token": st.session_state.get("access_token")})
    if manual.is_authenticated:
        return manual
    return get_settings().credentials()


def _build_service() -> TicketConsoleService:
    settings = get_settings()
    client = EntityStoreClient(
        base_url=_get_base_url(),
        credentials=_get_credentials(),
        prefix=settings.api_prefix,
        read_timeout=settings.read_timeout,
    )
    return TicketConsoleService(client)


def _get_builder() -> TransitionRequestBuilder:
    builder = st.session_state.get("transition_builder")
    if not isinstance(builder, TransitionRequestBuilder):
        builder = TransitionRequestBuilder()
        st.session_state["transition_builder"] = builder
    return builder


def _run(
    action: Callable[[], Awaitable[ConsoleSnapshot]],
    success_message: str | None = None,
) -> bool:
    try:
        snapshot = asyncio.run(action())
    except IncompleteTransitionError as exc:
        st.warning(str(exc))
        return False
    except TicketServiceError as exc:
        st.error(str(exc))
        return False
    st.session_state["snapshot"] = snapshot
    if success_message:
        st.success(success_message)
    return True


def _apply(action: Callable[[], Awaitable[ConsoleSnapshot]], success_message: str) -> None:
    """Run a write and redraw from the reloaded snapshot when it succeeds."""

    if _run(action, success_message):
        st.rerun()


def _render_sidebar() -> None:
    st.sidebar.header("Connection")
    base_url = st.sidebar.text_input("API Base URL", value=_get_base_url())
    st.session_state["base_url"] = base_url
    st.sidebar.text_input("Access token", type="password", key="access_token")
    if _get_credentials().is_authenticated:
        st.sidebar.caption("Requests are sent with a bearer token")
    else:
        st.sidebar.caption("No token: requests are sent unauthenticated")


def _current_snapshot(service: TicketConsoleService) -> ConsoleSnapshot | None:
    snapshot = st.session_state.get("snapshot")
    if isinstance(snapshot, ConsoleSnapshot):
        return snapshot
    if st.session_state.get("initial_load_done"):
        return None
    st.session_state["initial_load_done"] = True
    _run(service.load)
    return st.session_state.get("snapshot")


def _render_all_tickets_tab(service: TicketConsoleService) -> None:
    st.subheader("All Orders and Tickets")
    if st.button("Refresh", key="refresh_all"):
        _run(service.load)

    snapshot = _current_snapshot(service)
    tickets = list(snapshot.tickets) if snapshot else []
    counts = count_by_status(tickets)
    options = list(StatusFilter)
    selector = st.radio(
        "Filter",
        options=options,
        format_func=lambda item: f"{FILTER_LABELS[item]} ({counts[item]})",
        horizontal=True,
    )
    rows = build_rows(filter_tickets(tickets, selector), selector)
    if rows:
        st.table(rows)
    else:
        st.caption("No tickets found.")


def _render_draft_form(service: TicketConsoleService, builder: TransitionRequestBuilder) -> None:
    draft = builder.draft
    if draft is None:
        return
    st.markdown(f"#### Ticket {draft.ticket_id}: {STATUS_TITLES[draft.target]}")
    with st.form("transition_form"):
        for name in list(draft.values):
            value = st.text_input(_FIELD_LABELS.get(name, name), value=draft.values[name])
            builder.edit(name, value)
        submitted = st.form_submit_button("Save")
        discarded = st.form_submit_button("Cancel")
    if discarded:
        builder.cancel()
        st.rerun()
    if submitted:
        _apply(lambda: builder.submit(service), "Ticket updated")


def _render_ticket_actions(
    service: TicketConsoleService,
    builder: TransitionRequestBuilder,
    ticket: EnrichedTicket,
) -> None:
    cols = st.columns([1, 3, 2, 2, 4])
    cols[0].write(format_cell(ticket.id))
    cols[1].write(format_cell(ticket.get("passport_name")))
    cols[2].write(status_label(ticket))

    refund = ticket.effective_refund_status
    if ticket.status == TicketStatus.CANCEL:
        refund_label = REFUND_LABELS.get(refund.value, "-") if refund else "-"
        cols[3].write(refund_label)
        if refund == RefundStatus.IN_PROCESS and cols[3].button("Refunded", key=f"refund_{ticket.id}"):
            _apply(lambda: service.mark_refunded(ticket), "Refund recorded")
    else:
        cols[3].write("-")

    for target in service.state_machine.available_targets(ticket.status):
        if not cols[4].button(STATUS_TITLES[target], key=f"{target.value}_{ticket.id}"):
            continue
        if target == TicketStatus.CANCEL:
            _apply(lambda: service.cancel(ticket), "Ticket cancelled")
        else:
            builder.open(ticket, target)
            st.rerun()


def _render_status_tab(service: TicketConsoleService) -> None:
    st.subheader("Ticket Status Management")
    if st.button("Refresh", key="refresh_status"):
        _run(service.load)

    builder = _get_builder()
    _render_draft_form(service, builder)

    snapshot = _current_snapshot(service)
    if not snapshot or not snapshot.tickets:
        st.caption("No tickets found.")
        return
    for ticket in snapshot.tickets:
        _render_ticket_actions(service, builder, ticket)


def main() -> None:
    settings = get_settings()
    configure_logging(settings)
    init_tracer(settings)

    st.set_page_config(page_title=settings.app_name, layout="wide")
    _render_sidebar()

    service = _build_service()
    all_tab, status_tab = st.tabs(["All Tickets", "Status Management"])
    with all_tab:
        _render_all_tickets_tab(service)
    with status_tab:
        _render_status_tab(service)


if __name__ == "__main__":
    main()
