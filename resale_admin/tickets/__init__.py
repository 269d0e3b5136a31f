"""Ticket lifecycle, aggregation and filtering for the admin console."""

from .aggregation import aggregate, build_customer_index, build_order_index, enrich
from .drafts import TransitionDraft, TransitionRequestBuilder
from .filters import StatusFilter, count_by_status, filter_tickets
from .identifiers import normalize_identifier
from .models import ConsoleSnapshot, Customer, EnrichedTicket, Order
from .service import (
    InvalidTicketTransitionError,
    TicketConsoleService,
    TicketLoadError,
    TicketServiceError,
    TransitionFailedError,
)
from .state import (
    IncompleteTransitionError,
    RefundStatus,
    TicketStateMachine,
    TicketStatus,
    TransitionRule,
)

__all__ = [
    "ConsoleSnapshot",
    "Customer",
    "EnrichedTicket",
    "IncompleteTransitionError",
    "InvalidTicketTransitionError",
    "Order",
    "RefundStatus",
    "StatusFilter",
    "TicketConsoleService",
    "TicketLoadError",
    "TicketServiceError",
    "TicketStateMachine",
    "TicketStatus",
    "TransitionDraft",
    "TransitionFailedError",
    "TransitionRequestBuilder",
    "TransitionRule",
    "aggregate",
    "build_customer_index",
    "build_order_index",
    "count_by_status",
    "enrich",
    "filter_tickets",
    "normalize_identifier",
]
