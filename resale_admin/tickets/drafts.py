from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Mapping

from .models import ConsoleSnapshot, EnrichedTicket
from .service import (
    InvalidTicketTransitionError,
    TicketConsoleService,
    TicketLoadError,
    TicketRef,
    TicketServiceError,
)
from .state import TicketStateMachine, TicketStatus

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class TransitionDraft:
    """Data gathered for a transition that has not been submitted yet."""

    ticket: Mapping[str, Any]
    current: TicketStatus
    target: TicketStatus
    values: dict[str, str] = field(default_factory=dict)

    @property
    def ticket_id(self) -> Any:
        return self.ticket.get("id")


class TransitionRequestBuilder:
    """Collect the fields a transition needs before handing it to the service.

    Only one draft exists at a time; :meth:`open` always starts from empty
    fields so nothing from an earlier draft carries over.
    """

    def __init__(self, state_machine: TicketStateMachine | None = None) -> None:
        self._state_machine = state_machine or TicketStateMachine()
        self._draft: TransitionDraft | None = None

    @property
    def draft(self) -> TransitionDraft | None:
        return self._draft

    @property
    def is_open(self) -> bool:
        return self._draft is not None

    def open(self, ticket: TicketRef, target: TicketStatus | str) -> TransitionDraft:
        record = ticket.record if isinstance(ticket, EnrichedTicket) else ticket
        target_status = TicketStatus.parse(target)
        current = TicketStatus.parse(record.get("status"))
        if target_status is None:
            raise InvalidTicketTransitionError(f"Unknown ticket status: {target!r}")
        try:
            rule = self._state_machine.assert_transition(current, target_status)
        except ValueError as exc:
            raise InvalidTicketTransitionError(str(exc)) from exc

        # assert_transition guarantees a known current status
        self._draft = TransitionDraft(
            ticket=record,
            current=current,  # type: ignore[arg-type]
            target=target_status,
            values={name: "" for name in rule.required_fields},
        )
        logger.debug("Opened draft %s -> %s for ticket %s", current, target_status, record.get("id"))
        return self._draft

    def edit(self, name: str, value: str | None) -> TransitionDraft:
        draft = self._require_draft()
        if name not in draft.values:
            raise KeyError(f"{name!r} is not collected for a move to {draft.target.value}")
        draft.values[name] = value or ""
        return draft

    def cancel(self) -> None:
        if self._draft is not None:
            logger.debug("Discarded draft for ticket %s", self._draft.ticket_id)
        self._draft = None

    def missing_fields(self) -> list[str]:
        draft = self._require_draft()
        rule = self._state_machine.assert_transition(draft.current, draft.target)
        return self._state_machine.missing_fields(rule, draft.values)

    def build_payload(self) -> dict[str, Any]:
        """Validate the draft; raises ``IncompleteTransitionError`` when fields are blank."""

        draft = self._require_draft()
        return self._state_machine.build_payload(draft.current, draft.target, draft.values)

    async def submit(self, service: TicketConsoleService) -> ConsoleSnapshot:
        """Validate and hand the draft to ``service``; kept open when the write fails."""

        draft = self._require_draft()
        self.build_payload()
        try:
            snapshot = await service.transition(draft.ticket, draft.target, draft.values)
        except TicketLoadError:
            # The write went through; only the reload failed.
            self._draft = None
            raise
        self._draft = None
        return snapshot

    def _require_draft(self) -> TransitionDraft:
        if self._draft is None:
            raise TicketServiceError("No transition is being prepared")
        return self._draft
