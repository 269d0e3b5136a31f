from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Mapping, Sequence


class TicketStatus(str, Enum):
    """Supported states of a ticket's lifecycle."""

    PENDING = "pending"
    PAID = "paid"
    COMPLETE = "complete"
    CANCEL = "cancel"

    @classmethod
    def parse(cls, value: Any) -> "TicketStatus | None":
        """Case-insensitive lookup; unknown values yield ``None``."""

        if isinstance(value, cls):
            return value
        if not isinstance(value, str):
            return None
        try:
            return cls(value.strip().lower())
        except ValueError:
            return None


class RefundStatus(str, Enum):
    """Refund sub-state, meaningful only while a ticket is cancelled."""

    NONE = "none"
    IN_PROCESS = "in_process"
    REFUNDED = "refunded"

    @classmethod
    def parse(cls, value: Any) -> "RefundStatus | None":
        if isinstance(value, cls):
            return value
        if not isinstance(value, str):
            return None
        try:
            return cls(value.strip().lower())
        except ValueError:
            return None


class IncompleteTransitionError(ValueError):
    """Raised when a transition is attempted without its required fields."""

    def __init__(self, target: TicketStatus, missing: Sequence[str]) -> None:
        self.target = target
        self.missing = tuple(missing)
        super().__init__(
            f"Cannot move ticket to {target.value}: missing {', '.join(self.missing)}"
        )


@dataclass(frozen=True, slots=True)
class TransitionRule:
    """One edge of the lifecycle and the data it must carry."""

    sources: frozenset[TicketStatus]
    target: TicketStatus
    required_fields: tuple[str, ...] = ()
    side_effects: Mapping[str, str] | None = None


class TicketStateMachine:
    """Validate ticket lifecycle transitions and build their write payloads."""

    _DEFAULT_RULES: tuple[TransitionRule, ...] = (
        TransitionRule(
            sources=frozenset({TicketStatus.PENDING}),
            target=TicketStatus.PAID,
            required_fields=("customer_payment", "payment_date"),
        ),
        TransitionRule(
            sources=frozenset({TicketStatus.PAID}),
            target=TicketStatus.COMPLETE,
            required_fields=("selling_price", "zone", "row", "seat"),
        ),
        TransitionRule(
            sources=frozenset({TicketStatus.PAID}),
            target=TicketStatus.CANCEL,
            side_effects={"refund_status": RefundStatus.IN_PROCESS.value},
        ),
        # Reverting leaves fields from the later states in place.
        TransitionRule(
            sources=frozenset({TicketStatus.PAID, TicketStatus.COMPLETE, TicketStatus.CANCEL}),
            target=TicketStatus.PENDING,
        ),
    )

    _REFUND_TRANSITIONS: Mapping[RefundStatus, Sequence[RefundStatus]] = {
        RefundStatus.IN_PROCESS: (RefundStatus.REFUNDED,),
    }

    def __init__(self, rules: Sequence[TransitionRule] | None = None) -> None:
        self._rules = tuple(rules) if rules is not None else self._DEFAULT_RULES

    @classmethod
    def initial_state(cls) -> TicketStatus:
        return TicketStatus.PENDING

    def rule_for(self, current: TicketStatus | None, target: TicketStatus) -> TransitionRule | None:
        if current is None:
            return None
        for rule in self._rules:
            if rule.target == target and current in rule.sources:
                return rule
        return None

    def can_transition(self, current: TicketStatus | None, target: TicketStatus) -> bool:
        return self.rule_for(current, target) is not None

    def assert_transition(self, current: TicketStatus | None, target: TicketStatus) -> TransitionRule:
        rule = self.rule_for(current, target)
        if rule is None:
            source = current.value if current is not None else "unknown"
            raise ValueError(f"Invalid ticket status transition: {source} -> {target.value}")
        return rule

    def available_targets(self, current: TicketStatus | None) -> list[TicketStatus]:
        return [rule.target for rule in self._rules if current is not None and current in rule.sources]

    def required_fields(self, current: TicketStatus | None, target: TicketStatus) -> tuple[str, ...]:
        return self.assert_transition(current, target).required_fields

    @staticmethod
    def missing_fields(rule: TransitionRule, values: Mapping[str, Any] | None) -> list[str]:
        values = values or {}
        missing: list[str] = []
        for name in rule.required_fields:
            value = values.get(name)
            if value is None or (isinstance(value, str) and not value.strip()):
                missing.append(name)
        return missing

    def build_payload(
        self,
        current: TicketStatus | None,
        target: TicketStatus,
        values: Mapping[str, Any] | None = None,
    ) -> dict[str, Any]:
        """Return the partial-update body for a transition, or raise before any write."""

        rule = self.assert_transition(current, target)
        missing = self.missing_fields(rule, values)
        if missing:
            raise IncompleteTransitionError(target, missing)

        payload: dict[str, Any] = {"status": target.value}
        for name in rule.required_fields:
            value = (values or {})[name]
            payload[name] = value.strip() if isinstance(value, str) else value
        if rule.side_effects:
            payload.update(rule.side_effects)
        return payload

    def can_update_refund(
        self,
        status: TicketStatus | None,
        current: RefundStatus | None,
        new: RefundStatus,
    ) -> bool:
        if status != TicketStatus.CANCEL or current is None:
            return False
        return new in self._REFUND_TRANSITIONS.get(current, ())

    def assert_refund_update(
        self,
        status: TicketStatus | None,
        current: RefundStatus | None,
        new: RefundStatus,
    ) -> None:
        if status != TicketStatus.CANCEL:
            raise ValueError("Refund status can only change while the ticket is cancelled")
        if not self.can_update_refund(status, current, new):
            source = current.value if current is not None else "unknown"
            raise ValueError(f"Invalid refund status transition: {source} -> {new.value}")
