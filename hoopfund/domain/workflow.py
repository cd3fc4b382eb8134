# hoopfund/domain/workflow.py
# ──────────────────────────────────────────────────────────────────────────────
# Registration status workflow + payment status machine.
#
# Both are explicit (state, event) -> state tables. A lookup either returns the
# next state, raises DuplicateSignal (a settled payment hearing the same news
# again), or raises InvalidTransition. The workflow wrapper absorbs
# DuplicateSignal so at-least-once webhook delivery is a no-op, and records
# every real transition with its actor and timestamp for the audit trail.
# Nothing here persists; the caller serialises concurrent attempts.
# ──────────────────────────────────────────────────────────────────────────────
from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Dict, Final, FrozenSet, Iterable, List, Optional, Tuple

from .errors import DuplicateSignal, InvalidTransition
from .types import Actor, PaymentStatus, RegistrationStatus, utcnow

log = logging.getLogger(__name__)

S = RegistrationStatus


class RegistrationEvent(str, Enum):
    PAYMENT_STARTED = "payment_started"
    PAYMENT_CONFIRMED = "payment_confirmed"
    PAYMENT_DENIED = "payment_denied"
    RESUBMITTED = "resubmitted"
    APPROVE = "approve"
    REJECT = "reject"


E = RegistrationEvent

INITIAL_STATUS: Final[RegistrationStatus] = S.PENDING_PAYMENT

ADMIN_ONLY_EVENTS: Final[FrozenSet[RegistrationEvent]] = frozenset({E.APPROVE, E.REJECT})

TRANSITIONS: Final[Dict[Tuple[RegistrationStatus, RegistrationEvent], RegistrationStatus]] = {
    (S.PENDING_PAYMENT, E.PAYMENT_STARTED): S.PAYMENT_PROCESSING,
    (S.PAYMENT_PROCESSING, E.PAYMENT_STARTED): S.PAYMENT_PROCESSING,
    (S.PAYMENT_PROCESSING, E.PAYMENT_CONFIRMED): S.PAYMENT_COMPLETED,
    (S.PAYMENT_PROCESSING, E.PAYMENT_DENIED): S.PAYMENT_FAILED,
    (S.PAYMENT_FAILED, E.RESUBMITTED): S.PENDING_PAYMENT,
    (S.PAYMENT_COMPLETED, E.APPROVE): S.APPROVED,
    **{(state, E.REJECT): S.REJECTED for state in S if not state.is_terminal},
}

# Settlement signals arriving after the payment already settled.
DUPLICATE_SIGNALS: Final[FrozenSet[Tuple[RegistrationStatus, RegistrationEvent]]] = frozenset(
    (state, event)
    for state in (S.PAYMENT_COMPLETED, S.PAYMENT_FAILED, S.APPROVED)
    for event in (E.PAYMENT_CONFIRMED, E.PAYMENT_DENIED)
)


def next_status(state: RegistrationStatus, event: RegistrationEvent) -> RegistrationStatus:
    """Pure table lookup for the registration workflow."""
    state, event = S(state), E(event)
    try:
        return TRANSITIONS[(state, event)]
    except KeyError:
        pass
    if (state, event) in DUPLICATE_SIGNALS:
        raise DuplicateSignal(state, event)
    if state.is_terminal:
        raise InvalidTransition(state, event, f"Registration is {state.value}; no further changes are allowed")
    if event is E.APPROVE:
        raise InvalidTransition(state, event, "Registration can only be approved after payment is completed")
    raise InvalidTransition(state, event)


def allowed_events(state: RegistrationStatus) -> List[RegistrationEvent]:
    """Events that would change ``state``; used to drive admin action buttons."""
    return [event for event in E if TRANSITIONS.get((S(state), event), S(state)) is not S(state)]


@dataclass(frozen=True)
class TransitionRecord:
    from_state: RegistrationStatus
    to_state: RegistrationStatus
    event: RegistrationEvent
    actor: Actor
    at: datetime
    note: Optional[str] = None

    def as_dict(self) -> Dict[str, Optional[str]]:
        return {
            "from_state": self.from_state.value,
            "to_state": self.to_state.value,
            "event": self.event.value,
            "actor": self.actor.value,
            "at": self.at.isoformat(),
            "note": self.note,
        }


@dataclass(frozen=True)
class TransitionOutcome:
    state: RegistrationStatus
    changed: bool
    record: Optional[TransitionRecord] = None
    duplicate: bool = False


class RegistrationWorkflow:
    """One registration's lifecycle, starting at ``pending_payment``.

    Instances hold only their own state; they are cheap to build from a
    persisted status and throw away after ``apply``.
    """

    def __init__(
        self,
        state: RegistrationStatus = INITIAL_STATUS,
        history: Iterable[TransitionRecord] = (),
        registration_id: Optional[int] = None,
    ) -> None:
        self.state = S(state)
        self.history: List[TransitionRecord] = list(history)
        self.registration_id = registration_id

    def __repr__(self) -> str:  # pragma: no cover
        return f"<RegistrationWorkflow id={self.registration_id} state={self.state.value}>"

    @property
    def is_terminal(self) -> bool:
        return self.state.is_terminal

    def can(self, event: RegistrationEvent) -> bool:
        try:
            next_status(self.state, event)
        except (InvalidTransition, DuplicateSignal):
            return False
        return True

    def apply(
        self,
        event: RegistrationEvent,
        actor: Actor,
        *,
        at: Optional[datetime] = None,
        note: Optional[str] = None,
    ) -> TransitionOutcome:
        event, actor = E(event), Actor(actor)
        if event in ADMIN_ONLY_EVENTS and actor is not Actor.ADMIN:
            raise InvalidTransition(self.state, event, f"Only an admin may {event.value} a registration")

        try:
            target = next_status(self.state, event)
        except DuplicateSignal as dup:
            log.info("registration %s: %s", self.registration_id, dup.message)
            return TransitionOutcome(self.state, changed=False, duplicate=True)

        if target is self.state:
            return TransitionOutcome(self.state, changed=False)

        record = TransitionRecord(
            from_state=self.state,
            to_state=target,
            event=event,
            actor=actor,
            at=at or utcnow(),
            note=note,
        )
        log.info(
            "registration %s: %s -> %s (%s by %s)",
            self.registration_id,
            record.from_state.value,
            record.to_state.value,
            event.value,
            actor.value,
        )
        self.state = target
        self.history.append(record)
        return TransitionOutcome(target, changed=True, record=record)

    # Convenience verbs used by services and tests
    def begin_payment(self, actor: Actor = Actor.SYSTEM) -> TransitionOutcome:
        return self.apply(E.PAYMENT_STARTED, actor)

    def confirm_payment(self, actor: Actor = Actor.PROVIDER) -> TransitionOutcome:
        return self.apply(E.PAYMENT_CONFIRMED, actor)

    def deny_payment(self, actor: Actor = Actor.PROVIDER) -> TransitionOutcome:
        return self.apply(E.PAYMENT_DENIED, actor)

    def resubmit(self, actor: Actor = Actor.SYSTEM) -> TransitionOutcome:
        return self.apply(E.RESUBMITTED, actor)

    def approve(self, note: Optional[str] = None) -> TransitionOutcome:
        return self.apply(E.APPROVE, Actor.ADMIN, note=note)

    def reject(self, note: Optional[str] = None) -> TransitionOutcome:
        return self.apply(E.REJECT, Actor.ADMIN, note=note)


# ──────────────────────────────────────────────────────────────────────────────
# Payment status machine (money received), separate from the registration
# ──────────────────────────────────────────────────────────────────────────────
P = PaymentStatus


class PaymentEvent(str, Enum):
    START = "start"
    COMPLETE = "complete"
    DENY = "deny"
    REFUND = "refund"


PAYMENT_TRANSITIONS: Final[Dict[Tuple[PaymentStatus, PaymentEvent], PaymentStatus]] = {
    (P.PENDING, PaymentEvent.START): P.PROCESSING,
    (P.PROCESSING, PaymentEvent.START): P.PROCESSING,
    (P.PROCESSING, PaymentEvent.COMPLETE): P.COMPLETED,
    (P.PROCESSING, PaymentEvent.DENY): P.FAILED,
    (P.COMPLETED, PaymentEvent.REFUND): P.REFUNDED,
}


def next_payment_status(status: PaymentStatus, event: PaymentEvent) -> PaymentStatus:
    status, event = P(status), PaymentEvent(event)
    try:
        return PAYMENT_TRANSITIONS[(status, event)]
    except KeyError:
        pass
    if status.is_settled and event is not PaymentEvent.START:
        raise DuplicateSignal(status, event)
    raise InvalidTransition(status, event, f"Cannot {event.value} a payment that is {status.value}")


__all__ = [
    "RegistrationEvent",
    "INITIAL_STATUS",
    "ADMIN_ONLY_EVENTS",
    "TRANSITIONS",
    "DUPLICATE_SIGNALS",
    "next_status",
    "allowed_events",
    "TransitionRecord",
    "TransitionOutcome",
    "RegistrationWorkflow",
    "PaymentEvent",
    "PAYMENT_TRANSITIONS",
    "next_payment_status",
]
