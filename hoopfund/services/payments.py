# hoopfund/services/payments.py
"""Payment rows and the registration transitions they drive.

Three entry points:
  start_payment()          registrant picks a method; registration -> payment_processing
  apply_webhook_event()    PayPal capture completed / denied / refunded
  verify_manual_payment()  admin confirms cash / Venmo / CashApp received
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from decimal import Decimal
from typing import Any, Dict, List, Optional

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError

from hoopfund import domain
from hoopfund.domain.records import money_from
from hoopfund.domain.webhooks import (CaptureEventType, CaptureRefunded,
                                      WebhookEvent, encode_custom)
from hoopfund.domain.workflow import PaymentEvent, TransitionOutcome, next_payment_status
from hoopfund.extensions import db, with_db_retry
from hoopfund.models import Payment, Team, WebhookEvent as WebhookEventRow
from hoopfund.models.mixins import to_cents, utcnow_naive

from . import registrations

log = logging.getLogger(__name__)

E = domain.RegistrationEvent
S = domain.RegistrationStatus


@dataclass(frozen=True)
class PaymentStart:
    payment: Payment
    outcome: TransitionOutcome
    custom: Optional[str] = None

    def as_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {
            "payment": self.payment.as_dict(),
            "status": self.outcome.state.value,
            "changed": self.outcome.changed,
        }
        if self.custom is not None:
            data["custom"] = self.custom
        return data


@dataclass(frozen=True)
class WebhookResult:
    outcome: str
    registration_id: Optional[int] = None
    status: Optional[str] = None
    payment_status: Optional[str] = None
    message: Optional[str] = None

    def as_dict(self) -> Dict[str, Any]:
        return {k: v for k, v in self.__dict__.items() if v is not None}


# ----------------------------
# Payment row helpers
# ----------------------------
def _advance_payment(row: Payment, event: PaymentEvent) -> bool:
    """Move a Payment row through its state machine; False on a duplicate signal."""
    try:
        new_status = next_payment_status(domain.PaymentStatus(row.status), event)
    except domain.DuplicateSignal as dup:
        log.info("payment %s: %s", row.id, dup.message)
        return False
    if new_status.value == row.status:
        return False
    row.status = new_status.value
    row.updated_at = utcnow_naive()
    return True


def _open_payment(registration_id: int, method: Optional[domain.PaymentMethod] = None) -> Optional[Payment]:
    stmt = select(Payment).where(
        Payment.registration_id == registration_id,
        Payment.status.in_((domain.PaymentStatus.PENDING.value, domain.PaymentStatus.PROCESSING.value)),
    )
    if method is not None:
        stmt = stmt.where(Payment.payment_method == method.value)
    return db.session.execute(stmt.order_by(Payment.id.desc()).limit(1)).scalar_one_or_none()


def _payment_by_transaction(transaction_id: Optional[str]) -> Optional[Payment]:
    if not transaction_id:
        return None
    return db.session.execute(select(Payment).where(Payment.transaction_id == transaction_id)).scalar_one_or_none()


def _new_payment(team: Team, method: domain.PaymentMethod, currency: str, amount: Optional[Decimal] = None) -> Payment:
    p = domain.Payment(
        registration_id=team.id,
        method=method,
        amount=team.donation_amount_decimal if amount is None else amount,
        currency=currency,
    )
    row = Payment.from_domain(p)
    db.session.add(row)
    return row


# ----------------------------
# Registrant starts paying
# ----------------------------
def start_payment(registration_id: int, method: Any, *, currency: str = "USD") -> PaymentStart:
    try:
        method = domain.PaymentMethod(str(method or "").strip().lower())
    except ValueError:
        raise domain.ValidationError("method", f"Unknown payment method: {method!r}") from None

    team = registrations.get_registration(registration_id)
    if S(team.status) is S.PAYMENT_FAILED:
        registrations.transition(team.id, E.RESUBMITTED, domain.Actor.SYSTEM, note=f"retry via {method.value}")

    outcome = registrations.transition(team.id, E.PAYMENT_STARTED, domain.Actor.SYSTEM)

    team = registrations.get_registration(registration_id)
    row = _open_payment(team.id, method)
    if row is None:
        row = _new_payment(team, method, currency)
    _advance_payment(row, PaymentEvent.START)
    db.session.commit()

    custom = encode_custom(team.id, team.registration_type) if method is domain.PaymentMethod.PAYPAL else None
    return PaymentStart(payment=row, outcome=outcome, custom=custom)


# ----------------------------
# Admin verifies a manual payment
# ----------------------------
def verify_manual_payment(
    registration_id: int,
    method: Any,
    *,
    amount: Any = None,
    reference: Optional[str] = None,
    currency: str = "USD",
) -> TransitionOutcome:
    try:
        method = domain.PaymentMethod(str(method or "").strip().lower())
    except ValueError:
        raise domain.ValidationError("method", f"Unknown payment method: {method!r}") from None
    if not method.is_manual:
        raise domain.ValidationError("method", "PayPal payments are confirmed by the provider, not by an admin.")

    team = registrations.get_registration(registration_id)
    fee = team.donation_amount_decimal
    if amount not in (None, ""):
        received = money_from(amount, "amount")
        if to_cents(received) != to_cents(fee):
            raise domain.ValidationError("amount", f"Amount {received} does not match the registration fee {fee}.")

    reference = (reference or "").strip() or None
    if reference and _payment_by_transaction(reference) is not None:
        raise domain.ValidationError("reference", "This payment reference was already recorded.")

    status = S(team.status)
    events: List[domain.RegistrationEvent] = []
    if status is S.PAYMENT_FAILED:
        events.append(E.RESUBMITTED)
    if status in (S.PAYMENT_FAILED, S.PENDING_PAYMENT):
        events.append(E.PAYMENT_STARTED)
    events.append(E.PAYMENT_CONFIRMED)

    note = f"{method.value} received" + (f" (ref {reference})" if reference else "")
    outcome = registrations.apply_events(team.id, events, domain.Actor.ADMIN, note=note, transaction_id=reference)
    if outcome.duplicate:
        return outcome

    row = _open_payment(team.id, method) or _new_payment(team, method, currency, fee)
    _advance_payment(row, PaymentEvent.START)
    _advance_payment(row, PaymentEvent.COMPLETE)
    if reference:
        row.transaction_id = reference[:120]
    db.session.commit()
    return outcome


# ----------------------------
# Provider webhooks
# ----------------------------
@with_db_retry(retries=3, backoff=0.1)
def _store(row: WebhookEventRow) -> None:
    db.session.add(row)
    db.session.commit()


def record_webhook(event_id: str, event_type: str, payload: Dict[str, Any], **extra: Any) -> Optional[WebhookEventRow]:
    """Store a received event; None when this event id was already seen."""
    row = WebhookEventRow(
        event_id=event_id[:120],
        event_type=event_type[:120],
        transaction_id=(extra.get("transaction_id") or None),
        registration_id=extra.get("registration_id"),
        payload=json.dumps(payload, separators=(",", ":"), default=str),
    )
    try:
        _store(row)
    except IntegrityError:
        db.session.rollback()
        return None
    return row


def finish_webhook(row: WebhookEventRow, result: WebhookResult) -> None:
    row.outcome = result.outcome[:64]
    row.processed_at = utcnow_naive()
    db.session.commit()


def forget_webhook(event_id: str) -> None:
    """Drop a stored event so a provider retry is processed again."""
    db.session.rollback()
    row = db.session.execute(select(WebhookEventRow).where(WebhookEventRow.event_id == event_id)).scalar_one_or_none()
    if row is not None:
        db.session.delete(row)
        db.session.commit()


def _settle_payment(team: Team, event: WebhookEvent) -> Payment:
    """Record what the provider says happened to the money, whatever the registration state."""
    row = _payment_by_transaction(event.transaction_id) or _open_payment(team.id, domain.PaymentMethod.PAYPAL)
    if row is None:
        row = _new_payment(team, domain.PaymentMethod.PAYPAL, event.currency, event.amount)
    if row.status == domain.PaymentStatus.PENDING.value:
        _advance_payment(row, PaymentEvent.START)
    _advance_payment(row, event.payment_event)
    row.transaction_id = event.transaction_id[:120]
    db.session.commit()
    return row


def apply_webhook_event(event: WebhookEvent) -> WebhookResult:
    reg_id = event.ref.registration_id
    team = db.session.get(Team, reg_id)
    if team is None:
        log.warning("webhook %s: registration %s not found; acknowledging", event.event_id, reg_id)
        return WebhookResult("ignored", registration_id=reg_id, message="registration not found")

    if isinstance(event, CaptureRefunded):
        return _apply_refund(team, event)

    completed = event.event_type is CaptureEventType.COMPLETED
    if completed and to_cents(event.amount) != to_cents(team.donation_amount_decimal):
        log.warning(
            "webhook %s: captured %s %s but registration %s fee is %s",
            event.event_id,
            event.amount,
            event.currency,
            reg_id,
            team.donation_amount_decimal,
        )

    known = _payment_by_transaction(event.transaction_id)
    status = S(team.status)

    events: List[domain.RegistrationEvent] = []
    if status is S.PAYMENT_FAILED and completed and known is None:
        # a new capture after a denied one is a fresh attempt, not a repeat
        events.extend((E.RESUBMITTED, E.PAYMENT_STARTED))
    elif status is S.PENDING_PAYMENT:
        events.append(E.PAYMENT_STARTED)
    events.append(event.registration_event)

    try:
        outcome = registrations.apply_events(
            reg_id,
            events,
            domain.Actor.PROVIDER,
            transaction_id=event.transaction_id if completed else None,
        )
    except domain.InvalidTransition as e:
        db.session.rollback()
        row = _settle_payment(team, event)
        log.warning(
            "webhook %s: %s; payment %s stored as %s for review",
            event.event_id,
            e.message,
            row.id,
            row.status,
        )
        return WebhookResult(
            "ignored",
            registration_id=reg_id,
            status=e.state,
            payment_status=row.status,
            message=e.message,
        )

    if outcome.duplicate:
        if completed and known is None:
            # settled registration, but this capture is money we have not seen
            row = _settle_payment(team, event)
            log.warning(
                "webhook %s: extra capture %s for settled registration %s; stored for review",
                event.event_id,
                event.transaction_id,
                reg_id,
            )
            return WebhookResult(
                "ignored",
                registration_id=reg_id,
                status=outcome.state.value,
                payment_status=row.status,
                message="registration already settled",
            )
        return WebhookResult("duplicate", registration_id=reg_id, status=outcome.state.value)

    row = _settle_payment(team, event)
    return WebhookResult(
        "applied",
        registration_id=reg_id,
        status=outcome.state.value,
        payment_status=row.status,
    )


def _apply_refund(team: Team, event: CaptureRefunded) -> WebhookResult:
    row = _payment_by_transaction(event.capture_id) or _payment_by_transaction(event.transaction_id)
    if row is None:
        log.warning("webhook %s: refund for unknown capture %s; acknowledging", event.event_id, event.capture_id)
        return WebhookResult("ignored", registration_id=team.id, status=team.status, message="unknown capture")

    try:
        changed = _advance_payment(row, PaymentEvent.REFUND)
    except domain.InvalidTransition as e:
        log.warning("webhook %s: %s; acknowledging", event.event_id, e.message)
        return WebhookResult("ignored", registration_id=team.id, status=team.status, message=e.message)

    db.session.commit()
    if changed:
        log.info(
            "payment %s refunded; registration %s left at %s for review",
            row.id,
            team.id,
            team.status,
        )
    return WebhookResult(
        "applied" if changed else "duplicate",
        registration_id=team.id,
        status=team.status,
        payment_status=row.status,
    )


__all__ = [
    "PaymentStart",
    "WebhookResult",
    "start_payment",
    "verify_manual_payment",
    "record_webhook",
    "finish_webhook",
    "forget_webhook",
    "apply_webhook_event",
]
