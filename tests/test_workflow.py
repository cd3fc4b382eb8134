"""
Unit tests — registration workflow and payment status machine.

Covers:
  - the happy path pending_payment -> ... -> approved with an audit trail
  - approval gated on completed payment
  - terminal states refuse every further event
  - duplicate settlement signals absorbed as no-ops
  - admin-only events
  - payment machine transitions, duplicates and refunds
"""
from __future__ import annotations

from datetime import datetime, timezone

import pytest

from hoopfund.domain import (
    Actor,
    DuplicateSignal,
    InvalidTransition,
    PaymentEvent,
    PaymentStatus,
    RegistrationEvent,
    RegistrationStatus,
    RegistrationWorkflow,
    next_payment_status,
    next_status,
)
from hoopfund.domain.workflow import allowed_events

S = RegistrationStatus
E = RegistrationEvent


def _paid() -> RegistrationWorkflow:
    wf = RegistrationWorkflow()
    wf.begin_payment()
    wf.confirm_payment()
    return wf


# ─────────────────────────── Transition table ────────────────────────────────

class TestNextStatus:
    @pytest.mark.parametrize(
        "state,event,target",
        [
            (S.PENDING_PAYMENT, E.PAYMENT_STARTED, S.PAYMENT_PROCESSING),
            (S.PAYMENT_PROCESSING, E.PAYMENT_CONFIRMED, S.PAYMENT_COMPLETED),
            (S.PAYMENT_PROCESSING, E.PAYMENT_DENIED, S.PAYMENT_FAILED),
            (S.PAYMENT_FAILED, E.RESUBMITTED, S.PENDING_PAYMENT),
            (S.PAYMENT_COMPLETED, E.APPROVE, S.APPROVED),
            (S.PENDING_PAYMENT, E.REJECT, S.REJECTED),
            (S.PAYMENT_COMPLETED, E.REJECT, S.REJECTED),
        ],
    )
    def test_legal_moves(self, state, event, target) -> None:
        assert next_status(state, event) is target

    @pytest.mark.parametrize("state", [S.PENDING_PAYMENT, S.PAYMENT_PROCESSING, S.PAYMENT_FAILED])
    def test_approve_requires_completed_payment(self, state) -> None:
        with pytest.raises(InvalidTransition) as exc:
            next_status(state, E.APPROVE)
        assert "after payment is completed" in exc.value.message

    @pytest.mark.parametrize("event", list(E))
    def test_rejected_is_terminal(self, event) -> None:
        with pytest.raises(InvalidTransition):
            next_status(S.REJECTED, event)

    @pytest.mark.parametrize("event", [E.PAYMENT_STARTED, E.RESUBMITTED, E.APPROVE, E.REJECT])
    def test_approved_is_terminal(self, event) -> None:
        with pytest.raises(InvalidTransition):
            next_status(S.APPROVED, event)

    @pytest.mark.parametrize("state", [S.PAYMENT_COMPLETED, S.PAYMENT_FAILED, S.APPROVED])
    @pytest.mark.parametrize("event", [E.PAYMENT_CONFIRMED, E.PAYMENT_DENIED])
    def test_settlement_after_settlement_is_duplicate(self, state, event) -> None:
        with pytest.raises(DuplicateSignal):
            next_status(state, event)

    def test_confirm_without_start_is_invalid(self) -> None:
        with pytest.raises(InvalidTransition):
            next_status(S.PENDING_PAYMENT, E.PAYMENT_CONFIRMED)

    def test_allowed_events_drive_admin_buttons(self) -> None:
        assert allowed_events(S.PAYMENT_COMPLETED) == [E.APPROVE, E.REJECT]
        assert allowed_events(S.APPROVED) == []
        assert E.PAYMENT_STARTED in allowed_events(S.PENDING_PAYMENT)


# ─────────────────────────── Workflow object ──────────────────────────────────

class TestRegistrationWorkflow:
    def test_starts_pending(self) -> None:
        wf = RegistrationWorkflow()
        assert wf.state is S.PENDING_PAYMENT
        assert wf.history == []

    def test_happy_path_records_each_step(self) -> None:
        wf = _paid()
        outcome = wf.approve(note="looks good")

        assert outcome.changed is True
        assert wf.state is S.APPROVED
        assert wf.is_terminal is True
        assert [(r.from_state, r.to_state) for r in wf.history] == [
            (S.PENDING_PAYMENT, S.PAYMENT_PROCESSING),
            (S.PAYMENT_PROCESSING, S.PAYMENT_COMPLETED),
            (S.PAYMENT_COMPLETED, S.APPROVED),
        ]
        assert wf.history[-1].actor is Actor.ADMIN
        assert wf.history[-1].note == "looks good"
        assert wf.history[1].actor is Actor.PROVIDER

    def test_duplicate_confirmation_is_a_noop(self) -> None:
        wf = _paid()
        outcome = wf.confirm_payment()
        assert outcome.changed is False
        assert outcome.duplicate is True
        assert wf.state is S.PAYMENT_COMPLETED
        assert len(wf.history) == 2

    def test_repeated_start_does_not_add_history(self) -> None:
        wf = RegistrationWorkflow()
        wf.begin_payment()
        outcome = wf.begin_payment()
        assert outcome.changed is False
        assert len(wf.history) == 1

    def test_approve_is_admin_only(self) -> None:
        wf = _paid()
        with pytest.raises(InvalidTransition) as exc:
            wf.apply(E.APPROVE, Actor.PROVIDER)
        assert "Only an admin" in exc.value.message
        assert wf.state is S.PAYMENT_COMPLETED

    def test_failed_payment_can_be_retried(self) -> None:
        wf = RegistrationWorkflow()
        wf.begin_payment()
        wf.deny_payment()
        assert wf.state is S.PAYMENT_FAILED
        wf.resubmit()
        wf.begin_payment()
        assert wf.state is S.PAYMENT_PROCESSING

    def test_signal_after_rejection_is_invalid(self) -> None:
        wf = RegistrationWorkflow()
        wf.reject(note="duplicate entry")
        with pytest.raises(InvalidTransition):
            wf.begin_payment()

    def test_can(self) -> None:
        wf = RegistrationWorkflow()
        assert wf.can(E.PAYMENT_STARTED) is True
        assert wf.can(E.APPROVE) is False

    def test_record_serialises_with_explicit_timestamp(self) -> None:
        at = datetime(2026, 3, 14, 9, 30, tzinfo=timezone.utc)
        wf = RegistrationWorkflow(registration_id=7)
        record = wf.apply(E.PAYMENT_STARTED, Actor.SYSTEM, at=at).record
        assert record.as_dict() == {
            "from_state": "pending_payment",
            "to_state": "payment_processing",
            "event": "payment_started",
            "actor": "system",
            "at": "2026-03-14T09:30:00+00:00",
            "note": None,
        }


# ─────────────────────────── Payment machine ──────────────────────────────────

class TestPaymentStatusMachine:
    P = PaymentStatus

    def test_capture_path(self) -> None:
        assert next_payment_status(self.P.PENDING, PaymentEvent.START) is self.P.PROCESSING
        assert next_payment_status(self.P.PROCESSING, PaymentEvent.COMPLETE) is self.P.COMPLETED
        assert next_payment_status(self.P.COMPLETED, PaymentEvent.REFUND) is self.P.REFUNDED

    def test_denial(self) -> None:
        assert next_payment_status(self.P.PROCESSING, PaymentEvent.DENY) is self.P.FAILED

    def test_settled_payment_ignores_repeat_signals(self) -> None:
        with pytest.raises(DuplicateSignal):
            next_payment_status(self.P.COMPLETED, PaymentEvent.COMPLETE)
        with pytest.raises(DuplicateSignal):
            next_payment_status(self.P.REFUNDED, PaymentEvent.REFUND)

    def test_refund_before_capture_is_invalid(self) -> None:
        with pytest.raises(InvalidTransition):
            next_payment_status(self.P.PENDING, PaymentEvent.REFUND)

    def test_restart_after_settlement_is_invalid(self) -> None:
        with pytest.raises(InvalidTransition):
            next_payment_status(self.P.COMPLETED, PaymentEvent.START)
