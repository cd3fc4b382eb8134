# hoopfund/blueprints/payments.py
# ─────────────────────────────────────────────────────────────────────────────
# Payment start + PayPal capture webhook
#
# Webhook contract:
#   400  unparseable body, bad signature, malformed capture payload
#   200  processed, duplicate event id, unsupported event type, or a signal
#        that can never apply (unknown / rejected registration)
#   500  storage failure; the stored event is dropped so a retry reprocesses it
# ─────────────────────────────────────────────────────────────────────────────
from __future__ import annotations

import json
from typing import Any, Dict

from flask import Blueprint, current_app, request
from sqlalchemy.exc import SQLAlchemyError

from hoopfund import domain
from hoopfund.config.settings import get_settings
from hoopfund.domain.webhooks import parse_webhook
from hoopfund.extensions import csrf, db
from hoopfund.services import payments
from hoopfund.services.paypal import PayPalClient, PayPalError

from .api_utils import error_payload, json_ok, json_response, request_payload

bp = Blueprint("payments", __name__, url_prefix="/payments")
csrf.exempt(bp)


def _ack(payload: Dict[str, Any], status: int = 200):
    return json_response({"ok": status < 400, **payload}, status)


# ----------------------------
# Registrant starts paying
# ----------------------------
@bp.post("/registrations/<int:registration_id>/start")
def start_payment(registration_id: int):
    method = request_payload().get("method")
    started = payments.start_payment(registration_id, method, currency=get_settings().currency)
    current_app.logger.info(
        "payments: registration %s started %s payment %s",
        registration_id,
        started.payment.payment_method,
        started.payment.id,
    )
    return json_ok(started.as_dict())


# ----------------------------
# PayPal webhook
# ----------------------------
@bp.post("/paypal/webhook")
def paypal_webhook():
    s = get_settings()
    raw = request.get_data(cache=True, as_text=False)
    try:
        payload = json.loads(raw.decode("utf-8"))
    except (UnicodeDecodeError, ValueError):
        return json_response(error_payload(400, "Webhook body is not valid JSON"), 400)
    if not isinstance(payload, dict):
        return json_response(error_payload(400, "Webhook body must be a JSON object"), 400)

    if s.verify_webhooks:
        try:
            verified = PayPalClient(s).verify_webhook_signature(request.headers, payload)
        except PayPalError as e:
            current_app.logger.warning("payments: webhook signature check unavailable: %s", e.message)
            return json_response(error_payload(e.http_status, e.message), e.http_status)
        if not verified:
            current_app.logger.warning("payments: webhook signature verification failed (id=%s)", payload.get("id"))
            return json_response(error_payload(400, "Invalid webhook signature"), 400)

    try:
        event = parse_webhook(payload)
    except domain.UnsupportedEvent as e:
        current_app.logger.warning("payments: ignoring unsupported webhook event %r", e.event_type)
        return _ack({"outcome": "ignored", "event_type": e.event_type})
    except domain.ValidationError as e:
        current_app.logger.warning("payments: malformed webhook: %s", e.message)
        return json_response(error_payload(400, e.message, **e.details()), 400)

    try:
        stored = payments.record_webhook(
            event.event_id,
            event.event_type.value,
            payload,
            transaction_id=event.transaction_id,
            registration_id=event.ref.registration_id,
        )
    except SQLAlchemyError:
        db.session.rollback()
        current_app.logger.exception("payments: failed to store webhook event (will retry)")
        return json_response(error_payload(500, "Could not store webhook event"), 500)

    if stored is None:
        current_app.logger.info("payments: webhook %s already received; acknowledging", event.event_id)
        return _ack({"outcome": "duplicate", "event_id": event.event_id})

    try:
        result = payments.apply_webhook_event(event)
        payments.finish_webhook(stored, result)
    except Exception:
        current_app.logger.exception("payments: webhook %s processing failed (will retry)", event.event_id)
        payments.forget_webhook(event.event_id)
        return json_response(error_payload(500, "Webhook processing failed"), 500)

    current_app.logger.info(
        "payments: webhook %s %s -> %s", event.event_id, event.event_type.value, result.outcome
    )
    return _ack({"event_id": event.event_id, **result.as_dict()})
