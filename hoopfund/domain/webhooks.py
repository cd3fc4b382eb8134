# hoopfund/domain/webhooks.py
"""PayPal capture webhooks, parsed into a closed set of typed events.

Only the three capture events are understood. Anything else raises
``UnsupportedEvent`` at the boundary instead of being guessed at.
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from decimal import Decimal
from enum import Enum
from typing import Any, ClassVar, Dict, Mapping, Optional, Union

from .errors import UnsupportedEvent, ValidationError
from .records import money_from
from .types import RegistrationKind
from .workflow import PaymentEvent, RegistrationEvent


class CaptureEventType(str, Enum):
    COMPLETED = "PAYMENT.CAPTURE.COMPLETED"
    DENIED = "PAYMENT.CAPTURE.DENIED"
    REFUNDED = "PAYMENT.CAPTURE.REFUNDED"


@dataclass(frozen=True)
class RegistrationRef:
    registration_id: int
    kind: RegistrationKind


def encode_custom(registration_id: int, kind: Any) -> str:
    """Opaque ``custom`` string attached to a provider order."""
    return json.dumps(
        {"registration_id": int(registration_id), "registration_type": RegistrationKind(kind).value},
        separators=(",", ":"),
        sort_keys=True,
    )


def decode_custom(raw: Any) -> RegistrationRef:
    data: Any = raw
    if isinstance(raw, (str, bytes)):
        try:
            data = json.loads(raw)
        except ValueError:
            raise ValidationError("custom", "custom payload is not valid JSON") from None
    if not isinstance(data, Mapping):
        raise ValidationError("custom", "custom payload must be an object")

    reg_id = data.get("registration_id")
    try:
        reg_id = int(str(reg_id).strip())
    except (TypeError, ValueError):
        raise ValidationError("custom", "custom payload is missing registration_id") from None
    try:
        kind = RegistrationKind(str(data.get("registration_type") or "").strip().lower())
    except ValueError:
        raise ValidationError("custom", "custom payload has an unknown registration_type") from None
    return RegistrationRef(registration_id=reg_id, kind=kind)


@dataclass(frozen=True)
class _CaptureEvent:
    event_type: ClassVar[CaptureEventType]
    payment_event: ClassVar[PaymentEvent]
    registration_event: ClassVar[Optional[RegistrationEvent]]

    event_id: str
    transaction_id: str
    amount: Decimal
    currency: str
    provider_status: str
    ref: RegistrationRef
    capture_id: Optional[str] = None


@dataclass(frozen=True)
class CaptureCompleted(_CaptureEvent):
    event_type = CaptureEventType.COMPLETED
    payment_event = PaymentEvent.COMPLETE
    registration_event = RegistrationEvent.PAYMENT_CONFIRMED


@dataclass(frozen=True)
class CaptureDenied(_CaptureEvent):
    event_type = CaptureEventType.DENIED
    payment_event = PaymentEvent.DENY
    registration_event = RegistrationEvent.PAYMENT_DENIED


@dataclass(frozen=True)
class CaptureRefunded(_CaptureEvent):
    event_type = CaptureEventType.REFUNDED
    payment_event = PaymentEvent.REFUND
    registration_event = None


WebhookEvent = Union[CaptureCompleted, CaptureDenied, CaptureRefunded]

_EVENT_CLASSES: Dict[CaptureEventType, type] = {
    CaptureEventType.COMPLETED: CaptureCompleted,
    CaptureEventType.DENIED: CaptureDenied,
    CaptureEventType.REFUNDED: CaptureRefunded,
}


def _up_link_id(resource: Mapping[str, Any]) -> Optional[str]:
    """Refund resources point back at their capture through rel=up."""
    for link in resource.get("links") or ():
        if isinstance(link, Mapping) and link.get("rel") == "up" and link.get("href"):
            return str(link["href"]).rstrip("/").rsplit("/", 1)[-1]
    return None


def parse_webhook(payload: Mapping[str, Any]) -> WebhookEvent:
    if not isinstance(payload, Mapping):
        raise ValidationError("payload", "Webhook payload must be a JSON object")

    raw_type = str(payload.get("event_type") or "").strip()
    try:
        etype = CaptureEventType(raw_type)
    except ValueError:
        raise UnsupportedEvent(raw_type) from None

    resource = payload.get("resource")
    if not isinstance(resource, Mapping):
        raise ValidationError("resource", "Webhook payload has no resource")

    transaction_id = str(resource.get("id") or "").strip()
    if not transaction_id:
        raise ValidationError("resource.id", "Webhook resource has no id")

    amount_obj = resource.get("amount") if isinstance(resource.get("amount"), Mapping) else {}
    amount = money_from(amount_obj.get("value", "0"), "resource.amount")
    currency = str(amount_obj.get("currency_code") or "USD").upper()

    custom = payload.get("custom")
    if custom is None:
        custom = resource.get("custom_id", resource.get("custom"))
    if custom is None:
        raise ValidationError("custom", "Webhook payload carries no registration reference")

    cls = _EVENT_CLASSES[etype]
    return cls(
        event_id=str(payload.get("id") or transaction_id),
        transaction_id=transaction_id,
        amount=amount,
        currency=currency,
        provider_status=str(resource.get("status") or "").upper(),
        ref=decode_custom(custom),
        capture_id=_up_link_id(resource) if etype is CaptureEventType.REFUNDED else transaction_id,
    )


__all__ = [
    "CaptureEventType",
    "RegistrationRef",
    "encode_custom",
    "decode_custom",
    "CaptureCompleted",
    "CaptureDenied",
    "CaptureRefunded",
    "WebhookEvent",
    "parse_webhook",
]
