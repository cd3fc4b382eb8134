# hoopfund/domain/errors.py
"""Error taxonomy shared by the core, the services and the HTTP layer."""

from __future__ import annotations

from typing import Any, Dict, List, Optional


class FundraiserError(Exception):
    """Base class for every domain error raised by hoopfund."""

    http_status = 500

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message

    def details(self) -> Dict[str, Any]:
        return {}


class ValidationError(FundraiserError):
    """Malformed input field, surfaced to the submitting user."""

    http_status = 400

    def __init__(
        self,
        field: Optional[str],
        message: str,
        fields: Optional[Dict[str, List[str]]] = None,
    ) -> None:
        super().__init__(message)
        self.field = field
        self.fields = dict(fields or ({field: [message]} if field else {}))

    @classmethod
    def from_form_errors(cls, errors: Dict[str, Any]) -> "ValidationError":
        """Build from a WTForms ``form.errors`` mapping (nested for FieldList)."""
        flat: Dict[str, List[str]] = {}
        _flatten_errors("", errors, flat)
        first_field = next(iter(flat), None)
        first_msg = flat[first_field][0] if first_field else "Invalid input."
        return cls(first_field, first_msg, flat)

    def details(self) -> Dict[str, Any]:
        return {"field": self.field, "fields": self.fields}


class UnsupportedEvent(ValidationError):
    """A provider event whose type the workflow does not consume."""

    def __init__(self, event_type: str) -> None:
        super().__init__("event_type", f"Unsupported event type: {event_type!r}")
        self.event_type = event_type

    def details(self) -> Dict[str, Any]:
        return {"field": self.field, "event_type": self.event_type}


class InvalidTransition(FundraiserError):
    """A workflow rule violation, e.g. approving before payment completed."""

    http_status = 409

    def __init__(self, state: Any, event: Any, message: Optional[str] = None) -> None:
        state_v = getattr(state, "value", state)
        event_v = getattr(event, "value", event)
        super().__init__(message or f"Cannot apply {event_v!r} to a registration in {state_v!r}")
        self.state = state_v
        self.event = event_v

    def details(self) -> Dict[str, Any]:
        return {"state": self.state, "event": self.event}


class NotFound(FundraiserError):
    http_status = 404

    def __init__(self, resource: str, ident: Any) -> None:
        super().__init__(f"{resource} {ident} not found")
        self.resource = resource
        self.ident = ident

    def details(self) -> Dict[str, Any]:
        return {"resource": self.resource, "id": self.ident}


class DuplicateSignal(FundraiserError):
    """A completion/denial signal for a payment that already settled.

    Absorbed by the workflow as a no-op; callers never see it.
    """

    http_status = 200

    def __init__(self, state: Any, event: Any) -> None:
        state_v = getattr(state, "value", state)
        event_v = getattr(event, "value", event)
        super().__init__(f"Ignoring duplicate {event_v!r} in {state_v!r}")
        self.state = state_v
        self.event = event_v


def _flatten_errors(prefix: str, errors: Any, out: Dict[str, List[str]]) -> None:
    if isinstance(errors, dict):
        for key, val in errors.items():
            name = f"{prefix}-{key}" if prefix else str(key)
            _flatten_errors(name, val, out)
    elif isinstance(errors, (list, tuple)):
        if all(isinstance(e, str) for e in errors):
            if errors:
                out.setdefault(prefix, []).extend(errors)
            return
        for idx, val in enumerate(errors):
            if isinstance(val, str):
                out.setdefault(prefix, []).append(val)
                continue
            # FieldList(FormField) errors come back as a list of dicts
            _flatten_errors(f"{prefix}-{idx}", val, out)
    elif errors:
        out.setdefault(prefix, []).append(str(errors))


__all__ = [
    "FundraiserError",
    "ValidationError",
    "UnsupportedEvent",
    "InvalidTransition",
    "NotFound",
    "DuplicateSignal",
]
