# hoopfund/services/registrations.py
"""Registration persistence + status transitions.

Status changes are compare-and-set against the stored status: the UPDATE only
matches when the row still holds the state the workflow evaluated. A zero row
count means a concurrent request won; the event is re-evaluated once against
the fresh state before giving up.
"""

from __future__ import annotations

import logging
from typing import Dict, Iterable, List, Optional

from sqlalchemy import select
from sqlalchemy import update as sa_update
from sqlalchemy.orm import selectinload

from hoopfund import domain
from hoopfund.domain.workflow import RegistrationWorkflow, TransitionOutcome
from hoopfund.extensions import db
from hoopfund.models import StatusChange, Team
from hoopfund.models.mixins import utcnow_naive

log = logging.getLogger(__name__)

CAS_ATTEMPTS = 2


def create_registration(team: domain.Team, *, medical_consent: bool = False) -> Team:
    """Persist a validated registration; status always starts at pending_payment."""
    if team.status is not domain.RegistrationStatus.PENDING_PAYMENT:
        raise domain.ValidationError("status", "New registrations start in pending_payment.")

    row = Team.from_domain(team)
    if not row.name:
        row.name = team.display_name
    row.medical_consent = bool(medical_consent)
    db.session.add(row)
    db.session.commit()
    log.info("registration %s created (%s, %s players)", row.id, row.registration_type, len(row.players))
    return row


def get_registration(registration_id: int) -> Team:
    row = db.session.get(Team, int(registration_id))
    if row is None:
        raise domain.NotFound("registration", registration_id)
    return row


def list_registrations(status: Optional[str] = None) -> List[Team]:
    stmt = (
        select(Team)
        .options(selectinload(Team.players), selectinload(Team.payments))
        .order_by(Team.created_at.desc(), Team.id.desc())
    )
    if status:
        try:
            status = domain.RegistrationStatus(status).value
        except ValueError:
            raise domain.ValidationError("status", f"Unknown status: {status!r}") from None
        stmt = stmt.where(Team.status == status)
    return list(db.session.execute(stmt).scalars())


def history(registration_id: int) -> List[StatusChange]:
    stmt = (
        select(StatusChange)
        .where(StatusChange.registration_id == int(registration_id))
        .order_by(StatusChange.created_at, StatusChange.id)
    )
    return list(db.session.execute(stmt).scalars())


def histories(registration_ids: Iterable[int]) -> Dict[int, List[StatusChange]]:
    """History for many registrations in one query, keyed by registration id."""
    ids = sorted({int(i) for i in registration_ids})
    grouped: Dict[int, List[StatusChange]] = {i: [] for i in ids}
    if not ids:
        return grouped
    stmt = (
        select(StatusChange)
        .where(StatusChange.registration_id.in_(ids))
        .order_by(StatusChange.registration_id, StatusChange.created_at, StatusChange.id)
    )
    for change in db.session.execute(stmt).scalars():
        grouped[change.registration_id].append(change)
    return grouped


def _current_status(registration_id: int) -> domain.RegistrationStatus:
    raw = db.session.execute(select(Team.status).where(Team.id == registration_id)).scalar_one_or_none()
    if raw is None:
        raise domain.NotFound("registration", registration_id)
    return domain.RegistrationStatus(raw)


def transition(
    registration_id: int,
    event: domain.RegistrationEvent,
    actor: domain.Actor,
    *,
    note: Optional[str] = None,
    transaction_id: Optional[str] = None,
) -> TransitionOutcome:
    """Apply one workflow event to a stored registration.

    Raises InvalidTransition / NotFound; duplicate settlement signals come back
    as an unchanged outcome.
    """
    registration_id = int(registration_id)
    for attempt in range(1, CAS_ATTEMPTS + 1):
        expected = _current_status(registration_id)
        wf = RegistrationWorkflow(expected, registration_id=registration_id)
        outcome = wf.apply(event, actor, note=note)
        if not outcome.changed:
            db.session.rollback()
            return outcome

        values = {
            "status": outcome.state.value,
            "approved": outcome.state is domain.RegistrationStatus.APPROVED,
            "updated_at": utcnow_naive(),
        }
        if transaction_id:
            values["transaction_id"] = transaction_id[:120]

        res = db.session.execute(
            sa_update(Team)
            .where(Team.id == registration_id, Team.status == expected.value)
            .values(**values)
            .execution_options(synchronize_session=False)
        )
        if getattr(res, "rowcount", 0):
            db.session.add(StatusChange.from_record(registration_id, outcome.record))
            db.session.commit()
            return outcome

        db.session.rollback()
        log.info(
            "registration %s: status moved under us (attempt %s/%s), re-evaluating %s",
            registration_id,
            attempt,
            CAS_ATTEMPTS,
            domain.RegistrationEvent(event).value,
        )

    raise domain.InvalidTransition(
        _current_status(registration_id),
        event,
        "Registration was changed by another request; retry the action",
    )


def apply_events(
    registration_id: int,
    events: Iterable[domain.RegistrationEvent],
    actor: domain.Actor,
    *,
    note: Optional[str] = None,
    transaction_id: Optional[str] = None,
) -> TransitionOutcome:
    """Apply a short sequence of events; returns the last outcome with ``changed`` OR-ed."""
    changed = False
    outcome: Optional[TransitionOutcome] = None
    for event in events:
        outcome = transition(registration_id, event, actor, note=note, transaction_id=transaction_id)
        changed = changed or outcome.changed
    if outcome is None:
        raise ValueError("apply_events needs at least one event")
    return TransitionOutcome(outcome.state, changed=changed, record=outcome.record, duplicate=outcome.duplicate)


def approve(registration_id: int, note: Optional[str] = None) -> TransitionOutcome:
    return transition(registration_id, domain.RegistrationEvent.APPROVE, domain.Actor.ADMIN, note=note)


def reject(registration_id: int, reason: Optional[str] = None) -> TransitionOutcome:
    return transition(registration_id, domain.RegistrationEvent.REJECT, domain.Actor.ADMIN, note=reason)


__all__ = [
    "create_registration",
    "get_registration",
    "list_registrations",
    "history",
    "histories",
    "transition",
    "apply_events",
    "approve",
    "reject",
]
