"""
hoopfund admin API
────────────────────────────────────────────────────────────
• POST /api/admin/login                           → bearer token
• GET  /api/admin/registrations[?status=]         → registrations + players, payments, history
• POST /api/admin/registrations/<id>/approve
• POST /api/admin/registrations/<id>/reject       {reason?}
• POST /api/admin/registrations/<id>/verify-payment {method, amount?, reference?}
• GET  /api/admin/registrations.csv               → CSV export
• GET  /api/admin/sponsors, POST .../<id>/approve|reject
• GET  /api/admin/volunteers, POST .../<id>/approve|reject
• GET  /api/admin/stats

Everything except login requires ``Authorization: Bearer <token>``.
"""

from __future__ import annotations

import csv
import io
import logging

from flask import Blueprint, Response, current_app, g, request
from sqlalchemy import select
from werkzeug.exceptions import Unauthorized

from hoopfund import domain
from hoopfund.config.settings import get_settings
from hoopfund.domain.records import money_to_str
from hoopfund.extensions import csrf, db
from hoopfund.models import Sponsor, Volunteer
from hoopfund.services import payments, registrations
from hoopfund.services.auth import check_password, issue_token, require_admin
from hoopfund.services.stats import admin_stats

from .api_utils import json_ok, request_payload

log = logging.getLogger(__name__)

bp = Blueprint("admin", __name__, url_prefix="/api/admin")
csrf.exempt(bp)


# ───────────────────────────────
# Helpers
# ───────────────────────────────
def _registration_detail(row, history=None) -> dict:
    data = row.as_dict(include_payments=True)
    if history is None:
        history = registrations.history(row.id)
    data["history"] = [h.as_dict() for h in history]
    return data


def _set_approved(model, ident: int, approved: bool, label: str):
    row = db.session.get(model, ident)
    if row is None:
        raise domain.NotFound(label, ident)
    changed = bool(row.approved) != approved
    row.approved = approved
    db.session.commit()
    if changed:
        log.info("%s %s %s by %s", label, ident, "approved" if approved else "rejected", g.admin_subject)
    return row, changed


# ───────────────────────────────
# Login
# ───────────────────────────────
@bp.post("/login")
def login():
    settings = get_settings()
    payload = request_payload()
    if not check_password(settings, payload.get("password")):
        log.warning("admin: failed login attempt")
        raise Unauthorized("Invalid password.")
    return json_ok(issue_token(settings))


# ───────────────────────────────
# Registrations
# ───────────────────────────────
@bp.get("/registrations")
@require_admin
def registrations_list():
    rows = registrations.list_registrations(request.args.get("status") or None)
    trails = registrations.histories(r.id for r in rows)
    return json_ok({"registrations": [_registration_detail(r, trails[r.id]) for r in rows], "count": len(rows)})


@bp.post("/registrations/<int:registration_id>/approve")
@require_admin
def approve_registration(registration_id: int):
    note = request_payload().get("note")
    outcome = registrations.approve(registration_id, note=note or f"approved by {g.admin_subject}")
    row = registrations.get_registration(registration_id)
    return json_ok({"changed": outcome.changed, "registration": _registration_detail(row)})


@bp.post("/registrations/<int:registration_id>/reject")
@require_admin
def reject_registration(registration_id: int):
    reason = (request_payload().get("reason") or "").strip() or None
    outcome = registrations.reject(registration_id, reason=reason)
    row = registrations.get_registration(registration_id)
    return json_ok({"changed": outcome.changed, "registration": _registration_detail(row)})


@bp.post("/registrations/<int:registration_id>/verify-payment")
@require_admin
def verify_payment(registration_id: int):
    payload = request_payload()
    outcome = payments.verify_manual_payment(
        registration_id,
        payload.get("method"),
        amount=payload.get("amount"),
        reference=payload.get("reference"),
        currency=get_settings().currency,
    )
    row = registrations.get_registration(registration_id)
    return json_ok({"changed": outcome.changed, "registration": _registration_detail(row)})


@bp.get("/registrations.csv")
@require_admin
def registrations_csv() -> Response:
    """All registrations as a CSV download."""
    output = io.StringIO()
    writer = csv.writer(output)
    writer.writerow(["ID", "Team", "Type", "Players", "Player Names", "Fee", "Status", "Transaction", "Created"])

    for row in registrations.list_registrations():
        team = row.to_domain()
        writer.writerow(
            [
                row.id,
                team.display_name,
                row.registration_type,
                team.player_count,
                "; ".join(p.name for p in team.players),
                money_to_str(team.donation_amount),
                row.status,
                row.transaction_id or "",
                row.created_at.strftime("%Y-%m-%d %H:%M") if row.created_at else "",
            ]
        )

    output.seek(0)
    return Response(
        output.getvalue(),
        mimetype="text/csv; charset=utf-8",
        headers={"Content-Disposition": "attachment; filename=registrations.csv"},
    )


# ───────────────────────────────
# Sponsors
# ───────────────────────────────
@bp.get("/sponsors")
@require_admin
def sponsors_list():
    rows = db.session.execute(select(Sponsor).order_by(Sponsor.created_at.desc(), Sponsor.id.desc())).scalars().all()
    return json_ok({"sponsors": [s.as_dict() for s in rows], "count": len(rows)})


@bp.post("/sponsors/<int:sponsor_id>/approve")
@require_admin
def approve_sponsor(sponsor_id: int):
    row, changed = _set_approved(Sponsor, sponsor_id, True, "sponsor")
    return json_ok({"changed": changed, "sponsor": row.as_dict()})


@bp.post("/sponsors/<int:sponsor_id>/reject")
@require_admin
def reject_sponsor(sponsor_id: int):
    row, changed = _set_approved(Sponsor, sponsor_id, False, "sponsor")
    return json_ok({"changed": changed, "sponsor": row.as_dict()})


# ───────────────────────────────
# Volunteers
# ───────────────────────────────
@bp.get("/volunteers")
@require_admin
def volunteers_list():
    rows = db.session.execute(select(Volunteer).order_by(Volunteer.created_at.desc(), Volunteer.id.desc())).scalars().all()
    return json_ok({"volunteers": [v.as_dict() for v in rows], "count": len(rows)})


@bp.post("/volunteers/<int:volunteer_id>/approve")
@require_admin
def approve_volunteer(volunteer_id: int):
    row, changed = _set_approved(Volunteer, volunteer_id, True, "volunteer")
    return json_ok({"changed": changed, "volunteer": row.as_dict()})


@bp.post("/volunteers/<int:volunteer_id>/reject")
@require_admin
def reject_volunteer(volunteer_id: int):
    row, changed = _set_approved(Volunteer, volunteer_id, False, "volunteer")
    return json_ok({"changed": changed, "volunteer": row.as_dict()})


# ───────────────────────────────
# Stats
# ───────────────────────────────
@bp.get("/stats")
@require_admin
def stats():
    data = admin_stats(get_settings().fundraising_goal)
    current_app.logger.debug("admin stats requested by %s", g.admin_subject)
    return json_ok(data)
