# hoopfund/blueprints/api.py
# ─────────────────────────────────────────────────────────────────────────────
# Public JSON API (flask-restx): registration, sponsor and volunteer intake,
# fee preview, sponsor wall, fundraising stats, payment methods, and the
# tournament-day board.
# Swagger UI at /api/docs.
# ─────────────────────────────────────────────────────────────────────────────
from __future__ import annotations

from typing import Any, Dict

from flask import Blueprint, current_app, request
from flask_restx import Api, Namespace, Resource
from sqlalchemy import select
from werkzeug.exceptions import HTTPException

from hoopfund import domain
from hoopfund.config.settings import get_settings
from hoopfund.domain.records import money_to_str
from hoopfund.domain.tiers import TIER_BENEFITS
from hoopfund.domain.volunteers import parse_age
from hoopfund.extensions import csrf, db
from hoopfund.forms import RegistrationForm, SponsorForm, VolunteerForm
from hoopfund.models import Sponsor, Volunteer
from hoopfund.services import registrations, tournaments
from hoopfund.services.stats import fundraising_stats
from hoopfund.services.storage import LogoStorage

from .api_utils import (bind_form, error_payload, fundraiser_error_payload,
                        json_ok, validated)

# ─────────────────────────────────────────────────────────────
# Namespace + per-app RESTX API
# ─────────────────────────────────────────────────────────────
ns = Namespace("public", description="Registration, sponsors, volunteers and stats", path="/")

authorizations = {
    "Bearer": {
        "type": "apiKey",
        "in": "header",
        "name": "Authorization",
        "description": "Use: Bearer <token>",
    }
}


def create_api_blueprint() -> Blueprint:
    """Fresh blueprint + Api per app; the namespace is shared."""
    api_bp = Blueprint("api", __name__)
    api = Api(
        api_bp,
        version="1.0",
        title="hoopfund API",
        description="Public API for tournament registration, sponsors and volunteers.",
        doc="/docs",
        authorizations=authorizations,
    )
    api.add_namespace(ns)
    csrf.exempt(api_bp)
    return api_bp


@ns.errorhandler(domain.FundraiserError)
def _handle_fundraiser_error(e: domain.FundraiserError):
    if isinstance(e, domain.InvalidTransition):
        current_app.logger.warning("api: %s", e.message)
    return fundraiser_error_payload(e), e.http_status


@ns.errorhandler(HTTPException)
def _handle_http_error(e: HTTPException):
    code = e.code or 500
    return error_payload(code, e.description or e.name), code


def _public_sponsor(s: Sponsor) -> Dict[str, Any]:
    return {"id": s.id, "name": s.name, "website": s.website, "logo_url": s.logo_url, "tier": s.tier.value}


# ─────────────────────────────────────────────────────────────
# Registrations
# ─────────────────────────────────────────────────────────────
@ns.route("/registrations")
class RegistrationsResource(Resource):
    @ns.doc(description="Register an individual or a team of up to 4 players.")
    def post(self):
        form = validated(bind_form(RegistrationForm))
        team = form.to_domain()
        row = registrations.create_registration(team, medical_consent=bool(form.medical_treatment_consent.data))
        return json_ok(
            {
                "registration": row.as_dict(),
                "fee": money_to_str(team.donation_amount),
                "payment_methods": get_settings().payment_methods(),
            },
            201,
        )


@ns.route("/pricing")
class PricingResource(Resource):
    @ns.doc(params={"registration_type": "individual | team", "party_size": "number of players"})
    def get(self):
        raw_kind = (request.args.get("registration_type") or "").strip().lower()
        try:
            kind = domain.RegistrationKind(raw_kind)
        except ValueError:
            raise domain.ValidationError("registration_type", "registration_type must be 'individual' or 'team'.") from None

        raw_size = (request.args.get("party_size") or "1").strip()
        if not raw_size.isdigit() or int(raw_size) < 1:
            raise domain.ValidationError("party_size", "party_size must be a positive whole number.")
        size = int(raw_size)

        return json_ok(
            {
                "registration_type": kind.value,
                "party_size": size,
                "per_person_fee": money_to_str(domain.PER_PERSON_FEE),
                "fee": money_to_str(domain.compute_registration_fee(kind, size)),
            }
        )


# ─────────────────────────────────────────────────────────────
# Sponsors
# ─────────────────────────────────────────────────────────────
@ns.route("/sponsors")
class SponsorsResource(Resource):
    @ns.doc(description="Approved sponsors grouped by tier, highest tier first.")
    def get(self):
        rows = db.session.execute(select(Sponsor).where(Sponsor.approved.is_(True))).scalars()
        groups = domain.group_by_tier(rows, lambda s: s.amount)
        return json_ok(
            {
                "tiers": [
                    {
                        "tier": tier.value,
                        "benefits": TIER_BENEFITS[tier],
                        "sponsors": [_public_sponsor(s) for s in members],
                    }
                    for tier, members in groups
                ]
            }
        )

    @ns.doc(description="Sponsor sign-up (JSON, or multipart with a 'logo' file).")
    def post(self):
        form = validated(bind_form(SponsorForm))

        logo_url = None
        upload = form.logo.data
        if upload is not None and getattr(upload, "filename", None):
            stored = LogoStorage.from_settings(get_settings()).save(
                upload.stream,
                content_type=upload.mimetype,
                filename=upload.filename,
            )
            logo_url = stored.url

        row = Sponsor.from_domain(form.to_domain(logo_url=logo_url))
        row.contact_name = form.contact_name.data or None
        row.phone = form.phone.data or None
        db.session.add(row)
        db.session.commit()
        current_app.logger.info("sponsor %s signed up (%s, %s)", row.id, row.tier.value, row.amount)
        return json_ok({"sponsor": row.as_dict()}, 201)


# ─────────────────────────────────────────────────────────────
# Volunteers
# ─────────────────────────────────────────────────────────────
@ns.route("/volunteers")
class VolunteersResource(Resource):
    def post(self):
        form = validated(bind_form(VolunteerForm, aliases={"dates_available": "availability"}))
        row = Volunteer.from_domain(form.to_domain())
        db.session.add(row)
        db.session.commit()
        current_app.logger.info("volunteer %s signed up (%s)", row.id, row.role_preference or "no preference")
        return json_ok({"volunteer": row.as_dict()}, 201)


@ns.route("/volunteers/roles")
class VolunteerRolesResource(Resource):
    @ns.doc(params={"age": "volunteer age in years"})
    def get(self):
        age = parse_age(request.args.get("age"))
        if age is None:
            raise domain.ValidationError("age", "age must be a whole number.")
        return json_ok(
            {
                "age": age,
                "eligible_roles": sorted(r.value for r in domain.eligible_roles(age)),
                "requires_guardian": domain.requires_guardian(age),
            }
        )


# ─────────────────────────────────────────────────────────────
# Stats + payment methods
# ─────────────────────────────────────────────────────────────
@ns.route("/stats")
class StatsResource(Resource):
    @ns.doc(description="Fundraising totals toward the goal.")
    def get(self):
        return json_ok(fundraising_stats(get_settings().fundraising_goal))


@ns.route("/payment-methods")
class PaymentMethodsResource(Resource):
    def get(self):
        s = get_settings()
        return json_ok(
            {
                "methods": s.payment_methods(),
                "paypal_enabled": s.paypal_enabled,
                "paypal_client_id": s.paypal_client_id or None,
                "currency": s.currency,
            }
        )


# ─────────────────────────────────────────────────────────────
# Tournament board
# ─────────────────────────────────────────────────────────────
@ns.route("/tournaments/<int:tournament_id>")
class TournamentBoardResource(Resource):
    @ns.doc(description="Schedule, scores and standings for spectators; no contact details.")
    def get(self, tournament_id: int):
        t = tournaments.get_tournament(tournament_id)
        return json_ok({"tournament": t.as_dict(private=False)})
