# hoopfund/services/stats.py
from __future__ import annotations

from decimal import Decimal
from typing import Any, Dict

from sqlalchemy import func, select

from hoopfund import domain
from hoopfund.domain.records import money_to_str
from hoopfund.extensions import db
from hoopfund.models import Payment, Player, Sponsor, Team, Volunteer
from hoopfund.models.mixins import from_cents


def _scalar(stmt) -> int:
    return int(db.session.execute(stmt).scalar() or 0)


def fundraising_stats(goal: Decimal) -> Dict[str, Any]:
    """Headline numbers for the public progress bar and the admin dashboard.

    Money raised counts each completed payment row once plus approved sponsor
    donations; refunded payments drop out.
    """
    paid_cents = _scalar(
        select(func.coalesce(func.sum(Payment.amount_cents), 0)).where(
            Payment.status == domain.PaymentStatus.COMPLETED.value
        )
    )
    sponsor_cents = _scalar(
        select(func.coalesce(func.sum(Sponsor.donation_amount_cents), 0)).where(Sponsor.approved.is_(True))
    )
    total = from_cents(paid_cents + sponsor_cents)
    goal = Decimal(goal)

    percent = 0
    if goal > 0:
        percent = min(100, int((total * 100 / goal).to_integral_value()))

    return {
        "total_raised": money_to_str(total),
        "goal": money_to_str(goal),
        "percent_of_goal": percent,
        "registered_teams": _scalar(select(func.count(Team.id))),
        "registered_players": _scalar(select(func.count(Player.id))),
        "total_sponsors": _scalar(select(func.count(Sponsor.id))),
        "approved_teams": _scalar(
            select(func.count(Team.id)).where(Team.status == domain.RegistrationStatus.APPROVED.value)
        ),
        "approved_sponsors": _scalar(select(func.count(Sponsor.id)).where(Sponsor.approved.is_(True))),
    }


def admin_stats(goal: Decimal) -> Dict[str, Any]:
    data = fundraising_stats(goal)
    rows = db.session.execute(select(Team.status, func.count(Team.id)).group_by(Team.status)).all()
    by_status = {s.value: 0 for s in domain.RegistrationStatus}
    by_status.update({status: int(n) for status, n in rows})
    data["registrations_by_status"] = by_status
    data["pending_sponsors"] = data["total_sponsors"] - data["approved_sponsors"]
    data["total_volunteers"] = _scalar(select(func.count(Volunteer.id)))
    data["approved_volunteers"] = _scalar(select(func.count(Volunteer.id)).where(Volunteer.approved.is_(True)))
    return data
