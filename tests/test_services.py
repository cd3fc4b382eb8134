"""
Integration tests — services and models against the in-memory database.

Coverage:
  - create_registration: derived fee, default name, initial status guard
  - transition(): compare-and-set, audit rows, duplicates
  - ORM <-> domain conversion for teams, sponsors, volunteers, payments
  - webhook event store: dedupe and forget
  - fundraising stats arithmetic
"""
from __future__ import annotations

from decimal import Decimal

import pytest

from hoopfund import domain
from hoopfund.extensions import db
from hoopfund.models import Payment, Sponsor, StatusChange, Team, Volunteer, WebhookEvent
from hoopfund.services import payments, registrations
from hoopfund.services.stats import admin_stats, fundraising_stats

E = domain.RegistrationEvent
S = domain.RegistrationStatus


def _domain_team(size: int = 2, name: str | None = "Rim Runners") -> domain.Team:
    players = tuple(
        domain.Player(name=f"Player {i}", email=f"p{i}@example.com", age=20 + i, emergency_contact="Kim")
        for i in range(size)
    )
    return domain.Team(kind=domain.RegistrationKind.TEAM, players=players, name=name)


# ─────────────────────────── Registrations ────────────────────────────────────

class TestRegistrationService:
    def test_create_persists_roster_and_fee(self, app) -> None:
        row = registrations.create_registration(_domain_team(3), medical_consent=True)
        assert row.id is not None
        assert row.donation_amount_cents == 6000
        assert row.status == "pending_payment"
        assert row.medical_consent is True
        assert [p.player_name for p in row.players] == ["Player 0", "Player 1", "Player 2"]

    def test_fee_is_recomputed_on_insert(self, app) -> None:
        row = Team.from_domain(_domain_team(2))
        row.donation_amount_cents = 1
        db.session.add(row)
        db.session.commit()
        assert row.donation_amount_cents == 4000

    def test_unnamed_team_gets_display_name(self, app) -> None:
        row = registrations.create_registration(_domain_team(1, name=None))
        assert row.name == "Player 0's Team"

    def test_new_registration_must_be_pending(self, app) -> None:
        team = domain.Team(
            kind=domain.RegistrationKind.INDIVIDUAL,
            players=_domain_team(1).players,
            status=S.APPROVED,
        )
        with pytest.raises(domain.ValidationError):
            registrations.create_registration(team)

    def test_transition_writes_audit_row(self, app) -> None:
        row = registrations.create_registration(_domain_team())
        outcome = registrations.transition(row.id, E.PAYMENT_STARTED, domain.Actor.SYSTEM, note="venmo")
        assert outcome.changed is True
        assert db.session.get(Team, row.id).status == "payment_processing"

        trail = registrations.history(row.id)
        assert len(trail) == 1
        assert trail[0].from_state == "pending_payment"
        assert trail[0].note == "venmo"
        assert trail[0].to_record().actor is domain.Actor.SYSTEM

    def test_noop_transition_writes_nothing(self, app) -> None:
        row = registrations.create_registration(_domain_team())
        registrations.transition(row.id, E.PAYMENT_STARTED, domain.Actor.SYSTEM)
        outcome = registrations.transition(row.id, E.PAYMENT_STARTED, domain.Actor.SYSTEM)
        assert outcome.changed is False
        assert db.session.query(StatusChange).count() == 1

    def test_histories_groups_by_registration(self, app) -> None:
        paid = registrations.create_registration(_domain_team())
        fresh = registrations.create_registration(_domain_team())
        registrations.apply_events(paid.id, [E.PAYMENT_STARTED, E.PAYMENT_CONFIRMED], domain.Actor.PROVIDER)

        trails = registrations.histories([fresh.id, paid.id])
        assert set(trails) == {paid.id, fresh.id}
        assert [h.to_state for h in trails[paid.id]] == ["payment_processing", "payment_completed"]
        assert trails[fresh.id] == []
        assert registrations.histories([]) == {}

    def test_approve_sets_approved_flag(self, app) -> None:
        row = registrations.create_registration(_domain_team())
        registrations.apply_events(row.id, [E.PAYMENT_STARTED, E.PAYMENT_CONFIRMED], domain.Actor.PROVIDER)
        registrations.approve(row.id)
        fresh = registrations.get_registration(row.id)
        assert fresh.status == "approved"
        assert fresh.approved is True

    def test_approve_needs_admin_actor(self, app) -> None:
        row = registrations.create_registration(_domain_team())
        registrations.apply_events(row.id, [E.PAYMENT_STARTED, E.PAYMENT_CONFIRMED], domain.Actor.PROVIDER)
        with pytest.raises(domain.InvalidTransition):
            registrations.transition(row.id, E.APPROVE, domain.Actor.SYSTEM)

    def test_apply_events_needs_events(self, app) -> None:
        row = registrations.create_registration(_domain_team())
        with pytest.raises(ValueError):
            registrations.apply_events(row.id, [], domain.Actor.SYSTEM)

    def test_get_unknown(self, app) -> None:
        with pytest.raises(domain.NotFound):
            registrations.get_registration(12345)


# ─────────────────────────── Models ───────────────────────────────────────────

class TestModelConversion:
    def test_team_round_trip(self, app) -> None:
        team = _domain_team(2)
        row = registrations.create_registration(team)
        back = row.to_domain()
        assert back.kind is team.kind
        assert back.name == "Rim Runners"
        assert [(p.name, p.email, p.age) for p in back.players] == [(p.name, p.email, p.age) for p in team.players]
        assert all(p.id is not None for p in back.players)
        assert back.donation_amount == Decimal("40")
        assert back.created_at.tzinfo is not None

    def test_sponsor_tier_is_derived(self, app) -> None:
        row = Sponsor.from_domain(domain.Sponsor(name="  Corner Cafe ", email="cafe@x.io", donation_amount="99.99"))
        db.session.add(row)
        db.session.commit()
        assert row.name == "Corner Cafe"
        assert row.donation_amount_cents == 9999
        assert row.tier is domain.SponsorTier.BRONZE
        data = row.as_dict()
        assert data["donation_amount"] == "99.99"
        assert data["tier"] == "Bronze"

    def test_volunteer_as_dict_lists_roles(self, app) -> None:
        row = Volunteer.from_domain(
            domain.Volunteer(name="Ty", email="ty@x.io", phone="512-555-0123", age_or_rank="14")
        )
        db.session.add(row)
        db.session.commit()
        assert row.as_dict()["eligible_roles"] == ["General Support", "Photography/Social Media", "Setup/Cleanup"]

    def test_payment_cents(self, app) -> None:
        team = registrations.create_registration(_domain_team(1))
        p = Payment.from_domain(
            domain.Payment(registration_id=team.id, method=domain.PaymentMethod.CASHAPP, amount=Decimal("20.5"))
        )
        db.session.add(p)
        db.session.commit()
        assert p.amount_cents == 2050
        assert p.to_domain().amount == Decimal("20.50")


# ─────────────────────────── Payments ─────────────────────────────────────────

class TestPaymentService:
    def test_webhook_events_are_stored_once(self, app) -> None:
        first = payments.record_webhook("WH-A", "PAYMENT.CAPTURE.COMPLETED", {"id": "WH-A"}, transaction_id="CAP-A")
        again = payments.record_webhook("WH-A", "PAYMENT.CAPTURE.COMPLETED", {"id": "WH-A"})
        assert first is not None
        assert first.transaction_id == "CAP-A"
        assert again is None
        assert db.session.query(WebhookEvent).count() == 1

    def test_forget_allows_reprocessing(self, app) -> None:
        payments.record_webhook("WH-B", "PAYMENT.CAPTURE.DENIED", {})
        payments.forget_webhook("WH-B")
        assert payments.record_webhook("WH-B", "PAYMENT.CAPTURE.DENIED", {}) is not None

    def test_finish_records_outcome(self, app) -> None:
        row = payments.record_webhook("WH-C", "PAYMENT.CAPTURE.COMPLETED", {})
        payments.finish_webhook(row, payments.WebhookResult("ignored", message="registration not found"))
        assert row.outcome == "ignored"
        assert row.processed_at is not None

    def test_verify_after_failed_payment_resubmits(self, app) -> None:
        row = registrations.create_registration(_domain_team(2))
        registrations.apply_events(row.id, [E.PAYMENT_STARTED, E.PAYMENT_DENIED], domain.Actor.PROVIDER)

        outcome = payments.verify_manual_payment(row.id, "venmo", amount="40.00", reference="venmo-1")
        assert outcome.state is S.PAYMENT_COMPLETED
        events = [h.event for h in registrations.history(row.id)]
        assert events == ["payment_started", "payment_denied", "resubmitted", "payment_started", "payment_confirmed"]

    def test_webhook_result_drops_empty_fields(self) -> None:
        assert payments.WebhookResult("duplicate", registration_id=3).as_dict() == {
            "outcome": "duplicate",
            "registration_id": 3,
        }


# ─────────────────────────── Stats ────────────────────────────────────────────

class TestStats:
    def test_totals_and_cap(self, app) -> None:
        team = registrations.create_registration(_domain_team(4))
        payments.verify_manual_payment(team.id, "cash")
        db.session.add(Sponsor(name="Bank", email="b@x.io", donation_amount_cents=50000, approved=True))
        db.session.commit()

        stats = fundraising_stats(Decimal("400"))
        assert stats["total_raised"] == "580.00"
        assert stats["percent_of_goal"] == 100
        assert stats["approved_sponsors"] == 1

    def test_zero_goal(self, app) -> None:
        assert fundraising_stats(Decimal("0"))["percent_of_goal"] == 0

    def test_admin_breakdown_lists_every_status(self, app) -> None:
        data = admin_stats(Decimal("400"))
        assert set(data["registrations_by_status"]) == {s.value for s in S}
        assert data["total_volunteers"] == 0
