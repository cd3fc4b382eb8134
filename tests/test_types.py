"""
Unit tests — domain value types and the error taxonomy.

Covers:
  - Player: minors need parental consent, age category brackets
  - Team: roster size rules, derived fee, display name
  - Sponsor / Payment normalisation
  - ValidationError.from_form_errors flattening of nested WTForms errors
"""
from __future__ import annotations

from decimal import Decimal

import pytest

from hoopfund.domain import (
    AgeCategory,
    Payment,
    PaymentMethod,
    Player,
    RegistrationKind,
    RegistrationStatus,
    Sponsor,
    SponsorTier,
    Team,
    ValidationError,
)
from hoopfund.domain.errors import InvalidTransition, NotFound


def _player(name: str = "Jordan Lee", age: int = 21, consent: bool = False) -> Player:
    return Player(name=name, email="jordan@example.com", age=age, emergency_contact="Kim Lee", parental_consent=consent)


# ─────────────────────────── Players ──────────────────────────────────────────

class TestPlayer:
    def test_adult_needs_no_consent(self) -> None:
        p = _player(age=18)
        assert p.is_minor is False

    def test_minor_without_consent_is_rejected(self) -> None:
        with pytest.raises(ValidationError) as exc:
            _player(age=17)
        assert exc.value.field == "parent_consent"
        assert exc.value.http_status == 400

    def test_minor_with_consent(self) -> None:
        assert _player(age=12, consent=True).is_minor is True

    def test_blank_name_is_rejected(self) -> None:
        with pytest.raises(ValidationError):
            _player(name="   ")

    @pytest.mark.parametrize(
        "age,category",
        [
            (9, AgeCategory.ELEMENTARY),
            (10, AgeCategory.ELEMENTARY),
            (11, AgeCategory.MIDDLE_SCHOOL),
            (13, AgeCategory.MIDDLE_SCHOOL),
            (14, AgeCategory.HIGH_SCHOOL_ADULT),
            (35, AgeCategory.HIGH_SCHOOL_ADULT),
        ],
    )
    def test_age_category(self, age: int, category: AgeCategory) -> None:
        assert _player(age=age, consent=True).age_category is category


# ─────────────────────────── Teams ────────────────────────────────────────────

class TestTeam:
    def test_individual_has_exactly_one_player(self) -> None:
        with pytest.raises(ValidationError) as exc:
            Team(kind=RegistrationKind.INDIVIDUAL, players=(_player(), _player("Sam Poe")))
        assert exc.value.field == "players"

    def test_empty_roster_is_rejected(self) -> None:
        with pytest.raises(ValidationError):
            Team(kind=RegistrationKind.TEAM, players=())

    def test_more_than_four_is_rejected(self) -> None:
        with pytest.raises(ValidationError):
            Team(kind=RegistrationKind.TEAM, players=[_player(f"Player {i}") for i in range(5)])

    def test_new_team_defaults(self) -> None:
        team = Team(kind=RegistrationKind.TEAM, players=[_player(), _player("Sam Poe")], name="Net Rippers")
        assert isinstance(team.players, tuple)
        assert team.status is RegistrationStatus.PENDING_PAYMENT
        assert team.approved is False
        assert team.donation_amount == Decimal("40")
        assert team.display_name == "Net Rippers"

    def test_display_name_falls_back_to_first_player(self) -> None:
        team = Team(kind=RegistrationKind.INDIVIDUAL, players=[_player()], name="  ")
        assert team.display_name == "Jordan Lee's Team"

    def test_approved_follows_status(self) -> None:
        team = Team(kind=RegistrationKind.INDIVIDUAL, players=[_player()], status=RegistrationStatus.APPROVED)
        assert team.approved is True


# ─────────────────────────── Sponsors / Payments ──────────────────────────────

class TestSponsorAndPayment:
    def test_sponsor_amount_is_decimal_and_tier_derived(self) -> None:
        s = Sponsor(name="Corner Bakery", email="hi@bakery.test", donation_amount=150)
        assert s.donation_amount == Decimal("150")
        assert s.tier is SponsorTier.SILVER

    def test_negative_donation_is_rejected(self) -> None:
        with pytest.raises(ValidationError):
            Sponsor(name="Corner Bakery", email="hi@bakery.test", donation_amount=Decimal("-1"))

    def test_payment_currency_uppercased(self) -> None:
        p = Payment(registration_id=1, method=PaymentMethod.VENMO, amount="40", currency="usd")
        assert p.currency == "USD"
        assert p.amount == Decimal("40")

    def test_only_paypal_is_not_manual(self) -> None:
        assert PaymentMethod.PAYPAL.is_manual is False
        assert all(m.is_manual for m in PaymentMethod if m is not PaymentMethod.PAYPAL)


# ─────────────────────────── Errors ───────────────────────────────────────────

class TestErrors:
    def test_form_errors_are_flattened(self) -> None:
        err = ValidationError.from_form_errors(
            {
                "registration_type": ["Not a valid choice."],
                "players": [{"email": ["Email is required."]}, {}, {"age": ["Age is required."]}],
            }
        )
        assert err.field == "registration_type"
        assert err.message == "Not a valid choice."
        assert err.fields == {
            "registration_type": ["Not a valid choice."],
            "players-0-email": ["Email is required."],
            "players-2-age": ["Age is required."],
        }
        assert err.details()["fields"] == err.fields

    def test_field_list_level_messages_keep_the_list_name(self) -> None:
        err = ValidationError.from_form_errors({"players": ["A registration needs between 1 and 4 players."]})
        assert err.fields == {"players": ["A registration needs between 1 and 4 players."]}

    def test_http_statuses(self) -> None:
        assert InvalidTransition("approved", "reject").http_status == 409
        assert NotFound("registration", 7).http_status == 404
        assert NotFound("registration", 7).message == "registration 7 not found"
