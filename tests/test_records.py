"""
Unit tests — persistence record shapes.

A value written to its row shape and read back must compare equal; money
travels as exact decimal strings and timestamps carry an explicit UTC offset.
"""
from __future__ import annotations

from datetime import datetime, timedelta, timezone
from decimal import Decimal

import pytest

from hoopfund.domain import (
    Payment,
    PaymentMethod,
    PaymentStatus,
    Player,
    RegistrationKind,
    RegistrationStatus,
    Sponsor,
    Team,
    ValidationError,
    Volunteer,
)
from hoopfund.domain.records import (
    money_from,
    money_to_str,
    payment_from_record,
    payment_to_record,
    sponsor_from_record,
    sponsor_to_record,
    team_from_record,
    team_to_record,
    ts_from,
    volunteer_from_record,
    volunteer_to_record,
)

CREATED = datetime(2026, 4, 2, 18, 5, 30, tzinfo=timezone.utc)


def _team() -> Team:
    return Team(
        id=11,
        kind=RegistrationKind.TEAM,
        name="Hoop Dreams",
        status=RegistrationStatus.PAYMENT_COMPLETED,
        transaction_id="CAP-77",
        created_at=CREATED,
        players=(
            Player(id=1, name="Ava Stone", email="ava@example.com", age=16, emergency_contact="Mia Stone",
                   emergency_contact_phone="512-555-0101", parental_consent=True),
            Player(id=2, name="Ben Cruz", email="ben@example.com", age=19, emergency_contact="Rosa Cruz",
                   emergency_contact_phone="512-555-0102"),
        ),
    )


# ─────────────────────────── Scalars ──────────────────────────────────────────

class TestScalars:
    def test_money_is_exact(self) -> None:
        assert money_to_str(Decimal("20")) == "20"
        assert money_to_str(Decimal("99.99")) == "99.99"
        assert money_from("0.10") + money_from("0.20") == Decimal("0.30")

    def test_bad_money(self) -> None:
        with pytest.raises(ValidationError) as exc:
            money_from("twenty", "donation_amount")
        assert exc.value.field == "donation_amount"

    @pytest.mark.parametrize("raw", ["NaN", "Infinity", "-Infinity", "sNaN"])
    def test_non_finite_money(self, raw: str) -> None:
        with pytest.raises(ValidationError) as exc:
            money_from(raw, "amount")
        assert exc.value.field == "amount"

    def test_zulu_and_offset_timestamps_normalise_to_utc(self) -> None:
        assert ts_from("2026-04-02T18:05:30Z") == CREATED
        assert ts_from("2026-04-02T13:05:30-05:00") == CREATED

    def test_naive_timestamp_is_read_as_utc(self) -> None:
        assert ts_from("2026-04-02T18:05:30").utcoffset() == timedelta(0)

    def test_bad_timestamp(self) -> None:
        with pytest.raises(ValidationError):
            ts_from("yesterday")


# ─────────────────────────── Teams ────────────────────────────────────────────

class TestTeamRecord:
    def test_shape(self) -> None:
        row = team_to_record(_team())
        assert row["registration_type"] == "team"
        assert row["donation_amount"] == "40"
        assert row["status"] == "payment_completed"
        assert row["approved"] is False
        assert row["created_at"] == "2026-04-02T18:05:30+00:00"
        assert row["players"][0] == {
            "id": 1,
            "player_name": "Ava Stone",
            "email": "ava@example.com",
            "age": 16,
            "age_category": "high-school-adult",
            "emergency_contact_name": "Mia Stone",
            "emergency_contact_phone": "512-555-0101",
            "parent_consent": True,
        }

    def test_round_trip(self) -> None:
        team = _team()
        assert team_from_record(team_to_record(team)) == team

    def test_tampered_fee_is_rejected(self) -> None:
        row = team_to_record(_team())
        row["donation_amount"] = "5"
        with pytest.raises(ValidationError) as exc:
            team_from_record(row)
        assert exc.value.field == "donation_amount"

    def test_unknown_status_is_rejected(self) -> None:
        row = team_to_record(_team())
        row["status"] = "waitlisted"
        with pytest.raises(ValidationError):
            team_from_record(row)


# ─────────────────────────── Sponsors / Volunteers / Payments ─────────────────

class TestOtherRecords:
    def test_sponsor_round_trip(self) -> None:
        s = Sponsor(id=3, name="Lone Star Tires", email="ops@tires.test", donation_amount=Decimal("125.50"),
                    website="https://tires.test", approved=True, created_at=CREATED, logo_url="/media/logos/a.png")
        row = sponsor_to_record(s)
        assert row["donation_amount"] == "125.50"
        assert sponsor_from_record(row) == s

    def test_volunteer_round_trip(self) -> None:
        v = Volunteer(id=4, name="Dee Park", email="dee@example.com", phone="512-555-0103", age_or_rank="Eagle Scout",
                      availability="Sat AM", skills="first aid", role_preference="Safety/First Aid",
                      created_at=CREATED)
        assert volunteer_from_record(volunteer_to_record(v)) == v

    def test_payment_round_trip(self) -> None:
        p = Payment(id=9, registration_id=11, method=PaymentMethod.CASHAPP, amount=Decimal("40.00"),
                    status=PaymentStatus.COMPLETED, transaction_id="ref-1", created_at=CREATED, updated_at=CREATED)
        row = payment_to_record(p)
        assert row["payment_method"] == "cashapp"
        assert row["amount"] == "40.00"
        assert payment_from_record(row) == p

    def test_payment_with_unknown_method_is_rejected(self) -> None:
        row = payment_to_record(Payment(registration_id=1, method=PaymentMethod.CASH, amount="20"))
        row["payment_method"] = "bitcoin"
        with pytest.raises(ValidationError):
            payment_from_record(row)
