import random
from decimal import Decimal, InvalidOperation

import click
from faker import Faker
from flask import Flask
from flask.cli import AppGroup

from hoopfund import domain
from hoopfund.domain.records import money_to_str
from hoopfund.domain.tiers import TIER_BENEFITS
from hoopfund.domain.types import ADULT_AGE, MAX_TEAM_SIZE
from hoopfund.extensions import db

fake = Faker()

hoopfund_cli = AppGroup("hoopfund", help="hoopfund maintenance and demo tools.")


@hoopfund_cli.command("init-db")
def init_db():
    """Create all tables (use `flask db upgrade` for managed databases)."""
    from hoopfund import models  # noqa: F401

    db.create_all()
    click.secho("✅ Tables created.", fg="bright_green", bold=True)


@hoopfund_cli.command("seed-demo")
@click.option("--teams", default=6, show_default=True, help="Number of demo registrations.")
@click.option("--sponsors", default=8, show_default=True, help="Number of demo sponsors.")
@click.option("--volunteers", default=5, show_default=True, help="Number of demo volunteers.")
@click.option("--clear", is_flag=True, help="Clear existing data first.")
def seed_demo(teams, sponsors, volunteers, clear):
    """🌱 Seed demo registrations, sponsors and volunteers."""
    from hoopfund.models import Payment, Player, Sponsor, StatusChange, Team, Volunteer, WebhookEvent
    from hoopfund.services.registrations import create_registration

    if clear:
        click.secho("🧹 Clearing data…", fg="yellow")
        for model in (WebhookEvent, StatusChange, Payment, Player, Team, Sponsor, Volunteer):
            deleted = db.session.query(model).delete()
            click.secho(f"  ↳ {deleted} {model.__name__} removed", fg="yellow")
        db.session.commit()

    for _ in range(teams):
        create_registration(_fake_team())

    for _ in range(sponsors):
        s = domain.Sponsor(
            name=fake.company(),
            email=fake.unique.company_email(),
            donation_amount=Decimal(random.choice([25, 50, 75, 100, 150, 250, 500])),
            website=fake.url(),
            approved=fake.boolean(70),
        )
        db.session.add(Sponsor.from_domain(s))

    for _ in range(volunteers):
        age = random.randint(12, 60)
        eligible = sorted(r.value for r in domain.eligible_roles(age))
        v = domain.Volunteer(
            name=fake.name(),
            email=fake.unique.email(),
            phone=fake.numerify("512-###-####"),
            age_or_rank=str(age),
            availability="Saturday morning",
            skills=fake.sentence(nb_words=6),
            role_preference=random.choice(eligible),
            guardian_supervision=domain.requires_guardian(age),
        )
        db.session.add(Volunteer.from_domain(v))

    db.session.commit()
    click.secho(
        f"✅ Seeded {teams} registrations, {sponsors} sponsors, {volunteers} volunteers.",
        fg="bright_green",
        bold=True,
    )


def _fake_player() -> domain.Player:
    age = random.randint(10, 45)
    return domain.Player(
        name=fake.name(),
        email=fake.unique.email(),
        age=age,
        emergency_contact=fake.name(),
        emergency_contact_phone=fake.numerify("512-###-####"),
        parental_consent=age < ADULT_AGE,
    )


def _fake_team() -> domain.Team:
    if fake.boolean(30):
        return domain.Team(kind=domain.RegistrationKind.INDIVIDUAL, players=(_fake_player(),))
    size = random.randint(2, MAX_TEAM_SIZE)
    return domain.Team(
        kind=domain.RegistrationKind.TEAM,
        name=f"{fake.city()} {fake.word().capitalize()}s",
        players=tuple(_fake_player() for _ in range(size)),
    )


@hoopfund_cli.command("fee")
@click.argument("kind", type=click.Choice([k.value for k in domain.RegistrationKind]))
@click.argument("size", type=click.IntRange(min=1), default=1)
def fee(kind, size):
    """Print the registration fee for KIND with SIZE players."""
    amount = domain.compute_registration_fee(kind, size)
    click.echo(f"{kind} x{size}: ${money_to_str(amount)}")


@hoopfund_cli.command("tier")
@click.argument("amount")
def tier(amount):
    """Print the sponsor tier for a donation AMOUNT."""
    try:
        value = Decimal(amount)
    except InvalidOperation:
        raise click.BadParameter(f"{amount!r} is not a number", param_hint="AMOUNT") from None
    if value < 0:
        raise click.BadParameter("amount cannot be negative", param_hint="AMOUNT")
    t = domain.classify_sponsor_tier(value)
    click.echo(f"${money_to_str(value)}: {t.value} ({TIER_BENEFITS[t]})")


def register_cli(app: Flask) -> None:
    app.cli.add_command(hoopfund_cli)
