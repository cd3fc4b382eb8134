# hoopfund/forms/registration_form.py
from __future__ import annotations

from flask_wtf import FlaskForm
from wtforms import (BooleanField, FieldList, Form, FormField, IntegerField,
                     SelectField, StringField)
from wtforms.validators import (DataRequired, InputRequired, Length, Optional,
                                ValidationError)

from hoopfund import domain
from hoopfund.domain.types import ADULT_AGE, MAX_TEAM_SIZE

from .validators import ValidAge, ValidEmail, ValidName, ValidPhone, strip, strip_lower

REGISTRATION_TYPE_CHOICES = [
    (domain.RegistrationKind.INDIVIDUAL.value, "Individual Player"),
    (domain.RegistrationKind.TEAM.value, "Full Team"),
]


class PlayerForm(Form):
    """One roster entry. Plain Form: it only ever lives inside a FormField."""

    name = StringField(
        "Player Name",
        validators=[DataRequired(message="Player name is required."), ValidName(), Length(max=120)],
        filters=[strip],
    )
    email = StringField(
        "Email",
        validators=[DataRequired(message="Email is required."), ValidEmail(), Length(max=255)],
        filters=[strip_lower],
    )
    age = IntegerField("Age", validators=[InputRequired(message="Age is required."), ValidAge()])
    emergency_contact_name = StringField(
        "Emergency Contact",
        validators=[DataRequired(message="Emergency contact name is required."), Length(max=120)],
        filters=[strip],
    )
    emergency_contact_phone = StringField(
        "Emergency Contact Phone",
        validators=[DataRequired(message="Emergency contact phone is required."), ValidPhone()],
        filters=[strip],
    )
    parent_consent = BooleanField("Parent/Guardian Consent")

    def validate_parent_consent(self, field):
        age = self.age.data
        if isinstance(age, int) and age < ADULT_AGE and not field.data:
            raise ValidationError("Parental consent is required for players under 18.")

    def to_domain(self) -> domain.Player:
        return domain.Player(
            name=self.name.data,
            email=self.email.data,
            age=int(self.age.data),
            emergency_contact=self.emergency_contact_name.data,
            emergency_contact_phone=self.emergency_contact_phone.data,
            parental_consent=bool(self.parent_consent.data),
        )


class RegistrationForm(FlaskForm):
    class Meta:
        csrf = False

    registration_type = SelectField(
        "Registration Type",
        choices=REGISTRATION_TYPE_CHOICES,
        validators=[DataRequired(message="Registration type is required.")],
        filters=[strip_lower],
    )
    team_name = StringField(
        "Team Name",
        validators=[Optional(), Length(max=120, message="Team name must be under 120 characters.")],
        filters=[strip],
    )
    players = FieldList(FormField(PlayerForm), min_entries=0)
    medical_treatment_consent = BooleanField("Emergency Medical Treatment Consent")

    def validate_players(self, field):
        count = len(field.entries)
        if count < 1 or count > MAX_TEAM_SIZE:
            raise ValidationError(f"A registration needs between 1 and {MAX_TEAM_SIZE} players.")
        if self.registration_type.data == domain.RegistrationKind.INDIVIDUAL.value and count != 1:
            raise ValidationError("Individual registrations have exactly one player.")

    @property
    def kind(self) -> domain.RegistrationKind:
        return domain.RegistrationKind(self.registration_type.data)

    def to_domain(self) -> domain.Team:
        return domain.Team(
            kind=self.kind,
            name=self.team_name.data or None,
            players=tuple(entry.form.to_domain() for entry in self.players.entries),
        )
