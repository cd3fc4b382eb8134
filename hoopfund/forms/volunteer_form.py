from __future__ import annotations

from flask_wtf import FlaskForm
from wtforms import BooleanField, SelectField, StringField, TextAreaField
from wtforms.validators import DataRequired, Length, Optional, ValidationError

from hoopfund import domain
from hoopfund.domain import validation
from hoopfund.domain.volunteers import parse_age, requires_guardian

from .validators import ValidEmail, ValidName, ValidPhone, strip, strip_lower

ROLE_CHOICES = [("", "No preference")] + [(r.value, r.value) for r in domain.RoleName]


class VolunteerForm(FlaskForm):
    class Meta:
        csrf = False

    name = StringField(
        "Full Name",
        validators=[DataRequired(message="Name is required."), ValidName(), Length(max=120)],
        filters=[strip],
    )
    email = StringField(
        "Email",
        validators=[DataRequired(message="Email is required."), ValidEmail(), Length(max=255)],
        filters=[strip_lower],
    )
    phone = StringField(
        "Phone",
        validators=[DataRequired(message="Phone is required."), ValidPhone()],
        filters=[strip],
    )
    age_or_rank = StringField(
        "Age or Rank",
        validators=[DataRequired(message="Age or rank is required."), Length(max=64)],
        filters=[strip],
    )
    availability = TextAreaField("Dates Available", validators=[Optional(), Length(max=2000)], filters=[strip])
    skills = TextAreaField("Skills", validators=[Optional(), Length(max=2000)], filters=[strip])
    role_preference = SelectField("Role Preference", choices=ROLE_CHOICES, validate_choice=True, default="")
    guardian_supervision = BooleanField("Guardian will supervise")

    @property
    def age(self):
        return parse_age(self.age_or_rank.data)

    def validate_age_or_rank(self, field):
        age = self.age
        if age is not None and not validation.validate_age(age):
            raise ValidationError(f"Age must be between {validation.MIN_AGE} and {validation.MAX_AGE}.")

    def validate_role_preference(self, field):
        age = self.age
        if not field.data or age is None:
            return
        if domain.RoleName(field.data) not in domain.eligible_roles(age):
            raise ValidationError(f"{field.data} is not available to volunteers aged {age}.")

    def validate_guardian_supervision(self, field):
        age = self.age
        if age is not None and requires_guardian(age) and not field.data:
            raise ValidationError("Volunteers under 14 need a parent or guardian to supervise.")

    def to_domain(self) -> domain.Volunteer:
        return domain.Volunteer(
            name=self.name.data,
            email=self.email.data,
            phone=self.phone.data,
            age_or_rank=self.age_or_rank.data,
            availability=self.availability.data or "",
            skills=self.skills.data or "",
            role_preference=self.role_preference.data or None,
            guardian_supervision=bool(self.guardian_supervision.data),
        )
