from flask_wtf import FlaskForm
from flask_wtf.file import FileAllowed, FileField, FileSize
from wtforms import DecimalField, StringField
from wtforms.validators import (DataRequired, InputRequired, Length,
                                NumberRange, Optional, ValidationError)

from hoopfund import domain
from hoopfund.services.storage import MAX_LOGO_BYTES

from .validators import FiniteNumber, ValidEmail, ValidName, ValidPhone, strip, strip_lower


class SponsorForm(FlaskForm):
    """Sponsor intake: name, email, donation amount, optional logo upload."""

    class Meta:
        csrf = False

    name = StringField(
        "Business or Individual Name",
        validators=[
            DataRequired(message="Name is required."),
            ValidName(),
            Length(max=120, message="Name must be under 120 characters."),
        ],
        filters=[strip],
    )

    email = StringField(
        "Email",
        validators=[DataRequired(message="Email is required."), ValidEmail(), Length(max=255)],
        filters=[strip_lower],
    )

    donation_amount = DecimalField(
        "Donation Amount (USD)",
        places=2,
        validators=[
            InputRequired(message="Donation amount is required."),
            FiniteNumber(message="Donation amount must be a number."),
            NumberRange(min=0, message="Donation amount cannot be negative."),
        ],
    )

    website = StringField("Website", validators=[Optional(), Length(max=255)], filters=[strip])
    contact_name = StringField("Contact Name", validators=[Optional(), Length(max=120)], filters=[strip])
    phone = StringField("Phone", validators=[Optional(), ValidPhone()], filters=[strip])

    logo = FileField(
        "Logo (optional)",
        validators=[
            Optional(),
            FileAllowed(["png", "jpg", "jpeg", "svg"], "Logo must be a PNG, JPEG or SVG image."),
            FileSize(max_size=MAX_LOGO_BYTES, message="Logo must be 5 MB or smaller."),
        ],
    )

    def validate_donation_amount(self, field):
        # two decimal places at most; the amount is stored in whole cents
        if field.data is not None and field.data != round(field.data, 2):
            raise ValidationError("Donation amount can have at most two decimal places.")

    def to_domain(self, logo_url=None) -> domain.Sponsor:
        return domain.Sponsor(
            name=self.name.data,
            email=self.email.data,
            donation_amount=self.donation_amount.data,
            website=self.website.data or None,
            logo_url=logo_url,
        )
