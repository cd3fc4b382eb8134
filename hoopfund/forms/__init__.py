from .registration_form import PlayerForm, RegistrationForm
from .sponsor_form import SponsorForm
from .validators import json_formdata
from .volunteer_form import VolunteerForm

__all__ = ["PlayerForm", "RegistrationForm", "SponsorForm", "VolunteerForm", "json_formdata"]
