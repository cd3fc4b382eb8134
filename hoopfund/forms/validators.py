# hoopfund/forms/validators.py
from __future__ import annotations

from typing import Any, Callable, Mapping

from werkzeug.datastructures import MultiDict
from wtforms.validators import StopValidation, ValidationError

from hoopfund.domain import validation


class Predicate:
    """Wrap a pure field predicate as a WTForms validator.

    Empty values are left to DataRequired/Optional so messages don't stack.
    """

    def __init__(self, check: Callable[[Any], bool], message: str) -> None:
        self.check = check
        self.message = message

    def __call__(self, form, field) -> None:
        value = field.data
        if value is None or (isinstance(value, str) and not value.strip()):
            return
        if not self.check(value):
            raise ValidationError(self.message)


def ValidEmail(message: str = "Please enter a valid email address.") -> Predicate:
    return Predicate(validation.validate_email, message)


def ValidPhone(message: str = "Please enter a valid phone number, e.g. (555) 123-4567.") -> Predicate:
    return Predicate(validation.validate_phone, message)


def ValidName(message: str = "Name must be at least 2 characters.") -> Predicate:
    return Predicate(validation.validate_name, message)


class ValidAge:
    def __init__(self, message: str = f"Age must be between {validation.MIN_AGE} and {validation.MAX_AGE}.") -> None:
        self.message = message

    def __call__(self, form, field) -> None:
        if field.data is None:
            return
        if not validation.validate_age(field.data):
            raise StopValidation(self.message)


class FiniteNumber:
    """Stop NaN / Infinity before range checks compare against them."""

    def __init__(self, message: str = "Please enter a number.") -> None:
        self.message = message

    def __call__(self, form, field) -> None:
        value = field.data
        if value is not None and not value.is_finite():
            raise StopValidation(self.message)


def strip(x: Any) -> Any:
    return x.strip() if isinstance(x, str) else x


def strip_lower(x: Any) -> Any:
    return x.strip().lower() if isinstance(x, str) else x


def json_formdata(payload: Mapping[str, Any]) -> MultiDict:
    """Flatten a JSON body into WTForms formdata.

    Lists of objects become ``name-<i>-<field>`` keys (FieldList/FormField
    naming); ``true`` becomes ``"y"`` and ``false``/``null`` are dropped, which
    is how BooleanField reads checkboxes.
    """
    out: MultiDict = MultiDict()

    def _add(prefix: str, value: Any) -> None:
        if isinstance(value, Mapping):
            for k, v in value.items():
                _add(f"{prefix}-{k}" if prefix else str(k), v)
        elif isinstance(value, (list, tuple)):
            for i, v in enumerate(value):
                _add(f"{prefix}-{i}", v)
        elif value is True:
            out.add(prefix, "y")
        elif value is False or value is None:
            return
        else:
            out.add(prefix, str(value))

    _add("", payload or {})
    return out
