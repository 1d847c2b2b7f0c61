"""
Field validation for the booking and payment forms.

Each form is a list of field definitions: a required-message, an optional
pattern with its own message, and an optional normalizer. Validation never
raises; it returns one message per failing field so the caller can show
them inline and block the step.

Usage:
    errors = BOOKING_FORM.validate({"client_email": "not-an-email", ...})
    if not errors:
        values = BOOKING_FORM.normalize(raw_values)
"""

import logging
import re
from dataclasses import dataclass
from typing import Callable, Mapping, Optional, Pattern

from pixelperfect.utils import normalize_phone

logger = logging.getLogger(__name__)

EMAIL_PATTERN = re.compile(r"^\S+@\S+$", re.IGNORECASE)
CARD_NUMBER_PATTERN = re.compile(r"^[0-9]{16}$")
EXPIRY_PATTERN = re.compile(r"^(0[1-9]|1[0-2])/([0-9]{2})$")
CVV_PATTERN = re.compile(r"^[0-9]{3,4}$")


@dataclass(frozen=True)
class FieldDefinition:
    """Schema for a single form field."""

    name: str
    required_message: str = ""
    required: bool = True
    pattern: Optional[Pattern[str]] = None
    pattern_message: str = ""
    normalizer: Optional[Callable[[str], str]] = None


class Form:
    """An ordered set of field definitions."""

    def __init__(self, name: str, fields: list[FieldDefinition]) -> None:
        self.name = name
        self.fields = fields

    @property
    def field_names(self) -> list[str]:
        return [f.name for f in self.fields]

    def validate(self, values: Mapping[str, Optional[str]]) -> dict[str, str]:
        """Return ``{field: message}`` for every failing field; empty if valid."""
        errors: dict[str, str] = {}
        for defn in self.fields:
            value = (values.get(defn.name) or "").strip()
            if not value:
                if defn.required:
                    errors[defn.name] = defn.required_message
                continue
            if defn.pattern is not None and not defn.pattern.match(value):
                errors[defn.name] = defn.pattern_message
        if errors:
            logger.debug("%s form rejected: %s", self.name, sorted(errors))
        return errors

    def normalize(self, values: Mapping[str, Optional[str]]) -> dict[str, str]:
        """Strip values and apply field-specific normalization."""
        cleaned: dict[str, str] = {}
        for defn in self.fields:
            value = (values.get(defn.name) or "").strip()
            if value and defn.normalizer is not None:
                value = defn.normalizer(value)
            cleaned[defn.name] = value
        return cleaned


BOOKING_FORM = Form(
    "booking",
    [
        FieldDefinition("service_id", "Please select a service"),
        FieldDefinition("date", "Please select a date"),
        FieldDefinition("time", "Please select a time"),
        FieldDefinition("client_name", "Name is required"),
        FieldDefinition(
            "client_email",
            "Email is required",
            pattern=EMAIL_PATTERN,
            pattern_message="Invalid email address",
        ),
        FieldDefinition("client_phone", "Phone number is required", normalizer=normalize_phone),
        FieldDefinition("special_requests", required=False),
    ],
)

PAYMENT_FORM = Form(
    "payment",
    [
        FieldDefinition(
            "card_number",
            "Card number is required",
            pattern=CARD_NUMBER_PATTERN,
            pattern_message="Please enter a valid 16-digit card number",
        ),
        FieldDefinition(
            "expiry_date",
            "Expiry date is required",
            pattern=EXPIRY_PATTERN,
            pattern_message="Please enter MM/YY format",
        ),
        FieldDefinition(
            "cvv",
            "CVV is required",
            pattern=CVV_PATTERN,
            pattern_message="Please enter a valid CVV",
        ),
        FieldDefinition("cardholder_name", "Cardholder name is required"),
    ],
)
