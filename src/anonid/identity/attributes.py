# Copyright (c) anonid Contributors. All rights reserved.
# Licensed under the MIT License.
"""
Identity Attributes

Well-known profile and contact attributes, their type checks, and
attribute extraction across a holder's credentials.
"""

from __future__ import annotations

from datetime import date
from typing import Any, Iterable, Literal

from pydantic import BaseModel

from .models import Credential

AttributeType = Literal["string", "date", "boolean", "number"]


class AttributeField(BaseModel):
    """Schema entry for a well-known attribute."""

    name: str
    type: AttributeType = "string"
    required: bool = False
    label: str = ""

    @property
    def display_name(self) -> str:
        return self.label or self.name


BASIC_PROFILE_SCHEMA: list[AttributeField] = [
    AttributeField(name="givenName", label="First Name"),
    AttributeField(name="familyName", label="Last Name"),
    AttributeField(name="dateOfBirth", type="date", label="Date of Birth"),
    AttributeField(name="isOver18", type="boolean", label="Over 18"),
    AttributeField(name="nationality", label="Nationality"),
    AttributeField(name="occupation", label="Occupation"),
]

CONTACT_INFO_SCHEMA: list[AttributeField] = [
    AttributeField(name="email", label="Email Address"),
    AttributeField(name="phone", label="Phone Number"),
    AttributeField(name="street", label="Street Address"),
    AttributeField(name="city", label="City"),
    AttributeField(name="state", label="State/Province"),
    AttributeField(name="postalCode", label="Postal Code"),
    AttributeField(name="country", label="Country"),
]

ALL_SCHEMAS: list[AttributeField] = [*BASIC_PROFILE_SCHEMA, *CONTACT_INFO_SCHEMA]


def _is_blank(value: Any) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


def validate_attributes(
    attributes: dict[str, Any],
    schema: Iterable[AttributeField] = ALL_SCHEMAS,
) -> list[str]:
    """Type-check the well-known attributes present in *attributes*.

    Unknown attribute names are allowed and never reported.

    Returns:
        Human-readable problems; empty when the attributes are acceptable.
    """
    errors: list[str] = []
    for field in schema:
        value = attributes.get(field.name)
        if _is_blank(value):
            if field.required:
                errors.append(f"{field.display_name} is required")
            continue

        if field.type == "date":
            try:
                date.fromisoformat(str(value))
            except ValueError:
                errors.append(f"{field.display_name} must be a valid date")
        elif field.type == "boolean":
            if not isinstance(value, bool):
                errors.append(f"{field.display_name} must be true or false")
        elif field.type == "number":
            try:
                float(value)
            except (TypeError, ValueError):
                errors.append(f"{field.display_name} must be a number")
    return errors


def extract_attributes(credentials: Iterable[Credential]) -> dict[str, Any]:
    """Merge the attribute views of *credentials*.

    Credentials are applied in list order, so when two credentials carry
    the same attribute the later one wins regardless of issuance date.
    """
    merged: dict[str, Any] = {}
    for credential in credentials:
        merged.update(credential.attributes)
    return merged
