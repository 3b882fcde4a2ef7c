"""
Intake Validation - Field-Level Error Maps

Pure functions that compute ValidationErrors for a single leak property,
for the whole intake form, and for the signature block.

All failures accumulate; nothing short-circuits after the first error.
An empty map means the input is submittable.
"""

from __future__ import annotations

import re
from typing import Final

from core.intake.schema import (
    IntakeForm,
    LeakProperty,
    REQUIRED_PROPERTY_FIELDS,
    ValidationErrors,
    to_camel,
)


# =============================================================================
# Patterns
# =============================================================================

EMAIL_REGEX: Final = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$", re.IGNORECASE)

# At least 10 characters drawn from digits, + ( ) - and whitespace
PHONE_REGEX: Final = re.compile(r"^[0-9+()\-\s]{10,}$")

AT_LEAST_ONE_PROPERTY: Final = "At least one property is required."


def is_email(value: str) -> bool:
    """Loose syntactic email check, no RFC validation."""
    return bool(EMAIL_REGEX.match(value.strip()))


def is_phone(value: str) -> bool:
    return bool(PHONE_REGEX.match(value.strip()))


# =============================================================================
# Validation Functions
# =============================================================================


def validate_property(prop: LeakProperty) -> ValidationErrors:
    """
    Validate one leak property.

    Only site name, address, city and zip are checked. Enums and the
    tenant phone/email sub-fields are accepted as-is.

    Args:
        prop: LeakProperty to validate

    Returns:
        ValidationErrors keyed by camelCase field name
    """
    errors: ValidationErrors = {}

    for attr, label in REQUIRED_PROPERTY_FIELDS.items():
        if not getattr(prop, attr).strip():
            errors[to_camel(attr)] = f"{label} is required."

    return errors


def validate_form(form: IntakeForm) -> ValidationErrors:
    """
    Validate the complete intake form.

    Property errors are keyed by bare field name, so when several
    properties are invalid only the first error per key is kept.

    Args:
        form: IntakeForm to validate

    Returns:
        ValidationErrors, empty when the form is submittable
    """
    errors: ValidationErrors = {}

    # === Client block ===
    if not form.client_account_name.strip():
        errors["clientAccountName"] = "Account Name is required."
    if not form.client_account_contact_name.strip():
        errors["clientAccountContactName"] = "Account Contact Name is required."
    if not is_email(form.client_email):
        errors["clientEmail"] = "Enter a valid email address."
    if not is_phone(form.client_phone):
        errors["clientPhone"] = "Enter a valid phone number."

    # === Billing block (email optional) ===
    if form.billing_bill_to_email.strip() and not is_email(form.billing_bill_to_email):
        errors["billingBillToEmail"] = "Enter a valid billing email address."

    # === Properties ===
    # siteName is reused so the message renders beside the property section
    if not form.leaking_properties:
        errors["siteName"] = AT_LEAST_ONE_PROPERTY

    for prop in form.leaking_properties:
        for key, message in validate_property(prop).items():
            if key not in errors:
                errors[key] = message

    return errors


def validate_signature(
    signature_data: str,
    signature_name: str,
    billing_terms_acknowledged: bool,
) -> ValidationErrors:
    """
    Validate the signature block shown below the form.

    Args:
        signature_data: Image data string, empty if unsigned
        signature_name: Printed name of the signer
        billing_terms_acknowledged: Whether the billing terms box is checked

    Returns:
        ValidationErrors using the signature-only keys
    """
    errors: ValidationErrors = {}

    if not signature_data.strip():
        errors["signature"] = "Signature is required."
    if not signature_name.strip():
        errors["signatureName"] = "Signature name is required."
    if not billing_terms_acknowledged:
        errors["billingTermsAcknowledged"] = "You must acknowledge the billing terms."

    return errors
