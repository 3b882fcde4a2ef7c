"""
Dirty-State Detection

Pure comparisons against the pristine templates. Used to decide whether
an uncommitted editor record should be auto-committed on submit, and
whether resetting the form needs a confirmation prompt.
"""

from __future__ import annotations

from core.intake.schema import (
    FORM_STRING_FIELDS,
    IDENTITY_FIELDS,
    IntakeForm,
    LeakProperty,
    PROPERTY_BOOL_FIELDS,
    PROPERTY_ENUM_FIELDS,
    PROPERTY_STRING_FIELDS,
)


def is_property_dirty(prop: LeakProperty) -> bool:
    """
    Check whether a property differs from the empty template.

    Every string, enum and bool field is compared, plus dynamo_id.
    """
    template = LeakProperty.empty()

    for name in PROPERTY_STRING_FIELDS + PROPERTY_ENUM_FIELDS + PROPERTY_BOOL_FIELDS:
        if getattr(prop, name) != getattr(template, name):
            return True

    return prop.dynamo_id != template.dynamo_id


def is_form_dirty(
    form: IntakeForm,
    service_order_lookup_value: str,
    email_lookup_value: str,
) -> bool:
    """
    Check whether resetting the form would discard anything.

    Args:
        form: Current form
        service_order_lookup_value: Free-text service order lookup input
        email_lookup_value: Free-text email lookup input

    Returns:
        True if the reset action must ask for confirmation
    """
    # Whitespace-only lookup inputs do not count
    if service_order_lookup_value.strip() or email_lookup_value.strip():
        return True

    initial = IntakeForm.initial()

    for name in FORM_STRING_FIELDS:
        if getattr(form, name) != getattr(initial, name):
            return True

    for name in IDENTITY_FIELDS:
        if getattr(form, name) is not None:
            return True

    return len(form.leaking_properties) > 0
