"""
Prefill Merge - Lookup Payloads into Form State

Merges partial client, billing and leak records returned by a lookup
into the current form without discarding unrelated fields.

Lookup payloads use the upstream PascalCase names (AccountName,
BillToCity, SiteName, ...). Missing or null values are repaired by
coercion to empty-string / False defaults; a prefill never raises.
"""

from __future__ import annotations

import dataclasses
from enum import Enum
from typing import Any, Final, Optional

from core.intake.schema import (
    IntakeForm,
    LeakLocation,
    LeakNear,
    LeakProperty,
    RoofPitch,
)


# =============================================================================
# Lookup Enum Tables
# =============================================================================

# The lookup endpoint serialises enums as zero-based ordinals, unlike the
# one-based codes the intake endpoint accepts (see core.intake.payload).
LOOKUP_LEAK_LOCATIONS: Final[dict[int, LeakLocation]] = {
    0: LeakLocation.FRONT,
    1: LeakLocation.MIDDLE,
    2: LeakLocation.BACK,
}

LOOKUP_LEAK_NEAR: Final[dict[int, LeakNear]] = {
    0: LeakNear.HVAC_DUCT,
    1: LeakNear.SKYLIGHT,
    2: LeakNear.WALL,
    3: LeakNear.DRAIN,
    4: LeakNear.OTHER,
}

LOOKUP_ROOF_PITCHES: Final[dict[int, RoofPitch]] = {
    0: RoofPitch.FLAT_ROOF,
    1: RoofPitch.STEEP_SHINGLE_TILE,
}

BILLING_PAYLOAD_KEYS: Final[tuple[str, ...]] = (
    "EntityBillToName",
    "BillToAddress",
    "BillToAddress2",
    "BillToCity",
    "BillToZip",
    "BillToEmail",
)


# =============================================================================
# Helpers
# =============================================================================


def _value(payload: dict[str, Any], *keys: str) -> Any:
    """First non-None value among keys, also trying each key's camelCase."""
    for key in keys:
        for candidate in (key, key[:1].lower() + key[1:]):
            value = payload.get(candidate)
            if value is not None:
                return value
    return None


def _text(payload: dict[str, Any], *keys: str) -> str:
    value = _value(payload, *keys)
    return "" if value is None else str(value)


def _flag(payload: dict[str, Any], key: str) -> bool:
    return bool(_value(payload, key))


def _identity(payload: dict[str, Any], *keys: str) -> Optional[int]:
    value = _value(payload, *keys)
    if value is None:
        return None
    try:
        return int(value)
    except (TypeError, ValueError):
        return None


def _enum(value: Any, table: dict[int, Enum], enum_cls: type[Enum], default: Enum) -> Enum:
    """Resolve a numeric lookup code or a string enum name."""
    if isinstance(value, bool):
        return default
    if isinstance(value, int):
        return table.get(value, default)
    if isinstance(value, str):
        if value.strip().isdigit():
            return table.get(int(value.strip()), default)
        for member in enum_cls:
            if member.value == value:
                return member
    return default


# =============================================================================
# Merge Functions
# =============================================================================


def merge_client(form: IntakeForm, client: dict[str, Any]) -> IntakeForm:
    """
    Overwrite the client block of form from a client payload.

    Returns:
        New IntakeForm; all non-client fields are carried over unchanged
    """
    return dataclasses.replace(
        form.clone(),
        client_dynamo_account_id=_identity(client, "DynamoAccountId"),
        client_dynamo_count_id=_identity(client, "DynamoCountId", "DynamoContactId"),
        client_account_name=_text(client, "AccountName"),
        client_account_contact_name=_text(client, "AccountContactName"),
        client_email=_text(client, "Email"),
        client_phone=_text(client, "Phone"),
    )


def merge_billing(form: IntakeForm, billing: dict[str, Any]) -> IntakeForm:
    """
    Overwrite the billing block of form from a billing payload.

    Returns:
        New IntakeForm; all non-billing fields are carried over unchanged
    """
    return dataclasses.replace(
        form.clone(),
        billing_dynamo_id=_identity(billing, "DynamoId"),
        billing_entity_bill_to_name=_text(billing, "EntityBillToName"),
        billing_bill_to_address=_text(billing, "BillToAddress"),
        billing_bill_to_address2=_text(billing, "BillToAddress2"),
        billing_bill_to_city=_text(billing, "BillToCity"),
        billing_bill_to_zip=_text(billing, "BillToZip"),
        billing_bill_to_email=_text(billing, "BillToEmail"),
    )


def merge_leak(leak: dict[str, Any]) -> LeakProperty:
    """
    Convert a lookup leak payload into a fully populated LeakProperty.

    The result is meant for the editor slot; it is never appended to the
    collection here.
    """
    template = LeakProperty.empty()
    return LeakProperty(
        dynamo_id=_identity(leak, "DynamoId"),
        job_no=_text(leak, "JobNo"),
        site_name=_text(leak, "SiteName"),
        site_address=_text(leak, "SiteAddress"),
        site_address2=_text(leak, "SiteAddress2"),
        site_city=_text(leak, "SiteCity"),
        site_zip=_text(leak, "SiteZip"),
        tenant_business_name=_text(leak, "TenantBusinessName"),
        tenant_contact_name=_text(leak, "TenantContactName"),
        tenant_contact_phone=_text(leak, "TenantContactPhone"),
        tenant_contact_cell=_text(leak, "TenantContactCell"),
        tenant_contact_email=_text(leak, "TenantContactEmail"),
        hours_of_operation=_text(leak, "HoursOfOperation"),
        leak_location=_enum(
            _value(leak, "LeakLocation"), LOOKUP_LEAK_LOCATIONS, LeakLocation, template.leak_location
        ),
        leak_near=_enum(_value(leak, "LeakNear"), LOOKUP_LEAK_NEAR, LeakNear, template.leak_near),
        leak_near_other=_text(leak, "LeakNearOther"),
        has_access_code=_flag(leak, "HasAccessCode"),
        access_code=_text(leak, "AccessCode"),
        is_saturday_access_permitted=_flag(leak, "IsSaturdayAccessPermitted"),
        is_key_required=_flag(leak, "IsKeyRequired"),
        is_ladder_required=_flag(leak, "IsLadderRequired"),
        roof_pitch=_enum(
            _value(leak, "RoofPitch"), LOOKUP_ROOF_PITCHES, RoofPitch, template.roof_pitch
        ),
        comments=_text(leak, "Comments"),
    )


def reduce_billings(billings: list[dict[str, Any]]) -> Optional[dict[str, Any]]:
    """
    Fold several billing candidates into one best-guess record.

    Each field takes the first non-empty value in candidate order;
    DynamoId takes the first non-None value.

    Returns:
        Reduced billing payload, or None when there are no candidates
    """
    if not billings:
        return None
    if len(billings) == 1:
        return dict(billings[0])

    merged: dict[str, Any] = {"DynamoId": None}
    for key in BILLING_PAYLOAD_KEYS:
        merged[key] = ""

    for candidate in billings:
        if merged["DynamoId"] is None:
            merged["DynamoId"] = _value(candidate, "DynamoId")
        for key in BILLING_PAYLOAD_KEYS:
            if not merged[key]:
                merged[key] = _text(candidate, key)

    return merged
