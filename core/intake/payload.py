"""
Payload Transformer - Intake Form to Upstream Wire Format

Maps the internal entity model (string enums, UI field names) onto the
request body expected by the upstream service intake API (camelCase
fields, numeric enum codes, primary leak plus additional leaks).

Everything here is pure and deterministic; no network I/O.
"""

from __future__ import annotations

from typing import Any, Final

from core.intake.schema import (
    IntakeForm,
    LeakLocation,
    LeakNear,
    LeakProperty,
    RoofPitch,
)


# =============================================================================
# Enum Code Tables
# =============================================================================

LEAK_LOCATION_CODES: Final[dict[LeakLocation, int]] = {
    LeakLocation.FRONT: 1,
    LeakLocation.MIDDLE: 2,
    LeakLocation.BACK: 3,
}

LEAK_NEAR_CODES: Final[dict[LeakNear, int]] = {
    LeakNear.HVAC_DUCT: 1,
    LeakNear.SKYLIGHT: 2,
    LeakNear.WALL: 3,
    LeakNear.DRAIN: 4,
    LeakNear.OTHER: 5,
}

ROOF_PITCH_CODES: Final[dict[RoofPitch, int]] = {
    RoofPitch.FLAT_ROOF: 1,
    RoofPitch.STEEP_SHINGLE_TILE: 2,
}

# Inverses, for records echoed back by the status endpoint
LEAK_LOCATION_FROM_CODE: Final[dict[int, LeakLocation]] = {
    code: member for member, code in LEAK_LOCATION_CODES.items()
}
LEAK_NEAR_FROM_CODE: Final[dict[int, LeakNear]] = {
    code: member for member, code in LEAK_NEAR_CODES.items()
}
ROOF_PITCH_FROM_CODE: Final[dict[int, RoofPitch]] = {
    code: member for member, code in ROOF_PITCH_CODES.items()
}


# =============================================================================
# Transformation
# =============================================================================


def to_leak_details(prop: LeakProperty) -> dict[str, Any]:
    """
    Map one LeakProperty to a wire leak-details record.

    Raises:
        KeyError: If an enum value is outside the code tables
    """
    return {
        "dynamoId": prop.dynamo_id,
        "jobNo": prop.job_no,
        "jobDate": None,  # assigned upstream
        "siteName": prop.site_name,
        "siteAddress": prop.site_address,
        "siteAddress2": prop.site_address2,
        "siteCity": prop.site_city,
        "siteZip": prop.site_zip,
        "tenantBusinessName": prop.tenant_business_name,
        "tenantContactName": prop.tenant_contact_name,
        "tenantContactPhone": prop.tenant_contact_phone,
        "tenantContactCell": prop.tenant_contact_cell,
        "tenantContactEmail": prop.tenant_contact_email,
        "hoursOfOperation": prop.hours_of_operation,
        "leakLocation": LEAK_LOCATION_CODES[prop.leak_location],
        "leakNear": LEAK_NEAR_CODES[prop.leak_near],
        "leakNearOther": prop.leak_near_other,
        "hasAccessCode": prop.has_access_code,
        "accessCode": prop.access_code,
        "isSaturdayAccessPermitted": prop.is_saturday_access_permitted,
        "isKeyRequired": prop.is_key_required,
        "isLadderRequired": prop.is_ladder_required,
        "roofPitch": ROOF_PITCH_CODES[prop.roof_pitch],
        "comments": prop.comments,
    }


def to_submission_payload(
    form: IntakeForm,
    signature_image: str,
    signature_name: str,
) -> dict[str, Any]:
    """
    Build the upstream submission request body.

    The first property becomes leakDetails and the rest additionalLeaks,
    in entry order. The form is not re-validated here.

    Args:
        form: Validated IntakeForm
        signature_image: Opaque image data string, empty if unsigned
        signature_name: Printed signer name

    Returns:
        Wire payload dictionary

    Raises:
        ValueError: If the form has no leaking properties
    """
    if not form.leaking_properties:
        raise ValueError("Cannot build a submission payload without a leaking property")

    primary, *additional = form.leaking_properties

    return {
        "client": {
            "dynamoAccountId": form.client_dynamo_account_id,
            "dynamoContactId": form.client_dynamo_count_id,
            "accountName": form.client_account_name,
            "accountContactName": form.client_account_contact_name,
            "email": form.client_email,
            "phone": form.client_phone,
        },
        "billing": {
            "dynamoId": form.billing_dynamo_id,
            "entityBillToName": form.billing_entity_bill_to_name,
            "billToAddress": form.billing_bill_to_address,
            "billToAddress2": form.billing_bill_to_address2,
            "billToCity": form.billing_bill_to_city,
            "billToZip": form.billing_bill_to_zip,
            "billToEmail": form.billing_bill_to_email,
        },
        "leakDetails": to_leak_details(primary),
        "additionalLeaks": [to_leak_details(prop) for prop in additional],
        "SignatureData": signature_image,
        "SignatureName": signature_name,
    }
