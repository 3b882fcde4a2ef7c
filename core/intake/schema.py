"""
Emergency Leak Intake Schema - Entity Model

Defines the typed shape of one emergency roof-leak service request:
the client account block, the billing entity block, and one or more
leaking property records.

Python attributes are snake_case. The browser and the draft blob use the
camelCase field names, which is also what ValidationErrors keys refer to.
"""

from __future__ import annotations

import copy
from dataclasses import dataclass, field, fields
from enum import Enum
from typing import Any, Final, Optional


# =============================================================================
# Enums
# =============================================================================


class LeakLocation(Enum):
    """Where on the roof the leak is located."""

    FRONT = "Front"
    MIDDLE = "Middle"
    BACK = "Back"


class LeakNear(Enum):
    """Roof feature the leak is near."""

    HVAC_DUCT = "HVACDuct"
    SKYLIGHT = "Skylight"
    WALL = "Wall"
    DRAIN = "Drain"
    OTHER = "Other"


class RoofPitch(Enum):
    """Roof pitch category."""

    FLAT_ROOF = "FlatRoof"
    STEEP_SHINGLE_TILE = "SteepShingleTile"


# =============================================================================
# Constants
# =============================================================================

# Extra ValidationErrors keys that belong to the signature block, not a model
SIGNATURE_ERROR_KEYS: Final[tuple[str, ...]] = (
    "signature",
    "signatureName",
    "billingTermsAcknowledged",
)

# LeakProperty attribute -> human label, used for "<Field> is required."
REQUIRED_PROPERTY_FIELDS: Final[dict[str, str]] = {
    "site_name": "Site Name",
    "site_address": "Site Address",
    "site_city": "Site City",
    "site_zip": "Site Zip",
}

# ValidationErrors is a plain mapping of camelCase field name -> message
ValidationErrors = dict[str, str]


def to_camel(name: str) -> str:
    """Convert a snake_case attribute name to its camelCase field name."""
    head, *rest = name.split("_")
    return head + "".join(part[:1].upper() + part[1:] for part in rest)


def _coerce_str(value: Any) -> str:
    return "" if value is None else str(value)


def _coerce_optional_int(value: Any) -> Optional[int]:
    if value is None or value == "":
        return None
    try:
        return int(value)
    except (TypeError, ValueError):
        return None


def _coerce_enum(enum_cls: type[Enum], value: Any, default: Enum) -> Enum:
    if isinstance(value, enum_cls):
        return value
    for member in enum_cls:
        if member.value == value:
            return member
    return default


# =============================================================================
# Leak Property
# =============================================================================


@dataclass
class LeakProperty:
    """
    One physical site with an active leak.

    A record is "complete" (submittable) when site name, address, city
    and zip are all non-empty. Completeness is checked by the validation
    engine, never at construction, so the editor can hold partial records.
    """

    # === IDENTITY ===
    dynamo_id: Optional[int] = None  # upstream record key, None for new
    job_no: str = ""

    # === LOCATION ===
    site_name: str = ""
    site_address: str = ""
    site_address2: str = ""
    site_city: str = ""
    site_zip: str = ""

    # === TENANT CONTACT ===
    tenant_business_name: str = ""
    tenant_contact_name: str = ""
    tenant_contact_phone: str = ""
    tenant_contact_cell: str = ""
    tenant_contact_email: str = ""
    hours_of_operation: str = ""

    # === CLASSIFICATION ===
    leak_location: LeakLocation = LeakLocation.MIDDLE
    leak_near: LeakNear = LeakNear.HVAC_DUCT
    leak_near_other: str = ""  # only meaningful when leak_near is OTHER

    # === ACCESS ===
    has_access_code: bool = False
    access_code: str = ""
    is_saturday_access_permitted: bool = False
    is_key_required: bool = False
    is_ladder_required: bool = False

    roof_pitch: RoofPitch = RoofPitch.FLAT_ROOF
    comments: str = ""

    @classmethod
    def empty(cls) -> "LeakProperty":
        """Return a fresh empty template."""
        return cls()

    def clone(self) -> "LeakProperty":
        """Deep copy of this record."""
        return copy.deepcopy(self)

    def to_dict(self) -> dict[str, Any]:
        """Convert to a camelCase dictionary for the browser and drafts."""
        result: dict[str, Any] = {}
        for f in fields(self):
            value = getattr(self, f.name)
            if isinstance(value, Enum):
                value = value.value
            result[to_camel(f.name)] = value
        return result

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "LeakProperty":
        """
        Create a LeakProperty from a camelCase dictionary.

        Missing keys take the empty-template default; None strings become "".
        """
        template = cls()
        kwargs: dict[str, Any] = {}
        for f in fields(cls):
            key = to_camel(f.name)
            if key not in data:
                continue
            value = data[key]
            default = getattr(template, f.name)
            if f.name == "dynamo_id":
                kwargs[f.name] = _coerce_optional_int(value)
            elif isinstance(default, Enum):
                kwargs[f.name] = _coerce_enum(type(default), value, default)
            elif isinstance(default, bool):
                kwargs[f.name] = bool(value)
            else:
                kwargs[f.name] = _coerce_str(value)
        return cls(**kwargs)


# Attribute names by kind, derived from the empty template
PROPERTY_STRING_FIELDS: Final[tuple[str, ...]] = tuple(
    f.name for f in fields(LeakProperty) if isinstance(getattr(LeakProperty(), f.name), str)
)
PROPERTY_BOOL_FIELDS: Final[tuple[str, ...]] = tuple(
    f.name for f in fields(LeakProperty) if isinstance(getattr(LeakProperty(), f.name), bool)
)
PROPERTY_ENUM_FIELDS: Final[tuple[str, ...]] = ("leak_location", "leak_near", "roof_pitch")


# =============================================================================
# Intake Form
# =============================================================================


CLIENT_FIELDS: Final[tuple[str, ...]] = (
    "client_dynamo_account_id",
    "client_dynamo_count_id",
    "client_account_name",
    "client_account_contact_name",
    "client_email",
    "client_phone",
)

BILLING_FIELDS: Final[tuple[str, ...]] = (
    "billing_dynamo_id",
    "billing_entity_bill_to_name",
    "billing_bill_to_address",
    "billing_bill_to_address2",
    "billing_bill_to_city",
    "billing_bill_to_zip",
    "billing_bill_to_email",
)

IDENTITY_FIELDS: Final[tuple[str, ...]] = (
    "client_dynamo_account_id",
    "client_dynamo_count_id",
    "billing_dynamo_id",
)

FORM_STRING_FIELDS: Final[tuple[str, ...]] = tuple(
    name for name in CLIENT_FIELDS + BILLING_FIELDS if name not in IDENTITY_FIELDS
)


@dataclass
class IntakeForm:
    """
    Root aggregate for one emergency leak service request.

    The first entry of leaking_properties is the primary leak when the
    request is sent upstream; the rest become additional leaks.
    """

    leaking_properties: list[LeakProperty] = field(default_factory=list)

    # === CLIENT ===
    client_dynamo_account_id: Optional[int] = None
    client_dynamo_count_id: Optional[int] = None
    client_account_name: str = ""
    client_account_contact_name: str = ""
    client_email: str = ""
    client_phone: str = ""

    # === BILLING ===
    billing_dynamo_id: Optional[int] = None
    billing_entity_bill_to_name: str = ""
    billing_bill_to_address: str = ""
    billing_bill_to_address2: str = ""
    billing_bill_to_city: str = ""
    billing_bill_to_zip: str = ""
    billing_bill_to_email: str = ""

    @classmethod
    def initial(cls) -> "IntakeForm":
        """Return the pristine initial form."""
        return cls()

    def clone(self) -> "IntakeForm":
        return copy.deepcopy(self)

    def to_dict(self) -> dict[str, Any]:
        """Convert to a camelCase dictionary for the browser and drafts."""
        result: dict[str, Any] = {
            "leakingProperties": [p.to_dict() for p in self.leaking_properties],
        }
        for name in CLIENT_FIELDS + BILLING_FIELDS:
            result[to_camel(name)] = getattr(self, name)
        return result

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "IntakeForm":
        """
        Create an IntakeForm from a camelCase dictionary.

        Unknown keys are ignored, missing keys keep their initial values
        and every property is merged over the empty template.
        """
        kwargs: dict[str, Any] = {}
        for name in CLIENT_FIELDS + BILLING_FIELDS:
            key = to_camel(name)
            if key not in data:
                continue
            if name in IDENTITY_FIELDS:
                kwargs[name] = _coerce_optional_int(data[key])
            else:
                kwargs[name] = _coerce_str(data[key])

        properties = data.get("leakingProperties") or []
        if not isinstance(properties, list):
            properties = []
        kwargs["leaking_properties"] = [
            LeakProperty.from_dict(p) for p in properties if isinstance(p, dict)
        ]
        return cls(**kwargs)


# =============================================================================
# Sample Data
# =============================================================================


SAMPLE_FORM_DATA: Final[IntakeForm] = IntakeForm(
    client_dynamo_account_id=55001,
    client_dynamo_count_id=9911,
    client_account_name="Acme Retail Centers",
    client_account_contact_name="Jordan Smith",
    client_email="jordan.smith@acmeretail.com",
    client_phone="303-555-0199",
    billing_dynamo_id=88001,
    billing_entity_bill_to_name="Acme AP Department",
    billing_bill_to_address="100 Market Street",
    billing_bill_to_address2="Suite 240",
    billing_bill_to_city="Denver",
    billing_bill_to_zip="80202",
    billing_bill_to_email="ap@acmeretail.com",
    leaking_properties=[
        LeakProperty(
            dynamo_id=77001,
            job_no="ELS-26-01-0001",
            site_name="Acme North Plaza",
            site_address="4550 W 38th Ave",
            site_address2="Rear Service Entrance",
            site_city="Denver",
            site_zip="80212",
            tenant_business_name="North Plaza Liquor",
            tenant_contact_name="Chris Ramirez",
            tenant_contact_phone="720-555-0141",
            tenant_contact_cell="720-555-0191",
            tenant_contact_email="chris.ramirez@tenantco.com",
            hours_of_operation="7:00 AM - 10:00 PM",
            leak_location=LeakLocation.MIDDLE,
            leak_near=LeakNear.HVAC_DUCT,
            has_access_code=True,
            access_code="2468",
            is_saturday_access_permitted=True,
            is_ladder_required=True,
            roof_pitch=RoofPitch.FLAT_ROOF,
            comments=(
                "Water intrusion over retail aisle during heavy rain. "
                "Please call tenant before arrival."
            ),
        ),
    ],
)

SAMPLE_LOOKUP_VALUES: Final[dict[str, str]] = {
    "serviceOrderNumber": "ELS-26-01-0001",
    "email": "jordan.smith@acmeretail.com",
}
