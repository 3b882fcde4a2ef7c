"""
Tests for the Emergency Leak Intake entity model and validation.

Tests cover:
- Required property fields
- Client block and optional billing email
- Empty property collection
- First-seen-wins error aggregation across properties
- Signature block
- camelCase dictionary conversion
"""

import pytest

from core.intake import (
    IntakeForm,
    LeakProperty,
    LeakLocation,
    LeakNear,
    RoofPitch,
    SAMPLE_FORM_DATA,
    validate_property,
    validate_form,
    validate_signature,
    is_email,
    is_phone,
)
from core.intake.validation import AT_LEAST_ONE_PROPERTY


# =============================================================================
# Fixtures
# =============================================================================


@pytest.fixture
def complete_property():
    """A property with every required field filled."""
    return LeakProperty(
        site_name="Acme North Plaza",
        site_address="4550 W 38th Ave",
        site_city="Denver",
        site_zip="80212",
    )


@pytest.fixture
def valid_form(complete_property):
    """A form that passes validation."""
    return IntakeForm(
        client_account_name="Acme Retail Centers",
        client_account_contact_name="Jordan Smith",
        client_email="jordan.smith@acmeretail.com",
        client_phone="303-555-0199",
        leaking_properties=[complete_property],
    )


# =============================================================================
# Property Validation
# =============================================================================


class TestValidateProperty:
    """Tests for single-property validation."""

    def test_complete_property_has_no_errors(self, complete_property):
        assert validate_property(complete_property) == {}

    def test_empty_property_reports_all_required_fields(self):
        errors = validate_property(LeakProperty.empty())

        assert errors == {
            "siteName": "Site Name is required.",
            "siteAddress": "Site Address is required.",
            "siteCity": "Site City is required.",
            "siteZip": "Site Zip is required.",
        }

    def test_whitespace_counts_as_missing(self, complete_property):
        complete_property.site_city = "   "

        errors = validate_property(complete_property)

        assert list(errors) == ["siteCity"]

    def test_optional_fields_are_not_checked(self, complete_property):
        """Tenant contact fields and enums are accepted as-is."""
        complete_property.tenant_contact_email = "not-an-email"
        complete_property.tenant_contact_phone = "12"
        complete_property.leak_near = LeakNear.OTHER
        complete_property.leak_near_other = ""

        assert validate_property(complete_property) == {}


# =============================================================================
# Form Validation
# =============================================================================


class TestValidateForm:
    """Tests for whole-form validation."""

    def test_valid_form_has_no_errors(self, valid_form):
        assert validate_form(valid_form) == {}

    def test_sample_data_is_valid(self):
        assert validate_form(SAMPLE_FORM_DATA) == {}

    def test_initial_form_errors(self):
        errors = validate_form(IntakeForm.initial())

        assert errors["clientAccountName"] == "Account Name is required."
        assert errors["clientAccountContactName"] == "Account Contact Name is required."
        assert errors["clientEmail"] == "Enter a valid email address."
        assert errors["clientPhone"] == "Enter a valid phone number."
        assert errors["siteName"] == AT_LEAST_ONE_PROPERTY
        assert "billingBillToEmail" not in errors

    def test_empty_collection_uses_site_name_key(self, valid_form):
        valid_form.leaking_properties = []

        errors = validate_form(valid_form)

        assert errors == {"siteName": "At least one property is required."}

    def test_missing_site_name_is_reported(self, valid_form):
        valid_form.leaking_properties[0].site_name = ""

        errors = validate_form(valid_form)

        assert "siteName" in errors

    def test_invalid_client_email_and_short_phone(self, valid_form):
        """Missing account name, bad email and 9-digit phone are all reported."""
        valid_form.client_account_name = ""
        valid_form.client_email = "bad@"
        valid_form.client_phone = "123456789"

        errors = validate_form(valid_form)

        assert set(errors) == {"clientAccountName", "clientEmail", "clientPhone"}

    def test_blank_billing_email_is_allowed(self, valid_form):
        valid_form.billing_bill_to_email = "   "

        assert "billingBillToEmail" not in validate_form(valid_form)

    def test_invalid_billing_email_is_reported(self, valid_form):
        valid_form.billing_bill_to_email = "ap at acme"

        errors = validate_form(valid_form)

        assert errors == {"billingBillToEmail": "Enter a valid billing email address."}

    def test_first_invalid_property_wins(self, valid_form):
        """Errors from several properties collapse to the first per key."""
        second = LeakProperty(site_name="Second", site_address="", site_city="", site_zip="")
        third = LeakProperty(site_name="", site_address="", site_city="X", site_zip="")
        valid_form.leaking_properties += [second, third]

        errors = validate_form(valid_form)

        assert errors["siteAddress"] == "Site Address is required."
        assert errors["siteName"] == "Site Name is required."
        assert len([k for k in errors if k.startswith("site")]) == 4

    def test_validation_does_not_mutate(self, valid_form):
        before = valid_form.clone()
        valid_form.client_email = ""

        validate_form(valid_form)

        assert valid_form.leaking_properties == before.leaking_properties


# =============================================================================
# Signature Validation
# =============================================================================


class TestValidateSignature:
    """Tests for the signature block."""

    def test_complete_signature(self):
        assert validate_signature("data:image/png;base64,AAA", "Jordan Smith", True) == {}

    def test_empty_signature_block(self):
        errors = validate_signature("", " ", False)

        assert errors == {
            "signature": "Signature is required.",
            "signatureName": "Signature name is required.",
            "billingTermsAcknowledged": "You must acknowledge the billing terms.",
        }


# =============================================================================
# Field Checks
# =============================================================================


class TestFieldChecks:
    """Tests for the loose email and phone checks."""

    @pytest.mark.parametrize("value", ["a@b.co", "  Jordan@Acme.COM ", "x.y+z@host.example.org"])
    def test_valid_emails(self, value):
        assert is_email(value)

    @pytest.mark.parametrize("value", ["", "a@b", "a b@c.com", "@c.com"])
    def test_invalid_emails(self, value):
        assert not is_email(value)

    @pytest.mark.parametrize("value", ["3035550199", "(303) 555-0199", "+1 303 555 0199"])
    def test_valid_phones(self, value):
        assert is_phone(value)

    @pytest.mark.parametrize("value", ["123456789", "303.555.0199", "call me"])
    def test_invalid_phones(self, value):
        assert not is_phone(value)


# =============================================================================
# Dictionary Conversion
# =============================================================================


class TestDictConversion:
    """Tests for camelCase to_dict / from_dict."""

    def test_property_to_dict_uses_camel_case_and_enum_values(self):
        data = LeakProperty(site_zip="80212", roof_pitch=RoofPitch.STEEP_SHINGLE_TILE).to_dict()

        assert data["siteZip"] == "80212"
        assert data["roofPitch"] == "SteepShingleTile"
        assert data["leakLocation"] == "Middle"
        assert data["isSaturdayAccessPermitted"] is False
        assert data["dynamoId"] is None

    def test_property_from_partial_dict_uses_defaults(self):
        prop = LeakProperty.from_dict({"siteName": "Plaza", "leakLocation": "Back", "tenantContactName": None})

        assert prop.site_name == "Plaza"
        assert prop.leak_location == LeakLocation.BACK
        assert prop.tenant_contact_name == ""
        assert prop.leak_near == LeakNear.HVAC_DUCT
        assert prop.roof_pitch == RoofPitch.FLAT_ROOF

    def test_form_dict_preserves_data(self):
        restored = IntakeForm.from_dict(SAMPLE_FORM_DATA.to_dict())

        assert restored == SAMPLE_FORM_DATA

    def test_form_from_dict_ignores_bad_properties(self):
        form = IntakeForm.from_dict({"clientEmail": "a@b.co", "leakingProperties": [{"siteName": "A"}, "junk"]})

        assert form.client_email == "a@b.co"
        assert len(form.leaking_properties) == 1
        assert form.client_dynamo_account_id is None

    def test_clone_is_deep(self):
        clone = SAMPLE_FORM_DATA.clone()
        clone.leaking_properties[0].site_name = "Changed"

        assert SAMPLE_FORM_DATA.leaking_properties[0].site_name == "Acme North Plaza"
