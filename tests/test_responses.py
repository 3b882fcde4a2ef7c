"""
Tests for upstream response normalisation.
"""

import pytest

from core.intake import (
    LeakLocation,
    LeakNear,
    RoofPitch,
    ServiceOrderStatusName,
    normalize_lookup_response,
    normalize_submit_response,
    normalize_status_response,
)
from core.intake.responses import NO_MATCHES_MESSAGE, PENDING_REFERENCE_ID


# =============================================================================
# Fixtures
# =============================================================================


def make_order(order_id, client_name="Acme", leaks=1):
    return {
        "Id": order_id,
        "RequestDate": "2026-01-05T10:00:00Z",
        "Clients": [{"AccountName": client_name}],
        "BillingInfos": [{"BillToCity": "Denver"}],
        "LeakDetails": [{"SiteName": f"Site {order_id}-{n}"} for n in range(leaks)],
    }


# =============================================================================
# Lookup
# =============================================================================


class TestLookupResponse:
    """Tests for normalize_lookup_response."""

    def test_single_aggregate(self):
        result = normalize_lookup_response(make_order(1, leaks=2))

        assert result.match_count == 1
        assert len(result.leaks) == 2
        assert result.summary() == "Found 1 possible match."

    def test_list_of_aggregates_is_flattened(self):
        result = normalize_lookup_response([make_order(1), make_order(2, client_name="Beta")])

        assert [c["AccountName"] for c in result.clients] == ["Acme", "Beta"]
        assert len(result.billings) == 2
        assert result.summary() == "Found 2 possible matches."

    def test_legacy_matches_wrapper(self):
        result = normalize_lookup_response({"matches": [make_order(3)], "message": "One match."})

        assert result.match_count == 1
        assert result.summary() == "One match."

    def test_non_orders_are_dropped(self):
        result = normalize_lookup_response([make_order(1), {"Id": "x"}, "junk"])

        assert result.match_count == 1

    @pytest.mark.parametrize("raw", [None, "", [], {"unexpected": True}])
    def test_empty_shapes(self, raw):
        result = normalize_lookup_response(raw)

        assert result.match_count == 0
        assert result.summary() == NO_MATCHES_MESSAGE


# =============================================================================
# Submit
# =============================================================================


class TestSubmitResponse:
    """Tests for normalize_submit_response."""

    def test_full_acknowledgement(self):
        result = normalize_submit_response(
            {
                "success": True,
                "referenceId": "REF-123",
                "queueName": "service-intake",
                "requestDate": "2026-01-05",
                "createdAt": "2026-01-05T10:00:00Z",
                "message": "Queued.",
            }
        )

        assert result.reference_id == "REF-123"
        assert result.queue_name == "service-intake"
        assert result.message == "Queued."

    def test_request_id_fallback(self):
        assert normalize_submit_response({"requestId": "REQ-9"}).reference_id == "REQ-9"

    @pytest.mark.parametrize("raw", [None, "accepted", {}, {"referenceId": "  "}])
    def test_missing_reference_is_pending(self, raw):
        result = normalize_submit_response(raw)

        assert result.reference_id == PENDING_REFERENCE_ID
        assert result.success is True


# =============================================================================
# Status
# =============================================================================


class TestStatusResponse:
    """Tests for normalize_status_response."""

    def test_status_and_echoed_leaks(self):
        status = normalize_status_response(
            {
                "Success": True,
                "Message": "Order is being processed.",
                "Status": "IN_PROGRESS",
                "Data": {
                    "LeakDetails": {"SiteName": "Primary", "LeakLocation": 1, "LeakNear": 5, "RoofPitch": 2},
                    "AdditionalLeaks": [{"SiteName": "Extra", "LeakLocation": 3}],
                },
            }
        )

        assert status.status == ServiceOrderStatusName.IN_PROGRESS
        assert status.message == "Order is being processed."

        primary, extra = status.leaks
        assert primary.site_name == "Primary"
        assert primary.leak_location == LeakLocation.FRONT
        assert primary.leak_near == LeakNear.OTHER
        assert primary.roof_pitch == RoofPitch.STEEP_SHINGLE_TILE
        assert extra.leak_location == LeakLocation.BACK

    def test_unknown_status(self):
        status = normalize_status_response({"Status": "ARCHIVED"})

        assert status.status == ServiceOrderStatusName.UNKNOWN
        assert status.success is False
        assert status.leaks == []

    def test_to_dict(self):
        status = normalize_status_response({"Success": True, "Message": "Done", "Status": "COMPLETED"})

        assert status.to_dict() == {"Success": True, "Message": "Done", "Status": "COMPLETED", "Data": None}
