"""
Upstream Response Normalisation

Turns the loosely shaped bodies returned by the intake API into one
canonical internal shape each, once, at the network boundary:

- lookup: a single service order, a list of them, or the legacy
  {"matches": [...], "message": ...} wrapper -> LookupResult
- submit: partial acknowledgement -> SubmitResult
- status: {Success, Message, Status, Data} -> ServiceOrderStatus

The rest of the core never has to sniff shapes.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Final, Optional

from core.intake.payload import (
    LEAK_LOCATION_FROM_CODE,
    LEAK_NEAR_FROM_CODE,
    ROOF_PITCH_FROM_CODE,
)
from core.intake.prefill import merge_leak
from core.intake.schema import LeakProperty


PENDING_REFERENCE_ID: Final = "Pending"
DEFAULT_SUBMIT_MESSAGE: Final = "Request submitted successfully."
NO_MATCHES_MESSAGE: Final = "No matching records were found."


# =============================================================================
# Lookup
# =============================================================================


def is_service_order(value: Any) -> bool:
    """Check whether value looks like one service order aggregate."""
    if not isinstance(value, dict):
        return False
    return (
        isinstance(value.get("Id"), int)
        and not isinstance(value.get("Id"), bool)
        and isinstance(value.get("RequestDate"), str)
        and isinstance(value.get("Clients"), list)
        and isinstance(value.get("BillingInfos"), list)
        and isinstance(value.get("LeakDetails"), list)
    )


@dataclass
class LookupResult:
    """Flattened candidates from zero or more matched service orders."""

    clients: list[dict[str, Any]] = field(default_factory=list)
    billings: list[dict[str, Any]] = field(default_factory=list)
    leaks: list[dict[str, Any]] = field(default_factory=list)
    service_orders: list[dict[str, Any]] = field(default_factory=list)
    message: Optional[str] = None

    @property
    def match_count(self) -> int:
        return len(self.service_orders)

    def summary(self) -> str:
        """Human-readable message for the lookup panel."""
        if self.message:
            return self.message
        if not self.service_orders:
            return NO_MATCHES_MESSAGE
        suffix = "" if self.match_count == 1 else "es"
        return f"Found {self.match_count} possible match{suffix}."

    def to_dict(self) -> dict[str, Any]:
        return {
            "clients": self.clients,
            "billings": self.billings,
            "leaks": self.leaks,
            "serviceOrders": self.service_orders,
            "message": self.message,
        }


def normalize_lookup_response(raw: Any) -> LookupResult:
    """
    Normalise any lookup response shape into a LookupResult.

    Entries that do not look like service orders are dropped.
    """
    message: Optional[str] = None

    if isinstance(raw, list):
        orders = [item for item in raw if is_service_order(item)]
    elif is_service_order(raw):
        orders = [raw]
    elif isinstance(raw, dict) and isinstance(raw.get("matches"), list):
        orders = [item for item in raw["matches"] if is_service_order(item)]
        message = raw.get("message") if isinstance(raw.get("message"), str) else None
    else:
        orders = []
        if isinstance(raw, dict) and isinstance(raw.get("message"), str):
            message = raw["message"]

    return LookupResult(
        clients=[c for order in orders for c in order["Clients"]],
        billings=[b for order in orders for b in order["BillingInfos"]],
        leaks=[leak for order in orders for leak in order["LeakDetails"]],
        service_orders=orders,
        message=message,
    )


# =============================================================================
# Submit
# =============================================================================


@dataclass(frozen=True)
class SubmitResult:
    """Acknowledgement of an accepted submission."""

    reference_id: str
    message: str
    success: bool = True
    queue_name: Optional[str] = None
    request_date: Optional[str] = None
    created_at: Optional[str] = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "success": self.success,
            "referenceId": self.reference_id,
            "queueName": self.queue_name,
            "requestDate": self.request_date,
            "createdAt": self.created_at,
            "message": self.message,
        }


def normalize_submit_response(raw: Any) -> SubmitResult:
    """
    Build a SubmitResult, falling back to the "Pending" reference id.

    Accepts both referenceId and the older requestId key.
    """
    data = raw if isinstance(raw, dict) else {}

    reference_id = PENDING_REFERENCE_ID
    for key in ("referenceId", "requestId"):
        candidate = data.get(key)
        if isinstance(candidate, str) and candidate.strip():
            reference_id = candidate
            break

    message = data.get("message")
    if not isinstance(message, str):
        message = DEFAULT_SUBMIT_MESSAGE

    return SubmitResult(
        reference_id=reference_id,
        message=message,
        success=bool(data.get("success", True)),
        queue_name=data.get("queueName"),
        request_date=data.get("requestDate"),
        created_at=data.get("createdAt"),
    )


# =============================================================================
# Status
# =============================================================================


class ServiceOrderStatusName(Enum):
    """Processing status reported by the upstream service."""

    NEW = "NEW"
    IN_PROGRESS = "IN_PROGRESS"
    COMPLETED = "COMPLETED"
    CANCELLED = "CANCELLED"
    UNKNOWN = "UNKNOWN"


def _status_leak(details: dict[str, Any]) -> LeakProperty:
    """Status records echo the submitted one-based enum codes."""
    enum_keys = ("LeakLocation", "LeakNear", "RoofPitch")
    prop = merge_leak({k: v for k, v in details.items() if k not in enum_keys})

    template = LeakProperty.empty()
    prop.leak_location = LEAK_LOCATION_FROM_CODE.get(
        details.get("LeakLocation"), template.leak_location
    )
    prop.leak_near = LEAK_NEAR_FROM_CODE.get(details.get("LeakNear"), template.leak_near)
    prop.roof_pitch = ROOF_PITCH_FROM_CODE.get(details.get("RoofPitch"), template.roof_pitch)
    return prop


@dataclass
class ServiceOrderStatus:
    """Current processing status plus the record as last known upstream."""

    success: bool
    message: str
    status: ServiceOrderStatusName
    data: Optional[dict[str, Any]] = None

    @property
    def leaks(self) -> list[LeakProperty]:
        """Primary and additional leaks of the echoed record."""
        if not self.data:
            return []
        records = []
        primary = self.data.get("LeakDetails")
        if isinstance(primary, dict):
            records.append(primary)
        for extra in self.data.get("AdditionalLeaks") or []:
            if isinstance(extra, dict):
                records.append(extra)
        return [_status_leak(r) for r in records]

    def to_dict(self) -> dict[str, Any]:
        return {
            "Success": self.success,
            "Message": self.message,
            "Status": self.status.value,
            "Data": self.data,
        }


def normalize_status_response(raw: Any) -> ServiceOrderStatus:
    data = raw if isinstance(raw, dict) else {}

    status_value = data.get("Status")
    status = ServiceOrderStatusName.UNKNOWN
    for member in ServiceOrderStatusName:
        if member.value == status_value:
            status = member
            break

    record = data.get("Data")
    return ServiceOrderStatus(
        success=bool(data.get("Success", False)),
        message=data.get("Message") if isinstance(data.get("Message"), str) else "",
        status=status,
        data=record if isinstance(record, dict) else None,
    )
