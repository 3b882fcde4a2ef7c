"""
Emergency Leak Service - Intake Form Engine

Entity model, validation, dirty-state detection, property collection
editing, prefill merging and payload transformation for one emergency
roof-leak service request.

Everything except IntakeSession is a pure function or a plain data
holder; IntakeSession wires them to a draft store and the network.
"""

from core.intake.schema import (
    IntakeForm,
    LeakProperty,
    LeakLocation,
    LeakNear,
    RoofPitch,
    ValidationErrors,
    SAMPLE_FORM_DATA,
    SAMPLE_LOOKUP_VALUES,
)
from core.intake.validation import (
    validate_property,
    validate_form,
    validate_signature,
    is_email,
    is_phone,
)
from core.intake.dirty import is_property_dirty, is_form_dirty
from core.intake.editor import PropertyEditor, CancelDecision
from core.intake.prefill import (
    merge_client,
    merge_billing,
    merge_leak,
    reduce_billings,
)
from core.intake.payload import to_submission_payload, to_leak_details
from core.intake.responses import (
    LookupResult,
    SubmitResult,
    ServiceOrderStatus,
    ServiceOrderStatusName,
    normalize_lookup_response,
    normalize_submit_response,
    normalize_status_response,
)
from core.intake.draft import (
    DraftStore,
    InMemoryDraftStore,
    FileDraftStore,
    IntakeDraft,
    DRAFT_STORAGE_KEY,
)
from core.intake.session import IntakeSession, IntakeService, SubmitState

__all__ = [
    # Schema
    "IntakeForm",
    "LeakProperty",
    "LeakLocation",
    "LeakNear",
    "RoofPitch",
    "ValidationErrors",
    "SAMPLE_FORM_DATA",
    "SAMPLE_LOOKUP_VALUES",
    # Validation
    "validate_property",
    "validate_form",
    "validate_signature",
    "is_email",
    "is_phone",
    # Dirty state
    "is_property_dirty",
    "is_form_dirty",
    # Editor
    "PropertyEditor",
    "CancelDecision",
    # Prefill
    "merge_client",
    "merge_billing",
    "merge_leak",
    "reduce_billings",
    # Payload
    "to_submission_payload",
    "to_leak_details",
    # Responses
    "LookupResult",
    "SubmitResult",
    "ServiceOrderStatus",
    "ServiceOrderStatusName",
    "normalize_lookup_response",
    "normalize_submit_response",
    "normalize_status_response",
    # Drafts
    "DraftStore",
    "InMemoryDraftStore",
    "FileDraftStore",
    "IntakeDraft",
    "DRAFT_STORAGE_KEY",
    # Session
    "IntakeSession",
    "IntakeService",
    "SubmitState",
]
