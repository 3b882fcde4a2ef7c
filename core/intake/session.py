"""
Intake Session - Single-User Form State

Owns the IntakeForm, the editor slot, the last lookup results and the
submit/status state for one active user. Every mutation is synchronous
and followed by a draft save; the draft store is injected so sessions
can run without a real storage backend.

Network calls go through an IntakeService (lookup, submit, status). Each
call sets a busy flag first and clears it in a finally block.
"""

from __future__ import annotations

import logging
from enum import Enum
from typing import Any, Callable, Optional, Protocol

from core.intake.dirty import is_form_dirty
from core.intake.draft import DraftStore, InMemoryDraftStore, IntakeDraft
from core.intake.editor import CancelConfirm, PropertyEditor
from core.intake.payload import to_submission_payload
from core.intake.prefill import merge_billing, merge_client, merge_leak, reduce_billings
from core.intake.responses import (
    LookupResult,
    ServiceOrderStatus,
    SubmitResult,
    normalize_lookup_response,
    normalize_status_response,
    normalize_submit_response,
)
from core.intake.schema import (
    BILLING_FIELDS,
    CLIENT_FIELDS,
    SAMPLE_FORM_DATA,
    SAMPLE_LOOKUP_VALUES,
    IntakeForm,
    ValidationErrors,
)
from core.intake.validation import validate_form, validate_signature
from upstream.errors import UpstreamError

logger = logging.getLogger(__name__)

SUBMIT_FAILED_MESSAGE = "Submission failed. Please check your connection and try again."
LOOKUP_CRITERIA_MESSAGE = "Provide at least a service order number or an email address."


class IntakeService(Protocol):
    """Network boundary used by the session."""

    def lookup(self, request: dict[str, str]) -> Any: ...

    def submit(self, payload: dict[str, Any]) -> Any: ...

    def status(self, reference_id: str) -> Any: ...


class SubmitState(Enum):
    IDLE = "idle"
    SUCCESS = "success"
    ERROR = "error"


class IntakeSession:
    """
    One emergency leak intake in progress.

    The saved draft (if any) is restored on construction; malformed
    drafts are discarded.
    """

    def __init__(self, service: IntakeService, store: Optional[DraftStore] = None):
        self.service = service
        self.store = store or InMemoryDraftStore()

        self.editor = PropertyEditor(IntakeForm.initial())
        self.errors: ValidationErrors = {}

        # Lookup
        self.service_order_lookup_value = ""
        self.email_lookup_value = ""
        self.lookup_results: Optional[LookupResult] = None
        self.lookup_message = ""

        # Signature block
        self.signature_data = ""
        self.signature_name = ""
        self.billing_terms_acknowledged = False

        # Submit / status
        self.is_looking_up = False
        self.is_submitting = False
        self.is_checking_status = False
        self.is_confirm_open = False
        self.submit_state = SubmitState.IDLE
        self.submit_error_message = ""
        self.submit_result: Optional[SubmitResult] = None
        self.last_status: Optional[ServiceOrderStatus] = None
        self.status_message = ""

        self.restore_draft()

    @property
    def form(self) -> IntakeForm:
        return self.editor.form

    @form.setter
    def form(self, value: IntakeForm) -> None:
        self.editor.form = value

    # =========================================================================
    # Draft Persistence
    # =========================================================================

    def restore_draft(self) -> bool:
        """
        Load the saved draft into the session.

        Returns:
            True if a draft was restored
        """
        try:
            blob = self.store.load()
            if not blob:
                return False
            draft = IntakeDraft.from_json(blob)
        except Exception as e:
            logger.warning("Discarding unreadable intake draft: %s", e)
            self._clear_draft()
            return False

        self.editor.reset(draft.form)
        self.service_order_lookup_value = draft.service_order_lookup_value
        self.email_lookup_value = draft.email_lookup_value
        self.lookup_message = "Restored saved draft."
        return True

    def _persist(self) -> None:
        draft = IntakeDraft(
            form=self.form,
            service_order_lookup_value=self.service_order_lookup_value,
            email_lookup_value=self.email_lookup_value,
        )
        try:
            self.store.save(draft.to_json())
        except Exception as e:
            logger.warning("Could not save intake draft: %s", e)

    def _clear_draft(self) -> None:
        try:
            self.store.clear()
        except Exception as e:
            logger.warning("Could not clear intake draft: %s", e)

    # =========================================================================
    # Field Updates
    # =========================================================================

    def update_field(self, name: str, value: Any) -> None:
        """
        Set a top-level form field.

        Raises:
            AttributeError: If name is not an IntakeForm field
        """
        if name not in CLIENT_FIELDS + BILLING_FIELDS:
            raise AttributeError(f"IntakeForm has no editable field {name!r}")
        setattr(self.form, name, value)
        self._persist()

    def update_property_field(self, **changes: Any) -> None:
        """Set fields on the record in the editor slot."""
        self.editor.update(**changes)
        self._persist()

    def set_lookup_values(
        self,
        service_order: Optional[str] = None,
        email: Optional[str] = None,
    ) -> None:
        if service_order is not None:
            self.service_order_lookup_value = service_order
        if email is not None:
            self.email_lookup_value = email
        self._persist()

    def set_signature(
        self,
        signature_data: Optional[str] = None,
        signature_name: Optional[str] = None,
        billing_terms_acknowledged: Optional[bool] = None,
    ) -> None:
        if signature_data is not None:
            self.signature_data = signature_data
        if signature_name is not None:
            self.signature_name = signature_name
        if billing_terms_acknowledged is not None:
            self.billing_terms_acknowledged = billing_terms_acknowledged

    # =========================================================================
    # Property Collection
    # =========================================================================

    def start_add_property(self) -> None:
        self.editor.start_add()
        self._persist()

    def edit_property(self, index: int) -> None:
        self.editor.start_edit(index)
        self._persist()

    def save_property(self) -> ValidationErrors:
        """Commit the editor slot; errors are also exposed on self.errors."""
        errors = self.editor.commit()
        self.errors = errors
        self._persist()
        return errors

    def cancel_property_edit(self, confirm: Optional[CancelConfirm] = None) -> ValidationErrors:
        errors = self.editor.cancel_edit(confirm)
        self.errors = errors
        self._persist()
        return errors

    def copy_property(self, index: int) -> None:
        self.editor.copy(index)
        self._persist()

    def delete_property(self, index: int) -> None:
        """Remove a property. Callers confirm with the user first."""
        self.editor.delete(index)
        self._persist()

    # =========================================================================
    # Lookup and Prefill
    # =========================================================================

    def _lookup_request(self, job_no: str, email: str) -> dict[str, str]:
        slot = self.editor.editor_property
        return {
            "JobNo": job_no.strip(),
            "EmailAddress": email.strip(),
            "City": slot.site_city.strip(),
            "Zip": slot.site_zip.strip(),
        }

    def lookup_by_service_order(self) -> Optional[LookupResult]:
        return self.perform_lookup(self._lookup_request(self.service_order_lookup_value, ""))

    def lookup_by_email(self) -> Optional[LookupResult]:
        return self.perform_lookup(self._lookup_request("", self.email_lookup_value))

    def perform_lookup(self, request: dict[str, str]) -> Optional[LookupResult]:
        """
        Run a lookup and replace the previous results.

        On failure previous results are cleared and the failure message is
        shown instead; the form itself is untouched.
        """
        if not request.get("JobNo") and not request.get("EmailAddress"):
            self.lookup_message = LOOKUP_CRITERIA_MESSAGE
            return None

        self.is_looking_up = True
        self.lookup_message = ""
        try:
            result = normalize_lookup_response(self.service.lookup(request))
            self.lookup_results = result
            self.lookup_message = result.summary()
            return result
        except UpstreamError as e:
            logger.error("Lookup failed: %s", e.message)
            self.lookup_results = None
            self.lookup_message = e.message or "Lookup request failed."
            return None
        finally:
            self.is_looking_up = False

    def apply_client(self, index: int) -> None:
        """Prefill the client block from lookup_results.clients[index]."""
        if self.lookup_results is None:
            raise LookupError("No lookup results to apply")
        self.form = merge_client(self.form, self.lookup_results.clients[index])
        self._persist()

    def apply_billing(self) -> None:
        """Prefill the billing block from the reduced billing candidates."""
        if self.lookup_results is None:
            raise LookupError("No lookup results to apply")
        billing = reduce_billings(self.lookup_results.billings)
        if billing is None:
            return
        self.form = merge_billing(self.form, billing)
        self._persist()

    def apply_leak(self, index: int) -> None:
        """Load lookup_results.leaks[index] into the editor slot for review."""
        if self.lookup_results is None:
            raise LookupError("No lookup results to apply")
        self.editor.load(merge_leak(self.lookup_results.leaks[index]))
        self._persist()

    # =========================================================================
    # Submit
    # =========================================================================

    def request_submit(self) -> bool:
        """
        Validate and open the confirmation step.

        An in-progress editor record is committed first so it is not lost.
        If that commit fails its errors block the submission.

        Returns:
            True if the form is valid and confirmation is now open
        """
        self.submit_state = SubmitState.IDLE

        errors: ValidationErrors = dict(self.editor.auto_commit())
        for key, message in validate_form(self.form).items():
            errors.setdefault(key, message)
        for key, message in validate_signature(
            self.signature_data, self.signature_name, self.billing_terms_acknowledged
        ).items():
            errors.setdefault(key, message)

        self.errors = errors
        self._persist()

        if errors:
            return False

        self.is_confirm_open = True
        return True

    def cancel_submit(self) -> None:
        self.is_confirm_open = False

    def confirm_submit(self) -> Optional[SubmitResult]:
        """
        Transform and send the form.

        On success the form, lookup results and draft are cleared. On
        failure the form is left intact and submit_state becomes ERROR.
        """
        self.is_submitting = True
        try:
            payload = to_submission_payload(self.form, self.signature_data, self.signature_name)
            result = normalize_submit_response(self.service.submit(payload))
        except UpstreamError as e:
            logger.error("Submit failed: %s", e.message)
            self.submit_state = SubmitState.ERROR
            self.submit_error_message = SUBMIT_FAILED_MESSAGE
            return None
        finally:
            self.is_submitting = False

        logger.info("Submitted intake, reference id %s", result.reference_id)
        self.submit_state = SubmitState.SUCCESS
        self.submit_error_message = ""
        self.submit_result = result
        self.is_confirm_open = False
        self._clear_form_state()
        self._clear_draft()
        return result

    # =========================================================================
    # Status
    # =========================================================================

    def check_status(self, reference_id: Optional[str] = None) -> Optional[ServiceOrderStatus]:
        """
        Query processing status for a reference id.

        Defaults to the reference id of the last successful submit.
        """
        if reference_id is None and self.submit_result is not None:
            reference_id = self.submit_result.reference_id
        if not reference_id or not reference_id.strip():
            self.status_message = "No reference id to check."
            return None

        self.is_checking_status = True
        try:
            status = normalize_status_response(self.service.status(reference_id.strip()))
        except UpstreamError as e:
            logger.error("Status check failed: %s", e.message)
            self.status_message = e.message
            return None
        finally:
            self.is_checking_status = False

        self.last_status = status
        self.status_message = status.message
        return status

    # =========================================================================
    # Reset / Sample Data
    # =========================================================================

    def is_dirty(self) -> bool:
        return is_form_dirty(self.form, self.service_order_lookup_value, self.email_lookup_value)

    def reset(self, confirm: Optional[Callable[[], bool]] = None) -> bool:
        """
        Clear the form.

        A pristine form resets immediately. A dirty form resets only when
        confirm() returns True.

        Returns:
            True if the form was reset
        """
        if self.is_dirty() and (confirm is None or not confirm()):
            return False

        self._clear_form_state()
        self.service_order_lookup_value = ""
        self.email_lookup_value = ""
        self.lookup_message = "Form cleared."
        self.submit_state = SubmitState.IDLE
        self.is_confirm_open = False
        self._clear_draft()
        return True

    def load_sample(self) -> None:
        """Fill the form with sample data."""
        self.editor.reset(SAMPLE_FORM_DATA.clone())
        self.service_order_lookup_value = SAMPLE_LOOKUP_VALUES["serviceOrderNumber"]
        self.email_lookup_value = SAMPLE_LOOKUP_VALUES["email"]
        self.errors = {}
        self.lookup_results = None
        self.lookup_message = "Sample data loaded."
        self.submit_state = SubmitState.IDLE
        self.is_confirm_open = False
        self._persist()

    def _clear_form_state(self) -> None:
        self.editor.reset(IntakeForm.initial())
        self.errors = {}
        self.lookup_results = None
        self.lookup_message = ""
        self.signature_data = ""
        self.signature_name = ""
        self.billing_terms_acknowledged = False

    def snapshot(self) -> dict[str, Any]:
        """Serialisable view of the session for the browser."""
        return {
            "formData": self.form.to_dict(),
            "editorProperty": self.editor.editor_property.to_dict(),
            "editingIndex": self.editor.editing_index,
            "errors": dict(self.errors),
            "serviceOrderLookupValue": self.service_order_lookup_value,
            "emailLookupValue": self.email_lookup_value,
            "lookupResults": self.lookup_results.to_dict() if self.lookup_results else None,
            "lookupMessage": self.lookup_message,
            "submitState": self.submit_state.value,
            "referenceId": self.submit_result.reference_id if self.submit_result else None,
        }
