"""
Draft Store - Scoped Persistence for an In-Progress Intake

One slot holding {formData, serviceOrderLookupValue, emailLookupValue}
as a single JSON blob under a fixed key. The session restores it at
start, overwrites it after every mutation and clears it on successful
submission or explicit reset.
"""

from __future__ import annotations

import json
from abc import ABC, abstractmethod
from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING, Any, Final, Optional

from core.intake.schema import IntakeForm

if TYPE_CHECKING:
    from utils.config import Config


DRAFT_STORAGE_KEY: Final = "emergency-leak-service-intake-draft-v1"


# =============================================================================
# Draft Blob
# =============================================================================


@dataclass
class IntakeDraft:
    """Everything needed to resume an intake session."""

    form: IntakeForm
    service_order_lookup_value: str = ""
    email_lookup_value: str = ""

    def to_json(self) -> str:
        return json.dumps(
            {
                "formData": self.form.to_dict(),
                "serviceOrderLookupValue": self.service_order_lookup_value,
                "emailLookupValue": self.email_lookup_value,
            }
        )

    @classmethod
    def from_json(cls, blob: str) -> "IntakeDraft":
        """
        Parse a stored blob, merging it over the initial form.

        Raises:
            ValueError: If the blob is not a JSON object
        """
        data: Any = json.loads(blob)
        if not isinstance(data, dict):
            raise ValueError("Draft blob is not a JSON object")

        form_data = data.get("formData")
        form = IntakeForm.from_dict(form_data) if isinstance(form_data, dict) else IntakeForm.initial()

        service_order = data.get("serviceOrderLookupValue")
        email = data.get("emailLookupValue")
        return cls(
            form=form,
            service_order_lookup_value=service_order if isinstance(service_order, str) else "",
            email_lookup_value=email if isinstance(email, str) else "",
        )


# =============================================================================
# Store Port
# =============================================================================


class DraftStore(ABC):
    """Key-value slot for the serialised draft."""

    @abstractmethod
    def load(self) -> Optional[str]:
        """Return the stored blob, or None if nothing is saved."""
        pass

    @abstractmethod
    def save(self, blob: str) -> None:
        """Overwrite the stored blob."""
        pass

    @abstractmethod
    def clear(self) -> None:
        """Remove the stored blob."""
        pass


class InMemoryDraftStore(DraftStore):
    """Draft store held in process memory."""

    def __init__(self, blob: Optional[str] = None):
        self._blob = blob

    def load(self) -> Optional[str]:
        return self._blob

    def save(self, blob: str) -> None:
        self._blob = blob

    def clear(self) -> None:
        self._blob = None


class FileDraftStore(DraftStore):
    """
    Draft store backed by a single JSON file.

    The file is named after DRAFT_STORAGE_KEY inside the given directory.
    """

    def __init__(self, directory: str, key: str = DRAFT_STORAGE_KEY):
        self._path = Path(directory) / f"{key}.json"

    @classmethod
    def from_config(cls, config: "Config") -> "FileDraftStore":
        """Store under config.draft_dir (DRAFT_DIR)."""
        return cls(config.draft_dir)

    @property
    def path(self) -> Path:
        return self._path

    def load(self) -> Optional[str]:
        if not self._path.exists():
            return None
        return self._path.read_text()

    def save(self, blob: str) -> None:
        self._path.parent.mkdir(parents=True, exist_ok=True)
        self._path.write_text(blob)

    def clear(self) -> None:
        self._path.unlink(missing_ok=True)
