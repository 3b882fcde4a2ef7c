"""
Property Collection Editor - Editor Slot State Machine

Manages the leak-property collection of an IntakeForm together with the
single editor slot holding the record currently being authored.

Transitions:
    start_add    slot <- empty template, editing_index <- None
    start_edit   slot <- deep copy of collection[i], editing_index <- i
    commit       validate slot, then append or overwrite, then start_add
    cancel_edit  silent when unchanged, otherwise ask the caller
    copy         append a duplicate with identity cleared
    delete       remove and keep editing_index pointing at the same record
"""

from __future__ import annotations

import logging
from dataclasses import fields
from enum import Enum
from typing import Callable, Optional

from core.intake.dirty import is_property_dirty
from core.intake.schema import IntakeForm, LeakProperty, ValidationErrors
from core.intake.validation import validate_property

logger = logging.getLogger(__name__)


class CancelDecision(Enum):
    """Answer to the discard-or-save prompt shown when cancelling an edit."""

    DISCARD = "discard"
    SAVE = "save"
    KEEP_EDITING = "keep_editing"


# Callback asked to resolve a cancel when the slot has unsaved changes
CancelConfirm = Callable[[LeakProperty], CancelDecision]

PROPERTY_FIELD_NAMES = frozenset(f.name for f in fields(LeakProperty))


class PropertyEditor:
    """
    Editor slot plus CRUD operations over form.leaking_properties.

    The editor mutates the form it was given in place. Callers that
    persist drafts should do so after each public method returns.
    """

    def __init__(self, form: IntakeForm):
        self.form = form
        self.editor_property: LeakProperty = LeakProperty.empty()
        self.editing_index: Optional[int] = None
        # Snapshot of the record the slot was opened from, for cancel
        self._origin: LeakProperty = LeakProperty.empty()

    @property
    def properties(self) -> list[LeakProperty]:
        return self.form.leaking_properties

    @property
    def is_editing_existing(self) -> bool:
        return self.editing_index is not None

    # =========================================================================
    # Slot Transitions
    # =========================================================================

    def start_add(self) -> None:
        """Reset the slot to an empty new record."""
        self.editor_property = LeakProperty.empty()
        self.editing_index = None
        self._origin = LeakProperty.empty()

    def start_edit(self, index: int) -> None:
        """
        Load collection[index] into the slot for editing.

        Raises:
            IndexError: If index is out of range
        """
        source = self.properties[index]
        self.editor_property = source.clone()
        self.editing_index = index
        self._origin = source.clone()

    def load(self, prop: LeakProperty) -> None:
        """
        Load a record (e.g. from a prefill selection) into the slot.

        The record is treated as new; it is never appended until committed.
        """
        self.editor_property = prop.clone()
        self.editing_index = None
        self._origin = LeakProperty.empty()

    def update(self, **changes) -> None:
        """
        Update fields on the slot record.

        Raises:
            AttributeError: If a field name is not a LeakProperty attribute
        """
        for name, value in changes.items():
            if name not in PROPERTY_FIELD_NAMES:
                raise AttributeError(f"LeakProperty has no field {name!r}")
            setattr(self.editor_property, name, value)

    def commit(self) -> ValidationErrors:
        """
        Add or update the slot record in the collection.

        Returns:
            ValidationErrors; non-empty means nothing changed
        """
        errors = validate_property(self.editor_property)
        if errors:
            return errors

        if self.editing_index is None:
            self.properties.append(self.editor_property.clone())
        else:
            self.properties[self.editing_index] = self.editor_property.clone()

        self.start_add()
        return {}

    def has_unsaved_changes(self) -> bool:
        """Whether the slot differs from the record it was opened from."""
        return self.editor_property != self._origin

    def cancel_edit(self, confirm: Optional[CancelConfirm] = None) -> ValidationErrors:
        """
        Leave the slot.

        Unchanged slots reset silently. Changed slots ask confirm(); without
        a callback the edit is kept. SAVE runs commit() and may return errors.

        Returns:
            ValidationErrors from a SAVE commit, otherwise empty
        """
        if not self.has_unsaved_changes():
            self.start_add()
            return {}

        if confirm is None:
            return {}

        decision = confirm(self.editor_property)
        if decision == CancelDecision.DISCARD:
            self.start_add()
            return {}
        if decision == CancelDecision.SAVE:
            return self.commit()
        return {}

    def auto_commit(self) -> ValidationErrors:
        """
        Commit an in-progress slot record at submit time.

        Does nothing when the slot is still the empty template.
        """
        if not is_property_dirty(self.editor_property):
            return {}
        logger.info("Auto-committing in-progress property before submit")
        return self.commit()

    # =========================================================================
    # Collection Operations
    # =========================================================================

    def copy(self, index: int) -> LeakProperty:
        """
        Append a duplicate of collection[index] as a brand-new record.

        Identity is cleared so upstream treats the copy as unsaved.
        """
        duplicate = self.properties[index].clone()
        duplicate.dynamo_id = None
        duplicate.job_no = ""
        self.properties.append(duplicate)
        return duplicate

    def delete(self, index: int) -> LeakProperty:
        """
        Remove collection[index].

        If the slot was editing that record it resets; if it was editing a
        later record its index shifts down by one.
        """
        removed = self.properties.pop(index)

        if self.editing_index is not None:
            if self.editing_index == index:
                self.start_add()
            elif self.editing_index > index:
                self.editing_index -= 1

        return removed

    def reset(self, form: IntakeForm) -> None:
        """Point the editor at a new form and clear the slot."""
        self.form = form
        self.start_add()
