"""
Tests for the property collection editor.

Tests cover:
- Add and edit commits
- Validation blocking a commit
- Cancel with and without unsaved changes
- Copy clears identity
- Delete keeps the editing index pointed at the same record
- Auto-commit at submit time
"""

import pytest

from core.intake import (
    IntakeForm,
    LeakProperty,
    PropertyEditor,
    CancelDecision,
)


# =============================================================================
# Fixtures
# =============================================================================


def make_property(name, dynamo_id=None, job_no=""):
    return LeakProperty(
        dynamo_id=dynamo_id,
        job_no=job_no,
        site_name=name,
        site_address="1 Main St",
        site_city="Denver",
        site_zip="80202",
    )


@pytest.fixture
def editor():
    """Editor over a form with three committed properties."""
    form = IntakeForm(
        leaking_properties=[
            make_property("A", dynamo_id=1, job_no="ELS-1"),
            make_property("B", dynamo_id=2, job_no="ELS-2"),
            make_property("C", dynamo_id=3, job_no="ELS-3"),
        ]
    )
    return PropertyEditor(form)


def names(editor):
    return [p.site_name for p in editor.properties]


# =============================================================================
# Commit
# =============================================================================


class TestCommit:
    """Tests for add and update through the editor slot."""

    def test_commit_new_record_appends(self, editor):
        editor.start_add()
        editor.update(site_name="D", site_address="2 Main St", site_city="Denver", site_zip="80203")

        errors = editor.commit()

        assert errors == {}
        assert names(editor) == ["A", "B", "C", "D"]
        assert editor.editor_property == LeakProperty.empty()
        assert editor.editing_index is None

    def test_commit_existing_record_overwrites(self, editor):
        editor.start_edit(1)
        editor.update(site_name="B2")

        assert editor.commit() == {}
        assert names(editor) == ["A", "B2", "C"]

    def test_invalid_slot_is_not_committed(self, editor):
        editor.start_add()
        editor.update(site_name="D")

        errors = editor.commit()

        assert set(errors) == {"siteAddress", "siteCity", "siteZip"}
        assert names(editor) == ["A", "B", "C"]
        assert editor.editor_property.site_name == "D"

    def test_edit_works_on_a_copy(self, editor):
        editor.start_edit(0)
        editor.update(site_name="Changed")

        assert editor.properties[0].site_name == "A"

    def test_update_rejects_unknown_field(self, editor):
        with pytest.raises(AttributeError):
            editor.update(not_a_field="x")

    def test_update_rejects_method_names(self, editor):
        with pytest.raises(AttributeError):
            editor.update(clone="x")

        assert editor.editor_property.clone() == LeakProperty.empty()

    def test_start_edit_out_of_range(self, editor):
        with pytest.raises(IndexError):
            editor.start_edit(5)


# =============================================================================
# Cancel
# =============================================================================


class TestCancel:
    """Tests for leaving the editor slot."""

    def test_unchanged_edit_cancels_silently(self, editor):
        editor.start_edit(2)

        def never_called(prop):
            raise AssertionError("confirm should not be asked")

        assert editor.cancel_edit(never_called) == {}
        assert editor.editing_index is None

    def test_discard_drops_changes(self, editor):
        editor.start_edit(0)
        editor.update(site_name="Changed")

        editor.cancel_edit(lambda prop: CancelDecision.DISCARD)

        assert names(editor) == ["A", "B", "C"]
        assert editor.editor_property == LeakProperty.empty()

    def test_save_commits_changes(self, editor):
        editor.start_edit(0)
        editor.update(site_name="Changed")

        assert editor.cancel_edit(lambda prop: CancelDecision.SAVE) == {}
        assert names(editor) == ["Changed", "B", "C"]

    def test_save_with_invalid_slot_returns_errors(self, editor):
        editor.start_edit(0)
        editor.update(site_zip="")

        errors = editor.cancel_edit(lambda prop: CancelDecision.SAVE)

        assert "siteZip" in errors
        assert editor.editing_index == 0

    def test_keep_editing_leaves_slot(self, editor):
        editor.start_edit(1)
        editor.update(comments="still typing")

        editor.cancel_edit(lambda prop: CancelDecision.KEEP_EDITING)

        assert editor.editing_index == 1
        assert editor.editor_property.comments == "still typing"

    def test_no_callback_keeps_editing(self, editor):
        editor.start_add()
        editor.update(site_name="Half done")

        editor.cancel_edit()

        assert editor.editor_property.site_name == "Half done"


# =============================================================================
# Copy and Delete
# =============================================================================


class TestCopyDelete:
    """Tests for collection operations."""

    def test_copy_clears_identity(self, editor):
        duplicate = editor.copy(0)

        assert len(editor.properties) == 4
        assert duplicate.dynamo_id is None
        assert duplicate.job_no == ""
        assert duplicate.site_name == "A"
        assert editor.properties[0].dynamo_id == 1

    def test_copy_is_independent(self, editor):
        editor.copy(0)
        editor.properties[3].site_name = "Copy"

        assert editor.properties[0].site_name == "A"

    def test_delete_before_editing_index_shifts_it(self, editor):
        editor.start_edit(2)

        editor.delete(0)

        assert names(editor) == ["B", "C"]
        assert editor.editing_index == 1
        assert editor.properties[editor.editing_index].site_name == "C"

    def test_delete_edited_record_resets_slot(self, editor):
        editor.start_edit(1)
        editor.update(comments="x")

        editor.delete(1)

        assert editor.editing_index is None
        assert editor.editor_property == LeakProperty.empty()

    def test_delete_after_editing_index_keeps_it(self, editor):
        editor.start_edit(0)

        editor.delete(2)

        assert editor.editing_index == 0


# =============================================================================
# Auto-commit
# =============================================================================


class TestAutoCommit:
    """Tests for committing an in-progress record at submit time."""

    def test_empty_slot_is_ignored(self, editor):
        assert editor.auto_commit() == {}
        assert len(editor.properties) == 3

    def test_dirty_valid_slot_is_committed(self, editor):
        editor.load(make_property("D"))

        assert editor.auto_commit() == {}
        assert names(editor) == ["A", "B", "C", "D"]

    def test_dirty_invalid_slot_returns_errors(self, editor):
        editor.update(site_name="D")

        errors = editor.auto_commit()

        assert "siteAddress" in errors
        assert len(editor.properties) == 3
