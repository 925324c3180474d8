"""Tests for snapshot change detection."""

from datetime import datetime, timezone

import pytest

from taskgraph.models.task import RelatedFile, Task, TaskDependency
from taskgraph.services.snapshot_differ import (
    COMPARED_FIELDS,
    find_change,
    has_changed,
)


def make_task(task_id: str, **fields) -> Task:
    return Task(id=task_id, **{"name": f"Task {task_id}", "status": "pending", **fields})


class TestSnapshotShape:
    """Tests for count and identity changes."""

    def test_identical_snapshots(self):
        old = [make_task("1"), make_task("2", dependencies=["1"])]
        new = [make_task("1"), make_task("2", dependencies=["1"])]
        assert has_changed(old, new) is False

    def test_no_previous_snapshot(self):
        assert has_changed(None, [make_task("1")]) is True
        assert find_change(None, []) == "no previous snapshot"

    def test_count_changed(self):
        assert has_changed([make_task("1")], [make_task("1"), make_task("2")]) is True

    def test_same_count_different_ids(self):
        reason = find_change([make_task("1")], [make_task("2")])
        assert reason == "task removed: 1"

    def test_order_of_tasks_ignored(self):
        old = [make_task("1"), make_task("2")]
        new = [make_task("2"), make_task("1")]
        assert has_changed(old, new) is False

    def test_empty_snapshots(self):
        assert has_changed([], []) is False


class TestComparedFields:
    """Tests for per-field comparison."""

    def test_compared_field_list(self):
        assert COMPARED_FIELDS == (
            "name",
            "description",
            "status",
            "notes",
            "implementation_guide",
            "verification_criteria",
            "summary",
        )

    def test_analysis_result_not_compared(self):
        old = [make_task("1", analysis_result="First pass")]
        new = [make_task("1", analysis_result="Second pass")]
        assert has_changed(old, new) is False

    @pytest.mark.parametrize("field", COMPARED_FIELDS)
    def test_each_compared_field_detected(self, field):
        old = [Task(id="1", **{field: "before"})]
        new = [Task(id="1", **{field: "after"})]
        assert find_change(old, new) == f"task 1 changed field: {field}"

    def test_status_change(self):
        old = [make_task("1", status="pending")]
        new = [make_task("1", status="in_progress")]
        assert has_changed(old, new) is True

    def test_null_equals_null(self):
        old = [Task(id="1", notes=None, summary=None)]
        new = [Task(id="1", notes=None, summary=None)]
        assert has_changed(old, new) is False

    def test_null_differs_from_empty_string(self):
        old = [Task(id="1", notes=None)]
        new = [Task(id="1", notes="")]
        assert has_changed(old, new) is True

    def test_created_at_not_compared(self):
        old = [make_task("1", created_at=datetime(2024, 1, 1, tzinfo=timezone.utc))]
        new = [make_task("1", created_at=datetime(2024, 2, 1, tzinfo=timezone.utc))]
        assert has_changed(old, new) is False

    def test_updated_at_compared(self):
        old = [make_task("1", updated_at=datetime(2024, 1, 1, tzinfo=timezone.utc))]
        new = [make_task("1", updated_at=datetime(2024, 1, 2, tzinfo=timezone.utc))]
        assert find_change(old, new) == "task 1 changed field: updated_at"

    def test_unknown_extra_fields_not_compared(self):
        old = [Task.model_validate({"id": "1", "priority": "low"})]
        new = [Task.model_validate({"id": "1", "priority": "high"})]
        assert has_changed(old, new) is False


class TestDependencies:
    """Tests for dependency comparison."""

    def test_order_insensitive(self):
        old = [make_task("3", dependencies=["1", "2"])]
        new = [make_task("3", dependencies=["2", "1"])]
        assert has_changed(old, new) is False

    def test_wrapper_and_raw_forms_equal(self):
        old = [make_task("2", dependencies=[TaskDependency(task_id="1")])]
        new = [make_task("2", dependencies=["1"])]
        assert has_changed(old, new) is False

    def test_wrapper_parsed_from_wire_format(self):
        task = Task.model_validate({"id": "2", "dependencies": [{"taskId": "1"}, "3"]})
        assert task.dependency_ids() == ["1", "3"]

    def test_added_dependency(self):
        old = [make_task("3", dependencies=["1"])]
        new = [make_task("3", dependencies=["1", "2"])]
        assert find_change(old, new) == "task 3 changed field: dependencies"

    def test_missing_and_empty_equal(self):
        old = [make_task("1", dependencies=None)]
        new = [make_task("1", dependencies=[])]
        assert has_changed(old, new) is False

    def test_duplicates_ignored(self):
        old = [make_task("2", dependencies=["1", "1"])]
        new = [make_task("2", dependencies=["1"])]
        assert has_changed(old, new) is False


class TestRelatedFiles:
    """Tests for related file comparison."""

    def test_order_sensitive(self):
        a = RelatedFile(path="a.py", type="TO_MODIFY")
        b = RelatedFile(path="b.py", type="REFERENCE")
        old = [make_task("1", related_files=[a, b])]
        new = [make_task("1", related_files=[b, a])]
        assert find_change(old, new) == "task 1 changed field: related_files"

    def test_type_change_detected(self):
        old = [make_task("1", related_files=[RelatedFile(path="a.py", type="TO_MODIFY")])]
        new = [make_task("1", related_files=[RelatedFile(path="a.py", type="REFERENCE")])]
        assert has_changed(old, new) is True

    def test_description_not_compared(self):
        old = [make_task("1", related_files=[RelatedFile(path="a.py", type="CREATE", description="x")])]
        new = [make_task("1", related_files=[RelatedFile(path="a.py", type="CREATE", description="y")])]
        assert has_changed(old, new) is False

    def test_missing_and_empty_equal(self):
        old = [make_task("1", related_files=None)]
        new = [make_task("1", related_files=[])]
        assert has_changed(old, new) is False
