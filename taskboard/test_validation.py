"""test_validation.py — Request body rules and the models they produce."""

from __future__ import annotations

import unittest

from taskboard.validation import (
    ProjectInput,
    TaskInput,
    TaskUpdate,
    validate_project_input,
    validate_task_create,
    validate_task_update,
)


class ProjectInputTests(unittest.TestCase):
    def test_valid_body(self):
        data, err = validate_project_input({"title": "Site", "description": "Relaunch"})
        self.assertIsNone(err)
        self.assertEqual(data, ProjectInput(title="Site", description="Relaunch"))
        self.assertEqual(data.to_document(), {"title": "Site", "description": "Relaunch"})

    def test_both_missing(self):
        self.assertEqual(validate_project_input({}), (None, "Title and description are required"))

    def test_one_missing(self):
        self.assertEqual(validate_project_input({"description": "d"})[1], "Title is required")
        self.assertEqual(validate_project_input({"title": "t"})[1], "Description is required")

    def test_whitespace_counts_as_empty(self):
        self.assertEqual(
            validate_project_input({"title": "   ", "description": "\t"})[1],
            "Title and description are required",
        )
        self.assertEqual(
            validate_project_input({"title": " ", "description": "d"})[1],
            "Title and description are required",
        )

    def test_blank_field_that_was_sent_gets_combined_message(self):
        self.assertEqual(
            validate_project_input({"title": "T", "description": ""})[1],
            "Title and description are required",
        )
        self.assertEqual(
            validate_project_input({"title": "", "description": "d"})[1],
            "Title and description are required",
        )

    def test_null_counts_as_empty(self):
        self.assertEqual(validate_project_input({"title": None, "description": "d"})[1], "Title is required")

    def test_non_string_values(self):
        self.assertEqual(validate_project_input({"title": 5, "description": "d"})[1], "Title must be a string")
        self.assertEqual(
            validate_project_input({"title": "t", "description": ["d"]})[1],
            "Description must be a string",
        )

    def test_title_length_boundary(self):
        self.assertIsNone(validate_project_input({"title": "a" * 1000, "description": "d"})[1])
        self.assertEqual(
            validate_project_input({"title": "a" * 1001, "description": "d"})[1],
            "Title must be less than 1000 characters",
        )

    def test_values_are_kept_verbatim(self):
        data, _ = validate_project_input({"title": "  padded ", "description": "x"})
        self.assertEqual(data.title, "  padded ")


class TaskCreateTests(unittest.TestCase):
    def test_completed_defaults_to_false(self):
        data, err = validate_task_create({"title": "Write copy"})
        self.assertIsNone(err)
        self.assertEqual(data, TaskInput(title="Write copy", completed=False))
        self.assertEqual(
            data.to_document("p1"),
            {"projectId": "p1", "title": "Write copy", "completed": False},
        )

    def test_explicit_completed(self):
        data, _ = validate_task_create({"title": "x", "completed": True})
        self.assertTrue(data.completed)

    def test_null_completed_is_absent(self):
        data, err = validate_task_create({"title": "x", "completed": None})
        self.assertIsNone(err)
        self.assertFalse(data.completed)

    def test_rule_order(self):
        self.assertEqual(validate_task_create({"completed": "yes"})[1], "Title is required")
        self.assertEqual(validate_task_create({"title": 1})[1], "Title must be a string")
        self.assertEqual(
            validate_task_create({"title": "a" * 1001, "completed": "yes"})[1],
            "Title must be less than 1000 characters",
        )
        self.assertEqual(validate_task_create({"title": "x", "completed": "true"})[1], "Completed must be a boolean")

    def test_numeric_completed_is_rejected(self):
        self.assertEqual(validate_task_create({"title": "x", "completed": 1})[1], "Completed must be a boolean")


class TaskUpdateTests(unittest.TestCase):
    def test_absent_completed_is_not_written(self):
        data, err = validate_task_update({"title": "x"})
        self.assertIsNone(err)
        self.assertEqual(data, TaskUpdate(title="x", completed=None))
        self.assertEqual(data.to_fields(), {"title": "x"})

    def test_completed_false_is_written(self):
        data, _ = validate_task_update({"title": "x", "completed": False})
        self.assertEqual(data.to_fields(), {"title": "x", "completed": False})

    def test_title_required(self):
        self.assertEqual(validate_task_update({"completed": True}), (None, "Title is required"))

    def test_completed_must_be_boolean(self):
        self.assertEqual(validate_task_update({"title": "x", "completed": 0})[1], "Completed must be a boolean")


if __name__ == "__main__":
    unittest.main()
