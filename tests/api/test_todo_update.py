"""
PUT /todos/<id> against the live service.

Key SDET Concepts Demonstrated:
- Field-level updates verified through the list endpoint
- Data-driven negative cases with pytest parametrization
- Checking that rejected updates leave stored data untouched
"""

from __future__ import annotations

import logging

import pytest

from shared.test_helpers import find_by_id, verify_todo_exists_by_id
from todo_client.constants import STATUS_BAD_REQUEST, STATUS_NOT_FOUND, STATUS_OK
from todo_client.models import Todo

logger = logging.getLogger(__name__)

pytestmark = pytest.mark.api

MAX_ID = 2**63 - 1


@pytest.fixture
def existing_todo(api) -> Todo:
    todo = api.create_test_todo("Todo for update testing")
    assert todo.id is not None, "Failed to create test todo"
    return todo


def _assert_unchanged(api, *originals: Todo) -> None:
    todos = api.fetch_all_todos()
    for original in originals:
        stored = find_by_id(todos, original.id)
        assert stored is not None, f"Todo with ID {original.id} should still exist"
        assert stored == original, f"Todo should remain unchanged for ID {original.id}"


class TestUpdateTodo:
    """Tests for PUT /todos/<id>."""

    def test_update_todo_text(self, api, existing_todo):
        # Arrange
        update = Todo(existing_todo.id, "Updated todo text", existing_todo.completed)

        # Act
        response = api.update_todo(existing_todo.id, update)

        # Assert
        assert response.status_code == STATUS_OK, "Expected successful update"
        verify_todo_exists_by_id(api, existing_todo.id, "Updated todo text", existing_todo.completed)

    def test_update_todo_completion_status(self, api, existing_todo):
        # Arrange
        toggled = not existing_todo.completed
        update = Todo(existing_todo.id, existing_todo.text, toggled)

        # Act
        response = api.update_todo(existing_todo.id, update)

        # Assert
        assert response.status_code == STATUS_OK, "Expected successful update"
        verify_todo_exists_by_id(api, existing_todo.id, existing_todo.text, toggled)

    def test_update_non_existent_todo(self, api, existing_todo):
        # Arrange
        assert find_by_id(api.fetch_all_todos(), MAX_ID) is None, "Test ID should not exist before test execution"

        # Act
        response = api.update_todo(MAX_ID, Todo(MAX_ID, "Non-existent todo update", False))

        # Assert
        assert response.status_code == STATUS_NOT_FOUND, "Expected 404 Not Found when updating non-existent todo"

    @pytest.mark.parametrize("missing_field", ["id", "text", "completed"])
    def test_update_todo_with_missing_fields(self, api, existing_todo, missing_field):
        """Test that an update body missing a field is rejected."""
        # Arrange
        update = {"id": existing_todo.id, "text": "Attempted update", "completed": True}
        del update[missing_field]
        logger.info("Testing update without %s field: %s", missing_field, update)

        # Act
        response = api.update_todo(existing_todo.id, update)

        # Assert
        assert response.status_code == STATUS_BAD_REQUEST, (
            f"Expected 400 Bad Request for update without {missing_field} field"
        )
        _assert_unchanged(api, existing_todo)

    def test_update_with_mismatched_ids(self, api, existing_todo):
        """Test that a body id different from the path id is rejected."""
        # Arrange
        another = api.create_test_todo("Another Todo")
        update = Todo(another.id, "Updated text", True)

        # Act
        response = api.update_todo(existing_todo.id, update)

        # Assert
        assert response.status_code == STATUS_BAD_REQUEST, (
            "API should reject update when ID in body doesn't match ID in path"
        )
        _assert_unchanged(api, existing_todo, another)
