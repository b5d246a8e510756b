"""Tests for izi.models: normalizing the service's response shapes."""

import pytest

from izi.models import (
    Prompt,
    User,
    normalize_prompt,
    normalize_prompt_list,
    normalize_search,
    normalize_user,
)
from izi.util import ApiError

CAMEL = {
    "id": "p1",
    "name": "Reviewer",
    "description": "Reviews code",
    "content": "You are...",
    "tags": ["code"],
    "author": "jane",
    "createdAt": "2025-01-15T10:30:00Z",
    "updatedAt": "2025-01-16T10:30:00Z",
}

SNAKE = {
    "id": 42,
    "name": "Reviewer",
    "description": "Reviews code",
    "content": "You are...",
    "tags": None,
    "users": {"username": "jane"},
    "created_at": "2025-01-15T10:30:00Z",
    "updated_at": "2025-01-16T10:30:00Z",
}


class TestNormalizePrompt:
    def test_camel_case(self):
        p = normalize_prompt(CAMEL)
        assert p == Prompt(
            id="p1",
            name="Reviewer",
            description="Reviews code",
            content="You are...",
            tags=["code"],
            author="jane",
            created_at="2025-01-15T10:30:00Z",
            updated_at="2025-01-16T10:30:00Z",
        )

    def test_snake_case_with_joined_user(self):
        p = normalize_prompt(SNAKE)
        assert p.id == "42"
        assert p.author == "jane"
        assert p.tags == []
        assert p.created_at == "2025-01-15T10:30:00Z"

    def test_wrapped(self):
        assert normalize_prompt({"prompt": CAMEL}).id == "p1"

    def test_non_string_fields_become_strings(self):
        p = normalize_prompt({
            "id": 7, "name": 2024, "createdAt": 1736937000, "updated_at": 1736937060,
        })
        assert p.name == "2024"
        assert p.created_at == "1736937000"
        assert p.updated_at == "1736937060"
        assert p.description == ""

    def test_missing_id(self):
        with pytest.raises(ApiError, match="Unexpected response"):
            normalize_prompt({"name": "x"})

    def test_not_a_dict(self):
        with pytest.raises(ApiError):
            normalize_prompt(["p1"])


class TestNormalizePromptList:
    def test_bare_list(self):
        assert [p.id for p in normalize_prompt_list([CAMEL, SNAKE])] == ["p1", "42"]

    def test_wrapped_in_data(self):
        assert len(normalize_prompt_list({"data": [CAMEL]})) == 1

    def test_bad_shape(self):
        with pytest.raises(ApiError):
            normalize_prompt_list({"count": 3})


class TestNormalizeSearch:
    def test_prompts_and_total(self):
        result = normalize_search({"prompts": [CAMEL], "total": 7})
        assert result.total == 7
        assert result.prompts[0].name == "Reviewer"

    def test_total_defaults_to_count(self):
        assert normalize_search({"prompts": [CAMEL, CAMEL]}).total == 2

    def test_bare_list(self):
        assert normalize_search([CAMEL]).total == 1

    def test_empty(self):
        result = normalize_search({"prompts": [], "total": 0})
        assert result.prompts == []
        assert result.total == 0


class TestNormalizeUser:
    def test_verify_response(self):
        user = normalize_user({"success": True, "username": "jane", "email": "j@x.io"})
        assert user == User(username="jane", email="j@x.io")

    def test_nested_user(self):
        assert normalize_user({"user": {"username": "jane"}}) == User("jane")

    def test_missing_username(self):
        with pytest.raises(ApiError):
            normalize_user({"success": True})
