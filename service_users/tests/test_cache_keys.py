"""
Unit tests for cache key builders.
"""

import pytest

from service_users.app.caching.cache_keys import (
    credit_score_key, user_by_id_key, user_key_patterns, user_list_key
)


class TestUserListKey:
    """Test cases for user_list_key."""

    def test_identical_inputs_produce_identical_keys(self):
        """Same logical request yields the same key."""
        assert user_list_key(False, "2", "10") == user_list_key(False, "2", "10")

    def test_defaults(self):
        """Defaults fold page 1 and limit 20 into the key."""
        assert user_list_key() == "users:list:include_deleted=false:page=1:limit=20"

    @pytest.mark.parametrize("other", [
        {"include_deleted": True, "page": "2", "limit": "10"},
        {"include_deleted": False, "page": "3", "limit": "10"},
        {"include_deleted": False, "page": "2", "limit": "50"},
    ])
    def test_varying_any_component_changes_key(self, other):
        """Changing includeDeleted, page or limit yields a different key."""
        base = user_list_key(include_deleted=False, page="2", limit="10")
        assert user_list_key(**other) != base

    def test_include_deleted_requires_exact_true(self):
        """Only a real True marks deleted users as included."""
        assert user_list_key(include_deleted="true") == user_list_key(include_deleted=False)
        assert "include_deleted=true" in user_list_key(include_deleted=True)


class TestUserByIdKey:
    """Test cases for per-user keys."""

    def test_depends_only_on_id(self):
        """The by-id key is a function of the id alone."""
        assert user_by_id_key("42") == "users:id:42"
        assert user_by_id_key("42") != user_by_id_key("99")

    def test_credit_score_key_is_distinct_from_user_key(self):
        """Credit scores never collide with user records."""
        assert credit_score_key("42") != user_by_id_key("42")

    def test_user_key_patterns_cover_user_entries_and_lists(self):
        """Invalidation patterns include the record, the score and every list page."""
        patterns = user_key_patterns("42")
        assert user_by_id_key("42") in patterns
        assert credit_score_key("42") in patterns
        assert "users:list:*" in patterns
