"""
Unit tests for the permission gate and the role evaluator.
"""

import pytest
from unittest.mock import AsyncMock, MagicMock
from fastapi import Request

from service_users.app.domain.auth_middleware import AuthContext, AuthMiddleware
from service_users.app.domain.permissions import (
    Capability, PermissionDecision, PermissionGate, RolePermissionEvaluator
)
from shared.errors import AuthorizationError
from .conftest import TEST_SECRET


def _context(user_id: str, *roles: str) -> AuthContext:
    return AuthContext(user_id=user_id, roles=frozenset(roles), claims={"sub": user_id}, token="t")


class TestRolePermissionEvaluator:
    """Test cases for RolePermissionEvaluator."""

    @pytest.fixture
    def evaluator(self):
        return RolePermissionEvaluator()

    @pytest.mark.asyncio
    @pytest.mark.parametrize("roles,capability,resource_id,allowed", [
        (("admin",), Capability.VIEW_USERS, None, True),
        (("manager",), Capability.VIEW_USERS, None, True),
        (("user",), Capability.VIEW_USERS, None, False),
        ((), Capability.VIEW_OWN_RECORD, "42", False),
        (("user",), Capability.VIEW_OWN_RECORD, "42", True),
        (("user",), Capability.VIEW_OWN_RECORD, "99", False),
        (("admin",), Capability.VIEW_OWN_RECORD, "99", True),
        (("guest", "user"), Capability.VIEW_OWN_RECORD, "42", True),
    ])
    async def test_decisions(self, evaluator, roles, capability, resource_id, allowed):
        """Roles grant capabilities; own-record access is limited to the caller's id."""
        decision = await evaluator.evaluate(_context("42", *roles), capability, resource_id)
        assert decision.allowed is allowed

    def test_custom_table(self):
        """A configured role table replaces the defaults."""
        evaluator = RolePermissionEvaluator({"auditor": ["view_users"]})
        assert evaluator.capabilities_for(["auditor"]) == frozenset({Capability.VIEW_USERS})
        assert evaluator.capabilities_for(["admin"]) == frozenset()

    def test_unknown_capability_in_table_is_rejected(self):
        """Typos in the role table fail at construction."""
        with pytest.raises(ValueError):
            RolePermissionEvaluator({"admin": ["view_user"]})


class TestPermissionGate:
    """Test cases for PermissionGate."""

    @pytest.fixture
    def evaluator(self):
        evaluator = MagicMock()
        evaluator.evaluate = AsyncMock(return_value=PermissionDecision(True, "ok"))
        return evaluator

    @pytest.fixture
    def gate(self, evaluator):
        return PermissionGate(AuthMiddleware(TEST_SECRET), evaluator)

    @pytest.fixture
    def mock_request(self):
        request = MagicMock(spec=Request)
        request.path_params = {"id": "42"}
        return request

    def test_require_rejects_unknown_capability(self, gate):
        """Capability names are validated when routes are registered."""
        with pytest.raises(ValueError):
            gate.require("view_everything")

    @pytest.mark.asyncio
    async def test_allowed_returns_context(self, gate, evaluator, mock_request):
        """An allowed check hands the caller context on and passes the path id."""
        context = _context("42", "user")
        check = gate.require("view_own_record")

        result = await check(mock_request, context)

        assert result is context
        evaluator.evaluate.assert_awaited_once_with(context, Capability.VIEW_OWN_RECORD, "42")

    @pytest.mark.asyncio
    async def test_denied_raises_authorization_error(self, gate, evaluator, mock_request):
        """A denied check raises a 403 error naming the capability."""
        evaluator.evaluate.return_value = PermissionDecision(False, "Access restricted to own record")
        check = gate.require(Capability.VIEW_OWN_RECORD)

        with pytest.raises(AuthorizationError) as exc_info:
            await check(mock_request, _context("7", "user"))

        assert exc_info.value.status_code == 403
        assert exc_info.value.details == {"capability": "view_own_record"}
