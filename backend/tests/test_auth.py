"""
Tests for authentication models and route dependencies.
"""

from types import SimpleNamespace
from unittest.mock import AsyncMock, patch

import pytest
from fastapi import HTTPException
from fastapi.security import HTTPAuthorizationCredentials

from auth.dependencies import (
    get_current_user,
    get_optional_user,
    require_admin,
    require_super_admin,
)
from auth.models import User
from auth.supabase_client import SupabaseClient, user_to_dict


def bearer(token="token-123"):
    return HTTPAuthorizationCredentials(scheme="Bearer", credentials=token)


class TestUserModel:
    def test_from_auth_data_maps_claims(self):
        user = User.from_auth_data({
            "id": "u1",
            "email": "",
            "phone": "919876543210",
            "user_metadata": {"full_name": "Asha Nair"},
            "app_metadata": {"role": "stateAdmin", "state": "Kerala"},
        })

        assert user.email is None
        assert user.phone == "919876543210"
        assert user.full_name == "Asha Nair"
        assert user.role == "stateAdmin"
        assert user.is_admin
        assert not user.is_super_admin

    def test_super_admin_flag_must_be_true(self):
        assert User(id="u1", claims={"superAdmin": True}).is_super_admin
        assert not User(id="u1", claims={"superAdmin": "yes"}).is_super_admin

    def test_plain_user_is_not_admin(self):
        assert not User(id="u1").is_admin

    def test_user_to_dict(self):
        gotrue_user = SimpleNamespace(
            id="u1",
            email="a@example.com",
            phone="",
            email_confirmed_at=None,
            created_at="2024-01-01T00:00:00Z",
            user_metadata=None,
            app_metadata={"superAdmin": True},
        )

        data = user_to_dict(gotrue_user)

        assert data["email_confirmed"] is False
        assert data["user_metadata"] == {}
        assert data["app_metadata"] == {"superAdmin": True}


class TestRoleDependencies:
    def test_require_admin_accepts_state_admin(self, admin_user):
        assert require_admin(admin_user) is admin_user

    def test_require_admin_rejects_employee(self, mock_user):
        with pytest.raises(HTTPException) as exc_info:
            require_admin(mock_user)
        assert exc_info.value.status_code == 403

    def test_require_super_admin(self, admin_user, super_admin_user):
        assert require_super_admin(super_admin_user) is super_admin_user
        with pytest.raises(HTTPException) as exc_info:
            require_super_admin(admin_user)
        assert exc_info.value.status_code == 403


class TestCurrentUser:
    @pytest.mark.asyncio
    async def test_unconfigured_auth_is_503(self):
        with patch.object(SupabaseClient, "_client", None):
            with pytest.raises(HTTPException) as exc_info:
                await get_current_user(bearer())
        assert exc_info.value.status_code == 503

    @pytest.mark.asyncio
    async def test_missing_credentials_is_401(self):
        with patch.object(SupabaseClient, "_client", object()):
            with pytest.raises(HTTPException) as exc_info:
                await get_current_user(None)
        assert exc_info.value.status_code == 401

    @pytest.mark.asyncio
    async def test_invalid_token_is_401(self):
        with patch.object(SupabaseClient, "_client", object()), \
                patch("auth.dependencies.verify_jwt", AsyncMock(return_value=None)):
            with pytest.raises(HTTPException) as exc_info:
                await get_current_user(bearer())
        assert exc_info.value.status_code == 401

    @pytest.mark.asyncio
    async def test_valid_token(self):
        data = {"id": "u1", "email": "a@example.com", "app_metadata": {"superAdmin": True}}
        with patch.object(SupabaseClient, "_client", object()), \
                patch("auth.dependencies.verify_jwt", AsyncMock(return_value=data)):
            user = await get_current_user(bearer())
        assert user.id == "u1"
        assert user.is_super_admin

    @pytest.mark.asyncio
    async def test_optional_user_without_token(self):
        with patch.object(SupabaseClient, "_client", object()):
            assert await get_optional_user(None) is None
