"""
Tests for bearer token verification and member role resolution.

Tests cover:
- Authorization header parsing
- Token verification failures map to 401 with a specific error code
- Members without a profiles row fall back to role 'employee'
- Profile lookup failures return 500
- /auth/me with a real header goes through the dependency chain
"""

from unittest.mock import MagicMock, patch

import pytest
from fastapi import HTTPException
from jwt.exceptions import ExpiredSignatureError, InvalidSignatureError, PyJWKClientError

from command_centre.auth.dependencies import (
    AuthenticatedUser,
    _extract_bearer_token,
    decode_access_token,
    get_authenticated_user,
    get_current_member,
)
from command_centre.config import settings


AUTH_USER = AuthenticatedUser(
    user_id="u-7",
    access_token="header.payload.signature",
    email="kavya.nair@agency.com",
)


@pytest.fixture
def mock_jwks():
    with patch("command_centre.auth.dependencies.get_jwks_client") as mock:
        jwks_client = MagicMock()
        jwks_client.get_signing_key_from_jwt.return_value = MagicMock(key="public-key")
        mock.return_value = jwks_client
        yield jwks_client


class TestBearerHeader:
    def test_missing(self):
        with pytest.raises(HTTPException) as exc_info:
            _extract_bearer_token(None)
        assert exc_info.value.status_code == 401
        assert exc_info.value.detail["details"] == "Missing Authorization header"

    @pytest.mark.parametrize("header", ["Token abc", "Bearer", "Bearer a b"])
    def test_malformed(self, header):
        with pytest.raises(HTTPException) as exc_info:
            _extract_bearer_token(header)
        assert exc_info.value.status_code == 401
        assert exc_info.value.detail["details"] == "Invalid Authorization header format"

    def test_scheme_is_case_insensitive(self):
        assert _extract_bearer_token("bearer abc.def") == "abc.def"


class TestDecodeAccessToken:
    def test_valid_token(self, mock_jwks):
        with patch("command_centre.auth.dependencies.decode") as mock_decode:
            mock_decode.return_value = {"sub": "u-7"}
            payload = decode_access_token("tok")

        assert payload == {"sub": "u-7"}
        args, kwargs = mock_decode.call_args
        assert args == ("tok", "public-key")
        assert kwargs["algorithms"] == ["ES256"]
        assert kwargs["audience"] == "authenticated"
        assert kwargs["issuer"] == f"{settings.SUPABASE_URL.rstrip('/')}/auth/v1"

    @pytest.mark.parametrize(
        "raised, error",
        [
            (ExpiredSignatureError("Signature has expired"), "token_expired"),
            (InvalidSignatureError("Signature verification failed"), "invalid_token"),
        ],
    )
    def test_rejected_tokens(self, mock_jwks, raised, error):
        with patch("command_centre.auth.dependencies.decode") as mock_decode:
            mock_decode.side_effect = raised
            with pytest.raises(HTTPException) as exc_info:
                decode_access_token("tok")

        assert exc_info.value.status_code == 401
        assert exc_info.value.detail["error"] == error

    def test_unknown_signing_key(self, mock_jwks):
        mock_jwks.get_signing_key_from_jwt.side_effect = PyJWKClientError("Unable to find a signing key")
        with pytest.raises(HTTPException) as exc_info:
            decode_access_token("tok")
        assert exc_info.value.detail["error"] == "jwks_error"


class TestAuthenticatedUser:
    @pytest.mark.asyncio
    async def test_identity_from_claims(self):
        with patch("command_centre.auth.dependencies.decode_access_token") as mock_decode:
            mock_decode.return_value = {"sub": "u-7", "email": "kavya.nair@agency.com"}
            user = await get_authenticated_user("Bearer tok")

        assert user == AuthenticatedUser(user_id="u-7", access_token="tok", email="kavya.nair@agency.com")

    @pytest.mark.asyncio
    async def test_missing_sub(self):
        with patch("command_centre.auth.dependencies.decode_access_token") as mock_decode:
            mock_decode.return_value = {"email": "kavya.nair@agency.com"}
            with pytest.raises(HTTPException) as exc_info:
                await get_authenticated_user("Bearer tok")

        assert exc_info.value.status_code == 401


class TestCurrentMember:
    @pytest.mark.asyncio
    async def test_role_from_profile(self):
        with patch("command_centre.auth.dependencies._fetch_profile") as mock_fetch:
            mock_fetch.return_value = {"id": "u-7", "name": "Kavya Nair", "email": "kavya.nair@agency.com", "role": "teamlead"}
            member = await get_current_member(AUTH_USER)

        assert member.role == "teamlead"
        assert member.name == "Kavya Nair"
        mock_fetch.assert_called_once_with("header.payload.signature", "u-7")

    @pytest.mark.asyncio
    async def test_no_profile_defaults_to_employee(self):
        with patch("command_centre.auth.dependencies._fetch_profile") as mock_fetch:
            mock_fetch.return_value = None
            member = await get_current_member(AUTH_USER)

        assert member.role == "employee"
        assert member.name == "kavya.nair"
        assert member.email == "kavya.nair@agency.com"

    @pytest.mark.asyncio
    async def test_profile_without_role(self):
        with patch("command_centre.auth.dependencies._fetch_profile") as mock_fetch:
            mock_fetch.return_value = {"id": "u-7", "name": None, "email": None, "role": None}
            member = await get_current_member(AUTH_USER)

        assert member.role == "employee"
        assert member.name == "kavya.nair"

    @pytest.mark.asyncio
    async def test_lookup_failure(self):
        with patch("command_centre.auth.dependencies._fetch_profile") as mock_fetch:
            mock_fetch.side_effect = Exception("JWT expired")
            with pytest.raises(HTTPException) as exc_info:
                await get_current_member(AUTH_USER)

        assert exc_info.value.status_code == 500
        assert exc_info.value.detail == {
            "error": "profile_error",
            "details": "Failed to resolve member role: JWT expired",
        }

    def test_fetch_profile_queries_caller_row(self, supabase_factory, query_factory):
        from command_centre.auth.dependencies import _fetch_profile

        query = query_factory([{"id": "u-7", "role": "manager"}])
        supabase = supabase_factory({"profiles": query})
        with patch("command_centre.auth.dependencies.get_supabase_client", return_value=supabase) as mock_client:
            profile = _fetch_profile("tok", "u-7")

        assert profile == {"id": "u-7", "role": "manager"}
        mock_client.assert_called_once_with("tok")
        query.eq.assert_called_once_with("id", "u-7")


def test_me_through_header(client):
    with patch("command_centre.auth.dependencies.decode_access_token") as mock_decode, \
         patch("command_centre.auth.dependencies._fetch_profile") as mock_fetch:
        mock_decode.return_value = {"sub": "u-7", "email": "kavya.nair@agency.com"}
        mock_fetch.return_value = {"id": "u-7", "name": "Kavya Nair", "email": "kavya.nair@agency.com", "role": "manager"}
        response = client.get("/auth/me", headers={"Authorization": "Bearer tok"})

    assert response.status_code == 200
    assert response.json()["role"] == "manager"
    assert response.json()["user_id"] == "u-7"


def test_expired_token_through_header(client):
    with patch("command_centre.auth.dependencies.decode_access_token") as mock_decode:
        mock_decode.side_effect = HTTPException(
            status_code=401,
            detail={"error": "token_expired", "details": "Authentication token has expired"},
        )
        response = client.get("/auth/me", headers={"Authorization": "Bearer tok"})

    assert response.status_code == 401
    assert response.json()["detail"]["error"] == "token_expired"
