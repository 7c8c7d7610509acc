"""Unit tests for the JWT token issuer."""

import pytest
from datetime import timedelta

from common.auth import InvalidTokenError, JWTAuth, TokenKind


class TestTokenPair:
    def test_pair_round_trips_with_kind(self, jwt_auth):
        pair = jwt_auth.create_token_pair("user-1")

        access = jwt_auth.verify_token(pair.access_token, TokenKind.ACCESS)
        refresh = jwt_auth.verify_token(pair.refresh_token, TokenKind.REFRESH)

        assert access.subject == refresh.subject == "user-1"
        assert access.kind is TokenKind.ACCESS
        assert refresh.kind is TokenKind.REFRESH

    def test_lifetimes_follow_configuration(self, jwt_auth):
        pair = jwt_auth.create_token_pair("user-1")

        access = jwt_auth.verify_token(pair.access_token, TokenKind.ACCESS)
        refresh = jwt_auth.verify_token(pair.refresh_token, TokenKind.REFRESH)

        assert access.expires_at - access.issued_at == timedelta(minutes=60)
        assert refresh.expires_at - refresh.issued_at == timedelta(days=30)

    def test_tokens_minted_together_are_distinct(self, jwt_auth):
        first = jwt_auth.create_token_pair("user-1")
        second = jwt_auth.create_token_pair("user-1")

        assert first.refresh_token != second.refresh_token
        assert first.access_token != second.access_token

    def test_to_dict_uses_wire_names(self, jwt_auth):
        pair = jwt_auth.create_token_pair("user-1")
        assert set(pair.to_dict()) == {"accessToken", "refreshToken"}


class TestVerifyToken:
    def test_refresh_token_is_not_an_access_token(self, jwt_auth):
        pair = jwt_auth.create_token_pair("user-1")
        with pytest.raises(InvalidTokenError):
            jwt_auth.verify_token(pair.refresh_token, TokenKind.ACCESS)

    def test_access_token_is_not_a_refresh_token(self, jwt_auth):
        pair = jwt_auth.create_token_pair("user-1")
        with pytest.raises(InvalidTokenError):
            jwt_auth.verify_token(pair.access_token, TokenKind.REFRESH)

    def test_expired_token(self, jwt_auth):
        token = jwt_auth.create_token("user-1", TokenKind.ACCESS, ttl=timedelta(seconds=-10))
        with pytest.raises(InvalidTokenError):
            jwt_auth.verify_token(token, TokenKind.ACCESS)

    def test_wrong_secret(self, jwt_auth):
        other = JWTAuth(secret="another-secret")
        token = other.create_token("user-1")
        with pytest.raises(InvalidTokenError):
            jwt_auth.verify_token(token, TokenKind.ACCESS)

    @pytest.mark.parametrize("token", ["", "abc.def.ghi", "not-a-token"])
    def test_malformed(self, jwt_auth, token):
        with pytest.raises(InvalidTokenError):
            jwt_auth.verify_token(token, TokenKind.ACCESS)

    def test_empty_secret_is_refused(self):
        with pytest.raises(ValueError):
            JWTAuth(secret="")
