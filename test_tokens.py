# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false

"""Bearer tokens and password hashing."""

import jwt
import pytest

from devtrack.core.errors import AuthenticationError
from devtrack.services.credentials import CredentialService
from devtrack.services.token_service import TokenService


class TestTokenService:
    def test_round_trip_claims(self):
        tokens = TokenService("s3cret")
        claims = tokens.verify(tokens.issue("user-1", "a@example.com"))
        assert claims["id"] == "user-1"
        assert claims["email"] == "a@example.com"
        assert claims["exp"] - claims["iat"] == 24 * 3600

    def test_expired(self):
        tokens = TokenService("s3cret", expires_hours=-1)
        with pytest.raises(AuthenticationError, match="Token has expired"):
            tokens.verify(tokens.issue("user-1", "a@example.com"))

    def test_wrong_secret(self):
        token = TokenService("one").issue("user-1", "a@example.com")
        with pytest.raises(AuthenticationError, match="Token is not valid"):
            TokenService("two").verify(token)

    def test_missing(self):
        with pytest.raises(AuthenticationError, match="No token"):
            TokenService("s3cret").verify("")

    def test_token_without_id(self):
        token = jwt.encode({"email": "a@example.com"}, "s3cret", algorithm="HS256")
        with pytest.raises(AuthenticationError) as exc:
            TokenService("s3cret").verify(token)
        assert exc.value.status_code == 401


class TestCredentialService:
    def test_hash_and_verify(self):
        credentials = CredentialService(rounds=4)
        hashed = credentials.hash("secret123")
        assert hashed != "secret123"
        assert credentials.verify("secret123", hashed)
        assert not credentials.verify("secret124", hashed)

    def test_malformed_hash_is_a_mismatch(self):
        assert not CredentialService(rounds=4).verify("secret123", "not-a-bcrypt-hash")
