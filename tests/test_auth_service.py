"""
Postboard Backend — Credential Service Unit Tests
===================================================

What:  Password hashing and token issue/verify round trips.
How:   Explicit secrets and a low bcrypt cost keep the tests fast and
       independent of the environment.
"""

from datetime import datetime, timedelta, timezone
from unittest.mock import patch

import jwt
import pytest

from postboard.schemas.auth import Identity
from postboard.services.auth_service import CredentialService

SECRET = "unit-test-secret-0123456789abcdef0123456789"


class TestPasswords:

    def setup_method(self):
        self.service = CredentialService(secret=SECRET, rounds=4)

    def test_hash_is_not_plaintext(self):
        hashed = self.service.hash_password("secret123")
        assert hashed != "secret123"
        assert hashed.startswith("$2")

    def test_hash_is_salted(self):
        assert self.service.hash_password("secret123") != self.service.hash_password("secret123")

    def test_verify_correct_password(self):
        hashed = self.service.hash_password("secret123")
        assert self.service.verify_password("secret123", hashed) is True

    def test_verify_wrong_password(self):
        hashed = self.service.hash_password("secret123")
        assert self.service.verify_password("secret124", hashed) is False

    def test_verify_malformed_hash_is_false(self):
        assert self.service.verify_password("secret123", "not-a-bcrypt-hash") is False


class TestTokens:

    def setup_method(self):
        self.service = CredentialService(secret=SECRET, expires_in=timedelta(hours=5))
        self.identity = Identity(user_id="3f1c5c1e-8a9b-4f6e-9d1a-2b3c4d5e6f70", email="a@x.com")

    def test_round_trip(self):
        token = self.service.issue_token(self.identity)
        assert self.service.decode_token(token) == self.identity

    def test_claims_carry_user_and_expiry(self):
        token = self.service.issue_token(self.identity)
        payload = jwt.decode(token, SECRET, algorithms=["HS256"])

        assert payload["userId"] == self.identity.user_id
        assert payload["email"] == "a@x.com"
        assert payload["exp"] - payload["iat"] == 5 * 3600

    def test_expired_token_is_rejected(self):
        past = datetime.now(timezone.utc) - timedelta(hours=6)
        token = jwt.encode(
            {"userId": self.identity.user_id, "email": "a@x.com", "iat": past,
             "exp": past + timedelta(hours=5)},
            SECRET,
            algorithm="HS256",
        )
        assert self.service.decode_token(token) is None

    def test_token_signed_with_other_secret_is_rejected(self):
        other = CredentialService(secret="another-secret-0123456789abcdef0123456")
        token = other.issue_token(self.identity)
        assert self.service.decode_token(token) is None

    @pytest.mark.parametrize("token", ["", "garbage", "a.b.c"])
    def test_malformed_token_is_rejected(self, token):
        assert self.service.decode_token(token) is None

    def test_token_without_user_claim_is_rejected(self):
        token = jwt.encode(
            {"email": "a@x.com", "exp": datetime.now(timezone.utc) + timedelta(hours=1)},
            SECRET,
            algorithm="HS256",
        )
        assert self.service.decode_token(token) is None

    def test_unusable_key_is_rejected(self):
        token = self.service.issue_token(self.identity)

        with patch(
            "postboard.services.auth_service.jwt.decode",
            side_effect=jwt.InvalidKeyError("HMAC key must not be empty."),
        ):
            assert self.service.decode_token(token) is None

    def test_empty_secret_verifies_nothing(self):
        token = self.service.issue_token(self.identity)
        assert CredentialService(secret="").decode_token(token) is None
