"""
Tests for password hashing and identity tokens.

Critical security tests to prevent:
- Authentication bypass (expired or re-signed tokens accepted)
- Weak hashing (cost factor below 10)
- Token tampering (payload swapped under a valid signature)
"""
from datetime import datetime, timedelta, timezone

import jwt
import pytest

from backend.errors import Unauthorized
from backend.security import TOKEN_LIFETIME, TokenIssuer, check_password, hash_password

SECRET = "test_secret_key_minimum_32_characters_long"


@pytest.fixture
def issuer():
    return TokenIssuer(secret_key=SECRET)


class TestPasswordHashing:

    def test_hash_is_bcrypt_with_cost_at_least_10(self):
        password_hash = hash_password("secret123")
        assert password_hash.startswith("$2")
        assert int(password_hash.split("$")[2]) >= 10

    def test_same_password_hashes_differently(self):
        assert hash_password("secret123") != hash_password("secret123")

    def test_check_password_accepts_correct_password(self):
        assert check_password("secret123", hash_password("secret123")) is True

    def test_check_password_rejects_wrong_password(self):
        assert check_password("wrong-pass", hash_password("secret123")) is False

    def test_check_password_handles_empty_and_corrupted_hash(self):
        assert check_password("secret123", "") is False
        assert check_password("secret123", "not-a-bcrypt-hash") is False

    def test_hash_password_rejects_empty(self):
        with pytest.raises(ValueError, match="Password cannot be empty"):
            hash_password("")


class TestTokens:

    def test_issued_token_verifies_to_same_faculty(self, issuer):
        claims = issuer.verify(issuer.issue(42))
        assert claims.faculty_id == 42
        assert claims.email is None

    def test_optional_claims_are_embedded(self, issuer):
        token = issuer.issue(7, {"email": "ada@college.edu", "name": "Ada", "department": "CS"})
        claims = issuer.verify(token)
        assert (claims.email, claims.name, claims.department) == ("ada@college.edu", "Ada", "CS")

    def test_validity_window_is_seven_days(self, issuer):
        claims = issuer.verify(issuer.issue(1))
        assert TOKEN_LIFETIME == timedelta(days=7)
        assert claims.exp - claims.iat == timedelta(days=7)

    def test_token_signed_with_other_secret_is_rejected(self, issuer):
        forged = TokenIssuer(secret_key="another_secret_key_that_is_32_chars_long").issue(1)
        with pytest.raises(Unauthorized):
            issuer.verify(forged)

    def test_swapped_payload_is_rejected(self, issuer):
        head, _, signature = issuer.issue(1).split(".")
        _, other_payload, _ = issuer.issue(2).split(".")
        with pytest.raises(Unauthorized):
            issuer.verify(f"{head}.{other_payload}.{signature}")

    def test_expired_token_is_rejected(self):
        expired = TokenIssuer(secret_key=SECRET, lifetime=timedelta(seconds=-10))
        with pytest.raises(Unauthorized, match="expired"):
            expired.verify(expired.issue(1))

    def test_token_without_faculty_id_is_rejected(self, issuer):
        now = datetime.now(timezone.utc)
        token = jwt.encode({"iat": now, "exp": now + timedelta(hours=1)}, SECRET, algorithm="HS256")
        with pytest.raises(Unauthorized):
            issuer.verify(token)

    def test_garbage_and_empty_tokens_are_rejected(self, issuer):
        for token in ("", "not.a.token", "abc"):
            with pytest.raises(Unauthorized):
                issuer.verify(token)

    def test_issuer_requires_secret(self):
        with pytest.raises(ValueError):
            TokenIssuer(secret_key="")
