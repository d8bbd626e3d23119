"""
Sparkz Backend: Credential & Token Unit Tests
==============================================

What we test:
    ✅ bcrypt hashes verify, wrong passwords and broken hashes do not
    ✅ Tokens round-trip to the user id
    ✅ Expired, tampered, foreign-secret and "none"-alg tokens are rejected
    ✅ verify_token never raises
"""

from datetime import datetime, timedelta, timezone

import pytest
from jose import jwt

from app.config import Settings, settings
from app.services.security import (
    hash_password,
    issue_token,
    verify_password,
    verify_token,
)


class TestPasswordHashing:

    def test_hash_is_bcrypt_with_configured_cost(self):
        hashed = hash_password("s3cret-pass")
        assert hashed.startswith(f"$2b${settings.bcrypt_rounds:02d}$")

    def test_default_cost_factor_is_ten(self):
        assert Settings.model_fields["bcrypt_rounds"].default == 10

    def test_same_password_gets_distinct_salts(self):
        assert hash_password("same") != hash_password("same")

    def test_correct_password_verifies(self):
        hashed = hash_password("s3cret-pass")
        assert verify_password("s3cret-pass", hashed) is True

    def test_wrong_password_fails(self):
        hashed = hash_password("s3cret-pass")
        assert verify_password("s3cret-pasS", hashed) is False

    def test_missing_hash_fails_without_raising(self):
        assert verify_password("anything", None) is False
        assert verify_password("anything", "") is False

    def test_unrecognised_hash_fails_without_raising(self):
        assert verify_password("anything", "not-a-bcrypt-hash") is False


class TestTokens:

    def test_round_trip(self):
        token = issue_token(42)
        assert verify_token(token) == 42

    def test_claims(self):
        issued = datetime(2026, 1, 1, tzinfo=timezone.utc)
        token = issue_token(7, now=issued)
        claims = jwt.get_unverified_claims(token)
        assert claims["sub"] == "7"
        assert claims["iat"] == int(issued.timestamp())
        assert claims["exp"] - claims["iat"] == 7 * 24 * 3600

    def test_expired_token_rejected(self):
        issued = datetime.now(timezone.utc) - timedelta(days=settings.token_ttl_days, seconds=5)
        assert verify_token(issue_token(1, now=issued)) is None

    def test_tampered_token_rejected(self):
        token = issue_token(1)
        header, payload, signature = token.split(".")
        flipped = ("A" if signature[0] != "A" else "B") + signature[1:]
        assert verify_token(f"{header}.{payload}.{flipped}") is None

    def test_foreign_secret_rejected(self):
        now = datetime.now(timezone.utc)
        forged = jwt.encode(
            {"sub": "1", "iat": int(now.timestamp()), "exp": int((now + timedelta(days=1)).timestamp())},
            "some-other-secret-that-is-long-enough-to-sign",
            algorithm="HS256",
        )
        assert verify_token(forged) is None

    def test_unsigned_token_rejected(self):
        # {"alg":"none"} header with a valid-looking payload and no signature
        unsigned = (
            "eyJhbGciOiJub25lIiwidHlwIjoiSldUIn0."
            "eyJzdWIiOiIxIiwiZXhwIjo0MTAyNDQ0ODAwfQ."
        )
        assert verify_token(unsigned) is None

    def test_non_integer_subject_rejected(self):
        now = datetime.now(timezone.utc)
        token = jwt.encode(
            {"sub": "admin", "iat": int(now.timestamp()), "exp": int((now + timedelta(days=1)).timestamp())},
            settings.jwt_secret,
            algorithm=settings.jwt_algorithm,
        )
        assert verify_token(token) is None

    @pytest.mark.parametrize("garbage", [None, "", "abc", "a.b.c", "Bearer x", "🎧"])
    def test_garbage_never_raises(self, garbage):
        assert verify_token(garbage) is None
