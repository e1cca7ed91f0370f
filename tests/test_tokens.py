"""
tests/test_tokens.py -- Unit tests for password hashing and session tokens.

Covers:
  - hash_password() never returns the plaintext and salts every hash
  - verify_password() accepts the right password, rejects others, and treats
    a malformed digest as a mismatch rather than an error
  - TokenSigner.issue()/verify(): round trip, 7-day lifetime, expiry,
    foreign-secret rejection, tampering, missing identity claims
"""

from __future__ import annotations

from datetime import timedelta

import pytest
from jose import jwt

from auth.models import Identity
from auth.tokens import (
    InvalidTokenError,
    TokenError,
    TokenExpiredError,
    TokenSigner,
    hash_password,
    verify_password,
)

SECRET = "unit-test-secret-key-0123456789abcdef"
OTHER_SECRET = "another-secret-key-fedcba9876543210xyz"
USER_ID = "0123456789abcdef0123456789abcdef"


class TestPasswordHashing:
    def test_hash_is_not_plaintext(self) -> None:
        digest = hash_password("p")
        assert digest != "p"
        assert digest.startswith("$2")

    def test_cost_factor_is_ten(self) -> None:
        """bcrypt encodes the cost in the digest: $2b$10$..."""
        assert hash_password("secret").split("$")[2] == "10"

    def test_hashes_are_salted(self) -> None:
        assert hash_password("same", rounds=4) != hash_password("same", rounds=4)

    def test_verify_accepts_matching_password(self) -> None:
        digest = hash_password("correct horse", rounds=4)
        assert verify_password("correct horse", digest) is True

    @pytest.mark.parametrize("attempt", ["correct hors", "Correct horse", "", "correct horse "])
    def test_verify_rejects_other_passwords(self, attempt: str) -> None:
        digest = hash_password("correct horse", rounds=4)
        assert verify_password(attempt, digest) is False

    @pytest.mark.parametrize("password", ["x" * 100, "é" * 50, "a" + "日本" * 30])
    def test_passwords_over_72_bytes_hash_and_verify(self, password: str) -> None:
        """Only the first 72 UTF-8 bytes count; longer input must not raise."""
        assert len(password.encode("utf-8")) > 72
        digest = hash_password(password, rounds=4)
        assert verify_password(password, digest) is True
        assert verify_password(password[:10], digest) is False

    @pytest.mark.parametrize("digest", ["", "not-a-bcrypt-hash", "$2b$10$short"])
    def test_verify_malformed_digest_returns_false(self, digest: str) -> None:
        assert verify_password("anything", digest) is False


class TestTokenSigner:
    def test_round_trip_returns_claims(self) -> None:
        signer = TokenSigner(SECRET)
        claims = signer.verify(signer.issue(USER_ID, "a@x.com"))
        assert claims.id == USER_ID
        assert claims.email == "a@x.com"
        assert claims.identity() == Identity(id=USER_ID, email="a@x.com")

    def test_default_lifetime_is_seven_days(self) -> None:
        signer = TokenSigner(SECRET)
        claims = signer.verify(signer.issue(USER_ID, "a@x.com"))
        assert claims.expires_at - claims.issued_at == timedelta(days=7)

    def test_expired_token_rejected(self) -> None:
        signer = TokenSigner(SECRET, expire_seconds=-60)
        token = signer.issue(USER_ID, "a@x.com")
        with pytest.raises(TokenExpiredError):
            TokenSigner(SECRET).verify(token)

    def test_foreign_secret_rejected(self) -> None:
        token = TokenSigner(OTHER_SECRET).issue(USER_ID, "a@x.com")
        with pytest.raises(InvalidTokenError):
            TokenSigner(SECRET).verify(token)

    def test_tampered_payload_rejected(self) -> None:
        signer = TokenSigner(SECRET)
        header, payload, signature = signer.issue(USER_ID, "a@x.com").split(".")
        forged = jwt.encode({"id": USER_ID, "email": "admin@x.com", "iat": 0, "exp": 9999999999}, OTHER_SECRET)
        forged_payload = forged.split(".")[1]
        with pytest.raises(InvalidTokenError):
            signer.verify(f"{header}.{forged_payload}.{signature}")

    @pytest.mark.parametrize("token", ["", "garbage", "a.b.c"])
    def test_malformed_token_rejected(self, token: str) -> None:
        with pytest.raises(InvalidTokenError):
            TokenSigner(SECRET).verify(token)

    def test_missing_identity_claims_rejected(self) -> None:
        """A correctly signed token without id/email is still not a session."""
        token = jwt.encode({"sub": "someone", "iat": 1, "exp": 9999999999}, SECRET, algorithm="HS256")
        with pytest.raises(InvalidTokenError):
            TokenSigner(SECRET).verify(token)

    def test_errors_share_a_base_class(self) -> None:
        assert issubclass(InvalidTokenError, TokenError)
        assert issubclass(TokenExpiredError, TokenError)

    def test_decode_is_soft(self) -> None:
        signer = TokenSigner(SECRET)
        assert signer.decode("garbage") is None
        assert signer.decode(TokenSigner(OTHER_SECRET).issue(USER_ID, "a@x.com")) is None
        assert signer.decode(signer.issue(USER_ID, "a@x.com")).email == "a@x.com"

    def test_empty_secret_refused(self) -> None:
        with pytest.raises(ValueError):
            TokenSigner("")
