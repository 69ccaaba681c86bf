"""Tests for security module: bcrypt password hashing and token handling."""
import pytest

from cisops.core.security import (
    TokenExpiredError,
    TokenValidationError,
    create_access_token,
    decode_token,
    hash_password,
    validate_password_strength,
    verify_password,
)


class TestPasswordHashing:
    def test_hash_returns_bcrypt_format(self):
        h = hash_password("SecurePass1")
        assert h.startswith("$2b$"), f"Expected $2b$ prefix, got: {h[:10]}"

    def test_verify_correct_password(self):
        h = hash_password("MyP@ssw0rd")
        assert verify_password("MyP@ssw0rd", h) is True

    def test_verify_wrong_password(self):
        h = hash_password("RightPass1")
        assert verify_password("WrongPass1", h) is False

    def test_different_hashes_for_same_password(self):
        """Each call should produce a unique salt."""
        h1 = hash_password("SamePass1")
        h2 = hash_password("SamePass1")
        assert h1 != h2
        assert verify_password("SamePass1", h1)
        assert verify_password("SamePass1", h2)


class TestPasswordStrength:
    def test_rejects_short_password(self):
        with pytest.raises(ValueError, match="at least 8"):
            validate_password_strength("Short1")

    def test_rejects_all_digits(self):
        with pytest.raises(ValueError, match="letters and numbers"):
            validate_password_strength("12345678")

    def test_rejects_single_case(self):
        with pytest.raises(ValueError, match="mixed case"):
            validate_password_strength("password123")

    def test_accepts_strong_password(self):
        validate_password_strength("Password123")


class TestTokens:
    def test_access_token_round_trip(self):
        token = create_access_token("42", role="admin")
        payload = decode_token(token)
        assert payload["sub"] == "42"
        assert payload["role"] == "admin"
        assert payload["type"] == "access"

    def test_expired_token(self):
        token = create_access_token("42", expires_minutes=-1)
        with pytest.raises(TokenExpiredError):
            decode_token(token)

    def test_garbage_token(self):
        with pytest.raises(TokenValidationError):
            decode_token("not-a-jwt")
