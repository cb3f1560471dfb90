"""Tests for password hashing and tokens."""

import uuid
from datetime import datetime, timedelta, timezone

import jwt
import pytest

from app.invoice_api.config import get_settings
from app.invoice_api.services.auth_service import (
    create_access_token,
    decode_access_token,
    hash_password,
    verify_password,
)


class TestPasswords:
    """Tests for bcrypt hashing."""

    def test_hash_and_verify(self):
        """Test a hash verifies its own password only."""
        hashed = hash_password("secret123")
        assert hashed != "secret123"
        assert verify_password("secret123", hashed)
        assert not verify_password("secret124", hashed)

    def test_malformed_hash(self):
        """Test a corrupt stored hash does not raise."""
        assert verify_password("secret123", "not-a-bcrypt-hash") is False


class TestTokens:
    """Tests for JWT issuing and decoding."""

    def test_round_trip(self):
        """Test a token decodes to the user id it was issued for."""
        user_id = uuid.uuid4()
        assert decode_access_token(create_access_token(user_id)) == user_id

    def test_expired_token_rejected(self):
        """Test expired tokens fail."""
        settings = get_settings()
        past = datetime.now(timezone.utc) - timedelta(days=1)
        token = jwt.encode(
            {"sub": str(uuid.uuid4()), "exp": past},
            settings.jwt_secret,
            algorithm=settings.jwt_algorithm,
        )
        with pytest.raises(jwt.ExpiredSignatureError):
            decode_access_token(token)

    def test_wrong_secret_rejected(self):
        """Test tokens signed with another key fail."""
        token = jwt.encode({"sub": str(uuid.uuid4())}, "some-other-secret-of-enough-length", algorithm="HS256")
        with pytest.raises(jwt.InvalidTokenError):
            decode_access_token(token)

    def test_non_uuid_subject_rejected(self):
        """Test a subject that is not a user id fails."""
        settings = get_settings()
        token = jwt.encode({"sub": "admin"}, settings.jwt_secret, algorithm=settings.jwt_algorithm)
        with pytest.raises(jwt.InvalidTokenError):
            decode_access_token(token)
