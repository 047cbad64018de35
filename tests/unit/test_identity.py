"""Unit tests for password hashing, tokens and email acceptance."""

from datetime import datetime, timedelta, timezone

import jwt
import pytest
from pydantic import ValidationError as PydanticValidationError

from edugram.auth.jwt import create_access_token, verify_token
from edugram.auth.password import hash_password, validate_password, verify_password
from edugram.auth.schemas import SignupRequest
from edugram.config import get_settings
from edugram.errors import Unauthorized, ValidationError
from edugram.profiles.service import is_accepted_email


class TestPassword:
    def test_hash_and_verify(self):
        hashed = hash_password("Secret123")
        assert hashed.startswith("$argon2id$")
        assert verify_password("Secret123", hashed) is True

    def test_wrong_password(self):
        assert verify_password("nope", hash_password("Secret123")) is False

    def test_corrupt_hash_does_not_raise(self):
        assert verify_password("Secret123", "not-a-hash") is False

    def test_too_short_rejected(self):
        with pytest.raises(ValidationError, match="at least"):
            validate_password("abc")

    def test_blank_rejected(self):
        with pytest.raises(ValidationError, match="empty"):
            validate_password("      ")


class TestAccessToken:
    def test_create_and_verify(self):
        token = create_access_token("u123", "ada@mit.edu")
        payload = verify_token(token)
        assert payload["sub"] == "u123"
        assert payload["email"] == "ada@mit.edu"
        assert payload["type"] == "access"

    def test_garbage_rejected(self):
        with pytest.raises(Unauthorized):
            verify_token("not.a.token")

    def test_wrong_secret_rejected(self):
        settings = get_settings()
        forged = jwt.encode(
            {"sub": "u1", "type": "access", "iss": settings.jwt_issuer},
            "some-other-secret",
            algorithm="HS256",
        )
        with pytest.raises(Unauthorized):
            verify_token(forged)

    def test_expired_rejected(self):
        settings = get_settings()
        past = datetime.now(timezone.utc) - timedelta(hours=2)
        expired = jwt.encode(
            {"sub": "u1", "type": "access", "iss": settings.jwt_issuer, "iat": past, "exp": past + timedelta(minutes=1)},
            settings.jwt_secret,
            algorithm=settings.jwt_algorithm,
        )
        with pytest.raises(Unauthorized, match="expired"):
            verify_token(expired)

    def test_non_access_token_rejected(self):
        settings = get_settings()
        token = jwt.encode(
            {"sub": "u1", "type": "refresh", "iss": settings.jwt_issuer},
            settings.jwt_secret,
            algorithm=settings.jwt_algorithm,
        )
        with pytest.raises(Unauthorized):
            verify_token(token)


class TestAcceptedEmail:
    @pytest.mark.parametrize("email", ["ada@mit.edu", "bob@test.com", "c@example.com", "d@demo.com", "E@CS.STANFORD.EDU"])
    def test_accepted(self, email):
        assert is_accepted_email(email) is True

    @pytest.mark.parametrize("email", ["ada@gmail.com", "bob@edu.com", "c@test.co"])
    def test_rejected(self, email):
        assert is_accepted_email(email) is False

    def test_custom_suffixes(self):
        assert is_accepted_email("x@uni.ac.uk", [".ac.uk"]) is True
        assert is_accepted_email("x@mit.edu", [".ac.uk"]) is False


class TestSignupRequest:
    def test_full_name_and_email_normalized(self):
        body = SignupRequest.model_validate({"email": " Ada@MIT.edu ", "password": "Secret123", "fullName": "  Ada  "})
        assert body.email == "ada@mit.edu"
        assert body.full_name == "Ada"

    def test_blank_full_name_rejected(self):
        with pytest.raises(PydanticValidationError):
            SignupRequest.model_validate({"email": "ada@mit.edu", "password": "Secret123", "fullName": "   "})
