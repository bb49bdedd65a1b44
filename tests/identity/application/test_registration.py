"""Application tests for RegisterUser and user lookup."""

import pytest
from identity.auth import verify_password
from identity.user.registration import RegisterUser
from identity.user.user import User
from protean import current_domain
from protean.exceptions import ValidationError


def _register(email="jane@example.com", password="s3cret-pass"):
    return current_domain.process(
        RegisterUser(name="Jane", email=email, password=password),
        asynchronous=False,
    )


class TestRegisterUser:
    def test_returns_persisted_user_id(self):
        user_id = _register()
        user = current_domain.repository_for(User).get(user_id)
        assert user.email == "jane@example.com"

    def test_password_is_hashed(self):
        user = current_domain.repository_for(User).get(_register())
        assert user.password_hash != "s3cret-pass"
        assert verify_password("s3cret-pass", user.password_hash)

    def test_duplicate_email_rejected(self):
        _register()
        with pytest.raises(ValidationError) as exc:
            _register(email="JANE@example.com")
        assert "email" in exc.value.messages

    def test_short_password_rejected(self):
        with pytest.raises(ValidationError):
            _register(password="short")


class TestFindByEmail:
    def test_case_insensitive(self):
        user_id = _register()
        found = current_domain.repository_for(User).find_by_email("  Jane@Example.COM ")
        assert str(found.id) == user_id

    def test_missing(self):
        assert current_domain.repository_for(User).find_by_email("nobody@example.com") is None
