"""
Unit tests for the password policy.
"""

import pytest

from subtrack.domain.services.password_policy import PasswordValidator


class TestPasswordValidator:
    """Password strength rules."""

    @pytest.fixture
    def validator(self):
        return PasswordValidator()

    def test_accepts_reasonable_password(self, validator):
        is_valid, errors = validator.validate("password123")

        assert is_valid
        assert errors == []

    def test_rejects_short_password(self, validator):
        is_valid, errors = validator.validate("123")

        assert not is_valid
        assert "at least 8 characters" in errors[0]

    def test_rejects_overlong_password(self, validator):
        is_valid, errors = validator.validate("a" * 129)

        assert not is_valid
        assert "must not exceed 128" in errors[0]

    @pytest.mark.parametrize("password", ["password", "12345678", "QWERTY123"])
    def test_rejects_common_passwords(self, validator, password):
        is_valid, errors = validator.validate(password)

        assert not is_valid
        assert "Password is too common" in errors

    def test_custom_minimum(self):
        validator = PasswordValidator(min_length=12)

        assert not validator.validate("password123")[0]
        assert validator.validate("password1234")[0]

    def test_rejects_unencodable_password(self, validator):
        is_valid, errors = validator.validate("abc\ud800defgh")

        assert not is_valid
        assert "Password contains invalid characters" in errors
