"""
Unit tests for bcrypt password hashing.
"""

import pytest

from subtrack.infrastructure.auth.password_service import PasswordHasher


class TestPasswordHasher:
    """Hashing and verification."""

    @pytest.fixture
    def hasher(self, password_hasher):
        return password_hasher

    def test_hash_differs_from_plaintext(self, hasher):
        password_hash = hasher.hash("password123")

        assert password_hash != "password123"
        assert password_hash.startswith("$2b$04$")

    def test_hashes_are_salted(self, hasher):
        assert hasher.hash("password123") != hasher.hash("password123")

    def test_verify_correct_password(self, hasher):
        password_hash = hasher.hash("password123")

        assert hasher.verify("password123", password_hash) is True

    def test_verify_wrong_password(self, hasher):
        password_hash = hasher.hash("password123")

        assert hasher.verify("password124", password_hash) is False

    def test_verify_malformed_hash_returns_false(self, hasher):
        assert hasher.verify("password123", "not-a-bcrypt-hash") is False

    def test_dummy_verify_is_always_false(self, hasher):
        assert hasher.dummy_verify("dummy-password") is False

    def test_passwords_longer_than_72_bytes(self, hasher):
        long_password = "x" * 100
        password_hash = hasher.hash(long_password)

        assert hasher.verify(long_password, password_hash) is True

    def test_lone_surrogate_password(self, hasher):
        password_hash = hasher.hash("password123")

        assert hasher.verify("abc\ud800defgh", password_hash) is False
        assert hasher.dummy_verify("abc\ud800defgh") is False

    def test_needs_rehash_for_lower_cost(self, hasher):
        weak_hash = hasher.hash("password123")

        assert PasswordHasher(rounds=5).needs_rehash(weak_hash) is True
        assert hasher.needs_rehash(weak_hash) is False
