"""
Tests for bcrypt password hashing.
"""

import pytest

from auth.password import hash_password, verify_password


class TestPasswordHashing:
    def test_hash_is_not_plaintext_and_verifies(self):
        hashed = hash_password("s3cret!", rounds=4)
        assert hashed != "s3cret!"
        assert hashed.startswith("$2")
        assert verify_password("s3cret!", hashed)

    def test_wrong_password_fails(self):
        hashed = hash_password("s3cret!", rounds=4)
        assert not verify_password("S3cret!", hashed)

    def test_salt_differs_per_call(self):
        assert hash_password("same", rounds=4) != hash_password("same", rounds=4)

    def test_malformed_hash_returns_false(self):
        assert verify_password("anything", "not-a-bcrypt-hash") is False
        assert verify_password("anything", "") is False

    def test_long_password_is_handled(self):
        long_password = "x" * 100
        hashed = hash_password(long_password, rounds=4)
        assert verify_password(long_password, hashed)

    def test_cost_factor_is_required(self):
        with pytest.raises(TypeError):
            hash_password("s3cret!")

    def test_cost_factor_is_encoded_in_hash(self):
        assert hash_password("s3cret!", rounds=5).startswith("$2b$05$")
