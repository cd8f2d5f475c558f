"""Unit tests for PasswordHasher."""

from common.auth import PasswordHasher


class TestPasswordHasher:
    def test_hash_never_equals_plaintext(self, password_hasher):
        hashed = password_hasher.hash_password("Secret1")

        assert hashed != "Secret1"
        assert hashed.startswith("$2")

    def test_same_password_hashes_differently(self, password_hasher):
        assert password_hasher.hash_password("Secret1") != password_hasher.hash_password("Secret1")

    def test_verify_round(self, password_hasher):
        hashed = password_hasher.hash_password("Secret1")

        assert password_hasher.verify_password("Secret1", hashed)
        assert not password_hasher.verify_password("secret1", hashed)

    def test_long_passwords_are_not_truncated(self, password_hasher):
        base = "x" * 80
        hashed = password_hasher.hash_password(base + "a")

        assert not password_hasher.verify_password(base + "b", hashed)

    def test_verify_rejects_empty_and_invalid_hashes(self, password_hasher):
        assert not password_hasher.verify_password("", "$2b$04$abc")
        assert not password_hasher.verify_password("Secret1", "")
        assert not password_hasher.verify_password("Secret1", "not-a-bcrypt-hash")

    def test_cost_factor_is_applied(self):
        hashed = PasswordHasher(rounds=5).hash_password("Secret1")

        assert hashed.split("$")[2] == "05"
