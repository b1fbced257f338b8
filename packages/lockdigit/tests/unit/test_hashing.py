"""
Unit tests for salted PIN hashing.
"""

import hashlib
import re

import pytest

from packages.lockdigit.core.auth.hashing import generate_salt, hash_pin, pin_matches


class TestSaltGeneration:
    """Test salt generation."""

    def test_salt_is_hex_of_16_bytes(self):
        """Salt is 32 lowercase hex characters."""
        salt = generate_salt()
        assert re.fullmatch(r"[0-9a-f]{32}", salt)

    def test_salts_are_unique(self):
        """Fresh salts do not repeat."""
        salts = {generate_salt() for _ in range(200)}
        assert len(salts) == 200


class TestHashPin:
    """Test the salted hash function."""

    def test_hash_is_deterministic(self):
        """Identical inputs give identical output."""
        salt = "a1b2c3d4e5f60718293a4b5c6d7e8f90"
        assert hash_pin("4821", salt) == hash_pin("4821", salt)

    def test_hash_format(self):
        """Digest is 64 lowercase hex characters."""
        digest = hash_pin("4821", generate_salt())
        assert re.fullmatch(r"[0-9a-f]{64}", digest)

    def test_hash_is_sha256_of_salt_colon_pin(self):
        """Matches SHA-256 over UTF-8 'salt:pin' computed independently."""
        salt = "00ff00ff00ff00ff00ff00ff00ff00ff"
        expected = hashlib.sha256(f"{salt}:193746".encode("utf-8")).hexdigest()
        assert hash_pin("193746", salt) == expected

    def test_changing_salt_changes_hash(self):
        """Same PIN under different salts hashes differently."""
        assert hash_pin("4821", generate_salt()) != hash_pin("4821", generate_salt())

    def test_changing_pin_changes_hash(self):
        """Different PINs under the same salt hash differently."""
        salt = generate_salt()
        assert hash_pin("4821", salt) != hash_pin("4822", salt)

    def test_empty_salt_rejected(self):
        """Empty salt raises."""
        with pytest.raises(ValueError, match="Salt cannot be empty"):
            hash_pin("4821", "")

    def test_empty_pin_rejected(self):
        """Empty PIN raises."""
        with pytest.raises(ValueError, match="PIN cannot be empty"):
            hash_pin("", generate_salt())


class TestPinMatches:
    """Test hash comparison."""

    def test_match(self):
        salt = generate_salt()
        assert pin_matches("4821", salt, hash_pin("4821", salt)) is True

    def test_mismatch(self):
        salt = generate_salt()
        assert pin_matches("4822", salt, hash_pin("4821", salt)) is False

    def test_missing_salt_or_hash_is_not_a_match(self):
        """Verification is impossible without both halves of the pair."""
        salt = generate_salt()
        digest = hash_pin("4821", salt)
        assert pin_matches("4821", None, digest) is False
        assert pin_matches("4821", "", digest) is False
        assert pin_matches("4821", salt, None) is False
        assert pin_matches("", salt, digest) is False
