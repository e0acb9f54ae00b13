"""
Tests for X25519 key generation.
"""

import base64

import pytest
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric.x25519 import X25519PrivateKey

from wg_gen import keys
from wg_gen.errors import EntropyUnavailable, InvalidKey


def _reference_public(private_raw: bytes) -> bytes:
    return X25519PrivateKey.from_private_bytes(private_raw).public_key().public_bytes(
        encoding=serialization.Encoding.Raw,
        format=serialization.PublicFormat.Raw,
    )


class TestGenerateKeypair:

    def test_keys_are_32_bytes(self):
        pair = keys.generate_keypair()

        assert len(base64.b64decode(pair.private)) == 32
        assert len(base64.b64decode(pair.public)) == 32

    def test_key_format(self):
        """WireGuard keys are 44 characters of padded base64."""
        pair = keys.generate_keypair()

        assert len(pair.private) == 44
        assert len(pair.public) == 44
        assert pair.private.endswith("=")
        assert pair.public.endswith("=")

    def test_public_is_derived_from_private(self):
        pair = keys.generate_keypair()
        private_raw = base64.b64decode(pair.private)

        assert base64.b64decode(pair.public) == _reference_public(private_raw)

    def test_private_key_is_clamped(self):
        raw = base64.b64decode(keys.generate_keypair().private)

        assert raw[0] & 7 == 0
        assert raw[31] & 128 == 0
        assert raw[31] & 64 == 64

    def test_different_keys_each_time(self):
        pair1 = keys.generate_keypair()
        pair2 = keys.generate_keypair()

        assert pair1.private != pair2.private
        assert pair1.public != pair2.public

    def test_entropy_failure(self, monkeypatch):
        def broken_urandom(n):
            raise OSError("no entropy")

        monkeypatch.setattr(keys.os, "urandom", broken_urandom)

        with pytest.raises(EntropyUnavailable):
            keys.generate_keypair()


class TestPublicKeyFromPrivate:

    def test_rfc7748_vector(self):
        private = bytes.fromhex(
            "77076d0a7318a57d3c16c17251b26645df4c2f87ebc0992ab177fba51db92c2a"
        )
        expected = bytes.fromhex(
            "8520f0098930a754748b7ddcb43ef75a0dbf3a0d26381af4eba4a98eaa9b4e6a"
        )

        public = keys.public_key_from_private(base64.b64encode(private).decode())

        assert base64.b64decode(public) == expected

    def test_matches_generated_pair(self):
        pair = keys.generate_keypair()

        assert keys.public_key_from_private(pair.private) == pair.public

    def test_invalid_base64(self):
        with pytest.raises(InvalidKey):
            keys.decode_key("not base64 at all!")

    def test_wrong_length(self):
        with pytest.raises(InvalidKey):
            keys.decode_key(base64.b64encode(b"\x01" * 16).decode())
