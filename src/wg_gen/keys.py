# src/wg_gen/keys.py
from __future__ import annotations
import base64
import binascii
import logging
import os

from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric.x25519 import X25519PrivateKey

from .errors import EntropyUnavailable, InvalidKey
from .models import KeyPair

logger = logging.getLogger(__name__)

KEY_SIZE = 32


# ---------- Encodage ----------

def encode_key(raw: bytes) -> str:
    return base64.b64encode(raw).decode("ascii")


def decode_key(key_b64: str) -> bytes:
    """Decode a base64 WireGuard key, checking it holds exactly 32 bytes."""
    try:
        raw = base64.b64decode(key_b64.encode("ascii"), validate=True)
    except (binascii.Error, UnicodeEncodeError) as exc:
        raise InvalidKey(f"Key is not valid base64: {key_b64!r}") from exc
    if len(raw) != KEY_SIZE:
        raise InvalidKey(f"Decoded key must be {KEY_SIZE} bytes, got {len(raw)}")
    return raw


# ---------- Génération de clés ----------

def _clamp(raw: bytes) -> bytes:
    # meme convention que `wg genkey`
    scalar = bytearray(raw)
    scalar[0] &= 248
    scalar[31] &= 127
    scalar[31] |= 64
    return bytes(scalar)


def _public_bytes(private_raw: bytes) -> bytes:
    private_key = X25519PrivateKey.from_private_bytes(private_raw)
    return private_key.public_key().public_bytes(
        encoding=serialization.Encoding.Raw,
        format=serialization.PublicFormat.Raw,
    )


def generate_keypair() -> KeyPair:
    """
    Generate a WireGuard X25519 key pair.

    The private scalar comes from os.urandom and is clamped like `wg genkey`
    does, the public key is the base point multiplication of that scalar.
    Both are returned as padded base64 (44 characters).
    """
    try:
        seed = os.urandom(KEY_SIZE)
    except (OSError, NotImplementedError) as exc:
        raise EntropyUnavailable(f"Secure random source unavailable: {exc}") from exc

    if len(seed) != KEY_SIZE:
        raise EntropyUnavailable(f"Random source returned {len(seed)} bytes")

    private_raw = _clamp(seed)
    public_raw = _public_bytes(private_raw)
    logger.debug("Generated key pair with public key %s", encode_key(public_raw))
    return KeyPair(private=encode_key(private_raw), public=encode_key(public_raw))


def public_key_from_private(private_b64: str) -> str:
    """Equivalent of `wg pubkey`."""
    return encode_key(_public_bytes(decode_key(private_b64)))
