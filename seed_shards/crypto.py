"""
Seed Shards crypto helpers.

Base58 encoding for key material, Ed25519 key handling for signing keys,
and AES-256-GCM authenticated encryption for wallet files at rest.
"""

import os
import struct
import zlib

import base58
from cryptography.exceptions import InvalidTag
from cryptography.hazmat.primitives.asymmetric.ed25519 import Ed25519PrivateKey
from cryptography.hazmat.primitives.ciphers.aead import AESGCM
from cryptography.hazmat.primitives.serialization import Encoding, PublicFormat

from .errors import DecodeError

SEED_SIZE = 32
EXPANDED_KEY_SIZE = 64


def b58encode(data: bytes) -> str:
    return base58.b58encode(data).decode('ascii')


def b58decode(text: str) -> bytes:
    """Decode base58 text, raising DecodeError on invalid input."""
    if not isinstance(text, str) or not text:
        raise DecodeError("Expected a non-empty base58 string")
    try:
        return base58.b58decode(text)
    except ValueError as e:
        raise DecodeError(f"Invalid base58: {e}") from e


def ed25519_keypair(seed: bytes) -> tuple:
    """
    Derive an Ed25519 key pair from a 32-byte seed.

    Returns:
        (verkey_bytes, signkey_bytes) where signkey is the 64-byte
        expanded form seed || public key.
    """
    if len(seed) != SEED_SIZE:
        raise ValueError(f"Seed must be {SEED_SIZE} bytes, got {len(seed)}")
    public = Ed25519PrivateKey.from_private_bytes(seed).public_key()
    verkey = public.public_bytes(Encoding.Raw, PublicFormat.Raw)
    return verkey, seed + verkey


def ed25519_sk_to_seed(signkey: bytes) -> bytes:
    """The seed is the first half of a 64-byte expanded signing key."""
    if len(signkey) != EXPANDED_KEY_SIZE:
        raise DecodeError(
            f"Signing key must be {EXPANDED_KEY_SIZE} bytes, got {len(signkey)}"
        )
    return signkey[:SEED_SIZE]


def generate_key() -> bytes:
    """Generate a cryptographically secure 256-bit key."""
    return os.urandom(32)


def encrypt(plaintext: bytes, key: bytes, compress: bool = True) -> bytes:
    """
    Encrypt plaintext with AES-256-GCM.

    Returns:
        Encrypted blob: flags(1) + nonce(12) + ciphertext + tag(16)

    The flags byte encodes:
        bit 0: compression enabled
        bits 1-7: reserved (zero)
    """
    if len(key) != 32:
        raise ValueError(f"Key must be 32 bytes, got {len(key)}")

    flags = 0x01 if compress else 0x00
    data = zlib.compress(plaintext, level=9) if compress else plaintext

    # 96-bit random nonce (recommended for AES-GCM)
    nonce = os.urandom(12)
    header = struct.pack('B', flags)
    # flags byte is authenticated as associated data
    ct_with_tag = AESGCM(key).encrypt(nonce, data, header)

    return header + nonce + ct_with_tag


def decrypt(blob: bytes, key: bytes) -> bytes:
    """
    Decrypt an AES-256-GCM encrypted blob produced by encrypt().

    Raises:
        DecodeError: If decryption fails (wrong key, tampered data)
    """
    if len(key) != 32:
        raise ValueError(f"Key must be 32 bytes, got {len(key)}")

    if len(blob) < 1 + 12 + 16:  # flags + nonce + minimum tag
        raise DecodeError("Blob too short to be valid")

    flags = blob[0]
    nonce = blob[1:13]
    ct_with_tag = blob[13:]

    try:
        data = AESGCM(key).decrypt(nonce, ct_with_tag, blob[:1])
    except InvalidTag as e:
        raise DecodeError("Decryption failed (wrong key or tampered data)") from e

    if flags & 0x01:
        try:
            data = zlib.decompress(data)
        except zlib.error as e:
            raise DecodeError(f"Decompression failed: {e}") from e

    return data
