"""
Signing key access and seed derivation.

The key service maps an owner identity (its base58 verkey) to the signing
key stored for it. SeedSource turns that signing key into the 32-byte
seed that actually gets sharded.
"""

import json
import logging
import os
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Optional

from . import crypto
from .errors import DecodeError, KeyNotFound, NotFound

log = logging.getLogger(__name__)

KEY_PREFIX = "key"


@dataclass(frozen=True)
class SigningKey:
    verkey: str   # base58 public verification key
    signkey: str  # base58 64-byte expanded private key


class KeyService(ABC):
    """Resolves owner identities to their signing keys."""

    @abstractmethod
    def get_signing_key(self, scope, owner: str) -> SigningKey:
        """
        Fetch the signing key stored for owner.

        Raises:
            KeyNotFound: If no key material exists for owner.
        """


class WalletKeyService(KeyService):
    """Key service keeping signing keys in wallet storage under key::{verkey}."""

    def __init__(self, wallet):
        self.wallet = wallet

    @staticmethod
    def wallet_key(verkey: str) -> str:
        return f"{KEY_PREFIX}::{verkey}"

    def create_key(self, scope, seed: Optional[bytes] = None) -> str:
        """Create and store an Ed25519 key, returning its base58 verkey."""
        if seed is None:
            seed = os.urandom(crypto.SEED_SIZE)
        verkey_bytes, signkey_bytes = crypto.ed25519_keypair(seed)
        key = SigningKey(
            verkey=crypto.b58encode(verkey_bytes),
            signkey=crypto.b58encode(signkey_bytes),
        )
        self.wallet.set(scope, self.wallet_key(key.verkey),
                        json.dumps({'verkey': key.verkey, 'signkey': key.signkey}))
        log.info("Created signing key %s", key.verkey)
        return key.verkey

    def get_signing_key(self, scope, owner: str) -> SigningKey:
        try:
            stored = self.wallet.get(scope, self.wallet_key(owner))
        except NotFound:
            raise KeyNotFound(f"No signing key for {owner}") from None
        try:
            record = json.loads(stored)
            return SigningKey(verkey=record['verkey'], signkey=record['signkey'])
        except (ValueError, KeyError, TypeError) as e:
            raise DecodeError(f"Stored key for {owner} is malformed: {e}") from e


class SeedSource:
    """Derives the shareable seed for an owner identity."""

    def __init__(self, key_service: KeyService):
        self.key_service = key_service

    def derive_seed(self, scope, owner: str) -> tuple:
        """
        Returns:
            (seed_bytes, verkey)

        Raises:
            KeyNotFound: No key material for owner
            DecodeError: Stored signing key is not valid base58 or has
                the wrong length
        """
        key = self.key_service.get_signing_key(scope, owner)
        signkey = crypto.b58decode(key.signkey)
        seed = crypto.ed25519_sk_to_seed(signkey)
        return seed, owner
