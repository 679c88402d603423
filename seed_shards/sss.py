"""
Seed Shards — core logic.

Shard an owner's signing seed, store the shards, fetch them back, and
recover the covering payload from a quorum.

A shard collection is:
1. A covering payload {"msg", "verkey", "seed"} serialized as JSON
2. That JSON split into N shards, any M of which recombine it
3. The shards stored as one JSON array under sss::{owner} in the
   owner's wallet, replacing whatever was there

Every operation is a single stateless pass: one key lookup and one write
for split_and_store, one read for retrieval, no storage at all for
recovery.
"""

import logging
from typing import Optional

from . import covering, crypto, shamir
from .config import KEY_SEPARATOR, Settings, load_settings
from .errors import EncodingError, InvalidThreshold, MalformedInput
from .keys import SeedSource

log = logging.getLogger(__name__)


def storage_key(owner: str, namespace: str = "sss") -> str:
    """Wallet key holding the shard collection of owner."""
    return f"{namespace}{KEY_SEPARATOR}{owner}"


def check_identity(owner: str) -> None:
    """Reject identities that cannot be embedded in a storage key as-is."""
    if not isinstance(owner, str) or not owner:
        raise MalformedInput("Owner identity must be a non-empty string")
    if KEY_SEPARATOR in owner:
        raise MalformedInput(f"Owner identity must not contain {KEY_SEPARATOR!r}")


def check_threshold(m: int, n: int) -> None:
    if isinstance(m, bool) or isinstance(n, bool) or not isinstance(m, int) or not isinstance(n, int):
        raise InvalidThreshold("Threshold m and total n must be integers")
    if n < 1:
        raise InvalidThreshold(f"Total shards n must be >= 1, got {n}")
    if not 1 <= m <= n:
        raise InvalidThreshold(f"Threshold m must satisfy 1 <= m <= n, got m={m}, n={n}")


class ShardService:
    """
    Split, store, retrieve, and recover seed shards.

    Args:
        wallet: WalletStorage the shard collections live in
        key_service: KeyService resolving owners to signing keys
        settings: Storage namespace and checksum mode; read from the
            environment when omitted
    """

    def __init__(self, wallet, key_service, settings: Optional[Settings] = None):
        self.wallet = wallet
        self.seed_source = SeedSource(key_service)
        self.settings = settings or load_settings()

    def storage_key(self, owner: str) -> str:
        return storage_key(owner, self.settings.namespace)

    def split_and_store(self, scope, m: int, n: int, msg: Optional[str], owner: str) -> str:
        """
        Shard the owner's seed together with msg and store the shards.

        Args:
            scope: Wallet handle the shards are stored in
            m: Threshold shards needed to recover
            n: Total shards to produce
            msg: Optional JSON object text carried alongside the seed
            owner: Verkey whose signing seed gets sharded

        Returns:
            owner, the handle for get_all_shards / get_shard
        """
        check_threshold(m, n)
        log.info("Shard request for %s (%d-of-%d)", owner, m, n)
        check_identity(owner)
        msg_obj = covering.parse_msg(msg)

        seed, verkey = self.seed_source.derive_seed(scope, owner)
        payload = covering.build_covering(msg_obj, verkey, crypto.b58encode(seed))
        secret = covering.serialize_covering(payload).encode('utf-8')

        shares = shamir.split_secret(secret, n, m, checksum=self.settings.checksum)
        self.wallet.set(scope, self.storage_key(owner), shamir.format_shares(shares))

        log.info("Stored %d shards for %s", len(shares), owner)
        return owner

    def get_all_shards(self, scope, owner: str) -> str:
        """Stored shard collection of owner as a JSON array string."""
        log.info("Get shards request for %s", owner)
        check_identity(owner)
        return self.wallet.get(scope, self.storage_key(owner))

    def get_shard(self, scope, owner: str, index: int) -> str:
        """Single shard of owner whose own index equals index (1-based)."""
        log.info("Get shard %s request for %s", index, owner)
        check_identity(owner)
        shares = shamir.parse_shares(self.wallet.get(scope, self.storage_key(owner)))
        return shamir.get_share_by_index(shares, index).to_json()

    def recover(self, shards_json: str) -> str:
        """
        Recombine a JSON array of shards into the covering payload text.

        The payload is returned as text; parse it to get msg, verkey and
        seed individually.
        """
        shares = shamir.parse_shares(shards_json)
        log.info("Recover request with %d shards", len(shares))
        secret = shamir.combine_shares(shares, checksum=self.settings.checksum)
        try:
            return secret.decode('utf-8')
        except UnicodeDecodeError as e:
            raise EncodingError(f"Recovered secret is not valid UTF-8: {e}") from e
