"""
Seed Shards configuration.

Values are read from environment variables once, at import time.

Environment variables (all optional with defaults):
    SSS_WALLET_KEY_PREFIX   Namespace prefix for shard storage keys.
                            Default: sss
    SSS_SHARD_CHECKSUM      Append and verify a SHA-256 digest of the
                            covering payload. Split and recover must agree.
                            Default: false
    SSS_WALLET_DIR          Directory holding file wallets (CLI only).
                            Default: ~/.seed_shards/wallets
    SSS_WALLET_KEY          Base58 32-byte key encrypting file wallets.
                            Default: unset (plaintext wallet files)
    SSS_LOG_LEVEL           Logging level name for the CLI.
                            Default: WARNING
"""

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

KEY_SEPARATOR = "::"

# ---------------------------------------------------------------------------
# Raw environment values
# ---------------------------------------------------------------------------

WALLET_KEY_PREFIX: str = os.environ.get("SSS_WALLET_KEY_PREFIX", "sss")
SHARD_CHECKSUM: bool = os.environ.get("SSS_SHARD_CHECKSUM", "false").strip().lower() == "true"
WALLET_DIR: Path = Path(os.environ.get("SSS_WALLET_DIR", "~/.seed_shards/wallets")).expanduser()
WALLET_KEY: Optional[str] = os.environ.get("SSS_WALLET_KEY") or None
LOG_LEVEL: str = os.environ.get("SSS_LOG_LEVEL", "WARNING").strip().upper()


@dataclass(frozen=True)
class Settings:
    """Snapshot of the settings a ShardService runs with."""
    namespace: str = WALLET_KEY_PREFIX
    checksum: bool = SHARD_CHECKSUM


def load_settings() -> Settings:
    return Settings(namespace=WALLET_KEY_PREFIX, checksum=SHARD_CHECKSUM)
