"""Seed Shards — Shamir secret sharing for Ed25519 signing seeds."""

from .sss import ShardService, storage_key
from .covering import build_covering, parse_msg, serialize_covering
from .keys import KeyService, SeedSource, SigningKey, WalletKeyService
from .wallet import WalletStorage, InMemoryWallet, FileWallet
from .shamir import Share, split_secret, combine_shares, get_share_by_index
from .config import Settings, load_settings
from .errors import (
    ShardError, InvalidThreshold, MalformedInput, KeyNotFound, DecodeError,
    SplitFailure, StorageError, NotFound, ParseError, IndexOutOfRange,
    RecoveryFailure, InsufficientShards, EncodingError,
)

__all__ = [
    'ShardService', 'storage_key',
    'build_covering', 'parse_msg', 'serialize_covering',
    'KeyService', 'SeedSource', 'SigningKey', 'WalletKeyService',
    'WalletStorage', 'InMemoryWallet', 'FileWallet',
    'Share', 'split_secret', 'combine_shares', 'get_share_by_index',
    'Settings', 'load_settings',
    'ShardError', 'InvalidThreshold', 'MalformedInput', 'KeyNotFound', 'DecodeError',
    'SplitFailure', 'StorageError', 'NotFound', 'ParseError', 'IndexOutOfRange',
    'RecoveryFailure', 'InsufficientShards', 'EncodingError',
]
