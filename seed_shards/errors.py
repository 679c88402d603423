"""
Seed Shards — error taxonomy.

Every failure surfaces as a subclass of ShardError. Kinds caused by bad
caller input also subclass ValueError.
"""


class ShardError(Exception):
    """Base class for all seed shard failures."""


class InvalidThreshold(ShardError, ValueError):
    """Threshold m and total n do not satisfy 1 <= m <= n."""


class MalformedInput(ShardError, ValueError):
    """Caller-supplied msg or owner identity is unusable."""


class KeyNotFound(ShardError):
    """No signing key exists for the owner identity."""


class DecodeError(ShardError, ValueError):
    """Stored key material is not validly encoded."""


class SplitFailure(ShardError):
    """The split primitive rejected its parameters."""


class StorageError(ShardError):
    """The storage backend failed to persist a value."""


class NotFound(ShardError):
    """No stored value exists under the requested key."""


class ParseError(ShardError, ValueError):
    """A shard collection is not a valid JSON array of shards."""


class IndexOutOfRange(ShardError, ValueError):
    """No shard carries the requested index."""


class RecoveryFailure(ShardError):
    """The combine primitive could not reconstruct the secret."""


class InsufficientShards(RecoveryFailure):
    """Fewer distinct shards than the threshold were supplied."""


class EncodingError(ShardError):
    """Recovered bytes are not valid UTF-8."""
