"""
Shamir's Secret Sharing — byte-wise over GF(2^8).

Splits a secret of any length into N shares where any M shares can
reconstruct the original, but M-1 shares reveal nothing about it. Every
byte of the secret is the constant term of its own random polynomial of
degree M-1, evaluated at x = 1..N, so a share is exactly as long as the
secret and indices are always 1-based.

Shares carry no integrity data. In checksum mode a SHA-256 digest of the
secret is appended before splitting and checked after combining; split
and combine have to agree on the mode.
"""

import hashlib
import hmac
import json
import secrets
from dataclasses import dataclass

from .errors import (
    IndexOutOfRange,
    InsufficientShards,
    ParseError,
    RecoveryFailure,
    SplitFailure,
)

MAX_SHARES = 255
DIGEST_SIZE = hashlib.sha256().digest_size

# GF(2^8) with the AES polynomial x^8 + x^4 + x^3 + x + 1, generator 3
_EXP = [0] * 510
_LOG = [0] * 256


def _init_tables():
    x = 1
    for i in range(255):
        _EXP[i] = x
        _LOG[x] = i
        # x * 3 == x * 2 ^ x
        x2 = x << 1
        if x2 & 0x100:
            x2 ^= 0x11B
        x = x2 ^ x
    for i in range(255, 510):
        _EXP[i] = _EXP[i - 255]


_init_tables()


def _gf_mul(a: int, b: int) -> int:
    if a == 0 or b == 0:
        return 0
    return _EXP[_LOG[a] + _LOG[b]]


def _gf_div(a: int, b: int) -> int:
    if b == 0:
        raise ZeroDivisionError("Division by zero in GF(256)")
    if a == 0:
        return 0
    return _EXP[_LOG[a] - _LOG[b] + 255]


def _eval_poly(coeffs: list, x: int) -> int:
    """Evaluate polynomial at x using Horner's method in GF(256)."""
    result = 0
    for coeff in reversed(coeffs):
        result = _gf_mul(result, x) ^ coeff
    return result


def _lagrange_basis(xs: list) -> list:
    """Lagrange basis values L_i(0) for the given x coordinates."""
    basis = []
    for i, xi in enumerate(xs):
        value = 1
        for j, xj in enumerate(xs):
            if i == j:
                continue
            # (0 - xj) / (xi - xj), subtraction is XOR
            value = _gf_mul(value, _gf_div(xj, xi ^ xj))
        basis.append(value)
    return basis


@dataclass(frozen=True)
class Share:
    """A single share of a split secret."""
    index: int      # x-coordinate, 1-based, never 0
    threshold: int  # M, shares needed to recombine
    data: bytes     # one y-coordinate per secret byte

    def to_dict(self) -> dict:
        return {
            'index': self.index,
            'threshold': self.threshold,
            'data': self.data.hex(),
        }

    def to_json(self) -> str:
        return json.dumps(self.to_dict(), separators=(',', ':'))

    def __str__(self) -> str:
        return self.to_json()

    @classmethod
    def from_dict(cls, obj) -> "Share":
        """
        Build a share from its JSON object form.

        Raises ParseError if a field is missing or has the wrong type.
        """
        if not isinstance(obj, dict):
            raise ParseError(f"Shard must be a JSON object, got {type(obj).__name__}")
        try:
            index = obj['index']
            threshold = obj['threshold']
            data_hex = obj['data']
        except KeyError as e:
            raise ParseError(f"Shard is missing field {e}") from e

        for name, value in (('index', index), ('threshold', threshold)):
            if isinstance(value, bool) or not isinstance(value, int):
                raise ParseError(f"Shard field '{name}' must be an integer")
        if not 1 <= index <= MAX_SHARES:
            raise ParseError(f"Shard index {index} outside 1..{MAX_SHARES}")
        if not 1 <= threshold <= MAX_SHARES:
            raise ParseError(f"Shard threshold {threshold} outside 1..{MAX_SHARES}")
        if not isinstance(data_hex, str):
            raise ParseError("Shard field 'data' must be a hex string")
        try:
            data = bytes.fromhex(data_hex)
        except ValueError as e:
            raise ParseError(f"Shard data is not valid hex: {e}") from e

        return cls(index=index, threshold=threshold, data=data)


def split_secret(secret: bytes, n: int, m: int, checksum: bool = False) -> list:
    """
    Split a secret into n shares, requiring m to reconstruct.

    Args:
        secret: The secret bytes to split (any non-zero length)
        n: Total number of shares to generate
        m: Minimum shares needed to reconstruct (threshold)
        checksum: Append a SHA-256 digest of the secret before splitting

    Returns:
        List of n Share objects with indices 1..n.

    Raises:
        SplitFailure: If parameters are outside what the scheme supports
    """
    if m < 1:
        raise SplitFailure("Threshold m must be >= 1")
    if n < m:
        raise SplitFailure("Total shares n must be >= threshold m")
    if n > MAX_SHARES:
        raise SplitFailure(f"Total shares n must be <= {MAX_SHARES}")
    if len(secret) == 0:
        raise SplitFailure("Secret must not be empty")

    if checksum:
        secret = secret + hashlib.sha256(secret).digest()

    data = [bytearray() for _ in range(n)]
    for byte in secret:
        # a_0 = secret byte, a_1..a_{m-1} random
        coeffs = [byte] + [secrets.randbelow(256) for _ in range(m - 1)]
        for i in range(n):
            data[i].append(_eval_poly(coeffs, i + 1))

    return [Share(index=i + 1, threshold=m, data=bytes(d)) for i, d in enumerate(data)]


def combine_shares(shares: list, checksum: bool = False) -> bytes:
    """
    Reconstruct the secret from m or more shares using Lagrange interpolation.

    Duplicate copies of the same share are tolerated; only distinct indices
    count towards the threshold.

    Raises:
        InsufficientShards: Fewer distinct shares than the threshold
        RecoveryFailure: Shares are inconsistent or fail the checksum
    """
    if not shares:
        raise InsufficientShards("No shards provided")

    threshold = shares[0].threshold
    length = len(shares[0].data)

    distinct = {}
    for share in shares:
        if share.threshold != threshold:
            raise RecoveryFailure("Shards disagree on threshold")
        if len(share.data) != length:
            raise RecoveryFailure("Shards disagree on length")
        seen = distinct.get(share.index)
        if seen is not None and seen.data != share.data:
            raise RecoveryFailure(f"Conflicting data for shard {share.index}")
        distinct[share.index] = share

    if len(distinct) < threshold:
        raise InsufficientShards(f"Need at least {threshold} shards, got {len(distinct)}")

    # Use only threshold shares (any M will do)
    points = sorted(distinct.values(), key=lambda s: s.index)[:threshold]
    basis = _lagrange_basis([s.index for s in points])

    secret = bytearray()
    for pos in range(length):
        value = 0
        for share, weight in zip(points, basis):
            value ^= _gf_mul(share.data[pos], weight)
        secret.append(value)
    secret = bytes(secret)

    if checksum:
        if len(secret) <= DIGEST_SIZE:
            raise RecoveryFailure("Recovered secret too short to carry a checksum")
        body, digest = secret[:-DIGEST_SIZE], secret[-DIGEST_SIZE:]
        if not hmac.compare_digest(hashlib.sha256(body).digest(), digest):
            raise RecoveryFailure("Checksum mismatch (corrupted shards or wrong mode)")
        return body

    return secret


def get_share_by_index(shares: list, index: int) -> Share:
    """Select the share whose own index equals index (1-based)."""
    for share in shares:
        if share.index == index:
            return share
    raise IndexOutOfRange(f"No shard with index {index}")


def parse_shares(shares_json: str) -> list:
    """
    Parse a JSON array of shard objects.

    Raises ParseError if the text is not JSON or not an array of shards.
    """
    try:
        items = json.loads(shares_json)
    except (TypeError, ValueError) as e:
        raise ParseError(f"Shards are not valid JSON: {e}") from e
    if not isinstance(items, list):
        raise ParseError("Shards must be a JSON array")
    return [Share.from_dict(item) for item in items]


def format_shares(shares: list) -> str:
    """Encode shares as a compact JSON array."""
    return json.dumps([s.to_dict() for s in shares], separators=(',', ':'))
