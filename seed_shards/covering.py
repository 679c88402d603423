"""
Covering payload construction.

The covering is the JSON object that actually gets split:

    {"msg": {...}, "verkey": "<base58>", "seed": "<base58>"}

msg is caller context and may be empty. verkey and seed are always filled
in here from the owner's key material, never taken from the caller.
"""

import json
import math
from typing import Optional

from .errors import MalformedInput

MSG_FIELD = "msg"
VERKEY_FIELD = "verkey"
SEED_FIELD = "seed"


def _reject_constant(name):
    raise MalformedInput(f"{name} is not valid JSON")


def _finite_float(text):
    value = float(text)
    if math.isinf(value):
        raise MalformedInput(f"Number {text} is out of range")
    return value


def parse_msg(msg: Optional[str]) -> dict:
    """Parse a caller-supplied msg JSON string; absent means {}."""
    if msg is None:
        return {}
    try:
        value = json.loads(msg, parse_constant=_reject_constant, parse_float=_finite_float)
    except (TypeError, ValueError) as e:
        raise MalformedInput(f"msg is not valid JSON: {e}") from e
    if not isinstance(value, dict):
        raise MalformedInput(f"msg must be a JSON object, got {type(value).__name__}")
    return value


def build_covering(msg: Optional[dict], verkey: str, seed_b58: str) -> dict:
    if msg is None:
        msg = {}
    if not isinstance(msg, dict):
        raise MalformedInput(f"msg must be a JSON object, got {type(msg).__name__}")
    return {
        MSG_FIELD: msg,
        VERKEY_FIELD: verkey,
        SEED_FIELD: seed_b58,
    }


def serialize_covering(covering: dict) -> str:
    """
    Compact JSON with the field order msg, verkey, seed.

    Raises MalformedInput if msg holds non-finite floats or lone
    surrogates, neither of which survives as UTF-8 JSON.
    """
    try:
        text = json.dumps(covering, separators=(',', ':'), ensure_ascii=False, allow_nan=False)
        text.encode('utf-8')
    except UnicodeEncodeError as e:
        raise MalformedInput(f"msg is not encodable as UTF-8: {e}") from e
    except ValueError as e:
        raise MalformedInput(f"msg is not valid JSON: {e}") from e
    return text
