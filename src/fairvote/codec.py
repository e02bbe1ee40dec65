"""Encoding helpers shared by the proofs and the wire format.

- hash_to_scalar: Fiat-Shamir challenge derivation
- to_decimal / from_decimal: big integers travel as decimal strings
- canonicalize: deterministic JSON used as the ballot signing payload
"""

from __future__ import annotations

import hashlib
import json
from typing import Any


def hash_to_scalar(modulus: int, *elements: int) -> int:
    """Hash a tuple of integers to a scalar mod `modulus`

    Each element is written as lowercase hex, zero-padded to at least two
    digits, and the pieces are concatenated without separators. The SHA-256
    digest of that text is read as a big-endian integer and reduced.

    The order of `elements` is part of the proof format: changing it changes
    every challenge.
    """

    data = "".join(format(e, "02x") for e in elements)
    digest = hashlib.sha256(data.encode("utf-8")).digest()

    return int.from_bytes(digest, "big") % modulus


def to_decimal(n: int) -> str:
    return str(n)


def from_decimal(value: Any) -> int:
    """Parse a decimal-string big integer

    Only strings of ASCII digits are accepted (ints are passed through), so
    floats, booleans, signs and blanks never sneak into the group arithmetic.
    """

    if isinstance(value, bool):
        raise ValueError("boolean is not a decimal integer")
    if isinstance(value, int):
        return value
    if not isinstance(value, str) or not value.isascii() or not value.isdigit():
        raise ValueError(f"not a decimal integer string: {value!r}")

    return int(value)


def canonicalize(obj: Any) -> str:
    # sorted keys + compact separators: same bytes for the same content
    return json.dumps(obj, sort_keys=True, separators=(",", ":"), ensure_ascii=False)
