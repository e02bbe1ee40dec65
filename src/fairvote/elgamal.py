"""Exponential ElGamal over the election group.

A choice m is lifted to g^m before encryption, so multiplying ciphertexts
adds the exponents (Enc(m1) * Enc(m2) = Enc(m1 + m2)) and a tally can be
kept without decrypting any ballot.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict

from .codec import from_decimal, to_decimal
from .errors import RangeError
from .params import GroupParameters, PrivateKey, random_scalar


@dataclass(frozen=True)
class Ciphertext:
    """ElGamal ciphertext (alpha, beta) = (g^r, m * y^r) mod p"""

    alpha: int
    beta: int

    def to_dict(self) -> Dict[str, str]:
        return {"alfa": to_decimal(self.alpha), "beta": to_decimal(self.beta)}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Ciphertext":
        if not isinstance(data, dict):
            raise ValueError("ciphertext must be an object with 'alfa' and 'beta'")
        try:
            return cls(alpha=from_decimal(data["alfa"]), beta=from_decimal(data["beta"]))
        except KeyError as e:
            raise ValueError(f"ciphertext is missing {e}") from None

    @classmethod
    def identity(cls) -> "Ciphertext":
        """Neutral element for homomorphic addition (an encryption of 0 with r = 0)"""

        return cls(alpha=1, beta=1)

    def in_group(self, p: int) -> bool:
        return 0 < self.alpha < p and 0 < self.beta < p


@dataclass(frozen=True)
class EncryptedValue:
    """A freshly produced ciphertext together with its randomness r

    r is only needed to build the ballot proof. It is never serialised.
    """

    ciphertext: Ciphertext
    r: int

    def __repr__(self) -> str:
        return f"EncryptedValue(ciphertext={self.ciphertext!r}, r=<hidden>)"


def to_exponential(params: GroupParameters, m: int) -> int:
    """Lift an integer to the group element g^m mod p"""

    return pow(params.g, m, params.p)


def encrypt_with_randomness(params: GroupParameters, m: int) -> EncryptedValue:
    """Encrypt a group element and keep the randomness used

    Args
    - params: group parameters and public key y
    - m: message already lifted into the group, 0 < m < p

    Returns: EncryptedValue with (g^r, m * y^r mod p) and r
    """

    if not 0 < m < params.p:
        raise RangeError("message must lie in (0, p)")

    r = random_scalar(params.q)
    alpha = pow(params.g, r, params.p)
    beta = (m * pow(params.y, r, params.p)) % params.p

    return EncryptedValue(ciphertext=Ciphertext(alpha=alpha, beta=beta), r=r)


def encrypt(params: GroupParameters, m: int) -> Ciphertext:
    return encrypt_with_randomness(params, m).ciphertext


def encrypt_choice(params: GroupParameters, choice: int) -> EncryptedValue:
    """Encrypt a 0/1 ballot choice as g^choice"""

    if choice not in (0, 1):
        raise RangeError("choice must be 0 or 1")

    return encrypt_with_randomness(params, to_exponential(params, choice))


def decrypt(ciphertext: Ciphertext, private_key: PrivateKey) -> int:
    """Return the plaintext group element beta * (alpha^x)^-1 mod p

    For an exponential ciphertext this is g^m; use dlog.recover_count to get m.
    """

    p = private_key.params.p
    if not ciphertext.in_group(p):
        raise RangeError("ciphertext components must lie in (0, p)")

    s = pow(ciphertext.alpha, private_key.x, p)

    return (ciphertext.beta * pow(s, -1, p)) % p


def multiply(a: Ciphertext, b: Ciphertext, p: int) -> Ciphertext:
    """Homomorphic addition: component-wise product of two ciphertexts mod p"""

    return Ciphertext(alpha=(a.alpha * b.alpha) % p, beta=(a.beta * b.beta) % p)
