"""Disjunctive zero-knowledge proof that a ciphertext encrypts 0 or 1.

Cramer-Damgard-Schoenmakers OR-proof made non-interactive with Fiat-Shamir.
Slot 0 always carries the "plaintext is g^0" claim and slot 1 the "plaintext
is g^1" claim. The prover answers one slot honestly and simulates the other;
the verifier only sees (c0, s0, c1, s1) and checks that c0 + c1 equals the
hash of the commitments recomputed from them.

Challenge input, in this order: A0, B0, A1, B1, m0, m1.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Dict, NamedTuple, Tuple

from .codec import from_decimal, hash_to_scalar, to_decimal
from .elgamal import Ciphertext, EncryptedValue, encrypt_choice, to_exponential
from .errors import RangeError
from .params import GroupParameters, check_group, random_scalar

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ORProof:
    """One ballot option: the encrypted choice and its 0-or-1 proof"""

    c0: int
    s0: int
    c1: int
    s1: int
    ciphertext: Ciphertext

    def to_dict(self) -> Dict[str, Any]:
        return {
            "c0": to_decimal(self.c0),
            "s0": to_decimal(self.s0),
            "c1": to_decimal(self.c1),
            "s1": to_decimal(self.s1),
            "encrypted_choice": self.ciphertext.to_dict(),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ORProof":
        if not isinstance(data, dict):
            raise ValueError("OR-proof must be an object")
        try:
            return cls(
                c0=from_decimal(data["c0"]),
                s0=from_decimal(data["s0"]),
                c1=from_decimal(data["c1"]),
                s1=from_decimal(data["s1"]),
                ciphertext=Ciphertext.from_dict(data["encrypted_choice"]),
            )
        except KeyError as e:
            raise ValueError(f"OR-proof is missing {e}") from None


class _Branch(NamedTuple):
    a: int
    b: int
    challenge: int
    response: int


def _messages(params: GroupParameters) -> Tuple[int, int]:
    return to_exponential(params, 0), to_exponential(params, 1)


def _commitments(params: GroupParameters, ct: Ciphertext, message: int, c: int, s: int) -> Tuple[int, int]:
    """Back-solve the commitments of one slot from its challenge and response

    A = g^s * alpha^-c,  B = y^s * (beta / message)^-c
    """

    p = params.p
    a = (pow(params.g, s, p) * pow(pow(ct.alpha, c, p), -1, p)) % p
    divisor = (ct.beta * pow(message, -1, p)) % p
    b = (pow(params.y, s, p) * pow(pow(divisor, c, p), -1, p)) % p

    return a, b


def _place(choice: int, real: _Branch, fake: _Branch) -> Tuple[_Branch, _Branch]:
    # index by the secret bit instead of branching on it
    slots = [fake, fake]
    slots[choice] = real

    return slots[0], slots[1]


def prove_choice(params: GroupParameters, encrypted: EncryptedValue, choice: int) -> ORProof:
    """Build the OR-proof for a ciphertext that encrypts g^choice

    Args
    - params: group parameters and public key
    - encrypted: the ciphertext and the randomness r used to produce it
    - choice: the encrypted bit, 0 or 1

    Returns: ORProof with canonical slot ordering
    """

    if choice not in (0, 1):
        raise RangeError("choice must be 0 or 1")
    check_group(params)

    p, q, g, y = params.p, params.q, params.g, params.y
    messages = _messages(params)
    ct = encrypted.ciphertext
    if ct.beta != (messages[choice] * pow(y, encrypted.r, p)) % p:
        raise RangeError("ciphertext does not encrypt the given choice")

    # honest slot: commit with a fresh nonce t
    t = random_scalar(q)
    real = _Branch(pow(g, t, p), pow(y, t, p), 0, 0)

    # simulated slot: pick challenge and response first, solve for commitments
    fake_c = random_scalar(q)
    fake_s = random_scalar(q)
    fake_a, fake_b = _commitments(params, ct, messages[1 - choice], fake_c, fake_s)
    fake = _Branch(fake_a, fake_b, fake_c, fake_s)

    slot0, slot1 = _place(choice, real, fake)
    h = hash_to_scalar(q, slot0.a, slot0.b, slot1.a, slot1.b, messages[0], messages[1])

    real_c = (h - fake_c) % q
    real = real._replace(challenge=real_c, response=(t + real_c * encrypted.r) % q)
    slot0, slot1 = _place(choice, real, fake)

    return ORProof(
        c0=slot0.challenge,
        s0=slot0.response,
        c1=slot1.challenge,
        s1=slot1.response,
        ciphertext=ct,
    )


def create_or_proof(params: GroupParameters, choice: int) -> ORProof:
    """Encrypt a 0/1 choice and prove it is 0 or 1"""

    return prove_choice(params, encrypt_choice(params, choice), choice)


def verify_or_proof(params: GroupParameters, proof: ORProof) -> bool:
    """Check an OR-proof

    Returns False for a proof that does not verify or whose values are out of
    range. Raises ParameterIntegrityError if the group itself is broken, which
    is a configuration problem and not a bad ballot.
    """

    check_group(params)

    p, q = params.p, params.q
    ct = proof.ciphertext
    if not ct.in_group(p):
        logger.debug("OR-proof rejected: ciphertext outside (0, p)")
        return False
    if not all(0 <= v < q for v in (proof.c0, proof.s0, proof.c1, proof.s1)):
        logger.debug("OR-proof rejected: challenge or response outside [0, q)")
        return False

    m0, m1 = _messages(params)
    a0, b0 = _commitments(params, ct, m0, proof.c0, proof.s0)
    a1, b1 = _commitments(params, ct, m1, proof.c1, proof.s1)
    h = hash_to_scalar(q, a0, b0, a1, b1, m0, m1)

    return (proof.c0 + proof.c1) % q == h


def verify_or_proof_dict(params: GroupParameters, data: Any) -> bool:
    """Verify an OR-proof received as JSON; malformed input verifies False"""

    try:
        proof = ORProof.from_dict(data)
    except (TypeError, ValueError) as e:
        logger.debug("OR-proof rejected: %s", e)
        return False

    return verify_or_proof(params, proof)
