"""Proof that a published plaintext is the correct opening of a ciphertext.

Chaum-Pedersen style: the authority shows log_g(y) == log_alpha(beta / plaintext)
without revealing x. Only (c, z) and the ciphertext are published; the
commitments A = g^s and B = alpha^s are recomputed by the verifier.

Challenge input, in this order: g, y, alpha, beta, plaintext, A, B.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Dict, Tuple

from .codec import from_decimal, hash_to_scalar, to_decimal
from .elgamal import Ciphertext, decrypt
from .params import GroupParameters, PrivateKey, compute_public_key, random_scalar

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DecryptionProof:
    c: int
    z: int
    ciphertext: Ciphertext

    def to_dict(self) -> Dict[str, Any]:
        return {
            "c": to_decimal(self.c),
            "z": to_decimal(self.z),
            "encrypted_message": self.ciphertext.to_dict(),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "DecryptionProof":
        if not isinstance(data, dict):
            raise ValueError("decryption proof must be an object")
        try:
            return cls(
                c=from_decimal(data["c"]),
                z=from_decimal(data["z"]),
                ciphertext=Ciphertext.from_dict(data["encrypted_message"]),
            )
        except KeyError as e:
            raise ValueError(f"decryption proof is missing {e}") from None


def prove_decryption(private_key: PrivateKey, ciphertext: Ciphertext) -> Tuple[int, DecryptionProof]:
    """Decrypt a ciphertext and prove the decryption is correct

    Args
    - private_key: the election private key
    - ciphertext: usually a tally slot

    Returns: (plaintext group element, DecryptionProof)
    """

    params = private_key.params
    p, q, g, x = params.p, params.q, params.g, private_key.x
    alpha, beta = ciphertext.alpha, ciphertext.beta
    plaintext = decrypt(ciphertext, private_key)

    s = random_scalar(q)
    a = pow(g, s, p)
    b = pow(alpha, s, p)

    y = compute_public_key(g, x, p)
    c = hash_to_scalar(q, g, y, alpha, beta, plaintext, a, b)
    z = (s + c * (x % q)) % q

    return plaintext, DecryptionProof(c=c, z=z, ciphertext=ciphertext)


def verify_decryption(params: GroupParameters, proof: DecryptionProof, plaintext: int) -> bool:
    """Check that `plaintext` opens `proof.ciphertext` under public key y

    Recomputes A = g^z * y^-c and B = alpha^z * (beta / plaintext)^-c and
    accepts iff hashing them reproduces c.
    """

    p, q, g, y = params.p, params.q, params.g, params.y
    ct = proof.ciphertext
    if not ct.in_group(p) or not 0 < plaintext < p:
        logger.debug("decryption proof rejected: group element outside (0, p)")
        return False
    if not (0 <= proof.c < q and 0 <= proof.z < q):
        logger.debug("decryption proof rejected: c or z outside [0, q)")
        return False

    a = (pow(g, proof.z, p) * pow(pow(y, proof.c, p), -1, p)) % p
    shared = (ct.beta * pow(plaintext, -1, p)) % p
    b = (pow(ct.alpha, proof.z, p) * pow(pow(shared, proof.c, p), -1, p)) % p

    return hash_to_scalar(q, g, y, ct.alpha, ct.beta, plaintext, a, b) == proof.c


def verify_decryption_dict(params: GroupParameters, data: Any, plaintext: Any) -> bool:
    """Verify a decryption proof received as JSON; malformed input verifies False"""

    try:
        proof = DecryptionProof.from_dict(data)
        value = from_decimal(plaintext)
    except (TypeError, ValueError) as e:
        logger.debug("decryption proof rejected: %s", e)
        return False

    return verify_decryption(params, proof, value)
