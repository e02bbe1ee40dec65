"""Opening the tally and checking a published election result.

decrypt_tally is the only place the private key is used. Everything else
here works from public data, so anyone can re-run verify_result or
audit_election against what the bulletin board publishes.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Optional, Tuple

from .ballot import Ballot, ElectionSchema, validate_ballot
from .codec import from_decimal, to_decimal
from .config import VOTER_LIMIT
from .decryption_proof import DecryptionProof, prove_decryption, verify_decryption
from .dlog import BabyStepTable
from .elgamal import Ciphertext
from .params import GroupParameters, PrivateKey
from .tally import Tally, empty_tally, fold

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ResultEntry:
    """Opened tally slot

    Attributes
    - count: recovered number of votes for the option
    - decrypted_value: g^count mod p, the published plaintext
    - ciphertext: the tally ciphertext that was opened
    - proof: proof that decrypted_value opens ciphertext
    """

    count: int
    decrypted_value: int
    ciphertext: Ciphertext
    proof: DecryptionProof

    def to_dict(self) -> Dict[str, Any]:
        return {
            "original_value": to_decimal(self.count),
            "decrypted_value": to_decimal(self.decrypted_value),
            "encrypted_value": self.ciphertext.to_dict(),
            "proof": self.proof.to_dict(),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ResultEntry":
        if not isinstance(data, dict):
            raise ValueError("result entry must be an object")
        try:
            return cls(
                count=from_decimal(data["original_value"]),
                decrypted_value=from_decimal(data["decrypted_value"]),
                ciphertext=Ciphertext.from_dict(data["encrypted_value"]),
                proof=DecryptionProof.from_dict(data["proof"]),
            )
        except KeyError as e:
            raise ValueError(f"result entry is missing {e}") from None


@dataclass(frozen=True)
class ElectionResult:
    entries: Tuple[Tuple[ResultEntry, ...], ...]

    def counts(self) -> List[List[int]]:
        return [[entry.count for entry in row] for row in self.entries]

    def to_dict(self) -> Dict[str, Any]:
        return {"entries": [[entry.to_dict() for entry in row] for row in self.entries]}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ElectionResult":
        if not isinstance(data, dict) or not isinstance(data.get("entries"), list):
            raise ValueError("election result must be an object with an 'entries' list")

        return cls(entries=tuple(tuple(ResultEntry.from_dict(e) for e in row) for row in data["entries"]))


def decrypt_tally(tally: Tally, private_key: PrivateKey, bound: int = VOTER_LIMIT) -> ElectionResult:
    """Open every tally slot with a decryption proof and a recovered count

    Raises RecoveryBoundExceeded if a slot holds a count >= bound.
    """

    table = BabyStepTable(private_key.params, bound)
    rows = []
    for row in tally.entries:
        opened = []
        for ct in row:
            plaintext, proof = prove_decryption(private_key, ct)
            opened.append(
                ResultEntry(count=table.recover(plaintext), decrypted_value=plaintext, ciphertext=ct, proof=proof)
            )
        rows.append(tuple(opened))
    logger.info("tally opened: %s", [[e.count for e in row] for row in rows])

    return ElectionResult(entries=tuple(rows))


def verify_result(
    params: GroupParameters,
    result: ElectionResult,
    tally: Optional[Tally] = None,
    bound: int = VOTER_LIMIT,
) -> bool:
    """Check a published result

    Every decryption proof must verify, must be about the published encrypted
    value, and g^count must equal the published plaintext with count in
    [0, bound). If `tally` is given, the encrypted values must also be exactly
    that tally.
    """

    if tally is not None:
        if tuple(len(row) for row in result.entries) != tally.shape():
            logger.warning("result shape does not match the tally")
            return False
        for r_row, t_row in zip(result.entries, tally.entries):
            for entry, ct in zip(r_row, t_row):
                if entry.ciphertext != ct:
                    logger.warning("published encrypted value differs from the recomputed tally")
                    return False

    for q_idx, row in enumerate(result.entries):
        for o_idx, entry in enumerate(row):
            if entry.proof.ciphertext != entry.ciphertext:
                logger.warning("result %d/%d: proof is about a different ciphertext", q_idx, o_idx)
                return False
            if not verify_decryption(params, entry.proof, entry.decrypted_value):
                logger.warning("result %d/%d: decryption proof failed", q_idx, o_idx)
                return False
            if not 0 <= entry.count < bound:
                logger.warning("result %d/%d: count %d outside [0, %d)", q_idx, o_idx, entry.count, bound)
                return False
            if pow(params.g, entry.count, params.p) != entry.decrypted_value:
                logger.warning("result %d/%d: count does not match decrypted value", q_idx, o_idx)
                return False

    return True


def verify_result_dict(
    params: GroupParameters, data: Any, tally: Optional[Tally] = None, bound: int = VOTER_LIMIT
) -> bool:
    try:
        result = ElectionResult.from_dict(data)
    except (TypeError, ValueError) as e:
        logger.warning("result rejected: %s", e)
        return False

    return verify_result(params, result, tally, bound)


@dataclass
class AuditReport:
    """Outcome of a universal verification run"""

    accepted: int = 0
    rejected: List[int] = field(default_factory=list)
    tally: Optional[Tally] = None
    result_ok: bool = False

    @property
    def ok(self) -> bool:
        return self.result_ok


def audit_election(
    params: GroupParameters,
    ballots: Iterable[Any],
    result: Any,
    schema: Optional[ElectionSchema] = None,
    bound: int = VOTER_LIMIT,
) -> AuditReport:
    """Universal verification from public data

    Re-checks every ballot proof, re-folds the accepted ballots into a fresh
    tally and checks the published result against it. Ballots and result may
    be model objects or their JSON form. Without a schema and without any
    parseable ballot there is no tally to bind the result to, so the audit
    fails.
    """

    report = AuditReport()
    tally: Optional[Tally] = empty_tally(schema.shape()) if schema is not None else None

    for idx, raw in enumerate(ballots):
        try:
            ballot = raw if isinstance(raw, Ballot) else Ballot.from_dict(raw)
        except (TypeError, ValueError) as e:
            logger.warning("audit: ballot %d malformed: %s", idx, e)
            report.rejected.append(idx)
            continue
        if tally is None:
            tally = empty_tally(ballot.shape())
        if not validate_ballot(params, ballot, schema) or ballot.shape() != tally.shape():
            report.rejected.append(idx)
            continue
        tally = fold(tally, ballot, params)
        report.accepted += 1

    report.tally = tally
    if tally is None:
        logger.warning("audit: no schema and no ballots, nothing to check the result against")
        report.result_ok = False
    elif isinstance(result, ElectionResult):
        report.result_ok = verify_result(params, result, tally, bound)
    else:
        report.result_ok = verify_result_dict(params, result, tally, bound)
    logger.info("audit: %d ballots accepted, %d rejected, result %s",
                report.accepted, len(report.rejected), "OK" if report.result_ok else "MISMATCH")

    return report
