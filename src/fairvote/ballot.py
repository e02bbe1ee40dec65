"""Ballots: one OR-proof per (question, option) slot.

A ballot is created by a voter from a 0/1 matrix votes[question][option].
Authenticity is a detached signature over canonicalize_ballot(ballot),
produced and checked by an external signer; this module only builds the
payload and hands it to the injected verifier.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional, Sequence, Tuple

from .ballot_proof import ORProof, create_or_proof, verify_or_proof
from .codec import canonicalize
from .errors import BallotShapeError, RangeError
from .params import GroupParameters

logger = logging.getLogger(__name__)

Shape = Tuple[int, ...]

# verifier(message, signature, public_key) -> bool
SignatureVerifier = Callable[[bytes, str, str], bool]


@dataclass(frozen=True)
class Question:
    question: str
    options: Tuple[str, ...]

    def to_dict(self) -> Dict[str, Any]:
        return {"question": self.question, "options": list(self.options)}


@dataclass(frozen=True)
class ElectionSchema:
    """Questions and their options, in ballot order"""

    questions: Tuple[Question, ...]

    def shape(self) -> Shape:
        return tuple(len(q.options) for q in self.questions)

    def to_dict(self) -> Dict[str, Any]:
        return {"entries": [q.to_dict() for q in self.questions]}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ElectionSchema":
        if not isinstance(data, dict) or not isinstance(data.get("entries"), list):
            raise ValueError("election data must be an object with an 'entries' list")

        questions: List[Question] = []
        for entry in data["entries"]:
            if not isinstance(entry, dict):
                raise ValueError("each entry must be an object")
            text = entry.get("question")
            options = entry.get("options")
            if not isinstance(text, str) or not text.strip():
                raise ValueError("each entry needs a non-empty 'question'")
            if not isinstance(options, list) or not options or not all(isinstance(o, str) for o in options):
                raise ValueError(f"question '{text}' needs a non-empty list of string options")
            questions.append(Question(question=text, options=tuple(options)))

        if not questions:
            raise ValueError("election needs at least one question")

        return cls(questions=tuple(questions))


@dataclass(frozen=True)
class Ballot:
    """entries[question][option] -> ORProof"""

    entries: Tuple[Tuple[ORProof, ...], ...]

    def shape(self) -> Shape:
        return tuple(len(row) for row in self.entries)

    def to_dict(self) -> Dict[str, Any]:
        return {"entries": [[opt.to_dict() for opt in row] for row in self.entries]}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Ballot":
        if not isinstance(data, dict) or not isinstance(data.get("entries"), list):
            raise ValueError("ballot must be an object with an 'entries' list")
        rows = []
        for row in data["entries"]:
            if not isinstance(row, list):
                raise ValueError("ballot entries must be lists of OR-proofs")
            rows.append(tuple(ORProof.from_dict(opt) for opt in row))

        return cls(entries=tuple(rows))


def encrypt_ballot(params: GroupParameters, votes: Sequence[Sequence[int]]) -> Ballot:
    """Encrypt a 0/1 vote matrix and attach an OR-proof to every slot

    Args
    - params: election group parameters and public key
    - votes: votes[question][option] is 1 if the option is chosen, else 0

    Returns: Ballot with the same shape as `votes`
    """

    rows = []
    for q_idx, question in enumerate(votes):
        row = []
        for choice in question:
            if choice not in (0, 1):
                raise RangeError(f"question {q_idx}: choices must be 0 or 1, got {choice!r}")
            row.append(create_or_proof(params, choice))
        rows.append(tuple(row))

    return Ballot(entries=tuple(rows))


def check_shape(actual: Shape, expected: Shape) -> None:
    if actual != expected:
        raise BallotShapeError(f"ballot shape {list(actual)} does not match election shape {list(expected)}")


def validate_ballot(params: GroupParameters, ballot: Ballot, schema: Optional[ElectionSchema] = None) -> bool:
    """Return True iff the ballot fits the schema and every OR-proof verifies"""

    if schema is not None and ballot.shape() != schema.shape():
        logger.warning("ballot rejected: shape %s, expected %s", ballot.shape(), schema.shape())
        return False

    for q_idx, row in enumerate(ballot.entries):
        for o_idx, option in enumerate(row):
            if not verify_or_proof(params, option):
                logger.warning("ballot rejected: OR-proof failed at question %d option %d", q_idx, o_idx)
                return False

    return True


def validate_ballot_dict(params: GroupParameters, data: Any, schema: Optional[ElectionSchema] = None) -> bool:
    """Validate a ballot received as JSON; malformed input is an invalid ballot"""

    try:
        ballot = Ballot.from_dict(data)
    except (TypeError, ValueError) as e:
        logger.warning("ballot rejected: %s", e)
        return False

    return validate_ballot(params, ballot, schema)


def canonicalize_ballot(ballot: Ballot) -> str:
    """Deterministic serialisation of a ballot, the payload voters sign"""

    return canonicalize(ballot.to_dict())


def check_ballot_signature(ballot: Ballot, signature: str, public_key: str, verifier: SignatureVerifier) -> bool:
    message = canonicalize_ballot(ballot).encode("utf-8")

    return bool(verifier(message, signature, public_key))
