"""Homomorphic tally aggregation.

Every slot starts at the identity ciphertext (1, 1) and each accepted ballot
is multiplied in component-wise. Folding is commutative and associative, so
the final tally does not depend on ballot arrival order and partial tallies
can be merged.

fold() never checks OR-proofs: validate the ballot first.
"""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass
from typing import Any, Dict, Iterable, Tuple

from .ballot import Ballot, Shape, check_shape
from .elgamal import Ciphertext, multiply
from .errors import BallotShapeError
from .params import GroupParameters

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Tally:
    """entries[question][option] -> running Ciphertext"""

    entries: Tuple[Tuple[Ciphertext, ...], ...]

    def shape(self) -> Shape:
        return tuple(len(row) for row in self.entries)

    def to_dict(self) -> Dict[str, Any]:
        return {"entries": [[ct.to_dict() for ct in row] for row in self.entries]}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Tally":
        if not isinstance(data, dict) or not isinstance(data.get("entries"), list):
            raise ValueError("tally must be an object with an 'entries' list")

        return cls(entries=tuple(tuple(Ciphertext.from_dict(ct) for ct in row) for row in data["entries"]))


def empty_tally(shape: Shape) -> Tally:
    """A tally with every slot set to the identity ciphertext"""

    return Tally(entries=tuple(tuple(Ciphertext.identity() for _ in range(n)) for n in shape))


def fold(tally: Tally, ballot: Ballot, params: GroupParameters) -> Tally:
    """Add one ballot to a tally

    Args
    - tally: current running tally
    - ballot: an already validated ballot of the same shape
    - params: group parameters (only p is used)

    Returns: a new Tally; the input is left untouched
    """

    check_shape(ballot.shape(), tally.shape())
    p = params.p

    return Tally(
        entries=tuple(
            tuple(multiply(ct, option.ciphertext, p) for ct, option in zip(t_row, b_row))
            for t_row, b_row in zip(tally.entries, ballot.entries)
        )
    )


def fold_all(tally: Tally, ballots: Iterable[Ballot], params: GroupParameters) -> Tally:
    for ballot in ballots:
        tally = fold(tally, ballot, params)

    return tally


def merge(a: Tally, b: Tally, params: GroupParameters) -> Tally:
    """Combine two partial tallies that were folded independently"""

    if a.shape() != b.shape():
        raise BallotShapeError(f"cannot merge tallies of shapes {list(a.shape())} and {list(b.shape())}")
    p = params.p

    return Tally(
        entries=tuple(
            tuple(multiply(x, y, p) for x, y in zip(a_row, b_row)) for a_row, b_row in zip(a.entries, b.entries)
        )
    )


class RunningTally:
    """A tally that many threads fold into

    Each fold reads and then replaces the whole tally, so folds into one
    instance are serialised by a lock. Separate instances do not share state.
    """

    def __init__(self, params: GroupParameters, shape: Shape):
        self.params = params
        self._lock = threading.Lock()
        self._tally = empty_tally(shape)
        self._count = 0

    def fold(self, ballot: Ballot) -> int:
        """Fold a validated ballot in and return the new ballot count"""

        with self._lock:
            self._tally = fold(self._tally, ballot, self.params)
            self._count += 1
            count = self._count
        logger.debug("folded ballot #%d into tally", count)

        return count

    def snapshot(self) -> Tally:
        with self._lock:
            return self._tally

    @property
    def count(self) -> int:
        with self._lock:
            return self._count
