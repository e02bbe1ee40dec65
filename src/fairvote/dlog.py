"""Bounded discrete-log recovery for exponential ElGamal tallies.

Decryption yields g^m; the vote count m is found with baby-step/giant-step in
O(sqrt(bound)) group operations. The bound is a public election parameter:
prover and verifiers must use the same one.
"""

from __future__ import annotations

import logging
from math import isqrt
from typing import Dict

from .config import VOTER_LIMIT
from .errors import RecoveryBoundExceeded
from .params import GroupParameters

logger = logging.getLogger(__name__)


def _ceil_sqrt(n: int) -> int:
    root = isqrt(n)
    return root if root * root == n else root + 1


class BabyStepTable:
    """Precomputed baby steps g^i for i in [0, N), N = ceil(sqrt(bound))

    Building the table is the expensive part, so one table is meant to serve
    every option of a tally.
    """

    def __init__(self, params: GroupParameters, bound: int = VOTER_LIMIT):
        if bound < 1:
            raise ValueError("recovery bound must be at least 1")

        self.params = params
        self.bound = bound
        self.n = _ceil_sqrt(bound)

        p, g = params.p, params.g
        self._baby: Dict[int, int] = {}
        cur = 1
        for i in range(self.n):
            # keep the smallest exponent if g has order < N
            self._baby.setdefault(cur, i)
            cur = (cur * g) % p

        # giant step factor g^-N mod p
        self._giant = pow(pow(g, -1, p), self.n, p)

    def recover(self, value: int) -> int:
        """Return m in [0, bound) with g^m == value (mod p)

        Raises RecoveryBoundExceeded if there is none.
        """

        p = self.params.p
        gamma = value % p
        for j in range(self.n):
            i = self._baby.get(gamma)
            if i is not None:
                m = j * self.n + i
                if m < self.bound:
                    return m
                break
            gamma = (gamma * self._giant) % p

        logger.warning("discrete log not found below bound %d", self.bound)
        raise RecoveryBoundExceeded(self.bound)


def recover_count(value: int, params: GroupParameters, bound: int = VOTER_LIMIT) -> int:
    """Recover the vote count m from g^m mod p, for m < bound"""

    return BabyStepTable(params, bound).recover(value)
