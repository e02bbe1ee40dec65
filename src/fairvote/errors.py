"""Exception types raised by the fairvote core.

A proof that does not verify is not an error: every verifier returns a bool
so that one bad ballot can be rejected while the rest are processed.
"""

from __future__ import annotations


class FairvoteError(Exception):
    """Base class for all fairvote errors"""


class ParameterIntegrityError(FairvoteError):
    """Group parameters fail the subgroup checks (g^q != 1 or y^q != 1 mod p)

    Fatal for the whole election: no proof built under such parameters means
    anything.
    """


class RangeError(FairvoteError, ValueError):
    """A value to encrypt or prove lies outside its allowed range"""


class BallotShapeError(FairvoteError, ValueError):
    """Ballot or tally dimensions do not match the election schema"""


class RecoveryBoundExceeded(FairvoteError):
    """Discrete-log recovery found no exponent below the configured bound

    Means either the bound is too small for the electorate or the tally is
    corrupted.
    """

    def __init__(self, bound: int):
        super().__init__(f"no discrete log found in [0, {bound})")
        self.bound = bound
