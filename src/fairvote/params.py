"""Group parameters and election key lifecycle.

Every other module takes a GroupParameters value explicitly, so several
elections with different groups can live in one process.
"""

from __future__ import annotations

import functools
import logging
import secrets
from dataclasses import dataclass
from typing import Any, Dict, Optional, Tuple

from .codec import from_decimal, to_decimal
from .errors import ParameterIntegrityError, RangeError

logger = logging.getLogger(__name__)

# 2048-bit prime p with a 256-bit prime-order subgroup generated by g
_P_DEC = (
    "1632863208493301000238405503380545732960161477118595538973916730908621480040646579903858"
    "3634953752941675645562182498120750264980492381375579367675648771293800310370964745767014"
    "2436385184425538239734829952673040443267770476629574802693913227893783846194285964464469"
    "8469430618764476746246096562258008756433921263177581789595840901667639897567126617963789"
    "8557687317076177218843233150695157881061257053019133078545928983562221396313169622475509"
    "8184426610470184362648069010239662367183672047107559358990137503061077380023641379174265"
    "95737403871114187750804346564731250609196846638183903982387884578266136503697493474682071"
)
_Q_DEC = "61329566248342901292543872769978950870633559608669337131139375508370458778917"
_G_DEC = (
    "1488749222496318763428242153718604080130400801774349230448173738257193393756872447384710"
    "6029915040150784031882206090286938661464458896494215273989547889201144857352611058572236"
    "5787343195051280426023728645704265508552014481117465798718112491147816743090626934424423"
    "6869744997064823262188000170953514304791366143288328715000342980239222936158360868664324"
    "3349727791976247247948618930423866180410558458272606627111270040091203073580238905303994"
    "4722029307832074723945784985077647031912882495476598999971311661302597006044338912322981"
    "82348403175947450284433411265966789131024573629546048637848902243503970966798589660808533"
)


@dataclass(frozen=True)
class GroupParameters:
    """Prime-order subgroup plus the election public key

    Attributes
    - p: prime modulus
    - q: prime order of the subgroup, q divides p-1
    - g: generator of the order-q subgroup
    - y: election public key g^x mod p
    """

    p: int
    q: int
    g: int
    y: int

    def to_dict(self) -> Dict[str, str]:
        return {
            "p": to_decimal(self.p),
            "q": to_decimal(self.q),
            "g": to_decimal(self.g),
            "y": to_decimal(self.y),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "GroupParameters":
        try:
            return cls(
                p=from_decimal(data["p"]),
                q=from_decimal(data["q"]),
                g=from_decimal(data["g"]),
                y=from_decimal(data["y"]),
            )
        except (KeyError, TypeError, ValueError) as e:
            raise ParameterIntegrityError(f"malformed group parameters: {e}") from None


@dataclass(frozen=True)
class PrivateKey:
    """Election private key

    Owned by the election authority only. It is never serialised to the
    bulletin board and should go out of scope once the tally is opened.
    """

    params: GroupParameters
    x: int

    def __repr__(self) -> str:
        return f"PrivateKey(params={self.params!r}, x=<hidden>)"


def default_group() -> Tuple[int, int, int]:
    """Return the default (p, q, g) triple"""

    return int(_P_DEC), int(_Q_DEC), int(_G_DEC)


def random_scalar(q: int) -> int:
    """Return a fresh random scalar in [1 to q-1]

    Every nonce, fake challenge and encryption randomness goes through here,
    one independent draw per call.
    """

    return secrets.randbelow(q - 1) + 1


def generate_private_key(q: int) -> int:
    """Sample a private key x uniformly in [1, q-1]"""

    if q <= 1:
        raise ParameterIntegrityError(f"subgroup order must be > 1, got {q}")

    return random_scalar(q)


def compute_public_key(g: int, x: int, p: int) -> int:
    return pow(g, x, p)


def check_group(params: GroupParameters) -> None:
    """Raise ParameterIntegrityError unless g and y both have order q

    Since q is prime, x^q == 1 (mod p) with x != 1 means x has order exactly q.
    Passing checks are remembered per parameter set, so the proofs can call
    this on every option without repeating the modexps.
    """

    _check_group(params.p, params.q, params.g, params.y)


# failures raise and are never cached
@functools.lru_cache(maxsize=64)
def _check_group(p: int, q: int, g: int, y: int) -> None:
    if q <= 1 or p <= 2:
        raise ParameterIntegrityError("p and q must be larger than the trivial group")
    if not 1 < g < p:
        raise ParameterIntegrityError("generator g must lie in (1, p)")
    if not 0 < y < p:
        raise ParameterIntegrityError("public key y must lie in (0, p)")
    if pow(g, q, p) != 1:
        raise ParameterIntegrityError("parameter g is not of order q (g^q != 1 mod p)")
    if pow(y, q, p) != 1:
        raise ParameterIntegrityError("public key not in subgroup of order q (y^q != 1 mod p)")


def keygen(group: Optional[Tuple[int, int, int]] = None) -> Tuple[GroupParameters, PrivateKey]:
    """Generate an election key pair

    Args
    - group: (p, q, g) triple; the default group is used if None

    Returns: (public GroupParameters, PrivateKey)
    """

    p, q, g = group if group is not None else default_group()
    x = generate_private_key(q)
    params = GroupParameters(p=p, q=q, g=g, y=compute_public_key(g, x, p))
    check_group(params)
    logger.info("generated election key pair (|p|=%d bits, |q|=%d bits)", p.bit_length(), q.bit_length())

    return params, PrivateKey(params=params, x=x)


def private_key_from(params: GroupParameters, x: int) -> PrivateKey:
    """Wrap an existing exponent as a PrivateKey after checking it matches y"""

    if not 1 <= x <= params.q - 1:
        raise RangeError("private key must lie in [1, q-1]")
    if compute_public_key(params.g, x, params.p) != params.y:
        raise ParameterIntegrityError("private key does not match public key y")

    return PrivateKey(params=params, x=x)
