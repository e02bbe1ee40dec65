"""fairvote - end-to-end verifiable voting core

Exponential ElGamal ballots with 0-or-1 proofs, a homomorphic tally, and a
tally opening that publishes a proof of correct decryption per option.

Typical flow:
- keygen -> encrypt_ballot -> validate_ballot -> fold
- decrypt_tally -> verify_result / audit_election
"""

from .ballot import Ballot, ElectionSchema, Question, canonicalize_ballot, encrypt_ballot, validate_ballot
from .ballot_proof import ORProof, create_or_proof, verify_or_proof
from .decryption_proof import DecryptionProof, prove_decryption, verify_decryption
from .dlog import BabyStepTable, recover_count
from .elgamal import Ciphertext, decrypt, encrypt, encrypt_choice, to_exponential
from .errors import (
    BallotShapeError,
    FairvoteError,
    ParameterIntegrityError,
    RangeError,
    RecoveryBoundExceeded,
)
from .params import GroupParameters, PrivateKey, check_group, default_group, keygen
from .results import ElectionResult, ResultEntry, audit_election, decrypt_tally, verify_result
from .tally import RunningTally, Tally, empty_tally, fold, merge

__version__ = "0.1.0"

__all__ = [
    "BabyStepTable",
    "Ballot",
    "BallotShapeError",
    "Ciphertext",
    "DecryptionProof",
    "ElectionResult",
    "ElectionSchema",
    "FairvoteError",
    "GroupParameters",
    "ORProof",
    "ParameterIntegrityError",
    "PrivateKey",
    "Question",
    "RangeError",
    "RecoveryBoundExceeded",
    "ResultEntry",
    "RunningTally",
    "Tally",
    "audit_election",
    "canonicalize_ballot",
    "check_group",
    "create_or_proof",
    "decrypt",
    "decrypt_tally",
    "default_group",
    "empty_tally",
    "encrypt",
    "encrypt_ballot",
    "encrypt_choice",
    "fold",
    "keygen",
    "merge",
    "prove_decryption",
    "recover_count",
    "to_exponential",
    "validate_ballot",
    "verify_decryption",
    "verify_or_proof",
    "verify_result",
]
