"""Reference runner that demonstrates a full election locally.

Run this script from the repository root:
    python run_election.py --voters 5
"""

import argparse
import hashlib
import logging
import secrets

from fairvote.ballot import ElectionSchema, Question, canonicalize_ballot, encrypt_ballot, validate_ballot
from fairvote.config import LOG_FORMAT, LOG_LEVEL, VOTER_LIMIT
from fairvote.params import keygen
from fairvote.results import audit_election, decrypt_tally
from fairvote.tally import RunningTally


def _print_heading(msg: str):
    print()
    print(msg)


def _print_kv(key: str, value: str):
    print(f"  {key}: {value}")


def _fingerprint(value) -> str:
    return hashlib.sha256(str(value).encode()).hexdigest()[:8]


def main(argv=None):
    parser = argparse.ArgumentParser()
    parser.add_argument("--voters", type=int, default=4)
    args = parser.parse_args(argv)
    logging.basicConfig(format=LOG_FORMAT, level=LOG_LEVEL)

    schema = ElectionSchema(
        questions=(
            Question("Who should chair the committee?", ("Alice", "Bob")),
            Question("Approve the budget?", ("Yes", "No", "Abstain")),
        )
    )

    # Step 1: keys
    _print_heading("[Step 1] Setup: generate the election key pair")
    params, private_key = keygen()
    _print_kv("public key", _fingerprint(params.y))
    _print_kv("shape", str(list(schema.shape())))

    # Step 2: voters build ballots: one chosen option per question
    _print_heading("[Step 2] Ballot casting: encrypt choices and attach 0-or-1 proofs")
    bulletin_board = []
    expected = [[0] * n for n in schema.shape()]
    for voter in range(args.voters):
        votes = []
        for q_idx, n in enumerate(schema.shape()):
            pick = secrets.randbelow(n)
            expected[q_idx][pick] += 1
            votes.append([1 if i == pick else 0 for i in range(n)])
        ballot = encrypt_ballot(params, votes)
        bulletin_board.append(ballot)
        _print_kv(f"voter {voter}", _fingerprint(canonicalize_ballot(ballot)))

    # Step 3: the board checks every ballot before folding it in
    _print_heading("[Step 3] Homomorphic tally of validated ballots")
    running = RunningTally(params, schema.shape())
    for idx, ballot in enumerate(bulletin_board):
        ok = validate_ballot(params, ballot, schema)
        _print_kv(f"ballot {idx}", "OK" if ok else "REJECTED")
        if ok:
            running.fold(ballot)

    # Step 4: open the tally
    _print_heading("[Step 4] Decrypt the tally with proofs of correct decryption")
    result = decrypt_tally(running.snapshot(), private_key, VOTER_LIMIT)
    del private_key
    for question, counts in zip(schema.questions, result.counts()):
        print(f"  {question.question}")
        for option, count in zip(question.options, counts):
            print(f"    {option}: {count}")

    # Step 5: anyone re-checks from public data
    _print_heading("[Step 5] Universal verification")
    report = audit_election(params, [b.to_dict() for b in bulletin_board], result.to_dict(), schema)
    _print_kv("ballots accepted", str(report.accepted))
    _print_kv("result", "OK" if report.ok else "MISMATCH")
    _print_kv("matches cast choices", str(result.counts() == expected))

    return 0 if report.ok and result.counts() == expected else 1


if __name__ == "__main__":
    raise SystemExit(main())
