"""Small CLI for interacting with the fairvote bulletin board.

Usage examples:
    python cli.py create --question "Best fruit?:apple,pear"
    python cli.py vote <uuid> --answers "1,0"
    python cli.py tally <uuid>
    python cli.py stop <uuid>
    python cli.py audit <uuid>
"""

import argparse
import json
import logging
import sys

import requests

from fairvote.ballot import ElectionSchema, encrypt_ballot
from fairvote.config import LOG_FORMAT, LOG_LEVEL, REQUEST_TIMEOUT, SERVER_URL
from fairvote.errors import FairvoteError
from fairvote.params import GroupParameters, check_group
from fairvote.results import audit_election

logger = logging.getLogger("fairvote.cli")


class APIError(Exception):
    pass


def _call(method: str, base: str, path: str, body=None):
    r = requests.request(method, f"{base.rstrip('/')}/{path}", json=body, timeout=REQUEST_TIMEOUT)
    try:
        data = r.json()
    except ValueError:
        raise APIError(f"HTTP {r.status_code}: {r.text[:200]}") from None
    if data.get("status") != "ok":
        raise APIError(data.get("message", f"HTTP {r.status_code}"))
    return data["data"]


def parse_question(text: str):
    """'Question?:opt1,opt2' -> {"question": ..., "options": [...]}"""
    question, sep, options = text.rpartition(":")
    if not sep or not question:
        raise argparse.ArgumentTypeError("expected 'question:option1,option2'")
    return {"question": question, "options": [o.strip() for o in options.split(",") if o.strip()]}


def parse_answers(text: str):
    """'1,0;0,1' -> [[1, 0], [0, 1]] (questions split by ';', options by ',')"""
    try:
        return [[int(v) for v in row.split(",")] for row in text.split(";")]
    except ValueError:
        raise argparse.ArgumentTypeError("answers must look like '1,0;0,1'") from None


def fetch_params(base: str, election: str) -> GroupParameters:
    params = GroupParameters.from_dict(_call("GET", base, f"{election}/encryption_key"))
    check_group(params)
    return params


def create(base: str, questions):
    print(json.dumps(_call("POST", base, "election", {"entries": questions}), indent=2))


def key(base: str, election: str):
    print(json.dumps(fetch_params(base, election).to_dict(), indent=2))


def vote(base: str, election: str, answers, public_key=None, signature=None):
    params = fetch_params(base, election)
    ballot = encrypt_ballot(params, answers)
    body = {"vote": ballot.to_dict(), "signature": signature, "public_key": public_key}
    print(json.dumps(_call("POST", base, f"{election}/vote", body), indent=2))


def tally(base: str, election: str):
    print(json.dumps(_call("GET", base, f"{election}/tally"), indent=2))


def stop(base: str, election: str):
    result = _call("POST", base, f"{election}/stopElection")
    for q_idx, row in enumerate(result["entries"]):
        print(f"question {q_idx}: " + ", ".join(entry["original_value"] for entry in row))


def results(base: str, election: str):
    print(json.dumps(_call("GET", base, f"{election}/results"), indent=2))


def audit(base: str, election: str) -> bool:
    params = fetch_params(base, election)
    schema = ElectionSchema.from_dict(_call("GET", base, f"{election}/election")["data"])
    votes = _call("GET", base, f"{election}/votes")["votes"]
    published = _call("GET", base, f"{election}/results")["decrypted_results"]
    report = audit_election(params, [v["encrypted_vote"] for v in votes], published, schema)
    print(f"ballots accepted: {report.accepted}, rejected: {report.rejected}")
    print("result:", "OK" if report.ok else "MISMATCH")
    return report.ok


def main(argv=None):
    p = argparse.ArgumentParser()
    p.add_argument("--base", default=SERVER_URL, help="bulletin board URL")
    sub = p.add_subparsers(dest="cmd")
    c = sub.add_parser("create")
    c.add_argument("--question", action="append", type=parse_question, required=True)
    for name in ("key", "tally", "stop", "results", "audit"):
        sub.add_parser(name).add_argument("election")
    v = sub.add_parser("vote")
    v.add_argument("election")
    v.add_argument("--answers", type=parse_answers, required=True)
    v.add_argument("--public-key")
    v.add_argument("--signature")
    args = p.parse_args(argv)

    logging.basicConfig(format=LOG_FORMAT, level=LOG_LEVEL)
    try:
        if args.cmd == "create":
            create(args.base, args.question)
        elif args.cmd == "key":
            key(args.base, args.election)
        elif args.cmd == "vote":
            vote(args.base, args.election, args.answers, args.public_key, args.signature)
        elif args.cmd == "tally":
            tally(args.base, args.election)
        elif args.cmd == "stop":
            stop(args.base, args.election)
        elif args.cmd == "results":
            results(args.base, args.election)
        elif args.cmd == "audit":
            return 0 if audit(args.base, args.election) else 1
        else:
            p.print_help()
    except (APIError, FairvoteError, ValueError, requests.RequestException) as e:
        logger.error("%s failed: %s", args.cmd, e)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
