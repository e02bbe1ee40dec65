"""Flask bulletin board around the fairvote core.

Endpoints:
- POST /election -> create an election from {"entries": [{question, options}]}
- GET /<uuid>/encryption_key -> {p, q, g, y}
- POST /<uuid>/vote -> submit {"vote": ballot, "signature": ..., "public_key": ...}
- GET /<uuid>/votes -> every accepted ballot
- GET /<uuid>/tally -> current encrypted tally
- POST /<uuid>/stopElection -> open the tally with decryption proofs
- GET /<uuid>/results -> published result

Responses use the envelope {"status": "ok", "data": ...} or
{"status": "error", "message": ...}. State lives in memory for the life of
the process. If app.config["SIGNATURE_VERIFIER"] is set to a callable
(message, signature, public_key) -> bool, every vote must carry a valid
signature over its canonical form.
"""

from __future__ import annotations

import logging
import threading
import uuid
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from flask import Flask, current_app, jsonify, request

from .ballot import Ballot, ElectionSchema, check_ballot_signature, validate_ballot
from .config import LOG_FORMAT, LOG_LEVEL, SERVER_HOST, SERVER_PORT, VOTER_LIMIT
from .errors import FairvoteError, RecoveryBoundExceeded
from .params import keygen
from .results import ElectionResult, decrypt_tally
from .tally import RunningTally

logger = logging.getLogger(__name__)

app = Flask(__name__)
app.config.setdefault("SIGNATURE_VERIFIER", None)
app.config.setdefault("VOTER_LIMIT", VOTER_LIMIT)


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


class Election:
    """In-memory state of one election

    The private key is dropped as soon as the tally has been opened.
    """

    def __init__(self, election_uuid: str, schema: ElectionSchema):
        self.uuid = election_uuid
        self.schema = schema
        self.params, self._private_key = keygen()
        self.tally = RunningTally(self.params, schema.shape())
        self.votes: List[Dict[str, Any]] = []
        self.voters: set = set()
        self.running = True
        self.result: Optional[ElectionResult] = None
        self.stopped_at: Optional[str] = None
        self.lock = threading.Lock()

    def accept(self, ballot: Ballot, signature: Optional[str], public_key: Optional[str]) -> Dict[str, Any]:
        """Fold a validated ballot in; raises PermissionError/KeyError on state conflicts"""

        with self.lock:
            if not self.running:
                raise PermissionError("election has been stopped")
            if public_key is not None and public_key in self.voters:
                raise KeyError("voter has already voted")
            self.tally.fold(ballot)
            if public_key is not None:
                self.voters.add(public_key)
            record = {
                "vote_id": str(uuid.uuid4()),
                "voter_public_key": public_key,
                "encrypted_vote": ballot.to_dict(),
                "vote_signature": signature,
                "timestamp": _now(),
            }
            self.votes.append(record)

        return record

    def stop(self, bound: int) -> ElectionResult:
        with self.lock:
            if self.result is not None:
                return self.result
            self.running = False
            result = decrypt_tally(self.tally.snapshot(), self._private_key, bound)
            self.result = result
            self.stopped_at = _now()
            self._private_key = None

        return result


_ELECTIONS: Dict[str, Election] = {}
_ELECTIONS_LOCK = threading.Lock()


def _ok(data: Any, status: int = 200):
    return jsonify({"status": "ok", "data": data}), status


def _error(message: str, status: int = 400):
    return jsonify({"status": "error", "message": message}), status


def _get_election(election_uuid: str) -> Optional[Election]:
    with _ELECTIONS_LOCK:
        return _ELECTIONS.get(election_uuid)


@app.route("/election", methods=["POST"])
def create_election():
    """Create an election and its key pair. Returns {"uuid": ...}."""
    data = request.get_json(silent=True)
    try:
        schema = ElectionSchema.from_dict(data)
    except ValueError as e:
        return _error(str(e))

    election = Election(str(uuid.uuid4()), schema)
    with _ELECTIONS_LOCK:
        _ELECTIONS[election.uuid] = election
    logger.info("election %s created with shape %s", election.uuid, list(schema.shape()))
    return _ok({"uuid": election.uuid}, 201)


@app.route("/<election_uuid>/election", methods=["GET"])
def get_election(election_uuid: str):
    election = _get_election(election_uuid)
    if election is None:
        return _error("election not found", 404)
    return _ok({"uuid": election.uuid, "data": election.schema.to_dict(), "running": election.running})


@app.route("/<election_uuid>/encryption_key", methods=["GET"])
def get_encryption_key(election_uuid: str):
    election = _get_election(election_uuid)
    if election is None:
        return _error("election not found", 404)
    return _ok(election.params.to_dict())


@app.route("/<election_uuid>/vote", methods=["POST"])
def submit_vote(election_uuid: str):
    """Validate a ballot and fold it into the tally.

    Expects JSON {"vote": {"entries": [[...]]}, "signature": ..., "public_key": ...}.
    """
    election = _get_election(election_uuid)
    if election is None:
        return _error("election not found", 404)

    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        return _error("request body must be a JSON object")
    signature = data.get("signature")
    public_key = data.get("public_key")
    for name, value in (("signature", signature), ("public_key", public_key)):
        if value is not None and not isinstance(value, str):
            return _error(f"{name} must be a string")
    try:
        ballot = Ballot.from_dict(data.get("vote"))
    except (TypeError, ValueError) as e:
        logger.warning("election %s: malformed ballot: %s", election_uuid, e)
        return _error(f"malformed ballot: {e}")

    verifier = current_app.config.get("SIGNATURE_VERIFIER")
    if verifier is not None:
        if not isinstance(signature, str) or not isinstance(public_key, str):
            return _error("signature and public_key are required", 401)
        if not check_ballot_signature(ballot, signature, public_key, verifier):
            logger.warning("election %s: bad ballot signature from %s", election_uuid, public_key)
            return _error("invalid ballot signature", 401)

    try:
        valid = validate_ballot(election.params, ballot, election.schema)
    except FairvoteError as e:
        logger.error("election %s: parameter integrity failure: %s", election_uuid, e)
        return _error(str(e), 500)
    if not valid:
        return _error("invalid ballot")

    try:
        record = election.accept(ballot, signature, public_key)
    except PermissionError as e:
        return _error(str(e), 409)
    except KeyError:
        logger.warning("election %s: duplicate vote from %s", election_uuid, public_key)
        return _error("voter has already voted", 409)

    logger.info("election %s: vote accepted (total=%d)", election_uuid, election.tally.count)
    return _ok({"vote_id": record["vote_id"]}, 201)


@app.route("/<election_uuid>/votes", methods=["GET"])
def list_votes(election_uuid: str):
    election = _get_election(election_uuid)
    if election is None:
        return _error("election not found", 404)
    with election.lock:
        votes = list(election.votes)
    return _ok({"election_uuid": election_uuid, "vote_count": len(votes), "votes": votes})


@app.route("/<election_uuid>/tally", methods=["GET"])
def get_tally(election_uuid: str):
    election = _get_election(election_uuid)
    if election is None:
        return _error("election not found", 404)
    return _ok(
        {
            "election_uuid": election_uuid,
            "encrypted_tally": election.tally.snapshot().to_dict(),
            "vote_count": election.tally.count,
            "running": election.running,
        }
    )


@app.route("/<election_uuid>/stopElection", methods=["POST"])
def stop_election(election_uuid: str):
    """Close voting, open the tally and publish the result with its proofs."""
    election = _get_election(election_uuid)
    if election is None:
        return _error("election not found", 404)

    try:
        result = election.stop(current_app.config["VOTER_LIMIT"])
    except RecoveryBoundExceeded as e:
        logger.error("election %s: %s", election_uuid, e)
        return _error(f"tally could not be opened: {e}", 500)

    logger.info("election %s stopped", election_uuid)
    return _ok(result.to_dict())


@app.route("/<election_uuid>/results", methods=["GET"])
def get_results(election_uuid: str):
    election = _get_election(election_uuid)
    if election is None:
        return _error("election not found", 404)
    if election.result is None:
        if election.running:
            return _error("election is still running", 409)
        return _error("election is stopped but its tally has not been opened", 409)
    return _ok(
        {
            "election_uuid": election_uuid,
            "decrypted_results": election.result.to_dict(),
            "timestamp": election.stopped_at,
        }
    )


def main():
    logging.basicConfig(format=LOG_FORMAT, level=LOG_LEVEL)
    logger.info("starting bulletin board on %s:%d", SERVER_HOST, SERVER_PORT)
    app.run(host=SERVER_HOST, port=SERVER_PORT)


if __name__ == "__main__":
    main()
