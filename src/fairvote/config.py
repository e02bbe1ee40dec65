"""Configuration constants for fairvote.

Values can be overridden from the environment so the server and the CLI can
be pointed elsewhere without code changes. Group parameters are not read from
here by the math: they are passed explicitly into every operation.
"""

import os

# Upper bound on any single recovered count (voters per election).
# Prover and independent verifiers must agree on it.
VOTER_LIMIT = int(os.environ.get("FAIRVOTE_VOTER_LIMIT", "5000000"))

# Server configuration
SERVER_HOST = os.environ.get("FAIRVOTE_SERVER_HOST", "127.0.0.1")
SERVER_PORT = int(os.environ.get("FAIRVOTE_SERVER_PORT", "5000"))
SERVER_URL = os.environ.get("FAIRVOTE_SERVER_URL", f"http://{SERVER_HOST}:{SERVER_PORT}")

# Client configuration
REQUEST_TIMEOUT = float(os.environ.get("FAIRVOTE_REQUEST_TIMEOUT", "30"))

# Logging configuration
LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
LOG_LEVEL = os.environ.get("FAIRVOTE_LOG_LEVEL", "INFO")
