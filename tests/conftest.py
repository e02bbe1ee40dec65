import os
import sys

import pytest


# Ensure repository src directory (package) and root (scripts) are on sys.path for tests
ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), os.pardir))
SRC = os.path.join(ROOT, "src")
for path in (SRC, ROOT):
    if path not in sys.path:
        sys.path.insert(0, path)

from fairvote.params import keygen  # noqa: E402


@pytest.fixture(scope="session")
def keypair():
    """One election key pair over the default 2048-bit group, shared by the session."""
    return keygen()


@pytest.fixture(scope="session")
def params(keypair):
    return keypair[0]


@pytest.fixture(scope="session")
def private_key(keypair):
    return keypair[1]
