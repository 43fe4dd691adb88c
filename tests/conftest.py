import logging
import os
import sys

import pytest

# Ensure the repository root is on sys.path for tests
ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), os.pardir))
if ROOT not in sys.path:
    sys.path.insert(0, ROOT)

from commitment import CommitmentKey  # noqa: E402


@pytest.fixture
def key():
    return CommitmentKey.derive(b"test-domain")


@pytest.fixture
def restore_root_logging():
    """setup_logging replaces root handlers; put pytest's back afterwards"""
    root = logging.getLogger()
    handlers = root.handlers[:]
    level = root.level
    yield
    for handler in root.handlers[:]:
        root.removeHandler(handler)
        if handler not in handlers:
            handler.close()
    for handler in handlers:
        root.addHandler(handler)
    root.setLevel(level)
