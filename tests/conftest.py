import os
import sys

import pytest


# Ensure the repository's src/ is on sys.path for `from arena_chess...` imports
REPO_ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), os.pardir))
SRC_PATH = os.path.join(REPO_ROOT, "src")
SRC_PATH = os.path.abspath(SRC_PATH)
if SRC_PATH not in sys.path:
    sys.path.insert(0, SRC_PATH)

from arena_chess.engine.types import Position  # noqa: E402


def square(name: str) -> Position:
    """Map a square name such as ``"e2"`` onto a Position."""
    return Position(ord(name[0]) - ord("a"), int(name[1]) - 1)


@pytest.fixture
def sq():
    return square
