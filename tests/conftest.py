"""
Shared pytest fixtures for the schorm runtime test suite.
No real host is ever contacted: handles are in-process fakes.
Factory helpers live in tests/factories.py so they can be imported
directly by test modules as well as being used here.
"""
import sys
import os

_tests_dir = os.path.dirname(__file__)
_src_dir   = os.path.join(_tests_dir, "..", "src")
for _p in (_tests_dir, _src_dir):
    if _p not in sys.path:
        sys.path.insert(0, _p)

# Pin defaults so a developer's .env cannot change test behaviour
os.environ["SCHORM_NAMESPACE"] = "schorm"
os.environ["SCHORM_DISCOVERY_DEPTH"] = "7"
os.environ["SCHORM_FORCE_PREVIEW"] = "false"
os.environ["SCHORM_STORAGE"] = "memory"
os.environ["SCHORM_LOG_LEVEL"] = "WARNING"


import pytest

from factories import RecordingHandle, FixedClock, make_two_question_quiz, make_mixed_quiz

from schorm_runtime.config import get_settings
from schorm_runtime.storage import MemoryStore
from schorm_runtime.session import open_session


# ─── pytest fixtures ──────────────────────────────────────────────────────────

@pytest.fixture
def settings():
    return get_settings()


@pytest.fixture
def clock():
    return FixedClock()


@pytest.fixture
def store():
    return MemoryStore()


@pytest.fixture
def handle():
    return RecordingHandle()


@pytest.fixture
def live_session(handle, settings, store, clock):
    """Session whose tracking API sits one frame up."""
    frames = [{}, {"API_1484_11": handle}]
    return open_session(frames, settings=settings, store=store, clock=clock)


@pytest.fixture
def preview_session(settings, store, clock):
    """Session with no tracking API anywhere in the chain."""
    return open_session([{}, {}], settings=settings, store=store, clock=clock)


@pytest.fixture
def two_question_quiz():
    return make_two_question_quiz()


@pytest.fixture
def mixed_quiz():
    return make_mixed_quiz()
