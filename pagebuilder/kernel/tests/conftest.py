"""
Page builder kernel test configuration.

Shared fixtures: a loaded coordinator over the default page, and a small
helper for reducing a single event against a fresh state.
"""

import pytest

from pagebuilder.config import Settings
from pagebuilder.kernel.coordinator import RenderCoordinator
from pagebuilder.kernel.events import make_event
from pagebuilder.kernel.reducer import empty_state, reduce


@pytest.fixture
def fast_settings():
    """Settings with no print settle delay, so print tests stay quick."""
    s = Settings()
    s.PRINT_SETTLE_MS = 0
    return s


@pytest.fixture
def coordinator(fast_settings):
    c = RenderCoordinator(config=fast_settings)
    c.load()
    yield c
    c.unload()


@pytest.fixture
def state():
    return empty_state()


@pytest.fixture
def apply():
    """apply(state, type, payload) → ReduceResult"""

    def _apply(snap, type, payload, seq=1):
        return reduce(snap, make_event(seq=seq, type=type, payload=payload))

    return _apply
