"""
Shared pytest fixtures for Machigai backend tests.

This module provides:
- level factories for each difficulty
- fake_provider: scripted ContentProvider
- controller: SessionController wired to the fake provider
- Custom markers for test categorization
"""

from __future__ import annotations

import random
import sys
from pathlib import Path

import pytest

# Add backend to path for imports
backend_path = Path(__file__).parent.parent
if str(backend_path) not in sys.path:
    sys.path.insert(0, str(backend_path))

from machigai.engine.controller import SessionController  # noqa: E402
from machigai.models.game import (  # noqa: E402
    Difference,
    Difficulty,
    Level,
    Session,
    SessionStatus,
)
from tests.mocks.provider import (  # noqa: E402
    BASE_IMAGE,
    MODIFIED_IMAGE,
    FakeContentProvider,
    make_level,
)


# =============================================================================
# Pytest Configuration
# =============================================================================


def pytest_configure(config: pytest.Config) -> None:
    """Register custom markers."""
    config.addinivalue_line(
        "markers", "slow: marks tests as slow (deselect with '-m \"not slow\"')"
    )
    config.addinivalue_line("markers", "integration: marks tests as integration tests")


# =============================================================================
# Level Fixtures
# =============================================================================


@pytest.fixture
def medium_level() -> Level:
    """A valid five-difference level."""
    return make_level(Difficulty.MEDIUM)


@pytest.fixture
def easy_level() -> Level:
    """A valid three-difference level."""
    return make_level(Difficulty.EASY)


@pytest.fixture
def playing_session(medium_level: Level) -> Session:
    """A session that has just become playable."""
    return Session(
        status=SessionStatus.PLAYING,
        difficulty=Difficulty.MEDIUM,
        theme="Busy Kitchen",
        level=medium_level,
        base_image=BASE_IMAGE,
        modified_image=MODIFIED_IMAGE,
    )


@pytest.fixture
def overlapping_differences() -> list[Difference]:
    """Three differences close enough for one click to reach all of them."""
    return [
        Difference(id="2", description="Cup turned red", x=50, y=50),
        Difference(id="10", description="Spoon removed", x=53, y=50),
        Difference(id="1", description="Clock added", x=47, y=50),
    ]


# =============================================================================
# Controller Fixtures
# =============================================================================


@pytest.fixture
def fake_provider() -> FakeContentProvider:
    """Provider that succeeds at every step."""
    return FakeContentProvider()


@pytest.fixture
def controller(fake_provider: FakeContentProvider) -> SessionController:
    """Controller with a fast ticker and a seeded hint RNG."""
    return SessionController(
        fake_provider,
        difficulty=Difficulty.MEDIUM,
        tick_interval=0.01,
        rng=random.Random(7),
    )
