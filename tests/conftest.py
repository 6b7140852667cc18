"""Shared fixtures for the swingsense test suite."""

from __future__ import annotations

import pytest
from builders import session_samples

from swingsense.models import Sample

SWING_INDEX = 1100
SESSION_LENGTH = 1300


@pytest.fixture
def swing_session() -> list[Sample]:
    """1100 samples of baseline motion, one swing, then 200 more samples at 100 Hz."""
    return session_samples(SESSION_LENGTH, swings=(SWING_INDEX,))


@pytest.fixture
def silent_swing_session() -> list[Sample]:
    """Same motion as :func:`swing_session` but without the impact sound."""
    return session_samples(SESSION_LENGTH, swings=(SWING_INDEX,), acoustic_peak=0.0)
