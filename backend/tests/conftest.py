"""Pytest configuration and fixtures."""
import sys
from pathlib import Path

import numpy as np
import pytest

# Add backend to path
backend_path = Path(__file__).parent.parent
sys.path.insert(0, str(backend_path))

from app.analyzers.mock_analyzer import MockVocalAnalyzer  # noqa: E402
from app.models import AnalysisSnapshot, MetricName  # noqa: E402


@pytest.fixture
def seeded_analyzer():
    """Analyzer with a fixed seed and no artificial delay."""
    return MockVocalAnalyzer(rng=np.random.default_rng(1234), delay_seconds=0)


@pytest.fixture
def make_snapshot():
    """Build a snapshot from keyword values, defaulting every metric to 50."""

    def _make(**overrides):
        values = {name: 50.0 for name in MetricName}
        for key, value in overrides.items():
            values[MetricName(key)] = value
        return AnalysisSnapshot.from_values(values)

    return _make
