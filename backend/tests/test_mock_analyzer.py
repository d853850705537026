"""Tests for the synthetic vocal analyzer."""
import asyncio

import numpy as np
import pytest

from app.analyzers.mock_analyzer import (
    METRIC_RANGES,
    PITCH_POINTS,
    RHYTHM_BEATS,
    AnalysisError,
    MockVocalAnalyzer,
)
from app.models import METRIC_ORDER


def _analyze(analyzer, name="take1.mp3", size=2048, content_type="audio/mpeg"):
    return asyncio.run(analyzer.analyze(name, size, content_type))


class TestMockVocalAnalyzer:
    """Test suite for MockVocalAnalyzer."""

    def test_result_describes_the_upload(self, seeded_analyzer):
        result = _analyze(seeded_analyzer)

        assert result.file_name == "take1.mp3"
        assert result.file_size == 2048
        assert result.format == "MPEG"
        assert 30 <= result.duration < 210

    def test_metrics_stay_within_ranges(self, seeded_analyzer):
        for _ in range(25):
            snapshot = seeded_analyzer.generate_snapshot()
            assert sorted(sample.name for sample in snapshot.samples) == sorted(METRIC_ORDER)
            for sample in snapshot.samples:
                low, span = METRIC_RANGES[sample.name]
                assert low <= sample.value <= low + span
                assert sample.higher_is_better is True

    def test_tracks_have_expected_shape(self, seeded_analyzer):
        result = _analyze(seeded_analyzer)

        assert len(result.pitch_data) == PITCH_POINTS
        assert result.pitch_data[0].time == 0.0
        assert result.pitch_data[10].time == pytest.approx(1.0)
        assert all(220.0 <= point.target <= 660.0 for point in result.pitch_data)

        assert [point.beat for point in result.rhythm_data] == list(range(1, RHYTHM_BEATS + 1))
        assert all(70.0 <= point.accuracy <= 95.0 for point in result.rhythm_data)
        assert all(-50.0 <= point.timing_offset <= 50.0 for point in result.rhythm_data)

    def test_same_seed_gives_same_result(self):
        first = _analyze(MockVocalAnalyzer(rng=np.random.default_rng(7), delay_seconds=0))
        second = _analyze(MockVocalAnalyzer(rng=np.random.default_rng(7), delay_seconds=0))

        assert first == second

    def test_at_least_three_recommendations(self, seeded_analyzer):
        result = _analyze(seeded_analyzer)
        assert len(result.recommendations) >= 3

    def test_content_type_parameters_are_ignored(self, seeded_analyzer):
        result = _analyze(seeded_analyzer, content_type="audio/wav; codecs=1")
        assert result.format == "WAV"

    @pytest.mark.parametrize("content_type", [None, "", "audio/", "audio"])
    def test_missing_subtype_raises(self, seeded_analyzer, content_type):
        with pytest.raises(AnalysisError):
            _analyze(seeded_analyzer, content_type=content_type)

    def test_negative_delay_is_clamped(self):
        analyzer = MockVocalAnalyzer(delay_seconds=-1)
        assert analyzer.delay_seconds == 0.0

    def test_parallel_analyses_complete(self, seeded_analyzer):
        async def run_pair():
            return await asyncio.gather(
                seeded_analyzer.analyze("a.wav", 10, "audio/wav"),
                seeded_analyzer.analyze("b.wav", 20, "audio/wav"),
            )

        first, second = asyncio.run(run_pair())

        assert (first.file_name, second.file_name) == ("a.wav", "b.wav")
        assert first.snapshot != second.snapshot
