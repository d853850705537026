# -*- coding: utf-8 -*-
"""Synthetic vocal analysis.

No audio is decoded: metrics, pitch and rhythm tracks are drawn from fixed
ranges after an artificial delay. The random source is injected so callers can
seed it.
"""

from __future__ import annotations

import asyncio
import logging
import math
from typing import List, Optional

import numpy as np

from app.analyzers.recommendations import generate_recommendations
from app.models import AnalysisResult, AnalysisSnapshot, MetricName, PitchPoint, RhythmPoint

logger = logging.getLogger(__name__)

PITCH_POINTS = 50
RHYTHM_BEATS = 20

# (low, span): value = low + u * span
METRIC_RANGES = {
    MetricName.PITCH_ACCURACY: (65.0, 30.0),
    MetricName.RHYTHM_ACCURACY: (60.0, 35.0),
    MetricName.DYNAMIC_RANGE: (15.0, 25.0),
    MetricName.VOCAL_STABILITY: (55.0, 40.0),
}
RESONANCE_RANGE = (65.0, 30.0)
DURATION_RANGE = (30, 210)  # seconds, upper bound exclusive


class AnalysisError(RuntimeError):
    """Raised when a recording cannot be analysed."""


class MockVocalAnalyzer:
    """Produce pseudo-random :class:`AnalysisResult` objects for uploaded recordings."""

    def __init__(self, rng: Optional[np.random.Generator] = None, delay_seconds: float = 2.0) -> None:
        self.rng = rng if rng is not None else np.random.default_rng()
        self.delay_seconds = max(float(delay_seconds), 0.0)

    def _uniform(self, low: float, span: float) -> float:
        return low + float(self.rng.random()) * span

    def _pitch_track(self) -> List[PitchPoint]:
        return [
            PitchPoint(
                time=round(index * 0.1, 1),
                pitch=self._uniform(220.0, 440.0) + math.sin(index * 0.2) * 50,
                target=self._uniform(220.0, 440.0),
            )
            for index in range(PITCH_POINTS)
        ]

    def _rhythm_track(self) -> List[RhythmPoint]:
        return [
            RhythmPoint(
                beat=index + 1,
                accuracy=self._uniform(70.0, 25.0),
                timing_offset=(float(self.rng.random()) - 0.5) * 100,
            )
            for index in range(RHYTHM_BEATS)
        ]

    @staticmethod
    def _audio_format(content_type: Optional[str]) -> str:
        _, _, subtype = (content_type or "").partition("/")
        subtype = subtype.split(";")[0].strip()
        if not subtype:
            raise AnalysisError(f"Unsupported content type: {content_type!r}")
        return subtype.upper()

    def generate_snapshot(self) -> AnalysisSnapshot:
        return AnalysisSnapshot.from_values(
            {name: self._uniform(low, span) for name, (low, span) in METRIC_RANGES.items()}
        )

    async def analyze(self, file_name: str, file_size: int, content_type: Optional[str]) -> AnalysisResult:
        """Analyse one recording; raises :class:`AnalysisError` for unusable input."""

        audio_format = self._audio_format(content_type)
        logger.info("Analysing %s (%d bytes, %s)", file_name, file_size, audio_format)

        if self.delay_seconds:
            await asyncio.sleep(self.delay_seconds)

        snapshot = self.generate_snapshot()
        pitch_data = self._pitch_track()
        rhythm_data = self._rhythm_track()
        resonance_score = self._uniform(*RESONANCE_RANGE)
        duration = int(self.rng.integers(*DURATION_RANGE))

        return AnalysisResult(
            file_name=file_name,
            file_size=file_size,
            duration=duration,
            format=audio_format,
            snapshot=snapshot,
            pitch_data=pitch_data,
            rhythm_data=rhythm_data,
            recommendations=generate_recommendations(snapshot, resonance_score=resonance_score),
        )
