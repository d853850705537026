"""Pydantic models and domain entities for the backend service."""

from enum import Enum
from typing import Dict, List, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field, computed_field


class MetricName(str, Enum):
    """Measured dimensions of a vocal performance."""

    PITCH_ACCURACY = "pitch_accuracy"
    RHYTHM_ACCURACY = "rhythm_accuracy"
    VOCAL_STABILITY = "vocal_stability"
    DYNAMIC_RANGE = "dynamic_range"

    @property
    def label(self) -> str:
        return METRIC_LABELS[self]


METRIC_ORDER: Tuple[MetricName, ...] = (
    MetricName.PITCH_ACCURACY,
    MetricName.RHYTHM_ACCURACY,
    MetricName.VOCAL_STABILITY,
    MetricName.DYNAMIC_RANGE,
)

METRIC_LABELS: Dict[MetricName, str] = {
    MetricName.PITCH_ACCURACY: "Pitch accuracy",
    MetricName.RHYTHM_ACCURACY: "Rhythm accuracy",
    MetricName.VOCAL_STABILITY: "Vocal stability",
    MetricName.DYNAMIC_RANGE: "Dynamic range",
}


class MetricSample(BaseModel):
    """One scalar measurement taken from a single recording."""

    model_config = ConfigDict(frozen=True)

    name: MetricName
    value: float
    higher_is_better: bool = True


class AnalysisSnapshot(BaseModel):
    """Every metric sample produced from one recording at one point in time."""

    model_config = ConfigDict(frozen=True)

    samples: Tuple[MetricSample, ...]

    @classmethod
    def from_values(cls, values: Dict[MetricName, float]) -> "AnalysisSnapshot":
        """Build a snapshot of higher-is-better samples from ``{name: value}``."""
        return cls(samples=tuple(MetricSample(name=name, value=value) for name, value in values.items()))

    def get(self, name: MetricName) -> Optional[MetricSample]:
        for sample in self.samples:
            if sample.name == name:
                return sample
        return None


class DeltaReport(BaseModel):
    """Comparison of one metric between a previous and a current snapshot."""

    metric: MetricName
    previous: float
    current: float
    difference: float
    percentage_change: float
    improvement: bool

    @computed_field  # type: ignore[prop-decorator]
    @property
    def status(self) -> str:
        """One of ``improved``, ``unchanged`` or ``declined`` (changed in the unfavourable direction)."""
        if self.improvement:
            return "improved"
        if self.difference == 0:
            return "unchanged"
        return "declined"


class PitchPoint(BaseModel):
    time: float
    pitch: float
    target: float


class RhythmPoint(BaseModel):
    beat: int
    accuracy: float
    timing_offset: float = Field(description="Offset from the beat in milliseconds")


class Recommendation(BaseModel):
    """Practice advice attached to an analysis."""

    category: str
    title: str
    description: str
    priority: str  # "high", "medium", "low"


class AnalysisResult(BaseModel):
    """Everything produced by analysing one uploaded recording."""

    file_name: str
    file_size: int
    duration: int
    format: str
    snapshot: AnalysisSnapshot
    pitch_data: List[PitchPoint]
    rhythm_data: List[RhythmPoint]
    recommendations: List[Recommendation]


class CompareRequest(BaseModel):
    """Request payload for comparing two already computed snapshots."""

    previous: AnalysisSnapshot
    current: AnalysisSnapshot
