# -*- coding: utf-8 -*-
"""Compare two analysis snapshots and turn the deltas into progress text."""

from __future__ import annotations

import logging
import math
from decimal import ROUND_HALF_UP, Decimal, localcontext
from typing import Dict, List, Sequence

from app.models import METRIC_ORDER, AnalysisSnapshot, DeltaReport, MetricName, MetricSample
from app.prompts.feedback import NO_IMPROVEMENT_MESSAGE, summary_template

logger = logging.getLogger(__name__)

_ONE_DECIMAL = Decimal("0.1")
# Enough digits to quantize any finite float (max exponent 308) to one decimal.
_ROUNDING_PRECISION = 400


class SnapshotValidationError(ValueError):
    """Raised when a snapshot cannot be compared (missing, duplicated or non-finite metrics)."""


def round_half_away_from_zero(value: float) -> float:
    """Round to one decimal place; ties move away from zero (``0.25 -> 0.3``).

    The shortest repr of the float is rounded, so ``2.45`` is treated as the
    decimal it prints as rather than its binary approximation.
    """
    with localcontext() as ctx:
        ctx.prec = _ROUNDING_PRECISION
        rounded = float(Decimal(repr(value)).quantize(_ONE_DECIMAL, rounding=ROUND_HALF_UP))
    return rounded + 0.0  # normalise -0.0


def format_number(value: float) -> str:
    """Render a one-decimal value without a trailing ``.0`` (``85.0 -> "85"``)."""
    text = f"{value:.1f}"
    if "." in text:
        text = text.rstrip("0").rstrip(".")
    return "0" if text == "-0" else text


def _index_samples(snapshot: AnalysisSnapshot, role: str) -> Dict[MetricName, MetricSample]:
    indexed: Dict[MetricName, MetricSample] = {}
    for sample in snapshot.samples:
        if sample.name in indexed:
            raise SnapshotValidationError(f"{role} snapshot lists '{sample.name.value}' more than once")
        if not math.isfinite(sample.value):
            raise SnapshotValidationError(
                f"{role} snapshot has a non-finite value for '{sample.name.value}': {sample.value}"
            )
        indexed[sample.name] = sample
    return indexed


def _build_report(previous: MetricSample, current: MetricSample) -> DeltaReport:
    raw_difference = current.value - previous.value
    raw_percentage = (raw_difference / previous.value) * 100 if previous.value != 0 else 0.0
    difference = round_half_away_from_zero(raw_difference)
    if current.higher_is_better:
        improvement = difference > 0
    else:
        improvement = difference < 0
    return DeltaReport(
        metric=current.name,
        previous=round_half_away_from_zero(previous.value),
        current=round_half_away_from_zero(current.value),
        difference=difference,
        percentage_change=round_half_away_from_zero(raw_percentage),
        improvement=improvement,
    )


def compare_snapshots(
    previous: AnalysisSnapshot,
    current: AnalysisSnapshot,
    order: Sequence[MetricName] = METRIC_ORDER,
) -> List[DeltaReport]:
    """Return one :class:`DeltaReport` per metric in ``order``.

    Raises :class:`SnapshotValidationError` when either snapshot is missing a
    metric from ``order``, repeats a metric, carries a NaN/infinite value, or
    when both snapshots disagree on a metric's polarity.
    """

    if len(set(order)) != len(order):
        raise SnapshotValidationError("metric order must not repeat a metric")

    previous_samples = _index_samples(previous, "previous")
    current_samples = _index_samples(current, "current")

    reports: List[DeltaReport] = []
    for name in order:
        previous_sample = previous_samples.get(name)
        current_sample = current_samples.get(name)
        missing = [
            role
            for role, sample in (("previous", previous_sample), ("current", current_sample))
            if sample is None
        ]
        if missing:
            raise SnapshotValidationError(f"'{name.value}' is missing from the {' and '.join(missing)} snapshot")
        if previous_sample.higher_is_better != current_sample.higher_is_better:
            raise SnapshotValidationError(f"snapshots disagree on the polarity of '{name.value}'")
        reports.append(_build_report(previous_sample, current_sample))

    logger.debug(
        "Compared %d metrics, %d improved",
        len(reports),
        sum(1 for report in reports if report.improvement),
    )
    return reports


def summarize_improvements(reports: Sequence[DeltaReport]) -> List[str]:
    """Turn delta reports into a headline plus one line per improved metric.

    Improved metrics are ordered by the size of their relative change, largest
    first; ties keep their input order. Without any improvement a single fixed
    message is returned.
    """

    improved = [report for report in reports if report.improvement]
    if not improved:
        return [NO_IMPROVEMENT_MESSAGE]

    improved = sorted(improved, key=lambda report: abs(report.percentage_change), reverse=True)
    leader = improved[0]

    summary = [
        summary_template("headline").format(
            count=len(improved),
            areas="area" if len(improved) == 1 else "areas",
            metric=leader.metric.label,
            percentage=format_number(abs(leader.percentage_change)),
        )
    ]
    line_template = summary_template("line")
    for report in improved:
        sign = "+" if report.difference > 0 else ""
        summary.append(
            line_template.format(
                metric=report.metric.label,
                previous=format_number(report.previous),
                current=format_number(report.current),
                difference=f"{sign}{format_number(report.difference)}",
            )
        )
    return summary
