# -*- coding: utf-8 -*-
"""Rule-based practice recommendations for a single analysis."""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional, Sequence

from app.models import AnalysisSnapshot, DeltaReport, MetricName, Recommendation
from app.prompts.feedback import load_feedback_templates

logger = logging.getLogger(__name__)

RESONANCE = "resonance"


def _recommendation(templates: Dict[str, Any], category: str, priority: str) -> Recommendation:
    template = templates["recommendation_templates"][category][priority]
    return Recommendation(
        category=category,
        title=template["title"],
        description=template["description"],
        priority=priority,
    )


def _observed_value(snapshot: AnalysisSnapshot, metric: str, resonance_score: Optional[float]) -> Optional[float]:
    if metric == RESONANCE:
        return resonance_score
    sample = snapshot.get(MetricName(metric))
    return sample.value if sample is not None else None


def generate_recommendations(
    snapshot: AnalysisSnapshot,
    resonance_score: Optional[float] = None,
    templates: Optional[Dict[str, Any]] = None,
) -> List[Recommendation]:
    """Apply the threshold rules to ``snapshot`` and return matching advice.

    Rules are evaluated in file order. The result is padded with the filler
    template until it holds ``minimum_recommendations`` entries. Metrics absent
    from the snapshot (or a missing resonance score) never trigger a rule.
    """

    templates = templates or load_feedback_templates()
    recommendations: List[Recommendation] = []

    for rule in templates.get("recommendation_rules", []):
        value = _observed_value(snapshot, rule["metric"], resonance_score)
        if value is None:
            continue
        if value < float(rule["below"]):
            recommendations.append(_recommendation(templates, rule["category"], rule["priority"]))

    filler = templates.get("filler")
    minimum = int(templates.get("minimum_recommendations", 0))
    if filler:
        while len(recommendations) < minimum:
            recommendations.append(_recommendation(templates, filler["category"], filler["priority"]))

    logger.debug("Generated %d recommendations", len(recommendations))
    return recommendations


def regression_recommendations(
    reports: Sequence[DeltaReport],
    templates: Optional[Dict[str, Any]] = None,
) -> List[Recommendation]:
    """Return corrective advice for every declined metric, in report order.

    Declined metrics without an entry in ``regression_advice`` are skipped.
    """

    templates = templates or load_feedback_templates()
    advice_table = templates.get("regression_advice") or {}
    priority = templates.get("regression_priority", "high")

    recommendations: List[Recommendation] = []
    for report in reports:
        if report.status != "declined":
            continue
        advice = advice_table.get(report.metric.value)
        if advice is None:
            logger.warning("No regression advice configured for %s", report.metric.value)
            continue
        recommendations.append(
            Recommendation(
                category=report.metric.value,
                title=advice["title"],
                description=advice["description"],
                priority=priority,
            )
        )
    return recommendations
