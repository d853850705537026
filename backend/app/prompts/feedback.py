# -*- coding: utf-8 -*-
"""Feedback text templates loaded from ``feedback_templates.yaml``."""

from __future__ import annotations

from functools import lru_cache
from pathlib import Path
from typing import Any, Dict, List, Tuple

import yaml

FEEDBACK_TEMPLATES_PATH = Path(__file__).with_name("feedback_templates.yaml")


def _validate(payload: Dict[str, Any], source: Path) -> None:
    templates = payload.get("recommendation_templates") or {}
    keys: List[Tuple[str, str]] = [
        (rule["category"], rule["priority"]) for rule in payload.get("recommendation_rules", [])
    ]
    filler = payload.get("filler")
    if filler:
        keys.append((filler["category"], filler["priority"]))
    for category, priority in keys:
        if priority not in templates.get(category, {}):
            raise KeyError(f"{source.name}: no template for ({category}, {priority})")
    for metric, advice in (payload.get("regression_advice") or {}).items():
        for field in ("title", "description"):
            if not (advice or {}).get(field):
                raise KeyError(f"{source.name}: regression_advice.{metric}.{field} is missing")
    for key in ("no_improvement", "headline", "line"):
        if key not in payload.get("summary", {}):
            raise KeyError(f"{source.name}: summary.{key} is missing")


@lru_cache(maxsize=None)
def load_feedback_templates(path: Path = FEEDBACK_TEMPLATES_PATH) -> Dict[str, Any]:
    """Load and validate the feedback template file (cached per path)."""

    with Path(path).open("r", encoding="utf-8") as handle:
        payload = yaml.safe_load(handle) or {}
    if not isinstance(payload, dict):
        raise ValueError(f"{path} must contain a mapping at the top level")
    _validate(payload, Path(path))
    return payload


def summary_template(key: str) -> str:
    return load_feedback_templates()["summary"][key]


NO_IMPROVEMENT_MESSAGE = summary_template("no_improvement")
