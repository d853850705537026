"""Tests for rule-based recommendations and the feedback template file."""
import pytest
import yaml

from app.analyzers.comparison import compare_snapshots
from app.analyzers.recommendations import generate_recommendations, regression_recommendations
from app.models import MetricName
from app.prompts.feedback import load_feedback_templates


def _categories(recommendations):
    return [item.category for item in recommendations]


def test_strong_performance_is_padded_with_general_advice(make_snapshot):
    snapshot = make_snapshot(pitch_accuracy=90, rhythm_accuracy=90, vocal_stability=90, dynamic_range=35)

    recommendations = generate_recommendations(snapshot, resonance_score=90)

    assert _categories(recommendations) == ["general", "general", "general"]
    assert all(item.priority == "medium" for item in recommendations)


def test_weak_performance_triggers_rules_in_order(make_snapshot):
    snapshot = make_snapshot(pitch_accuracy=70, rhythm_accuracy=65, vocal_stability=60, dynamic_range=18)

    recommendations = generate_recommendations(snapshot, resonance_score=70)

    assert _categories(recommendations) == ["pitch", "rhythm", "dynamics", "stability", "resonance"]
    priorities = {item.category: item.priority for item in recommendations}
    assert priorities == {
        "pitch": "high",
        "rhythm": "high",
        "dynamics": "medium",
        "stability": "high",
        "resonance": "medium",
    }


def test_threshold_is_exclusive(make_snapshot):
    snapshot = make_snapshot(pitch_accuracy=75, rhythm_accuracy=80, vocal_stability=70, dynamic_range=25)

    recommendations = generate_recommendations(snapshot, resonance_score=75)

    assert "pitch" not in _categories(recommendations)
    assert "resonance" not in _categories(recommendations)


def test_missing_resonance_score_skips_rule(make_snapshot):
    snapshot = make_snapshot(pitch_accuracy=70, rhythm_accuracy=90, vocal_stability=90, dynamic_range=35)

    recommendations = generate_recommendations(snapshot)

    assert _categories(recommendations) == ["pitch", "general", "general"]


def test_templates_define_every_rule():
    templates = load_feedback_templates()
    for rule in templates["recommendation_rules"]:
        entry = templates["recommendation_templates"][rule["category"]][rule["priority"]]
        assert entry["title"]
        assert entry["description"]


def test_template_without_entry_is_rejected(tmp_path):
    broken = {
        "summary": {"no_improvement": "x", "headline": "y", "line": "z"},
        "recommendation_rules": [{"category": "pitch", "metric": "pitch_accuracy", "below": 75, "priority": "low"}],
        "recommendation_templates": {"pitch": {"high": {"title": "t", "description": "d"}}},
    }
    path = tmp_path / "templates.yaml"
    path.write_text(yaml.safe_dump(broken), encoding="utf-8")

    with pytest.raises(KeyError):
        load_feedback_templates(path)


def test_custom_templates_can_be_injected(make_snapshot, tmp_path):
    custom = {
        "summary": {"no_improvement": "x", "headline": "y", "line": "z"},
        "recommendation_rules": [
            {"category": "pitch", "metric": "pitch_accuracy", "below": 99, "priority": "low"}
        ],
        "recommendation_templates": {"pitch": {"low": {"title": "Tune up", "description": "Sing scales."}}},
    }
    path = tmp_path / "custom.yaml"
    path.write_text(yaml.safe_dump(custom), encoding="utf-8")

    recommendations = generate_recommendations(make_snapshot(), templates=load_feedback_templates(path))

    assert [(item.title, item.priority) for item in recommendations] == [("Tune up", "low")]


def test_regressed_metrics_get_corrective_advice(make_snapshot):
    previous = make_snapshot(pitch_accuracy=85, rhythm_accuracy=80, vocal_stability=70, dynamic_range=30)
    current = make_snapshot(pitch_accuracy=78, rhythm_accuracy=88, vocal_stability=70, dynamic_range=22)

    advice = regression_recommendations(compare_snapshots(previous, current))

    assert _categories(advice) == ["pitch_accuracy", "dynamic_range"]
    assert all(item.priority == "high" for item in advice)
    assert advice[0].title == "Pitch accuracy needs work"
    assert "lesson 2" in advice[0].description


def test_no_regression_gives_no_advice(make_snapshot):
    snapshot = make_snapshot()
    assert regression_recommendations(compare_snapshots(snapshot, snapshot)) == []


def test_every_metric_has_regression_advice():
    advice_table = load_feedback_templates()["regression_advice"]
    assert set(advice_table) == {name.value for name in MetricName}


def test_regression_advice_requires_description(tmp_path):
    broken = {
        "summary": {"no_improvement": "x", "headline": "y", "line": "z"},
        "regression_advice": {"pitch_accuracy": {"title": "Only a title"}},
    }
    path = tmp_path / "regression.yaml"
    path.write_text(yaml.safe_dump(broken), encoding="utf-8")

    with pytest.raises(KeyError):
        load_feedback_templates(path)
