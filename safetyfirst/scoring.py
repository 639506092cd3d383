"""
Deterministic rule-based risk scoring and risk-level classification.
Every place that needs a rule-based score or a risk level goes through this module.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Dict, Mapping

from safetyfirst.hazards import SHIFT_HOURS, base_risk

PPE_MAX_REDUCTION = 18
FATIGUE_POINTS_PER_LEVEL = 5
SYMPTOM_POINTS = 4
INCIDENT_POINTS = 20

LOW = "low"
MEDIUM = "medium"
HIGH = "high"
CRITICAL = "critical"
RISK_LEVELS = (LOW, MEDIUM, HIGH, CRITICAL)

# Upper bound (inclusive) of each level below critical
RISK_THRESHOLDS = ((30, LOW), (60, MEDIUM), (80, HIGH))

# Live gauge on the submission form; display only
GAUGE_THRESHOLDS = ((30, LOW), (60, MEDIUM), (85, HIGH))

SAFE_SCORE_MAX = 30


def round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def clamp(value, low, high):
    return max(low, min(high, value))


@dataclass
class ScoreDetail:
    hazard_points: float
    ppe_reduction: float
    fatigue_points: float
    symptom_points: float
    incident_points: float
    final_score: int
    hazard_breakdown: Dict[str, float] = field(default_factory=dict)

    @property
    def level(self) -> str:
        return classify_risk(self.final_score)


class RuleBasedScorer:
    """Hazard exposure, reduced by PPE use, plus fatigue, symptoms and incident points."""

    def evaluate(
        self,
        fatigue_level: int,
        ppe_compliance_rate: float,
        hazard_exposure_hours: Mapping[str, float],
        incident_reported: bool,
        symptom_count: int,
    ) -> ScoreDetail:
        hazard_breakdown = {
            category: base_risk(category) * (hours / SHIFT_HOURS)
            for category, hours in hazard_exposure_hours.items()
        }
        hazard_points = sum(hazard_breakdown.values())

        # PPE only offsets hazard exposure, never the additive terms below
        ppe_reduction = ppe_compliance_rate * PPE_MAX_REDUCTION
        total = max(0.0, hazard_points - ppe_reduction)

        fatigue_points = (fatigue_level - 1) * FATIGUE_POINTS_PER_LEVEL
        symptom_points = symptom_count * SYMPTOM_POINTS
        incident_points = INCIDENT_POINTS if incident_reported else 0
        total += fatigue_points + symptom_points + incident_points

        return ScoreDetail(
            hazard_points=hazard_points,
            ppe_reduction=ppe_reduction,
            fatigue_points=fatigue_points,
            symptom_points=symptom_points,
            incident_points=incident_points,
            final_score=clamp(round_half_up(total), 0, 100),
            hazard_breakdown=hazard_breakdown,
        )

    def score(self, *args, **kwargs) -> int:
        return self.evaluate(*args, **kwargs).final_score


_scorer = RuleBasedScorer()


def rule_based_score(
    fatigue_level: int,
    ppe_compliance_rate: float,
    hazard_exposure_hours: Mapping[str, float],
    incident_reported: bool,
    symptom_count: int,
) -> int:
    return _scorer.score(fatigue_level, ppe_compliance_rate, hazard_exposure_hours, incident_reported, symptom_count)


def _level_for(score: float, thresholds) -> str:
    for upper, level in thresholds:
        if score <= upper:
            return level
    return CRITICAL


def classify_risk(score: float) -> str:
    """Canonical level used for dashboards, notifications and reports."""
    return _level_for(score, RISK_THRESHOLDS)


def gauge_level(score: float) -> str:
    """Level shown by the live gauge widget, which uses an 85 cutoff for critical."""
    return _level_for(score, GAUGE_THRESHOLDS)


def is_safe_score(score: float) -> bool:
    return score <= SAFE_SCORE_MAX
