"""
Submission scoring pipeline.

rule-based baseline -> history features -> external score (or baseline) -> level
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Dict, Iterable, Optional

from safetyfirst.features import FeatureVector, build_feature_vector
from safetyfirst.ml_client import MLScorerClient, ScorerUnavailable
from safetyfirst.scoring import RuleBasedScorer, ScoreDetail, classify_risk, clamp, round_half_up
from safetyfirst.submissions import DailySubmission, WorkerProfile

logger = logging.getLogger(__name__)

SOURCE_MODEL = "model"
SOURCE_RULE_BASED = "rule_based"


@dataclass
class ScoringOutcome:
    rule_based: ScoreDetail
    features: FeatureVector
    risk_score: int
    source: str
    failure_reason: Optional[str] = None

    @property
    def rule_based_score(self) -> int:
        return self.rule_based.final_score

    @property
    def risk_level(self) -> str:
        return classify_risk(self.risk_score)

    def as_dict(self) -> Dict:
        return {
            "risk_score": self.risk_score,
            "risk_level": self.risk_level,
            "rule_based_score": self.rule_based_score,
            "score_source": self.source,
            "features": self.features.to_payload(),
        }


class ScoringPipeline:
    def __init__(self, client: Optional[MLScorerClient] = None, scorer: Optional[RuleBasedScorer] = None):
        self.client = client
        self.scorer = scorer or RuleBasedScorer()

    def baseline(self, submission: DailySubmission) -> ScoreDetail:
        return self.scorer.evaluate(
            submission.fatigue_level,
            submission.ppe_compliance_rate,
            submission.hazard_exposure_hours,
            submission.incident_reported,
            submission.symptom_count,
        )

    def score(
        self,
        submission: DailySubmission,
        profile: WorkerProfile,
        history: Iterable[DailySubmission],
    ) -> ScoringOutcome:
        detail = self.baseline(submission)
        features = build_feature_vector(submission, profile, history, detail.final_score)

        if self.client is None or not self.client.enabled:
            return ScoringOutcome(detail, features, detail.final_score, SOURCE_RULE_BASED)

        try:
            predicted = self.client.predict(features.to_payload())
        except ScorerUnavailable as exc:
            logger.warning(
                "ML scorer unavailable for user %s on %s, using rule-based score %s: %s",
                profile.user_id, submission.date, detail.final_score, exc,
            )
            return ScoringOutcome(detail, features, detail.final_score, SOURCE_RULE_BASED, str(exc))

        return ScoringOutcome(detail, features, clamp(round_half_up(predicted), 0, 100), SOURCE_MODEL)
