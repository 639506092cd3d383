from safetyfirst.hazards import DEFAULT_HAZARD_RISK, base_risk
from safetyfirst.scoring import (
    RISK_LEVELS,
    RuleBasedScorer,
    classify_risk,
    gauge_level,
    rule_based_score,
)


def test_rested_fully_protected_worker_scores_zero():
    assert rule_based_score(1, 1.0, {}, False, 0) == 0


def test_worst_case_is_clamped_to_100():
    # 25 + 45 + 12 + 20 = 102
    assert rule_based_score(10, 0.0, {"heights": 8}, True, 3) == 100


def test_first_submission_scenario():
    # max(0, 7.5 - 9) + 20
    score = rule_based_score(5, 0.5, {"noise": 4}, False, 0)
    assert score == 20
    assert classify_risk(score) == "low"


def test_ppe_reduction_only_offsets_hazard_points():
    # hazard 7.5 - 18 clamps at 0 before fatigue is added
    assert rule_based_score(3, 1.0, {"noise": 4}, False, 0) == 10


def test_long_exposure_is_not_capped():
    assert rule_based_score(1, 0.0, {"chemicals": 16}, False, 0) == 40
    assert rule_based_score(1, 0.0, {"chemicals": 8}, False, 0) == 20


def test_unknown_hazard_uses_default_weight():
    assert base_risk("radiation") == DEFAULT_HAZARD_RISK
    assert rule_based_score(1, 0.0, {"radiation": 8}, False, 0) == 10


def test_half_points_round_up():
    # chemicals for one hour is exactly 2.5 points
    assert rule_based_score(1, 0.0, {"chemicals": 1}, False, 0) == 3


def test_score_never_increases_with_ppe_compliance():
    hazards = {"chemicals": 6, "noise": 3, "confined": 2}
    scores = [rule_based_score(4, step / 10, hazards, False, 1) for step in range(11)]
    assert all(later <= earlier for earlier, later in zip(scores, scores[1:]))
    assert scores[0] > scores[-1]


def test_score_is_always_in_range():
    for fatigue in range(1, 11):
        for hours in (0, 4, 8, 16, 24):
            for incident in (False, True):
                score = rule_based_score(fatigue, 0.3, {"heights": hours, "dust": hours}, incident, 5)
                assert isinstance(score, int)
                assert 0 <= score <= 100


def test_breakdown_components():
    detail = RuleBasedScorer().evaluate(6, 0.5, {"electrical": 4, "dust": 8}, True, 2)
    assert detail.hazard_breakdown == {"electrical": 11.0, "dust": 12.0}
    assert detail.ppe_reduction == 9.0
    assert detail.fatigue_points == 25
    assert detail.symptom_points == 8
    assert detail.incident_points == 20
    # 23 - 9 + 25 + 8 + 20
    assert detail.final_score == 67
    assert detail.level == "high"


def test_classifier_boundaries():
    expected = {
        0: "low", 29: "low", 30: "low", 31: "medium",
        59: "medium", 60: "medium", 61: "high",
        79: "high", 80: "high", 81: "critical", 100: "critical",
    }
    for score, level in expected.items():
        assert classify_risk(score) == level, score


def test_classifier_is_total_over_score_range():
    counts = {level: 0 for level in RISK_LEVELS}
    for score in range(0, 101):
        counts[classify_risk(score)] += 1
    assert counts == {"low": 31, "medium": 30, "high": 20, "critical": 20}


def test_gauge_uses_its_own_critical_cutoff():
    assert classify_risk(83) == "critical"
    assert gauge_level(83) == "high"
    assert gauge_level(85) == "high"
    assert gauge_level(86) == "critical"
    assert gauge_level(60) == classify_risk(60) == "medium"
