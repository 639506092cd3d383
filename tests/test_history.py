import datetime as dt

from safetyfirst.history import NO_INCIDENT_SENTINEL, HistoricalAggregator
from safetyfirst.submissions import DailySubmission

TODAY = dt.date(2026, 3, 15)


def sub(days_ago, score, incident=False, hazards=None, used=6, required=6, fatigue=3):
    return DailySubmission(
        date=TODAY - dt.timedelta(days=days_ago),
        shift_duration_hours=8,
        fatigue_level=fatigue,
        ppe_items_required=required,
        ppe_items_used=used,
        hazard_exposure_hours=hazards or {},
        incident_reported=incident,
        risk_score=score,
    )


def test_empty_window_falls_back_to_supplied_score():
    agg = HistoricalAggregator([], TODAY)
    assert agg.avg_risk(7, fallback=42) == 42
    assert agg.max_risk(7, fallback=42) == 42
    assert agg.avg_ppe_compliance(7, fallback=0.5) == 0.5
    assert agg.total_hazard_hours(7) == 0
    assert agg.incident_count(90) == 0


def test_stale_history_still_uses_fallback_for_recent_window():
    agg = HistoricalAggregator([sub(45, 90)], TODAY)
    assert agg.avg_risk(7, fallback=12) == 12
    assert agg.avg_risk(90, fallback=12) == 90


def test_windows_overlap():
    agg = HistoricalAggregator([sub(0, 10), sub(5, 20), sub(20, 30), sub(60, 40)], TODAY)
    assert len(agg.windowed(7)) == 2
    assert len(agg.windowed(30)) == 3
    assert len(agg.windowed(90)) == 4
    assert agg.avg_risk(7, fallback=0) == 15
    assert agg.avg_risk(30, fallback=0) == 20
    assert agg.max_risk(30, fallback=0) == 30


def test_window_edge_is_inclusive():
    agg = HistoricalAggregator([sub(7, 50), sub(8, 70)], TODAY)
    assert [s.risk_score for s in agg.windowed(7)] == [50]


def test_future_submissions_are_outside_windows():
    agg = HistoricalAggregator([sub(-2, 99), sub(1, 10)], TODAY)
    assert agg.avg_risk(7, fallback=0) == 10


def test_hazard_and_ppe_aggregates():
    agg = HistoricalAggregator(
        [
            sub(0, 10, hazards={"noise": 2, "dust": 1.5}, used=3),
            sub(3, 10, hazards={"heights": 4}, used=6),
            sub(12, 10, hazards={"chemicals": 8}, used=0),
        ],
        TODAY,
    )
    assert agg.total_hazard_hours(7) == 7.5
    assert agg.total_hazard_hours(30) == 15.5
    assert agg.avg_ppe_compliance(7, fallback=0) == 0.75


def test_zero_required_ppe_counts_as_compliant():
    assert sub(0, 10, used=0, required=0).ppe_compliance_rate == 1.0


def test_days_since_last_incident():
    history = [sub(d, 20, incident=d in (10, 40)) for d in range(90)]
    agg = HistoricalAggregator(history, TODAY)
    assert agg.days_since_last_incident() == 10
    assert agg.incident_count(30) == 1
    assert agg.incident_count(90) == 2


def test_days_since_last_incident_sentinel():
    agg = HistoricalAggregator([sub(d, 20) for d in range(90)], TODAY)
    assert agg.days_since_last_incident() == NO_INCIDENT_SENTINEL == 999
    assert HistoricalAggregator([], TODAY).days_since_last_incident() == 999


def test_consecutive_days_worked_stops_at_gap():
    agg = HistoricalAggregator([sub(0, 5), sub(1, 5), sub(2, 5), sub(4, 5)], TODAY)
    assert agg.consecutive_days_worked() == 3
    assert agg.consecutive_days_worked(start_offset=1) == 2


def test_consecutive_days_worked_without_today():
    agg = HistoricalAggregator([sub(1, 5), sub(2, 5)], TODAY)
    assert agg.consecutive_days_worked() == 0
    assert agg.consecutive_days_worked(start_offset=1) == 2


def test_safe_streak_ignores_gaps_and_stops_at_unsafe_score():
    agg = HistoricalAggregator([sub(0, 10), sub(1, 30), sub(5, 25), sub(6, 31), sub(7, 5)], TODAY)
    assert agg.consecutive_safe_days() == 3


def test_safe_streak_empty_history():
    assert HistoricalAggregator([], TODAY).consecutive_safe_days() == 0


def test_future_dated_forms_do_not_touch_safe_streak():
    tomorrow = sub(-1, 95)
    agg = HistoricalAggregator([tomorrow, sub(0, 10), sub(1, 20)], TODAY)
    assert agg.consecutive_safe_days() == 2
    assert HistoricalAggregator([sub(-2, 5)], TODAY).consecutive_safe_days() == 0
