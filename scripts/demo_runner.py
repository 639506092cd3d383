"""
Demo runner that replays two weeks of daily forms into the service via HTTP.
Assumes server running on localhost:5000 with the seeded demo worker.
"""
from __future__ import annotations

import random

import pandas as pd
import requests

SERVER = "http://localhost:5000"
HEADERS = {"X-Identity-Id": "worker-demo"}
HAZARDS = ["noise", "dust", "chemicals", "heights", "electrical", "confined"]
SYMPTOMS = ["Headache", "Dizziness", "Fatigue", "Nausea", "Eye Irritation", "Muscle Pain"]


def build_scenario(days: int = 14, seed: int = 7) -> pd.DataFrame:
    rng = random.Random(seed)
    rows = []
    for day in pd.date_range(end=pd.Timestamp.today().normalize(), periods=days, freq="D"):
        hazards = rng.sample(HAZARDS, rng.randint(0, 3))
        rows.append(
            {
                "date": day.date().isoformat(),
                "shift_duration": rng.choice([8, 10, 12]),
                "fatigue_level": rng.randint(1, 9),
                "ppe_items_required": 6,
                "ppe_items_used": rng.randint(2, 6),
                "hazard_exposures": {h: rng.randint(1, 8) for h in hazards},
                "symptoms": rng.sample(SYMPTOMS, rng.randint(0, 2)),
                "incident_reported": rng.random() < 0.08,
            }
        )
    return pd.DataFrame(rows)


def main():
    df = build_scenario()
    for payload in df.to_dict(orient="records"):
        if payload["incident_reported"]:
            payload["incident_description"] = "Minor incident logged by demo runner"
        r = requests.post(f"{SERVER}/worker/forms", json=payload, headers=HEADERS, timeout=15)
        r.raise_for_status()
        body = r.json()
        print(f"{payload['date']} | score {body['risk_score']:>3} | {body['risk_level']:<8} | {body['score_source']}")

    summary = requests.get(f"{SERVER}/worker/dashboard", headers=HEADERS, timeout=15).json()
    print(f"Consecutive safe days: {summary['consecutive_safe_days']}")
    print(f"7-day average: {summary['stats']['avg_risk_7d']}")


if __name__ == "__main__":
    main()
