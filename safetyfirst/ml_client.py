"""HTTP client for the externally hosted ML risk scorer."""

from __future__ import annotations

import logging
import math
from typing import Dict, Optional

import requests

logger = logging.getLogger(__name__)


class ScorerUnavailable(Exception):
    """The scorer could not produce a usable score (network, status or payload problem)."""


class MLScorerClient:
    def __init__(self, url: str, timeout: float = 8.0, session: Optional[requests.Session] = None):
        self.url = url
        self.timeout = timeout
        self.session = session or requests.Session()

    @property
    def enabled(self) -> bool:
        return bool(self.url)

    def predict(self, features: Dict[str, float]) -> float:
        """POST the feature vector and return the `risk_score` field, in [0, 100]."""
        if not self.enabled:
            raise ScorerUnavailable("no scorer URL configured")
        try:
            resp = self.session.post(self.url, json=features, timeout=self.timeout)
        except requests.Timeout:
            raise ScorerUnavailable(f"timed out after {self.timeout}s") from None
        except requests.RequestException as exc:
            raise ScorerUnavailable(f"request failed: {exc}") from None

        if not 200 <= resp.status_code < 300:
            raise ScorerUnavailable(f"HTTP {resp.status_code}")
        try:
            payload = resp.json()
        except ValueError:
            raise ScorerUnavailable("response is not JSON") from None
        if not isinstance(payload, dict):
            raise ScorerUnavailable("response is not an object")

        score = payload.get("risk_score")
        if isinstance(score, bool) or not isinstance(score, (int, float)):
            raise ScorerUnavailable(f"risk_score missing or not numeric: {score!r}")
        if math.isnan(score) or not 0 <= score <= 100:
            raise ScorerUnavailable(f"risk_score out of range: {score!r}")
        return float(score)
