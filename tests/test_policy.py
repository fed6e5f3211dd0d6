"""
Tests for the decision policy.
"""
from datetime import datetime, timezone

import pytest
from pydantic import ValidationError

from viewguard.detection.config import ConfidenceThresholds
from viewguard.detection.models import AggregatedMetrics, ScoreBreakdown
from viewguard.detection.policy import NORMAL_ACTIVITY, determine_action, generate_reason

NOW = datetime(2026, 3, 1, 12, 0, tzinfo=timezone.utc)


def make_metrics(**overrides) -> AggregatedMetrics:
    """Helper to create AggregatedMetrics for reason generation."""
    values = dict(
        total_views=2000, total_likes=10, total_comments=5, total_shares=0,
        view_like_ratio=200.0, view_comment_ratio=400.0,
        spike_detected=True, spike_percentage=650.0,
        avg_views_per_minute=1500.0, avg_likes_per_minute=0.0,
        avg_comments_per_minute=0.0, window_start=NOW, window_end=NOW,
        record_count=2, content_count=1,
    )
    values.update(overrides)
    return AggregatedMetrics(**values)


class TestDetermineAction:
    """Score to action mapping at the cut points."""

    @pytest.mark.parametrize("score,action", [
        (100, "ban"),
        (90, "ban"),
        (89.99, "warning"),
        (89, "warning"),
        (50, "warning"),
        (49, "monitor"),
        (20, "monitor"),
        (19, "none"),
        (0, "none"),
    ])
    def test_default_boundaries(self, score, action):
        """Boundaries are inclusive at the lower end of each band."""
        assert determine_action(score, ConfidenceThresholds()).action == action

    def test_confidence_levels(self):
        """Each action carries its confidence level."""
        cuts = ConfidenceThresholds()
        assert determine_action(95, cuts).confidence == "high"
        assert determine_action(60, cuts).confidence == "medium"
        assert determine_action(25, cuts).confidence == "low"
        assert determine_action(5, cuts).confidence is None

    def test_custom_cut_points(self):
        """Cut points come from configuration."""
        cuts = ConfidenceThresholds(ban=80, warning=40, monitor=10)
        assert determine_action(80, cuts).action == "ban"
        assert determine_action(40, cuts).action == "warning"
        assert determine_action(10, cuts).action == "monitor"
        assert determine_action(9, cuts).action == "none"

    def test_deterministic(self):
        """Same score and cut points always give the same action."""
        cuts = ConfidenceThresholds()
        assert {determine_action(50, cuts).action for _ in range(10)} == {"warning"}

    def test_cut_points_must_descend(self):
        """Ban must be above warning, and warning above monitor."""
        with pytest.raises(ValidationError, match="Ban confidence"):
            ConfidenceThresholds(ban=50, warning=50, monitor=20)
        with pytest.raises(ValidationError, match="Warning confidence"):
            ConfidenceThresholds(ban=90, warning=10, monitor=20)

    def test_cut_points_within_range(self):
        """Cut points must lie in [0, 100]."""
        with pytest.raises(ValidationError):
            ConfidenceThresholds(ban=120)


class TestGenerateReason:
    """Reason selection follows signal priority."""

    ALL_SIGNALS = {
        "view_like_ratio": 56.0, "view_comment_ratio": 30.0, "spike": 51.0,
        "no_engagement": 0.0, "high_view_rate": 15.0,
    }

    def test_spike_has_priority(self):
        """A spike outranks every ratio signal."""
        reason, signals = generate_reason(make_metrics(), ScoreBreakdown(100, dict(self.ALL_SIGNALS)))
        assert reason == "View spike detected (650.0% increase)"
        assert len(signals) == 4

    def test_comment_ratio_before_like_ratio(self):
        """Without a spike the view:comment ratio is reported first."""
        points = dict(self.ALL_SIGNALS, spike=0.0)
        reason, _ = generate_reason(make_metrics(), ScoreBreakdown(100, points))
        assert reason == "Abnormal view:comment ratio (400.0:1)"

    def test_like_ratio_reason(self):
        """The view:like ratio is reported when it is the strongest signal."""
        points = {"view_like_ratio": 56.0, "view_comment_ratio": 0.0, "spike": 0.0}
        reason, signals = generate_reason(make_metrics(), ScoreBreakdown(56, points))
        assert reason == "Abnormal view:like ratio (200.0:1)"
        assert signals == [reason]

    def test_normal_activity(self):
        """No triggered signal means normal activity."""
        points = {"view_like_ratio": 0.0, "view_comment_ratio": 0.0, "spike": 0.0}
        reason, signals = generate_reason(make_metrics(), ScoreBreakdown(0, points))
        assert reason == NORMAL_ACTIVITY
        assert signals == []

    def test_pattern_reasons(self):
        """Pattern signals are described after the ratio signals."""
        metrics = make_metrics(low_engagement_bursts=2, engagement_reversals=1,
                               platform_anomalies=["tiktok"])
        points = {"regular_sampling": 15.0, "engagement_velocity": 25.0, "platform_anomaly": 8.0}
        reason, signals = generate_reason(metrics, ScoreBreakdown(48, points))
        assert reason == "Suspiciously regular observation intervals"
        assert signals[1] == "Abnormal engagement velocity (2 bursts, 1 reversals)"
        assert signals[2] == "Engagement below platform norms (tiktok)"
