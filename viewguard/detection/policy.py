"""
Decision policy: maps a bot score to an action and explains the verdict.
"""
from typing import List, Tuple

from .config import ConfidenceThresholds
from .models import (
    ACTION_BAN,
    ACTION_MONITOR,
    ACTION_NONE,
    ACTION_WARNING,
    AggregatedMetrics,
    Decision,
    ScoreBreakdown,
)

NORMAL_ACTIVITY = "Normal activity detected"


def determine_action(bot_score: float, confidence: ConfidenceThresholds) -> Decision:
    """
    Determine the recommended action for a bot score.

    Cut points are inclusive at the lower end: a score equal to the ban
    threshold is a ban.

    Args:
        bot_score: Score in [0, 100]
        confidence: Cut points for ban / warning / monitor

    Returns:
        Decision with action and confidence level
    """
    if bot_score >= confidence.ban:
        return Decision(action=ACTION_BAN, confidence="high")
    if bot_score >= confidence.warning:
        return Decision(action=ACTION_WARNING, confidence="medium")
    if bot_score >= confidence.monitor:
        return Decision(action=ACTION_MONITOR, confidence="low")
    return Decision(action=ACTION_NONE, confidence=None)


def generate_reason(metrics: AggregatedMetrics, breakdown: ScoreBreakdown) -> Tuple[str, List[str]]:
    """
    Describe the signals behind a score, most severe first.

    Returns:
        (primary reason, every triggered signal description)
    """
    points = breakdown.contributions
    signals: List[str] = []

    if points.get("spike", 0) > 0:
        signals.append(f"View spike detected ({metrics.spike_percentage:.1f}% increase)")
    if points.get("view_comment_ratio", 0) > 0:
        signals.append(f"Abnormal view:comment ratio ({metrics.view_comment_ratio:.1f}:1)")
    if points.get("view_like_ratio", 0) > 0:
        signals.append(f"Abnormal view:like ratio ({metrics.view_like_ratio:.1f}:1)")
    if points.get("no_engagement", 0) > 0:
        signals.append("No engagement despite views")
    if points.get("high_view_rate", 0) > 0:
        signals.append(
            f"Extremely high view rate ({metrics.avg_views_per_minute:.0f} views/min)"
        )
    if points.get("regular_sampling", 0) > 0:
        signals.append("Suspiciously regular observation intervals")
    if points.get("engagement_velocity", 0) > 0:
        signals.append(
            f"Abnormal engagement velocity ({metrics.low_engagement_bursts} bursts, "
            f"{metrics.engagement_reversals} reversals)"
        )
    if points.get("platform_anomaly", 0) > 0:
        signals.append(
            f"Engagement below platform norms ({', '.join(metrics.platform_anomalies)})"
        )

    if not signals:
        return NORMAL_ACTIVITY, []
    return signals[0], signals
