"""
Bot score calculation.

A transparent weighted heuristic rather than a trained model: every signal
adds points independently, the total is clamped to [0, 100], and the points
per signal are kept so a reviewer can see why a score was produced.
"""
import math
from typing import Dict

from .config import MAX_SCORE, REGULAR_SAMPLING_MAX_CV, SIGNAL_WEIGHTS, BotDetectionConfig
from .models import AggregatedMetrics, ScoreBreakdown


def graded_points(value: float, threshold: float, weights: Dict[str, float]) -> float:
    """Points for a value above its threshold.

    Starts at the base weight just past the threshold and grows with each
    order of magnitude beyond it, up to the cap. Non-decreasing in value.
    """
    if value <= threshold:
        return 0.0
    points = weights["base"] + weights["per_decade"] * math.log10(value / threshold)
    return min(points, weights["cap"])


def _ratio_points(metrics: AggregatedMetrics, config: BotDetectionConfig) -> Dict[str, float]:
    thresholds = config.thresholds
    points = {
        "view_like_ratio": graded_points(
            metrics.view_like_ratio, thresholds.view_like_ratio,
            SIGNAL_WEIGHTS["view_like_ratio"],
        ),
        "view_comment_ratio": graded_points(
            metrics.view_comment_ratio, thresholds.view_comment_ratio,
            SIGNAL_WEIGHTS["view_comment_ratio"],
        ),
        "spike": 0.0,
    }
    if metrics.spike_detected and metrics.spike_percentage is not None:
        points["spike"] = graded_points(
            metrics.spike_percentage, thresholds.spike_percentage,
            SIGNAL_WEIGHTS["spike"],
        )
    return points


def _activity_points(metrics: AggregatedMetrics, config: BotDetectionConfig) -> Dict[str, float]:
    no_engagement = (
        metrics.total_views > 0
        and metrics.total_likes == 0
        and metrics.total_comments == 0
    )
    high_rate = metrics.avg_views_per_minute > config.thresholds.view_rate_per_minute
    return {
        "no_engagement": SIGNAL_WEIGHTS["no_engagement"]["base"] if no_engagement else 0.0,
        "high_view_rate": SIGNAL_WEIGHTS["high_view_rate"]["base"] if high_rate else 0.0,
    }


def _pattern_points(metrics: AggregatedMetrics) -> Dict[str, float]:
    regular = (
        metrics.interval_variation is not None
        and metrics.interval_variation < REGULAR_SAMPLING_MAX_CV
    )
    velocity = SIGNAL_WEIGHTS["engagement_velocity"]
    velocity_points = min(
        metrics.low_engagement_bursts * velocity["per_burst"]
        + metrics.engagement_reversals * velocity["per_reversal"],
        velocity["cap"],
    )
    platform_weights = SIGNAL_WEIGHTS["platform_anomaly"]
    return {
        "regular_sampling": SIGNAL_WEIGHTS["regular_sampling"]["base"] if regular else 0.0,
        "engagement_velocity": float(velocity_points),
        "platform_anomaly": sum(platform_weights.get(p, 0.0) for p in metrics.platform_anomalies),
    }


def calculate_bot_score(metrics: AggregatedMetrics, config: BotDetectionConfig) -> ScoreBreakdown:
    """Combine aggregated metrics into a bot score in [0, 100].

    Args:
        metrics: Output of aggregate_metrics.
        config: Engine configuration.

    Returns:
        ScoreBreakdown with the clamped score and per-signal points.
    """
    contributions = _ratio_points(metrics, config)
    contributions.update(_activity_points(metrics, config))
    if config.pattern_signals:
        contributions.update(_pattern_points(metrics))

    total = sum(contributions.values())
    bot_score = round(max(0.0, min(total, MAX_SCORE)), 2)
    return ScoreBreakdown(bot_score=bot_score, contributions=contributions)
