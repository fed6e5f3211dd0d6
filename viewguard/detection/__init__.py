"""
View-authenticity scoring.

Turns per-content view/engagement snapshots into a bot score, a
recommended action and the metrics behind them.
"""
from .aggregator import aggregate_metrics, detect_spike, engagement_ratio
from .config import (
    AggregationMode,
    BotDetectionConfig,
    ConfidenceThresholds,
    RatioThresholds,
    SIGNAL_WEIGHTS,
)
from .engine import BotDetectionEngine, build_result
from .errors import InvalidInput
from .models import (
    ACTIONS,
    AggregatedMetrics,
    AnalysisResult,
    Decision,
    ScoreBreakdown,
    ViewEventRecord,
)
from .policy import determine_action, generate_reason
from .scorer import calculate_bot_score
from .validator import RecordValidation, validate_records

__all__ = [
    "aggregate_metrics",
    "detect_spike",
    "engagement_ratio",
    "AggregationMode",
    "BotDetectionConfig",
    "ConfidenceThresholds",
    "RatioThresholds",
    "SIGNAL_WEIGHTS",
    "BotDetectionEngine",
    "build_result",
    "InvalidInput",
    "ACTIONS",
    "AggregatedMetrics",
    "AnalysisResult",
    "Decision",
    "ScoreBreakdown",
    "ViewEventRecord",
    "determine_action",
    "generate_reason",
    "calculate_bot_score",
    "RecordValidation",
    "validate_records",
]
