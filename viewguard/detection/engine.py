"""
Bot detection engine.

Validation -> aggregation -> scoring -> decision -> result, with no state
kept between calls. Each call must be given the full relevant event history.
"""
from typing import Iterable, List, Optional

from .aggregator import aggregate_metrics
from .config import BotDetectionConfig
from .errors import InvalidInput
from .models import AggregatedMetrics, AnalysisResult, Decision, ScoreBreakdown
from .policy import determine_action, generate_reason
from .scorer import calculate_bot_score
from .validator import RecordInput, validate_records


def build_result(
    promoter_id: str,
    campaign_id: str,
    metrics: AggregatedMetrics,
    breakdown: ScoreBreakdown,
    decision: Decision,
    reason: str,
    signals: List[str],
    warnings: Optional[List[str]] = None,
) -> AnalysisResult:
    """Assemble an AnalysisResult from the outputs of each stage."""
    return AnalysisResult(
        promoter_id=promoter_id,
        campaign_id=campaign_id,
        bot_score=breakdown.bot_score,
        action=decision.action,
        confidence=decision.confidence,
        reason=reason,
        signals=list(signals),
        metrics=metrics,
        breakdown=breakdown,
        warnings=list(warnings or []),
    )


class BotDetectionEngine:
    """Scores view-event records for one (promoter, campaign) pair."""

    def __init__(self, config: Optional[BotDetectionConfig] = None):
        """
        Initialize the engine.

        Args:
            config: Thresholds and options; defaults are used when omitted.
        """
        self.config = config or BotDetectionConfig()

    @staticmethod
    def default_config() -> BotDetectionConfig:
        return BotDetectionConfig()

    def analyze(
        self,
        promoter_id: str,
        campaign_id: str,
        records: Iterable[RecordInput],
    ) -> AnalysisResult:
        """
        Analyze view records for bot activity.

        Args:
            promoter_id: Promoter under analysis.
            campaign_id: Campaign under analysis.
            records: ViewEventRecords or mappings, in any order.

        Returns:
            AnalysisResult with score, action, reason and metrics.

        Raises:
            InvalidInput: If records is empty, contains malformed records,
                or has none for the given pair.
        """
        validation = validate_records(records, promoter_id, campaign_id)
        if not validation.is_valid:
            raise InvalidInput(validation.errors)

        metrics = aggregate_metrics(validation.records, self.config)
        breakdown = calculate_bot_score(metrics, self.config)
        decision = determine_action(breakdown.bot_score, self.config.confidence)
        reason, signals = generate_reason(metrics, breakdown)

        return build_result(
            promoter_id,
            campaign_id,
            metrics,
            breakdown,
            decision,
            reason,
            signals,
            validation.warnings,
        )
