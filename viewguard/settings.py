"""
Environment-driven settings.

Only entry points (the CLI) read the environment; the engine receives the
resulting BotDetectionConfig explicitly.
"""
from pydantic_settings import BaseSettings, SettingsConfigDict

from .detection.config import (
    AggregationMode,
    BotDetectionConfig,
    ConfidenceThresholds,
    RatioThresholds,
)


class DetectionSettings(BaseSettings):
    """Reads VIEWGUARD_* variables, e.g. VIEWGUARD_BAN_THRESHOLD=95."""
    model_config = SettingsConfigDict(env_prefix="VIEWGUARD_", extra="ignore")

    # Confidence cut points
    ban_threshold: float = 90.0
    warning_threshold: float = 50.0
    monitor_threshold: float = 20.0

    # Abnormality triggers
    view_like_ratio: float = 10.0
    view_comment_ratio: float = 100.0
    spike_percentage: float = 500.0
    spike_time_window_seconds: float = 300.0
    view_rate_per_minute: float = 1000.0

    aggregation: AggregationMode = AggregationMode.SUM
    pattern_signals: bool = True

    log_level: str = "INFO"

    def to_config(self) -> BotDetectionConfig:
        return BotDetectionConfig(
            thresholds=RatioThresholds(
                view_like_ratio=self.view_like_ratio,
                view_comment_ratio=self.view_comment_ratio,
                spike_percentage=self.spike_percentage,
                spike_time_window_seconds=self.spike_time_window_seconds,
                view_rate_per_minute=self.view_rate_per_minute,
            ),
            confidence=ConfidenceThresholds(
                ban=self.ban_threshold,
                warning=self.warning_threshold,
                monitor=self.monitor_threshold,
            ),
            aggregation=self.aggregation,
            pattern_signals=self.pattern_signals,
        )
