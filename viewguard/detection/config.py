"""
Configuration for the bot detection engine.

One configuration object is shared by the engine, the batch runner and the
review helpers so threshold values are defined in exactly one place.
"""
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, model_validator


class AggregationMode(str, Enum):
    """How cumulative snapshot counts are reduced to totals."""
    SUM = "sum"        # sum every record
    LATEST = "latest"  # latest snapshot per content_id, summed across contents


class RatioThresholds(BaseModel):
    """Abnormality triggers for engagement ratios and spikes."""
    model_config = ConfigDict(frozen=True)

    view_like_ratio: float = Field(default=10.0, gt=0)
    view_comment_ratio: float = Field(default=100.0, gt=0)
    spike_percentage: float = Field(default=500.0, gt=0)  # growth %, 500 = 6x
    spike_time_window_seconds: float = Field(default=300.0, gt=0)
    view_rate_per_minute: float = Field(default=1000.0, gt=0)


class ConfidenceThresholds(BaseModel):
    """Bot score cut points for the ban / warning / monitor actions."""
    model_config = ConfigDict(frozen=True)

    ban: float = Field(default=90.0, ge=0, le=100)
    warning: float = Field(default=50.0, ge=0, le=100)
    monitor: float = Field(default=20.0, ge=0, le=100)

    @model_validator(mode="after")
    def _check_order(self) -> "ConfidenceThresholds":
        if not self.ban > self.warning:
            raise ValueError("Ban confidence must be higher than warning confidence")
        if not self.warning > self.monitor:
            raise ValueError("Warning confidence must be higher than monitor confidence")
        return self


class BotDetectionConfig(BaseModel):
    """Complete engine configuration, passed in at construction time."""
    model_config = ConfigDict(frozen=True)

    thresholds: RatioThresholds = Field(default_factory=RatioThresholds)
    confidence: ConfidenceThresholds = Field(default_factory=ConfidenceThresholds)
    aggregation: AggregationMode = AggregationMode.SUM
    pattern_signals: bool = True


# Points contributed by each signal. Ratio and spike signals grow with the
# log10 of how far the value exceeds its threshold, up to the cap.
SIGNAL_WEIGHTS = {
    "view_like_ratio": {"base": 30.0, "per_decade": 20.0, "cap": 60.0},
    "view_comment_ratio": {"base": 25.0, "per_decade": 15.0, "cap": 45.0},
    "spike": {"base": 50.0, "per_decade": 15.0, "cap": 70.0},
    "no_engagement": {"base": 20.0},
    "high_view_rate": {"base": 15.0},
    "regular_sampling": {"base": 15.0},
    "engagement_velocity": {"per_burst": 10.0, "per_reversal": 5.0, "cap": 25.0},
    "platform_anomaly": {"tiktok": 8.0, "instagram": 7.0},
}

# Pattern measurement limits
REGULAR_SAMPLING_MAX_CV = 0.05
MIN_INTERVALS_FOR_REGULARITY = 3
BURST_MIN_VIEWS_PER_SECOND = 10.0
BURST_MAX_LIKES_PER_SECOND = 0.1
BURST_MAX_COMMENTS_PER_SECOND = 0.01

PLATFORM_BASELINES = {
    "tiktok": {"min_avg_views": 1000, "min_like_rate": 0.02},
    "instagram": {"min_avg_views": 500, "min_comment_rate": 0.005},
}

MAX_SCORE = 100.0
