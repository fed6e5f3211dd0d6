"""
Data models for the bot detection engine.

ViewEventRecord is validated at the boundary with pydantic; everything the
engine produces is a plain dataclass.
"""
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Dict, List, Literal, Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator

Platform = Literal["tiktok", "instagram"]

ACTION_NONE = "none"
ACTION_MONITOR = "monitor"
ACTION_WARNING = "warning"
ACTION_BAN = "ban"
ACTIONS = (ACTION_NONE, ACTION_MONITOR, ACTION_WARNING, ACTION_BAN)

# Largest accepted engagement count (int64)
MAX_COUNT = 2**63 - 1


class ViewEventRecord(BaseModel):
    """One timestamped snapshot of cumulative engagement on a piece of content."""
    model_config = ConfigDict(frozen=True, coerce_numbers_to_str=True)

    id: str
    promoter_id: str = Field(validation_alias=AliasChoices("promoter_id", "promoterId"))
    campaign_id: str = Field(validation_alias=AliasChoices("campaign_id", "campaignId"))
    platform: Platform
    content_id: str = Field(
        validation_alias=AliasChoices("content_id", "contentId", "platformPostId")
    )
    view_count: int = Field(
        ge=0, le=MAX_COUNT, validation_alias=AliasChoices("view_count", "viewCount")
    )
    like_count: int = Field(
        ge=0, le=MAX_COUNT, validation_alias=AliasChoices("like_count", "likeCount")
    )
    comment_count: int = Field(
        ge=0, le=MAX_COUNT, validation_alias=AliasChoices("comment_count", "commentCount")
    )
    share_count: int = Field(
        ge=0, le=MAX_COUNT, validation_alias=AliasChoices("share_count", "shareCount")
    )
    timestamp: datetime

    @field_validator("view_count", "like_count", "comment_count", "share_count", mode="before")
    @classmethod
    def _reject_bool(cls, value):
        if isinstance(value, bool):
            raise ValueError("count must be an integer, not a boolean")
        return value

    @field_validator("timestamp")
    @classmethod
    def _assume_utc(cls, value: datetime) -> datetime:
        # Naive and aware datetimes cannot be compared when sorting
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value

    @property
    def pair(self) -> tuple:
        return (self.promoter_id, self.campaign_id)


@dataclass
class AggregatedMetrics:
    """Summary values reduced from a record list."""
    total_views: int
    total_likes: int
    total_comments: int
    total_shares: int
    view_like_ratio: float
    view_comment_ratio: float
    spike_detected: bool
    spike_percentage: Optional[float]
    avg_views_per_minute: float
    avg_likes_per_minute: float
    avg_comments_per_minute: float
    window_start: datetime
    window_end: datetime
    record_count: int
    content_count: int
    # Pattern measurements
    interval_variation: Optional[float] = None
    low_engagement_bursts: int = 0
    engagement_reversals: int = 0
    platform_anomalies: List[str] = field(default_factory=list)

    def to_dict(self) -> dict:
        data = {
            "viewLikeRatio": round(self.view_like_ratio, 4),
            "viewCommentRatio": round(self.view_comment_ratio, 4),
            "spikeDetected": self.spike_detected,
            "totalViews": self.total_views,
            "totalLikes": self.total_likes,
            "totalComments": self.total_comments,
            "totalShares": self.total_shares,
            "avgViewsPerMinute": round(self.avg_views_per_minute, 4),
            "avgLikesPerMinute": round(self.avg_likes_per_minute, 4),
            "avgCommentsPerMinute": round(self.avg_comments_per_minute, 4),
            "analysisWindow": {
                "start": self.window_start.isoformat(),
                "end": self.window_end.isoformat(),
            },
            "recordCount": self.record_count,
            "contentCount": self.content_count,
            "intervalVariation": (
                round(self.interval_variation, 4)
                if self.interval_variation is not None else None
            ),
            "lowEngagementBursts": self.low_engagement_bursts,
            "engagementReversals": self.engagement_reversals,
            "platformAnomalies": list(self.platform_anomalies),
        }
        if self.spike_detected and self.spike_percentage is not None:
            data["spikePercentage"] = round(self.spike_percentage, 2)
        return data


@dataclass
class ScoreBreakdown:
    """Bot score with the points each signal contributed."""
    bot_score: float
    contributions: Dict[str, float] = field(default_factory=dict)

    @property
    def raw_total(self) -> float:
        return sum(self.contributions.values())

    def triggered(self) -> List[str]:
        return [name for name, points in self.contributions.items() if points > 0]


@dataclass
class Decision:
    """Action recommended for a bot score."""
    action: str
    confidence: Optional[str]  # high, medium, low, or None for 'none'


@dataclass
class AnalysisResult:
    """Engine output for one (promoter, campaign) evaluation."""
    promoter_id: str
    campaign_id: str
    bot_score: float
    action: str
    confidence: Optional[str]
    reason: str
    signals: List[str]
    metrics: AggregatedMetrics
    breakdown: ScoreBreakdown
    warnings: List[str] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "promoterId": self.promoter_id,
            "campaignId": self.campaign_id,
            "botScore": self.bot_score,
            "action": self.action,
            "confidence": self.confidence,
            "reason": self.reason,
            "signals": list(self.signals),
            "metrics": self.metrics.to_dict(),
            "breakdown": {
                name: round(points, 2)
                for name, points in self.breakdown.contributions.items()
            },
            "warnings": list(self.warnings),
        }

    def summary(self) -> str:
        lines = [
            f"Promoter:   {self.promoter_id}",
            f"Campaign:   {self.campaign_id}",
            f"Bot score:  {self.bot_score:.2f}",
            f"Action:     {self.action}"
            + (f" ({self.confidence} confidence)" if self.confidence else ""),
            f"Reason:     {self.reason}",
            f"View:like:    {self.metrics.view_like_ratio:.1f}:1",
            f"View:comment: {self.metrics.view_comment_ratio:.1f}:1",
        ]
        if self.metrics.spike_detected:
            lines.append(f"Spike:        {self.metrics.spike_percentage:.1f}% increase")
        if self.signals[1:]:
            lines.append("Other signals:")
            for s in self.signals[1:]:
                lines.append(f"  - {s}")
        if self.warnings:
            lines.append("Warnings:")
            for w in self.warnings:
                lines.append(f"  - {w}")
        return "\n".join(lines)
