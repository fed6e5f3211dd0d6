"""
Review-queue helpers for the admin surface.

Translates engine results into review entries and payout dispositions. The
engine's action and confidence are used as-is so no threshold is redefined
here.
"""
from dataclasses import dataclass, replace
from datetime import datetime, timezone
from typing import Iterable, Optional

from ..detection.models import ACTION_BAN, ACTION_NONE, ACTION_WARNING, AnalysisResult

STATUS_PENDING = "pending"
STATUS_DISMISSED = "dismissed"

PAYOUT_DISPOSITIONS = {
    ACTION_BAN: "cancel",
    ACTION_WARNING: "hold",
}


@dataclass(frozen=True)
class ReviewEntry:
    """A flagged analysis waiting for (or closed by) an admin decision."""
    promoter_id: str
    campaign_id: str
    bot_score: float
    action: str
    confidence: str
    reason: str
    status: str
    detected_at: datetime

    def to_dict(self) -> dict:
        return {
            "promoterId": self.promoter_id,
            "campaignId": self.campaign_id,
            "botScore": self.bot_score,
            "action": self.action,
            "confidence": self.confidence,
            "reason": self.reason,
            "status": self.status,
            "detectedAt": self.detected_at.isoformat(),
        }


def build_review_entry(
    result: AnalysisResult,
    detected_at: Optional[datetime] = None,
) -> Optional[ReviewEntry]:
    """Create a pending review entry, or None when the action is 'none'."""
    if result.action == ACTION_NONE:
        return None
    return ReviewEntry(
        promoter_id=result.promoter_id,
        campaign_id=result.campaign_id,
        bot_score=result.bot_score,
        action=result.action,
        confidence=result.confidence,
        reason=result.reason,
        status=STATUS_PENDING,
        detected_at=detected_at or datetime.now(timezone.utc),
    )


def dismiss(entry: ReviewEntry) -> ReviewEntry:
    """Mark an entry as a false positive."""
    return replace(entry, status=STATUS_DISMISSED)


def payout_disposition(action: str) -> str:
    """What the payout workflow should do with earnings for an action."""
    return PAYOUT_DISPOSITIONS.get(action, "release")


def summarize_reviews(entries: Iterable[ReviewEntry]) -> dict:
    """Counts shown on the bot-detection overview."""
    stats = {
        "totalDetections": 0,
        "pendingReview": 0,
        "highConfidence": 0,
        "bannedUsers": 0,
        "falsePositives": 0,
    }
    banned = set()
    for entry in entries:
        stats["totalDetections"] += 1
        if entry.status == STATUS_PENDING:
            stats["pendingReview"] += 1
        else:
            stats["falsePositives"] += 1
        if entry.confidence == "high":
            stats["highConfidence"] += 1
        if entry.action == ACTION_BAN and entry.status == STATUS_PENDING:
            banned.add(entry.promoter_id)
    stats["bannedUsers"] = len(banned)
    return stats
