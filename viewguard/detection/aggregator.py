"""
Metrics aggregation for view-event records.

Reduces a record list to engagement totals, ratios, per-minute rates, spike
detection between consecutive snapshots, and the sampling/velocity pattern
measurements used by the bot score calculator.
"""
from collections import defaultdict
from typing import Dict, List, Optional, Sequence, Tuple

import numpy as np

from .config import (
    BURST_MAX_COMMENTS_PER_SECOND,
    BURST_MAX_LIKES_PER_SECOND,
    BURST_MIN_VIEWS_PER_SECOND,
    MIN_INTERVALS_FOR_REGULARITY,
    PLATFORM_BASELINES,
    AggregationMode,
    BotDetectionConfig,
)
from .models import AggregatedMetrics, ViewEventRecord


def _snapshot_order(record: ViewEventRecord) -> Tuple:
    return (record.timestamp, record.id)


def group_by_content(records: Sequence[ViewEventRecord]) -> Dict[str, List[ViewEventRecord]]:
    """Group records by content_id, each group sorted oldest first."""
    groups: Dict[str, List[ViewEventRecord]] = defaultdict(list)
    for r in records:
        groups[r.content_id].append(r)
    return {cid: sorted(rs, key=_snapshot_order) for cid, rs in groups.items()}


def engagement_ratio(views: int, engagement: int) -> float:
    """Views per engagement unit; falls back to the view count when engagement is zero."""
    if engagement > 0:
        return views / engagement
    return float(views)


def select_counted_records(
    records: Sequence[ViewEventRecord],
    mode: AggregationMode,
) -> List[ViewEventRecord]:
    """Pick the records whose counts make up the totals.

    SUM counts every record. LATEST counts only the most recent snapshot of
    each content (ties go to the larger view count), since snapshots of one
    content are cumulative.
    """
    if mode == AggregationMode.SUM:
        return list(records)

    latest = []
    for snapshots in group_by_content(records).values():
        latest.append(max(snapshots, key=lambda r: (r.timestamp, r.view_count, r.id)))
    return latest


def detect_spike(
    records: Sequence[ViewEventRecord],
    spike_percentage: float,
    time_window_seconds: float,
) -> Tuple[bool, Optional[float]]:
    """Look for abrupt view growth between consecutive snapshots of a content.

    Only pairs observed within the time window and starting from a positive
    view count are compared.

    Returns:
        (spike_detected, largest growth percentage if a spike was detected)
    """
    if len(records) < 2:
        return False, None

    max_growth = 0.0
    for snapshots in group_by_content(records).values():
        for prev, curr in zip(snapshots, snapshots[1:]):
            gap = (curr.timestamp - prev.timestamp).total_seconds()
            if gap > time_window_seconds or prev.view_count <= 0:
                continue
            growth = (curr.view_count - prev.view_count) / prev.view_count * 100
            max_growth = max(max_growth, growth)

    if max_growth > spike_percentage:
        return True, max_growth
    return False, None


def sampling_interval_variation(records: Sequence[ViewEventRecord]) -> Optional[float]:
    """Coefficient of variation of the gaps between consecutive observations.

    Returns None when there are too few intervals or every observation
    shares one timestamp.
    """
    if len(records) < MIN_INTERVALS_FOR_REGULARITY + 1:
        return None

    times = np.array(sorted(r.timestamp.timestamp() for r in records))
    intervals = np.diff(times)
    mean = float(intervals.mean())
    if mean <= 0:
        return None
    return float(intervals.std() / mean)


def engagement_velocity_counts(records: Sequence[ViewEventRecord]) -> Tuple[int, int]:
    """Count suspicious consecutive-snapshot transitions.

    Returns:
        (bursts of views with almost no likes/comments,
         transitions where views rise while likes or comments fall)
    """
    bursts = 0
    reversals = 0
    for snapshots in group_by_content(records).values():
        for prev, curr in zip(snapshots, snapshots[1:]):
            seconds = (curr.timestamp - prev.timestamp).total_seconds()
            view_diff = curr.view_count - prev.view_count
            if seconds <= 0 or view_diff <= 0:
                continue
            like_diff = curr.like_count - prev.like_count
            comment_diff = curr.comment_count - prev.comment_count

            if (view_diff / seconds > BURST_MIN_VIEWS_PER_SECOND
                    and like_diff / seconds < BURST_MAX_LIKES_PER_SECOND
                    and comment_diff / seconds < BURST_MAX_COMMENTS_PER_SECOND):
                bursts += 1
            if like_diff < 0 or comment_diff < 0:
                reversals += 1
    return bursts, reversals


def platform_anomalies(records: Sequence[ViewEventRecord]) -> List[str]:
    """Platforms whose average engagement falls below the platform norm."""
    anomalies = []
    for platform, baseline in PLATFORM_BASELINES.items():
        subset = [r for r in records if r.platform == platform]
        if not subset:
            continue
        avg_views = float(np.mean([r.view_count for r in subset], dtype=np.float64))
        if avg_views <= baseline["min_avg_views"]:
            continue
        if "min_like_rate" in baseline:
            avg_likes = float(np.mean([r.like_count for r in subset], dtype=np.float64))
            if avg_likes / avg_views < baseline["min_like_rate"]:
                anomalies.append(platform)
        elif "min_comment_rate" in baseline:
            avg_comments = float(np.mean([r.comment_count for r in subset], dtype=np.float64))
            if avg_comments / avg_views < baseline["min_comment_rate"]:
                anomalies.append(platform)
    return anomalies


def aggregate_metrics(
    records: Sequence[ViewEventRecord],
    config: BotDetectionConfig,
) -> AggregatedMetrics:
    """Reduce validated records for one (promoter, campaign) pair to metrics.

    Args:
        records: Non-empty list of validated records; order does not matter.
        config: Engine configuration (aggregation mode and spike thresholds).

    Returns:
        AggregatedMetrics for the scorer and for auditing.
    """
    counted = select_counted_records(records, config.aggregation)

    total_views = int(sum(r.view_count for r in counted))
    total_likes = int(sum(r.like_count for r in counted))
    total_comments = int(sum(r.comment_count for r in counted))
    total_shares = int(sum(r.share_count for r in counted))

    window_start = min(r.timestamp for r in records)
    window_end = max(r.timestamp for r in records)
    minutes = max((window_end - window_start).total_seconds() / 60, 1.0)

    spike_detected, spike_pct = detect_spike(
        records,
        config.thresholds.spike_percentage,
        config.thresholds.spike_time_window_seconds,
    )
    bursts, reversals = engagement_velocity_counts(records)

    return AggregatedMetrics(
        total_views=total_views,
        total_likes=total_likes,
        total_comments=total_comments,
        total_shares=total_shares,
        view_like_ratio=engagement_ratio(total_views, total_likes),
        view_comment_ratio=engagement_ratio(total_views, total_comments),
        spike_detected=spike_detected,
        spike_percentage=spike_pct,
        avg_views_per_minute=total_views / minutes,
        avg_likes_per_minute=total_likes / minutes,
        avg_comments_per_minute=total_comments / minutes,
        window_start=window_start,
        window_end=window_end,
        record_count=len(records),
        content_count=len({r.content_id for r in records}),
        interval_variation=sampling_interval_variation(records),
        low_engagement_bursts=bursts,
        engagement_reversals=reversals,
        platform_anomalies=platform_anomalies(records),
    )
