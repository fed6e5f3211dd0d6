"""
Batch analysis over mixed view-event exports.

Groups records by (promoter, campaign) and runs the engine on each group.
A bad group is logged and counted; it does not stop the rest of the batch.
"""
import logging
from collections import defaultdict
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Tuple

from pydantic import ValidationError

from ..detection.engine import BotDetectionEngine
from ..detection.errors import InvalidInput
from ..detection.models import ACTIONS, AnalysisResult, ViewEventRecord
from ..detection.validator import RecordInput, coerce_record

logger = logging.getLogger(__name__)

Pair = Tuple[str, str]


@dataclass
class BatchReport:
    """Outcome of analyzing every (promoter, campaign) pair in a batch."""
    results: Dict[Pair, AnalysisResult] = field(default_factory=dict)
    errors: Dict[Pair, List[str]] = field(default_factory=dict)
    rejected_records: List[str] = field(default_factory=list)

    @property
    def by_action(self) -> Dict[str, int]:
        counts = {action: 0 for action in ACTIONS}
        for result in self.results.values():
            counts[result.action] += 1
        return counts

    def flagged(self) -> List[AnalysisResult]:
        """Results needing attention, highest score first."""
        hits = [r for r in self.results.values() if r.action != "none"]
        return sorted(hits, key=lambda r: r.bot_score, reverse=True)

    def to_dict(self) -> dict:
        return {
            "pairs_analyzed": len(self.results),
            "by_action": self.by_action,
            "errors": len(self.errors) + len(self.rejected_records),
            "results": [r.to_dict() for r in self.flagged()],
            "failed_pairs": [
                {"promoterId": p, "campaignId": c, "errors": errs}
                for (p, c), errs in sorted(self.errors.items())
            ],
            "rejected_records": list(self.rejected_records),
        }


def group_records(records: Iterable[RecordInput]) -> Tuple[Dict[Pair, List[ViewEventRecord]], List[str]]:
    """Split records by (promoter, campaign).

    Returns:
        (records per pair, messages for records that failed validation)
    """
    groups: Dict[Pair, List[ViewEventRecord]] = defaultdict(list)
    rejected: List[str] = []
    for index, item in enumerate(records):
        try:
            record = coerce_record(item)
        except (ValidationError, TypeError) as e:
            rejected.append(f"Record {index} rejected: {e}")
            continue
        groups[record.pair].append(record)
    return dict(groups), rejected


class BatchAnalyzer:
    """Runs the engine over every (promoter, campaign) pair in a record set."""

    def __init__(self, engine: BotDetectionEngine):
        """
        Initialize the batch analyzer.

        Args:
            engine: Configured engine shared by every pair in the batch
        """
        self.engine = engine

    def analyze_all(self, records: Iterable[RecordInput]) -> BatchReport:
        """
        Analyze all pairs present in records.

        Args:
            records: Mixed records for any number of pairs

        Returns:
            BatchReport with per-pair results and failures
        """
        groups, rejected = group_records(records)
        report = BatchReport(rejected_records=rejected)

        if rejected:
            logger.warning(f"Rejected {len(rejected)} malformed records")
        logger.info(f"Analyzing {len(groups)} promoter/campaign pairs")

        for (promoter_id, campaign_id), group in sorted(groups.items()):
            try:
                result = self.engine.analyze(promoter_id, campaign_id, group)
            except InvalidInput as e:
                logger.error(f"Cannot analyze {promoter_id}:{campaign_id}: {e}")
                report.errors[(promoter_id, campaign_id)] = e.errors
                continue

            report.results[(promoter_id, campaign_id)] = result
            if result.action == "none":
                logger.debug(f"{promoter_id}:{campaign_id} clean (score={result.bot_score})")
            else:
                logger.info(
                    f"{promoter_id}:{campaign_id} -> {result.action} "
                    f"(score={result.bot_score}, reason={result.reason})"
                )

        counts = report.by_action
        logger.info(
            f"Analyzed {len(report.results)} pairs: "
            f"ban={counts['ban']}, warning={counts['warning']}, "
            f"monitor={counts['monitor']}, none={counts['none']}"
        )
        return report
