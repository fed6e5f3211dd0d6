"""
Record validation for the bot detection engine.

Coerces raw input into typed ViewEventRecords and checks that there is
something to analyze, collecting clear error messages for malformed data
and warnings for data that is unusual but still usable.
"""
from collections import Counter, defaultdict
from dataclasses import dataclass, field
from typing import Any, Iterable, List, Mapping, Union

from pydantic import ValidationError

from .models import ViewEventRecord

RecordInput = Union[ViewEventRecord, Mapping[str, Any]]


@dataclass
class RecordValidation:
    """Result of validating a record list for one (promoter, campaign) pair."""
    is_valid: bool
    records: List[ViewEventRecord]
    errors: List[str] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)

    def summary(self) -> str:
        lines = [f"Records: {len(self.records)}"]
        if self.errors:
            lines.append("Errors:")
            for e in self.errors:
                lines.append(f"  - {e}")
        if self.warnings:
            lines.append("Warnings:")
            for w in self.warnings:
                lines.append(f"  - {w}")
        return "\n".join(lines)


def _describe(exc: ValidationError) -> str:
    parts = []
    for err in exc.errors():
        loc = ".".join(str(p) for p in err.get("loc", ())) or "record"
        parts.append(f"{loc}: {err.get('msg')}")
    return ", ".join(parts)


def coerce_record(item: RecordInput) -> ViewEventRecord:
    """Return item as a ViewEventRecord, validating mappings.

    Raises:
        ValidationError: If a mapping does not describe a valid record.
        TypeError: If item is neither a record nor a mapping.
    """
    if isinstance(item, ViewEventRecord):
        return item
    if isinstance(item, Mapping):
        return ViewEventRecord.model_validate(item)
    raise TypeError(f"Expected ViewEventRecord or mapping, got {type(item).__name__}")


def _quality_warnings(records: List[ViewEventRecord]) -> List[str]:
    warnings: List[str] = []

    id_counts = Counter(r.id for r in records)
    duplicates = sorted(rid for rid, count in id_counts.items() if count > 1)
    if duplicates:
        warnings.append(f"Duplicate record ids: {', '.join(duplicates)}")

    by_content = defaultdict(list)
    for r in records:
        by_content[r.content_id].append(r)

    for content_id in sorted(by_content):
        snapshots = sorted(by_content[content_id], key=lambda r: (r.timestamp, r.id))
        decreasing = False
        same_time = False
        for prev, curr in zip(snapshots, snapshots[1:]):
            if curr.timestamp == prev.timestamp:
                same_time = True
            if (curr.view_count < prev.view_count
                    or curr.like_count < prev.like_count
                    or curr.comment_count < prev.comment_count):
                decreasing = True
        if decreasing:
            warnings.append(f"Counts decrease over time for content '{content_id}'")
        if same_time:
            warnings.append(f"Multiple snapshots share a timestamp for content '{content_id}'")

    return warnings


def validate_records(
    records: Iterable[RecordInput],
    promoter_id: str,
    campaign_id: str,
) -> RecordValidation:
    """Validate records before analysis.

    Records for other (promoter, campaign) pairs are dropped with a warning.

    Args:
        records: ViewEventRecords or mappings with record fields.
        promoter_id: Promoter under analysis.
        campaign_id: Campaign under analysis.

    Returns:
        RecordValidation with the typed records for the pair.
    """
    errors: List[str] = []
    warnings: List[str] = []
    typed: List[ViewEventRecord] = []

    items = list(records)
    if not items:
        errors.append("No view records supplied; at least one record is required.")
        return RecordValidation(is_valid=False, records=[], errors=errors)

    for index, item in enumerate(items):
        try:
            typed.append(coerce_record(item))
        except ValidationError as e:
            errors.append(f"Record {index} is malformed: {_describe(e)}")
        except TypeError as e:
            errors.append(f"Record {index} is malformed: {e}")

    if errors:
        return RecordValidation(is_valid=False, records=[], errors=errors)

    matching = [r for r in typed if r.pair == (promoter_id, campaign_id)]
    dropped = len(typed) - len(matching)
    if not matching:
        errors.append(
            f"None of the {len(typed)} records belong to promoter '{promoter_id}' "
            f"and campaign '{campaign_id}'."
        )
        return RecordValidation(is_valid=False, records=[], errors=errors)

    if dropped:
        warnings.append(f"Ignored {dropped} records for other promoter/campaign pairs")

    warnings.extend(_quality_warnings(matching))

    return RecordValidation(
        is_valid=True,
        records=matching,
        errors=errors,
        warnings=warnings,
    )
