# Review module
from .batch import BatchAnalyzer, BatchReport, group_records
from .queue import ReviewEntry, build_review_entry, dismiss, payout_disposition, summarize_reviews
