"""viewguard: view-authenticity scoring for pay-per-view promotion campaigns."""
from .detection import AnalysisResult, BotDetectionConfig, BotDetectionEngine, InvalidInput, ViewEventRecord

__version__ = "0.1.0"
