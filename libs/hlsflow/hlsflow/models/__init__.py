"""Core data models for HLSFlow."""

from hlsflow.models.classification import HLS_DIRNAME, Category, ClassificationResult
from hlsflow.models.event import StorageFinalizeEvent, iter_s3_records
from hlsflow.models.job import BestEffortResult, JobReport, JobState, MediaStatus
from hlsflow.models.rendition import DEFAULT_RENDITIONS, Rendition, parse_bitrate_kbps

__all__ = [
    "BestEffortResult",
    "Category",
    "ClassificationResult",
    "DEFAULT_RENDITIONS",
    "HLS_DIRNAME",
    "JobReport",
    "JobState",
    "MediaStatus",
    "Rendition",
    "StorageFinalizeEvent",
    "iter_s3_records",
    "parse_bitrate_kbps",
]
