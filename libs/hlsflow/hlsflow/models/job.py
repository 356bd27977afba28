"""Transcode job state and outcome."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum

from hlsflow.models.classification import ClassificationResult


class JobState(str, Enum):
    FILTERING = "filtering"
    CLASSIFYING = "classifying"
    DOWNLOADING = "downloading"
    POSTER_EXTRACTING = "poster_extracting"
    ENCODING = "encoding"
    PLAYLIST_BUILDING = "playlist_building"
    EVICTING_OLD_OUTPUT = "evicting_old_output"
    PUBLISHING = "publishing"
    REWRITING_PLAYLISTS = "rewriting_playlists"
    RECONCILING = "reconciling"
    CLEANING_UP = "cleaning_up"
    DONE = "done"


class MediaStatus(str, Enum):
    READY = "ready"
    ERROR = "error"


@dataclass(frozen=True)
class BestEffortResult:
    """Outcome of a step whose failure is logged and never aborts the job."""

    ok: bool
    error: BaseException | None = None

    @classmethod
    def success(cls) -> "BestEffortResult":
        return cls(ok=True)

    @classmethod
    def failure(cls, error: BaseException) -> "BestEffortResult":
        return cls(ok=False, error=error)


@dataclass
class JobReport:
    object_path: str
    classification: ClassificationResult | None = None
    state: JobState = JobState.FILTERING
    states: list[JobState] = field(default_factory=list)
    succeeded: bool = False
    master_url: str | None = None
    poster_url: str | None = None
    uploaded: int = 0
    error: str | None = None
    error_code: str | None = None
    failed_state: JobState | None = None

    @property
    def ignored(self) -> bool:
        return self.classification is not None and self.classification.ignored

    def enter(self, state: JobState) -> None:
        self.state = state
        self.states.append(state)

    def to_dict(self) -> dict[str, object]:
        cls = self.classification
        return {
            "object_path": self.object_path,
            "category": cls.category.value if cls is not None else None,
            "site_key": cls.site_key if cls is not None else None,
            "entity_id": cls.entity_id if cls is not None else None,
            "state": self.state.value,
            "succeeded": self.succeeded,
            "master_url": self.master_url,
            "poster_url": self.poster_url,
            "uploaded": self.uploaded,
            "error": self.error,
            "error_code": self.error_code,
            "failed_state": self.failed_state.value if self.failed_state is not None else None,
        }
