"""Transcode orchestrator: one storage-finalize event in, one HLS package out."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Sequence
from pathlib import Path

from hlsflow.config import Settings
from hlsflow.error_codes import ErrorCode
from hlsflow.exceptions import (
    ConfigurationError,
    EncoderError,
    ReconcileError,
    StorageError,
    TokenNotFoundError,
)
from hlsflow.formatters.hls import (
    MASTER_PLAYLIST_NAME,
    build_master_absolute,
    build_master_relative,
    rewrite_variant_playlist,
)
from hlsflow.models.classification import Category, ClassificationResult
from hlsflow.models.event import StorageFinalizeEvent
from hlsflow.models.job import BestEffortResult, JobReport, JobState
from hlsflow.models.rendition import DEFAULT_RENDITIONS, Rendition
from hlsflow.pipeline.classifier import filter_reason, match_path
from hlsflow.pipeline.workspace import Workspace, acquire_workspace
from hlsflow.providers.encoder.base import Encoder
from hlsflow.repositories.media_record_repo import MediaRecordRepository
from hlsflow.services.publisher import (
    DEFAULT_DOWNLOAD_HOST,
    UploadedTokenMap,
    build_download_url,
    join_object_path,
    publish_directory,
    republish_text,
)
from hlsflow.storage.object_store import ObjectStore

logger = logging.getLogger(__name__)


class TranscodeOrchestrator:
    """Runs the sequential transcode state machine for a single uploaded object.

    `handle` never raises for pipeline failures: errors after classification are
    reconciled onto the owning record and reported in the returned `JobReport`.
    """

    def __init__(
        self,
        settings: Settings,
        store: ObjectStore,
        encoder: Encoder,
        records: MediaRecordRepository,
        *,
        renditions: Sequence[Rendition] = DEFAULT_RENDITIONS,
        download_host: str | None = None,
    ) -> None:
        self.settings = settings
        self.store = store
        self.encoder = encoder
        self.records = records
        self.renditions = tuple(renditions)
        self.download_host = download_host or settings.storage.download_host or DEFAULT_DOWNLOAD_HOST

    @property
    def bucket(self) -> str:
        return self.store.bucket

    @staticmethod
    def _infer_error_code(state: JobState, exc: BaseException) -> str:
        if isinstance(exc, EncoderError) and exc.error_code is not None:
            return str(getattr(exc.error_code, "value", exc.error_code))
        if isinstance(exc, TokenNotFoundError):
            return ErrorCode.TOKEN_MISSING.value
        if isinstance(exc, ReconcileError):
            return ErrorCode.RECONCILE_FAILED.value
        if isinstance(exc, ConfigurationError):
            return ErrorCode.INVALID_CONFIG.value

        if state == JobState.DOWNLOADING:
            return ErrorCode.DOWNLOAD_FAILED.value
        if state == JobState.POSTER_EXTRACTING:
            return ErrorCode.POSTER_FAILED.value
        if state == JobState.ENCODING:
            return ErrorCode.ENCODE_FAILED.value
        if state == JobState.PLAYLIST_BUILDING:
            return ErrorCode.PLAYLIST_FAILED.value
        if state == JobState.PUBLISHING or isinstance(exc, StorageError):
            return ErrorCode.PUBLISH_FAILED.value
        if state == JobState.REWRITING_PLAYLISTS:
            return ErrorCode.PLAYLIST_FAILED.value
        if state == JobState.RECONCILING:
            return ErrorCode.RECONCILE_FAILED.value
        return ErrorCode.UNKNOWN.value

    async def handle(self, event: StorageFinalizeEvent) -> JobReport:
        report = JobReport(object_path=event.name)

        report.enter(JobState.FILTERING)
        reason = filter_reason(event.name, event.content_type)
        if reason is None and event.bucket and event.bucket != self.bucket:
            reason = f"bucket {event.bucket!r} is not {self.bucket!r}"
        if reason is not None:
            report.classification = ClassificationResult.ignore(reason)
            logger.debug("skip %s: %s", event.name, reason)
            report.enter(JobState.DONE)
            return report

        report.enter(JobState.CLASSIFYING)
        classification = match_path(event.name, event.metadata)
        report.classification = classification
        if classification.ignored:
            logger.debug("skip %s: %s", event.name, classification.reason)
            report.enter(JobState.DONE)
            return report

        logger.info(
            "transcode start path=%s category=%s site=%s id=%s",
            event.name,
            classification.category.value,
            classification.site_key or "-",
            classification.entity_id or "-",
        )
        try:
            async with acquire_workspace(event.name, self.settings.work_dir or None) as workspace:
                try:
                    await self._run(event, classification, workspace, report)
                except Exception as exc:
                    report.failed_state = report.state
                    report.error = str(exc)
                    report.error_code = self._infer_error_code(report.state, exc)
                    logger.exception(
                        "transcode failed path=%s state=%s code=%s",
                        event.name,
                        report.state.value,
                        report.error_code,
                    )
                    report.enter(JobState.RECONCILING)
                    await self._reconcile_failure(classification)
                report.enter(JobState.CLEANING_UP)
        except OSError as exc:
            # Workspace creation failed before any stage ran.
            report.failed_state = report.state
            report.error = str(exc)
            report.error_code = ErrorCode.UNKNOWN.value
            logger.exception("workspace unavailable for %s", event.name)
            report.enter(JobState.RECONCILING)
            await self._reconcile_failure(classification)
            report.enter(JobState.CLEANING_UP)
        report.enter(JobState.DONE)
        if report.succeeded:
            logger.info("transcode done path=%s master=%s", event.name, report.master_url)
        return report

    async def _run(
        self,
        event: StorageFinalizeEvent,
        classification: ClassificationResult,
        workspace: Workspace,
        report: JobReport,
    ) -> None:
        prefix = self._destination_prefix(classification)

        report.enter(JobState.DOWNLOADING)
        await self.store.download(event.name, workspace.source_path)

        report.enter(JobState.POSTER_EXTRACTING)
        poster_path = await self.encoder.extract_poster(workspace.source_path, workspace.output_dir)

        report.enter(JobState.ENCODING)
        for rendition in self.renditions:
            logger.info("encoding %s for %s", rendition.name, event.name)
            await self.encoder.encode_rendition(workspace.source_path, workspace.output_dir, rendition)

        report.enter(JobState.PLAYLIST_BUILDING)
        master_local = workspace.output_dir / MASTER_PLAYLIST_NAME
        await asyncio.to_thread(
            master_local.write_text, build_master_relative(self.renditions), encoding="utf-8"
        )

        if prefix is None:
            # Opted in without a matching path: nothing owns a destination or a record.
            logger.warning(
                "no destination for %s (category=%s); encoded output discarded",
                event.name,
                classification.category.value,
            )
            report.succeeded = True
            return

        report.enter(JobState.EVICTING_OLD_OUTPUT)
        await self._evict_old_output(prefix)

        report.enter(JobState.PUBLISHING)
        token_map = await publish_directory(self.store, workspace.output_dir, prefix)
        report.uploaded = len(token_map)

        report.enter(JobState.REWRITING_PLAYLISTS)
        await self._rewrite_playlists(workspace, prefix, token_map)

        master_url = build_download_url(
            self.bucket, join_object_path(prefix, MASTER_PLAYLIST_NAME), token_map, host=self.download_host
        )
        poster_url = build_download_url(
            self.bucket, join_object_path(prefix, poster_path.name), token_map, host=self.download_host
        )
        report.master_url = master_url
        report.poster_url = poster_url

        report.enter(JobState.RECONCILING)
        await self.records.mark_ready(classification, master_url, poster_url)
        report.succeeded = True

    @staticmethod
    def _destination_prefix(classification: ClassificationResult) -> str | None:
        prefix = classification.destination_prefix
        if prefix is None and classification.category != Category.UNRECOGNIZED:
            raise ConfigurationError(f"no destination for category {classification.category.value!r}")
        return prefix

    async def _rewrite_playlists(
        self,
        workspace: Workspace,
        prefix: str,
        token_map: UploadedTokenMap,
    ) -> None:
        master = build_master_absolute(
            self.bucket, prefix, self.renditions, token_map, host=self.download_host
        )
        await republish_text(self.store, join_object_path(prefix, MASTER_PLAYLIST_NAME), master, token_map)

        for rendition in self.renditions:
            local: Path = workspace.output_dir / rendition.playlist_name
            raw = await asyncio.to_thread(local.read_text, encoding="utf-8")
            rewritten = rewrite_variant_playlist(
                raw, prefix, self.bucket, token_map, host=self.download_host
            )
            await republish_text(
                self.store, join_object_path(prefix, rendition.playlist_name), rewritten, token_map
            )

    async def _evict_old_output(self, prefix: str) -> BestEffortResult:
        try:
            deleted = await self.store.delete_prefix(prefix)
        except Exception as exc:
            logger.warning("failed to evict old output under %s/: %s", prefix, exc)
            return BestEffortResult.failure(exc)
        logger.info("evicted %d objects under %s/", deleted, prefix)
        return BestEffortResult.success()

    async def _reconcile_failure(self, classification: ClassificationResult) -> BestEffortResult:
        if not classification.recognized:
            return BestEffortResult.success()
        try:
            await self.records.mark_error(classification)
        except Exception as exc:
            logger.warning(
                "failed to record error status for %s/%s: %s",
                classification.category.value,
                classification.entity_id or classification.site_key,
                exc,
            )
            return BestEffortResult.failure(exc)
        return BestEffortResult.success()
