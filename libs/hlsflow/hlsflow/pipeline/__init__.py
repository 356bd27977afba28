"""Transcode pipeline.

Imports are lazy so `hlsflow.pipeline.classifier` stays importable without the
storage and document-store SDKs.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from hlsflow.pipeline.classifier import classify
    from hlsflow.pipeline.factory import create_transcode_orchestrator
    from hlsflow.pipeline.orchestrator import TranscodeOrchestrator
    from hlsflow.pipeline.workspace import Workspace, acquire_workspace

__all__ = [
    "TranscodeOrchestrator",
    "Workspace",
    "acquire_workspace",
    "classify",
    "create_transcode_orchestrator",
]


def __getattr__(name: str) -> Any:
    if name == "classify":
        from hlsflow.pipeline.classifier import classify

        return classify
    if name == "TranscodeOrchestrator":
        from hlsflow.pipeline.orchestrator import TranscodeOrchestrator

        return TranscodeOrchestrator
    if name == "create_transcode_orchestrator":
        from hlsflow.pipeline.factory import create_transcode_orchestrator

        return create_transcode_orchestrator
    if name in {"Workspace", "acquire_workspace"}:
        from hlsflow.pipeline import workspace

        return getattr(workspace, name)
    raise AttributeError(name)
