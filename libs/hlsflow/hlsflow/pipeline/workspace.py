"""Per-job scratch workspace."""

from __future__ import annotations

import asyncio
import logging
import shutil
import tempfile
import uuid
from contextlib import asynccontextmanager
from dataclasses import dataclass
from pathlib import Path, PurePosixPath
from typing import AsyncIterator

logger = logging.getLogger(__name__)

OUTPUT_DIRNAME = "out"


@dataclass(frozen=True)
class Workspace:
    root: Path
    source_path: Path
    output_dir: Path


def _remove_tree(path: Path) -> None:
    if path.exists():
        shutil.rmtree(path)


async def release_workspace(workspace: Workspace) -> bool:
    """Delete the workspace tree; failures are logged and reported as False."""
    try:
        await asyncio.to_thread(_remove_tree, workspace.root)
    except OSError as exc:
        logger.warning("failed to remove workspace %s: %s", workspace.root, exc)
        return False
    return True


@asynccontextmanager
async def acquire_workspace(object_path: str, work_dir: str | Path | None = None) -> AsyncIterator[Workspace]:
    """Create a private scratch directory for one transcode and remove it on exit.

    The local source file name carries a random UUID so concurrent jobs for the
    same object never share a path.
    """
    base = str(work_dir) if work_dir else None
    root = Path(await asyncio.to_thread(tempfile.mkdtemp, prefix="hlsflow-", dir=base))
    ext = PurePosixPath(object_path).suffix.lower()
    workspace = Workspace(
        root=root,
        source_path=root / f"source-{uuid.uuid4().hex}{ext}",
        output_dir=root / OUTPUT_DIRNAME,
    )
    try:
        workspace.output_dir.mkdir(parents=True, exist_ok=True)
        logger.debug("acquired workspace %s", root)
        yield workspace
    finally:
        await release_workspace(workspace)
