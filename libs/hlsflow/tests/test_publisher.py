from __future__ import annotations

from pathlib import Path

import pytest

from hlsflow.exceptions import TokenNotFoundError
from hlsflow.services.publisher import (
    build_download_url,
    policy_for,
    publish_directory,
    republish_text,
)
from hlsflow.storage import LocalObjectStore


def _package(dir_: Path) -> None:
    dir_.mkdir(parents=True, exist_ok=True)
    (dir_ / "poster.jpg").write_bytes(b"jpg")
    (dir_ / "master.m3u8").write_text("#EXTM3U\n", encoding="utf-8")
    (dir_ / "720p.m3u8").write_text("#EXTM3U\n720p_000.ts\n", encoding="utf-8")
    (dir_ / "720p_000.ts").write_bytes(b"ts0")
    (dir_ / "720p_001.ts").write_bytes(b"ts1")
    (dir_ / "nested").mkdir()
    (dir_ / "nested" / "ignored.ts").write_bytes(b"x")


def test_build_download_url_encodes_path_like_uri_component() -> None:
    path = "sitePages/acme co/about/hls/master.m3u8"
    url = build_download_url("b", path, {path: "abc"})
    assert url == (
        "https://firebasestorage.googleapis.com/v0/b/b/o/"
        "sitePages%2Facme%20co%2Fabout%2Fhls%2Fmaster.m3u8?alt=media&token=abc"
    )


def test_build_download_url_keeps_uri_component_safe_characters() -> None:
    path = "a/it's(1)!~*.ts"
    url = build_download_url("b", path, {path: "t"})
    assert "/o/a%2Fit's(1)!~*.ts?" in url


def test_build_download_url_missing_token_is_fatal() -> None:
    with pytest.raises(TokenNotFoundError) as exc_info:
        build_download_url("b", "never/published.ts", {})
    assert exc_info.value.object_path == "never/published.ts"


def test_cache_policies() -> None:
    assert policy_for("a/master.m3u8").cache_control == "public,max-age=60,must-revalidate"
    assert policy_for("x.TS").content_type == "video/mp2t"
    assert policy_for("poster.jpg").cache_control == "public,max-age=604800,immutable"
    assert policy_for("readme.txt") is None


@pytest.mark.asyncio
async def test_publish_directory_assigns_unique_tokens(tmp_path: Path) -> None:
    local = tmp_path / "out"
    _package(local)
    store = LocalObjectStore(str(tmp_path / "objects"), "b")

    tokens = await publish_directory(store, local, "videos/public/acme/hls")

    assert sorted(tokens) == [
        "videos/public/acme/hls/720p.m3u8",
        "videos/public/acme/hls/720p_000.ts",
        "videos/public/acme/hls/720p_001.ts",
        "videos/public/acme/hls/master.m3u8",
        "videos/public/acme/hls/poster.jpg",
    ]
    assert len(set(tokens.values())) == len(tokens)
    for path, token in tokens.items():
        meta = store.read_metadata(path)
        assert meta["metadata"] == {"firebaseStorageDownloadTokens": token}
    seg_meta = store.read_metadata("videos/public/acme/hls/720p_000.ts")
    assert seg_meta["contentType"] == "video/mp2t"
    assert seg_meta["cacheControl"] == "public,max-age=2592000,immutable"


@pytest.mark.asyncio
async def test_republish_text_keeps_original_token(tmp_path: Path) -> None:
    local = tmp_path / "out"
    _package(local)
    store = LocalObjectStore(str(tmp_path / "objects"), "b")
    tokens = await publish_directory(store, local, "p")

    await republish_text(store, "p/master.m3u8", "#EXTM3U\nhttps://x\n", tokens)

    assert (tmp_path / "objects" / "b" / "p" / "master.m3u8").read_text(encoding="utf-8") == (
        "#EXTM3U\nhttps://x\n"
    )
    meta = store.read_metadata("p/master.m3u8")
    assert meta["metadata"]["firebaseStorageDownloadTokens"] == tokens["p/master.m3u8"]
    assert meta["contentType"] == "application/vnd.apple.mpegurl"


@pytest.mark.asyncio
async def test_republish_text_requires_token(tmp_path: Path) -> None:
    store = LocalObjectStore(str(tmp_path / "objects"), "b")
    with pytest.raises(TokenNotFoundError):
        await republish_text(store, "p/master.m3u8", "#EXTM3U\n", {})
