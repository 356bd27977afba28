from __future__ import annotations

import pytest

from hlsflow.models.classification import Category
from hlsflow.pipeline.classifier import classify, filter_reason, has_reserved_segment


@pytest.mark.parametrize(
    "path",
    [
        "videos/public/acme/hls/360p.ts",
        "videos/public/acme/hls/master.m3u8",
        "products/public/acme/hls/sku123/720p_000.ts",
        "hls/anything.mp4",
        "sitePages/acme/about/hls/clip.mp4",
    ],
)
def test_reserved_output_segment_is_always_ignored(path: str) -> None:
    result = classify(path, "video/mp4", {"transcode": "hls"})
    assert result.ignored
    assert result.category == Category.IGNORED
    assert "reserved" in result.reason


def test_reserved_segment_only_matches_directories() -> None:
    assert has_reserved_segment("a/hls/b.mp4")
    assert not has_reserved_segment("a/hls")
    assert not has_reserved_segment("a/hlsx/b.mp4")


def test_non_video_content_type_is_ignored() -> None:
    assert classify("videos/public/acme/homeBackground.mp4", "image/png").ignored
    assert classify("videos/public/acme/homeBackground.mp4", "").ignored


@pytest.mark.parametrize("path", ["videos/public/acme/homeBackground.avi", "videos/public/acme/x"])
def test_unaccepted_extension_is_ignored(path: str) -> None:
    assert filter_reason(path, "video/mp4") is not None
    assert classify(path, "video/mp4", {"transcode": "hls"}).ignored


@pytest.mark.parametrize(
    ("path", "category", "site", "entity_id"),
    [
        ("videos/public/acme/homeBackground.mp4", Category.BACKGROUND, "acme", None),
        ("videos/public/acme/homeBackground.MOV", Category.BACKGROUND, "acme", None),
        ("products/public/acme/sku123.mov", Category.PRODUCT, "acme", "sku123"),
        ("videos/public/acme/sections/s-1.mp4", Category.SECTION, "acme", "s-1"),
        ("sitePages/acme/about/intro.mp4", Category.ABOUT_PAGE, "acme", None),
    ],
)
def test_structural_patterns_extract_identifiers(
    path: str, category: Category, site: str, entity_id: str | None
) -> None:
    result = classify(path, "video/quicktime", {})
    assert result.category == category
    assert result.site_key == site
    assert result.entity_id == entity_id
    assert result.recognized


def test_product_destination_prefix() -> None:
    result = classify("products/public/acme/sku123.mov", "video/quicktime")
    assert result.destination_prefix == "products/public/acme/hls/sku123"


def test_destination_prefixes_for_every_category() -> None:
    assert (
        classify("videos/public/acme/homeBackground.mp4", "video/mp4").destination_prefix
        == "videos/public/acme/hls"
    )
    assert (
        classify("videos/public/acme/sections/s1.mp4", "video/mp4").destination_prefix
        == "videos/public/acme/sections/hls/s1"
    )
    assert (
        classify("sitePages/acme/about/intro.mp4", "video/mp4").destination_prefix
        == "sitePages/acme/about/hls"
    )


def test_unmatched_path_without_opt_in_is_ignored() -> None:
    result = classify("uploads/acme/clip.mp4", "video/mp4", {})
    assert result.ignored
    assert result.destination_prefix is None


def test_unmatched_path_with_opt_in_is_accepted_as_unrecognized() -> None:
    result = classify("uploads/acme/clip.mp4", "video/mp4", {"transcode": "hls"})
    assert result.category == Category.UNRECOGNIZED
    assert not result.ignored
    assert not result.recognized
    assert result.destination_prefix is None


def test_opt_in_flag_requires_exact_value() -> None:
    assert classify("uploads/acme/clip.mp4", "video/mp4", {"transcode": "HLS"}).ignored
    assert classify("uploads/acme/clip.mp4", "video/mp4", {"transcode": "dash"}).ignored


def test_nested_paths_do_not_match_single_segment_patterns() -> None:
    assert classify("videos/public/acme/extra/homeBackground.mp4", "video/mp4").ignored
    assert classify("products/public/acme/nested/sku.mp4", "video/mp4").ignored
