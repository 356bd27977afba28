from __future__ import annotations

import pytest

from hlsflow.models.event import StorageFinalizeEvent, iter_s3_records


def test_from_gcs_object() -> None:
    event = StorageFinalizeEvent.from_gcs_object(
        {
            "bucket": "site-bucket",
            "name": "videos/public/acme/homeBackground.mp4",
            "contentType": "video/mp4",
            "metadata": {"transcode": "hls", "n": 1},
            "generation": 1712345,
        }
    )
    assert event.bucket == "site-bucket"
    assert event.name == "videos/public/acme/homeBackground.mp4"
    assert event.content_type == "video/mp4"
    assert event.metadata == {"transcode": "hls", "n": "1"}
    assert event.generation == "1712345"


def test_from_gcs_object_requires_name() -> None:
    with pytest.raises(ValueError):
        StorageFinalizeEvent.from_gcs_object({"bucket": "b"})


def _s3_record(key: str, **obj) -> dict:
    return {
        "eventName": "s3:ObjectCreated:Put",
        "s3": {"bucket": {"name": "media"}, "object": {"key": key, **obj}},
    }


def test_from_s3_record_decodes_key_and_user_metadata() -> None:
    record = _s3_record(
        "products/public/acme/sku+123.mov",
        contentType="video/quicktime",
        userMetadata={"X-Amz-Meta-Transcode": "hls", "content-type": "video/quicktime"},
        sequencer="00AB",
    )
    event = StorageFinalizeEvent.from_s3_record(record)
    assert event.bucket == "media"
    assert event.name == "products/public/acme/sku 123.mov"
    assert event.content_type == "video/quicktime"
    assert event.metadata == {"transcode": "hls"}
    assert event.generation == "00AB"


def test_from_s3_record_rejects_missing_key() -> None:
    with pytest.raises(ValueError):
        StorageFinalizeEvent.from_s3_record({"s3": {"object": {}}})
    with pytest.raises(ValueError):
        StorageFinalizeEvent.from_s3_record({"eventName": "x"})


def test_iter_s3_records_accepts_plain_and_minio_access_format() -> None:
    plain = {"Records": [_s3_record("a.mp4"), "junk"]}
    assert len(iter_s3_records(plain)) == 1

    minio = [{"Event": [_s3_record("a.mp4"), _s3_record("b.mp4")], "EventTime": "now"}]
    assert [r["s3"]["object"]["key"] for r in iter_s3_records(minio)] == ["a.mp4", "b.mp4"]

    assert iter_s3_records(_s3_record("c.mp4"))[0]["s3"]["object"]["key"] == "c.mp4"
    assert iter_s3_records("nope") == []
