"""
Tests for video resources and path safety.
"""

import asyncio

import pytest

from veo_continuity.core.exceptions import ResourceNotFoundError, SecurityError
from veo_continuity.core.security import PathValidator, redact_api_key, sanitize_filename
from veo_continuity.workflow import ResourceRegistry


def test_create_read_release():
    registry = ResourceRegistry()
    video = registry.create(b"abc", "video/webm")

    assert video.resource_id.startswith("video://")
    assert video.read() == b"abc"
    assert video.size == 3
    assert len(registry) == 1

    video.release()
    video.release()

    assert video.released
    assert len(registry) == 0
    with pytest.raises(ResourceNotFoundError):
        video.read()


def test_release_all():
    registry = ResourceRegistry()
    videos = [registry.create(b"x") for _ in range(3)]
    registry.release_all()
    assert all(v.released for v in videos)


def test_save_within_output_dir(tmp_path):
    registry = ResourceRegistry()
    video = registry.create(b"video-bytes")
    validator = PathValidator(tmp_path)

    path = asyncio.run(video.save("scenes/scene_1.mp4", validator=validator))

    assert path == (tmp_path / "scenes" / "scene_1.mp4").resolve()
    assert path.read_bytes() == b"video-bytes"


@pytest.mark.parametrize("target", ["../escape.mp4", "scene_1.txt"])
def test_save_rejects_unsafe_paths(tmp_path, target):
    video = ResourceRegistry().create(b"x")
    with pytest.raises(SecurityError):
        asyncio.run(video.save(target, validator=PathValidator(tmp_path / "out")))


def test_sanitize_filename():
    assert sanitize_filename("my scene/1?.mp4") == "my_scene_1_.mp4"
    assert sanitize_filename("") == "unnamed"


def test_redact_api_key():
    key = "AIza" + "A" * 35
    text = f"GET https://host/files/a:download?alt=media&key={key} failed"

    redacted = redact_api_key(text)

    assert key not in redacted
    assert "alt=media" in redacted
    assert redact_api_key("token s3cret here", secret="s3cret") == "token ***REDACTED*** here"
