from __future__ import annotations

from pathlib import Path

import pytest

from vidsum.storage.staging import StagingArea


def test_paths_are_keyed_by_video_id(tmp_path) -> None:
    staging = StagingArea(str(tmp_path))
    assert staging.video_path("vid_a", "MP4") == str(tmp_path / "videos" / "vid_a.mp4")
    assert staging.video_path("vid_a", ".mkv") == str(tmp_path / "videos" / "vid_a.mkv")
    assert staging.audio_path("vid_a") == str(tmp_path / "audio" / "vid_a.wav")
    assert staging.video_path("../x", ".mp4") == str(tmp_path / "videos" / ".._x.mp4")


@pytest.mark.asyncio
async def test_write_size_read_delete(tmp_path) -> None:
    staging = StagingArea(str(tmp_path))
    path = staging.audio_path("vid_b")

    await staging.write(path, b"abcd")
    assert await staging.exists(path) is True
    assert await staging.size(path) == 4
    assert await staging.read(path) == b"abcd"

    assert await staging.delete(path) is True
    assert await staging.delete(path) is False
    assert await staging.exists(path) is False
    assert await staging.exists(None) is False
    assert await staging.delete(None) is False


@pytest.mark.asyncio
async def test_list_staged_reports_kind_and_id(tmp_path) -> None:
    staging = StagingArea(str(tmp_path))
    await staging.write(staging.video_path("vid_c", ".mp4"), b"v")
    await staging.write(staging.audio_path("vid_d"), b"a")
    Path(tmp_path / "audio" / "nested").mkdir()

    staged = await staging.list_staged()

    assert [(s.video_id, s.kind) for s in staged] == [("vid_c", "video"), ("vid_d", "audio")]
    assert all(s.modified_at > 0 for s in staged)
