from __future__ import annotations

import json
from pathlib import Path

import pytest

from vidsum.error_codes import ErrorCode
from vidsum.exceptions import ProviderError
from vidsum.providers.media.ffmpeg import FFmpegMediaTool
from vidsum.utils.subprocess import RunResult, SubprocessTimeout


@pytest.fixture()
def tool(monkeypatch) -> FFmpegMediaTool:
    monkeypatch.setattr("vidsum.providers.media.ffmpeg.resolve_ffmpeg_bin", lambda b: b)
    monkeypatch.setattr("vidsum.providers.media.ffmpeg.resolve_ffprobe_bin", lambda b: b)
    return FFmpegMediaTool("ffmpeg", "ffprobe", probe_timeout_s=3.0)


def _patch_run(monkeypatch, handler) -> list[list[str]]:
    calls: list[list[str]] = []

    async def _fake_run(args, *, capture_output=True, check=False, timeout_s=None):  # noqa: ARG001
        calls.append(list(args))
        return handler(list(args), timeout_s)

    monkeypatch.setattr("vidsum.providers.media.ffmpeg.run_subprocess", _fake_run)
    return calls


@pytest.mark.asyncio
async def test_probe_parses_streams_and_duration(tool, monkeypatch) -> None:
    payload = {
        "format": {"format_name": "mov,mp4,m4a,3gp,3g2,mj2", "duration": "2.000000"},
        "streams": [
            {"codec_type": "video", "duration": "2.000000"},
            {"codec_type": "audio", "duration": "2.021333"},
        ],
    }
    calls = _patch_run(monkeypatch, lambda args, t: RunResult(0, json.dumps(payload).encode(), b""))

    probe = await tool.probe("/in.mp4")

    assert probe.has_audio is True
    assert probe.has_video is True
    assert probe.duration_seconds == pytest.approx(2.021333)
    assert probe.format_name.startswith("mov")
    assert calls[0][0] == "ffprobe"
    assert calls[0][-1] == "/in.mp4"


@pytest.mark.asyncio
async def test_probe_detects_missing_audio(tool, monkeypatch) -> None:
    payload = {"format": {"duration": "N/A"}, "streams": [{"codec_type": "video"}]}
    _patch_run(monkeypatch, lambda args, t: RunResult(0, json.dumps(payload).encode(), b""))

    probe = await tool.probe("/in.mp4")

    assert probe.has_audio is False
    assert probe.duration_seconds is None


@pytest.mark.asyncio
async def test_probe_failure_maps_to_extraction_failed(tool, monkeypatch) -> None:
    _patch_run(monkeypatch, lambda args, t: RunResult(1, b"", b"Invalid data found"))

    with pytest.raises(ProviderError) as excinfo:
        await tool.probe("/in.mp4")

    assert excinfo.value.error_code == ErrorCode.EXTRACTION_FAILED
    assert "Invalid data found" in excinfo.value.message


@pytest.mark.asyncio
async def test_extract_audio_builds_wav_command(tool, monkeypatch, tmp_path) -> None:
    out = tmp_path / "audio" / "vid_1.wav"

    def _handler(args, timeout_s):
        assert timeout_s == 60.0
        Path(args[-1]).write_bytes(b"RIFFdata")
        return RunResult(0, b"", b"")

    calls = _patch_run(monkeypatch, _handler)

    result = await tool.extract_audio("/in.mp4", str(out), timeout_s=60.0)

    assert result == str(out)
    assert calls[0] == [
        "ffmpeg",
        "-y",
        "-i",
        "/in.mp4",
        "-vn",
        "-acodec",
        "pcm_s16le",
        "-ar",
        "44100",
        "-ac",
        "2",
        str(out),
    ]


@pytest.mark.asyncio
async def test_extract_audio_zero_exit_without_output_is_a_failure(tool, monkeypatch, tmp_path) -> None:
    _patch_run(monkeypatch, lambda args, t: RunResult(0, b"", b""))

    with pytest.raises(ProviderError) as excinfo:
        await tool.extract_audio("/in.mp4", str(tmp_path / "out.wav"), timeout_s=60.0)

    assert excinfo.value.error_code == ErrorCode.EXTRACTION_FAILED


@pytest.mark.asyncio
async def test_extract_audio_timeout(tool, monkeypatch, tmp_path) -> None:
    def _handler(args, timeout_s):
        raise SubprocessTimeout(args, timeout_s)

    _patch_run(monkeypatch, _handler)

    with pytest.raises(ProviderError) as excinfo:
        await tool.extract_audio("/in.mp4", str(tmp_path / "out.wav"), timeout_s=1.0)

    assert excinfo.value.error_code == ErrorCode.EXTRACTION_TIMEOUT


@pytest.mark.asyncio
async def test_extract_audio_missing_binary(tool, monkeypatch, tmp_path) -> None:
    def _handler(args, timeout_s):  # noqa: ARG001
        raise FileNotFoundError(args[0])

    _patch_run(monkeypatch, _handler)

    with pytest.raises(ProviderError) as excinfo:
        await tool.extract_audio("/in.mp4", str(tmp_path / "out.wav"), timeout_s=1.0)

    assert excinfo.value.error_code == ErrorCode.EXTRACTION_FAILED
    assert "not found" in excinfo.value.message
