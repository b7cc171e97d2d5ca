"""Shared test fixtures for the H.265 Transcoder.

ffmpeg and ffprobe are never executed: `run_ffmpeg` is replaced by `FakeFfmpeg`,
which records every `FfmpegRequest` and writes a fake output file, and
`ffmpeg.probe` is replaced by a lookup table keyed by file name.
"""

import signal
import subprocess
from pathlib import Path
from typing import Callable, Dict, List, Optional, Tuple

import ffmpeg
import pytest
from loguru import logger

from h265_transcoder.domain.temp_models import TempArtifactRegistry
from h265_transcoder.services import remuxer, subtitle_extractor, video_transcoder
from h265_transcoder.services.capability_resolver import build_profile
from h265_transcoder.utils.ffmpeg_utils import FfmpegRequest, build_ffmpeg_command

TRANSCODED_PAYLOAD = b"v" * 400
REMUXED_PAYLOAD = b"m" * 450
SUBTITLE_PAYLOAD = b"1\n00:00:01,000 --> 00:00:02,000\nHello\n"


def request_kind(request: FfmpegRequest) -> str:
    """Classifies a request as "extract", "transcode" or "remux"."""
    if request.maps and request.maps[0].startswith("0:s:"):
        return "extract"
    if "-hwaccel" in request.inputs[0].options:
        return "transcode"
    return "remux"


def default_behavior(request: FfmpegRequest) -> Tuple[int, Optional[bytes]]:
    kind = request_kind(request)
    if kind == "extract":
        return 0, SUBTITLE_PAYLOAD
    if kind == "transcode":
        return 0, TRANSCODED_PAYLOAD
    return 0, REMUXED_PAYLOAD


class FakeFfmpeg:
    """Stands in for `run_ffmpeg`.

    `behavior(request)` returns (return code, payload); a non-None payload is
    written to the request's output path before the result is returned.
    """

    def __init__(self, behavior: Callable = default_behavior):
        self.behavior = behavior
        self.requests: List[FfmpegRequest] = []

    def __call__(self, request: FfmpegRequest, src_file_for_log: Path = Path()):
        self.requests.append(request)
        returncode, payload = self.behavior(request)
        if payload is not None:
            request.output.write_bytes(payload)
        return subprocess.CompletedProcess(
            args=build_ffmpeg_command(request, "ffmpeg"),
            returncode=returncode,
            stdout="",
            stderr="" if returncode == 0 else "Conversion failed!",
        )

    def of_kind(self, kind: str) -> List[FfmpegRequest]:
        return [r for r in self.requests if request_kind(r) == kind]


@pytest.fixture
def fake_ffmpeg(monkeypatch) -> FakeFfmpeg:
    fake = FakeFfmpeg()
    for module in (subtitle_extractor, video_transcoder, remuxer):
        monkeypatch.setattr(module, "run_ffmpeg", fake)
    return fake


def subtitle_probe_stream(index: int, codec: str, language: Optional[str] = None, title: Optional[str] = None) -> dict:
    tags = {}
    if language is not None:
        tags["language"] = language
    if title is not None:
        tags["title"] = title
    return {"index": index, "codec_type": "subtitle", "codec_name": codec, "tags": tags}


def probe_result(*subtitle_streams: dict) -> dict:
    streams = [
        {"index": 0, "codec_type": "video", "codec_name": "h264"},
        {"index": 1, "codec_type": "audio", "codec_name": "aac", "tags": {"language": "eng"}},
    ]
    streams.extend(subtitle_streams)
    return {"format": {"format_name": "matroska,webm"}, "streams": streams}


@pytest.fixture
def fake_probe(monkeypatch) -> Dict[str, dict]:
    """Maps file name -> ffprobe result. Unknown files have no subtitles."""
    results: Dict[str, dict] = {}

    def _probe(filename, cmd="ffprobe", **kwargs):
        return results.get(Path(filename).name, probe_result())

    monkeypatch.setattr(ffmpeg, "probe", _probe)
    return results


@pytest.fixture
def log_messages() -> List[str]:
    """Collects the text of every loguru message emitted during the test."""
    messages: List[str] = []
    handler_id = logger.add(lambda m: messages.append(m.record["message"]), level="TRACE")
    yield messages
    logger.remove(handler_id)


@pytest.fixture
def registry() -> TempArtifactRegistry:
    return TempArtifactRegistry()


@pytest.fixture
def nvenc_profile():
    return build_profile("nvenc", "medium", 23)


@pytest.fixture
def qsv_profile():
    return build_profile("qsv", "medium", 23)


@pytest.fixture
def input_dir(tmp_path: Path) -> Path:
    path = tmp_path / "videos"
    path.mkdir()
    return path


@pytest.fixture
def output_dir(tmp_path: Path) -> Path:
    path = tmp_path / "transcoded"
    path.mkdir()
    return path


@pytest.fixture
def restore_signal_handlers():
    saved = {sig: signal.getsignal(sig) for sig in (signal.SIGINT, signal.SIGTERM)}
    yield
    for sig, handler in saved.items():
        signal.signal(sig, handler)
