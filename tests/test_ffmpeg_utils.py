"""Unit tests for ffmpeg command building and execution."""

import io
import subprocess
from pathlib import Path

from h265_transcoder.utils import ffmpeg_utils
from h265_transcoder.utils.ffmpeg_utils import (
    FfmpegInput,
    FfmpegRequest,
    StreamMetadata,
    build_ffmpeg_command,
    describe_failure,
    ffmpeg_succeeded,
    format_progress,
    run_cmd,
    run_cmd_with_progress,
    run_ffmpeg,
)


class TestBuildFfmpegCommand:
    def test_full_request_order(self) -> None:
        request = FfmpegRequest(
            inputs=[
                FfmpegInput(Path("in.mp4"), options=["-hwaccel", "cuda"]),
                FfmpegInput(Path("sub.srt")),
            ],
            output=Path("out.mp4"),
            maps=["0:v", "1:0"],
            encoder_args=["-c:v", "hevc_nvenc"],
            codecs={"a": "copy", "s": "mov_text"},
            metadata=[StreamMetadata("s", 0, "language", "eng")],
            output_options=["-movflags", "+faststart"],
            overwrite=False,
        )

        assert build_ffmpeg_command(request, "ffmpeg") == [
            "ffmpeg", "-hide_banner", "-nostdin", "-loglevel", "error", "-n",
            "-hwaccel", "cuda", "-i", "in.mp4",
            "-i", "sub.srt",
            "-map", "0:v", "-map", "1:0",
            "-c:v", "hevc_nvenc",
            "-c:a", "copy", "-c:s", "mov_text",
            "-metadata:s:s:0", "language=eng",
            "-movflags", "+faststart",
            "out.mp4",
        ]

    def test_overwrite_flag(self) -> None:
        request = FfmpegRequest(inputs=[FfmpegInput(Path("a.mkv"))], output=Path("b.srt"))
        cmd = build_ffmpeg_command(request, "ffmpeg")
        assert "-y" in cmd
        assert "-n" not in cmd

    def test_uses_configured_executable_by_default(self, monkeypatch) -> None:
        monkeypatch.setattr(ffmpeg_utils.Modules, "ffmpeg_path", staticmethod(lambda: "/opt/ff/ffmpeg"))
        request = FfmpegRequest(inputs=[FfmpegInput(Path("a.mkv"))], output=Path("b.srt"))
        assert build_ffmpeg_command(request)[0] == "/opt/ff/ffmpeg"


def test_stream_metadata_args() -> None:
    assert StreamMetadata("s", 3, "title", "Forced").to_args() == ["-metadata:s:s:3", "title=Forced"]


class TestRunCmd:
    def test_returns_completed_process(self, monkeypatch) -> None:
        calls = []

        def fake_run(cmd, **kwargs):
            calls.append((cmd, kwargs))
            return subprocess.CompletedProcess(cmd, 0, stdout="ok", stderr="")

        monkeypatch.setattr(ffmpeg_utils.subprocess, "run", fake_run)
        result = run_cmd(["ffmpeg", "-version"])

        assert result.returncode == 0
        assert calls[0][0] == ["ffmpeg", "-version"]
        assert calls[0][1]["shell"] is False
        assert calls[0][1]["capture_output"] is True

    def test_splits_string_commands(self, monkeypatch) -> None:
        seen = []
        monkeypatch.setattr(
            ffmpeg_utils.subprocess,
            "run",
            lambda cmd, **kwargs: seen.append(cmd) or subprocess.CompletedProcess(cmd, 0, "", ""),
        )
        run_cmd("ffmpeg -i 'my file.mkv'")
        assert seen == [["ffmpeg", "-i", "my file.mkv"]]

    def test_missing_executable_returns_none(self, monkeypatch) -> None:
        def fake_run(cmd, **kwargs):
            raise FileNotFoundError(cmd[0])

        monkeypatch.setattr(ffmpeg_utils.subprocess, "run", fake_run)
        assert run_cmd(["does-not-exist"]) is None

    def test_empty_command_returns_none(self) -> None:
        assert run_cmd([]) is None


class TestResultHelpers:
    def test_ffmpeg_succeeded(self) -> None:
        assert ffmpeg_succeeded(subprocess.CompletedProcess([], 0)) is True
        assert ffmpeg_succeeded(subprocess.CompletedProcess([], 1)) is False
        assert ffmpeg_succeeded(None) is False

    def test_describe_failure_uses_last_stderr_line(self) -> None:
        result = subprocess.CompletedProcess([], 187, stdout="", stderr="first\n\nConversion failed!\n")
        assert describe_failure(result) == "rc=187: Conversion failed!"

    def test_describe_failure_without_process(self) -> None:
        assert describe_failure(None) == "ffmpeg could not be started"


class FakePopen:
    """Replays `-progress pipe:1` output for `run_cmd_with_progress`."""

    def __init__(self, stdout_lines, stderr="", returncode=0):
        self._stdout_lines = stdout_lines
        self._stderr = stderr
        self.returncode = returncode

    def __call__(self, cmd, **kwargs):
        self.cmd = cmd
        self.kwargs = kwargs
        self.stdout = io.StringIO("".join(f"{line}\n" for line in self._stdout_lines))
        self.stderr = io.StringIO(self._stderr)
        return self

    def wait(self):
        return self.returncode


PROGRESS_BLOCK = ["frame=1200", "fps=96.5", "out_time=00:00:50.050000", "speed=4.02x"]


class TestProgress:
    def test_progress_flags(self) -> None:
        request = FfmpegRequest(inputs=[FfmpegInput(Path("a.mkv"))], output=Path("b.mp4"), report_progress=True)
        cmd = build_ffmpeg_command(request, "ffmpeg")
        assert cmd[5:9] == ["-y", "-progress", "pipe:1", "-nostats"]

    def test_format_progress(self) -> None:
        values = dict(line.split("=", 1) for line in PROGRESS_BLOCK)
        assert format_progress(values) == "00:00:50 (frame 1200, 96.5 fps, 4.02x)"
        assert format_progress({"speed": "N/A"}) == "00:00:00"

    def test_logs_progress_and_end(self, monkeypatch, log_messages) -> None:
        popen = FakePopen(PROGRESS_BLOCK + ["progress=continue"] + PROGRESS_BLOCK + ["progress=end"])
        monkeypatch.setattr(ffmpeg_utils.subprocess, "Popen", popen)

        result = run_cmd_with_progress(["ffmpeg", "-i", "a.mkv", "b.mp4"], log_interval=0)

        assert result.returncode == 0
        assert popen.kwargs["stdout"] is subprocess.PIPE
        progress = [m for m in log_messages if m.startswith("  Progress:")]
        assert progress == ["  Progress: 00:00:50 (frame 1200, 96.5 fps, 4.02x)"] * 2

    def test_throttles_intermediate_blocks(self, monkeypatch, log_messages) -> None:
        popen = FakePopen(PROGRESS_BLOCK + ["progress=continue"] * 5 + ["progress=end"])
        monkeypatch.setattr(ffmpeg_utils.subprocess, "Popen", popen)

        run_cmd_with_progress(["ffmpeg"], log_interval=3600)

        assert len([m for m in log_messages if m.startswith("  Progress:")]) == 1

    def test_failure_keeps_stderr(self, monkeypatch) -> None:
        popen = FakePopen([], stderr="Conversion failed!\n", returncode=187)
        monkeypatch.setattr(ffmpeg_utils.subprocess, "Popen", popen)

        result = run_cmd_with_progress(["ffmpeg"])

        assert describe_failure(result) == "rc=187: Conversion failed!"

    def test_missing_executable_returns_none(self, monkeypatch) -> None:
        def fake_popen(cmd, **kwargs):
            raise FileNotFoundError(cmd[0])

        monkeypatch.setattr(ffmpeg_utils.subprocess, "Popen", fake_popen)
        assert run_cmd_with_progress(["does-not-exist"]) is None

    def test_run_ffmpeg_streams_only_progress_requests(self, monkeypatch) -> None:
        used = []
        monkeypatch.setattr(ffmpeg_utils, "run_cmd", lambda cmd, **kwargs: used.append("run_cmd"))
        monkeypatch.setattr(ffmpeg_utils, "run_cmd_with_progress", lambda cmd, **kwargs: used.append("progress"))

        run_ffmpeg(FfmpegRequest(inputs=[FfmpegInput(Path("a.mkv"))], output=Path("a.srt")))
        run_ffmpeg(FfmpegRequest(inputs=[FfmpegInput(Path("a.mkv"))], output=Path("b.mp4"), report_progress=True))

        assert used == ["run_cmd", "progress"]
