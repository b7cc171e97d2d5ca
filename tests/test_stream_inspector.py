"""Unit tests for subtitle stream inspection (mocked ffprobe)."""

from pathlib import Path

import ffmpeg
import pytest

from h265_transcoder.services.stream_inspector import inspect_subtitle_streams, subtitle_format_for_codec

from .conftest import probe_result, subtitle_probe_stream


class TestInspectSubtitleStreams:
    def test_returns_subtitles_in_container_order(self, fake_probe) -> None:
        fake_probe["movie.mkv"] = probe_result(
            subtitle_probe_stream(2, "subrip", "eng", "Full"),
            subtitle_probe_stream(3, "ass", "jpn"),
            subtitle_probe_stream(4, "hdmv_pgs_subtitle"),
        )

        streams = inspect_subtitle_streams(Path("/media/movie.mkv"))

        assert [s.source_index for s in streams] == [0, 1, 2]
        assert [s.codec for s in streams] == ["subrip", "ass", "hdmv_pgs_subtitle"]
        assert streams[0].language == "eng"
        assert streams[0].title == "Full"
        assert streams[1].title is None
        assert streams[2].language is None
        assert [s.extracted_format for s in streams] == ["srt", "ass", "sup"]
        assert streams[2].is_bitmap is True

    def test_no_subtitle_streams(self, fake_probe) -> None:
        assert inspect_subtitle_streams(Path("plain.mp4")) == []

    def test_blank_tags_are_treated_as_missing(self, fake_probe) -> None:
        fake_probe["a.mkv"] = probe_result(subtitle_probe_stream(2, "subrip", "  ", ""))
        stream = inspect_subtitle_streams(Path("a.mkv"))[0]
        assert stream.language is None
        assert stream.title is None

    def test_probe_failure_means_no_subtitles(self, monkeypatch, log_messages) -> None:
        def failing_probe(filename, cmd="ffprobe", **kwargs):
            raise ffmpeg.Error("ffprobe", b"", b"Invalid data found when processing input")

        monkeypatch.setattr(ffmpeg, "probe", failing_probe)

        assert inspect_subtitle_streams(Path("broken.avi")) == []
        assert any("continuing without subtitles" in m for m in log_messages)

    def test_missing_ffprobe_means_no_subtitles(self, monkeypatch) -> None:
        def missing_probe(filename, cmd="ffprobe", **kwargs):
            raise FileNotFoundError(cmd)

        monkeypatch.setattr(ffmpeg, "probe", missing_probe)
        assert inspect_subtitle_streams(Path("x.mkv")) == []


@pytest.mark.parametrize(
    "codec, expected",
    [
        ("ass", ("ass", False)),
        ("ssa", ("ass", False)),
        ("subrip", ("srt", False)),
        ("srt", ("srt", False)),
        ("webvtt", ("vtt", False)),
        ("dvd_subtitle", ("sub", True)),
        ("dvdsub", ("sub", True)),
        ("hdmv_pgs_subtitle", ("sup", True)),
        ("pgssub", ("sup", True)),
        ("mov_text", ("srt", False)),
        ("eia_608", ("srt", False)),
    ],
)
def test_subtitle_format_for_codec(codec, expected) -> None:
    assert subtitle_format_for_codec(codec) == expected
