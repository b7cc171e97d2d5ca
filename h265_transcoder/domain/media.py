"""
Media-level domain models: the resolved hardware encoder and the subtitle streams
that travel through a job.
"""
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Dict, List, Optional


class EncoderName(str, Enum):
    """Supported hardware backends."""

    NVENC = "NVENC"
    QSV = "QSV"


@dataclass(frozen=True)
class EncoderProfile:
    """
    The hardware encoder selected for a run.

    Resolved once per batch by the capability resolver and shared, unchanged, by
    every job.

    Attributes:
        name: The backend (NVENC or QSV).
        codec_identifier: The ffmpeg encoder name, e.g. "hevc_nvenc".
        hardware_device_tag: The value passed to `-hwaccel`, e.g. "cuda".
        preset: The encoder preset.
        quality: The quality level the rate control parameters were built from.
        rate_control_params: Ordered ffmpeg option -> value pairs (without the
                             leading dash) that implement the quality level for
                             this backend.
    """

    name: EncoderName
    codec_identifier: str
    hardware_device_tag: str
    preset: str
    quality: int
    rate_control_params: Dict[str, str] = field(default_factory=dict)

    @property
    def display_name(self) -> str:
        return "NVIDIA NVENC" if self.name is EncoderName.NVENC else "Intel QSV"

    def encoder_args(self) -> List[str]:
        """The `-c:v ... -preset ...` and rate control arguments for ffmpeg."""
        args = ["-c:v", self.codec_identifier, "-preset", self.preset]
        for option, value in self.rate_control_params.items():
            args.extend([f"-{option}", value])
        return args


@dataclass(frozen=True)
class SubtitleStream:
    """
    One subtitle stream of an input container, as reported by ffprobe.

    Attributes:
        source_index: Position among the file's subtitle streams (0-based, in
                      container order); selects the stream with `-map 0:s:<n>`.
        codec: The ffprobe codec_name.
        language: The language tag, if any.
        title: The title tag, if any.
        extracted_format: File extension used when the stream is demuxed.
        is_bitmap: True for image-based formats (VobSub, PGS).
    """

    source_index: int
    codec: str
    language: Optional[str] = None
    title: Optional[str] = None
    extracted_format: str = "srt"
    is_bitmap: bool = False


@dataclass(frozen=True)
class ExtractedSubtitle:
    """
    A subtitle stream that was demuxed to its own file inside the job's working
    directory.

    `output_stream_index` is the position the subtitle takes in the remuxed
    output. It is assigned in extraction order, counts only streams that were kept
    and extracted, and keys the `-metadata:s:s:<index>` entries.
    """

    stream: SubtitleStream
    file_path: Path
    output_stream_index: int
