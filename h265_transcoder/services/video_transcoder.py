"""
Re-encodes the video stream of an input file with the selected hardware encoder.

The result is a video-and-audio-only intermediate; subtitles are added back by the
remuxer. Audio streams are copied untouched, and a file without audio is fine.
"""
from loguru import logger

from ..domain.exceptions import VideoTranscodeException
from ..domain.media import EncoderProfile
from ..domain.temp_models import TranscodeJob, remove_path
from ..utils.ffmpeg_utils import (
    FfmpegInput,
    FfmpegRequest,
    describe_failure,
    ffmpeg_succeeded,
    run_ffmpeg,
)


def build_transcode_request(job: TranscodeJob, profile: EncoderProfile) -> FfmpegRequest:
    """
    Describes the hardware encode of `job.input_path` into the intermediate file.

    The first video stream is encoded with the profile's encoder, preset and rate
    control; every audio stream is mapped optionally (`0:a?`) and stream-copied.
    """
    return FfmpegRequest(
        inputs=[FfmpegInput(job.input_path, options=["-hwaccel", profile.hardware_device_tag])],
        output=job.temp_video_path,
        maps=["0:v:0", "0:a?"],
        encoder_args=profile.encoder_args(),
        codecs={"a": "copy"},
        overwrite=True,
        report_progress=True,
    )


def transcode_video(job: TranscodeJob, profile: EncoderProfile):
    """
    Runs the hardware encode for a job.

    Raises:
        VideoTranscodeException: If ffmpeg fails, cannot be started, or leaves no
                                 intermediate file. Any partial intermediate is
                                 removed first.
    """
    logger.info("  Transcoding video...")
    res = run_ffmpeg(build_transcode_request(job, profile), src_file_for_log=job.input_path)

    if not ffmpeg_succeeded(res):
        remove_path(job.temp_video_path)
        raise VideoTranscodeException(f"{profile.codec_identifier} encode failed ({describe_failure(res)})")

    if not job.temp_video_path.is_file():
        raise VideoTranscodeException("ffmpeg reported success but the intermediate video is missing")

    logger.debug(f"  Intermediate video written: {job.temp_video_path.name}")
