"""
Builds the final output from the intermediate video and the extracted subtitles.

Outcomes:
- No subtitles: the intermediate is promoted (renamed) to the output path.
- Subtitles muxed: `JobOutcome.SUCCEEDED`.
- Remux exited non-zero or could not start, while the intermediate is intact:
  the intermediate is promoted and the job is
  `JobOutcome.SUCCEEDED_WITHOUT_SUBTITLES`.
- Remux reported success but left an empty or missing file, or nothing usable
  is left: `OutputValidationException`.
"""
import shutil
from pathlib import Path
from typing import List, Sequence, Tuple

from loguru import logger

from ..config.video import OUTPUT_SUBTITLE_CODEC
from ..domain.exceptions import OutputValidationException
from ..domain.media import ExtractedSubtitle
from ..domain.results import JobOutcome
from ..domain.temp_models import TranscodeJob, remove_path
from ..utils.ffmpeg_utils import (
    FfmpegInput,
    FfmpegRequest,
    StreamMetadata,
    describe_failure,
    ffmpeg_succeeded,
    run_ffmpeg,
)


def is_valid_output(path: Path) -> bool:
    """An output is valid when it exists as a regular, non-empty file."""
    return path.is_file() and path.stat().st_size > 0


def build_remux_request(job: TranscodeJob, subtitles: Sequence[ExtractedSubtitle]) -> FfmpegRequest:
    """
    Describes the remux of the intermediate video with every subtitle file.

    Input 0 is the intermediate; subtitle `k` (by `output_stream_index`) is input
    `k + 1` and becomes output subtitle stream `k`, which is where its language
    and title tags are attached.
    """
    ordered = sorted(subtitles, key=lambda s: s.output_stream_index)
    inputs = [FfmpegInput(job.temp_video_path)]
    maps = ["0:v", "0:a?"]
    metadata: List[StreamMetadata] = []
    for subtitle in ordered:
        inputs.append(FfmpegInput(subtitle.file_path))
        maps.append(f"{len(inputs) - 1}:0")
        if subtitle.stream.language:
            metadata.append(StreamMetadata("s", subtitle.output_stream_index, "language", subtitle.stream.language))
        if subtitle.stream.title:
            metadata.append(StreamMetadata("s", subtitle.output_stream_index, "title", subtitle.stream.title))

    return FfmpegRequest(
        inputs=inputs,
        output=job.output_path,
        maps=maps,
        codecs={"v": "copy", "a": "copy", "s": OUTPUT_SUBTITLE_CODEC},
        metadata=metadata,
        output_options=["-movflags", "+faststart"],
        overwrite=False,
        report_progress=True,
    )


def promote_intermediate(job: TranscodeJob):
    """
    Moves the intermediate video to the output path and validates it.

    Raises:
        OutputValidationException: If the intermediate is missing, or the promoted
                                   file is empty (it is removed in that case).
    """
    if not job.temp_video_path.is_file():
        raise OutputValidationException("intermediate video is missing")
    shutil.move(str(job.temp_video_path), str(job.output_path))
    if not is_valid_output(job.output_path):
        remove_path(job.output_path)
        raise OutputValidationException("output file invalid")


def remux(job: TranscodeJob, subtitles: Sequence[ExtractedSubtitle]) -> Tuple[JobOutcome, int]:
    """
    Produces the final output for a job.

    Args:
        job: The job whose intermediate video has been written.
        subtitles: The extracted subtitles, possibly empty.

    Returns:
        (outcome, number of subtitle streams in the output).

    Raises:
        OutputValidationException: If a successful remux left an invalid file, or
                                   no valid output could be produced.
    """
    if not subtitles:
        promote_intermediate(job)
        return JobOutcome.SUCCEEDED, 0

    logger.info("  Adding subtitles to transcoded file...")
    res = run_ffmpeg(build_remux_request(job, subtitles), src_file_for_log=job.input_path)
    if ffmpeg_succeeded(res):
        if is_valid_output(job.output_path):
            return JobOutcome.SUCCEEDED, len(subtitles)
        remove_path(job.output_path)
        raise OutputValidationException("output file invalid")

    reason = describe_failure(res)
    logger.error(f"  Adding subtitles failed for {job.filename}: {reason}")
    remove_path(job.output_path)

    if not job.temp_video_path.is_file():
        logger.error("  Temp file missing, marking as failed")
        raise OutputValidationException(f"remux failed ({reason}) and the intermediate video is missing")

    promote_intermediate(job)
    logger.warning("  Saved without subtitles")
    return JobOutcome.SUCCEEDED_WITHOUT_SUBTITLES, 0
