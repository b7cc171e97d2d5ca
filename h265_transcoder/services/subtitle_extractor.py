"""
Extracts the wanted subtitle streams of an input file, one file per stream.

Subtitles are pulled out before the video is re-encoded so they can be converted
to the MP4 text codec and muxed back with their language and title tags. Each
stream is handled on its own: a stream that fails to extract is dropped with a
warning and the job carries on with the others.
"""
from pathlib import Path
from typing import List, Sequence

from loguru import logger

from ..domain.media import ExtractedSubtitle, SubtitleStream
from ..domain.temp_models import remove_path
from ..utils.ffmpeg_utils import (
    FfmpegInput,
    FfmpegRequest,
    describe_failure,
    ffmpeg_succeeded,
    run_ffmpeg,
)


def parse_language_filter(subtitle_langs: str) -> List[str]:
    """
    Splits a comma-separated language allow-list.

    Entries are whitespace-trimmed and empty entries dropped, so "eng, spa," gives
    ["eng", "spa"] and "" gives [] (keep everything).
    """
    return [lang.strip() for lang in (subtitle_langs or "").split(",") if lang.strip()]


def is_language_wanted(stream: SubtitleStream, language_filter: Sequence[str]) -> bool:
    """
    Applies the language allow-list to a stream.

    With an empty allow-list every stream is kept, including untagged ones. With a
    non-empty list only exact, case-sensitive matches are kept; an untagged stream
    never matches.
    """
    if not language_filter:
        return True
    if not stream.language:
        return False
    return stream.language.strip() in language_filter


def build_extraction_request(input_path: Path, stream: SubtitleStream, output_path: Path) -> FfmpegRequest:
    """Demuxes exactly one subtitle stream (`0:s:<n>`) into `output_path`."""
    return FfmpegRequest(
        inputs=[FfmpegInput(input_path)],
        output=output_path,
        maps=[f"0:s:{stream.source_index}"],
    )


def extract_subtitles(
    input_path: Path,
    streams: Sequence[SubtitleStream],
    work_dir: Path,
    language_filter: Sequence[str] = (),
) -> List[ExtractedSubtitle]:
    """
    Extracts every wanted subtitle stream to its own file in `work_dir`.

    Streams are processed in source order. Streams rejected by the language filter
    or failing to extract are skipped; the rest receive contiguous
    `output_stream_index` values starting at 0.

    Args:
        input_path: The source video.
        streams: The file's subtitle streams, from the stream inspector.
        work_dir: The job's subtitle working directory (must exist).
        language_filter: Allow-list of language codes; empty keeps every stream.

    Returns:
        The extracted subtitles, in output order.
    """
    extracted: List[ExtractedSubtitle] = []
    if not streams:
        return extracted

    logger.info("  Extracting subtitles...")
    for stream in streams:
        if not is_language_wanted(stream, language_filter):
            logger.warning(
                f"  Skipping subtitle stream {stream.source_index} (language: {stream.language or 'unknown'})"
            )
            continue

        if stream.is_bitmap:
            logger.warning(
                f"  Warning: Bitmap subtitle detected ({stream.codec}) - may not be compatible with MP4/mov_text"
            )

        subtitle_file = work_dir / f"subtitle_{stream.source_index}.{stream.extracted_format}"
        res = run_ffmpeg(build_extraction_request(input_path, stream, subtitle_file), src_file_for_log=input_path)
        if not ffmpeg_succeeded(res) or not subtitle_file.is_file():
            logger.error(
                f"  Warning: Failed to extract subtitle stream {stream.source_index} ({stream.codec}): {describe_failure(res)}"
            )
            remove_path(subtitle_file)
            continue

        extracted.append(
            ExtractedSubtitle(stream=stream, file_path=subtitle_file, output_stream_index=len(extracted))
        )
        logger.debug(
            f"  Extracted subtitle stream {stream.source_index} -> output subtitle {len(extracted) - 1}"
            f" (language: {stream.language or 'none'}, title: {stream.title or 'none'})"
        )

    if extracted:
        logger.info(f"  Found {len(extracted)} subtitle stream(s)")
    else:
        logger.warning("  Warning: No subtitles could be extracted")
    return extracted
