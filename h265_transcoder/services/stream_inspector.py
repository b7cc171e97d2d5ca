"""
Reads the subtitle stream layout of an input file with ffprobe.
"""
from pathlib import Path
from pprint import pformat
from typing import List, Optional

import ffmpeg
from loguru import logger

from ..config.video import DEFAULT_SUBTITLE_FORMAT, SUBTITLE_CODEC_FORMATS
from ..domain.media import SubtitleStream
from ..utils.module_updater import Modules


def subtitle_format_for_codec(codec: str) -> tuple:
    """
    Maps an ffprobe subtitle codec_name to the format it is extracted as.

    Returns:
        (file extension, is_bitmap). Unknown codecs fall back to SRT.
    """
    return SUBTITLE_CODEC_FORMATS.get((codec or "").lower(), DEFAULT_SUBTITLE_FORMAT)


def _tag(stream: dict, key: str) -> Optional[str]:
    value = (stream.get("tags") or {}).get(key)
    if value is None:
        return None
    value = str(value).strip()
    return value or None


def inspect_subtitle_streams(path: Path) -> List[SubtitleStream]:
    """
    Lists the subtitle streams of a media file in container order.

    The position of a stream in the returned list is its subtitle-relative index
    (`0:s:<n>`). A file that cannot be probed is treated as having no subtitles,
    so the job can still produce a subtitle-less output.

    Args:
        path: The media file.

    Returns:
        The subtitle streams, possibly empty.
    """
    try:
        probe = ffmpeg.probe(str(path), cmd=Modules.ffprobe_path())
    except ffmpeg.Error as e:
        stderr = e.stderr.decode("utf-8", errors="replace") if isinstance(e.stderr, bytes) else e.stderr
        logger.warning(f"  Could not read stream info for {path.name}, continuing without subtitles: {stderr}")
        return []
    except (OSError, ValueError) as e:
        logger.warning(f"  Could not read stream info for {path.name}, continuing without subtitles: {e}")
        return []

    subtitle_streams = []
    for stream in probe.get("streams", []):
        if stream.get("codec_type") != "subtitle":
            continue
        codec = str(stream.get("codec_name") or "unknown")
        extracted_format, is_bitmap = subtitle_format_for_codec(codec)
        subtitle_streams.append(
            SubtitleStream(
                source_index=len(subtitle_streams),
                codec=codec,
                language=_tag(stream, "language"),
                title=_tag(stream, "title"),
                extracted_format=extracted_format,
                is_bitmap=is_bitmap,
            )
        )

    logger.trace(f"Subtitle streams for {path.name}:\n{pformat(subtitle_streams)}")
    return subtitle_streams
