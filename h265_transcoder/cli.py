"""
Command-Line Interface (CLI) setup for the H.265 Transcoder.

This module uses Python's `argparse` to define and parse the command-line
arguments. Only the input and output directories are taken from the command line;
the encoder selection, preset, quality and subtitle languages come from the
configuration (see `config.video` and `config.user.yaml`).
"""
import argparse
from pathlib import Path
from typing import List, Optional

from .config.video import (
    DEFAULT_OUTPUT_DIR_NAME,
    NVENC_PRESETS,
    OUTPUT_EXTENSION,
    OUTPUT_NAME_SUFFIX,
    QSV_PRESETS,
    VIDEO_EXTENSIONS,
)

DESCRIPTION = """\
H.265 Hardware-Accelerated Video Transcoder

Transcodes video files to H.265 (HEVC) using hardware acceleration (NVIDIA NVENC
or Intel QSV), while preserving subtitles and audio tracks."""

EPILOG = f"""\
Configuration (config.user.yaml at the project root, section "transcode"):
  hw_accel         Hardware encoder: auto, nvenc, qsv (default: auto)
  preset           Encoding preset (default: medium)
                   NVENC: {', '.join(NVENC_PRESETS)}
                   QSV: {', '.join(QSV_PRESETS)}
  crf              Quality level: 0-51, lower is better quality (default: 23)
  subtitle_langs   Comma-separated language codes to keep (default: all)
                   Examples: "eng", "eng,spa", "eng,fre,ger"
                   Leave empty to keep all subtitles

Supported Formats:
  Video: {', '.join(ext.lstrip('.') for ext in VIDEO_EXTENSIONS)}
  Subtitles: SRT, ASS, SSA, WebVTT (bitmap subtitles may be skipped)

Requirements:
  - ffmpeg with NVENC and/or QSV support
  - ffprobe
  - NVIDIA GPU (for NVENC) or Intel CPU with Quick Sync (for QSV)

Examples:
  %(prog)s                          # Transcode current directory (auto-detect encoder)
  %(prog)s /path/to/videos          # Transcode specific directory
  %(prog)s ./videos ./output        # Specify input and output directories

Output:
  Files are saved as: [original_name]{OUTPUT_NAME_SUFFIX}{OUTPUT_EXTENSION}
"""


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description=DESCRIPTION,
        epilog=EPILOG,
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument(
        "input_dir", nargs="?", default=".", type=Path,
        help="Directory containing video files (default: current directory)",
    )
    parser.add_argument(
        "output_dir", nargs="?", default=Path(".") / DEFAULT_OUTPUT_DIR_NAME, type=Path,
        help=f"Directory for transcoded files (default: ./{DEFAULT_OUTPUT_DIR_NAME})",
    )
    parser.add_argument(
        "--log-level", type=str.upper, default="INFO",
        choices=["TRACE", "DEBUG", "INFO", "WARNING", "ERROR"],
        help="Set the logging level (default: INFO).",
    )
    return parser


def get_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    """
    Parses command-line arguments.

    Args:
        argv: Arguments to parse; `sys.argv[1:]` if None.

    Returns:
        argparse.Namespace: `input_dir` and `output_dir` as `Path` objects, and
                            `log_level`.
    """
    return build_parser().parse_args(argv)
