"""
Main entry point for the H.265 Transcoder.

Setup runs first and may abort the run (exit status 1): verifying ffmpeg/ffprobe,
validating the configuration and resolving the hardware encoder. Only then is the
output directory created and the batch started. A missing input directory is
reported as containing no video files. Individual file failures are reported in
the summary and do not change the exit status; an interrupt exits with 130 after
removing temporary files.
"""

import sys
from typing import List, Optional

from loguru import logger

from .cli import get_args
from .config.common import LOGGER_FORMAT, LOGGER_FORMAT_VERBOSE
from .config.settings import TranscodeSettings
from .domain.exceptions import SetupException
from .domain.temp_models import ACTIVE_ARTIFACTS
from .pipeline.transcode_pipeline import BatchTranscodePipeline, install_interrupt_handler
from .services.capability_resolver import resolve_encoder
from .utils.module_updater import Modules

SETUP_ERROR_EXIT_CODE = 1


def configure_logger(log_level: str = "INFO"):
    logger.remove()
    log_format = LOGGER_FORMAT_VERBOSE if log_level in ("TRACE", "DEBUG") else LOGGER_FORMAT
    logger.add(sys.stderr, level=log_level, format=log_format)


def main(argv: Optional[List[str]] = None) -> int:
    """
    Runs the transcoder.

    Args:
        argv: Command-line arguments; `sys.argv[1:]` if None.

    Returns:
        The process exit status.
    """
    args = get_args(argv)
    configure_logger(args.log_level)
    logger.debug(f"Parsed arguments: {args}")

    install_interrupt_handler(ACTIVE_ARTIFACTS)

    input_dir = args.input_dir
    output_dir = args.output_dir
    try:
        Modules.verify_tools()
        settings = TranscodeSettings.load()
        profile = resolve_encoder(settings.hw_accel, settings.preset, settings.crf)
    except SetupException as e:
        logger.error(f"Error: {e}")
        return SETUP_ERROR_EXIT_CODE

    try:
        output_dir.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        logger.error(f"Error: Could not create output directory {output_dir}: {e}")
        return SETUP_ERROR_EXIT_CODE

    pipeline = BatchTranscodePipeline(input_dir, output_dir, settings, profile)
    pipeline.log_banner()
    pipeline.run()

    return 0


if __name__ == "__main__":
    sys.exit(main())
