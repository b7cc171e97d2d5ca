"""
Common configuration settings used throughout the application.

This module contains the globally shared settings: the Loguru log format and the
location of the FFmpeg executables. It also loads the optional user configuration
from a `config.user.yaml` file at the project root, so that an installation can
point at a specific FFmpeg build or change the transcode defaults without
modifying the source code.

Example `config.user.yaml`:

    paths:
      ffmpeg_dir: /opt/ffmpeg/bin
    transcode:
      hw_accel: nvenc
      preset: slow
      crf: 26
      subtitle_langs: "eng,spa"
"""
from pathlib import Path
from typing import Any, Dict

import yaml
from loguru import logger

# --- User-Defined Configuration ---

PROJECT_ROOT = Path(__file__).resolve().parent.parent.parent
USER_CONFIG_PATH = PROJECT_ROOT / "config.user.yaml"


def load_user_config(config_path: Path) -> Dict[str, Any]:
    """
    Loads the user configuration YAML file.

    A missing file is not an error: the compiled-in defaults are used. A file that
    cannot be read or parsed is reported as a warning and ignored, for the same
    reason.

    Args:
        config_path: The path to the YAML file.

    Returns:
        The parsed mapping, or an empty dict if there is nothing usable.
    """
    if not config_path.is_file():
        logger.debug(f"User config '{config_path}' not found. Using built-in defaults.")
        return {}
    try:
        with config_path.open("r", encoding="utf-8") as f:
            user_config = yaml.safe_load(f)
    except (OSError, yaml.YAMLError) as e:
        logger.warning(f"Could not load or parse '{config_path}': {e}")
        return {}
    if not isinstance(user_config, dict):
        logger.warning(f"Ignoring '{config_path}': top level must be a mapping.")
        return {}
    return user_config


USER_CONFIG: Dict[str, Any] = load_user_config(USER_CONFIG_PATH)

# The directory containing the ffmpeg and ffprobe executables. If not configured,
# the executables are looked up on the system's PATH.
MODULE_PATH: Path | None = None

_paths_config = USER_CONFIG.get("paths") or {}
if isinstance(_paths_config, dict) and _paths_config.get("ffmpeg_dir"):
    MODULE_PATH = Path(_paths_config["ffmpeg_dir"])


# --- Logging Configuration ---

# The format string for the Loguru logger.
LOGGER_FORMAT = (
    "<green>{time:MM-DD HH:mm:ss}</green> | "
    "<level>{level: <8}</level> | "
    "<level>{message}</level>"
)

# Used at DEBUG/TRACE, where the call site is worth seeing.
LOGGER_FORMAT_VERBOSE = (
    "<green>{time:MM-DD HH:mm:ss}</green> | "
    "<level>{level: <8}</level> | "
    "<cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> | "
    "{process} - <level>{message}</level>"
)

# A separator line between per-file reports.
REPORT_SEPARATOR = "-" * 40

# Minimum number of seconds between two progress lines of a long ffmpeg step.
PROGRESS_LOG_INTERVAL = 30.0
