"""
Configuration settings related to video processing.

This module defines the container extensions that are picked up from the input
directory, the output naming scheme, the hardware encoder table, the subtitle
format table and the transcode defaults (overridable from `config.user.yaml`).
"""
from .common import USER_CONFIG

# --- Input Discovery ---
# Matched case-insensitively against the file suffix.
VIDEO_EXTENSIONS = (
    ".mp4", ".mkv", ".avi", ".mov", ".flv", ".wmv", ".webm", ".m4v", ".mpg", ".mpeg",
)

# --- Output Naming ---
DEFAULT_OUTPUT_DIR_NAME = "transcoded"
OUTPUT_NAME_SUFFIX = "_h265"
OUTPUT_EXTENSION = ".mp4"
TEMP_VIDEO_SUFFIX = "_temp"
TEMP_SUBTITLE_DIR_PREFIX = ".subtitles_"

# --- Hardware Encoders ---
# Probed in this order when HW_ACCEL is "auto".
HW_ACCEL_AUTO = "auto"
HW_ACCEL_NVENC = "nvenc"
HW_ACCEL_QSV = "qsv"
HW_ACCEL_CHOICES = (HW_ACCEL_AUTO, HW_ACCEL_NVENC, HW_ACCEL_QSV)

NVENC_ENCODER = "hevc_nvenc"
NVENC_HWACCEL_DEVICE = "cuda"
QSV_ENCODER = "hevc_qsv"
QSV_HWACCEL_DEVICE = "qsv"

NVENC_PRESETS = ("slow", "medium", "fast", "hp", "hq", "bd", "ll", "llhq", "llhp", "lossless")
QSV_PRESETS = ("veryslow", "slower", "slow", "medium", "fast", "faster", "veryfast")

# --- Quality ---
CRF_MIN = 0
CRF_MAX = 51

# --- Subtitles ---
# codec_name -> (file extension of the extracted stream, is bitmap)
SUBTITLE_CODEC_FORMATS = {
    "ass": ("ass", False),
    "ssa": ("ass", False),
    "subrip": ("srt", False),
    "srt": ("srt", False),
    "webvtt": ("vtt", False),
    "dvd_subtitle": ("sub", True),
    "dvdsub": ("sub", True),
    "hdmv_pgs_subtitle": ("sup", True),
    "pgssub": ("sup", True),
}
DEFAULT_SUBTITLE_FORMAT = ("srt", False)

# The only subtitle codec the MP4 container carries as text.
OUTPUT_SUBTITLE_CODEC = "mov_text"

# --- Transcode Defaults ---
HW_ACCEL = "auto"
PRESET = "medium"
CRF = 23
# Comma-separated language codes (e.g. "eng,spa"); empty keeps every subtitle.
SUBTITLE_LANGS = ""

_transcode_config = USER_CONFIG.get("transcode") or {}
if isinstance(_transcode_config, dict):
    HW_ACCEL = _transcode_config.get("hw_accel", HW_ACCEL)
    PRESET = _transcode_config.get("preset", PRESET)
    CRF = _transcode_config.get("crf", CRF)
    SUBTITLE_LANGS = _transcode_config.get("subtitle_langs", SUBTITLE_LANGS) or ""
