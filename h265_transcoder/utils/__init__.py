"""
Utilities Package for the H.265 Transcoder.

Modules:
    - ffmpeg_utils.py: Runs external commands and builds ffmpeg command lines from
      structured `FfmpegRequest` objects.
    - format_utils.py: Human-readable sizes, percentages and extension checks.
    - module_updater.py: Locates and verifies the ffmpeg/ffprobe executables.
"""
