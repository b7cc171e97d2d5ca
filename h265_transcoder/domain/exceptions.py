"""
Defines custom exception types for the H.265 Transcoder.

The hierarchy mirrors how far a failure is allowed to travel:

- `SetupException` and its subclasses abort the whole run before any file is
  processed (missing tools, no usable hardware encoder, bad configuration).
- `JobException` and its subclasses end a single file's pipeline. They are caught
  at the job boundary by the orchestrator, which records the job as failed and
  moves on to the next file.

All custom exceptions inherit from the base `TranscoderException`.
"""


class TranscoderException(Exception):
    """Base class for all custom exceptions in the H.265 Transcoder."""

    pass


# --- Setup Phase Exceptions ---
class SetupException(TranscoderException):
    """Base class for fatal errors raised before any file is processed."""

    pass


class ToolNotFoundException(SetupException):
    """
    Raised when ffmpeg or ffprobe cannot be executed.

    Both tools are required: ffprobe for stream inspection and ffmpeg for every
    extraction, encode and remux step.
    """

    pass


class EncoderUnavailableException(SetupException):
    """
    Raised when no hardware HEVC encoder is registered with ffmpeg.

    In `auto` mode this means neither NVENC nor QSV is available; in explicit mode
    it means the requested backend is missing from ffmpeg's encoder list.
    """

    pass


class InvalidConfigurationException(SetupException):
    """Raised when a configuration value is out of range or unrecognized."""

    pass


# --- Per-Job Exceptions ---
class JobException(TranscoderException):
    """Base class for errors that fail a single transcode job."""

    pass


class VideoTranscodeException(JobException):
    """
    Raised when the hardware re-encode of the video stream fails.

    This is fatal to the job: no remux is attempted and no output is produced.
    """

    pass


class OutputValidationException(JobException):
    """Raised when the final output is missing or empty after the last stage."""

    pass
