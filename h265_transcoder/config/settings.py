"""
The validated settings for a single transcode run.
"""
from dataclasses import dataclass
from typing import Any

from ..domain.exceptions import InvalidConfigurationException
from . import video


@dataclass(frozen=True)
class TranscodeSettings:
    """
    Transcode parameters shared by every job of a run.

    Attributes:
        hw_accel: "auto", "nvenc" or "qsv".
        preset: The encoder preset string, passed through to ffmpeg.
        crf: Quality level in CRF_MIN..CRF_MAX, lower is better quality.
        subtitle_langs: Comma-separated allow-list of subtitle language codes.
                        Empty keeps every subtitle stream.
    """

    hw_accel: str = video.HW_ACCEL_AUTO
    preset: str = "medium"
    crf: int = 23
    subtitle_langs: str = ""

    def __post_init__(self):
        if not isinstance(self.hw_accel, str) or self.hw_accel.strip().lower() not in video.HW_ACCEL_CHOICES:
            raise InvalidConfigurationException(
                f"Invalid hw_accel setting: {self.hw_accel!r}. "
                f"Valid options: {', '.join(video.HW_ACCEL_CHOICES)}"
            )
        object.__setattr__(self, "hw_accel", self.hw_accel.strip().lower())

        if not isinstance(self.preset, str) or not self.preset.strip():
            raise InvalidConfigurationException(f"Invalid preset setting: {self.preset!r}")

        # bool is an int subclass; "crf: yes" in YAML must not pass as 1.
        if isinstance(self.crf, bool) or not isinstance(self.crf, int):
            raise InvalidConfigurationException(f"Invalid CRF setting: {self.crf!r} is not an integer")
        if not video.CRF_MIN <= self.crf <= video.CRF_MAX:
            raise InvalidConfigurationException(
                f"Invalid CRF setting: {self.crf} (expected {video.CRF_MIN}-{video.CRF_MAX})"
            )

        if not isinstance(self.subtitle_langs, str):
            raise InvalidConfigurationException(
                f"Invalid subtitle_langs setting: {self.subtitle_langs!r} (expected a comma-separated string)"
            )

    @classmethod
    def load(cls, **overrides: Any) -> "TranscodeSettings":
        """
        Builds the settings from the compiled-in defaults in `config.video`
        (which already include any `config.user.yaml` overrides).

        Raises:
            InvalidConfigurationException: If any value is invalid.
        """
        values = {
            "hw_accel": video.HW_ACCEL,
            "preset": video.PRESET,
            "crf": video.CRF,
            "subtitle_langs": video.SUBTITLE_LANGS,
        }
        values.update(overrides)
        return cls(**values)
