"""
Selects the hardware HEVC encoder for a run.

ffmpeg's encoder registry (`ffmpeg -encoders`) is queried once, and the requested
backend is checked against it. In `auto` mode NVENC is preferred over QSV.
"""
from typing import Optional

from loguru import logger

from ..config.video import (
    HW_ACCEL_AUTO,
    HW_ACCEL_CHOICES,
    HW_ACCEL_NVENC,
    HW_ACCEL_QSV,
    NVENC_ENCODER,
    NVENC_HWACCEL_DEVICE,
    NVENC_PRESETS,
    QSV_ENCODER,
    QSV_HWACCEL_DEVICE,
    QSV_PRESETS,
)
from ..domain.exceptions import EncoderUnavailableException, InvalidConfigurationException
from ..domain.media import EncoderName, EncoderProfile
from ..utils.ffmpeg_utils import run_cmd
from ..utils.module_updater import Modules

_BACKENDS = {
    HW_ACCEL_NVENC: (EncoderName.NVENC, NVENC_ENCODER, NVENC_HWACCEL_DEVICE, NVENC_PRESETS),
    HW_ACCEL_QSV: (EncoderName.QSV, QSV_ENCODER, QSV_HWACCEL_DEVICE, QSV_PRESETS),
}

_MISSING_BACKEND_HINTS = {
    HW_ACCEL_NVENC: (
        "Make sure you have:\n"
        "  1. NVIDIA GPU with NVENC support\n"
        "  2. Proper NVIDIA drivers installed\n"
        "  3. ffmpeg compiled with NVENC support"
    ),
    HW_ACCEL_QSV: (
        "Make sure you have:\n"
        "  1. Intel CPU with Quick Sync Video support\n"
        "  2. ffmpeg compiled with QSV support\n"
        "  3. Proper Intel graphics drivers"
    ),
    HW_ACCEL_AUTO: (
        "Make sure you have:\n"
        "  - NVIDIA GPU with NVENC support, OR\n"
        "  - Intel CPU with Quick Sync Video support\n"
        "  - ffmpeg compiled with hardware encoder support"
    ),
}


def list_registered_encoders() -> str:
    """
    Returns the raw output of `ffmpeg -hide_banner -encoders`.

    An ffmpeg that cannot list its encoders is treated as having none.
    """
    res = run_cmd([Modules.ffmpeg_path(), "-hide_banner", "-encoders"])
    if res is None or res.returncode != 0:
        logger.warning("Could not query ffmpeg's encoder list.")
        return ""
    return res.stdout or ""


def is_encoder_registered(encoder_listing: str, codec_identifier: str) -> bool:
    # Lines look like " V....D hevc_nvenc   NVIDIA NVENC hevc encoder (codec hevc)".
    return any(codec_identifier in line.split() for line in encoder_listing.splitlines())


def build_profile(backend: str, preset: str, quality: int) -> EncoderProfile:
    """
    Builds the `EncoderProfile` for a backend.

    The quality level means different things to each encoder: NVENC uses
    variable-bitrate constant-quality mode with no bitrate cap, QSV uses a global
    quality value.
    """
    name, codec_identifier, device_tag, known_presets = _BACKENDS[backend]
    if preset not in known_presets:
        logger.warning(
            f"Preset '{preset}' is not a known {name.value} preset ({', '.join(known_presets)}); passing it through."
        )
    if name is EncoderName.NVENC:
        rate_control_params = {"rc": "vbr", "cq": str(quality), "b:v": "0"}
    else:
        rate_control_params = {"global_quality": str(quality)}
    return EncoderProfile(
        name=name,
        codec_identifier=codec_identifier,
        hardware_device_tag=device_tag,
        preset=preset,
        quality=quality,
        rate_control_params=rate_control_params,
    )


def resolve_encoder(mode: str, preset: str, quality: int, encoder_listing: Optional[str] = None) -> EncoderProfile:
    """
    Resolves the hardware encoder for the run.

    Args:
        mode: "auto", "nvenc" or "qsv".
        preset: The encoder preset.
        quality: The quality level (CRF-like, lower is better).
        encoder_listing: Pre-fetched `ffmpeg -encoders` output; queried if None.

    Returns:
        The selected `EncoderProfile`.

    Raises:
        InvalidConfigurationException: If `mode` is not a known selector.
        EncoderUnavailableException: If the requested (or, in auto mode, any)
                                     hardware encoder is not registered.
    """
    mode = (mode or "").strip().lower()
    if mode not in HW_ACCEL_CHOICES:
        raise InvalidConfigurationException(
            f"Invalid HW_ACCEL setting: {mode or '(empty)'}. Valid options: {', '.join(HW_ACCEL_CHOICES)}"
        )

    if encoder_listing is None:
        encoder_listing = list_registered_encoders()

    if mode == HW_ACCEL_AUTO:
        for backend in (HW_ACCEL_NVENC, HW_ACCEL_QSV):
            codec_identifier = _BACKENDS[backend][1]
            if is_encoder_registered(encoder_listing, codec_identifier):
                profile = build_profile(backend, preset, quality)
                logger.success(f"Detected: {profile.display_name}")
                return profile
        raise EncoderUnavailableException(
            f"No hardware encoder available (NVENC or QSV)\n{_MISSING_BACKEND_HINTS[HW_ACCEL_AUTO]}"
        )

    name, codec_identifier = _BACKENDS[mode][0], _BACKENDS[mode][1]
    if not is_encoder_registered(encoder_listing, codec_identifier):
        raise EncoderUnavailableException(
            f"{name.value} ({codec_identifier}) encoder not available\n{_MISSING_BACKEND_HINTS[mode]}"
        )
    profile = build_profile(mode, preset, quality)
    logger.success(f"Using: {profile.display_name}")
    return profile
