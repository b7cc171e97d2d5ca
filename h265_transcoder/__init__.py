"""
H.265 Hardware-Accelerated Batch Transcoder.

This package converts every video file in a directory to H.265 (HEVC) in an MP4
container, using an NVIDIA NVENC or Intel QSV hardware encoder through FFmpeg.
Audio is always stream-copied, and subtitle tracks are extracted, filtered by
language and muxed back in with their language/title metadata.

Subpackages:
    config: Compiled-in defaults and the optional `config.user.yaml` overrides.
    domain: Data models, job state and the exception hierarchy.
    services: One service per pipeline stage (capability resolution, stream
              inspection, subtitle extraction, video transcoding, remuxing).
    pipeline: The batch orchestrator that drives the per-file state machine.
    utils: FFmpeg command building/execution and formatting helpers.
"""

__version__ = "1.0.0"
