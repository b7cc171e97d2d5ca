"""
Configuration Package for the H.265 Transcoder.

This package centralizes the static configuration of the application. The
transcoder has no configuration flags on the command line: the encoder selection,
preset, quality level and subtitle language list are compiled-in defaults, which
can be overridden per installation through a `config.user.yaml` file at the
project root.

This package includes:
- common.py: logging format, user config loading and external tool locations.
- video.py: container extensions, output naming, encoder and subtitle tables,
  and the transcode defaults.
- settings.py: the validated `TranscodeSettings` used by a single run.
"""
