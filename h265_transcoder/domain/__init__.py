"""
This package contains the core domain models of the H.265 Transcoder.

The domain layer holds the data that flows through a transcode run and is kept
free of any FFmpeg invocation, so that the services and the pipeline can be
tested against plain objects.

Modules:
    exceptions.py: The exception hierarchy, split into setup-phase errors that
                   abort the run and per-job errors that fail a single file.
    media.py: `EncoderProfile`, `SubtitleStream` and `ExtractedSubtitle`.
    temp_models.py: `TranscodeJob` (the paths of one input file) and the
                    registry that guarantees temporary artifacts are removed.
    results.py: The per-job state machine outcomes and the `BatchResult`
                accumulator.
"""
