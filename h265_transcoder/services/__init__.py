"""
Services Package for the H.265 Transcoder.

Each service implements one stage of the per-file pipeline and talks to FFmpeg
through `utils.ffmpeg_utils`:

- **capability_resolver**: picks the hardware encoder (NVENC or QSV) once per run.
- **stream_inspector**: lists a file's subtitle streams with ffprobe.
- **subtitle_extractor**: applies the language filter and demuxes each wanted
  subtitle stream to its own file.
- **video_transcoder**: re-encodes the video with the hardware encoder into an
  intermediate file, copying audio.
- **remuxer**: muxes the subtitles back in, falling back to the subtitle-less
  intermediate when that fails.

Stages return plain domain objects or raise `JobException` subclasses; deciding
what a failure means for the batch is left to the pipeline.
"""
