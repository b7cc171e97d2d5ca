"""
The batch orchestrator and the per-file job state machine.

Files are processed one at a time, in discovery order. Each job moves through
`EXTRACTING -> TRANSCODING -> REMUXING` and ends as `SUCCEEDED`,
`SUCCEEDED_WITHOUT_SUBTITLES`, `SKIPPED` (output already present) or `FAILED`.
No job failure escapes `TranscodeJobRunner.run`; the batch always attempts every
discovered file, and `BatchResult` is updated only between jobs.
"""
import signal
import sys
from pathlib import Path
from typing import Callable, List, Optional, Sequence

from loguru import logger

from ..config.common import REPORT_SEPARATOR
from ..config.settings import TranscodeSettings
from ..config.video import VIDEO_EXTENSIONS
from ..domain.exceptions import JobException
from ..domain.media import EncoderProfile
from ..domain.results import BatchResult, JobOutcome, JobResult, JobStage
from ..domain.temp_models import ACTIVE_ARTIFACTS, TempArtifactRegistry, TranscodeJob, remove_path
from ..services.remuxer import remux
from ..services.stream_inspector import inspect_subtitle_streams
from ..services.subtitle_extractor import extract_subtitles, parse_language_filter
from ..services.video_transcoder import transcode_video
from ..utils.format_utils import contains_any_extensions, formatted_size, size_percent

INTERRUPTED_EXIT_CODE = 130


def discover_video_files(input_dir: Path) -> List[Path]:
    """
    Lists the video files directly inside `input_dir`.

    The scan is not recursive. Extensions are matched case-insensitively, and
    hidden files are ignored so that intermediates of another run are never
    picked up as inputs.
    """
    if not input_dir.is_dir():
        return []
    return sorted(
        path
        for path in input_dir.iterdir()
        if path.is_file() and not path.name.startswith(".") and contains_any_extensions(path, VIDEO_EXTENSIONS)
    )


def _file_size(path: Path) -> int:
    try:
        return path.stat().st_size
    except OSError as e:
        logger.warning(f"Could not read size of {path}: {e}")
        return 0


def install_interrupt_handler(registry: TempArtifactRegistry = ACTIVE_ARTIFACTS) -> Callable:
    """
    Installs a SIGINT/SIGTERM handler that removes in-flight temporary artifacts
    and exits with status 130.

    Returns:
        The installed handler.
    """

    def _handle_interrupt(signum, frame):
        logger.warning("Script interrupted. Cleaning up temporary files...")
        removed = registry.cleanup_all()
        logger.debug(f"Removed {removed} temporary path(s).")
        sys.exit(INTERRUPTED_EXIT_CODE)

    signal.signal(signal.SIGINT, _handle_interrupt)
    signal.signal(signal.SIGTERM, _handle_interrupt)
    return _handle_interrupt


class TranscodeJobRunner:
    """
    Runs the pipeline for one file at a time.

    Attributes:
        profile: The hardware encoder resolved for the run.
        language_filter: Subtitle language allow-list; empty keeps all.
        registry: Where the job's temporary artifacts are registered.
    """

    def __init__(
        self,
        profile: EncoderProfile,
        language_filter: Sequence[str] = (),
        registry: TempArtifactRegistry = ACTIVE_ARTIFACTS,
    ):
        self.profile = profile
        self.language_filter = list(language_filter)
        self.registry = registry

    def run(self, job: TranscodeJob) -> JobResult:
        """
        Transcodes one file and reports how it ended.

        The job's intermediate video and subtitle directory are removed before
        this method returns, whatever the outcome.
        """
        if job.output_path.exists():
            logger.warning(f"Skipping: {job.filename} (already transcoded)")
            return JobResult(job=job, outcome=JobOutcome.SKIPPED)

        logger.info(f"Processing: {job.filename}")
        stage = JobStage.PENDING
        try:
            with self.registry.guard(job.temp_video_path, job.temp_subtitle_dir):
                stage = JobStage.EXTRACTING
                job.temp_subtitle_dir.mkdir(parents=True, exist_ok=True)
                streams = inspect_subtitle_streams(job.input_path)
                subtitles = extract_subtitles(job.input_path, streams, job.temp_subtitle_dir, self.language_filter)

                stage = JobStage.TRANSCODING
                transcode_video(job, self.profile)

                stage = JobStage.REMUXING
                with self.registry.until_complete(job.output_path):
                    outcome, subtitle_count = remux(job, subtitles)
        except JobException as e:
            # The output did not exist when the job started, so anything there now is ours.
            remove_path(job.output_path)
            logger.error(f"✗ Failed: {job.filename} ({stage.value}): {e}")
            return JobResult(job=job, outcome=JobOutcome.FAILED, stage=stage, message=str(e))
        except Exception as e:
            remove_path(job.output_path)
            logger.exception(f"✗ Failed: {job.filename} ({stage.value}): unexpected {type(e).__name__}: {e}")
            return JobResult(job=job, outcome=JobOutcome.FAILED, stage=stage, message=str(e))

        result = JobResult(
            job=job,
            outcome=outcome,
            stage=stage,
            subtitle_count=subtitle_count,
            original_bytes=_file_size(job.input_path),
            output_bytes=_file_size(job.output_path),
        )
        self._report_success(result)
        return result

    @staticmethod
    def _report_success(result: JobResult):
        if result.outcome is JobOutcome.SUCCEEDED_WITHOUT_SUBTITLES:
            detail = "subtitles dropped"
        elif result.subtitle_count:
            detail = f"with {result.subtitle_count} subtitle(s)"
        else:
            detail = "no subtitles"
        logger.success(f"✓ Success: {result.job.filename} ({detail})")
        logger.info(
            f"  Size: {formatted_size(result.original_bytes)} → {formatted_size(result.output_bytes)} "
            f"({size_percent(result.output_bytes, result.original_bytes)}%)"
        )


class BatchTranscodePipeline:
    """
    Drives the transcode of every video file in a directory.

    Attributes:
        input_dir: Directory scanned (non-recursively) for inputs.
        output_dir: Directory receiving outputs and temporary artifacts.
        settings: The run's transcode settings.
        profile: The resolved hardware encoder.
        batch_result: Counters for the run.
    """

    def __init__(
        self,
        input_dir: Path,
        output_dir: Path,
        settings: TranscodeSettings,
        profile: EncoderProfile,
        registry: TempArtifactRegistry = ACTIVE_ARTIFACTS,
    ):
        self.input_dir = input_dir
        self.output_dir = output_dir
        self.settings = settings
        self.profile = profile
        self.runner = TranscodeJobRunner(profile, parse_language_filter(settings.subtitle_langs), registry)
        self.batch_result = BatchResult()
        self.results: List[JobResult] = []

    def log_banner(self):
        logger.success("H.265 Hardware-Accelerated Transcoder")
        logger.info(f"Encoder: {self.profile.name.value}")
        logger.info(f"Input directory: {self.input_dir}")
        logger.info(f"Output directory: {self.output_dir}")
        logger.info(f"Preset: {self.profile.preset}")
        logger.info(f"CRF: {self.profile.quality}")
        language_filter = parse_language_filter(self.settings.subtitle_langs)
        logger.info(f"Subtitle languages: {','.join(language_filter) if language_filter else 'all'}")
        logger.info(REPORT_SEPARATOR)

    def discover(self) -> List[Path]:
        logger.info(f"Searching for video files in: {self.input_dir}")
        files = discover_video_files(self.input_dir)
        for path in files:
            logger.info(f"Found: {path.name}")
        logger.info(f"Total files found: {len(files)}")
        return files

    def run(self, files: Optional[Sequence[Path]] = None) -> BatchResult:
        """
        Processes every discovered file sequentially and logs the summary.

        Args:
            files: Inputs to process; discovered from `input_dir` if None.

        Returns:
            The accumulated `BatchResult`.
        """
        if files is None:
            files = self.discover()

        for path in files:
            job = TranscodeJob.for_input(path, self.output_dir)
            result = self.runner.run(job)
            self.results.append(result)
            self.batch_result.record(result)
            logger.info(REPORT_SEPARATOR)

        self.log_summary()
        return self.batch_result

    def log_summary(self):
        batch = self.batch_result
        logger.info(f"Processing complete. Total files processed: {batch.total_files}")
        if batch.total_files == 0:
            logger.warning(f"No video files found in: {self.input_dir}")
            logger.info(f"Supported extensions: {' '.join(ext.lstrip('.') for ext in VIDEO_EXTENSIONS)}")

        logger.success("Transcoding Complete!")
        logger.info(f"Total files processed: {batch.total_files}")
        logger.success(f"Successful: {batch.successful}")
        if batch.skipped:
            logger.info(f"Skipped: {batch.skipped}")
        if batch.failed:
            logger.error(f"Failed: {batch.failed}")

        if batch.total_original_bytes > 0:
            logger.info(REPORT_SEPARATOR)
            logger.info("Storage Summary:")
            logger.info(f"  Original total:   {formatted_size(batch.total_original_bytes)}")
            logger.info(f"  Transcoded total: {formatted_size(batch.total_output_bytes)}")
            if batch.saved_bytes > 0:
                logger.success(
                    f"  Space saved:      {formatted_size(batch.saved_bytes)} ({batch.reduction_percent}% reduction)"
                )
            else:
                logger.warning(f"  Size increased:   {formatted_size(-batch.saved_bytes)}")
