"""
Outcome models for a single job and for the whole batch.
"""
from dataclasses import dataclass
from enum import Enum

from .temp_models import TranscodeJob


class JobStage(str, Enum):
    """Pipeline stages, in execution order."""

    PENDING = "pending"
    EXTRACTING = "extracting"
    TRANSCODING = "transcoding"
    REMUXING = "remuxing"


class JobOutcome(str, Enum):
    """Terminal states of a job."""

    SUCCEEDED = "succeeded"
    SUCCEEDED_WITHOUT_SUBTITLES = "succeeded_without_subtitles"
    SKIPPED = "skipped"
    FAILED = "failed"

    @property
    def is_success(self) -> bool:
        return self in (JobOutcome.SUCCEEDED, JobOutcome.SUCCEEDED_WITHOUT_SUBTITLES)


@dataclass(frozen=True)
class JobResult:
    """
    What happened to one input file.

    Attributes:
        job: The job the result belongs to.
        outcome: The terminal state.
        stage: The last stage the job entered.
        subtitle_count: Subtitle streams present in the final output.
        original_bytes: Size of the input file (0 unless the job succeeded).
        output_bytes: Size of the final output (0 unless the job succeeded).
        message: Short reason for degraded or failed outcomes.
    """

    job: TranscodeJob
    outcome: JobOutcome
    stage: JobStage = JobStage.PENDING
    subtitle_count: int = 0
    original_bytes: int = 0
    output_bytes: int = 0
    message: str = ""


@dataclass
class BatchResult:
    """
    Counters for a batch run.

    Owned by the orchestrator and updated only through `record()`, once per job,
    after the job has returned. Byte totals cover successful jobs only.
    """

    total_files: int = 0
    successful: int = 0
    failed: int = 0
    skipped: int = 0
    total_original_bytes: int = 0
    total_output_bytes: int = 0

    def record(self, result: JobResult):
        self.total_files += 1
        if result.outcome.is_success:
            self.successful += 1
            self.total_original_bytes += result.original_bytes
            self.total_output_bytes += result.output_bytes
        elif result.outcome is JobOutcome.SKIPPED:
            self.skipped += 1
        else:
            self.failed += 1

    @property
    def saved_bytes(self) -> int:
        """Bytes saved over successful jobs; negative if outputs grew."""
        return self.total_original_bytes - self.total_output_bytes

    @property
    def output_percent(self) -> int:
        """Output size as an integer percentage of the original size."""
        if self.total_original_bytes <= 0:
            return 0
        return 100 * self.total_output_bytes // self.total_original_bytes

    @property
    def reduction_percent(self) -> int:
        return 100 - self.output_percent if self.total_original_bytes > 0 else 0
