"""
Defines the per-file job model and the bookkeeping of its temporary artifacts.

Every job creates two temporary artifacts inside the output directory: an
intermediate (video-only) MP4 and a working directory holding the extracted
subtitle files. Both must be gone when the job returns, whatever the outcome, and
also when the process is interrupted mid-job. `TempArtifactRegistry` tracks the
artifacts that currently exist on disk so that a signal handler can sweep them.
"""

import os
import shutil
from contextlib import contextmanager
from dataclasses import dataclass
from pathlib import Path
from typing import Iterator, List, Optional

from loguru import logger

from ..config.video import (
    OUTPUT_EXTENSION,
    OUTPUT_NAME_SUFFIX,
    TEMP_SUBTITLE_DIR_PREFIX,
    TEMP_VIDEO_SUFFIX,
)


@dataclass(frozen=True)
class TranscodeJob:
    """
    The paths belonging to one input file.

    Temporary paths are namespaced by the original filename (stem and extension,
    so `a.mkv` and `a.mp4` do not collide) and by the process id, so that two runs
    writing to the same output directory are unlikely to clash.

    Attributes:
        input_path: The source video.
        output_path: `<output_dir>/<stem>_h265.mp4`.
        temp_video_path: The hidden intermediate produced by the video encode.
        temp_subtitle_dir: The hidden working directory for extracted subtitles.
    """

    input_path: Path
    output_path: Path
    temp_video_path: Path
    temp_subtitle_dir: Path

    @classmethod
    def for_input(cls, input_path: Path, output_dir: Path, pid: Optional[int] = None) -> "TranscodeJob":
        """
        Derives every path of the job from the input filename.

        Args:
            input_path: The source video file.
            output_dir: The batch output directory.
            pid: Process id used to namespace temporary paths. Defaults to the
                 current process.
        """
        if pid is None:
            pid = os.getpid()
        name = input_path.stem
        ext = input_path.suffix.lstrip(".")
        unique_id = f"{name}_{ext}_{pid}"
        return cls(
            input_path=input_path,
            output_path=output_dir / f"{name}{OUTPUT_NAME_SUFFIX}{OUTPUT_EXTENSION}",
            temp_video_path=output_dir / f".{unique_id}{TEMP_VIDEO_SUFFIX}{OUTPUT_EXTENSION}",
            temp_subtitle_dir=output_dir / f"{TEMP_SUBTITLE_DIR_PREFIX}{unique_id}",
        )

    @property
    def filename(self) -> str:
        return self.input_path.name


def remove_path(path: Path) -> bool:
    """
    Removes a file or a directory tree if it exists.

    Returns:
        True if something was removed.
    """
    try:
        if path.is_dir() and not path.is_symlink():
            shutil.rmtree(path)
            return True
        if path.exists() or path.is_symlink():
            path.unlink()
            return True
    except OSError as e:
        logger.error(f"Could not remove temporary path {path}: {e}")
    return False


class TempArtifactRegistry:
    """
    Tracks the temporary paths of in-flight jobs.

    Jobs register their artifacts through `guard()`, which removes them on every
    exit path. `cleanup_all()` is what the interrupt handler calls.
    """

    def __init__(self):
        self._paths: List[Path] = []

    @property
    def paths(self) -> List[Path]:
        return list(self._paths)

    def register(self, path: Path):
        if path not in self._paths:
            self._paths.append(path)

    def unregister(self, path: Path):
        if path in self._paths:
            self._paths.remove(path)

    def cleanup_all(self) -> int:
        """
        Removes every registered artifact still on disk.

        Returns:
            The number of paths that were removed.
        """
        removed = 0
        for path in list(self._paths):
            if remove_path(path):
                logger.debug(f"Removed temporary path: {path}")
                removed += 1
            self.unregister(path)
        return removed

    @contextmanager
    def guard(self, *paths: Path) -> Iterator[None]:
        """
        Registers `paths` for the duration of the block and removes them on exit.

        Paths are registered before they are created, so an interruption between
        creation and registration cannot leak them.
        """
        for path in paths:
            self.register(path)
        try:
            yield
        finally:
            for path in paths:
                remove_path(path)
                self.unregister(path)

    @contextmanager
    def until_complete(self, path: Path) -> Iterator[None]:
        """
        Registers a final output while it is being written.

        The file is kept only if the block completes. If the block raises
        (including `SystemExit` from the interrupt handler), or the handler sweeps
        the registry mid-write, the partial file is removed so that a later run
        does not skip it as already transcoded.
        """
        self.register(path)
        try:
            yield
        except BaseException:
            remove_path(path)
            raise
        finally:
            self.unregister(path)


# Process-wide registry consulted by the interrupt handler.
ACTIVE_ARTIFACTS = TempArtifactRegistry()
