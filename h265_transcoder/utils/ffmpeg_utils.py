"""
This module provides utility functions for invoking FFmpeg.

It includes a robust function for running command-line processes, and a
structured request object from which every ffmpeg command line in the
application is built. Building from named inputs, maps, codecs and metadata
entries keeps subtitle input numbers and output stream indices consistent no
matter how many subtitle files a job ends up with.
"""

import os
import shlex
import subprocess
import time
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Optional, Union

from loguru import logger

from ..config.common import PROGRESS_LOG_INTERVAL
from .module_updater import Modules


def format_cmd(cmd_list: List[str]) -> str:
    """Returns a shell-quoted, copy-pasteable version of a command list."""
    if os.name == "nt":
        return subprocess.list2cmdline(cmd_list)
    return shlex.join(cmd_list)


def run_cmd(
    cmd_parts: Union[str, List[str]],
    src_file_for_log: Path = Path(),
    show_cmd: bool = False,
) -> Optional[subprocess.CompletedProcess]:
    """
    Executes an external command safely and captures its output.

    This is a wrapper around Python's `subprocess.run` that adds logging and error
    handling. It can accept a command as either a single string or a list of
    arguments.

    Args:
        cmd_parts: The command to execute, as a single string or a list of strings.
                   A list is preferred for safety (avoids shell injection).
        src_file_for_log: The source file being processed, used for logging context.
        show_cmd: If True, the command will be logged at the DEBUG level before
                  execution (it is always logged at TRACE).

    Returns:
        A `subprocess.CompletedProcess` object containing the return code, stdout
        and stderr. Returns `None` if the command could not be started (e.g. the
        executable is missing).
    """
    cmd_list: List[str]

    if isinstance(cmd_parts, str):
        try:
            cmd_list = shlex.split(cmd_parts)
        except ValueError as e:
            logger.error(f"Error splitting command string with shlex: '{cmd_parts}'. Error: {e}")
            return None
    else:
        cmd_list = [str(part) for part in cmd_parts]

    if not cmd_list:
        logger.error("run_cmd received an empty command list.")
        return None

    display_cmd_str = format_cmd(cmd_list)
    if show_cmd:
        logger.debug(f"Executing: {display_cmd_str}")
    else:
        logger.trace(f"Executing: {display_cmd_str}")

    try:
        result = subprocess.run(
            cmd_list,
            capture_output=True,
            text=True,
            encoding="utf-8",
            errors="replace",
            shell=False,
        )
    except FileNotFoundError:
        logger.error(
            f"Error: Command not found (e.g., '{cmd_list[0]}'). Ensure it's in your system's PATH or configured correctly."
        )
        return None
    except OSError as e:
        logger.error(
            f"Could not execute command for {src_file_for_log.name or 'N/A'}: {type(e).__name__} - {e}"
        )
        return None

    if result.stdout and len(result.stdout) > 500:
        logger.trace(f"Command stdout (truncated): {result.stdout[:500]}...")
    elif result.stdout:
        logger.trace(f"Command stdout: {result.stdout}")

    # ffmpeg writes warnings to stderr even when it succeeds.
    if result.stderr and result.returncode != 0:
        logger.debug(f"Command stderr (error, rc={result.returncode}): {result.stderr.strip()}")
    elif result.stderr:
        logger.trace(f"Command stderr (non-error, rc={result.returncode}): {result.stderr.strip()}")

    return result


def format_progress(values: Dict[str, str]) -> str:
    """
    Summarizes one `-progress` block, e.g. "00:12:34 (frame 18100, 96.5 fps, 4.02x)".
    """
    out_time = values.get("out_time", "").split(".")[0] or "00:00:00"
    details = []
    if values.get("frame"):
        details.append(f"frame {values['frame']}")
    if values.get("fps"):
        details.append(f"{values['fps']} fps")
    speed = values.get("speed", "").strip()
    if speed and speed != "N/A":
        details.append(speed)
    return f"{out_time} ({', '.join(details)})" if details else out_time


def run_cmd_with_progress(
    cmd_list: List[str],
    src_file_for_log: Path = Path(),
    log_interval: float = PROGRESS_LOG_INTERVAL,
) -> Optional[subprocess.CompletedProcess]:
    """
    Runs an ffmpeg command that reports progress with `-progress pipe:1`.

    Progress blocks are read from stdout as they arrive and logged at most once
    every `log_interval` seconds, plus once when ffmpeg reports the end. stderr
    is collected and returned like `run_cmd` does.

    Returns:
        A `subprocess.CompletedProcess` with an empty stdout, or `None` if the
        command could not be started.
    """
    logger.debug(f"Executing: {format_cmd(cmd_list)}")
    try:
        process = subprocess.Popen(
            cmd_list,
            stdout=subprocess.PIPE,
            stderr=subprocess.PIPE,
            text=True,
            encoding="utf-8",
            errors="replace",
            bufsize=1,
        )
    except FileNotFoundError:
        logger.error(
            f"Error: Command not found (e.g., '{cmd_list[0]}'). Ensure it's in your system's PATH or configured correctly."
        )
        return None
    except OSError as e:
        logger.error(
            f"Could not execute command for {src_file_for_log.name or 'N/A'}: {type(e).__name__} - {e}"
        )
        return None

    values: Dict[str, str] = {}
    last_logged = time.monotonic()
    try:
        for raw_line in process.stdout:
            key, sep, value = raw_line.strip().partition("=")
            if not sep:
                continue
            if key != "progress":
                values[key] = value
                continue
            now = time.monotonic()
            if value == "end" or now - last_logged >= log_interval:
                logger.info(f"  Progress: {format_progress(values)}")
                last_logged = now
        stderr = process.stderr.read()
    finally:
        process.stdout.close()
        process.stderr.close()

    returncode = process.wait()
    if stderr and returncode != 0:
        logger.debug(f"Command stderr (error, rc={returncode}): {stderr.strip()}")
    elif stderr:
        logger.trace(f"Command stderr (non-error, rc={returncode}): {stderr.strip()}")
    return subprocess.CompletedProcess(cmd_list, returncode, stdout="", stderr=stderr)


@dataclass
class FfmpegInput:
    """An input file and the options that must precede its `-i`."""

    path: Path
    options: List[str] = field(default_factory=list)


@dataclass
class StreamMetadata:
    """
    A metadata tag for one output stream, e.g. `-metadata:s:s:1 language=eng`.

    Attributes:
        stream_type: ffmpeg stream type letter ("v", "a", "s").
        index: The output stream index within that type.
        key: Tag name.
        value: Tag value.
    """

    stream_type: str
    index: int
    key: str
    value: str

    def to_args(self) -> List[str]:
        return [f"-metadata:s:{self.stream_type}:{self.index}", f"{self.key}={self.value}"]


@dataclass
class FfmpegRequest:
    """
    A structured description of a single ffmpeg invocation.

    Attributes:
        inputs: Input files in order; the first one is input 0.
        output: The output file.
        maps: Stream specifiers for `-map` (e.g. "0:v:0", "0:a?", "1:0").
        codecs: Stream specifier -> codec for `-c:<spec>` (e.g. {"a": "copy"}).
        encoder_args: Raw encoder arguments (encoder name, preset, rate control).
        metadata: Per-output-stream metadata tags.
        output_options: Container-level options placed before the output path.
        overwrite: True passes `-y`; False passes `-n` so an existing output is
                   never replaced.
        report_progress: Adds `-progress pipe:1 -nostats` and logs progress while
                         ffmpeg runs. Meant for the long encode and remux steps.
    """

    inputs: List[FfmpegInput]
    output: Path
    maps: List[str] = field(default_factory=list)
    codecs: Dict[str, str] = field(default_factory=dict)
    encoder_args: List[str] = field(default_factory=list)
    metadata: List[StreamMetadata] = field(default_factory=list)
    output_options: List[str] = field(default_factory=list)
    overwrite: bool = True
    report_progress: bool = False


def build_ffmpeg_command(request: FfmpegRequest, ffmpeg_cmd: Optional[str] = None) -> List[str]:
    """
    Turns an `FfmpegRequest` into an argument list.

    Args:
        request: The invocation to build.
        ffmpeg_cmd: The ffmpeg executable. Defaults to the configured one.

    Returns:
        The full command list, starting with the executable.
    """
    cmd_list = [ffmpeg_cmd or Modules.ffmpeg_path(), "-hide_banner", "-nostdin", "-loglevel", "error"]
    cmd_list.append("-y" if request.overwrite else "-n")
    if request.report_progress:
        cmd_list.extend(["-progress", "pipe:1", "-nostats"])
    for ffmpeg_input in request.inputs:
        cmd_list.extend(ffmpeg_input.options)
        cmd_list.extend(["-i", str(ffmpeg_input.path)])
    for stream_spec in request.maps:
        cmd_list.extend(["-map", stream_spec])
    cmd_list.extend(request.encoder_args)
    for stream_spec, codec in request.codecs.items():
        cmd_list.extend([f"-c:{stream_spec}", codec])
    for entry in request.metadata:
        cmd_list.extend(entry.to_args())
    cmd_list.extend(request.output_options)
    cmd_list.append(str(request.output))
    return cmd_list


def run_ffmpeg(request: FfmpegRequest, src_file_for_log: Path = Path()) -> Optional[subprocess.CompletedProcess]:
    """Builds and runs an ffmpeg invocation. See `run_cmd` for the return value."""
    cmd_list = build_ffmpeg_command(request)
    if request.report_progress:
        return run_cmd_with_progress(cmd_list, src_file_for_log=src_file_for_log)
    return run_cmd(cmd_list, src_file_for_log=src_file_for_log, show_cmd=__debug__)


def ffmpeg_succeeded(result: Optional[subprocess.CompletedProcess]) -> bool:
    return result is not None and result.returncode == 0


def describe_failure(result: Optional[subprocess.CompletedProcess]) -> str:
    """A one-line reason for a failed invocation, for log messages."""
    if result is None:
        return "ffmpeg could not be started"
    stderr_lines = [line for line in (result.stderr or "").splitlines() if line.strip()]
    if stderr_lines:
        return f"rc={result.returncode}: {stderr_lines[-1].strip()}"
    return f"rc={result.returncode}"
