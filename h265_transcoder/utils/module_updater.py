"""
This module provides the Modules class to locate and verify the external tools
required by the application: ffmpeg and ffprobe.
"""
import subprocess
import sys

from loguru import logger

from ..config.common import MODULE_PATH
from ..domain.exceptions import ToolNotFoundException


class Modules:
    """
    A utility class for the external FFmpeg executables.

    Executables are taken from the `ffmpeg_dir` configured in `config.user.yaml`
    when it holds them, otherwise from the system's PATH.
    """

    @staticmethod
    def _get_tool_path(tool_name: str) -> str:
        """
        Determines the executable path to use for an FFmpeg suite tool.

        Args:
            tool_name: "ffmpeg" or "ffprobe".

        Returns:
            An absolute path from the configured directory, or the bare tool name
            so that the system's PATH is searched.
        """
        exe_name = f"{tool_name}.exe" if sys.platform == "win32" else tool_name

        if MODULE_PATH and MODULE_PATH.is_dir():
            configured_path = MODULE_PATH / exe_name
            if configured_path.is_file():
                logger.trace(f"Using {tool_name} from configured path: '{configured_path}'")
                return str(configured_path)
            logger.warning(
                f"`ffmpeg_dir` is configured, but '{exe_name}' was not found there. Falling back to system PATH."
            )

        return tool_name

    @staticmethod
    def ffmpeg_path() -> str:
        return Modules._get_tool_path("ffmpeg")

    @staticmethod
    def ffprobe_path() -> str:
        return Modules._get_tool_path("ffprobe")

    @staticmethod
    def _verify_tool(tool_name: str, tool_cmd: str):
        """
        Runs `<tool> -version` and logs the first line of its output.

        Raises:
            ToolNotFoundException: If the tool is missing or the version command fails.
        """
        try:
            result = subprocess.run(
                [tool_cmd, "-version"],
                check=True,
                capture_output=True,
                text=True,
                encoding="utf-8",
            )
        except FileNotFoundError as e:
            raise ToolNotFoundException(
                f"{tool_name} is not installed. Add it to your system's PATH or set "
                f"'paths.ffmpeg_dir' in config.user.yaml."
            ) from e
        except (subprocess.CalledProcessError, OSError) as e:
            raise ToolNotFoundException(f"{tool_name} could not be executed: {e}") from e

        version_lines = result.stdout.splitlines()
        logger.debug(f"{tool_name} version check successful: {version_lines[0] if version_lines else 'unknown'}")

    @staticmethod
    def verify_tools():
        """
        Verifies that both ffmpeg and ffprobe can be executed.

        This is a setup-phase check, run once before any file is processed.

        Raises:
            ToolNotFoundException: If either tool is unusable.
        """
        Modules._verify_tool("ffmpeg", Modules.ffmpeg_path())
        Modules._verify_tool("ffprobe", Modules.ffprobe_path())
