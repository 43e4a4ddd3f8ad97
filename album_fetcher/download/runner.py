"""
External command execution

The downloader talks to yt-dlp and ffmpeg only through a runner object with
a single ``run(command, args)`` method. ``CommandRunner`` executes real
processes; tests substitute fakes that simulate the tools' effects on disk.
"""

import subprocess
from typing import Optional, Sequence

from ..utils.exceptions import CommandError
from ..utils.logger import get_logger


class CommandRunner:
    """Run external commands and return their combined stdout/stderr output"""

    def __init__(self, timeout: Optional[int] = None):
        """
        Args:
            timeout: Seconds to wait for each command, None for no limit
        """
        self.timeout = timeout
        self.logger = get_logger(__name__)

    def run(self, command: str, args: Sequence[str]) -> str:
        """
        Run ``command`` with ``args`` to completion

        Args:
            command: Executable name or path
            args: Arguments, passed without a shell

        Returns:
            Combined stdout and stderr of the process

        Raises:
            CommandError: If the command cannot be started, times out, or
                          exits with a non-zero status. The error carries
                          the process output verbatim.
        """
        cmd = [command, *args]
        self.logger.debug(f"Running: {subprocess.list2cmdline(cmd)}")

        try:
            result = subprocess.run(
                cmd,
                stdout=subprocess.PIPE,
                stderr=subprocess.STDOUT,
                text=True,
                errors='replace',
                timeout=self.timeout,
                check=False
            )
        except FileNotFoundError as e:
            raise CommandError(
                f"{command} failed: executable not found",
                command=command,
                details={'original_error': e}
            ) from e
        except subprocess.TimeoutExpired as e:
            output = e.output or ""
            if isinstance(output, bytes):
                output = output.decode(errors='replace')
            raise CommandError(
                f"{command} failed: timed out after {self.timeout}s",
                command=command,
                output=output
            ) from e

        output = result.stdout or ""
        if result.returncode != 0:
            raise CommandError(
                f"{command} failed: exit status {result.returncode} (output: {output.strip()})",
                command=command,
                returncode=result.returncode,
                output=output
            )

        return output
