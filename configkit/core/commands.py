"""
Command execution abstraction.

Every external program the configure run starts (compilers, the toolkit
locator, the archive tool, probe binaries) goes through a CommandRunner. One
runner implementation exists per platform family and is selected once from
the HostDescriptor, so call sites never branch on the platform.

On Windows hosts every command is wrapped in `cmd.exe /C`. Subprocesses
started directly from MSYS environments can report completion before the
child has exited, which makes a following rename of freshly unpacked files
fail sporadically.
"""

import logging
import subprocess
from abc import ABC, abstractmethod
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional, Sequence, Union

from configkit.core.platform import HostDescriptor

logger = logging.getLogger(__name__)

# Exit status reported when the program itself cannot be started.
COMMAND_NOT_FOUND = 127


@dataclass
class CommandResult:
    """Outcome of one external command."""

    argv: List[str]
    returncode: int
    stdout: str = ""
    stderr: str = ""

    @property
    def ok(self) -> bool:
        """True if the command exited with status 0."""
        return self.returncode == 0

    @property
    def output(self) -> str:
        """Combined stdout and stderr."""
        return self.stdout + self.stderr


class CommandRunner(ABC):
    """Runs external commands and reports their outcome; never raises for exit codes."""

    def __init__(self, timeout: Optional[float] = None):
        """
        Initialize runner.

        Args:
            timeout: Optional per-command timeout in seconds
        """
        self.timeout = timeout

    def run(
        self,
        argv: Sequence[Union[str, Path]],
        cwd: Optional[Path] = None,
        input: Optional[str] = None,
    ) -> CommandResult:
        """
        Run a command and capture its output.

        Args:
            argv: Program and arguments
            cwd: Working directory
            input: Optional text fed to stdin

        Returns:
            CommandResult; a program that cannot be started yields status 127
        """
        args = [str(a) for a in argv]
        wrapped = self.wrap(args)
        logger.debug(f"Running: {subprocess.list2cmdline(wrapped)}")

        try:
            completed = subprocess.run(
                wrapped,
                cwd=str(cwd) if cwd else None,
                input=input,
                capture_output=True,
                text=True,
                timeout=self.timeout,
                check=False,
            )
        except FileNotFoundError as e:
            return CommandResult(args, COMMAND_NOT_FOUND, "", str(e))
        except PermissionError as e:
            return CommandResult(args, 126, "", str(e))
        except subprocess.TimeoutExpired as e:
            return CommandResult(args, -1, "", f"Timed out after {e.timeout}s")

        return CommandResult(args, completed.returncode, completed.stdout, completed.stderr)

    @abstractmethod
    def wrap(self, argv: List[str]) -> List[str]:
        """Turn a program invocation into the argv actually executed."""
        pass


class PosixCommandRunner(CommandRunner):
    """Runs commands directly."""

    def wrap(self, argv: List[str]) -> List[str]:
        return argv


class WindowsCommandRunner(CommandRunner):
    """Runs every command through the native command interpreter."""

    def wrap(self, argv: List[str]) -> List[str]:
        return ["cmd.exe", "/C", subprocess.list2cmdline(argv)]


def select_runner(host: HostDescriptor, timeout: Optional[float] = None) -> CommandRunner:
    """
    Select the command runner for a host.

    Args:
        host: Host descriptor
        timeout: Optional per-command timeout in seconds

    Returns:
        WindowsCommandRunner on the windows family, PosixCommandRunner otherwise
    """
    if host.is_windows:
        return WindowsCommandRunner(timeout)
    return PosixCommandRunner(timeout)
