"""
Run log and console reporting for configure runs.

A Reporter is created once per run and passed explicitly to every component
that needs to tell the user (or the run log) something. It owns a dedicated,
non-propagating logger so that nothing here touches process-wide logging
state.

Log file format:
    [2011-01-05 12:00:00] Checking sizeof(long):
    [2011-01-05 12:00:00] *** ERROR compiling configure test program failed
    [2011-01-05 12:00:00] ---
    int main() { return sizeof(long); }
    ---

Usage:
    reporter = Reporter(Path("configure.log"), verbose=False)
    reporter.info("Configuring LLVM...")
    reporter.warn("No MD5 checksum available")
"""

import logging
import sys
from pathlib import Path
from typing import Optional, TextIO

TIMESTAMP_FORMAT = "%Y-%m-%d %H:%M:%S"


class RunLogFormatter(logging.Formatter):
    """Formats records as dated lines, fencing multi-line messages."""

    def __init__(self):
        super().__init__(datefmt=TIMESTAMP_FORMAT)

    def format(self, record: logging.LogRecord) -> str:
        stamp = f"[{self.formatTime(record, self.datefmt)}]"
        if record.levelno >= logging.ERROR:
            stamp += " *** ERROR"

        message = record.getMessage()
        if "\n" in message:
            return f"{stamp} ---\n{message.rstrip()}\n---"
        return f"{stamp} {message}"


class _ConsoleFilter(logging.Filter):
    """Lets WARNING and DEBUG records reach the console only when verbose."""

    def __init__(self, verbose: bool):
        super().__init__()
        self.verbose = verbose

    def filter(self, record: logging.LogRecord) -> bool:
        if record.levelno >= logging.ERROR:
            return False  # errors go to the stderr handler
        if record.levelno == logging.INFO:
            return True
        return self.verbose


class Reporter:
    """
    Logging/reporting collaborator threaded through a configure run.

    Attributes:
        log_path: Absolute path of the run log file
        verbose: Whether warnings and debug messages are echoed to the console
    """

    def __init__(
        self,
        log_path: Path,
        verbose: bool = False,
        stdout: Optional[TextIO] = None,
        stderr: Optional[TextIO] = None,
        truncate: bool = True,
    ):
        """
        Initialize reporter and open the run log.

        Args:
            log_path: Path of the run log file
            verbose: Echo warnings and debug output to the console
            stdout: Stream for normal console output (default: sys.stdout)
            stderr: Stream for error output (default: sys.stderr)
            truncate: Start a fresh log file instead of appending
        """
        self.log_path = Path(log_path).resolve()
        self.verbose = verbose
        self._stdout = stdout or sys.stdout
        self._stderr = stderr or sys.stderr
        self._progress_active = False

        self.log_path.parent.mkdir(parents=True, exist_ok=True)
        if truncate:
            self.log_path.write_text("")

        # Not registered with logging.getLogger: the logger dies with the reporter
        self._logger = logging.Logger("configkit.run")
        self._logger.setLevel(logging.DEBUG)
        self._logger.propagate = False

        file_handler = logging.FileHandler(self.log_path, mode="a", encoding="utf-8")
        file_handler.setFormatter(RunLogFormatter())
        self._logger.addHandler(file_handler)

        console = logging.StreamHandler(self._stdout)
        console.setFormatter(logging.Formatter("%(message)s"))
        console.addFilter(_ConsoleFilter(verbose))
        self._logger.addHandler(console)

        errors = logging.StreamHandler(self._stderr)
        errors.setLevel(logging.ERROR)
        errors.setFormatter(logging.Formatter("%(message)s"))
        self._logger.addHandler(errors)

    def info(self, message: str) -> None:
        """Write a message to the run log and the console."""
        self._end_progress()
        self._logger.info(message)

    def warn(self, message: str) -> None:
        """Write a warning to the run log; echoed to the console when verbose."""
        self._logger.warning(message)

    def error(self, message: str) -> None:
        """Write an error to the run log and to stderr."""
        self._end_progress()
        self._logger.error(message)

    def debug(self, message: str) -> None:
        """Write a message to the run log only (console when verbose)."""
        self._logger.debug(message)

    def log_block(self, text: str) -> None:
        """Append a fenced block (source listings, compiler output) to the run log."""
        if not text:
            return
        self._logger.debug(text if "\n" in text else text + "\n")

    def progress(self, text: str) -> None:
        """Overwrite the current console line; never logged."""
        self._stdout.write(f"\r{text}")
        self._stdout.flush()
        self._progress_active = True

    def _end_progress(self) -> None:
        if self._progress_active:
            self._stdout.write("\n")
            self._progress_active = False

    def close(self) -> None:
        """Flush and detach all handlers."""
        for handler in list(self._logger.handlers):
            handler.flush()
            handler.close()
            self._logger.removeHandler(handler)
