"""
Queries against the toolkit's locator program (llvm-config).

The 2.8-era locator is a perl script, so it is run through a configured
interpreter rather than executed directly:

    perl llvm-config --version     ->  "2.8" or "2.9svn"
    perl llvm-config --cxxflags    ->  compiler flags; "-fno-rtti" disqualifies
"""

import logging
import re
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from configkit.core.commands import CommandRunner
from configkit.core.version import api_version
from configkit.toolchain.candidate import ToolchainCandidate, ToolchainKind

logger = logging.getLogger(__name__)

NO_RTTI_FLAG = "-fno-rtti"


@dataclass(frozen=True)
class LocatorReport:
    """What a locator said about its toolkit."""

    locator_path: Path
    version: str
    api_version: Optional[int]
    rtti_enabled: bool

    def to_candidate(
        self, kind: ToolchainKind, tree_path: Optional[Path] = None
    ) -> ToolchainCandidate:
        return ToolchainCandidate(
            kind=kind,
            locator_path=self.locator_path,
            api_version=self.api_version,
            rtti_enabled=self.rtti_enabled,
            tree_path=tree_path,
        )


def query_locator(
    runner: CommandRunner, locator: Path, interpreter: str = "perl"
) -> Optional[LocatorReport]:
    """
    Ask a locator for its version and C++ flags.

    Args:
        runner: Command runner for the host
        locator: Path of the llvm-config program
        interpreter: Program used to run the locator

    Returns:
        LocatorReport, or None if the locator could not be run

    Example:
        >>> report = query_locator(runner, Path("/usr/bin/llvm-config"))
        >>> report.api_version if report else None
        208
    """
    version_result = runner.run([interpreter, str(locator), "--version"])
    if not version_result.ok:
        logger.debug(f"{locator} --version failed: {version_result.stderr.strip()}")
        return None

    version = version_result.stdout.strip()
    numeric = re.sub(r"svn$", "", version)

    flags_result = runner.run([interpreter, str(locator), "--cxxflags"])
    if not flags_result.ok:
        logger.debug(f"{locator} --cxxflags failed: {flags_result.stderr.strip()}")
        return None

    return LocatorReport(
        locator_path=Path(locator),
        version=version,
        api_version=api_version(numeric),
        rtti_enabled=NO_RTTI_FLAG not in flags_result.stdout,
    )
