"""
Acquisition strategy interface.

A strategy is one way of obtaining the toolkit (an existing tree, a user
path, the system, a prebuilt package, the source archive). Strategies hold
no per-run state; everything a run needs is passed in a StrategyContext.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from configkit.core.commands import CommandRunner
from configkit.core.filesystem import extract_archive, extract_with_tool
from configkit.core.options import ConfigureOptions
from configkit.core.platform import HostDescriptor
from configkit.core.reporting import Reporter
from configkit.core.version import ToolVersion
from configkit.toolchain.candidate import StrategyOutcome
from configkit.toolchain.layout import LLVM_2_8, ToolkitRelease, VendorLayout


@dataclass
class StrategyContext:
    """
    Everything a strategy may consult or use during a run.

    Attributes:
        options: Configure options
        host: Host descriptor
        runner: Command runner for the host
        reporter: Run reporter
        layout: Vendor directory layout
        release: Targeted toolkit release
        system_name: Distribution label for prebuilt names
        compiler_version: C compiler version, used in generic prebuilt names
    """

    options: ConfigureOptions
    host: HostDescriptor
    runner: CommandRunner
    reporter: Reporter
    layout: VendorLayout
    release: ToolkitRelease = LLVM_2_8
    system_name: Optional[str] = None
    compiler_version: Optional[ToolVersion] = None

    def unpack(self, archive: Path, destination: Path) -> None:
        """
        Unpack a tar archive into destination.

        Uses the configured external tar program when there is one.

        Raises:
            ArchiveExtractionError: If unpacking fails
        """
        if self.options.tar:
            extract_with_tool(self.runner, self.options.tar, archive, destination)
        else:
            extract_archive(archive, destination)


class AcquisitionStrategy(ABC):
    """
    Abstract base class for toolkit acquisition strategies.

    attempt() returns an accepted candidate or a rejection reason, and
    raises FatalConfigurationError when the run must stop.
    """

    name: str = ""

    @abstractmethod
    def attempt(self, context: StrategyContext) -> StrategyOutcome:
        """
        Try to obtain the toolkit.

        Args:
            context: Run context

        Returns:
            StrategyOutcome
        """
        pass
