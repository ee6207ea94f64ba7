"""
Build tool version checks.

Some hosts need minimum versions of the C compiler and of bison to build
the project. A missing or too old tool aborts the run.
"""

import logging
from typing import Optional, Sequence

from configkit.core.commands import CommandRunner
from configkit.core.exceptions import FatalConfigurationError
from configkit.core.platform import HostDescriptor
from configkit.core.reporting import Reporter
from configkit.core.version import ToolVersion, meets_minimum

logger = logging.getLogger(__name__)

TOOL_CHECK_HOSTS = ("i686-pc-linux-gnu", "x86_64-unknown-linux-gnu")
MINIMUM_CC = "4.1"
MINIMUM_BISON = "2.3"


def check_tool_version(
    runner: CommandRunner,
    reporter: Reporter,
    tool: str,
    args: Sequence[str],
    minimum: str,
) -> ToolVersion:
    """
    Run a tool's version flag and require a minimum version.

    Args:
        runner: Command runner for the host
        reporter: Run reporter
        tool: Program to run
        args: Version flag(s), e.g. ['--version']
        minimum: Minimum acceptable version, e.g. '2.3'

    Returns:
        The version that was found

    Raises:
        FatalConfigurationError: If the tool is missing, prints no version,
            or is older than minimum

    Example:
        >>> check_tool_version(runner, reporter, "bison", ["--version"], "2.3")
        ToolVersion('2.4.1')
    """
    result = runner.run([tool, *args])
    found = ToolVersion.search(result.stdout) if result.ok else None

    if found is None:
        reporter.error(f"Checking {tool}: not found")
        raise FatalConfigurationError(f"Required tool '{tool}' not found")

    if not meets_minimum(found, minimum):
        reporter.error(
            f"Checking {tool}: Expected {tool} version >= {minimum}, found {found}"
        )
        raise FatalConfigurationError(
            f"{tool} {found} is older than the required {minimum}"
        )

    reporter.info(f"Checking {tool}: found")
    return found


def requires_tool_checks(host: HostDescriptor) -> bool:
    return host.triple in TOOL_CHECK_HOSTS


def check_build_tools(
    runner: CommandRunner, reporter: Reporter, host: HostDescriptor, cc: str
) -> Optional[ToolVersion]:
    """
    Check the compiler and bison on hosts that need it.

    Returns:
        The C compiler version on checked hosts, None elsewhere

    Raises:
        FatalConfigurationError: If a tool is missing or too old
    """
    if not requires_tool_checks(host):
        return None

    compiler_version = check_tool_version(runner, reporter, cc, ["-dumpversion"], MINIMUM_CC)
    check_tool_version(runner, reporter, "bison", ["--version"], MINIMUM_BISON)
    return compiler_version
