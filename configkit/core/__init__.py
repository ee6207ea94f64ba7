"""
Core functionality for configkit.

This package contains the foundational modules the toolchain and probing
packages depend on.
"""

from .commands import CommandResult, CommandRunner, select_runner
from .exceptions import (
    ConfigKitError,
    ConfigurationFrozenError,
    FatalConfigurationError,
    OptionsError,
    ToolchainError,
    ToolchainLayoutError,
)
from .options import ConfigureOptions, load_options
from .platform import HostDescriptor, detect_host_triple, detect_system_name
from .reporting import Reporter
from .version import ToolVersion, api_version, meets_minimum

__all__ = [
    "CommandResult",
    "CommandRunner",
    "ConfigKitError",
    "ConfigurationFrozenError",
    "ConfigureOptions",
    "FatalConfigurationError",
    "HostDescriptor",
    "OptionsError",
    "Reporter",
    "ToolVersion",
    "ToolchainError",
    "ToolchainLayoutError",
    "api_version",
    "detect_host_triple",
    "detect_system_name",
    "load_options",
    "meets_minimum",
    "select_runner",
]
