"""
Centralized exception hierarchy for configkit.

This module defines the exceptions shared across the resolution and probing
subsystems. Transport and integrity failures are deliberately absent here:
the fetcher and checksum verifier report those as boolean results.
"""


# ============================================================================
# Base Exceptions
# ============================================================================


class ConfigKitError(Exception):
    """Base exception for all configkit errors."""

    pass


# ============================================================================
# Run-level Exceptions
# ============================================================================


class FatalConfigurationError(ConfigKitError):
    """
    Raised when the configure run cannot continue.

    The CLI turns this into a non-zero exit status and points the user at
    the run log.
    """

    pass


class ConfigurationFrozenError(ConfigKitError):
    """Raised when a frozen configuration aggregate is mutated."""

    pass


class OptionsError(ConfigKitError):
    """Raised when configure options cannot be loaded or are invalid."""

    pass


# ============================================================================
# Toolchain-related Exceptions
# ============================================================================


class ToolchainError(ConfigKitError):
    """Base exception for toolchain acquisition errors."""

    pass


class ToolchainLayoutError(ToolchainError):
    """Raised when a toolchain tree does not have the expected layout."""

    def __init__(self, tree_path, reason: str):
        self.tree_path = tree_path
        self.reason = reason
        super().__init__(f"Invalid toolchain tree at {tree_path}: {reason}")
