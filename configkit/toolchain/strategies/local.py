"""
Strategies that use a toolkit already present on this machine.
"""

import logging

from configkit.core.exceptions import FatalConfigurationError
from configkit.core.filesystem import FilesystemError, find_executable, safe_rmtree
from configkit.toolchain.candidate import (
    StrategyOutcome,
    ToolchainCandidate,
    ToolchainKind,
)
from configkit.toolchain.layout import LOCATOR_NAME
from configkit.toolchain.locator import query_locator
from configkit.toolchain.strategy import AcquisitionStrategy, StrategyContext

logger = logging.getLogger(__name__)


def remove_default_tree(context: StrategyContext) -> None:
    """
    Remove the unusable tree at vendor/llvm.

    A tree carrying a build descriptor may hold user changes and is never
    removed.

    Raises:
        FatalConfigurationError: If the tree has a build descriptor or cannot
            be removed
    """
    layout = context.layout
    if layout.has_build_descriptor():
        context.reporter.error(
            "ABORT: Unwilling to override custom LLVM tree, please update it manually"
        )
        raise FatalConfigurationError(
            f"Refusing to remove customised toolkit tree at {layout.tree}"
        )

    context.reporter.info("    Removing outdated tree...")
    try:
        safe_rmtree(layout.tree, require_prefix=layout.vendor_dir)
    except (ValueError, FilesystemError) as e:
        raise FatalConfigurationError(f"Cannot remove {layout.tree}: {e}")


class CachedTreeStrategy(AcquisitionStrategy):
    """Reuse vendor/llvm from an earlier run."""

    name = "cached"

    def attempt(self, context: StrategyContext) -> StrategyOutcome:
        layout = context.layout
        reporter = context.reporter
        tree = layout.tree

        if not tree.is_dir():
            reporter.info("  Checking for existing LLVM library tree: not found.")
            return StrategyOutcome.reject("not found")

        if layout.is_built():
            report = query_locator(
                context.runner, layout.locator_in(tree), context.options.perl
            )
            if report is None:
                reason = "locator could not be run"
            else:
                reason = report.to_candidate(ToolchainKind.CACHED).rejection_reason()
                if reason and report.rtti_enabled:
                    reason = f"outdated (version {report.version})"

            if reason is None:
                reporter.info("  Checking for existing LLVM library tree: found!")
                return StrategyOutcome.accept(
                    report.to_candidate(ToolchainKind.CACHED, tree_path=tree)
                )

            reporter.info(f"  Checking for existing LLVM library tree: {reason}")
            remove_default_tree(context)
            return StrategyOutcome.reject(reason)

        if layout.has_layout_marker():
            reporter.info("  Checking for existing LLVM source tree: found!")
            return StrategyOutcome.accept(
                ToolchainCandidate(
                    kind=ToolchainKind.CACHED,
                    locator_path=layout.locator_in(tree),
                    api_version=context.release.api_version,
                    tree_path=tree,
                )
            )

        reporter.info("  Code doesn't appear to be proper LLVM tree!")
        remove_default_tree(context)
        return StrategyOutcome.reject("not a toolkit tree")


class ExplicitPathStrategy(AcquisitionStrategy):
    """Use a built tree the user pointed at; anything wrong with it is fatal."""

    name = "explicit_path"

    def attempt(self, context: StrategyContext) -> StrategyOutcome:
        path = context.options.llvm_path
        if path is None:
            return StrategyOutcome.reject("no path given")

        reporter = context.reporter
        if not path.is_dir():
            reporter.error(f"Validating '{path}': ERROR. Path doesn't exist.")
            raise FatalConfigurationError(f"Path '{path}' not a proper LLVM path")

        profile = context.layout.built_profile(path)
        if profile is None:
            reporter.error(
                f"Validating '{path}': ERROR. Doesn't appear to be built already!"
            )
            raise FatalConfigurationError(f"Path '{path}' not a proper LLVM path")

        reporter.info(f"Validating '{path}': Ok! Using {profile}")
        locator = context.layout.locator_in(path, profile)
        report = query_locator(context.runner, locator, context.options.perl)

        if report is None:
            reporter.warn(f"  Unable to query {locator}, assuming LLVM {context.release.version}")
            return StrategyOutcome.accept(
                ToolchainCandidate(
                    kind=ToolchainKind.EXPLICIT_PATH,
                    locator_path=locator,
                    api_version=context.release.api_version,
                    tree_path=path,
                )
            )

        candidate = report.to_candidate(ToolchainKind.EXPLICIT_PATH, tree_path=path)
        reason = candidate.rejection_reason()
        if reason:
            reporter.error(f"ABORT: '{path}': {reason}")
            raise FatalConfigurationError(f"Path '{path}' not a usable LLVM build: {reason}")

        return StrategyOutcome.accept(candidate)


class SystemLocatorStrategy(AcquisitionStrategy):
    """Use a toolkit whose locator is configured or found on PATH."""

    name = "system"

    def attempt(self, context: StrategyContext) -> StrategyOutcome:
        reporter = context.reporter
        locator = context.options.llvm_config or find_executable(LOCATOR_NAME)

        if locator is None:
            reporter.info("  Checking for 'llvm-config': not found")
            return StrategyOutcome.reject("not found")

        report = query_locator(context.runner, locator, context.options.perl)
        if report is None:
            reporter.info(f"  Checking for 'llvm-config': unable to run {locator}")
            return StrategyOutcome.reject("locator could not be run")

        candidate = report.to_candidate(ToolchainKind.SYSTEM)
        reason = candidate.rejection_reason()
        if reason:
            reporter.info(f"  Checking for 'llvm-config': {reason}")
            return StrategyOutcome.reject(reason)

        reporter.info(f"  Checking for 'llvm-config': found! (version {report.version})")
        return StrategyOutcome.accept(candidate)
