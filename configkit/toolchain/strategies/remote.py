"""
Strategies that download the toolkit.
"""

import logging

from configkit.core.exceptions import ToolchainLayoutError
from configkit.core.download import fetch_artifact
from configkit.core.filesystem import (
    ArchiveExtractionError,
    FilesystemError,
    safe_rmtree,
)
from configkit.toolchain.candidate import (
    StrategyOutcome,
    ToolchainCandidate,
    ToolchainKind,
)
from configkit.toolchain.prebuilt import PrebuiltRepository, prebuilt_names
from configkit.toolchain.strategy import AcquisitionStrategy, StrategyContext

logger = logging.getLogger(__name__)


def repository_for(context: StrategyContext) -> PrebuiltRepository:
    """Prebuilt repository configured for a run."""
    return PrebuiltRepository(
        context.options.prebuilt_url,
        context.layout.prebuilt_dir,
        context.reporter,
        proxy_url=context.options.proxy_url,
    )


def _discard_tree(context: StrategyContext) -> None:
    try:
        safe_rmtree(context.layout.tree, require_prefix=context.layout.vendor_dir)
    except (ValueError, FilesystemError) as e:
        logger.warning(f"Could not remove {context.layout.tree}: {e}")


def _tree_candidate(context: StrategyContext, kind: ToolchainKind) -> ToolchainCandidate:
    tree = context.layout.tree
    return ToolchainCandidate(
        kind=kind,
        locator_path=context.layout.locator_in(tree),
        api_version=context.release.api_version,
        tree_path=tree,
    )


class PrebuiltPackageStrategy(AcquisitionStrategy):
    """Download and unpack a prebuilt package into vendor/llvm."""

    name = "prebuilt"

    def attempt(self, context: StrategyContext) -> StrategyOutcome:
        reporter = context.reporter
        repository = repository_for(context)
        reporter.info("  Checking for prebuilt LLVM package...")

        names = prebuilt_names(
            context.release,
            context.host,
            system_name=context.system_name,
            compiler_version=context.compiler_version,
            explicit_name=context.options.prebuilt_name,
        )

        for name in names:
            if not repository.update_prebuilt(name, warn=False):
                continue

            reporter.info(f"  Unpacking prebuilt LLVM: {name}")
            try:
                context.unpack(repository.archive_path(name), context.layout.tree)
            except ArchiveExtractionError as e:
                reporter.info(f"    ERROR: {e}")
                _discard_tree(context)
                continue

            if not context.layout.has_layout_marker():
                reporter.info(f"  {name} doesn't appear to be a proper LLVM tree!")
                _discard_tree(context)
                continue

            reporter.info("    done!")
            return StrategyOutcome.accept(_tree_candidate(context, ToolchainKind.PREBUILT))

        reporter.info("  Unable to download any LLVM prebuilt")
        return StrategyOutcome.reject("no usable prebuilt package")


class SourceArchiveStrategy(AcquisitionStrategy):
    """Download the release source archive and unpack it as vendor/llvm."""

    name = "source"

    def attempt(self, context: StrategyContext) -> StrategyOutcome:
        reporter = context.reporter
        layout = context.layout
        release = context.release
        url = context.options.source_url or release.source_url
        archive = layout.prebuilt_dir / release.source_archive

        if not archive.exists():
            reporter.info(f"  Downloading {url}...")
            if not fetch_artifact(
                url,
                archive,
                reporter,
                proxy_url=context.options.proxy_url,
                progress_callback=lambda progress: reporter.progress(str(progress)),
            ):
                return StrategyOutcome.reject("source archive unavailable")

        unpacked = layout.vendor_dir / release.source_dir
        reporter.info("  Unpacking LLVM source...")
        try:
            safe_rmtree(unpacked, require_prefix=layout.vendor_dir)
            context.unpack(archive, layout.vendor_dir)
            if not unpacked.is_dir():
                raise ToolchainLayoutError(
                    unpacked, f"not created by unpacking {release.source_archive}"
                )
            safe_rmtree(layout.tree, require_prefix=layout.vendor_dir)
            unpacked.rename(layout.tree)
        except (
            ArchiveExtractionError,
            ToolchainLayoutError,
            FilesystemError,
            OSError,
            ValueError,
        ) as e:
            reporter.info(f"    ERROR: {e}")
            return StrategyOutcome.reject("source archive could not be unpacked")

        if not layout.has_layout_marker():
            reporter.info("  Code doesn't appear to be proper LLVM tree!")
            return StrategyOutcome.reject("not a toolkit tree")

        reporter.info("  Code appears to be a proper tree.")
        return StrategyOutcome.accept(_tree_candidate(context, ToolchainKind.SOURCE))
