"""
Acquisition strategy chain.

Strategies are tried in a fixed priority order and the first acceptance
wins:

    1. cached tree (vendor/llvm)
    2. explicit user path
    3. system locator
    4. prebuilt package
    5. source archive
    6. none (toolkit disabled)
"""

import logging
from typing import List, Optional, Sequence

from configkit.core.exceptions import FatalConfigurationError
from configkit.core.options import ConfigureOptions
from configkit.toolchain.candidate import ToolchainCandidate
from configkit.toolchain.strategies import (
    CachedTreeStrategy,
    ExplicitPathStrategy,
    PrebuiltPackageStrategy,
    SourceArchiveStrategy,
    SystemLocatorStrategy,
)
from configkit.toolchain.strategy import AcquisitionStrategy, StrategyContext

logger = logging.getLogger(__name__)


def default_strategies(options: ConfigureOptions) -> List[AcquisitionStrategy]:
    """
    Build the strategy list for a run, leaving out skipped strategies.

    Args:
        options: Configure options

    Returns:
        Ordered list of strategies
    """
    strategies: List[AcquisitionStrategy] = [
        CachedTreeStrategy(),
        ExplicitPathStrategy(),
    ]
    if not options.skip_system:
        strategies.append(SystemLocatorStrategy())
    if not options.skip_prebuilt:
        strategies.append(PrebuiltPackageStrategy())
    strategies.append(SourceArchiveStrategy())
    return strategies


class AcquisitionChain:
    """
    Folds over acquisition strategies until one accepts.

    Example:
        >>> chain = AcquisitionChain(default_strategies(options))
        >>> candidate = chain.resolve(context)
        >>> candidate.kind
        <ToolchainKind.PREBUILT: 'prebuilt'>
    """

    def __init__(self, strategies: Optional[Sequence[AcquisitionStrategy]] = None):
        self.strategies = list(strategies) if strategies is not None else None

    def resolve(self, context: StrategyContext) -> ToolchainCandidate:
        """
        Resolve the toolkit for a run.

        Args:
            context: Run context

        Returns:
            The accepted candidate, or the none marker when the toolkit is
            disabled or nothing was accepted

        Raises:
            FatalConfigurationError: If a strategy aborts the run, or nothing
                was accepted and the toolkit is required
        """
        options = context.options
        reporter = context.reporter

        if not options.llvm_enabled:
            reporter.info("  LLVM support disabled.")
            return ToolchainCandidate.none()

        strategies = (
            self.strategies if self.strategies is not None else default_strategies(options)
        )

        for strategy in strategies:
            outcome = strategy.attempt(context)
            if not outcome.accepted:
                logger.debug(f"Strategy {strategy.name} rejected: {outcome.reason}")
                continue

            reason = outcome.candidate.rejection_reason()
            if reason:
                logger.debug(f"Strategy {strategy.name} proposed unusable toolkit: {reason}")
                continue

            logger.debug(f"Strategy {strategy.name} accepted {outcome.candidate}")
            return outcome.candidate

        if options.llvm_required:
            reporter.error("ABORT: Unable to configure for LLVM, which is required.")
            raise FatalConfigurationError("No usable LLVM found")

        reporter.warn("WARNING: Unable to configure for LLVM, disabling support.")
        return ToolchainCandidate.none()
