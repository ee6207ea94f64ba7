"""
Toolkit resolution for configkit.

This package provides:
- The candidate model and vendor directory layout
- Locator (llvm-config) queries
- Prebuilt package naming and verified download
- Acquisition strategies and the chain that runs them
"""

from configkit.toolchain.candidate import (
    StrategyOutcome,
    ToolchainCandidate,
    ToolchainKind,
)
from configkit.toolchain.chain import AcquisitionChain, default_strategies
from configkit.toolchain.layout import LLVM_2_8, ToolkitRelease, VendorLayout
from configkit.toolchain.locator import LocatorReport, query_locator
from configkit.toolchain.prebuilt import PrebuiltRepository, prebuilt_names
from configkit.toolchain.strategy import AcquisitionStrategy, StrategyContext

__all__ = [
    "AcquisitionChain",
    "AcquisitionStrategy",
    "LLVM_2_8",
    "LocatorReport",
    "PrebuiltRepository",
    "StrategyContext",
    "StrategyOutcome",
    "ToolchainCandidate",
    "ToolchainKind",
    "ToolkitRelease",
    "VendorLayout",
    "default_strategies",
    "prebuilt_names",
    "query_locator",
]
