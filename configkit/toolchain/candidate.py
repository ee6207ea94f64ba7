"""
Toolchain candidate model.

A candidate is what an acquisition strategy proposes; the chain accepts at
most one per run.
"""

from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Optional

from configkit.core.version import is_supported_api


class ToolchainKind(Enum):
    """Where the accepted toolkit came from."""

    CACHED = "cached"
    EXPLICIT_PATH = "explicit_path"
    SYSTEM = "system"
    PREBUILT = "prebuilt"
    SOURCE = "source"
    NONE = "none"


@dataclass(frozen=True)
class ToolchainCandidate:
    """
    A toolkit installation proposed by a strategy.

    Attributes:
        kind: Acquisition kind
        locator_path: Path of the llvm-config locator program
        api_version: Locator API identifier (208 for 2.8)
        rtti_enabled: False if the locator's C++ flags contain -fno-rtti
        tree_path: Toolkit tree under vendor/, for tree-based kinds
    """

    kind: ToolchainKind
    locator_path: Optional[Path] = None
    api_version: Optional[int] = None
    rtti_enabled: bool = True
    tree_path: Optional[Path] = None

    @classmethod
    def none(cls) -> "ToolchainCandidate":
        """Marker for a run without the toolkit."""
        return cls(kind=ToolchainKind.NONE)

    @property
    def is_none(self) -> bool:
        return self.kind is ToolchainKind.NONE

    def rejection_reason(self) -> Optional[str]:
        """
        Why this candidate can never be accepted, or None if it can.

        The none marker is always acceptable; every other candidate needs a
        supported API version and RTTI enabled.
        """
        if self.is_none:
            return None
        if not self.rtti_enabled:
            return "incorrectly configured llvm (rtti is off)"
        if not is_supported_api(self.api_version):
            return "only LLVM 2.8 and 2.9 are supported"
        return None


@dataclass(frozen=True)
class StrategyOutcome:
    """Result of one strategy attempt: an accepted candidate or a rejection reason."""

    candidate: Optional[ToolchainCandidate] = None
    reason: str = ""

    @classmethod
    def accept(cls, candidate: ToolchainCandidate) -> "StrategyOutcome":
        return cls(candidate=candidate)

    @classmethod
    def reject(cls, reason: str) -> "StrategyOutcome":
        return cls(reason=reason)

    @property
    def accepted(self) -> bool:
        return self.candidate is not None
