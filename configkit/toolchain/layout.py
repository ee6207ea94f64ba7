"""
On-disk layout of the vendored toolkit and the release it targets.

    vendor/
        llvm/                  cached tree (source or built)
            include/           layout marker
            Makefile.common    present in user-configured source trees
            Release/bin/llvm-config
        prebuilt/              downloaded packages and digest files
        llvm-2.8/              transient, renamed to llvm/ after unpacking
"""

from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from configkit.core.version import api_version

BUILD_PROFILES = ("Release", "Debug")
LAYOUT_MARKER = "include"
BUILD_DESCRIPTOR = "Makefile.common"
LOCATOR_NAME = "llvm-config"


@dataclass(frozen=True)
class ToolkitRelease:
    """
    The toolkit release this project builds against.

    Example:
        >>> LLVM_2_8.source_archive
        'llvm-2.8.tgz'
        >>> LLVM_2_8.api_version
        208
    """

    name: str = "llvm"
    version: str = "2.8"
    source_base_url: str = "http://llvm.org/releases"

    @property
    def api_version(self) -> int:
        return api_version(self.version)

    @property
    def source_dir(self) -> str:
        """Top-level directory of the source archive."""
        return f"{self.name}-{self.version}"

    @property
    def source_archive(self) -> str:
        return f"{self.source_dir}.tgz"

    @property
    def source_url(self) -> str:
        return f"{self.source_base_url}/{self.version}/{self.source_archive}"


LLVM_2_8 = ToolkitRelease()


@dataclass(frozen=True)
class VendorLayout:
    """Paths under the vendor directory."""

    vendor_dir: Path

    @property
    def tree(self) -> Path:
        """Default toolkit tree (vendor/llvm)."""
        return self.vendor_dir / "llvm"

    @property
    def prebuilt_dir(self) -> Path:
        return self.vendor_dir / "prebuilt"

    @staticmethod
    def locator_in(tree: Path, profile: str = "Release") -> Path:
        """Locator program of a built tree."""
        return tree / profile / "bin" / LOCATOR_NAME

    @staticmethod
    def built_profile(tree: Path) -> Optional[str]:
        """First build profile whose bin directory exists, or None."""
        for profile in BUILD_PROFILES:
            if (tree / profile / "bin").is_dir():
                return profile
        return None

    def is_built(self, tree: Optional[Path] = None) -> bool:
        return self.locator_in(tree or self.tree).exists()

    def has_layout_marker(self, tree: Optional[Path] = None) -> bool:
        return ((tree or self.tree) / LAYOUT_MARKER).is_dir()

    def has_build_descriptor(self, tree: Optional[Path] = None) -> bool:
        return ((tree or self.tree) / BUILD_DESCRIPTOR).exists()
