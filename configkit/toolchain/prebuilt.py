"""
Prebuilt toolkit packages.

Packages live on an asset server under a flat namespace:

    <base>/llvm-2.8-x86_64-unknown-linux-gnu-4.4.tar.bz2
    <base>/llvm-2.8-x86_64-unknown-linux-gnu-4.4.tar.bz2.md5

and are cached in vendor/prebuilt. A package is only used if its digest file
matches, or if the server has no digest file for it.
"""

import logging
from pathlib import Path
from typing import List, Optional

from configkit.core.download import fetch_artifact
from configkit.core.platform import HostDescriptor
from configkit.core.reporting import Reporter
from configkit.core.verification import verify_digest_file
from configkit.core.version import ToolVersion
from configkit.toolchain.layout import ToolkitRelease

logger = logging.getLogger(__name__)

DIGEST_SUFFIX = ".md5"
PACKAGE_SUFFIX = ".tar.bz2"

# Hosts whose generic package name carries the compiler major.minor.
COMPILER_SPECIFIC_HOSTS = ("i686-pc-linux-gnu", "x86_64-unknown-linux-gnu")


def generic_prebuilt_name(
    release: ToolkitRelease,
    host: HostDescriptor,
    compiler_version: Optional[ToolVersion] = None,
) -> str:
    """
    Name of the generic package for a host.

    Example:
        >>> host = HostDescriptor.from_triple("x86_64-unknown-linux-gnu")
        >>> generic_prebuilt_name(LLVM_2_8, host, ToolVersion.parse("4.4.5"))
        'llvm-2.8-x86_64-unknown-linux-gnu-4.4.tar.bz2'
    """
    name = f"{release.name}-{release.version}-{host.triple}"
    if host.triple in COMPILER_SPECIFIC_HOSTS and compiler_version:
        # gcc 7 and later print only the major version
        name += "-" + ".".join(str(part) for part in compiler_version.parts[:2])
    return name + PACKAGE_SUFFIX


def prebuilt_names(
    release: ToolkitRelease,
    host: HostDescriptor,
    system_name: Optional[str] = None,
    compiler_version: Optional[ToolVersion] = None,
    explicit_name: Optional[str] = None,
) -> List[str]:
    """
    Candidate package names, most specific first.

    Order: the explicit name, the distribution-specific name, the generic
    name, and on darwin a name keyed on the kernel major version.

    Args:
        release: Targeted toolkit release
        host: Host descriptor
        system_name: Distribution label (e.g. 'ubuntu-10.04')
        compiler_version: C compiler version
        explicit_name: User-supplied package name

    Returns:
        Ordered list of package file names
    """
    prefix = f"{release.name}-{release.version}"
    names = []

    if explicit_name:
        names.append(explicit_name)
    if system_name:
        names.append(f"{prefix}-{host.triple}-{system_name}{PACKAGE_SUFFIX}")

    names.append(generic_prebuilt_name(release, host, compiler_version))

    darwin_major = host.darwin_major()
    if darwin_major is not None:
        names.append(
            f"{prefix}-{host.cpu}-{host.vendor}-darwin{darwin_major}{PACKAGE_SUFFIX}"
        )

    return names


class PrebuiltRepository:
    """
    Local cache of prebuilt packages backed by the asset server.

    Example:
        >>> repo = PrebuiltRepository("http://asset.rubini.us/prebuilt",
        ...                           Path("vendor/prebuilt"), reporter)
        >>> if repo.update_prebuilt("llvm-2.8-i686-pc-linux-gnu-4.4.tar.bz2"):
        ...     print(repo.archive_path("llvm-2.8-i686-pc-linux-gnu-4.4.tar.bz2"))
    """

    def __init__(
        self,
        base_url: str,
        download_dir: Path,
        reporter: Reporter,
        proxy_url: Optional[str] = None,
    ):
        """
        Initialize repository.

        Args:
            base_url: Asset server base URL
            download_dir: Local package directory (vendor/prebuilt)
            reporter: Run reporter
            proxy_url: Optional HTTP proxy
        """
        self.base_url = base_url.rstrip("/")
        self.download_dir = Path(download_dir)
        self.reporter = reporter
        self.proxy_url = proxy_url

    def url_for(self, name: str) -> str:
        return f"{self.base_url}/{name}"

    def archive_path(self, name: str) -> Path:
        return self.download_dir / name

    def fetch(self, url: str, destination: Path) -> bool:
        """Download url to destination with console progress."""
        return fetch_artifact(
            url,
            destination,
            self.reporter,
            proxy_url=self.proxy_url,
            progress_callback=lambda progress: self.reporter.progress(str(progress)),
        )

    def update_prebuilt(self, name: str, warn: bool = True) -> bool:
        """
        Make sure a verified copy of a package is in the local cache.

        The package is downloaded unless already cached. Its digest file is
        always fetched fresh and checked; a mismatching package is deleted so
        the next run downloads it again. A package without a digest file on
        the server is kept with a warning.

        Args:
            name: Package file name
            warn: Report a package missing from the server as an error

        Returns:
            True if a usable package is in the cache
        """
        archive = self.archive_path(name)
        digest = archive.with_name(archive.name + DIGEST_SUFFIX)
        url = self.url_for(name)

        self.download_dir.mkdir(parents=True, exist_ok=True)

        if not archive.exists():
            self.fetch(url, archive)
            if not archive.exists():
                if warn:
                    self.reporter.error(f"ERROR. No {name} available on server.")
                return False

        if digest.exists():
            digest.unlink()
        self.fetch(url + DIGEST_SUFFIX, digest)

        if digest.exists():
            if not verify_digest_file(digest, archive):
                self.reporter.info(
                    f"ERROR. {name} was corrupted or MD5 checksum is outdated."
                )
                archive.unlink()
                return False
            self.reporter.info("    MD5 checksum for prebuilt LLVM verified.")
        else:
            self.reporter.warn(f"   No MD5 checksum for {name} available on server.")
            self.reporter.warn("   Using LLVM library without checksum validation.")

        self.reporter.info("    Prebuilt packages updated.")
        return True
