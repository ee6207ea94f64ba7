"""
Host platform identification for configkit.

The host is described by a GNU-style `cpu-vendor-os` triple, as printed by
`config.guess` or `cc -dumpmachine`. Everything else the configure run needs
to know about the platform (family flags, the darwin kernel major version,
the Linux distribution label used to name prebuilt packages) is derived from
that triple.

Features:
- Triple parsing into cpu, vendor and os fields
- Platform family flags (windows, darwin, bsd, linux)
- Host triple detection with config.guess / compiler / platform-module fallbacks
- Linux distribution label detection (e.g. 'ubuntu-10.04', 'debian-6-0')

Usage:
    from configkit.core.platform import HostDescriptor, detect_host_triple

    host = HostDescriptor.from_triple(detect_host_triple())
    if host.is_darwin:
        print(f"darwin {host.darwin_major()}")
"""

import logging
import platform
import re
import subprocess
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

import distro

logger = logging.getLogger(__name__)

_TRIPLE = re.compile(r"([^-]+)-([^-]+)-(.*)")
_DARWIN_VERSION = re.compile(r"darwin(\d+)\.(\d+)\.(\d+)")


@dataclass(frozen=True)
class HostDescriptor:
    """
    Platform identity derived from a host triple.

    Attributes:
        triple: The full triple string (e.g. 'x86_64-unknown-linux-gnu')
        cpu: CPU field ('x86_64', 'i686', 'powerpc')
        vendor: Vendor field ('unknown', 'pc', 'apple')
        os: Remainder of the triple ('linux-gnu', 'darwin10.4.0', 'mingw32')
        is_windows: OS field mentions mingw or mswin
        is_darwin: OS field mentions darwin
        is_bsd: OS field mentions bsd
        is_linux: OS field mentions linux
    """

    triple: str = ""
    cpu: str = ""
    vendor: str = ""
    os: str = ""
    is_windows: bool = False
    is_darwin: bool = False
    is_bsd: bool = False
    is_linux: bool = False

    @classmethod
    def from_triple(cls, triple: str) -> "HostDescriptor":
        """
        Parse a host triple.

        The first two hyphen-delimited fields become cpu and vendor; the
        remainder is the OS. A triple that does not match yields empty
        fields and all-false flags rather than an error.

        Args:
            triple: Host triple string

        Returns:
            HostDescriptor instance

        Example:
            >>> host = HostDescriptor.from_triple("x86_64-unknown-linux-gnu")
            >>> (host.cpu, host.vendor, host.os, host.is_linux)
            ('x86_64', 'unknown', 'linux-gnu', True)
        """
        triple = (triple or "").strip()
        match = _TRIPLE.match(triple)
        if not match:
            logger.debug(f"Unparseable host triple: {triple!r}")
            return cls(triple=triple)

        cpu, vendor, os_name = match.groups()
        return cls(
            triple=triple,
            cpu=cpu,
            vendor=vendor,
            os=os_name,
            is_windows=re.search(r"mingw|mswin", os_name) is not None,
            is_darwin="darwin" in os_name,
            is_bsd="bsd" in os_name,
            is_linux="linux" in os_name,
        )

    def darwin_major(self) -> Optional[int]:
        """
        Get the darwin kernel major version (10 for darwin10.4.0).

        Returns:
            Major version, or None when the OS field is not a full darwin version
        """
        match = _DARWIN_VERSION.search(self.os)
        return int(match.group(1)) if match else None

    @property
    def family(self) -> str:
        """Platform family name used to pick a command runner."""
        if self.is_windows:
            return "windows"
        if self.is_darwin:
            return "darwin"
        if self.is_bsd:
            return "bsd"
        if self.is_linux:
            return "linux"
        return "unknown"

    def __str__(self) -> str:
        return self.triple or "<unknown host>"


def detect_host_triple(
    guess_script: Optional[Path] = None, cc: Optional[str] = None
) -> str:
    """
    Determine the host triple.

    Tries, in order: running a config.guess script through sh, asking the C
    compiler with -dumpmachine, and synthesising a triple from the platform
    module.

    Args:
        guess_script: Optional path to a config.guess script
        cc: Optional C compiler command

    Returns:
        Host triple string
    """
    if guess_script and Path(guess_script).exists():
        triple = _run_for_triple(["sh", "-c", str(guess_script)])
        if triple:
            return triple

    if cc:
        triple = _run_for_triple([cc, "-dumpmachine"])
        if triple:
            return triple

    return _synthesize_triple()


def _run_for_triple(command: list) -> str:
    try:
        result = subprocess.run(
            command, capture_output=True, text=True, timeout=30, check=False
        )
    except (OSError, subprocess.TimeoutExpired) as e:
        logger.debug(f"Host triple command {command} failed: {e}")
        return ""

    if result.returncode != 0:
        return ""
    return result.stdout.strip()


def _synthesize_triple() -> str:
    system = platform.system().lower()
    machine = platform.machine().lower() or "unknown"

    if machine in ("amd64", "x64"):
        machine = "x86_64"
    elif machine == "arm64" and system != "darwin":
        machine = "aarch64"

    if system == "linux":
        return f"{machine}-unknown-linux-gnu"
    if system == "darwin":
        return f"{machine}-apple-darwin{platform.release()}"
    if system == "windows":
        return f"{machine}-pc-mingw32"
    if system.endswith("bsd"):
        return f"{machine}-unknown-{system}{platform.release()}"
    return f"{machine}-unknown-{system or 'unknown'}"


def detect_system_name(host: HostDescriptor) -> Optional[str]:
    """
    Detect a Linux distribution label such as 'ubuntu-10.04'.

    The label is used to look for prebuilt packages built specifically for
    this distribution. Debian hosts use /etc/debian_version, with non-word
    characters replaced by '-'.

    Args:
        host: Host descriptor

    Returns:
        '<name>-<version>' label, or None on non-Linux hosts or when unknown
    """
    if not host.is_linux:
        return None

    name, version = _distribution_from_distro()
    if not name:
        name, version = _distribution_from_issue(Path("/etc/issue"))
    if not name:
        return None

    debian_version = Path("/etc/debian_version")
    if name == "debian" and debian_version.exists():
        try:
            raw = debian_version.read_text().split()[0]
            version = re.sub(r"\W", "-", raw)
        except (OSError, IndexError):
            pass

    return f"{name}-{version}"


def _distribution_from_distro() -> tuple:
    name = distro.id()
    if not name:
        return "", ""
    return name.lower(), distro.version()


def _distribution_from_issue(issue: Path) -> tuple:
    try:
        lines = issue.read_text().splitlines()
    except OSError:
        return "", ""
    if not lines:
        return "", ""

    match = re.match(r"([^ ]+)[^\d.]*([\d.]*)", lines[0])
    if not match:
        return "", ""
    return match.group(1).lower(), match.group(2)
