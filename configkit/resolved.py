"""
Resolved configuration aggregate.

A ConfigurationBuilder collects the results of a run (host, accepted
toolkit, probed facts, compile defines and build tool settings) and is
frozen into an immutable ResolvedConfiguration once probing completes. The
emission step reads the frozen aggregate through to_dict().
"""

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Dict, List, Mapping, Optional, Tuple

from configkit.core.exceptions import ConfigurationFrozenError
from configkit.core.platform import HostDescriptor
from configkit.probing.detectors import FactValue
from configkit.toolchain.candidate import ToolchainCandidate

DISABLED_TOOLKIT = "no"
DEFAULT_API_VERSION = 208


def ldshared_command(cc: str, host: HostDescriptor) -> str:
    """Command used to link loadable extensions on a host."""
    if host.is_darwin:
        return f"{cc} -bundle -undefined suppress -flat_namespace"
    return f"{cc} -shared"


@dataclass(frozen=True)
class ResolvedConfiguration:
    """
    Immutable result of a configure run.

    Attributes:
        host: Host descriptor
        toolchain: Accepted toolkit candidate, or the none marker
        facts: Probed platform facts (read-only mapping)
        defines: Compile defines
        tools: Build tool commands (cc, cxx, perl, tar)
        user_flags: User CFLAGS, CPPFLAGS and LDFLAGS (read-only mapping)
        ldshared: Extension link command
    """

    host: HostDescriptor
    toolchain: ToolchainCandidate
    facts: Mapping[str, FactValue]
    defines: Tuple[str, ...]
    tools: Mapping[str, str]
    user_flags: Mapping[str, str]
    ldshared: str

    @property
    def llvm(self) -> str:
        if self.toolchain.is_none:
            return DISABLED_TOOLKIT
        return self.toolchain.kind.value

    @property
    def llvm_configure(self) -> str:
        if self.toolchain.is_none or self.toolchain.locator_path is None:
            return ""
        return str(self.toolchain.locator_path)

    @property
    def llvm_api_version(self) -> int:
        if self.toolchain.is_none or self.toolchain.api_version is None:
            return DEFAULT_API_VERSION
        return self.toolchain.api_version

    def to_dict(self) -> Dict[str, Any]:
        """
        Flatten the configuration for the emission step.

        Example:
            >>> config.to_dict()["llvm"]
            'prebuilt'
        """
        data: Dict[str, Any] = {
            "llvm": self.llvm,
            "llvm_configure": self.llvm_configure,
            "llvm_api_version": self.llvm_api_version,
        }
        data.update(self.tools)
        data.update({f"user_{name}": value for name, value in self.user_flags.items()})
        data.update(
            {
                "defines": list(self.defines),
                "host": self.host.triple,
                "cpu": self.host.cpu,
                "vendor": self.host.vendor,
                "os": self.host.os,
                "windows": self.host.is_windows,
                "darwin": self.host.is_darwin,
                "bsd": self.host.is_bsd,
                "linux": self.host.is_linux,
                "ldshared": self.ldshared,
            }
        )
        data.update(self.facts)
        return data


@dataclass
class ConfigurationBuilder:
    """Mutable accumulator for a ResolvedConfiguration; single use."""

    host: Optional[HostDescriptor] = None
    toolchain: ToolchainCandidate = field(default_factory=ToolchainCandidate.none)
    facts: Dict[str, FactValue] = field(default_factory=dict)
    defines: List[str] = field(default_factory=list)
    tools: Dict[str, str] = field(default_factory=dict)
    user_flags: Dict[str, str] = field(default_factory=dict)
    _frozen: bool = field(default=False, repr=False)

    def _check_open(self) -> None:
        if self._frozen:
            raise ConfigurationFrozenError("Configuration has already been frozen")

    def set_host(self, host: HostDescriptor) -> "ConfigurationBuilder":
        self._check_open()
        self.host = host
        return self

    def set_toolchain(self, candidate: ToolchainCandidate) -> "ConfigurationBuilder":
        self._check_open()
        self.toolchain = candidate
        return self

    def add_fact(self, name: str, value: FactValue) -> "ConfigurationBuilder":
        self._check_open()
        self.facts[name] = value
        return self

    def add_define(self, define: str) -> "ConfigurationBuilder":
        self._check_open()
        if define not in self.defines:
            self.defines.append(define)
        return self

    def set_tool(self, name: str, command: str) -> "ConfigurationBuilder":
        self._check_open()
        self.tools[name] = command
        return self

    def set_user_flag(self, name: str, value: str) -> "ConfigurationBuilder":
        self._check_open()
        self.user_flags[name] = value
        return self

    def freeze(self) -> ResolvedConfiguration:
        """
        Produce the immutable configuration.

        Raises:
            ConfigurationFrozenError: If the builder was already frozen
            ValueError: If no host was set
        """
        self._check_open()
        if self.host is None:
            raise ValueError("Cannot freeze a configuration without a host")

        self._frozen = True
        return ResolvedConfiguration(
            host=self.host,
            toolchain=self.toolchain,
            facts=MappingProxyType(dict(self.facts)),
            defines=tuple(self.defines),
            tools=MappingProxyType(dict(self.tools)),
            user_flags=MappingProxyType(dict(self.user_flags)),
            ldshared=ldshared_command(self.tools.get("cc", "gcc"), self.host),
        )
