"""
Configure run orchestration.

A run identifies the host, checks required build tools, resolves the
toolkit through the acquisition chain, probes the host toolchain and freezes
everything into a ResolvedConfiguration.

Usage:
    reporter = Reporter(options.log_file, verbose=options.verbose)
    config = ConfigurePipeline(options, reporter).run()
    print(config.to_dict()["llvm"])
"""

import logging
from pathlib import Path
from typing import Optional

from configkit.core.commands import CommandRunner, select_runner
from configkit.core.options import ConfigureOptions
from configkit.core.platform import HostDescriptor, detect_host_triple, detect_system_name
from configkit.core.reporting import Reporter
from configkit.probing.detectors import run_detectors
from configkit.probing.prober import CapabilityProber
from configkit.probing.tools import check_build_tools
from configkit.resolved import ConfigurationBuilder, ResolvedConfiguration
from configkit.toolchain.chain import AcquisitionChain
from configkit.toolchain.layout import LLVM_2_8, ToolkitRelease, VendorLayout
from configkit.toolchain.prebuilt import generic_prebuilt_name
from configkit.toolchain.strategies.remote import repository_for
from configkit.toolchain.strategy import StrategyContext

logger = logging.getLogger(__name__)

GUESS_SCRIPTS = ("rakelib/config.guess", "config.guess")


def find_guess_script(project_root: Path) -> Optional[Path]:
    for relative in GUESS_SCRIPTS:
        candidate = project_root / relative
        if candidate.exists():
            return candidate
    return None


class ConfigurePipeline:
    """Runs one configure pass over a project."""

    def __init__(
        self,
        options: ConfigureOptions,
        reporter: Reporter,
        runner: Optional[CommandRunner] = None,
        host: Optional[HostDescriptor] = None,
        chain: Optional[AcquisitionChain] = None,
        release: ToolkitRelease = LLVM_2_8,
    ):
        """
        Initialize pipeline.

        Args:
            options: Configure options
            reporter: Run reporter
            runner: Command runner (default: selected from the host)
            host: Host descriptor (default: detected)
            chain: Acquisition chain (default: strategies from options)
            release: Targeted toolkit release
        """
        self.options = options
        self.reporter = reporter
        self.host = host or HostDescriptor.from_triple(
            detect_host_triple(find_guess_script(options.project_root), options.cc)
        )
        self.runner = runner or select_runner(self.host)
        self.chain = chain or AcquisitionChain()
        self.release = release

    def _context(self) -> StrategyContext:
        compiler_version = check_build_tools(
            self.runner, self.reporter, self.host, self.options.cc
        )
        return StrategyContext(
            options=self.options,
            host=self.host,
            runner=self.runner,
            reporter=self.reporter,
            layout=VendorLayout(self.options.vendor_dir),
            release=self.release,
            system_name=self.options.system_name or detect_system_name(self.host),
            compiler_version=compiler_version,
        )

    def run(self) -> ResolvedConfiguration:
        """
        Run the configure pass.

        Returns:
            Frozen configuration

        Raises:
            FatalConfigurationError: If the run cannot complete
        """
        options = self.options
        logger.debug(f"Configuring {options.project_root} for {self.host}")
        context = self._context()

        if options.llvm_enabled:
            self.reporter.info("Configuring LLVM...")
        else:
            self.reporter.info("WARNING: LLVM disabled.")
        candidate = self.chain.resolve(context)
        self.reporter.info("")

        prober = CapabilityProber(
            self.runner, self.reporter, self.host, cxx=options.cxx, cflags=options.cflags
        )
        detection = run_detectors(prober, options, self.host)

        builder = ConfigurationBuilder().set_host(self.host).set_toolchain(candidate)
        for fact in detection.facts:
            builder.add_fact(fact.name, fact.value)
        for define in detection.defines:
            builder.add_define(define)

        builder.set_tool("cc", options.cc)
        builder.set_tool("cxx", options.cxx)
        builder.set_tool("perl", options.perl)
        builder.set_tool("tar", options.tar or "")
        builder.set_user_flag("cflags", options.cflags)
        builder.set_user_flag("cppflags", options.cppflags)
        builder.set_user_flag("ldflags", options.ldflags)

        return builder.freeze()

    def update_prebuilt(self) -> bool:
        """
        Refresh the generic prebuilt package for this host.

        Returns:
            True if a verified package is in vendor/prebuilt
        """
        context = self._context()
        name = self.options.prebuilt_name or generic_prebuilt_name(
            self.release, self.host, context.compiler_version
        )
        self.reporter.info(f"Updating prebuilt LLVM package {name}...")
        return repository_for(context).update_prebuilt(name, warn=True)
