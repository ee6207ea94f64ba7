"""
Compile-and-run capability probing.

The prober answers questions about the host toolchain by building tiny
programs with the configured C++ compiler:

- run_program: compile, link and execute; the answer is the exit status
- compile_program: compile and link only; the answer is whether it worked
- inspect_symbol: compile to assembly and look for a symbol reference

Every probe writes its source and the compiler command line to the run log
before running, appends the compiler output after, and works in its own
temporary directory that is always removed.
"""

import logging
import shlex
import tempfile
from pathlib import Path
from typing import List, Optional, Sequence

from configkit.core.commands import CommandResult, CommandRunner
from configkit.core.exceptions import FatalConfigurationError
from configkit.core.platform import HostDescriptor
from configkit.core.reporting import Reporter

logger = logging.getLogger(__name__)

PROBE_BASENAME = "configkit-probe"
EXTRA_INCLUDE_DIRS = (Path("/usr/local/include"), Path("/opt/local/include"))


class CapabilityProber:
    """
    Builds and runs probe programs with the host C++ compiler.

    Example:
        >>> prober = CapabilityProber(runner, reporter, host, cxx="g++")
        >>> prober.run_program("int main() { return sizeof(long); }")
        8
    """

    def __init__(
        self,
        runner: CommandRunner,
        reporter: Reporter,
        host: HostDescriptor,
        cxx: str = "g++",
        cflags: str = "",
        include_dirs: Sequence[Path] = EXTRA_INCLUDE_DIRS,
    ):
        """
        Initialize prober.

        Args:
            runner: Command runner for the host
            reporter: Run reporter
            host: Host descriptor
            cxx: C++ compiler command
            cflags: User CFLAGS, passed to every compile
            include_dirs: Include directories added to symbol probes when present
        """
        self.runner = runner
        self.reporter = reporter
        self.host = host
        self.cxx = cxx
        self.cflags = shlex.split(cflags or "")
        self.include_dirs = list(include_dirs)

    @property
    def default_link_libs(self) -> List[str]:
        """Libraries every linked probe gets: libm, except on haiku."""
        if "haiku" in self.host.triple:
            return []
        return ["m"]

    @property
    def c_includes(self) -> List[str]:
        return [f"-I{d}" for d in self.include_dirs if Path(d).exists()]

    def _executable_name(self) -> str:
        return PROBE_BASENAME + (".exe" if self.host.is_windows else "")

    def _invoke(self, argv: List[str], cwd: Path) -> CommandResult:
        self.reporter.debug(" ".join(shlex.quote(a) for a in argv))
        result = self.runner.run(argv, cwd=cwd)
        self.reporter.log_block(result.output)
        return result

    def _build(self, workdir: Path, source: str, link_libs: Sequence[str]) -> CommandResult:
        source_file = workdir / f"{PROBE_BASENAME}.cpp"
        source_file.write_text(source if source.endswith("\n") else source + "\n")
        self.reporter.log_block(source)

        libs = [f"-l{lib}" for lib in [*self.default_link_libs, *link_libs]]
        argv = [
            self.cxx,
            *self.cflags,
            "-o",
            str(workdir / self._executable_name()),
            str(source_file),
            "-lstdc++",
            *libs,
        ]
        return self._invoke(argv, workdir)

    def run_program(
        self, source: str, link_libs: Sequence[str] = (), mandatory: bool = True
    ) -> Optional[int]:
        """
        Compile, link and run a probe program.

        Args:
            source: C++ source text
            link_libs: Extra libraries to link (names without -l)
            mandatory: Whether a compile failure aborts the run

        Returns:
            Exit status of the probe program, or None if an optional probe
            did not compile

        Raises:
            FatalConfigurationError: If a mandatory probe does not compile
        """
        with tempfile.TemporaryDirectory(prefix="configkit-") as tmpdir:
            workdir = Path(tmpdir)
            build = self._build(workdir, source, link_libs)

            if not build.ok:
                if mandatory:
                    self.reporter.error("compiling configure test program failed")
                    raise FatalConfigurationError(
                        f"Compiling a configure test program with {self.cxx} failed"
                    )
                return None

            result = self._invoke([str(workdir / self._executable_name())], workdir)
            return result.returncode

    def compile_program(self, source: str, link_libs: Sequence[str] = ()) -> bool:
        """
        Compile and link a probe program without running it.

        Args:
            source: C++ source text
            link_libs: Extra libraries to link (names without -l)

        Returns:
            True if the compiler exited with status 0
        """
        with tempfile.TemporaryDirectory(prefix="configkit-") as tmpdir:
            return self._build(Path(tmpdir), source, link_libs).ok

    def inspect_symbol(self, name: str, includes: Sequence[str] = ()) -> bool:
        """
        Check that a C symbol is declared by the given headers.

        The probe is compiled to assembly on stdout and never executed. The
        symbol counts as present when compilation succeeds and the assembly
        references it.

        Args:
            name: Function name (e.g. 'backtrace')
            includes: Headers to include (e.g. ['execinfo.h'])

        Returns:
            True if the symbol is available
        """
        lines = [f"#include <{header}>" for header in includes]
        lines.append(f"int main() {{ void* volatile ptr = (void*)&{name}; return 0; }}")
        source = "\n".join(lines) + "\n"

        with tempfile.TemporaryDirectory(prefix="configkit-") as tmpdir:
            workdir = Path(tmpdir)
            source_file = workdir / f"{PROBE_BASENAME}.c"
            source_file.write_text(source)
            self.reporter.log_block(source)

            argv = [
                self.cxx,
                "-S",
                "-o",
                "-",
                "-x",
                "c",
                *self.c_includes,
                *self.cflags,
                str(source_file),
            ]
            self.reporter.debug(" ".join(shlex.quote(a) for a in argv))
            result = self.runner.run(argv, cwd=workdir)
            self.reporter.log_block(result.stderr)

        return result.ok and name in result.stdout
