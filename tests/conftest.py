"""
Pytest configuration and shared fixtures for configkit tests.
"""

import hashlib
import io
import tarfile
from pathlib import Path
from typing import Callable, Dict, List, Optional, Sequence

import pytest

from configkit.core.commands import CommandResult, CommandRunner
from configkit.core.options import ConfigureOptions
from configkit.core.platform import HostDescriptor
from configkit.core.reporting import Reporter
from configkit.toolchain.layout import VendorLayout
from configkit.toolchain.strategy import StrategyContext


def pytest_addoption(parser):
    """Add custom command line options."""
    parser.addoption(
        "--integration",
        action="store_true",
        default=False,
        help="run integration tests that invoke the real host compiler",
    )


def pytest_collection_modifyitems(config, items):
    """Skip integration tests unless --integration flag is provided."""
    if not config.getoption("--integration"):
        skip_integration = pytest.mark.skip(reason="need --integration option to run")
        for item in items:
            if "integration" in item.keywords:
                item.add_marker(skip_integration)


def pytest_configure(config):
    """Register custom markers."""
    config.addinivalue_line(
        "markers",
        "integration: marks tests as integration tests (requires --integration)",
    )


# ============================================================================
# Command Runner Double
# ============================================================================


class FakeRunner(CommandRunner):
    """
    Command runner that answers from registered rules instead of running programs.

    A rule matches when every element of its pattern occurs, in order, as a
    contiguous slice of argv; the first matching rule wins. Unmatched commands
    report status 127, as if the program did not exist.
    """

    def __init__(self):
        super().__init__()
        self.calls: List[List[str]] = []
        self._rules: List[tuple] = []

    def on(
        self,
        *pattern: str,
        returncode: int = 0,
        stdout: str = "",
        stderr: str = "",
        action: Optional[Callable[[List[str], Optional[Path]], None]] = None,
        handler: Optional[Callable[[List[str], Optional[Path]], CommandResult]] = None,
    ) -> "FakeRunner":
        self._rules.append((list(pattern), returncode, stdout, stderr, action, handler))
        return self

    @staticmethod
    def _matches(pattern: Sequence[str], argv: Sequence[str]) -> bool:
        if not pattern:
            return True
        for start in range(len(argv) - len(pattern) + 1):
            if list(argv[start : start + len(pattern)]) == list(pattern):
                return True
        return False

    def run(self, argv, cwd=None, input=None) -> CommandResult:
        args = [str(a) for a in argv]
        self.calls.append(args)
        for pattern, returncode, stdout, stderr, action, handler in self._rules:
            if self._matches(pattern, args):
                if action:
                    action(args, cwd)
                if handler:
                    return handler(args, cwd)
                return CommandResult(args, returncode, stdout, stderr)
        return CommandResult(args, 127, "", f"{args[0]}: command not found")

    def wrap(self, argv: List[str]) -> List[str]:
        return argv

    def called_with(self, *pattern: str) -> bool:
        return any(self._matches(pattern, call) for call in self.calls)


# ============================================================================
# Shared Test Fixtures
# ============================================================================


@pytest.fixture
def fake_runner() -> FakeRunner:
    """Command runner double with no rules."""
    return FakeRunner()


@pytest.fixture
def console() -> Dict[str, io.StringIO]:
    """Captured console streams for a Reporter."""
    return {"stdout": io.StringIO(), "stderr": io.StringIO()}


@pytest.fixture
def reporter(tmp_path, console):
    """Reporter writing to tmp_path/configure.log with captured console."""
    rep = Reporter(
        tmp_path / "configure.log",
        stdout=console["stdout"],
        stderr=console["stderr"],
    )
    yield rep
    rep.close()


@pytest.fixture
def linux_host() -> HostDescriptor:
    return HostDescriptor.from_triple("x86_64-unknown-linux-gnu")


@pytest.fixture
def darwin_host() -> HostDescriptor:
    return HostDescriptor.from_triple("i386-apple-darwin10.4.0")


@pytest.fixture
def project_root(tmp_path) -> Path:
    root = tmp_path / "project"
    root.mkdir()
    return root


@pytest.fixture
def options(project_root) -> ConfigureOptions:
    """Options for a project under tmp_path with no system lookups configured."""
    return ConfigureOptions(
        project_root=project_root,
        prebuilt_url="http://assets.test/prebuilt",
        source_url="http://releases.test/2.8/llvm-2.8.tgz",
    )


@pytest.fixture
def make_context(options, linux_host, fake_runner, reporter):
    """Factory for StrategyContext; keyword arguments replace defaults."""

    def _make(**kwargs) -> StrategyContext:
        values = dict(
            options=options,
            host=linux_host,
            runner=fake_runner,
            reporter=reporter,
            layout=VendorLayout(options.vendor_dir),
        )
        values.update(kwargs)
        return StrategyContext(**values)

    return _make


# ============================================================================
# Toolkit Tree Helpers
# ============================================================================


def make_built_tree(tree: Path, profile: str = "Release") -> Path:
    """Create a tree with the layout marker and a locator; return the locator."""
    (tree / "include").mkdir(parents=True, exist_ok=True)
    locator = tree / profile / "bin" / "llvm-config"
    locator.parent.mkdir(parents=True, exist_ok=True)
    locator.write_text("#!/usr/bin/perl\n")
    return locator


def make_tarball(
    path: Path, files: Dict[str, str], mode: str = "w:bz2"
) -> bytes:
    """Write a tar archive with the given member files; return its bytes."""
    path.parent.mkdir(parents=True, exist_ok=True)
    with tarfile.open(path, mode) as tar:
        for name, content in files.items():
            data = content.encode()
            info = tarfile.TarInfo(name)
            info.size = len(data)
            tar.addfile(info, io.BytesIO(data))
    return path.read_bytes()


def md5_line(data: bytes, name: str) -> str:
    return f"{hashlib.md5(data).hexdigest()}  {name}\n"


@pytest.fixture
def tree_helpers():
    """Access to tree/archive helper functions."""

    class Helpers:
        built_tree = staticmethod(make_built_tree)
        tarball = staticmethod(make_tarball)
        digest = staticmethod(md5_line)

    return Helpers
