"""
Unit tests for host platform identification.
"""

from unittest.mock import patch

import pytest

from configkit.core import platform as platform_module
from configkit.core.platform import (
    HostDescriptor,
    detect_host_triple,
    detect_system_name,
)


class TestHostDescriptor:
    """Test HostDescriptor.from_triple."""

    def test_linux(self):
        """Test a linux triple."""
        host = HostDescriptor.from_triple("x86_64-unknown-linux-gnu")
        assert (host.cpu, host.vendor, host.os) == ("x86_64", "unknown", "linux-gnu")
        assert host.is_linux
        assert not (host.is_windows or host.is_darwin or host.is_bsd)
        assert host.family == "linux"

    def test_darwin(self):
        """Test a darwin triple and its kernel major version."""
        host = HostDescriptor.from_triple("i386-apple-darwin10.4.0")
        assert host.is_darwin
        assert host.darwin_major() == 10

    @pytest.mark.parametrize("triple", ["i686-pc-mingw32", "x86_64-pc-mswin64"])
    def test_windows(self, triple):
        """Test mingw and mswin are windows."""
        host = HostDescriptor.from_triple(triple)
        assert host.is_windows
        assert host.family == "windows"

    def test_bsd(self):
        """Test a bsd triple."""
        assert HostDescriptor.from_triple("amd64-unknown-freebsd8.1").is_bsd

    def test_os_keeps_remaining_fields(self):
        """Test everything after the vendor belongs to the OS field."""
        host = HostDescriptor.from_triple("arm-unknown-linux-gnueabi")
        assert host.os == "linux-gnueabi"

    def test_unparseable(self):
        """Test an unparseable triple gives empty fields instead of raising."""
        host = HostDescriptor.from_triple("garbage")
        assert host.cpu == host.vendor == host.os == ""
        assert not (host.is_linux or host.is_windows or host.is_darwin or host.is_bsd)
        assert host.darwin_major() is None

    def test_darwin_major_needs_full_version(self):
        """Test darwin without a full version has no major."""
        assert HostDescriptor.from_triple("x86_64-apple-darwin").darwin_major() is None


class TestDetectHostTriple:
    """Test host triple detection fallbacks."""

    def test_guess_script_first(self, tmp_path):
        """Test config.guess output is used when the script exists."""
        script = tmp_path / "config.guess"
        script.write_text("echo x86_64-unknown-linux-gnu\n")
        with patch.object(
            platform_module, "_run_for_triple", return_value="x86_64-unknown-linux-gnu"
        ) as run:
            assert detect_host_triple(script, "gcc") == "x86_64-unknown-linux-gnu"
        run.assert_called_once_with(["sh", "-c", str(script)])

    def test_compiler_fallback(self, tmp_path):
        """Test the compiler is asked when there is no guess script."""
        with patch.object(
            platform_module, "_run_for_triple", return_value="i686-pc-linux-gnu"
        ) as run:
            assert detect_host_triple(tmp_path / "missing", "gcc") == "i686-pc-linux-gnu"
        run.assert_called_once_with(["gcc", "-dumpmachine"])

    def test_synthesized_fallback(self):
        """Test a triple is synthesised when nothing else works."""
        with patch.object(platform_module, "_run_for_triple", return_value=""), patch(
            "platform.system", return_value="Linux"
        ), patch("platform.machine", return_value="AMD64"):
            assert detect_host_triple(None, "cc") == "x86_64-unknown-linux-gnu"


class TestDetectSystemName:
    """Test distribution label detection."""

    def test_non_linux(self, darwin_host):
        """Test non-linux hosts have no label."""
        assert detect_system_name(darwin_host) is None

    def test_from_distro(self, linux_host):
        """Test label from the distro library."""
        with patch("distro.id", return_value="ubuntu"), patch(
            "distro.version", return_value="10.04"
        ):
            assert detect_system_name(linux_host) == "ubuntu-10.04"

    def test_issue_fallback(self, linux_host, tmp_path):
        """Test label from the first line of an issue file."""
        issue = tmp_path / "issue"
        issue.write_text("Fedora release 8 (Werewolf)\nKernel \\r\n")
        assert platform_module._distribution_from_issue(issue) == ("fedora", "8")

    def test_unknown(self, linux_host):
        """Test no label when nothing identifies the distribution."""
        with patch("distro.id", return_value=""), patch.object(
            platform_module, "_distribution_from_issue", return_value=("", "")
        ):
            assert detect_system_name(linux_host) is None
