"""
Unit tests for the command runner abstraction.
"""

import subprocess
from unittest.mock import MagicMock, patch

from configkit.core.commands import (
    COMMAND_NOT_FOUND,
    PosixCommandRunner,
    WindowsCommandRunner,
    select_runner,
)
from configkit.core.platform import HostDescriptor


class TestSelectRunner:
    """Test runner selection from the host."""

    def test_windows(self):
        """Test windows hosts get the wrapping runner."""
        host = HostDescriptor.from_triple("i686-pc-mingw32")
        assert isinstance(select_runner(host), WindowsCommandRunner)

    def test_posix(self, linux_host, darwin_host):
        """Test other hosts run commands directly."""
        assert isinstance(select_runner(linux_host), PosixCommandRunner)
        assert isinstance(select_runner(darwin_host), PosixCommandRunner)


class TestWrapping:
    """Test command wrapping."""

    def test_posix_unchanged(self):
        """Test posix runner passes argv through."""
        assert PosixCommandRunner().wrap(["tar", "xjf", "a.tar.bz2"]) == [
            "tar",
            "xjf",
            "a.tar.bz2",
        ]

    def test_windows_cmd(self):
        """Test windows runner wraps every call in cmd.exe /C."""
        wrapped = WindowsCommandRunner().wrap(["bsdtar", "xzf", "C:\\a b\\x.tgz"])
        assert wrapped[:2] == ["cmd.exe", "/C"]
        assert wrapped[2] == 'bsdtar xzf "C:\\a b\\x.tgz"'


class TestRun:
    """Test running commands."""

    def test_captures_output(self):
        """Test stdout, stderr and status are captured."""
        completed = MagicMock(returncode=3, stdout="out", stderr="err")
        with patch("subprocess.run", return_value=completed) as run:
            result = PosixCommandRunner().run(["cc", "--version"])

        assert result.returncode == 3
        assert result.output == "outerr"
        assert not result.ok
        assert run.call_args[0][0] == ["cc", "--version"]

    def test_missing_program(self):
        """Test a program that does not exist reports 127."""
        with patch("subprocess.run", side_effect=FileNotFoundError("no such file")):
            result = PosixCommandRunner().run(["no-such-tool"])
        assert result.returncode == COMMAND_NOT_FOUND

    def test_timeout(self):
        """Test a timed out program reports failure."""
        with patch(
            "subprocess.run", side_effect=subprocess.TimeoutExpired(["x"], 5)
        ):
            result = PosixCommandRunner(timeout=5).run(["x"])
        assert not result.ok

    def test_paths_stringified(self, tmp_path):
        """Test Path arguments are passed as strings."""
        completed = MagicMock(returncode=0, stdout="", stderr="")
        with patch("subprocess.run", return_value=completed) as run:
            PosixCommandRunner().run([tmp_path / "prog"], cwd=tmp_path)
        assert run.call_args[0][0] == [str(tmp_path / "prog")]
        assert run.call_args[1]["cwd"] == str(tmp_path)
