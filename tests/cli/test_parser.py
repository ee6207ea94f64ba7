"""
Tests for CLI argument parser.
"""

from pathlib import Path
from unittest.mock import MagicMock, patch

import pytest

from configkit.cli.parser import CLI
from configkit.core.exceptions import FatalConfigurationError
from configkit.resolved import ConfigurationBuilder


@pytest.fixture
def pipeline_cls():
    """Patched ConfigurePipeline; the instance is pipeline_cls.return_value."""
    with patch("configkit.cli.parser.ConfigurePipeline") as cls:
        yield cls


class TestCLIBasics:
    """Test basic CLI functionality."""

    def test_cli_creation(self):
        """Test CLI can be created."""
        cli = CLI()
        assert cli.parser is not None

    def test_version_flag(self, capsys):
        """Test --version flag."""
        cli = CLI()

        with pytest.raises(SystemExit) as exc_info:
            cli.run(["--version"])

        assert exc_info.value.code == 0
        assert "configkit" in capsys.readouterr().out

    def test_defaults(self):
        """Test flags left out stay unset so lower layers apply."""
        args = CLI().parse_args([])

        assert args.llvm_enabled is None
        assert args.skip_system is None
        assert args.feature_execinfo is None
        assert args.show is False

    def test_llvm_flags(self):
        """Test LLVM selection flags."""
        args = CLI().parse_args(
            [
                "--disable-llvm",
                "--require-llvm",
                "--skip-prebuilt",
                "--prebuilt-name",
                "llvm-2.8-custom.tar.bz2",
                "--llvm-path",
                "/opt/llvm",
            ]
        )

        assert args.llvm_enabled is False
        assert args.llvm_required is True
        assert args.skip_prebuilt is True
        assert args.prebuilt_name == "llvm-2.8-custom.tar.bz2"
        assert args.llvm_path == Path("/opt/llvm")

    def test_feature_flags(self):
        """Test --with and --without toggles."""
        args = CLI().parse_args(["--without-execinfo", "--with-vendor-zlib"])

        assert args.feature_execinfo is False
        assert args.feature_vendor_zlib is True
        assert args.feature_c_readline is None


class TestRun:
    """Test running the configure command."""

    def test_overrides_reach_options(self, project_root, pipeline_cls, linux_host):
        """Test command line values end up in the pipeline's options."""
        pipeline_cls.return_value.run.return_value = (
            ConfigurationBuilder().set_host(linux_host).freeze()
        )

        code = CLI().run(
            [
                "--project-root",
                str(project_root),
                "--cc",
                "clang",
                "--skip-system",
                "--without-C-readline",
            ]
        )

        assert code == 0
        options = pipeline_cls.call_args[0][0]
        assert options.cc == "clang"
        assert options.skip_system is True
        assert options.features == {"C-readline": False}

    def test_show(self, project_root, pipeline_cls, linux_host, capsys):
        """Test --show prints the configuration as YAML."""
        pipeline_cls.return_value.run.return_value = (
            ConfigurationBuilder().set_host(linux_host).set_tool("cc", "gcc").freeze()
        )

        code = CLI().run(["--project-root", str(project_root), "--show"])

        assert code == 0
        out = capsys.readouterr().out
        assert "llvm: 'no'" in out
        assert "ldshared: gcc -shared" in out

    def test_fatal_error(self, project_root, pipeline_cls, capsys):
        """Test a fatal configuration error points at the run log."""
        pipeline_cls.return_value.run.side_effect = FatalConfigurationError("boom")

        code = CLI().run(["--project-root", str(project_root)])

        assert code == 1
        err = capsys.readouterr().err
        assert "'configure' has failed. Please check" in err
        assert str(project_root / "configure.log") in err

    def test_keyboard_interrupt(self, project_root, pipeline_cls):
        """Test an interrupted run exits with 130."""
        pipeline_cls.return_value.run.side_effect = KeyboardInterrupt

        assert CLI().run(["--project-root", str(project_root)]) == 130

    def test_invalid_options_file(self, project_root, pipeline_cls, capsys):
        """Test a broken options file is reported without running."""
        (project_root / "configkit.yaml").write_text("tools: [unclosed\n")

        code = CLI().run(["--project-root", str(project_root)])

        assert code == 1
        assert "ERROR:" in capsys.readouterr().err
        pipeline_cls.assert_not_called()

    @pytest.mark.parametrize("updated,expected", [(True, 0), (False, 1)])
    def test_update_prebuilt(self, project_root, pipeline_cls, updated, expected):
        """Test --update-prebuilt refreshes the package instead of configuring."""
        pipeline = MagicMock()
        pipeline.update_prebuilt.return_value = updated
        pipeline_cls.return_value = pipeline

        code = CLI().run(["--project-root", str(project_root), "--update-prebuilt"])

        assert code == expected
        pipeline.update_prebuilt.assert_called_once_with()
        pipeline.run.assert_not_called()
