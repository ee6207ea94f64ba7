"""
configkit command-line interface.

This module implements the `configkit` command using argparse. It is a thin
layer: it turns flags into configure options, runs the pipeline and maps the
outcome to an exit status.
"""

import argparse
import logging
import sys
from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml

from configkit.core.exceptions import FatalConfigurationError, OptionsError
from configkit.core.options import DEFAULT_LOG_FILE, FEATURES, load_options
from configkit.core.reporting import Reporter
from configkit.pipeline import ConfigurePipeline

try:
    from importlib.metadata import PackageNotFoundError, version

    __version__ = version("configkit")
except PackageNotFoundError:
    __version__ = "0.1.0"

logger = logging.getLogger(__name__)


def print_error(message: str, details: Optional[str] = None):
    """Print error message to stderr in consistent format."""
    print(f"ERROR: {message}", file=sys.stderr)
    if details:
        print(f"  {details}", file=sys.stderr)


def _feature_dest(name: str) -> str:
    return "feature_" + name.replace("-", "_").lower()


class CLI:
    """configkit command-line interface."""

    def __init__(self):
        """Initialize CLI with argument parser."""
        self.parser = self._create_parser()

    def _create_parser(self) -> argparse.ArgumentParser:
        """
        Create argument parser.

        Returns:
            Configured ArgumentParser instance
        """
        parser = argparse.ArgumentParser(
            prog="configkit",
            description="Resolve LLVM and probe the host toolchain before a build",
            formatter_class=argparse.RawDescriptionHelpFormatter,
        )

        parser.add_argument(
            "--version", action="version", version=f"configkit {__version__}"
        )
        parser.add_argument(
            "--verbose", "-V", action="store_true", help="Show warnings and probe details"
        )
        parser.add_argument(
            "--quiet", "-q", action="store_true", help="Only log diagnostic errors"
        )
        parser.add_argument(
            "--project-root",
            type=Path,
            default=Path.cwd(),
            help="Project to configure (default: current directory)",
        )
        parser.add_argument(
            "--config", type=Path, help="YAML options file (default: configkit.yaml)"
        )
        parser.add_argument(
            "--log-file", type=Path, help=f"Run log (default: {DEFAULT_LOG_FILE})"
        )
        parser.add_argument(
            "--show",
            action="store_true",
            help="Print the resolved configuration as YAML",
        )

        tools = parser.add_argument_group("build tools")
        tools.add_argument("--cc", help="C compiler")
        tools.add_argument("--cxx", help="C++ compiler")
        tools.add_argument("--tar", help="External tar program used to unpack archives")
        tools.add_argument("--perl", help="Interpreter used to run llvm-config")

        llvm = parser.add_argument_group("LLVM")
        llvm.add_argument(
            "--enable-llvm",
            dest="llvm_enabled",
            action="store_const",
            const=True,
            help="Enable LLVM (default)",
        )
        llvm.add_argument(
            "--disable-llvm",
            dest="llvm_enabled",
            action="store_const",
            const=False,
            help="Build without LLVM",
        )
        llvm.add_argument(
            "--require-llvm",
            dest="llvm_required",
            action="store_const",
            const=True,
            help="Fail if LLVM cannot be configured",
        )
        llvm.add_argument(
            "--skip-system",
            action="store_const",
            const=True,
            help="Don't consider a system LLVM installation",
        )
        llvm.add_argument(
            "--skip-prebuilt",
            action="store_const",
            const=True,
            help="Don't try to use a prebuilt LLVM package",
        )
        llvm.add_argument("--system-name", help="Name of OS (e.g. fedora-8, ubuntu-10.04)")
        llvm.add_argument("--prebuilt-name", help="Name of the prebuilt LLVM package to try first")
        llvm.add_argument(
            "--llvm-path", type=Path, help="File system path to a built LLVM tree"
        )
        llvm.add_argument("--llvm-config", type=Path, help="Path to llvm-config")
        llvm.add_argument(
            "--update-prebuilt",
            action="store_true",
            help="Update the prebuilt LLVM package and exit",
        )

        features = parser.add_argument_group("features")
        for name in FEATURES:
            features.add_argument(
                f"--with-{name}",
                dest=_feature_dest(name),
                action="store_const",
                const=True,
                help=f"Enable {name}",
            )
            features.add_argument(
                f"--without-{name}",
                dest=_feature_dest(name),
                action="store_const",
                const=False,
                help=f"Disable {name}",
            )

        return parser

    def parse_args(self, args: Optional[List[str]] = None):
        """
        Parse command-line arguments.

        Args:
            args: Arguments to parse (uses sys.argv if None)

        Returns:
            Parsed arguments namespace
        """
        return self.parser.parse_args(args)

    def _overrides(self, args) -> Dict[str, Any]:
        overrides: Dict[str, Any] = {
            name: getattr(args, name)
            for name in (
                "log_file",
                "cc",
                "cxx",
                "tar",
                "perl",
                "llvm_enabled",
                "llvm_required",
                "skip_system",
                "skip_prebuilt",
                "system_name",
                "prebuilt_name",
                "llvm_path",
                "llvm_config",
            )
        }
        overrides["verbose"] = args.verbose or None
        overrides["update_prebuilt"] = args.update_prebuilt or None
        overrides["features"] = {
            name: getattr(args, _feature_dest(name))
            for name in FEATURES
            if getattr(args, _feature_dest(name)) is not None
        }
        return overrides

    def run(self, args: Optional[List[str]] = None) -> int:
        """
        Run CLI with given arguments.

        Args:
            args: Arguments to parse (uses sys.argv if None)

        Returns:
            Exit code (0 for success, non-zero for error)
        """
        parsed_args = self.parse_args(args)
        self._configure_logging(parsed_args)

        try:
            options = load_options(
                parsed_args.project_root,
                config_file=parsed_args.config,
                overrides=self._overrides(parsed_args),
            )
        except OptionsError as e:
            print_error(str(e))
            return 1

        reporter = Reporter(options.log_file, verbose=options.verbose)
        try:
            return self._configure(parsed_args, options, reporter)
        except KeyboardInterrupt:
            logger.info("Operation cancelled by user")
            return 130
        except FatalConfigurationError as e:
            reporter.debug(f"Fatal: {e}")
            print(
                f"\n'configure' has failed. Please check {options.log_file} "
                "for more details.",
                file=sys.stderr,
            )
            return 1
        finally:
            reporter.close()

    def _configure(self, args, options, reporter: Reporter) -> int:
        pipeline = ConfigurePipeline(options, reporter)

        if options.update_prebuilt:
            return 0 if pipeline.update_prebuilt() else 1

        config = pipeline.run()
        if args.show:
            print(yaml.safe_dump(config.to_dict(), default_flow_style=False, sort_keys=False))
        return 0

    def _configure_logging(self, args):
        """
        Configure logging based on verbose/quiet flags.

        Args:
            args: Parsed arguments with verbose/quiet flags
        """
        if args.verbose:
            level = logging.DEBUG
            format_str = "%(levelname)s [%(name)s] %(message)s"
        elif args.quiet:
            level = logging.ERROR
            format_str = "%(levelname)s: %(message)s"
        else:
            level = logging.WARNING
            format_str = "%(levelname)s: %(message)s"

        logging.basicConfig(level=level, format=format_str, force=True)


def main():
    """Main entry point for CLI."""
    cli = CLI()
    sys.exit(cli.run())


if __name__ == "__main__":
    main()
