"""
File system utilities for the vendor directory.

This module provides the few file operations the acquisition strategies need:
- Archive extraction (tar.gz/tgz, tar.bz2) with directory traversal checks
- Extraction through an external tar program when one is configured
- Tree removal confined to a required parent directory
- Executable lookup on PATH
"""

import os
import shutil
import sys
import tarfile
from pathlib import Path
from typing import List, Optional, Union

from configkit.core.commands import CommandRunner

IS_WINDOWS = os.name == "nt"


# ============================================================================
# Errors
# ============================================================================


class FilesystemError(Exception):
    """Base exception for filesystem operations."""

    pass


class ArchiveExtractionError(FilesystemError):
    """Failed to extract an archive."""

    pass


class UnsupportedArchiveFormat(ArchiveExtractionError):
    """Archive format is not supported."""

    pass


class InsecureArchiveError(ArchiveExtractionError):
    """Archive contains insecure paths (directory traversal attempt)."""

    pass


# ============================================================================
# Path Utilities
# ============================================================================


def is_relative_to(path: Path, parent: Path) -> bool:
    """
    Check if path is relative to (under) parent directory.

    Example:
        >>> is_relative_to(Path("/src/vendor/llvm"), Path("/src/vendor"))
        True
    """
    try:
        path.relative_to(parent)
        return True
    except ValueError:
        return False


def find_executable(
    name: str, search_paths: Optional[List[Path]] = None
) -> Optional[Path]:
    """
    Find an executable in the system PATH or provided search paths.

    Args:
        name: Executable name (e.g., 'llvm-config', 'gcc')
        search_paths: Optional list of directories to search

    Returns:
        Path to executable if found, None otherwise

    Example:
        >>> find_executable('llvm-config')
        PosixPath('/usr/bin/llvm-config')
    """
    extensions = [""] if not IS_WINDOWS else ["", ".exe", ".bat", ".cmd"]

    if search_paths is None:
        path_env = os.environ.get("PATH", "")
        search_paths = [Path(p) for p in path_env.split(os.pathsep) if p]

    for directory in search_paths:
        for ext in extensions:
            exe_path = Path(directory) / f"{name}{ext}"
            if exe_path.is_file() and os.access(exe_path, os.X_OK):
                return exe_path

    return None


# ============================================================================
# Archive Extraction
# ============================================================================

_TAR_MODES = {
    ".tar.gz": "r:gz",
    ".tgz": "r:gz",
    ".tar.bz2": "r:bz2",
    ".tbz2": "r:bz2",
}


def _tar_mode(archive_path: Path) -> str:
    name = archive_path.name.lower()
    for suffix, mode in _TAR_MODES.items():
        if name.endswith(suffix):
            return mode
    raise UnsupportedArchiveFormat(
        f"Unsupported archive format: {archive_path.name}. "
        "Supported: .tar.gz, .tgz, .tar.bz2, .tbz2"
    )


def _validate_archive_path(path: str, destination: Path) -> None:
    """
    Validate that an archive member path is safe to extract.

    Raises:
        InsecureArchiveError: If path attempts directory traversal
    """
    member_path = (destination / path).resolve()
    if not is_relative_to(member_path, destination.resolve()):
        raise InsecureArchiveError(
            f"Archive member '{path}' attempts directory traversal. "
            "This is a security risk and extraction has been blocked."
        )


def extract_archive(
    archive_path: Union[str, Path],
    destination: Union[str, Path],
) -> None:
    """
    Extract a tar archive to a destination directory.

    Compression is picked from the file name. All member paths are validated
    before anything is written.

    Args:
        archive_path: Path to the archive file
        destination: Directory to extract to

    Raises:
        UnsupportedArchiveFormat: If archive format is not recognized
        ArchiveExtractionError: If extraction fails, including when
            destination cannot be created
        InsecureArchiveError: If archive contains malicious paths

    Example:
        >>> extract_archive('llvm-2.8.tgz', 'vendor')
    """
    archive_path = Path(archive_path)
    destination = Path(destination)

    if not archive_path.exists():
        raise ArchiveExtractionError(f"Archive not found: {archive_path}")

    mode = _tar_mode(archive_path)

    try:
        destination.mkdir(parents=True, exist_ok=True)
        with tarfile.open(archive_path, mode) as tar:
            for member in tar.getmembers():
                _validate_archive_path(member.name, destination)

            if sys.version_info >= (3, 12):
                tar.extractall(destination, filter="tar")
            else:
                tar.extractall(destination)
    except InsecureArchiveError:
        raise
    except (tarfile.TarError, OSError) as e:
        raise ArchiveExtractionError(f"Failed to extract {archive_path}: {e}")


def extract_with_tool(
    runner: CommandRunner,
    tar_command: str,
    archive_path: Union[str, Path],
    destination: Union[str, Path],
) -> None:
    """
    Extract a tar archive by running an external tar program.

    Args:
        runner: Command runner for the host
        tar_command: tar program to run (e.g. 'tar', 'gtar')
        archive_path: Path to the archive file
        destination: Directory to extract into

    Raises:
        UnsupportedArchiveFormat: If archive format is not recognized
        ArchiveExtractionError: If the tar program fails
    """
    archive_path = Path(archive_path)
    destination = Path(destination)
    flag = "xjf" if _tar_mode(archive_path) == "r:bz2" else "xzf"

    try:
        destination.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        raise ArchiveExtractionError(f"Cannot create {destination}: {e}")

    result = runner.run([tar_command, flag, str(archive_path.resolve())], cwd=destination)
    if not result.ok:
        raise ArchiveExtractionError(
            f"{tar_command} failed on {archive_path.name} "
            f"(status {result.returncode}): {result.stderr.strip()}"
        )


# ============================================================================
# Safe Operations
# ============================================================================


def safe_rmtree(
    path: Union[str, Path], require_prefix: Optional[Union[str, Path]] = None
) -> None:
    """
    Safely remove a directory tree with safeguards.

    Args:
        path: Directory to remove
        require_prefix: If specified, path must be under this directory

    Raises:
        ValueError: If path is not under require_prefix
        FilesystemError: If deletion fails

    Example:
        >>> safe_rmtree('vendor/llvm', require_prefix='vendor')
        >>> safe_rmtree('/usr/lib', require_prefix='vendor')  # ValueError
    """
    path = Path(path).resolve()

    if require_prefix is not None:
        require_prefix = Path(require_prefix).resolve()
        if path == require_prefix or not is_relative_to(path, require_prefix):
            raise ValueError(
                f"Refusing to delete '{path}': not under required prefix '{require_prefix}'"
            )

    if not path.exists():
        return

    if not path.is_dir():
        raise FilesystemError(f"Path is not a directory: {path}")

    try:
        if IS_WINDOWS:

            def handle_remove_readonly(func, failed_path, exc):
                """Error handler for Windows read-only files."""
                if not os.access(failed_path, os.W_OK):
                    os.chmod(failed_path, 0o777)
                    func(failed_path)
                else:
                    raise exc[1]

            shutil.rmtree(path, onerror=handle_remove_readonly)
        else:
            shutil.rmtree(path)
    except OSError as e:
        raise FilesystemError(f"Failed to remove directory '{path}': {e}")
