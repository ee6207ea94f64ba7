"""
Checksum verification of downloaded artifacts against digest files.

A digest file is the companion of an artifact on the package server, named
after it with an algorithm suffix (`llvm-2.8-x86_64-unknown-linux-gnu.tar.bz2.md5`)
and containing one line:

    <hexdigest> <filename>

Verification is best-effort: callers decide what a missing digest file means.
This module only answers whether an artifact matches a digest file it was
given.
"""

import hashlib
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Optional

logger = logging.getLogger(__name__)

SUPPORTED_ALGORITHMS = ("md5", "sha1", "sha256", "sha512")


@dataclass
class ChecksumRecord:
    """Expected and actual digest of one artifact, alive only during verification."""

    expected_digest: str
    actual_digest: str

    @property
    def matches(self) -> bool:
        """Digests are compared exactly, including case."""
        return self.expected_digest == self.actual_digest


def compute_file_hash(
    file_path: Path,
    algorithm: str = "md5",
    progress_callback: Optional[Callable[[int, int], None]] = None,
) -> str:
    """
    Compute the hex digest of a file.

    Args:
        file_path: Path to file
        algorithm: Hash algorithm ('md5', 'sha1', 'sha256', 'sha512')
        progress_callback: Optional progress callback (bytes_read, total_bytes)

    Returns:
        Lowercase hex digest

    Raises:
        FileNotFoundError: If file doesn't exist
        ValueError: If algorithm is not supported
    """
    if not file_path.exists():
        raise FileNotFoundError(f"File not found: {file_path}")

    algorithm = algorithm.lower()
    if algorithm not in SUPPORTED_ALGORITHMS:
        raise ValueError(f"Unsupported hash algorithm: {algorithm}")

    hasher = hashlib.new(algorithm)
    file_size = file_path.stat().st_size
    bytes_read = 0

    with open(file_path, "rb") as f:
        while chunk := f.read(8192):
            hasher.update(chunk)
            bytes_read += len(chunk)

            if progress_callback:
                progress_callback(bytes_read, file_size)

    return hasher.hexdigest()


def read_expected_digest(digest_path: Path) -> Optional[str]:
    """
    Read the declared digest from a digest file.

    Args:
        digest_path: Path to digest file

    Returns:
        First whitespace-delimited token of the file, or None if unreadable or empty
    """
    try:
        content = Path(digest_path).read_text(encoding="utf-8", errors="replace")
    except OSError as e:
        logger.debug(f"Cannot read digest file {digest_path}: {e}")
        return None

    tokens = content.strip().split()
    return tokens[0] if tokens else None


def verify_digest_file(
    digest_path: Path, artifact_path: Path, algorithm: str = "md5"
) -> bool:
    """
    Check an artifact against the digest declared in its digest file.

    Never raises: an unreadable digest file or artifact counts as a mismatch.

    Args:
        digest_path: Path to '<hexdigest> <filename>' digest file
        artifact_path: Path to the artifact
        algorithm: Algorithm the digest file was produced with

    Returns:
        True if the artifact's digest equals the declared digest

    Example:
        >>> if not verify_digest_file(Path("pkg.tar.bz2.md5"), Path("pkg.tar.bz2")):
        ...     print("corrupted or outdated checksum")
    """
    expected = read_expected_digest(digest_path)
    if expected is None:
        return False

    try:
        actual = compute_file_hash(Path(artifact_path), algorithm)
    except (OSError, ValueError) as e:
        logger.debug(f"Cannot hash {artifact_path}: {e}")
        return False

    record = ChecksumRecord(expected_digest=expected, actual_digest=actual)
    if not record.matches:
        logger.debug(
            f"Digest mismatch for {Path(artifact_path).name}: "
            f"expected {record.expected_digest}, got {record.actual_digest}"
        )
    return record.matches
