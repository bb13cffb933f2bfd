"""
staging.py

Responsibility: Assemble the disposable staging directory that gets pushed.

Rules:
- The staging directory is emptied at the start of every run.
- Files are copied byte-for-byte; spec directories are copied recursively.
- The version-qualified copy is only made for release versions.

This module intentionally does NOT know about git, HTTP, or the manifest.
"""

from __future__ import annotations

import logging
import os
import shutil
from dataclasses import dataclass
from pathlib import Path

from oapi_publisher.errors import PublisherError
from oapi_publisher.spec_reader import SpecDescriptor

logger = logging.getLogger(__name__)


class StagingError(PublisherError):
    pass


@dataclass(frozen=True)
class CopyResult:
    latest_path: Path
    versioned_path: Path | None


def prepare_staging_dir(path: str | Path) -> Path:
    """
    Guarantee `path` exists and is empty. Safe to call repeatedly.
    """
    staging = Path(path)
    if staging.exists() and not staging.is_dir():
        raise StagingError(f"Staging path exists and is not a directory: {staging}")

    logger.info("Cleaning up %s", staging)
    try:
        if staging.exists():
            shutil.rmtree(staging)
        staging.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        raise StagingError(f"Could not prepare staging directory: {staging}") from e
    return staging


def _copy(src: Path, dst: Path) -> None:
    logger.info("Copying %s to %s", src, dst)
    try:
        if src.is_dir():
            shutil.copytree(src, dst)
        else:
            dst.parent.mkdir(parents=True, exist_ok=True)
            shutil.copy2(src, dst)
    except OSError as e:
        raise StagingError(f"Could not copy {src} to {dst}") from e


def copy_spec(descriptor: SpecDescriptor) -> CopyResult:
    _copy(descriptor.source_path, descriptor.staging_latest_path)

    if not descriptor.is_release:
        return CopyResult(latest_path=descriptor.staging_latest_path, versioned_path=None)

    _copy(descriptor.source_path, descriptor.staging_versioned_path)
    return CopyResult(
        latest_path=descriptor.staging_latest_path,
        versioned_path=descriptor.staging_versioned_path,
    )


def list_staged_files(staging_dir: str | Path) -> list[str]:
    """
    Return all files under staging_dir as POSIX relative paths, sorted.
    """
    root = Path(staging_dir)
    files: list[str] = []
    for dirpath, _dirs, filenames in os.walk(root):
        for name in filenames:
            rel = (Path(dirpath) / name).relative_to(root)
            files.append(rel.as_posix())
    files.sort()
    return files
