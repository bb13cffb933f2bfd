"""Shared fixtures for the test suite."""

from __future__ import annotations

from pathlib import Path
from typing import Any, Callable

import pytest

from oapi_publisher.config import PublishConfig


def spec_text(version: str) -> str:
    return (
        "openapi: 3.0.2\n"
        "info:\n"
        "  title: Signer API\n"
        f'  version: "{version}"\n'
        "paths: {}\n"
    )


@pytest.fixture
def write_spec(tmp_path: Path) -> Callable[..., Path]:
    def _write(version: str, name: str = "spec.yaml", directory: Path | None = None) -> Path:
        target_dir = directory or tmp_path / "build"
        target_dir.mkdir(parents=True, exist_ok=True)
        path = target_dir / name
        path.write_text(spec_text(version), encoding="utf-8")
        return path

    return _write


@pytest.fixture
def make_config(tmp_path: Path) -> Callable[..., PublishConfig]:
    def _make(spec_path: Path, **changes: Any) -> PublishConfig:
        values: dict[str, Any] = {
            "spec_path": spec_path,
            "dist_dir": tmp_path / "dist",
            "repository_url": "https://github.com/example/signer.git",
            "branch": "gh-pages",
            "user_name": "ci-build",
            "user_email": "ci-build@example.invalid",
            "versions_file_name": "versions.json",
            "versions_url": "https://example.github.io/signer/versions.json",
            "cache_dir": tmp_path / "cache",
        }
        values.update(changes)
        return PublishConfig(**values)

    return _make
