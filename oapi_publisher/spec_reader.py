"""
spec_reader.py

Responsibility: Locate the generated OpenAPI spec and read its version.

The version is taken verbatim from `info.version`. Release/pre-release
classification is a plain substring test against reserved markers injected by
the upstream build (e.g. `-dev-`); it is deliberately not semver parsing, since
the documentation viewer matches version labels exactly.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Any, Iterable

import yaml

from oapi_publisher.errors import PublisherError

DEFAULT_PRERELEASE_MARKERS: tuple[str, ...] = ("-dev-",)

_YAML_SUFFIXES = (".yaml", ".yml")
_RESERVED_LABELS = (".", "..", "latest")


class SpecReadError(PublisherError):
    pass


@dataclass(frozen=True)
class SpecDescriptor:
    """Where a spec comes from, what version it is, and where it is staged."""

    source_path: Path
    version: str
    is_release: bool
    staging_latest_path: Path
    staging_versioned_path: Path

    @property
    def is_directory(self) -> bool:
        return self.source_path.is_dir()


def _load_yaml_mapping(path: Path) -> tuple[str, dict[str, Any]]:
    if not path.exists():
        raise SpecReadError(f"Spec file does not exist: {path}")
    try:
        text = path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        raise SpecReadError(f"Spec file could not be read: {path}") from e
    try:
        data = yaml.safe_load(text)
    except yaml.YAMLError as e:
        raise SpecReadError(f"Spec file is not valid YAML: {path}") from e
    if not isinstance(data, dict):
        raise SpecReadError(f"Spec file must contain a mapping at the top level: {path}")
    return text, data


def _raw_scalar(text: str, *keys: str) -> str | None:
    """Return the source text of the scalar at `keys`, before YAML typing."""
    node = yaml.compose(text, Loader=yaml.SafeLoader)
    for key in keys:
        if not isinstance(node, yaml.MappingNode):
            return None
        for k, v in node.value:
            if isinstance(k, yaml.ScalarNode) and k.value == key:
                node = v
                break
        else:
            return None
    return node.value if isinstance(node, yaml.ScalarNode) else None


def read_spec_version(spec_file: str | Path) -> str:
    """
    Return `info.version` of the spec document at `spec_file`, unmodified.

    YAML types an unquoted version such as `1.10` as a number (1.1); for any
    non-string scalar the raw scalar text from the document is returned
    instead, so the label is exactly what the file says.
    """
    path = Path(spec_file)
    text, data = _load_yaml_mapping(path)

    info = data.get("info")
    if not isinstance(info, dict):
        raise SpecReadError(f"Spec file has no `info` mapping: {path}")

    version = info.get("version")
    if version is None or isinstance(version, (dict, list, bool)):
        raise SpecReadError(f"Spec file has no usable `info.version`: {path}")
    if not isinstance(version, str):
        version = _raw_scalar(text, "info", "version")
        if version is None:
            raise SpecReadError(f"Spec file has no usable `info.version`: {path}")
    if not version.strip():
        raise SpecReadError(f"Spec file has an empty `info.version`: {path}")
    return version


def is_release_version(version: str, markers: Iterable[str] = DEFAULT_PRERELEASE_MARKERS) -> bool:
    return not any(marker and marker in version for marker in markers)


def locate_version_file(spec_path: str | Path, version_file: str | None = None) -> Path:
    """
    Return the file whose `info.version` governs the publish.

    For a single spec file this is the file itself. For a directory of specs
    it is `version_file` inside the directory when given, otherwise the first
    YAML file in sorted order.
    """
    path = Path(spec_path)
    if not path.exists():
        raise SpecReadError(f"Spec path does not exist: {path}")
    if path.is_file():
        return path

    if version_file:
        candidate = path / version_file
        if not candidate.is_file():
            raise SpecReadError(f"Version spec file not found in {path}: {version_file}")
        return candidate

    candidates = sorted(p for p in path.iterdir() if p.is_file() and p.suffix.lower() in _YAML_SUFFIXES)
    if not candidates:
        raise SpecReadError(f"No YAML spec files found in directory: {path}")
    return candidates[0]


def _check_version_label(version: str) -> None:
    """
    Reject versions that cannot be used as a staging path part or manifest label.
    """
    if "/" in version or "\\" in version or version.strip() in _RESERVED_LABELS:
        raise SpecReadError(f"`info.version` cannot be used as a version label: {version!r}")


def describe_spec(
    spec_path: str | Path,
    staging_dir: str | Path,
    *,
    name_prefix: str | None = None,
    markers: Iterable[str] = DEFAULT_PRERELEASE_MARKERS,
    version_file: str | None = None,
) -> SpecDescriptor:
    source = Path(spec_path)
    staging = Path(staging_dir)
    version = read_spec_version(locate_version_file(source, version_file))
    _check_version_label(version)

    if source.is_dir():
        latest = staging / "latest"
        versioned = staging / version
    else:
        prefix = name_prefix or source.stem
        latest = staging / f"{prefix}-latest{source.suffix}"
        versioned = staging / f"{prefix}-{version}{source.suffix}"

    return SpecDescriptor(
        source_path=source,
        version=version,
        is_release=is_release_version(version, markers),
        staging_latest_path=latest,
        staging_versioned_path=versioned,
    )
