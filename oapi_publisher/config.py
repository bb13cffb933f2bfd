"""
config.py

Responsibility: Build the single, immutable configuration value for a run.

Values come from `OA_*` environment variables (CI friendly), optionally
overridden by CLI flags. The resulting `PublishConfig` is passed explicitly to
every collaborator; nothing reads the environment after start-up.
"""

from __future__ import annotations

import math
import os
import re
from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import Any, Mapping

from oapi_publisher.errors import PublisherError
from oapi_publisher.spec_reader import DEFAULT_PRERELEASE_MARKERS

DEFAULT_SPEC_PATH = "core/build/resources/main/openapi"
DEFAULT_DIST_DIR = "./dist"
DEFAULT_GIT_URL = "git@github.com:ConsenSys/web3signer.git"
DEFAULT_BRANCH = "gh-pages"
DEFAULT_GIT_USERNAME = "ci-build"
DEFAULT_GIT_EMAIL = "ci-build@example.invalid"
DEFAULT_VERSIONS_FILE_NAME = "versions.json"
DEFAULT_COMMIT_MESSAGE = "[skip ci] OpenAPI Publish [{{ version }}]"
DEFAULT_CACHE_DIR = ".publish-cache"

_GITHUB_REMOTE = re.compile(
    r"^(?:https://(?:[^@/]+@)?github\.com/|git@github\.com:|ssh://git@github\.com/)"
    r"(?P<owner>[^/]+)/(?P<repo>[^/]+?)(?:\.git)?/?$"
)


class ConfigError(PublisherError):
    pass


@dataclass(frozen=True)
class PublishConfig:
    spec_path: Path
    dist_dir: Path
    repository_url: str
    branch: str
    user_name: str
    user_email: str
    versions_file_name: str
    versions_url: str | None = None
    commit_message_template: str = DEFAULT_COMMIT_MESSAGE
    prerelease_markers: tuple[str, ...] = DEFAULT_PRERELEASE_MARKERS
    version_file: str | None = None
    name_prefix: str | None = None
    cache_dir: Path = Path(DEFAULT_CACHE_DIR)
    token: str | None = field(default=None, repr=False)
    skip_push: bool = False
    http_timeout: float = 30.0

    @property
    def versions_dist_path(self) -> Path:
        return self.dist_dir / self.versions_file_name

    @property
    def push_url(self) -> str:
        """Repository URL used for git transport, with the token injected when possible."""
        if self.token and self.repository_url.startswith("https://"):
            return tokenized_https_remote(self.repository_url, self.token)
        return self.repository_url

    def redacted(self) -> dict[str, Any]:
        out: dict[str, Any] = {}
        for f in fields(self):
            value = getattr(self, f.name)
            if f.name == "token":
                value = "***" if value else None
            elif isinstance(value, Path):
                value = str(value)
            out[f.name] = value
        return out


def tokenized_https_remote(clone_url: str, token: str) -> str:
    """
    Convert https://github.com/owner/name.git into an HTTPS URL containing a token.

    GitHub accepts `x-access-token` in the username position. Any existing
    userinfo in the URL is replaced.
    """
    rest = clone_url[len("https://") :]
    if "@" in rest.split("/", 1)[0]:
        rest = rest.split("@", 1)[1]
    return f"https://x-access-token:{token}@{rest}"


def derive_versions_url(repository_url: str, versions_file_name: str) -> str | None:
    """
    Return the GitHub Pages URL of the manifest for a GitHub remote, else None.
    """
    m = _GITHUB_REMOTE.match(repository_url.strip())
    if not m:
        return None
    owner = m.group("owner").lower()
    repo = m.group("repo")
    return f"https://{owner}.github.io/{repo}/{versions_file_name}"


def _markers(raw: str | None) -> tuple[str, ...]:
    if raw is None:
        return DEFAULT_PRERELEASE_MARKERS
    markers = tuple(m.strip() for m in raw.split(",") if m.strip())
    if not markers:
        raise ConfigError("OA_PRERELEASE_MARKERS must name at least one marker")
    return markers


def _check_timeout(value: float) -> None:
    if not (math.isfinite(value) and value > 0):
        raise ConfigError(f"OA_HTTP_TIMEOUT must be a positive number of seconds, got {value!r}")


def _default_git_url(env: Mapping[str, str]) -> str:
    repo = env.get("GITHUB_REPOSITORY", "").strip()
    if repo:
        return f"https://github.com/{repo}.git"
    return DEFAULT_GIT_URL


def load_config(env: Mapping[str, str] | None = None, **overrides: Any) -> PublishConfig:
    """
    Build a `PublishConfig` from environment variables and explicit overrides.

    Overrides whose value is None are ignored, so CLI flags that were not given
    leave the environment/default value in place.
    """
    env = os.environ if env is None else env

    def get(name: str, default: str | None = None) -> str | None:
        value = env.get(name)
        if value is None or not value.strip():
            return default
        return value.strip()

    repository_url = get("OA_GIT_URL") or _default_git_url(env)
    versions_file_name = get("OA_VERSIONS_FILE_NAME", DEFAULT_VERSIONS_FILE_NAME) or DEFAULT_VERSIONS_FILE_NAME

    timeout_raw = get("OA_HTTP_TIMEOUT", "30")
    try:
        http_timeout = float(timeout_raw or "30")
    except ValueError as e:
        raise ConfigError(f"OA_HTTP_TIMEOUT must be a number, got {timeout_raw!r}") from e

    values: dict[str, Any] = {
        "spec_path": Path(get("OA_SPEC_PATH", DEFAULT_SPEC_PATH) or DEFAULT_SPEC_PATH),
        "dist_dir": Path(get("OA_DIST_DIR", DEFAULT_DIST_DIR) or DEFAULT_DIST_DIR),
        "repository_url": repository_url,
        "branch": get("OA_GH_PAGES_BRANCH", DEFAULT_BRANCH),
        "user_name": get("OA_GIT_USERNAME", DEFAULT_GIT_USERNAME),
        "user_email": get("OA_GIT_EMAIL", DEFAULT_GIT_EMAIL),
        "versions_file_name": versions_file_name,
        "versions_url": get("OA_VERSIONS_URL"),
        "commit_message_template": get("OA_COMMIT_MESSAGE", DEFAULT_COMMIT_MESSAGE),
        "prerelease_markers": _markers(get("OA_PRERELEASE_MARKERS")),
        "version_file": get("OA_VERSION_SPEC_FILE"),
        "name_prefix": get("OA_SPEC_NAME_PREFIX"),
        "cache_dir": Path(get("OA_CACHE_DIR", DEFAULT_CACHE_DIR) or DEFAULT_CACHE_DIR),
        "token": get("GH_TOKEN") or get("GITHUB_TOKEN"),
        "http_timeout": http_timeout,
    }

    for key, value in overrides.items():
        if key not in values and key != "skip_push":
            raise ConfigError(f"Unknown configuration option: {key}")
        if value is None:
            continue
        if key in ("spec_path", "dist_dir", "cache_dir"):
            value = Path(value)
        values[key] = value

    _check_timeout(values["http_timeout"])
    if not values["versions_url"]:
        # Left unset for non-GitHub remotes; only a release sync needs it.
        values["versions_url"] = derive_versions_url(values["repository_url"], values["versions_file_name"])

    return PublishConfig(**values)

