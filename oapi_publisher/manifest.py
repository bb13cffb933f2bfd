"""
manifest.py

Responsibility: Keep the published version manifest (`versions.json`) in sync.

The manifest maps version labels (including the sentinel "stable") to
`{"spec": <version>, "source": <version>}` records and is read by the
documentation viewer to populate its version selector.

This module must be the only place that:
- Fetches the previously published manifest over HTTP
- Interprets the manifest payload
- Writes the updated manifest into the staging directory

Updates only ever add or replace the current version and "stable"; every other
entry is preserved. Two publishers racing on the branch can still lose an
update (last push wins); a single publisher per branch is assumed.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any

import requests

from oapi_publisher.config import ConfigError, PublishConfig
from oapi_publisher.errors import PublisherError

STABLE_LABEL = "stable"

logger = logging.getLogger(__name__)

VersionManifest = dict[str, dict[str, Any]]


class ManifestFetchError(PublisherError):
    pass


class ManifestParseError(PublisherError):
    pass


def _headers() -> dict[str, str]:
    return {
        "Accept": "application/json",
        "Cache-Control": "no-cache",
        "User-Agent": "oapi-publisher",
    }


def fetch_manifest(url: str, *, session: requests.Session | None = None, timeout: float = 30.0) -> str:
    """
    Return the raw body of the manifest at `url`.

    Any transport failure or non-2xx status raises `ManifestFetchError`.
    """
    get = session.get if session is not None else requests.get
    try:
        r = get(url, headers=_headers(), timeout=timeout)
    except requests.RequestException as e:
        raise ManifestFetchError(f"{url} fetch failed: {e}") from e
    if not 200 <= r.status_code < 300:
        reason = getattr(r, "reason", "") or ""
        raise ManifestFetchError(f"{url} fetch failed with status: {r.status_code} {reason}".rstrip())
    return r.text


def parse_manifest(text: str) -> VersionManifest:
    try:
        data = json.loads(text)
    except ValueError as e:
        raise ManifestParseError(f"Version manifest is not valid JSON: {e}") from e
    if not isinstance(data, dict):
        raise ManifestParseError("Version manifest must be a JSON object.")
    for label, entry in data.items():
        if not isinstance(entry, dict):
            raise ManifestParseError(f"Version manifest entry {label!r} must be a JSON object.")
    return data


def upsert_version(manifest: VersionManifest, version: str) -> VersionManifest:
    """
    Return a copy of `manifest` with `version` and "stable" pointing at `version`.
    """
    updated = dict(manifest)
    updated[version] = {"spec": version, "source": version}
    updated[STABLE_LABEL] = {"spec": version, "source": version}
    return updated


def write_manifest(manifest: VersionManifest, path: str | Path) -> Path:
    out = Path(path)
    out.parent.mkdir(parents=True, exist_ok=True)
    out.write_text(json.dumps(manifest, indent=1), encoding="utf-8")
    return out


def sync_manifest(
    config: PublishConfig,
    version: str,
    *,
    session: requests.Session | None = None,
) -> VersionManifest:
    """
    Fetch, merge and stage the manifest for a release `version`.

    Nothing is written unless both the fetch and the parse succeed.
    """
    if not config.versions_url:
        raise ConfigError(
            f"Cannot derive the versions URL from {config.repository_url!r}; set OA_VERSIONS_URL"
        )
    logger.info("Fetching %s", config.versions_url)
    body = fetch_manifest(config.versions_url, session=session, timeout=config.http_timeout)
    manifest = parse_manifest(body)

    logger.info("Adding %s and %s version entry into %s", STABLE_LABEL, version, config.versions_file_name)
    updated = upsert_version(manifest, version)

    logger.info("Saving %s to %s", config.versions_file_name, config.versions_dist_path)
    write_manifest(updated, config.versions_dist_path)
    return updated
