from __future__ import annotations

import json
from pathlib import Path

import pytest
import requests

from oapi_publisher.config import ConfigError
from oapi_publisher.manifest import (
    ManifestFetchError,
    ManifestParseError,
    fetch_manifest,
    parse_manifest,
    sync_manifest,
    upsert_version,
    write_manifest,
)
from tests.fakes import FakeResponse, FakeSession


def test_upsert_preserves_unrelated_keys() -> None:
    original = {"1.0.0": {"spec": "1.0.0", "source": "1.0.0"}}

    updated = upsert_version(original, "2.0.0")

    assert set(updated) == {"1.0.0", "2.0.0", "stable"}
    assert updated["stable"] == updated["2.0.0"] == {"spec": "2.0.0", "source": "2.0.0"}
    assert updated["1.0.0"] == {"spec": "1.0.0", "source": "1.0.0"}
    assert original == {"1.0.0": {"spec": "1.0.0", "source": "1.0.0"}}


def test_upsert_keeps_extra_fields_of_other_entries() -> None:
    original = {"0.9.0": {"spec": "0.9.0", "source": "0.9.0", "deprecated": True}}
    assert upsert_version(original, "1.0.0")["0.9.0"]["deprecated"] is True


def test_fetch_returns_body_on_success() -> None:
    session = FakeSession(FakeResponse(200, '{"stable": {}}'))
    assert fetch_manifest("https://x/versions.json", session=session) == '{"stable": {}}'
    assert session.calls == ["https://x/versions.json"]


@pytest.mark.parametrize("status", [301, 404, 500])
def test_fetch_non_success_raises(status: int) -> None:
    session = FakeSession(FakeResponse(status, "nope", "Not Found"))
    with pytest.raises(ManifestFetchError, match=str(status)):
        fetch_manifest("https://x/versions.json", session=session)


def test_fetch_transport_error_raises() -> None:
    class Broken:
        def get(self, url, **kwargs):
            raise requests.ConnectionError("connection refused")

    with pytest.raises(ManifestFetchError, match="connection refused"):
        fetch_manifest("https://x/versions.json", session=Broken())


@pytest.mark.parametrize("body", ["", "not json", "[1, 2]", '{"stable": "1.0.0"}'])
def test_parse_rejects_malformed(body: str) -> None:
    with pytest.raises(ManifestParseError):
        parse_manifest(body)


def test_write_manifest_uses_one_space_indent(tmp_path: Path) -> None:
    path = write_manifest({"stable": {"spec": "1.0.0", "source": "1.0.0"}}, tmp_path / "out" / "versions.json")
    text = path.read_text(encoding="utf-8")
    assert text.startswith('{\n "stable": {\n  "spec": "1.0.0"')


def test_sync_writes_merged_manifest(make_config, write_spec, tmp_path: Path) -> None:
    config = make_config(write_spec("1.4.0"))
    session = FakeSession(FakeResponse(200, json.dumps({"stable": {"spec": "1.3.0", "source": "1.3.0"}})))

    result = sync_manifest(config, "1.4.0", session=session)

    assert session.calls == [config.versions_url]
    written = json.loads(config.versions_dist_path.read_text(encoding="utf-8"))
    assert written == result == {
        "stable": {"spec": "1.4.0", "source": "1.4.0"},
        "1.4.0": {"spec": "1.4.0", "source": "1.4.0"},
    }


def test_sync_does_not_write_on_parse_failure(make_config, write_spec) -> None:
    config = make_config(write_spec("1.4.0"))
    session = FakeSession(FakeResponse(200, "<html>oops</html>"))

    with pytest.raises(ManifestParseError):
        sync_manifest(config, "1.4.0", session=session)
    assert not config.versions_dist_path.exists()


def test_sync_requires_versions_url(make_config, write_spec) -> None:
    config = make_config(write_spec("1.4.0"), repository_url="https://gitlab.com/acme/docs.git", versions_url=None)
    session = FakeSession()

    with pytest.raises(ConfigError, match="OA_VERSIONS_URL"):
        sync_manifest(config, "1.4.0", session=session)
    assert session.calls == []
    assert not config.versions_dist_path.exists()
