"""Test doubles for the HTTP session and the branch publisher."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from oapi_publisher.publisher import PublishResult, PublishTarget


@dataclass
class FakeResponse:
    status_code: int = 200
    text: str = "{}"
    reason: str = "OK"


@dataclass
class FakeSession:
    """Stands in for `requests.Session`, recording every GET."""

    response: FakeResponse = field(default_factory=FakeResponse)
    calls: list[str] = field(default_factory=list)

    def get(self, url: str, **kwargs: Any) -> FakeResponse:
        self.calls.append(url)
        return self.response


@dataclass
class FakePublisher:
    targets: list[PublishTarget] = field(default_factory=list)
    staged_at_publish: list[list[str]] = field(default_factory=list)

    def publish(self, target: PublishTarget) -> PublishResult:
        self.targets.append(target)
        files = sorted(p.relative_to(target.staging_dir).as_posix() for p in target.staging_dir.rglob("*") if p.is_file())
        self.staged_at_publish.append(files)
        return PublishResult(branch=target.branch, committed=True, commit="abc123")
