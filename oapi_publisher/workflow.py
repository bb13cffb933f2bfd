"""
workflow.py

Responsibility: Run one publish end to end.

Order is fixed and strictly sequential:
1) Describe the spec (locate, read version, classify)
2) Prepare a clean staging directory
3) Copy the spec as "latest" (and under its version for releases)
4) Releases only: fetch, merge and stage the version manifest
5) Push staging to the publishing branch (unless push is skipped)

Errors propagate unchanged; the CLI decides how to report them.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Protocol

import requests

from oapi_publisher.config import PublishConfig
from oapi_publisher.manifest import VersionManifest, sync_manifest
from oapi_publisher.publisher import GitPublisher, PublishResult, PublishTarget, redact, render_commit_message
from oapi_publisher.spec_reader import SpecDescriptor, describe_spec
from oapi_publisher.staging import copy_spec, list_staged_files, prepare_staging_dir

logger = logging.getLogger(__name__)


class SupportsPublish(Protocol):
    def publish(self, target: PublishTarget) -> PublishResult:
        """Push the staging directory described by `target`."""


@dataclass(frozen=True)
class RunResult:
    descriptor: SpecDescriptor
    staged_files: tuple[str, ...]
    manifest: VersionManifest | None = None
    publish: PublishResult | None = None


def describe(config: PublishConfig) -> SpecDescriptor:
    return describe_spec(
        config.spec_path,
        config.dist_dir,
        name_prefix=config.name_prefix,
        markers=config.prerelease_markers,
        version_file=config.version_file,
    )


def build_target(config: PublishConfig, version: str) -> PublishTarget:
    message = render_commit_message(
        config.commit_message_template,
        version=version,
        branch=config.branch,
    )
    return PublishTarget(
        repository_url=config.push_url,
        branch=config.branch,
        user_name=config.user_name,
        user_email=config.user_email,
        commit_message=message,
        staging_dir=config.dist_dir,
    )


def run_publish(
    config: PublishConfig,
    *,
    session: requests.Session | None = None,
    publisher: SupportsPublish | None = None,
) -> RunResult:
    descriptor = describe(config)
    logger.info("Starting publishing OpenAPI spec release: %s", descriptor.version)

    prepare_staging_dir(config.dist_dir)
    copy_spec(descriptor)

    manifest: VersionManifest | None = None
    if descriptor.is_release:
        logger.info("Stable version detected.")
        manifest = sync_manifest(config, descriptor.version, session=session)
    else:
        logger.info("Pre-release version %s; publishing as latest only", descriptor.version)

    staged = tuple(list_staged_files(config.dist_dir))
    logger.info("Publishing following files:")
    for rel in staged:
        logger.info("  %s", rel)

    if config.skip_push:
        logger.info("Push skipped; staging left in %s", config.dist_dir)
        return RunResult(descriptor=descriptor, staged_files=staged, manifest=manifest)

    target = build_target(config, descriptor.version)
    result = (publisher or GitPublisher(config.cache_dir)).publish(target)
    logger.info(
        "OpenAPI specs [%s] published to [%s] of %s using user [%s]",
        descriptor.version,
        target.branch,
        redact(target.repository_url),
        target.user_name,
    )
    return RunResult(descriptor=descriptor, staged_files=staged, manifest=manifest, publish=result)
