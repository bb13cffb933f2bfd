"""
cli.py

Responsibility: CLI entrypoint for the OpenAPI spec publisher.

Commands:
- `publish`: stage the spec, update versions.json for releases, push to the
  publishing branch (see `workflow.py`)
- `version`: print the spec version and whether it counts as a release

This module parses arguments, builds the configuration once and maps
failures to a non-zero exit status. The work itself lives in:
- Configuration: `config.py`
- Orchestration: `workflow.py`
"""

from __future__ import annotations

import argparse
import logging
import os
import sys

from oapi_publisher.config import PublishConfig, load_config
from oapi_publisher.errors import PublisherError
from oapi_publisher.workflow import describe, run_publish

logger = logging.getLogger("oapi_publisher")


def _configure_logging() -> None:
    level_name = os.environ.get("OA_LOG_LEVEL", "INFO").upper()
    level = getattr(logging, level_name, logging.INFO)
    logging.basicConfig(level=level, format="%(asctime)s [%(levelname)s] %(name)s: %(message)s")


def _config_from_args(args: argparse.Namespace) -> PublishConfig:
    return load_config(
        spec_path=args.spec,
        dist_dir=getattr(args, "dist_dir", None),
        repository_url=getattr(args, "repo", None),
        branch=getattr(args, "branch", None),
        versions_url=getattr(args, "versions_url", None),
        skip_push=True if getattr(args, "skip_push", False) else None,
    )


def publish_cmd(args: argparse.Namespace) -> int:
    config = _config_from_args(args)
    logger.debug("Configuration: %s", config.redacted())
    run_publish(config)
    return 0


def version_cmd(args: argparse.Namespace) -> int:
    descriptor = describe(_config_from_args(args))
    kind = "release" if descriptor.is_release else "pre-release"
    print(f"{descriptor.version} ({kind})")
    return 0


def _build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(prog="oapi-publish", description="Publish OpenAPI specs to a documentation branch")
    sub = p.add_subparsers(dest="command", required=True)

    pub = sub.add_parser("publish", help="Stage the spec, update versions.json and push to the publishing branch")
    pub.add_argument("--spec", default=None, help="Spec file or directory (or set OA_SPEC_PATH)")
    pub.add_argument("--dist-dir", default=None, help="Staging directory, wiped on every run (or set OA_DIST_DIR)")
    pub.add_argument("--repo", default=None, help="Git repository URL to push to (or set OA_GIT_URL)")
    pub.add_argument("--branch", default=None, help="Publishing branch (or set OA_GH_PAGES_BRANCH)")
    pub.add_argument("--versions-url", default=None, help="URL of the published versions.json (or set OA_VERSIONS_URL)")
    pub.add_argument("--skip-push", action="store_true", help="Stage everything but do not push")
    pub.set_defaults(func=publish_cmd)

    ver = sub.add_parser("version", help="Print the spec version and its release classification")
    ver.add_argument("--spec", default=None, help="Spec file or directory (or set OA_SPEC_PATH)")
    ver.set_defaults(func=version_cmd)

    return p


def main(argv: list[str] | None = None) -> int:
    parser = _build_parser()
    args = parser.parse_args(argv)
    _configure_logging()
    try:
        return int(args.func(args))
    except PublisherError as e:
        logger.debug("Run failed", exc_info=True)
        print(f"ERROR: OpenAPI spec failed to publish: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    raise SystemExit(main())
