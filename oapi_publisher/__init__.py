"""
oapi_publisher package

Publishes a generated OpenAPI spec to a documentation branch (gh-pages style),
keeping a versions.json manifest for the documentation viewer's version picker.

Key responsibilities are split across modules:
- `spec_reader.py`: locate the spec, read `info.version`, classify release vs pre-release
- `staging.py`: wipe and fill the staging directory
- `manifest.py`: fetch, merge and write versions.json (releases only)
- `publisher.py`: commit and push staging onto the publishing branch
- `config.py`: immutable run configuration from environment + CLI flags
- `workflow.py`: orchestration (describe -> stage -> manifest -> publish)
- `cli.py`: CLI entrypoint
"""

from __future__ import annotations

__all__ = ["__version__"]

__version__ = "0.1.0"
