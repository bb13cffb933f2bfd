"""
errors.py

Responsibility: Common base for every failure the publisher reports.

Each module defines its own subclass next to the code that raises it; the CLI
only needs to catch `PublisherError`.
"""

from __future__ import annotations


class PublisherError(RuntimeError):
    pass
