"""Discovery of optional scan roots and host metadata.

Public API::

    from huludscan.discovery import RootResolver, collect_environment

    resolver = RootResolver()
    npm_root = resolver.global_packages_dir()
"""

from __future__ import annotations

from huludscan.discovery.environment import collect_environment
from huludscan.discovery.roots import RootResolver, run_command

__all__ = [
    "RootResolver",
    "collect_environment",
    "run_command",
]
