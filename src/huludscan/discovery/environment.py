"""Host metadata recorded in every report."""

from __future__ import annotations

import getpass
import os
import platform
import socket
from typing import Sequence

from huludscan import __version__
from huludscan.discovery.roots import CommandRunner, run_command


def _current_user() -> str:
    try:
        return getpass.getuser()
    except (KeyError, OSError):
        return ""


def collect_environment(runner: CommandRunner = run_command) -> dict[str, str]:
    """Return platform, interpreter, host, and toolchain versions as strings."""
    def version_of(args: Sequence[str]) -> str:
        return runner(args) or ""

    return {
        "scanner_version": __version__,
        "platform": platform.system(),
        "platform_release": platform.release(),
        "machine": platform.machine(),
        "python_version": platform.python_version(),
        "hostname": socket.gethostname(),
        "user": _current_user(),
        "working_directory": os.getcwd(),
        "node_version": version_of(["node", "--version"]),
        "npm_version": version_of(["npm", "--version"]),
    }
