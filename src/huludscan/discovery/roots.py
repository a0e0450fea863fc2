"""Resolution of optional scan roots outside the project tree.

Two extra roots can be scanned when global packages are requested:

1. The npm global ``node_modules`` directory, as reported by ``npm root -g``.
2. The nvm managed-versions directory (``$NVM_DIR/versions/node``, falling
   back to ``~/.nvm/versions/node``; ``%NVM_HOME%`` on Windows).

Both are optional. A missing tool, a failing command, or a missing
directory resolves to ``None`` with a logged warning and the run goes on
without that root.
"""

from __future__ import annotations

import logging
import os
import shutil
import subprocess
from pathlib import Path
from typing import Callable, Mapping, Optional, Sequence

from huludscan.core.indicators.models import CREDENTIAL_HARVESTER_CACHE_DIR

logger = logging.getLogger(__name__)

# Timeout for package-manager subprocess calls (seconds).
COMMAND_TIMEOUT: float = 30.0

CommandRunner = Callable[[Sequence[str]], Optional[str]]


def run_command(args: Sequence[str]) -> str | None:
    """Run a command and return its stripped stdout, or None on any failure."""
    executable = shutil.which(args[0])
    if executable is None:
        logger.debug("%s not found on PATH", args[0])
        return None
    try:
        proc = subprocess.run(
            [executable, *args[1:]],
            capture_output=True,
            text=True,
            timeout=COMMAND_TIMEOUT,
            check=False,
        )
    except (OSError, subprocess.SubprocessError) as exc:
        logger.warning("Failed to run %s: %s", " ".join(args), exc)
        return None
    if proc.returncode != 0:
        logger.warning(
            "%s exited with %d: %s", " ".join(args), proc.returncode, proc.stderr.strip(),
        )
        return None
    return proc.stdout.strip() or None


class RootResolver:
    """Locates the package-manager directories worth scanning.

    Args:
        home: Override the home directory (for testing).
        environ: Override the environment mapping (for testing).
        runner: Override the subprocess runner (for testing).
    """

    def __init__(
        self,
        home: Path | None = None,
        environ: Mapping[str, str] | None = None,
        runner: CommandRunner = run_command,
    ) -> None:
        self._home = home
        self._environ = environ if environ is not None else os.environ
        self._runner = runner

    @property
    def home(self) -> Path:
        return self._home if self._home is not None else Path.home()

    def global_packages_dir(self) -> Path | None:
        """Return the npm global ``node_modules`` directory, if resolvable."""
        output = self._runner(["npm", "root", "-g"])
        if not output:
            logger.warning("Could not resolve the npm global packages directory")
            return None
        path = Path(output.splitlines()[-1].strip())
        if not path.is_dir():
            logger.warning("npm global packages directory does not exist: %s", path)
            return None
        return path

    def version_manager_dir(self) -> Path | None:
        """Return the nvm managed-versions directory, if present."""
        candidates: list[Path] = []
        nvm_dir = self._environ.get("NVM_DIR")
        if nvm_dir:
            candidates.append(Path(nvm_dir) / "versions" / "node")
        nvm_home = self._environ.get("NVM_HOME")
        if nvm_home:
            candidates.append(Path(nvm_home))
        candidates.append(self.home / ".nvm" / "versions" / "node")

        for candidate in candidates:
            try:
                if candidate.is_dir():
                    return candidate
            except OSError:
                continue
        logger.info("No nvm managed-versions directory found")
        return None

    def credential_harvester_cache(self) -> Path:
        return self.home / CREDENTIAL_HARVESTER_CACHE_DIR

    def credential_harvester_detected(self) -> bool:
        """Single existence check for the trufflehog cache directory."""
        path = self.credential_harvester_cache()
        try:
            found = path.exists()
        except OSError:
            return False
        if found:
            logger.warning("Credential-harvester cache present: %s", path)
        return found
