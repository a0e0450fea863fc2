"""Tree-walking file matcher.

``FileMatcher.find`` yields a ``FileDescriptor`` for every file under a
root whose base name is exactly one of the requested names. Hidden
entries are included. Directory symlinks are not followed, so a linked
``node_modules`` is never walked twice. Enumeration errors for a single
directory are reported through the ``on_error`` callback and the walk
continues with its siblings.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, Iterable, Iterator

from huludscan.exceptions import ScanRootNotFoundError

logger = logging.getLogger(__name__)

ErrorCallback = Callable[[Path, OSError], None]


@dataclass
class FileDescriptor:
    """A matched file. Content is read lazily, at most once.

    Attributes:
        path: Absolute path to the file.
        base_name: File name without directory.
        directory: Absolute path of the containing directory.
    """

    path: Path
    base_name: str
    directory: Path
    _text: str | None = field(default=None, init=False, repr=False, compare=False)

    @classmethod
    def from_path(cls, path: Path) -> FileDescriptor:
        return cls(path=path, base_name=path.name, directory=path.parent)

    def read_text(self) -> str:
        """Return the file content as text, reading it on first call.

        Undecodable bytes are replaced rather than rejected; a leading
        UTF-8 BOM is dropped.

        Raises:
            OSError: If the file cannot be opened or read.
        """
        if self._text is None:
            with open(self.path, encoding="utf-8-sig", errors="replace") as fh:
                self._text = fh.read()
        return self._text


class FileMatcher:
    """Finds files by exact base name across a directory subtree.

    Usage::

        matcher = FileMatcher()
        for descriptor in matcher.find(Path("."), {"package.json"}):
            print(descriptor.path)
    """

    def find(
        self,
        root: Path,
        names_of_interest: Iterable[str],
        *,
        on_error: ErrorCallback | None = None,
    ) -> Iterator[FileDescriptor]:
        """Lazily yield descriptors for matching files under ``root``.

        The root is checked eagerly: a missing root raises before the
        returned iterator is consumed.

        Args:
            root: Directory to traverse.
            names_of_interest: Exact, case-sensitive base names to match.
            on_error: Called with ``(path, exc)`` for each directory that
                cannot be enumerated.

        Raises:
            ScanRootNotFoundError: If ``root`` does not exist.
        """
        root = Path(os.path.abspath(root))
        if not root.exists():
            raise ScanRootNotFoundError(f"Scan root does not exist: {root}")
        return self._walk(root, frozenset(names_of_interest), on_error)

    def _walk(
        self,
        root: Path,
        names: frozenset[str],
        on_error: ErrorCallback | None,
    ) -> Iterator[FileDescriptor]:
        if root.is_file():
            if root.name in names:
                yield FileDescriptor.from_path(root)
            return

        def _onerror(exc: OSError) -> None:
            failed = Path(exc.filename) if exc.filename else root
            logger.warning("Cannot read directory %s: %s", failed, exc.strerror or exc)
            if on_error is not None:
                on_error(failed, exc)

        logger.info("Walking %s", root)
        for dirpath, dirnames, filenames in os.walk(root, onerror=_onerror):
            dirnames.sort()
            for filename in sorted(filenames):
                if filename in names:
                    yield FileDescriptor.from_path(Path(dirpath) / filename)
