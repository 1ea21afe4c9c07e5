"""Source loaders that supply IDL text for document and include paths."""

import logging
import posixpath
from pathlib import Path
from typing import Protocol

from ..core.errors import SourceNotFoundError


logger = logging.getLogger(__name__)


class SourceLoader(Protocol):
    def load(self, path: str) -> str:
        """Return the text stored at ``path``; raise SourceNotFoundError if absent."""
        ...

    def key(self, path: str) -> str:
        """Canonical identity of ``path``, used to detect include cycles."""
        ...


class FileSystemLoader:
    """Load files relative to a fixed root directory.

    Include paths are always resolved against the root, never against the
    including file's directory.  A leading ``/`` is taken as the root itself.
    """

    def __init__(self, root: Path | str = ".", encoding: str = "utf-8"):
        self.root = Path(root)
        self.encoding = encoding

    def _locate(self, path: str) -> Path:
        candidate = Path(path)
        if candidate.is_absolute() and candidate.exists():
            return candidate
        return self.root / str(path).lstrip("/\\")

    def load(self, path: str) -> str:
        location = self._locate(path)
        logger.debug("Loading %s", location)
        try:
            return location.read_text(encoding=self.encoding)
        except FileNotFoundError:
            raise SourceNotFoundError(str(path)) from None
        except (OSError, UnicodeDecodeError) as e:
            raise SourceNotFoundError(str(path), str(e)) from e

    def key(self, path: str) -> str:
        return str(self._locate(path).resolve())


class InMemoryLoader:
    """Serve sources from a mapping of path to text."""

    def __init__(self, sources: dict[str, str] | None = None):
        self.sources: dict[str, str] = {}
        for path, text in (sources or {}).items():
            self.add(path, text)

    def add(self, path: str, text: str) -> None:
        self.sources[self.key(path)] = text

    def load(self, path: str) -> str:
        try:
            return self.sources[self.key(path)]
        except KeyError:
            raise SourceNotFoundError(str(path)) from None

    def key(self, path: str) -> str:
        return posixpath.normpath("/" + str(path).replace("\\", "/").lstrip("/"))
