"""Include resolution: parse a document and merge everything it includes."""

import logging
from typing import Protocol

from ..core.errors import (
    CircularIncludeError,
    IncludeError,
    SourceNotFoundError,
    ThriftSyntaxError,
)
from ..core.types import IncludePolicy, SkippedInclude
from ..storage.loader import SourceLoader
from .ast import ThriftDocument


logger = logging.getLogger(__name__)


class DocumentParser(Protocol):
    def parse(self, text: str, source: str | None = None) -> ThriftDocument: ...


class IncludeResolver:
    """Depth-first include resolver with append-only merging.

    Each included document is resolved first (its own includes merged into
    it) and then appended after the includer's headers and definitions.
    Diamond includes are parsed once per reference.
    """

    def __init__(
        self,
        parser: DocumentParser,
        loader: SourceLoader,
        policy: IncludePolicy = IncludePolicy.SKIP,
    ):
        self.parser = parser
        self.loader = loader
        self.policy = policy
        self.skipped: list[SkippedInclude] = []

    def resolve(self, path: str) -> ThriftDocument:
        """Load, parse and flatten ``path``.

        Errors for ``path`` itself always propagate.  Failing includes are
        skipped or raised according to the policy; cycles always raise.
        """
        self.skipped = []
        return self._resolve(str(path), ())

    def _resolve(self, path: str, chain: tuple[tuple[str, str], ...]) -> ThriftDocument:
        key = self.loader.key(path)
        for index, (seen, _) in enumerate(chain):
            if seen == key:
                cycle = [p for _, p in chain[index:]] + [path]
                raise CircularIncludeError(cycle)

        document = self.parser.parse(self.loader.load(path), source=path)
        includes = document.include_paths()
        if not includes:
            return document

        chain = chain + ((key, path),)
        for include in includes:
            logger.debug("Resolving include %r from %r", include, path)
            try:
                included = self._resolve(include, chain)
            except (SourceNotFoundError, ThriftSyntaxError) as e:
                if self.policy is IncludePolicy.FAIL:
                    raise IncludeError(include, path) from e
                logger.warning("Skipping include %r from %r: %s", include, path, e)
                self.skipped.append(
                    SkippedInclude(path=include, included_from=path, reason=str(e))
                )
                continue
            document.merge(included)
        return document
