"""Public parsing API for Thrift IDL text and files."""

import logging
from functools import lru_cache
from pathlib import Path

from ..core.errors import ThriftSyntaxError
from ..core.types import ParserOptions
from ..storage.loader import FileSystemLoader, SourceLoader
from .ast import ThriftDocument
from .builder import AstBuilder, pop_expected
from .grammar import ThriftGrammar
from .peg import run
from .preprocessor import strip_comments
from .resolver import IncludeResolver


logger = logging.getLogger(__name__)


class ThriftParser:
    """Parser for Thrift IDL documents.

    Grammars are built once here and shared by every call; each parse gets
    its own state, so one parser may be used from several threads.
    """

    def __init__(self, options: ParserOptions | None = None):
        self.options = options or ParserOptions()
        self.grammar = ThriftGrammar(AstBuilder(self.options))
        self.recognizer = ThriftGrammar()

    def recognize(self, text: str) -> bool:
        """Return True if ``text`` is a well-formed Thrift document."""
        try:
            run(self.recognizer.document, strip_comments(text))
        except ThriftSyntaxError:
            return False
        return True

    def parse(self, text: str, source: str | None = None) -> ThriftDocument:
        """Parse IDL text into a document; includes are not followed."""
        logger.debug("Parsing %s", source or "<text>")
        state = run(self.grammar.document, strip_comments(text), source)
        document = pop_expected(state.stack, ThriftDocument)
        logger.debug(
            "Parsed %s: %d headers, %d definitions",
            source or "<text>", len(document.headers), len(document.definitions),
        )
        return document

    def try_parse(self, text: str, source: str | None = None) -> ThriftDocument | None:
        """Like ``parse`` but return None on a syntax error."""
        try:
            return self.parse(text, source)
        except ThriftSyntaxError as e:
            logger.debug("Rejected %s", e)
            return None

    def parse_file(self, path: Path | str, loader: SourceLoader | None = None) -> ThriftDocument:
        """Parse a file and merge its includes.

        Without an explicit loader, files are read from
        ``options.include_root`` or, when unset, the file's own directory.
        """
        if loader is None:
            path = Path(path).resolve()
            loader = self.default_loader(path)
        path = str(path)

        if not self.options.follow_includes:
            return self.parse(loader.load(path), source=path)

        return self.include_resolver(loader).resolve(path)

    def default_loader(self, path: Path) -> FileSystemLoader:
        root = self.options.include_root or path.parent
        return FileSystemLoader(root, self.options.encoding)

    def include_resolver(self, loader: SourceLoader) -> IncludeResolver:
        return IncludeResolver(self, loader, self.options.include_policy)


@lru_cache(maxsize=1)
def default_parser() -> ThriftParser:
    return ThriftParser()


def recognize(text: str) -> bool:
    return default_parser().recognize(text)


def parse(text: str) -> ThriftDocument:
    return default_parser().parse(text)


def parse_file(path: Path | str) -> ThriftDocument:
    return default_parser().parse_file(path)
