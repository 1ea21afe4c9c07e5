"""Exception hierarchy for parsing and include resolution."""

from collections.abc import Iterable


class ThriftIdlError(Exception):
    """Base class for every error raised by this package."""


class ThriftSyntaxError(ThriftIdlError):
    """The grammar could not match the whole input.

    Positions refer to the preprocessed text and point at the furthest
    offset any production reached before failing.
    """

    def __init__(
        self,
        position: int,
        line: int,
        column: int,
        expected: Iterable[str] = (),
        source: str | None = None,
    ):
        self.position = position
        self.line = line
        self.column = column
        self.expected = tuple(sorted(set(expected)))
        self.source = source
        super().__init__(self._format())

    def _format(self) -> str:
        where = f"line {self.line}, column {self.column}"
        if self.source:
            where = f"{self.source}: {where}"
        message = f"Syntax error at {where}"
        if self.expected:
            message += f"; expected one of: {', '.join(self.expected)}"
        return message

    def get_context(self, text: str, span: int = 40) -> str:
        """Return the offending line (clipped to ``span`` chars each side) with a caret."""
        start = text.rfind("\n", 0, self.position) + 1
        end = text.find("\n", self.position)
        if end == -1:
            end = len(text)
        left = max(start, self.position - span)
        right = min(end, self.position + span)
        line = text[left:right].expandtabs(1)
        return f"{line}\n{' ' * (self.position - left)}^\n"


class NestingTooDeepError(ThriftSyntaxError):
    """Input nests deeper than the parser can recurse."""

    def __init__(self, position: int, line: int, column: int, source: str | None = None):
        super().__init__(position, line, column, (), source)

    def _format(self) -> str:
        where = f"line {self.line}, column {self.column}"
        if self.source:
            where = f"{self.source}: {where}"
        return f"Nesting too deep at {where}"


class SourceNotFoundError(ThriftIdlError):
    """A loader could not supply text for a path."""

    def __init__(self, path: str, reason: str | None = None):
        self.path = path
        self.reason = reason
        message = f"Source not found: {path}"
        if reason:
            message += f" ({reason})"
        super().__init__(message)


class IncludeError(ThriftIdlError):
    """An included document failed to load or parse under the FAIL policy."""

    def __init__(self, path: str, included_from: str):
        self.path = path
        self.included_from = included_from
        super().__init__(f"Cannot include {path!r} from {included_from!r}")


class CircularIncludeError(ThriftIdlError):
    """A document (transitively) includes itself."""

    def __init__(self, chain: Iterable[str]):
        self.chain = tuple(chain)
        super().__init__("Circular include: " + " -> ".join(self.chain))


class GrammarActionError(ThriftIdlError):
    """A reduction found the value stack in a shape it cannot reduce."""
