"""Comment stripping for raw IDL text."""

from lark import Lark


# Quoted literals are lexed as opaque STRING tokens, so comment markers
# inside them are never seen as comments.  TEXT and STRAY together cover
# every character, which makes the scan total.
SCANNER_GRAMMAR = r"""
    start: _chunk*
    _chunk: BLOCK_COMMENT | LINE_COMMENT | STRING | TEXT | STRAY

    BLOCK_COMMENT.3: /\/\*[\s\S]*?\*\//
    LINE_COMMENT.3: /\/\/[^\n]*/
    STRING.2: /"[^"]*"/ | /'[^']*'/
    TEXT.1: /[^\/"']+/
    STRAY: /[\/"']/
"""

COMMENT_TOKENS = frozenset({"BLOCK_COMMENT", "LINE_COMMENT"})

_scanner = Lark(SCANNER_GRAMMAR, parser="lalr", lexer="basic")


def strip_comments(text: str) -> str:
    """Remove ``/* ... */`` and ``// ...`` comments outside string literals.

    Line comments stop before their newline, so the line structure after a
    line comment is kept.
    """
    if not text:
        return text
    tree = _scanner.parse(text)
    return "".join(
        token for token in tree.children if token.type not in COMMENT_TOKENS
    )
