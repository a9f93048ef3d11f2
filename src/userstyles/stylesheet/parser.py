"""Hand-written parser for Mozilla-format user stylesheets.

Syntax example:
    @-moz-document domain("example.com"), url-prefix("https://docs.") {
        body { background: #222; }
    }
    @-moz-document regexp("https?://(www\\.)?news\\..*") {
        .ad { display: none; }
    }

Each ``@-moz-document`` section becomes one block whose sub-rules are
OR-combined.  CSS left over after the last section is kept as a block that
applies everywhere.  Sources without any section must carry the opt-out
comment to be accepted as global CSS.
"""

from __future__ import annotations

import logging
import re
from typing import Iterable

from userstyles.stylesheet.errors import LegacyFormatRejected, MalformedSection
from userstyles.stylesheet.model import ParsedBlock, Predicate, PredicateKind

__all__ = [
    "GLOBAL_OPT_OUT",
    "SCOPING_MARKER",
    "format_predicates",
    "looks_like_legacy_format",
    "parse_stylesheet",
]

logger = logging.getLogger(__name__)

SCOPING_MARKER = "@-moz-document"
GLOBAL_OPT_OUT = "/* i really want this to be global */"

_COMMENT_RE = re.compile(r"/\*.*?\*/", re.DOTALL)
_NAMESPACE_RE = re.compile(
    r"""
    @namespace\s*
    (?:[a-zA-Z_][\w-]*\s+)?              # optional prefix
    (?:url\([^)]*\)|"[^"]*"|'[^']*')     # namespace URI
    \s*;?
    """,
    re.VERBOSE,
)
_KEYWORD_RE = re.compile(r"[\w-]+")
_ESCAPE_RE = re.compile(r"\\(?:([0-9a-fA-F]{1,6})[ \t\n\f]?|(\n)|(.))", re.DOTALL)
_KEYWORDS = {kind.value: kind for kind in PredicateKind}
_QUOTES = "\"'"


def _unescape_one(match: re.Match[str]) -> str:
    hex_digits, newline, char = match.groups()
    if hex_digits is not None:
        codepoint = int(hex_digits, 16)
        if codepoint == 0 or codepoint > 0x10FFFF or 0xD800 <= codepoint <= 0xDFFF:
            return "\ufffd"
        return chr(codepoint)
    if newline is not None:
        return ""
    return char


def _unescape(text: str) -> str:
    """Resolve CSS string escapes: ``\\2f `` is ``/``, ``\\"`` is ``"``."""
    return _ESCAPE_RE.sub(_unescape_one, text)


def _blank(match: re.Match[str]) -> str:
    # Keep newlines so error positions still point into the original text.
    return re.sub(r"[^\n]", " ", match.group(0))


def looks_like_legacy_format(source: str) -> bool:
    """Return True if *source* has no scoping section and no opt-out comment."""
    return SCOPING_MARKER not in source and GLOBAL_OPT_OUT not in source.lower()


class _Parser:
    """Recursive-descent parser over an explicit position into the source."""

    def __init__(self, text: str, file_id: str | None = None) -> None:
        self._text = text
        self._pos = 0
        self._file_id = file_id

    # --- cursor helpers -----------------------------------------------------

    def _peek(self) -> str:
        return self._text[self._pos : self._pos + 1]

    def _skip_ws(self) -> None:
        while self._pos < len(self._text) and self._text[self._pos].isspace():
            self._pos += 1

    def _error(self, message: str, pos: int | None = None) -> MalformedSection:
        pos = self._pos if pos is None else pos
        line = self._text.count("\n", 0, pos) + 1
        column = pos - (self._text.rfind("\n", 0, pos) + 1) + 1
        return MalformedSection(message, file_id=self._file_id, line=line, column=column)

    def _expect(self, char: str, what: str) -> None:
        if self._peek() != char:
            found = self._peek() or "end of input"
            raise self._error(f"Expected '{char}' {what}, found {found!r}")
        self._pos += 1

    def _at_marker(self) -> bool:
        self._skip_ws()
        return self._text.startswith(SCOPING_MARKER, self._pos)

    def _read_quoted(self) -> str:
        """Read a quoted string starting at the cursor and return its raw contents."""
        start = self._pos
        quote = self._text[start]
        pos = start + 1
        while pos < len(self._text):
            char = self._text[pos]
            if char == "\\":
                pos += 2
                continue
            if char == quote:
                self._pos = pos + 1
                return self._text[start + 1 : pos]
            pos += 1
        raise self._error("Unterminated string", start)

    def _read_balanced(self, opening: str, closing: str) -> str:
        """Read a delimited region, honouring nesting and quoted strings.

        The cursor must sit on *opening*.  Returns the text between the outer
        delimiters and leaves the cursor after *closing*.
        """
        start = self._pos
        depth = 0
        while self._pos < len(self._text):
            char = self._text[self._pos]
            if char in _QUOTES:
                self._read_quoted()
                continue
            if char == "\\":
                self._pos += 2
                continue
            self._pos += 1
            if char == opening:
                depth += 1
            elif char == closing:
                depth -= 1
                if depth == 0:
                    return self._text[start + 1 : self._pos - 1]
        raise self._error(f"Unterminated '{opening}'", start)

    # --- grammar ------------------------------------------------------------

    def parse(self) -> list[ParsedBlock]:
        blocks: list[ParsedBlock] = []
        while self._at_marker():
            blocks.append(self._parse_section())
        rest = self._text[self._pos :]
        if rest.strip():
            blocks.append(ParsedBlock(predicates=(Predicate.everything(),), css=rest))
        return blocks

    def _parse_section(self) -> ParsedBlock:
        self._pos += len(SCOPING_MARKER)
        predicates: list[Predicate] = []
        while True:
            predicate = self._parse_subrule()
            if predicate is not None:
                predicates.append(predicate)
            self._skip_ws()
            if self._peek() != ",":
                break
            self._pos += 1

        self._skip_ws()
        if self._peek() != "{":
            raise self._error("Expected '{' to open the section body")
        css = self._read_balanced("{", "}")
        return ParsedBlock(predicates=tuple(predicates), css=css)

    def _parse_subrule(self) -> Predicate | None:
        self._skip_ws()
        match = _KEYWORD_RE.match(self._text, self._pos)
        if match is None:
            raise self._error("Expected a sub-rule keyword")
        keyword = match.group(0)
        keyword_pos = self._pos
        self._pos = match.end()
        self._skip_ws()
        parameter = self._parse_parameter()

        kind = _KEYWORDS.get(keyword)
        if kind is None:
            logger.warning(
                "Ignoring unrecognized @-moz-document rule '%s' in %s",
                keyword,
                self._file_id or "<source>",
            )
            return None
        try:
            return Predicate.create(kind, parameter)
        except re.error as exc:
            raise self._error(f"Invalid regexp {parameter!r}: {exc}", keyword_pos) from exc

    def _parse_parameter(self) -> str:
        if self._peek() != "(":
            raise self._error("Expected '(' to open the sub-rule parameter")
        start = self._pos
        self._pos += 1
        self._skip_ws()
        if self._peek() and self._peek() in _QUOTES:
            value = _unescape(self._read_quoted())
            self._skip_ws()
            self._expect(")", "to close the sub-rule parameter")
            return value
        self._pos = start
        return self._read_balanced("(", ")").strip()


def parse_stylesheet(source: str, file_id: str | None = None) -> list[ParsedBlock]:
    """Parse a user stylesheet into its blocks, in source order.

    Raises ``LegacyFormatRejected`` for sources in the old unscoped format and
    ``MalformedSection`` when a section cannot be parsed.  Either way no
    partial result is returned.
    """
    if looks_like_legacy_format(source):
        raise LegacyFormatRejected(
            "Stylesheet has no @-moz-document section and no global opt-out comment",
            file_id=file_id,
        )
    text = _COMMENT_RE.sub(_blank, source)
    text = _NAMESPACE_RE.sub(_blank, text)
    return _Parser(text, file_id=file_id).parse()


def format_predicates(predicates: Iterable[Predicate]) -> str:
    """Render predicates back into ``@-moz-document`` sub-rule syntax."""
    parts = []
    for predicate in predicates:
        escaped = predicate.parameter.replace("\\", "\\\\").replace('"', '\\"')
        parts.append(f'{predicate.kind.value}("{escaped}")')
    return ", ".join(parts)
