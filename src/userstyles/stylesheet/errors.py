"""Stylesheet loading error types."""


class StylesheetError(Exception):
    """Raised when a stylesheet source cannot be turned into rule blocks."""

    def __init__(
        self,
        message: str,
        file_id: str | None = None,
        line: int | None = None,
        column: int | None = None,
    ):
        self.file_id = file_id
        self.line = line
        self.column = column
        super().__init__(message)

    def location(self) -> str:
        """Return a ``file:line:column`` hint for log messages."""
        parts = [self.file_id or "<source>"]
        if self.line is not None:
            parts.append(str(self.line))
            if self.column is not None:
                parts.append(str(self.column))
        return ":".join(parts)


class LegacyFormatRejected(StylesheetError):
    """The source predates ``@-moz-document`` scoping and has no opt-out comment."""


class MalformedSection(StylesheetError):
    """An ``@-moz-document`` section is unterminated or has a bad sub-rule."""
