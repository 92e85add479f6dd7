"""Exceptions raised while converting Markdown to a styled document.

Exception Hierarchy
-------------------
- MarkdownPressError (base exception)

  - ParseError (lexer failures, raised before any block is built)
    - UnmatchedDelimiter
      - UnmatchedEmphasis
    - MalformedLinkOrImage
    - UnexpectedEndOfInput
      - UnterminatedComment
    - EmptyTextRun

  - RenderError (document builder and backend failures)
    - FontNotFoundError
    - OutputWriteError

"""

from __future__ import annotations


class MarkdownPressError(Exception):
    """Base exception class for all MarkdownPress errors.

    Parameters
    ----------
    message : str
        Human-readable description of the error
    original_error : Exception, optional
        The original exception that caused this error, if applicable

    """

    def __init__(self, message: str, original_error: Exception | None = None):
        super().__init__(message)
        self.message = message
        self.original_error = original_error


class ParseError(MarkdownPressError):
    """Raised when the Markdown source cannot be tokenized.

    Parameters
    ----------
    message : str
        Description of the failure
    position : int
        Character offset into the (newline-normalised) source
    line, column : int, optional
        1-based location of ``position``

    """

    def __init__(self, message: str, position: int, line: int | None = None, column: int | None = None):
        location = f" at line {line}, column {column}" if line is not None else f" at position {position}"
        super().__init__(f"{message}{location}")
        self.position = position
        self.line = line
        self.column = column


class UnmatchedDelimiter(ParseError):
    """A delimiter run (emphasis or backticks) was never closed."""


class UnmatchedEmphasis(UnmatchedDelimiter):
    """An emphasis run did not find the same number of closing delimiters."""


class MalformedLinkOrImage(ParseError):
    """A link or image is missing its closing bracket or parenthesis."""


class UnexpectedEndOfInput(ParseError):
    """The source ended inside a construct that needs a terminator."""


class UnterminatedComment(UnexpectedEndOfInput):
    """An HTML comment has no closing ``-->``."""


class EmptyTextRun(ParseError):
    """The lexer could not consume any character at the cursor."""


class RenderError(MarkdownPressError):
    """Raised when the document cannot be emitted by the rendering backend."""


class FontNotFoundError(RenderError):
    """A style refers to a font that is not known to the backend."""

    def __init__(self, font_ref: str):
        super().__init__(f"Unknown font reference: {font_ref!r}")
        self.font_ref = font_ref


class OutputWriteError(RenderError):
    """The rendered document could not be written to its target."""

    def __init__(self, path: str, original_error: Exception | None = None):
        reason = f": {original_error}" if original_error is not None else ""
        super().__init__(f"Failed to write {path}{reason}", original_error=original_error)
        self.path = path
