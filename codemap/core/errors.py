"""Exception types raised inside the analysis engine."""

from typing import Optional


class CodemapError(Exception):
    """Base class for analysis engine errors."""


class ParseError(CodemapError):
    """A single file could not be turned into a syntax tree."""

    def __init__(self, file_name: str, message: str,
                 line: Optional[int] = None, column: Optional[int] = None):
        self.file_name = file_name
        self.line = line
        self.column = column
        where = f" ({line}:{column})" if line is not None else ""
        super().__init__(f"Failed to parse {file_name}{where}: {message}")


class AnalysisError(CodemapError):
    """The input handed to the analyzer is unusable as a whole."""
