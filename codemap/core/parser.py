"""
Parse adapter: source text -> tree-sitter syntax tree.

Grammar is picked from the file extension. Files that do not parse
cleanly with their first grammar are retried with the next candidate
(for example a ``.js`` file that carries TypeScript annotations), and
only when every candidate reports syntax errors is a ParseError raised.
"""

import logging
import os
import re
from dataclasses import dataclass
from typing import Dict, List, Optional, Tuple

import tree_sitter_javascript as tsjavascript
import tree_sitter_typescript as tstypescript
from tree_sitter import Language, Parser

from .errors import ParseError

logger = logging.getLogger(__name__)


# --- PARSER SETUP ---
LANGUAGES: Dict[str, Language] = {
    "javascript": Language(tsjavascript.language()),
    "typescript": Language(tstypescript.language_typescript()),
    "tsx": Language(tstypescript.language_tsx()),
}

# Extension -> grammars to try, in order
GRAMMAR_CANDIDATES: Dict[str, Tuple[str, ...]] = {
    ".js": ("javascript", "tsx"),
    ".jsx": ("javascript", "tsx"),
    ".mjs": ("javascript", "tsx"),
    ".cjs": ("javascript", "tsx"),
    ".ts": ("typescript", "tsx"),
    ".mts": ("typescript", "tsx"),
    ".cts": ("typescript", "tsx"),
    ".tsx": ("tsx",),
}
DEFAULT_CANDIDATES: Tuple[str, ...] = ("javascript", "tsx")

SOURCE_EXTENSIONS = tuple(GRAMMAR_CANDIDATES)

_CODE_FENCE = re.compile(r"```(?:[a-zA-Z]+)?\n([\s\S]*?)```")


@dataclass
class ParsedSource:
    """A successfully parsed file."""
    file_name: str
    source: str
    tree: object
    grammar: str

    @property
    def root_node(self):
        return self.tree.root_node


def grammars_for(file_name: str) -> Tuple[str, ...]:
    """Return the grammar names to try for a file, most specific first."""
    _, ext = os.path.splitext(file_name)
    return GRAMMAR_CANDIDATES.get(ext.lower(), DEFAULT_CANDIDATES)


def clean_markdown_code_blocks(code: str) -> str:
    """Replace ```lang ... ``` fences with just their contents."""
    cleaned, count = _CODE_FENCE.subn(lambda m: m.group(1), code)
    if count:
        logger.debug("Stripped %d markdown code fence(s)", count)
    return cleaned


def error_position(data: bytes, node) -> Tuple[int, int]:
    """1-indexed (line, column) of a node, the column counted in characters."""
    row, byte_column = node.start_point
    line_start = node.start_byte - byte_column
    prefix = data[line_start:node.start_byte].decode("utf8", errors="replace")
    return row + 1, len(prefix) + 1


def find_first_error(root, data: bytes) -> Optional[Tuple[int, int]]:
    """Locate the first ERROR or MISSING node, as a 1-indexed (line, column)."""
    if not root.has_error:
        return None
    stack = [root]
    while stack:
        node = stack.pop()
        if node.type == "ERROR" or node.is_missing:
            return error_position(data, node)
        if node.has_error:
            # Reversed so the leftmost child is examined first
            stack.extend(reversed(node.children))
    return error_position(data, root)


def parse_source(file_name: str, code: str, max_bytes: Optional[int] = None) -> ParsedSource:
    """
    Parse one file.

    Args:
        file_name: Name used for grammar selection and error messages
        code: Raw source text
        max_bytes: Optional upper bound on the encoded source size

    Returns:
        ParsedSource for the first grammar that parses without errors

    Raises:
        ParseError: if the file is empty, too large, or no grammar accepts it
    """
    if "```" in code:
        code = clean_markdown_code_blocks(code)

    if not code or not code.strip():
        raise ParseError(file_name, "file is empty")

    data = code.encode("utf8")
    if max_bytes is not None and len(data) > max_bytes:
        raise ParseError(file_name, f"file exceeds {max_bytes} bytes ({len(data)})")

    first_error: Optional[Tuple[str, Tuple[int, int]]] = None
    candidates: List[str] = list(grammars_for(file_name))

    for grammar in candidates:
        parser = Parser(LANGUAGES[grammar])
        tree = parser.parse(data)
        error_at = find_first_error(tree.root_node, data)
        if error_at is None:
            if first_error is not None:
                logger.debug("Parsed %s with fallback grammar %s", file_name, grammar)
            return ParsedSource(file_name=file_name, source=code, tree=tree, grammar=grammar)

        logger.debug("Grammar %s rejected %s at %d:%d", grammar, file_name, *error_at)
        if first_error is None:
            first_error = (grammar, error_at)

    grammar, (line, column) = first_error
    raise ParseError(file_name, f"syntax error ({grammar} grammar)", line=line, column=column)


def node_text(node) -> str:
    """Decode a node's source slice."""
    return node.text.decode("utf8") if node is not None else ""
