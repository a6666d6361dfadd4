"""
Tree-sitter parsing shared by structural transforms and the syntax check.

The safety validator must judge output with the same grammar the structural
transforms parse with, so both go through this module.
"""

import os
from dataclasses import dataclass
from typing import Iterator

from tree_sitter_language_pack import get_parser

from layerlint.core.errors import StructuralParseError


LANG_MAP = {
    ".ts": "typescript",
    ".mts": "typescript",
    ".cts": "typescript",
    ".tsx": "tsx",
    ".js": "tsx",
    ".jsx": "tsx",
    ".mjs": "tsx",
    ".cjs": "tsx",
    ".json": "json",
}

DEFAULT_LANGUAGE = "tsx"


def language_for(filename: str | None) -> str | None:
    """
    Grammar name for a filename hint.

    No hint means "treat as TSX". A hint with an unknown extension (say .md)
    returns None: there is no grammar, so syntax checks are skipped.
    """
    if not filename:
        return DEFAULT_LANGUAGE
    _, ext = os.path.splitext(filename)
    return LANG_MAP.get(ext.lower())


def extension_of(filename: str | None) -> str | None:
    if not filename:
        return None
    _, ext = os.path.splitext(filename)
    return ext.lower() or None


@dataclass
class SourceTree:
    """A parsed source buffer. Node offsets index into `source` (UTF-8 bytes)."""
    source: bytes
    tree: object
    language: str

    @property
    def root(self):
        return self.tree.root_node

    def text(self, node) -> str:
        return self.source[node.start_byte:node.end_byte].decode("utf-8")

    def walk(self, node=None) -> Iterator:
        """Pre-order traversal without recursion."""
        stack = [node if node is not None else self.root]
        while stack:
            current = stack.pop()
            yield current
            stack.extend(reversed(current.children))


def parse(text: str, language: str) -> SourceTree:
    parser = get_parser(language)
    source = text.encode("utf-8")
    return SourceTree(source, parser.parse(source), language)


def first_error(node):
    """First ERROR or MISSING node in document order, or None."""
    if not node.has_error:
        return None
    stack = [node]
    while stack:
        current = stack.pop()
        if current.type == "ERROR" or current.is_missing:
            return current
        stack.extend(reversed([c for c in current.children if c.has_error or c.is_missing]))
    return None


def describe_error(source_tree: SourceTree, node) -> str:
    if node.is_missing:
        return f"Missing '{node.type}'"
    snippet = source_tree.text(node).strip().splitlines()
    near = snippet[0][:40] if snippet else ""
    return f"Unexpected token near '{near}'" if near else "Unexpected end of input"


def parse_strict(text: str, language: str) -> SourceTree:
    """Parse and raise StructuralParseError if the tree contains errors."""
    source_tree = parse(text, language)
    bad = first_error(source_tree.root)
    if bad is not None:
        row, col = bad.start_point[0], bad.start_point[1]
        raise StructuralParseError(describe_error(source_tree, bad), row + 1, col + 1)
    return source_tree


def check_syntax(text: str, language: str | None) -> str | None:
    """Return an error message if `text` does not parse, else None."""
    if language is None:
        return None
    try:
        parse_strict(text, language)
    except StructuralParseError as e:
        return str(e)
    return None
