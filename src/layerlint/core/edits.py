"""
Building blocks for layer rewrites.

Structural rewrites collect byte-range edits against a parsed tree and re-emit
the source in one pass. Textual rewrites are regex rules whose replacement is a
pure function of the match and a small window of surrounding text.
"""

import re
from dataclasses import dataclass, field
from typing import Callable

from layerlint.core.errors import StructuralTransformError
from layerlint.core.syntax import SourceTree


# === Structural ===

@dataclass(frozen=True)
class Edit:
    start: int  # byte offset, inclusive
    end: int    # byte offset, exclusive
    replacement: str
    seq: int = 0


class SourceEditor:
    """Collects non-overlapping edits against a SourceTree and re-emits text."""

    def __init__(self, source_tree: SourceTree):
        self.source_tree = source_tree
        self._edits: list[Edit] = []

    def __len__(self) -> int:
        return len(self._edits)

    def _add(self, start: int, end: int, replacement: str):
        self._edits.append(Edit(start, end, replacement, len(self._edits)))

    def replace(self, node, text: str):
        self._add(node.start_byte, node.end_byte, text)

    def remove(self, node):
        self._add(node.start_byte, node.end_byte, "")

    def insert_before(self, node, text: str):
        self._add(node.start_byte, node.start_byte, text)

    def insert_after(self, node, text: str):
        self._add(node.end_byte, node.end_byte, text)

    def insert_at(self, offset: int, text: str):
        self._add(offset, offset, text)

    def apply(self) -> str:
        source = self.source_tree.source
        if not self._edits:
            return source.decode("utf-8")

        ordered = sorted(self._edits, key=lambda e: (e.start, e.end, e.seq))
        for prev, nxt in zip(ordered, ordered[1:]):
            if nxt.start < prev.end:
                raise StructuralTransformError(
                    f"overlapping edits at bytes {prev.start}-{prev.end} and {nxt.start}-{nxt.end}"
                )

        out = []
        cursor = 0
        for edit in ordered:
            out.append(source[cursor:edit.start])
            out.append(edit.replacement.encode("utf-8"))
            cursor = max(cursor, edit.end)
        out.append(source[cursor:])
        return b"".join(out).decode("utf-8")


# === Textual ===

@dataclass(frozen=True)
class MatchContext:
    """Everything a replacement function may look at."""
    match: str
    groups: tuple
    named: dict
    before: str
    after: str


Replacement = str | Callable[[MatchContext], str]


@dataclass(frozen=True)
class PatternRule:
    name: str
    pattern: re.Pattern
    replacement: Replacement
    description: str = ""
    window: int = 20

    def apply(self, text: str) -> tuple[str, int]:
        """Apply the rule, return (new_text, replacements_made)."""
        changed = 0

        def _sub(m: re.Match) -> str:
            nonlocal changed
            if isinstance(self.replacement, str):
                new = m.expand(self.replacement)
            else:
                ctx = MatchContext(
                    match=m.group(0),
                    groups=m.groups(),
                    named=m.groupdict(),
                    before=m.string[max(0, m.start() - self.window):m.start()],
                    after=m.string[m.end():m.end() + self.window],
                )
                new = self.replacement(ctx)
            if new != m.group(0):
                changed += 1
            return new

        return self.pattern.sub(_sub, text), changed


@dataclass
class RuleReport:
    text: str
    fixes: list[str] = field(default_factory=list)
    count: int = 0


def apply_rules(rules: list[PatternRule], text: str) -> RuleReport:
    report = RuleReport(text)
    for rule in rules:
        new_text, n = rule.apply(report.text)
        if n:
            report.text = new_text
            report.count += n
            report.fixes.append(rule.description or rule.name)
    return report
