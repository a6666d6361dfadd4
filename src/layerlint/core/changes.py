"""
Change accounting between two versions of a file.
"""

import difflib
import re


def count_changed_lines(before: str, after: str) -> int:
    """Number of line positions that differ. Always >= 0, 0 iff equal."""
    if before == after:
        return 0
    a = before.split("\n")
    b = after.split("\n")
    matcher = difflib.SequenceMatcher(a=a, b=b, autojunk=False)
    changed = 0
    for tag, i1, i2, j1, j2 in matcher.get_opcodes():
        if tag != "equal":
            changed += max(i2 - i1, j2 - j1)
    return changed


ENTITY_RE = re.compile(r"&quot;|&amp;|&lt;|&gt;")


def detect_improvements(before: str, after: str) -> list[str]:
    """Human-readable summary of what a step fixed, judged from the texts alone."""
    improvements = []
    if ENTITY_RE.search(before) and not ENTITY_RE.search(after):
        improvements.append("HTML entities converted to proper characters")
    if "key=" not in before and "key=" in after:
        improvements.append("Missing key props added to map elements")
    if "localStorage" in before and "typeof window" not in before and "typeof window" in after:
        improvements.append("SSR guards added for browser APIs")
    if "console.log" in before and "console.debug" in after:
        improvements.append("Console.log statements converted to console.debug")
    return improvements
