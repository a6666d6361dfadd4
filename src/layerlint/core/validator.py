"""
Incremental safety validation of a single layer step.

Checks run in a fixed order and the first failing check decides:
no-op, syntax, corruption, logical integrity. Non-fatal heuristics only ever
turn an accept into an accept-with-warning.
"""

import logging
import re
from dataclasses import dataclass

from layerlint.core.config import EngineConfig
from layerlint.core.syntax import check_syntax


logger = logging.getLogger(__name__)


ACCEPT = "accept"
REVERT = "revert"
ACCEPT_WITH_WARNING = "accept_with_warning"

IMPORT_RE = re.compile(r"""import\s+([\s\S]*?)\s+from\s+['"][^'"]+['"]""")


@dataclass(frozen=True)
class ValidationVerdict:
    kind: str
    reason: str | None = None

    @classmethod
    def accept(cls) -> "ValidationVerdict":
        return cls(ACCEPT)

    @classmethod
    def revert(cls, reason: str) -> "ValidationVerdict":
        return cls(REVERT, reason)

    @classmethod
    def warn(cls, reason: str) -> "ValidationVerdict":
        return cls(ACCEPT_WITH_WARNING, reason)

    @property
    def accepted(self) -> bool:
        return self.kind != REVERT


def imported_names(text: str) -> set[str]:
    """Identifiers bound by `import ... from '...'` statements."""
    names = set()
    for m in IMPORT_RE.finditer(text):
        clause = m.group(1)
        clause = re.sub(r"\btype\b", " ", clause)
        for part in re.split(r"[{},\s]+", re.sub(r"\*\s+as\s+", "", clause)):
            if not part or part == "as":
                continue
            names.add(part)
    return names


def _strip_imports(text: str) -> str:
    return IMPORT_RE.sub("", text)


class SafetyValidator:

    def __init__(self, config: EngineConfig | None = None):
        self.config = config or EngineConfig()
        self._corruption = [(p.name, p.compile()) for p in self.config.corruption_patterns]
        self._partial = [(p.name, p.compile()) for p in self.config.partial_patterns]

    def validate(self, before: str, after: str, language: str | None) -> ValidationVerdict:
        if before == after:
            return ValidationVerdict.accept()

        error = check_syntax(after, language)
        if error:
            return ValidationVerdict.revert(f"Syntax error: {error}")

        for name, pattern in self._corruption:
            if pattern.search(after) and not pattern.search(before):
                return ValidationVerdict.revert(f"Corruption detected: {name}")

        removed = self._removed_critical_imports(before, after)
        if removed:
            return ValidationVerdict.revert(f"Logical issue: Critical imports removed: {', '.join(removed)}")

        warning = self._warning(before, after)
        if warning:
            return ValidationVerdict.warn(warning)
        return ValidationVerdict.accept()

    def _removed_critical_imports(self, before: str, after: str) -> list[str]:
        had = imported_names(before)
        has = imported_names(after)
        body = _strip_imports(before)
        removed = []
        for ident in self.config.critical_identifiers:
            if ident in had and ident not in has and re.search(rf"\b{re.escape(ident)}\b", body):
                removed.append(ident)
        return removed

    def _warning(self, before: str, after: str) -> str | None:
        for name, pattern in self._partial:
            n_before = len(pattern.findall(before))
            n_after = len(pattern.findall(after))
            if 0 < n_after < n_before:
                return f"Partial pattern coverage: {name} ({n_after} of {n_before} remain)"

        ratio = self.config.shrink_warning_ratio
        if before and len(after) < len(before) * ratio:
            return f"Output shrank from {len(before)} to {len(after)} characters"
        return None
