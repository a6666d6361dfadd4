"""
Map layer errors to user-facing diagnostics.

Classification is a first-match scan over a static rule table. It must never
raise: whatever goes wrong here, the caller gets the generic diagnostic.
"""

import logging
from dataclasses import dataclass, field

from layerlint.core.errors import LayerTimeout, NoFallbackAvailable, StructuralParseError


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Diagnostic:
    category: str
    message: str
    suggestion: str
    recovery_options: tuple[str, ...] = ()
    severity: str = "medium"

    def to_dict(self) -> dict:
        return {
            "category": self.category,
            "message": self.message,
            "suggestion": self.suggestion,
            "recovery_options": list(self.recovery_options),
            "severity": self.severity,
        }


@dataclass(frozen=True)
class Rule:
    diagnostic: Diagnostic
    layer_id: int | None = None   # None = any layer
    types: tuple[type, ...] = ()
    substrings: tuple[str, ...] = field(default=())

    def matches(self, layer_id: int, error: BaseException, message: str) -> bool:
        if self.layer_id is not None and self.layer_id != layer_id:
            return False
        if self.types and isinstance(error, self.types):
            return True
        return any(s in message for s in self.substrings)


RULES = [
    Rule(
        Diagnostic(
            "timeout",
            "Layer exceeded its time budget",
            "Split the file or raise the timeout",
            ("Increase --timeout", "Run the layer on its own"),
            "high",
        ),
        types=(LayerTimeout,),
    ),
    Rule(
        Diagnostic(
            "strategy",
            "Structural transform failed and the layer has no textual fallback",
            "Fix the syntax errors in the file, then re-run the layer",
            ("Run syntax validation first", "Skip this layer"),
            "medium",
        ),
        types=(NoFallbackAvailable,),
    ),
    Rule(
        Diagnostic(
            "syntax",
            "Code syntax prevented transformation",
            "Fix syntax errors before running layerlint",
            ("Run syntax validation first", "Use a code formatter", "Check for missing brackets or semicolons"),
            "high",
        ),
        types=(SyntaxError, StructuralParseError),
        substrings=("Unexpected token",),
    ),
    Rule(
        Diagnostic(
            "filesystem",
            "File system access error",
            "Check file permissions and paths",
            ("Verify file exists", "Check write permissions"),
            "high",
        ),
        types=(FileNotFoundError, PermissionError),
        substrings=("ENOENT", "permission"),
    ),
    Rule(
        Diagnostic(
            "config",
            "Invalid JSON in configuration file",
            "Validate JSON syntax in config files",
            ("Use JSON validator", "Check for trailing commas"),
            "high",
        ),
        layer_id=1,
        substrings=("JSON",),
    ),
    Rule(
        Diagnostic(
            "pattern",
            "Pattern replacement failed",
            "Some patterns may conflict with your code structure",
            ("Skip pattern layer", "Review conflicting patterns"),
            "low",
        ),
        layer_id=2,
        substrings=("replace",),
    ),
    Rule(
        Diagnostic(
            "component",
            "JSX transformation error",
            "Complex JSX structures may need manual fixing",
            ("Simplify JSX", "Use manual key addition"),
            "medium",
        ),
        layer_id=3,
        substrings=("JSX",),
    ),
    Rule(
        Diagnostic(
            "hydration",
            "Browser API protection failed",
            "Manual SSR guards may be needed for complex cases",
            ("Add manual typeof window checks", "Use useEffect hooks"),
            "medium",
        ),
        layer_id=4,
        substrings=("localStorage", "window"),
    ),
]


def _generic(layer_id) -> Diagnostic:
    return Diagnostic(
        "unknown",
        f"Unexpected error in Layer {layer_id}",
        "Please report this issue with your code sample",
        ("Try running other layers individually", "Report issue with minimal reproduction case"),
        "medium",
    )


class DiagnosticClassifier:

    def __init__(self, rules: list[Rule] | None = None):
        self.rules = list(RULES if rules is None else rules)

    def classify(self, layer_id: int, error: BaseException) -> Diagnostic:
        try:
            message = str(error)
            for rule in self.rules:
                if rule.matches(layer_id, error, message):
                    return rule.diagnostic
        except Exception:
            logger.exception("diagnostic classification failed for layer %s", layer_id)
        return _generic(layer_id)
