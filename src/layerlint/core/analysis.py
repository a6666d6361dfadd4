"""
Smart layer selection.

Scans source text for problems the built-in layers know how to fix and
recommends the layers worth running. Detection is deliberately cheap
(substring and regex checks, no parsing) so it can run before every fix.
"""

import re
from dataclasses import dataclass, field


@dataclass
class Issue:
    type: str
    severity: str  # high | medium | low
    description: str
    layer: int
    pattern: str
    count: int = 1

    def to_dict(self) -> dict:
        return {
            "type": self.type,
            "severity": self.severity,
            "description": self.description,
            "layer": self.layer,
            "pattern": self.pattern,
            "count": self.count,
        }


@dataclass
class Analysis:
    recommended_layers: list[int]
    issues: list[Issue] = field(default_factory=list)
    reasons: list[str] = field(default_factory=list)
    confidence: float = 0.5
    impact: dict = field(default_factory=dict)

    def to_dict(self) -> dict:
        return {
            "recommended_layers": self.recommended_layers,
            "issues": [i.to_dict() for i in self.issues],
            "reasons": self.reasons,
            "confidence": self.confidence,
            "impact": self.impact,
        }


ENTITY_PATTERNS = [
    (re.compile(r"&quot;"), "HTML quote entities"),
    (re.compile(r"&amp;"), "HTML ampersand entities"),
    (re.compile(r"&lt;|&gt;"), "HTML bracket entities"),
    (re.compile(r"console\.log\("), "Console.log usage"),
]

MAP_WITHOUT_KEY_RE = re.compile(r"\.map\(\s*\(?[^)]*\)?\s*=>\s*\(?\s*<(?![^>]*\bkey=)[A-Za-z][^>]*>")
IMG_WITHOUT_ALT_RE = re.compile(r"<img\b(?![^>]*\balt=)[^>]*>")
STORAGE_RE = re.compile(r"\b(?:localStorage|sessionStorage)\.")
HOOK_RE = re.compile(r"\buse(?:State|Effect|LayoutEffect|Reducer|Ref|Context|Router)\s*\(")
CORRUPT_IMPORT_RE = re.compile(r"import\s*\{\s*\n\s*import\s")
BUTTON_RE = re.compile(r"<button\b(?![^>]*aria-label)")
OUTDATED_TARGET_RE = re.compile(r'"target"\s*:\s*"(?:es5|es6|es2015)"', re.IGNORECASE)


def is_react_component(text: str) -> bool:
    return (
        "import React" in text
        or "import {" in text
        or ("function " in text and "return (" in text)
        or ("=> (" in text)
        or bool(re.search(r"<[A-Za-z][\w.]*[\s>/]", text))
    )


def _first_statement_is_use_client(text: str) -> bool:
    for line in text.split("\n"):
        stripped = line.strip()
        if not stripped or stripped.startswith(("//", "/*", "*")):
            continue
        return stripped.rstrip(";") in ("'use client'", '"use client"')
    return False


class LayerAdvisor:

    def detect_issues(self, text: str, filename: str | None = None) -> list[Issue]:
        issues = []

        # Layer 1
        if OUTDATED_TARGET_RE.search(text) or "reactStrictMode: false" in text or \
                re.search(r"\bappDir\s*:", text) or re.search(r'"(?:strict|skipLibCheck)"\s*:\s*false', text):
            issues.append(Issue("config", "high", "Outdated configuration detected", 1,
                                "Configuration modernization needed"))

        # Layer 2
        for pattern, name in ENTITY_PATTERNS:
            n = len(pattern.findall(text))
            if n:
                issues.append(Issue("pattern", "medium", f"{name} found ({n} occurrences)", 2, name, n))

        component = is_react_component(text)

        # Layer 3
        if component:
            n = len(MAP_WITHOUT_KEY_RE.findall(text))
            if n:
                issues.append(Issue("component", "high", f"Missing key props in {n} map operations", 3,
                                    "Missing key props", n))
            n = len(IMG_WITHOUT_ALT_RE.findall(text))
            if n:
                issues.append(Issue("component", "medium", f"{n} images missing alt attributes", 3,
                                    "Accessibility issues", n))

        # Layer 4
        if "typeof window" not in text:
            n = len(STORAGE_RE.findall(text))
            if n:
                issues.append(Issue("hydration", "high", f"{n} unguarded browser storage usage", 4,
                                    "SSR safety", n))

        # Layer 5
        if component:
            if CORRUPT_IMPORT_RE.search(text):
                issues.append(Issue("nextjs", "high", "Corrupted import statements detected - builds will fail",
                                    5, "Corrupted imports"))
            has_directive = "use client" in text
            if has_directive and not _first_statement_is_use_client(text):
                issues.append(Issue("nextjs", "high", "'use client' directive must be at the top of the file",
                                    5, "Misplaced use client"))
            if not has_directive and HOOK_RE.search(text) and re.search(r"\bexport\b", text):
                issues.append(Issue("nextjs", "high", "Components using React hooks need 'use client' directive",
                                    5, "Missing use client for hooks"))

        # Layer 6
        if component:
            n = len(BUTTON_RE.findall(text))
            if n:
                issues.append(Issue("testing", "medium", f"{n} buttons missing accessibility attributes", 6,
                                    "Missing accessibility attributes", n))
            if re.search(r"^(?:function\s+[A-Z]|const\s+[A-Z]\w*\s*=)", text, re.MULTILINE) and \
                    not re.search(r"\bexport\b|module\.exports", text):
                issues.append(Issue("testing", "high", "Component function should be properly exported", 6,
                                    "Invalid component exports"))

        return issues

    def recommend(self, issues: list[Issue]) -> tuple[list[int], list[str]]:
        layers = {1}
        reasons = ["Configuration layer provides essential foundation"]
        by_layer: dict[int, list[Issue]] = {}
        for issue in issues:
            by_layer.setdefault(issue.layer, []).append(issue)
        for layer_id in sorted(by_layer):
            layers.add(layer_id)
            found = by_layer[layer_id]
            high = sum(1 for i in found if i.severity == "high")
            medium = sum(1 for i in found if i.severity == "medium")
            if high:
                reasons.append(f"Layer {layer_id}: {high} critical issues detected")
            if medium:
                reasons.append(f"Layer {layer_id}: {medium} medium priority issues detected")
        return sorted(layers), reasons

    @staticmethod
    def confidence(issues: list[Issue]) -> float:
        if not issues:
            return 0.5
        high = sum(1 for i in issues if i.severity == "high")
        return min(0.9, 0.6 + (high / len(issues)) * 0.3)

    @staticmethod
    def impact(issues: list[Issue]) -> dict:
        high = sum(1 for i in issues if i.severity == "high")
        level = "high" if high > 3 else "medium" if high > 0 else "low"
        return {
            "level": level,
            "description": f"{len(issues)} total issues, {high} critical",
            "estimated_fix_seconds": max(30, len(issues) * 10),
        }

    def analyze(self, text: str, filename: str | None = None) -> Analysis:
        issues = self.detect_issues(text, filename)
        layers, reasons = self.recommend(issues)
        return Analysis(
            recommended_layers=layers,
            issues=issues,
            reasons=reasons,
            confidence=self.confidence(issues),
            impact=self.impact(issues),
        )
