"""
Engine configuration.

The corruption catalogue, critical identifiers and warning heuristics change
with the product, so they live here as data instead of in the validator.
"""

import os
import re
from pathlib import Path

from pydantic import BaseModel, Field, field_validator


CONFIG_ENV = "LAYERLINT_CONFIG"


class CorruptionPattern(BaseModel):
    name: str
    pattern: str
    multiline: bool = False

    @field_validator("pattern")
    @classmethod
    def _must_compile(cls, value: str) -> str:
        try:
            re.compile(value)
        except re.error as e:
            raise ValueError(f"invalid regex {value!r}: {e}") from e
        return value

    def compile(self) -> re.Pattern:
        return re.compile(self.pattern, re.MULTILINE if self.multiline else 0)


DEFAULT_CORRUPTION_PATTERNS = [
    CorruptionPattern(
        name="Double function calls",
        pattern=r"onClick=\{[^}]*\([^)]*\)\s*=>\s*\(\)\s*=>",
    ),
    CorruptionPattern(
        name="Malformed event handlers",
        pattern=r"onClick=\{[^}]*\)\([^)]*\)$",
    ),
    CorruptionPattern(
        name="Invalid JSX attributes",
        pattern=r"\w+=\{[^}]*\)[^}]*\}",
    ),
    CorruptionPattern(
        name="Broken import statements",
        pattern=r"import\s*{\s*\n\s*import\s*{",
    ),
]

DEFAULT_CRITICAL_IDENTIFIERS = [
    "React",
    "useState",
    "useEffect",
    "Component",
    "createContext",
]

DEFAULT_PARTIAL_PATTERNS = [
    CorruptionPattern(name="HTML entities", pattern=r"&(?:quot|amp|lt|gt|#x27|nbsp);"),
    CorruptionPattern(name="console.log calls", pattern=r"console\.log\("),
]


class EngineConfig(BaseModel):
    cache_capacity: int = Field(default=256, ge=0)
    default_timeout: float = Field(default=30.0, gt=0)
    max_workers: int = Field(default=4, ge=1)

    corruption_patterns: list[CorruptionPattern] = Field(
        default_factory=lambda: list(DEFAULT_CORRUPTION_PATTERNS)
    )
    critical_identifiers: list[str] = Field(
        default_factory=lambda: list(DEFAULT_CRITICAL_IDENTIFIERS)
    )

    # Non-fatal heuristics: these produce accept_with_warning, never a revert
    partial_patterns: list[CorruptionPattern] = Field(
        default_factory=lambda: list(DEFAULT_PARTIAL_PATTERNS)
    )
    shrink_warning_ratio: float = Field(default=0.5, ge=0, le=1)

    @classmethod
    def load(cls, path: str | Path | None = None) -> "EngineConfig":
        """
        Load config from a JSON file, then apply env overrides.

        Without an explicit path, LAYERLINT_CONFIG is consulted; with neither,
        defaults are used.
        """
        path = path or os.environ.get(CONFIG_ENV)
        if path:
            config = cls.model_validate_json(Path(path).read_text())
        else:
            config = cls()

        overrides = {}
        if "LAYERLINT_CACHE_CAPACITY" in os.environ:
            overrides["cache_capacity"] = int(os.environ["LAYERLINT_CACHE_CAPACITY"])
        if "LAYERLINT_TIMEOUT" in os.environ:
            overrides["default_timeout"] = float(os.environ["LAYERLINT_TIMEOUT"])
        if "LAYERLINT_MAX_WORKERS" in os.environ:
            overrides["max_workers"] = int(os.environ["LAYERLINT_MAX_WORKERS"])

        if overrides:
            config = cls.model_validate({**config.model_dump(), **overrides})
        return config
