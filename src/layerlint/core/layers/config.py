"""
Layer 1 - configuration modernization.

tsconfig: modern target, strict, skipLibCheck, downlevelIteration.
next.config: reactStrictMode on, deprecated experimental.appDir removed.

Rules are gated on the file looking like the config they target, so running
this layer over component code is a no-op.
"""

import re

from layerlint.core.edits import MatchContext, PatternRule, apply_rules
from layerlint.core.layers import Capabilities, LayerDescriptor, LayerUnit, Rewrite, TransformContext


def _add_downlevel_iteration(ctx: MatchContext) -> str:
    empty = ctx.after.lstrip().startswith("}")
    entry = '"downlevelIteration": true' + ("" if empty else ",")
    return f"{ctx.match}\n    {entry}"


TSCONFIG_RULES = [
    PatternRule(
        "tsconfig-target",
        re.compile(r'"target"(\s*):(\s*)"(?:es5|es6|es2015)"', re.IGNORECASE),
        r'"target"\1:\2"ES2020"',
        "Upgraded TypeScript target to ES2020",
    ),
    PatternRule(
        "tsconfig-skip-lib-check",
        re.compile(r'"skipLibCheck"(\s*):(\s*)false'),
        r'"skipLibCheck"\1:\2true',
        "Enabled skipLibCheck",
    ),
    PatternRule(
        "tsconfig-strict",
        re.compile(r'"strict"(\s*):(\s*)false'),
        r'"strict"\1:\2true',
        "Enabled strict mode",
    ),
]

DOWNLEVEL_RULE = PatternRule(
    "tsconfig-downlevel-iteration",
    re.compile(r'"compilerOptions"\s*:\s*\{'),
    _add_downlevel_iteration,
    "Added downlevelIteration for modern array methods",
)

NEXT_CONFIG_RULES = [
    PatternRule(
        "next-react-strict-mode",
        re.compile(r"reactStrictMode(\s*):(\s*)false"),
        r"reactStrictMode\1:\2true",
        "Enabled reactStrictMode for React 18+",
    ),
    PatternRule(
        "next-app-dir",
        re.compile(r"\n[ \t]*appDir\s*:\s*(?:true|false)\s*,?[ \t]*(?://[^\n]*)?(?=\n)"),
        "",
        "Removed deprecated appDir configuration",
    ),
]


def is_tsconfig(text: str) -> bool:
    return '"compilerOptions"' in text


def is_next_config(text: str) -> bool:
    return "reactStrictMode" in text or re.search(r"\bappDir\s*:", text) is not None


def transform(text: str, context: TransformContext) -> Rewrite:
    rewrite = Rewrite(text)
    if is_tsconfig(text):
        rules = list(TSCONFIG_RULES)
        if '"downlevelIteration"' not in text:
            rules.append(DOWNLEVEL_RULE)
        report = apply_rules(rules, rewrite.text)
        rewrite.text = report.text
        rewrite.fixes.extend(report.fixes)
    if is_next_config(rewrite.text):
        report = apply_rules(NEXT_CONFIG_RULES, rewrite.text)
        rewrite.text = report.text
        rewrite.fixes.extend(report.fixes)
    return rewrite


descriptor = LayerDescriptor(
    id=1,
    name="Configuration",
    description="Modernize tsconfig and next.config settings",
    critical=True,
    capabilities=Capabilities(structural=False, textual=True),
    file_types=frozenset({".json", ".js", ".mjs", ".cjs", ".ts"}),
)

layer = LayerUnit(descriptor, textual=transform)
