"""
Layer 2 - textual pattern cleanup.

HTML entities, console.log, React.Fragment shorthand, emoji in comments.
Each replacement looks only at the match and the text just before it on the
same line, which is enough to tell whether it sits inside a string literal.
"""

import re

from layerlint.core.edits import MatchContext, PatternRule, apply_rules
from layerlint.core.layers import Capabilities, LayerDescriptor, LayerUnit, Rewrite, TransformContext


CODE_FILES = frozenset({".js", ".jsx", ".ts", ".tsx", ".mjs", ".cjs"})

ENTITIES = {
    "quot": '"',
    "#x27": "'",
    "#39": "'",
    "apos": "'",
    "amp": "&",
    "lt": "<",
    "gt": ">",
    "nbsp": "\u00a0",
    "copy": "©",
    "reg": "®",
    "trade": "™",
    "hellip": "…",
    "ndash": "\u2013",
    "mdash": "\u2014",
}

# unsafe as raw characters in JSX text
JSX_UNSAFE = {"<", ">", "{", "}"}

EMOJI_RE = re.compile("[\U0001F300-\U0001FAFF\u2600-\u27BF\u2B50\u2B06\u2194-\u21AA]\uFE0F?")

LINE_WINDOW = 240


def open_quote(prefix: str) -> str | None:
    """Quote character of the string literal open at the end of `prefix`, if any."""
    line = prefix.rsplit("\n", 1)[-1]
    quote = None
    escaped = False
    for ch in line:
        if escaped:
            escaped = False
            continue
        if ch == "\\" and quote:
            escaped = True
        elif quote is None and ch in "'\"`":
            quote = ch
        elif ch == quote:
            quote = None
    return quote


def _in_jsx_attribute(prefix: str) -> bool:
    line = prefix.rsplit("\n", 1)[-1]
    return re.search(r"[\w-]+=\s*\"[^\"]*$", line) is not None


def _decode_entity(ctx: MatchContext) -> str:
    char = ENTITIES[ctx.groups[0]]
    quote = open_quote(ctx.before)
    if quote is None:
        if char in JSX_UNSAFE:
            return ctx.match
        return char
    if char == quote:
        if quote == '"' and _in_jsx_attribute(ctx.before):
            return ctx.match
        return "\\" + char
    return char


def _strip_comment_emoji(ctx: MatchContext) -> str:
    if not EMOJI_RE.search(ctx.match) or open_quote(ctx.before) is not None:
        return ctx.match
    cleaned = EMOJI_RE.sub("", ctx.match)
    cleaned = re.sub(r"(?<=\S) {2,}", " ", cleaned).rstrip()
    # an emoji-only comment keeps its marker
    return cleaned if cleaned.strip() not in ("", "//") else "//"


RULES = [
    PatternRule(
        "html-entities",
        re.compile(r"&(" + "|".join(re.escape(k) for k in ENTITIES) + r");"),
        _decode_entity,
        "HTML entities converted to proper characters",
        window=LINE_WINDOW,
    ),
    PatternRule(
        "console-log",
        re.compile(r"\bconsole\.log\("),
        "console.debug(",
        "Console.log statements converted to console.debug",
    ),
    PatternRule(
        "fragment-open",
        re.compile(r"<React\.Fragment>"),
        "<>",
        "React.Fragment replaced with <> shorthand",
    ),
    PatternRule(
        "fragment-close",
        re.compile(r"</React\.Fragment>"),
        "</>",
        "React.Fragment replaced with <> shorthand",
    ),
    PatternRule(
        "comment-emoji",
        re.compile(r"//[^\n]*"),
        _strip_comment_emoji,
        "Removed emoji from comments",
        window=LINE_WINDOW,
    ),
]


def transform(text: str, context: TransformContext) -> Rewrite:
    report = apply_rules(RULES, text)
    fixes = list(dict.fromkeys(report.fixes))
    return Rewrite(report.text, fixes)


descriptor = LayerDescriptor(
    id=2,
    name="Entity Cleanup",
    description="HTML entities, console.log, Fragment shorthand, comment emoji",
    dependencies=frozenset({1}),
    capabilities=Capabilities(structural=False, textual=True),
    file_types=CODE_FILES,
)

layer = LayerUnit(descriptor, textual=transform)
