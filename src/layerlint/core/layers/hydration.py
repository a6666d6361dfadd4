"""
Layer 4 - SSR/hydration guards.

Browser storage calls made during render crash on the server. Wrap them in a
`typeof window` check unless they already sit behind one or run inside a
useEffect callback (which only runs on the client).
"""

import re

from layerlint.core.edits import MatchContext, PatternRule, SourceEditor, apply_rules
from layerlint.core.jsx import FUNCTION_TYPES, call_name
from layerlint.core.layers import Capabilities, LayerDescriptor, LayerUnit, Rewrite, TransformContext
from layerlint.core.syntax import SourceTree


GUARD = "typeof window !== 'undefined'"
STORAGE_OBJECTS = {"localStorage", "sessionStorage", "window.localStorage", "window.sessionStorage"}
EFFECT_HOOKS = {"useEffect", "useLayoutEffect", "React.useEffect", "React.useLayoutEffect"}
FIX = "SSR guards added for browser APIs"


def _storage_call(st: SourceTree, node) -> str | None:
    """Method name if `node` is a call like localStorage.getItem(...)."""
    if node.type != "call_expression":
        return None
    fn = node.child_by_field_name("function")
    if fn is None or fn.type != "member_expression":
        return None
    obj = fn.child_by_field_name("object")
    prop = fn.child_by_field_name("property")
    if obj is None or prop is None or st.text(obj) not in STORAGE_OBJECTS:
        return None
    return st.text(prop)


def _in_effect(st: SourceTree, node) -> bool:
    current = node.parent
    while current is not None:
        if current.type in FUNCTION_TYPES:
            args = current.parent
            call = args.parent if args is not None and args.type == "arguments" else None
            if call is not None and call.type == "call_expression" and call_name(st, call) in EFFECT_HOOKS:
                return True
        current = current.parent
    return False


def _guarded(st: SourceTree, node) -> bool:
    current = node
    while current.parent is not None:
        parent = current.parent
        if parent.type in FUNCTION_TYPES:
            return False
        for field in ("condition", "left"):
            test = parent.child_by_field_name(field)
            if test is not None and test.id != current.id and "typeof window" in st.text(test):
                return True
        current = parent
    return False


def structural(st: SourceTree, context: TransformContext) -> Rewrite:
    editor = SourceEditor(st)
    guarded = 0
    replaced_until = -1
    for node in st.walk():
        method = _storage_call(st, node)
        if method is None or node.start_byte < replaced_until:
            continue
        if _in_effect(st, node) or _guarded(st, node):
            continue
        replaced_until = node.end_byte
        call = st.text(node)
        if node.parent is not None and node.parent.type == "expression_statement":
            editor.replace(node, f"{GUARD} && {call}")
        else:
            fallback = "null" if method == "getItem" else "undefined"
            editor.replace(node, f"({GUARD} ? {call} : {fallback})")
        guarded += 1
    return Rewrite(editor.apply(), [FIX] if guarded else [])


# === Textual fallback ===

def _guard_match(ctx: MatchContext) -> str:
    if "typeof window" in ctx.before or "useEffect" in ctx.before:
        return ctx.match
    fallback = "null" if ctx.groups[1] == "getItem" else "undefined"
    return f"({GUARD} ? {ctx.match} : {fallback})"


TEXTUAL_RULES = [
    PatternRule(
        "storage-guard",
        re.compile(
            r"(?<![\w.$])((?:window\.)?(?:localStorage|sessionStorage))\.(\w+)\((?:[^()]|\([^()]*\))*\)"
        ),
        _guard_match,
        FIX,
        window=120,
    ),
]


def textual(text: str, context: TransformContext) -> Rewrite:
    report = apply_rules(TEXTUAL_RULES, text)
    return Rewrite(report.text, report.fixes)


descriptor = LayerDescriptor(
    id=4,
    name="Hydration",
    description="Guard browser storage access during server render",
    dependencies=frozenset({1, 2, 3}),
    capabilities=Capabilities(structural=True, textual=True),
    file_types=frozenset({".tsx", ".jsx", ".js", ".ts", ".mjs", ".cjs"}),
)

layer = LayerUnit(descriptor, structural=structural, textual=textual)
