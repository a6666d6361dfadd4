"""
Layer 3 - component fixes.

Adds a `key` prop to JSX returned from `.map()` callbacks and `alt=""` to
<img> elements that have none.
"""

import re

from layerlint.core.edits import MatchContext, PatternRule, SourceEditor, apply_rules
from layerlint.core.jsx import (
    FUNCTION_TYPES, attribute_names, has_spread, opening_tag, parameter_nodes, returned_jsx,
)
from layerlint.core.layers import Capabilities, LayerDescriptor, LayerUnit, Rewrite, TransformContext
from layerlint.core.syntax import SourceTree


KEY_FIX = "Missing key props added to map elements"
ALT_FIX = "Added empty alt text to images"

# first match wins
KEY_FIELDS = ("id", "key", "uuid", "name")


def choose_key(st: SourceTree, fn) -> tuple[str, str | None]:
    """
    Pick a key expression for elements returned by a map callback.

    Returns (expression, index_name_to_add). The second item is set when the
    callback has to grow an index parameter.
    """
    container, params = parameter_nodes(fn)
    body_text = st.text(fn.child_by_field_name("body"))

    if params:
        item = params[0]
        if item.type == "identifier":
            name = st.text(item)
            for field in KEY_FIELDS:
                if re.search(rf"\b{re.escape(name)}\??\.{field}\b", body_text):
                    return f"{name}.{field}", None
        elif item.type == "object_pattern":
            bound = {
                st.text(c) for c in item.named_children
                if c.type == "shorthand_property_identifier_pattern"
            }
            for field in KEY_FIELDS:
                if field in bound:
                    return field, None

    if len(params) >= 2 and params[1].type == "identifier":
        return st.text(params[1]), None

    index = "index" if not re.search(r"\bindex\b", st.text(fn)) else "itemIndex"
    return index, index


def _map_callbacks(st: SourceTree):
    for node in st.walk():
        if node.type != "call_expression":
            continue
        fn = node.child_by_field_name("function")
        if fn is None or fn.type != "member_expression":
            continue
        prop = fn.child_by_field_name("property")
        if prop is None or st.text(prop) != "map":
            continue
        args = node.child_by_field_name("arguments")
        if args is None or not args.named_children:
            continue
        callback = args.named_children[0]
        if callback.type in FUNCTION_TYPES:
            yield callback


def _add_index_param(editor: SourceEditor, st: SourceTree, fn, index: str) -> bool:
    container, params = parameter_nodes(fn)
    if len(params) != 1:
        return False
    if container is None:
        editor.replace(params[0], f"({st.text(params[0])}, {index})")
    else:
        # the param node may be wrapped (required_parameter with a type)
        last = [c for c in container.named_children if c.type != "comment"][-1]
        editor.insert_after(last, f", {index}")
    return True


def structural(st: SourceTree, context: TransformContext) -> Rewrite:
    editor = SourceEditor(st)
    fixes = []

    keyed = 0
    for fn in _map_callbacks(st):
        targets = []
        for element in returned_jsx(fn):
            tag = opening_tag(element)
            if tag is None or tag.child_by_field_name("name") is None:
                continue  # fragment shorthand can't carry a key
            if "key" in attribute_names(st, tag) or has_spread(tag):
                continue
            targets.append(tag)
        if not targets:
            continue
        expr, index = choose_key(st, fn)
        if index and not _add_index_param(editor, st, fn, index):
            continue
        for tag in targets:
            editor.insert_after(tag.child_by_field_name("name"), f" key={{{expr}}}")
            keyed += 1
    if keyed:
        fixes.append(KEY_FIX)

    alts = 0
    for node in st.walk():
        if node.type not in ("jsx_opening_element", "jsx_self_closing_element"):
            continue
        name = node.child_by_field_name("name")
        if name is None or st.text(name) != "img":
            continue
        if "alt" in attribute_names(st, node) or has_spread(node):
            continue
        editor.insert_after(name, ' alt=""')
        alts += 1
    if alts:
        fixes.append(ALT_FIX)

    return Rewrite(editor.apply(), fixes)


# === Textual fallback ===

def _key_from_match(ctx: MatchContext) -> str:
    param, spacing, tag, attrs = ctx.groups
    if re.search(r"\bkey=", attrs):
        return ctx.match
    return f".map(({param}, index) =>{spacing}<{tag} key={{index}}{attrs}>"


TEXTUAL_RULES = [
    PatternRule(
        "map-key",
        re.compile(r"\.map\(\s*\(?\s*(\w+)\s*\)?\s*=>(\s*\(?\s*)<([A-Za-z][\w.]*)((?:\s[^<>]*?)?)>"),
        _key_from_match,
        KEY_FIX,
    ),
    PatternRule(
        "img-alt",
        re.compile(r"<img\b(?![^<>]*\balt=)"),
        '<img alt=""',
        ALT_FIX,
    ),
]


def textual(text: str, context: TransformContext) -> Rewrite:
    report = apply_rules(TEXTUAL_RULES, text)
    return Rewrite(report.text, report.fixes)


descriptor = LayerDescriptor(
    id=3,
    name="Components",
    description="Key props on mapped elements, alt text on images",
    dependencies=frozenset({1, 2}),
    capabilities=Capabilities(structural=True, textual=True),
    file_types=frozenset({".tsx", ".jsx", ".js"}),
)

layer = LayerUnit(descriptor, structural=structural, textual=textual)
