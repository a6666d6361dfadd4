"""
Layer 6 - testing and validation polish.

Buttons get an aria-label when they lack one, and a module with a single
component that is never exported gets a default export so it can be imported
by tests.
"""

import re

from layerlint.core.edits import MatchContext, PatternRule, SourceEditor, apply_rules
from layerlint.core.jsx import attribute_names, has_spread, returned_jsx
from layerlint.core.layers import Capabilities, LayerDescriptor, LayerUnit, Rewrite, TransformContext
from layerlint.core.syntax import SourceTree


ARIA_FIX = "Added aria-label to buttons"
EXPORT_FIX = "Added default export for component"

COMPONENT_NAME_RE = re.compile(r"^[A-Z]\w*$")


def button_label(text: str) -> str:
    label = " ".join(text.split())
    if not label or any(ch in label for ch in '"{}<>'):
        return "button"
    return label


def _element_text(st: SourceTree, tag) -> str:
    element = tag.parent if tag.type == "jsx_opening_element" else None
    if element is None:
        return ""
    return " ".join(st.text(c) for c in element.named_children if c.type == "jsx_text")


def _top_level_components(st: SourceTree) -> list[tuple[str, object]]:
    """(name, declaration) for capitalized functions at module level that return JSX."""
    found = []
    for node in st.root.named_children:
        if node.type == "function_declaration":
            name = node.child_by_field_name("name")
            if name is not None and COMPONENT_NAME_RE.match(st.text(name)) and returned_jsx(node):
                found.append((st.text(name), node))
        elif node.type in ("lexical_declaration", "variable_declaration"):
            for decl in node.named_children:
                if decl.type != "variable_declarator":
                    continue
                name = decl.child_by_field_name("name")
                value = decl.child_by_field_name("value")
                if name is None or value is None:
                    continue
                if value.type in ("arrow_function", "function_expression", "function") and \
                        COMPONENT_NAME_RE.match(st.text(name)) and returned_jsx(value):
                    found.append((st.text(name), node))
    return found


def _has_exports(st: SourceTree) -> bool:
    return any(c.type == "export_statement" for c in st.root.named_children)


def structural(st: SourceTree, context: TransformContext) -> Rewrite:
    editor = SourceEditor(st)
    fixes = []

    labelled = 0
    for node in st.walk():
        if node.type not in ("jsx_opening_element", "jsx_self_closing_element"):
            continue
        name = node.child_by_field_name("name")
        if name is None or st.text(name) != "button":
            continue
        attrs = attribute_names(st, node)
        if "aria-label" in attrs or "aria-labelledby" in attrs or has_spread(node):
            continue
        editor.insert_after(name, f' aria-label="{button_label(_element_text(st, node))}"')
        labelled += 1
    if labelled:
        fixes.append(ARIA_FIX)

    components = _top_level_components(st)
    if len(components) == 1 and not _has_exports(st) and "module.exports" not in st.source.decode("utf-8"):
        name, _ = components[0]
        tail = "" if st.source.endswith(b"\n") else "\n"
        editor.insert_at(len(st.source), f"{tail}\nexport default {name};\n")
        fixes.append(EXPORT_FIX)

    return Rewrite(editor.apply(), fixes)


# === Textual fallback ===

def _label_button(ctx: MatchContext) -> str:
    attrs, inner = ctx.groups
    if "aria-label" in (attrs or ""):
        return ctx.match
    label = button_label(inner)
    return f'<button aria-label="{label}"{attrs or ""}>{inner}</button>'


TEXTUAL_RULES = [
    PatternRule(
        "button-aria-label",
        re.compile(r"<button(\s[^<>]*)?>([^<>{}]*)</button>"),
        _label_button,
        ARIA_FIX,
    ),
]

COMPONENT_DECL_RE = re.compile(r"^(?:function\s+([A-Z]\w*)\s*\(|const\s+([A-Z]\w*)\s*=\s*(?:\([^)]*\)|\w+)\s*=>)", re.MULTILINE)


def textual(text: str, context: TransformContext) -> Rewrite:
    report = apply_rules(TEXTUAL_RULES, text)
    rewrite = Rewrite(report.text, report.fixes)

    names = [a or b for a, b in COMPONENT_DECL_RE.findall(rewrite.text)]
    if len(names) == 1 and not re.search(r"^\s*export\b|module\.exports", rewrite.text, re.MULTILINE):
        tail = "" if rewrite.text.endswith("\n") else "\n"
        rewrite.text = f"{rewrite.text}{tail}\nexport default {names[0]};\n"
        rewrite.fixes.append(EXPORT_FIX)
    return rewrite


descriptor = LayerDescriptor(
    id=6,
    name="Testing & Validation",
    description="Accessibility labels and testable exports",
    dependencies=frozenset({1, 2, 3, 4, 5}),
    capabilities=Capabilities(structural=True, textual=True),
    file_types=frozenset({".tsx", ".jsx"}),
)

layer = LayerUnit(descriptor, structural=structural, textual=textual)
