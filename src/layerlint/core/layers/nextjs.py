"""
Layer 5 - Next.js App Router conventions.

'use client' must be the first statement of a module; misplaced directives are
hoisted and missing ones added to exported components that use client hooks.
Corrupted nested import blocks (a dangling `import {` line left in front of a
real import) are repaired textually, since the tree does not parse.
"""

import re

from layerlint.core.edits import PatternRule, SourceEditor, apply_rules
from layerlint.core.layers import Capabilities, LayerDescriptor, LayerUnit, Rewrite, TransformContext
from layerlint.core.syntax import SourceTree


DIRECTIVE = "'use client';"

CLIENT_HOOKS = {
    "useState",
    "useEffect",
    "useLayoutEffect",
    "useReducer",
    "useRef",
    "useContext",
    "useTransition",
    "useSyncExternalStore",
    "useRouter",
    "usePathname",
    "useSearchParams",
}

HOOK_CALL_RE = re.compile(r"\b(?:React\.)?(" + "|".join(sorted(CLIENT_HOOKS)) + r")\s*\(")
DIRECTIVE_LINE_RE = re.compile(r"^[ \t]*(['\"])use client\1;?[ \t]*\n?", re.MULTILINE)
LEADING_TRIVIA_RE = re.compile(r"\A(?:\s+|//[^\n]*|/\*[\s\S]*?\*/)*")

HOIST_FIX = "Moved 'use client' directive to the top of the file"
ADD_FIX = "Added 'use client' directive for component using client hooks"
IMPORT_FIX = "Repaired corrupted import statements"


def _directive(st: SourceTree, node) -> str | None:
    if node.type != "expression_statement" or not node.named_children:
        return None
    expr = node.named_children[0]
    if expr.type != "string":
        return None
    return st.text(expr)[1:-1]


def _needs_directive(text: str, context: TransformContext) -> bool:
    if context.filename and not context.filename.endswith((".tsx", ".jsx", ".js")):
        return False
    if "use server" in text:
        return False
    return bool(HOOK_CALL_RE.search(text)) and re.search(r"\bexport\b", text) is not None


def structural(st: SourceTree, context: TransformContext) -> Rewrite:
    editor = SourceEditor(st)
    statements = [c for c in st.root.named_children if c.type != "comment"]
    directives = [s for s in statements if _directive(st, s) == "use client"]

    if directives:
        if statements[0].id == directives[0].id and len(directives) == 1:
            return Rewrite(st.source.decode("utf-8"))
        for node in directives:
            editor.remove(node)
        editor.insert_at(0, DIRECTIVE + "\n")
        text = re.sub(r"\n{3,}", "\n\n", editor.apply())
        return Rewrite(text, [HOIST_FIX])

    if _needs_directive(st.source.decode("utf-8"), context):
        editor.insert_at(0, DIRECTIVE + "\n\n")
        return Rewrite(editor.apply(), [ADD_FIX])

    return Rewrite(editor.apply())


# === Textual fallback ===

IMPORT_RULES = [
    PatternRule(
        "dangling-import-block",
        re.compile(r"^[ \t]*import\s*\{\s*\n(?=\s*import\s)", re.MULTILINE),
        "",
        IMPORT_FIX,
    ),
]


def textual(text: str, context: TransformContext) -> Rewrite:
    report = apply_rules(IMPORT_RULES, text)
    rewrite = Rewrite(report.text, report.fixes)

    found = list(DIRECTIVE_LINE_RE.finditer(rewrite.text))
    lead = LEADING_TRIVIA_RE.match(rewrite.text).end()
    if found:
        if len(found) > 1 or found[0].start() > lead:
            body = DIRECTIVE_LINE_RE.sub("", rewrite.text)
            rewrite.text = DIRECTIVE + "\n" + body.lstrip("\n")
            rewrite.fixes.append(HOIST_FIX)
    elif _needs_directive(rewrite.text, context):
        rewrite.text = DIRECTIVE + "\n\n" + rewrite.text
        rewrite.fixes.append(ADD_FIX)
    return rewrite


descriptor = LayerDescriptor(
    id=5,
    name="Next.js App Router",
    description="'use client' placement and import block repair",
    dependencies=frozenset({1, 2, 3, 4}),
    capabilities=Capabilities(structural=True, textual=True),
    file_types=frozenset({".tsx", ".jsx", ".js", ".ts"}),
)

layer = LayerUnit(descriptor, structural=structural, textual=textual)
