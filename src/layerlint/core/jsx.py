"""
Tree helpers for JSX/TSX trees, shared by the structural layers.
"""

from layerlint.core.syntax import SourceTree


FUNCTION_TYPES = {
    "arrow_function",
    "function",
    "function_expression",
    "function_declaration",
    "generator_function",
    "generator_function_declaration",
    "method_definition",
}

JSX_ELEMENT_TYPES = {"jsx_element", "jsx_self_closing_element"}


def opening_tag(element):
    """The node that holds an element's name and attributes."""
    if element.type == "jsx_self_closing_element":
        return element
    if element.type == "jsx_element":
        return element.child_by_field_name("open_tag")
    if element.type == "jsx_opening_element":
        return element
    return None


def tag_name(st: SourceTree, element) -> str | None:
    tag = opening_tag(element)
    if tag is None:
        return None
    name = tag.child_by_field_name("name")
    return st.text(name) if name is not None else None


def attributes(tag) -> list:
    return [c for c in tag.named_children if c.type == "jsx_attribute"]


def attribute_names(st: SourceTree, tag) -> set[str]:
    names = set()
    for attr in attributes(tag):
        if attr.named_children:
            names.add(st.text(attr.named_children[0]))
    return names


def has_spread(tag) -> bool:
    return any(c.type == "jsx_expression" for c in tag.named_children)


def _unwrap(node) -> list:
    while node is not None and node.type == "parenthesized_expression":
        node = node.named_children[0] if node.named_children else None
    if node is None:
        return []
    if node.type in JSX_ELEMENT_TYPES:
        return [node]
    if node.type == "ternary_expression":
        return (_unwrap(node.child_by_field_name("consequence"))
                + _unwrap(node.child_by_field_name("alternative")))
    if node.type == "binary_expression":
        return _unwrap(node.child_by_field_name("right"))
    return []


def return_statements(body) -> list:
    """return statements of a function body, not descending into nested functions."""
    found = []
    stack = list(reversed(body.named_children))
    while stack:
        node = stack.pop()
        if node.type in FUNCTION_TYPES or node.type == "class_declaration":
            continue
        if node.type == "return_statement":
            found.append(node)
            continue
        stack.extend(reversed(node.named_children))
    return found


def returned_jsx(fn) -> list:
    """JSX elements a function returns directly."""
    body = fn.child_by_field_name("body")
    if body is None:
        return []
    if body.type != "statement_block":
        return _unwrap(body)
    out = []
    for ret in return_statements(body):
        if ret.named_children:
            out.extend(_unwrap(ret.named_children[0]))
    return out


def parameter_nodes(fn) -> tuple[object | None, list]:
    """
    (container, params) for a function.

    container is the formal_parameters node, or None for a bare `x => ...`
    arrow parameter. params are the binding patterns.
    """
    single = fn.child_by_field_name("parameter")
    if single is not None:
        return None, [single]
    container = fn.child_by_field_name("parameters")
    if container is None:
        return None, []
    params = []
    for child in container.named_children:
        if child.type == "comment":
            continue
        if child.type in ("required_parameter", "optional_parameter"):
            pattern = child.child_by_field_name("pattern")
            if pattern is not None:
                child = pattern
        params.append(child)
    return container, params


def enclosing_function(node):
    current = node.parent
    while current is not None:
        if current.type in FUNCTION_TYPES:
            return current
        current = current.parent
    return None


def call_name(st: SourceTree, call) -> str | None:
    """Callee text for a call_expression: `useEffect`, `React.useEffect`, `items.map`."""
    fn = call.child_by_field_name("function")
    return st.text(fn) if fn is not None else None
