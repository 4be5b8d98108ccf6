"""
Complexity metrics for JavaScript/TypeScript functions.

complexity = 1 + number of decision points in the function's own body.

Decision points:
- if statements (each ``else if`` is its own if statement)
- for / for-in / for-of / while / do-while loops
- switch cases, including ``default``
- logical ``&&`` and ``||`` expressions
- try statements

Nested functions that are recorded as entities of their own (named
function declarations, arrow functions bound to an identifier, class
declarations and their methods) are skipped and scored separately.
Anonymous callbacks are walked and count toward the enclosing function.
"""

from typing import Optional


DECISION_TYPES = {
    "if_statement",
    "for_statement",
    "for_in_statement",   # covers for-of as well
    "while_statement",
    "do_statement",
    "switch_case",
    "switch_default",
    "try_statement",
}

LOGICAL_OPERATORS = {"&&", "||"}

FUNCTION_DECLARATION_TYPES = {
    "function_declaration",
    "generator_function_declaration",
}

CLASS_DECLARATION_TYPES = {
    "class_declaration",
    "abstract_class_declaration",
}


def is_named_arrow(node) -> bool:
    """True for ``const name = () => ...`` (a single identifier binding)."""
    if node.type != "arrow_function":
        return False
    parent = node.parent
    if parent is None or parent.type != "variable_declarator":
        return False
    name = parent.child_by_field_name("name")
    value = parent.child_by_field_name("value")
    return name is not None and name.type == "identifier" and value == node


def is_separately_scored(node) -> bool:
    """True when a nested node gets its own complexity score."""
    return (
        node.type in FUNCTION_DECLARATION_TYPES
        or node.type in CLASS_DECLARATION_TYPES
        or is_named_arrow(node)
    )


def is_decision_point(node) -> bool:
    if node.type in DECISION_TYPES:
        return True
    if node.type == "binary_expression":
        operator = node.child_by_field_name("operator")
        return operator is not None and operator.type in LOGICAL_OPERATORS
    return False


def calculate_complexity(node) -> int:
    """
    Score a function, arrow function or method node.

    Args:
        node: A tree-sitter function-like node with a ``body`` field

    Returns:
        Integer complexity score (minimum 1)
    """
    complexity = 1

    body_node = node.child_by_field_name("body")
    if body_node is None:
        return complexity

    if is_decision_point(body_node):
        # Concise arrow body such as ``() => a && b``
        complexity += 1

    stack = list(body_node.children)
    while stack:
        child = stack.pop()
        if is_separately_scored(child):
            continue
        if is_decision_point(child):
            complexity += 1
        stack.extend(child.children)

    return complexity


def count_lines(source_code: Optional[str]) -> int:
    """Line count of a file: number of newline-separated segments."""
    if not source_code:
        return 0
    return len(source_code.split("\n"))
