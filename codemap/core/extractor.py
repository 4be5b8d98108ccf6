"""
Entity extraction from a parsed JavaScript/TypeScript file.

One depth-first walk over the tree-sitter tree collects functions,
variables, imports, classes, UI components and dependency edges.

The walk is driven by an explicit stack of (node, ScopeContext) pairs.
Entering a function, method or class pairs its subtree with a new
immutable context and the enclosing context is left untouched. The
extractor therefore holds no "current function" state between nodes,
and separate FileExtractor instances can run on separate threads.
"""

import logging
import re
from dataclasses import dataclass, replace
from typing import Callable, Dict, Iterator, List, Optional, Tuple

from ..config import AnalyzerConfig
from .complexity import calculate_complexity, is_named_arrow
from .entities import (
    GLOBAL_SCOPE,
    ClassEntity,
    ComponentEntity,
    DependencyEdge,
    DependencyKind,
    FileAnalysis,
    FunctionEntity,
    ImportEntity,
    SourceLocation,
    VariableEntity,
)
from .parser import ParsedSource, node_text

logger = logging.getLogger(__name__)


HOOK_PATTERN = re.compile(r"^use[A-Z]")

JSX_ELEMENT_TYPES = {"jsx_element", "jsx_self_closing_element", "jsx_fragment"}

# Wrappers that do not change what an expression evaluates to
TRANSPARENT_WRAPPERS = {
    "parenthesized_expression",
    "as_expression",
    "satisfies_expression",
    "non_null_expression",
}

# Boundaries of a function's own `return` statements
FUNCTION_LIKE_TYPES = {
    "function_declaration",
    "generator_function_declaration",
    "function_expression",
    "function",
    "generator_function",
    "arrow_function",
    "method_definition",
    "class_declaration",
    "abstract_class_declaration",
    "class",
}

COMPONENT_TYPE_NAMES = {
    "FC",
    "FunctionComponent",
    "React.FC",
    "React.FunctionComponent",
    "JSX.Element",
}

PARAMETER_WRAPPERS = {"required_parameter", "optional_parameter"}


def is_hook(name: str) -> bool:
    """Hook naming convention: ``use`` followed by an uppercase letter."""
    return bool(HOOK_PATTERN.match(name))


def bare_callee_name(callee) -> Optional[str]:
    """``useX`` for both ``useX(...)`` and ``React.useX(...)`` callees."""
    if callee is None:
        return None
    if callee.type == "member_expression":
        obj = callee.child_by_field_name("object")
        if obj is None or obj.type != "identifier":
            return None
        callee = callee.child_by_field_name("property")
        if callee is None or callee.type != "property_identifier":
            return None
    elif callee.type != "identifier":
        return None
    return node_text(callee)


def is_local_import(source: str) -> bool:
    """Bare specifier heuristic: no scope prefix, no path separator, no dot."""
    return not source.startswith("@") and "/" not in source and "." not in source


def named_children(node) -> List:
    return [c for c in node.named_children if c.type != "comment"]


def unwrap_expression(node):
    while node is not None and node.type in TRANSPARENT_WRAPPERS:
        inner = named_children(node)
        node = inner[0] if inner else None
    return node


def is_jsx_like(node) -> bool:
    """True for a JSX tree, looking through parentheses, casts and ternaries."""
    pending = [node]
    while pending:
        node = unwrap_expression(pending.pop())
        if node is None:
            continue
        if node.type in JSX_ELEMENT_TYPES:
            return True
        if node.type == "ternary_expression":
            pending.append(node.child_by_field_name("alternative"))
            pending.append(node.child_by_field_name("consequence"))
    return False


def iter_own_returns(body) -> Iterator:
    """Yield return statements of a function body, not of nested functions."""
    stack = list(reversed(body.children))
    while stack:
        child = stack.pop()
        if child.type in FUNCTION_LIKE_TYPES:
            continue
        if child.type == "return_statement":
            yield child
        stack.extend(reversed(child.children))


def returns_jsx(function_node) -> bool:
    body = function_node.child_by_field_name("body")
    if body is None:
        return False
    if body.type != "statement_block":
        return is_jsx_like(body)
    for ret in iter_own_returns(body):
        values = named_children(ret)
        if values and is_jsx_like(values[0]):
            return True
    return False


def type_annotation_text(node) -> Optional[str]:
    """``: Foo<Bar>`` -> ``Foo<Bar>``."""
    if node is None:
        return None
    text = node_text(node).strip()
    if text.startswith(":"):
        text = text[1:].strip()
    return text or None


def get_parameters(function_node) -> List:
    single = function_node.child_by_field_name("parameter")
    if single is not None:
        return [single]
    params = function_node.child_by_field_name("parameters")
    if params is None:
        return []
    return named_children(params)


def unwrap_parameter(param):
    if param.type in PARAMETER_WRAPPERS:
        param = param.child_by_field_name("pattern")
    if param is not None and param.type == "assignment_pattern":
        param = param.child_by_field_name("left")
    return param


def get_param_name(param) -> str:
    """Display name of one parameter."""
    param = unwrap_parameter(param)
    if param is None:
        return "unknown"
    if param.type == "identifier":
        return node_text(param)
    if param.type == "object_pattern":
        return "{...}"
    if param.type == "array_pattern":
        return "[...]"
    if param.type == "rest_pattern":
        inner = named_children(param)
        if inner and inner[0].type == "identifier":
            return f"...{node_text(inner[0])}"
        return "...rest"
    return "unknown"


def extract_props(function_node) -> List[str]:
    """Candidate prop names from the first parameter."""
    props: List[str] = []
    params = get_parameters(function_node)
    if not params:
        return props

    first = unwrap_parameter(params[0])
    if first is None:
        return props

    if first.type == "identifier":
        props.append(node_text(first))
    elif first.type == "object_pattern":
        for prop in named_children(first):
            if prop.type == "shorthand_property_identifier_pattern":
                props.append(node_text(prop))
            elif prop.type == "pair_pattern":
                key = prop.child_by_field_name("key")
                if key is not None and key.type == "property_identifier":
                    props.append(node_text(key))
            elif prop.type == "object_assignment_pattern":
                left = prop.child_by_field_name("left")
                if left is not None and left.type == "shorthand_property_identifier_pattern":
                    props.append(node_text(left))
            elif prop.type == "rest_pattern":
                inner = named_children(prop)
                if inner and inner[0].type == "identifier":
                    props.append(f"...{node_text(inner[0])}")
    return props


def component_type_info(declarator) -> Tuple[bool, List[str]]:
    """
    Inspect a ``const X: React.FC<{ a: string }> = ...`` annotation.

    Returns:
        (annotated as a component type, prop names from a type literal argument)
    """
    if declarator is None or declarator.type != "variable_declarator":
        return False, []
    annotation = declarator.child_by_field_name("type")
    if annotation is None:
        return False, []
    inner = named_children(annotation)
    if not inner:
        return False, []
    type_node = inner[0]

    type_args = None
    if type_node.type == "generic_type":
        name_node = type_node.child_by_field_name("name")
        type_args = type_node.child_by_field_name("type_arguments")
        if name_node is None or type_args is None:
            parts = named_children(type_node)
            name_node = name_node or (parts[0] if parts else None)
            type_args = type_args or next(
                (p for p in parts if p.type == "type_arguments"), None
            )
        type_name = node_text(name_node)
    else:
        type_name = node_text(type_node)

    if type_name not in COMPONENT_TYPE_NAMES:
        return False, []

    props: List[str] = []
    if type_args is not None:
        args = named_children(type_args)
        if args and args[0].type == "object_type":
            for member in named_children(args[0]):
                if member.type != "property_signature":
                    continue
                key = member.child_by_field_name("name")
                if key is not None and key.type == "property_identifier":
                    props.append(node_text(key))
    return True, props


def is_async(function_node) -> bool:
    return any(child.type == "async" for child in function_node.children)


def declaration_kind(declarator) -> str:
    """``const`` / ``let`` / ``var`` of the declaration owning a declarator."""
    parent = declarator.parent
    if parent is not None and parent.type in ("lexical_declaration", "variable_declaration"):
        first = parent.children[0] if parent.children else None
        if first is not None and first.type in ("const", "let", "var"):
            return first.type
        if parent.type == "variable_declaration":
            return "var"
        kind = parent.child_by_field_name("kind")
        if kind is not None:
            return node_text(kind)
    return "var"


def pattern_identifiers(pattern) -> List:
    """Identifiers bound by a destructuring pattern, in source order."""
    found: List = []
    if pattern is None:
        return found
    if pattern.type in ("identifier", "shorthand_property_identifier_pattern"):
        found.append(pattern)
    elif pattern.type == "pair_pattern":
        found.extend(pattern_identifiers(pattern.child_by_field_name("value")))
    elif pattern.type in ("assignment_pattern", "object_assignment_pattern"):
        found.extend(pattern_identifiers(pattern.child_by_field_name("left")))
    else:
        for child in named_children(pattern):
            found.extend(pattern_identifiers(child))
    return found


class _ComponentBuilder:
    """Mutable accumulator for one component while its file is walked."""

    def __init__(self, name: str, file_name: str, location: SourceLocation,
                 props: List[str], is_class: bool = False):
        self.name = name
        self.file_name = file_name
        self.location = location
        self.props = list(props)
        self.is_class = is_class
        self.hooks: List[str] = []
        self.state_variables: List[VariableEntity] = []
        self.effect_dependencies: List[Tuple[str, ...]] = []

    def add_hook(self, hook_name: str):
        if hook_name not in self.hooks:
            self.hooks.append(hook_name)

    def build(self) -> ComponentEntity:
        return ComponentEntity(
            name=self.name,
            file_name=self.file_name,
            location=self.location,
            props=tuple(self.props),
            hooks=tuple(self.hooks),
            state_variables=tuple(self.state_variables),
            effect_dependencies=tuple(self.effect_dependencies),
            is_class=self.is_class,
        )


@dataclass(frozen=True)
class ScopeContext:
    """
    Where the walk currently is.

    Attributes:
        function: Innermost recorded function, qualified method,
            class name, or ``global``
        component: Component whose body encloses the node, if any
        class_name: Innermost enclosing class declaration, if any
    """
    function: str = GLOBAL_SCOPE
    component: Optional[_ComponentBuilder] = None
    class_name: Optional[str] = None

    def enter_function(self, name: str,
                       component: Optional[_ComponentBuilder] = None) -> "ScopeContext":
        return replace(self, function=name, component=component or self.component)

    def enter_class(self, name: str,
                    component: Optional[_ComponentBuilder] = None) -> "ScopeContext":
        return ScopeContext(function=name, component=component, class_name=name)


# A node still to be walked and the scope it is walked in
Visit = Tuple[object, ScopeContext]


class FileExtractor:
    """
    Walks one file's tree and collects its entities.

    Use one instance per file.
    """

    def __init__(self, file_name: str, config: Optional[AnalyzerConfig] = None):
        self.file_name = file_name
        self.config = config or AnalyzerConfig()

        self.functions: List[FunctionEntity] = []
        self.variables: List[VariableEntity] = []
        self.imports: List[ImportEntity] = []
        self.dependencies: List[DependencyEdge] = []
        self.classes: List[ClassEntity] = []
        self._components: List[_ComponentBuilder] = []

        self._handlers: Dict[str, Callable] = {
            "function_declaration": self._visit_function_declaration,
            "generator_function_declaration": self._visit_function_declaration,
            "arrow_function": self._visit_arrow_function,
            "class_declaration": self._visit_class,
            "abstract_class_declaration": self._visit_class,
            "variable_declarator": self._visit_variable_declarator,
            "import_statement": self._visit_import,
            "call_expression": self._visit_call,
            "jsx_element": self._visit_jsx,
            "jsx_self_closing_element": self._visit_jsx,
        }

    # --- Traversal ---

    def extract(self, parsed: ParsedSource) -> FileAnalysis:
        """Walk the tree and return the file's entities (metrics not yet filled)."""
        self._walk(parsed.root_node, ScopeContext())
        components = tuple(builder.build() for builder in self._components)

        logger.debug(
            "%s: %d functions, %d variables, %d classes, %d components",
            self.file_name, len(self.functions), len(self.variables),
            len(self.classes), len(components),
        )

        return FileAnalysis(
            file_name=self.file_name,
            functions=tuple(self.functions),
            variables=tuple(self.variables),
            imports=tuple(self.imports),
            dependencies=tuple(self.dependencies),
            classes=tuple(self.classes),
            components=components,
        )

    def _walk(self, root, ctx: ScopeContext):
        """
        Pre-order walk driven by an explicit stack of (node, context) pairs.

        A handler records what it finds on its node and returns the
        (child, context) pairs to walk next, in source order. Nodes
        without a handler pass their own context on to every child.
        """
        stack: List[Visit] = [(root, ctx)]
        while stack:
            node, ctx = stack.pop()
            handler = self._handlers.get(node.type)
            if handler is not None:
                pending = handler(node, ctx)
            else:
                pending = self._children(node, ctx)
            stack.extend(reversed(pending))

    @staticmethod
    def _children(node, ctx: ScopeContext) -> List[Visit]:
        return [(child, ctx) for child in node.children]

    # --- Functions ---

    def _record_function(self, node, name: str, kind: str) -> FunctionEntity:
        return_type = type_annotation_text(node.child_by_field_name("return_type"))
        func = FunctionEntity(
            name=name,
            file_name=self.file_name,
            params=tuple(get_param_name(p) for p in get_parameters(node)),
            location=SourceLocation.from_node(node),
            complexity=calculate_complexity(node),
            is_async=is_async(node),
            kind=kind,
            return_type=return_type,
        )
        self.functions.append(func)
        return func

    def _start_component(self, node, name: str, extra_props: Optional[List[str]] = None,
                         is_class: bool = False) -> _ComponentBuilder:
        props = [] if is_class else extract_props(node)
        for prop in extra_props or []:
            if prop not in props:
                props.append(prop)
        builder = _ComponentBuilder(
            name=name,
            file_name=self.file_name,
            location=SourceLocation.from_node(node),
            props=props,
            is_class=is_class,
        )
        self._components.append(builder)
        logger.debug("Identified %s as a %s component", name, "class" if is_class else "function")
        return builder

    def _visit_function_declaration(self, node, ctx: ScopeContext) -> List[Visit]:
        name_node = node.child_by_field_name("name")
        if name_node is None:
            return self._children(node, ctx)

        name = node_text(name_node)
        component = self._start_component(node, name) if returns_jsx(node) else None
        self._record_function(node, name, kind="function")
        return self._children(node, ctx.enter_function(name, component))

    def _visit_arrow_function(self, node, ctx: ScopeContext) -> List[Visit]:
        if not is_named_arrow(node):
            return self._children(node, ctx)

        declarator = node.parent
        name = node_text(declarator.child_by_field_name("name"))
        annotated, type_props = component_type_info(declarator)
        component = None
        if returns_jsx(node) or annotated:
            component = self._start_component(node, name, extra_props=type_props)
        self._record_function(node, name, kind="arrow")
        return self._children(node, ctx.enter_function(name, component))

    # --- Classes ---

    def _super_class_node(self, class_node):
        for child in class_node.children:
            if child.type != "class_heritage":
                continue
            for clause in named_children(child):
                if clause.type == "extends_clause":
                    value = clause.child_by_field_name("value")
                    if value is None:
                        parts = named_children(clause)
                        value = parts[0] if parts else None
                    return value
                if clause.type == "implements_clause":
                    continue
                return clause
        return None

    def _extends_component_base(self, super_node) -> bool:
        bases = self.config.component_bases
        if super_node is None:
            return False
        if super_node.type == "identifier":
            return node_text(super_node) in bases
        if super_node.type == "member_expression":
            obj = super_node.child_by_field_name("object")
            prop = super_node.child_by_field_name("property")
            return (
                obj is not None and obj.type == "identifier"
                and prop is not None and node_text(prop) in bases
            )
        return False

    def _visit_class(self, node, ctx: ScopeContext) -> List[Visit]:
        name_node = node.child_by_field_name("name")
        body = node.child_by_field_name("body")
        if name_node is None or body is None:
            return self._children(node, ctx)

        class_name = node_text(name_node)
        super_node = self._super_class_node(node)
        super_class = None
        if super_node is not None and super_node.type in ("identifier", "member_expression"):
            super_class = node_text(super_node)

        methods: List[FunctionEntity] = []
        properties: List[VariableEntity] = []
        method_nodes: List[Tuple[str, object]] = []

        for member in body.children:
            if member.type == "method_definition":
                key = member.child_by_field_name("name")
                if key is None or key.type != "property_identifier":
                    continue
                qualified = f"{class_name}.{node_text(key)}"
                methods.append(self._record_function(member, qualified, kind="method"))
                method_nodes.append((node_text(key), member))
            elif member.type in ("field_definition", "public_field_definition"):
                key = member.child_by_field_name("property") or member.child_by_field_name("name")
                if key is None or key.type != "property_identifier":
                    continue
                prop = VariableEntity(
                    name=f"{class_name}.{node_text(key)}",
                    file_name=self.file_name,
                    kind="property",
                    location=SourceLocation.from_node(member),
                    type=type_annotation_text(member.child_by_field_name("type")),
                )
                properties.append(prop)
                self.variables.append(prop)

        has_render = any(method_name == "render" for method_name, _ in method_nodes)
        component = None
        if has_render and self._extends_component_base(super_node):
            component = self._start_component(node, class_name, is_class=True)

        self.classes.append(ClassEntity(
            name=class_name,
            file_name=self.file_name,
            location=SourceLocation.from_node(node),
            super_class=super_class,
            methods=tuple(methods),
            properties=tuple(properties),
        ))

        class_ctx = ctx.enter_class(class_name, component)
        pending: List[Visit] = []
        if super_node is not None:
            pending.append((super_node, ctx))
        for member in body.children:
            if member.type == "method_definition":
                key = member.child_by_field_name("name")
                if key is not None and key.type == "property_identifier":
                    method_ctx = class_ctx.enter_function(f"{class_name}.{node_text(key)}")
                    pending.extend(self._children(member, method_ctx))
                    continue
            pending.append((member, class_ctx))
        return pending

    # --- Variables and imports ---

    def _visit_variable_declarator(self, node, ctx: ScopeContext) -> List[Visit]:
        name_node = node.child_by_field_name("name")
        value = node.child_by_field_name("value")
        kind = declaration_kind(node)
        type_note = type_annotation_text(node.child_by_field_name("type"))

        state_target = None
        if (
            ctx.component is not None
            and value is not None
            and value.type == "call_expression"
        ):
            callee = value.child_by_field_name("function")
            if bare_callee_name(callee) == self.config.state_hook:
                if name_node is not None and name_node.type == "identifier":
                    state_target = name_node
                elif name_node is not None and name_node.type == "array_pattern":
                    elements = named_children(name_node)
                    if elements and elements[0].type == "identifier":
                        state_target = elements[0]

        for ident in pattern_identifiers(name_node):
            is_state = state_target is not None and ident == state_target
            variable = VariableEntity(
                name=node_text(ident),
                file_name=self.file_name,
                kind=kind,
                location=SourceLocation.from_node(node),
                is_state=is_state,
                type=type_note,
            )
            self.variables.append(variable)
            if is_state:
                logger.debug("State variable %s in %s", variable.name, ctx.component.name)
                ctx.component.state_variables.append(variable)

        return self._children(node, ctx)

    def _visit_import(self, node, ctx: ScopeContext) -> List[Visit]:
        source_node = node.child_by_field_name("source")
        if source_node is None:
            return []
        source = node_text(source_node)[1:-1]
        local = is_local_import(source)
        location = SourceLocation.from_node(node)

        for clause in node.children:
            if clause.type != "import_clause":
                continue
            for specifier in named_children(clause):
                if specifier.type == "identifier":
                    names = [node_text(specifier)]
                elif specifier.type == "named_imports":
                    names = []
                    for item in named_children(specifier):
                        if item.type != "import_specifier":
                            continue
                        binding = item.child_by_field_name("alias") or item.child_by_field_name("name")
                        if binding is not None:
                            names.append(node_text(binding))
                else:
                    # namespace imports (`* as ns`) are not bindings we track
                    continue
                for name in names:
                    self.imports.append(ImportEntity(
                        name=name,
                        source=source,
                        file_name=self.file_name,
                        location=location,
                        is_local=local,
                    ))
        return []

    # --- Dependencies ---

    def _add_edge(self, node, ctx: ScopeContext, callee: str, kind: DependencyKind):
        self.dependencies.append(DependencyEdge(
            caller=ctx.function,
            callee=callee,
            caller_file=self.file_name,
            callee_file=self.file_name,
            location=SourceLocation.from_node(node),
            kind=kind,
        ))

    def _track_hook(self, node, ctx: ScopeContext, hook_name: str):
        component = ctx.component
        component.add_hook(hook_name)
        if hook_name != self.config.effect_hook:
            return
        args_node = node.child_by_field_name("arguments")
        args = named_children(args_node) if args_node is not None else []
        if len(args) > 1 and args[1].type == "array":
            deps = tuple(
                node_text(element) for element in named_children(args[1])
                if element.type == "identifier"
            )
            component.effect_dependencies.append(deps)

    def _visit_call(self, node, ctx: ScopeContext) -> List[Visit]:
        callee = node.child_by_field_name("function")
        if callee is not None and callee.type == "identifier":
            name = node_text(callee)
            if ctx.component is not None and is_hook(name):
                self._track_hook(node, ctx, name)
            self._add_edge(node, ctx, name, DependencyKind.CALL)
        elif callee is not None and callee.type == "member_expression":
            obj = callee.child_by_field_name("object")
            prop = callee.child_by_field_name("property")
            if (
                obj is not None and obj.type == "identifier"
                and prop is not None and prop.type == "property_identifier"
            ):
                self._add_edge(
                    node, ctx, f"{node_text(obj)}.{node_text(prop)}", DependencyKind.METHOD_CALL
                )
                hook = node_text(prop)
                if ctx.component is not None and is_hook(hook):
                    self._track_hook(node, ctx, hook)
        return self._children(node, ctx)

    def _visit_jsx(self, node, ctx: ScopeContext) -> List[Visit]:
        tag = node
        if node.type == "jsx_element":
            tag = node.child_by_field_name("open_tag")
            if tag is None:
                tag = next((c for c in node.children if c.type == "jsx_opening_element"), None)
        name = tag.child_by_field_name("name") if tag is not None else None
        if name is not None and name.type == "identifier":
            tag_name = node_text(name)
            if tag_name[:1].isupper():
                self._add_edge(node, ctx, tag_name, DependencyKind.JSX)
        return self._children(node, ctx)


def extract_entities(parsed: ParsedSource, config: Optional[AnalyzerConfig] = None) -> FileAnalysis:
    """Convenience wrapper: run a fresh FileExtractor over one parsed file."""
    return FileExtractor(parsed.file_name, config).extract(parsed)
