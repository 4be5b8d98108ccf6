import unittest

from codemap.config import AnalyzerConfig
from codemap.core.entities import GLOBAL_SCOPE, DependencyKind, EntityType
from codemap.core.extractor import (
    ScopeContext,
    extract_entities,
    is_hook,
    is_local_import,
)
from codemap.core.parser import parse_source


def extract(code: str, file_name: str = "test.jsx", config: AnalyzerConfig = None):
    return extract_entities(parse_source(file_name, code), config)


class FunctionExtractionTests(unittest.TestCase):
    def test_declarations_and_named_arrows_are_recorded(self) -> None:
        code = """
function load(id, { verbose }, [first], ...rest) { return id; }
const save = async (item = {}) => item;
setTimeout(function () { load(1); }, 10);
[1, 2].map(x => x * 2);
"""
        analysis = extract(code, "test.js")
        funcs = {f.name: f for f in analysis.functions}

        self.assertEqual(set(funcs), {"load", "save"})
        self.assertEqual(funcs["load"].params, ("id", "{...}", "[...]", "...rest"))
        self.assertEqual(funcs["load"].kind, "function")
        self.assertFalse(funcs["load"].is_async)

        self.assertEqual(funcs["save"].params, ("item",))
        self.assertEqual(funcs["save"].kind, "arrow")
        self.assertTrue(funcs["save"].is_async)

    def test_long_expression_chain_keeps_every_function(self) -> None:
        terms = " + ".join(['"a"'] * 1000)
        code = f"function banner() {{ return {terms}; }}\nfunction after() {{ banner(); }}\n"
        analysis = extract(code, "test.js")

        self.assertEqual([f.name for f in analysis.functions], ["banner", "after"])
        self.assertEqual(analysis.functions[0].complexity, 1)
        self.assertEqual(
            [(d.caller, d.callee) for d in analysis.dependencies], [("after", "banner")]
        )

    def test_locations_are_one_indexed(self) -> None:
        analysis = extract("\nfunction second() {}\n", "test.js")
        self.assertEqual(analysis.functions[0].location.start_line, 2)
        self.assertEqual(analysis.functions[0].location.start_column, 0)

    def test_typescript_parameters_and_return_type(self) -> None:
        code = """
export async function fetchUser(id: string, opts?: Options): Promise<User> {
  return request(id, opts);
}
"""
        analysis = extract(code, "api.ts")
        func = analysis.functions[0]
        self.assertEqual(func.name, "fetchUser")
        self.assertEqual(func.params, ("id", "opts"))
        self.assertEqual(func.return_type, "Promise<User>")
        self.assertTrue(func.is_async)
        self.assertEqual(func.signature, "async fetchUser(id, opts): Promise<User>")


class VariableExtractionTests(unittest.TestCase):
    def test_declaration_kinds(self) -> None:
        code = "const a = 1; let b = 2; var c = 3;"
        analysis = extract(code, "test.js")
        kinds = {v.name: v.kind for v in analysis.variables}
        self.assertEqual(kinds, {"a": "const", "b": "let", "c": "var"})

    def test_destructuring_records_each_binding(self) -> None:
        code = "const { a, b: renamed, c = 3 } = obj; const [x, y] = pair;"
        analysis = extract(code, "test.js")
        self.assertEqual(
            [v.name for v in analysis.variables], ["a", "renamed", "c", "x", "y"]
        )

    def test_type_annotation_is_kept(self) -> None:
        analysis = extract("const count: number = 0;", "test.ts")
        self.assertEqual(analysis.variables[0].type, "number")

    def test_state_hook_outside_component_is_not_state(self) -> None:
        analysis = extract("const [v, setV] = useState(0);", "test.js")
        self.assertFalse(any(v.is_state for v in analysis.variables))


class ImportExtractionTests(unittest.TestCase):
    def test_default_and_named_specifiers(self) -> None:
        code = """
import React, { useState, useEffect as useFx } from 'react';
import * as utils from './utils';
import Button from '@ui/button';
import { helper } from './helpers';
"""
        analysis = extract(code, "test.js")
        imports = {i.name: i for i in analysis.imports}

        self.assertEqual(list(imports), ["React", "useState", "useFx", "Button", "helper"])
        self.assertEqual(imports["useFx"].source, "react")
        self.assertTrue(imports["React"].is_local)
        self.assertFalse(imports["Button"].is_local)
        self.assertFalse(imports["helper"].is_local)
        self.assertEqual(imports["helper"].source, "./helpers")

    def test_local_heuristic(self) -> None:
        self.assertTrue(is_local_import("lodash"))
        self.assertFalse(is_local_import("@scope/pkg"))
        self.assertFalse(is_local_import("lodash/fp"))
        self.assertFalse(is_local_import("./local"))
        self.assertFalse(is_local_import("lib.js"))


class DependencyExtractionTests(unittest.TestCase):
    def test_calls_method_calls_and_callers(self) -> None:
        code = """
init();
function run() {
  helper();
  api.fetch();
  this.ignored();
}
"""
        analysis = extract(code, "test.js")
        edges = [(d.caller, d.callee, d.kind) for d in analysis.dependencies]
        self.assertEqual(edges, [
            (GLOBAL_SCOPE, "init", DependencyKind.CALL),
            ("run", "helper", DependencyKind.CALL),
            ("run", "api.fetch", DependencyKind.METHOD_CALL),
        ])
        for edge in analysis.dependencies:
            self.assertEqual(edge.callee_file, "test.js")
            self.assertFalse(edge.is_cross_file)

    def test_capitalized_jsx_tags_are_edges(self) -> None:
        code = """
function Page() {
  return (
    <Layout>
      <div><Sidebar items={[]} /></div>
    </Layout>
  );
}
"""
        analysis = extract(code)
        jsx = [(d.caller, d.callee) for d in analysis.dependencies if d.kind == DependencyKind.JSX]
        self.assertEqual(jsx, [("Page", "Layout"), ("Page", "Sidebar")])

    def test_method_body_caller_is_qualified(self) -> None:
        code = """
class Store {
  size = compute();
  load() { fetchAll(); }
}
"""
        analysis = extract(code, "test.js")
        edges = {(d.caller, d.callee) for d in analysis.dependencies}
        self.assertEqual(edges, {("Store", "compute"), ("Store.load", "fetchAll")})

    def test_caller_returns_to_outer_scope_after_nested_function(self) -> None:
        code = """
function outer() {
  function inner() { deep(); }
  after();
}
"""
        analysis = extract(code, "test.js")
        edges = [(d.caller, d.callee) for d in analysis.dependencies]
        self.assertEqual(edges, [("inner", "deep"), ("outer", "after")])


class ClassExtractionTests(unittest.TestCase):
    def test_methods_and_properties_are_qualified(self) -> None:
        code = """
class Cart extends Base {
  items = [];
  add(item) { if (item) { this.items.push(item); } }
  total() { return 0; }
}
"""
        analysis = extract(code, "test.js")
        self.assertEqual(len(analysis.classes), 1)
        cls = analysis.classes[0]

        self.assertEqual(cls.name, "Cart")
        self.assertEqual(cls.super_class, "Base")
        self.assertEqual([m.name for m in cls.methods], ["Cart.add", "Cart.total"])
        self.assertEqual([p.name for p in cls.properties], ["Cart.items"])
        self.assertEqual(cls.methods[0].complexity, 2)
        self.assertEqual(cls.methods[0].kind, "method")

        self.assertIn("Cart.add", [f.name for f in analysis.functions])
        self.assertIn("Cart.items", [v.name for v in analysis.variables])
        self.assertEqual(analysis.components, ())


class ComponentDetectionTests(unittest.TestCase):
    def test_function_component_with_hooks_and_state(self) -> None:
        code = """
function Counter({ initial, label }) {
  const [count, setCount] = useState(initial);
  useEffect(() => { document.title = label; }, [count]);
  useEffect(() => {}, [initial, count]);
  useEffect(() => {});
  return <button onClick={() => setCount(count + 1)}>{count}</button>;
}
"""
        analysis = extract(code)
        self.assertEqual(len(analysis.components), 1)
        comp = analysis.components[0]

        self.assertEqual(comp.name, "Counter")
        self.assertFalse(comp.is_class)
        self.assertEqual(comp.props, ("initial", "label"))
        self.assertEqual(comp.hooks, ("useState", "useEffect"))
        self.assertEqual([v.name for v in comp.state_variables], ["count"])
        self.assertEqual(comp.effect_dependencies, (("count",), ("initial", "count")))

        state_flags = {v.name: v.is_state for v in analysis.variables}
        self.assertEqual(state_flags, {"count": True, "setCount": False})

        set_count = [d for d in analysis.dependencies if d.callee == "setCount"]
        self.assertEqual(set_count[0].caller, "Counter")

    def test_namespaced_hooks_are_tracked(self) -> None:
        code = """
import React from 'react';
function Counter() {
  const [count, setCount] = React.useState(0);
  React.useEffect(() => { setCount(0); }, [count]);
  return <span>{count}</span>;
}
"""
        analysis = extract(code)
        comp = analysis.components[0]

        self.assertEqual(comp.hooks, ("useState", "useEffect"))
        self.assertEqual([v.name for v in comp.state_variables], ["count"])
        self.assertEqual(comp.effect_dependencies, (("count",),))
        method_calls = [d.callee for d in analysis.dependencies
                        if d.kind == DependencyKind.METHOD_CALL]
        self.assertEqual(method_calls, ["React.useState", "React.useEffect"])

    def test_arrow_component_props(self) -> None:
        code = """
const Card = ({ title, size = 'md', ...rest }) => (
  <div {...rest}>{title}</div>
);
const Badge = props => <span>{props.text}</span>;
"""
        analysis = extract(code)
        comps = {c.name: c for c in analysis.components}
        self.assertEqual(comps["Card"].props, ("title", "size", "...rest"))
        self.assertEqual(comps["Badge"].props, ("props",))

    def test_conditional_and_fragment_returns(self) -> None:
        code = """
function Maybe({ on }) {
  if (!on) { return null; }
  return on ? <A /> : null;
}
function Group() {
  return <><A /><B /></>;
}
"""
        analysis = extract(code)
        self.assertEqual([c.name for c in analysis.components], ["Maybe", "Group"])

    def test_jsx_in_nested_function_does_not_make_outer_component(self) -> None:
        code = """
function makeRenderer() {
  return function render() { return <div />; };
}
function helper(x) { return x + 1; }
"""
        analysis = extract(code)
        self.assertEqual([c.name for c in analysis.components], [])

    def test_class_component(self) -> None:
        code = """
class Header extends React.Component {
  state = { open: false };
  toggle() { this.setState({ open: !this.state.open }); }
  render() { return <Title text="x" />; }
}
class Plain extends Component {
  toString() { return 'plain'; }
}
"""
        analysis = extract(code)
        self.assertEqual([c.name for c in analysis.components], ["Header"])
        self.assertTrue(analysis.components[0].is_class)
        self.assertEqual(analysis.classes[0].super_class, "React.Component")

        jsx = [(d.caller, d.callee) for d in analysis.dependencies if d.kind == DependencyKind.JSX]
        self.assertEqual(jsx, [("Header.render", "Title")])

    def test_component_base_names_are_configurable(self) -> None:
        code = "class View extends Widget { render() { return <div />; } }"
        self.assertEqual(extract(code).components, ())

        config = AnalyzerConfig(component_bases=frozenset({"Widget"}))
        self.assertEqual([c.name for c in extract(code, config=config).components], ["View"])

    def test_typed_function_component_annotation(self) -> None:
        code = """
const Empty: FC<{ label: string; count?: number }> = () => null;
const Title: React.FC<{ text: string }> = ({ text }) => <h1>{text}</h1>;
"""
        analysis = extract(code, "test.tsx")
        comps = {c.name: c for c in analysis.components}
        self.assertEqual(set(comps), {"Empty", "Title"})
        self.assertEqual(comps["Empty"].props, ("label", "count"))
        self.assertEqual(comps["Title"].props, ("text",))


class EntityTypeTests(unittest.TestCase):
    def test_serialized_type_names(self) -> None:
        code = """
import { api } from './api';
let total = 0;
function load() {}
class Store { items = []; reset() {} }
const App = () => <div />;
"""
        analysis = extract(code)
        funcs = {f.name: f for f in analysis.functions}
        variables = {v.name: v for v in analysis.variables}

        self.assertEqual(funcs["load"].entity_type, EntityType.FUNCTION)
        self.assertEqual(funcs["Store.reset"].entity_type, EntityType.METHOD)
        self.assertEqual(funcs["load"].to_dict()["type"], "function")
        self.assertEqual(funcs["App"].to_dict()["type"], "function")
        self.assertEqual(funcs["Store.reset"].to_dict()["type"], "method")
        self.assertEqual(variables["total"].to_dict()["type"], "variable")
        self.assertEqual(variables["Store.items"].to_dict()["type"], "variable")
        self.assertEqual(analysis.imports[0].to_dict()["type"], "import")
        self.assertEqual(analysis.classes[0].to_dict()["type"], "class")
        self.assertEqual(analysis.components[0].to_dict()["type"], "component")


class ScopeContextTests(unittest.TestCase):
    def test_entering_a_scope_leaves_the_parent_untouched(self) -> None:
        root = ScopeContext()
        child = root.enter_function("load")
        cls = child.enter_class("Store")

        self.assertEqual(root.function, GLOBAL_SCOPE)
        self.assertEqual(child.function, "load")
        self.assertEqual(cls.function, "Store")
        self.assertEqual(cls.class_name, "Store")
        self.assertIsNone(root.class_name)

    def test_hook_naming_convention(self) -> None:
        self.assertTrue(is_hook("useState"))
        self.assertTrue(is_hook("useMyThing"))
        self.assertFalse(is_hook("use"))
        self.assertFalse(is_hook("user"))
        self.assertFalse(is_hook("reuseState"))


if __name__ == "__main__":
    unittest.main()
