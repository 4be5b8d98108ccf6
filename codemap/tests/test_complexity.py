import unittest

from codemap.core.complexity import count_lines
from codemap.core.extractor import extract_entities
from codemap.core.parser import parse_source


def functions_by_name(code: str, file_name: str = "test.js"):
    analysis = extract_entities(parse_source(file_name, code))
    return {f.name: f for f in analysis.functions}


class ComplexityTests(unittest.TestCase):
    def test_straight_line_function_scores_one(self) -> None:
        funcs = functions_by_name("function plain(a) { const b = a + 1; return b; }")
        self.assertEqual(funcs["plain"].complexity, 1)

    def test_single_if(self) -> None:
        funcs = functions_by_name("function foo(){ if (x) { return 1; } return 2; }")
        self.assertEqual(funcs["foo"].complexity, 2)

    def test_ifs_loop_and_logical_and(self) -> None:
        code = """
function busy(a, b, items) {
  if (a) { a = 1; }
  if (b) { b = 2; }
  if (a && b) { a = b; }
  for (let i = 0; i < items.length; i++) { a += i; }
}
"""
        funcs = functions_by_name(code)
        self.assertEqual(funcs["busy"].complexity, 6)

    def test_loops_switch_and_try(self) -> None:
        code = """
function mixed(k, list) {
  while (k) { k--; }
  do { k++; } while (k < 3);
  for (const x of list) { k += x; }
  for (const key in list) { k += 1; }
  switch (k) {
    case 1: break;
    case 2: break;
    default: break;
  }
  try { k = k || 1; } catch (e) { k = 0; }
}
"""
        funcs = functions_by_name(code)
        # 4 loops + 3 switch clauses + try + ||
        self.assertEqual(funcs["mixed"].complexity, 1 + 4 + 3 + 1 + 1)

    def test_nested_named_function_is_scored_separately(self) -> None:
        code = """
function outer(x) {
  function inner(y) {
    if (y) { return 1; }
    return 0;
  }
  if (x) { return inner(x); }
  return 0;
}
"""
        funcs = functions_by_name(code)
        self.assertEqual(funcs["outer"].complexity, 2)
        self.assertEqual(funcs["inner"].complexity, 2)

    def test_named_arrow_is_scored_separately(self) -> None:
        code = """
function host() {
  const cb = (a) => { if (a) { return a; } return null; };
  return cb;
}
"""
        funcs = functions_by_name(code)
        self.assertEqual(funcs["host"].complexity, 1)
        self.assertEqual(funcs["cb"].complexity, 2)

    def test_anonymous_callback_counts_toward_enclosing_function(self) -> None:
        code = """
function walk(items) {
  items.forEach(item => {
    if (item) { handle(item); }
  });
}
"""
        funcs = functions_by_name(code)
        self.assertEqual(set(funcs), {"walk"})
        self.assertEqual(funcs["walk"].complexity, 2)

    def test_concise_arrow_body_logical_expression(self) -> None:
        funcs = functions_by_name("const check = (v) => v && v.ok;")
        self.assertEqual(funcs["check"].complexity, 2)

    def test_long_else_if_and_logical_chains(self) -> None:
        branches = " ".join(f"else if (x === {i}) {{ y = {i}; }}" for i in range(1, 700))
        conditions = " && ".join(f"c{i}" for i in range(800))
        code = (
            f"function dispatch(x) {{ if (x === 0) {{ y = 0; }} {branches} }}\n"
            f"function guard() {{ return {conditions}; }}\n"
        )
        funcs = functions_by_name(code)
        self.assertEqual(funcs["dispatch"].complexity, 701)
        self.assertEqual(funcs["guard"].complexity, 800)

    def test_every_function_scores_at_least_one(self) -> None:
        code = """
const a = () => 1;
function b() {}
class C { m() {} }
"""
        funcs = functions_by_name(code)
        self.assertEqual(set(funcs), {"a", "b", "C.m"})
        for func in funcs.values():
            self.assertGreaterEqual(func.complexity, 1)


class LineCountTests(unittest.TestCase):
    def test_counts_newline_separated_segments(self) -> None:
        self.assertEqual(count_lines("a\nb\nc"), 3)
        self.assertEqual(count_lines("a\n"), 2)

    def test_empty_source_has_no_lines(self) -> None:
        self.assertEqual(count_lines(""), 0)
        self.assertEqual(count_lines(None), 0)


if __name__ == "__main__":
    unittest.main()
