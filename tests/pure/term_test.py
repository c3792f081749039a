import unittest

from lambdacalc.pure.grammar import parse
from lambdacalc.pure.term import (Abstraction, Application, LambdaTerm, Scope, Variable, alpha_rename, fresh_name,
                                  free_names, substitute)


class ScopeTestCase(unittest.TestCase):

    def test_binding(self):
        scope = Scope()
        with scope.binding("x"):
            self.assertTrue(scope.is_bound("x"))
            with scope.binding("x"):
                self.assertEqual({"x": 2}, scope.counts)
            self.assertEqual({"x": 1}, scope.counts)
        self.assertEqual({}, scope.counts)
        self.assertFalse(scope.is_bound("x"))

    def test_names(self):
        scope = Scope({"x": 1, "y": 0})
        self.assertEqual({"x"}, scope.names())
        self.assertFalse(scope.is_bound("y"))


class LambdaTermTestCase(unittest.TestCase):

    def test_incomplete_node_kind(self):
        class Incomplete(LambdaTerm):
            def names(self):
                return set()

        self.assertRaises(TypeError, Incomplete)

    def test_str(self):
        cases = {
            "λx.x": "λx.x",
            "(λx.x) y": "(λx.x) y",
            "f (λx.x)": "f (λx.x)",
            "f λx.x": "f (λx.x)",
            "a b c": "a b c",
            "a (b c)": "a (b c)",
            "λs z.s (s z)": "λs.λz.s (s z)",
            "\\x -> x": "λx.x",
            "λx.(λy.y) x": "λx.(λy.y) x",
            "((λx.x) λy.y) z": "(λx.x) (λy.y) z",
        }
        for case, expected in cases.items():
            self.assertEqual(expected, str(parse(case)), case)

    def test_eq(self):
        self.assertEqual(Abstraction("x", Variable("x")), parse("λx.x"))
        self.assertEqual(Application(Variable("f"), Variable("x")), parse("f x"))
        self.assertNotEqual(parse("λx.x"), parse("λy.y"))
        self.assertNotEqual(parse("x y"), parse("y x"))
        self.assertEqual(hash(parse("λx.x y")), hash(parse("λx.(x y)")))

    def test_copy(self):
        term = parse("λx.x (y z)")
        duplicate = term.copy()
        self.assertEqual(term, duplicate)
        self.assertIsNot(term.body, duplicate.body)

    def test_to_dict(self):
        expected = {
            "type": "Abstraction",
            "parameter": {"type": "Variable", "name": "x"},
            "body": {
                "type": "Application",
                "fn": {"type": "Variable", "name": "x"},
                "argument": {"type": "Variable", "name": "y"},
            },
        }
        self.assertEqual(expected, parse("λx.x y").to_dict())

    def test_alpha_equals(self):
        should_pass = [
            ("λx.x", "λy.y"),
            ("λx.λy.x", "λy.λx.y"),
            ("λx.z", "λy.z"),
            ("λx.λx.x", "λy.λz.z"),
            ("x (λx.x)", "x (λy.y)"),
        ]
        for term, other in should_pass:
            self.assertTrue(parse(term).alpha_equals(parse(other)), (term, other))

        should_fail = [
            ("λx.λy.x", "λx.λy.y"),
            ("λx.z", "λz.z"),
            ("x", "y"),
            ("λx.x", "x"),
            ("λx.λx.x", "λx.λy.x"),
        ]
        for term, other in should_fail:
            self.assertFalse(parse(term).alpha_equals(parse(other)), (term, other))


class FreeNamesTestCase(unittest.TestCase):

    def test_free_names(self):
        cases = {
            "x": {"x"},
            "λx.x": set(),
            "λx.x y": {"y"},
            "(λx.x) x": {"x"},
            "λx.λx.x": set(),
            "λx.(λx.x) x z": {"z"},
            "a (λb.b c) b": {"a", "b", "c"},
        }
        for case, expected in cases.items():
            self.assertEqual(expected, free_names(parse(case)), case)

    def test_ambient_scope(self):
        self.assertEqual({"x"}, free_names(parse("x y"), {"y": 1}))
        self.assertEqual({"x", "y"}, free_names(parse("x y"), {"y": 0}))

        scope = Scope({"y": 1})
        free_names(parse("λy.λx.x y"), scope)
        self.assertEqual({"y": 1}, scope.counts)

    def test_names(self):
        self.assertEqual({"x", "y"}, parse("λx.x y").names())
        self.assertEqual({"x", "y", "z"}, parse("(λx.λy.x) z").names())


class AlphaRenameTestCase(unittest.TestCase):

    def test_alpha_rename(self):
        cases = {
            "λx.x": "λy.y",
            "λx.x (λa.a)": "λy.y (λa.a)",
            "λx.x (λx.x)": "λy.y (λx.x)",
            "λx.λz.x z": "λy.λz.y z",
            "λx.(λb.x (v b)) (λb.b v x)": "λy.(λb.y (v b)) (λb.b v y)",
        }
        for case, expected in cases.items():
            self.assertEqual(expected, str(alpha_rename(parse(case), "x", "y")), case)

    def test_alpha_rename_leaves_input(self):
        term = parse("λx.x z")
        alpha_rename(term, "x", "y")
        self.assertEqual("λx.x z", str(term))

    def test_alpha_rename_precondition(self):
        should_raise = ["λx.x y", "λx.λy.x", "λz.x", "x", "x y"]
        for case in should_raise:
            self.assertRaises(ValueError, alpha_rename, parse(case), "x", "y")

    def test_fresh_name(self):
        self.assertEqual("x", fresh_name("x", set()))
        self.assertEqual("x'", fresh_name("x", {"x"}))
        self.assertEqual("x'''", fresh_name("x", {"x", "x'", "x''"}))


class SubstituteTestCase(unittest.TestCase):

    def test_substitute(self):
        cases = {
            ("x", "x", "λy.y"): "λy.y",
            ("y", "x", "z"): "y",
            ("λx.x", "x", "y"): "λx.x",
            ("λy.z y", "z", "a"): "λy.a y",
            ("x (λx.x) x", "x", "f a"): "f a (λx.x) (f a)",
            ("λx. z x", "z", "x"): "λx'.x x'",
            ("λx.λx'.z x x'", "z", "x x'"): "λx''.λx'''.x x' x'' x'''",
            ("λx.x y", "y", "x"): "λx'.x' x",
        }
        for (term, var, replacement), expected in cases.items():
            self.assertEqual(expected, str(substitute(parse(term), var, parse(replacement))), (term, var, replacement))

    def test_capture_avoided(self):
        result = substitute(parse("λx. z x"), "z", Variable("x"))
        self.assertEqual({"x"}, free_names(result))
        self.assertNotEqual("x", result.param.name)

    def test_replacement_copied(self):
        replacement = parse("λy.y")
        result = substitute(parse("x x"), "x", replacement)
        self.assertEqual(replacement, result.fn)
        self.assertIsNot(replacement, result.fn)
        self.assertIsNot(result.fn, result.arg)


if __name__ == '__main__':
    unittest.main()
