from __future__ import annotations

import importlib.util
import unittest


JAX_AVAILABLE = importlib.util.find_spec("jax") is not None


@unittest.skipUnless(JAX_AVAILABLE, "jax is required for rule checker tests")
class RuleCheckerSurfaceTests(unittest.TestCase):
    def test_eval_result_shape(self) -> None:
        from tinyrule import EvalResult, RuleChecker

        checker = RuleChecker()
        checker.set_int("a", 1)

        good = checker.evaluate("a.eq(1)")
        self.assertIsInstance(good, EvalResult)
        self.assertEqual(good, EvalResult(result=True, error=None))
        self.assertTrue(good.ok)

        bad = checker.eval("a.eq(")
        self.assertFalse(bad.ok)
        self.assertEqual(bad.error, "expecting value")

    def test_variables_can_be_rebound_and_cleared(self) -> None:
        from tinyrule import RuleChecker, ValueType

        checker = RuleChecker()
        checker.set_int("a", 1)
        self.assertTrue(checker.evaluate("a.eq(1)").result)

        checker.set_int("a", 100)
        self.assertTrue(checker.evaluate("a.eq(100)").result)
        self.assertFalse(checker.evaluate("a.eq(1)").result)

        checker.set_string("a", "now text")
        self.assertEqual(checker.get_variable("a").type, ValueType.STRING)
        self.assertEqual(checker.evaluate("a.eq(1)").error, "type mismatch: type s vs i")

        checker.clear_variables()
        self.assertIsNone(checker.get_variable("a"))
        self.assertEqual(checker.evaluate("a.eq(1)").error, "variable 'a' not found")

    def test_typed_setters_coerce_to_32_bit(self) -> None:
        from tinyrule import RuleChecker

        checker = RuleChecker()
        checker.set_int("big", 2**31)
        checker.set_float("tenth", 0.1)
        checker.set_float("whole", 3)

        self.assertEqual(checker.get_variable("big").payload, -(2**31))
        self.assertTrue(checker.evaluate("big.eq(-2147483648)").result)
        self.assertTrue(checker.evaluate("tenth.eq(0.1)").result)
        self.assertTrue(checker.evaluate("whole.eq(3.0)").result)

    def test_set_variable_accepts_python_values(self) -> None:
        from tinyrule import RuleChecker, ValueType, int_value

        checker = RuleChecker()
        checker.set_variable("i", 7)
        checker.set_variable("f", 1.5)
        checker.set_variable("s", "text")
        checker.set_variable("arr", ["a", "b"])
        checker.set_variable("v", int_value(3))

        self.assertEqual(checker.get_variable("i").type, ValueType.INT)
        self.assertEqual(checker.get_variable("f").type, ValueType.FLOAT)
        self.assertEqual(checker.get_variable("s").type, ValueType.STRING)
        self.assertEqual(checker.get_variable("arr").type, ValueType.ARRAY)
        self.assertTrue(checker.evaluate("s.in(arr) || i.eq(7)").result)
        self.assertTrue(checker.evaluate("v.lt(i)").result)

        with self.assertRaises(TypeError):
            checker.set_variable("flag", True)
        with self.assertRaises(TypeError):
            checker.set_variable("obj", object())

    def test_without_default_methods_every_method_is_unknown(self) -> None:
        from tinyrule import RuleChecker

        checker = RuleChecker(default_methods=False)
        checker.set_int("a", 1)
        self.assertIsNone(checker.get_method("eq"))
        self.assertEqual(checker.evaluate("a.eq(1)").error, "unknown method 'eq'")

        checker.init_methods()
        self.assertTrue(checker.evaluate("a.eq(1)").result)

        checker.clear_methods()
        self.assertEqual(checker.evaluate("a.eq(1)").error, "unknown method 'eq'")

    def test_custom_method_is_added(self) -> None:
        from tinyrule import RuleChecker, ValueType

        def starts_with(lhs, rhs) -> bool:
            return lhs.type is ValueType.STRING and lhs.payload.startswith(rhs.payload)

        checker = RuleChecker()
        checker.set_string("c", "my string")
        checker.set_method("startswith", starts_with)
        self.assertIs(checker.get_method("startswith"), starts_with)
        self.assertTrue(checker.evaluate("c.startswith('my')").result)
        self.assertFalse(checker.evaluate("c.startswith('string')").result)

    def test_custom_method_overrides_builtin(self) -> None:
        from tinyrule import RuleChecker

        checker = RuleChecker()
        checker.set_int("a", 1)
        checker.set_method("eq", lambda lhs, rhs: True)
        self.assertTrue(checker.evaluate("a.eq('anything')").result)

        checker.init_methods()
        self.assertEqual(checker.evaluate("a.eq('anything')").error, "type mismatch: type i vs s")

    def test_custom_method_error_message_is_surfaced_verbatim(self) -> None:
        from tinyrule import OperatorError, RuleChecker

        def refuse(lhs, rhs) -> bool:
            raise OperatorError("refused: policy says no")

        checker = RuleChecker()
        checker.set_int("a", 1)
        checker.set_method("refuse", refuse)
        self.assertEqual(checker.evaluate("a.eq(1) && a.refuse(1)").error, "refused: policy says no")

        with self.assertRaises(OperatorError):
            checker.check("a.refuse(1)")

    def test_non_rule_exceptions_from_custom_methods_propagate(self) -> None:
        from tinyrule import RuleChecker

        def broken(lhs, rhs) -> bool:
            raise ZeroDivisionError("bug")

        checker = RuleChecker()
        checker.set_int("a", 1)
        checker.set_method("broken", broken)
        with self.assertRaises(ZeroDivisionError):
            checker.evaluate("a.broken(1)")

    def test_set_method_requires_callable(self) -> None:
        from tinyrule import RuleChecker

        with self.assertRaises(TypeError):
            RuleChecker().set_method("eq", "not callable")

    def test_both_operands_are_always_evaluated(self) -> None:
        from tinyrule import RuleChecker

        calls: list[int] = []

        def track(lhs, rhs) -> bool:
            calls.append(rhs.payload)
            return False

        checker = RuleChecker()
        checker.set_int("a", 100)
        checker.set_method("track", track)

        self.assertFalse(checker.evaluate("a.track(1) && a.track(2)").result)
        self.assertEqual(calls, [1, 2])

        calls.clear()
        self.assertTrue(checker.evaluate("a.eq(100) || a.track(3)").result)
        self.assertEqual(calls, [3])

        calls.clear()
        self.assertFalse(checker.evaluate("a.eq(1) && a.track(4) || a.track(5)").result)
        self.assertEqual(calls, [4, 5])

    def test_check_returns_bool_or_raises(self) -> None:
        from tinyrule import ResolutionError, RuleChecker, RuleSyntaxError

        checker = RuleChecker()
        checker.set_int("a", 100)
        self.assertIs(checker.check("a.gt(99)"), True)

        with self.assertRaises(RuleSyntaxError):
            checker.check("")
        with self.assertRaises(ResolutionError) as ctx:
            checker.check("a.nope(1)")
        self.assertEqual(ctx.exception.name, "nope")


if __name__ == "__main__":
    unittest.main()
