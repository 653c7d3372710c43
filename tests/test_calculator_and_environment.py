from __future__ import annotations

import importlib.util
import logging
import math
import unittest


JAX_AVAILABLE = importlib.util.find_spec("jax") is not None


@unittest.skipUnless(JAX_AVAILABLE, "jax is required for environment tests")
class EnvironmentTests(unittest.TestCase):
    def test_assign_and_get_constant(self) -> None:
        from calc_jax import Constant, Environment

        env = Environment()
        self.assertEqual(env.assign_constant("var1", 34.5), 34.5)
        self.assertEqual(env.get("var1"), Constant(34.5))
        self.assertIsNone(env.get("xyz"))

    def test_constants_are_stored_at_float32_precision(self) -> None:
        from calc_jax import Environment
        from calc_jax.values import to_float

        env = Environment()
        stored = env.assign_constant("tenth", 0.1)
        self.assertNotEqual(stored, 0.1)
        self.assertEqual(stored, to_float(0.1))
        self.assertEqual(env["tenth"].value, stored)

    def test_seed_constants_and_mapping_view(self) -> None:
        from calc_jax import Environment

        env = Environment({"x": 1, "y": 2.5})
        self.assertEqual(len(env), 2)
        self.assertEqual(sorted(env), ["x", "y"])
        self.assertIn("x", env)
        self.assertNotIn("z", env)
        self.assertEqual(env["y"].value, 2.5)
        with self.assertRaises(KeyError):
            env["z"]

    def test_non_numeric_constants_are_rejected(self) -> None:
        from calc_jax import Environment

        env = Environment()
        for value in ["oops", None, True, [1.0]]:
            with self.subTest(value=value):
                with self.assertRaises(TypeError):
                    env.assign_constant("s", value)
        self.assertNotIn("s", env)
        with self.assertRaises(TypeError):
            Environment({"b": True})

    def test_last_result_cell(self) -> None:
        from calc_jax import Environment

        env = Environment()
        self.assertIsNone(env.get_last_result())
        self.assertEqual(env.set_last_result(4.0), 4.0)
        self.assertEqual(env.get_last_result(), 4.0)

    def test_init_builtins(self) -> None:
        from calc_jax import Constant, Environment, UnaryFunction

        env = Environment()
        self.assertEqual(len(env), 0)
        env.init_builtins()
        self.assertAlmostEqual(env["pi"].value, math.pi, places=6)
        self.assertAlmostEqual(env["e"].value, math.e, places=6)
        self.assertIsInstance(env["pi"], Constant)
        for name in ["sin", "asin", "cos", "acos", "tan", "atan", "r2d", "d2r"]:
            with self.subTest(name=name):
                self.assertIsInstance(env[name], UnaryFunction)
        self.assertEqual(len(env), 10)

    def test_registration_is_logged_at_debug(self) -> None:
        from calc_jax import Environment

        env = Environment()
        with self.assertLogs("calc_jax.environment", level=logging.DEBUG) as logs:
            env.register_function("double", lambda x: x * 2)
            env.assign_constant("k", 3)
        self.assertTrue(any("double" in line and "arity 1" in line for line in logs.output))
        self.assertTrue(any("k" in line for line in logs.output))


@unittest.skipUnless(JAX_AVAILABLE, "jax is required for calculator tests")
class CalculatorTests(unittest.TestCase):
    def test_calculate_and_call_share_environment(self) -> None:
        from calc_jax import Calculator

        calc = Calculator()
        self.assertEqual(calc.calculate("3 * -(4 + 5)"), -27.0)
        self.assertEqual(calc("let a = 5"), 5.0)
        self.assertEqual(calc("a * 10"), 50.0)
        self.assertEqual(calc.last_result, 50.0)

    def test_add_constant_and_function(self) -> None:
        from calc_jax import CalcRuntimeError, Calculator

        def div(a, b):
            if b == 0:
                raise CalcRuntimeError("Division by zero!")
            return a / b

        calc = Calculator()
        calc.init_builtins()
        calc.add_constant("foo", 40.0)
        calc.add_function("double", lambda arg: arg * 2.0)
        calc.add_function("div", div)
        calc.add_function("min", min, arity=2)

        self.assertEqual(calc("double 4"), 8.0)
        self.assertEqual(calc("min 2 4"), 2.0)
        self.assertEqual(calc("double foo + div foo 8"), 85.0)
        self.assertAlmostEqual(calc("r2d pi"), 180.0, places=3)
        with self.assertRaises(CalcRuntimeError):
            calc("div 1 0")

    def test_calculator_wraps_existing_environment(self) -> None:
        from calc_jax import Calculator, Environment

        env = Environment({"x": 4})
        calc = Calculator(env)
        self.assertIs(calc.env, env)
        self.assertEqual(calc("x + 2"), 6.0)
        self.assertEqual(env.get_last_result(), 6.0)

    def test_failed_evaluation_is_logged_and_reraised(self) -> None:
        from calc_jax import Calculator, VariableNotFoundError

        calc = Calculator()
        with self.assertLogs("calc_jax.evaluator", level=logging.DEBUG) as logs:
            with self.assertRaises(VariableNotFoundError):
                calc("missing + 1")
        self.assertTrue(any("missing" in line for line in logs.output))

    def test_error_spans_cover_offending_source(self) -> None:
        from calc_jax import CalcError, Calculator

        source = "1 + (2 * unknown)"
        calc = Calculator()
        with self.assertRaises(CalcError) as ctx:
            calc(source)
        start, end = ctx.exception.span
        self.assertEqual(source[start : end + 1], "unknown")


if __name__ == "__main__":
    unittest.main()
