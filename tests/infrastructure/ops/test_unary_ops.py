import math
import unittest

import numpy as np

import kerngrad as kg
from kerngrad.domain._dtype import DType
from kerngrad.domain._errors import (
    ConversionError,
    InvalidArgumentError,
    InvalidDTypeError,
)
from kerngrad.infrastructure.backends import NumpyBackend
from kerngrad.infrastructure.engine import Engine
from kerngrad.infrastructure.ops import unary
from kerngrad.infrastructure.tensor import tensor


class _OpCase(unittest.TestCase):
    def setUp(self) -> None:
        self.engine = Engine(NumpyBackend())

    def assertValues(self, t, expected, **kw) -> None:
        np.testing.assert_allclose(
            t.to_numpy(), np.asarray(expected, dtype=np.float64), **kw
        )


class TestForwardValues(_OpCase):
    def test_reference_values(self) -> None:
        x = np.array([-0.75, -0.1, 0.0, 0.2, 0.9], dtype=np.float32)
        pos = np.array([0.1, 0.5, 1.0, 4.0], dtype=np.float32)
        big = np.array([1.0, 1.5, 3.0], dtype=np.float32)
        cases = [
            (unary.neg, x, -x),
            (unary.exp, x, np.exp(x)),
            (unary.expm1, x, np.expm1(x)),
            (unary.log, pos, np.log(pos)),
            (unary.log1p, pos, np.log1p(pos)),
            (unary.sqrt, pos, np.sqrt(pos)),
            (unary.rsqrt, pos, 1.0 / np.sqrt(pos)),
            (unary.square, x, x * x),
            (unary.reciprocal, pos, 1.0 / pos),
            (unary.abs, x, np.abs(x)),
            (unary.sigmoid, x, 1.0 / (1.0 + np.exp(-x.astype(np.float64)))),
            (unary.log_sigmoid, x, -np.log1p(np.exp(-x.astype(np.float64)))),
            (unary.softplus, x, np.log1p(np.exp(x.astype(np.float64)))),
            (unary.sin, x, np.sin(x)),
            (unary.cos, x, np.cos(x)),
            (unary.tan, x, np.tan(x)),
            (unary.asin, x, np.arcsin(x)),
            (unary.acos, x, np.arccos(x)),
            (unary.atan, x, np.arctan(x)),
            (unary.sinh, x, np.sinh(x)),
            (unary.cosh, x, np.cosh(x)),
            (unary.tanh, x, np.tanh(x)),
            (unary.asinh, x, np.arcsinh(x)),
            (unary.acosh, big, np.arccosh(big)),
            (unary.atanh, x, np.arctanh(x)),
            (unary.erf, x, [math.erf(float(v)) for v in x]),
        ]
        for fn, values, expected in cases:
            with self.subTest(op=fn.__name__):
                y = fn(tensor(values), engine=self.engine)
                self.assertIs(y.dtype, DType.FLOAT32)
                self.assertEqual(y.shape, values.shape)
                self.assertValues(y, expected, rtol=1e-5, atol=1e-6)

    def test_ceil_floor(self) -> None:
        x = [0.6, 1.1, -3.3]
        self.assertValues(unary.ceil(x, engine=self.engine), [1.0, 2.0, -3.0])
        self.assertValues(unary.floor(x, engine=self.engine), [0.0, 1.0, -4.0])

    def test_round_half_to_even(self) -> None:
        y = unary.round([0.5, 1.5, 2.5, 3.5], engine=self.engine)
        self.assertValues(y, [0.0, 2.0, 2.0, 4.0])

    def test_sign(self) -> None:
        y = unary.sign([-3.0, 0.0, 2.0], engine=self.engine)
        self.assertValues(y, [-1.0, 0.0, 1.0])

    def test_step(self) -> None:
        x = [-2.0, 0.0, 0.5]
        self.assertValues(unary.step(x, engine=self.engine), [0.0, 0.0, 1.0])
        self.assertValues(unary.step(x, 0.1, engine=self.engine), [-0.2, 0.0, 1.0])

    def test_exp_of_zero_and_one(self) -> None:
        y = unary.exp([0.0, 1.0], engine=self.engine)
        self.assertValues(y, [1.0, math.e], rtol=1e-6)

    def test_rank0_and_empty_inputs(self) -> None:
        self.assertEqual(unary.exp(0.0, engine=self.engine).shape, ())
        empty = unary.tanh(np.zeros((0, 2), dtype=np.float32), engine=self.engine)
        self.assertEqual(empty.shape, (0, 2))

    def test_integer_inputs(self) -> None:
        x = tensor([-2, 3])
        self.assertIs(unary.neg(x, engine=self.engine).dtype, DType.INT32)
        self.assertIs(unary.abs(x, engine=self.engine).dtype, DType.INT32)
        self.assertIs(unary.square(x, engine=self.engine).dtype, DType.INT32)
        self.assertIs(unary.exp(x, engine=self.engine).dtype, DType.FLOAT32)


class TestUnaryProperties(_OpCase):
    def setUp(self) -> None:
        super().setUp()
        rng = np.random.default_rng(7)
        self.x = rng.uniform(-5.0, 5.0, size=64).astype(np.float32)
        self.pos = rng.uniform(0.05, 10.0, size=64).astype(np.float32)
        self.ge1 = rng.uniform(1.0, 10.0, size=64).astype(np.float32)

    def test_neg_is_involution(self) -> None:
        e = self.engine
        y = unary.neg(unary.neg(tensor(self.x), engine=e), engine=e)
        np.testing.assert_array_equal(y.to_numpy(), self.x)

    def test_abs_is_non_negative(self) -> None:
        y = unary.abs(tensor(self.x), engine=self.engine).to_numpy()
        self.assertTrue(np.all(y >= 0))
        np.testing.assert_array_equal(y, np.abs(self.x))

    def test_inverse_pairs_round_trip(self) -> None:
        e = self.engine
        pairs = [
            (unary.exp, unary.log, self.pos),
            (unary.sinh, unary.asinh, self.x),
            (unary.cosh, unary.acosh, self.ge1),
        ]
        for outer, inner, x in pairs:
            with self.subTest(op=outer.__name__):
                y = outer(inner(tensor(x), engine=e), engine=e)
                self.assertValues(y, x, rtol=1e-4, atol=1e-5)

    def test_softplus_is_positive(self) -> None:
        x = np.linspace(-20.0, 20.0, 81, dtype=np.float32)
        y = unary.softplus(tensor(x), engine=self.engine).to_numpy()
        self.assertTrue(np.all(y > 0))

    def test_sigmoid_of_zero_is_half(self) -> None:
        y = unary.sigmoid(tensor([0.0]), engine=self.engine)
        self.assertEqual(y.tolist(), [0.5])


class TestClipByValue(_OpCase):
    def test_clips(self) -> None:
        y = unary.clip_by_value([-1.0, 2.0, -3.0, 4.0], -2.0, 3.0, engine=self.engine)
        self.assertValues(y, [-1.0, 2.0, -2.0, 3.0])

    def test_nan_stays_nan(self) -> None:
        y = unary.clip_by_value([np.nan, 0.5], 0.0, 0.25, engine=self.engine)
        self.assertValues(y, [np.nan, 0.25])

    def test_equal_bounds_allowed(self) -> None:
        y = unary.clip_by_value([-1.0, 5.0], 1.0, 1.0, engine=self.engine)
        self.assertValues(y, [1.0, 1.0])

    def test_min_greater_than_max(self) -> None:
        with self.assertRaises(InvalidArgumentError) as cm:
            unary.clip_by_value([1.0], 3.0, 1.0, engine=self.engine)
        self.assertEqual(
            str(cm.exception),
            "Error in clip: min (3.0) must be less than or equal to max (1.0).",
        )

    def test_invalid_bounds(self) -> None:
        for lo, hi in ((float("nan"), 1.0), ("0", 1.0), (0.0, None), (True, 2.0)):
            with self.subTest(lo=lo, hi=hi):
                with self.assertRaises(InvalidArgumentError):
                    unary.clip_by_value([1.0], lo, hi, engine=self.engine)

    def test_camel_case_alias(self) -> None:
        self.assertIs(unary.clipByValue, unary.clip_by_value)
        self.assertIs(unary.logSigmoid, unary.log_sigmoid)


class TestErf(_OpCase):
    def test_int32_is_promoted(self) -> None:
        y = unary.erf(tensor([0, 1]), engine=self.engine)
        self.assertIs(y.dtype, DType.FLOAT32)
        self.assertValues(y, [0.0, math.erf(1.0)], rtol=1e-6)

    def test_bool_rejected(self) -> None:
        with self.assertRaises(InvalidDTypeError):
            unary.erf(tensor([True, False]), engine=self.engine)


class TestConversion(_OpCase):
    def test_non_tensor_like_rejected_with_op_name(self) -> None:
        with self.assertRaises(ConversionError) as cm:
            unary.neg("abc", engine=self.engine)
        self.assertEqual(cm.exception.op, "neg")
        self.assertEqual(cm.exception.arg_name, "x")

        with self.assertRaises(ConversionError) as cm:
            unary.clip_by_value({"a": 1}, 0.0, 1.0, engine=self.engine)
        self.assertEqual(cm.exception.op, "clipByValue")

    def test_inputs_are_not_modified(self) -> None:
        x = tensor([1.0, -2.0])
        before = x.to_numpy()
        for fn in (unary.neg, unary.abs, unary.exp, unary.square):
            fn(x, engine=self.engine)
        np.testing.assert_array_equal(x.to_numpy(), before)


class TestTensorMethods(unittest.TestCase):
    def test_methods_match_functions(self) -> None:
        x = kg.tensor([0.25, -0.5])
        np.testing.assert_allclose(x.exp().to_numpy(), kg.exp(x).to_numpy())
        np.testing.assert_allclose(x.tanh().to_numpy(), kg.tanh(x).to_numpy())
        np.testing.assert_allclose(
            x.clip_by_value(0.0, 0.1).to_numpy(), [0.1, 0.0], rtol=1e-6
        )
        np.testing.assert_allclose(
            x.log_sigmoid().to_numpy(), kg.log_sigmoid(x).to_numpy()
        )

    def test_operators(self) -> None:
        x = kg.tensor([1.0, -2.0])
        self.assertEqual((-x).tolist(), [-1.0, 2.0])
        self.assertEqual(abs(x).tolist(), [1.0, 2.0])

    def test_methods_record_on_default_engine(self) -> None:
        engine = Engine(NumpyBackend())
        x = kg.tensor([0.5])
        with kg.ENV.use_engine(engine), engine.tape() as tape:
            x.sigmoid().square()
        self.assertEqual([r.name for r in tape], ["sigmoid", "square"])


if __name__ == "__main__":
    unittest.main()
