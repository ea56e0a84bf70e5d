import unittest

import numpy as np

from kerngrad.domain._errors import (
    DeviceMismatchError,
    GradientError,
    InvalidArgumentError,
    InvalidDTypeError,
    NaNResultError,
    ShapeMismatchError,
)
from kerngrad.domain._function import Function
from kerngrad.infrastructure.backends import NumpyBackend
from kerngrad.infrastructure.engine import Engine, Flags, KernelContext
from kerngrad.infrastructure.ops import unary
from kerngrad.infrastructure.tensor import Tensor, tensor


class _AddFn(Function):
    """Two-input test function used to exercise gradient accumulation."""

    name = "testAdd"

    def __init__(self, a, b) -> None:
        super().__init__({"a": a, "b": b})

    def forward(self, backend, save):
        self.backend = backend
        return backend.add(self.inputs["a"], self.inputs["b"])

    def gradient(self, input_name, grad_out, saved):
        return grad_out


def _add(engine: Engine, a: Tensor, b: Tensor) -> Tensor:
    fn = _AddFn(a, b)
    return engine.run_kernel(fn.forward, fn.inputs, fn.backward, name=fn.name)


class TestKernelContext(unittest.TestCase):
    def test_save_returns_argument(self) -> None:
        ctx = KernelContext()
        t = tensor([1.0])
        self.assertIs(ctx.save(t), t)
        self.assertEqual(ctx.saved_tensors, [t])

    def test_save_is_noop_when_not_recording(self) -> None:
        ctx = KernelContext(recording=False)
        t = tensor([1.0])
        self.assertIs(ctx.save(t), t)
        ctx.save_for_backward(t, t)
        self.assertEqual(ctx.saved_tensors, [])

    def test_save_for_backward_keeps_order(self) -> None:
        ctx = KernelContext()
        a, b = tensor([1.0]), tensor([2.0])
        ctx.save_for_backward(a, b)
        ctx.save(a)
        self.assertEqual(ctx.saved_tensors, [a, b, a])


class TestRecording(unittest.TestCase):
    def setUp(self) -> None:
        self.engine = Engine(NumpyBackend())

    def test_not_recording_outside_tape(self) -> None:
        self.assertFalse(self.engine.is_recording)
        self.assertIsNone(self.engine.active_tape)
        y = unary.exp(tensor([0.0]), engine=self.engine)
        self.assertEqual(y.tolist(), [1.0])

    def test_one_record_per_op(self) -> None:
        x = tensor([0.5, 1.0])
        with self.engine.tape() as tape:
            self.assertTrue(self.engine.is_recording)
            a = unary.sin(x, engine=self.engine)
            b = unary.exp(a, engine=self.engine)
        self.assertFalse(self.engine.is_recording)

        records = tape.records
        self.assertEqual([r.name for r in records], ["sin", "exp"])
        self.assertEqual([r.id for r in records], [0, 1])
        self.assertIs(records[0].inputs["x"], x)
        self.assertIs(records[0].output, a)
        self.assertIs(records[1].inputs["x"], a)
        self.assertIs(records[1].output, b)

    def test_only_output_reusing_ops_save(self) -> None:
        x = tensor([0.5])
        with self.engine.tape() as tape:
            for fn in (unary.exp, unary.sigmoid, unary.tanh):
                fn(x, engine=self.engine)
            for fn in (unary.neg, unary.sin, unary.log, unary.sqrt, unary.erf):
                fn(x, engine=self.engine)

        saved = {r.name: r.saved for r in tape}
        for name in ("exp", "sigmoid", "tanh"):
            self.assertEqual(len(saved[name]), 1, name)
        for r in tape:
            if r.name in ("exp", "sigmoid", "tanh"):
                self.assertIs(r.saved[0], r.output)
            else:
                self.assertEqual(r.saved, (), r.name)

    def test_camel_case_names_on_records(self) -> None:
        x = tensor([0.5])
        with self.engine.tape() as tape:
            unary.clip_by_value(x, 0.0, 1.0, engine=self.engine)
            unary.log_sigmoid(x, engine=self.engine)
        self.assertEqual([r.name for r in tape], ["clipByValue", "logSigmoid"])

    def test_no_grad_pauses_recording(self) -> None:
        x = tensor([0.5])
        with self.engine.tape() as tape:
            with self.engine.no_grad():
                self.assertFalse(self.engine.is_recording)
                unary.exp(x, engine=self.engine)
            unary.neg(x, engine=self.engine)
        self.assertEqual([r.name for r in tape], ["neg"])

    def test_nested_tapes_record_innermost(self) -> None:
        x = tensor([0.5])
        with self.engine.tape() as outer:
            unary.neg(x, engine=self.engine)
            with self.engine.tape() as inner:
                unary.exp(x, engine=self.engine)
            unary.sin(x, engine=self.engine)
        self.assertEqual([r.name for r in outer], ["neg", "sin"])
        self.assertEqual([r.name for r in inner], ["exp"])


class TestFailures(unittest.TestCase):
    def setUp(self) -> None:
        self.engine = Engine(NumpyBackend())

    def test_kernel_exception_propagates_without_record(self) -> None:
        def boom(backend, save):
            raise ZeroDivisionError("kernel failed")

        with self.engine.tape() as tape:
            with self.assertRaises(ZeroDivisionError):
                self.engine.run_kernel(boom, {"x": tensor([1.0])}, name="boom")
        self.assertEqual(len(tape), 0)

    def test_non_tensor_result_rejected(self) -> None:
        with self.engine.tape() as tape:
            with self.assertRaises(TypeError):
                self.engine.run_kernel(
                    lambda backend, save: [1.0], {"x": tensor([1.0])}, name="bad"
                )
        self.assertEqual(len(tape), 0)

    def test_eager_argument_checks_leave_tape_untouched(self) -> None:
        x = tensor([1.0, 2.0])
        with self.engine.tape() as tape:
            with self.assertRaises(InvalidArgumentError):
                unary.clip_by_value(x, 3.0, 1.0, engine=self.engine)
            with self.assertRaises(InvalidDTypeError):
                unary.erf(tensor([True]), engine=self.engine)
        self.assertEqual(len(tape), 0)

    def test_device_mismatch(self) -> None:
        x = Tensor([1.0], device="cuda:0")
        with self.engine.tape() as tape:
            with self.assertRaises(DeviceMismatchError):
                unary.exp(x, engine=self.engine)
        self.assertEqual(len(tape), 0)

    def test_device_check_can_be_disabled(self) -> None:
        engine = Engine(NumpyBackend(), flags=Flags(check_devices=False))
        y = unary.exp(Tensor([0.0], device="cuda:0"), engine=engine)
        self.assertEqual(y.tolist(), [1.0])


class TestDebugMode(unittest.TestCase):
    def setUp(self) -> None:
        self.engine = Engine(NumpyBackend(), flags=Flags(debug=True))

    def test_new_nan_raises(self) -> None:
        with self.engine.tape() as tape:
            with self.assertRaises(NaNResultError) as cm:
                unary.log(tensor([-1.0]), engine=self.engine)
        self.assertEqual(str(cm.exception), "The result of the 'log' has NaNs.")
        self.assertEqual(len(tape), 0)

    def test_nan_from_nan_input_is_allowed(self) -> None:
        y = unary.exp(tensor([np.nan, 0.0]), engine=self.engine)
        self.assertTrue(np.isnan(y.to_numpy()[0]))

    def test_clean_results_pass(self) -> None:
        y = unary.sqrt(tensor([4.0]), engine=self.engine)
        self.assertEqual(y.tolist(), [2.0])

    def test_nan_allowed_outside_debug(self) -> None:
        y = unary.log(tensor([-1.0]), engine=Engine(NumpyBackend()))
        self.assertTrue(np.isnan(y.item()))


class TestGradientsDriver(unittest.TestCase):
    def setUp(self) -> None:
        self.engine = Engine(NumpyBackend())

    def test_simple_gradient(self) -> None:
        x = tensor([0.0, 1.0])
        y, (dx,) = self.engine.gradients(
            lambda: unary.exp(x, engine=self.engine), [x]
        )
        np.testing.assert_allclose(y.to_numpy(), np.exp([0.0, 1.0]), rtol=1e-6)
        np.testing.assert_allclose(dx.to_numpy(), np.exp([0.0, 1.0]), rtol=1e-6)

    def test_accumulates_over_multiple_paths(self) -> None:
        x = tensor([0.3, -0.7])
        e = self.engine

        def f():
            return _add(e, unary.sin(x, engine=e), unary.cos(x, engine=e))

        _, (dx,) = e.gradients(f, [x])
        xn = np.array([0.3, -0.7])
        np.testing.assert_allclose(dx.to_numpy(), np.cos(xn) - np.sin(xn), rtol=1e-5)

    def test_same_tensor_into_both_inputs(self) -> None:
        x = tensor([1.0, 2.0])
        _, (dx,) = self.engine.gradients(lambda: _add(self.engine, x, x), [x])
        self.assertEqual(dx.tolist(), [2.0, 2.0])

    def test_custom_dy(self) -> None:
        x = tensor([0.0, 0.0])
        _, (dx,) = self.engine.gradients(
            lambda: unary.neg(x, engine=self.engine), [x], tensor([2.0, 3.0])
        )
        self.assertEqual(dx.tolist(), [-2.0, -3.0])

    def test_dy_shape_must_match(self) -> None:
        x = tensor([0.0, 0.0])
        with self.assertRaises(ShapeMismatchError):
            self.engine.gradients(
                lambda: unary.neg(x, engine=self.engine), [x], tensor([1.0])
            )

    def test_unreached_input_gets_zero_gradient(self) -> None:
        x1, x2 = tensor([1.0]), tensor([[1.0, 2.0]])
        _, (d1, d2) = self.engine.gradients(
            lambda: unary.square(x1, engine=self.engine), [x1, x2]
        )
        self.assertEqual(d1.tolist(), [2.0])
        self.assertEqual(d2.tolist(), [[0.0, 0.0]])

    def test_empty_xs(self) -> None:
        with self.assertRaises(GradientError):
            self.engine.gradients(lambda: tensor(1.0), [])

    def test_disconnected_output(self) -> None:
        x, z = tensor([1.0]), tensor([2.0])
        with self.assertRaises(GradientError):
            self.engine.gradients(lambda: unary.exp(z, engine=self.engine), [x])

    def test_identity_function(self) -> None:
        x = tensor([1.0, 2.0])
        y, (dx,) = self.engine.gradients(lambda: x, [x])
        self.assertIs(y, x)
        self.assertEqual(dx.tolist(), [1.0, 1.0])

    def test_gradient_pass_is_not_recorded(self) -> None:
        x = tensor([0.5])
        with self.engine.tape() as outer:
            self.engine.gradients(lambda: unary.tanh(x, engine=self.engine), [x])
            self.assertIs(self.engine.active_tape, outer)
        self.assertEqual(len(outer), 0)

    def test_tape_released_after_gradients(self) -> None:
        x = tensor([0.5])
        captured = []

        def f():
            captured.append(self.engine.active_tape)
            return unary.exp(x, engine=self.engine)

        self.engine.gradients(f, [x])
        self.assertTrue(captured[0].disposed)
        self.assertEqual(len(captured[0]), 0)

    def test_tape_released_when_backward_fails(self) -> None:
        x = tensor([0.5])
        captured = []

        def f():
            captured.append(self.engine.active_tape)
            return self.engine.run_kernel(
                lambda backend, save: backend.neg(x), {"x": x}, None, name="noGrad"
            )

        with self.assertRaises(GradientError):
            self.engine.gradients(f, [x])
        self.assertTrue(captured[0].disposed)

    def test_rule_with_unknown_input_name_raises(self) -> None:
        x = tensor([0.5])

        def backward(dy, saved):
            return {"x": lambda: dy, "bogus": lambda: dy}

        def f():
            return self.engine.run_kernel(
                lambda backend, save: backend.neg(x), {"x": x}, backward, name="extra"
            )

        with self.assertRaises(GradientError) as cm:
            self.engine.gradients(f, [x])
        self.assertIn("bogus", str(cm.exception))

    def test_records_keep_all_input_names(self) -> None:
        x, c = tensor([1.0]), tensor([2.0])
        with self.engine.tape() as tape:
            _add(self.engine, x, c)
        self.assertEqual(tape.records[0].input_names, ("a", "b"))

    def test_tape_released_when_forward_fails(self) -> None:
        x = tensor([0.5])
        captured = []

        def f():
            captured.append(self.engine.active_tape)
            unary.exp(x, engine=self.engine)
            raise KeyError("lost")

        with self.assertRaises(KeyError):
            self.engine.gradients(f, [x])
        self.assertTrue(captured[0].disposed)
        self.assertIsNone(self.engine.active_tape)


if __name__ == "__main__":
    unittest.main()
