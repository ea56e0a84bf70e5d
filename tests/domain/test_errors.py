import unittest

from kerngrad.domain._errors import (
    BackendNotFoundError,
    ConversionError,
    DeviceMismatchError,
    DeviceNotSupportedError,
    GradientError,
    InvalidArgumentError,
    InvalidDTypeError,
    NaNResultError,
    ShapeMismatchError,
)


class TestErrorMessages(unittest.TestCase):
    def test_conversion_error_names_argument_op_and_type(self) -> None:
        e = ConversionError("x", "neg", "str")
        self.assertEqual(
            str(e),
            "Argument 'x' passed to 'neg' must be a Tensor or TensorLike, "
            "but got 'str'",
        )
        self.assertEqual((e.arg_name, e.op, e.type_name), ("x", "neg", "str"))

    def test_nan_result_error_message(self) -> None:
        self.assertEqual(str(NaNResultError("log")), "The result of the 'log' has NaNs.")

    def test_invalid_argument_error_prefix(self) -> None:
        e = InvalidArgumentError("clip", "min (3) must be less than or equal to max (1).")
        self.assertTrue(str(e).startswith("Error in clip: "))
        self.assertEqual(e.op, "clip")

    def test_invalid_dtype_error_lists_allowed(self) -> None:
        e = InvalidDTypeError("erf", "bool", ("int32", "float32"))
        self.assertIn("`int32` or `float32`", str(e))
        self.assertIn("`bool`", str(e))
        self.assertEqual(e.allowed, ("int32", "float32"))

    def test_shape_mismatch_error_keeps_shapes(self) -> None:
        e = ShapeMismatchError("mul_strict", [2, 3], (3,))
        self.assertEqual(e.expected, (2, 3))
        self.assertEqual(e.actual, (3,))
        self.assertIn("(2, 3)", str(e))

    def test_backend_not_found_str_is_not_quoted(self) -> None:
        e = BackendNotFoundError("webgl", ["numpy"])
        self.assertEqual(str(e), "Backend 'webgl' is not registered. Available: ['numpy']")
        self.assertEqual(e.available, ("numpy",))

    def test_device_errors(self) -> None:
        e = DeviceMismatchError("cuda:0", "cpu")
        self.assertIn("cuda:0", str(e))
        e2 = DeviceNotSupportedError("exp", "cuda:1")
        self.assertEqual(e2.device, "cuda:1")


class TestErrorHierarchy(unittest.TestCase):
    def test_builtin_bases(self) -> None:
        self.assertTrue(issubclass(InvalidArgumentError, ValueError))
        self.assertTrue(issubclass(ShapeMismatchError, ValueError))
        self.assertTrue(issubclass(InvalidDTypeError, TypeError))
        self.assertTrue(issubclass(ConversionError, TypeError))
        self.assertTrue(issubclass(BackendNotFoundError, KeyError))
        self.assertTrue(issubclass(GradientError, RuntimeError))
        self.assertTrue(issubclass(NaNResultError, ArithmeticError))


if __name__ == "__main__":
    unittest.main()
