import unittest

import numpy as np

from kerngrad.domain._dtype import DType


class TestDTypeParse(unittest.TestCase):
    def test_parse_accepts_members_and_strings(self) -> None:
        self.assertIs(DType.parse(DType.INT32), DType.INT32)
        self.assertIs(DType.parse("float32"), DType.FLOAT32)
        self.assertIs(DType.parse("bool"), DType.BOOL)

    def test_parse_rejects_unknown_names(self) -> None:
        with self.assertRaises(ValueError):
            DType.parse("float64")

    def test_str_is_value(self) -> None:
        self.assertEqual(str(DType.FLOAT32), "float32")


class TestDTypeFromNumpy(unittest.TestCase):
    def test_floating_kinds_map_to_float32(self) -> None:
        for name in ("float16", "float32", "float64"):
            self.assertIs(DType.from_numpy(np.dtype(name)), DType.FLOAT32)

    def test_integer_kinds_map_to_int32(self) -> None:
        for name in ("int8", "int64", "uint8", "uint32"):
            self.assertIs(DType.from_numpy(np.dtype(name)), DType.INT32)

    def test_bool_maps_to_bool(self) -> None:
        self.assertIs(DType.from_numpy(np.dtype(bool)), DType.BOOL)

    def test_unsupported_kinds_raise_type_error(self) -> None:
        for dt in (np.dtype("complex64"), np.dtype("U3"), np.dtype(object)):
            with self.assertRaises(TypeError):
                DType.from_numpy(dt)


class TestDTypeProperties(unittest.TestCase):
    def test_classification(self) -> None:
        self.assertTrue(DType.FLOAT32.is_floating)
        self.assertFalse(DType.INT32.is_floating)
        self.assertTrue(DType.INT32.is_integral)
        self.assertFalse(DType.BOOL.is_integral)
        self.assertTrue(DType.INT32.is_numeric)
        self.assertFalse(DType.BOOL.is_numeric)

    def test_to_numpy_round_trips_through_numpy(self) -> None:
        for dt in DType:
            self.assertIs(DType.from_numpy(np.dtype(dt.to_numpy())), dt)


if __name__ == "__main__":
    unittest.main()
