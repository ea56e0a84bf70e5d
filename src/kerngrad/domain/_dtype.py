"""
Element dtype definitions.

This module defines :class:`DType`, the closed set of element types a
tensor may carry. The set is intentionally small: every backend must be
able to store and compute over all members, and every kernel documents its
result dtype in terms of these members only.

The domain layer does not import NumPy. Conversion to and from NumPy dtypes
lives on the enum as string-based helpers so infrastructure code can map
between the two without the domain depending on a numerical library.
"""

from __future__ import annotations

from enum import Enum
from typing import Any, Union


class DType(Enum):
    """
    Enumeration of supported tensor element types.

    Attributes
    ----------
    FLOAT32 : DType
        32-bit IEEE-754 floating point.
    INT32 : DType
        32-bit signed integer.
    BOOL : DType
        Boolean.
    """

    FLOAT32 = "float32"
    INT32 = "int32"
    BOOL = "bool"

    def __str__(self) -> str:
        return self.value

    @property
    def is_floating(self) -> bool:
        """Return True for floating-point dtypes."""
        return self is DType.FLOAT32

    @property
    def is_integral(self) -> bool:
        """Return True for integer dtypes (bool is not integral here)."""
        return self is DType.INT32

    @property
    def is_numeric(self) -> bool:
        """Return True for dtypes that support arithmetic kernels."""
        return self.is_floating or self.is_integral

    def to_numpy(self) -> str:
        """
        Return the NumPy dtype name for this dtype.

        Returns
        -------
        str
            A dtype string accepted by ``numpy.dtype``.
        """
        return self.value

    @classmethod
    def parse(cls, value: Union["DType", str]) -> "DType":
        """
        Normalize a user-facing dtype spec into a :class:`DType`.

        Parameters
        ----------
        value : DType or str
            Either a member of this enum or its string value
            (``"float32"``, ``"int32"``, ``"bool"``).

        Returns
        -------
        DType
            The matching enum member.

        Raises
        ------
        ValueError
            If `value` names no supported dtype.
        """
        if isinstance(value, DType):
            return value
        try:
            return cls(str(value))
        except ValueError:
            raise ValueError(
                f"Unsupported dtype {value!r}. Expected one of "
                f"{[d.value for d in cls]}."
            ) from None

    @classmethod
    def from_numpy(cls, np_dtype: Any) -> "DType":
        """
        Map a NumPy dtype onto the closed dtype set.

        Floating kinds map to ``FLOAT32``, signed and unsigned integer kinds
        map to ``INT32`` and the boolean kind maps to ``BOOL``.

        Parameters
        ----------
        np_dtype : Any
            Object exposing a NumPy-style ``kind`` character (a ``numpy.dtype``).

        Returns
        -------
        DType
            The dtype that values of `np_dtype` are stored as.

        Raises
        ------
        TypeError
            If the dtype kind has no counterpart (complex, string, object...).
        """
        kind = getattr(np_dtype, "kind", None)
        if kind == "f":
            return cls.FLOAT32
        if kind in ("i", "u"):
            return cls.INT32
        if kind == "b":
            return cls.BOOL
        raise TypeError(f"Unsupported array dtype: {np_dtype!r}")
