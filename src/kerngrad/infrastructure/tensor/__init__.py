"""
Tensor value type and argument conversion.

Public API
----------
- ``Tensor``: immutable NumPy-backed tensor
- ``convert_to_tensor``: normalize op arguments
- ``tensor`` / ``scalar``: factories
"""

from ._tensor import Tensor
from ._convert import TensorLike, convert_to_tensor, scalar, tensor

__all__ = [
    Tensor.__name__,
    "TensorLike",
    convert_to_tensor.__name__,
    scalar.__name__,
    tensor.__name__,
]
