"""
Device descriptors.

A tensor records where its storage lives, and a backend records where its
kernels execute. The engine compares the two before every kernel call, so
descriptors are immutable values with equality and hashing by
``(type, index)``.

Accepted spellings are ``"cpu"`` and ``"cuda:<n>"`` with ``n >= 0``.
"""

from enum import Enum
from typing import Optional, Union


class DeviceType(Enum):
    """Kind of processor a device descriptor refers to."""

    CPU = "cpu"
    CUDA = "cuda"


def _split_device(text: str) -> tuple[DeviceType, Optional[int]]:
    kind, sep, ordinal = text.partition(":")
    if kind == DeviceType.CPU.value and not sep:
        return DeviceType.CPU, None
    if kind == DeviceType.CUDA.value and sep and ordinal.isdigit():
        return DeviceType.CUDA, int(ordinal)
    raise ValueError(f"Invalid device '{text}'. Expected 'cpu' or 'cuda:<index>'")


class Device:
    """
    Placement of tensor storage or kernel execution.

    Parameters
    ----------
    device : str
        ``"cpu"`` or ``"cuda:<index>"``.

    Attributes
    ----------
    type : DeviceType
        Processor kind.
    index : Optional[int]
        Accelerator ordinal; None for the CPU.

    Raises
    ------
    ValueError
        If `device` is not one of the accepted spellings.
    """

    __slots__ = ("type", "index")

    def __init__(self, device: str):
        self.type, self.index = _split_device(device)

    @classmethod
    def parse(cls, device: Union["Device", str]) -> "Device":
        """Return `device` unchanged if it is a Device, else parse the string."""
        if isinstance(device, Device):
            return device
        return cls(str(device))

    def __str__(self):
        if self.index is None:
            return self.type.value
        return f"{self.type.value}:{self.index}"

    def __repr__(self) -> str:
        return f"Device({str(self)!r})"

    def __eq__(self, other: object) -> bool:
        if isinstance(other, Device):
            return (self.type, self.index) == (other.type, other.index)
        return NotImplemented

    def __hash__(self) -> int:
        return hash((self.type, self.index))

    def is_cpu(self) -> bool:
        return self.type is DeviceType.CPU

    def is_cuda(self) -> bool:
        return self.type is DeviceType.CUDA
