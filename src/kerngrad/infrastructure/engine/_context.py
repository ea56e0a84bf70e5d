from dataclasses import dataclass, field

from ...domain._tensor import ITensor


@dataclass
class KernelContext:
    """
    Per-invocation scratch space handed to a kernel's forward function.

    The engine creates one `KernelContext` for every `run_kernel` call and
    passes its bound `save` method to the forward function. Values saved
    here become the `saved` slot of the tape record.

    Attributes
    ----------
    recording : bool
        Whether the current invocation will be recorded on a tape. When
        False, `save` returns its argument without retaining it, so
        forward-only execution never holds on to intermediates.
    saved_tensors : list[ITensor]
        Tensors saved during the forward pass, in save order.
    """

    recording: bool = True
    saved_tensors: list = field(default_factory=list)

    def save(self, tensor: ITensor) -> ITensor:
        """
        Save `tensor` for the backward pass and return it unchanged.

        Returning the argument lets forward functions save a kernel output
        inline: ``return save(backend.exp(x))``.
        """
        if self.recording:
            self.saved_tensors.append(tensor)
        return tensor

    def save_for_backward(self, *tensors: ITensor) -> None:
        """Save several tensors at once."""
        for t in tensors:
            self.save(t)
