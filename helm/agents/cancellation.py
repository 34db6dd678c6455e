"""Cooperative cancellation shared by reference through an agent run."""


class CancellationToken:
    """
    Stop signal checked by agents before they start new work.

    Cancelling never interrupts a model call already in flight; its
    result is discarded once it returns.
    """

    def __init__(self):
        self._cancelled = False

    @property
    def cancelled(self) -> bool:
        return self._cancelled

    def cancel(self) -> None:
        self._cancelled = True


def request_cancel(token: CancellationToken) -> None:
    """Ask the run holding `token` to stop. Safe to call repeatedly."""
    token.cancel()
