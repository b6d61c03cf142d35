"""Pacer exceptions.

Capacity rejections (a full queue, an exhausted rate-limit window) are not
exceptions: they are reported through return values, counters and the
``on_reject`` hook.
"""


class PacerError(Exception):
    """Base exception for pacer errors."""

    pass


class PacerDisabledError(PacerError):
    """Raised when a mutating call is made on a disabled async pacer."""

    def __init__(self, pacer: str) -> None:
        super().__init__(f"{pacer} is disabled")
        self.pacer = pacer


class PacerAbortedError(PacerError):
    """Raised to callers whose pending completion was aborted.

    Produced by ``abort()``, ``cancel()`` and ``dispose()``; distinct from
    errors raised by the wrapped function itself.
    """

    def __init__(self, pacer: str, message: str = "aborted") -> None:
        super().__init__(f"{pacer} {message}")
        self.pacer = pacer


class ThrottledError(PacerError):
    """Raised when an async throttler is called inside an active window."""

    def __init__(self, message: str, retry_after: float = 0.0) -> None:
        super().__init__(message)
        self.retry_after = retry_after
