from __future__ import annotations


class ScreeningError(ValueError):
    """Base class for every error the screening core surfaces to callers."""


class MalformedSampleError(ScreeningError):
    def __init__(self, stage_kind: str, reason: str):
        super().__init__(f"Malformed {stage_kind} sample: {reason}")
        self.stage_kind = stage_kind
        self.reason = reason


class InvalidTransitionError(ScreeningError):
    def __init__(self, expected: str | None, received: str):
        where = expected if expected is not None else "no active stage"
        super().__init__(f"Cannot complete stage {received!r}; current stage is {where!r}")
        self.expected = expected
        self.received = received


class NotReadyError(ScreeningError):
    pass
