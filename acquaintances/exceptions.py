"""
Hard failures raised by the verification store.

Soft failures (unknown id, wrong actor, blocked pair, unknown group) are never
raised; they are reported through return values.
"""


class AcquaintancesError(Exception):
    """Base class for errors raised by this package."""


class SelfVerificationError(AcquaintancesError, ValueError):
    """A party tried to verify itself (same id and same type)."""


class MessageTooLongError(AcquaintancesError, ValueError):
    """A verification message exceeds the configured maximum length."""

    def __init__(self, max_length: int, length: int):
        super().__init__(
            f"Verification message cannot exceed {max_length} characters. Current message length: {length}"
        )
        self.max_length = max_length
        self.length = length


class InvalidDirectionError(AcquaintancesError, ValueError):
    """Unknown direction filter (expected 'sender', 'recipient' or 'all')."""
