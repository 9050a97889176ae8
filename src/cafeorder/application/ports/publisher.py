from __future__ import annotations

from typing import Protocol


class ChangePublisher(Protocol):
    """Fire-and-forget fan-out of serialized row changes.

    Delivery is best effort: callers publish after their write has
    committed and treat a failure here as non-fatal.
    """

    def publish(self, channel: str, message: str) -> None: ...
