"""Error taxonomy for fetch-and-summarize runs."""

from __future__ import annotations


class DigestError(RuntimeError):
    """Base error carrying the item and phase a failure belongs to."""

    kind = "error"

    def __init__(
        self,
        message: str,
        item_id: str | int | None = None,
        origin: str | None = None,
        phase: str | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.item_id = item_id
        self.origin = origin
        self.phase = phase

    def attach(self, item_id: str | int, origin: str) -> "DigestError":
        """Fill in item context when the raising layer did not know it."""

        if self.item_id is None:
            self.item_id = item_id
        if self.origin is None:
            self.origin = origin
        return self

    def to_dict(self) -> dict:
        return {"kind": self.kind, "phase": self.phase, "message": self.message}


class AuthenticationError(DigestError):
    """Raised when a service rejects the configured credential."""

    kind = "authentication"


class FetchError(DigestError):
    """Raised when listing or detail retrieval fails."""

    kind = "fetch"


class SummarizationError(DigestError):
    """Raised when the completion provider fails or returns nothing."""

    kind = "summarization"
