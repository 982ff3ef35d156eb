"""DTOs for broadcast dispatch (no dependency on ORM)."""

from dataclasses import dataclass, field


@dataclass(frozen=True)
class BroadcastAttachmentInput:
    """Attachment as submitted: display name plus optional payload."""

    name: str
    content: bytes | str | None = None
    content_type: str | None = None


@dataclass(frozen=True)
class DispatchResult:
    """Outcome for one recipient."""

    recipient: str
    success: bool
    message_id: str | None = None
    error: str | None = None


@dataclass(kw_only=True)
class DispatchReport:
    """Audit record id plus per-recipient results in send order."""

    broadcast_id: str
    recipients: list[str]
    results: list[DispatchResult] = field(default_factory=list)

    @property
    def failed_count(self) -> int:
        return sum(1 for r in self.results if not r.success)

    @property
    def fully_sent(self) -> bool:
        return self.failed_count == 0
