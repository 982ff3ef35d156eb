"""Broadcast API schemas."""

from pydantic import BaseModel, Field


class AttachmentIn(BaseModel):
    """Attachment as sent by the client; content is a data URL or base64."""

    name: str = Field(..., min_length=1, max_length=255)
    content: str | None = Field(default=None, description="data:<mime>;base64,... or base64")
    type: str | None = Field(default=None, max_length=127, description="MIME type")


class BroadcastSendRequest(BaseModel):
    """Request body for POST /broadcast/send.

    subject and content default to "" so missing values are answered with
    400. recipients omitted or empty means every active account.
    """

    subject: str = Field(default="", max_length=998)
    content: str = ""
    recipients: list[str] | None = None
    media_links: list[str] | None = None
    attachments: list[AttachmentIn] | None = None
    admin_token: str | None = Field(
        default=None, description="Alternative to the Authorization header"
    )


class BroadcastResultItem(BaseModel):
    to: str
    success: bool
    message_id: str | None = None
    error: str | None = None


class BroadcastSendResponse(BaseModel):
    """Response for POST /broadcast/send (200 all sent, 207 partial)."""

    message: str
    broadcast_id: str
    sent: int
    failed: int
    results: list[BroadcastResultItem]
