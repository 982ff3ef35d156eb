"""Admin broadcast endpoint."""

from typing import Annotated

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from agora.api.v1.dependencies import (
    AdminAuthenticator,
    get_admin_authenticator,
    get_broadcast_dispatcher,
)
from agora.application.dtos.broadcast import BroadcastAttachmentInput
from agora.application.services.broadcast_dispatcher import BroadcastDispatcher
from agora.core.limiter import limit_broadcast
from agora.schemas.broadcast import (
    BroadcastResultItem,
    BroadcastSendRequest,
    BroadcastSendResponse,
)

router = APIRouter()

_http_bearer = HTTPBearer(auto_error=False)


@router.post(
    "/send",
    response_model=BroadcastSendResponse,
    responses={
        207: {"description": "Some recipients failed", "model": BroadcastSendResponse},
        400: {"description": "Missing subject/content, bad attachment or no recipients"},
        401: {"description": "Missing or invalid token"},
        403: {"description": "Token owner is not an admin"},
    },
)
@limit_broadcast
async def send_broadcast(
    request: Request,
    payload: BroadcastSendRequest,
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(_http_bearer)],
    authenticator: Annotated[AdminAuthenticator, Depends(get_admin_authenticator)],
    dispatcher: Annotated[BroadcastDispatcher, Depends(get_broadcast_dispatcher)],
) -> JSONResponse:
    """Send subject/content to the given recipients, or to every active account.

    200 when every send succeeded, 207 otherwise; the broadcast is recorded
    either way.
    """
    token = credentials.credentials if credentials else payload.admin_token
    claims = await authenticator.authenticate(token)

    report = await dispatcher.dispatch(
        payload.subject,
        payload.content,
        sent_by=claims.owner_address or claims.owner_id,
        recipients=payload.recipients,
        media_links=payload.media_links,
        attachments=[
            BroadcastAttachmentInput(name=a.name, content=a.content, content_type=a.type)
            for a in payload.attachments or []
        ],
    )
    body = BroadcastSendResponse(
        message="Emails sent" if report.fully_sent else "Emails partially sent",
        broadcast_id=report.broadcast_id,
        sent=len(report.results) - report.failed_count,
        failed=report.failed_count,
        results=[
            BroadcastResultItem(
                to=r.recipient,
                success=r.success,
                message_id=r.message_id,
                error=r.error,
            )
            for r in report.results
        ],
    )
    return JSONResponse(
        status_code=200 if report.fully_sent else 207,
        content=body.model_dump(),
    )
