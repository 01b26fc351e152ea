"""FastAPI dependency injection utilities."""

from typing import Annotated

from fastapi import Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from app.db.session import get_db
from app.services.messaging import NotificationGateway


def get_notification_gateway(request: Request) -> NotificationGateway:
    """Return the gateway created for this application in the lifespan."""
    return request.app.state.notification_gateway


def get_request_id(request: Request) -> str | None:
    """Extract request ID from headers.

    Args:
        request: FastAPI request

    Returns:
        Request ID or None
    """
    return request.headers.get("X-Request-ID")


# Type aliases for cleaner dependency injection
DbSession = Annotated[AsyncSession, Depends(get_db)]
Gateway = Annotated[NotificationGateway, Depends(get_notification_gateway)]
RequestId = Annotated[str | None, Depends(get_request_id)]
