"""Business logic services."""

from app.services.messaging import NotificationGateway
from app.services.no_show import NoShowService
from app.services.scheduling import SchedulingService

__all__ = [
    "NotificationGateway",
    "NoShowService",
    "SchedulingService",
]
