"""Notification channel passed into the match session."""
import logging
from typing import Callable

from src.codigo_match.models.schemas import Notification, NotificationVariant

logger = logging.getLogger(__name__)

Notifier = Callable[[Notification], None]


def log_notifier(notification: Notification) -> None:
    """Report a notification through logging (success: INFO, destructive: WARNING)."""
    level = (
        logging.WARNING
        if notification.variant == NotificationVariant.DESTRUCTIVE
        else logging.INFO
    )
    logger.log(level, f"{notification.title} {notification.description}")


def success(title: str, description: str) -> Notification:
    return Notification(title=title, description=description)


def destructive(title: str, description: str) -> Notification:
    return Notification(
        title=title,
        description=description,
        variant=NotificationVariant.DESTRUCTIVE,
    )
