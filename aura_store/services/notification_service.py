from typing import Optional

from sqlmodel import Session
from aura_store.models.notifications import (
    Notification,
    RecipientRole,
    NotificationChannel,
    NotificationStatus,
)
from aura_store.models.user import User

def create_notification(
    *,
    session: Session,
    recipient_role: RecipientRole,
    user: User | None,
    trigger_source: str,
    related_id: Optional[int],
    title: str,
    content: str,
    channel: NotificationChannel = NotificationChannel.system,
):
    notification = Notification(
        recipient_role=recipient_role,
        user_id=user.id if user else None,
        trigger_source=trigger_source,
        related_id=related_id,
        title=title,
        content=content,
        channel=channel,
        status=NotificationStatus.sent,
    )
    session.add(notification)
    session.flush()
    return notification
