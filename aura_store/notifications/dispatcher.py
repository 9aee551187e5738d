import logging
from typing import Optional, Protocol

from fastapi import Depends
from sqlmodel import Session

from aura_store.database import get_session
from aura_store.models.notifications import RecipientRole
from aura_store.notifications.channels import Channel
from aura_store.notifications.email_handlers import send_admin_email, send_user_email
from aura_store.notifications.events import OrderEvent
from aura_store.notifications.rules import NOTIFICATION_RULES
from aura_store.services.notification_service import create_notification

logger = logging.getLogger(__name__)


def dispatch_order_event(
    *,
    event: OrderEvent,
    order,
    user,
    session,
    extra: dict | None = None,
    notify_user: bool = True,
    notify_admin: bool = True,
) -> Optional[dict]:
    """
    Central notification dispatcher.

    Handles:
    - popup messages (returned to the caller for the API response)
    - user / admin in-app notifications
    - user / admin email
    """

    rules = NOTIFICATION_RULES.get(event, {})
    extra = extra or {}
    order_id = getattr(order, "id", None)

    response_popup = None

    if notify_user and rules.get(Channel.POPUP_USER):
        response_popup = {
            "type": "success",
            "message": extra.get("popup_message", "Success"),
        }

    if notify_user and rules.get(Channel.INAPP_USER) and user:
        create_notification(
            session=session,
            recipient_role=RecipientRole.customer,
            user=user,
            trigger_source=event.value,
            related_id=order_id,
            title=extra.get("user_title", "Order Update"),
            content=extra.get("user_content", ""),
        )

    if notify_admin and rules.get(Channel.INAPP_ADMIN):
        create_notification(
            session=session,
            recipient_role=RecipientRole.admin,
            user=None,
            trigger_source=event.value,
            related_id=order_id,
            title=extra.get("admin_title", "Order Update"),
            content=extra.get("admin_content", ""),
        )
    session.commit()

    if notify_user and rules.get(Channel.EMAIL_USER) and user and "user_template" in extra:
        try:
            send_user_email(
                template=extra["user_template"],
                subject=extra["user_subject"],
                user=user,
                order=order,
                first_name=user.first_name,
                **extra.get("context", {}),
            )
        except Exception as e:
            logger.error(f"User email for {event.value} on order {order_id} failed: {e}")

    if notify_admin and rules.get(Channel.EMAIL_ADMIN) and "admin_template" in extra:
        try:
            send_admin_email(
                template=extra["admin_template"],
                subject=extra["admin_subject"],
                order=order,
                customer=user,
                **extra.get("context", {}),
            )
        except Exception as e:
            logger.error(f"Admin email for {event.value} on order {order_id} failed: {e}")

    return response_popup


class Notifier(Protocol):
    def notify(self, event: OrderEvent, *, order, user, extra: dict | None = None) -> Optional[dict]:
        ...


class DispatchingNotifier:
    """Fans an order event out over the channels in NOTIFICATION_RULES."""

    def __init__(self, session: Session):
        self.session = session

    def notify(self, event: OrderEvent, *, order, user, extra: dict | None = None) -> Optional[dict]:
        return dispatch_order_event(
            event=event,
            order=order,
            user=user,
            session=self.session,
            extra=extra,
        )


def get_notifier(session: Session = Depends(get_session)) -> Notifier:
    return DispatchingNotifier(session)
