# aura_store/services/order_event_service.py

from typing import List, Optional
from sqlmodel import Session, select
from aura_store.models.order_event import OrderTimelineEntry


def log_order_event(
    session: Session,
    order_id: int,
    status: str,
    title: str,
    description: str = "",
    created_by: str = "system",
    meta: Optional[dict] = None,
) -> OrderTimelineEntry:
    """
    Append-only event log for the order timeline
    """

    entry = OrderTimelineEntry(
        order_id=order_id,
        status=status,
        title=title,
        description=description,
        meta=meta,
        created_by=created_by,
    )

    session.add(entry)
    return entry


def get_timeline(session: Session, order_id: int) -> List[OrderTimelineEntry]:
    # latest first
    return session.exec(
        select(OrderTimelineEntry)
        .where(OrderTimelineEntry.order_id == order_id)
        .order_by(OrderTimelineEntry.created_at.desc(), OrderTimelineEntry.id.desc())
    ).all()
