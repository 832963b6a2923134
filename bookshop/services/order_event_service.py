from typing import List, Optional

from sqlmodel import Session, select

from bookshop.models.order_event import OrderEventLog
from bookshop.utils.clock import utcnow


def log_order_event(
    session: Session,
    order_id: int,
    event_type: str,
    label: str,
    created_by: str = "system",
    meta: Optional[dict] = None,
):
    """
    Append-only event log for order timeline
    """

    event = OrderEventLog(
        order_id=order_id,
        event_type=event_type,
        label=label,
        meta=meta,
        created_by=created_by,
        created_at=utcnow(),
    )

    session.add(event)
    return event


def order_timeline(session: Session, order_id: int) -> List[OrderEventLog]:
    return session.exec(
        select(OrderEventLog)
        .where(OrderEventLog.order_id == order_id)
        .order_by(OrderEventLog.created_at)
    ).all()
