import logging
from typing import Optional

from sqlmodel import Session

from bookshop.database import engine
from bookshop.models.notifications import RecipientRole
from bookshop.models.order import Order
from bookshop.models.user import User
from bookshop.notifications.channels import Channel
from bookshop.notifications.email_handlers import send_admin_email, send_user_email
from bookshop.notifications.events import OrderEvent
from bookshop.notifications.rules import EVENT_TITLES, NOTIFICATION_RULES
from bookshop.services.notification_service import create_notification

logger = logging.getLogger(__name__)

USER_TEMPLATES = {
    OrderEvent.ORDER_PLACED: "user_emails/order_placed.html",
}
ADMIN_TEMPLATES = {
    OrderEvent.ORDER_PLACED: "admin_emails/new_order.html",
}
DEFAULT_USER_TEMPLATE = "user_emails/order_status.html"
DEFAULT_ADMIN_TEMPLATE = "admin_emails/order_status.html"


def dispatch_order_event(
    event: OrderEvent,
    order_id: int,
    extra: Optional[dict] = None,
):
    """
    Central notification dispatcher, run as a background task.

    Opens its own session since the request session is closed by the time
    this runs. Every channel is attempted; a failing channel is logged and
    the others still go out.
    """
    rules = NOTIFICATION_RULES.get(event, {})
    extra = extra or {}
    title = EVENT_TITLES.get(event, "Order update")

    with Session(engine) as session:
        order = session.get(Order, order_id)
        if order is None:
            logger.warning(f"Notification {event.value} skipped: order {order_id} not found")
            return

        user = session.get(User, order.user_id)
        ctx = {"order": order, "items": list(order.items), "event": event.value, "title": title, **extra}
        subject = f"{title}: #{order.order_number}"

        # -------------------------
        # ADMIN IN-APP NOTIFICATION
        # -------------------------
        if rules.get(Channel.INAPP_ADMIN):
            try:
                create_notification(
                    session=session,
                    recipient_role=RecipientRole.admin,
                    user_id=order.user_id,
                    trigger_source=event.value,
                    related_id=order.id,
                    title=f"{title} #{order.order_number}",
                    content=extra.get(
                        "admin_content",
                        f"Order {order.order_number} ({order.total_amount}) is now {order.status.value}",
                    ),
                )
                session.commit()
            except Exception:
                session.rollback()
                logger.exception(f"In-app admin notification failed for order {order_id}")

        # -------------------------
        # USER EMAIL
        # -------------------------
        if rules.get(Channel.EMAIL_USER) and user:
            try:
                send_user_email(
                    template=USER_TEMPLATES.get(event, DEFAULT_USER_TEMPLATE),
                    subject=subject,
                    user=user,
                    **ctx,
                )
            except Exception:
                logger.exception(f"User email failed for order {order_id}")

        # -------------------------
        # ADMIN EMAIL
        # -------------------------
        if rules.get(Channel.EMAIL_ADMIN):
            try:
                send_admin_email(
                    template=ADMIN_TEMPLATES.get(event, DEFAULT_ADMIN_TEMPLATE),
                    subject=subject,
                    customer=user,
                    **ctx,
                )
            except Exception:
                logger.exception(f"Admin email failed for order {order_id}")
