import logging
import secrets
from decimal import Decimal
from typing import Dict, List, Optional, Tuple

from sqlmodel import Session, select

from bookshop.config import settings
from bookshop.constants.order_status import OrderStatus, can_transition
from bookshop.exceptions import (
    BusinessRuleError,
    InvalidTransitionError,
    NotFoundError,
    UnauthorizedError,
)
from bookshop.models.book import Book
from bookshop.models.order import Order
from bookshop.models.order_item import OrderItem
from bookshop.models.user import User, UserRole
from bookshop.schemas.order_schemas import (
    AdminOrderList,
    AdminOrderRow,
    CreateOrderRequest,
    OrderDetail,
    OrderLine,
    OrderRead,
    OrderTimelineEntry,
)
from bookshop.services.cart_service import remove_books_from_cart
from bookshop.services.inventory_service import reserve_stock, restock_order_items
from bookshop.services.order_event_service import log_order_event, order_timeline
from bookshop.services.pricing import compute_order_discount, effective_unit_price, to_money
from bookshop.utils.clock import utcnow
from bookshop.utils.pagination import paginate

logger = logging.getLogger(__name__)

# no 0/O or 1/I so codes can be read out at the counter
CLAIM_CODE_ALPHABET = "ABCDEFGHJKLMNPQRSTUVWXYZ23456789"


# ---------- identifiers ----------

def generate_order_number(session: Session) -> str:
    while True:
        candidate = f"ORD{utcnow():%Y%m%d%H%M%S}{secrets.randbelow(1000):03d}"
        taken = session.exec(
            select(Order.id).where(Order.order_number == candidate)
        ).first()
        if taken is None:
            return candidate


def generate_claim_code(session: Session) -> str:
    while True:
        candidate = "".join(
            secrets.choice(CLAIM_CODE_ALPHABET)
            for _ in range(settings.CLAIM_CODE_LENGTH)
        )
        taken = session.exec(
            select(Order.id).where(Order.claim_code == candidate)
        ).first()
        if taken is None:
            return candidate


def _normalize_code(code: str) -> str:
    return (code or "").strip().upper()


def _actor_label(user: User) -> str:
    return f"{UserRole(user.role).value}:{user.id}"


# ---------- serializers ----------

def serialize_order(order: Order) -> OrderRead:
    return OrderRead(
        id=order.id,
        order_number=order.order_number,
        status=OrderStatus(order.status).value,
        subtotal=float(order.subtotal),
        discount_amount=float(order.discount_amount),
        shipping_cost=float(order.shipping_cost),
        total_amount=float(order.total_amount),
        received_volume_discount=order.received_volume_discount,
        received_loyalty_discount=order.received_loyalty_discount,
        claim_code=order.claim_code,
        shipping_address=order.shipping_address,
        shipping_city=order.shipping_city,
        shipping_state=order.shipping_state,
        shipping_zip_code=order.shipping_zip_code,
        created_at=order.created_at,
        cancelled_at=order.cancelled_at,
        items=[
            OrderLine(
                book_id=item.book_id,
                title=item.book_title,
                quantity=item.quantity,
                unit_price=float(item.unit_price),
                unit_discount=float(item.unit_discount) if item.unit_discount is not None else None,
                total=float(item.total_price),
            )
            for item in order.items
        ],
    )


def serialize_order_detail(session: Session, order: Order) -> OrderDetail:
    timeline = [
        OrderTimelineEntry(
            event_type=event.event_type,
            label=event.label,
            created_by=event.created_by,
            created_at=event.created_at,
        )
        for event in order_timeline(session, order.id)
    ]
    return OrderDetail(**serialize_order(order).model_dump(), timeline=timeline)


# ---------- checkout ----------

def _merge_lines(data: CreateOrderRequest) -> Dict[int, int]:
    merged: Dict[int, int] = {}
    for line in data.items:
        merged[line.book_id] = merged.get(line.book_id, 0) + line.quantity
    return merged


def create_order(session: Session, user: Optional[User], data: CreateOrderRequest) -> Order:
    """
    Turn the requested lines into a pending order.

    Prices are captured at the effective price of this instant and stock is
    taken line by line with a conditional UPDATE. Any failure rolls back the
    whole order, including stock already taken for earlier lines.
    """
    if user is None:
        raise UnauthorizedError("Authentication required")

    if not data.items:
        raise BusinessRuleError("Order must contain at least one item")

    lines = _merge_lines(data)
    now = utcnow()

    try:
        order_items: List[OrderItem] = []
        subtotal = Decimal("0")
        item_count = 0

        for book_id, quantity in lines.items():
            book = session.get(Book, book_id)
            if not book:
                raise NotFoundError(f"Book {book_id} not found")

            list_price = to_money(book.price)
            unit_price = effective_unit_price(book, now)
            line_total = to_money(unit_price * quantity)

            reserve_stock(session, book, quantity)

            order_items.append(
                OrderItem(
                    book_id=book.id,
                    book_title=book.title,
                    quantity=quantity,
                    unit_price=unit_price,
                    unit_discount=(list_price - unit_price) if unit_price < list_price else None,
                    total_price=line_total,
                )
            )
            subtotal += line_total
            item_count += quantity

        subtotal = to_money(subtotal)
        discount = compute_order_discount(subtotal, item_count, user.has_loyalty_discount)
        shipping = to_money(settings.SHIPPING_COST)

        order = Order(
            user_id=user.id,
            order_number=generate_order_number(session),
            claim_code=generate_claim_code(session),
            subtotal=subtotal,
            discount_amount=discount.amount,
            shipping_cost=shipping,
            total_amount=to_money(subtotal - discount.amount + shipping),
            received_volume_discount=discount.volume_applied,
            received_loyalty_discount=discount.loyalty_applied,
            status=OrderStatus.pending,
            shipping_address=data.shipping_address,
            shipping_city=data.shipping_city,
            shipping_state=data.shipping_state,
            shipping_zip_code=data.shipping_zip_code,
            created_at=now,
        )
        session.add(order)
        session.flush()

        for item in order_items:
            item.order_id = order.id
            session.add(item)

        log_order_event(
            session,
            order.id,
            "order_placed",
            f"Order {order.order_number} placed",
            created_by=_actor_label(user),
            meta={"items": item_count, "total": str(order.total_amount)},
        )

        remove_books_from_cart(session, user.id, lines.keys())
        session.commit()
    except Exception:
        session.rollback()
        raise

    session.refresh(order)
    logger.info(
        f"Order {order.order_number} placed by user {user.id}: "
        f"{item_count} items, total {order.total_amount}"
    )
    return order


# ---------- state changes ----------

def _get_owned_order(session: Session, user: User, order_id: int) -> Order:
    order = session.get(Order, order_id)
    if not order or order.user_id != user.id:
        raise NotFoundError("Order not found")
    return order


def cancel_order(session: Session, user: User, order_id: int) -> Order:
    order = _get_owned_order(session, user, order_id)

    if not can_transition(order.status, OrderStatus.cancelled):
        raise InvalidTransitionError(
            f"Cannot cancel order in {OrderStatus(order.status).value} status"
        )

    now = utcnow()
    order.status = OrderStatus.cancelled
    order.cancelled_at = now
    order.updated_at = now
    session.add(order)

    restock_order_items(session, order.id)
    log_order_event(
        session,
        order.id,
        "order_cancelled",
        "Order cancelled by customer",
        created_by=_actor_label(user),
    )
    session.commit()
    session.refresh(order)

    logger.info(f"Order {order.order_number} cancelled by user {user.id}")
    return order


def confirm_order(session: Session, order_id: int, actor: User) -> Order:
    order = session.get(Order, order_id)
    if not order:
        raise NotFoundError("Order not found")

    if not can_transition(order.status, OrderStatus.confirmed):
        raise InvalidTransitionError(
            f"Cannot confirm order in {OrderStatus(order.status).value} status"
        )

    order.status = OrderStatus.confirmed
    order.updated_at = utcnow()
    session.add(order)
    log_order_event(
        session,
        order.id,
        "order_confirmed",
        "Order confirmed",
        created_by=_actor_label(actor),
    )
    session.commit()
    session.refresh(order)

    logger.info(f"Order {order.order_number} confirmed by user {actor.id}")
    return order


def _complete_with_claim_code(
    session: Session, order: Order, claim_code: str, actor: User
) -> Tuple[Order, User]:
    if order.is_claim_code_used:
        raise BusinessRuleError("Claim code has already been used")

    if not can_transition(order.status, OrderStatus.completed):
        raise InvalidTransitionError(
            f"Cannot fulfil order in {OrderStatus(order.status).value} status"
        )

    if not secrets.compare_digest(
        _normalize_code(claim_code).encode(), order.claim_code.encode()
    ):
        raise BusinessRuleError("Invalid claim code")

    now = utcnow()
    order.status = OrderStatus.completed
    order.is_claim_code_used = True
    order.claim_code_used_at = now
    order.claim_code_used_by_id = actor.id
    order.updated_at = now
    session.add(order)

    owner = session.get(User, order.user_id)
    owner.successful_order_count += 1
    session.add(owner)

    log_order_event(
        session,
        order.id,
        "order_completed",
        "Order picked up with claim code",
        created_by=_actor_label(actor),
    )
    session.commit()
    session.refresh(order)
    session.refresh(owner)

    logger.info(
        f"Order {order.order_number} fulfilled by user {actor.id}; "
        f"owner {owner.id} now has {owner.successful_order_count} completed orders"
    )
    return order, owner


def fulfill_order(
    session: Session, order_id: int, claim_code: str, actor: User
) -> Tuple[Order, User]:
    order = session.get(Order, order_id)
    if not order:
        raise NotFoundError("Order not found")
    return _complete_with_claim_code(session, order, claim_code, actor)


def process_claim_code(session: Session, claim_code: str, actor: User) -> Tuple[Order, User]:
    """Fulfil whichever order the code belongs to."""
    code = _normalize_code(claim_code)
    order = session.exec(select(Order).where(Order.claim_code == code)).first()
    if not order:
        raise BusinessRuleError("Invalid or already used claim code")
    return _complete_with_claim_code(session, order, code, actor)


# ---------- queries ----------

def list_orders(session: Session, user: User) -> List[Order]:
    return session.exec(
        select(Order)
        .where(Order.user_id == user.id)
        .order_by(Order.created_at.desc(), Order.id.desc())
    ).all()


def get_order(session: Session, user: User, order_id: int) -> Order:
    return _get_owned_order(session, user, order_id)


def has_purchased(session: Session, user_id: int, book_id: int) -> bool:
    match = session.exec(
        select(OrderItem.id)
        .join(Order, OrderItem.order_id == Order.id)
        .where(
            Order.user_id == user_id,
            OrderItem.book_id == book_id,
            Order.status != OrderStatus.cancelled,
        )
        .limit(1)
    ).first()
    return match is not None


def list_all_orders(
    session: Session,
    status: Optional[OrderStatus] = None,
    page: int = 1,
    limit: int = 10,
) -> AdminOrderList:
    query = select(Order, User.email).join(User, Order.user_id == User.id)

    if status:
        query = query.where(Order.status == status)

    query = query.order_by(Order.created_at.desc(), Order.id.desc())
    data = paginate(session=session, query=query, page=page, limit=limit)

    return AdminOrderList(
        total_items=data["total_items"],
        total_pages=data["total_pages"],
        current_page=data["current_page"],
        results=[
            AdminOrderRow(
                order_id=order.id,
                order_number=order.order_number,
                customer_email=email,
                status=OrderStatus(order.status).value,
                total_amount=float(order.total_amount),
                created_at=order.created_at,
            )
            for order, email in data["results"]
        ],
    )
