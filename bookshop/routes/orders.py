from typing import List, Optional

from fastapi import APIRouter, BackgroundTasks, Depends, status
from sqlmodel import Session

from bookshop.constants.order_status import OrderStatus
from bookshop.database import get_session
from bookshop.dependencies.admin import require_admin, require_staff
from bookshop.models.user import User
from bookshop.notifications import OrderEvent, dispatch_order_event
from bookshop.schemas.order_schemas import (
    AdminOrderList,
    CreateOrderRequest,
    FulfillOrderRequest,
    FulfillOrderResponse,
    OrderDetail,
    OrderRead,
    PlaceOrderResponse,
)
from bookshop.services import order_service
from bookshop.utils.pagination import DEFAULT_PAGE_SIZE
from bookshop.utils.token import get_current_user

router = APIRouter()


# -------- CUSTOMER --------

@router.post("", response_model=PlaceOrderResponse, status_code=status.HTTP_201_CREATED)
def place_order(
    data: CreateOrderRequest,
    background_tasks: BackgroundTasks,
    session: Session = Depends(get_session),
    current_user: User = Depends(get_current_user)
):
    order = order_service.create_order(session, current_user, data)

    background_tasks.add_task(dispatch_order_event, OrderEvent.ORDER_PLACED, order.id)

    discount_amount = float(order.discount_amount)
    return PlaceOrderResponse(
        order_id=order.id,
        order_number=order.order_number,
        message="Order placed successfully",
        claim_code=order.claim_code,
        subtotal=float(order.subtotal),
        discount_applied=discount_amount > 0,
        discount_amount=discount_amount,
        volume_discount=order.received_volume_discount,
        loyalty_discount=order.received_loyalty_discount,
        shipping_cost=float(order.shipping_cost),
        total_amount=float(order.total_amount),
    )


@router.get("", response_model=List[OrderRead])
def my_orders(
    session: Session = Depends(get_session),
    current_user: User = Depends(get_current_user)
):
    return [
        order_service.serialize_order(order)
        for order in order_service.list_orders(session, current_user)
    ]


# -------- ADMIN / STAFF --------
# static paths are declared before /{order_id}

@router.get("/admin", response_model=AdminOrderList)
def list_all_orders(
    status: Optional[OrderStatus] = None,
    page: int = 1,
    limit: int = DEFAULT_PAGE_SIZE,
    session: Session = Depends(get_session),
    staff: User = Depends(require_staff)
):
    return order_service.list_all_orders(session, status=status, page=page, limit=limit)


@router.post("/claim-code", response_model=FulfillOrderResponse)
def redeem_claim_code(
    data: FulfillOrderRequest,
    background_tasks: BackgroundTasks,
    session: Session = Depends(get_session),
    staff: User = Depends(require_staff)
):
    order, owner = order_service.process_claim_code(session, data.claim_code, staff)

    background_tasks.add_task(dispatch_order_event, OrderEvent.ORDER_COMPLETED, order.id)

    return FulfillOrderResponse(
        message="Order fulfilled",
        order=order_service.serialize_order(order),
        successful_orders=owner.successful_order_count,
        has_loyalty_discount=owner.has_loyalty_discount,
    )


@router.get("/purchased/{book_id}")
def purchased_book(
    book_id: int,
    session: Session = Depends(get_session),
    current_user: User = Depends(get_current_user)
):
    return {
        "book_id": book_id,
        "purchased": order_service.has_purchased(session, current_user.id, book_id),
    }


@router.get("/{order_id}", response_model=OrderDetail)
def order_detail(
    order_id: int,
    session: Session = Depends(get_session),
    current_user: User = Depends(get_current_user)
):
    order = order_service.get_order(session, current_user, order_id)
    return order_service.serialize_order_detail(session, order)


@router.put("/{order_id}/cancel", response_model=OrderRead)
def cancel_order(
    order_id: int,
    background_tasks: BackgroundTasks,
    session: Session = Depends(get_session),
    current_user: User = Depends(get_current_user)
):
    order = order_service.cancel_order(session, current_user, order_id)
    background_tasks.add_task(dispatch_order_event, OrderEvent.ORDER_CANCELLED, order.id)
    return order_service.serialize_order(order)


@router.put("/{order_id}/confirm", response_model=OrderRead)
def confirm_order(
    order_id: int,
    background_tasks: BackgroundTasks,
    session: Session = Depends(get_session),
    admin: User = Depends(require_admin)
):
    order = order_service.confirm_order(session, order_id, admin)
    background_tasks.add_task(dispatch_order_event, OrderEvent.ORDER_CONFIRMED, order.id)
    return order_service.serialize_order(order)


@router.put("/{order_id}/fulfill", response_model=FulfillOrderResponse)
def fulfill_order(
    order_id: int,
    data: FulfillOrderRequest,
    background_tasks: BackgroundTasks,
    session: Session = Depends(get_session),
    admin: User = Depends(require_admin)
):
    order, owner = order_service.fulfill_order(session, order_id, data.claim_code, admin)

    background_tasks.add_task(dispatch_order_event, OrderEvent.ORDER_COMPLETED, order.id)

    return FulfillOrderResponse(
        message="Order fulfilled",
        order=order_service.serialize_order(order),
        successful_orders=owner.successful_order_count,
        has_loyalty_discount=owner.has_loyalty_discount,
    )
