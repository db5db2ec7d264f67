"""FastAPI routes for the Ordering domain — orders, carts and product stock.

The caller is identified by the ``X-User-Id`` and ``X-User-Role`` headers set
by the authenticating gateway. Writes that touch stock go through
``dispatch``; cart edits are processed directly.
"""

import json

from fastapi import APIRouter, Depends, Header, HTTPException, Query
from protean.utils.globals import current_domain

from ordering.access import CUSTOMER, Caller
from ordering.api.schemas import (
    AddTrackingNumberRequest,
    AddToCartRequest,
    CancelOrderRequest,
    CartResponse,
    ChangePriceRequest,
    OrderIdResponse,
    OrderListResponse,
    OrderResponse,
    OrderStatsResponse,
    PlaceOrderFromCartRequest,
    PlaceOrderRequest,
    ProductIdResponse,
    ProductResponse,
    RegisterProductRequest,
    SetStockRequest,
    StatusResponse,
    UpdateCartQuantityRequest,
    UpdateOrderStatusRequest,
    UpdatePaymentStatusRequest,
)
from ordering.cart.items import AddToCart, ClearCart, RemoveFromCart, UpdateCartQuantity
from ordering.cart.view import cart_contents
from ordering.errors import OrderNotFound
from ordering.order.cancellation import CancelOrder
from ordering.order.creation import PlaceOrder, PlaceOrderFromCart
from ordering.order.payment import UpdatePaymentStatus
from ordering.order.queries import get_order, list_all_orders, list_customer_orders, order_stats
from ordering.order.status import UpdateOrderStatus
from ordering.order.tracking import AddTrackingNumber
from ordering.stock.management import (
    ActivateProduct,
    ChangePrice,
    DeactivateProduct,
    RegisterProduct,
    SetStock,
)
from ordering.stock.product import Product
from ordering.utils.dispatch import dispatch
from ordering.utils.logging import add_context


# ---------------------------------------------------------------------------
# Caller identity
# ---------------------------------------------------------------------------
async def current_caller(
    x_user_id: str | None = Header(default=None),
    x_user_role: str = Header(default=CUSTOMER),
) -> Caller:
    if not x_user_id:
        raise HTTPException(status_code=401, detail="Authentication required")
    add_context(user_id=x_user_id, role=x_user_role)
    return Caller(user_id=x_user_id, role=x_user_role)


async def admin_caller(caller: Caller = Depends(current_caller)) -> Caller:
    caller.require_admin()
    return caller


def _order_for(caller: Caller, order_id: str):
    order = get_order(order_id)
    if order is None:
        raise OrderNotFound(order_id)
    caller.require_access(order)
    return order


def _order_list(orders) -> OrderListResponse:
    return OrderListResponse(orders=[OrderResponse.from_order(order) for order in orders], count=len(orders))


# ---------------------------------------------------------------------------
# Order Router
# ---------------------------------------------------------------------------
order_router = APIRouter(prefix="/orders", tags=["orders"])


@order_router.post("", status_code=201, response_model=OrderIdResponse)
async def place_order(body: PlaceOrderRequest, caller: Caller = Depends(current_caller)) -> OrderIdResponse:
    command = PlaceOrder(
        customer_id=caller.user_id,
        items=json.dumps([line.model_dump() for line in body.items]) if body.items else None,
        product_ids=json.dumps(body.product_ids) if body.product_ids else None,
        shipping_address=json.dumps(body.shipping_address.model_dump()),
        billing_address=json.dumps(body.billing_address.model_dump()) if body.billing_address else None,
        payment_method=body.payment_method,
        payment_status=body.payment_status,
        order_notes=body.order_notes,
    )
    return OrderIdResponse(order_id=dispatch(command))


@order_router.post("/from-cart", status_code=201, response_model=OrderIdResponse)
async def place_order_from_cart(
    body: PlaceOrderFromCartRequest, caller: Caller = Depends(current_caller)
) -> OrderIdResponse:
    command = PlaceOrderFromCart(
        customer_id=caller.user_id,
        shipping_address=json.dumps(body.shipping_address.model_dump()),
        billing_address=json.dumps(body.billing_address.model_dump()) if body.billing_address else None,
        payment_method=body.payment_method,
        order_notes=body.order_notes,
    )
    return OrderIdResponse(order_id=dispatch(command))


@order_router.get("/mine", response_model=OrderListResponse)
async def my_orders(
    status: str | None = None,
    payment_status: str | None = None,
    limit: int | None = Query(default=None, ge=1),
    caller: Caller = Depends(current_caller),
) -> OrderListResponse:
    return _order_list(list_customer_orders(caller.user_id, status=status, payment_status=payment_status, limit=limit))


@order_router.get("", response_model=OrderListResponse)
async def all_orders(
    status: str | None = None,
    payment_status: str | None = None,
    limit: int | None = Query(default=None, ge=1),
    caller: Caller = Depends(admin_caller),  # noqa: ARG001
) -> OrderListResponse:
    return _order_list(list_all_orders(status=status, payment_status=payment_status, limit=limit))


@order_router.get("/stats", response_model=OrderStatsResponse)
async def stats(caller: Caller = Depends(admin_caller)) -> OrderStatsResponse:  # noqa: ARG001
    return OrderStatsResponse(**order_stats())


@order_router.get("/{order_id}", response_model=OrderResponse)
async def order_detail(order_id: str, caller: Caller = Depends(current_caller)) -> OrderResponse:
    return OrderResponse.from_order(_order_for(caller, order_id))


@order_router.patch("/{order_id}/status", response_model=OrderResponse)
async def update_order_status(
    order_id: str, body: UpdateOrderStatusRequest, caller: Caller = Depends(admin_caller)
) -> OrderResponse:
    dispatch(
        UpdateOrderStatus(
            order_id=order_id,
            status=body.status,
            note=body.note,
            updated_by=caller.user_id,
        )
    )
    return OrderResponse.from_order(get_order(order_id))


@order_router.patch("/{order_id}/payment", response_model=OrderResponse)
async def update_payment_status(
    order_id: str,
    body: UpdatePaymentStatusRequest,
    caller: Caller = Depends(admin_caller),  # noqa: ARG001
) -> OrderResponse:
    dispatch(
        UpdatePaymentStatus(
            order_id=order_id,
            payment_status=body.payment_status,
            transaction_id=body.transaction_id,
        )
    )
    return OrderResponse.from_order(get_order(order_id))


@order_router.patch("/{order_id}/tracking", response_model=OrderResponse)
async def add_tracking_number(
    order_id: str,
    body: AddTrackingNumberRequest,
    caller: Caller = Depends(admin_caller),  # noqa: ARG001
) -> OrderResponse:
    dispatch(
        AddTrackingNumber(
            order_id=order_id,
            tracking_number=body.tracking_number,
            carrier=body.carrier,
        )
    )
    return OrderResponse.from_order(get_order(order_id))


@order_router.patch("/{order_id}/cancel", response_model=OrderResponse)
async def cancel_order(
    order_id: str, body: CancelOrderRequest | None = None, caller: Caller = Depends(current_caller)
) -> OrderResponse:
    dispatch(
        CancelOrder(
            order_id=order_id,
            reason=body.reason if body else None,
            cancelled_by=caller.user_id,
            actor_role=caller.role,
        )
    )
    return OrderResponse.from_order(get_order(order_id))


# ---------------------------------------------------------------------------
# Cart Router
# ---------------------------------------------------------------------------
cart_router = APIRouter(prefix="/carts", tags=["carts"])


@cart_router.get("/mine", response_model=CartResponse)
async def my_cart(caller: Caller = Depends(current_caller)) -> CartResponse:
    return CartResponse(**cart_contents(caller.user_id))


@cart_router.post("/mine/items", status_code=201, response_model=CartResponse)
async def add_cart_item(body: AddToCartRequest, caller: Caller = Depends(current_caller)) -> CartResponse:
    command = AddToCart(
        customer_id=caller.user_id,
        product_id=body.product_id,
        quantity=body.quantity,
    )
    current_domain.process(command, asynchronous=False)
    return CartResponse(**cart_contents(caller.user_id))


@cart_router.put("/mine/items/{product_id}", response_model=CartResponse)
async def update_cart_item(
    product_id: str, body: UpdateCartQuantityRequest, caller: Caller = Depends(current_caller)
) -> CartResponse:
    command = UpdateCartQuantity(
        customer_id=caller.user_id,
        product_id=product_id,
        quantity=body.quantity,
    )
    current_domain.process(command, asynchronous=False)
    return CartResponse(**cart_contents(caller.user_id))


@cart_router.delete("/mine/items/{product_id}", response_model=StatusResponse)
async def remove_cart_item(product_id: str, caller: Caller = Depends(current_caller)) -> StatusResponse:
    current_domain.process(
        RemoveFromCart(customer_id=caller.user_id, product_id=product_id),
        asynchronous=False,
    )
    return StatusResponse()


@cart_router.delete("/mine", response_model=StatusResponse)
async def clear_cart(caller: Caller = Depends(current_caller)) -> StatusResponse:
    current_domain.process(ClearCart(customer_id=caller.user_id), asynchronous=False)
    return StatusResponse()


# ---------------------------------------------------------------------------
# Product Router
# ---------------------------------------------------------------------------
product_router = APIRouter(prefix="/products", tags=["products"])


@product_router.post("", status_code=201, response_model=ProductIdResponse)
async def register_product(
    body: RegisterProductRequest,
    caller: Caller = Depends(admin_caller),  # noqa: ARG001
) -> ProductIdResponse:
    command = RegisterProduct(
        product_id=body.product_id,
        name=body.name,
        price=body.price,
        discount_price=body.discount_price,
        stock=body.stock,
        images=json.dumps(body.images),
        category=body.category,
        brand=body.brand,
        sku=body.sku,
        is_active=body.is_active,
    )
    return ProductIdResponse(product_id=dispatch(command))


@product_router.get("/{product_id}", response_model=ProductResponse)
async def product_detail(product_id: str) -> ProductResponse:
    product = current_domain.repository_for(Product).fetch(product_id)
    return ProductResponse.from_product(product)


@product_router.put("/{product_id}/stock", response_model=StatusResponse)
async def set_stock(
    product_id: str,
    body: SetStockRequest,
    caller: Caller = Depends(admin_caller),  # noqa: ARG001
) -> StatusResponse:
    dispatch(SetStock(product_id=product_id, stock=body.stock))
    return StatusResponse()


@product_router.put("/{product_id}/price", response_model=StatusResponse)
async def change_price(
    product_id: str,
    body: ChangePriceRequest,
    caller: Caller = Depends(admin_caller),  # noqa: ARG001
) -> StatusResponse:
    dispatch(ChangePrice(product_id=product_id, price=body.price, discount_price=body.discount_price))
    return StatusResponse()


@product_router.put("/{product_id}/deactivate", response_model=StatusResponse)
async def deactivate_product(
    product_id: str,
    caller: Caller = Depends(admin_caller),  # noqa: ARG001
) -> StatusResponse:
    dispatch(DeactivateProduct(product_id=product_id))
    return StatusResponse()


@product_router.put("/{product_id}/activate", response_model=StatusResponse)
async def activate_product(
    product_id: str,
    caller: Caller = Depends(admin_caller),  # noqa: ARG001
) -> StatusResponse:
    dispatch(ActivateProduct(product_id=product_id))
    return StatusResponse()
