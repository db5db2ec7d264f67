"""Pydantic request/response schemas for the Ordering API.

These are external contracts (anti-corruption layer) — separate from
internal Protean commands.
"""

from datetime import datetime

from pydantic import BaseModel, Field


# ---------------------------------------------------------------------------
# Shared sub-models
# ---------------------------------------------------------------------------
class AddressSchema(BaseModel):
    first_name: str = Field(min_length=1, max_length=50)
    last_name: str = Field(min_length=1, max_length=50)
    company: str | None = None
    street: str = Field(min_length=5, max_length=200)
    apartment: str | None = None
    city: str = Field(min_length=1, max_length=50)
    state: str = Field(min_length=1, max_length=50)
    zip_code: str = Field(min_length=3, max_length=20)
    country: str = Field(min_length=2, max_length=50)
    phone: str
    email: str | None = None


class OrderLineSchema(BaseModel):
    product_id: str
    quantity: int = Field(ge=1)


# ---------------------------------------------------------------------------
# Order Request Schemas
# ---------------------------------------------------------------------------
class PlaceOrderRequest(BaseModel):
    items: list[OrderLineSchema] | None = None
    product_ids: list[str] | None = None
    shipping_address: AddressSchema
    billing_address: AddressSchema | None = None
    payment_method: str
    payment_status: str | None = None
    order_notes: str | None = None

    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "items": [{"product_id": "prod-001", "quantity": 2}],
                    "shipping_address": {
                        "first_name": "Ada",
                        "last_name": "Lovelace",
                        "street": "12 Analytical Row",
                        "city": "London",
                        "state": "Greater London",
                        "zip_code": "N1 9GU",
                        "country": "UK",
                        "phone": "+44 20 7946 0000",
                    },
                    "payment_method": "credit_card",
                }
            ]
        }
    }


class PlaceOrderFromCartRequest(BaseModel):
    shipping_address: AddressSchema
    billing_address: AddressSchema | None = None
    payment_method: str
    order_notes: str | None = None


class UpdateOrderStatusRequest(BaseModel):
    status: str
    note: str | None = None


class UpdatePaymentStatusRequest(BaseModel):
    payment_status: str
    transaction_id: str | None = None


class AddTrackingNumberRequest(BaseModel):
    tracking_number: str
    carrier: str | None = None


class CancelOrderRequest(BaseModel):
    reason: str | None = None


# ---------------------------------------------------------------------------
# Cart Request Schemas
# ---------------------------------------------------------------------------
class AddToCartRequest(BaseModel):
    product_id: str
    quantity: int = Field(ge=1, default=1)


class UpdateCartQuantityRequest(BaseModel):
    quantity: int  # zero or less removes the line


# ---------------------------------------------------------------------------
# Product Request Schemas
# ---------------------------------------------------------------------------
class RegisterProductRequest(BaseModel):
    product_id: str | None = None
    name: str = Field(min_length=1, max_length=255)
    price: float = Field(ge=0)
    discount_price: float | None = Field(default=None, ge=0)
    stock: int = Field(ge=0, default=0)
    images: list[str] = Field(default_factory=list)
    category: str | None = None
    brand: str | None = None
    sku: str | None = None
    is_active: bool = True


class SetStockRequest(BaseModel):
    stock: int = Field(ge=0)


class ChangePriceRequest(BaseModel):
    price: float = Field(ge=0)
    discount_price: float | None = Field(default=None, ge=0)


# ---------------------------------------------------------------------------
# Response Schemas
# ---------------------------------------------------------------------------
class OrderIdResponse(BaseModel):
    order_id: str


class ProductIdResponse(BaseModel):
    product_id: str


class StatusResponse(BaseModel):
    status: str = "ok"


class OrderItemResponse(BaseModel):
    product_id: str
    product_name: str
    product_image: str | None = None
    price: float
    discount_price: float | None = None
    final_price: float
    quantity: int
    item_total: float
    sku: str | None = None
    category: str | None = None


class OrderSummaryResponse(BaseModel):
    subtotal: float
    shipping: float
    tax: float
    discount: float
    total_amount: float
    total_items: int
    item_count: int


class StatusHistoryResponse(BaseModel):
    status: str
    timestamp: datetime
    note: str | None = None
    updated_by: str | None = None
    sequence: int


class OrderResponse(BaseModel):
    id: str
    order_number: str
    customer_id: str
    items: list[OrderItemResponse]
    summary: OrderSummaryResponse
    shipping_address: AddressSchema
    billing_address: AddressSchema | None = None
    payment_method: str
    payment_status: str
    order_status: str
    order_notes: str | None = None
    tracking_number: str | None = None
    carrier: str | None = None
    transaction_id: str | None = None
    cancellation_reason: str | None = None
    status_history: list[StatusHistoryResponse]
    created_at: datetime | None = None
    updated_at: datetime | None = None
    paid_at: datetime | None = None
    shipped_at: datetime | None = None
    delivered_at: datetime | None = None
    cancelled_at: datetime | None = None

    @classmethod
    def from_order(cls, order) -> "OrderResponse":
        def address(value):
            if value is None:
                return None
            return AddressSchema(**{field: getattr(value, field) for field in AddressSchema.model_fields})

        summary = order.summary
        return cls(
            id=str(order.id),
            order_number=order.order_number,
            customer_id=str(order.customer_id),
            items=[OrderItemResponse(**item.to_dict()) for item in order.items],
            summary=OrderSummaryResponse(
                subtotal=summary.subtotal,
                shipping=summary.shipping,
                tax=summary.tax,
                discount=summary.discount,
                total_amount=summary.total_amount,
                total_items=summary.total_items,
                item_count=summary.item_count,
            ),
            shipping_address=address(order.shipping_address),
            billing_address=address(order.billing_address),
            payment_method=order.payment_method,
            payment_status=order.payment_status,
            order_status=order.order_status,
            order_notes=order.order_notes,
            tracking_number=order.tracking_number,
            carrier=order.carrier,
            transaction_id=order.transaction_id,
            cancellation_reason=order.cancellation_reason,
            status_history=[
                StatusHistoryResponse(
                    status=entry.status,
                    timestamp=entry.timestamp,
                    note=entry.note,
                    updated_by=entry.updated_by,
                    sequence=entry.sequence,
                )
                for entry in order.timeline
            ],
            created_at=order.created_at,
            updated_at=order.updated_at,
            paid_at=order.paid_at,
            shipped_at=order.shipped_at,
            delivered_at=order.delivered_at,
            cancelled_at=order.cancelled_at,
        )


class OrderListResponse(BaseModel):
    orders: list[OrderResponse]
    count: int


class OrderStatsResponse(BaseModel):
    total_orders: int
    total_revenue: float
    status_counts: dict[str, int]
    payment_counts: dict[str, int]


class CartProductResponse(BaseModel):
    id: str
    name: str
    price: float
    discount_price: float | None = None
    images: list[str]
    stock: int
    category: str | None = None
    brand: str | None = None


class CartLineResponse(BaseModel):
    product_id: str
    quantity: int
    added_at: datetime | None = None
    product: CartProductResponse
    item_total: float


class CartSummaryResponse(BaseModel):
    total_items: int
    total_amount: float
    item_count: int


class CartResponse(BaseModel):
    cart_id: str | None = None
    customer_id: str
    items: list[CartLineResponse]
    summary: CartSummaryResponse


class ProductResponse(BaseModel):
    id: str
    name: str
    price: float
    discount_price: float | None = None
    effective_price: float
    is_active: bool
    stock: int
    images: list[str]
    category: str | None = None
    brand: str | None = None
    sku: str | None = None

    @classmethod
    def from_product(cls, product) -> "ProductResponse":
        return cls(
            id=str(product.id),
            name=product.name,
            price=product.price,
            discount_price=product.discount_price,
            effective_price=product.effective_price,
            is_active=product.is_active,
            stock=product.stock,
            images=product.image_urls,
            category=product.category,
            brand=product.brand,
            sku=product.sku,
        )
