"""Pydantic request/response schemas for the Ordering API.

These are external contracts (anti-corruption layer) — separate from
internal Protean commands.
"""

from typing import Annotated, Literal

from pydantic import AfterValidator, BaseModel, Field, StringConstraints

NonEmptyStr = Annotated[str, StringConstraints(strip_whitespace=True, min_length=1)]
Cents = Annotated[float, Field(ge=0), AfterValidator(lambda value: round(value, 2))]


# ---------------------------------------------------------------------------
# Shared sub-models
# ---------------------------------------------------------------------------
class AddressSchema(BaseModel):
    first_name: NonEmptyStr
    last_name: NonEmptyStr
    street: NonEmptyStr
    city: NonEmptyStr
    state: NonEmptyStr
    zip_code: NonEmptyStr
    country: NonEmptyStr
    phone: NonEmptyStr


class OrderItemSchema(BaseModel):
    product_id: NonEmptyStr
    quantity: int = Field(ge=1)


# ---------------------------------------------------------------------------
# Product Request Schemas
# ---------------------------------------------------------------------------
class RegisterProductRequest(BaseModel):
    name: NonEmptyStr
    sku: str | None = None
    price: float = Field(ge=0)
    stock: int = Field(ge=0, default=0)


class AdjustStockRequest(BaseModel):
    stock: int = Field(ge=0)
    operation: Literal["set", "add", "subtract"] = "set"


class UpdatePriceRequest(BaseModel):
    price: float = Field(ge=0)


# ---------------------------------------------------------------------------
# Cart Request Schemas
# ---------------------------------------------------------------------------
class AddToCartRequest(BaseModel):
    product_id: NonEmptyStr
    quantity: int = Field(ge=1, default=1)


class UpdateCartItemRequest(BaseModel):
    quantity: int


# ---------------------------------------------------------------------------
# Order Request Schemas
# ---------------------------------------------------------------------------
class CreateOrderRequest(BaseModel):
    items: list[OrderItemSchema] = Field(min_length=1)
    shipping_address: AddressSchema
    billing_address: AddressSchema | None = None
    notes: str | None = None
    tax_rate: float | None = Field(default=None, ge=0, le=1)
    shipping_cost: Cents | None = None

    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "items": [{"product_id": "prod-001", "quantity": 2}],
                    "shipping_address": {
                        "first_name": "Ada",
                        "last_name": "Lovelace",
                        "street": "12 Analytical Way",
                        "city": "London",
                        "state": "LDN",
                        "zip_code": "N1 9GU",
                        "country": "UK",
                        "phone": "+44 20 7946 0000",
                    },
                }
            ]
        }
    }


class CreateOrderFromCartRequest(BaseModel):
    shipping_address: AddressSchema
    billing_address: AddressSchema | None = None
    notes: str | None = None
    tax_rate: float | None = Field(default=None, ge=0, le=1)
    shipping_cost: Cents | None = None


class UpdateOrderStatusRequest(BaseModel):
    status: Literal["pending", "confirmed", "processing", "shipped", "delivered", "cancelled"]
    tracking_number: str | None = None
    reason: str | None = Field(default=None, max_length=500)


class UpdatePaymentStatusRequest(BaseModel):
    payment_status: Literal["pending", "paid", "failed", "refunded"]


class CancelOrderRequest(BaseModel):
    reason: str | None = Field(default=None, max_length=500)


# ---------------------------------------------------------------------------
# Response Schemas
# ---------------------------------------------------------------------------
class ProductIdResponse(BaseModel):
    product_id: str


class StockAdjustmentResponse(BaseModel):
    product_id: str
    previous_stock: int
    new_stock: int
    operation: str


class StatusResponse(BaseModel):
    status: str = "ok"
