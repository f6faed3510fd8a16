"""FastAPI routes for the Ordering domain: products, carts and orders."""

import json
from datetime import datetime

from fastapi import APIRouter, Depends, Query
from protean.utils.globals import current_domain

from ordering.api.auth import Caller, get_caller, require_admin
from ordering.api.schemas import (
    AddToCartRequest,
    AdjustStockRequest,
    CancelOrderRequest,
    CreateOrderFromCartRequest,
    CreateOrderRequest,
    ProductIdResponse,
    RegisterProductRequest,
    StatusResponse,
    StockAdjustmentResponse,
    UpdateCartItemRequest,
    UpdateOrderStatusRequest,
    UpdatePaymentStatusRequest,
    UpdatePriceRequest,
)
from ordering.cart.items import AddToCart, ClearCart, RemoveFromCart, UpdateCartItem
from ordering.cart.queries import get_cart
from ordering.catalogue.management import ActivateProduct, DeactivateProduct, RegisterProduct, UpdateProductPrice
from ordering.catalogue.queries import get_product
from ordering.inventory.adjustment import AdjustStock
from ordering.order.cancellation import CancelOrder
from ordering.order.creation import PlaceOrder, PlaceOrderFromCart
from ordering.order.payment import UpdatePaymentStatus
from ordering.order.queries import get_order, list_orders
from ordering.order.status import UpdateOrderStatus

# ---------------------------------------------------------------------------
# Product Router
# ---------------------------------------------------------------------------
product_router = APIRouter(prefix="/products", tags=["products"])


@product_router.post("", status_code=201, response_model=ProductIdResponse)
async def register_product(body: RegisterProductRequest, caller: Caller = Depends(get_caller)) -> ProductIdResponse:
    require_admin(caller)
    command = RegisterProduct(
        name=body.name,
        sku=body.sku,
        price=body.price,
        stock=body.stock,
    )
    result = current_domain.process(command, asynchronous=False)
    return ProductIdResponse(product_id=result)


@product_router.get("/{product_id}")
async def read_product(product_id: str) -> dict:
    return {"product": get_product(product_id)}


@product_router.patch("/{product_id}/stock", response_model=StockAdjustmentResponse)
async def adjust_stock(
    product_id: str, body: AdjustStockRequest, caller: Caller = Depends(get_caller)
) -> StockAdjustmentResponse:
    require_admin(caller)
    command = AdjustStock(
        product_id=product_id,
        stock=body.stock,
        operation=body.operation,
    )
    result = current_domain.process(command, asynchronous=False)
    return StockAdjustmentResponse(**result)


@product_router.put("/{product_id}/price", response_model=StatusResponse)
async def update_price(product_id: str, body: UpdatePriceRequest, caller: Caller = Depends(get_caller)) -> StatusResponse:
    require_admin(caller)
    current_domain.process(UpdateProductPrice(product_id=product_id, price=body.price), asynchronous=False)
    return StatusResponse()


@product_router.put("/{product_id}/deactivate", response_model=StatusResponse)
async def deactivate_product(product_id: str, caller: Caller = Depends(get_caller)) -> StatusResponse:
    require_admin(caller)
    current_domain.process(DeactivateProduct(product_id=product_id), asynchronous=False)
    return StatusResponse()


@product_router.put("/{product_id}/activate", response_model=StatusResponse)
async def activate_product(product_id: str, caller: Caller = Depends(get_caller)) -> StatusResponse:
    require_admin(caller)
    current_domain.process(ActivateProduct(product_id=product_id), asynchronous=False)
    return StatusResponse()


# ---------------------------------------------------------------------------
# Cart Router
# ---------------------------------------------------------------------------
cart_router = APIRouter(prefix="/cart", tags=["cart"])


@cart_router.get("")
async def read_cart(caller: Caller = Depends(get_caller)) -> dict:
    return {"cart": get_cart(caller.user_id)}


@cart_router.post("/items")
async def add_cart_item(body: AddToCartRequest, caller: Caller = Depends(get_caller)) -> dict:
    command = AddToCart(
        customer_id=caller.user_id,
        product_id=body.product_id,
        quantity=body.quantity,
    )
    current_domain.process(command, asynchronous=False)
    return {"cart": get_cart(caller.user_id)}


@cart_router.put("/items/{product_id}")
async def update_cart_item(product_id: str, body: UpdateCartItemRequest, caller: Caller = Depends(get_caller)) -> dict:
    command = UpdateCartItem(
        customer_id=caller.user_id,
        product_id=product_id,
        quantity=body.quantity,
    )
    current_domain.process(command, asynchronous=False)
    return {"cart": get_cart(caller.user_id)}


@cart_router.delete("/items/{product_id}")
async def remove_cart_item(product_id: str, caller: Caller = Depends(get_caller)) -> dict:
    current_domain.process(RemoveFromCart(customer_id=caller.user_id, product_id=product_id), asynchronous=False)
    return {"cart": get_cart(caller.user_id)}


@cart_router.delete("")
async def clear_cart(caller: Caller = Depends(get_caller)) -> dict:
    current_domain.process(ClearCart(customer_id=caller.user_id), asynchronous=False)
    return {"cart": get_cart(caller.user_id)}


# ---------------------------------------------------------------------------
# Order Router
# ---------------------------------------------------------------------------
order_router = APIRouter(prefix="/orders", tags=["orders"])


def _address_json(address):
    return json.dumps(address.model_dump()) if address is not None else None


@order_router.post("", status_code=201)
async def create_order(body: CreateOrderRequest, caller: Caller = Depends(get_caller)) -> dict:
    command = PlaceOrder(
        customer_id=caller.user_id,
        items=json.dumps([item.model_dump() for item in body.items]),
        shipping_address=_address_json(body.shipping_address),
        billing_address=_address_json(body.billing_address),
        notes=body.notes,
        tax_rate=body.tax_rate,
        shipping_cost=body.shipping_cost,
    )
    order_id = current_domain.process(command, asynchronous=False)
    return {"order": get_order(order_id, caller.user_id, is_admin=caller.is_admin)}


@order_router.post("/from-cart", status_code=201)
async def create_order_from_cart(body: CreateOrderFromCartRequest, caller: Caller = Depends(get_caller)) -> dict:
    command = PlaceOrderFromCart(
        customer_id=caller.user_id,
        shipping_address=_address_json(body.shipping_address),
        billing_address=_address_json(body.billing_address),
        notes=body.notes,
        tax_rate=body.tax_rate,
        shipping_cost=body.shipping_cost,
    )
    order_id = current_domain.process(command, asynchronous=False)
    return {"order": get_order(order_id, caller.user_id, is_admin=caller.is_admin)}


@order_router.get("")
async def search_orders(
    status: str | None = None,
    payment_status: str | None = Query(default=None, alias="paymentStatus"),
    start_date: datetime | None = Query(default=None, alias="startDate"),
    end_date: datetime | None = Query(default=None, alias="endDate"),
    sort_by: str = Query(default="created_at", alias="sortBy"),
    sort_order: str = Query(default="desc", alias="sortOrder"),
    page: int = Query(default=1, ge=1),
    limit: int = Query(default=10, ge=1, le=100),
    caller: Caller = Depends(get_caller),
) -> dict:
    return list_orders(
        caller.user_id,
        is_admin=caller.is_admin,
        status=status,
        payment_status=payment_status,
        start_date=start_date,
        end_date=end_date,
        sort_by=sort_by,
        sort_order=sort_order,
        page=page,
        limit=limit,
    )


@order_router.get("/{order_id}")
async def read_order(order_id: str, caller: Caller = Depends(get_caller)) -> dict:
    return {"order": get_order(order_id, caller.user_id, is_admin=caller.is_admin)}


@order_router.patch("/{order_id}/status")
async def update_order_status(
    order_id: str, body: UpdateOrderStatusRequest, caller: Caller = Depends(get_caller)
) -> dict:
    require_admin(caller)
    command = UpdateOrderStatus(
        order_id=order_id,
        status=body.status,
        tracking_number=body.tracking_number,
        reason=body.reason,
    )
    current_domain.process(command, asynchronous=False)
    return {"order": get_order(order_id, caller.user_id, is_admin=True)}


@order_router.patch("/{order_id}/payment")
async def update_payment_status(
    order_id: str, body: UpdatePaymentStatusRequest, caller: Caller = Depends(get_caller)
) -> dict:
    require_admin(caller)
    current_domain.process(
        UpdatePaymentStatus(order_id=order_id, payment_status=body.payment_status),
        asynchronous=False,
    )
    return {"order": get_order(order_id, caller.user_id, is_admin=True)}


@order_router.patch("/{order_id}/cancel")
async def cancel_order(order_id: str, body: CancelOrderRequest, caller: Caller = Depends(get_caller)) -> dict:
    command = CancelOrder(
        order_id=order_id,
        customer_id=caller.user_id,
        reason=body.reason,
        by_admin=caller.is_admin,
    )
    current_domain.process(command, asynchronous=False)
    return {"order": get_order(order_id, caller.user_id, is_admin=caller.is_admin)}
