"""Read side for orders: lookups and filtered listings as plain dicts.

Customers only ever see their own orders. An order belonging to someone
else is reported as not found, never as forbidden.
"""

import math

from protean.exceptions import ObjectNotFoundError
from protean.utils.globals import current_domain

from ordering.order.order import Order


def _iso(value):
    return value.isoformat() if value else None


def _address_to_dict(address):
    if address is None:
        return None
    return {
        "first_name": address.first_name,
        "last_name": address.last_name,
        "street": address.street,
        "city": address.city,
        "state": address.state,
        "zip_code": address.zip_code,
        "country": address.country,
        "phone": address.phone,
    }


def order_to_dict(order):
    pricing = order.pricing
    return {
        "id": str(order.id),
        "customer_id": str(order.customer_id),
        "items": [
            {
                "product_id": str(item.product_id),
                "product_name": item.product_name,
                "quantity": item.quantity,
                "unit_price": item.unit_price,
                "line_total": item.line_total,
            }
            for item in order.items
        ],
        "shipping_address": _address_to_dict(order.shipping_address),
        "billing_address": _address_to_dict(order.billing_address),
        "pricing": {
            "subtotal": pricing.subtotal,
            "tax_rate": pricing.tax_rate,
            "tax_amount": pricing.tax_amount,
            "shipping_cost": pricing.shipping_cost,
            "grand_total": pricing.grand_total,
        },
        "status": order.status,
        "payment_status": order.payment_status,
        "tracking_number": order.tracking_number,
        "estimated_delivery": _iso(order.estimated_delivery),
        "delivered_at": _iso(order.delivered_at),
        "cancelled_at": _iso(order.cancelled_at),
        "cancel_reason": order.cancel_reason,
        "cancelled_by": order.cancelled_by,
        "notes": order.notes,
        "created_at": _iso(order.created_at),
        "updated_at": _iso(order.updated_at),
    }


def get_order(order_id, user_id, is_admin=False):
    try:
        order = current_domain.repository_for(Order).get(order_id)
    except ObjectNotFoundError:
        raise ObjectNotFoundError({"_entity": ["Order not found"]}) from None

    if not is_admin and str(order.customer_id) != str(user_id):
        raise ObjectNotFoundError({"_entity": ["Order not found"]})
    return order_to_dict(order)


def list_orders(
    user_id,
    is_admin=False,
    status=None,
    payment_status=None,
    start_date=None,
    end_date=None,
    sort_by="created_at",
    sort_order="desc",
    page=1,
    limit=10,
):
    orders, total = current_domain.repository_for(Order).search(
        customer_id=None if is_admin else user_id,
        status=status,
        payment_status=payment_status,
        start_date=start_date,
        end_date=end_date,
        sort_by=sort_by,
        sort_order=sort_order,
        page=page,
        limit=limit,
    )
    return {
        "orders": [order_to_dict(order) for order in orders],
        "pagination": {
            "current_page": page,
            "total_pages": math.ceil(total / limit) if total else 0,
            "total_items": total,
            "items_per_page": limit,
        },
    }
