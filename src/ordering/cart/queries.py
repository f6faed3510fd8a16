"""Read side for carts."""

from protean.utils.globals import current_domain

from ordering.cart.cart import Cart


def cart_to_dict(cart):
    return {
        "customer_id": str(cart.customer_id),
        "items": [
            {
                "product_id": str(item.product_id),
                "quantity": item.quantity,
                "unit_price": item.unit_price,
                "line_total": item.line_total,
            }
            for item in cart.items
        ],
        "subtotal": cart.subtotal,
        "total_items": cart.total_items,
        "unique_items": cart.unique_items,
        "updated_at": cart.updated_at.isoformat() if cart.updated_at else None,
    }


def get_cart(customer_id):
    """Return the customer's cart, storing an empty one on first access."""
    repo = current_domain.repository_for(Cart)
    cart = repo.for_customer(customer_id)
    repo.add(cart)
    return cart_to_dict(cart)
