"""Read side for catalogue products."""

from protean.exceptions import ObjectNotFoundError

from ordering.catalogue import get_catalogue


def get_product(product_id):
    records = get_catalogue().find_products_by_ids([product_id])
    if not records:
        raise ObjectNotFoundError({"_entity": [f"Product {product_id} not found"]})

    product = records[0]
    return {
        "id": product.id,
        "name": product.name,
        "price": product.price,
        "stock": product.stock,
        "is_active": product.is_active,
    }
