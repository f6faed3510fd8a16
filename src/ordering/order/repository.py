"""Repository for the Order aggregate."""

from datetime import UTC

from protean.exceptions import ValidationError

from ordering.domain import ordering
from ordering.order.order import Order

SORTABLE_FIELDS = ("created_at", "updated_at", "status", "payment_status")


def _aware(value):
    return value.replace(tzinfo=UTC) if value.tzinfo is None else value


@ordering.repository(part_of=Order)
class OrderRepository:
    def search(
        self,
        customer_id=None,
        status=None,
        payment_status=None,
        start_date=None,
        end_date=None,
        sort_by="created_at",
        sort_order="desc",
        page=1,
        limit=10,
    ):
        """Return one page of orders matching the filters, and the total number of matches."""
        if sort_by not in SORTABLE_FIELDS:
            raise ValidationError({"sort_by": [f"Orders can be sorted by {', '.join(SORTABLE_FIELDS)}"]})
        if sort_order not in ("asc", "desc"):
            raise ValidationError({"sort_order": ["Sort order must be asc or desc"]})
        if page < 1 or limit < 1:
            raise ValidationError({"page": ["Page and limit must be at least 1"]})

        filters = {}
        if customer_id is not None:
            filters["customer_id"] = str(customer_id)
        if status:
            filters["status"] = status
        if payment_status:
            filters["payment_status"] = payment_status
        if start_date:
            filters["created_at__gte"] = _aware(start_date)
        if end_date:
            filters["created_at__lte"] = _aware(end_date)

        ordering_key = sort_by if sort_order == "asc" else f"-{sort_by}"
        results = (
            self._dao.query.filter(**filters).order_by(ordering_key).offset((page - 1) * limit).limit(limit).all()
        )
        return results.items, results.total
