# ivory/services/dashboard_service.py
import csv
import io
from typing import Any, Dict, List

from sqlalchemy.orm import Session

from ivory.data.models.order import OrderModel
from ivory.repos.catalog_repo import CollectionRepo, ProductRepo
from ivory.repos.order_repo import OrderRepo
from ivory.repos.user_repo import UserRepo
from ivory.services.catalog_service import collection_view, product_view
from ivory.utils.formatting import format_date, format_naira, to_money
from ivory.utils.settings import RECENT_ORDERS_LIMIT

CSV_HEADER = ["Order ID", "Date", "Customer", "Email", "Phone", "Status", "Total", "Items"]
UNKNOWN_PRODUCT = "Unknown Product"
DASHBOARD_PRODUCTS = 5


def item_name(item) -> str:
    # joined product -> frozen line name -> literal
    if item.product is not None and item.product.name:
        return item.product.name
    return item.name or UNKNOWN_PRODUCT


def _contact(order: OrderModel) -> Dict[str, Any]:
    shipping = order.shipping_info or {}
    user = order.user

    shipping_name = " ".join(
        p for p in (shipping.get("first_name"), shipping.get("last_name")) if p
    )
    return {
        "customer": (user.name if user else None) or shipping_name or "Guest",
        "email": (user.email if user else None) or shipping.get("email"),
        "phone": (user.phone if user else None) or shipping.get("phone"),
        "address": (user.address if user else None) or shipping.get("address"),
    }


def format_order(order: OrderModel) -> Dict[str, Any]:
    """Admin listing row: raw numbers plus display strings."""
    contact = _contact(order)
    items = []
    for it in order.items:
        price = to_money(it.price_at_purchase)
        items.append(
            {
                "product_id": it.product_id,
                "name": item_name(it),
                "quantity": it.quantity,
                "price_at_purchase": float(price),
                "formatted_price": format_naira(price),
                "formatted_total": format_naira(price * it.quantity),
            }
        )

    return {
        "id": order.id,
        "user_id": order.user_id,
        "status": order.status,
        "created_at": order.created_at,
        "formatted_date": format_date(order.created_at),
        "customer_name": contact["customer"],
        "contact_email": contact["email"],
        "contact_phone": contact["phone"],
        "contact_address": contact["address"],
        "payment_method": order.payment_method,
        "payment_status": order.payment_status,
        "payment_reference": order.payment_reference,
        "total": float(to_money(order.total)),
        "formatted_total": format_naira(order.total),
        "items": items,
    }


class DashboardService:
    """
    Read-only rollups for the admin panel. Nothing here writes.
    """

    def __init__(self, db: Session):
        self.orders = OrderRepo(db)
        self.products = ProductRepo(db)
        self.collections = CollectionRepo(db)
        self.users = UserRepo(db)

    def get_dashboard(self) -> Dict[str, Any]:
        collections = self.collections.list_collections()

        # one count query per collection
        collection_counts = [
            {"id": c.id, "name": c.name, "count": self.products.count_in_collection(c.id)}
            for c in collections
        ]

        return {
            "collections": [collection_view(c) for c in collections],
            "products": [product_view(p) for p in self.products.list_products(limit=DASHBOARD_PRODUCTS)],
            "collection_counts": collection_counts,
            "stats": {
                "total_products": self.products.count(),
                "total_collections": self.collections.count(),
                "total_orders": self.orders.count(),
                "total_customers": self.users.count(),
                # every order, paid or not, all time
                "total_sales": format_naira(self.orders.total_sales()),
            },
            "recent_orders": [format_order(o) for o in self.orders.list_orders(limit=RECENT_ORDERS_LIMIT)],
        }

    def list_orders(self) -> List[Dict[str, Any]]:
        return [format_order(o) for o in self.orders.list_orders()]

    def export_csv(self) -> str:
        buf = io.StringIO()
        writer = csv.writer(buf, lineterminator="\r\n")
        writer.writerow(CSV_HEADER)

        for order in self.orders.list_orders():
            contact = _contact(order)
            writer.writerow(
                [
                    order.id,
                    format_date(order.created_at),
                    contact["customer"],
                    contact["email"] or "",
                    contact["phone"] or "",
                    order.status,
                    format_naira(order.total),
                    " | ".join(f"{item_name(it)} x {it.quantity}" for it in order.items),
                ]
            )

        return buf.getvalue()
