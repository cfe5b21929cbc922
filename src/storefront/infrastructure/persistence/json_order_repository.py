"""JSON-file-backed implementation of OrderRepository."""

from __future__ import annotations

from pathlib import Path

from storefront.domain.model.order import (
    Order,
    OrderLineItem,
    OrderStatus,
    PaymentInfo,
    PaymentMethod,
    ShippingInfo,
)
from storefront.domain.model.value_objects import Quantity
from storefront.domain.repository.order_repository import OrderRepository
from storefront.infrastructure.persistence.codecs import (
    dt_from_raw,
    dt_to_raw,
    money_from_raw,
    money_to_raw,
)
from storefront.infrastructure.persistence.json_collection import JsonCollection


class JsonOrderRepository(OrderRepository):

    def __init__(self, file_path: Path) -> None:
        self._collection = JsonCollection(file_path, key_field="id")

    # --- OrderRepository interface --------------------------------------------

    def get_by_id(self, order_id: int) -> Order | None:
        raw = self._collection.find(order_id)
        return self._to_domain(raw) if raw is not None else None

    def save(self, order: Order) -> None:
        if order.id is None:
            order.id = self._collection.next_int_key()
        order.version = self._collection.replace(self._to_raw(order), order.version)

    # --- Serialization --------------------------------------------------------

    @staticmethod
    def _to_raw(order: Order) -> dict:
        return {
            "id": order.id,
            "user_id": order.user_id,
            "status": order.status.value,
            "created_at": dt_to_raw(order.created_at),
            "paid_at": dt_to_raw(order.paid_at),
            "delivered_at": dt_to_raw(order.delivered_at),
            "notes": order.notes,
            "shipping": {
                "address": order.shipping.address,
                "city": order.shipping.city,
                "country": order.shipping.country,
                "phone": order.shipping.phone,
            },
            "payment": {
                "method": order.payment.method.value,
                "reference": order.payment.reference,
            },
            "tax": money_to_raw(order.tax),
            "shipping_charges": money_to_raw(order.shipping_charges),
            "items": [
                {
                    "product_id": item.product_id,
                    "name": item.name,
                    "quantity": item.quantity.value,
                    "unit_price": money_to_raw(item.unit_price),
                    "image": item.image,
                    "size": item.size,
                    "color": item.color,
                }
                for item in order.items
            ],
            "version": order.version,
        }

    @staticmethod
    def _to_domain(raw: dict) -> Order:
        items = [
            OrderLineItem(
                product_id=i["product_id"],
                name=i["name"],
                quantity=Quantity(i["quantity"]),
                unit_price=money_from_raw(i["unit_price"]),
                image=i.get("image", ""),
                size=i.get("size", ""),
                color=i.get("color", ""),
            )
            for i in raw["items"]
        ]
        shipping = raw["shipping"]
        return Order(
            id=raw["id"],
            user_id=raw["user_id"],
            items=items,
            shipping=ShippingInfo(
                address=shipping["address"],
                city=shipping["city"],
                country=shipping["country"],
                phone=shipping.get("phone", ""),
            ),
            payment=PaymentInfo(
                method=PaymentMethod(raw["payment"]["method"]),
                reference=raw["payment"].get("reference"),
            ),
            tax=money_from_raw(raw.get("tax", 0)),
            shipping_charges=money_from_raw(raw.get("shipping_charges", 0)),
            status=OrderStatus(raw["status"]),
            notes=raw.get("notes", ""),
            created_at=dt_from_raw(raw["created_at"]),
            paid_at=dt_from_raw(raw.get("paid_at")),
            delivered_at=dt_from_raw(raw.get("delivered_at")),
            version=raw.get("version", 0),
        )
