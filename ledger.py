import json
import logging
import math
from typing import List, Optional, Sequence

from pymongo import ReturnDocument
from pymongo.database import Database

from analytics import filter_by_month
from database import create_document, oid, utcnow
from errors import NotFound, OrderValidationError, TotalMismatch
from schemas import Order, OrderItem, OrderRecord, OrderStatus

logger = logging.getLogger(__name__)

COLLECTION = "order"
TOTAL_EPSILON = 0.01


def snapshot_items(items: Sequence[OrderItem]) -> str:
    return json.dumps([{"name": i.name, "price": i.price, "quantity": i.quantity} for i in items], allow_nan=False)


def items_total(items: Sequence[OrderItem]) -> float:
    return round(sum(i.price * i.quantity for i in items), 2)


def place_order(db: Database, items: Sequence[OrderItem], total: float, address: str, contact: str,
                user_id: Optional[str] = None) -> str:
    """Validate and append one order, returning its id. Nothing is written on failure."""
    if not items:
        raise OrderValidationError("Order must contain at least one item")
    if not address or not address.strip():
        raise OrderValidationError("Address is required")
    if not contact or not contact.strip():
        raise OrderValidationError("Contact is required")

    expected = items_total(items)
    if not math.isfinite(expected) or not math.isfinite(total):
        raise OrderValidationError("Order total must be a finite number")
    if abs(expected - total) > TOTAL_EPSILON:
        raise TotalMismatch(f"Order total {total} does not match items total {expected}")

    order = Order(
        user_id=user_id or None,
        items=snapshot_items(items),
        total=expected,
        status=OrderStatus.pending,
        address=address.strip(),
        contact=contact.strip(),
    )
    order_id = create_document(db, COLLECTION, order)
    logger.info("Placed order %s total=%.2f items=%d", order_id, expected, len(items))
    return order_id


def _record(doc: dict) -> OrderRecord:
    doc = dict(doc)
    doc["id"] = str(doc.pop("_id"))
    return OrderRecord(**doc)


def load_orders(db: Database) -> List[OrderRecord]:
    """All orders, newest first."""
    cursor = db[COLLECTION].find({}).sort([("created_at", -1), ("_id", -1)])
    return [_record(doc) for doc in cursor]


def list_orders(db: Database, month: Optional[str] = None) -> List[OrderRecord]:
    return filter_by_month(load_orders(db), month)


def update_status(db: Database, order_id: str, status: OrderStatus) -> OrderRecord:
    doc = db[COLLECTION].find_one_and_update(
        {"_id": oid(order_id)},
        {"$set": {"status": OrderStatus(status).value, "updated_at": utcnow()}},
        return_document=ReturnDocument.AFTER,
    )
    if doc is None:
        raise NotFound("Order not found")
    logger.info("Order %s status -> %s", order_id, OrderStatus(status).value)
    return _record(doc)
