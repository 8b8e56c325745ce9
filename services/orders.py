"""Order service."""
import logging
from typing import List

from pymongo.database import Database

from database import ORDERS, create_document, get_documents, now, to_object_id
from errors import BadRequest, NotFound
from schemas import LineItem
from services.carts import populate_line_items, to_line_items

log = logging.getLogger(__name__)


def create_order(db: Database, user_id, items: List[LineItem], total_amount: float = 0) -> dict:
    if not items:
        raise BadRequest("No products provided")

    doc = {
        "user": to_object_id(user_id),
        "products": to_line_items(items),
        "totalAmount": total_amount,
        "status": "pending",
    }
    order_id = create_document(db, ORDERS, doc)
    log.info("Created order %s for user %s", order_id, doc["user"])
    return db[ORDERS].find_one({"_id": order_id})


def list_orders_for_user(db: Database, user_id) -> list:
    orders = get_documents(db, ORDERS, {"user": to_object_id(user_id)})
    return populate_line_items(db, orders)


def list_all_orders(db: Database) -> list:
    return populate_line_items(db, get_documents(db, ORDERS))


def update_order_status(db: Database, order_id, status: str) -> dict:
    oid = to_object_id(order_id)
    result = db[ORDERS].update_one({"_id": oid}, {"$set": {"status": status, "updatedAt": now()}})
    if result.matched_count == 0:
        raise NotFound("Order not found")
    log.info("Order %s status set to %s", oid, status)
    return db[ORDERS].find_one({"_id": oid})
