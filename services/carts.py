"""
Cart service.

One cart per user, created on the first add. ``totalAmount`` is always
recomputed from the stored line items and current product prices; totals
sent by clients are not trusted.
"""
import logging
from typing import List, Tuple

from bson import ObjectId
from pymongo.database import Database
from pymongo.errors import DuplicateKeyError

from database import CARTS, PRODUCTS, create_document, get_documents, now, to_object_id
from errors import BadRequest, NotFound
from schemas import LineItem

log = logging.getLogger(__name__)


def _number(value, cast=float):
    try:
        return cast(value)
    except (TypeError, ValueError):
        return 0


def to_line_items(items: List[LineItem]) -> list:
    """Stored form of incoming line items, each with its own ``_id``."""
    return [
        {"_id": ObjectId(), "product": to_object_id(item.product), "quantity": item.quantity}
        for item in items
    ]


def compute_total(db: Database, line_items: list) -> float:
    product_ids = list({item.get("product") for item in line_items if item.get("product")})
    prices = {
        p["_id"]: _number(p.get("sellingPrice"))
        for p in db[PRODUCTS].find({"_id": {"$in": product_ids}}, {"sellingPrice": 1})
    }
    total = 0
    for item in line_items:
        total += prices.get(item.get("product"), 0) * _number(item.get("quantity"), int)
    return total


def populate_line_items(db: Database, docs: list) -> list:
    """Resolve ``products[].product`` ids to full product documents (None if gone)."""
    product_ids = list({item.get("product") for d in docs for item in d.get("products", [])})
    products = {p["_id"]: p for p in db[PRODUCTS].find({"_id": {"$in": product_ids}})}
    for doc in docs:
        for item in doc.get("products", []):
            item["product"] = products.get(item.get("product"))
    return docs


def merge_line_items(existing: list, incoming: list) -> list:
    merged = [dict(item) for item in existing]
    for new in incoming:
        match = next((item for item in merged if item.get("product") == new["product"]), None)
        if match is not None:
            match["quantity"] = _number(match.get("quantity"), int) + new["quantity"]
        else:
            merged.append(new)
    return merged


def _save(db: Database, cart_id, line_items: list) -> dict:
    db[CARTS].update_one(
        {"_id": cart_id},
        {"$set": {"products": line_items, "totalAmount": compute_total(db, line_items), "updatedAt": now()}},
    )
    return db[CARTS].find_one({"_id": cart_id})


def _find_cart(db: Database, cart_id) -> dict:
    cart = db[CARTS].find_one({"_id": to_object_id(cart_id)})
    if not cart:
        raise NotFound("Cart not found")
    return cart


def add_or_merge(db: Database, user_id, items: List[LineItem]) -> Tuple[dict, bool]:
    """Add items to the user's cart, creating it if needed. Returns ``(cart, created)``."""
    if not items:
        raise BadRequest("No products provided")

    uid = to_object_id(user_id)
    incoming = to_line_items(items)
    cart = db[CARTS].find_one({"user": uid})
    if cart is None:
        doc = {"user": uid, "products": incoming, "totalAmount": compute_total(db, incoming)}
        try:
            cart_id = create_document(db, CARTS, doc)
            log.info("Created cart %s for user %s", cart_id, uid)
            return db[CARTS].find_one({"_id": cart_id}), True
        except DuplicateKeyError:
            # Another request created the cart first; merge into it
            cart = db[CARTS].find_one({"user": uid})

    return _save(db, cart["_id"], merge_line_items(cart.get("products", []), incoming)), False


def get_cart(db: Database, user_id) -> list:
    carts = get_documents(db, CARTS, {"user": to_object_id(user_id)})
    return populate_line_items(db, carts)


def replace_cart(db: Database, cart_id, items: List[LineItem]) -> dict:
    if not items:
        raise BadRequest("Products must be a non-empty array")
    cart = _find_cart(db, cart_id)
    return _save(db, cart["_id"], to_line_items(items))


def delete_cart(db: Database, cart_id):
    result = db[CARTS].delete_one({"_id": to_object_id(cart_id)})
    if result.deleted_count == 0:
        raise NotFound("Cart not found")


def update_line_item_quantity(db: Database, cart_id, item_id, quantity: int) -> dict:
    if quantity is None or quantity < 1:
        raise BadRequest("Invalid quantity provided")

    cart = _find_cart(db, cart_id)
    iid = to_object_id(item_id)
    line_items = cart.get("products", [])
    match = next((item for item in line_items if item.get("_id") == iid), None)
    if match is None:
        raise NotFound("Product not found in cart")

    match["quantity"] = quantity
    return _save(db, cart["_id"], line_items)


def remove_line_item(db: Database, cart_id, item_id) -> dict:
    cart = _find_cart(db, cart_id)
    iid = to_object_id(item_id)
    remaining = [item for item in cart.get("products", []) if item.get("_id") != iid]
    return _save(db, cart["_id"], remaining)
