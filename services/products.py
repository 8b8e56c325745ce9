"""Product service: listings owned by a farmer's user account."""
import logging
from typing import Optional

from pymongo.database import Database

from database import PRODUCTS, USERS, create_document, get_documents, now, to_object_id
from errors import NotFound
from schemas import Product, ProductCreate

log = logging.getLogger(__name__)

FARMER_SUMMARY = {"name": 1, "email": 1}
FARMER_FULL = {"password": 0}


def populate_farmers(db: Database, products: list, projection: Optional[dict] = None) -> list:
    """Replace each product's ``farmer`` id with the owning user (or None if gone)."""
    farmer_ids = list({p["farmer"] for p in products if p.get("farmer")})
    users = {u["_id"]: u for u in db[USERS].find({"_id": {"$in": farmer_ids}}, projection or FARMER_SUMMARY)}
    for product in products:
        product["farmer"] = users.get(product.get("farmer"))
    return products


def create_product(db: Database, farmer_id, data: ProductCreate, image_path: str = "") -> dict:
    fid = to_object_id(farmer_id)
    if not db[USERS].find_one({"_id": fid}, {"_id": 1}):
        raise NotFound("Farmer not found")

    product = Product(
        product_name=data.product_name,
        product_image=image_path or "",
        product_quantity=data.product_quantity,
        mrp=data.mrp,
        selling_price=data.selling_price,
        category=data.category,
        status=data.status,
        farmer=str(fid),
    )
    doc = product.to_document()
    doc["farmer"] = fid
    product_id = create_document(db, PRODUCTS, doc)
    log.info("Created product %s for farmer %s", product_id, fid)
    return db[PRODUCTS].find_one({"_id": product_id})


def list_products(db: Database, full_farmer: bool = False) -> list:
    products = get_documents(db, PRODUCTS)
    return populate_farmers(db, products, FARMER_FULL if full_farmer else FARMER_SUMMARY)


def get_product(db: Database, product_id) -> dict:
    product = db[PRODUCTS].find_one({"_id": to_object_id(product_id)})
    if not product:
        raise NotFound("Product not found")
    return populate_farmers(db, [product])[0]


def list_products_by_farmer(db: Database, farmer_id) -> list:
    # An empty list, not an error, when the farmer has no products
    products = get_documents(db, PRODUCTS, {"farmer": to_object_id(farmer_id)})
    return populate_farmers(db, products)


def update_product(db: Database, product_id, fields: dict, farmer_id: Optional[str] = None,
                   image_path: Optional[str] = None) -> dict:
    oid = to_object_id(product_id)
    if not db[PRODUCTS].find_one({"_id": oid}, {"_id": 1}):
        raise NotFound("Product not found")

    updates = {k: v for k, v in fields.items() if v is not None}
    if farmer_id and farmer_id.strip():
        updates["farmer"] = to_object_id(farmer_id)
    if image_path:
        updates["productImage"] = image_path
    updates["updatedAt"] = now()
    db[PRODUCTS].update_one({"_id": oid}, {"$set": updates})
    return get_product(db, oid)


def delete_product(db: Database, product_id):
    result = db[PRODUCTS].delete_one({"_id": to_object_id(product_id)})
    if result.deleted_count == 0:
        raise NotFound("Product not found")
    log.info("Deleted product %s", product_id)
