"""Farmer service: promotes users to farmers and manages farm profiles."""
import logging
from typing import Optional

from pymongo.database import Database
from pymongo.errors import DuplicateKeyError

from database import FARMERS, USERS, create_document, get_documents, now, to_object_id
from errors import Conflict, NotFound
from schemas import Farmer, Role

log = logging.getLogger(__name__)

USER_PUBLIC = {"password": 0}


def _populate_users(db: Database, farmers: list) -> list:
    user_ids = list({f["user"] for f in farmers if f.get("user")})
    users = {u["_id"]: u for u in db[USERS].find({"_id": {"$in": user_ids}}, USER_PUBLIC)}
    for farmer in farmers:
        farmer["user"] = users.get(farmer.get("user"))
    return farmers


def create_farmer(db: Database, user_id, farm_name: str, location: Optional[str] = None,
                  photo_path: str = ""):
    """
    Create the farm profile for a user and promote the user to ``farmer``.

    The farmer insert is guarded by the unique index on ``user``; if the role
    promotion does not land, the new farmer record is removed again.
    """
    uid = to_object_id(user_id)
    if db[FARMERS].find_one({"user": uid}):
        raise Conflict("This user is already a farmer")
    if not db[USERS].find_one({"_id": uid}, {"_id": 1}):
        raise NotFound("User not found")

    farmer = Farmer(user=str(uid), farm_name=farm_name, location=location, farm_photo=photo_path or "")
    doc = farmer.to_document()
    doc["user"] = uid
    try:
        farmer_id = create_document(db, FARMERS, doc)
    except DuplicateKeyError:
        raise Conflict("This user is already a farmer")

    try:
        result = db[USERS].update_one({"_id": uid}, {"$set": {"role": Role.farmer.value, "updatedAt": now()}})
        if result.matched_count == 0:
            raise NotFound("User not found")
    except Exception:
        db[FARMERS].delete_one({"_id": farmer_id})
        log.warning("Rolled back farmer %s: promotion of user %s failed", farmer_id, uid)
        raise

    log.info("Promoted user %s to farmer %s", uid, farmer_id)
    return farmer_id


def list_farmers(db: Database, populate: bool = True) -> list:
    farmers = get_documents(db, FARMERS)
    if populate:
        _populate_users(db, farmers)
    return farmers


def get_farmer_by_user_id(db: Database, user_id) -> dict:
    farmer = db[FARMERS].find_one({"user": to_object_id(user_id)})
    if not farmer:
        raise NotFound("Farmer not found")
    return _populate_users(db, [farmer])[0]


def update_farmer(db: Database, farmer_id, fields: dict, photo_path: Optional[str] = None) -> dict:
    oid = to_object_id(farmer_id)
    if not db[FARMERS].find_one({"_id": oid}, {"_id": 1}):
        raise NotFound("Farmer not found")

    updates = {k: v for k, v in fields.items() if v is not None}
    if photo_path:
        updates["farmPhoto"] = photo_path
    updates["updatedAt"] = now()
    db[FARMERS].update_one({"_id": oid}, {"$set": updates})
    return db[FARMERS].find_one({"_id": oid})


def delete_farmer(db: Database, farmer_id):
    # The user keeps the farmer role
    result = db[FARMERS].delete_one({"_id": to_object_id(farmer_id)})
    if result.deleted_count == 0:
        raise NotFound("Farmer not found")
    log.info("Deleted farmer %s", farmer_id)
