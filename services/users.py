"""Identity service: registration, login and user CRUD."""
import logging
from datetime import timedelta
from typing import Optional

from pymongo.database import Database
from pymongo.errors import DuplicateKeyError

from database import USERS, create_document, get_documents, now, to_object_id
from errors import Conflict, InvalidCredentials, NotFound
from schemas import Role, User, UserCreate
from security import create_access_token, get_password_hash, verify_password

log = logging.getLogger(__name__)

# Never sent back to clients
PUBLIC_FIELDS = {"password": 0}


def register(db: Database, data: UserCreate, photo_path: str = ""):
    if db[USERS].find_one({"email": data.email}):
        raise Conflict("User already exists")

    user = User(
        name=data.name,
        age=data.age,
        gender=data.gender,
        email=data.email,
        phone=data.phone,
        password=get_password_hash(data.password),
        profile_photo=photo_path or "",
        address=data.address,
        role=data.role or Role.user,
    )
    try:
        user_id = create_document(db, USERS, user.to_document())
    except DuplicateKeyError:
        raise Conflict("User with this email or phone already exists")
    log.info("Registered user %s with role %s", user_id, user.role)
    return user_id


def create_user(db: Database, data: UserCreate, photo_path: str = "") -> dict:
    user_id = register(db, data, photo_path)
    return get_user(db, user_id)


def login(db: Database, email: str, password: str, config) -> dict:
    user = db[USERS].find_one({"email": email})
    if not user or not verify_password(password, user.get("password", "")):
        raise InvalidCredentials("Invalid credentials")

    token = create_access_token(
        {"sub": str(user["_id"]), "role": user.get("role", Role.user.value)},
        config.JWT_SECRET,
        config.JWT_ALGORITHM,
        timedelta(minutes=config.ACCESS_TOKEN_EXPIRE_MINUTES),
    )
    return {"token": token, "role": user.get("role"), "userId": str(user["_id"])}


def get_user(db: Database, user_id) -> dict:
    user = db[USERS].find_one({"_id": to_object_id(user_id)}, PUBLIC_FIELDS)
    if not user:
        raise NotFound("User not found")
    return user


def list_users(db: Database, role: Optional[Role] = None) -> list:
    filt = {"role": Role(role).value} if role else {}
    return get_documents(db, USERS, filt, PUBLIC_FIELDS)


def update_user(db: Database, user_id, fields: dict, photo_path: Optional[str] = None) -> dict:
    """Apply only the given fields; anything absent from ``fields`` is left as stored."""
    oid = to_object_id(user_id)
    if not db[USERS].find_one({"_id": oid}, {"_id": 1}):
        raise NotFound("User not found")

    updates = {k: v for k, v in fields.items() if v is not None and k != "password"}
    if photo_path:
        updates["profilePhoto"] = photo_path
    updates["updatedAt"] = now()
    try:
        db[USERS].update_one({"_id": oid}, {"$set": updates})
    except DuplicateKeyError:
        raise Conflict("User with this phone already exists")
    return get_user(db, oid)


def delete_user(db: Database, user_id):
    result = db[USERS].delete_one({"_id": to_object_id(user_id)})
    if result.deleted_count == 0:
        raise NotFound("User not found")
    log.info("Deleted user %s", user_id)
