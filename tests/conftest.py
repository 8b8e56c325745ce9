import itertools

import mongomock
import pytest
from fastapi.testclient import TestClient

from config import TestingConfig
from database import ensure_indexes
from main import create_app
from schemas import Category, ProductCreate, Role, UserCreate
from services import products, users

_counter = itertools.count(1)


@pytest.fixture
def settings(tmp_path):
    class Settings(TestingConfig):
        UPLOAD_DIR = str(tmp_path / "uploads")
    return Settings


@pytest.fixture
def db():
    database = mongomock.MongoClient(tz_aware=True)["farm_marketplace_test"]
    ensure_indexes(database)
    return database


@pytest.fixture
def app(settings, db):
    return create_app(settings, db)


@pytest.fixture
def client(app):
    with TestClient(app) as c:
        yield c


def user_form(**overrides):
    n = next(_counter)
    form = {
        "name": f"User {n}",
        "age": "30",
        "gender": "female",
        "email": f"user{n}@example.com",
        "phone": f"90000{n:05d}",
        "password": "s3cret-pass",
        "address": "Village Road 1",
    }
    form.update(overrides)
    return form


@pytest.fixture
def make_user(db):
    def _make(role=Role.user, **overrides):
        form = user_form(**overrides)
        payload = UserCreate(**{**form, "age": int(form["age"]), "role": role})
        return users.register(db, payload)
    return _make


@pytest.fixture
def make_product(db, make_user):
    def _make(selling_price=10, farmer_id=None, **overrides):
        farmer_id = farmer_id or make_user(Role.farmer)
        data = ProductCreate(
            product_name=overrides.pop("product_name", "Tomatoes"),
            product_quantity=overrides.pop("product_quantity", "1 kg"),
            mrp=overrides.pop("mrp", selling_price + 5),
            selling_price=selling_price,
            category=overrides.pop("category", Category.vegetables),
        )
        return products.create_product(db, farmer_id, data)["_id"]
    return _make
