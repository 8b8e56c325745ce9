import pytest
from bson import ObjectId

from errors import NotFound
from schemas import Role
from services import users
from tests.conftest import user_form


def test_partial_update_keeps_other_fields(db, make_user):
    user_id = make_user(address="Old Farm Lane")
    before = db["user"].find_one({"_id": user_id})

    updated = users.update_user(db, user_id, {"name": "X"})
    assert updated["name"] == "X"
    assert "password" not in updated

    after = db["user"].find_one({"_id": user_id})
    for field in ("age", "gender", "email", "phone", "address", "password", "profilePhoto", "role"):
        assert after[field] == before[field]


def test_update_ignores_password_field(db, make_user):
    user_id = make_user()
    before = db["user"].find_one({"_id": user_id})["password"]
    users.update_user(db, user_id, {"password": "plain"})
    assert db["user"].find_one({"_id": user_id})["password"] == before


def test_update_missing_user(db):
    with pytest.raises(NotFound):
        users.update_user(db, ObjectId(), {"name": "X"})


def test_update_route(client, db, make_user):
    user_id = make_user(age="41")
    res = client.put(f"/api/users/{user_id}", data={"address": "New Address"})
    assert res.status_code == 200
    body = res.json()
    assert body["message"] == "User updated"
    assert body["user"]["address"] == "New Address"
    assert body["user"]["age"] == 41
    assert "password" not in body["user"]


def test_update_route_replaces_photo(client, db, make_user):
    user_id = make_user()
    res = client.put(
        f"/api/users/{user_id}",
        files={"profilePhoto": ("new.jpg", b"\xff\xd8\xff", "image/jpeg")},
    )
    assert res.status_code == 200
    assert res.json()["user"]["profilePhoto"].endswith(".jpg")


def test_list_users_excludes_password(client, make_user):
    make_user()
    make_user(Role.farmer)
    res = client.get("/api/users")
    assert res.status_code == 200
    assert len(res.json()) == 2
    assert all("password" not in u for u in res.json())


def test_allusers_only_plain_users(client, make_user):
    make_user()
    make_user(Role.farmer)
    make_user(Role.admin)
    res = client.get("/api/users/allusers")
    assert [u["role"] for u in res.json()] == ["user"]


def test_get_user(client, make_user):
    user_id = make_user()
    res = client.get(f"/api/users/{user_id}")
    assert res.status_code == 200
    assert res.json()["id"] == str(user_id)
    assert "password" not in res.json()


def test_get_user_not_found_and_bad_id(client):
    res = client.get(f"/api/users/{ObjectId()}")
    assert res.status_code == 404
    assert res.json() == {"message": "User not found"}

    res = client.get("/api/users/not-an-id")
    assert res.status_code == 400
    assert res.json() == {"message": "Invalid ID format"}


def test_create_user_route(client):
    form = user_form(role="farmer")
    res = client.post("/api/users", data=form)
    assert res.status_code == 201
    user = res.json()["user"]
    assert user["email"] == form["email"]
    assert user["role"] == "farmer"
    assert user["profilePhoto"] == ""
    assert "password" not in user


def test_delete_user(client, db, make_user):
    user_id = make_user()
    res = client.delete(f"/api/users/{user_id}")
    assert res.status_code == 200
    assert res.json() == {"message": "User deleted"}
    assert db["user"].find_one({"_id": user_id}) is None

    res = client.delete(f"/api/users/{user_id}")
    assert res.status_code == 404


def test_delete_user_does_not_cascade(client, db, make_user, make_product):
    farmer_id = make_user(Role.farmer)
    product_id = make_product(farmer_id=farmer_id)
    client.delete(f"/api/users/{farmer_id}")

    assert db["product"].find_one({"_id": product_id})["farmer"] == farmer_id
    res = client.get(f"/api/products/{product_id}")
    assert res.json()["farmer"] is None
