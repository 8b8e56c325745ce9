import os

from bson import ObjectId

from schemas import Role


def product_form(farmer_id, **overrides):
    form = {
        "farmerId": str(farmer_id),
        "productName": "Alphonso Mangoes",
        "category": "Fruits",
        "productQuantity": "1 dozen",
        "mrp": "600",
        "sellingPrice": "540",
    }
    form.update(overrides)
    return form


def test_create_product_without_image(client, make_user):
    farmer_id = make_user(Role.farmer)
    res = client.post("/api/products", data=product_form(farmer_id))
    assert res.status_code == 201
    product = res.json()["product"]
    assert product["productImage"] == ""
    assert product["status"] == "active"
    assert product["sellingPrice"] == 540
    assert product["farmer"] == str(farmer_id)


def test_create_product_with_image(client, make_user):
    farmer_id = make_user(Role.farmer)
    res = client.post(
        "/api/products",
        data=product_form(farmer_id),
        files={"productImage": ("mango.webp", b"RIFF", "image/webp")},
    )
    assert res.status_code == 201
    path = res.json()["product"]["productImage"]
    assert os.path.basename(path).startswith("file-")
    assert os.path.exists(path)


def test_create_product_missing_farmer(client, db):
    res = client.post("/api/products", data=product_form(ObjectId()))
    assert res.status_code == 404
    assert res.json() == {"message": "Farmer not found"}
    assert db["product"].count_documents({}) == 0


def test_create_product_rejects_unknown_category(client, make_user):
    res = client.post("/api/products", data=product_form(make_user(Role.farmer), category="Meat"))
    assert res.status_code == 400


def test_list_products_is_stable(client, make_product):
    make_product(selling_price=10)
    make_product(selling_price=20)

    first = client.get("/api/products").json()
    second = client.get("/api/products").json()
    assert first == second
    assert len(first) == 2
    assert set(first[0]["farmer"]) == {"id", "name", "email"}


def test_allproducts_populates_full_farmer(client, make_product):
    make_product()
    [product] = client.get("/api/products/allproducts").json()
    assert "age" in product["farmer"]
    assert "password" not in product["farmer"]


def test_products_by_farmer(client, make_user, make_product):
    farmer_id = make_user(Role.farmer)
    make_product(farmer_id=farmer_id)
    make_product()

    res = client.get(f"/api/products/farmer/{farmer_id}")
    assert res.status_code == 200
    assert len(res.json()) == 1

    res = client.get(f"/api/products/farmer/{make_user(Role.farmer)}")
    assert res.status_code == 200
    assert res.json() == []


def test_get_product(client, make_product):
    product_id = make_product()
    res = client.get(f"/api/products/{product_id}")
    assert res.status_code == 200
    assert res.json()["id"] == str(product_id)

    assert client.get(f"/api/products/{ObjectId()}").status_code == 404


def test_update_product_partial(client, db, make_product):
    product_id = make_product(selling_price=10)
    farmer_before = db["product"].find_one({"_id": product_id})["farmer"]

    res = client.put(f"/api/products/{product_id}", data={"sellingPrice": "12.5", "farmerId": "  "})
    assert res.status_code == 200
    product = res.json()["product"]
    assert product["sellingPrice"] == 12.5
    assert product["productName"] == "Tomatoes"
    assert db["product"].find_one({"_id": product_id})["farmer"] == farmer_before


def test_update_product_reassigns_farmer(client, db, make_user, make_product):
    product_id = make_product()
    new_farmer = make_user(Role.farmer)

    res = client.put(f"/api/products/{product_id}", data={"farmerId": str(new_farmer), "status": "inactive"})
    assert res.status_code == 200
    stored = db["product"].find_one({"_id": product_id})
    assert stored["farmer"] == new_farmer
    assert stored["status"] == "inactive"


def test_update_missing_product(client):
    res = client.put(f"/api/products/{ObjectId()}", data={"productName": "Ghost"})
    assert res.status_code == 404


def test_delete_product(client, db, make_product):
    product_id = make_product()
    res = client.delete(f"/api/products/{product_id}")
    assert res.status_code == 200
    assert res.json() == {"message": "Product deleted"}
    assert client.get(f"/api/products/{product_id}").status_code == 404
    assert client.delete(f"/api/products/{product_id}").status_code == 404
