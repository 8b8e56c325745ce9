from typing import Optional

from fastapi import APIRouter, Depends, File, Form, Request, UploadFile, status
from pymongo.database import Database

from database import get_db, serialize_doc
from schemas import Category, ProductCreate, ProductStatus, ProductUpdate, Role
from security import guard
from services import products
from uploads import stored_upload

router = APIRouter(prefix="/api/products", tags=["products"])


@router.post("", status_code=status.HTTP_201_CREATED, dependencies=[Depends(guard(Role.farmer, Role.admin))])
def create_product(
    request: Request,
    farmer_id: str = Form(..., alias="farmerId"),
    product_name: str = Form(..., alias="productName"),
    category: Category = Form(...),
    product_quantity: str = Form(..., alias="productQuantity"),
    mrp: float = Form(...),
    selling_price: float = Form(..., alias="sellingPrice"),
    product_status: ProductStatus = Form(ProductStatus.active, alias="status"),
    product_image: Optional[UploadFile] = File(None, alias="productImage"),
    db: Database = Depends(get_db),
):
    data = ProductCreate(product_name=product_name, product_quantity=product_quantity, mrp=mrp,
                         selling_price=selling_price, category=category, status=product_status)
    with stored_upload(product_image, "productImage", request.app.state.config) as image:
        product = products.create_product(db, farmer_id, data, image)
    return {"message": "Product created", "product": serialize_doc(product)}


@router.get("", dependencies=[Depends(guard())])
def list_products(db: Database = Depends(get_db)):
    return serialize_doc(products.list_products(db))


@router.get("/allproducts", dependencies=[Depends(guard())])
def list_products_with_farmers(db: Database = Depends(get_db)):
    return serialize_doc(products.list_products(db, full_farmer=True))


@router.get("/farmer/{farmer_id}", dependencies=[Depends(guard())])
def list_farmer_products(farmer_id: str, db: Database = Depends(get_db)):
    return serialize_doc(products.list_products_by_farmer(db, farmer_id))


@router.get("/{product_id}", dependencies=[Depends(guard())])
def get_product(product_id: str, db: Database = Depends(get_db)):
    return serialize_doc(products.get_product(db, product_id))


@router.put("/{product_id}", dependencies=[Depends(guard(Role.farmer, Role.admin))])
def update_product(
    product_id: str,
    request: Request,
    product_name: Optional[str] = Form(None, alias="productName"),
    category: Optional[Category] = Form(None),
    product_quantity: Optional[str] = Form(None, alias="productQuantity"),
    mrp: Optional[float] = Form(None),
    selling_price: Optional[float] = Form(None, alias="sellingPrice"),
    product_status: Optional[ProductStatus] = Form(None, alias="status"),
    farmer_id: Optional[str] = Form(None, alias="farmerId"),
    product_image: Optional[UploadFile] = File(None, alias="productImage"),
    db: Database = Depends(get_db),
):
    fields = ProductUpdate(product_name=product_name, category=category, product_quantity=product_quantity,
                           mrp=mrp, selling_price=selling_price, status=product_status)
    with stored_upload(product_image, "productImage", request.app.state.config) as image:
        product = products.update_product(db, product_id, fields.model_dump(by_alias=True, exclude_none=True),
                                          farmer_id, image or None)
    return {"message": "Product updated", "product": serialize_doc(product)}


@router.delete("/{product_id}", dependencies=[Depends(guard(Role.farmer, Role.admin))])
def delete_product(product_id: str, db: Database = Depends(get_db)):
    products.delete_product(db, product_id)
    return {"message": "Product deleted"}
