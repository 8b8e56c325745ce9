from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from pymongo.database import Database

from database import get_db, serialize_doc
from schemas import CartIn, CartReplace, QuantityUpdate
from security import guard
from services import carts

router = APIRouter(prefix="/api/cart", tags=["cart"], dependencies=[Depends(guard())])


@router.post("")
def add_to_cart(payload: CartIn, db: Database = Depends(get_db)):
    cart, created = carts.add_or_merge(db, payload.user, payload.products)
    if created:
        return JSONResponse(status_code=201, content={"message": "Cart saved", "cart": serialize_doc(cart)})
    return {"message": "Cart updated", "cart": serialize_doc(cart)}


@router.get("/{user_id}")
def get_cart(user_id: str, db: Database = Depends(get_db)):
    return serialize_doc(carts.get_cart(db, user_id))


@router.put("/{cart_id}")
def replace_cart(cart_id: str, payload: CartReplace, db: Database = Depends(get_db)):
    cart = carts.replace_cart(db, cart_id, payload.products)
    return {"message": "Cart updated", "cart": serialize_doc(cart)}


@router.delete("/{cart_id}")
def delete_cart(cart_id: str, db: Database = Depends(get_db)):
    carts.delete_cart(db, cart_id)
    return {"message": "cart deleted"}


@router.put("/{cart_id}/products/{item_id}")
def update_cart_item(cart_id: str, item_id: str, payload: QuantityUpdate, db: Database = Depends(get_db)):
    cart = carts.update_line_item_quantity(db, cart_id, item_id, payload.quantity)
    return {"message": "Cart product updated", "cart": serialize_doc(cart)}


@router.delete("/{cart_id}/products/{item_id}")
def remove_cart_item(cart_id: str, item_id: str, db: Database = Depends(get_db)):
    cart = carts.remove_line_item(db, cart_id, item_id)
    return {"message": "Product removed from cart", "cart": serialize_doc(cart)}
