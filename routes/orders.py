from fastapi import APIRouter, Depends, status
from pymongo.database import Database

from database import get_db, serialize_doc
from schemas import OrderCreate, OrderStatusUpdate, Role
from security import guard
from services import orders

router = APIRouter(prefix="/api/orders", tags=["orders"])


@router.post("", status_code=status.HTTP_201_CREATED, dependencies=[Depends(guard())])
def create_order(payload: OrderCreate, db: Database = Depends(get_db)):
    order = orders.create_order(db, payload.user, payload.products, payload.total_amount)
    return {"message": "Order created", "order": serialize_doc(order)}


@router.get("", dependencies=[Depends(guard(Role.admin, Role.farmer))])
def list_orders(db: Database = Depends(get_db)):
    return serialize_doc(orders.list_all_orders(db))


@router.get("/{user_id}", dependencies=[Depends(guard())])
def list_user_orders(user_id: str, db: Database = Depends(get_db)):
    return serialize_doc(orders.list_orders_for_user(db, user_id))


@router.put("/{order_id}", dependencies=[Depends(guard(Role.admin, Role.farmer))])
def update_order_status(order_id: str, payload: OrderStatusUpdate, db: Database = Depends(get_db)):
    order = orders.update_order_status(db, order_id, payload.status)
    return {"message": "Order status updated", "order": serialize_doc(order)}
