from typing import Optional

from fastapi import APIRouter, Depends, File, Form, Request, UploadFile, status
from pymongo.database import Database

from database import get_db, serialize_doc
from schemas import Gender, Role, UserCreate, UserUpdate
from security import guard
from services import users
from uploads import stored_upload

router = APIRouter(prefix="/api/users", tags=["users"])


@router.post("", status_code=status.HTTP_201_CREATED, dependencies=[Depends(guard(Role.admin))])
def create_user(
    request: Request,
    name: str = Form(...),
    age: int = Form(...),
    gender: Gender = Form(...),
    email: str = Form(...),
    phone: str = Form(...),
    password: str = Form(...),
    address: Optional[str] = Form(None),
    role: Optional[Role] = Form(None),
    profile_photo: Optional[UploadFile] = File(None, alias="profilePhoto"),
    db: Database = Depends(get_db),
):
    payload = UserCreate(name=name, age=age, gender=gender, email=email, phone=phone,
                         password=password, address=address, role=role or Role.user)
    with stored_upload(profile_photo, "profilePhoto", request.app.state.config) as photo:
        user = users.create_user(db, payload, photo)
    return {"message": "New user created successfully", "user": serialize_doc(user)}


@router.get("", dependencies=[Depends(guard(Role.admin))])
def list_users(db: Database = Depends(get_db)):
    return serialize_doc(users.list_users(db))


@router.get("/allusers", dependencies=[Depends(guard(Role.admin))])
def list_customers(db: Database = Depends(get_db)):
    return serialize_doc(users.list_users(db, Role.user))


@router.get("/{user_id}", dependencies=[Depends(guard())])
def get_user(user_id: str, db: Database = Depends(get_db)):
    return serialize_doc(users.get_user(db, user_id))


@router.put("/{user_id}", dependencies=[Depends(guard())])
def update_user(
    user_id: str,
    request: Request,
    name: Optional[str] = Form(None),
    age: Optional[int] = Form(None),
    gender: Optional[Gender] = Form(None),
    phone: Optional[str] = Form(None),
    address: Optional[str] = Form(None),
    profile_photo: Optional[UploadFile] = File(None, alias="profilePhoto"),
    db: Database = Depends(get_db),
):
    fields = UserUpdate(name=name, age=age, gender=gender, phone=phone, address=address)
    with stored_upload(profile_photo, "profilePhoto", request.app.state.config) as photo:
        user = users.update_user(db, user_id, fields.model_dump(by_alias=True, exclude_none=True), photo or None)
    return {"message": "User updated", "user": serialize_doc(user)}


@router.delete("/{user_id}", dependencies=[Depends(guard(Role.admin))])
def delete_user(user_id: str, db: Database = Depends(get_db)):
    users.delete_user(db, user_id)
    return {"message": "User deleted"}
