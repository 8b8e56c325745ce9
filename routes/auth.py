from typing import Optional

from fastapi import APIRouter, Depends, File, Form, Request, UploadFile, status
from pymongo.database import Database

from database import get_db, serialize_doc
from schemas import Gender, LoginRequest, Role, TokenClaims, UserCreate
from security import verify_token
from services import users
from uploads import stored_upload

router = APIRouter(prefix="/api/auth", tags=["auth"])


@router.post("/register", status_code=status.HTTP_201_CREATED)
def register(
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
        user_id = users.register(db, payload, photo)
    return {"message": "User registered successfully", "userId": str(user_id)}


@router.post("/login")
def login(payload: LoginRequest, request: Request, db: Database = Depends(get_db)):
    result = users.login(db, str(payload.email), payload.password, request.app.state.config)
    return {"message": "Logged in successfully", **result}


@router.get("/me")
def me(claims: TokenClaims = Depends(verify_token), db: Database = Depends(get_db)):
    return serialize_doc(users.get_user(db, claims.sub))
