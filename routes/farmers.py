from typing import Optional

from fastapi import APIRouter, Depends, File, Form, Request, UploadFile, status
from pymongo.database import Database

from database import get_db, serialize_doc
from schemas import FarmerUpdate, Role
from security import guard
from services import farmers
from uploads import stored_upload

router = APIRouter(prefix="/api/farmers", tags=["farmers"])


@router.post("", status_code=status.HTTP_201_CREATED, dependencies=[Depends(guard(Role.admin))])
def create_farmer(
    request: Request,
    user_id: str = Form(..., alias="userId"),
    farm_name: str = Form(..., alias="farmName"),
    location: Optional[str] = Form(None),
    farm_photo: Optional[UploadFile] = File(None, alias="farmPhoto"),
    db: Database = Depends(get_db),
):
    with stored_upload(farm_photo, "farmPhoto", request.app.state.config) as photo:
        farmer_id = farmers.create_farmer(db, user_id, farm_name, location, photo)
    return {"message": "Farmer created", "farmerId": str(farmer_id)}


@router.get("", dependencies=[Depends(guard())])
def list_farmers(db: Database = Depends(get_db)):
    return serialize_doc(farmers.list_farmers(db))


@router.get("/farms", dependencies=[Depends(guard())])
def list_farms(db: Database = Depends(get_db)):
    return serialize_doc(farmers.list_farmers(db, populate=False))


@router.get("/{user_id}", dependencies=[Depends(guard())])
def get_farmer(user_id: str, db: Database = Depends(get_db)):
    return serialize_doc(farmers.get_farmer_by_user_id(db, user_id))


@router.put("/{farmer_id}", dependencies=[Depends(guard(Role.admin, Role.farmer))])
def update_farmer(
    farmer_id: str,
    request: Request,
    farm_name: Optional[str] = Form(None, alias="farmName"),
    location: Optional[str] = Form(None),
    farm_photo: Optional[UploadFile] = File(None, alias="farmPhoto"),
    db: Database = Depends(get_db),
):
    fields = FarmerUpdate(farm_name=farm_name, location=location)
    with stored_upload(farm_photo, "farmPhoto", request.app.state.config) as photo:
        farmer = farmers.update_farmer(db, farmer_id, fields.model_dump(by_alias=True, exclude_none=True), photo or None)
    return {"message": "Farmer updated", "farmer": serialize_doc(farmer)}


@router.delete("/{farmer_id}", dependencies=[Depends(guard(Role.admin))])
def delete_farmer(farmer_id: str, db: Database = Depends(get_db)):
    farmers.delete_farmer(db, farmer_id)
    return {"message": "Farmer deleted"}
