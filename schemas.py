"""
Database Schemas for the farm marketplace

The collection models map to the user, farmer and product collections; cart
and order documents are built by their services from ``LineItem`` bodies.
Attributes are snake_case in Python and camelCase on the wire and at rest
(``selling_price`` <-> ``sellingPrice``).
"""
from datetime import datetime, timezone
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, EmailStr, Field
from pydantic.alias_generators import to_camel


class Role(str, Enum):
    user = "user"
    farmer = "farmer"
    admin = "admin"


class Gender(str, Enum):
    male = "male"
    female = "female"
    other = "other"


class Category(str, Enum):
    fruits = "Fruits"
    vegetables = "Vegetables"
    dairy = "Dairy"


class ProductStatus(str, Enum):
    active = "active"
    inactive = "inactive"


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, use_enum_values=True,
                              validate_default=True)

    def to_document(self) -> dict:
        return self.model_dump(by_alias=True)


# Collections

class User(CamelModel):
    name: str
    age: int = Field(..., ge=0)
    gender: Gender
    email: EmailStr
    phone: str
    password: str = Field(..., description="BCrypt hash of the password")
    profile_photo: str = ""
    address: Optional[str] = None
    date_joined: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    role: Role = Role.user


class Farmer(CamelModel):
    user: str = Field(..., description="Owning user id")
    farm_name: str
    location: Optional[str] = None
    farm_photo: str = ""


class Product(CamelModel):
    product_name: str
    product_image: str = ""
    product_quantity: str = Field(..., description="Free-text quantity, e.g. '1 kg'")
    mrp: float = Field(..., ge=0)
    selling_price: float = Field(..., ge=0)
    category: Category
    status: ProductStatus = ProductStatus.active
    farmer: str = Field(..., description="Owning user id")


class LineItem(CamelModel):
    product: str
    quantity: int = Field(1, ge=1)


# Request bodies

class UserCreate(CamelModel):
    name: str = Field(..., min_length=1)
    age: int = Field(..., ge=0)
    gender: Gender
    email: EmailStr
    phone: str = Field(..., min_length=1)
    password: str = Field(..., min_length=1)
    address: Optional[str] = None
    role: Role = Role.user


class UserUpdate(CamelModel):
    name: Optional[str] = None
    age: Optional[int] = Field(None, ge=0)
    gender: Optional[Gender] = None
    phone: Optional[str] = None
    address: Optional[str] = None


class LoginRequest(BaseModel):
    email: EmailStr
    password: str


class FarmerUpdate(CamelModel):
    farm_name: Optional[str] = None
    location: Optional[str] = None


class ProductCreate(CamelModel):
    product_name: str = Field(..., min_length=1)
    product_quantity: str
    mrp: float = Field(..., ge=0)
    selling_price: float = Field(..., ge=0)
    category: Category
    status: ProductStatus = ProductStatus.active


class ProductUpdate(CamelModel):
    product_name: Optional[str] = None
    product_quantity: Optional[str] = None
    mrp: Optional[float] = Field(None, ge=0)
    selling_price: Optional[float] = Field(None, ge=0)
    category: Optional[Category] = None
    status: Optional[ProductStatus] = None


class CartIn(CamelModel):
    user: str
    products: List[LineItem] = Field(default_factory=list)
    # Accepted for compatibility; totals are recomputed from the line items
    total_amount: Optional[float] = None


class CartReplace(CamelModel):
    products: List[LineItem] = Field(default_factory=list)
    total_amount: Optional[float] = None


class QuantityUpdate(BaseModel):
    quantity: int


class OrderCreate(CamelModel):
    user: str
    products: List[LineItem] = Field(default_factory=list)
    total_amount: float = 0


class OrderStatusUpdate(BaseModel):
    status: str


class TokenClaims(BaseModel):
    sub: str
    role: Role
    iat: Optional[int] = None
    exp: int
