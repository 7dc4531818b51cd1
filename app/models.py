# app/models.py
from dataclasses import dataclass
from datetime import datetime
from typing import Optional, Tuple, Type

from pydantic import BaseModel, ConfigDict, Field, constr

NonEmptyStr = constr(min_length=1)

# ---------------------------
# Products
# ---------------------------
class ProductIn(BaseModel):
    name: NonEmptyStr
    description: NonEmptyStr
    price: float = Field(gt=0, allow_inf_nan=False)
    category: NonEmptyStr
    in_stock: bool = Field(True, alias="inStock")

class ProductUpdate(BaseModel):
    name: Optional[NonEmptyStr] = None
    description: Optional[NonEmptyStr] = None
    price: Optional[float] = Field(None, gt=0, allow_inf_nan=False)
    category: Optional[NonEmptyStr] = None
    in_stock: Optional[bool] = Field(None, alias="inStock")

class Product(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: str = Field(alias="_id")
    name: str
    description: str
    price: float
    category: str
    in_stock: bool = Field(True, alias="inStock")
    created_at: Optional[datetime] = Field(None, alias="createdAt")
    updated_at: Optional[datetime] = Field(None, alias="updatedAt")

# ---------------------------
# Users
# ---------------------------
class UserIn(BaseModel):
    name: NonEmptyStr
    email: NonEmptyStr

class UserUpdate(BaseModel):
    name: Optional[NonEmptyStr] = None
    email: Optional[NonEmptyStr] = None

class User(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: str = Field(alias="_id")
    name: str
    email: str
    created_at: Optional[datetime] = Field(None, alias="createdAt")
    updated_at: Optional[datetime] = Field(None, alias="updatedAt")

# ---------------------------
# Resource descriptors
# ---------------------------
@dataclass(frozen=True)
class ResourceKind:
    """Everything the generic handler needs to know about one resource type."""
    name: str
    collection: str
    create_schema: Type[BaseModel]
    update_schema: Type[BaseModel]
    unique_fields: Tuple[str, ...] = ()

PRODUCTS = ResourceKind("Product", "products", ProductIn, ProductUpdate)
USERS = ResourceKind("User", "users", UserIn, UserUpdate, unique_fields=("email",))
