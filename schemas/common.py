from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class PageIn(BaseModel):
    page: int = Field(default=1, ge=1)
    page_size: int = Field(default=20, ge=1, le=100)


class IdIn(BaseModel):
    id: int


class CodeIn(BaseModel):
    code: str = Field(min_length=1)


class UserMini(BaseModel):
    model_config = ConfigDict(from_attributes=True)
    id: int
    username: str
    full_name: Optional[str] = None


class ProductMini(BaseModel):
    model_config = ConfigDict(from_attributes=True)
    id: int
    sku: str
    name: str
    unit: str


class WarehouseMini(BaseModel):
    model_config = ConfigDict(from_attributes=True)
    id: int
    code: str
    name: str


class SupplierMini(BaseModel):
    model_config = ConfigDict(from_attributes=True)
    id: int
    code: str
    name: str


class CustomerMini(BaseModel):
    model_config = ConfigDict(from_attributes=True)
    id: int
    code: str
    name: str
