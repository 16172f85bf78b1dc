from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, EmailStr, Field

from schemas.common import PageIn


# ---------------- products ----------------
class ProductIn(BaseModel):
    sku: str = Field(min_length=1, max_length=60)
    name: str = Field(min_length=1, max_length=255)
    description: Optional[str] = None
    category_id: Optional[int] = None
    unit: str = Field(default="PCS", max_length=20)
    default_price: Decimal = Field(default=Decimal("0"), ge=0)
    min_stock_level: Decimal = Field(default=Decimal("0"), ge=0)
    attrs: Dict[str, Any] = Field(default_factory=dict)
    is_active: bool = True


class ProductPatch(BaseModel):
    sku: Optional[str] = Field(default=None, min_length=1, max_length=60)
    name: Optional[str] = Field(default=None, min_length=1, max_length=255)
    description: Optional[str] = None
    category_id: Optional[int] = None
    unit: Optional[str] = Field(default=None, max_length=20)
    default_price: Optional[Decimal] = Field(default=None, ge=0)
    min_stock_level: Optional[Decimal] = Field(default=None, ge=0)
    attrs: Optional[Dict[str, Any]] = None
    is_active: Optional[bool] = None


class ProductUpdateIn(BaseModel):
    id: int
    data: ProductPatch


class ProductListIn(PageIn):
    search: Optional[str] = None
    category_id: Optional[int] = None
    is_active: Optional[bool] = None


class SkuIn(BaseModel):
    sku: str = Field(min_length=1)


class CategoryOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)
    id: int
    name: str
    description: Optional[str] = None
    parent_id: Optional[int] = None
    is_active: Optional[bool] = None


class ProductOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)
    id: int
    sku: str
    name: str
    description: Optional[str] = None
    category_id: Optional[int] = None
    category: Optional[CategoryOut] = None
    unit: str
    default_price: Decimal
    min_stock_level: Decimal
    attrs: Optional[Dict[str, Any]] = None
    is_active: bool
    created_at: Optional[datetime] = None


class CategoryIn(BaseModel):
    name: str = Field(min_length=1, max_length=120)
    description: Optional[str] = None
    parent_id: Optional[int] = None


class CategoryPatch(BaseModel):
    name: Optional[str] = Field(default=None, min_length=1, max_length=120)
    description: Optional[str] = None
    parent_id: Optional[int] = None
    is_active: Optional[bool] = None


class CategoryUpdateIn(BaseModel):
    id: int
    data: CategoryPatch


# ---------------- customers / suppliers ----------------
class _PartyIn(BaseModel):
    code: str = Field(min_length=1, max_length=50)
    name: str = Field(min_length=1, max_length=255)
    contact_person: Optional[str] = None
    phone: Optional[str] = None
    email: Optional[EmailStr] = None
    address: Optional[str] = None
    country: Optional[str] = None
    tax_id: Optional[str] = None
    payment_terms: int = Field(default=30, ge=0, le=365)
    notes: Optional[str] = None
    is_active: bool = True


class _PartyPatch(BaseModel):
    code: Optional[str] = Field(default=None, min_length=1, max_length=50)
    name: Optional[str] = Field(default=None, min_length=1, max_length=255)
    contact_person: Optional[str] = None
    phone: Optional[str] = None
    email: Optional[EmailStr] = None
    address: Optional[str] = None
    country: Optional[str] = None
    tax_id: Optional[str] = None
    payment_terms: Optional[int] = Field(default=None, ge=0, le=365)
    notes: Optional[str] = None
    is_active: Optional[bool] = None


class CustomerIn(_PartyIn):
    city: Optional[str] = None
    credit_limit: Decimal = Field(default=Decimal("0"), ge=0)


class CustomerPatch(_PartyPatch):
    city: Optional[str] = None
    credit_limit: Optional[Decimal] = Field(default=None, ge=0)


class CustomerUpdateIn(BaseModel):
    id: int
    data: CustomerPatch


class CustomerOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)
    id: int
    code: str
    name: str
    contact_person: Optional[str] = None
    phone: Optional[str] = None
    email: Optional[str] = None
    address: Optional[str] = None
    city: Optional[str] = None
    country: Optional[str] = None
    tax_id: Optional[str] = None
    payment_terms: int
    credit_limit: Optional[Decimal] = None
    notes: Optional[str] = None
    is_active: bool
    created_at: Optional[datetime] = None


class SupplierIn(_PartyIn):
    currency: str = Field(default="USD", min_length=3, max_length=3)


class SupplierPatch(_PartyPatch):
    currency: Optional[str] = Field(default=None, min_length=3, max_length=3)


class SupplierUpdateIn(BaseModel):
    id: int
    data: SupplierPatch


class SupplierOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)
    id: int
    code: str
    name: str
    contact_person: Optional[str] = None
    phone: Optional[str] = None
    email: Optional[str] = None
    address: Optional[str] = None
    country: Optional[str] = None
    tax_id: Optional[str] = None
    currency: str
    payment_terms: int
    notes: Optional[str] = None
    is_active: bool
    created_at: Optional[datetime] = None


class PartyListIn(PageIn):
    search: Optional[str] = None
    is_active: Optional[bool] = None


# ---------------- warehouses ----------------
class WarehouseIn(BaseModel):
    code: str = Field(min_length=1, max_length=32)
    name: str = Field(min_length=1, max_length=120)
    address: Optional[str] = None
    is_default: bool = False
    is_active: bool = True


class WarehousePatch(BaseModel):
    code: Optional[str] = Field(default=None, min_length=1, max_length=32)
    name: Optional[str] = Field(default=None, min_length=1, max_length=120)
    address: Optional[str] = None
    is_default: Optional[bool] = None
    is_active: Optional[bool] = None


class WarehouseUpdateIn(BaseModel):
    id: int
    data: WarehousePatch


class WarehouseOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)
    id: int
    code: str
    name: str
    address: Optional[str] = None
    is_default: bool
    is_active: bool
    created_at: Optional[datetime] = None


# ---------------- cost item types ----------------
class CostItemTypeIn(BaseModel):
    code: str = Field(min_length=1, max_length=32)
    name: str = Field(min_length=1, max_length=120)
    description: Optional[str] = None
    sort_order: int = 0
    is_active: bool = True


class CostItemTypePatch(BaseModel):
    code: Optional[str] = Field(default=None, min_length=1, max_length=32)
    name: Optional[str] = Field(default=None, min_length=1, max_length=120)
    description: Optional[str] = None
    sort_order: Optional[int] = None
    is_active: Optional[bool] = None


class CostItemTypeUpdateIn(BaseModel):
    id: int
    data: CostItemTypePatch


class CostItemTypeListIn(PageIn):
    is_active: Optional[bool] = None


class CostItemTypeOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)
    id: int
    code: str
    name: str
    description: Optional[str] = None
    sort_order: int
    is_system: bool
    is_active: bool


class SeedResultOut(BaseModel):
    action: str
    code: Optional[str] = None
    key: Optional[str] = None
    value: Optional[str] = None


SeedResults = List[SeedResultOut]
