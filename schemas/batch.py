from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field

from db.models.batch import BatchStatus
from schemas.common import PageIn, ProductMini, SupplierMini, WarehouseMini


class BatchIn(BaseModel):
    product_id: int
    warehouse_id: int
    quantity: Decimal = Field(gt=0)
    unit_purchase_cost: Decimal = Field(ge=0)
    supplier_id: Optional[int] = None
    purchase_order_id: Optional[int] = None
    currency: Optional[str] = Field(default=None, min_length=3, max_length=3)
    received_date: Optional[datetime] = None
    notes: Optional[str] = None


class BatchPatch(BaseModel):
    quantity: Optional[Decimal] = Field(default=None, gt=0)
    unit_purchase_cost: Optional[Decimal] = Field(default=None, ge=0)
    supplier_id: Optional[int] = None
    warehouse_id: Optional[int] = None
    currency: Optional[str] = Field(default=None, min_length=3, max_length=3)
    received_date: Optional[datetime] = None
    notes: Optional[str] = None


class BatchUpdateIn(BaseModel):
    id: int
    data: BatchPatch


class BatchListIn(PageIn):
    product_id: Optional[int] = None
    supplier_id: Optional[int] = None
    warehouse_id: Optional[int] = None
    status: Optional[BatchStatus] = None
    search: Optional[str] = None


class CostItemIn(BaseModel):
    batch_id: int
    cost_type_id: int
    amount: Decimal = Field(gt=0)
    currency: Optional[str] = Field(default=None, min_length=3, max_length=3)
    exchange_rate: Optional[Decimal] = Field(default=None, gt=0)
    description: Optional[str] = None
    reference_number: Optional[str] = None


class CostItemPatch(BaseModel):
    cost_type_id: Optional[int] = None
    amount: Optional[Decimal] = Field(default=None, gt=0)
    currency: Optional[str] = Field(default=None, min_length=3, max_length=3)
    exchange_rate: Optional[Decimal] = Field(default=None, gt=0)
    description: Optional[str] = None
    reference_number: Optional[str] = None


class CostItemUpdateIn(BaseModel):
    id: int
    data: CostItemPatch


class CostTypeMini(BaseModel):
    model_config = ConfigDict(from_attributes=True)
    id: int
    code: str
    name: str


class LandedCostItemOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)
    id: int
    batch_id: int
    cost_type_id: int
    cost_type: Optional[CostTypeMini] = None
    amount: Decimal
    currency: str
    exchange_rate: Decimal
    amount_in_batch_currency: Decimal
    description: Optional[str] = None
    reference_number: Optional[str] = None


class BatchOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)
    id: int
    batch_number: str
    product_id: int
    product: Optional[ProductMini] = None
    supplier_id: Optional[int] = None
    supplier: Optional[SupplierMini] = None
    warehouse_id: int
    warehouse: Optional[WarehouseMini] = None
    purchase_order_id: Optional[int] = None
    quantity: Decimal
    unit_purchase_cost: Decimal
    total_purchase_cost: Decimal
    total_landed_cost: Decimal
    total_cost: Decimal
    cost_per_unit: Decimal
    currency: str
    status: BatchStatus
    received_date: Optional[datetime] = None
    notes: Optional[str] = None
    confirmed_at: Optional[datetime] = None
    created_at: Optional[datetime] = None
    landed_cost_items: List[LandedCostItemOut] = Field(default_factory=list)


class BatchStatsOut(BaseModel):
    total: int
    draft: int
    confirmed: int
    cancelled: int
    total_confirmed_value: Decimal
