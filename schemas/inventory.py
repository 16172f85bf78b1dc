from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field

from db.models.transfer import TransferStatus
from schemas.common import PageIn, ProductMini, WarehouseMini
from utils.allocation import AllocationMethod


class BatchMini(BaseModel):
    model_config = ConfigDict(from_attributes=True)
    id: int
    batch_number: str
    cost_per_unit: Decimal
    received_date: Optional[datetime] = None


# ---------------- stock ----------------
class InventoryListIn(PageIn):
    product_id: Optional[int] = None
    warehouse_id: Optional[int] = None
    batch_id: Optional[int] = None
    low_stock: bool = False


class InventoryOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)
    id: int
    product_id: int
    product: Optional[ProductMini] = None
    batch_id: int
    batch: Optional[BatchMini] = None
    warehouse_id: int
    warehouse: Optional[WarehouseMini] = None
    quantity: Decimal
    reserved_quantity: Decimal
    available_quantity: Decimal
    updated_at: Optional[datetime] = None


class SummaryListIn(PageIn):
    search: Optional[str] = None
    low_stock_only: bool = False


class ProductIdIn(BaseModel):
    product_id: int


class StockSummaryOut(BaseModel):
    total_quantity: Decimal
    reserved_quantity: Decimal
    available_quantity: Decimal
    total_value: Decimal
    avg_cost_per_unit: Decimal


class ProductStockOut(StockSummaryOut):
    model_config = ConfigDict(from_attributes=True)
    product: ProductMini
    is_low_stock: bool
    warehouse_count: int
    batch_count: int


class WarehouseStockIn(BaseModel):
    warehouse_id: int


class WarehouseStockOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)
    warehouse: WarehouseMini
    inventory: List[InventoryOut] = Field(default_factory=list)


class AvailabilityIn(BaseModel):
    product_id: int
    quantity: Decimal = Field(gt=0)
    warehouse_id: Optional[int] = None


class AvailableBatchOut(BaseModel):
    batch_id: int
    batch_number: Optional[str] = None
    available_quantity: Decimal
    cost_per_unit: Decimal


class AvailabilityOut(BaseModel):
    is_available: bool
    available_quantity: Decimal
    requested_quantity: Decimal
    shortfall: Decimal
    batches: List[AvailableBatchOut] = Field(default_factory=list)


class BatchPick(BaseModel):
    batch_id: int
    quantity: Decimal = Field(gt=0)


class PreviewIn(BaseModel):
    product_id: int
    quantity: Decimal = Field(gt=0)
    method: AllocationMethod = AllocationMethod.FIFO
    warehouse_id: Optional[int] = None
    picks: Optional[List[BatchPick]] = None


class AllocationLineOut(BaseModel):
    batch_id: int
    batch_number: Optional[str] = None
    quantity: Decimal
    cost_per_unit: Decimal
    total_cost: Decimal


class PreviewOut(BaseModel):
    success: bool
    error: Optional[str] = None
    allocations: List[AllocationLineOut] = Field(default_factory=list)
    total_quantity: Decimal
    total_cost: Decimal
    avg_cost_per_unit: Decimal


class WarehouseValueOut(BaseModel):
    warehouse_id: int
    code: str
    name: str
    product_count: int
    total_value: Decimal


class InventoryStatsOut(BaseModel):
    total_products: int
    total_value: Decimal
    low_stock_count: int
    warehouses: List[WarehouseValueOut] = Field(default_factory=list)


# ---------------- transfers ----------------
class TransferItemIn(BaseModel):
    product_id: int
    batch_id: int
    quantity: Decimal = Field(gt=0)


class TransferCreate(BaseModel):
    source_warehouse_id: int
    target_warehouse_id: int
    items: List[TransferItemIn] = Field(min_length=1)
    notes: Optional[str] = None


class TransferListIn(PageIn):
    status: Optional[TransferStatus] = None
    source_warehouse_id: Optional[int] = None
    target_warehouse_id: Optional[int] = None


class TransferItemOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)
    id: int
    product_id: int
    product: Optional[ProductMini] = None
    batch_id: int
    batch: Optional[BatchMini] = None
    quantity: Decimal


class TransferOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)
    id: int
    transfer_number: str
    source_warehouse_id: int
    source_warehouse: Optional[WarehouseMini] = None
    target_warehouse_id: int
    target_warehouse: Optional[WarehouseMini] = None
    status: TransferStatus
    notes: Optional[str] = None
    requested_by_id: Optional[int] = None
    approved_by_id: Optional[int] = None
    approved_at: Optional[datetime] = None
    completed_by_id: Optional[int] = None
    completed_at: Optional[datetime] = None
    created_at: Optional[datetime] = None
    items: List[TransferItemOut] = Field(default_factory=list)


# ---------------- settings ----------------
class SettingIn(BaseModel):
    key: str = Field(min_length=1, max_length=80)
    value: str
    description: Optional[str] = None


class SettingOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)
    id: int
    key: str
    value: str
    description: Optional[str] = None
    is_system: bool
