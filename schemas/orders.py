from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field

from db.models.purchase import POStatus
from db.models.sales import SOStatus
from schemas.common import CustomerMini, PageIn, ProductMini, SupplierMini, WarehouseMini


class OrderLineIn(BaseModel):
    product_id: int
    quantity: Decimal = Field(gt=0)
    unit_price: Decimal = Field(ge=0)
    notes: Optional[str] = None


# ---------------- purchase orders ----------------
class POCreate(BaseModel):
    supplier_id: int
    warehouse_id: int
    items: List[OrderLineIn] = Field(min_length=1)
    currency: Optional[str] = Field(default=None, min_length=3, max_length=3)
    expected_date: Optional[datetime] = None
    notes: Optional[str] = None


class POPatch(BaseModel):
    supplier_id: Optional[int] = None
    warehouse_id: Optional[int] = None
    items: Optional[List[OrderLineIn]] = None
    currency: Optional[str] = Field(default=None, min_length=3, max_length=3)
    expected_date: Optional[datetime] = None
    notes: Optional[str] = None


class POUpdateIn(BaseModel):
    id: int
    data: POPatch


class POListIn(PageIn):
    status: Optional[POStatus] = None
    supplier_id: Optional[int] = None
    warehouse_id: Optional[int] = None
    date_from: Optional[datetime] = None
    date_to: Optional[datetime] = None


class ReceiveLineIn(BaseModel):
    item_id: int
    quantity_received: Decimal = Field(gt=0)


class ReceiveIn(BaseModel):
    id: int
    items: List[ReceiveLineIn] = Field(min_length=1)
    notes: Optional[str] = None
    received_date: Optional[datetime] = None


class ReceivedBatchOut(BaseModel):
    batch_id: int
    batch_number: str
    product_name: str
    quantity: Decimal


class ReceiveOut(BaseModel):
    status: POStatus
    batches: List[ReceivedBatchOut] = Field(default_factory=list)
    received_value: Decimal
    journal_entry_number: Optional[str] = None
    payable_id: Optional[int] = None


class POItemOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)
    id: int
    product_id: int
    product: Optional[ProductMini] = None
    quantity: Decimal
    unit_price: Decimal
    total_price: Decimal
    received_quantity: Decimal
    remaining_quantity: Decimal
    notes: Optional[str] = None


class POOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)
    id: int
    order_number: str
    supplier_id: int
    supplier: Optional[SupplierMini] = None
    warehouse_id: int
    warehouse: Optional[WarehouseMini] = None
    status: POStatus
    currency: str
    order_date: Optional[datetime] = None
    expected_date: Optional[datetime] = None
    notes: Optional[str] = None
    subtotal: Decimal
    total_amount: Decimal
    confirmed_at: Optional[datetime] = None
    created_at: Optional[datetime] = None
    items: List[POItemOut] = Field(default_factory=list)


# ---------------- sales orders ----------------
class SOCreate(BaseModel):
    customer_id: int
    warehouse_id: int
    items: List[OrderLineIn] = Field(min_length=1)
    currency: Optional[str] = Field(default=None, min_length=3, max_length=3)
    tax_rate: Decimal = Field(default=Decimal("0"), ge=0, le=1)
    shipping_fee: Decimal = Field(default=Decimal("0"), ge=0)
    expected_ship_date: Optional[datetime] = None
    shipping_address: Optional[str] = None
    notes: Optional[str] = None


class SOPatch(BaseModel):
    customer_id: Optional[int] = None
    warehouse_id: Optional[int] = None
    items: Optional[List[OrderLineIn]] = None
    currency: Optional[str] = Field(default=None, min_length=3, max_length=3)
    tax_rate: Optional[Decimal] = Field(default=None, ge=0, le=1)
    shipping_fee: Optional[Decimal] = Field(default=None, ge=0)
    expected_ship_date: Optional[datetime] = None
    shipping_address: Optional[str] = None
    notes: Optional[str] = None


class SOUpdateIn(BaseModel):
    id: int
    data: SOPatch


class SOListIn(PageIn):
    status: Optional[SOStatus] = None
    customer_id: Optional[int] = None
    warehouse_id: Optional[int] = None
    date_from: Optional[datetime] = None
    date_to: Optional[datetime] = None


class ShipLineIn(BaseModel):
    item_id: int
    quantity_shipped: Decimal = Field(gt=0)


class ShipIn(BaseModel):
    id: int
    items: Optional[List[ShipLineIn]] = None
    tracking_number: Optional[str] = None
    notes: Optional[str] = None


class AllocationOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)
    id: int
    batch_id: int
    inventory_id: int
    quantity: Decimal
    cost_per_unit: Decimal
    shipped_quantity: Decimal


class SOItemOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)
    id: int
    product_id: int
    product: Optional[ProductMini] = None
    quantity: Decimal
    unit_price: Decimal
    amount: Decimal
    unit_cost: Decimal
    cost_amount: Decimal
    shipped_quantity: Decimal
    remaining_quantity: Decimal
    notes: Optional[str] = None
    allocations: List[AllocationOut] = Field(default_factory=list)


class SOOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)
    id: int
    order_number: str
    customer_id: int
    customer: Optional[CustomerMini] = None
    warehouse_id: int
    warehouse: Optional[WarehouseMini] = None
    status: SOStatus
    currency: str
    order_date: Optional[datetime] = None
    expected_ship_date: Optional[datetime] = None
    shipped_date: Optional[datetime] = None
    shipping_address: Optional[str] = None
    tracking_number: Optional[str] = None
    notes: Optional[str] = None
    tax_rate: Decimal
    shipping_fee: Decimal
    subtotal: Decimal
    tax_amount: Decimal
    total_amount: Decimal
    total_cost: Decimal
    confirmed_at: Optional[datetime] = None
    created_at: Optional[datetime] = None
    items: List[SOItemOut] = Field(default_factory=list)


class OrderStatsOut(BaseModel):
    total: int
    draft: int = 0
    confirmed: int = 0
    partial: int = 0
    received: int = 0
    processing: int = 0
    shipped: int = 0
    completed: int = 0
    cancelled: int = 0
    pending_value: Decimal
