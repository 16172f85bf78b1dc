from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field

from db.models.accounting import AccountType, InvoiceStatus, JournalStatus, NormalBalance
from schemas.common import CustomerMini, PageIn, SupplierMini


# ---------------- chart of accounts ----------------
class AccountCategoryIn(BaseModel):
    code: str = Field(min_length=1, max_length=20)
    name: str = Field(min_length=1, max_length=120)
    account_type: AccountType
    normal_balance: NormalBalance
    display_order: int = 0


class AccountCategoryOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)
    id: int
    code: str
    name: str
    account_type: AccountType
    normal_balance: NormalBalance
    display_order: int


class AccountIn(BaseModel):
    account_code: str = Field(min_length=1, max_length=20)
    name: str = Field(min_length=1, max_length=120)
    category_id: int
    parent_id: Optional[int] = None
    description: Optional[str] = None
    is_detail: bool = True


class AccountPatch(BaseModel):
    account_code: Optional[str] = Field(default=None, min_length=1, max_length=20)
    name: Optional[str] = Field(default=None, min_length=1, max_length=120)
    category_id: Optional[int] = None
    parent_id: Optional[int] = None
    description: Optional[str] = None
    is_detail: Optional[bool] = None
    is_active: Optional[bool] = None


class AccountUpdateIn(BaseModel):
    id: int
    data: AccountPatch


class AccountListIn(PageIn):
    search: Optional[str] = None
    category_id: Optional[int] = None
    is_active: Optional[bool] = None


class AccountMini(BaseModel):
    model_config = ConfigDict(from_attributes=True)
    id: int
    account_code: str
    name: str


class AccountOut(AccountMini):
    description: Optional[str] = None
    category_id: int
    category: Optional[AccountCategoryOut] = None
    parent_id: Optional[int] = None
    is_detail: bool
    is_system: bool
    is_active: bool


class BalanceIn(BaseModel):
    account_code: str = Field(min_length=1)
    as_of: Optional[datetime] = None


class BalanceOut(BaseModel):
    account_code: str
    balance: Decimal


# ---------------- journal ----------------
class JournalLineIn(BaseModel):
    account_id: int
    debit: Decimal = Field(default=Decimal("0"), ge=0)
    credit: Decimal = Field(default=Decimal("0"), ge=0)
    description: Optional[str] = None


class JournalCreate(BaseModel):
    lines: List[JournalLineIn] = Field(min_length=2)
    description: Optional[str] = None
    entry_date: Optional[datetime] = None
    reference_type: Optional[str] = None
    reference_id: Optional[int] = None


class JournalListIn(PageIn):
    status: Optional[JournalStatus] = None
    reference_type: Optional[str] = None
    date_from: Optional[datetime] = None
    date_to: Optional[datetime] = None
    search: Optional[str] = None


class JournalLineOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)
    id: int
    line_number: int
    account_id: int
    account: Optional[AccountMini] = None
    description: Optional[str] = None
    debit: Decimal
    credit: Decimal


class JournalOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)
    id: int
    entry_number: str
    entry_date: datetime
    description: Optional[str] = None
    reference_type: Optional[str] = None
    reference_id: Optional[int] = None
    status: JournalStatus
    total_debit: Decimal
    total_credit: Decimal
    posted_at: Optional[datetime] = None
    voided_at: Optional[datetime] = None
    created_at: Optional[datetime] = None
    lines: List[JournalLineOut] = Field(default_factory=list)


# ---------------- receivables / payables ----------------
class OpenItemListIn(PageIn):
    party_id: Optional[int] = None
    status: Optional[InvoiceStatus] = None
    overdue_only: bool = False
    search: Optional[str] = None


class PaymentIn(BaseModel):
    id: int
    amount: Decimal = Field(gt=0)
    payment_date: Optional[datetime] = None


class AgingIn(BaseModel):
    party_id: Optional[int] = None
    as_of: Optional[datetime] = None


class _OpenItemOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)
    id: int
    invoice_number: str
    invoice_date: datetime
    due_date: datetime
    amount: Decimal
    paid_amount: Decimal
    balance: Decimal
    status: InvoiceStatus


class ReceivableOut(_OpenItemOut):
    customer_id: int
    customer: Optional[CustomerMini] = None
    sales_order_id: Optional[int] = None


class PayableOut(_OpenItemOut):
    supplier_id: int
    supplier: Optional[SupplierMini] = None
    purchase_order_id: Optional[int] = None


class AgingOut(BaseModel):
    current: Decimal
    days_1_30: Decimal
    days_31_60: Decimal
    days_61_90: Decimal
    days_91_plus: Decimal
    total: Decimal


class AccountingStatsOut(BaseModel):
    total_receivables: Decimal
    overdue_receivables: Decimal
    total_payables: Decimal
    overdue_payables: Decimal
    journal_entries_this_month: int
    active_accounts: int


class SeedChartOut(BaseModel):
    categories_created: int
    accounts_created: int
