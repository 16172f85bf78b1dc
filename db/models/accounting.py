# db/models/accounting.py
from configs import db
from datetime import datetime
import enum

from utils.workflow import StatusEnum


class NormalBalance(enum.Enum):
    DEBIT = "DEBIT"
    CREDIT = "CREDIT"


class AccountType(enum.Enum):
    ASSET = "ASSET"
    LIABILITY = "LIABILITY"
    EQUITY = "EQUITY"
    REVENUE = "REVENUE"
    EXPENSE = "EXPENSE"


class JournalStatus(StatusEnum):
    DRAFT = "DRAFT"
    POSTED = "POSTED"
    VOIDED = "VOIDED"

    @classmethod
    def _transitions(cls):
        return {
            cls.DRAFT: {cls.POSTED, cls.VOIDED},
            cls.POSTED: {cls.VOIDED},
        }


class InvoiceStatus(enum.Enum):
    PENDING = "PENDING"
    PARTIAL = "PARTIAL"
    PAID = "PAID"
    WRITTEN_OFF = "WRITTEN_OFF"


class AccountCategory(db.Model):
    __tablename__ = "account_category"

    id = db.Column(db.Integer, primary_key=True, autoincrement=True)
    code = db.Column(db.String(20), unique=True, nullable=False)
    name = db.Column(db.String(120), nullable=False)
    account_type = db.Column(db.Enum(AccountType, name="accounttype"), nullable=False)
    normal_balance = db.Column(
        db.Enum(NormalBalance, name="normalbalance"), nullable=False
    )
    display_order = db.Column(db.Integer, default=0, nullable=False)


class ChartOfAccount(db.Model):
    __tablename__ = "chart_of_account"

    id = db.Column(db.Integer, primary_key=True, autoincrement=True)
    account_code = db.Column(db.String(20), unique=True, nullable=False)
    name = db.Column(db.String(120), nullable=False)
    description = db.Column(db.Text)
    category_id = db.Column(
        db.Integer, db.ForeignKey("account_category.id"), nullable=False
    )
    parent_id = db.Column(db.Integer, db.ForeignKey("chart_of_account.id"))
    is_detail = db.Column(db.Boolean, default=True, nullable=False)
    is_system = db.Column(db.Boolean, default=False, nullable=False)
    is_active = db.Column(db.Boolean, default=True, nullable=False)
    created_at = db.Column(db.DateTime, default=datetime.utcnow)

    category = db.relationship("AccountCategory", backref="accounts")
    parent = db.relationship(
        "ChartOfAccount", remote_side=[id], backref="children"
    )


class JournalEntry(db.Model):
    __tablename__ = "journal_entry"

    id = db.Column(db.Integer, primary_key=True, autoincrement=True)
    entry_number = db.Column(db.String(40), unique=True, nullable=False)
    entry_date = db.Column(db.DateTime, default=datetime.utcnow, nullable=False)
    description = db.Column(db.Text)
    reference_type = db.Column(db.String(40))  # SALES_ORDER / PURCHASE_ORDER / AR_PAYMENT / ...
    reference_id = db.Column(db.Integer)
    status = db.Column(
        db.Enum(JournalStatus, name="journalstatus"),
        default=JournalStatus.DRAFT,
        nullable=False,
    )
    total_debit = db.Column(db.Numeric(18, 2), default=0, nullable=False)
    total_credit = db.Column(db.Numeric(18, 2), default=0, nullable=False)

    created_by_id = db.Column(db.Integer, db.ForeignKey("user_account.id"))
    posted_by_id = db.Column(db.Integer, db.ForeignKey("user_account.id"))
    posted_at = db.Column(db.DateTime)
    voided_at = db.Column(db.DateTime)
    created_at = db.Column(db.DateTime, default=datetime.utcnow)

    lines = db.relationship(
        "JournalEntryLine",
        backref="entry",
        cascade="all, delete-orphan",
        order_by="JournalEntryLine.line_number",
    )


class JournalEntryLine(db.Model):
    __tablename__ = "journal_entry_line"

    id = db.Column(db.Integer, primary_key=True, autoincrement=True)
    entry_id = db.Column(
        db.Integer,
        db.ForeignKey("journal_entry.id", ondelete="CASCADE"),
        nullable=False,
    )
    account_id = db.Column(
        db.Integer, db.ForeignKey("chart_of_account.id"), nullable=False
    )
    line_number = db.Column(db.Integer, nullable=False)
    description = db.Column(db.Text)
    debit = db.Column(db.Numeric(18, 2), default=0, nullable=False)
    credit = db.Column(db.Numeric(18, 2), default=0, nullable=False)

    account = db.relationship("ChartOfAccount", backref="journal_lines")


class AccountReceivable(db.Model):
    __tablename__ = "account_receivable"

    id = db.Column(db.Integer, primary_key=True, autoincrement=True)
    customer_id = db.Column(db.Integer, db.ForeignKey("customer.id"), nullable=False)
    sales_order_id = db.Column(db.Integer, db.ForeignKey("sales_order.id"))
    invoice_number = db.Column(db.String(40), nullable=False)
    invoice_date = db.Column(db.DateTime, default=datetime.utcnow, nullable=False)
    due_date = db.Column(db.DateTime, nullable=False)
    amount = db.Column(db.Numeric(18, 2), nullable=False)
    paid_amount = db.Column(db.Numeric(18, 2), default=0, nullable=False)
    balance = db.Column(db.Numeric(18, 2), nullable=False)
    status = db.Column(
        db.Enum(InvoiceStatus, name="invoicestatus"),
        default=InvoiceStatus.PENDING,
        nullable=False,
    )
    created_at = db.Column(db.DateTime, default=datetime.utcnow)

    customer = db.relationship("Customer")
    sales_order = db.relationship("SalesOrder")


class AccountPayable(db.Model):
    __tablename__ = "account_payable"

    id = db.Column(db.Integer, primary_key=True, autoincrement=True)
    supplier_id = db.Column(db.Integer, db.ForeignKey("supplier.id"), nullable=False)
    purchase_order_id = db.Column(db.Integer, db.ForeignKey("purchase_order.id"))
    invoice_number = db.Column(db.String(40), nullable=False)
    invoice_date = db.Column(db.DateTime, default=datetime.utcnow, nullable=False)
    due_date = db.Column(db.DateTime, nullable=False)
    amount = db.Column(db.Numeric(18, 2), nullable=False)
    paid_amount = db.Column(db.Numeric(18, 2), default=0, nullable=False)
    balance = db.Column(db.Numeric(18, 2), nullable=False)
    status = db.Column(
        db.Enum(InvoiceStatus, name="invoicestatus"),
        default=InvoiceStatus.PENDING,
        nullable=False,
    )
    created_at = db.Column(db.DateTime, default=datetime.utcnow)

    supplier = db.relationship("Supplier")
    purchase_order = db.relationship("PurchaseOrder")
