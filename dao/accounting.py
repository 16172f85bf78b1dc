# dao/accounting.py
"""Double-entry ledger: chart of accounts, journal entries, AR/AP and aging."""
import logging
from datetime import datetime, timedelta
from decimal import Decimal
from typing import Iterable, List

from sqlalchemy import func, or_

from configs import db
from dao import _tx
from dao import numbering
from dao import settings as settings_dao
from db.models.accounting import (
    AccountCategory,
    AccountPayable,
    AccountReceivable,
    AccountType,
    ChartOfAccount,
    InvoiceStatus,
    JournalEntry,
    JournalEntryLine,
    JournalStatus,
    NormalBalance,
)
from db.models.customer import Customer
from db.models.supplier import Supplier
from utils.errors import BadRequest, Conflict, Forbidden, NotFound, PreconditionFailed
from utils.money import TOLERANCE, ZERO, d, round2
from utils.pagination import paginate
from utils.workflow import transition

logger = logging.getLogger(__name__)

ACCOUNTS = {
    "CASH": "1101",
    "BANK": "1102",
    "ACCOUNTS_RECEIVABLE": "1110",
    "INVENTORY": "1120",
    "ACCOUNTS_PAYABLE": "2110",
    "SALES_REVENUE": "4110",
    "COST_OF_GOODS_SOLD": "5100",
}

DEFAULT_CATEGORIES = [
    ("1", "Assets", AccountType.ASSET, NormalBalance.DEBIT, 1),
    ("2", "Liabilities", AccountType.LIABILITY, NormalBalance.CREDIT, 2),
    ("3", "Equity", AccountType.EQUITY, NormalBalance.CREDIT, 3),
    ("4", "Revenue", AccountType.REVENUE, NormalBalance.CREDIT, 4),
    ("5", "Expenses", AccountType.EXPENSE, NormalBalance.DEBIT, 5),
]

DEFAULT_ACCOUNTS = [
    ("1101", "Cash", "1"),
    ("1102", "Bank", "1"),
    ("1110", "Accounts Receivable", "1"),
    ("1120", "Inventory", "1"),
    ("2110", "Accounts Payable", "2"),
    ("3100", "Owner's Equity", "3"),
    ("4110", "Sales Revenue", "4"),
    ("5100", "Cost of Goods Sold", "5"),
]


# ---------------- chart of accounts ----------------
def list_categories() -> List[AccountCategory]:
    return AccountCategory.query.order_by(
        AccountCategory.display_order.asc(), AccountCategory.code.asc()
    ).all()


def create_category(
    code: str,
    name: str,
    account_type: AccountType,
    normal_balance: NormalBalance,
    display_order: int = 0,
) -> AccountCategory:
    code = code.strip()
    if AccountCategory.query.filter_by(code=code).one_or_none():
        raise Conflict("Category code already exists")
    c = AccountCategory(
        code=code,
        name=name.strip(),
        account_type=AccountType(account_type),
        normal_balance=NormalBalance(normal_balance),
        display_order=display_order,
    )
    db.session.add(c)
    _tx.commit()
    return c


def list_accounts(
    search=None, category_id=None, is_active=None, page: int = 1, page_size: int = 20
) -> dict:
    q = ChartOfAccount.query
    if search:
        like = f"%{search.strip()}%"
        q = q.filter(or_(ChartOfAccount.account_code.ilike(like), ChartOfAccount.name.ilike(like)))
    if category_id:
        q = q.filter(ChartOfAccount.category_id == int(category_id))
    if is_active is not None:
        q = q.filter(ChartOfAccount.is_active == bool(is_active))
    return paginate(q.order_by(ChartOfAccount.account_code.asc()), page, page_size)


def get_account(account_id: int) -> ChartOfAccount:
    return _tx.fetch(ChartOfAccount, account_id, "Account")


def account_by_code(account_code: str) -> ChartOfAccount:
    acc = ChartOfAccount.query.filter_by(account_code=account_code).one_or_none()
    if acc is None:
        raise NotFound(f"Account not found: {account_code}")
    return acc


def create_account(
    account_code: str,
    name: str,
    category_id: int,
    parent_id: int | None = None,
    description: str | None = None,
    is_detail: bool = True,
) -> ChartOfAccount:
    account_code = account_code.strip()
    if ChartOfAccount.query.filter_by(account_code=account_code).one_or_none():
        raise Conflict("Account code already exists")
    _tx.fetch(AccountCategory, category_id, "Account category")
    if parent_id:
        _tx.fetch(ChartOfAccount, parent_id, "Parent account")
    acc = ChartOfAccount(
        account_code=account_code,
        name=name.strip(),
        category_id=int(category_id),
        parent_id=parent_id,
        description=description,
        is_detail=is_detail,
    )
    db.session.add(acc)
    _tx.commit()
    return acc


def update_account(account_id: int, **fields) -> ChartOfAccount:
    acc = get_account(account_id)
    code = fields.get("account_code")
    if code is not None and code.strip() != acc.account_code:
        if acc.is_system:
            raise Forbidden("Cannot change the code of a system account")
        if ChartOfAccount.query.filter_by(account_code=code.strip()).one_or_none():
            raise Conflict("Account code already exists")
        acc.account_code = code.strip()
    if fields.get("category_id"):
        _tx.fetch(AccountCategory, fields["category_id"], "Account category")
    if fields.get("parent_id") is not None and int(fields["parent_id"]) == acc.id:
        raise BadRequest("Account cannot be its own parent")
    for k in ("name", "description", "category_id", "parent_id", "is_detail", "is_active"):
        if k in fields:
            setattr(acc, k, fields[k])
    _tx.commit()
    return acc


def delete_account(account_id: int) -> ChartOfAccount:
    acc = get_account(account_id)
    if acc.is_system:
        raise Forbidden("Cannot delete a system account")
    lines = JournalEntryLine.query.filter_by(account_id=acc.id).count()
    children = ChartOfAccount.query.filter_by(parent_id=acc.id).count()
    if lines or children:
        raise PreconditionFailed(
            "Cannot delete account with journal entries or sub-accounts. "
            "Deactivate it instead."
        )
    acc.is_active = False
    _tx.commit()
    logger.info("account %s deactivated", acc.account_code)
    return acc


def account_balance(account_code: str, as_of: datetime | None = None) -> Decimal:
    """Posted balance signed by the account category's normal side."""
    acc = account_by_code(account_code)
    q = (
        db.session.query(
            func.coalesce(func.sum(JournalEntryLine.debit), 0),
            func.coalesce(func.sum(JournalEntryLine.credit), 0),
        )
        .join(JournalEntry, JournalEntry.id == JournalEntryLine.entry_id)
        .filter(JournalEntryLine.account_id == acc.id)
        .filter(JournalEntry.status == JournalStatus.POSTED)
    )
    if as_of:
        q = q.filter(JournalEntry.entry_date <= as_of)
    debit, credit = q.one()
    if acc.category.normal_balance == NormalBalance.DEBIT:
        return round2(d(debit) - d(credit))
    return round2(d(credit) - d(debit))


# ---------------- journal entries ----------------
def validate_journal_entry(lines: Iterable[dict]) -> tuple:
    """Return (total_debit, total_credit) or raise when they do not balance."""
    total_debit = ZERO
    total_credit = ZERO
    for line in lines:
        debit = d(line.get("debit"))
        credit = d(line.get("credit"))
        if debit < 0 or credit < 0:
            raise BadRequest("Debit and credit amounts cannot be negative")
        if (debit > 0) == (credit > 0):
            raise BadRequest("Each line must have either a debit or a credit amount")
        total_debit += debit
        total_credit += credit
    if abs(total_debit - total_credit) > TOLERANCE:
        raise BadRequest(
            f"Journal entry not balanced: Debit {round2(total_debit)}, "
            f"Credit {round2(total_credit)}"
        )
    return round2(total_debit), round2(total_credit)


def _build_entry(
    lines: List[dict],
    description: str | None,
    user_id: int | None,
    status: JournalStatus = JournalStatus.DRAFT,
    reference_type: str | None = None,
    reference_id: int | None = None,
    entry_date: datetime | None = None,
) -> JournalEntry:
    total_debit, total_credit = validate_journal_entry(lines)
    entry_date = entry_date or datetime.utcnow()
    je = JournalEntry(
        entry_number=numbering.next_number("journal", entry_date),
        entry_date=entry_date,
        description=description,
        reference_type=reference_type,
        reference_id=reference_id,
        status=status,
        total_debit=total_debit,
        total_credit=total_credit,
        created_by_id=user_id,
    )
    if status == JournalStatus.POSTED:
        je.posted_by_id = user_id
        je.posted_at = datetime.utcnow()
    for n, line in enumerate(lines, start=1):
        je.lines.append(
            JournalEntryLine(
                account_id=int(line["account_id"]),
                line_number=n,
                description=line.get("description"),
                debit=round2(line.get("debit")),
                credit=round2(line.get("credit")),
            )
        )
    db.session.add(je)
    db.session.flush()
    logger.info("journal %s %s debit=%s", je.entry_number, status.value, total_debit)
    return je


def _posted(description, pairs, user_id, reference_type, reference_id, entry_date=None):
    """Posted entry from ``(account_code, debit, credit, line_description)`` tuples."""
    lines = [
        {
            "account_id": account_by_code(code).id,
            "debit": debit,
            "credit": credit,
            "description": text,
        }
        for code, debit, credit, text in pairs
    ]
    return _build_entry(
        lines,
        description,
        user_id,
        status=JournalStatus.POSTED,
        reference_type=reference_type,
        reference_id=reference_id,
        entry_date=entry_date,
    )


def list_journal_entries(
    status: str | None = None,
    reference_type: str | None = None,
    date_from: datetime | None = None,
    date_to: datetime | None = None,
    search: str | None = None,
    page: int = 1,
    page_size: int = 20,
) -> dict:
    q = JournalEntry.query
    if status:
        q = q.filter(JournalEntry.status == JournalStatus(status))
    if reference_type:
        q = q.filter(JournalEntry.reference_type == reference_type)
    if date_from:
        q = q.filter(JournalEntry.entry_date >= date_from)
    if date_to:
        q = q.filter(JournalEntry.entry_date <= date_to)
    if search:
        like = f"%{search.strip()}%"
        q = q.filter(
            or_(JournalEntry.entry_number.ilike(like), JournalEntry.description.ilike(like))
        )
    return paginate(
        q.order_by(JournalEntry.entry_date.desc(), JournalEntry.id.desc()), page, page_size
    )


def get_journal_entry(entry_id: int) -> JournalEntry:
    return _tx.fetch(JournalEntry, entry_id, "Journal entry")


def create_journal_entry(
    lines: List[dict],
    user_id: int | None,
    description: str | None = None,
    entry_date: datetime | None = None,
    reference_type: str | None = None,
    reference_id: int | None = None,
) -> JournalEntry:
    if len(lines) < 2:
        raise BadRequest("A journal entry needs at least two lines")
    for line in lines:
        acc = _tx.fetch(ChartOfAccount, line["account_id"], "Account")
        if not acc.is_active:
            raise BadRequest(f"Account {acc.account_code} is inactive")
    with _tx.atomic():
        je = _build_entry(
            lines,
            description,
            user_id,
            reference_type=reference_type or "MANUAL",
            reference_id=reference_id,
            entry_date=entry_date,
        )
    return je


def post_journal_entry(entry_id: int, user_id: int | None) -> JournalEntry:
    je = get_journal_entry(entry_id)
    if je.status != JournalStatus.DRAFT:
        raise PreconditionFailed("Only draft entries can be posted")
    validate_journal_entry([{"debit": l.debit, "credit": l.credit} for l in je.lines])
    with _tx.atomic():
        transition(
            je,
            JournalStatus.POSTED,
            "Only draft entries can be posted",
            error=PreconditionFailed,
            label=je.entry_number,
        )
        je.posted_by_id = user_id
        je.posted_at = datetime.utcnow()
    return je


def void_journal_entry(entry_id: int) -> JournalEntry:
    je = get_journal_entry(entry_id)
    if je.status == JournalStatus.VOIDED:
        raise PreconditionFailed("Entry is already voided")
    with _tx.atomic():
        transition(
            je,
            JournalStatus.VOIDED,
            "Entry is already voided",
            error=PreconditionFailed,
            label=je.entry_number,
        )
        je.voided_at = datetime.utcnow()
    return je


def create_sales_journal_entry(order, total_cost, user_id) -> JournalEntry | None:
    """AR / Revenue for the order total, plus COGS / Inventory when there is a cost.

    Returns None for a free order shipped from zero-cost stock.
    """
    amount = round2(order.total_amount)
    cost = round2(total_cost)
    pairs = []
    if amount > 0:
        pairs += [
            (ACCOUNTS["ACCOUNTS_RECEIVABLE"], amount, ZERO, "Accounts Receivable"),
            (ACCOUNTS["SALES_REVENUE"], ZERO, amount, "Sales Revenue"),
        ]
    if cost > 0:
        pairs += [
            (ACCOUNTS["COST_OF_GOODS_SOLD"], cost, ZERO, "Cost of Goods Sold"),
            (ACCOUNTS["INVENTORY"], ZERO, cost, "Inventory"),
        ]
    if not pairs:
        return None
    return _posted(
        f"Sales Order {order.order_number}", pairs, user_id, "SALES_ORDER", order.id
    )


def create_purchase_journal_entry(order, amount, user_id, reference: str | None = None) -> JournalEntry:
    amount = round2(amount)
    pairs = [
        (ACCOUNTS["INVENTORY"], amount, ZERO, "Inventory"),
        (ACCOUNTS["ACCOUNTS_PAYABLE"], ZERO, amount, "Accounts Payable"),
    ]
    description = reference or f"Purchase Order {order.order_number} Received"
    return _posted(description, pairs, user_id, "PURCHASE_ORDER", order.id)


# ---------------- receivables / payables ----------------
def _due(terms) -> datetime:
    days = terms or settings_dao.default_payment_terms()
    return datetime.utcnow() + timedelta(days=int(days))


def create_receivable(order) -> AccountReceivable:
    amount = round2(order.total_amount)
    ar = AccountReceivable(
        customer_id=order.customer_id,
        sales_order_id=order.id,
        invoice_number=order.order_number,
        invoice_date=datetime.utcnow(),
        due_date=_due(order.customer.payment_terms),
        amount=amount,
        paid_amount=round2(ZERO),
        balance=amount,
        status=InvoiceStatus.PENDING,
    )
    db.session.add(ar)
    db.session.flush()
    return ar


def create_payable(order, amount) -> AccountPayable:
    amount = round2(amount)
    seq = AccountPayable.query.filter_by(purchase_order_id=order.id).count() + 1
    ap = AccountPayable(
        supplier_id=order.supplier_id,
        purchase_order_id=order.id,
        invoice_number=f"{order.order_number}-R{seq}",
        invoice_date=datetime.utcnow(),
        due_date=_due(order.supplier.payment_terms),
        amount=amount,
        paid_amount=round2(ZERO),
        balance=amount,
        status=InvoiceStatus.PENDING,
    )
    db.session.add(ap)
    db.session.flush()
    return ap


def _open_items(model, party_col, party_id=None, status=None, overdue_only=False, search=None):
    q = model.query
    if party_id:
        q = q.filter(party_col == int(party_id))
    if status:
        q = q.filter(model.status == InvoiceStatus(status))
    if overdue_only:
        q = q.filter(model.due_date < datetime.utcnow()).filter(
            model.status != InvoiceStatus.PAID
        )
    if search:
        q = q.filter(model.invoice_number.ilike(f"%{search.strip()}%"))
    return q.order_by(model.due_date.asc(), model.id.asc())


def list_receivables(
    customer_id=None, status=None, overdue_only=False, search=None, page=1, page_size=20
) -> dict:
    q = _open_items(
        AccountReceivable, AccountReceivable.customer_id, customer_id, status, overdue_only, search
    )
    return paginate(q, page, page_size)


def list_payables(
    supplier_id=None, status=None, overdue_only=False, search=None, page=1, page_size=20
) -> dict:
    q = _open_items(
        AccountPayable, AccountPayable.supplier_id, supplier_id, status, overdue_only, search
    )
    return paginate(q, page, page_size)


def get_receivable(ar_id: int) -> AccountReceivable:
    return _tx.fetch(AccountReceivable, ar_id, "Account receivable")


def get_payable(ap_id: int) -> AccountPayable:
    return _tx.fetch(AccountPayable, ap_id, "Account payable")


def _apply_payment(item, amount) -> Decimal:
    if item.status == InvoiceStatus.PAID:
        raise PreconditionFailed("Invoice is already fully paid")
    if item.status == InvoiceStatus.WRITTEN_OFF:
        raise PreconditionFailed("Invoice has been written off")
    amount = round2(amount)
    if amount <= 0:
        raise BadRequest("Payment amount must be greater than 0")
    balance = d(item.balance)
    if amount > balance:
        raise BadRequest(f"Payment amount exceeds balance of {round2(balance)}")

    item.paid_amount = round2(d(item.paid_amount) + amount)
    item.balance = round2(balance - amount)
    item.status = InvoiceStatus.PAID if item.balance == 0 else InvoiceStatus.PARTIAL
    return amount


def receive_payment(
    ar_id: int, amount, user_id, payment_date: datetime | None = None
) -> AccountReceivable:
    ar = get_receivable(ar_id)
    with _tx.atomic():
        paid = _apply_payment(ar, amount)
        _posted(
            f"Payment received for Invoice {ar.invoice_number}",
            [
                (ACCOUNTS["BANK"], paid, ZERO, "Bank deposit"),
                (ACCOUNTS["ACCOUNTS_RECEIVABLE"], ZERO, paid, "Accounts Receivable"),
            ],
            user_id,
            "AR_PAYMENT",
            ar.id,
            entry_date=payment_date,
        )
    logger.info("AR %s paid %s, balance %s", ar.invoice_number, paid, ar.balance)
    return ar


def make_payment(
    ap_id: int, amount, user_id, payment_date: datetime | None = None
) -> AccountPayable:
    ap = get_payable(ap_id)
    with _tx.atomic():
        paid = _apply_payment(ap, amount)
        _posted(
            f"Payment to {ap.supplier.name} for {ap.invoice_number}",
            [
                (ACCOUNTS["ACCOUNTS_PAYABLE"], paid, ZERO, "Accounts Payable"),
                (ACCOUNTS["BANK"], ZERO, paid, "Bank payment"),
            ],
            user_id,
            "AP_PAYMENT",
            ap.id,
            entry_date=payment_date,
        )
    logger.info("AP %s paid %s, balance %s", ap.invoice_number, paid, ap.balance)
    return ap


def _aging(rows, as_of: datetime | None = None) -> dict:
    today = (as_of or datetime.utcnow()).date()
    buckets = {
        "current": ZERO,
        "days_1_30": ZERO,
        "days_31_60": ZERO,
        "days_61_90": ZERO,
        "days_91_plus": ZERO,
    }
    for row in rows:
        balance = d(row.balance)
        overdue = (today - row.due_date.date()).days
        if overdue <= 0:
            key = "current"
        elif overdue <= 30:
            key = "days_1_30"
        elif overdue <= 60:
            key = "days_31_60"
        elif overdue <= 90:
            key = "days_61_90"
        else:
            key = "days_91_plus"
        buckets[key] += balance
    result = {k: round2(v) for k, v in buckets.items()}
    result["total"] = round2(sum(buckets.values(), ZERO))
    return result


def ar_aging(customer_id=None, as_of: datetime | None = None) -> dict:
    q = AccountReceivable.query.filter(
        AccountReceivable.status.notin_([InvoiceStatus.PAID, InvoiceStatus.WRITTEN_OFF])
    )
    if customer_id:
        _tx.fetch(Customer, customer_id, "Customer")
        q = q.filter(AccountReceivable.customer_id == int(customer_id))
    return _aging(q.all(), as_of)


def ap_aging(supplier_id=None, as_of: datetime | None = None) -> dict:
    q = AccountPayable.query.filter(AccountPayable.status != InvoiceStatus.PAID)
    if supplier_id:
        _tx.fetch(Supplier, supplier_id, "Supplier")
        q = q.filter(AccountPayable.supplier_id == int(supplier_id))
    return _aging(q.all(), as_of)


def stats() -> dict:
    ar = ar_aging()
    ap = ap_aging()
    now = datetime.utcnow()
    month_start = datetime(now.year, now.month, 1)
    entries = JournalEntry.query.filter(
        JournalEntry.status == JournalStatus.POSTED, JournalEntry.entry_date >= month_start
    ).count()
    active = ChartOfAccount.query.filter_by(is_active=True).count()
    return {
        "total_receivables": ar["total"],
        "overdue_receivables": round2(ar["total"] - ar["current"]),
        "total_payables": ap["total"],
        "overdue_payables": round2(ap["total"] - ap["current"]),
        "journal_entries_this_month": entries,
        "active_accounts": active,
    }


def seed_chart() -> dict:
    created_categories = 0
    created_accounts = 0
    by_code = {c.code: c for c in AccountCategory.query.all()}
    for code, name, account_type, normal, order in DEFAULT_CATEGORIES:
        if code in by_code:
            continue
        c = AccountCategory(
            code=code,
            name=name,
            account_type=account_type,
            normal_balance=normal,
            display_order=order,
        )
        db.session.add(c)
        by_code[code] = c
        created_categories += 1
    db.session.flush()

    for account_code, name, category_code in DEFAULT_ACCOUNTS:
        if ChartOfAccount.query.filter_by(account_code=account_code).one_or_none():
            continue
        db.session.add(
            ChartOfAccount(
                account_code=account_code,
                name=name,
                category_id=by_code[category_code].id,
                is_system=True,
            )
        )
        created_accounts += 1
    _tx.commit()
    logger.info("chart seeded: %s categories, %s accounts", created_categories, created_accounts)
    return {"categories_created": created_categories, "accounts_created": created_accounts}
