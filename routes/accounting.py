from flask import Blueprint
from flask_login import current_user

from dao import accounting as acc_dao
from db.models.user import UserRole
from schemas.accounting import (
    AccountCategoryIn,
    AccountCategoryOut,
    AccountIn,
    AccountingStatsOut,
    AccountListIn,
    AccountOut,
    AccountUpdateIn,
    AgingIn,
    AgingOut,
    BalanceIn,
    BalanceOut,
    JournalCreate,
    JournalListIn,
    JournalOut,
    OpenItemListIn,
    PayableOut,
    PaymentIn,
    ReceivableOut,
    SeedChartOut,
)
from schemas.common import IdIn
from utils.auth import roles_required
from utils.rpc import procedure

accounting_bp = Blueprint("accounting_api", __name__, url_prefix="/api/accounting")


# ---------------- chart of accounts ----------------
@accounting_bp.post("/list_categories")
@procedure(out=AccountCategoryOut)
def category_list():
    return acc_dao.list_categories()


@accounting_bp.post("/create_category")
@procedure(AccountCategoryIn, AccountCategoryOut)
def category_create(data: AccountCategoryIn):
    return acc_dao.create_category(**data.model_dump())


@accounting_bp.post("/list_accounts")
@procedure(AccountListIn, AccountOut)
def account_list(data: AccountListIn):
    return acc_dao.list_accounts(**data.model_dump())


@accounting_bp.post("/get_account")
@procedure(IdIn, AccountOut)
def account_get(data: IdIn):
    return acc_dao.get_account(data.id)


@accounting_bp.post("/create_account")
@procedure(AccountIn, AccountOut)
def account_create(data: AccountIn):
    return acc_dao.create_account(**data.model_dump())


@accounting_bp.post("/update_account")
@procedure(AccountUpdateIn, AccountOut)
def account_update(data: AccountUpdateIn):
    return acc_dao.update_account(data.id, **data.data.model_dump(exclude_unset=True))


@accounting_bp.post("/delete_account")
@procedure(IdIn, AccountOut)
def account_delete(data: IdIn):
    return acc_dao.delete_account(data.id)


@accounting_bp.post("/account_balance")
@procedure(BalanceIn, BalanceOut)
def account_balance(data: BalanceIn):
    balance = acc_dao.account_balance(data.account_code, data.as_of)
    return {"account_code": data.account_code, "balance": balance}


# ---------------- journal ----------------
@accounting_bp.post("/list_journal_entries")
@procedure(JournalListIn, JournalOut)
def journal_list(data: JournalListIn):
    return acc_dao.list_journal_entries(**data.model_dump())


@accounting_bp.post("/get_journal_entry")
@procedure(IdIn, JournalOut)
def journal_get(data: IdIn):
    return acc_dao.get_journal_entry(data.id)


@accounting_bp.post("/create_journal_entry")
@procedure(JournalCreate, JournalOut)
def journal_create(data: JournalCreate):
    return acc_dao.create_journal_entry(user_id=current_user.id, **data.model_dump())


@accounting_bp.post("/post_journal_entry")
@procedure(IdIn, JournalOut)
def journal_post(data: IdIn):
    return acc_dao.post_journal_entry(data.id, current_user.id)


@accounting_bp.post("/void_journal_entry")
@procedure(IdIn, JournalOut)
def journal_void(data: IdIn):
    return acc_dao.void_journal_entry(data.id)


# ---------------- receivables ----------------
@accounting_bp.post("/list_receivables")
@procedure(OpenItemListIn, ReceivableOut)
def receivable_list(data: OpenItemListIn):
    params = data.model_dump(exclude={"party_id"})
    return acc_dao.list_receivables(customer_id=data.party_id, **params)


@accounting_bp.post("/get_receivable")
@procedure(IdIn, ReceivableOut)
def receivable_get(data: IdIn):
    return acc_dao.get_receivable(data.id)


@accounting_bp.post("/receive_payment")
@procedure(PaymentIn, ReceivableOut)
def receivable_pay(data: PaymentIn):
    return acc_dao.receive_payment(data.id, data.amount, current_user.id, data.payment_date)


@accounting_bp.post("/ar_aging")
@procedure(AgingIn, AgingOut)
def receivable_aging(data: AgingIn):
    return acc_dao.ar_aging(data.party_id, data.as_of)


# ---------------- payables ----------------
@accounting_bp.post("/list_payables")
@procedure(OpenItemListIn, PayableOut)
def payable_list(data: OpenItemListIn):
    params = data.model_dump(exclude={"party_id"})
    return acc_dao.list_payables(supplier_id=data.party_id, **params)


@accounting_bp.post("/get_payable")
@procedure(IdIn, PayableOut)
def payable_get(data: IdIn):
    return acc_dao.get_payable(data.id)


@accounting_bp.post("/make_payment")
@procedure(PaymentIn, PayableOut)
def payable_pay(data: PaymentIn):
    return acc_dao.make_payment(data.id, data.amount, current_user.id, data.payment_date)


@accounting_bp.post("/ap_aging")
@procedure(AgingIn, AgingOut)
def payable_aging(data: AgingIn):
    return acc_dao.ap_aging(data.party_id, data.as_of)


@accounting_bp.post("/stats")
@procedure(out=AccountingStatsOut)
def accounting_stats():
    return acc_dao.stats()


@accounting_bp.post("/seed_chart")
@procedure(out=SeedChartOut)
@roles_required(UserRole.ADMIN)
def accounting_seed_chart():
    return acc_dao.seed_chart()
