"""Ledger rules: balanced entries, posting, payments and aging."""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal

import pytest

from configs import db
from dao import accounting as acc_dao
from db.models.accounting import (
    AccountPayable,
    AccountReceivable,
    InvoiceStatus,
    JournalEntry,
    JournalStatus,
)
from utils.errors import BadRequest, Conflict, Forbidden, PreconditionFailed


def _open_item(model, amount, due_date, number, **party):
    item = model(
        **party,
        invoice_number=number,
        invoice_date=datetime(2025, 1, 1),
        due_date=due_date,
        amount=Decimal(amount),
        paid_amount=Decimal("0"),
        balance=Decimal(amount),
        status=InvoiceStatus.PENDING,
    )
    db.session.add(item)
    db.session.commit()
    return item


def _receivable(customer, amount, due_date, number="INV-1"):
    return _open_item(AccountReceivable, amount, due_date, number, customer_id=customer.id)


def _payable(supplier, amount, due_date, number="BILL-1"):
    return _open_item(AccountPayable, amount, due_date, number, supplier_id=supplier.id)


class TestValidateEntry:
    def test_balanced_within_tolerance(self):
        debit, credit = acc_dao.validate_journal_entry(
            [{"debit": "100.00"}, {"credit": "99.99"}]
        )
        assert debit == Decimal("100.00")
        assert credit == Decimal("99.99")

    def test_unbalanced(self):
        with pytest.raises(BadRequest, match="Debit 100.00, Credit 99.98"):
            acc_dao.validate_journal_entry([{"debit": 100}, {"credit": "99.98"}])

    def test_line_with_both_sides(self):
        with pytest.raises(BadRequest, match="either a debit or a credit"):
            acc_dao.validate_journal_entry([{"debit": 5, "credit": 5}, {"credit": 0}])

    def test_negative_amounts(self):
        with pytest.raises(BadRequest, match="cannot be negative"):
            acc_dao.validate_journal_entry([{"debit": -5}, {"credit": -5}])


# =============================================================================
# Manual entries
# =============================================================================


class TestJournalEntries:
    def _entry(self, admin, debit="100", credit="100"):
        cash = acc_dao.account_by_code("1101")
        equity = acc_dao.account_by_code("3100")
        return acc_dao.create_journal_entry(
            [
                {"account_id": cash.id, "debit": debit},
                {"account_id": equity.id, "credit": credit},
            ],
            admin.id,
            description="Owner capital",
        )

    def test_draft_does_not_touch_balances(self, chart, admin):
        je = self._entry(admin)

        assert je.status == JournalStatus.DRAFT
        assert je.entry_number.startswith("JE-")
        assert je.reference_type == "MANUAL"
        assert je.total_debit == Decimal("100.00")
        assert acc_dao.account_balance("1101") == Decimal("0.00")

    def test_post_then_void(self, chart, admin):
        je = self._entry(admin)

        acc_dao.post_journal_entry(je.id, admin.id)
        assert acc_dao.account_balance("1101") == Decimal("100.00")
        assert acc_dao.account_balance("3100") == Decimal("100.00")
        with pytest.raises(PreconditionFailed, match="Only draft entries"):
            acc_dao.post_journal_entry(je.id, admin.id)

        acc_dao.void_journal_entry(je.id)
        assert acc_dao.account_balance("1101") == Decimal("0.00")
        with pytest.raises(PreconditionFailed, match="already voided"):
            acc_dao.void_journal_entry(je.id)

    def test_needs_two_lines(self, chart, admin):
        cash = acc_dao.account_by_code("1101")
        with pytest.raises(BadRequest, match="at least two lines"):
            acc_dao.create_journal_entry([{"account_id": cash.id, "debit": 1}], admin.id)

    def test_unbalanced_entry_is_not_saved(self, chart, admin):
        with pytest.raises(BadRequest, match="not balanced"):
            self._entry(admin, credit="90")
        assert JournalEntry.query.count() == 0


# =============================================================================
# Chart of accounts
# =============================================================================


class TestChart:
    def test_seed_is_idempotent(self, chart):
        assert chart["accounts_created"] == len(acc_dao.DEFAULT_ACCOUNTS)
        again = acc_dao.seed_chart()
        assert again == {"categories_created": 0, "accounts_created": 0}

    def test_system_account_cannot_be_deleted(self, chart):
        with pytest.raises(Forbidden):
            acc_dao.delete_account(acc_dao.account_by_code("1110").id)

    def test_duplicate_code(self, chart):
        assets = acc_dao.account_by_code("1101").category_id
        with pytest.raises(Conflict):
            acc_dao.create_account("1101", "Petty cash", assets)

    def test_unused_account_is_deactivated(self, chart):
        assets = acc_dao.account_by_code("1101").category_id
        acc = acc_dao.create_account("1130", "Prepayments", assets)
        assert acc_dao.delete_account(acc.id).is_active is False


# =============================================================================
# Receivables
# =============================================================================


class TestPayments:
    def test_partial_then_full_payment(self, chart, admin, make_customer):
        ar = _receivable(make_customer(), "500.00", datetime(2025, 2, 1))

        ar = acc_dao.receive_payment(ar.id, "300", admin.id)
        assert ar.paid_amount == Decimal("300.00")
        assert ar.balance == Decimal("200.00")
        assert ar.status == InvoiceStatus.PARTIAL

        je = JournalEntry.query.filter_by(reference_type="AR_PAYMENT").one()
        assert je.status == JournalStatus.POSTED
        assert [(l.account.account_code, l.debit, l.credit) for l in je.lines] == [
            ("1102", Decimal("300.00"), Decimal("0.00")),
            ("1110", Decimal("0.00"), Decimal("300.00")),
        ]

        with pytest.raises(BadRequest, match="exceeds balance of 200.00"):
            acc_dao.receive_payment(ar.id, "250", admin.id)

        ar = acc_dao.receive_payment(ar.id, "200", admin.id)
        assert ar.status == InvoiceStatus.PAID
        with pytest.raises(PreconditionFailed, match="already fully paid"):
            acc_dao.receive_payment(ar.id, "1", admin.id)

    def test_aging_buckets(self, chart, make_customer):
        c = make_customer()
        _receivable(c, "100", datetime(2025, 7, 10), "INV-1")
        _receivable(c, "200", datetime(2025, 6, 15), "INV-2")
        _receivable(c, "300", datetime(2025, 4, 1), "INV-3")
        _receivable(c, "400", datetime(2025, 1, 1), "INV-4")

        aging = acc_dao.ar_aging(as_of=datetime(2025, 6, 30))

        assert aging["current"] == Decimal("100.00")
        assert aging["days_1_30"] == Decimal("200.00")
        assert aging["days_31_60"] == Decimal("0.00")
        assert aging["days_61_90"] == Decimal("300.00")
        assert aging["days_91_plus"] == Decimal("400.00")
        assert aging["total"] == Decimal("1000.00")


# =============================================================================
# Payables
# =============================================================================


class TestSupplierPayments:
    def test_partial_then_full_payment(self, chart, admin, make_supplier):
        ap = _payable(make_supplier(), "400.00", datetime(2025, 2, 1))

        ap = acc_dao.make_payment(ap.id, "150", admin.id)
        assert ap.paid_amount == Decimal("150.00")
        assert ap.balance == Decimal("250.00")
        assert ap.status == InvoiceStatus.PARTIAL

        je = JournalEntry.query.filter_by(reference_type="AP_PAYMENT").one()
        assert je.status == JournalStatus.POSTED
        assert [(l.account.account_code, l.debit, l.credit) for l in je.lines] == [
            ("2110", Decimal("150.00"), Decimal("0.00")),
            ("1102", Decimal("0.00"), Decimal("150.00")),
        ]

        with pytest.raises(BadRequest, match="exceeds balance of 250.00"):
            acc_dao.make_payment(ap.id, "300", admin.id)

        ap = acc_dao.make_payment(ap.id, "250", admin.id)
        assert ap.status == InvoiceStatus.PAID
        assert ap.balance == Decimal("0.00")
        with pytest.raises(PreconditionFailed, match="already fully paid"):
            acc_dao.make_payment(ap.id, "1", admin.id)

    def test_aging_skips_paid_bills(self, chart, admin, make_supplier):
        s = make_supplier()
        _payable(s, "300", datetime(2025, 6, 20), "BILL-1")
        _payable(s, "700", datetime(2025, 3, 1), "BILL-2")
        paid = _payable(s, "50", datetime(2025, 1, 1), "BILL-3")
        acc_dao.make_payment(paid.id, "50", admin.id)

        aging = acc_dao.ap_aging(as_of=datetime(2025, 6, 30))

        assert aging["current"] == Decimal("0.00")
        assert aging["days_1_30"] == Decimal("300.00")
        assert aging["days_91_plus"] == Decimal("700.00")
        assert aging["total"] == Decimal("1000.00")
