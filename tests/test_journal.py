"""
Journal Entry and Reversal Tests
================================

Double-entry posting rules, manual entries, reversals and the chart of accounts.
"""

import pytest
from datetime import date
from decimal import Decimal

from erp_ledger.common.exceptions import (
    AlreadyProcessedError,
    NotFoundError,
    UnbalancedEntryError,
    ValidationFailure,
)
from erp_ledger.models.account import AccountType, PeriodStatus
from erp_ledger.models.journal import JournalEntry
from erp_ledger.services import account_service, journal_service
from erp_ledger.services.financial_ledger import FinancialLedgerService

from .conftest import ledger_totals


def _cash_sale_lines(amount):
    return [
        {"account_id": "111", "debit": Decimal(amount), "credit": 0},
        {"account_id": "511", "debit": 0, "credit": Decimal(amount)},
    ]


class TestPosting:

    def test_balanced_entry_is_posted(self, db):
        entry = journal_service.post_journal_entry(
            db,
            "Owner contribution",
            [journal_service.debit(db, "111", 500), journal_service.credit(db, "411", 500)],
        )
        db.commit()

        assert entry.id == "JE001"
        assert entry.total_debit == entry.total_credit == Decimal("500")
        assert [line.account_code for line in entry.lines] == ["111", "411"]
        assert entry.lines[0].account_name == "Cash"

    def test_unbalanced_entry_is_rejected(self, db):
        with pytest.raises(UnbalancedEntryError):
            journal_service.post_journal_entry(
                db,
                "Broken",
                [journal_service.debit(db, "111", 100), journal_service.credit(db, "511", 90)],
            )

    def test_zero_lines_are_dropped(self, db):
        entry = journal_service.post_journal_entry(
            db,
            "Sale without tax",
            [
                journal_service.debit(db, "131", 100),
                journal_service.credit(db, "511", 100),
                journal_service.credit(db, "3331", 0),
            ],
        )
        assert len(entry.lines) == 2

    def test_single_line_is_rejected(self, db):
        with pytest.raises(UnbalancedEntryError):
            journal_service.post_journal_entry(
                db, "One side", [journal_service.debit(db, "111", 0), journal_service.credit(db, "511", 0)]
            )

    def test_line_with_both_sides_is_rejected(self, db):
        cash = account_service.get_account_by_code(db, "111")
        revenue = account_service.get_account_by_code(db, "511")
        with pytest.raises(UnbalancedEntryError):
            journal_service.validate_lines([(cash, Decimal("10"), Decimal("10")), (revenue, Decimal("0"), Decimal("0"))])

    def test_negative_amount_is_rejected(self, db):
        cash = account_service.get_account_by_code(db, "111")
        revenue = account_service.get_account_by_code(db, "511")
        with pytest.raises(UnbalancedEntryError):
            journal_service.validate_lines([(cash, Decimal("-10"), Decimal("0")), (revenue, Decimal("0"), Decimal("-10"))])

    def test_missing_system_account_is_reported(self, db):
        with pytest.raises(NotFoundError):
            journal_service.debit(db, "999", 10)


class TestManualEntries:

    def test_manual_entry_uses_own_prefix(self, db):
        entry = journal_service.create_journal_entry(db, "Cash sale", _cash_sale_lines("250"))

        assert entry.id == "JE-M001"
        assert entry.total_debit == Decimal("250")

    def test_unbalanced_manual_entry_leaves_nothing_behind(self, db):
        lines = _cash_sale_lines("250")
        lines[1]["credit"] = Decimal("200")

        with pytest.raises(UnbalancedEntryError):
            journal_service.create_journal_entry(db, "Cash sale", lines)

        assert db.query(JournalEntry).count() == 0
        assert ledger_totals(db) == (Decimal("0"), Decimal("0"))

    def test_unknown_account_is_rejected(self, db):
        lines = _cash_sale_lines("10")
        lines[0]["account_id"] = "999"
        with pytest.raises(ValidationFailure):
            journal_service.create_journal_entry(db, "Cash sale", lines)

    def test_blank_description_is_rejected(self, db):
        with pytest.raises(ValidationFailure):
            journal_service.create_journal_entry(db, "   ", _cash_sale_lines("10"))

    def test_posting_order_spans_both_prefixes(self, db):
        first = journal_service.create_journal_entry(db, "Manual", _cash_sale_lines("10"))
        second = journal_service.post_journal_entry(
            db, "Auto", [journal_service.debit(db, "111", 5), journal_service.credit(db, "511", 5)]
        )
        db.commit()
        assert second.seq > first.seq


class TestReversal:

    def test_reversal_swaps_sides(self, db):
        original = journal_service.create_journal_entry(db, "Cash sale", _cash_sale_lines("300"))

        reversal = journal_service.reverse_journal_entry(db, original.id)

        assert reversal.reversal_of_id == original.id
        assert reversal.description == f"Reversal of {original.id}: Cash sale"
        by_code = {line.account_code: line for line in reversal.lines}
        assert by_code["111"].credit == Decimal("300")
        assert by_code["511"].debit == Decimal("300")

    def test_reversal_nets_accounts_to_zero(self, db):
        original = journal_service.create_journal_entry(db, "Cash sale", _cash_sale_lines("300"))
        journal_service.reverse_journal_entry(db, original.id, entry_date=date.today())

        service = FinancialLedgerService(db)
        rows, count, totals = service.get_all_journal_entries(account_id="111")
        assert count == 2
        assert totals["total_debit"] == totals["total_credit"] == Decimal("600")

        cash_lines = [line for row in rows for line in row.lines if line.account_code == "111"]
        assert sum(line.debit for line in cash_lines) == sum(line.credit for line in cash_lines)

    def test_second_reversal_is_rejected(self, db):
        original = journal_service.create_journal_entry(db, "Cash sale", _cash_sale_lines("300"))
        journal_service.reverse_journal_entry(db, original.id)

        with pytest.raises(AlreadyProcessedError):
            journal_service.reverse_journal_entry(db, original.id)

    def test_reversal_cannot_be_reversed(self, db):
        original = journal_service.create_journal_entry(db, "Cash sale", _cash_sale_lines("300"))
        reversal = journal_service.reverse_journal_entry(db, original.id)

        with pytest.raises(ValidationFailure):
            journal_service.reverse_journal_entry(db, reversal.id)

    def test_unknown_entry(self, db):
        with pytest.raises(NotFoundError):
            journal_service.reverse_journal_entry(db, "JE404")


class TestJournalListing:

    def test_filters_by_reference_and_search(self, db):
        journal_service.create_journal_entry(db, "Rent for March", _cash_sale_lines("10"), reference_id="X1")
        journal_service.create_journal_entry(db, "Office snacks", _cash_sale_lines("20"), reference_id="X2")

        service = FinancialLedgerService(db)
        rows, count, _ = service.get_all_journal_entries(reference_id="X2")
        assert count == 1 and rows[0].description == "Office snacks"

        rows, count, _ = service.get_all_journal_entries(search="rent")
        assert count == 1 and rows[0].reference_id == "X1"

    def test_newest_first(self, db):
        journal_service.create_journal_entry(db, "First", _cash_sale_lines("10"))
        journal_service.create_journal_entry(db, "Second", _cash_sale_lines("20"))

        rows, _, _ = FinancialLedgerService(db).get_all_journal_entries()
        assert [row.description for row in rows] == ["Second", "First"]


class TestChartOfAccounts:

    def test_seed_is_idempotent(self, db):
        assert account_service.seed_chart_of_accounts(db) == 0
        _, count = account_service.get_all_accounts(db)
        assert count == len(account_service.DEFAULT_CHART_OF_ACCOUNTS)

    def test_system_accounts_are_flagged(self, db):
        assert account_service.get_account_by_code(db, "111").is_system_account
        assert not account_service.get_account_by_code(db, "6421").is_system_account

    def test_create_and_delete_custom_account(self, db):
        account = account_service.create_account(db, "6422", "Utilities", AccountType.EXPENSE)
        assert account.id == "6422"

        assert account_service.delete_account(db, "6422") is True
        assert account_service.get_account_by_id(db, "6422") is None

    def test_duplicate_code_is_rejected(self, db):
        with pytest.raises(ValidationFailure):
            account_service.create_account(db, "111", "Petty cash", AccountType.ASSET)

    def test_system_account_can_be_renamed_not_retyped(self, db):
        renamed = account_service.update_account(db, "111", name="Cash on hand")
        assert renamed.name == "Cash on hand"

        with pytest.raises(ValidationFailure):
            account_service.update_account(db, "111", type=AccountType.EXPENSE)

    def test_system_account_cannot_be_deleted(self, db):
        with pytest.raises(ValidationFailure):
            account_service.delete_account(db, "111")

    def test_account_with_postings_cannot_be_deleted(self, db):
        account_service.create_account(db, "6422", "Utilities", AccountType.EXPENSE)
        journal_service.create_journal_entry(
            db,
            "Electricity",
            [
                {"account_id": "6422", "debit": Decimal("40"), "credit": 0},
                {"account_id": "111", "debit": 0, "credit": Decimal("40")},
            ],
        )
        with pytest.raises(ValidationFailure):
            account_service.delete_account(db, "6422")

    def test_filter_by_type(self, db):
        accounts, count = account_service.get_all_accounts(db, type=AccountType.REVENUE)
        assert count == 2
        assert [a.code for a in accounts] == ["511", "515"]


class TestAccountingPeriods:

    def test_open_and_close(self, db):
        period = account_service.create_period(db, "January", date(2026, 1, 1), date(2026, 1, 31))
        assert period.id == "P202601"
        assert period.status == PeriodStatus.OPEN

        closed = account_service.close_period(db, "P202601")
        assert closed.status == PeriodStatus.CLOSED

    def test_closing_twice_is_rejected(self, db):
        account_service.create_period(db, "January", date(2026, 1, 1), date(2026, 1, 31))
        account_service.close_period(db, "P202601")

        with pytest.raises(AlreadyProcessedError):
            account_service.close_period(db, "P202601")

    def test_reversed_dates_are_rejected(self, db):
        with pytest.raises(ValidationFailure):
            account_service.create_period(db, "Backwards", date(2026, 2, 1), date(2026, 1, 1))
