"""Tests for the week/month ledger state machine."""

from decimal import Decimal

import pytest

from pgledger.ledger import (
    AtBoundaryError,
    IndexOutOfRangeError,
    InvalidInputError,
    Ledger,
    LedgerError,
    WeekFinalizedError,
    WeekStore,
)
from pgledger.models.ledger import WeekRecord


@pytest.fixture
def ledger():
    return Ledger()


class TestWeekStore:
    """Tests for creation-on-demand of week records."""

    def test_get_or_create_is_idempotent(self):
        store = WeekStore()
        first = store.get_or_create(3)
        first.in_charge = "Asha"
        second = store.get_or_create(3)
        assert second is first
        assert len(store) == 1

    def test_get_does_not_create(self):
        store = WeekStore()
        assert store.get(2) is None
        assert 2 not in store

    def test_iterates_in_week_order(self):
        store = WeekStore()
        for week in (3, 1, 2):
            store.get_or_create(week)
        assert list(store) == [1, 2, 3]
        assert [week for week, _ in store.items()] == [1, 2, 3]

    @pytest.mark.parametrize("bad", [0, -1, "1", True])
    def test_rejects_invalid_week_numbers(self, bad):
        with pytest.raises(InvalidInputError):
            WeekStore().get_or_create(bad)


class TestNavigation:
    """Tests for the current-week cursor and the derived month."""

    def test_fresh_ledger_starts_at_week_one(self, ledger):
        assert ledger.current_week == 1
        assert ledger.current_month == 1
        assert 1 in ledger.weeks

    def test_month_boundary(self, ledger):
        """Weeks 2-4 stay in month 1; week 5 opens month 2."""
        for expected_week in (2, 3, 4):
            ledger.advance_week()
            assert ledger.current_week == expected_week
            assert ledger.current_month == 1

        ledger.advance_week()
        assert ledger.current_week == 5
        assert ledger.current_month == 2

    def test_advance_creates_week(self, ledger):
        ledger.advance_week()
        assert ledger.record(2) == WeekRecord()

    def test_retreat_at_week_one_fails(self, ledger):
        with pytest.raises(AtBoundaryError):
            ledger.retreat_week()
        assert ledger.current_week == 1
        assert ledger.current_month == 1

    def test_retreat_across_month_boundary(self, ledger):
        """Going back from week 5 lands in month 1 again."""
        for _ in range(4):
            ledger.advance_week()
        assert ledger.current_month == 2

        assert ledger.retreat_week() == 4
        assert ledger.current_month == 1

    def test_month_always_matches_week_after_wandering(self, ledger):
        for _ in range(9):
            ledger.advance_week()
        for _ in range(6):
            ledger.retreat_week()
        for _ in range(2):
            ledger.advance_week()
        assert ledger.current_week == 6
        assert ledger.current_month == 2

    def test_retreat_keeps_existing_data(self, ledger):
        ledger.add_payment("Asha", 100)
        ledger.advance_week()
        ledger.retreat_week()
        assert ledger.weekly_total_paid() == Decimal("100")


class TestCurrentWeekEdits:
    """Tests for mutations of the current week."""

    def test_set_in_charge_trims(self, ledger):
        assert ledger.set_in_charge("  Asha ") == "Asha"
        assert ledger.current_record.in_charge == "Asha"

    @pytest.mark.parametrize("blank", ["", "   ", None, 42])
    def test_set_in_charge_rejects_blank(self, ledger, blank):
        with pytest.raises(InvalidInputError):
            ledger.set_in_charge(blank)
        assert ledger.current_record.in_charge == ""

    def test_add_payment(self, ledger):
        payment = ledger.add_payment(" Asha ", "250")
        assert payment.payer == "Asha"
        assert payment.amount == Decimal("250")
        assert ledger.current_record.payments == [payment]

    @pytest.mark.parametrize(
        "payer,amount",
        [
            ("", 100),
            ("   ", 100),
            ("Asha", 0),
            ("Asha", -5),
            ("Asha", "abc"),
            ("Asha", ""),
            ("Asha", float("nan")),
            ("Asha", float("inf")),
            ("Asha", "Infinity"),
            ("Asha", True),
            ("Asha", None),
        ],
    )
    def test_add_payment_rejects_invalid_input(self, ledger, payer, amount):
        with pytest.raises(InvalidInputError):
            ledger.add_payment(payer, amount)
        assert ledger.current_record.payments == []

    def test_three_payments_sum_exactly(self, ledger):
        for payer in ("A", "B", "C"):
            ledger.add_payment(payer, 33.33)
        assert ledger.weekly_total_paid(1) == Decimal("99.99")

    def test_remove_last_payment_leaves_others(self, ledger):
        ledger.add_payment("Asha", 250)
        ledger.add_payment("Ravi", 150)
        ledger.add_payment("Meena", 100)

        removed = ledger.remove_payment(2)
        assert removed.payer == "Meena"
        assert [p.payer for p in ledger.current_record.payments] == ["Asha", "Ravi"]

    def test_remove_payment_at_length_fails(self, ledger):
        ledger.add_payment("Asha", 250)
        with pytest.raises(IndexOutOfRangeError):
            ledger.remove_payment(1)
        assert len(ledger.current_record.payments) == 1

    def test_remove_payment_negative_index_fails(self, ledger):
        ledger.add_payment("Asha", 250)
        with pytest.raises(IndexOutOfRangeError):
            ledger.remove_payment(-1)

    def test_remove_payment_non_integer_index_fails(self, ledger):
        ledger.add_payment("Asha", 250)
        with pytest.raises(InvalidInputError):
            ledger.remove_payment("0")

    def test_set_expense(self, ledger):
        assert ledger.set_expense("20.50") == Decimal("20.50")
        assert ledger.set_expense(0) == Decimal("0")
        assert ledger.current_record.expense == Decimal("0")

    @pytest.mark.parametrize("amount", [-1, "x", float("nan"), None])
    def test_set_expense_rejects_invalid(self, ledger, amount):
        ledger.set_expense(10)
        with pytest.raises(InvalidInputError):
            ledger.set_expense(amount)
        assert ledger.current_record.expense == Decimal("10")

    def test_market_items(self, ledger):
        ledger.add_market_item(" Rice ")
        ledger.add_market_item("Dal")
        assert ledger.current_record.market_items == ["Rice", "Dal"]

        assert ledger.remove_market_item(0) == "Rice"
        assert ledger.current_record.market_items == ["Dal"]

        with pytest.raises(IndexOutOfRangeError):
            ledger.remove_market_item(1)

    def test_add_market_item_rejects_blank(self, ledger):
        with pytest.raises(InvalidInputError):
            ledger.add_market_item("  ")

    def test_edits_apply_to_current_week_only(self, ledger):
        ledger.add_payment("Asha", 100)
        ledger.advance_week()
        ledger.add_payment("Ravi", 50)
        assert ledger.weekly_total_paid(1) == Decimal("100")
        assert ledger.weekly_total_paid(2) == Decimal("50")


class TestFinalize:
    """Tests for the one-way finalize latch."""

    @pytest.fixture
    def closed(self, ledger):
        ledger.set_in_charge("Asha")
        ledger.add_payment("Ravi", 150)
        ledger.set_expense(40)
        ledger.add_market_item("Rice")
        ledger.finalize()
        return ledger

    @pytest.mark.parametrize(
        "operation,args",
        [
            ("set_in_charge", ("Meena",)),
            ("add_payment", ("Meena", 10)),
            ("remove_payment", (0,)),
            ("set_expense", (5,)),
            ("add_market_item", ("Oil",)),
            ("remove_market_item", (0,)),
        ],
    )
    def test_mutations_fail_on_finalized_week(self, closed, operation, args):
        before = closed.current_record.model_copy(deep=True)
        with pytest.raises(WeekFinalizedError):
            getattr(closed, operation)(*args)
        assert closed.current_record == before

    def test_finalized_check_comes_before_validation(self, closed):
        """Even bad input reports the closed week."""
        with pytest.raises(WeekFinalizedError):
            closed.add_payment("", -1)

    def test_finalize_twice_is_harmless(self, closed):
        closed.finalize()
        assert closed.current_record.finalized is True

    def test_other_weeks_stay_editable(self, closed):
        closed.advance_week()
        closed.add_payment("Meena", 75)
        assert closed.weekly_total_paid() == Decimal("75")

    def test_errors_share_a_base_class(self, closed):
        with pytest.raises(LedgerError) as exc_info:
            closed.set_expense(1)
        assert exc_info.value.code == "week_finalized"
        assert exc_info.value.week_number == 1


class TestReset:
    """Tests for the full reset."""

    def test_reset_returns_to_week_one(self, ledger):
        ledger.add_payment("Asha", 100)
        for _ in range(5):
            ledger.advance_week()
        ledger.finalize()

        ledger.reset()

        assert ledger.current_week == 1
        assert ledger.current_month == 1
        assert list(ledger.weeks) == [1]
        assert ledger.current_record == WeekRecord()
        assert ledger == Ledger()


class TestScenario:
    """End-to-end ledger usage without persistence."""

    def test_asha_and_ravi(self):
        ledger = Ledger()
        ledger.add_payment("Asha", 250)
        ledger.add_payment("Ravi", 150)
        assert ledger.weekly_total_paid(1) == Decimal("400")

        ledger.remove_payment(0)
        assert ledger.weekly_total_paid(1) == Decimal("150")

    def test_document_round_trip(self):
        ledger = Ledger()
        ledger.set_in_charge("Asha")
        ledger.add_payment("Ravi", "150.25")
        ledger.advance_week()
        ledger.add_market_item("Milk")
        ledger.finalize()

        document = ledger.to_document()
        assert document.current_week == 2
        assert document.current_month == 1
        assert set(document.weeks) == {"week1", "week2"}

        assert Ledger.from_document(document) == ledger

    def test_document_is_a_copy(self):
        ledger = Ledger()
        document = ledger.to_document()
        document.weeks["week1"].in_charge = "Changed"
        assert ledger.current_record.in_charge == ""
