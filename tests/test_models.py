"""
Tests for PG Ledger

Test strategy:
1. Unit tests for individual components (models, ledger, aggregation)
2. Integration tests for flows (with in-memory or tmp_path storage)
3. No network, no shared files
"""

import json
from decimal import Decimal
from uuid import uuid4

import pytest
from pydantic import ValidationError

from pgledger.models.ledger import (
    WEEKS_PER_MONTH,
    LedgerDocument,
    MonthlyTotals,
    Payment,
    WeekRecord,
    month_for_week,
    parse_week_key,
    week_key,
)
from pgledger.models.audit import (
    AuditEvent,
    AuditEventBuilder,
    AuditEventType,
    AuditSeverity,
    audit_event_from_json_line,
)


class TestWeekRecordModels:
    """Tests for week-related Pydantic models."""

    def test_week_record_defaults(self):
        """A fresh week is empty and open."""
        record = WeekRecord()
        assert record.in_charge == ""
        assert record.payments == []
        assert record.expense == Decimal("0")
        assert record.market_items == []
        assert record.finalized is False

    def test_payment_strips_whitespace(self):
        payment = Payment(payer="  Asha  ", amount=Decimal("250"))
        assert payment.payer == "Asha"

    def test_payment_accepts_persisted_name(self):
        """The stored key for the payer is 'name'."""
        payment = Payment.model_validate({"name": "Ravi", "amount": "150"})
        assert payment.payer == "Ravi"
        assert payment.amount == Decimal("150")

    def test_payment_rejects_non_positive_amount(self):
        with pytest.raises(ValidationError):
            Payment(payer="Asha", amount=Decimal("0"))
        with pytest.raises(ValidationError):
            Payment(payer="Asha", amount=Decimal("-5"))

    def test_payment_float_keeps_decimal_digits(self):
        """Legacy JS numbers must not pick up binary float noise."""
        payment = Payment.model_validate({"name": "Asha", "amount": 33.33})
        assert payment.amount == Decimal("33.33")

    def test_week_record_missing_fields_default(self):
        """Older saves lack fields that were added later."""
        record = WeekRecord.model_validate({"weeklyExpense": 20})
        assert record.payments == []
        assert record.in_charge == ""
        assert record.market_items == []
        assert record.finalized is False
        assert record.expense == Decimal("20")

    def test_week_record_null_fields_default(self):
        record = WeekRecord.model_validate({
            "inCharge": None,
            "weeklyPayments": None,
            "weeklyExpense": None,
            "bazaarItems": None,
            "finalized": None,
        })
        assert record == WeekRecord()

    def test_week_record_rejects_negative_expense(self):
        with pytest.raises(ValidationError):
            WeekRecord(expense=Decimal("-1"))

    def test_week_record_dumps_persisted_names(self):
        record = WeekRecord(
            in_charge="Asha",
            payments=[Payment(payer="Ravi", amount=Decimal("150"))],
            market_items=["Rice"],
        )
        data = record.model_dump(mode="json", by_alias=True)
        assert data["inCharge"] == "Asha"
        assert data["weeklyPayments"] == [{"name": "Ravi", "amount": "150"}]
        assert data["weeklyExpense"] == "0"
        assert data["bazaarItems"] == ["Rice"]
        assert data["finalized"] is False

    def test_total_paid_and_status(self):
        record = WeekRecord(payments=[
            Payment(payer="A", amount=Decimal("33.33")),
            Payment(payer="B", amount=Decimal("33.33")),
            Payment(payer="C", amount=Decimal("33.33")),
        ])
        assert record.total_paid == Decimal("99.99")
        assert record.status_label == "In Progress"
        record.finalized = True
        assert record.status_label == "Finalized"


class TestWeekNumbering:
    """Tests for week keys and month derivation."""

    def test_weeks_per_month(self):
        assert WEEKS_PER_MONTH == 4

    @pytest.mark.parametrize("week,month", [(1, 1), (4, 1), (5, 2), (8, 2), (9, 3)])
    def test_month_for_week(self, week, month):
        assert month_for_week(week) == month

    def test_week_key_round_trip(self):
        assert week_key(12) == "week12"
        assert parse_week_key("week12") == 12

    @pytest.mark.parametrize(
        "key",
        ["week0", "weekly", "month1", "week-1", "week01", "week 1", "week+1"],
    )
    def test_parse_week_key_rejects_garbage(self, key):
        with pytest.raises(ValueError):
            parse_week_key(key)

    def test_document_rejects_bad_week_keys(self):
        with pytest.raises(ValidationError):
            LedgerDocument.model_validate({"currentWeek": 1, "weeks": {"monday": {}}})

    def test_document_rejects_week_zero(self):
        with pytest.raises(ValidationError):
            LedgerDocument.model_validate({"currentWeek": 0, "weeks": {}})

    def test_monthly_totals_balance(self):
        totals = MonthlyTotals(
            month=1,
            start_week=1,
            end_week=4,
            total_paid=Decimal("150"),
            total_expense=Decimal("30"),
        )
        assert totals.balance == Decimal("120")


class TestAuditModels:
    """Tests for audit-related models."""

    def test_audit_event_creation(self):
        event = AuditEvent(
            event_type=AuditEventType.PAYMENT_ADDED,
            description="Payment added",
        )
        assert event.event_type == AuditEventType.PAYMENT_ADDED
        assert event.severity == AuditSeverity.INFO

    def test_audit_event_to_log_dict(self):
        event = AuditEventBuilder.week_edited(
            AuditEventType.PAYMENT_ADDED,
            week_number=2,
            month_number=1,
            description="Payment added: Asha - 250",
            details={"payer": "Asha", "amount": "250"},
        )
        log_dict = event.to_log_dict()
        assert "event_id" in log_dict
        assert log_dict["event_type"] == "payment_added"
        assert log_dict["week_number"] == 2
        assert log_dict["details"]["payer"] == "Asha"
        assert log_dict["is_user_action"] is True

    def test_audit_event_json_line_round_trip(self):
        correlation_id = uuid4()
        event = AuditEventBuilder.mutation_rejected(
            week_number=3,
            month_number=1,
            operation="add_payment",
            error_code="week_finalized",
            error_message="Week 3 is finalized.",
            correlation_id=correlation_id,
        )
        line = event.to_json_line()
        assert "\n" not in line
        assert json.loads(line)["error_code"] == "week_finalized"

        parsed = audit_event_from_json_line(line)
        assert parsed.event_id == event.event_id
        assert parsed.correlation_id == correlation_id
        assert parsed.severity == AuditSeverity.WARNING

    def test_builder_week_moved(self):
        forward = AuditEventBuilder.week_moved(True, 5, 2)
        back = AuditEventBuilder.week_moved(False, 4, 1)
        assert forward.event_type == AuditEventType.WEEK_ADVANCED
        assert back.event_type == AuditEventType.WEEK_RETREATED
        assert forward.month_number == 2

    def test_builder_storage_failed(self):
        event = AuditEventBuilder.storage_failed(saving=True, error_message="disk full")
        assert event.event_type == AuditEventType.SAVE_FAILED
        assert event.severity == AuditSeverity.ERROR
        assert event.error_message == "disk full"

        event = AuditEventBuilder.storage_failed(saving=False, error_message="bad json")
        assert event.event_type == AuditEventType.LOAD_FAILED

    def test_builder_clear_failed(self):
        event = AuditEventBuilder.clear_failed("read-only")
        assert event.event_type == AuditEventType.CLEAR_FAILED
        assert event.severity == AuditSeverity.ERROR
        assert "clear" in event.description

    def test_long_text_is_clipped(self):
        """User text of any length still makes a valid event."""
        event = AuditEventBuilder.mutation_rejected(
            week_number=1,
            month_number=1,
            operation="add_payment",
            error_code="invalid_input",
            error_message="x" * 600,
        )
        assert len(event.description) == 500
        assert event.description.endswith("...")
        assert len(event.error_message) == 500

    def test_short_text_is_kept(self):
        event = AuditEvent(event_type=AuditEventType.LEDGER_RESET, description="reset")
        assert event.description == "reset"


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
