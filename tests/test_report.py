"""Tests for the printable weekly report."""

from decimal import Decimal

from pgledger.ledger import Ledger
from pgledger.reports import build_report, render_html_report


def build_ledger() -> Ledger:
    ledger = Ledger()
    ledger.set_in_charge("Asha")
    ledger.add_payment("Asha", 100)
    ledger.set_expense(20)
    ledger.advance_week()
    ledger.add_payment("Ravi", "33.335")
    ledger.set_expense(10)
    ledger.add_market_item("Rice")
    return ledger


class TestBuildReport:

    def test_snapshot_of_current_week(self):
        ledger = build_ledger()
        report = build_report(ledger)

        assert report.week_number == 2
        assert report.month_number == 1
        assert report.weekly_total_paid == Decimal("33.335")
        assert report.monthly_totals.total_paid == Decimal("133.335")
        assert report.monthly_totals.total_expense == Decimal("30")
        assert report.record.market_items == ["Rice"]

    def test_snapshot_is_read_only(self):
        ledger = build_ledger()
        report = build_report(ledger)
        report.record.market_items.append("Sugar")
        assert ledger.current_record.market_items == ["Rice"]

    def test_unvisited_week_is_not_created(self):
        ledger = build_ledger()
        report = build_report(ledger, week_number=6)
        assert report.month_number == 2
        assert report.record.payments == []
        assert 6 not in ledger.weeks


class TestRenderHtmlReport:

    def test_contents(self):
        html = render_html_report(build_report(build_ledger()), currency_symbol="₹")

        assert html.startswith("<!DOCTYPE html>")
        assert "<strong>Week:</strong> 2, <strong>Month:</strong> 1" in html
        assert "<strong>In-Charge:</strong> Not Set" in html
        assert "Ravi: ₹33.34" in html
        assert "<li>Rice</li>" in html
        assert "<strong>Weekly Total Paid:</strong> ₹33.34" in html
        assert "<strong>Weekly Expense:</strong> ₹10.00" in html
        assert "<strong>Monthly Total Paid:</strong> ₹133.34" in html
        assert "<strong>Monthly Expense:</strong> ₹30.00" in html
        assert "<strong>Status:</strong> In Progress" in html
        assert "window.print()" in html

    def test_empty_week(self):
        html = render_html_report(build_report(Ledger()))
        assert "No payment entries recorded for this week." in html
        assert "No items recorded for this week." in html

    def test_finalized_status_and_title(self):
        ledger = Ledger()
        ledger.finalize()
        html = render_html_report(build_report(ledger), household_name="Green Villa")
        assert "<strong>Status:</strong> Finalized" in html
        assert "<h1>Green Villa Expense Report</h1>" in html

    def test_user_text_is_escaped(self):
        ledger = Ledger()
        ledger.set_in_charge("<b>Asha</b>")
        ledger.add_market_item("<script>alert(1)</script>")
        html = render_html_report(build_report(ledger), auto_print=False)

        assert "<b>Asha</b>" not in html
        assert "&lt;b&gt;Asha&lt;/b&gt;" in html
        assert "<script>" not in html
