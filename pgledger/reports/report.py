"""
Printable Weekly Report

Two steps, kept apart so the snapshot can be tested without HTML:
1. build_report: read-only snapshot of one week and its month
2. render_html_report: a standalone page that prints itself on load

The report never changes the ledger. Building it for a week that was
never visited shows an empty week rather than creating one.

All user-entered text is HTML-escaped.
"""

from datetime import datetime, timezone
from decimal import Decimal
from html import escape
from typing import Optional

from pydantic import BaseModel, Field

from pgledger.ledger import Ledger, format_amount
from pgledger.models.ledger import MonthlyTotals, WeekRecord, month_for_week


class WeeklyReport(BaseModel):
    """Snapshot handed to the renderer."""

    week_number: int = Field(..., ge=1)
    month_number: int = Field(..., ge=1)
    record: WeekRecord
    weekly_total_paid: Decimal
    monthly_totals: MonthlyTotals
    generated_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc)
    )


def build_report(ledger: Ledger, week_number: Optional[int] = None) -> WeeklyReport:
    """Snapshot a week (the current one by default)."""
    if week_number is None:
        week_number = ledger.current_week
    month_number = month_for_week(week_number)
    record = ledger.record(week_number)
    return WeeklyReport(
        week_number=week_number,
        month_number=month_number,
        record=record.model_copy(deep=True) if record is not None else WeekRecord(),
        weekly_total_paid=ledger.weekly_total_paid(week_number),
        monthly_totals=ledger.monthly_totals(month_number),
    )


_STYLE = """
    body { font-family: Arial, sans-serif; padding: 20px; color: #333; }
    .report-header { text-align: center; margin-bottom: 30px; }
    h1 { font-size: 24px; color: #2c3e50; margin-bottom: 10px; }
    h2 { font-size: 18px; color: #3498db; margin-top: 25px; margin-bottom: 10px;
         border-bottom: 1px solid #eee; padding-bottom: 5px; }
    p { margin-bottom: 5px; }
    ul { list-style-type: disc; padding-left: 25px; margin-bottom: 20px; }
    li { margin-bottom: 5px; }
    .summary-section-print p { font-weight: bold; }
    @media print {
        body { -webkit-print-color-adjust: exact; }
    }
"""


def _list_items(entries: list[str], empty_message: str) -> str:
    if not entries:
        return f"<li>{escape(empty_message)}</li>"
    return "\n".join(f"<li>{entry}</li>" for entry in entries)


def render_html_report(
    report: WeeklyReport,
    currency_symbol: str = "₹",
    household_name: str = "PG",
    auto_print: bool = True,
) -> str:
    """Render the snapshot as a complete, printable HTML document."""
    record = report.record
    totals = report.monthly_totals
    title = f"{household_name} Expense Report"

    payments = _list_items(
        [
            f"{escape(p.payer)}: {escape(format_amount(p.amount, currency_symbol))}"
            for p in record.payments
        ],
        "No payment entries recorded for this week.",
    )
    items = _list_items(
        [escape(item) for item in record.market_items],
        "No items recorded for this week.",
    )

    def money(amount: Decimal) -> str:
        return escape(format_amount(amount, currency_symbol))

    script = (
        "<script>window.onload = function() { window.print(); };</script>"
        if auto_print else ""
    )

    return f"""<!DOCTYPE html>
<html>
<head>
<meta charset="utf-8">
<title>{escape(title)} - Week {report.week_number}</title>
<style>{_STYLE}</style>
</head>
<body>
<div class="report-header">
  <h1>{escape(title)}</h1>
  <p><strong>Week:</strong> {report.week_number}, <strong>Month:</strong> {report.month_number}</p>
  <p><strong>In-Charge:</strong> {escape(record.in_charge or "Not Set")}</p>
</div>
<div class="report-section">
  <h2>Weekly Payment Entries:</h2>
  <ul>
{payments}
  </ul>
</div>
<div class="report-section">
  <h2>Weekly Market Items:</h2>
  <ul>
{items}
  </ul>
</div>
<div class="report-section summary-section-print">
  <h2>Summary:</h2>
  <p><strong>Weekly Total Paid:</strong> {money(report.weekly_total_paid)}</p>
  <p><strong>Weekly Expense:</strong> {money(record.expense)}</p>
  <p><strong>Monthly Total Paid:</strong> {money(totals.total_paid)}</p>
  <p><strong>Monthly Expense:</strong> {money(totals.total_expense)}</p>
  <p><strong>Status:</strong> {record.status_label}</p>
</div>
<p><small>Generated {report.generated_at.strftime("%Y-%m-%d %H:%M UTC")}</small></p>
{script}
</body>
</html>
"""
