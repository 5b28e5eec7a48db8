from __future__ import annotations

from decimal import Decimal

import questionary
from rich.console import Console
from rich.table import Table

from billrecon.constants import bill_type_display, payment_status_display
from billrecon.models import format_currency, to_amount
from billrecon.models.bill import CompanyBill, PaymentData, PaymentMethod, VendorBill
from billrecon.models.reconciliation import GroupedBillsResult, ReconciliationState
from billrecon.models.summary import BillFilters
from billrecon.services.bill_service import BillService
from billrecon.services.grouping import reconciliation_status

console = Console()

STATE_STYLES = {
    ReconciliationState.MATCHED: "green",
    ReconciliationState.MISMATCH: "red",
    ReconciliationState.PENDING: "yellow",
    ReconciliationState.PARTIAL: "blue",
}

METHOD_LABELS = {
    "Bank transfer": PaymentMethod.BANK_TRANSFER,
    "Cash": PaymentMethod.CASH,
    "Cheque": PaymentMethod.CHEQUE,
    "Card": PaymentMethod.CARD,
}


def parse_amount_input(raw: str) -> Decimal | None:
    """'1,250.5' -> Decimal('1250.5'); None when the text is not a positive number."""
    if not raw or not raw.strip():
        return None
    amount = to_amount(raw)
    if amount <= 0:
        return None
    return amount


def _status_cell(status: str) -> str:
    display = payment_status_display(status)
    return f"[{display.color}]{display.label}[/{display.color}]"


def _company_row(table: Table, bill: CompanyBill, indent: str = "") -> None:
    table.add_row(
        f"{indent}{bill.invoice_number or '-'}",
        bill_type_display(bill.bill_type).label,
        bill.supplier_name or "",
        format_currency(bill.invoice_amount),
        _status_cell(bill.payment_status),
        "",
    )


def render_grouped_bills(result: GroupedBillsResult) -> Table:
    table = Table(title="Vendor bills")
    table.add_column("Invoice")
    table.add_column("Type")
    table.add_column("Supplier")
    table.add_column("Amount", justify="right")
    table.add_column("Status", justify="center")
    table.add_column("Reconciliation")

    for vendor_bill in result.grouped_bills:
        status = reconciliation_status(vendor_bill.reconciliation)
        style = STATE_STYLES[status.state]
        label = f"[{style}]{status.label}[/{style}]"
        if status.detail:
            label += f" [dim]{status.detail}[/dim]"
        table.add_row(
            f"[bold]{vendor_bill.invoice_number or '-'}[/bold]",
            bill_type_display(vendor_bill.bill_type).label,
            vendor_bill.supplier_name or "",
            format_currency(vendor_bill.invoice_amount),
            _status_cell(vendor_bill.payment_status),
            label,
        )
        for child in vendor_bill.child_bills:
            _company_row(table, child, indent="  └ ")
    return table


def render_orphan_bills(result: GroupedBillsResult) -> Table:
    table = Table(title="Company bills without a vendor bill")
    table.add_column("Invoice")
    table.add_column("Type")
    table.add_column("Supplier")
    table.add_column("Amount", justify="right")
    table.add_column("Status", justify="center")
    table.add_column("")
    for bill in result.orphan_bills:
        _company_row(table, bill)
    return table


def _ask_filters() -> BillFilters:
    payment_status = questionary.select(
        "Payment status:",
        choices=["all", "unpaid", "partial", "paid", "overdue"],
    ).ask()
    search = questionary.text("Search (invoice, supplier, order; blank for all):").ask() or ""
    return BillFilters(payment_status=payment_status or "all", search=search)


def grouped_bills_menu(bill_service: BillService) -> None:
    result = bill_service.get_grouped_bills(_ask_filters())
    if not result.grouped_bills and not result.orphan_bills:
        console.print("[yellow]No bills found.[/yellow]")
        return

    console.print()
    if result.grouped_bills:
        console.print(render_grouped_bills(result))
    if result.orphan_bills:
        console.print(render_orphan_bills(result))


def summary_menu(bill_service: BillService) -> None:
    summary = bill_service.get_summary()

    table = Table(title="Bill summary", show_header=False)
    table.add_column("Metric")
    table.add_column("Value", justify="right")
    table.add_row("Bills", str(summary.total))
    table.add_row("Company bills", str(summary.company_bills))
    table.add_row("Vendor bills", str(summary.vendor_bills))
    table.add_row("Unpaid", str(summary.unpaid))
    table.add_row("Overdue", str(summary.overdue))
    table.add_row("Invoiced", format_currency(summary.total_amount))
    table.add_row("Paid", format_currency(summary.paid_amount))
    table.add_row("[bold]Balance due[/bold]", f"[bold]{format_currency(summary.balance_due)}[/bold]")
    console.print(table)


def record_payment_menu(bill_service: BillService) -> None:
    bills = [bill for bill in bill_service.list_bills() if bill.amount_due > 0]
    if not bills:
        console.print("[yellow]No bills with an outstanding balance.[/yellow]")
        return

    choices = {
        f"{bill.invoice_number or bill.id} | {bill.supplier_name or '-'} | {format_currency(bill.amount_due)} due": bill
        for bill in bills
    }
    choice = questionary.select("Bill:", choices=[*choices.keys(), "Back"]).ask()
    if choice is None or choice == "Back":
        return
    bill: CompanyBill | VendorBill = choices[choice]

    console.print(f"  Invoice amount: {format_currency(bill.invoice_amount)}")
    console.print(f"  Already paid:   {format_currency(bill.paid_amount)}")
    console.print(f"  [bold]Balance due:    {format_currency(bill.amount_due)}[/bold]")

    while True:
        amount = parse_amount_input(questionary.text("Payment amount:").ask() or "")
        if amount is not None:
            break
        console.print("[red]Enter an amount greater than zero.[/red]")

    method = questionary.select("Payment method:", choices=list(METHOD_LABELS)).ask()
    if method is None:
        console.print("[yellow]Cancelled.[/yellow]")
        return
    reference = questionary.text("Reference (optional):").ask() or ""
    notes = questionary.text("Notes (optional):").ask() or ""

    try:
        updated = bill_service.record_payment(
            bill.id,
            PaymentData(amount=amount, payment_method=METHOD_LABELS[method], reference=reference, notes=notes),
        )
    except ValueError as exc:
        console.print(f"[red]{exc}[/red]")
        return
    console.print(
        f"[green]Payment recorded. {payment_status_display(updated.payment_status).label}, "
        f"{format_currency(updated.amount_due)} left.[/green]"
    )


def sync_menu(bill_service: BillService) -> None:
    if not questionary.confirm("Run payment status, prefix and orphan payment sync?", default=False).ask():
        return
    report = bill_service.run_all_sync()
    console.print(f"  Statuses fixed:   {report.status_fixed}")
    console.print(f"  Prefixes updated: {report.prefixes_updated}")
    console.print(f"  Orphans reset:    {report.orphans_reset}")
