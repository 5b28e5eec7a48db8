import questionary
from rich.console import Console

from billrecon.cli.bill_menu import grouped_bills_menu, record_payment_menu, summary_menu, sync_menu
from billrecon.repositories.factory import get_bill_repository
from billrecon.services.bill_service import BillService

console = Console()

MENU_ACTIONS = {
    "Grouped bills": grouped_bills_menu,
    "Summary": summary_menu,
    "Record payment": record_payment_menu,
    "Data sync": sync_menu,
}


def _build_service() -> BillService:
    return BillService(get_bill_repository())


def main_menu() -> None:
    bill_service = _build_service()

    console.print()
    console.print("[bold]Purchase bills[/bold]", style="cyan")
    console.print()

    while True:
        choice = questionary.select("Main menu", choices=[*MENU_ACTIONS, "Quit"]).ask()
        if choice is None or choice == "Quit":
            console.print("[bold]Bye![/bold]")
            break
        MENU_ACTIONS[choice](bill_service)
