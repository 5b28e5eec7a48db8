import argparse

from billrecon.cli.app import main_menu
from billrecon.db import initialize_db
from billrecon.logging import configure_logging, reconfigure


def main(argv: list[str] | None = None) -> None:
    parser = argparse.ArgumentParser(prog="billrecon", description="Purchase bill reconciliation")
    parser.add_argument("-v", "--verbose", action="store_true", help="log at DEBUG level")
    args = parser.parse_args(argv)

    level = "DEBUG" if args.verbose else None
    configure_logging(level)
    initialize_db()
    reconfigure(level)
    main_menu()


if __name__ == "__main__":
    main()
