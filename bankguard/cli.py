"""Interactive menu driver.

Usage:
    python -m bankguard
    python -m bankguard --demo --seed 42
    python -m bankguard --config data/rules_config.json --log-level DEBUG

All parsing and printing lives here; the core is `BankSystem`.
"""

import argparse
import math
import sys
from pathlib import Path
from typing import Callable, Optional

from pydantic import ValidationError

from bankguard.clock import RandomTiebreaker
from bankguard.errors import BankGuardError, InvalidInputError
from bankguard.log import setup_logging
from bankguard.main import BankSystem, create_system, load_demo_data
from bankguard.models import FraudReport, Transaction, TransactionRequest, TransactionType

InputFn = Callable[[str], str]

MENU = """
==========================================
         DS Banking system
==========================================
1. Add New Customer
2. Add Transaction
3. Analyze Customer for Fraud
4. Show Transaction History
0. Exit
------------------------------------------"""


def parse_int(raw: str, field: str) -> int:
    try:
        return int(raw.strip())
    except ValueError:
        raise InvalidInputError(f"{field} must be a whole number, got {raw!r}") from None


def parse_amount(raw: str, field: str) -> float:
    try:
        value = float(raw.strip())
    except ValueError:
        raise InvalidInputError(f"{field} must be a number, got {raw!r}") from None
    if not math.isfinite(value):
        raise InvalidInputError(f"{field} must be a finite number, got {raw!r}")
    if value < 0:
        raise InvalidInputError(f"{field} must not be negative")
    return value


def parse_type(raw: str) -> TransactionType:
    try:
        return TransactionType(raw)
    except ValueError:
        raise InvalidInputError("Type must be 'D' (debit) or 'C' (credit)") from None


def format_transaction(txn: Transaction) -> str:
    when = txn.timestamp.strftime("%Y-%m-%d %H:%M:%S")
    return (
        f"  - ID: {txn.id}, Type: {txn.type.value}, Amount: ${txn.amount:.2f}, "
        f"Date: {when} | Counterparty: {txn.counterparty_id}, "
        f"Channel: {txn.channel}, Terminal: {txn.terminal_id}"
    )


def format_alert(txn: Transaction) -> str:
    return (
        f"   !!! FRAUD ALERT: Transaction ID {txn.id}, Amount: ${txn.amount:.2f}, "
        f"Channel: {txn.channel}, Terminal: {txn.terminal_id}"
    )


def format_report(
    report: FraudReport,
    debit_threshold: float,
    credit_threshold: float,
) -> list[str]:
    lines = [
        f"1. Velocity check: {report.velocity.count} transaction(s) in window "
        f"-> {report.velocity.level.value}",
        f"2. High-value debits (threshold ${debit_threshold:.2f}):",
    ]
    if report.debit_alerts:
        lines.extend(format_alert(t) for t in report.debit_alerts)
    else:
        lines.append("   -> No high-value debits detected.")
    lines.append(f"3. High-value credits (threshold ${credit_threshold:.2f}):")
    if report.credit_alerts:
        lines.extend(format_alert(t) for t in report.credit_alerts)
    else:
        lines.append("   -> No high-value credits detected.")
    return lines


def handle_add_customer(system: BankSystem, ask: InputFn) -> None:
    customer_id = parse_int(ask("Enter new customer ID: "), "Customer ID")
    existing = system.get_customer(customer_id)
    if existing is not None:
        print(f"Error: Customer ID {customer_id} already exists (Name: {existing.name}).")
        return
    name = ask("Enter new customer name: ").strip()
    debit = parse_amount(ask("Enter debit alert threshold: "), "Debit threshold")
    credit = parse_amount(ask("Enter credit alert threshold: "), "Credit threshold")
    customer = system.add_customer(customer_id, name, debit, credit)
    print(
        f"Success: Customer {customer.name} (ID: {customer.id}) added "
        f"(hash bucket {system.directory.bucket_index(customer.id)})."
    )


def handle_add_transaction(system: BankSystem, ask: InputFn) -> None:
    customer = system.require_customer(parse_int(ask("Enter Customer ID: "), "Customer ID"))
    print(f"Transaction for {customer.name} (ID: {customer.id})")
    request = TransactionRequest(
        id=parse_int(ask("Enter Transaction ID: "), "Transaction ID"),
        amount=parse_amount(ask("Enter Amount: "), "Amount"),
        type=parse_type(ask("Enter Type (D for Debit, C for Credit): ")),
        counterparty_id=parse_int(ask("Enter Counterparty ID: "), "Counterparty ID"),
        channel=ask("Enter Channel (e.g., WEB, ATM, APP): ").strip(),
        terminal_id=parse_int(ask("Enter Terminal ID: "), "Terminal ID"),
    )
    txn = system.add_transaction(customer, request)
    print(f"Success: Transaction {txn.id} added for customer {customer.id}.")


def handle_analyze(system: BankSystem, ask: InputFn) -> None:
    customer_id = parse_int(ask("Enter Customer ID to analyze: "), "Customer ID")
    customer = system.require_customer(customer_id)
    print(f"\n--- Real-time Fraud Analysis for {customer.name} (ID: {customer.id}) ---")
    if not customer.index:
        print("No transactions to analyze.")
        return
    report = system.analyze(customer)
    for line in format_report(report, customer.debit_threshold, customer.credit_threshold):
        print(line)
    print("\nFull Transaction History (sorted by time):")
    for txn in system.history(customer):
        print(format_transaction(txn))
    print(f"\nCritical velocity incidents this session: {system.incident_count}")


def handle_history(system: BankSystem, ask: InputFn) -> None:
    customer = system.require_customer(parse_int(ask("Enter Customer ID: "), "Customer ID"))
    print(f"\nTransaction history for {customer.name} ({customer.transaction_count} total):")
    for txn in system.history(customer):
        print(format_transaction(txn))


HANDLERS = {
    "1": handle_add_customer,
    "2": handle_add_transaction,
    "3": handle_analyze,
    "4": handle_history,
}


def run_menu(system: BankSystem, ask: Optional[InputFn] = None) -> None:
    """Loop over the menu until the user picks 0 or input runs out."""
    ask = ask or input
    while True:
        print(MENU)
        try:
            choice = ask("Enter your choice: ").strip()
        except EOFError:
            choice = "0"
        if choice == "0":
            print("\n--- System Shutdown. Exiting. ---")
            return
        handler = HANDLERS.get(choice)
        if handler is None:
            print("\nInvalid choice. Please select from the menu options (0-4).")
            continue
        try:
            handler(system, ask)
        except EOFError:
            print("\nInput ended before the entry was complete.")
            print("\n--- System Shutdown. Exiting. ---")
            return
        except BankGuardError as exc:
            print(f"Error: {exc}")
        except ValidationError as exc:
            print(f"Error: invalid input ({exc.error_count()} problem(s)).")


def main(argv: Optional[list[str]] = None) -> None:
    parser = argparse.ArgumentParser(
        description="In-memory bank transaction store with fraud checks"
    )
    parser.add_argument("--config", type=Path, default=None, help="Path to rules config JSON")
    parser.add_argument("--seed", type=int, default=None, help="Seed for the time-key tiebreaker")
    parser.add_argument("--demo", action="store_true", help="Preload the demo customers")
    parser.add_argument("--log-level", type=str, default="WARNING", help="structlog level")
    args = parser.parse_args(argv)

    setup_logging(args.log_level)
    system = create_system(args.config, tiebreaker=RandomTiebreaker(args.seed))
    if args.demo:
        loaded = load_demo_data(system)
        print(f"Demo data loaded: {len(system.directory)} customers, {loaded} transactions.")

    try:
        run_menu(system)
    finally:
        system.close()


if __name__ == "__main__":
    sys.exit(main())
