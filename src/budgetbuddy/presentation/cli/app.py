"""BudgetBuddy CLI application using Typer.

Interactive bank-to-ledger sync plus small utilities for checking the rules
file and browsing the ledger's budgets.
"""

import asyncio
import logging
import sys
from functools import lru_cache
from typing import Optional

import typer
from dotenv import load_dotenv
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from budgetbuddy.application.dtos import StepResult
from budgetbuddy.application.services import SyncPipelineService
from budgetbuddy.domain.rules.services import RulesEngine
from budgetbuddy.domain.shared.exceptions import DomainException, ErrorCode
from budgetbuddy.domain.sync.entities import SyncTransaction
from budgetbuddy.domain.sync.value_objects import TransactionStatus
from budgetbuddy.infrastructure.persistence import JsonFileRuleRepository
from budgetbuddy.presentation.cli.container import build_container, build_ledger_client
from budgetbuddy_config import Settings, get_settings

app = typer.Typer(
    name="budgetbuddy",
    help="BudgetBuddy - bank to YNAB sync",
    no_args_is_help=True,
)
console = Console()

rules_app = typer.Typer(
    name="rules",
    help="Categorization rule utilities",
    no_args_is_help=True,
)
app.add_typer(rules_app)

ynab_app = typer.Typer(
    name="ynab",
    help="Browse the YNAB ledger",
    no_args_is_help=True,
)
app.add_typer(ynab_app)

TAN_RETRY_CODES = {ErrorCode.TAN_REJECTED, ErrorCode.TAN_CHALLENGE_EXPIRED}


@lru_cache(maxsize=1)
def configure_logging() -> None:
    """Configure application logging.

    Console output with timestamps and module names, the configured level
    for budgetbuddy modules and WARNING for the HTTP client libraries.
    """
    settings = get_settings()
    log_level = getattr(logging, settings.log_level.upper(), logging.INFO)

    logging.basicConfig(
        level=log_level,
        format="%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
        stream=sys.stdout,
        force=True,
    )

    logging.getLogger("budgetbuddy").setLevel(log_level)
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)


@app.callback()
def main() -> None:
    load_dotenv()
    configure_logging()


# ---------------------------------------------------------------------------
# Rendering helpers
# ---------------------------------------------------------------------------


def _print_error(result: StepResult) -> None:
    if result.error is None:
        console.print("[red]Unknown error[/red]")
        return
    console.print(f"[red]{escape(result.error.message)}[/red] [dim]({result.error.code.value})[/dim]")
    retry_after = result.error.details.get("retry_after_seconds")
    if retry_after is not None:
        console.print(f"[yellow]Retry in {retry_after} seconds.[/yellow]")


def _transactions_table(transactions: list[SyncTransaction]) -> Table:
    table = Table(title="Transactions")
    table.add_column("Date")
    table.add_column("Payee")
    table.add_column("Amount", justify="right")
    table.add_column("Category")
    table.add_column("Status")
    table.add_column("Duplicate")

    for tx in transactions:
        amount = tx.transaction.amount
        style = "red" if amount.is_negative() else "green"
        duplicate = tx.duplicate_status.kind
        table.add_row(
            tx.transaction.booking_date.isoformat(),
            tx.effective_payee,
            f"[{style}]{amount}[/{style}]",
            tx.category_name or ("split" if tx.has_splits else "-"),
            tx.status.value,
            "" if duplicate == "not_duplicate" else duplicate.replace("_duplicate", ""),
        )
    return table


# ---------------------------------------------------------------------------
# sync
# ---------------------------------------------------------------------------


async def _confirm_tan(pipeline: SyncPipelineService, session_id: str) -> bool:
    while True:
        typer.confirm(
            "Approve the push-TAN in your banking app, then confirm here",
            default=True,
            abort=True,
        )
        result = await pipeline.confirm_tan(session_id)
        if result.success:
            return True
        _print_error(result)
        if result.error is None or result.error.code not in TAN_RETRY_CODES:
            return False
        if not typer.confirm("Request a new push-TAN?", default=True):
            return False
        retry = await pipeline.retry_challenge(session_id)
        if not retry.success:
            _print_error(retry)
            return False


async def _run_sync(settings: Settings, assume_yes: bool) -> int:
    container = build_container(settings)
    pipeline = container.pipeline
    try:
        started = await pipeline.start_sync()
        if not started.success:
            _print_error(started)
            return 1
        session_id = started.unwrap().id
        console.print(f"[bold green]Sync session[/bold green] {session_id}")

        if not await _confirm_tan(pipeline, session_id):
            await pipeline.fail(session_id, "TAN confirmation failed")
            return 1

        fetched = await pipeline.fetch_transactions(session_id)
        if not fetched.success:
            _print_error(fetched)
            await pipeline.fail(session_id, "Fetching transactions failed")
            return 1

        transactions = fetched.unwrap()
        console.print(_transactions_table(transactions))

        to_skip = [
            tx.transaction_id
            for tx in transactions
            if tx.duplicate_status.kind == "confirmed_duplicate"
            and tx.status != TransactionStatus.SKIPPED
        ]
        if to_skip:
            await pipeline.bulk_skip(session_id, to_skip)
            console.print(f"[dim]Skipped {len(to_skip)} confirmed duplicates.[/dim]")

        exportable = [tx for tx in pipeline.get_transactions(session_id).unwrap() if tx.is_exportable]
        if not exportable:
            console.print("[yellow]Nothing categorized to export.[/yellow]")
        elif not assume_yes and not typer.confirm(f"Export {len(exportable)} transactions to YNAB?"):
            console.print("[dim]Export cancelled.[/dim]")
            exportable = []

        if exportable:
            exported = await pipeline.run_export(session_id)
            if not exported.success:
                _print_error(exported)
                return 1
            export = exported.unwrap()
            console.print(
                f"[green]Imported {export.imported_count}[/green], "
                f"{export.duplicate_count} already in YNAB, "
                f"{export.failed_count} failed, "
                f"{export.excluded_count} not exported"
            )
        else:
            await pipeline.complete(session_id)

        summary = pipeline.get_summary()
        if summary.success:
            session = summary.unwrap().session
            console.print(
                f"Session {session.status.value}: "
                f"{session.imported_count} imported, {session.skipped_count} skipped"
            )
        return 0
    finally:
        await container.close()


@app.command("sync")
def sync(
    days: Optional[int] = typer.Option(
        None,
        "--days",
        min=1,
        max=90,
        help="Days of history to fetch (defaults to SYNC_DAYS_TO_FETCH)",
    ),
    yes: bool = typer.Option(False, "--yes", "-y", help="Export without asking"),
) -> None:
    """Run an interactive sync: push-TAN, fetch, classify, export."""
    settings = get_settings()
    if days is not None:
        settings = settings.model_copy(update={"sync_days_to_fetch": days})
    try:
        exit_code = asyncio.run(_run_sync(settings, yes))
    except DomainException as e:
        console.print(f"[red]{escape(e.message)}[/red]")
        raise typer.Exit(code=1) from e
    raise typer.Exit(code=exit_code)


# ---------------------------------------------------------------------------
# rules
# ---------------------------------------------------------------------------


@rules_app.command("check")
def check_rules() -> None:
    """Compile every rule in the rules file and report broken patterns."""
    path = get_settings().resolved_rules_file
    try:
        rules = asyncio.run(JsonFileRuleRepository(path).load_rules())
    except DomainException as e:
        console.print(f"[red]{escape(e.message)}[/red]")
        raise typer.Exit(code=1) from e

    compiled, errors = RulesEngine().compile_rules(rules)
    if errors:
        console.print(f"[red]{len(errors)} broken rule(s) in {path}:[/red]")
        for error in errors:
            console.print(f"  - {escape(error)}")
        raise typer.Exit(code=1)

    enabled = sum(1 for rule in compiled if rule.rule.enabled)
    console.print(f"[green]{len(compiled)} rules OK[/green] ({enabled} enabled) in {path}")


# ---------------------------------------------------------------------------
# ynab
# ---------------------------------------------------------------------------


async def _show_budgets(settings: Settings, budget_id: Optional[str]) -> None:
    client = build_ledger_client(settings)
    try:
        if budget_id is None:
            budgets = await client.get_budgets()
            table = Table(title="Budgets")
            table.add_column("ID")
            table.add_column("Name")
            for budget in budgets:
                table.add_row(budget.id, budget.name)
            console.print(table)
            return

        detail = await client.get_budget_detail(budget_id)
        accounts = Table(title=f"Accounts in {detail.name}")
        accounts.add_column("ID")
        accounts.add_column("Name")
        accounts.add_column("Balance", justify="right")
        for account in detail.accounts:
            accounts.add_row(account.id, account.name, f"{account.balance:.2f}")
        console.print(accounts)

        categories = Table(title=f"Categories in {detail.name}")
        categories.add_column("ID")
        categories.add_column("Group")
        categories.add_column("Name")
        for category in detail.categories:
            categories.add_row(category.id, category.group_name, category.name)
        console.print(categories)
    finally:
        await client.close()


@ynab_app.command("budgets")
def budgets(
    budget_id: Optional[str] = typer.Argument(
        None,
        help="Show accounts and categories of this budget",
    ),
) -> None:
    """List budgets, or one budget's accounts and categories."""
    try:
        asyncio.run(_show_budgets(get_settings(), budget_id))
    except DomainException as e:
        console.print(f"[red]{escape(e.message)}[/red]")
        raise typer.Exit(code=1) from e


def cli() -> None:
    """Entry point for the CLI application."""
    app()


if __name__ == "__main__":
    cli()
