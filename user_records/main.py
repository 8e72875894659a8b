from __future__ import annotations

import sys
from typing import Callable, Dict, Optional, Tuple

import psycopg
import typer

from user_records.config import get_settings
from user_records.domain.exceptions import (
    NotFoundError,
    StorageError,
    ValidationError,
)
from user_records.infrastructure.bootstrap import ensure_database, ensure_schema
from user_records.infrastructure.db_factory import build_dsn, open_storage, redact_dsn
from user_records.reporter import print_users
from user_records.repositories.postgres import PostgresUserRepository
from user_records.services.user_service import UserService
from user_records.utils.logging import configure_logging, get_logger

log = get_logger(__name__)

app = typer.Typer(help="User records manager CLI.")

MENU = """
=== User Service ===
1. Create User
2. Get User by ID
3. Get All Users
4. Update User
5. Delete User
6. Exit"""

EXIT_CHOICE = "6"


def _ask(text: str) -> str:
    """Prompt for a line of input; empty input is allowed."""
    return typer.prompt(text, default="", show_default=False).strip()


def _ask_int(text: str) -> Optional[int]:
    """Prompt for an integer; empty input yields None, garbage raises ValueError."""
    raw = _ask(text)
    return int(raw) if raw else None


def _create_user(service: UserService) -> None:
    name = _ask("Enter name")
    email = _ask("Enter email")
    try:
        age = _ask_int("Enter age")
    except ValueError:
        typer.echo("Invalid age format. Please enter a number.")
        return
    user = service.create(name, email, age)
    typer.echo(f"User created successfully: {user}")


def _get_user(service: UserService) -> None:
    try:
        user_id = _ask_int("Enter user ID")
    except ValueError:
        typer.echo("Invalid ID format. Please enter a number.")
        return
    user = service.get_by_id(user_id)
    if user is None:
        typer.echo(f"User not found with ID: {user_id}")
    else:
        typer.echo(f"User found: {user}")


def _list_users(service: UserService) -> None:
    print_users(service.get_all(), limit=get_settings().find_all_limit)


def _update_user(service: UserService) -> None:
    try:
        user_id = _ask_int("Enter user ID to update")
    except ValueError:
        typer.echo("Invalid ID format. Please enter a number.")
        return
    current = service.get_by_id(user_id)
    if current is None:
        typer.echo(f"User not found with ID: {user_id}")
        return

    name = _ask(f"Enter new name (current: {current.name})") or None
    email = _ask(f"Enter new email (current: {current.email})") or None
    try:
        age = _ask_int(f"Enter new age (current: {current.age})")
    except ValueError:
        typer.echo("Invalid number format.")
        return
    user = service.update(user_id, name=name, email=email, age=age)
    typer.echo(f"User updated successfully: {user}")


def _delete_user(service: UserService) -> None:
    try:
        user_id = _ask_int("Enter user ID to delete")
    except ValueError:
        typer.echo("Invalid ID format. Please enter a number.")
        return
    service.delete(user_id)
    typer.echo("User deleted successfully.")


ACTIONS: Dict[str, Tuple[str, Callable[[UserService], None]]] = {
    "1": ("creating user", _create_user),
    "2": ("finding user", _get_user),
    "3": ("retrieving users", _list_users),
    "4": ("updating user", _update_user),
    "5": ("deleting user", _delete_user),
}


def run_action(service: UserService, choice: str) -> None:
    """
    Run one menu action, reporting failures without ending the session.
    """
    if choice not in ACTIONS:
        typer.echo("Invalid choice. Please try again.")
        return
    label, action = ACTIONS[choice]
    try:
        action(service)
    except ValidationError as exc:
        typer.echo(f"Invalid input while {label}: {exc.message}")
    except NotFoundError as exc:
        typer.echo(exc.message)
    except StorageError as exc:
        typer.echo(f"Error {label}: {exc.message}")


def run_menu(service: UserService) -> None:
    """Interactive loop until the user picks Exit."""
    while True:
        typer.echo(MENU)
        choice = _ask("\nEnter your choice")
        if choice == EXIT_CHOICE:
            return
        run_action(service, choice)


@app.callback(invoke_without_command=True)
def default(ctx: typer.Context) -> None:
    """
    Start the interactive menu when no command is given.
    """
    if ctx.invoked_subcommand is None:
        ctx.invoke(menu)


@app.command()
def info() -> None:
    """
    Show effective configuration values.
    """
    settings = get_settings()
    typer.echo(
        f"DB={redact_dsn(build_dsn(settings))} | "
        f"pool_max={settings.db_pool_max_size} find_all_limit={settings.find_all_limit}"
    )


@app.command("init-db")
def init_db() -> None:
    """
    Create the database (if missing) and the users table, then exit.
    """
    settings = get_settings()
    configure_logging(level=settings.log_level, json_logs=settings.log_json)
    try:
        created = ensure_database(settings)
        with open_storage(settings) as pool:
            ensure_schema(pool)
    except (StorageError, psycopg.OperationalError) as exc:
        log.error("Database initialization failed", exc_info=True)
        typer.echo(f"Database initialization failed: {exc}", err=True)
        raise typer.Exit(code=1)
    typer.echo("Database created and initialized." if created else "Database initialized.")


@app.command()
def menu() -> None:
    """
    Run the interactive user management menu.
    """
    settings = get_settings()
    configure_logging(level=settings.log_level, json_logs=settings.log_json)
    log.info("User Service application starting...")
    try:
        ensure_database(settings)
        with open_storage(settings) as pool:
            ensure_schema(pool)
            log.info("Database initialization completed")
            service = UserService(PostgresUserRepository(pool, settings.find_all_limit))
            run_menu(service)
    except (StorageError, psycopg.OperationalError) as exc:
        log.error("Storage unavailable", exc_info=True)
        typer.echo(f"An error occurred: {exc}", err=True)
        raise typer.Exit(code=1)
    finally:
        log.info("User Service application stopped")


def main() -> None:
    try:
        app()
    except KeyboardInterrupt:
        typer.echo("Cancelled by user.", err=True)
        sys.exit(130)


if __name__ == "__main__":
    main()
