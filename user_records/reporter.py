from __future__ import annotations

from typing import Optional, Sequence

from rich import box
from rich.console import Console
from rich.table import Table

from user_records.domain.models import User


def build_users_table(users: Sequence[User], limit: Optional[int] = None) -> Table:
    """
    Build a rich table listing users, one row per user in the given order.

    When `limit` is given and the listing is full, the caption notes that the
    result may have been capped.
    """
    table = Table(title=f"Users ({len(users)})", box=box.SIMPLE_HEAVY)
    table.add_column("ID", justify="right", style="cyan", no_wrap=True)
    table.add_column("Name", overflow="fold")
    table.add_column("Email", overflow="fold")
    table.add_column("Age", justify="right")
    table.add_column("Created", no_wrap=True)

    for user in users:
        table.add_row(
            str(user.id),
            user.name,
            user.email,
            "-" if user.age is None else str(user.age),
            user.created_at.strftime("%Y-%m-%d %H:%M:%S") if user.created_at else "-",
        )

    if limit is not None and len(users) >= limit:
        table.caption = f"Showing the first {limit} users."
    return table


def print_users(
    users: Sequence[User],
    limit: Optional[int] = None,
    console: Optional[Console] = None,
) -> None:
    """Render users as a rich table, or a notice when there are none."""
    console = console or Console()
    if not users:
        console.print("No users found.")
        return
    console.print(build_users_table(users, limit=limit))


__all__ = ["build_users_table", "print_users"]
