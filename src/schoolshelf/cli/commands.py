"""CLI commands for schoolshelf.

Commands:
- init-db: Create tables and default lookups
- seed-demo: Load demo users, books and assignments
- reset-admin: Create the admin account or reset its password
- sync-series: Replace the series list
- serve: Run the HTTP API with uvicorn
"""

from contextlib import contextmanager
from typing import Generator

import typer
import uvicorn
from rich.console import Console
from rich.table import Table

from schoolshelf.config.app_config import AppConfig, load_app_config
from schoolshelf.core.errors import BadRequestError
from schoolshelf.core.lookups_service import SeriesService
from schoolshelf.core.models import Role
from schoolshelf.core.users_service import UsersService
from schoolshelf.db.database import Database
from schoolshelf.db.schema import DEFAULT_SERIES
from schoolshelf.db.seed import ADMIN_EMAIL, ADMIN_PASSWORD, DatabaseNotEmptyError, seed_demo

app = typer.Typer(
    name="shelf",
    help="School digital library backend: database setup and API server.",
    no_args_is_help=True,
)

console = Console()


@contextmanager
def _open_database(config: AppConfig) -> Generator[Database, None, None]:
    """Connected gateway with the schema in place, or exit with an error."""
    db = Database(config.database)
    db.connect()
    try:
        if not db.check_connection():
            console.print(f"[red]✗ Cannot connect to {config.database.url}[/red]")
            raise typer.Exit(code=1)
        db.init_schema()
        yield db
    finally:
        db.close()


@app.command(name="init-db")
def init_db() -> None:
    """Create tables and seed default curriculum components and series."""
    config = load_app_config()
    with _open_database(config):
        pass
    console.print(f"[green]✓ Schema ready[/green] [dim]{config.database.url}[/dim]")


@app.command(name="seed-demo")
def seed_demo_command() -> None:
    """Load demo users, books and assignments into an empty database."""
    config = load_app_config()
    with _open_database(config) as db:
        try:
            summary = seed_demo(db, config.auth)
        except DatabaseNotEmptyError as e:
            console.print(f"[yellow]⚠ {e}[/yellow]")
            raise typer.Exit(code=1)

    console.print(
        f"[green]✓ Demo data loaded:[/green] {summary.users} users, "
        f"{summary.books} books, {summary.assignments} assignments"
    )
    console.print(f"  [dim]admin:[/dim] {ADMIN_EMAIL} / {ADMIN_PASSWORD}")


@app.command(name="reset-admin")
def reset_admin(
    email: str = typer.Option(ADMIN_EMAIL, "--email", "-e", help="Admin email"),
    password: str = typer.Option(ADMIN_PASSWORD, "--password", "-p", help="New password"),
    name: str = typer.Option("Administrator", "--name", "-n", help="Name if created"),
) -> None:
    """Reset the admin password, creating the account if it does not exist."""
    config = load_app_config()
    with _open_database(config) as db:
        users = UsersService(db, config.auth)
        try:
            if users.reset_password(email, password):
                console.print(f"[green]✓ Password updated for {email}[/green]")
            else:
                users.create_user(name, email, password, Role.ADMIN)
                console.print(f"[green]✓ Admin created: {email}[/green]")
        except BadRequestError as e:
            console.print(f"[red]✗ {e.message}[/red]")
            raise typer.Exit(code=1)


@app.command(name="sync-series")
def sync_series(
    names: list[str] | None = typer.Argument(None, help="Series names (default: 1st-5th Year)"),
) -> None:
    """Replace all series with the given names."""
    config = load_app_config()
    with _open_database(config) as db:
        records = SeriesService(db).sync(names or list(DEFAULT_SERIES))

    table = Table(title="Series")
    table.add_column("id", style="dim")
    table.add_column("name")
    for record in records:
        table.add_row(record.id, record.name)
    console.print(table)


@app.command()
def serve(
    host: str | None = typer.Option(None, "--host", help="Bind address"),
    port: int | None = typer.Option(None, "--port", help="Port"),
    reload: bool = typer.Option(False, "--reload", help="Auto-reload on code changes"),
) -> None:
    """Run the HTTP API."""
    config = load_app_config()
    host = host or config.server.host
    port = port or config.server.port
    console.print(
        f"[green]schoolshelf API[/green] on http://{host}:{port} "
        f"[dim]({config.server.environment})[/dim]"
    )
    uvicorn.run(
        "schoolshelf.web.api:create_app",
        factory=True,
        host=host,
        port=port,
        reload=reload,
    )


if __name__ == "__main__":
    app()
