"""Gatehouse CLI — run the API server and manage the local database.

Usage:
    gatehouse serve                    # Run the API with uvicorn
    gatehouse serve --port 9000        # Override GATEHOUSE_PORT
    gatehouse init-db                  # Create the users / auth_identities tables
    gatehouse users                    # Print the user directory

All commands read GATEHOUSE_DATABASE_URL and GATEHOUSE_JWT_SECRET; a
missing value is a fatal error.
"""

from __future__ import annotations

import asyncio
import concurrent.futures
from typing import Optional

import click

from gatehouse import __version__

# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _run(coro):
    """Run an async coroutine from synchronous Click handler.

    Handles nested event loops (e.g. when invoked via Click CliRunner
    inside an existing async context like tests) by offloading to a thread.
    """
    try:
        asyncio.get_running_loop()
    except RuntimeError:
        return asyncio.run(coro)
    else:
        with concurrent.futures.ThreadPoolExecutor(max_workers=1) as pool:
            return pool.submit(asyncio.run, coro).result()


def _print_table(rows: list[dict], columns: list[tuple[str, str, int]]):
    """Print a simple ASCII table.

    columns: list of (header, dict_key, width)
    """
    header = "  ".join(h.ljust(w) for h, _, w in columns)
    click.secho(header, bold=True)
    click.echo("-" * len(header))
    for row in rows:
        line = "  ".join(str(row.get(k) or "—")[:w].ljust(w) for _, k, w in columns)
        click.echo(line)


# ---------------------------------------------------------------------------
# CLI group
# ---------------------------------------------------------------------------


@click.group()
@click.version_option(version=__version__, prog_name="gatehouse")
def main():
    """Gatehouse — signup, login and OAuth identity linking API."""


@main.command()
@click.option("--host", default=None, help="Bind address (default: GATEHOUSE_HOST)")
@click.option("--port", default=None, type=int, help="Port (default: GATEHOUSE_PORT)")
@click.option("--reload", is_flag=True, help="Reload on code changes (development)")
def serve(host: Optional[str], port: Optional[int], reload: bool):
    """Run the API server."""
    import uvicorn

    from gatehouse.config import settings

    uvicorn.run(
        "gatehouse.main:app",
        host=host or settings.host,
        port=port or settings.port,
        reload=reload,
        log_config=None,
    )


@main.command("init-db")
def init_db():
    """Create missing tables. Existing tables are left untouched."""
    from gatehouse.db.engine import engine
    from gatehouse.db.models import Base

    async def _create():
        async with engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)
        await engine.dispose()

    _run(_create())
    click.secho(
        "Tables ready: " + ", ".join(sorted(Base.metadata.tables)), fg="green"
    )


@main.command()
def users():
    """List users, ascending by id."""
    from gatehouse.db.engine import async_session_factory, engine
    from gatehouse.services.identity_store import IdentityStore

    async def _list():
        async with async_session_factory() as session:
            rows = await IdentityStore(session).list_users()
        await engine.dispose()
        return [
            {
                "id": u.id,
                "email": u.email,
                "name": u.name,
                "created_at": u.created_at,
            }
            for u in rows
        ]

    rows = _run(_list())
    if not rows:
        click.echo("No users.")
        return
    _print_table(
        rows,
        [("ID", "id", 8), ("EMAIL", "email", 32), ("NAME", "name", 20), ("CREATED", "created_at", 26)],
    )


if __name__ == "__main__":
    main()
