"""Operator command line for the Agrolytix backend, built with Typer.

    agrolytix-ops hash generate [PLAIN] [--email EMAIL] [--rounds N]
    agrolytix-ops hash verify PLAIN HASH
    agrolytix-ops db check [--schema public]
    agrolytix-ops smoke run [--base-url URL]
"""

from __future__ import annotations

import asyncio
import logging

import httpx
import typer

from agrolytix.config.settings import AppSettings, DatabaseSettings, SmokeSettings
from agrolytix.logging_config import configure_logging
from agrolytix.ops.credentials import DEFAULT_ROUNDS, CredentialHasher
from agrolytix.ops.db_probe import DatabaseProbe, DatabaseUnavailableError
from agrolytix.ops.smoke import SmokeTester, SmokeTestFailure

logger = logging.getLogger(__name__)

app = typer.Typer(help="Operator tools for the Agrolytix backend")
hash_app = typer.Typer(help="Credential hash generation and checks")
app.add_typer(hash_app, name="hash")
db_app = typer.Typer(help="Database connectivity diagnostics")
app.add_typer(db_app, name="db")
smoke_app = typer.Typer(help="End-to-end smoke tests against a running API")
app.add_typer(smoke_app, name="smoke")


@app.callback()
def main(
    log_level: str = typer.Option(None, help="Override APP_LOG_LEVEL for this run"),
) -> None:
    """Configure JSON logging before any command runs."""
    configure_logging(log_level or AppSettings().log_level)


@hash_app.command("generate")
def hash_generate(
    plain: str = typer.Argument(None, help="Plaintext to hash; prompted when omitted"),
    email: str = typer.Option(None, help="Also print the UPDATE statement for this account"),
    rounds: int = typer.Option(DEFAULT_ROUNDS, min=4, max=31, help="bcrypt cost factor"),
) -> None:
    """Hash a plaintext and confirm the hash verifies."""
    if plain is None:
        plain = typer.prompt("Plaintext", hide_input=True, confirmation_prompt=True)

    hasher = CredentialHasher(rounds=rounds)
    hashed = hasher.hash(plain)
    typer.echo(f"Hash: {hashed}")

    valid = hasher.verify(plain, hashed)
    typer.echo(f"Hash valid: {valid}")
    if not valid:
        raise typer.Exit(code=1)

    if email:
        typer.echo("")
        typer.echo("SQL to update:")
        typer.echo(CredentialHasher.update_statement(hashed, email))


@hash_app.command("verify")
def hash_verify(
    plain: str = typer.Argument(..., help="Plaintext to check"),
    hashed: str = typer.Argument(..., help="Stored bcrypt hash"),
) -> None:
    """Check a plaintext against a stored hash; exit 1 on mismatch."""
    hasher = CredentialHasher()
    if hasher.verify(plain, hashed):
        typer.echo("Match: yes")
        return
    typer.echo("Match: no")
    raise typer.Exit(code=1)


@db_app.command("check")
def db_check(
    schema: str = typer.Option("public", help="Schema whose tables are listed"),
) -> None:
    """Connect to PostgreSQL, report server details and list tables."""
    settings = DatabaseSettings()
    typer.echo("Database settings:")
    for key, value in settings.describe().items():
        typer.echo(f"   {key}: {value}")

    probe = DatabaseProbe(settings)
    try:
        result = probe.ping()
        typer.echo("Connected.")
        typer.echo(f"   Server time: {result.server_time.isoformat()}")
        typer.echo(f"   Database: {result.database}")
        typer.echo(f"   Version: {result.short_version}")

        tables = probe.list_tables(schema)
        typer.echo(f"Tables in '{schema}' ({len(tables)}):")
        for name in tables:
            typer.echo(f"   - {name}")
    except DatabaseUnavailableError as exc:
        typer.echo(f"Connection failed ({exc.reason}): {exc.message}", err=True)
        if exc.sqlstate:
            typer.echo(f"   SQLSTATE: {exc.sqlstate}", err=True)
        for hint in exc.hints:
            typer.echo(f"   hint: {hint}", err=True)
        raise typer.Exit(code=1)
    finally:
        probe.close()
        typer.echo("Connection closed.")


@smoke_app.command("run")
def smoke_run(
    base_url: str = typer.Option(None, help="Override SMOKE_BASE_URL"),
) -> None:
    """Log in and list products, checking both responses follow the envelope."""
    settings = SmokeSettings()
    if base_url:
        settings = settings.model_copy(update={"base_url": base_url})

    tester = SmokeTester(settings)
    try:
        report = asyncio.run(tester.run())
    except SmokeTestFailure as exc:
        status = f" (HTTP {exc.status_code})" if exc.status_code else ""
        typer.echo(f"Failed at {exc.step}{status}: {exc.message}", err=True)
        raise typer.Exit(code=1)
    except httpx.HTTPError as exc:
        typer.echo(f"Transport error: {exc}", err=True)
        raise typer.Exit(code=1)

    typer.echo("Login: ok")
    typer.echo(f"Listing: HTTP {report.status_code}, {report.item_count} item(s)")
    if report.pagination is not None:
        p = report.pagination
        typer.echo(f"   page {p.current_page}/{p.total_pages}, total {p.total}")


if __name__ == "__main__":
    app()
