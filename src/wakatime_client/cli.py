"""Command-line interface for the WakaTime client."""

import logging
import sys
from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path
from typing import Any, NoReturn, Optional

import typer
from rich.console import Console
from rich.prompt import Prompt
from rich.table import Table

from wakatime_client import __version__
from wakatime_client.auth import AccessTokenAuth, parse_scopes
from wakatime_client.auth.callback import run_authorization_flow
from wakatime_client.client import WakaTimeClient
from wakatime_client.config import Config
from wakatime_client.exceptions import WakaTimeError
from wakatime_client.utils import get_logger, setup_logging

app = typer.Typer(help="Query and manage your WakaTime account")
console = Console()
logger = get_logger(__name__)

ConfigDirOption = typer.Option(
    None,
    "--config-dir",
    help="Configuration directory. Defaults to ~/.wakatime-client/",
)
VerboseOption = typer.Option(False, "--verbose", "-v", help="Enable verbose logging.")


def _init(config_dir: Optional[Path], verbose: bool = False) -> Config:
    setup_logging(
        log_level=logging.DEBUG if verbose else logging.INFO,
        config_dir=config_dir,
    )
    return Config(config_dir)


@contextmanager
def _open_client(config: Config) -> Iterator[WakaTimeClient]:
    """Open an API client, closing the credential's token client afterwards."""
    settings = config.settings
    auth = config.build_auth()
    try:
        with WakaTimeClient(
            auth=auth,
            base_url=settings.base_url,
            timeout=settings.timeout,
        ) as client:
            yield client
    finally:
        if isinstance(auth, AccessTokenAuth):
            auth.close()


def _fail(message: str, error: Exception) -> NoReturn:
    logger.error(f"{message}: {error}", exc_info=True)
    console.print(f"[red]✗ {message}: {error}[/red]")
    raise typer.Exit(code=1)


def _format_seconds(seconds: Any) -> str:
    total = int(float(seconds or 0))
    hours, remainder = divmod(total, 3600)
    return f"{hours}h {remainder // 60:02d}m"


@app.command()
def configure(
    config_dir: Optional[Path] = ConfigDirOption,
) -> None:
    """Store an API key or OAuth application credentials."""
    config = _init(config_dir)

    console.print("[bold cyan]WakaTime Client Configuration[/bold cyan]")
    choice = Prompt.ask(
        "Authenticate with",
        choices=["api-key", "oauth"],
        default="api-key",
    )

    if choice == "api-key":
        api_key = Prompt.ask("Enter your WakaTime secret API key", password=True)
        config.storage.set_token("api_key", api_key)
        console.print("[green]✓ API key saved[/green]")
        return

    settings = config.settings
    client_id = Prompt.ask("Enter your OAuth App ID", default=settings.client_id or None)
    client_secret = Prompt.ask("Enter your OAuth App Secret", password=True)
    redirect_uri = Prompt.ask("Redirect URI", default=settings.redirect_uri)
    scopes = Prompt.ask(
        "Scopes (comma separated)",
        default=",".join(settings.scopes) or "read_stats,read_summaries",
    )

    config.update(
        client_id=client_id,
        redirect_uri=redirect_uri,
        scopes=parse_scopes(scopes),
    )
    config.storage.set_token("client_secret", client_secret)
    console.print("[green]✓ OAuth application saved[/green]")
    console.print("Run 'wakatime-client login' to authorize.")


@app.command()
def login(
    no_browser: bool = typer.Option(
        False,
        "--no-browser",
        help="Print the authorization URL instead of opening a browser.",
    ),
    config_dir: Optional[Path] = ConfigDirOption,
    verbose: bool = VerboseOption,
) -> None:
    """Authorize this client through the OAuth flow."""
    config = _init(config_dir, verbose)

    try:
        with config.build_oauth() as auth:
            if not no_browser:
                console.print("[cyan]Opening browser for WakaTime authorization...[/cyan]")
            run_authorization_flow(
                auth,
                open_browser=not no_browser,
                on_url=lambda url: console.print(f"Authorize at: {url}"),
            )
    except WakaTimeError as e:
        _fail("Authorization failed", e)

    console.print("[green]✓ WakaTime OAuth authentication successful[/green]")


@app.command()
def logout(
    config_dir: Optional[Path] = ConfigDirOption,
    verbose: bool = VerboseOption,
) -> None:
    """Revoke the stored OAuth token and forget it."""
    config = _init(config_dir, verbose)

    try:
        auth: AccessTokenAuth = config.build_oauth()
    except WakaTimeError as e:
        _fail("Logout failed", e)

    with auth:
        token = auth.access_token or auth.refresh_token
        if token:
            try:
                revoked = auth.revoke_token(token)
            except WakaTimeError as e:
                _fail("Token revoke failed", e)
            if not revoked:
                console.print("[yellow]WakaTime did not confirm the revoke[/yellow]")

    config.clear_oauth_tokens()
    console.print("[green]✓ Logged out[/green]")


@app.command()
def today(
    config_dir: Optional[Path] = ConfigDirOption,
    verbose: bool = VerboseOption,
) -> None:
    """Show today's coding time."""
    config = _init(config_dir, verbose)

    try:
        with _open_client(config) as client:
            result = client.get_status_bar_today()
    except WakaTimeError as e:
        _fail("Request failed", e)

    data = result.get("data") or {}
    grand_total = data.get("grand_total") or {}
    console.print(f"[bold]Today:[/bold] {grand_total.get('text') or 'no activity'}")

    table = Table(title="Projects")
    table.add_column("Project", style="cyan")
    table.add_column("Time", style="magenta")
    for project in data.get("projects") or []:
        table.add_row(project.get("name", "-"), project.get("text", "-"))
    console.print(table)


@app.command()
def stats(
    range: str = typer.Argument(
        "last_7_days",
        help="last_7_days, last_30_days, last_6_months, last_year or all_time.",
    ),
    config_dir: Optional[Path] = ConfigDirOption,
    verbose: bool = VerboseOption,
) -> None:
    """Show coding stats for a range."""
    config = _init(config_dir, verbose)

    try:
        with _open_client(config) as client:
            result = client.get_stats(range)
    except WakaTimeError as e:
        _fail("Request failed", e)

    data = result.get("data") or {}
    if not data.get("is_up_to_date", True):
        percent = data.get("percent_calculated") or 0
        console.print(f"[yellow]Stats are still being computed ({percent}% complete)[/yellow]")

    console.print(
        f"[bold]Total:[/bold] {_format_seconds(data.get('total_seconds'))}  "
        f"[bold]Daily average:[/bold] {_format_seconds(data.get('daily_average'))}"
    )

    for section in ("languages", "projects", "editors"):
        table = Table(title=section.capitalize())
        table.add_column("Name", style="cyan")
        table.add_column("Time", style="magenta")
        table.add_column("%", style="yellow")
        for item in (data.get(section) or [])[:10]:
            table.add_row(
                item.get("name", "-"),
                item.get("text", "-"),
                f"{item.get('percent') or 0:.1f}",
            )
        console.print(table)


@app.command()
def user(
    config_dir: Optional[Path] = ConfigDirOption,
    verbose: bool = VerboseOption,
) -> None:
    """Show the authenticated user."""
    config = _init(config_dir, verbose)

    try:
        with _open_client(config) as client:
            result = client.get_user()
    except WakaTimeError as e:
        _fail("Request failed", e)

    data = result.get("data") or {}
    table = Table(title="WakaTime User")
    table.add_column("Field", style="cyan")
    table.add_column("Value", style="magenta")
    for field in ("username", "display_name", "email", "timezone", "plan", "created_at"):
        table.add_row(field, str(data.get(field) or "-"))
    console.print(table)


@app.command()
def version() -> None:
    """Show version information."""
    console.print(f"WakaTime Client v{__version__}")


def main() -> None:
    """Main entry point."""
    try:
        app()
    except KeyboardInterrupt:
        console.print("\n[yellow]Interrupted by user[/yellow]")
        sys.exit(0)
    except Exception as e:
        logger.error(f"Unexpected error: {e}", exc_info=True)
        console.print(f"[red]Unexpected error: {e}[/red]")
        sys.exit(1)


if __name__ == "__main__":
    main()
