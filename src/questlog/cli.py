"""CLI interface for Questlog."""

import logging
import time
from pathlib import Path

import typer
from dotenv import load_dotenv
from pydantic import ValidationError
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from questlog import stats
from questlog.models import (
    GameForm,
    LoginForm,
    Notification,
    PlaytimeForm,
    SignupForm,
)
from questlog.services import LibraryError, LibraryService
from questlog.session import Session, SessionError, auth_delay
from questlog.store import StoreClient, StoreError

# Load .env file - try current directory, then home directory
load_dotenv(Path.cwd() / ".env")
load_dotenv(Path.home() / ".questlog" / ".env")

app = typer.Typer(
    name="questlog",
    help="Track your game library, playtime and achievements",
    no_args_is_help=True,
)
console = Console()


@app.callback()
def main_options(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Show debug logging"),
):
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def _fail(notification: Notification) -> None:
    console.print(f"[bold red]{notification.title}:[/bold red] {notification.description}")
    raise typer.Exit(1)


def _validation_failed(e: ValidationError) -> None:
    error = e.errors()[0]
    message = error["msg"].removeprefix("Value error, ")
    if message == "is required" or error["type"] == "missing":
        message = "Please fill in all fields"
    _fail(Notification.error(message))


def _connect() -> tuple[LibraryService, str]:
    """Logged-in user and a library service, or exit with the reason."""
    session = Session()
    try:
        user_id = session.require_user()
        return LibraryService(StoreClient()), user_id
    except (SessionError, StoreError) as e:
        _fail(Notification.error(str(e)))


@app.command()
def login(
    email: str = typer.Option(..., prompt=True),
    password: str = typer.Option(..., prompt=True, hide_input=True),
):
    """Log in (simulated; no credentials are checked)."""
    try:
        form = LoginForm(email=email, password=password)
    except ValidationError as e:
        _validation_failed(e)

    with console.status("[dim]Signing in...[/dim]"):
        time.sleep(auth_delay())
        try:
            state = Session().login(form)
        except SessionError as e:
            _fail(Notification.error(str(e)))

    console.print(f"[bold green]Logged in[/bold green] as {state.email}.")


@app.command()
def signup(
    email: str = typer.Option(..., prompt=True),
    username: str = typer.Option(..., prompt=True),
    password: str = typer.Option(..., prompt=True, hide_input=True, confirmation_prompt=True),
):
    """Create an account (simulated)."""
    try:
        form = SignupForm(email=email, password=password, username=username)
    except ValidationError as e:
        _validation_failed(e)

    with console.status("[dim]Creating account...[/dim]"):
        time.sleep(auth_delay())
        Session().signup(form)

    console.print("[bold green]Account created.[/bold green] Run 'questlog login' to sign in.")


@app.command()
def logout():
    """Log out."""
    Session().logout()
    console.print("[dim]You have been logged out successfully.[/dim]")


@app.command()
def status():
    """Show dashboard stats, recent games and recent achievements."""
    library, user_id = _connect()

    with console.status("[dim]Loading dashboard...[/dim]"):
        try:
            dashboard = library.load_dashboard(user_id)
        except LibraryError as e:
            _fail(e.notification)

    s = dashboard.stats
    console.print(
        Panel(
            f"Games: [bold]{s.total_games}[/bold]\n"
            f"Playtime: [bold]{s.total_playtime:g}h[/bold]\n"
            f"Achievements: [bold]{s.total_achievements}[/bold]\n"
            f"Active streak: [bold]{s.active_streak} day{'s' if s.active_streak != 1 else ''}[/bold]",
            title="Questlog",
            style="blue",
        )
    )

    if dashboard.recent_games:
        console.print("\n[bold]Recently played:[/bold]")
        for game in dashboard.recent_games:
            console.print(
                f"  - {game.title} ({game.hours_played:g}h) - "
                f"{game.achievements.display_summary} achievements"
            )

    if dashboard.recent_achievements:
        console.print("\n[bold]Recent achievements:[/bold]")
        for card in dashboard.recent_achievements:
            date = card.date.strftime("%Y-%m-%d") if card.date else ""
            console.print(f"  - {card.name} [dim]({card.game}, {card.rarity.value}) {date}[/dim]")


@app.command("library")
def library_command(
    search: str = typer.Option("", "--search", "-s", help="Filter by title, platform or genre"),
):
    """List the games in your library."""
    library, user_id = _connect()

    try:
        cards = library.load_library(user_id, search=search)
    except LibraryError as e:
        _fail(e.notification)

    if not cards:
        console.print("[yellow]No games found matching your search.[/yellow]")
        return

    table = Table(title="Game Library")
    table.add_column("Title")
    table.add_column("Platform")
    table.add_column("Genre")
    table.add_column("Hours", justify="right")
    table.add_column("Achievements", justify="right")
    table.add_column("Library ID", style="dim")
    for card in cards:
        table.add_row(
            card.title,
            ", ".join(card.platforms),
            ", ".join(card.genres),
            f"{card.hours_played:g}",
            f"{card.achievements.display_summary} ({card.achievements.completion_percent}%)",
            card.user_game_id,
        )
    console.print(table)


@app.command()
def achievements(
    search: str = typer.Option("", "--search", "-s", help="Filter by name, description or game"),
    game_id: str = typer.Option(None, "--game", "-g", help="Show all achievements of one game"),
):
    """List your earned achievements, or all achievements of one game."""
    library, user_id = _connect()

    try:
        if game_id:
            progress = library.game_achievements(user_id, game_id)
        else:
            cards = library.load_achievements(user_id, search=search)
    except LibraryError as e:
        _fail(e.notification)

    if game_id:
        summary = stats.earned_total(progress)
        console.print(f"[bold]{summary.display_summary} earned[/bold]")
        for item in progress:
            mark = "[green]✓[/green]" if item.earned else "[dim]·[/dim]"
            console.print(f"  {mark} {item.name} [dim]({item.xp_value} XP, {item.id})[/dim]")
        return

    if not cards:
        console.print("[yellow]No achievements found matching your search.[/yellow]")
        return
    for card in cards:
        console.print(f"  - [bold]{card.name}[/bold] ({card.game}, {card.rarity.value})")
        console.print(f"    [dim]{card.description}[/dim]")


@app.command("add-game")
def add_game(
    title: str = typer.Option(..., prompt=True),
    platform: str = typer.Option(..., prompt=True),
    genre: str = typer.Option(..., prompt=True),
    publisher: str = typer.Option("", help="Publisher (optional)"),
    release_year: str = typer.Option("", help="Release year (optional)"),
):
    """Add a game to your library."""
    try:
        form = GameForm(
            title=title,
            platform=platform,
            genre=genre,
            publisher=publisher,
            release_year=release_year,
        )
    except ValidationError as e:
        _validation_failed(e)

    library, user_id = _connect()
    try:
        library.add_game(user_id, form)
    except LibraryError as e:
        _fail(e.notification)

    console.print(f"[bold green]Game added.[/bold green] {form.title} is now in your library.")


@app.command("log")
def log_playtime(
    user_game_id: str = typer.Argument(..., help="Library ID (see 'questlog library')"),
    hours: str = typer.Argument(..., help="Total hours played"),
):
    """Log total hours played for a game in your library."""
    try:
        form = PlaytimeForm(hours_played=hours)
    except ValidationError as e:
        _validation_failed(e)

    library, _ = _connect()
    try:
        library.log_playtime(user_game_id, form)
    except LibraryError as e:
        _fail(e.notification)

    console.print(f"[bold green]Progress updated.[/bold green] Playtime set to {form.hours_played:g} hours.")


@app.command()
def toggle(
    game_id: str = typer.Argument(..., help="Game ID"),
    achievement_id: str = typer.Argument(..., help="Achievement ID"),
):
    """Mark an achievement earned, or un-earn it."""
    library, user_id = _connect()

    try:
        progress = library.game_achievements(user_id, game_id)
        updated = library.toggle_achievement(user_id, progress, achievement_id)
    except LibraryError as e:
        _fail(e.notification)

    item = next(a for a in updated if a.id == achievement_id)
    if item.earned:
        console.print(f'[bold green]Achievement unlocked:[/bold green] "{item.name}"')
    else:
        console.print(f'[yellow]Achievement removed:[/yellow] "{item.name}"')
    console.print(f"[dim]{stats.earned_total(updated).display_summary} earned for this game[/dim]")


def main():
    """Entry point."""
    app()


if __name__ == "__main__":
    main()
