"""
Typer CLI for the vocab-srs service.

Commands:
    vocab-srs db init            - Initialize database tables
    vocab-srs serve              - Run the API server
    vocab-srs stats USER_ID      - Show a learner's dashboard counters
    vocab-srs today USER_ID      - Preview a learner's session for today
    vocab-srs reset USER_ID      - Delete a learner's progress

Usage:
    vocab-srs --help
    vocab-srs today 4f9c... --new-limit 5 --due-limit 20
"""

from __future__ import annotations

import random

import typer
from loguru import logger
from rich import print as rprint
from rich.console import Console
from rich.table import Table

from config import get_settings
from vocab_srs.core.clock import Clock
from vocab_srs.core.errors import SchedulingError
from vocab_srs.core.log_setup import configure_logging

settings = get_settings()
console = Console()

app = typer.Typer(help="vocab-srs CLI: spaced-repetition scheduling service")

db_app = typer.Typer(help="Database management")
app.add_typer(db_app, name="db")


@app.callback()
def main_callback() -> None:
    configure_logging(settings, console_format="<level>{message}</level>")


@db_app.command("init")
def db_init() -> None:
    """
    Initialize database tables from SQLAlchemy models.

    Safe to run multiple times (idempotent).
    """
    from vocab_srs.db.database import init_db

    logger.info("Initializing database tables...")
    init_db()
    rprint("[green]✓[/green] Database initialized!")


@app.command("serve")
def serve(
    host: str = typer.Option(settings.api_host, "--host", help="Bind address"),
    port: int = typer.Option(settings.api_port, "--port", help="Bind port"),
    reload: bool = typer.Option(False, "--reload", help="Auto-reload on code changes"),
) -> None:
    """Run the API server with uvicorn."""
    import uvicorn

    uvicorn.run(
        "vocab_srs.api.main:app",
        host=host,
        port=port,
        reload=reload,
        log_level=settings.log_level.lower(),
    )


@app.command("stats")
def show_stats(
    user_id: str = typer.Argument(..., help="Learner identifier"),
    daily_new_limit: int = typer.Option(settings.default_new_limit, "--daily-new-limit"),
) -> None:
    """Show XP, streaks and session counters for a learner."""
    from vocab_srs.db.database import session_scope
    from vocab_srs.scheduling.composer import SessionComposer

    try:
        with session_scope() as session:
            stats = SessionComposer(session, Clock(settings.timezone)).stats(user_id, daily_new_limit)
    except SchedulingError as exc:
        logger.error(f"Stats failed: {exc.message}")
        raise typer.Exit(code=1)

    table = Table(title=f"Stats for {user_id}")
    table.add_column("Metric", style="cyan")
    table.add_column("Value", justify="right")
    table.add_row("Total XP", str(stats.total_xp))
    table.add_row("Current streak", str(stats.current_streak))
    table.add_row("Longest streak", str(stats.longest_streak))
    table.add_row("Due reviews", str(stats.due_count))
    table.add_row("New items today", str(stats.new_items_count))
    table.add_row("Learned today", str(stats.learned_today_count))
    table.add_row("New available", str(stats.total_new_available))
    console.print(table)


@app.command("today")
def show_today(
    user_id: str = typer.Argument(..., help="Learner identifier"),
    new_limit: int = typer.Option(settings.default_new_limit, "--new-limit"),
    due_limit: int = typer.Option(settings.default_due_limit, "--due-limit"),
    locale: str = typer.Option(settings.default_locale, "--locale"),
) -> None:
    """Preview today's session without changing anything."""
    from vocab_srs.db.database import session_scope
    from vocab_srs.scheduling.composer import SessionComposer

    try:
        with session_scope() as session:
            composer = SessionComposer(
                session, Clock(settings.timezone), rng=random.Random(settings.shuffle_seed)
            )
            today = composer.today(user_id, new_limit, due_limit, locale)
    except SchedulingError as exc:
        logger.error(f"Session preview failed: {exc.message}")
        raise typer.Exit(code=1)

    table = Table(title=f"Today for {user_id}")
    table.add_column("Type", style="cyan")
    table.add_column("Item", justify="right")
    table.add_column("Term")
    table.add_column("Translation")
    table.add_column("Reps", justify="right")
    for item in today.due_reviews + today.new_items + today.learned_today_items:
        table.add_row(
            item.kind,
            str(item.item_id),
            item.term,
            item.translation or "-",
            "-" if item.repetitions is None else str(item.repetitions),
        )
    console.print(table)
    rprint(
        f"[bold]{today.total_due}[/bold] due, [bold]{today.total_new}[/bold] new/learning, "
        f"[bold]{today.total_learned_today}[/bold] learned today"
    )


@app.command("reset")
def reset_user(
    user_id: str = typer.Argument(..., help="Learner identifier"),
    yes: bool = typer.Option(False, "--yes", "-y", help="Skip confirmation"),
) -> None:
    """Delete every review, attempt and stats row of a learner."""
    from vocab_srs.db.database import SessionLocal
    from vocab_srs.scheduling.review_service import ReviewService

    if not yes and not typer.confirm(f"Delete all progress for {user_id}?"):
        raise typer.Abort()

    session = SessionLocal()
    try:
        removed = ReviewService(session, Clock(settings.timezone)).reset(user_id)
    except SchedulingError as exc:
        logger.error(f"Reset failed: {exc.message}")
        raise typer.Exit(code=1)
    finally:
        session.close()

    rprint(
        f"[green]✓[/green] Removed {removed['reviews']} reviews, "
        f"{removed['attempts']} attempts, {removed['stats']} stats rows"
    )


def run() -> None:
    """Console-script entry point."""
    app()


if __name__ == "__main__":
    run()
