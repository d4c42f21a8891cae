import typer
from rich.console import Console
from rich.table import Table
from typing import Optional
from datetime import datetime, date

from vocab_scheduler.database import SessionLocal, init_db
from vocab_scheduler.crud import create_item, list_items
from vocab_scheduler.schemas import VocabularyItemCreate
from vocab_scheduler.catalog import SqlVocabularyCatalog
from vocab_scheduler.store import SqlScheduleStore
from vocab_scheduler.service import SchedulingService
from vocab_scheduler.errors import SchedulerError

app = typer.Typer(help="Vocabulary Scheduler CLI - spaced repetition for flashcards and recall drills")
console = Console()

TRACK_HELP = "Scheduling track: graded (0-5) or binary (forgot/remembered)"


def get_service() -> SchedulingService:
    return SchedulingService(SqlScheduleStore(SessionLocal), SqlVocabularyCatalog(SessionLocal))


def parse_date(value: Optional[str]) -> Optional[date]:
    if not value:
        return None
    try:
        return datetime.strptime(value, "%Y-%m-%d").date()
    except ValueError:
        raise typer.BadParameter(f"{value} is not a YYYY-MM-DD date")


def print_record(record):
    console.print(f"  Next review: {record.next_review_date} (in {record.interval_days} days)")
    console.print(f"  Repetitions: {record.repetitions}")
    console.print(f"  Easiness: {record.ease_factor:.2f}")
    if record.times_forgotten:
        console.print(f"  Times forgotten: {record.times_forgotten}")

@app.command()
def init():
    """Initialize database tables"""
    init_db()
    console.print("[green]✓[/green] Database initialized successfully!")

@app.command()
def reset_db():
    """Delete all data and reinitialize database (WARNING: irreversible!)"""
    confirm = typer.confirm("⚠️  This will DELETE ALL DATA. Are you sure?")
    if not confirm:
        console.print("[yellow]Cancelled.[/yellow]")
        return

    from vocab_scheduler.database import engine, Base
    console.print("[yellow]Dropping all tables...[/yellow]")
    Base.metadata.drop_all(bind=engine)
    console.print("[yellow]Recreating tables...[/yellow]")
    init_db()
    console.print("[green]✓[/green] Database reset complete! All data deleted.")

@app.command()
def add_word(
    english: str = typer.Option(..., prompt="English"),
    german: str = typer.Option(..., prompt="German"),
    level: str = typer.Option("B2", help="CEFR level (A1-C2)")
):
    """Add a word to the vocabulary catalog"""
    db = SessionLocal()
    try:
        item = create_item(db, VocabularyItemCreate(english=english, german=german, level=level))
        console.print(f"[green]✓[/green] Word added! Item ID: {item.id}")
    finally:
        db.close()

@app.command()
def words(level: Optional[str] = typer.Option(None, help="Only show one level")):
    """List words in the vocabulary catalog"""
    db = SessionLocal()
    try:
        items = list_items(db, level=level)
        if not items:
            console.print("[yellow]No words in the catalog[/yellow]")
            return

        table = Table(show_header=True, header_style="bold magenta")
        table.add_column("ID", style="cyan", justify="right")
        table.add_column("English", style="green")
        table.add_column("German", style="yellow")
        table.add_column("Level", style="blue")
        for item in items:
            table.add_row(str(item.id), item.english, item.german, item.level or "")
        console.print(table)
    finally:
        db.close()

@app.command()
def track(
    user_id: int = typer.Option(..., prompt="User ID"),
    item_id: int = typer.Option(..., prompt="Item ID"),
    track: str = typer.Option("graded", help=TRACK_HELP)
):
    """Start tracking a word for review"""
    try:
        record = get_service().add_item(user_id, item_id, track)
    except SchedulerError as e:
        console.print(f"[red]✗[/red] {e}")
        raise typer.Exit(code=1)
    console.print(f"[green]✓[/green] Item {item_id} added to the {track} track")
    print_record(record)

@app.command()
def forgot(
    user_id: int = typer.Option(..., prompt="User ID"),
    item_id: int = typer.Option(..., prompt="Item ID"),
    track: str = typer.Option("binary", help=TRACK_HELP),
    review_date: Optional[str] = typer.Option(None, help="Review date (YYYY-MM-DD), default: today")
):
    """Record a forgotten word (starts tracking it if needed)"""
    try:
        record = get_service().register_failure(user_id, item_id, track, reference_date=parse_date(review_date))
    except SchedulerError as e:
        console.print(f"[red]✗[/red] {e}")
        raise typer.Exit(code=1)
    console.print(f"[yellow]↺[/yellow] Item {item_id} scheduled again")
    print_record(record)

@app.command()
def remembered(
    user_id: int = typer.Option(..., prompt="User ID"),
    item_id: int = typer.Option(..., prompt="Item ID"),
    review_date: Optional[str] = typer.Option(None, help="Review date (YYYY-MM-DD), default: today")
):
    """Record a remembered word in the rapid-recall (binary) track"""
    try:
        result = get_service().register_success(
            user_id, item_id, "remembered", "binary", reference_date=parse_date(review_date)
        )
    except SchedulerError as e:
        console.print(f"[red]✗[/red] {e}")
        raise typer.Exit(code=1)

    if result.status == "not_tracked":
        console.print(f"[yellow]Item {item_id} is not in review - nothing to do[/yellow]")
    elif result.mastered:
        console.print(f"[green]★[/green] Item {item_id} mastered and removed from reviews")
    else:
        console.print(f"[green]✓[/green] Marked as remembered")
        print_record(result.record)

@app.command()
def review(
    user_id: int = typer.Option(..., prompt="User ID"),
    item_id: int = typer.Option(..., prompt="Item ID"),
    quality: int = typer.Option(..., prompt="Quality rating (0-5)"),
    review_date: Optional[str] = typer.Option(None, help="Review date (YYYY-MM-DD), default: today")
):
    """Review a flashcard with a 0-5 quality rating (graded track)"""
    try:
        result = get_service().review(user_id, item_id, quality, "graded", reference_date=parse_date(review_date))
    except SchedulerError as e:
        console.print(f"[red]✗[/red] {e}")
        raise typer.Exit(code=1)

    console.print(f"[green]✓[/green] Review recorded! Quality: {quality}/5")
    if result.mastered:
        console.print(f"[green]★[/green] Item {item_id} mastered and removed from reviews")
    else:
        print_record(result.record)

@app.command()
def due(
    user_id: int,
    track: str = typer.Option("graded", help=TRACK_HELP),
    as_of: Optional[str] = typer.Option(None, help="Date to check (YYYY-MM-DD), default: today")
):
    """Show words due for review"""
    try:
        due_list = get_service().get_due(user_id, parse_date(as_of), track)
    except SchedulerError as e:
        console.print(f"[red]✗[/red] {e}")
        raise typer.Exit(code=1)

    if not due_list.count:
        console.print(f"[green]Nothing due for review[/green]")
        return

    console.print(f"\n[yellow]Words Due for Review ({due_list.count}):[/yellow]")
    table = Table(show_header=True, header_style="bold magenta")
    table.add_column("Item", style="cyan", justify="right")
    table.add_column("English", style="green")
    table.add_column("German", style="yellow")
    table.add_column("Due Date", style="yellow")
    table.add_column("Days Overdue", style="red")
    table.add_column("Forgotten", justify="right")

    for item in due_list.items[:20]:
        table.add_row(
            str(item.record.item_id),
            item.english or "?",
            item.german or "?",
            str(item.record.next_review_date),
            str(item.days_overdue) if item.days_overdue > 0 else "Today",
            str(item.record.times_forgotten)
        )

    console.print(table)
    if due_list.count > 20:
        console.print(f"[dim]... and {due_list.count - 20} more words[/dim]")

@app.command()
def stats(
    user_id: int,
    track: str = typer.Option("graded", help=TRACK_HELP),
    as_of: Optional[str] = typer.Option(None, help="Date to check (YYYY-MM-DD), default: today")
):
    """View review statistics for one track"""
    try:
        track_stats = get_service().get_stats(user_id, parse_date(as_of), track)
    except SchedulerError as e:
        console.print(f"[red]✗[/red] {e}")
        raise typer.Exit(code=1)

    console.print(f"\n[cyan]Statistics ({track}):[/cyan]")
    console.print(f"  Total words tracked: {track_stats.total}")
    console.print(f"  Words due for review: {track_stats.due}")
    if track_stats.learning is not None:
        console.print(f"  Learning: {track_stats.learning}")
        console.print(f"  Mastered: {track_stats.mastered}")
    if track_stats.avg_ease_factor is not None:
        console.print(f"  Average easiness: {track_stats.avg_ease_factor:.2f}")

@app.command()
def remove(
    user_id: int = typer.Option(..., prompt="User ID"),
    item_id: int = typer.Option(..., prompt="Item ID"),
    track: str = typer.Option("graded", help=TRACK_HELP)
):
    """Stop tracking a word"""
    try:
        get_service().remove(user_id, item_id, track)
    except SchedulerError as e:
        console.print(f"[red]✗[/red] {e}")
        raise typer.Exit(code=1)
    console.print(f"[green]✓[/green] Item {item_id} removed from the {track} track")

@app.command()
def history(
    user_id: int,
    track: Optional[str] = typer.Option(None, help=TRACK_HELP),
    limit: int = typer.Option(10, help="Number of reviews to show")
):
    """Show recent review submissions"""
    try:
        entries = get_service().get_review_log(user_id, track, limit)
    except SchedulerError as e:
        console.print(f"[red]✗[/red] {e}")
        raise typer.Exit(code=1)

    if not entries:
        console.print(f"[yellow]No reviews recorded for user {user_id}[/yellow]")
        return

    console.print(f"\n[cyan]Recent Reviews:[/cyan]")
    for entry in entries:
        mastered_str = " - mastered" if entry.mastered else ""
        console.print(f"  {entry.reviewed_on} - item {entry.item_id} ({entry.track}) outcome {entry.outcome}, next in {entry.interval_days} days{mastered_str}")

if __name__ == "__main__":
    app()
