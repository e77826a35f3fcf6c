"""
Console dumps of runtime state for preview debugging.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Optional

from rich import box
from rich.console import Console
from rich.table import Table

if TYPE_CHECKING:
    from schorm_runtime.assessment import QuizAttempt
    from schorm_runtime.media import MediaCompletionTracker
    from schorm_runtime.session import RuntimeSession


def media_state_table(tracker: "MediaCompletionTracker") -> Table:
    table = Table(title="Media completion", box=box.SIMPLE_HEAVY)
    table.add_column("Media id", style="cyan")
    table.add_column("Tracked")
    table.add_column("Completed")
    table.add_column("Completed at", style="dim")
    tracked = set(tracker.tracked_ids)
    for media_id, entry in tracker.get_state().items():
        table.add_row(
            media_id,
            "yes" if media_id in tracked else "no",
            "[green]✓[/green]" if entry.completed else "[red]✗[/red]",
            entry.completed_at or "",
        )
    table.caption = f"All completed: {tracker.all_completed()}"
    return table


def dump_media_state(tracker: "MediaCompletionTracker", console: Optional[Console] = None) -> None:
    console = console or Console()
    console.print(f"[bold]Tracked IDs:[/bold] {', '.join(tracker.tracked_ids) or '(none)'}")
    console.print(media_state_table(tracker))


def dump_attempt(attempt: "QuizAttempt", console: Optional[Console] = None) -> None:
    console = console or Console()
    result = attempt.result
    console.print(f"[bold]Quiz {attempt.quiz.id}[/bold] state: {attempt.state.value}")
    if result is None:
        return
    table = Table(box=box.SIMPLE)
    table.add_column("Question", style="cyan")
    table.add_column("Correct")
    table.add_column("Points", justify="right")
    for q in result.questions:
        table.add_row(q.question_id, "✓" if q.correct else "✗", f"{q.points_earned:g}")
    table.caption = (
        f"raw {result.raw:g} / {result.max:g} · scaled {result.scaled:.2f} · "
        f"{'PASSED' if result.passed else 'FAILED'}"
    )
    console.print(table)


def dump_session(session: "RuntimeSession", console: Optional[Console] = None) -> None:
    console = console or Console()
    d = session.discovery
    mode = "preview" if session.is_preview_mode else f"live ({d.api_name} at hop {d.depth})"
    console.print(f"[bold]schorm runtime[/bold] mode: {mode}")
    for name, value in session.settings.status_summary().items():
        console.print(f"  {name}: {value}")
