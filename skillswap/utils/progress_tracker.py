"""
Progress Tracker Module

Wraps the rich library to show progress while match snapshots are refreshed
for many users at once.

Example Usage:
    from skillswap.utils.progress_tracker import ProgressTracker

    tracker = ProgressTracker()
    tracker.start("Refreshing matches", total_users=250)
    tracker.update_batch(batch_num=3, total_batches=25)
    tracker.advance(10)
    tracker.finish()
"""

from typing import Optional

from rich.console import Console
from rich.progress import (
    BarColumn,
    Progress,
    SpinnerColumn,
    TaskID,
    TextColumn,
    TimeElapsedColumn,
)


class ProgressTracker:
    """Single progress bar for a bulk refresh run."""

    def __init__(self, console: Optional[Console] = None) -> None:
        self.console = console or Console()
        self.progress: Optional[Progress] = None
        self.task_id: Optional[TaskID] = None
        self.label: str = ""
        self.total_users: int = 0
        self.completed_users: int = 0

    def start(self, label: str, total_users: int) -> None:
        """
        Open a progress bar.

        Args:
            label: Text shown before the bar (e.g., "Refreshing matches")
            total_users: Number of users the run will process
        """
        self.label = label
        self.total_users = total_users
        self.completed_users = 0

        self.progress = Progress(
            SpinnerColumn(),
            TextColumn("[bold blue]{task.description}"),
            BarColumn(),
            TextColumn("({task.completed}/{task.total})"),
            TimeElapsedColumn(),
            console=self.console,
        )
        self.progress.start()
        self.task_id = self.progress.add_task(description=label, total=total_users)

    def update_batch(self, batch_num: int, total_batches: int) -> None:
        """Show which batch is running, e.g. "Refreshing matches - Batch 3/25"."""
        if self.progress is None or self.task_id is None:
            return

        self.progress.update(
            self.task_id,
            description=f"{self.label} - Batch {batch_num}/{total_batches}",
        )

    def advance(self, amount: int = 1) -> None:
        if self.progress is None or self.task_id is None:
            return

        self.completed_users += amount
        self.progress.update(self.task_id, advance=amount)

    def finish(self, failed: int = 0) -> None:
        """Close the bar and print a one-line summary."""
        if self.progress is None or self.task_id is None:
            return

        self.progress.stop()

        summary = f"[bold green]{self.label} complete:[/bold green] {self.completed_users} users"
        if failed:
            summary += f", [bold red]{failed} failed[/bold red]"
        self.console.print(summary)

        self.progress = None
        self.task_id = None
        self.label = ""
        self.total_users = 0
        self.completed_users = 0

    def is_active(self) -> bool:
        return self.progress is not None and self.task_id is not None
