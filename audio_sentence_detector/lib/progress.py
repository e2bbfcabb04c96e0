#!/usr/bin/env python3
from __future__ import annotations
import time
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Dict, Iterator, Optional

from rich.console import Console
from rich.progress import (
    BarColumn,
    MofNCompleteColumn,
    Progress,
    SpinnerColumn,
    TaskID,
    TextColumn,
    TimeElapsedColumn,
)


@dataclass
class StageMetrics:
    """Wall-clock timing of one stage of a run."""
    start_time: float
    end_time: Optional[float] = None

    @property
    def duration(self) -> float:
        end = self.end_time if self.end_time is not None else time.perf_counter()
        return end - self.start_time


class ProgressTracker:
    """
    Per-file progress bar on stderr plus timing of named stages.

    With ``disable=True`` nothing is drawn but stage timings are still
    recorded, so single-file runs report elapsed time as well.
    """

    def __init__(self, console: Optional[Console] = None, disable: bool = False):
        self.console = console or Console(stderr=True)
        self.progress = Progress(
            SpinnerColumn(),
            TextColumn("[progress.description]{task.description}"),
            BarColumn(),
            MofNCompleteColumn(),
            TimeElapsedColumn(),
            console=self.console,
            disable=disable,
            transient=True,
        )
        self.metrics: Dict[str, StageMetrics] = {}

    def start(self) -> None:
        self.progress.start()

    def stop(self) -> None:
        self.progress.stop()

    def update(self, task_id: TaskID, advance: int = 1, description: Optional[str] = None) -> None:
        self.progress.update(task_id, advance=advance, description=description)

    @contextmanager
    def task_context(
        self,
        description: str,
        total: Optional[int] = None,
        stage: str = "processing"
    ) -> Iterator[TaskID]:
        """Show a task for the duration of the block and time it as ``stage``."""
        self.metrics[stage] = StageMetrics(start_time=time.perf_counter())
        task_id = self.progress.add_task(description, total=total)
        try:
            yield task_id
        finally:
            self.progress.remove_task(task_id)
            self.metrics[stage].end_time = time.perf_counter()

    def get_metrics(self, stage: str) -> Optional[StageMetrics]:
        return self.metrics.get(stage)
