"""Named cron-job scheduler sharing the dispatcher's error isolation."""

import asyncio
import inspect
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Awaitable, Callable

from croniter import CroniterBadDateError, croniter
from loguru import logger

from telebox.cron.parse import to_croniter_expr, validate_cron_expression
from telebox.errors import CronExpressionError, DuplicateCronJobError

JobHandler = Callable[[], Awaitable[Any] | Any]


@dataclass
class CronJob:
    name: str
    cron: str
    handler: JobHandler
    description: str = ""
    runs: int = 0
    failures: int = 0
    last_error: str | None = None
    timer: asyncio.Task | None = field(default=None, repr=False)


def next_fire_time(cron: str, base: datetime) -> datetime:
    """Next firing strictly after ``base`` for a six-field expression."""
    return croniter(to_croniter_expr(cron), base).get_next(datetime)


def schedule_error(cron: str) -> str | None:
    """Why ``cron`` can never be scheduled, or None if it fires at some point."""
    validation = validate_cron_expression(cron)
    if not validation.valid:
        return validation.error
    try:
        next_fire_time(cron, datetime.now())
    except (CroniterBadDateError, ValueError):
        return "expression never fires (no date matches every field)"
    return None


class CronScheduler:
    """
    Service for scheduling named jobs on six-field cron expressions.

    Every job runs on its own timer task. Each firing is spawned as a separate
    task, so a slow or failing run never delays the next firing of the same
    or any other job. Runs of the same job are not serialized; a handler that
    must not overlap with itself guards that on its own.
    """

    def __init__(self):
        self._jobs: dict[str, CronJob] = {}
        self._inflight: set[asyncio.Task] = set()

    def set(
        self,
        name: str,
        cron: str,
        handler: JobHandler,
        description: str = "",
        *,
        strict: bool = False,
    ) -> bool:
        """
        Validate and schedule a job. Must be called from a running event loop.

        Returns False without touching existing jobs if the name is taken or
        the expression is invalid. With ``strict=True`` those cases raise
        ``DuplicateCronJobError`` / ``CronExpressionError`` instead.
        """
        if name in self._jobs:
            logger.warning(f"Cron: task '{name}' already exists, not replacing it")
            if strict:
                raise DuplicateCronJobError(name)
            return False

        error = schedule_error(cron)
        if error:
            logger.error(f"Cron: cannot schedule '{name}', invalid expression '{cron}': {error}")
            if strict:
                raise CronExpressionError(f"{cron}: {error}")
            return False

        job = CronJob(name=name, cron=cron, handler=handler, description=description)
        job.timer = asyncio.get_running_loop().create_task(self._run_timer(job), name=f"cron:{name}")
        self._jobs[name] = job
        logger.info(f"Cron: scheduled '{name}' ({cron})")
        return True

    def delete(self, name: str) -> bool:
        """Stop and remove a job. Runs already in flight are left to finish."""
        job = self._jobs.pop(name, None)
        if job is None:
            return False
        if job.timer:
            job.timer.cancel()
        logger.info(f"Cron: removed '{name}'")
        return True

    def clear(self) -> None:
        for job in self._jobs.values():
            if job.timer:
                job.timer.cancel()
        self._jobs.clear()

    def has(self, name: str) -> bool:
        return name in self._jobs

    def get(self, name: str) -> CronJob | None:
        return self._jobs.get(name)

    def names(self) -> list[str]:
        return list(self._jobs)

    def jobs(self) -> list[CronJob]:
        return list(self._jobs.values())

    def __len__(self) -> int:
        return len(self._jobs)

    async def _run_timer(self, job: CronJob) -> None:
        base = datetime.now()
        while True:
            try:
                fire_at = next_fire_time(job.cron, base)
            except Exception as e:
                job.last_error = str(e)
                logger.exception(f"Cron: timer for '{job.name}' stopped, no next firing")
                return
            delay = (fire_at - datetime.now()).total_seconds()
            if delay > 0:
                await asyncio.sleep(delay)
            self._spawn(job)
            # Skip firings missed while the loop was blocked.
            base = max(datetime.now(), fire_at)

    def _spawn(self, job: CronJob) -> None:
        task = asyncio.get_running_loop().create_task(self.execute(job))
        self._inflight.add(task)
        task.add_done_callback(self._inflight.discard)

    async def execute(self, job: CronJob) -> bool:
        """Run one firing of ``job``. Failures are logged, never raised."""
        job.runs += 1
        try:
            result = job.handler()
            if inspect.isawaitable(result):
                await result
        except Exception as e:
            job.failures += 1
            job.last_error = str(e)
            logger.error(f"Cron: task '{job.name}' failed: {e}")
            return False
        job.last_error = None
        return True
