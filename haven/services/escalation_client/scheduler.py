"""Session-scoped periodic tasks on the asyncio event loop.

Each PeriodicTask is an asyncio.Task that sleeps for its interval and then
runs its callback. Every task must be cancelled when the session ends;
SessionScheduler owns them and cancels them together.
"""
import asyncio
import inspect
import logging
from typing import Any, Callable, Dict, List, Optional

logger = logging.getLogger(__name__)


class PeriodicTask:
    """Runs ``callback`` every ``interval`` seconds until cancelled.

    A callback that raises is logged and the loop keeps going.
    """

    def __init__(self, name: str, interval: float, callback: Callable[[], Any]):
        if interval <= 0:
            raise ValueError(f"interval must be positive, got {interval}")
        self.name = name
        self.interval = interval
        self.callback = callback
        self.runs = 0
        self.failures = 0
        self._task: Optional[asyncio.Task] = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def start(self) -> None:
        if self.running:
            raise RuntimeError(f"Periodic task '{self.name}' is already running")
        self._task = asyncio.get_running_loop().create_task(self._run())

    def cancel(self) -> None:
        if self._task is not None:
            self._task.cancel()

    async def wait_cancelled(self) -> None:
        if self._task is None:
            return
        await asyncio.gather(self._task, return_exceptions=True)

    async def _run(self) -> None:
        while True:
            await asyncio.sleep(self.interval)
            self.runs += 1
            try:
                result = self.callback()
                if inspect.isawaitable(result):
                    await result
            except Exception as e:
                self.failures += 1
                logger.error(
                    "PERIODIC_TASK_FAILED",
                    extra={
                        "task": self.name,
                        "error": str(e),
                        "error_type": type(e).__name__,
                        "failures": self.failures,
                    }
                )


class SessionScheduler:
    """Named periodic tasks tied to one session's lifetime.

    Usage:
        async with SessionScheduler() as scheduler:
            scheduler.start("health", 30.0, check_health)
    """

    def __init__(self):
        self._tasks: Dict[str, PeriodicTask] = {}

    def start(self, name: str, interval: float, callback: Callable[[], Any]) -> PeriodicTask:
        """Start a named periodic task.

        Raises:
            ValueError: If a task with this name is already running
        """
        existing = self._tasks.get(name)
        if existing is not None and existing.running:
            raise ValueError(f"Task '{name}' is already scheduled")

        task = PeriodicTask(name, interval, callback)
        task.start()
        self._tasks[name] = task

        logger.info("PERIODIC_TASK_STARTED", extra={"task": name, "interval": interval})
        return task

    def get(self, name: str) -> Optional[PeriodicTask]:
        return self._tasks.get(name)

    @property
    def names(self) -> List[str]:
        return [name for name, task in self._tasks.items() if task.running]

    async def cancel_all(self) -> None:
        """Cancel every task and wait until all have stopped."""
        tasks = list(self._tasks.values())
        for task in tasks:
            task.cancel()
        for task in tasks:
            await task.wait_cancelled()
        self._tasks.clear()

        if tasks:
            logger.info("PERIODIC_TASKS_CANCELLED", extra={"count": len(tasks)})

    async def __aenter__(self) -> "SessionScheduler":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.cancel_all()
