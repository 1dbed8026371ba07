import logging
from typing import Callable, List, Optional


class TaskHandle:
    """Cancellation token for one deferred task."""

    def __init__(self, name: str, delay: float):
        self.name = name
        self.delay = delay
        self.cancelled = False
        self.done = False

    def cancel(self) -> None:
        self.cancelled = True

    @property
    def active(self) -> bool:
        return not (self.cancelled or self.done)


class BackgroundScheduler:
    """Runs deferred tasks as Socket.IO background tasks.

    Uses ``socketio.sleep`` so the delay cooperates with whichever async mode
    the server runs in.
    """

    def __init__(self, socketio, logger: Optional[logging.Logger] = None):
        self.socketio = socketio
        self.logger = logger or logging.getLogger(__name__)

    def schedule(self, name: str, delay: float, fn: Callable, *args) -> TaskHandle:
        handle = TaskHandle(name, delay)
        self.logger.info(f"[timer-set] task={name} delay={delay:.2f}s")
        self.socketio.start_background_task(self._run, handle, fn, args)
        return handle

    def _run(self, handle: TaskHandle, fn: Callable, args) -> None:
        self.socketio.sleep(handle.delay)
        if handle.cancelled:
            self.logger.info(f"[timer-abort] task={handle.name} cancelled")
            return
        handle.done = True
        self.logger.info(f"[timer-fire] task={handle.name}")
        try:
            fn(*args)
        except Exception:
            self.logger.exception(f"[timer-error] task={handle.name}")


class ManualScheduler:
    """Queues deferred tasks until ``run_pending`` is called. Used in TESTING."""

    def __init__(self, logger: Optional[logging.Logger] = None):
        self.logger = logger or logging.getLogger(__name__)
        self._queue: List[tuple] = []

    def schedule(self, name: str, delay: float, fn: Callable, *args) -> TaskHandle:
        handle = TaskHandle(name, delay)
        self._queue.append((handle, fn, args))
        return handle

    @property
    def pending(self) -> List[TaskHandle]:
        return [handle for handle, _, _ in self._queue if handle.active]

    def run_pending(self, limit: int = 100) -> int:
        """Fire queued tasks in order, including ones queued while running. Returns how many fired."""
        fired = 0
        while self._queue and fired < limit:
            handle, fn, args = self._queue.pop(0)
            if not handle.active:
                continue
            handle.done = True
            fn(*args)
            fired += 1
        return fired

    def run_next(self) -> bool:
        while self._queue:
            handle, fn, args = self._queue.pop(0)
            if handle.active:
                handle.done = True
                fn(*args)
                return True
        return False
