"""Process resilience harness for the long-running stdio server.

Keeps the process alive across faults that escape the dispatcher's per-call
error handling (exceptions in detached tasks, callbacks, threads), while still
exiting when faults recur too quickly or when the operator asks it to stop.

States:
- RUNNING        faults are logged and counted
- SHUTTING_DOWN  a SIGINT/SIGTERM was received; faults are only logged
- TERMINATED     the exit function has been called

Transitions:
- fault while RUNNING: count += 1; count reaches threshold → exit(1)
- reset tick (every reset_interval seconds): count > 0 → count = 0
- SIGINT / SIGTERM: cancel reset timer → exit(0), regardless of count

The fault path exits immediately. The signal path cancels the task that
called start() so context managers unwind, with a hard exit(0) as a backstop
if teardown does not finish within shutdown_grace seconds.
"""
import asyncio
import enum
import logging
import os
import signal
import sys
import threading
from typing import Callable, Optional

logger = logging.getLogger("slack-mcp.resilience")

DEFAULT_FAULT_THRESHOLD = 10
DEFAULT_RESET_INTERVAL = 60.0
DEFAULT_SHUTDOWN_GRACE = 5.0

ExitFunc = Callable[[int], None]


class HarnessState(str, enum.Enum):
    """Lifecycle of the resilience harness."""

    RUNNING = "running"
    SHUTTING_DOWN = "shutting_down"
    TERMINATED = "terminated"


class ErrorCounter:
    """Count of uncaught faults since the last reset."""

    def __init__(self) -> None:
        self._count = 0

    @property
    def value(self) -> int:
        return self._count

    def increment(self) -> int:
        self._count += 1
        return self._count

    def reset(self) -> int:
        """Zero the counter, returning the previous value."""
        previous, self._count = self._count, 0
        return previous


def hard_exit(code: int) -> None:
    """Flush log handlers, then leave the process immediately."""
    logging.shutdown()
    os._exit(code)


class ResilienceHarness:
    """Counts uncaught faults and decides when the process must exit.

    ``exit_func``, when given, is called with the exit status for both paths;
    tests pass a recorder. Without it, faults use hard_exit and signals
    unwind the main task.
    """

    def __init__(
        self,
        threshold: int = DEFAULT_FAULT_THRESHOLD,
        reset_interval: float = DEFAULT_RESET_INTERVAL,
        exit_func: Optional[ExitFunc] = None,
        shutdown_grace: float = DEFAULT_SHUTDOWN_GRACE,
    ):
        if threshold < 1:
            raise ValueError("threshold must be at least 1")
        if reset_interval <= 0:
            raise ValueError("reset_interval must be positive")
        self.threshold = threshold
        self.reset_interval = reset_interval
        self.counter = ErrorCounter()
        self.state = HarnessState.RUNNING
        self.exit_code: Optional[int] = None
        self.shutdown_grace = shutdown_grace
        self._exit = exit_func
        self._main_task: Optional[asyncio.Task] = None
        self._backstop: Optional[asyncio.TimerHandle] = None
        self._reset_task: Optional[asyncio.Task] = None
        self._loop: Optional[asyncio.AbstractEventLoop] = None
        self._signals: list[signal.Signals] = []
        self._previous_excepthook = None
        self._previous_threading_excepthook = None

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    @property
    def error_count(self) -> int:
        return self.counter.value

    @property
    def timer_running(self) -> bool:
        return self._reset_task is not None and not self._reset_task.done()

    def start(self, loop: Optional[asyncio.AbstractEventLoop] = None) -> None:
        """Start the periodic reset timer on the running (or given) loop."""
        self._loop = loop or asyncio.get_running_loop()
        if self._main_task is None:
            self._main_task = asyncio.current_task(self._loop)
        if not self.timer_running:
            self._reset_task = self._loop.create_task(self._reset_periodically(), name="fault-counter-reset")

    def stop(self) -> None:
        """Cancel the reset timer."""
        if self._reset_task is not None:
            self._reset_task.cancel()
            self._reset_task = None

    def install(self, loop: Optional[asyncio.AbstractEventLoop] = None) -> None:
        """Start the timer and hook fault and signal handling into the process."""
        self.start(loop)
        self._loop.set_exception_handler(self._on_loop_exception)

        self._previous_excepthook = sys.excepthook
        sys.excepthook = self._on_uncaught_exception
        self._previous_threading_excepthook = threading.excepthook
        threading.excepthook = self._on_thread_exception

        for sig in (signal.SIGINT, signal.SIGTERM):
            if sys.platform == "win32":
                signal.signal(sig, lambda signum, frame: self.request_shutdown(signal.Signals(signum).name))
            else:
                self._loop.add_signal_handler(sig, self.request_shutdown, sig.name)
            self._signals.append(sig)

        logger.info(
            f"Resilience harness installed (threshold={self.threshold}, "
            f"reset every {self.reset_interval:g}s)"
        )

    def uninstall(self) -> None:
        """Undo install(): cancel the timer and restore previous hooks."""
        self.stop()
        if self._backstop is not None:
            self._backstop.cancel()
            self._backstop = None
        if self._loop is not None and not self._loop.is_closed():
            self._loop.set_exception_handler(None)
            for sig in self._signals:
                if sys.platform == "win32":
                    signal.signal(sig, signal.SIG_DFL)
                else:
                    self._loop.remove_signal_handler(sig)
        self._signals.clear()
        if self._previous_excepthook is not None:
            sys.excepthook = self._previous_excepthook
            self._previous_excepthook = None
        if self._previous_threading_excepthook is not None:
            threading.excepthook = self._previous_threading_excepthook
            self._previous_threading_excepthook = None

    # ------------------------------------------------------------------
    # Transitions
    # ------------------------------------------------------------------

    def record_fault(self, error: Optional[BaseException], origin: str = "unknown") -> None:
        """Log an uncaught fault and count it; exit(1) once the threshold is reached."""
        exc_info = (type(error), error, error.__traceback__) if error is not None else None
        if self.state is not HarnessState.RUNNING:
            logger.error(f"Uncaught fault from {origin} during {self.state.value}: {error}", exc_info=exc_info)
            return

        count = self.counter.increment()
        logger.error(
            f"Uncaught fault from {origin} ({count}/{self.threshold}): "
            f"{type(error).__name__ if error is not None else 'error'}: {error}",
            exc_info=exc_info,
        )
        if count >= self.threshold:
            logger.critical(f"Too many uncaught faults ({count}) within {self.reset_interval:g}s, exiting")
            self._terminate(1)

    def reset_errors(self) -> int:
        """One reset-timer tick. Returns the count that was cleared."""
        if self.state is not HarnessState.RUNNING or self.counter.value == 0:
            return 0
        previous = self.counter.reset()
        logger.info(f"Reset uncaught fault count (was {previous})")
        return previous

    def request_shutdown(self, reason: str = "signal") -> None:
        """Graceful shutdown on operator request: exit(0)."""
        if self.state is HarnessState.TERMINATED:
            return
        logger.info(f"Received {reason}, shutting down gracefully...")
        self.state = HarnessState.SHUTTING_DOWN
        self._terminate(0)

    def _terminate(self, code: int) -> None:
        self.stop()
        self.state = HarnessState.TERMINATED
        self.exit_code = code
        if self._exit is not None:
            self._exit(code)
        elif code == 0:
            self._unwind()
        else:
            hard_exit(code)

    def _unwind(self) -> None:
        """Cancel the main task so its context managers close, then exit 0."""
        task = self._main_task
        if task is None or task.done() or self._loop is None or self._loop.is_closed():
            hard_exit(0)
            return
        logger.info(f"Cancelling main task, forcing exit in {self.shutdown_grace:g}s if teardown stalls")
        task.cancel()
        self._backstop = self._loop.call_later(self.shutdown_grace, hard_exit, 0)

    # ------------------------------------------------------------------
    # Hooks
    # ------------------------------------------------------------------

    async def _reset_periodically(self) -> None:
        while True:
            await asyncio.sleep(self.reset_interval)
            self.reset_errors()

    def _on_loop_exception(self, loop: asyncio.AbstractEventLoop, context: dict) -> None:
        error = context.get("exception")
        if error is None:
            error = RuntimeError(context.get("message", "unhandled event loop error"))
        self.record_fault(error, origin="event loop")

    def _on_uncaught_exception(self, exc_type, exc_value, exc_tb) -> None:
        if issubclass(exc_type, KeyboardInterrupt):
            self.request_shutdown("SIGINT")
            return
        self.record_fault(exc_value, origin="main thread")

    def _on_thread_exception(self, args: threading.ExceptHookArgs) -> None:
        if args.exc_type is SystemExit:
            return
        name = args.thread.name if args.thread is not None else "unknown"
        self.record_fault(args.exc_value, origin=f"thread {name}")
