import asyncio
import logging
import signal
from datetime import datetime, timedelta
from enum import Enum
from typing import Callable, Optional, Sequence, Set

from hyper_backup.domain.outcome import CycleOutcome
from hyper_backup.domain.service import ServiceDescriptor
from hyper_backup.guard import SingleFlightGuard
from hyper_backup.logging_config import log_divider
from hyper_backup.runner import ServiceRunner
from hyper_backup.schedules import Schedule

TIME_FORMAT = "%Y-%m-%d %H:%M:%S"


class SchedulerState(str, Enum):
    IDLE = "idle"
    WAITING = "waiting"
    TRIGGERING = "triggering"
    SHUTTING_DOWN = "shutting_down"
    STOPPED = "stopped"


def _format_duration(duration: timedelta) -> str:
    return str(timedelta(seconds=round(duration.total_seconds())))


class BackupScheduler:
    """
    Triggers backup cycles on a schedule until asked to stop.

    One cycle runs immediately on start, then one per schedule tick. Cycles run in a worker
    thread so ticks keep arriving while a cycle is busy; a tick that finds a cycle still
    running is skipped, never queued. A shutdown request stops the ticks at once but lets an
    in-flight cycle finish.
    """

    def __init__(
        self,
        schedule: Schedule,
        services: Callable[[], Sequence[ServiceDescriptor]],
        runner: Optional[ServiceRunner] = None,
        guard: Optional[SingleFlightGuard] = None,
        logger: Optional[logging.Logger] = None,
        clock: Optional[Callable[[], datetime]] = None,
    ):
        self.schedule: Schedule = schedule
        self.services_factory = services
        self.logger: logging.Logger = logger or logging.getLogger(__name__)
        self.runner: ServiceRunner = runner or ServiceRunner(logger=self.logger)
        self.guard: SingleFlightGuard = guard or SingleFlightGuard()
        self.clock: Callable[[], datetime] = clock or (lambda: datetime.now(self.schedule.tz))
        self.state: SchedulerState = SchedulerState.IDLE
        self.last_outcome: Optional[CycleOutcome] = None
        self.cycles_run: int = 0
        self.ticks_skipped: int = 0
        self._loop: Optional[asyncio.AbstractEventLoop] = None
        self._shutdown: Optional[asyncio.Event] = None
        self._shutdown_requested: bool = False
        self._last_tick: Optional[datetime] = None
        self._in_flight: Set[asyncio.Task] = set()

    @property
    def is_running(self) -> bool:
        return self.state not in (SchedulerState.IDLE, SchedulerState.STOPPED)

    def request_shutdown(self) -> None:
        """
        Ask the scheduler to stop. Safe to call from any thread or a signal handler.
        """
        self._shutdown_requested = True
        if self._loop is not None and self._shutdown is not None:
            self._loop.call_soon_threadsafe(self._shutdown.set)

    def install_signal_handlers(self) -> None:
        loop = asyncio.get_running_loop()
        for sig in (signal.SIGINT, signal.SIGTERM):
            try:
                loop.add_signal_handler(sig, self._on_signal, sig)
            except NotImplementedError:
                signal.signal(sig, lambda signum, frame: self._on_signal(signal.Signals(signum)))
            except (ValueError, RuntimeError):
                # not in the main thread
                self.logger.debug("Cannot install handler for %s outside the main thread", sig.name)

    def _on_signal(self, sig: signal.Signals) -> None:
        self.logger.info("Received %s; stopping scheduler after the current cycle", sig.name)
        self.request_shutdown()

    async def run(self, handle_signals: bool = False) -> None:
        """
        Run the scheduler until shutdown is requested.
        """
        if self.is_running:
            raise RuntimeError("Scheduler is already running")

        self._loop = asyncio.get_running_loop()
        self._last_tick = None
        self._shutdown = asyncio.Event()
        if self._shutdown_requested:
            self._shutdown.set()
        if handle_signals:
            self.install_signal_handlers()

        first_next = self.schedule.next(self.clock())
        self.logger.info("Timezone: %s", self.schedule.tz)
        self.logger.info("Using %s", self.schedule.describe())
        self.logger.info("Next backup at: %s (%s)", first_next.strftime(TIME_FORMAT), first_next.tzname())
        log_divider(self.logger)

        self.state = SchedulerState.TRIGGERING
        self._trigger(first_next)

        try:
            while not self._shutdown.is_set():
                self.state = SchedulerState.WAITING
                if not await self._wait_for_tick():
                    break
                self.state = SchedulerState.TRIGGERING
                self._trigger(self.schedule.next(self._last_tick))
        finally:
            self.state = SchedulerState.SHUTTING_DOWN
            self.logger.info("Stopping scheduler...")
            if self._in_flight:
                self.logger.info("Waiting for the running backup cycle to finish")
                await asyncio.gather(*self._in_flight, return_exceptions=True)
            self.state = SchedulerState.STOPPED
            self._loop = None
            self._shutdown_requested = False
            self.logger.info("Scheduler stopped")

    async def _wait_for_tick(self) -> bool:
        """
        Wait for whichever comes first, the next tick or a shutdown request.

        Returns:
            bool: True when the tick fired, False when shutdown was requested.
        """
        now = self.clock()
        # timers may wake marginally early; never fire the same instant twice
        reference = now if self._last_tick is None or now > self._last_tick else self._last_tick
        target = self.schedule.next(reference)
        delay = max(0.0, (target - now).total_seconds())
        tick = asyncio.create_task(asyncio.sleep(delay))
        stop = asyncio.create_task(self._shutdown.wait())
        try:
            await asyncio.wait({tick, stop}, return_when=asyncio.FIRST_COMPLETED)
        finally:
            for task in (tick, stop):
                if not task.done():
                    task.cancel()
            await asyncio.gather(tick, stop, return_exceptions=True)
        if self._shutdown.is_set():
            return False
        self._last_tick = target
        return True

    def _trigger(self, next_run: Optional[datetime]) -> None:
        if not self.guard.try_acquire():
            self.ticks_skipped += 1
            self.logger.warning("Previous backup still running. Skipping this cycle.")
            return
        task = asyncio.create_task(self._guarded_cycle(next_run))
        self._in_flight.add(task)
        task.add_done_callback(self._in_flight.discard)

    async def _guarded_cycle(self, next_run: Optional[datetime]) -> None:
        try:
            await asyncio.to_thread(self.run_cycle, next_run)
        except Exception:
            self.logger.exception("Unexpected error during backup cycle")
        finally:
            self.guard.release()

    def run_once(self) -> Optional[CycleOutcome]:
        """
        Run a single cycle outside the tick loop, still honoring the single-flight guard.

        Returns:
            Optional[CycleOutcome]: The outcome, or None when another cycle was already running.
        """
        with self.guard.hold() as acquired:
            if not acquired:
                self.logger.warning("Previous backup still running. Skipping this cycle.")
                return None
            return self.run_cycle(None)

    def run_cycle(self, next_run: Optional[datetime]) -> CycleOutcome:
        """
        Build the service list and run it once. The caller owns the guard.
        """
        start = self.clock()
        self.logger.info("Backup cycle started")
        self.logger.info("%s", start.strftime(TIME_FORMAT))

        outcome = self.runner.run(list(self.services_factory()))
        self.last_outcome = outcome
        self.cycles_run += 1

        end = self.clock()
        if outcome.ok:
            self.logger.info("Backup cycle completed")
        else:
            self.logger.warning("Backup cycle completed with %d failed service(s)", len(outcome.failures))
        self.logger.info("%s (Duration: %s)", end.strftime(TIME_FORMAT), _format_duration(end - start))
        if next_run is not None:
            self.logger.info("Next backup at: %s (%s)", next_run.strftime(TIME_FORMAT), next_run.tzname())
        log_divider(self.logger)
        return outcome
