import asyncio
import logging

logger = logging.getLogger(__name__)


class Scheduler:
    """Drives ``tick()`` at a fixed interval on the running asyncio loop.

    Each tick runs only after the previous one returned, and ``stop()``
    guarantees that nothing queued by an earlier ``start()`` can still step:
    the loop re-checks its generation after every sleep.
    """

    def __init__(self, tick, is_halted, on_error=None):
        self._tick = tick
        self._is_halted = is_halted
        self._on_error = on_error
        self._task = None
        self._generation = 0
        self.interval_ms = None

    @property
    def active(self):
        return self._task is not None and not self._task.done()

    def start(self, interval_ms):
        self.stop()
        if self._is_halted():
            logger.debug("Scheduler not started: machine already halted")
            return False

        loop = asyncio.get_running_loop()
        self.interval_ms = interval_ms
        self._task = loop.create_task(self._run(self._generation))
        return True

    def stop(self):
        self._generation += 1
        if self._task is not None:
            self._task.cancel()
            self._task = None

    def reschedule(self, interval_ms):
        """Change the interval; the next sleep picks it up."""
        self.interval_ms = interval_ms

    async def wait(self):
        """Wait until the current loop halts or is stopped."""
        task = self._task
        if task is None:
            return
        await asyncio.wait({task})
        if not task.cancelled():
            task.result()

    async def _run(self, generation):
        while True:
            await asyncio.sleep(self.interval_ms / 1000)
            if generation != self._generation:
                return
            try:
                self._tick()
            except Exception:
                logger.exception("Scheduled step failed; scheduler stopped")
                if self._on_error is not None:
                    self._on_error()
                raise
            if self._is_halted():
                logger.debug("Scheduler stopped: machine halted")
                return
