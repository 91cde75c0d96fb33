import logging
import time

logger = logging.getLogger(__name__)


def now_ms() -> int:
    return int(time.time() * 1000)


class Timer:
    """A periodic callback owned by a Scheduler."""

    def __init__(self, name, interval_ms, callback, next_due):
        self.name = name
        self.interval_ms = interval_ms
        self.callback = callback
        self.next_due = next_due
        self.cancelled = False

    def cancel(self):
        self.cancelled = True


class Scheduler:
    """
    Cooperative periodic timers polled from the host loop.
    Nothing runs on its own thread; `run_pending` fires whatever is due.
    """

    def __init__(self, clock=now_ms):
        self.clock = clock
        self.timers = []

    def every(self, interval_ms, callback, name=None) -> Timer:
        if interval_ms <= 0:
            raise ValueError("Timer interval must be positive")
        timer = Timer(name or getattr(callback, '__name__', 'timer'), interval_ms, callback,
                      self.clock() + interval_ms)
        self.timers.append(timer)
        return timer

    def run_pending(self, now=None) -> int:
        """Fire due timers once each. Returns how many fired."""
        now = self.clock() if now is None else now
        fired = 0
        for timer in list(self.timers):
            if timer.cancelled or now < timer.next_due:
                continue
            # An overdue timer fires once, then resumes its cadence from now
            timer.next_due = now + timer.interval_ms
            try:
                timer.callback()
            except Exception:
                logger.exception("Timer '%s' failed", timer.name)
            fired += 1
        self.timers = [t for t in self.timers if not t.cancelled]
        return fired

    def cancel_all(self):
        for timer in self.timers:
            timer.cancel()
        self.timers = []

    @property
    def active(self):
        return [t for t in self.timers if not t.cancelled]
