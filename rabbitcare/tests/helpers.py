from concurrent.futures import Future

START = 1_700_000_000_000


class FakeClock:
    """Epoch-millisecond clock that only moves when told to."""

    def __init__(self, now=START):
        self.now = now

    def __call__(self):
        return self.now

    def advance(self, ms):
        self.now += ms
        return self.now


class InlineExecutor:
    """Runs submitted work immediately on the calling thread."""

    def __init__(self):
        self.calls = []

    def submit(self, fn, *args):
        self.calls.append((fn, args))
        future = Future()
        try:
            future.set_result(fn(*args))
        except Exception as e:
            future.set_exception(e)
        return future

    def shutdown(self, wait=True, cancel_futures=False):
        pass


class DeferredExecutor(InlineExecutor):
    """Holds submitted work until finish() is called, like a slow network."""

    def __init__(self):
        super().__init__()
        self.pending = []

    def submit(self, fn, *args):
        self.calls.append((fn, args))
        future = Future()
        self.pending.append((future, fn, args))
        return future

    def finish(self):
        pending, self.pending = self.pending, []
        for future, fn, args in pending:
            future.set_result(fn(*args))
