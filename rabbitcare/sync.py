"""
Remote sync: a debounced, single-flight push of the whole state and a
last-writer-wins pull on startup.

Network calls run on one worker thread. Their results are queued and only
applied to the engine from `drain()`, which the host loop calls, so the
engine is still mutated from a single thread.
"""
import logging
import queue
from concurrent.futures import ThreadPoolExecutor

from rabbitcare.constants import SYNC_INTERVAL_MS
from rabbitcare.models import GameState

logger = logging.getLogger(__name__)

PUSH = 'push'
PULL = 'pull'
DELETE = 'delete'


class SyncCoordinator:
    def __init__(self, engine, remote, player_id, interval_ms=SYNC_INTERVAL_MS, executor=None, clock=None,
                 store=None):
        self.engine = engine
        self.store = store if store is not None else engine.store
        self.remote = remote
        self.player_id = player_id
        self.interval_ms = interval_ms
        self.clock = clock or engine.clock
        self._owns_executor = executor is None
        self.executor = executor or ThreadPoolExecutor(max_workers=1, thread_name_prefix="rabbitcare-sync")
        self.results = queue.SimpleQueue()
        self.in_flight = False
        self.pull_in_flight = False
        self.last_sync_time = self._load_last_sync()
        self.online = None  # unknown until the first request finishes
        self.closed = False
        engine.attach_sync(self)

    # ===== Sync stamp =====

    @property
    def sync_key(self):
        return f"{self.engine.config.namespace}:last-sync:{self.player_id}"

    def _load_last_sync(self) -> int:
        """Time of this device's last successful push for the player, or 0 if it never pushed."""
        if self.store is None:
            return 0
        raw = self.store.get(self.sync_key)
        if raw is None:
            return 0
        try:
            return max(0, int(raw))
        except ValueError:
            logger.warning("Ignoring corrupt sync stamp %r under '%s'", raw, self.sync_key)
            return 0

    def _save_last_sync(self):
        if self.store is not None:
            self.store.set(self.sync_key, str(self.last_sync_time))

    # ===== Scheduling =====

    def _submit(self, kind, stamp, fn, *args):
        future = self.executor.submit(fn, *args)
        future.add_done_callback(lambda f: self.results.put((kind, stamp, f)))
        return future

    def maybe_push(self) -> bool:
        """Timer entry point: push unless one is running or we synced recently."""
        if self.closed or self.in_flight:
            return False
        now = self.clock()
        # Eligible once a full interval has passed: exactly `interval_ms` since the last sync counts
        if now - self.last_sync_time < self.interval_ms:
            return False
        return self._push(now)

    def push_now(self) -> bool:
        """Manual save: skips the interval check but still never overlaps a running push."""
        if self.closed or self.in_flight:
            return False
        return self._push(self.clock())

    def _push(self, now) -> bool:
        # Snapshot now; whatever changes while the request is out goes with the next push
        record = self.engine.state.to_record(self.player_id, now)
        self.in_flight = True
        logger.debug("Pushing state for %s", self.player_id)
        self._submit(PUSH, now, self.remote.save, self.player_id, record)
        return True

    def pull(self) -> bool:
        if self.closed or self.pull_in_flight:
            return False
        self.pull_in_flight = True
        self._submit(PULL, self.clock(), self.remote.load, self.player_id)
        return True

    def delete_remote(self) -> bool:
        if self.closed:
            return False
        self._submit(DELETE, self.clock(), self.remote.delete, self.player_id)
        return True

    # ===== Results (host thread) =====

    def drain(self) -> int:
        handled = 0
        while True:
            try:
                kind, stamp, future = self.results.get_nowait()
            except queue.Empty:
                return handled
            handled += 1
            try:
                result = future.result()
            except Exception as e:
                # RemoteStore never raises; this is a bug or a cancelled request
                logger.warning("Sync %s request failed: %s", kind, e)
                result = None
            if kind == PUSH:
                self._finish_push(stamp, bool(result))
            elif kind == PULL:
                self.pull_in_flight = False
                self.reconcile(result)
            elif kind == DELETE:
                self.online = bool(result)
                logger.info("Remote save for %s %s", self.player_id, "deleted" if result else "not deleted")

    def _finish_push(self, stamp, ok):
        self.in_flight = False
        self.online = ok
        if ok:
            self.last_sync_time = stamp
            self._save_last_sync()
            logger.debug("State synced at %d", stamp)
        else:
            logger.info("Sync failed; will retry on the next interval")

    def reconcile(self, record) -> bool:
        """
        Adopt `record` wholesale if it was saved after the last local interaction.
        Until this device has pushed once, an empty remote record never wins.
        """
        if not isinstance(record, dict):
            self.online = False
            return False
        self.online = True
        saved_at = record.get('lastSaveTime')
        if isinstance(saved_at, bool) or not isinstance(saved_at, (int, float)):
            logger.debug("Remote snapshot has no save time; keeping local state")
            return False
        if saved_at <= self.engine.state.last_interaction:
            logger.debug("Local state is newer than remote (%d <= %d)", saved_at, self.engine.state.last_interaction)
            return False
        if not self.last_sync_time and not _has_progress(record):
            # A player the backend has never seen comes back as a freshly stamped default row
            logger.info("Remote snapshot for %s carries no progress and this device never synced; keeping local state",
                        self.player_id)
            return False
        logger.info("Remote snapshot is newer; replacing local state")
        remote_state = GameState.from_dict(record, self.engine.catalog, self.clock())
        self.engine.replace_state(remote_state)
        return True

    def close(self):
        if self.closed:
            return
        self.closed = True
        if self._owns_executor:
            # Don't wait on a slow request during teardown
            self.executor.shutdown(wait=False, cancel_futures=True)


def _has_progress(record) -> bool:
    earned = record.get('totalHeartsEarned')
    return isinstance(earned, (int, float)) and not isinstance(earned, bool) and earned > 0
