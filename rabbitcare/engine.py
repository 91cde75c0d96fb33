"""
The game-state engine: the only writer of GameState.

Every action copies the current snapshot, changes the copy and commits it in
one step, so the decay timer and player actions can interleave on the host
loop without ever seeing half-applied state.
"""
import logging
import random

from rabbitcare.catalog import DEFAULT_CATALOG
from rabbitcare.config import EngineConfig
from rabbitcare.constants import (
    MAX_LEVEL, MIN_LEVEL, FEED_REWARD, CLEAN_REWARD, SCOOP_REWARD, PET_REWARD,
    DAILY_GIFT_MIN, DAILY_GIFT_MAX, DAILY_GIFT_COOLDOWN_MS, IDLE_DECAY_MS,
    MAX_POOPS, POOP_SPAWN_CHANCE, POOP_X_RANGE, POOP_Y_RANGE,
)
from rabbitcare.models import GameState, Poop, Slot, DecayMode, clamp_level, sanitize_placements
from rabbitcare.progression import level_for
from rabbitcare.timers import Scheduler, now_ms

logger = logging.getLogger(__name__)


class GameEngine:
    """Owns the GameState, its actions, the decay timer and local write-through."""

    def __init__(self, store, config=None, catalog=None, clock=now_ms, rng=None, scheduler=None):
        self.config = config or EngineConfig()
        self.decay_mode = DecayMode(self.config.decay_mode)
        self.store = store
        self.catalog = catalog or DEFAULT_CATALOG
        self.clock = clock
        self.rng = rng or random.Random()
        self.scheduler = scheduler or Scheduler(clock)
        self.sync = None
        self.listeners = []
        self._timers = []
        self.closed = False
        self.state = self._load()
        self._persist()

    # ===== Lifecycle =====

    def _load(self) -> GameState:
        now = self.clock()
        blob = self.store.load_state(self.config.namespace) if self.store else None
        if blob is None:
            logger.info("No saved game under '%s'; starting fresh", self.config.namespace)
            return GameState.default(now)
        return GameState.from_dict(blob, self.catalog, now)

    def attach_sync(self, coordinator):
        self.sync = coordinator

    def start(self):
        """Register the periodic timers. Call once, then drive with step()."""
        if self.closed:
            raise RuntimeError("Engine has been closed")
        if self._timers:
            return
        self._timers.append(self.scheduler.every(self.config.decay_interval_ms, self.tick, "decay"))
        if self.sync is not None:
            self._timers.append(self.scheduler.every(self.sync.interval_ms, self.sync.maybe_push, "sync"))

    def step(self, now=None):
        """One cooperative slice: fire due timers, then apply finished sync results."""
        if self.closed:
            return
        self.scheduler.run_pending(now)
        if self.sync is not None:
            self.sync.drain()

    def close(self):
        for timer in self._timers:
            timer.cancel()
        self._timers = []
        if self.sync is not None:
            self.sync.close()
        self.closed = True

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()
        return False

    # ===== Listeners / persistence =====

    def subscribe(self, callback):
        self.listeners.append(callback)
        return callback

    def unsubscribe(self, callback):
        if callback in self.listeners:
            self.listeners.remove(callback)

    def _persist(self):
        if self.store is None:
            return
        if not self.store.save_state(self.config.namespace, self.state.to_dict()):
            logger.debug("Local save skipped; continuing in memory")

    def _notify(self):
        for callback in list(self.listeners):
            try:
                callback(self.state)
            except Exception:
                logger.exception("State listener %r failed", callback)

    def _commit(self, new_state, touch=True) -> bool:
        """Swap in `new_state` if it differs. Player actions also stamp last_interaction."""
        if new_state == self.state:
            return False
        if touch:
            new_state.last_interaction = self.clock()
        self.state = new_state
        self._persist()
        self._notify()
        return True

    def replace_state(self, new_state):
        """Wholesale replace, used when a newer remote snapshot wins."""
        self.state = new_state.copy()
        self._persist()
        self._notify()

    def reset(self):
        logger.info("Resetting game to defaults")
        self.replace_state(GameState.default(self.clock()))

    # ===== Helpers =====

    @staticmethod
    def _award(s, amount):
        s.hearts = max(0, s.hearts + amount)
        if amount > 0:
            s.total_hearts_earned += amount
            s.level = level_for(s.total_hearts_earned, s.level)

    def _spawn_poop(self, s, now):
        poop_id = max([now] + [p.id + 1 for p in s.poops])
        x = round(self.rng.uniform(*POOP_X_RANGE), 2)
        y = round(self.rng.uniform(*POOP_Y_RANGE), 2)
        return Poop(poop_id, x, y)

    # ===== Decay =====

    def tick(self) -> bool:
        """Background decay. Returns True if anything changed."""
        now = self.clock()
        prev = self.state
        idle_only = self.decay_mode == DecayMode.IDLE_ONLY
        if idle_only and now - prev.last_interaction <= IDLE_DECAY_MS:
            return False

        s = prev.copy()
        s.hunger_level = clamp_level(s.hunger_level - 1)
        s.clean_level = clamp_level(s.clean_level - 1)
        # Happiness suffers for a stat that was already empty before this tick
        if prev.hunger_level == MIN_LEVEL or prev.clean_level == MIN_LEVEL:
            s.happy_level = clamp_level(s.happy_level - 1)
        if s.clean_level < MAX_LEVEL and len(s.poops) < MAX_POOPS and self.rng.random() < POOP_SPAWN_CHANCE:
            s.poops.append(self._spawn_poop(s, now))
        if idle_only:
            # Restart the idle window so an absent player loses one step per window
            s.last_interaction = now
        return self._commit(s, touch=False)

    # ===== Care actions =====

    def feed(self) -> bool:
        s = self.state.copy()
        s.hunger_level = MAX_LEVEL
        s.happy_level = clamp_level(s.happy_level + 1)
        self._award(s, FEED_REWARD)
        return self._commit(s)

    def clean(self) -> bool:
        s = self.state.copy()
        s.clean_level = MAX_LEVEL
        s.poops = []
        s.happy_level = clamp_level(s.happy_level + 1)
        self._award(s, CLEAN_REWARD)
        return self._commit(s)

    def scoop_poop(self, poop_id) -> bool:
        if not any(p.id == poop_id for p in self.state.poops):
            return False
        s = self.state.copy()
        s.poops = [p for p in s.poops if p.id != poop_id]
        self._award(s, SCOOP_REWARD)
        return self._commit(s)

    def pet(self) -> bool:
        s = self.state.copy()
        s.happy_level = MAX_LEVEL
        self._award(s, PET_REWARD)
        return self._commit(s)

    # ===== Currency =====

    def earn_hearts(self, amount) -> bool:
        """Add (or, with a negative amount, spend) hearts. The balance never drops below 0."""
        if isinstance(amount, bool) or not isinstance(amount, int):
            raise TypeError(f"Heart amount must be an int, got {amount!r}")
        s = self.state.copy()
        self._award(s, amount)
        return self._commit(s)

    def can_claim_daily_gift(self) -> bool:
        return self.clock() - self.state.last_gift_claimed > DAILY_GIFT_COOLDOWN_MS

    def claim_daily_gift(self) -> int:
        """Grant the once-a-day bonus. Returns the amount, or 0 if still cooling down."""
        if not self.can_claim_daily_gift():
            return 0
        amount = self.rng.randint(DAILY_GIFT_MIN, DAILY_GIFT_MAX)
        s = self.state.copy()
        s.last_gift_claimed = self.clock()
        self._award(s, amount)
        self._commit(s)
        logger.info("Daily gift claimed: %d hearts", amount)
        return amount

    # ===== Wardrobe =====

    def unlock_item(self, item_id) -> bool:
        cost = self.catalog.item_cost(item_id)
        if cost is None or item_id in self.state.unlocked_items or self.state.hearts < cost:
            return False
        s = self.state.copy()
        s.hearts -= cost
        s.unlocked_items.add(item_id)
        return self._commit(s)

    def unlock_background(self, background_id) -> bool:
        cost = self.catalog.background_cost_for(background_id)
        if cost is None or background_id in self.state.unlocked_backgrounds or self.state.hearts < cost:
            return False
        s = self.state.copy()
        s.hearts -= cost
        s.unlocked_backgrounds.add(background_id)
        return self._commit(s)

    def equip_item(self, item_id, slot) -> bool:
        """Put `item_id` in `slot`, or clear the slot with None. Locked or mismatched items are refused."""
        slot = Slot(slot)
        s = self.state.copy()
        if item_id is None:
            s.equipment.pop(slot.value, None)
            return self._commit(s)
        if item_id not in s.unlocked_items or self.catalog.item_slot(item_id) != slot.value:
            logger.debug("Refusing to equip '%s' in %s", item_id, slot.value)
            return False
        s.equipment[slot.value] = item_id
        return self._commit(s)

    def set_background(self, background_id) -> bool:
        if background_id not in self.state.unlocked_backgrounds:
            return False
        s = self.state.copy()
        s.current_background = background_id
        return self._commit(s)

    def save_outfit(self, items) -> bool:
        """Commit the decoration editor's stickers, replacing the previous set."""
        s = self.state.copy()
        s.placed_items = sanitize_placements(items, self.catalog)
        return self._commit(s)
