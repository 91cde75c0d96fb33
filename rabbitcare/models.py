import copy
import logging
from enum import Enum
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Set

from rabbitcare.constants import (
    MIN_LEVEL, MAX_LEVEL, DEFAULT_BACKGROUND, SCHEMA_VERSION,
    STICKER_MIN_SCALE, STICKER_MAX_SCALE,
)
from rabbitcare.progression import level_for

logger = logging.getLogger(__name__)


class Slot(Enum):
    """Equipment attachment points; each holds at most one item."""
    HEAD = 'head'
    BODY = 'body'
    HAND = 'hand'

    @classmethod
    def _missing_(cls, value):
        # Accept 'HEAD', ' Head ' and friends from hand-edited saves
        if isinstance(value, str):
            normalized = value.strip().lower()
            for member in cls:
                if member.value == normalized:
                    return member
        return super()._missing_(value)


class DecayMode(Enum):
    """
    Gating policy for the decay tick.
    Accepts both 'idle-only' and 'idle_only' spellings from config.
    """
    ALWAYS = 'always'
    IDLE_ONLY = 'idle-only'

    @classmethod
    def _missing_(cls, value):
        if isinstance(value, str):
            normalized = value.strip().replace('_', '-').lower()
            for member in cls:
                if member.value == normalized:
                    return member
        return super()._missing_(value)


class Mood(Enum):
    SAD = 'sad'
    NORMAL = 'normal'
    HAPPY = 'happy'


def clamp_level(value):
    return max(MIN_LEVEL, min(MAX_LEVEL, int(value)))


def _as_int(value, default):
    # bool is an int subclass but never a valid counter
    if isinstance(value, bool):
        return default
    try:
        return int(value)
    except (TypeError, ValueError):
        return default


def _as_float(value, default):
    if isinstance(value, bool):
        return default
    try:
        result = float(value)
    except (TypeError, ValueError):
        return default
    if result != result:  # NaN
        return default
    return result


@dataclass
class Poop:
    id: int
    x: float
    y: float

    def to_dict(self):
        return {'id': self.id, 'x': self.x, 'y': self.y}

    @classmethod
    def from_dict(cls, data) -> Optional['Poop']:
        if not isinstance(data, dict):
            return None
        poop_id = _as_int(data.get('id'), None)
        if poop_id is None:
            return None
        return cls(poop_id, _as_float(data.get('x'), 50.0), _as_float(data.get('y'), 10.0))


@dataclass
class PlacedItem:
    """A sticker placed in the decoration editor (percentage coordinates)."""
    ui_id: str
    item_id: str
    x: float = 50.0
    y: float = 50.0
    scale: float = 1.0
    rotation: float = 0.0
    z_index: int = 1

    def to_dict(self):
        return {
            'uiId': self.ui_id,
            'itemId': self.item_id,
            'x': self.x,
            'y': self.y,
            'scale': self.scale,
            'rotation': self.rotation,
            'zIndex': self.z_index,
        }

    @classmethod
    def from_dict(cls, data) -> Optional['PlacedItem']:
        if isinstance(data, PlacedItem):
            data = data.to_dict()
        if not isinstance(data, dict):
            return None
        ui_id = data.get('uiId')
        item_id = data.get('itemId')
        if not isinstance(ui_id, str) or not ui_id or not isinstance(item_id, str):
            return None
        scale = _as_float(data.get('scale'), 1.0)
        return cls(
            ui_id=ui_id,
            item_id=item_id,
            x=_as_float(data.get('x'), 50.0),
            y=_as_float(data.get('y'), 50.0),
            scale=max(STICKER_MIN_SCALE, min(STICKER_MAX_SCALE, scale)),
            rotation=_as_float(data.get('rotation'), 0.0),
            z_index=_as_int(data.get('zIndex'), 1),
        )


@dataclass
class GameState:
    """Everything the player has: care stats, progression, wardrobe and room."""
    hunger_level: int = MAX_LEVEL
    clean_level: int = MAX_LEVEL
    happy_level: int = MAX_LEVEL
    hearts: int = 0
    level: int = 1
    total_hearts_earned: int = 0
    equipment: Dict[str, str] = field(default_factory=dict)
    placed_items: List[PlacedItem] = field(default_factory=list)
    poops: List[Poop] = field(default_factory=list)
    current_background: str = DEFAULT_BACKGROUND
    unlocked_items: Set[str] = field(default_factory=set)
    unlocked_backgrounds: Set[str] = field(default_factory=lambda: {DEFAULT_BACKGROUND})
    last_interaction: int = 0
    last_gift_claimed: int = 0

    @classmethod
    def default(cls, now: int) -> 'GameState':
        return cls(last_interaction=now)

    def copy(self) -> 'GameState':
        return copy.deepcopy(self)

    def mood(self) -> Mood:
        if self.hunger_level == MIN_LEVEL or self.clean_level == MIN_LEVEL:
            return Mood.SAD
        if self.happy_level == MAX_LEVEL:
            return Mood.HAPPY
        return Mood.NORMAL

    def to_dict(self) -> dict:
        """The persisted JSON shape (camelCase keys)."""
        return {
            'schemaVersion': SCHEMA_VERSION,
            'hungerLevel': self.hunger_level,
            'cleanLevel': self.clean_level,
            'happyLevel': self.happy_level,
            'hearts': self.hearts,
            'level': self.level,
            'totalHeartsEarned': self.total_hearts_earned,
            'equipment': dict(self.equipment),
            'placedItems': [item.to_dict() for item in self.placed_items],
            'poops': [poop.to_dict() for poop in self.poops],
            'currentBackground': self.current_background,
            'unlockedItems': sorted(self.unlocked_items),
            'unlockedBackgrounds': sorted(self.unlocked_backgrounds),
            'lastInteraction': self.last_interaction,
            'lastGiftClaimed': self.last_gift_claimed,
        }

    def to_record(self, player_id: str, saved_at: int) -> dict:
        """Remote save record: the persisted shape plus id and save timestamp."""
        record = self.to_dict()
        del record['schemaVersion']
        record['id'] = player_id
        record['lastSaveTime'] = saved_at
        return record

    @classmethod
    def from_dict(cls, data, catalog, now: int) -> 'GameState':
        """
        Build a state from an untrusted blob, field by field.
        Missing or invalid fields fall back to defaults, so a partially valid
        save never pushes out-of-range values past the invariants.
        """
        state = cls.default(now)
        if not isinstance(data, dict):
            if data is not None:
                logger.warning("Ignoring non-object save data of type %s", type(data).__name__)
            return state

        state.hunger_level = clamp_level(_as_int(data.get('hungerLevel'), state.hunger_level))
        state.clean_level = clamp_level(_as_int(data.get('cleanLevel'), state.clean_level))
        state.happy_level = clamp_level(_as_int(data.get('happyLevel'), state.happy_level))
        state.hearts = max(0, _as_int(data.get('hearts'), 0))
        state.total_hearts_earned = max(0, _as_int(data.get('totalHeartsEarned'), 0))
        # Level is derived from lifetime hearts; a stored level is never trusted
        state.level = level_for(state.total_hearts_earned)
        state.last_interaction = _as_int(data.get('lastInteraction'), now)
        state.last_gift_claimed = max(0, _as_int(data.get('lastGiftClaimed'), 0))

        unlocked_items = data.get('unlockedItems')
        if isinstance(unlocked_items, (list, tuple, set)):
            state.unlocked_items = {i for i in unlocked_items if isinstance(i, str) and catalog.has_item(i)}

        unlocked_bgs = data.get('unlockedBackgrounds')
        if isinstance(unlocked_bgs, (list, tuple, set)):
            state.unlocked_backgrounds |= {b for b in unlocked_bgs if isinstance(b, str) and catalog.has_background(b)}

        background = data.get('currentBackground')
        if isinstance(background, str) and background in state.unlocked_backgrounds:
            state.current_background = background
        elif background is not None:
            logger.warning("Background '%s' is not unlocked; falling back to '%s'", background, DEFAULT_BACKGROUND)

        equipment = data.get('equipment')
        if isinstance(equipment, dict):
            for slot_name, item_id in equipment.items():
                try:
                    slot = Slot(slot_name)
                except ValueError:
                    continue
                if item_id in state.unlocked_items and catalog.item_slot(item_id) == slot.value:
                    state.equipment[slot.value] = item_id

        placed = data.get('placedItems')
        if isinstance(placed, list):
            state.placed_items = sanitize_placements(placed, catalog)

        poops = data.get('poops')
        if isinstance(poops, list):
            seen = set()
            for raw in poops:
                poop = Poop.from_dict(raw)
                if poop is not None and poop.id not in seen:
                    seen.add(poop.id)
                    state.poops.append(poop)
        return state


def sanitize_placements(items, catalog) -> List[PlacedItem]:
    """Drop placements that are malformed, reference unknown items or reuse a ui id."""
    result = []
    seen = set()
    for raw in items:
        item = PlacedItem.from_dict(raw)
        if item is None or item.ui_id in seen:
            continue
        if not catalog.has_item(item.item_id):
            logger.warning("Dropping sticker '%s': unknown item '%s'", item.ui_id, item.item_id)
            continue
        seen.add(item.ui_id)
        result.append(item)
    return result
