from typing import Optional

from rabbitcare.constants import SHOP_ITEMS, BACKGROUNDS, BACKGROUND_UNLOCK_COST, SLOTS


class Catalog:
    """Read-only lookup over the wardrobe items and room backgrounds."""

    def __init__(self, items=None, backgrounds=None, background_cost=BACKGROUND_UNLOCK_COST):
        items = SHOP_ITEMS if items is None else items
        backgrounds = BACKGROUNDS if backgrounds is None else backgrounds
        self.background_cost = background_cost
        self._items = {}
        for slot, entries in items.items():
            if slot not in SLOTS:
                raise ValueError(f"Unknown equipment slot '{slot}' in catalog")
            for entry in entries:
                self._items[entry['id']] = dict(entry, slot=slot)
        self._backgrounds = {bg['id']: dict(bg) for bg in backgrounds}

    def get_item(self, item_id) -> Optional[dict]:
        return self._items.get(item_id)

    def has_item(self, item_id) -> bool:
        return item_id in self._items

    def item_cost(self, item_id) -> Optional[int]:
        item = self._items.get(item_id)
        return item['price'] if item else None

    def item_slot(self, item_id) -> Optional[str]:
        item = self._items.get(item_id)
        return item['slot'] if item else None

    def items_for_slot(self, slot):
        return [item for item in self._items.values() if item['slot'] == slot]

    def get_background(self, background_id) -> Optional[dict]:
        return self._backgrounds.get(background_id)

    def has_background(self, background_id) -> bool:
        return background_id in self._backgrounds

    def background_cost_for(self, background_id) -> Optional[int]:
        """Backgrounds share one flat price; unknown ids have no price."""
        return self.background_cost if background_id in self._backgrounds else None

    @property
    def item_ids(self):
        return list(self._items)

    @property
    def background_ids(self):
        return list(self._backgrounds)


DEFAULT_CATALOG = Catalog()
