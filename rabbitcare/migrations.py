"""
Save-schema migrations. Each step takes the blob of version N and returns
version N + 1; `migrate` walks the chain from whatever version was stored.
"""
import logging

from rabbitcare.constants import SCHEMA_VERSION, SHOP_ITEMS

logger = logging.getLogger(__name__)

# Outfits from the first wardrobe were all full-body costumes
_V1_DEFAULT_OUTFIT = 'default'


def _v1_to_v2(blob):
    """Single 'outfit' wardrobe -> per-slot equipment, plus progression fields."""
    blob = dict(blob)
    outfit = blob.pop('currentOutfit', _V1_DEFAULT_OUTFIT)
    outfits = blob.pop('unlockedOutfits', [])
    body_ids = {item['id'] for item in SHOP_ITEMS['body']}
    head_ids = {item['id'] for item in SHOP_ITEMS['head']}

    blob['unlockedItems'] = [o for o in outfits if o != _V1_DEFAULT_OUTFIT]
    equipment = {}
    if outfit in body_ids:
        equipment['body'] = outfit
    elif outfit in head_ids:
        equipment['head'] = outfit
    blob['equipment'] = equipment

    # v1 never spent on anything but unlocks, so the balance is the best guess
    hearts = blob.get('hearts', 0)
    blob.setdefault('totalHeartsEarned', hearts if isinstance(hearts, int) and hearts > 0 else 0)
    blob.setdefault('level', 1)
    blob.setdefault('lastGiftClaimed', 0)
    return blob


def _v2_to_v3(blob):
    """Decoration stickers and poops became part of the saved state."""
    blob = dict(blob)
    blob.setdefault('placedItems', [])
    blob.setdefault('poops', [])
    return blob


MIGRATIONS = {
    1: _v1_to_v2,
    2: _v2_to_v3,
}


def detect_version(blob) -> int:
    version = blob.get('schemaVersion')
    if isinstance(version, int) and not isinstance(version, bool) and version >= 1:
        return version
    # Saves written before the version field existed
    if 'currentOutfit' in blob or 'unlockedOutfits' in blob:
        return 1
    if 'placedItems' in blob or 'poops' in blob:
        return 3
    return 2


def migrate(blob):
    """Upgrade `blob` to SCHEMA_VERSION. Newer-than-known saves pass through untouched."""
    if not isinstance(blob, dict):
        return blob
    version = detect_version(blob)
    if version > SCHEMA_VERSION:
        logger.warning("Save schema v%d is newer than supported v%d; loading what we can", version, SCHEMA_VERSION)
        return blob
    while version < SCHEMA_VERSION:
        logger.info("Migrating save data v%d -> v%d", version, version + 1)
        blob = MIGRATIONS[version](blob)
        version += 1
    blob['schemaVersion'] = SCHEMA_VERSION
    return blob
