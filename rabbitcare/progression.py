"""Hearts -> level math. Levels key off lifetime hearts, never the spendable balance."""

from rabbitcare.constants import XP_PER_LEVEL


def required_xp(level: int) -> int:
    """Hearts needed to go from `level` to `level + 1`."""
    return level * XP_PER_LEVEL


def cumulative_required(level: int) -> int:
    """Lifetime hearts needed to leave `level`: required_xp(1) + ... + required_xp(level)."""
    return XP_PER_LEVEL * level * (level + 1) // 2


def level_for(total_hearts_earned: int, level: int = 1) -> int:
    """Advance `level` as far as `total_hearts_earned` allows. Never goes down."""
    level = max(1, level)
    while total_hearts_earned >= cumulative_required(level):
        level += 1
    return level


def progress(total_hearts_earned: int, level: int):
    """(hearts into the current level, hearts the level needs) for a progress bar."""
    floor = cumulative_required(level - 1) if level > 1 else 0
    return max(0, total_hearts_earned - floor), required_xp(level)
