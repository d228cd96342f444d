"""Experience (XP) and level arithmetic."""

from learnhub.experience.calculator import (
    XP_PER_LEVEL,
    XPProgress,
    apply_xp,
    level_from_xp,
    level_progress,
    xp_progress,
    xp_to_next_level,
)

__all__ = [
    "XP_PER_LEVEL",
    "XPProgress",
    "apply_xp",
    "level_from_xp",
    "level_progress",
    "xp_progress",
    "xp_to_next_level",
]
