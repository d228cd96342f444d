"""XP and level calculation — stateless, deterministic.

Levels are a flat 1000 XP apart. Level is always derived from XP and never
mutated on its own.
"""

from dataclasses import dataclass
from typing import Final

XP_PER_LEVEL: Final[int] = 1000


@dataclass(frozen=True)
class XPProgress:
    """Immutable snapshot of a user's position on the level curve."""

    xp: int
    level: int
    xp_into_level: int
    xp_to_next_level: int
    progress_percent: float


def _check_xp(xp: int) -> None:
    if xp < 0:
        raise ValueError(f"XP must be non-negative, got {xp}")


def level_from_xp(xp: int) -> int:
    """Current level given total XP: ``floor(xp / 1000) + 1``."""
    _check_xp(xp)
    return xp // XP_PER_LEVEL + 1


def xp_to_next_level(xp: int) -> int:
    """XP still needed to reach the next level (1..1000)."""
    _check_xp(xp)
    return XP_PER_LEVEL - (xp % XP_PER_LEVEL)


def level_progress(xp: int) -> float:
    """Percentage of the current level already earned (0.0 to 99.9)."""
    _check_xp(xp)
    return (xp % XP_PER_LEVEL) / (XP_PER_LEVEL / 100)


def xp_progress(xp: int) -> XPProgress:
    """Everything a dashboard needs to render the level bar."""
    return XPProgress(
        xp=xp,
        level=level_from_xp(xp),
        xp_into_level=xp % XP_PER_LEVEL,
        xp_to_next_level=xp_to_next_level(xp),
        progress_percent=level_progress(xp),
    )


def apply_xp(old_xp: int, amount: int) -> tuple[int, int]:
    """Add ``amount`` XP and return ``(new_xp, new_level)``.

    XP never decreases, so negative amounts are rejected.
    """
    if amount < 0:
        raise ValueError(f"XP award must be non-negative, got {amount}")
    new_xp = old_xp + amount
    return new_xp, level_from_xp(new_xp)
