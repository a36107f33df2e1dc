"""Size-based speed mode selection.

When a request asks for automatic mode, the input size picks the speed
mode. Selection is two-pass:

1. Tier table, top-down, first match wins (>=700 MB ultra-fast,
   >=200 MB super-fast, >=50 MB fast, otherwise balanced).
2. Refinement for 200-2047 MB: <=250 MB becomes balanced, anything larger
   becomes ultra-fast.

The refinement makes 200-250 MB inputs gentler than 50-199 MB ones. That
non-monotonic band is existing client-visible behavior and is kept as is.
"""

from __future__ import annotations

import logging

from videocompress.policy.types import ModeDecider, SpeedMode

logger = logging.getLogger(__name__)

# (minimum size in MB, mode), evaluated top-down
SIZE_TIERS: tuple[tuple[int, SpeedMode], ...] = (
    (700, SpeedMode.ULTRA_FAST),
    (200, SpeedMode.SUPER_FAST),
    (50, SpeedMode.FAST),
    (10, SpeedMode.BALANCED),
)

REFINEMENT_BAND_MB = (200, 2048)  # [low, high)
REFINEMENT_BALANCED_MAX_MB = 250


def choose_speed_by_size(size_mb: int) -> SpeedMode:
    """First pass: map a size in whole MB to a speed mode via the tier table."""
    for min_size, mode in SIZE_TIERS:
        if size_mb >= min_size:
            return mode
    return SpeedMode.BALANCED


def select_mode(size_mb: int) -> SpeedMode:
    """Pick the speed mode for an automatic request.

    Args:
        size_mb: Input size in whole megabytes (truncated).

    Returns:
        The selected speed mode, never AUTO.
    """
    mode = choose_speed_by_size(size_mb)
    low, high = REFINEMENT_BAND_MB
    if low <= size_mb < high:
        if size_mb <= REFINEMENT_BALANCED_MAX_MB:
            mode = SpeedMode.BALANCED
        else:
            mode = SpeedMode.ULTRA_FAST
    return mode


def resolve_mode(requested: SpeedMode, size_mb: int) -> tuple[SpeedMode, ModeDecider]:
    """Resolve the requested mode into a concrete one.

    Returns:
        Tuple of (mode, decider). The decider is AUTOMATIC only when the
        size-based selector made the choice.
    """
    if requested is not SpeedMode.AUTO:
        return requested, ModeDecider.MANUAL

    mode = select_mode(size_mb)
    logger.debug(
        "Automatic mode selection picked %s for %d MB input",
        mode.value,
        size_mb,
        extra={"size_mb": size_mb, "mode": mode.value},
    )
    return mode, ModeDecider.AUTOMATIC
