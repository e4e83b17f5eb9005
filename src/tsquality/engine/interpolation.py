"""
Missing value repair by piecewise-linear interpolation over time.

Known values act as anchors. The first anchor pair also extrapolates the
leading missing values, consecutive anchors fill the gaps between them, and
the last anchor pair extrapolates the trailing missing values. A channel
with fewer than two known values cannot be interpolated and is left
untouched.
"""

import numpy as np

from tsquality.logger import get_logger


logger = get_logger(__name__)


def _fill_along_line(
    time: np.ndarray,
    values: np.ndarray,
    positions: np.ndarray,
    left: int,
    right: int,
) -> None:
    """Write the line through anchors ``left`` and ``right`` into ``positions``."""
    if len(positions) == 0:
        return

    dt = time[right] - time[left]
    if dt == 0.0:
        # Anchors share a timestamp; the slope is undefined
        values[positions] = values[left]
        return

    slope = (values[right] - values[left]) / dt
    values[positions] = values[left] + slope * (time[positions] - time[left])


def interpolate_missing(time: np.ndarray, values: np.ndarray) -> int:
    """
    Fill NaN entries of ``values`` in place.

    Args:
        time: Ascending timestamps
        values: Value channel aligned with ``time``; modified in place

    Returns:
        Number of values filled (0 when fewer than two values are known)

    Example:
        >>> t = np.array([0.0, 1.0, 2.0, 3.0])
        >>> v = np.array([np.nan, 1.0, np.nan, 3.0])
        >>> interpolate_missing(t, v)
        2
        >>> v.tolist()
        [0.0, 1.0, 2.0, 3.0]
    """
    missing = np.isnan(values)
    known = np.flatnonzero(~missing)

    if len(known) < 2:
        if missing.any():
            logger.debug(
                f"Cannot interpolate: only {len(known)} known value(s) in "
                f"{len(values)} samples, leaving channel unchanged"
            )
        return 0

    filled = int(np.count_nonzero(missing))
    if filled == 0:
        return 0

    positions = np.arange(len(values))

    # Leading region, extrapolated along the first anchor pair
    first, second = known[0], known[1]
    _fill_along_line(time, values, positions[:first], first, second)

    # Interior gaps between consecutive anchors
    for left, right in zip(known[:-1], known[1:]):
        if right - left > 1:
            _fill_along_line(time, values, positions[left + 1:right], left, right)

    # Trailing region, extrapolated along the last anchor pair
    last_left, last_right = known[-2], known[-1]
    _fill_along_line(time, values, positions[last_right + 1:], last_left, last_right)

    logger.debug(f"Interpolated {filled} missing value(s) over {len(values)} samples")
    return filled
