"""
Discrete derivatives of a series.
"""

import numpy as np

from tsquality.engine.statistics import ArrayLike


def first_difference(xs: ArrayLike) -> np.ndarray:
    """
    Differences between adjacent elements, ``xs[i+1] - xs[i]``.

    Returns an empty array for input with fewer than two elements.
    """
    arr = np.asarray(xs, dtype=np.float64)
    if len(arr) < 2:
        return np.empty(0, dtype=np.float64)
    with np.errstate(invalid="ignore"):
        return np.diff(arr)


def velocity(values: ArrayLike, times: ArrayLike) -> np.ndarray:
    """
    Rate of change of value over time between adjacent samples.

    A zero time step (duplicate timestamp) yields NaN at that position.
    Mismatched or empty channels yield an empty array, which callers treat
    as "not computable".

    Args:
        values: Value channel
        times: Time channel aligned with ``values``

    Returns:
        Array of length ``len(values) - 1``
    """
    v = np.asarray(values, dtype=np.float64)
    t = np.asarray(times, dtype=np.float64)

    if len(v) != len(t) or len(v) == 0:
        return np.empty(0, dtype=np.float64)

    dv = np.diff(v)
    dt = np.diff(t)

    speeds = np.full(dv.shape, np.nan)
    np.divide(dv, dt, out=speeds, where=dt != 0.0)
    return speeds
