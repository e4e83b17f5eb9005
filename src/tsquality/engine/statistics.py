"""
Robust statistics used by the quality engine.

The median here is positional: it reads the central element(s) of the
sequence as given and never sorts. Callers that want a rank statistic sort
before calling. NaN values propagate through both functions; a NaN
deviation fails every ``>`` comparison, which is how NaNs stay out of
outlier counts. Infinite inputs are tolerated without floating point warnings.
"""

from typing import Sequence, Union

import numpy as np


MAD_SCALE = 1.4826

ArrayLike = Union[Sequence[float], np.ndarray]


def median(values: ArrayLike) -> float:
    """
    Positional median of a sequence.

    Args:
        values: Sequence of floats, in the order the caller wants them read

    Returns:
        Middle element for odd length, mean of the two middle elements for
        even length, 0.0 for an empty sequence

    Example:
        >>> median([3.0, 1.0, 2.0])
        1.0
        >>> median([1.0, 4.0, 2.0, 8.0])
        3.0
    """
    arr = np.asarray(values, dtype=np.float64)
    n = len(arr)

    if n == 0:
        return 0.0

    if n % 2 == 0:
        with np.errstate(invalid="ignore"):
            return float((arr[n // 2 - 1] + arr[n // 2]) / 2.0)
    return float(arr[n // 2])


def mad(values: ArrayLike, scale: float = MAD_SCALE) -> float:
    """
    Median absolute deviation, scaled to a normal-equivalent sigma.

    Deviations are kept in input order and reduced with the positional
    ``median``.

    Args:
        values: Sequence of floats
        scale: Consistency constant (default: 1.4826)

    Returns:
        ``scale * median(|v - median(values)|)``, or 0.0 for empty input
    """
    arr = np.asarray(values, dtype=np.float64)

    if len(arr) == 0:
        return 0.0

    mid = median(arr)
    with np.errstate(invalid="ignore"):
        deviations = np.abs(arr - mid)

    return float(scale * median(deviations))


def find_outliers(values: ArrayLike, k: float = 3.0, scale: float = MAD_SCALE) -> int:
    """
    Count values lying more than ``k`` robust sigmas from the median.

    A sigma of zero flags every value that differs from the median.

    Args:
        values: Sequence of floats
        k: Outlier multiplier (default: 3.0)
        scale: MAD consistency constant

    Returns:
        Number of outliers

    Example:
        >>> find_outliers([1.0, 1.0, 1.0, 1.0, 100.0], k=3)
        1
    """
    arr = np.asarray(values, dtype=np.float64)

    if len(arr) == 0:
        return 0

    mid = median(arr)
    sigma = mad(arr, scale=scale)

    with np.errstate(invalid="ignore"):
        flagged = np.abs(arr - mid) > k * sigma

    return int(np.count_nonzero(flagged))
