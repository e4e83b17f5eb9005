"""
Value-level anomaly detection on a series and its derivatives.
"""

from typing import Optional

import numpy as np

from tsquality.engine.derivatives import first_difference, velocity
from tsquality.engine.statistics import find_outliers
from tsquality.logger import get_logger
from tsquality.series import QualityCounters
from tsquality.thresholds import DetectionSettings


logger = get_logger(__name__)


class ValueAnomalyDetector:
    """
    Counts robust (median/MAD) outliers in four views of the value channel:
    the raw values, their first difference, the velocity, and the change in
    velocity.
    """

    def __init__(self, settings: Optional[DetectionSettings] = None):
        self.settings = settings or DetectionSettings()

    def _count(self, values: np.ndarray) -> int:
        return find_outliers(values, k=self.settings.outlier_k, scale=self.settings.mad_scale)

    def detect(
        self,
        time: np.ndarray,
        values: np.ndarray,
        counters: QualityCounters,
    ) -> QualityCounters:
        """
        Run the value pass and add its findings to ``counters``.

        Args:
            time: Ascending timestamps
            values: Value channel (already interpolated)
            counters: Counter struct updated in place

        Returns:
            The same ``counters`` instance
        """
        speeds = velocity(values, time)

        counters.value_count += self._count(values)
        counters.variation_count += self._count(first_difference(values))
        counters.speed_count += self._count(speeds)
        counters.speed_change_count += self._count(first_difference(speeds))

        logger.debug(
            f"Value pass over {len(values)} samples: value={counters.value_count}, "
            f"variation={counters.variation_count}, speed={counters.speed_count}, "
            f"speed_change={counters.speed_change_count}"
        )
        return counters
