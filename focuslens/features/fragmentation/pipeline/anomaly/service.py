"""
Anomaly detection over a fragmentation score series.

Flags the first score that exceeds mean + threshold * population stddev.
"""

from __future__ import annotations

import math
import statistics
from collections.abc import Sequence
from decimal import Decimal

from focuslens.config import settings
from focuslens.features.fragmentation.domain.errors import InvalidInputError
from focuslens.features.fragmentation.domain.models import AnomalyResult, HistoricalScore
from focuslens.infrastructure.observability.logging import get_logger

logger = get_logger(__name__)

NO_ANOMALY_MESSAGE = "No anomaly detected."


def _plain(value: float) -> str:
    """Render a number in positional notation, never exponential."""
    text = format(Decimal(repr(float(value))).normalize(), "f")
    return text if "." in text else f"{text}.0"


class AnomalyDetector:
    def detect(self, series: Sequence[float], threshold: float | None = None) -> AnomalyResult:
        """
        Find the first spike in a score series.

        Args:
            series: Scores in chronological order
            threshold: Number of standard deviations above the mean that counts as a spike

        Returns:
            AnomalyResult pointing at the first offending index, if any

        Raises:
            InvalidInputError: series is empty or holds non-finite values
        """
        if threshold is None:
            threshold = settings.ANOMALY_DEFAULT_THRESHOLD
        if not math.isfinite(threshold):
            raise InvalidInputError("Anomaly threshold must be finite", field="threshold")
        if len(series) == 0:
            raise InvalidInputError(
                "Cannot detect anomalies in an empty score series", field="series"
            )
        values = [float(value) for value in series]
        if not all(math.isfinite(value) for value in values):
            raise InvalidInputError("Score series contains non-finite values", field="series")

        mean = statistics.fmean(values)
        stddev = statistics.pstdev(values)
        limit = mean + threshold * stddev

        for index, value in enumerate(values):
            if value > limit:
                logger.info(
                    "Fragmentation anomaly detected",
                    anomaly_index=index,
                    score=value,
                    mean=round(mean, 3),
                    stddev=round(stddev, 3),
                    threshold=threshold,
                )
                return AnomalyResult(
                    is_anomaly=True,
                    anomaly_index=index,
                    message=(
                        f"Anomaly detected at index {index} with a score of {_plain(value)}. "
                        f"This exceeds the threshold of {_plain(threshold)} standard deviations "
                        "from the mean."
                    ),
                )

        return AnomalyResult(is_anomaly=False, message=NO_ANOMALY_MESSAGE)

    def detect_in_history(
        self, history: Sequence[HistoricalScore], threshold: float | None = None
    ) -> AnomalyResult:
        """Run detection over the scores of a day-by-day history."""
        return self.detect([entry.score for entry in history], threshold)


anomaly_detector = AnomalyDetector()
