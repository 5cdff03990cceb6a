"""
Scorer interface shared by every ScoreResult-producing strategy.
"""

from collections.abc import Sequence
from typing import Protocol

from focuslens.features.fragmentation.domain.models import ActivityItem, ScoreResult


class FragmentationScorer(Protocol):
    """Anything that turns one user's activities for one window into a ScoreResult."""

    def score(
        self, activities: Sequence[ActivityItem], window_days: int, user_id: str = ""
    ) -> ScoreResult: ...
