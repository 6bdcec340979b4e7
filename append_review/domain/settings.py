"""Ranking settings stored inside the document."""

from pydantic import Field

from append_review.domain.note import CamelModel


class SelectionWeights(CamelModel):
    """Relative weights of the pair selection priority components.

    Only their relative magnitude matters, they do not need to sum to 1.
    """

    recency: float = 0.5
    low_votes: float = 0.3
    random: float = 0.2


class RankingSettings(CamelModel):
    """Tunable parameters for rating updates and pair selection."""

    initial_rating: int = 1000
    k_factor: float = 32
    pair_rating_window: float = 200
    min_candidates: int = 5
    recency_cap_days: float = 14
    selection_weights: SelectionWeights = Field(default_factory=SelectionWeights)
